"""
Stage 1: Structure Parsing

ЦКП: Сырые записи потока -> структурные рамки.
"""

from .stage import RawRecord, StructuralMessage, StructureParser, format_record
from .stream_processor import StreamProcessor, StructuralOutcome

__all__ = [
    "RawRecord",
    "StructuralMessage",
    "StructureParser",
    "format_record",
    "StreamProcessor",
    "StructuralOutcome",
]
