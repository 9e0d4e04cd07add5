"""
Домен Parsing (D1): разбор потока записей.

Архитектура: 2-этапный разбор
- Stage 1: Structure (рамка записи: id, next_id, тег, тело) + StreamProcessor
- Stage 2: Semantics (декодирование тела: ascii, hex16)

Вход: текстовый поток записей
Выход: DecodedMessage (для домена Organizing)
"""

from src.parsing.body_parsers import AsciiBodyParser, Hex16BodyParser, BodyParserRegistry
from src.parsing.s1_structure import (
    RawRecord,
    StructuralMessage,
    StructureParser,
    StreamProcessor,
    format_record,
)
from src.parsing.s2_semantics import DecodedMessage, SemanticsParser

__all__ = [
    # Body parsers
    "AsciiBodyParser",
    "Hex16BodyParser",
    "BodyParserRegistry",
    # Stage 1
    "RawRecord",
    "StructuralMessage",
    "StructureParser",
    "StreamProcessor",
    "format_record",
    # Stage 2
    "DecodedMessage",
    "SemanticsParser",
]
