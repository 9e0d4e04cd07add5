"""
Stage 2: Semantics Parsing

ЦКП: Декодирование тела сообщений.
"""

from .stage import DecodedMessage, SemanticsParser

__all__ = [
    "DecodedMessage",
    "SemanticsParser",
]
