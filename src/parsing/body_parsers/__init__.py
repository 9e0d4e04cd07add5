"""
Body parsers: декодирование тела записи по тегу.
"""

from .ascii_body_parser import AsciiBodyParser
from .hex16_body_parser import Hex16BodyParser
from .registry import BodyParserRegistry

__all__ = [
    "AsciiBodyParser",
    "Hex16BodyParser",
    "BodyParserRegistry",
]
