"""
Domain слой домена Parsing.

Содержит интерфейсы (абстрактные классы) и исключения для Parsing домена.
"""

from .interfaces import (
    Payload,
    IBodyParser,
    IStructureParser,
    ISemanticsParser,
)

from .exceptions import (
    ParsingError,
    StructuralError,
    BadFormatError,
    FileEndError,
    BodyParserError,
)

__all__ = [
    # Интерфейсы
    "Payload",
    "IBodyParser",
    "IStructureParser",
    "ISemanticsParser",

    # Исключения
    "ParsingError",
    "StructuralError",
    "BadFormatError",
    "FileEndError",
    "BodyParserError",
]
