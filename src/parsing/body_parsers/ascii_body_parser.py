"""
ASCII body parser: тело записи - печатный текст.
"""

from loguru import logger

from ..domain.exceptions import BodyParserError
from ..domain.interfaces import IBodyParser


# Допустимые управляющие символы (многострочные тела)
ALLOWED_CONTROL_CHARS = frozenset("\t\n\r")
PRINTABLE_MIN = 0x20
PRINTABLE_MAX = 0x7E


class AsciiBodyParser(IBodyParser):
    """
    Тело как есть, если все символы - печатный ASCII (0x20-0x7E) или \\t \\n \\r.
    """

    @property
    def name(self) -> str:
        return "ascii"

    def parse(self, body: str) -> str:
        for i, char in enumerate(body):
            if char in ALLOWED_CONTROL_CHARS:
                continue
            if not PRINTABLE_MIN <= ord(char) <= PRINTABLE_MAX:
                logger.debug(f"[AsciiBodyParser] Непечатный символ {char!r} в позиции {i}")
                raise BodyParserError(
                    f"Non-printable character {char!r} (U+{ord(char):04X}) in ascii body",
                    span=(i, i + 1),
                    component="AsciiBodyParser",
                )
        return body
