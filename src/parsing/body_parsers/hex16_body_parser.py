"""
Hex16 body parser: тело - последовательность 16-битных значений.

Алгоритм:
1. Удаление пробельных символов (значения можно разделять пробелами/переносами)
2. Проверка длины: кратна 4
3. Проверка символов: только 0-9, a-f, A-F
4. Каждая группа из 4 hex-цифр -> одно значение 0..65535
"""

from typing import List, Tuple

from ..domain.exceptions import BodyParserError
from ..domain.interfaces import IBodyParser


HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
GROUP_SIZE = 4


class Hex16BodyParser(IBodyParser):
    """
    Декодирует группы по 4 hex-цифры в 16-битные значения.

    Пример: "00FF 0100" -> (255, 256)
    """

    @property
    def name(self) -> str:
        return "hex16"

    def parse(self, body: str) -> Tuple[int, ...]:
        # Позиции цифр в исходном теле (для span в ошибке)
        positions: List[int] = [i for i, char in enumerate(body) if not char.isspace()]
        digits = "".join(body[i] for i in positions)

        if len(digits) % GROUP_SIZE != 0:
            raise BodyParserError(
                f"Hex16 body has {len(digits)} hex characters, "
                f"expected a multiple of {GROUP_SIZE}",
                span=(0, len(body)),
                component="Hex16BodyParser",
            )

        for index, char in enumerate(digits):
            if char not in HEX_DIGITS:
                position = positions[index]
                raise BodyParserError(
                    f"Non-hexadecimal character {char!r} in hex16 body",
                    span=(position, position + 1),
                    component="Hex16BodyParser",
                )

        return tuple(
            int(digits[i:i + GROUP_SIZE], 16)
            for i in range(0, len(digits), GROUP_SIZE)
        )
