"""
Интерфейсы (абстрактные классы) для домена Parsing.

Домен Parsing отвечает за:
1. Структурный разбор записи (id, next_id, тег, тело)
2. Ленивое чтение потока записей
3. Декодирование тела по тегу (ascii, hex16, ...)
"""

from abc import ABC, abstractmethod
from typing import Tuple, Union


# Результат декодирования тела: текст (ascii) или 16-битные значения (hex16)
Payload = Union[str, Tuple[int, ...]]


class IBodyParser(ABC):
    """Интерфейс для декодеров тела сообщения (домен Parsing)."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Имя парсера (для логирования и YAML-конфига)."""
        pass

    @abstractmethod
    def parse(self, body: str) -> Payload:
        """
        Декодирует сырое тело записи.

        Args:
            body: Тело записи без внешних скобок

        Returns:
            Декодированное содержимое

        Raises:
            BodyParserError: Если тело некорректно (декодирование всё или ничего)
        """
        pass


class IStructureParser(ABC):
    """Интерфейс для структурного парсера одной записи (домен Parsing)."""

    @abstractmethod
    def parse(self, record):
        """
        Разбирает одну сырую запись.

        Args:
            record: RawRecord

        Returns:
            StructuralMessage или BadFormatError
        """
        pass


class ISemanticsParser(ABC):
    """Интерфейс для семантического парсера (домен Parsing)."""

    @abstractmethod
    def decode(self, message):
        """
        Декодирует тело структурного сообщения.

        Args:
            message: StructuralMessage

        Returns:
            DecodedMessage или BodyParserError
        """
        pass
