"""
Stage 2: Semantics Parsing

ЦКП: Структурная рамка -> декодированное сообщение.

Input: StructuralMessage (тег + сырое тело)
Output: DecodedMessage или BodyParserError

Диспетчеризация - чистая функция тега через BodyParserRegistry.
Декодирование всё или ничего: при ошибке сообщение не создаётся.
"""

from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger

from ..body_parsers.registry import BodyParserRegistry
from ..domain.exceptions import BodyParserError
from ..domain.interfaces import ISemanticsParser, Payload
from ..s1_structure.stage import StructuralMessage


@dataclass(frozen=True)
class DecodedMessage:
    """
    Декодированное сообщение.

    payload - str для ascii, tuple[int, ...] для hex16.
    """
    id: int
    next_id: Optional[int]
    body_type: str
    payload: Payload
    offset: int = 0
    line_number: int = 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "next_id": self.next_id,
            "body_type": self.body_type,
            "payload": self.payload if isinstance(self.payload, str) else list(self.payload),
            "offset": self.offset,
            "line_number": self.line_number,
        }


class SemanticsParser(ISemanticsParser):
    """
    Stage 2: декодирование тела по тегу.

    Использует:
    - BodyParserRegistry: тег -> IBodyParser
    """

    def __init__(self, registry: Optional[BodyParserRegistry] = None):
        """
        Args:
            registry: Реестр body-парсеров (по умолчанию - из YAML)
        """
        self.registry = registry or BodyParserRegistry.default()

    def decode_body(self, body_type: str, body: str) -> Payload:
        """
        Декодирует тело.

        Raises:
            BodyParserError: Тип не поддерживается или тело некорректно
        """
        parser = self.registry.get(body_type)
        if parser is None:
            raise BodyParserError(
                f"Body type '{body_type}' is not supported",
                component="SemanticsParser",
            )
        return parser.parse(body)

    def decode(self, message: StructuralMessage) -> Union[DecodedMessage, BodyParserError]:
        """
        Декодирует структурное сообщение.

        Args:
            message: Результат Stage 1

        Returns:
            DecodedMessage или BodyParserError с привязкой к записи
        """
        try:
            payload = self.decode_body(message.body_type, message.body)
        except BodyParserError as e:
            error = e.located(message.offset, message.line_number, message.id)
            logger.debug(f"[SemanticsParser] {error}")
            return error

        return DecodedMessage(
            id=message.id,
            next_id=message.next_id,
            body_type=message.body_type,
            payload=payload,
            offset=message.offset,
            line_number=message.line_number,
        )
