"""
Stage 1: Structure Parsing

ЦКП: Одна сырая запись -> структурная рамка (id, next_id, тег, тело).

Input: RawRecord (текст записи + позиция в потоке)
Output: StructuralMessage или BadFormatError

Грамматика записи (поля через пробельные символы):

    <id> <tag> [<body>] <next_id>

- id, next_id: беззнаковые десятичные числа
- next_id == TERMINAL_NEXT_ID означает конец цепочки
- tag: тег из реестра body-парсеров (ascii, hex16 и их алиасы)
- body: в квадратных скобках, скобки могут быть вложенными,
  внешняя пара отбрасывается, тело может занимать несколько строк
- после next_id в записи ничего быть не должно

Парсер чистый: один и тот же RawRecord всегда даёт один и тот же результат.
"""

import re
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from loguru import logger

from config.settings import BODY_CLOSE, BODY_OPEN, TERMINAL_NEXT_ID

from ..body_parsers.registry import BodyParserRegistry
from ..domain.exceptions import BadFormatError
from ..domain.interfaces import IStructureParser


UNSIGNED_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class RawRecord:
    """
    Одна сырая запись потока.

    offset - смещение (в символах) первого символа записи в потоке,
    line_number - номер строки, с которой запись начинается (с 1).
    """
    text: str
    offset: int = 0
    line_number: int = 1


@dataclass(frozen=True)
class StructuralMessage:
    """
    Результат Stage 1: структурная рамка записи.

    next_id = None - терминальное сообщение (нет следующего).
    body - тело как записано между внешними скобками.
    """
    id: int
    next_id: Optional[int]
    body_type: str
    body: str
    offset: int = 0
    line_number: int = 1

    @property
    def is_terminal(self) -> bool:
        return self.next_id is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "next_id": self.next_id,
            "body_type": self.body_type,
            "body": self.body,
            "offset": self.offset,
            "line_number": self.line_number,
        }


class _GrammarViolation(Exception):
    """Внутренний сигнал нарушения грамматики внутри одной записи."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class _RecordReader:
    """Курсор по тексту одной записи."""

    def __init__(self, text: str):
        self.text = text
        self.position = 0

    def at_end(self) -> bool:
        return self.position >= len(self.text)

    def skip_whitespace(self) -> None:
        while not self.at_end() and self.text[self.position].isspace():
            self.position += 1

    def read_token(self, field_name: str) -> str:
        self.skip_whitespace()
        start = self.position
        while not self.at_end() and not self.text[self.position].isspace():
            self.position += 1
        if start == self.position:
            raise _GrammarViolation(f"Missing {field_name}")
        return self.text[start:self.position]

    def read_body(self) -> str:
        self.skip_whitespace()
        if self.at_end():
            raise _GrammarViolation("Missing body")
        if self.text[self.position] != BODY_OPEN:
            raise _GrammarViolation(
                f"Expected '{BODY_OPEN}' to open the body, got {self.text[self.position]!r}"
            )

        depth = 0
        start = self.position + 1
        while not self.at_end():
            char = self.text[self.position]
            if char == BODY_OPEN:
                depth += 1
            elif char == BODY_CLOSE:
                depth -= 1
                if depth == 0:
                    body = self.text[start:self.position]
                    self.position += 1
                    return body
            self.position += 1

        raise _GrammarViolation(f"Unterminated body: missing '{BODY_CLOSE}'")

    def expect_end(self) -> None:
        self.skip_whitespace()
        if not self.at_end():
            rest = self.text[self.position:].strip()
            raise _GrammarViolation(f"Unparsed trailing data: {rest!r}")


class StructureParser(IStructureParser):
    """
    Stage 1: структурный разбор одной записи.

    Известные теги передаются снаружи (отображение wire-тег -> канонический),
    по умолчанию - из BodyParserRegistry.default().
    """

    def __init__(
        self,
        tags: Optional[Mapping[str, str]] = None,
        terminal_next_id: int = TERMINAL_NEXT_ID,
    ):
        """
        Args:
            tags: wire-тег -> канонический тег
            terminal_next_id: Значение next_id, означающее конец цепочки
        """
        if tags is None:
            tags = BodyParserRegistry.default().tag_map()
        self.tags = dict(tags)
        self.terminal_next_id = terminal_next_id

    def parse(self, record: RawRecord) -> Union[StructuralMessage, BadFormatError]:
        """
        Разбирает запись.

        Args:
            record: Сырая запись

        Returns:
            StructuralMessage или BadFormatError (ошибка возвращается, а не поднимается)
        """
        reader = _RecordReader(record.text)
        try:
            raw_id = reader.read_token("id")
            message_id = self._parse_unsigned(raw_id, "id")
            if message_id == self.terminal_next_id:
                raise _GrammarViolation(
                    f"id {message_id} is reserved as the terminal next id"
                )

            wire_tag = reader.read_token("body type tag")
            body_type = self.tags.get(wire_tag)
            if body_type is None:
                raise _GrammarViolation(f"Unknown body type tag {wire_tag!r}")

            body = reader.read_body()

            raw_next_id = reader.read_token("next id")
            next_id = self._parse_unsigned(raw_next_id, "next id")

            reader.expect_end()
        except _GrammarViolation as e:
            logger.debug(
                f"[StructureParser] Строка {record.line_number}: {e.reason}"
            )
            return BadFormatError(e.reason, record.offset, record.line_number)

        return StructuralMessage(
            id=message_id,
            next_id=None if next_id == self.terminal_next_id else next_id,
            body_type=body_type,
            body=body,
            offset=record.offset,
            line_number=record.line_number,
        )

    @staticmethod
    def _parse_unsigned(token: str, field_name: str) -> int:
        if not UNSIGNED_RE.fullmatch(token):
            raise _GrammarViolation(f"Non-numeric {field_name}: {token!r}")
        return int(token)


def format_record(message: StructuralMessage, terminal_next_id: int = TERMINAL_NEXT_ID) -> str:
    """
    Обратное преобразование: StructuralMessage -> текст записи.

    StructureParser.parse(RawRecord(format_record(m))) восстанавливает
    id, next_id, тег и тело без изменений.
    """
    next_id = terminal_next_id if message.is_terminal else message.next_id
    return f"{message.id} {message.body_type} {BODY_OPEN}{message.body}{BODY_CLOSE} {next_id}"
