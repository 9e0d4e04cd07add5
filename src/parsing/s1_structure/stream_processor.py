"""
StreamProcessor: ленивый поток результатов Stage 1.

ЦКП: Из текстового потока - последовательность StructuralMessage | StructuralError.

Алгоритм:
1. Чтение потока построчно (лениво, по требованию потребителя)
2. Пустые строки пропускаются
3. Строки склеиваются в одну запись, пока открыта скобка тела
   (скобки считаются только начиная с тела: после полей id и tag)
4. Каждая запись разбирается StructureParser
5. Конец потока на границе записи -> FileEndError (нормальное завершение)
6. Конец потока внутри тела -> BadFormatError, затем FileEndError

Поток одноразовый: повторная итерация запрещена.
"""

import re
from typing import Iterable, Iterator, List, Optional, Union

from loguru import logger

from config.settings import BODY_CLOSE, BODY_OPEN
from src.domain.policy import ErrorPolicy

from ..domain.exceptions import BadFormatError, FileEndError, StructuralError
from .stage import RawRecord, StructuralMessage, StructureParser


StructuralOutcome = Union[StructuralMessage, StructuralError]


# Начало записи до открывающей скобки тела: <id> <tag> [
RECORD_HEAD_RE = re.compile(r"\s*\S+\s+\S+\s+(?=" + re.escape(BODY_OPEN) + r")")


def _body_depth(text: str, depth: int) -> int:
    """
    Глубина скобок тела после text.

    Как только тело закрылось, остаток строки (next_id) не считается.
    """
    for char in text:
        if char == BODY_OPEN:
            depth += 1
        elif char == BODY_CLOSE:
            depth -= 1
            if depth == 0:
                return 0
    return depth


def _record_depth(first_line: str) -> int:
    """Глубина скобок после первой строки записи: скобки в id и теге не считаются."""
    head = RECORD_HEAD_RE.match(first_line)
    if head is None:
        return 0
    return _body_depth(first_line[head.end():], 0)


class StreamProcessor:
    """
    Ленивый, однонаправленный, одноразовый поток структурных результатов.

    Пример:
        processor = StreamProcessor(open("input.log", encoding="utf-8"))
        for outcome in processor:
            if isinstance(outcome, FileEndError):
                break
            ...

    При политике abort-on-first-error поток заканчивается сразу после первой
    BadFormatError (FileEndError в этом случае не выдаётся).
    """

    def __init__(
        self,
        stream: Iterable[str],
        parser: Optional[StructureParser] = None,
        error_policy: Optional[Union[str, ErrorPolicy]] = None,
    ):
        """
        Args:
            stream: Текстовый поток (файл, StringIO, список строк)
            parser: Структурный парсер (по умолчанию - с реестром по умолчанию)
            error_policy: Политика ошибок (по умолчанию - из settings)
        """
        self.stream = stream
        self.parser = parser or StructureParser()
        self.error_policy = ErrorPolicy.parse(error_policy)

        # Счётчики и текущая позиция чтения
        self.records_read = 0
        self.errors_found = 0
        self.offset = 0
        self.line_number = 0

        self._started = False

    def _claim(self) -> None:
        if self._started:
            raise RuntimeError("StreamProcessor is single-use: the stream was already consumed")
        self._started = True

    def __iter__(self) -> Iterator[StructuralOutcome]:
        self._claim()
        return self._outcomes()

    def records(self) -> Iterator[Union[RawRecord, BadFormatError]]:
        """Сырые записи без структурного разбора (тоже расходует поток)."""
        self._claim()
        return self._raw_records()

    def _outcomes(self) -> Iterator[StructuralOutcome]:
        for item in self._raw_records():
            if isinstance(item, RawRecord):
                self.records_read += 1
                outcome = self.parser.parse(item)
            else:
                outcome = item

            if isinstance(outcome, BadFormatError):
                self.errors_found += 1
                logger.warning(f"[StreamProcessor] {outcome}")
                yield outcome
                if self.error_policy.aborts:
                    logger.info("[StreamProcessor] Остановка на первой ошибке (abort-on-first-error)")
                    return
                continue

            yield outcome

        logger.debug(
            f"[StreamProcessor] Конец потока: {self.records_read} записей, "
            f"{self.errors_found} ошибок, {self.line_number} строк"
        )
        yield FileEndError(self.offset, self.line_number)

    def _raw_records(self) -> Iterator[Union[RawRecord, BadFormatError]]:
        pending: List[str] = []
        start_offset = 0
        start_line = 0
        depth = 0

        for line in self.stream:
            self.line_number += 1

            if not pending:
                if not line.strip():
                    self.offset += len(line)
                    continue
                start_offset, start_line = self.offset, self.line_number

            depth = _body_depth(line, depth) if pending else _record_depth(line)
            pending.append(line)
            self.offset += len(line)

            if depth == 0:
                yield RawRecord(
                    text="".join(pending).rstrip("\r\n"),
                    offset=start_offset,
                    line_number=start_line,
                )
                pending = []

        if pending:
            yield BadFormatError(
                f"Stream ended inside a record body: missing '{BODY_CLOSE}'",
                start_offset,
                start_line,
                component="StreamProcessor",
            )
