"""
Исключения для домена Parsing.

Структурные ошибки (разбор рамки записи) и ошибки декодирования тела.
Стадии возвращают их как значения, SplitByPipeline поднимает их
при политике abort-on-first-error.
"""

from typing import Optional, Tuple

from src.domain.exceptions import ErrorKind, PipelinesError


class ParsingError(PipelinesError):
    """Базовое исключение для ошибок домена Parsing."""
    pass


class StructuralError(ParsingError):
    """Ошибка структурного разбора записи (позиция в потоке + причина)."""

    # Ошибка одной записи: судьбу прогона решает политика
    fatal = False

    def __init__(
        self,
        reason: str,
        offset: int,
        line_number: int,
        component: Optional[str] = "StructureParser"
    ):
        self.offset = offset
        self.line_number = line_number
        super().__init__(reason, component=component)

    def _format_message(self) -> str:
        return f"{super()._format_message()} at line {self.line_number}, offset {self.offset}"


class BadFormatError(StructuralError):
    """Запись не соответствует грамматике."""

    kind = ErrorKind.BAD_FORMAT


class FileEndError(StructuralError):
    """Поток закончился на границе записи. Это не ошибка, а сигнал завершения."""

    kind = ErrorKind.FILE_END

    def __init__(self, offset: int, line_number: int):
        super().__init__("End of stream", offset, line_number, component="StreamProcessor")


class BodyParserError(ParsingError):
    """
    Некорректное тело для данного типа.

    span - диапазон [start, end) внутри тела, где найдена проблема.
    offset / line_number / message_id заполняются SemanticsParser через located().
    """

    kind = ErrorKind.BODY_PARSER
    fatal = False

    def __init__(
        self,
        reason: str,
        span: Optional[Tuple[int, int]] = None,
        offset: Optional[int] = None,
        line_number: Optional[int] = None,
        message_id: Optional[int] = None,
        component: Optional[str] = "BodyParser"
    ):
        self.span = span
        self.offset = offset
        self.line_number = line_number
        self.message_id = message_id
        super().__init__(reason, component=component)

    def _format_message(self) -> str:
        msg = super()._format_message()
        if self.message_id is not None:
            msg += f" in message {self.message_id}"
        if self.span is not None:
            msg += f" (body chars {self.span[0]}..{self.span[1]})"
        if self.line_number is not None:
            msg += f" at line {self.line_number}, offset {self.offset}"
        return msg

    def located(self, offset: int, line_number: int, message_id: int) -> "BodyParserError":
        """Возвращает копию ошибки с привязкой к записи потока."""
        return BodyParserError(
            self.message,
            span=self.span,
            offset=offset,
            line_number=line_number,
            message_id=message_id,
            component=self.component,
        )
