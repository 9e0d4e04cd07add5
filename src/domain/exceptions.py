"""
Общие исключения проекта Pipelines Demux.

Базовый класс для ошибок всех доменов (Parsing, Organizing) и
перечисление видов ошибок для отчётов.
"""

from enum import Enum
from typing import ClassVar, Optional


class ErrorKind(str, Enum):
    """Вид ошибки (попадает в отчёт для слоя вывода)."""

    BAD_FORMAT = "bad_format"
    FILE_END = "file_end"
    BODY_PARSER = "body_parser"
    DUPLICATE_ID = "duplicate_id"
    AMBIGUOUS_SUCCESSOR = "ambiguous_successor"
    CYCLIC_REFERENCE = "cyclic_reference"
    INCOMPLETE_CHAIN = "incomplete_chain"
    ORGANIZER_STATE = "organizer_state"
    CONFIGURATION = "configuration"


class PipelinesError(Exception):
    """Базовое исключение для ошибок Pipelines Demux."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONFIGURATION
    # Фатальная ошибка останавливает обработку независимо от политики
    fatal: ClassVar[bool] = True

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        self.message = message
        self.component = component
        self.original_error = original_error
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"Pipelines Error: {self.message}"
        if self.component:
            msg += f" (Component: {self.component})"
        if self.original_error:
            msg += f" [Original: {type(self.original_error).__name__}: {str(self.original_error)}]"
        return msg

    @property
    def reason(self) -> str:
        """Короткое описание без префикса и компонента."""
        return self.message


class ConfigurationError(PipelinesError):
    """Ошибка конфигурации (settings, YAML с body-парсерами)."""

    kind = ErrorKind.CONFIGURATION
