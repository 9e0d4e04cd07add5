"""
Политика обработки ошибок разбора.

Задаётся снаружи (CLI, settings) и передаётся в StreamProcessor и SplitByPipeline.
"""

from enum import Enum
from typing import Optional, Union

from config.settings import DEFAULT_ERROR_POLICY

from .exceptions import ConfigurationError


class ErrorPolicy(str, Enum):
    """Что делать с BadFormatError / BodyParserError."""

    ABORT_ON_FIRST_ERROR = "abort-on-first-error"
    SKIP_AND_CONTINUE = "skip-and-continue"

    @property
    def aborts(self) -> bool:
        return self is ErrorPolicy.ABORT_ON_FIRST_ERROR

    @classmethod
    def parse(cls, value: Optional[Union[str, "ErrorPolicy"]] = None) -> "ErrorPolicy":
        """
        Приводит значение к ErrorPolicy.

        Args:
            value: Имя политики или None (тогда берётся DEFAULT_ERROR_POLICY)

        Raises:
            ConfigurationError: Если политика неизвестна
        """
        if isinstance(value, ErrorPolicy):
            return value
        raw = DEFAULT_ERROR_POLICY if value is None else value
        try:
            return cls(raw.strip().lower())
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown error policy '{raw}'", component="ErrorPolicy", original_error=e
            ) from e
