"""
Общий domain слой: базовые исключения и политика ошибок.
"""

from .exceptions import ErrorKind, PipelinesError, ConfigurationError
from .policy import ErrorPolicy

__all__ = [
    "ErrorKind",
    "PipelinesError",
    "ConfigurationError",
    "ErrorPolicy",
]
