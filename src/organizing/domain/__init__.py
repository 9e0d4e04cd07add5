"""
Domain слой домена Organizing.

Содержит интерфейсы (абстрактные классы) и исключения для Organizing домена.
"""

from .interfaces import IOrganizer

from .exceptions import (
    OrganizingError,
    DuplicateIdError,
    AmbiguousSuccessorError,
    CyclicReferenceError,
    IncompleteChainError,
    OrganizerStateError,
)

__all__ = [
    # Интерфейсы
    "IOrganizer",

    # Исключения
    "OrganizingError",
    "DuplicateIdError",
    "AmbiguousSuccessorError",
    "CyclicReferenceError",
    "IncompleteChainError",
    "OrganizerStateError",
]
