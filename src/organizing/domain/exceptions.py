"""
Исключения для домена Organizing.

DuplicateIdError, AmbiguousSuccessorError, CyclicReferenceError - нарушения
инварианта цепочек, фатальны всегда (поток нельзя однозначно разделить).
IncompleteChainError - не фатальна, сообщается вместе с цепочками.
"""

from typing import Optional

from src.domain.exceptions import ErrorKind, PipelinesError


class OrganizingError(PipelinesError):
    """Базовое исключение для ошибок домена Organizing."""

    def __init__(
        self,
        message: str,
        message_id: Optional[int] = None,
        offset: Optional[int] = None,
        line_number: Optional[int] = None,
        component: Optional[str] = "OrganizeById"
    ):
        self.message_id = message_id
        self.offset = offset
        self.line_number = line_number
        super().__init__(message, component=component)

    def _format_message(self) -> str:
        msg = super()._format_message()
        if self.line_number is not None:
            msg += f" at line {self.line_number}, offset {self.offset}"
        return msg


class DuplicateIdError(OrganizingError):
    """Два сообщения с одним id."""

    kind = ErrorKind.DUPLICATE_ID

    def __init__(
        self,
        message_id: int,
        offset: Optional[int] = None,
        line_number: Optional[int] = None,
        first_line_number: Optional[int] = None
    ):
        self.first_line_number = first_line_number
        reason = f"Duplicate message id {message_id}"
        if first_line_number is not None:
            reason += f" (first seen at line {first_line_number})"
        super().__init__(reason, message_id=message_id, offset=offset, line_number=line_number)


class AmbiguousSuccessorError(OrganizingError):
    """Следующее сообщение уже ожидается другой цепочкой или уже имеет предшественника."""

    kind = ErrorKind.AMBIGUOUS_SUCCESSOR

    def __init__(
        self,
        message_id: int,
        successor_id: int,
        detail: str,
        offset: Optional[int] = None,
        line_number: Optional[int] = None
    ):
        self.successor_id = successor_id
        super().__init__(
            f"Message {message_id} points to {successor_id}, which {detail}",
            message_id=message_id,
            offset=offset,
            line_number=line_number,
        )


class CyclicReferenceError(OrganizingError):
    """Ссылка next_id указывает на сообщение той же цепочки."""

    kind = ErrorKind.CYCLIC_REFERENCE

    def __init__(
        self,
        message_id: int,
        successor_id: int,
        offset: Optional[int] = None,
        line_number: Optional[int] = None
    ):
        self.successor_id = successor_id
        super().__init__(
            f"Message {message_id} points back to {successor_id} in the same chain",
            message_id=message_id,
            offset=offset,
            line_number=line_number,
        )


class IncompleteChainError(OrganizingError):
    """Цепочка ждёт сообщение, которое так и не пришло."""

    kind = ErrorKind.INCOMPLETE_CHAIN
    fatal = False

    def __init__(self, head_id: int, awaited_id: int, line_number: Optional[int] = None, offset: Optional[int] = None):
        self.head_id = head_id
        self.awaited_id = awaited_id
        super().__init__(
            f"Chain starting at {head_id} is incomplete: message {awaited_id} never arrived",
            message_id=head_id,
            offset=offset,
            line_number=line_number,
        )


class OrganizerStateError(OrganizingError):
    """Organizer использован после фатальной ошибки."""

    kind = ErrorKind.ORGANIZER_STATE
