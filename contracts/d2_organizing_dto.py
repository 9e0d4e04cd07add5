"""
DTO контракт: D2 (Organizing) -> слой вывода (CLI, JSON)

Результат прогона: восстановленные цепочки + отчёты о некритичных ошибках.

ВАЛИДАЦИЯ: Pydantic гарантирует корректность данных.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DecodedMessageDTO(BaseModel):
    """
    Одно декодированное сообщение цепочки.
    """

    id: int = Field(..., ge=0, description="Уникальный id сообщения")
    next_id: int | None = Field(None, ge=0, description="id следующего сообщения (None - конец цепочки)")
    body_type: str = Field(..., description="Канонический тег тела (ascii, hex16, ...)")
    payload: str | tuple[int, ...] = Field(..., description="Текст (ascii) или 16-битные значения (hex16)")
    offset: int = Field(0, ge=0, description="Смещение записи в потоке (символы)")
    line_number: int = Field(1, ge=1, description="Строка начала записи")

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @field_validator("payload")
    @classmethod
    def validate_payload(cls, v):
        if isinstance(v, tuple) and any(not 0 <= value <= 0xFFFF for value in v):
            raise ValueError("hex16 payload values must fit in 16 bits")
        return v


class PipelineChainDTO(BaseModel):
    """
    Восстановленная цепочка одного пайплайна.
    """

    messages: list[DecodedMessageDTO] = Field(default_factory=list, description="Сообщения в логическом порядке")
    awaited_id: int | None = Field(None, description="id, которого цепочка ещё ждёт")
    first_arrival: int = Field(0, ge=0, description="Порядковый номер первого пришедшего сообщения")
    is_complete: bool = Field(True, description="Цепочка закрыта терминальным сообщением")

    model_config = ConfigDict(frozen=True, from_attributes=True)


class ErrorReportDTO(BaseModel):
    """
    Отчёт о некритичной ошибке (пропущенная запись, незавершённая цепочка).
    """

    kind: str = Field(..., description="Вид ошибки (bad_format, body_parser, incomplete_chain, ...)")
    reason: str = Field(..., description="Человекочитаемая причина")
    offset: int | None = Field(None, description="Смещение записи в потоке")
    line_number: int | None = Field(None, description="Строка записи")
    span: tuple[int, int] | None = Field(None, description="Диапазон внутри тела [start, end)")
    message_id: int | None = Field(None, description="id сообщения, если известен")

    model_config = ConfigDict(frozen=True, from_attributes=True)


class SplitResultDTO(BaseModel):
    """
    Итог прогона SplitByPipeline.
    """

    chains: list[PipelineChainDTO] = Field(default_factory=list, description="Цепочки в порядке первого поступления")
    errors: list[ErrorReportDTO] = Field(default_factory=list, description="Некритичные ошибки")
    records_read: int = Field(0, ge=0, description="Прочитано записей")
    messages_organized: int = Field(0, ge=0, description="Сообщений попало в цепочки")

    model_config = ConfigDict(frozen=True, from_attributes=True)
