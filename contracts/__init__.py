"""
Контракты DTO проекта Pipelines Demux.

Все контракты используют Pydantic v2 для валидации.

Контракты:
- D2 -> слой вывода: SplitResultDTO (d2_organizing_dto.py)
"""

# D2 -> Presentation (Organizing -> CLI / JSON)
from .d2_organizing_dto import (
    DecodedMessageDTO,
    PipelineChainDTO,
    ErrorReportDTO,
    SplitResultDTO,
)

__all__ = [
    "DecodedMessageDTO",
    "PipelineChainDTO",
    "ErrorReportDTO",
    "SplitResultDTO",
]
