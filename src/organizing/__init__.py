"""
Домен Organizing (D2): восстановление цепочек пайплайнов.

Вход: DecodedMessage (от домена Parsing)
Выход: contracts.SplitResultDTO (для слоя вывода)
"""

from src.organizing.organize_by_id import OrganizeById, OrganizeResult, PipelineChain
from src.organizing.split_by_pipeline import SplitByPipeline, SplitResult

__all__ = [
    "OrganizeById",
    "OrganizeResult",
    "PipelineChain",
    "SplitByPipeline",
    "SplitResult",
]
