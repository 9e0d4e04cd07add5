"""
SplitByPipeline - оркестратор полного прогона.

Координирует этапы в строгом порядке:
1. StreamProcessor (Stage 1: структура) -> 2. SemanticsParser (Stage 2: тело) ->
3. OrganizeById (цепочки)

Ошибки записей (BadFormatError, BodyParserError) обрабатываются по политике:
- abort-on-first-error: ошибка поднимается, частичные цепочки отбрасываются
- skip-and-continue: запись пропускается, ошибка попадает в отчёт
Ошибки OrganizeById (дубликат, неоднозначность, цикл) фатальны всегда.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from loguru import logger

from config.settings import TERMINAL_NEXT_ID
from contracts.d2_organizing_dto import (
    DecodedMessageDTO,
    ErrorReportDTO,
    PipelineChainDTO,
    SplitResultDTO,
)
from src.domain.exceptions import PipelinesError
from src.domain.policy import ErrorPolicy
from src.parsing.body_parsers.registry import BodyParserRegistry
from src.parsing.domain.exceptions import BodyParserError, FileEndError, StructuralError
from src.parsing.s1_structure.stage import StructureParser
from src.parsing.s1_structure.stream_processor import StreamProcessor
from src.parsing.s2_semantics.stage import SemanticsParser

from .organize_by_id import OrganizeById, PipelineChain


@dataclass
class SplitResult:
    """
    Полный результат прогона.

    ЦКП: Цепочки + некритичные ошибки (с позициями) для слоя вывода.
    """
    chains: List[PipelineChain] = field(default_factory=list)
    errors: List[PipelinesError] = field(default_factory=list)
    records_read: int = 0
    messages_organized: int = 0

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dto(self) -> SplitResultDTO:
        """Контракт для слоя вывода."""
        return SplitResultDTO(
            chains=[
                PipelineChainDTO(
                    messages=[DecodedMessageDTO.model_validate(message) for message in chain.messages],
                    awaited_id=chain.awaited_id,
                    first_arrival=chain.first_arrival,
                    is_complete=chain.is_complete,
                )
                for chain in self.chains
            ],
            errors=[
                ErrorReportDTO(
                    kind=error.kind.value,
                    reason=error.reason,
                    offset=getattr(error, "offset", None),
                    line_number=getattr(error, "line_number", None),
                    span=getattr(error, "span", None),
                    message_id=getattr(error, "message_id", None),
                )
                for error in self.errors
            ],
            records_read=self.records_read,
            messages_organized=self.messages_organized,
        )

    def to_dict(self) -> dict:
        return {
            "chains": [chain.to_dict() for chain in self.chains],
            "errors": [str(error) for error in self.errors],
            "records_read": self.records_read,
            "messages_organized": self.messages_organized,
        }


class SplitByPipeline:
    """
    Фасад: поток записей -> цепочки пайплайнов.

    Пример:
        splitter = SplitByPipeline(error_policy="skip-and-continue")
        result = splitter.run_file(Path("input.log"))
        for chain in result.chains:
            print(chain.ids)
    """

    def __init__(
        self,
        registry: Optional[BodyParserRegistry] = None,
        error_policy: Optional[Union[str, ErrorPolicy]] = None,
        terminal_next_id: int = TERMINAL_NEXT_ID,
    ):
        """
        Args:
            registry: Реестр body-парсеров (по умолчанию - из YAML)
            error_policy: Политика ошибок записей (по умолчанию - из settings)
            terminal_next_id: Значение next_id, означающее конец цепочки
        """
        self.registry = registry or BodyParserRegistry.default()
        self.error_policy = ErrorPolicy.parse(error_policy)
        self.terminal_next_id = terminal_next_id

    def run(
        self,
        stream: Iterable[str],
        registry: Optional[BodyParserRegistry] = None,
        error_policy: Optional[Union[str, ErrorPolicy]] = None,
    ) -> SplitResult:
        """
        Обрабатывает поток записей.

        Args:
            stream: Текстовый поток
            registry: Реестр body-парсеров для этого прогона
            error_policy: Политика ошибок для этого прогона

        Returns:
            SplitResult

        Raises:
            BadFormatError, BodyParserError: при abort-on-first-error
            OrganizingError: фатальные ошибки цепочек (при любой политике)
        """
        registry = registry or self.registry
        policy = self.error_policy if error_policy is None else ErrorPolicy.parse(error_policy)

        structure_parser = StructureParser(registry.tag_map(), terminal_next_id=self.terminal_next_id)
        semantics_parser = SemanticsParser(registry)
        processor = StreamProcessor(stream, structure_parser, policy)
        organizer = OrganizeById()
        reports: List[PipelinesError] = []

        logger.debug(f"[SplitByPipeline] Старт (политика: {policy.value}, теги: {registry.known_tags()})")

        for outcome in processor:
            if isinstance(outcome, FileEndError):
                logger.debug(f"[SplitByPipeline] Поток завершён на строке {outcome.line_number}")
                break

            if isinstance(outcome, StructuralError):
                self._report(outcome, policy, reports)
                continue

            decoded = semantics_parser.decode(outcome)
            if isinstance(decoded, BodyParserError):
                self._report(decoded, policy, reports)
                continue

            organizer.ingest(decoded)

        organized = organizer.finalize()
        reports.extend(organized.errors)

        result = SplitResult(
            chains=organized.chains,
            errors=reports,
            records_read=processor.records_read,
            messages_organized=organizer.messages_count,
        )

        logger.info(
            f"[SplitByPipeline] {result.records_read} записей -> {len(result.chains)} цепочек, "
            f"{len(result.errors)} ошибок"
        )
        return result

    def run_file(
        self,
        path: Path,
        registry: Optional[BodyParserRegistry] = None,
        error_policy: Optional[Union[str, ErrorPolicy]] = None,
    ) -> SplitResult:
        """Обрабатывает файл (UTF-8)."""
        path = Path(path)
        logger.info(f"[SplitByPipeline] Обработка файла: {path}")
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return self.run(f, registry=registry, error_policy=error_policy)

    @staticmethod
    def _report(error: PipelinesError, policy: ErrorPolicy, reports: List[PipelinesError]) -> None:
        if error.fatal or policy.aborts:
            logger.error(f"[SplitByPipeline] Прерывание ({policy.value}): {error}")
            raise error
        logger.warning(f"[SplitByPipeline] Запись пропущена: {error}")
        reports.append(error)
