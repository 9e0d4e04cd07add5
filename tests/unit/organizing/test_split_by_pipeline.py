"""
Unit-тесты для SplitByPipeline (полный прогон поток -> цепочки).
"""

import io

import pytest

from src.domain.exceptions import ErrorKind
from src.domain.policy import ErrorPolicy
from src.organizing.domain.exceptions import CyclicReferenceError, DuplicateIdError
from src.organizing.split_by_pipeline import SplitByPipeline
from src.parsing.body_parsers import BodyParserRegistry
from src.parsing.domain.exceptions import BadFormatError, BodyParserError


def make_splitter(policy=ErrorPolicy.SKIP_AND_CONTINUE, **kwargs) -> SplitByPipeline:
    return SplitByPipeline(BodyParserRegistry.default(), error_policy=policy, **kwargs)


def run_text(text: str, policy=ErrorPolicy.SKIP_AND_CONTINUE, **kwargs):
    return make_splitter(policy, **kwargs).run(io.StringIO(text))


def payloads(chain) -> list:
    return [message.payload for message in chain.messages]


class TestHappyPath:
    """Корректные потоки."""

    def test_interleaved_stream(self):
        text = (
            "10 ascii [start A] 11\n"
            "20 hex16 [00FF] 21\n"
            "11 ascii [end A] 0\n"
            "21 hex16 [0100 0200] 0\n"
        )

        result = run_text(text)

        assert [chain.ids for chain in result.chains] == [[10, 11], [20, 21]]
        assert payloads(result.chains[0]) == ["start A", "end A"]
        assert payloads(result.chains[1]) == [(255,), (256, 512)]
        assert result.records_read == 4
        assert result.messages_organized == 4
        assert not result.has_errors

    def test_numeric_aliases(self):
        result = run_text("1 0 [text] 2\n2 1 [FFFF] 0\n")

        assert payloads(result.chains[0]) == ["text", (65535,)]
        assert [m.body_type for m in result.chains[0].messages] == ["ascii", "hex16"]

    def test_multiline_body(self):
        result = run_text("1 ascii [line one\nline two] 0\n")

        assert payloads(result.chains[0]) == ["line one\nline two"]

    def test_custom_terminal(self):
        result = run_text("0 ascii [zero] 1\n1 ascii [one] 65535\n", terminal_next_id=65535)

        assert result.chains[0].ids == [0, 1]
        assert result.chains[0].is_complete

    def test_policy_given_as_string(self):
        result = make_splitter("skip-and-continue").run(io.StringIO("1 ascii [A] 0\n"))

        assert result.chains[0].ids == [1]


class TestRecordErrors:
    """BadFormatError / BodyParserError по политике."""

    def test_bad_next_id_skipped(self):
        """Пример 4: нечисловой next_id -> ошибка с позицией, остальное организуется."""
        text = "1 ascii [A] 2\n5 ascii [bad] x\n2 ascii [B] 0\n"

        result = run_text(text)

        assert [chain.ids for chain in result.chains] == [[1, 2]]
        assert len(result.errors) == 1
        error = result.errors[0]
        assert isinstance(error, BadFormatError)
        assert error.offset == text.index("5 ascii")
        assert error.line_number == 2

    def test_bad_body_skipped(self):
        """Пример 3: hex16 нечётной длины -> BodyParserError."""
        result = run_text("1 hex16 [00FF] 0\n2 hex16 [00F] 0\n")

        assert payloads(result.chains[0]) == [(255,)]
        assert isinstance(result.errors[0], BodyParserError)
        assert result.errors[0].message_id == 2

    def test_skipped_record_leaves_chain_incomplete(self):
        result = run_text("1 ascii [A] 2\n2 ascii [\x01] 0\n")

        assert result.chains[0].awaited_id == 2
        assert [e.kind for e in result.errors] == [ErrorKind.BODY_PARSER, ErrorKind.INCOMPLETE_CHAIN]

    def test_abort_raises_bad_format(self):
        with pytest.raises(BadFormatError):
            run_text("1 ascii [A] 0\n2 ascii [B] x\n", ErrorPolicy.ABORT_ON_FIRST_ERROR)

    def test_abort_raises_body_error(self):
        with pytest.raises(BodyParserError):
            run_text("1 hex16 [00F] 0\n", ErrorPolicy.ABORT_ON_FIRST_ERROR)

    def test_per_run_policy_override(self):
        splitter = make_splitter(ErrorPolicy.SKIP_AND_CONTINUE)

        with pytest.raises(BadFormatError):
            splitter.run(io.StringIO("1 ascii [A] x\n"), error_policy="abort-on-first-error")

    def test_stray_bracket_outside_body_skips_only_that_record(self):
        text = "1 ascii [AB] 2\n5 asc[ii [Z] 0\n2 ascii [CD] 0\n7 ascii [X] 0\n"

        result = run_text(text)

        assert [chain.ids for chain in result.chains] == [[1, 2], [7]]
        assert [e.kind for e in result.errors] == [ErrorKind.BAD_FORMAT]
        assert result.errors[0].line_number == 2

    def test_unterminated_body_reported(self):
        result = run_text("1 ascii [A] 0\n2 ascii [never closed\n")

        assert result.chains[0].ids == [1]
        assert result.errors[0].kind is ErrorKind.BAD_FORMAT


class TestFatalOrganizingErrors:
    """Ошибки цепочек фатальны при любой политике."""

    def test_duplicate_id(self):
        with pytest.raises(DuplicateIdError):
            run_text("1 ascii [A] 0\n1 ascii [B] 0\n")

    def test_cycle(self):
        with pytest.raises(CyclicReferenceError):
            run_text("1 ascii [A] 2\n2 ascii [B] 1\n")

    def test_record_errors_are_not_fatal(self):
        """Ошибки записей уходят в отчёт, фатальность решает политика."""
        result = run_text("1 ascii [A] x\n2 hex16 [0] 0\n3 ascii [C] 0\n")

        assert [e.fatal for e in result.errors] == [False, False]
        assert [chain.ids for chain in result.chains] == [[3]]

    def test_fatal_error_is_raised_under_skip_policy(self):
        reports = []

        with pytest.raises(DuplicateIdError):
            SplitByPipeline._report(DuplicateIdError(1), ErrorPolicy.SKIP_AND_CONTINUE, reports)

        assert reports == []

    def test_non_fatal_error_is_recorded_under_skip_policy(self):
        reports = []
        error = BadFormatError("Missing id", 0, 1)

        SplitByPipeline._report(error, ErrorPolicy.SKIP_AND_CONTINUE, reports)

        assert reports == [error]


class TestOutput:
    """DTO и чтение из файла."""

    def test_to_dto(self):
        result = run_text("1 hex16 [00FF] 2\n3 ascii [x] x\n")

        dto = result.to_dto()

        assert dto.chains[0].messages[0].payload == (255,)
        assert dto.chains[0].is_complete is False
        assert [e.kind for e in dto.errors] == ["bad_format", "incomplete_chain"]
        assert dto.errors[0].line_number == 2
        assert dto.records_read == 2
        assert "bad_format" in dto.model_dump_json()

    def test_run_file(self, tmp_path):
        path = tmp_path / "input.log"
        path.write_text("2 ascii [B] 0\n1 ascii [A] 2\n", encoding="utf-8")

        result = make_splitter().run_file(path)

        assert payloads(result.chains[0]) == ["A", "B"]

    def test_to_dict(self):
        result = run_text("1 ascii [A] 0\n")

        assert result.to_dict()["chains"][0]["messages"][0]["payload"] == "A"
