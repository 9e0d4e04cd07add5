"""
Unit-тесты для OrganizeById.

ЦКП: Проверка восстановления цепочек при любом порядке поступления,
фатальных ошибок (дубликат, неоднозначность, цикл) и незавершённых цепочек.
"""

import itertools
import random

import pytest

from src.organizing.domain.exceptions import (
    AmbiguousSuccessorError,
    CyclicReferenceError,
    DuplicateIdError,
    IncompleteChainError,
    OrganizerStateError,
)
from src.organizing.organize_by_id import OrganizeById
from src.parsing.s2_semantics.stage import DecodedMessage


def msg(message_id: int, next_id=None, payload: str = None, line_number: int = 1) -> DecodedMessage:
    """Helper: сообщение ascii (next_id=None - терминальное)."""
    return DecodedMessage(
        id=message_id,
        next_id=next_id,
        body_type="ascii",
        payload=payload if payload is not None else f"m{message_id}",
        offset=0,
        line_number=line_number,
    )


def organize(messages):
    organizer = OrganizeById()
    organizer.ingest_all(messages)
    return organizer.finalize()


def payloads(chain) -> list:
    return [message.payload for message in chain.messages]


def shuffled_chains(seed: int, incomplete: bool = False) -> list:
    """Helper: 9 цепочек по 5 сообщений в перемешанном порядке."""
    messages = []
    for start in range(100, 1000, 100):
        ids = list(range(start, start + 5))
        for current, following in zip(ids, ids[1:] + [None]):
            messages.append(msg(current, following))
    if incomplete:
        messages.append(msg(5000, 5001))
    random.Random(seed).shuffle(messages)
    return messages


# =============================================================================
# КОРРЕКТНЫЕ ПОТОКИ
# =============================================================================

class TestChains:
    """Восстановление цепочек."""

    def test_single_chain_in_order(self):
        """Пример 1: 1 -> 2 -> конец."""
        result = organize([msg(1, 2, "AB"), msg(2, None, "CD")])

        assert len(result.chains) == 1
        assert payloads(result.chains[0]) == ["AB", "CD"]
        assert result.chains[0].is_complete
        assert not result.has_errors

    def test_single_chain_reversed(self):
        """Пример 1 в обратном порядке поступления."""
        result = organize([msg(2, None, "CD"), msg(1, 2, "AB")])

        assert [payloads(chain) for chain in result.chains] == [["AB", "CD"]]

    @pytest.mark.parametrize("order", list(itertools.permutations([1, 2, 3, 4])))
    def test_any_arrival_order(self, order):
        messages = {1: msg(1, 2), 2: msg(2, 3), 3: msg(3, 4), 4: msg(4)}

        result = organize([messages[i] for i in order])

        assert [chain.ids for chain in result.chains] == [[1, 2, 3, 4]]
        assert not result.has_errors

    def test_interleaved_pipelines(self):
        """Пример 2: две цепочки, порядок первого поступления."""
        result = organize([msg(10, 11), msg(20, 21), msg(11), msg(21)])

        assert [chain.ids for chain in result.chains] == [[10, 11], [20, 21]]
        assert [chain.head_id for chain in result.chains] == [10, 20]

    def test_order_follows_first_arrival_not_head(self):
        """Цепочка, чьё сообщение пришло раньше, идёт первой, даже если голова пришла позже."""
        result = organize([msg(11), msg(20, 21), msg(10, 11), msg(21)])

        assert [chain.ids for chain in result.chains] == [[10, 11], [20, 21]]
        assert result.chains[0].first_arrival == 0
        assert result.chains[1].first_arrival == 1

    def test_shuffled_many_chains(self):
        chains = [list(range(start, start + 5)) for start in range(100, 1000, 100)]
        messages = []
        for ids in chains:
            for current, following in zip(ids, ids[1:] + [None]):
                messages.append(msg(current, following))
        random.Random(7).shuffle(messages)

        result = organize(messages)

        assert sorted(chain.ids for chain in result.chains) == chains
        assert sum(len(chain) for chain in result.chains) == len(messages)
        first_arrivals = [chain.first_arrival for chain in result.chains]
        assert first_arrivals == sorted(first_arrivals)

    def test_single_terminal_message(self):
        result = organize([msg(7)])

        assert [chain.ids for chain in result.chains] == [[7]]

    def test_empty_input(self):
        result = organize([])

        assert result.chains == []
        assert result.errors == []

    def test_counters(self):
        organizer = OrganizeById()
        organizer.ingest_all([msg(1, 2), msg(5), msg(2)])

        assert organizer.messages_count == 3
        assert len(organizer.finalize().chains) == 2

    def test_finalize_is_repeatable(self):
        organizer = OrganizeById()
        organizer.ingest_all([msg(1, 2), msg(2)])

        assert organizer.finalize().chains == organizer.finalize().chains

    def test_replay_in_new_organizer_gives_same_output(self):
        """Та же последовательность в новом OrganizeById -> те же цепочки и отчёты."""
        messages = shuffled_chains(seed=11, incomplete=True)

        first = organize(messages)
        second = organize(list(messages))

        assert first.chains == second.chains
        assert [str(e) for e in first.errors] == [str(e) for e in second.errors]
        assert first.to_dict() == second.to_dict()
        assert len(first.errors) == 1

    def test_merge_of_three_fragments(self):
        """Фрагменты 3-4, 1-2 и 5 склеиваются, когда приходят связующие сообщения."""
        result = organize([msg(3, 4), msg(5), msg(1, 2), msg(4, 5), msg(2, 3)])

        assert [chain.ids for chain in result.chains] == [[1, 2, 3, 4, 5]]
        assert result.chains[0].first_arrival == 0


# =============================================================================
# НЕЗАВЕРШЁННЫЕ ЦЕПОЧКИ
# =============================================================================

class TestIncompleteChains:
    """Цепочки, ждущие сообщение, которое не пришло."""

    def test_incomplete_chain_is_returned_and_reported(self):
        result = organize([msg(1, 2, line_number=1), msg(5, line_number=2)])

        first = result.chains[0]
        assert first.ids == [1]
        assert first.awaited_id == 2
        assert not first.is_complete

        assert len(result.errors) == 1
        error = result.errors[0]
        assert isinstance(error, IncompleteChainError)
        assert (error.head_id, error.awaited_id) == (1, 2)
        assert error.fatal is False

    def test_merged_chain_keeps_outstanding_wait(self):
        result = organize([msg(2, 3), msg(1, 2)])

        assert result.chains[0].ids == [1, 2]
        assert result.chains[0].awaited_id == 3
        assert result.errors[0].head_id == 1


# =============================================================================
# ФАТАЛЬНЫЕ ОШИБКИ
# =============================================================================

class TestFatalErrors:
    """Нарушения инварианта цепочек."""

    def test_duplicate_id(self):
        organizer = OrganizeById()
        organizer.ingest(msg(1, 2, line_number=1))

        with pytest.raises(DuplicateIdError) as exc_info:
            organizer.ingest(msg(1, line_number=4))

        assert exc_info.value.message_id == 1
        assert exc_info.value.first_line_number == 1
        assert exc_info.value.line_number == 4

    def test_two_messages_await_same_successor(self):
        organizer = OrganizeById()
        organizer.ingest(msg(1, 3))

        with pytest.raises(AmbiguousSuccessorError) as exc_info:
            organizer.ingest(msg(2, 3))

        assert exc_info.value.successor_id == 3

    def test_successor_already_has_predecessor(self):
        organizer = OrganizeById()
        organizer.ingest_all([msg(3), msg(1, 3)])

        with pytest.raises(AmbiguousSuccessorError):
            organizer.ingest(msg(2, 3))

    def test_successor_inside_other_chain(self):
        organizer = OrganizeById()
        organizer.ingest_all([msg(1, 2), msg(2)])

        with pytest.raises(AmbiguousSuccessorError):
            organizer.ingest(msg(9, 2))

    def test_self_reference(self):
        with pytest.raises(CyclicReferenceError):
            organize([msg(5, 5)])

    def test_two_message_cycle(self):
        with pytest.raises(CyclicReferenceError):
            organize([msg(1, 2), msg(2, 1)])

    def test_cycle_closed_after_merge(self):
        """Цикл, который замыкается только после склейки фрагментов."""
        with pytest.raises(CyclicReferenceError) as exc_info:
            organize([msg(1, 2), msg(3, 4), msg(4, 1), msg(2, 3)])

        assert exc_info.value.message_id == 2
        assert exc_info.value.successor_id == 3

    def test_organizer_is_unusable_after_fatal_error(self):
        organizer = OrganizeById()
        organizer.ingest(msg(1))
        with pytest.raises(DuplicateIdError):
            organizer.ingest(msg(1))

        with pytest.raises(OrganizerStateError):
            organizer.ingest(msg(2))
        with pytest.raises(OrganizerStateError):
            organizer.finalize()
