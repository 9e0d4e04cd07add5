"""
OrganizeById: восстановление цепочек по ссылкам id -> next_id.

ЦКП: Поток DecodedMessage в порядке поступления -> цепочки в логическом порядке.

Состояние:
- арена слотов цепочек (индекс слота = порядок появления цепочки)
- awaited id -> индекс слота, который его ждёт
- id -> узел (множество уже принятых id)
- узлы связаны ссылками successor (разбросанный односвязный список)
- union-find по слотам: к какой цепочке относится узел после склеек

Алгоритм для сообщения m:
1. m.id уже принят -> DuplicateIdError
2. m.id ждёт цепочка C -> дописываем m в хвост C, иначе новая цепочка с головой m
3. m.next_id терминальный -> цепочка закрыта, иначе регистрируем ожидание:
   - next_id уже в этой же цепочке -> CyclicReferenceError
   - next_id уже ждёт другая цепочка -> AmbiguousSuccessorError
   - next_id уже пришёл и это голова другой цепочки D -> склейка C + D за O(1)
     (следующее сообщение пришло раньше предыдущего)
   - next_id уже пришёл, но у него есть предшественник -> AmbiguousSuccessorError
   - иначе C ждёт next_id
4. m.id помечается принятым

Каждый шаг - поиск/вставка в dict, поэтому почти O(1) на сообщение.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from src.parsing.s2_semantics.stage import DecodedMessage

from .domain.exceptions import (
    AmbiguousSuccessorError,
    CyclicReferenceError,
    DuplicateIdError,
    IncompleteChainError,
    OrganizerStateError,
    OrganizingError,
)
from .domain.interfaces import IOrganizer


NO_NODE = -1


@dataclass(frozen=True)
class PipelineChain:
    """
    Восстановленная цепочка одного пайплайна.

    awaited_id - id, которого цепочка всё ещё ждёт (None - цепочка закрыта).
    first_arrival - номер (с 0) самого раннего по поступлению сообщения цепочки.
    """
    messages: Tuple[DecodedMessage, ...]
    awaited_id: Optional[int] = None
    first_arrival: int = 0

    @property
    def ids(self) -> List[int]:
        return [message.id for message in self.messages]

    @property
    def head_id(self) -> int:
        return self.messages[0].id

    @property
    def is_complete(self) -> bool:
        return self.awaited_id is None

    def __len__(self) -> int:
        return len(self.messages)

    def to_dict(self) -> dict:
        return {
            "messages": [message.to_dict() for message in self.messages],
            "awaited_id": self.awaited_id,
            "first_arrival": self.first_arrival,
            "is_complete": self.is_complete,
        }


@dataclass
class OrganizeResult:
    """
    Результат finalize().

    ЦКП: Цепочки в порядке первого поступления + отчёты о незавершённых цепочках.
    """
    chains: List[PipelineChain] = field(default_factory=list)
    errors: List[IncompleteChainError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict:
        return {
            "chains": [chain.to_dict() for chain in self.chains],
            "errors": [str(error) for error in self.errors],
            "chains_count": len(self.chains),
        }


@dataclass
class _ChainSlot:
    """Слот арены: границы цепочки в списке узлов."""
    head: int
    tail: int
    first_arrival: int
    size: int = 1
    awaited: Optional[int] = None
    alive: bool = True


class OrganizeById(IOrganizer):
    """
    Онлайн-организатор сообщений по id.

    Пример:
        organizer = OrganizeById()
        for message in messages:
            organizer.ingest(message)
        result = organizer.finalize()

    Organizer единолично владеет состоянием цепочек; наружу отдаются только
    неизменяемые PipelineChain из finalize().
    """

    def __init__(self):
        # Узлы (в порядке поступления)
        self._nodes: List[DecodedMessage] = []
        self._successor: List[int] = []
        self._node_slot: List[int] = []
        self._node_of_id: Dict[int, int] = {}

        # Арена цепочек
        self._slots: List[_ChainSlot] = []
        self._parent: List[int] = []

        # awaited id -> слот; id головы (без предшественника) -> слот
        self._awaiting: Dict[int, int] = {}
        self._heads: Dict[int, int] = {}

        self._failed: Optional[OrganizingError] = None

    @property
    def messages_count(self) -> int:
        return len(self._nodes)

    def ingest(self, message: DecodedMessage) -> None:
        """
        Принимает сообщение.

        Raises:
            DuplicateIdError, AmbiguousSuccessorError, CyclicReferenceError:
                фатальные ошибки, после них Organizer больше не принимает сообщения
            OrganizerStateError: Organizer уже в состоянии ошибки
        """
        self._ensure_usable()
        try:
            self._ingest(message)
        except OrganizingError as e:
            if e.fatal:
                self._failed = e
            logger.error(f"[OrganizeById] {e}")
            raise

    def ingest_all(self, messages: Iterable[DecodedMessage]) -> None:
        for message in messages:
            self.ingest(message)

    def finalize(self) -> OrganizeResult:
        """
        Собирает цепочки.

        Returns:
            OrganizeResult: цепочки в порядке первого поступления;
            незавершённые цепочки тоже возвращаются, плюс IncompleteChainError на каждую
        """
        self._ensure_usable()
        result = OrganizeResult()

        # Индекс живого слота = порядок первого поступления
        for slot in self._slots:
            if not slot.alive:
                continue

            chain = PipelineChain(
                messages=tuple(self._walk(slot)),
                awaited_id=slot.awaited,
                first_arrival=slot.first_arrival,
            )
            result.chains.append(chain)

            if slot.awaited is not None:
                tail = self._nodes[slot.tail]
                error = IncompleteChainError(
                    chain.head_id, slot.awaited, line_number=tail.line_number, offset=tail.offset
                )
                logger.warning(f"[OrganizeById] {error}")
                result.errors.append(error)

        logger.info(
            f"[OrganizeById] {len(self._nodes)} сообщений -> {len(result.chains)} цепочек "
            f"({len(result.errors)} незавершённых)"
        )
        return result

    def _ensure_usable(self) -> None:
        if self._failed is not None:
            raise OrganizerStateError(
                f"Organizer stopped after a fatal error: {self._failed.message}"
            )

    def _ingest(self, message: DecodedMessage) -> None:
        # 1. Дубликаты
        existing = self._node_of_id.get(message.id)
        if existing is not None:
            raise DuplicateIdError(
                message.id,
                offset=message.offset,
                line_number=message.line_number,
                first_line_number=self._nodes[existing].line_number,
            )

        node = len(self._nodes)
        self._nodes.append(message)
        self._successor.append(NO_NODE)

        # 2. Продолжение ожидающей цепочки или новая цепочка
        slot_index = self._awaiting.pop(message.id, None)
        if slot_index is not None:
            slot = self._slots[slot_index]
            self._successor[slot.tail] = node
            slot.tail = node
            slot.size += 1
            slot.awaited = None
            logger.debug(f"[OrganizeById] {message.id} -> цепочка #{slot_index}")
        else:
            slot_index = len(self._slots)
            self._slots.append(_ChainSlot(head=node, tail=node, first_arrival=node))
            self._parent.append(slot_index)
            self._heads[message.id] = slot_index
            logger.debug(f"[OrganizeById] {message.id} открывает цепочку #{slot_index}")

        # 4. id принят (до шага 3, чтобы ссылка на самого себя считалась циклом)
        self._node_slot.append(slot_index)
        self._node_of_id[message.id] = node

        # 3. Ожидание следующего
        if message.next_id is not None:
            self._await_successor(slot_index, message)

    def _await_successor(self, slot_index: int, message: DecodedMessage) -> None:
        successor_id = message.next_id
        successor_node = self._node_of_id.get(successor_id)

        if successor_node is not None:
            owner = self._find(self._node_slot[successor_node])
            if owner == slot_index:
                raise CyclicReferenceError(
                    message.id, successor_id, offset=message.offset, line_number=message.line_number
                )

            head_slot = self._heads.pop(successor_id, None)
            if head_slot is None:
                raise AmbiguousSuccessorError(
                    message.id,
                    successor_id,
                    "already has a predecessor",
                    offset=message.offset,
                    line_number=message.line_number,
                )

            self._splice(slot_index, head_slot)
            return

        other = self._awaiting.get(successor_id)
        if other is not None:
            raise AmbiguousSuccessorError(
                message.id,
                successor_id,
                f"is already awaited by the chain starting at {self._nodes[self._slots[other].head].id}",
                offset=message.offset,
                line_number=message.line_number,
            )

        self._awaiting[successor_id] = slot_index
        self._slots[slot_index].awaited = successor_id

    def _splice(self, front_index: int, back_index: int) -> None:
        """Приклеивает цепочку back после хвоста front за O(1)."""
        front = self._slots[front_index]
        back = self._slots[back_index]

        self._successor[front.tail] = back.head

        # Выживает слот, появившийся раньше: он задаёт порядок цепочек
        survivor_index, absorbed_index = sorted((front_index, back_index))
        survivor = self._slots[survivor_index]
        absorbed = self._slots[absorbed_index]

        head, tail = front.head, back.tail
        survivor.head = head
        survivor.tail = tail
        survivor.size = front.size + back.size
        survivor.awaited = back.awaited
        survivor.first_arrival = min(front.first_arrival, back.first_arrival)

        absorbed.alive = False
        self._parent[absorbed_index] = survivor_index

        if survivor.awaited is not None:
            self._awaiting[survivor.awaited] = survivor_index
        self._heads[self._nodes[head].id] = survivor_index

        logger.debug(
            f"[OrganizeById] Склейка цепочек #{front_index} + #{back_index} -> "
            f"#{survivor_index} ({survivor.size} сообщений)"
        )

    def _find(self, slot_index: int) -> int:
        parent = self._parent
        while parent[slot_index] != slot_index:
            parent[slot_index] = parent[parent[slot_index]]
            slot_index = parent[slot_index]
        return slot_index

    def _walk(self, slot: _ChainSlot) -> List[DecodedMessage]:
        messages = []
        node = slot.head
        while node != NO_NODE and len(messages) < slot.size:
            messages.append(self._nodes[node])
            node = self._successor[node]
        return messages
