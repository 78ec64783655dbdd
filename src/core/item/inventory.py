"""가방 - 고정 용량 슬롯 배열

불변식: len(slots) == capacity. 인덱스는 Transfer Coordinator가 쓰는 안정 주소.
모든 변경 연산은 커밋 후 changed를 정확히 한 번 발행 (no-op은 발행 없음).
한 슬롯 = 한 개 (스택 없음).
"""

from __future__ import annotations

import copy
import logging
from typing import Optional, Sequence

from src.core.item.models import ItemInstance, ItemStack
from src.core.signals import ChangeSignal

logger = logging.getLogger(__name__)

DEFAULT_BAG_CAPACITY = 20


class Bag:
    def __init__(self, capacity: int = DEFAULT_BAG_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"Bag capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._slots: list[ItemStack] = [ItemStack() for _ in range(capacity)]
        self.changed = ChangeSignal("bag")

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def slots(self) -> Sequence[ItemStack]:
        return tuple(self._slots)

    def get(self, index: int) -> Optional[ItemInstance]:
        if not self._in_range(index):
            return None
        return self._slots[index].item

    def is_occupied(self, index: int) -> bool:
        return self.get(index) is not None

    def empty_slot_count(self) -> int:
        return sum(1 for s in self._slots if s.is_empty)

    def add(self, item: Optional[ItemInstance], amount: int = 1) -> bool:
        """첫 빈 슬롯부터 amount개 배치. 전부 못 넣으면 아무것도 바꾸지 않고 False.

        첫 슬롯은 전달받은 인스턴스, 이후 슬롯은 복사본 (슬롯마다 자기 인스턴스 소유).
        """
        if item is None or amount <= 0:
            return False

        empty = [i for i, s in enumerate(self._slots) if s.is_empty]
        if len(empty) < amount:
            logger.info(
                "Bag full: need %d slot(s) for %s, %d free",
                amount,
                item.display_name,
                len(empty),
            )
            return False

        for n, index in enumerate(empty[:amount]):
            placed = item if n == 0 else copy.copy(item)
            self._slots[index] = ItemStack(placed, 1)

        self.changed.emit()
        return True

    def remove_at(self, index: int, amount: int = 1) -> Optional[ItemInstance]:
        """슬롯 비움. 반환: 제거된 인스턴스 (빈 슬롯/범위 밖/amount<=0 이면 None)."""
        if amount <= 0 or not self._in_range(index):
            return None
        stack = self._slots[index]
        if stack.is_empty:
            return None

        removed = stack.item
        self._slots[index] = ItemStack()
        self.changed.emit()
        return removed

    def replace_at(self, index: int, item: Optional[ItemInstance]) -> Optional[ItemInstance]:
        """슬롯 내용 교체 (용량 검사 없음). 반환: 이전 점유자."""
        if not self._in_range(index):
            return None
        previous = self._slots[index].item
        self._slots[index] = ItemStack(item, 1)
        self.changed.emit()
        return previous

    def move(self, from_index: int, to_index: int) -> bool:
        if from_index == to_index:
            return False
        if not (self._in_range(from_index) and self._in_range(to_index)):
            return False
        self._slots[from_index], self._slots[to_index] = (
            self._slots[to_index],
            self._slots[from_index],
        )
        self.changed.emit()
        return True

    def restore(self, capacity: int, stacks: list[ItemStack]) -> None:
        """스냅샷 복원 - 슬롯 전체 교체 + 용량 조정. 길이는 capacity에 맞춰 채움/자름."""
        if capacity < 1:
            raise ValueError(f"Bag capacity must be >= 1, got {capacity}")
        stacks = list(stacks[:capacity])
        stacks.extend(ItemStack() for _ in range(capacity - len(stacks)))
        self._capacity = capacity
        self._slots = stacks
        self.changed.emit()

    # === 원형 기준 조회/제거 ===

    def count_of(self, template_id: str) -> int:
        return sum(
            s.count
            for s in self._slots
            if not s.is_empty and s.item.template_id == template_id
        )

    def has_at_least(self, template_id: str, amount: int) -> bool:
        return self.count_of(template_id) >= amount

    def remove_items(self, template_id: str, amount: int) -> int:
        """template_id 아이템을 앞에서부터 최대 amount개 제거. 반환: 제거 수."""
        if amount <= 0:
            return 0
        removed = 0
        for index, stack in enumerate(self._slots):
            if removed >= amount:
                break
            if stack.is_empty or stack.item.template_id != template_id:
                continue
            self._slots[index] = ItemStack()
            removed += 1

        if removed:
            self.changed.emit()
        return removed

    def _in_range(self, index: int) -> bool:
        return 0 <= index < self._capacity
