"""장비 세트 - 이름 붙은 10개 슬롯, 슬롯당 0~1개

swap()이 모든 장착/해제의 단일 원시 연산.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.core.item.models import (
    UPGRADE_SLOTS,
    EquipSlot,
    ItemInstance,
    ItemTemplate,
    StatBonuses,
)
from src.core.signals import ChangeSignal

logger = logging.getLogger(__name__)


def is_upgrade_slot(slot: EquipSlot) -> bool:
    return slot in UPGRADE_SLOTS


def slot_accepts(slot: EquipSlot, template: Optional[ItemTemplate]) -> bool:
    """Upgrade 아이템은 아무 Upgrade 슬롯, 그 외는 선언된 슬롯과 정확히 일치."""
    if template is None or not template.equippable:
        return False
    if template.is_upgrade:
        return is_upgrade_slot(slot)
    return template.equip_slot == slot


class EquipmentSet:
    def __init__(self) -> None:
        self._equipped: dict[EquipSlot, Optional[ItemInstance]] = {
            slot: None for slot in EquipSlot
        }
        self.changed = ChangeSignal("equipment")

    def get(self, slot: EquipSlot) -> Optional[ItemInstance]:
        return self._equipped.get(slot)

    def items(self) -> list[tuple[EquipSlot, Optional[ItemInstance]]]:
        """정의 순서 (Head → Upgrade4)"""
        return list(self._equipped.items())

    def unequip(self, slot: EquipSlot) -> Optional[ItemInstance]:
        """비우고 이전 점유자 반환."""
        return self.swap(slot, None)

    def swap(self, slot: EquipSlot, new_item: Optional[ItemInstance]) -> Optional[ItemInstance]:
        """새 아이템 설정, 이전 점유자 반환."""
        previous = self._equipped[slot]
        self._equipped[slot] = new_item
        self.changed.emit()
        return previous

    def first_empty_upgrade_slot(self) -> Optional[EquipSlot]:
        for slot in UPGRADE_SLOTS:
            if self._equipped[slot] is None:
                return slot
        return None

    def total_bonuses(self) -> StatBonuses:
        totals = StatBonuses()
        for item in self._equipped.values():
            if item is not None:
                totals.add(item)
        return totals

    def restore(self, equipped: dict[EquipSlot, Optional[ItemInstance]]) -> None:
        """스냅샷 복원 - 데이터에 없는 슬롯은 비운다."""
        for slot in EquipSlot:
            self._equipped[slot] = equipped.get(slot)
        self.changed.emit()
