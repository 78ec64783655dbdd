"""Transfer Coordinator - 컨테이너 간 이동의 유일한 경로

두 컨테이너를 한 트랜잭션에서 변경할 수 있는 유일한 컴포넌트.
어떤 실패 경로에서도 모든 컨테이너를 유효한 상태로 남긴다.

드래그 상태 머신:
    Idle ──begin_drag(origin)──▶ Dragging(origin)
    Dragging ──drop_on_bag / drop_on_equipment──▶ Idle (handled)
    Dragging ──end_drag──▶ Idle (미처리 + 가방 출발이면 파괴 확인 요청)
    Dragging ──cancel_drag──▶ Idle (변경 없음)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Union

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.item.equipment import EquipmentSet, is_upgrade_slot
from src.core.item.inventory import Bag
from src.core.item.loot import LootContainer
from src.core.item.models import UPGRADE_SLOTS, EquipSlot, ItemInstance
from src.core.item.stats_bridge import LevelProvider
from src.core.item.wallet import Wallet

logger = logging.getLogger(__name__)

LEVEL_DENIED_MESSAGE = "I'm not high enough level to use that yet."


class EquipResult(str, Enum):
    EQUIPPED = "equipped"
    EMPTY_SLOT = "empty_slot"
    NO_TEMPLATE = "no_template"
    NOT_EQUIPPABLE = "not_equippable"
    LEVEL_TOO_LOW = "level_too_low"


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class BagOrigin:
    index: int


@dataclass(frozen=True)
class EquipmentOrigin:
    slot: EquipSlot


@dataclass(frozen=True)
class LootOrigin:
    container: LootContainer
    index: int


DragOrigin = Union[BagOrigin, EquipmentOrigin, LootOrigin]


class ConfirmationPrompt(Protocol):
    """파괴 확인 대화상자. 비동기 - 응답 시 둘 중 하나만 호출."""

    def request(
        self,
        message: str,
        on_confirm: Callable[[], None],
        on_cancel: Callable[[], None],
    ) -> None: ...


class TransferCoordinator:
    def __init__(
        self,
        bag: Bag,
        equipment: EquipmentSet,
        character: LevelProvider,
        event_bus: Optional[EventBus] = None,
        confirmation: Optional[ConfirmationPrompt] = None,
        owner_id: str = "player",
    ) -> None:
        self._bag = bag
        self._equipment = equipment
        self._character = character
        self._bus = event_bus
        self._confirmation = confirmation
        self._owner_id = owner_id

        self._state = DragState.IDLE
        self._origin: Optional[DragOrigin] = None
        self._handled = False
        self.pointer: Optional[tuple[float, float]] = None

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def origin(self) -> Optional[DragOrigin]:
        return self._origin

    @property
    def is_dragging(self) -> bool:
        return self._state == DragState.DRAGGING

    # === 트랜잭션 ===

    def equip_from_bag(self, bag_index: int) -> EquipResult:
        """가방 → 장비. 이전 점유자는 같은 가방 슬롯으로 돌아간다 (용량 검사 없음)."""
        item = self._bag.get(bag_index)
        if item is None:
            return EquipResult.EMPTY_SLOT
        if item.template is None:
            return EquipResult.NO_TEMPLATE
        if not item.template.equippable:
            return EquipResult.NOT_EQUIPPABLE

        if self._character.level < item.required_level:
            logger.info(
                "Equip denied: %s requires level %d (have %d)",
                item.display_name,
                item.required_level,
                self._character.level,
            )
            self._emit(
                EventTypes.EQUIP_DENIED,
                item_name=item.display_name,
                required_level=item.required_level,
                message=LEVEL_DENIED_MESSAGE,
            )
            return EquipResult.LEVEL_TOO_LOW

        if item.template.is_upgrade:
            target = self._equipment.first_empty_upgrade_slot() or UPGRADE_SLOTS[0]
        else:
            target = item.template.equip_slot

        previous = self._equipment.swap(target, item)
        if previous is not None:
            self._bag.replace_at(bag_index, previous)
        else:
            self._bag.remove_at(bag_index, 1)

        logger.debug("Equipped %s → %s", item.display_name, target.value)
        return EquipResult.EQUIPPED

    def unequip_to_bag(self, slot: EquipSlot) -> bool:
        """가방에 먼저 넣고, 성공했을 때만 슬롯을 비운다."""
        item = self._equipment.get(slot)
        if item is None:
            return False
        if not self._bag.add(item, 1):
            return False
        self._equipment.unequip(slot)
        return True

    def take_loot_item(self, loot: LootContainer, index: int) -> bool:
        """클릭으로 줍기. 가방이 가득 차면 시체에 되돌려 놓는다."""
        item = loot.take_item(index)
        if item is None:
            return False
        if not self._bag.add(item, 1):
            loot.put_back(index, item)
            return False
        self._after_looted(loot, item)
        return True

    def take_loot_money(self, loot: LootContainer, wallet: Wallet) -> int:
        amount = loot.take_money()
        if amount > 0:
            wallet.add(amount)
            self._check_depleted(loot)
        return amount

    # === 드래그 프로토콜 ===

    def begin_drag(self, origin: DragOrigin) -> bool:
        if self.is_dragging:
            logger.debug("begin_drag ignored: already dragging")
            return False
        if self._item_at(origin) is None:
            return False

        self._state = DragState.DRAGGING
        self._origin = origin
        self._handled = False
        self.pointer = None
        # 열린 툴팁 숨김은 표시 계층 담당
        self._emit(EventTypes.DRAG_STARTED, origin=_describe(origin))
        return True

    def update_drag(self, pointer: tuple[float, float]) -> bool:
        """고스트 아이콘 추적용. 컨테이너 변경 없음."""
        if not self.is_dragging:
            return False
        self.pointer = pointer
        return True

    def drop_on_bag(self, target_index: int) -> bool:
        if not self.is_dragging:
            return False
        self._handled = True
        origin = self._origin

        if isinstance(origin, BagOrigin):
            result = self._bag.move(origin.index, target_index)
        elif isinstance(origin, EquipmentOrigin):
            # target_index 무시 - 가방의 첫 빈 자리로
            result = self.unequip_to_bag(origin.slot)
        else:
            result = self._loot_into_bag(origin)

        self._reset()
        return result

    def drop_on_equipment(self, target_slot: EquipSlot) -> bool:
        if not self.is_dragging:
            return False
        self._handled = True
        origin = self._origin

        if isinstance(origin, BagOrigin):
            # 목적지는 원형이 결정 - target_slot 무시
            result = self.equip_from_bag(origin.index) == EquipResult.EQUIPPED
        elif isinstance(origin, EquipmentOrigin):
            result = self._exchange_equipped(origin.slot, target_slot)
        else:
            # 전리품은 가방으로만; 장착은 별도 동작
            result = self._loot_into_bag(origin)

        self._reset()
        return result

    def end_drag(self) -> None:
        """유효 대상 밖에서 놓음. 가방 출발 + 슬롯이 아직 차 있으면 파괴 확인 요청."""
        if not self.is_dragging:
            return
        if self._handled:
            self._reset()
            return

        origin = self._origin
        self._reset()

        if not isinstance(origin, BagOrigin):
            return
        item = self._bag.get(origin.index)
        if item is None:
            return
        if self._confirmation is None:
            logger.debug("No confirmation prompt configured; destroy skipped")
            return

        index = origin.index
        self._confirmation.request(
            f"Do you want to destroy {item.display_name}?",
            lambda: self._destroy_at(index, item),
            lambda: logger.debug("Destroy cancelled: %s", item.display_name),
        )

    def cancel_drag(self) -> None:
        self._reset()

    # === 내부 ===

    def _exchange_equipped(self, origin_slot: EquipSlot, target_slot: EquipSlot) -> bool:
        """같은 종류끼리만 두 슬롯 교환. 호환되지 않으면 no-op."""
        item = self._equipment.get(origin_slot)
        if item is None or item.template is None:
            return False
        if origin_slot == target_slot:
            return False

        template = item.template
        if template.is_upgrade:
            compatible = is_upgrade_slot(target_slot)
        else:
            compatible = template.equip_slot == target_slot
        if not compatible:
            logger.debug(
                "Drop rejected: %s cannot go to %s", item.display_name, target_slot.value
            )
            return False

        previous = self._equipment.swap(target_slot, item)
        self._equipment.swap(origin_slot, previous)
        return True

    def _loot_into_bag(self, origin: LootOrigin) -> bool:
        loot = origin.container
        item = loot.get(origin.index)
        if item is None:
            return False
        if not self._bag.add(item, 1):
            return False
        loot.take_item(origin.index)
        self._after_looted(loot, item)
        return True

    def _after_looted(self, loot: LootContainer, item: ItemInstance) -> None:
        self._emit(
            EventTypes.ITEM_LOOTED,
            loot_id=loot.loot_id,
            template_id=item.template_id,
            amount=1,
        )
        self._check_depleted(loot)

    def _check_depleted(self, loot: LootContainer) -> None:
        if loot.notify_if_depleted():
            self._emit(EventTypes.LOOT_DEPLETED, loot_id=loot.loot_id)

    def _destroy_at(self, index: int, item: ItemInstance) -> None:
        # 확인 대기 중 슬롯이 바뀌었으면 다른 아이템을 지우지 않는다
        if self._bag.get(index) is not item:
            logger.info("Destroy skipped: slot %d changed since confirmation", index)
            return
        self._bag.remove_at(index, 1)
        logger.info("Destroyed %s (bag slot %d)", item.display_name, index)
        self._emit(
            EventTypes.ITEM_DESTROYED,
            template_id=item.template_id,
            bag_index=index,
        )

    def _item_at(self, origin: DragOrigin) -> Optional[ItemInstance]:
        if isinstance(origin, BagOrigin):
            return self._bag.get(origin.index)
        if isinstance(origin, EquipmentOrigin):
            return self._equipment.get(origin.slot)
        return origin.container.get(origin.index)

    def _reset(self) -> None:
        self._state = DragState.IDLE
        self._origin = None
        self._handled = False
        self.pointer = None

    def _emit(self, event_type: str, **data: Any) -> None:
        if self._bus is None:
            return
        data["owner_id"] = self._owner_id
        self._bus.emit(GameEvent(event_type=event_type, data=data, source="transfer"))


def _describe(origin: DragOrigin) -> dict[str, Any]:
    if isinstance(origin, BagOrigin):
        return {"kind": "bag", "index": origin.index}
    if isinstance(origin, EquipmentOrigin):
        return {"kind": "equipment", "slot": origin.slot.value}
    return {"kind": "loot", "loot_id": origin.container.loot_id, "index": origin.index}
