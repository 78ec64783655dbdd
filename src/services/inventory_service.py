"""인벤토리 Service - Core↔DB 연결, EventBus 통신

플레이어별 세션(가방/장비/지갑/스탯/이동 코디네이터)과
월드에 떠 있는 전리품 컨테이너를 관리한다.

Service → Core, Service → DB 허용. 다른 Service와는 EventBus로만 통신.
"""

import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.item.affix import create_from_template
from src.core.item.equipment import EquipmentSet
from src.core.item.exchange import exchange_item
from src.core.item.inventory import DEFAULT_BAG_CAPACITY, Bag
from src.core.item.loot import DEFAULT_LOOT_LIFETIME, MAX_LOOT_ITEMS, LootContainer
from src.core.item.models import EquipSlot, ItemInstance, ItemTemplate, LootProfile
from src.core.item.persistence import (
    apply_bag,
    apply_equipment,
    apply_wallet,
    parse_bag,
    parse_equipment,
    parse_wallet,
    read_snapshot,
    serialize_bag,
    serialize_equipment,
    serialize_wallet,
    write_snapshot,
)
from src.core.item.registry import ItemCatalog
from src.core.item.stats_bridge import CharacterStats, StatsEquipmentBridge
from src.core.item.transfer import (
    BagOrigin,
    DragOrigin,
    EquipmentOrigin,
    EquipResult,
    LootOrigin,
    TransferCoordinator,
)
from src.core.item.wallet import Wallet
from src.core.logging import get_logger
from src.db.models import SaveSlotModel

logger = get_logger(__name__)

SERVICE_SOURCE = "inventory_service"


class PendingConfirmation:
    """파괴 확인 대기 - 클라이언트 응답이 올 때까지 콜백 보관

    새 요청이 오면 이전 요청은 취소 처리 후 교체된다.
    """

    def __init__(self) -> None:
        self._message: Optional[str] = None
        self._on_confirm: Optional[Callable[[], None]] = None
        self._on_cancel: Optional[Callable[[], None]] = None

    @property
    def message(self) -> Optional[str]:
        return self._message

    @property
    def is_pending(self) -> bool:
        return self._message is not None

    def request(
        self,
        message: str,
        on_confirm: Callable[[], None],
        on_cancel: Callable[[], None],
    ) -> None:
        if self.is_pending:
            logger.info("Replacing pending confirmation: %s", self._message)
            self.resolve(False)
        self._message = message
        self._on_confirm = on_confirm
        self._on_cancel = on_cancel

    def resolve(self, accept: bool) -> bool:
        """대기 중인 요청에 응답. 대기 중이 아니면 False."""
        if not self.is_pending:
            return False
        callback = self._on_confirm if accept else self._on_cancel
        self._message = None
        self._on_confirm = None
        self._on_cancel = None
        if callback is not None:
            callback()
        return True


@dataclass
class PlayerSession:
    """플레이어 한 명의 인벤토리 상태 묶음"""

    player_id: str
    bag: Bag
    equipment: EquipmentSet
    wallet: Wallet
    stats: CharacterStats
    bridge: StatsEquipmentBridge
    coordinator: TransferCoordinator
    prompt: PendingConfirmation = field(default_factory=PendingConfirmation)


class InventoryService:
    """인벤토리/장비/전리품 비즈니스 로직"""

    def __init__(
        self,
        db: Session,
        event_bus: EventBus,
        catalog: ItemCatalog,
        loot_profiles: Optional[dict[str, LootProfile]] = None,
        bag_capacity: int = DEFAULT_BAG_CAPACITY,
        loot_lifetime: float = DEFAULT_LOOT_LIFETIME,
        loot_max_items: int = MAX_LOOT_ITEMS,
        save_dir: str | Path = "saves",
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        self._db = db
        self._bus = event_bus
        self._catalog = catalog
        self._loot_profiles = dict(loot_profiles or {})
        self._bag_capacity = bag_capacity
        self._loot_lifetime = loot_lifetime
        self._loot_max_items = loot_max_items
        self._save_dir = Path(save_dir)
        self._clock = clock
        self._rng = rng or random.Random()

        self._sessions: dict[str, PlayerSession] = {}
        self._loot: dict[str, LootContainer] = {}

    @property
    def catalog(self) -> ItemCatalog:
        return self._catalog

    # === 세션 ===

    def open_session(self, player_id: str, level: int = 1) -> PlayerSession:
        """세션 생성. 이미 열려 있으면 기존 세션 반환 (level 무시)."""
        existing = self._sessions.get(player_id)
        if existing is not None:
            return existing

        bag = Bag(self._bag_capacity)
        equipment = EquipmentSet()
        wallet = Wallet()
        stats = CharacterStats(level=max(1, level))
        bridge = StatsEquipmentBridge(equipment, stats)
        prompt = PendingConfirmation()
        coordinator = TransferCoordinator(
            bag,
            equipment,
            stats,
            event_bus=self._bus,
            confirmation=prompt,
            owner_id=player_id,
        )

        bag.changed.connect(lambda: self._emit(EventTypes.BAG_CHANGED, player_id=player_id))
        equipment.changed.connect(
            lambda: self._emit(EventTypes.EQUIPMENT_CHANGED, player_id=player_id)
        )
        wallet.changed.connect(
            lambda: self._emit(EventTypes.WALLET_CHANGED, player_id=player_id)
        )
        bridge.attach()

        session = PlayerSession(
            player_id=player_id,
            bag=bag,
            equipment=equipment,
            wallet=wallet,
            stats=stats,
            bridge=bridge,
            coordinator=coordinator,
            prompt=prompt,
        )
        self._sessions[player_id] = session
        logger.info("Opened inventory session: %s (level %d)", player_id, stats.level)
        return session

    def get_session(self, player_id: str) -> PlayerSession:
        session = self._sessions.get(player_id)
        if session is None:
            raise KeyError(f"No inventory session for player: {player_id}")
        return session

    def close_session(self, player_id: str) -> None:
        session = self._sessions.pop(player_id, None)
        if session is None:
            raise KeyError(f"No inventory session for player: {player_id}")
        session.coordinator.cancel_drag()
        session.bridge.detach()
        logger.info("Closed inventory session: %s", player_id)

    def has_session(self, player_id: str) -> bool:
        return player_id in self._sessions

    # === 아이템 지급 / 지갑 / 레벨 ===

    def grant_item(
        self,
        player_id: str,
        template_id: str,
        item_level: int = 1,
        amount: int = 1,
    ) -> Optional[ItemInstance]:
        """원형으로 아이템 생성 후 가방에 추가.
        가방에 자리가 없으면 None (가방 변경 없음).
        """
        session = self.get_session(player_id)
        template = self._require_template(template_id)
        item = create_from_template(template, item_level, self._rng)
        if not session.bag.add(item, amount):
            return None
        logger.debug("Granted %s x%d to %s", item.display_name, amount, player_id)
        return item

    def add_currency(self, player_id: str, amount: int) -> int:
        session = self.get_session(player_id)
        session.wallet.add(amount)
        return session.wallet.amount

    def spend_currency(self, player_id: str, amount: int) -> bool:
        return self.get_session(player_id).wallet.spend(amount)

    def level_up(self, player_id: str, muscles: int = 0, iq: int = 0) -> CharacterStats:
        session = self.get_session(player_id)
        session.stats.level_up(muscles=muscles, iq=iq)
        logger.info("Player %s reached level %d", player_id, session.stats.level)
        return session.stats

    def exchange(
        self,
        player_id: str,
        required_id: str,
        result_id: str,
        amount: int = 1,
    ) -> bool:
        session = self.get_session(player_id)
        required = self._require_template(required_id)
        result = self._require_template(result_id)
        return exchange_item(session.bag, required, result, amount)

    # === 장착 ===

    def equip(self, player_id: str, bag_index: int) -> EquipResult:
        return self.get_session(player_id).coordinator.equip_from_bag(bag_index)

    def unequip(self, player_id: str, slot: EquipSlot) -> bool:
        return self.get_session(player_id).coordinator.unequip_to_bag(slot)

    # === 드래그 ===

    def build_origin(
        self,
        kind: str,
        index: Optional[int] = None,
        slot: Optional[EquipSlot] = None,
        loot_id: Optional[str] = None,
    ) -> DragOrigin:
        """요청 필드 → DragOrigin. 필드가 빠졌으면 ValueError."""
        if kind == "bag":
            if index is None:
                raise ValueError("Bag drag requires an index")
            return BagOrigin(index)
        if kind == "equipment":
            if slot is None:
                raise ValueError("Equipment drag requires a slot")
            return EquipmentOrigin(slot)
        if kind == "loot":
            if index is None or loot_id is None:
                raise ValueError("Loot drag requires loot_id and index")
            return LootOrigin(self.get_loot(loot_id), index)
        raise ValueError(f"Unknown drag origin: {kind}")

    def begin_drag(self, player_id: str, origin: DragOrigin) -> bool:
        return self.get_session(player_id).coordinator.begin_drag(origin)

    def update_drag(self, player_id: str, x: float, y: float) -> bool:
        return self.get_session(player_id).coordinator.update_drag((x, y))

    def drop_on_bag(self, player_id: str, index: int) -> bool:
        session = self.get_session(player_id)
        if self._drag_source_expired(session):
            return False
        return session.coordinator.drop_on_bag(index)

    def drop_on_equipment(self, player_id: str, slot: EquipSlot) -> bool:
        session = self.get_session(player_id)
        if self._drag_source_expired(session):
            return False
        return session.coordinator.drop_on_equipment(slot)

    def end_drag(self, player_id: str) -> Optional[str]:
        """대상 밖 드롭. 파괴 확인이 요청되면 그 메시지를 반환."""
        session = self.get_session(player_id)
        session.coordinator.end_drag()
        return session.prompt.message

    def cancel_drag(self, player_id: str) -> None:
        self.get_session(player_id).coordinator.cancel_drag()

    def pending_confirmation(self, player_id: str) -> Optional[str]:
        return self.get_session(player_id).prompt.message

    def resolve_confirmation(self, player_id: str, accept: bool) -> bool:
        return self.get_session(player_id).prompt.resolve(accept)

    # === 전리품 ===

    def spawn_loot(
        self,
        profile_id: str,
        npc_level: int,
        rng: Optional[random.Random] = None,
    ) -> LootContainer:
        """NPC 사망 시 호출. loot_spawned 이벤트 발행."""
        profile = self._loot_profiles.get(profile_id)
        if profile is None:
            raise ValueError(f"Unknown loot profile: {profile_id}")

        loot = LootContainer.spawn(
            profile,
            npc_level,
            self._catalog,
            rng=rng or self._rng,
            lifetime=self._loot_lifetime,
            clock=self._clock,
            max_items=self._loot_max_items,
        )
        loot.depleted.connect(lambda: self._discard_loot(loot.loot_id))
        self._loot[loot.loot_id] = loot

        self._emit(
            EventTypes.LOOT_SPAWNED,
            loot_id=loot.loot_id,
            profile_id=profile_id,
            currency=loot.currency,
            item_count=len(loot.items),
        )
        return loot

    def get_loot(self, loot_id: str) -> LootContainer:
        """수명이 다한 전리품은 이 시점에 폐기되고 KeyError."""
        loot = self._loot.get(loot_id)
        if loot is None:
            raise KeyError(f"No loot container: {loot_id}")
        if loot.is_expired(self._clock()):
            self._expire_loot(loot_id)
            raise KeyError(f"Loot container expired: {loot_id}")
        return loot

    def active_loot(self) -> list[LootContainer]:
        self.sweep_expired_loot()
        return list(self._loot.values())

    def take_loot_item(self, player_id: str, loot_id: str, index: int) -> bool:
        session = self.get_session(player_id)
        return session.coordinator.take_loot_item(self.get_loot(loot_id), index)

    def take_loot_money(self, player_id: str, loot_id: str) -> int:
        session = self.get_session(player_id)
        return session.coordinator.take_loot_money(self.get_loot(loot_id), session.wallet)

    def sweep_expired_loot(self, now: Optional[float] = None) -> list[str]:
        """수명이 다한 전리품 폐기. 내용물과 무관. 반환: 폐기된 loot_id 목록."""
        now = self._clock() if now is None else now
        expired = [lid for lid, loot in self._loot.items() if loot.is_expired(now)]
        for loot_id in expired:
            self._expire_loot(loot_id)
        if expired:
            logger.info("Swept %d expired loot container(s)", len(expired))
        return expired

    def _expire_loot(self, loot_id: str) -> None:
        if self._loot.pop(loot_id, None) is not None:
            logger.debug("Loot expired: %s", loot_id)
            self._emit(EventTypes.LOOT_EXPIRED, loot_id=loot_id)

    def _drag_source_expired(self, session: PlayerSession) -> bool:
        """전리품에서 끌던 중 수명이 다하면 드래그를 취소한다."""
        origin = session.coordinator.origin
        if not isinstance(origin, LootOrigin):
            return False
        if not origin.container.is_expired(self._clock()):
            return False
        self._expire_loot(origin.container.loot_id)
        session.coordinator.cancel_drag()
        return True

    def _discard_loot(self, loot_id: str) -> None:
        if self._loot.pop(loot_id, None) is not None:
            logger.debug("Loot depleted and closed: %s", loot_id)

    # === 저장 / 로드 ===

    def snapshot(self, player_id: str) -> dict[str, Any]:
        session = self.get_session(player_id)
        return {
            "player_id": player_id,
            "level": session.stats.level,
            "bag": serialize_bag(session.bag),
            "equipment": serialize_equipment(session.equipment),
            "wallet": serialize_wallet(session.wallet),
        }

    def save(self, player_id: str) -> SaveSlotModel:
        """세션 스냅샷을 DB에 upsert."""
        data = self.snapshot(player_id)
        row = (
            self._db.query(SaveSlotModel)
            .filter(SaveSlotModel.player_id == player_id)
            .first()
        )
        if row is None:
            row = SaveSlotModel(player_id=player_id)
            self._db.add(row)
        row.bag = data["bag"]
        row.equipment = data["equipment"]
        row.wallet = data["wallet"]
        row.character_level = data["level"]
        self._db.commit()
        logger.info("Saved inventory for %s", player_id)
        return row

    def load(self, player_id: str) -> bool:
        """DB 저장분 복원. 세션이 없으면 새로 연다.
        저장분이 없으면 KeyError, 스냅샷이 깨졌으면 False.
        """
        row = (
            self._db.query(SaveSlotModel)
            .filter(SaveSlotModel.player_id == player_id)
            .first()
        )
        if row is None:
            raise KeyError(f"No save slot for player: {player_id}")
        return self._restore(
            player_id,
            {
                "level": row.character_level,
                "bag": row.bag,
                "equipment": row.equipment,
                "wallet": row.wallet,
            },
        )

    def export_snapshot(self, player_id: str) -> Path:
        """SAVE_DIR/<player_id>.json 으로 내보내기."""
        path = self._snapshot_path(player_id)
        write_snapshot(path, self.snapshot(player_id))
        logger.info("Exported inventory for %s to %s", player_id, path)
        return path

    def import_snapshot(self, player_id: str) -> bool:
        """SAVE_DIR/<player_id>.json 복원. 파일이 없으면 KeyError, 깨졌으면 False."""
        path = self._snapshot_path(player_id)
        if not path.exists():
            raise KeyError(f"No snapshot file for player: {player_id}")
        data = read_snapshot(path)
        if not isinstance(data, dict):
            return False
        return self._restore(player_id, data)

    def _restore(self, player_id: str, data: dict[str, Any]) -> bool:
        """세 컨테이너를 모두 검증한 뒤에만 교체. 하나라도 깨졌으면 아무것도 바꾸지 않는다."""
        bag_data = parse_bag(data.get("bag"))
        equipment_data = parse_equipment(data.get("equipment"))
        wallet_data = parse_wallet(data.get("wallet"))
        if bag_data is None or equipment_data is None or wallet_data is None:
            logger.warning("Restore rejected for %s: snapshot is invalid", player_id)
            return False

        session = self.open_session(player_id)
        session.coordinator.cancel_drag()

        apply_bag(session.bag, bag_data, self._catalog)
        apply_equipment(session.equipment, equipment_data, self._catalog)
        apply_wallet(session.wallet, wallet_data)

        level = data.get("level")
        if isinstance(level, int) and level >= 1:
            session.stats.level = level
            session.bridge.reapply()
        return True

    def _snapshot_path(self, player_id: str) -> Path:
        return self._save_dir / f"{player_id}.json"

    # === 내부 ===

    def _require_template(self, template_id: str) -> ItemTemplate:
        template = self._catalog.resolve(template_id)
        if template is None:
            raise ValueError(f"Unknown item template: {template_id}")
        return template

    def _emit(self, event_type: str, **data: Any) -> None:
        self._bus.emit(GameEvent(event_type=event_type, data=data, source=SERVICE_SOURCE))
