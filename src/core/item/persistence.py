"""Persistence Codec - 가방/장비/지갑 ↔ 원형 id 참조 스냅샷

아이템은 원형 참조 대신 template_id + 롤링된 필드 전부를 저장한다.
로드 시 카탈로그로 id를 해석; 없으면 template=None으로 복원 (숫자 필드는 유지).

스냅샷은 {"version": N, ...}. version 없음 = 1 (버전 필드 이전 포맷과 동일 구조).
리더보다 새 버전이면 로드 거부 (컨테이너 변경 없음).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from src.core.item.equipment import EquipmentSet
from src.core.item.inventory import Bag
from src.core.item.models import (
    AffixKind,
    EquipSlot,
    ItemInstance,
    ItemStack,
    Rarity,
)
from src.core.item.registry import ItemCatalog
from src.core.item.wallet import Wallet

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


# === 스냅샷 스키마 ===


class ItemInstanceData(BaseModel):
    template_id: Optional[str] = None
    item_level: int = 1
    required_level: int = 1
    rarity: Rarity = Rarity.COMMON
    affix: AffixKind = AffixKind.NONE
    bonus_muscles: int = 0
    bonus_iq: int = 0
    bonus_crit: int = 0
    bonus_toughness: int = 0
    value: int = 0
    custom_name: Optional[str] = None


class SlotData(BaseModel):
    occupied: bool = False
    item: Optional[ItemInstanceData] = None


class BagData(BaseModel):
    version: int = SCHEMA_VERSION
    capacity: int = Field(..., ge=1)
    slots: list[SlotData] = Field(default_factory=list)


class EquipEntryData(BaseModel):
    slot: EquipSlot
    occupied: bool = False
    item: Optional[ItemInstanceData] = None


class EquipmentData(BaseModel):
    version: int = SCHEMA_VERSION
    equipped: list[EquipEntryData] = Field(default_factory=list)


class WalletData(BaseModel):
    version: int = SCHEMA_VERSION
    amount: int = 0


# === 직렬화 ===


def serialize_bag(bag: Bag) -> dict[str, Any]:
    data = BagData(
        capacity=bag.capacity,
        slots=[
            SlotData(
                occupied=not s.is_empty,
                item=None if s.is_empty else item_to_data(s.item),
            )
            for s in bag.slots
        ],
    )
    return data.model_dump(mode="json")


def serialize_equipment(equipment: EquipmentSet) -> dict[str, Any]:
    data = EquipmentData(
        equipped=[
            EquipEntryData(
                slot=slot,
                occupied=item is not None,
                item=None if item is None else item_to_data(item),
            )
            for slot, item in equipment.items()
        ]
    )
    return data.model_dump(mode="json")


def serialize_wallet(wallet: Wallet) -> dict[str, Any]:
    return WalletData(amount=wallet.amount).model_dump(mode="json")


# === 역직렬화 ===
# parse_* 는 검증만 (컨테이너 변경 없음), apply_* 는 검증된 데이터로 교체.
# 여러 컨테이너를 함께 복원할 때는 전부 parse 한 뒤에 apply 한다.


def parse_bag(raw: Any) -> Optional[BagData]:
    return _validate(BagData, raw)


def parse_equipment(raw: Any) -> Optional[EquipmentData]:
    return _validate(EquipmentData, raw)


def parse_wallet(raw: Any) -> Optional[WalletData]:
    return _validate(WalletData, raw)


def apply_bag(bag: Bag, data: BagData, catalog: ItemCatalog) -> None:
    stacks = []
    for slot in data.slots:
        if slot.occupied and slot.item is not None:
            stacks.append(ItemStack(item_from_data(slot.item, catalog), 1))
        else:
            stacks.append(ItemStack())

    bag.restore(data.capacity, stacks)
    logger.info("Loaded bag (capacity=%d)", data.capacity)


def apply_equipment(equipment: EquipmentSet, data: EquipmentData, catalog: ItemCatalog) -> None:
    equipped: dict[EquipSlot, Optional[ItemInstance]] = {}
    for entry in data.equipped:
        if entry.occupied and entry.item is not None:
            equipped[entry.slot] = item_from_data(entry.item, catalog)

    equipment.restore(equipped)
    logger.info("Loaded equipment (%d equipped)", len(equipped))


def apply_wallet(wallet: Wallet, data: WalletData) -> None:
    wallet.restore(data.amount)
    logger.info("Loaded wallet (amount=%d)", wallet.amount)


def load_bag(bag: Bag, raw: dict[str, Any], catalog: ItemCatalog) -> bool:
    """슬롯 전체 교체 + 용량을 저장값으로. 실패 시 False, 가방 변경 없음."""
    data = parse_bag(raw)
    if data is None:
        return False
    apply_bag(bag, data, catalog)
    return True


def load_equipment(equipment: EquipmentSet, raw: dict[str, Any], catalog: ItemCatalog) -> bool:
    data = parse_equipment(raw)
    if data is None:
        return False
    apply_equipment(equipment, data, catalog)
    return True


def load_wallet(wallet: Wallet, raw: dict[str, Any]) -> bool:
    data = parse_wallet(raw)
    if data is None:
        return False
    apply_wallet(wallet, data)
    return True


def item_to_data(item: ItemInstance) -> ItemInstanceData:
    return ItemInstanceData(
        template_id=item.template_id,
        item_level=item.item_level,
        required_level=item.required_level,
        rarity=item.rarity,
        affix=item.affix,
        bonus_muscles=item.bonus_muscles,
        bonus_iq=item.bonus_iq,
        bonus_crit=item.bonus_crit,
        bonus_toughness=item.bonus_toughness,
        value=item.value,
        custom_name=item.custom_name,
    )


def item_from_data(data: ItemInstanceData, catalog: ItemCatalog) -> ItemInstance:
    template = catalog.resolve(data.template_id)
    if template is None:
        logger.warning("Template not found on load: %s", data.template_id)
    return ItemInstance(
        template=template,
        item_level=data.item_level,
        required_level=data.required_level,
        rarity=data.rarity,
        affix=data.affix,
        bonus_muscles=data.bonus_muscles,
        bonus_iq=data.bonus_iq,
        bonus_crit=data.bonus_crit,
        bonus_toughness=data.bonus_toughness,
        value=data.value,
        custom_name=data.custom_name,
    )


def _validate(model: type[BaseModel], raw: Any) -> Optional[Any]:
    if not isinstance(raw, dict):
        logger.warning("%s: snapshot is not an object", model.__name__)
        return None

    version = raw.get("version", SCHEMA_VERSION)
    if not isinstance(version, int) or version > SCHEMA_VERSION:
        logger.error(
            "%s: unsupported snapshot version %r (reader=%d)",
            model.__name__,
            version,
            SCHEMA_VERSION,
        )
        return None

    try:
        return model.model_validate(raw)
    except ValidationError as e:
        logger.warning("%s: invalid snapshot - %s", model.__name__, e)
        return None


# === 파일 ===


def write_snapshot(path: str | Path, payload: dict[str, Any]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def read_snapshot(path: str | Path) -> Optional[dict[str, Any]]:
    """파일이 없거나 JSON이 깨졌으면 None."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Corrupt snapshot %s - %s", path, e)
        return None
