"""Persistence Codec 테스트: 스냅샷 복원, 원형 누락, 버전, 잘못된 데이터, 파일"""

from __future__ import annotations

from pathlib import Path

import pytest

from src.core.item.equipment import EquipmentSet
from src.core.item.inventory import Bag
from src.core.item.models import (
    UNKNOWN_ITEM_NAME,
    AffixKind,
    EquipSlot,
    ItemInstance,
    ItemTemplate,
    Rarity,
)
from src.core.item.persistence import (
    SCHEMA_VERSION,
    load_bag,
    load_equipment,
    load_wallet,
    read_snapshot,
    serialize_bag,
    serialize_equipment,
    serialize_wallet,
    write_snapshot,
)
from src.core.item.registry import ItemCatalog
from src.core.item.wallet import Wallet

HELM = ItemTemplate(template_id="iron_helm", base_name="Iron Helm")
RING = ItemTemplate(
    template_id="copper_ring", base_name="Copper Ring", equip_slot=EquipSlot.RING_LEFT
)


@pytest.fixture()
def catalog() -> ItemCatalog:
    catalog = ItemCatalog()
    catalog.register(HELM)
    catalog.register(RING)
    return catalog


def _helm() -> ItemInstance:
    return ItemInstance(
        template=HELM,
        item_level=12,
        required_level=10,
        rarity=Rarity.RARE,
        affix=AffixKind.POWER,
        bonus_muscles=7,
        bonus_crit=5,
        bonus_toughness=12,
        value=360,
    )


class TestBagSnapshot:
    def test_restore_matches_saved(self, catalog: ItemCatalog) -> None:
        bag = Bag(4)
        bag.add(_helm())
        bag.add(ItemInstance(template=RING, custom_name="Grandma's Ring"))
        bag.remove_at(0)

        data = serialize_bag(bag)
        assert data["version"] == SCHEMA_VERSION
        assert data["capacity"] == 4
        assert [s["occupied"] for s in data["slots"]] == [False, True, False, False]

        restored = Bag(2)
        assert load_bag(restored, data, catalog)
        assert restored.capacity == 4
        assert restored.get(0) is None
        ring = restored.get(1)
        assert ring.template is RING
        assert ring.display_name == "Grandma's Ring"

    def test_rolled_fields_survive(self, catalog: ItemCatalog) -> None:
        bag = Bag(1)
        bag.add(_helm())
        restored = Bag(1)
        load_bag(restored, serialize_bag(bag), catalog)
        item = restored.get(0)
        assert item.template is HELM
        assert item.item_level == 12
        assert item.required_level == 10
        assert item.rarity == Rarity.RARE
        assert item.affix == AffixKind.POWER
        assert item.stat_values() == (7, 0, 5, 12)
        assert item.value == 360

    def test_missing_template_keeps_numbers(self) -> None:
        bag = Bag(1)
        bag.add(_helm())
        data = serialize_bag(bag)

        restored = Bag(1)
        assert load_bag(restored, data, ItemCatalog())
        item = restored.get(0)
        assert item.template is None
        assert item.display_name == UNKNOWN_ITEM_NAME
        assert item.item_level == 12
        assert item.value == 360

    def test_legacy_snapshot_without_version(self, catalog: ItemCatalog) -> None:
        data = {
            "capacity": 2,
            "slots": [{"occupied": True, "item": {"template_id": "iron_helm"}}],
        }
        bag = Bag(5)
        assert load_bag(bag, data, catalog)
        assert bag.capacity == 2
        assert bag.get(0).template is HELM

    def test_newer_version_rejected(self, catalog: ItemCatalog) -> None:
        bag = Bag(3)
        original = _helm()
        bag.add(original)
        data = serialize_bag(Bag(1))
        data["version"] = SCHEMA_VERSION + 1
        assert load_bag(bag, data, catalog) is False
        assert bag.capacity == 3
        assert bag.get(0) is original

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            [],
            {"capacity": 0, "slots": []},
            {"slots": []},
            {"capacity": 2, "slots": [{"occupied": True, "item": {"rarity": "Mythic"}}]},
            {"version": "one", "capacity": 2},
        ],
    )
    def test_invalid_data_leaves_bag_untouched(self, catalog: ItemCatalog, raw) -> None:
        bag = Bag(2)
        item = _helm()
        bag.add(item)
        assert load_bag(bag, raw, catalog) is False
        assert bag.capacity == 2
        assert bag.get(0) is item


class TestEquipmentSnapshot:
    def test_restore(self, catalog: ItemCatalog) -> None:
        equipment = EquipmentSet()
        equipment.swap(EquipSlot.HEAD, _helm())
        equipment.swap(EquipSlot.RING_LEFT, ItemInstance(template=RING))
        data = serialize_equipment(equipment)
        assert len(data["equipped"]) == 10

        restored = EquipmentSet()
        restored.swap(EquipSlot.WEAPON, ItemInstance(template=HELM))
        assert load_equipment(restored, data, catalog)
        assert restored.get(EquipSlot.HEAD).value == 360
        assert restored.get(EquipSlot.RING_LEFT).template is RING
        assert restored.get(EquipSlot.WEAPON) is None

    def test_unknown_slot_rejected(self, catalog: ItemCatalog) -> None:
        equipment = EquipmentSet()
        data = {"equipped": [{"slot": "Feet", "occupied": False}]}
        assert load_equipment(equipment, data, catalog) is False


class TestWalletSnapshot:
    def test_restore(self) -> None:
        wallet = Wallet(42)
        restored = Wallet()
        assert load_wallet(restored, serialize_wallet(wallet))
        assert restored.amount == 42

    def test_newer_version_rejected(self) -> None:
        wallet = Wallet(7)
        assert load_wallet(wallet, {"version": 99, "amount": 500}) is False
        assert wallet.amount == 7


class TestSnapshotFiles:
    def test_write_and_read(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "p1.json"
        write_snapshot(path, {"wallet": {"version": 1, "amount": 3}})
        assert path.exists()
        assert read_snapshot(path) == {"wallet": {"version": 1, "amount": 3}}

    def test_missing_file(self, tmp_path: Path) -> None:
        assert read_snapshot(tmp_path / "absent.json") is None

    def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        assert read_snapshot(path) is None
