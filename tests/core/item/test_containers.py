"""컨테이너 테스트: 가방, 장비 세트, 지갑, ChangeSignal"""

from __future__ import annotations

import pytest

from src.core.item.equipment import EquipmentSet, is_upgrade_slot, slot_accepts
from src.core.item.inventory import Bag
from src.core.item.models import (
    UPGRADE_SLOTS,
    EquipSlot,
    ItemCategory,
    ItemInstance,
    ItemStack,
    ItemTemplate,
)
from src.core.item.wallet import Wallet
from src.core.signals import ChangeSignal


def _item(template_id: str = "iron_helm", **kwargs) -> ItemInstance:
    template = ItemTemplate(template_id=template_id, base_name=template_id.title())
    return ItemInstance(template=template, **kwargs)


def _counter(signal: ChangeSignal) -> list[int]:
    calls: list[int] = []
    signal.connect(lambda: calls.append(1))
    return calls


# ── ChangeSignal ──────────────────────────────────────────────


class TestChangeSignal:
    def test_emit_calls_listeners_in_order(self) -> None:
        signal = ChangeSignal("test")
        order: list[str] = []
        signal.connect(lambda: order.append("a"))
        signal.connect(lambda: order.append("b"))
        signal.emit()
        assert order == ["a", "b"]

    def test_failing_listener_does_not_block_others(self) -> None:
        signal = ChangeSignal("test")
        calls: list[int] = []

        def broken() -> None:
            raise RuntimeError("boom")

        signal.connect(broken)
        signal.connect(lambda: calls.append(1))
        signal.emit()
        assert calls == [1]

    def test_disconnect(self) -> None:
        signal = ChangeSignal("test")
        calls: list[int] = []
        listener = lambda: calls.append(1)  # noqa: E731
        signal.connect(listener)
        signal.disconnect(listener)
        signal.emit()
        assert calls == []
        assert signal.listener_count == 0

    def test_disconnect_unknown_is_harmless(self) -> None:
        ChangeSignal("test").disconnect(lambda: None)


# ── Bag ───────────────────────────────────────────────────────


class TestBag:
    def test_slot_count_equals_capacity(self) -> None:
        bag = Bag(5)
        assert len(bag.slots) == 5
        assert bag.empty_slot_count() == 5

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            Bag(0)

    def test_add_fills_first_empty_slot(self) -> None:
        bag = Bag(3)
        first, second = _item(), _item("copper_ring")
        assert bag.add(first)
        assert bag.add(second)
        assert bag.get(0) is first
        assert bag.get(1) is second
        assert bag.get(2) is None

    def test_add_skips_occupied_gaps(self) -> None:
        bag = Bag(3)
        bag.add(_item())
        bag.add(_item())
        bag.remove_at(0)
        placed = _item("copper_ring")
        bag.add(placed)
        assert bag.get(0) is placed

    def test_add_to_full_bag_fails_without_change(self) -> None:
        bag = Bag(2)
        bag.add(_item())
        bag.add(_item())
        calls = _counter(bag.changed)
        before = list(bag.slots)
        assert bag.add(_item("copper_ring")) is False
        assert list(bag.slots) == before
        assert calls == []

    def test_add_amount_is_all_or_nothing(self) -> None:
        bag = Bag(3)
        bag.add(_item())
        assert bag.add(_item("copper_ring"), 3) is False
        assert bag.empty_slot_count() == 2

        source = _item("copper_ring")
        assert bag.add(source, 2) is True
        assert bag.get(1) is source
        assert bag.get(2) is not source
        assert bag.get(2).template_id == "copper_ring"

    def test_add_none_or_zero(self) -> None:
        bag = Bag(2)
        assert bag.add(None) is False
        assert bag.add(_item(), 0) is False
        assert bag.empty_slot_count() == 2

    def test_add_emits_once(self) -> None:
        bag = Bag(4)
        calls = _counter(bag.changed)
        bag.add(_item(), 3)
        assert calls == [1]

    def test_remove_at(self) -> None:
        bag = Bag(2)
        item = _item()
        bag.add(item)
        calls = _counter(bag.changed)
        assert bag.remove_at(0) is item
        assert bag.get(0) is None
        assert calls == [1]

    def test_remove_noops(self) -> None:
        bag = Bag(2)
        bag.add(_item())
        calls = _counter(bag.changed)
        assert bag.remove_at(1) is None
        assert bag.remove_at(7) is None
        assert bag.remove_at(0, 0) is None
        assert bag.get(0) is not None
        assert calls == []

    def test_move_swaps(self) -> None:
        bag = Bag(3)
        a, b = _item(), _item("copper_ring")
        bag.add(a)
        bag.add(b)
        assert bag.move(0, 1)
        assert bag.get(0) is b
        assert bag.get(1) is a

    def test_move_into_empty(self) -> None:
        bag = Bag(3)
        a = _item()
        bag.add(a)
        assert bag.move(0, 2)
        assert bag.get(0) is None
        assert bag.get(2) is a

    def test_move_noops(self) -> None:
        bag = Bag(3)
        bag.add(_item())
        calls = _counter(bag.changed)
        assert bag.move(0, 0) is False
        assert bag.move(0, 3) is False
        assert bag.move(-1, 0) is False
        assert calls == []

    def test_replace_at_ignores_capacity(self) -> None:
        bag = Bag(1)
        old, new = _item(), _item("copper_ring")
        bag.add(old)
        assert bag.replace_at(0, new) is old
        assert bag.get(0) is new

    def test_out_of_range_get(self) -> None:
        bag = Bag(2)
        assert bag.get(-1) is None
        assert bag.get(2) is None

    def test_each_occupied_slot_holds_one(self) -> None:
        bag = Bag(4)
        bag.add(_item(), 3)
        for stack in bag.slots:
            assert (stack.count > 0) == (stack.item is not None)
            assert stack.count in (0, 1)

    def test_template_helpers(self) -> None:
        bag = Bag(6)
        bag.add(_item("wolf_pelt"), 3)
        bag.add(_item("iron_helm"))
        assert bag.count_of("wolf_pelt") == 3
        assert bag.has_at_least("wolf_pelt", 3)
        assert not bag.has_at_least("wolf_pelt", 4)

        calls = _counter(bag.changed)
        assert bag.remove_items("wolf_pelt", 2) == 2
        assert bag.count_of("wolf_pelt") == 1
        assert calls == [1]
        assert bag.remove_items("missing", 1) == 0
        assert calls == [1]

    def test_restore_pads_and_truncates(self) -> None:
        bag = Bag(2)
        bag.restore(4, [ItemStack(_item(), 1)])
        assert bag.capacity == 4
        assert len(bag.slots) == 4
        assert bag.get(0) is not None

        bag.restore(1, [ItemStack(), ItemStack(_item(), 1)])
        assert bag.capacity == 1
        assert bag.get(0) is None


# ── EquipmentSet ──────────────────────────────────────────────


class TestEquipmentSet:
    def test_ten_slots_start_empty(self) -> None:
        equipment = EquipmentSet()
        slots = equipment.items()
        assert len(slots) == 10
        assert all(item is None for _, item in slots)

    def test_swap_returns_previous(self) -> None:
        equipment = EquipmentSet()
        first, second = _item(), _item()
        assert equipment.swap(EquipSlot.HEAD, first) is None
        assert equipment.swap(EquipSlot.HEAD, second) is first
        assert equipment.get(EquipSlot.HEAD) is second

    def test_unequip(self) -> None:
        equipment = EquipmentSet()
        item = _item()
        equipment.swap(EquipSlot.HEAD, item)
        calls = _counter(equipment.changed)
        assert equipment.unequip(EquipSlot.HEAD) is item
        assert equipment.get(EquipSlot.HEAD) is None
        assert calls == [1]

    def test_first_empty_upgrade_slot(self) -> None:
        equipment = EquipmentSet()
        assert equipment.first_empty_upgrade_slot() == EquipSlot.UPGRADE1
        equipment.swap(EquipSlot.UPGRADE1, _item())
        equipment.swap(EquipSlot.UPGRADE3, _item())
        assert equipment.first_empty_upgrade_slot() == EquipSlot.UPGRADE2
        for slot in UPGRADE_SLOTS:
            equipment.swap(slot, _item())
        assert equipment.first_empty_upgrade_slot() is None

    def test_total_bonuses(self) -> None:
        equipment = EquipmentSet()
        equipment.swap(EquipSlot.HEAD, _item(bonus_muscles=3, bonus_toughness=5))
        equipment.swap(EquipSlot.NECK, _item(bonus_iq=2, bonus_crit=4, bonus_toughness=1))
        totals = equipment.total_bonuses()
        assert (totals.muscles, totals.iq, totals.crit, totals.toughness) == (3, 2, 4, 6)

    def test_restore_clears_missing_slots(self) -> None:
        equipment = EquipmentSet()
        equipment.swap(EquipSlot.HEAD, _item())
        neck = _item()
        equipment.restore({EquipSlot.NECK: neck})
        assert equipment.get(EquipSlot.HEAD) is None
        assert equipment.get(EquipSlot.NECK) is neck

    def test_slot_rules(self) -> None:
        helm = ItemTemplate(template_id="helm", base_name="Helm", equip_slot=EquipSlot.HEAD)
        stone = ItemTemplate(
            template_id="stone", base_name="Stone", category=ItemCategory.UPGRADE
        )
        pelt = ItemTemplate(template_id="pelt", base_name="Pelt", equippable=False)
        assert is_upgrade_slot(EquipSlot.UPGRADE4)
        assert not is_upgrade_slot(EquipSlot.WEAPON)
        assert slot_accepts(EquipSlot.HEAD, helm)
        assert not slot_accepts(EquipSlot.NECK, helm)
        assert all(slot_accepts(slot, stone) for slot in UPGRADE_SLOTS)
        assert not slot_accepts(EquipSlot.HEAD, stone)
        assert not slot_accepts(EquipSlot.HEAD, pelt)
        assert not slot_accepts(EquipSlot.HEAD, None)


# ── Wallet ────────────────────────────────────────────────────


class TestWallet:
    def test_add_and_spend_sequence(self) -> None:
        wallet = Wallet()
        wallet.add(5)
        assert wallet.spend(10) is False
        assert wallet.amount == 5
        wallet.add(10)
        assert wallet.spend(10) is True
        assert wallet.amount == 5

    def test_never_negative(self) -> None:
        wallet = Wallet(3)
        wallet.add(-10)
        assert wallet.amount == 0
        assert Wallet(-4).amount == 0

    def test_add_without_change_does_not_emit(self) -> None:
        wallet = Wallet(0)
        calls = _counter(wallet.changed)
        wallet.add(0)
        wallet.add(-3)
        assert wallet.amount == 0
        assert calls == []
        wallet.add(2)
        assert calls == [1]

    def test_spend_non_positive_succeeds_silently(self) -> None:
        wallet = Wallet(3)
        calls = _counter(wallet.changed)
        assert wallet.spend(0) is True
        assert wallet.spend(-2) is True
        assert wallet.amount == 3
        assert calls == []

    def test_failed_spend_does_not_emit(self) -> None:
        wallet = Wallet(1)
        calls = _counter(wallet.changed)
        wallet.spend(5)
        assert calls == []
