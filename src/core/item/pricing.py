"""가격 계산 - 아이템 레벨 × 등급 배수. 최소 1."""

import logging

from src.core.item.models import ItemInstance, Rarity

logger = logging.getLogger(__name__)

BASE_VALUE_PER_LEVEL = 10  # Common 기준 레벨당 10

RARITY_MULTIPLIERS: dict[Rarity, float] = {
    Rarity.POOR: 0.5,
    Rarity.COMMON: 1.0,
    Rarity.UNCOMMON: 1.5,
    Rarity.RARE: 3.0,
    Rarity.EPIC: 7.0,
    Rarity.LEGENDARY: 20.0,
}


def calculate_value(rarity: Rarity, item_level: int) -> int:
    """value = max(1, round(10 × item_level × multiplier))"""
    mult = RARITY_MULTIPLIERS.get(rarity, 1.0)
    return max(1, round(BASE_VALUE_PER_LEVEL * item_level * mult))


def evaluate(item: ItemInstance) -> int:
    return calculate_value(item.rarity, item.item_level)
