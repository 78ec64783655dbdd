"""등급 드롭 테이블 - 레벨 게이트 + 선형 보간 가중치"""

import logging
import random
from typing import Optional

from src.core.item.models import MAX_ITEM_LEVEL, Rarity

logger = logging.getLogger(__name__)

# === 등급별 최소 아이템 레벨 ===
RARITY_LEVEL_GATES: dict[Rarity, int] = {
    Rarity.POOR: 1,
    Rarity.COMMON: 1,
    Rarity.UNCOMMON: 3,
    Rarity.RARE: 7,
    Rarity.EPIC: 12,
    Rarity.LEGENDARY: 20,
}

# === 가중치 공식: base * (offset + slope * t) ===
RARITY_WEIGHT_FORMULAS: dict[Rarity, tuple[float, float, float]] = {
    Rarity.POOR: (25.0, 1.0, -0.6),  # 레벨이 오를수록 감소
    Rarity.COMMON: (55.0, 1.0, -0.3),  # 완만히 감소
    Rarity.UNCOMMON: (15.0, 0.5, 0.5),  # 증가
    Rarity.RARE: (4.0, 0.3, 1.7),
    Rarity.EPIC: (0.9, 0.1, 3.0),
    Rarity.LEGENDARY: (0.1, 0.05, 4.0),  # 극히 드묾, 하지만 스케일
}


def level_progress(item_level: int) -> float:
    """t = item_level / 30, [0, 1] 클램프"""
    return max(0.0, min(1.0, item_level / MAX_ITEM_LEVEL))


def rarity_weights(item_level: int) -> dict[Rarity, float]:
    """게이트 적용 후 가중치. 순서 = Rarity 정의 순서."""
    t = level_progress(item_level)
    weights: dict[Rarity, float] = {}
    for rarity in Rarity:
        base, offset, slope = RARITY_WEIGHT_FORMULAS[rarity]
        if item_level < RARITY_LEVEL_GATES[rarity]:
            weights[rarity] = 0.0
        else:
            weights[rarity] = base * (offset + slope * t)
    return weights


def roll_rarity(item_level: int, rng: Optional[random.Random] = None) -> Rarity:
    """[0, 합계) 균등 추첨 후 누적 가중치 순회. 합계 0이면 Common."""
    rng = rng or random
    weights = rarity_weights(item_level)
    total = sum(weights.values())
    if total <= 0:
        return Rarity.COMMON

    pick = rng.random() * total
    running = 0.0
    for rarity, weight in weights.items():
        running += weight
        if weight > 0 and pick < running:
            return rarity

    # 부동소수점 오차로 끝까지 간 경우: 가중치가 있는 마지막 등급
    for rarity in reversed(list(weights)):
        if weights[rarity] > 0:
            return rarity
    return Rarity.COMMON
