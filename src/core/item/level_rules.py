"""아이템 레벨 규칙 - 레벨 클램프 + 요구 레벨 계단 함수"""

from src.core.item.models import MAX_ITEM_LEVEL, MIN_ITEM_LEVEL

# (아이템 레벨 상한, 요구 레벨) - 하한 구간 포함
REQUIRED_LEVEL_STEPS: tuple[tuple[int, int], ...] = (
    (4, 1),
    (9, 5),
    (14, 10),
    (19, 15),
)
REQUIRED_LEVEL_TOP = 30  # 20~30


def clamp_item_level(level: int) -> int:
    return max(MIN_ITEM_LEVEL, min(MAX_ITEM_LEVEL, level))


def required_level_for_item_level(item_level: int) -> int:
    """1~4 → 1, 5~9 → 5, 10~14 → 10, 15~19 → 15, 20+ → 30"""
    for upper, required in REQUIRED_LEVEL_STEPS:
        if item_level <= upper:
            return required
    return REQUIRED_LEVEL_TOP
