"""아이템 생성기 - 원형 + 레벨 → 롤링된 ItemInstance

순서:
1. 레벨 클램프 + 요구 레벨
2. 등급 추첨
3. 강인함(toughness) = 아이템 레벨 (무조건)
4. 허용 접사 중 균등 추첨
5. 접사별 스탯 예산(= 아이템 레벨) 배분
6. 등급 보정
7. 가격
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from src.core.item.level_rules import clamp_item_level, required_level_for_item_level
from src.core.item.models import AffixKind, ItemInstance, ItemTemplate, Rarity
from src.core.item.pricing import calculate_value, evaluate
from src.core.item.rarity import roll_rarity

logger = logging.getLogger(__name__)

# 단일 스탯 접사 → 필드명
SINGLE_STAT_AFFIXES: dict[AffixKind, str] = {
    AffixKind.ATHLETE: "bonus_muscles",
    AffixKind.SCHOLAR: "bonus_iq",
    AffixKind.LUCKY: "bonus_crit",
}

# 이중 스탯 접사 → (주 스탯, 보조 스탯)
DUAL_STAT_AFFIXES: dict[AffixKind, tuple[str, str]] = {
    AffixKind.POWER: ("bonus_muscles", "bonus_crit"),
    AffixKind.COGNITION: ("bonus_iq", "bonus_crit"),
}

STAT_FIELDS: tuple[str, ...] = (
    "bonus_muscles",
    "bonus_iq",
    "bonus_crit",
    "bonus_toughness",
)

# 단일 스탯 가산 보정 (Legendary는 전체 +4로 별도 처리)
RARITY_SINGLE_BONUS: dict[Rarity, int] = {
    Rarity.UNCOMMON: 1,
    Rarity.RARE: 2,
    Rarity.EPIC: 3,
}
LEGENDARY_BONUS = 4
POOR_PENALTY = 1


def create_from_template(
    template: Optional[ItemTemplate],
    item_level: int,
    rng: Optional[random.Random] = None,
) -> Optional[ItemInstance]:
    """정적 아이템이면 고정값, 아니면 랜덤 롤."""
    if template is None:
        return None
    if template.is_static:
        return build_static(template)
    return roll(template, item_level, rng)


def roll(
    template: ItemTemplate,
    requested_level: int,
    rng: Optional[random.Random] = None,
) -> ItemInstance:
    rng = rng or random
    item_level = clamp_item_level(requested_level)

    item = ItemInstance(
        template=template,
        item_level=item_level,
        required_level=required_level_for_item_level(item_level),
    )
    item.rarity = roll_rarity(item_level, rng)
    item.bonus_toughness = item_level

    if template.allowed_affixes:
        item.affix = rng.choice(template.allowed_affixes)
    allocate_budget(item, item_level, rng)

    apply_rarity_modifiers(item, rng)
    item.value = evaluate(item)

    logger.debug(
        "Rolled %s (ilvl=%d, rarity=%s, affix=%s, value=%d)",
        template.template_id,
        item.item_level,
        item.rarity.value,
        item.affix.value,
        item.value,
    )
    return item


def split_budget(budget: int, rng: Optional[random.Random] = None) -> tuple[int, int]:
    """budget을 두 양의 정수로 분할. 분할점은 [1, budget-1] 균등. budget >= 2 필요."""
    rng = rng or random
    first = rng.randint(1, budget - 1)
    return first, budget - first


def allocate_budget(
    item: ItemInstance, budget: int, rng: Optional[random.Random] = None
) -> None:
    """접사 종류에 따라 스탯 예산 배분.

    이중 스탯 접사인데 budget < 2면 분할 불가 → 주 스탯에 전부 (접사는 유지).
    """
    if item.affix in SINGLE_STAT_AFFIXES:
        setattr(item, SINGLE_STAT_AFFIXES[item.affix], budget)
        return

    if item.affix in DUAL_STAT_AFFIXES:
        primary, secondary = DUAL_STAT_AFFIXES[item.affix]
        if budget < 2:
            setattr(item, primary, budget)
            return
        first, second = split_budget(budget, rng)
        setattr(item, primary, first)
        setattr(item, secondary, second)


def apply_rarity_modifiers(
    item: ItemInstance, rng: Optional[random.Random] = None
) -> None:
    """현재 > 0인 스탯("존재하는 스탯")에 등급 보정 적용.

    Poor: 하나 -1 후 전체 0 이상 클램프 / Common: 없음
    Uncommon/Rare/Epic: 하나 +1/+2/+3 / Legendary: 전부 +4
    """
    rng = rng or random
    present = [name for name in STAT_FIELDS if getattr(item, name) > 0]
    if not present:
        return

    if item.rarity == Rarity.POOR:
        target = rng.choice(present)
        setattr(item, target, getattr(item, target) - POOR_PENALTY)
        for name in STAT_FIELDS:
            setattr(item, name, max(0, getattr(item, name)))
    elif item.rarity in RARITY_SINGLE_BONUS:
        target = rng.choice(present)
        setattr(item, target, getattr(item, target) + RARITY_SINGLE_BONUS[item.rarity])
    elif item.rarity == Rarity.LEGENDARY:
        for name in present:
            setattr(item, name, getattr(item, name) + LEGENDARY_BONUS)


def build_static(template: ItemTemplate) -> ItemInstance:
    """수제/퀘스트 아이템 - 롤링 없이 고정값 그대로."""
    custom_name = template.override_name.strip() or None
    item_level = clamp_item_level(template.fixed_item_level)

    item = ItemInstance(
        template=template,
        custom_name=custom_name,
        item_level=item_level,
        required_level=template.fixed_required_level,
        rarity=template.fixed_rarity,
        affix=template.forced_affix,
        bonus_muscles=template.fixed_muscles,
        bonus_iq=template.fixed_iq,
        bonus_crit=template.fixed_crit,
        bonus_toughness=template.fixed_toughness,
    )

    if template.fixed_value > 0:
        item.value = template.fixed_value
    else:
        item.value = calculate_value(template.fixed_rarity, item_level)
    return item
