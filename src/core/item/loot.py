"""전리품 - NPC 프로필 기반 생성 + 수명 제한 임시 컨테이너

영속화 대상 아님. 수명이 다하면 내용물과 관계없이 폐기.
"""

from __future__ import annotations

import logging
import random
import time
import uuid
from typing import Callable, Optional

from src.core.item.affix import roll
from src.core.item.level_rules import clamp_item_level
from src.core.item.models import ItemInstance, ItemTemplate, LootProfile
from src.core.item.registry import ItemCatalog
from src.core.signals import ChangeSignal

logger = logging.getLogger(__name__)

MAX_LOOT_ITEMS = 3
DEFAULT_LOOT_LIFETIME = 20.0  # 초

Clock = Callable[[], float]


def roll_currency(
    profile: LootProfile, npc_level: int, rng: Optional[random.Random] = None
) -> int:
    """레벨 × 레벨당 통화 × [min, max] 균등 배수. 최소 0."""
    rng = rng or random
    base = max(0, npc_level) * max(0, profile.currency_per_level)
    factor = rng.uniform(profile.currency_factor_min, profile.currency_factor_max)
    return max(0, round(base * factor))


def roll_items(
    profile: LootProfile,
    npc_level: int,
    roll_count: int,
    catalog: ItemCatalog,
    rng: Optional[random.Random] = None,
) -> list[ItemInstance]:
    """roll_count번 시도, 각각 drop_chance로 채택. 아이템 레벨은 npc_level ± variance."""
    rng = rng or random
    pool = _template_pool(profile, catalog)
    if not pool:
        return []

    min_level = clamp_item_level(npc_level - profile.level_variance)
    max_level = clamp_item_level(npc_level + profile.level_variance)

    items: list[ItemInstance] = []
    for _ in range(roll_count):
        if rng.random() > profile.drop_chance:
            continue
        template = rng.choice(pool)
        item_level = rng.randint(min_level, max_level)
        items.append(roll(template, item_level, rng))
    return items


def generate_loot(
    profile: LootProfile,
    npc_level: int,
    catalog: ItemCatalog,
    rng: Optional[random.Random] = None,
    max_items: int = MAX_LOOT_ITEMS,
) -> tuple[int, list[ItemInstance]]:
    """(통화, 아이템 목록). 아이템은 최대 max_items개."""
    rng = rng or random
    currency = roll_currency(profile, npc_level, rng)
    roll_count = rng.randint(profile.min_rolls, max(profile.min_rolls, profile.max_rolls))
    items = roll_items(profile, npc_level, roll_count, catalog, rng)
    return currency, items[:max_items]


def _template_pool(profile: LootProfile, catalog: ItemCatalog) -> list[ItemTemplate]:
    if not profile.template_ids:
        return catalog.get_all()
    pool = []
    for template_id in profile.template_ids:
        template = catalog.resolve(template_id)
        if template is None:
            logger.warning(
                "Loot profile %s references unknown template: %s",
                profile.profile_id,
                template_id,
            )
            continue
        pool.append(template)
    return pool


class LootContainer:
    """시체 하나의 전리품. 통화 + 최대 3개 아이템."""

    def __init__(
        self,
        currency: int,
        items: list[ItemInstance],
        lifetime: float = DEFAULT_LOOT_LIFETIME,
        clock: Clock = time.monotonic,
        loot_id: Optional[str] = None,
        max_items: int = MAX_LOOT_ITEMS,
    ) -> None:
        self.loot_id = loot_id or uuid.uuid4().hex
        self._currency = max(0, currency)
        self._items: list[ItemInstance] = list(items[:max_items])
        self._clock = clock
        self.expires_at = clock() + lifetime
        self.changed = ChangeSignal("loot")
        # 비었을 때 소유자(시체/UI)에게 닫기 요청
        self.depleted = ChangeSignal("loot_depleted")

    @classmethod
    def spawn(
        cls,
        profile: LootProfile,
        npc_level: int,
        catalog: ItemCatalog,
        rng: Optional[random.Random] = None,
        lifetime: float = DEFAULT_LOOT_LIFETIME,
        clock: Clock = time.monotonic,
        max_items: int = MAX_LOOT_ITEMS,
    ) -> "LootContainer":
        currency, items = generate_loot(profile, npc_level, catalog, rng, max_items)
        logger.debug(
            "Spawned loot (profile=%s, lvl=%d): %d currency, %d items",
            profile.profile_id,
            npc_level,
            currency,
            len(items),
        )
        return cls(currency, items, lifetime, clock, max_items=max_items)

    @property
    def currency(self) -> int:
        return self._currency

    @property
    def items(self) -> tuple[ItemInstance, ...]:
        return tuple(self._items)

    @property
    def is_empty(self) -> bool:
        return self._currency <= 0 and not self._items

    def is_expired(self, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        return now >= self.expires_at

    def get(self, index: int) -> Optional[ItemInstance]:
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def take_item(self, index: int) -> Optional[ItemInstance]:
        if not 0 <= index < len(self._items):
            return None
        item = self._items.pop(index)
        self.changed.emit()
        return item

    def take_money(self) -> int:
        amount = self._currency
        self._currency = 0
        if amount:
            self.changed.emit()
        return amount

    def put_back(self, index: int, item: Optional[ItemInstance]) -> None:
        """범위 밖 인덱스는 맨 뒤에 삽입."""
        if item is None:
            return
        if not 0 <= index <= len(self._items):
            index = len(self._items)
        self._items.insert(index, item)
        self.changed.emit()

    def notify_if_depleted(self) -> bool:
        if self.is_empty:
            self.depleted.emit()
            return True
        return False
