"""아이템 도메인 모델 (DB 무관)"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ItemCategory(str, Enum):
    CONSUMABLE = "Consumable"
    MATERIAL = "Material"
    EQUIPMENT = "Equipment"
    UPGRADE = "Upgrade"


class EquipSlot(str, Enum):
    HEAD = "Head"
    NECK = "Neck"
    RING_LEFT = "RingLeft"
    RING_RIGHT = "RingRight"
    WEAPON = "Weapon"
    TRINKET = "Trinket"
    UPGRADE1 = "Upgrade1"
    UPGRADE2 = "Upgrade2"
    UPGRADE3 = "Upgrade3"
    UPGRADE4 = "Upgrade4"


# 고정 순서 - first_empty_upgrade_slot()이 이 순서로 스캔
UPGRADE_SLOTS: tuple[EquipSlot, ...] = (
    EquipSlot.UPGRADE1,
    EquipSlot.UPGRADE2,
    EquipSlot.UPGRADE3,
    EquipSlot.UPGRADE4,
)


class Rarity(str, Enum):
    """정의 순서 = 드롭 테이블 누적 순서 (Poor → Legendary)"""

    POOR = "Poor"
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"


class AffixKind(str, Enum):
    NONE = "None"
    ATHLETE = "Athlete"
    SCHOLAR = "Scholar"
    LUCKY = "Lucky"
    POWER = "Power"
    COGNITION = "Cognition"


AFFIX_SUFFIXES: dict[AffixKind, str] = {
    AffixKind.ATHLETE: "of the Athlete",
    AffixKind.SCHOLAR: "of the Scholar",
    AffixKind.LUCKY: "of the Lucky",
    AffixKind.POWER: "of Power",
    AffixKind.COGNITION: "of Cognition",
}

MIN_ITEM_LEVEL = 1
MAX_ITEM_LEVEL = 30

UNKNOWN_ITEM_NAME = "(Unknown Item)"


@dataclass(frozen=True)
class ItemTemplate:
    """아이템 원형 - 불변. seed_items.json에서 로드.

    template_id가 비어 있으면 생성 시 자동 발급된다.
    """

    template_id: str
    base_name: str
    rarity: Rarity = Rarity.COMMON  # 기본 등급 (정적 아이템/교환 결과용)
    category: ItemCategory = ItemCategory.EQUIPMENT

    # 장착
    equippable: bool = True
    equip_slot: EquipSlot = EquipSlot.HEAD

    # frozen이므로 tuple 사용
    allowed_affixes: tuple[AffixKind, ...] = (
        AffixKind.ATHLETE,
        AffixKind.SCHOLAR,
        AffixKind.LUCKY,
        AffixKind.POWER,
        AffixKind.COGNITION,
    )

    flavor_text: str = ""

    # 정적(수제/퀘스트) 아이템 - True면 롤링하지 않음
    is_static: bool = False
    override_name: str = ""
    fixed_item_level: int = 1
    fixed_required_level: int = 1
    fixed_rarity: Rarity = Rarity.COMMON
    fixed_muscles: int = 0
    fixed_iq: int = 0
    fixed_crit: int = 0
    fixed_toughness: int = 0
    fixed_value: int = 0  # 0이면 자동 가격
    forced_affix: AffixKind = AffixKind.NONE

    def __post_init__(self) -> None:
        if not self.template_id:
            object.__setattr__(self, "template_id", uuid.uuid4().hex)

    @property
    def is_upgrade(self) -> bool:
        return self.category == ItemCategory.UPGRADE


@dataclass
class ItemInstance:
    """게임 내 아이템 개체. 생성기가 한 번 만들고, 한 번에 한 슬롯만 소유한다."""

    template: Optional[ItemTemplate]  # 로드 시 카탈로그에 없으면 None

    item_level: int = 1
    required_level: int = 1
    rarity: Rarity = Rarity.COMMON
    affix: AffixKind = AffixKind.NONE

    # 롤링된 보너스
    bonus_muscles: int = 0
    bonus_iq: int = 0
    bonus_crit: int = 0  # 크리티컬 %p
    bonus_toughness: int = 0

    value: int = 0
    custom_name: Optional[str] = None

    @property
    def template_id(self) -> Optional[str]:
        return self.template.template_id if self.template else None

    @property
    def affix_suffix(self) -> str:
        return AFFIX_SUFFIXES.get(self.affix, "")

    @property
    def display_name(self) -> str:
        if self.custom_name:
            return self.custom_name
        if self.template is None:
            return UNKNOWN_ITEM_NAME
        if not self.affix_suffix:
            return self.template.base_name
        return f"{self.template.base_name} {self.affix_suffix}"

    def stat_values(self) -> tuple[int, int, int, int]:
        """(muscles, iq, crit, toughness)"""
        return (
            self.bonus_muscles,
            self.bonus_iq,
            self.bonus_crit,
            self.bonus_toughness,
        )


@dataclass
class ItemStack:
    """컨테이너 한 칸. 비어 있으면 (None, 0)."""

    item: Optional[ItemInstance] = None
    count: int = 0

    def __post_init__(self) -> None:
        # count > 0 ⇔ item is not None
        if self.item is None or self.count <= 0:
            self.item = None
            self.count = 0

    @property
    def is_empty(self) -> bool:
        return self.item is None


@dataclass
class StatBonuses:
    """장비 합산 보너스"""

    muscles: int = 0
    iq: int = 0
    crit: int = 0
    toughness: int = 0

    def add(self, item: ItemInstance) -> None:
        self.muscles += item.bonus_muscles
        self.iq += item.bonus_iq
        self.crit += item.bonus_crit
        self.toughness += item.bonus_toughness


@dataclass
class LootProfile:
    """NPC 전리품 프로필 - loot_profiles.json에서 로드."""

    profile_id: str
    min_rolls: int = 1
    max_rolls: int = 3
    drop_chance: float = 0.60
    currency_per_level: int = 3
    currency_factor_min: float = 0.5
    currency_factor_max: float = 1.5
    level_variance: int = 2
    template_ids: list[str] = field(default_factory=list)  # 비어 있으면 카탈로그 전체
