"""아이템 카탈로그 - 원형 JSON 로드 + 동적 등록 + id 조회"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from .models import AffixKind, EquipSlot, ItemCategory, ItemTemplate, LootProfile, Rarity

logger = logging.getLogger(__name__)


class ItemCatalog:
    """
    아이템 원형 저장소.
    서버 시작 시 한 번 로드, 런타임에는 읽기 전용.
    """

    def __init__(self) -> None:
        self._templates: dict[str, ItemTemplate] = {}

    def load_from_json(self, path: str | Path) -> int:
        """seed_items.json 로드. 반환: 로드된 수량.

        JSON 배열의 각 객체를 ItemTemplate으로 변환.
        allowed_affixes는 list → tuple 변환.
        enum 필드는 문자열 → enum 변환.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                template = template_from_dict(raw)
                self.register(template)
                count += 1
            except (KeyError, ValueError) as e:
                logger.warning(
                    "Failed to load template: %s - %s", raw.get("template_id", "?"), e
                )

        logger.info("Loaded %d templates from %s", count, path)
        return count

    def register(self, template: ItemTemplate) -> None:
        """이미 존재하는 template_id면 경고 로그 후 덮어쓴다."""
        if template.template_id in self._templates:
            logger.warning("Overwriting existing template: %s", template.template_id)
        self._templates[template.template_id] = template

    def resolve(self, template_id: Optional[str]) -> Optional[ItemTemplate]:
        """O(1) 조회. 없으면 None."""
        if not template_id:
            return None
        return self._templates.get(template_id)

    def get_all(self) -> list[ItemTemplate]:
        return list(self._templates.values())

    def count(self) -> int:
        return len(self._templates)


def template_from_dict(raw: dict) -> ItemTemplate:
    """seed JSON 한 항목 → ItemTemplate. 필수: base_name."""
    affixes = raw.get("allowed_affixes")
    kwargs: dict = {
        "template_id": raw.get("template_id", ""),
        "base_name": raw["base_name"],
        "rarity": Rarity(raw.get("rarity", Rarity.COMMON.value)),
        "category": ItemCategory(raw.get("category", ItemCategory.EQUIPMENT.value)),
        "equippable": bool(raw.get("equippable", True)),
        "equip_slot": EquipSlot(raw.get("equip_slot", EquipSlot.HEAD.value)),
        "flavor_text": raw.get("flavor_text", ""),
    }
    if affixes is not None:
        kwargs["allowed_affixes"] = tuple(AffixKind(a) for a in affixes)

    static = raw.get("static")
    if static:
        kwargs.update(
            is_static=True,
            override_name=static.get("override_name", ""),
            fixed_item_level=int(static.get("item_level", 1)),
            fixed_required_level=int(static.get("required_level", 1)),
            fixed_rarity=Rarity(static.get("rarity", Rarity.COMMON.value)),
            fixed_muscles=int(static.get("muscles", 0)),
            fixed_iq=int(static.get("iq", 0)),
            fixed_crit=int(static.get("crit", 0)),
            fixed_toughness=int(static.get("toughness", 0)),
            fixed_value=int(static.get("value", 0)),
            forced_affix=AffixKind(static.get("affix", AffixKind.NONE.value)),
        )
    return ItemTemplate(**kwargs)


def load_loot_profiles(path: str | Path) -> dict[str, LootProfile]:
    """loot_profiles.json 로드. 반환: profile_id → LootProfile."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        raw_list: list[dict] = json.load(f)

    profiles: dict[str, LootProfile] = {}
    for raw in raw_list:
        try:
            profile = LootProfile(
                profile_id=raw["profile_id"],
                min_rolls=int(raw.get("min_rolls", 1)),
                max_rolls=int(raw.get("max_rolls", 3)),
                drop_chance=float(raw.get("drop_chance", 0.6)),
                currency_per_level=int(raw.get("currency_per_level", 3)),
                currency_factor_min=float(raw.get("currency_factor_min", 0.5)),
                currency_factor_max=float(raw.get("currency_factor_max", 1.5)),
                level_variance=int(raw.get("level_variance", 2)),
                template_ids=list(raw.get("template_ids", [])),
            )
            profiles[profile.profile_id] = profile
        except (KeyError, ValueError) as e:
            logger.warning(
                "Failed to load loot profile: %s - %s", raw.get("profile_id", "?"), e
            )

    logger.info("Loaded %d loot profiles from %s", len(profiles), path)
    return profiles
