"""장비 보너스 → 캐릭터 스탯 반영

LevelProvider: Transfer Coordinator가 장착 레벨 게이트에 쓰는 타입 인터페이스.
CharacterStats: 기본 구현 (레벨업 시 on_leveled_up 발행).
StatsEquipmentBridge: 장비 변경 시 기본 스탯 + 장비 합계를 다시 적용.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from src.core.item.equipment import EquipmentSet
from src.core.signals import ChangeSignal

logger = logging.getLogger(__name__)

CRIT_POINTS_PER_CHANCE = 100.0  # 크리티컬 %p → 확률


class LevelProvider(Protocol):
    @property
    def level(self) -> int: ...


@dataclass
class CharacterStats:
    level: int = 1
    muscles: int = 1
    iq: int = 1
    toughness: int = 5
    crit_chance: float = 0.05

    stats_changed: ChangeSignal = field(
        default_factory=lambda: ChangeSignal("stats"), repr=False, compare=False
    )
    leveled_up: ChangeSignal = field(
        default_factory=lambda: ChangeSignal("leveled_up"), repr=False, compare=False
    )

    def level_up(self, muscles: int = 0, iq: int = 0) -> None:
        """레벨 +1, 강인함 +1, 크리 +1%p. 클래스별 주 스탯은 호출자가 지정."""
        self.level += 1
        self.muscles += muscles
        self.iq += iq
        self.toughness += 1
        self.crit_chance = min(1.0, self.crit_chance + 0.01)
        self.leveled_up.emit()


class StatsEquipmentBridge:
    def __init__(self, equipment: EquipmentSet, stats: CharacterStats) -> None:
        self._equipment = equipment
        self._stats = stats
        self._base = (0, 0, 0, 0.0)
        self._attached = False

    def attach(self) -> None:
        if self._attached:
            return
        self._capture_base()
        self._equipment.changed.connect(self.reapply)
        self._stats.leveled_up.connect(self._on_leveled_up)
        self._attached = True
        self.reapply()

    def detach(self) -> None:
        if not self._attached:
            return
        self._equipment.changed.disconnect(self.reapply)
        self._stats.leveled_up.disconnect(self._on_leveled_up)
        self._attached = False

    def reapply(self) -> None:
        base_muscles, base_iq, base_toughness, base_crit = self._base
        bonus = self._equipment.total_bonuses()

        self._stats.muscles = base_muscles + bonus.muscles
        self._stats.iq = base_iq + bonus.iq
        self._stats.toughness = base_toughness + bonus.toughness
        self._stats.crit_chance = max(
            0.0, min(1.0, base_crit + bonus.crit / CRIT_POINTS_PER_CHANCE)
        )
        self._stats.stats_changed.emit()

    def _capture_base(self) -> None:
        s = self._stats
        self._base = (s.muscles, s.iq, s.toughness, s.crit_chance)

    def _on_leveled_up(self) -> None:
        # 레벨업은 현재(장비 포함) 값에 가산되므로 장비분을 빼고 새 기본값으로 잡는다
        bonus = self._equipment.total_bonuses()
        s = self._stats
        self._base = (
            s.muscles - bonus.muscles,
            s.iq - bonus.iq,
            s.toughness - bonus.toughness,
            self._base[3] + (s.crit_chance - self._applied_crit()),
        )
        self.reapply()

    def _applied_crit(self) -> float:
        bonus = self._equipment.total_bonuses()
        return max(0.0, min(1.0, self._base[3] + bonus.crit / CRIT_POINTS_PER_CHANCE))
