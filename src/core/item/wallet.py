"""지갑 - 음수 불가 단일 통화 카운터. add/spend로만 변경."""

import logging

from src.core.signals import ChangeSignal

logger = logging.getLogger(__name__)


class Wallet:
    def __init__(self, amount: int = 0) -> None:
        self._amount = max(0, amount)
        self.changed = ChangeSignal("wallet")

    @property
    def amount(self) -> int:
        return self._amount

    def add(self, amount: int) -> None:
        """음수 amount는 차감, 0 아래로는 내려가지 않음. 잔고가 그대로면 알림 없음."""
        updated = max(0, self._amount + amount)
        if updated == self._amount:
            return
        self._amount = updated
        self.changed.emit()

    def spend(self, amount: int) -> bool:
        """잔고 부족이면 False (변경 없음). amount <= 0은 성공 처리."""
        if amount <= 0:
            return True
        if self._amount < amount:
            logger.info("Spend rejected: balance %d < %d", self._amount, amount)
            return False
        self._amount -= amount
        self.changed.emit()
        return True

    def restore(self, amount: int) -> None:
        self._amount = max(0, amount)
        self.changed.emit()
