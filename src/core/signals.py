"""ChangeSignal - 컨테이너별 "changed" 옵저버 목록

페이로드 없음. 리스너는 호출 시점에 컨테이너 상태를 다시 읽는다.
emit()은 상태 갱신이 끝난 뒤, 호출자에게 제어가 돌아가기 전에 호출한다.
"""

from typing import Callable, List

from src.core.logging import get_logger

logger = get_logger(__name__)

Listener = Callable[[], None]


class ChangeSignal:
    """인자 없는 동기식 옵저버 목록

    사용 패턴:
        bag.changed.connect(bag_ui.refresh)
        bag.changed.emit()
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._listeners: List[Listener] = []

    def connect(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def disconnect(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            logger.warning(f"미등록 리스너 해제 시도: {self._name}")

    def emit(self) -> None:
        # 순회 중 connect/disconnect 대비 스냅샷
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception(f"ChangeSignal 리스너 에러: {self._name}")

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
