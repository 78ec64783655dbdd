"""이벤트 유형 상수

컨테이너 "changed" 브리지 + 이동 트랜잭션 + 전리품 수명.
"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # 컨테이너 변경 (페이로드: player_id만 - 리스너가 상태를 다시 읽는다)
    BAG_CHANGED = "bag_changed"
    EQUIPMENT_CHANGED = "equipment_changed"
    WALLET_CHANGED = "wallet_changed"

    # transfer
    EQUIP_DENIED = "equip_denied"
    DRAG_STARTED = "drag_started"
    ITEM_DESTROYED = "item_destroyed"

    # loot
    LOOT_SPAWNED = "loot_spawned"
    LOOT_DEPLETED = "loot_depleted"
    LOOT_EXPIRED = "loot_expired"
    ITEM_LOOTED = "item_looted"  # 퀘스트 수집 진행용
