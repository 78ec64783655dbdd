"""API request/response schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from src.core.item.models import AffixKind, EquipSlot, Rarity


# === Request Schemas ===


class OpenSessionRequest(BaseModel):
    """인벤토리 세션 열기"""

    level: int = Field(1, ge=1, description="캐릭터 레벨")


class GrantItemRequest(BaseModel):
    """원형으로 아이템 생성 후 가방에 지급"""

    template_id: str = Field(..., min_length=1)
    item_level: int = Field(1, description="요청 아이템 레벨 (1~30으로 클램프)")
    amount: int = Field(1, ge=1)


class CurrencyRequest(BaseModel):
    """지갑 증감. 음수면 차감 (0 아래로 내려가지 않음)"""

    amount: int


class SpendRequest(BaseModel):
    amount: int = Field(..., ge=0)


class EquipRequest(BaseModel):
    bag_index: int = Field(..., ge=0)


class UnequipRequest(BaseModel):
    slot: EquipSlot


class LevelUpRequest(BaseModel):
    muscles: int = Field(0, ge=0)
    iq: int = Field(0, ge=0)


class ExchangeRequest(BaseModel):
    """원형 A 1개 → 원형 B n개"""

    required_id: str
    result_id: str
    amount: int = Field(1, ge=1)


class DragBeginRequest(BaseModel):
    """드래그 시작. kind에 따라 index / slot / loot_id 사용"""

    kind: Literal["bag", "equipment", "loot"]
    index: Optional[int] = None
    slot: Optional[EquipSlot] = None
    loot_id: Optional[str] = None


class DragUpdateRequest(BaseModel):
    x: float
    y: float


class DropRequest(BaseModel):
    """유효 대상 위 드롭"""

    target: Literal["bag", "equipment"]
    index: Optional[int] = None
    slot: Optional[EquipSlot] = None


class ConfirmRequest(BaseModel):
    """파괴 확인 응답"""

    accept: bool


class SpawnLootRequest(BaseModel):
    profile_id: str
    npc_level: int = Field(1, ge=1)


class TakeLootRequest(BaseModel):
    player_id: str
    index: int = Field(0, ge=0)


class TakeMoneyRequest(BaseModel):
    player_id: str


# === Response Schemas ===


class ItemView(BaseModel):
    """롤링된 아이템 표시 정보"""

    template_id: Optional[str]
    name: str
    item_level: int
    required_level: int
    rarity: Rarity
    affix: AffixKind
    muscles: int
    iq: int
    crit: int
    toughness: int
    value: int


class BagSlotView(BaseModel):
    index: int
    item: Optional[ItemView] = None


class EquipSlotView(BaseModel):
    slot: EquipSlot
    item: Optional[ItemView] = None


class StatsView(BaseModel):
    level: int
    muscles: int
    iq: int
    toughness: int
    crit_chance: float


class InventoryStateResponse(BaseModel):
    """플레이어 인벤토리 전체 상태"""

    player_id: str
    capacity: int
    bag: list[BagSlotView]
    equipment: list[EquipSlotView]
    wallet: int
    stats: StatsView
    drag_state: str
    pending_confirmation: Optional[str] = None


class ActionResultResponse(BaseModel):
    """단순 성공/실패 + 부가 정보"""

    success: bool
    result: Optional[str] = None
    message: Optional[str] = None
    amount: Optional[int] = None


class LootView(BaseModel):
    loot_id: str
    currency: int
    items: list[ItemView]
    expires_at: float


class SweepResponse(BaseModel):
    expired: list[str]


class ErrorResponse(BaseModel):
    """에러 응답"""

    success: bool = False
    error: str
    detail: Optional[str] = None
