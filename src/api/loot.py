"""Loot API endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from src.api.inventory import build_item_view, get_inventory_service
from src.api.schemas import (
    ActionResultResponse,
    ErrorResponse,
    LootView,
    SpawnLootRequest,
    SweepResponse,
    TakeLootRequest,
    TakeMoneyRequest,
)
from src.core.item.loot import LootContainer
from src.core.logging import get_logger
from src.services.inventory_service import InventoryService

logger = get_logger(__name__)

router = APIRouter(prefix="/loot", tags=["loot"])

NOT_FOUND = {404: {"model": ErrorResponse}}


def _build_loot_view(loot: LootContainer) -> LootView:
    return LootView(
        loot_id=loot.loot_id,
        currency=loot.currency,
        items=[build_item_view(item) for item in loot.items],
        expires_at=loot.expires_at,
    )


def _require(service: InventoryService, player_id: str, loot_id: str) -> None:
    if not service.has_session(player_id):
        raise HTTPException(status_code=404, detail=f"Player not found: {player_id}")
    try:
        service.get_loot(loot_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Loot not found: {loot_id}")


@router.post("/spawn", response_model=LootView, responses={400: {"model": ErrorResponse}})
def spawn_loot(
    request: SpawnLootRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> LootView:
    """
    전리품 생성

    NPC 사망 시 프로필과 레벨로 통화 + 최대 3개 아이템을 굴립니다.
    """
    try:
        loot = service.spawn_loot(request.profile_id, request.npc_level)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _build_loot_view(loot)


@router.get("/{loot_id}", response_model=LootView, responses=NOT_FOUND)
def get_loot(
    loot_id: str,
    service: InventoryService = Depends(get_inventory_service),
) -> LootView:
    try:
        loot = service.get_loot(loot_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Loot not found: {loot_id}")
    return _build_loot_view(loot)


@router.post("/{loot_id}/take", response_model=ActionResultResponse, responses=NOT_FOUND)
def take_item(
    loot_id: str,
    request: TakeLootRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    """가방이 가득 차면 아이템은 시체에 남습니다."""
    _require(service, request.player_id, loot_id)
    ok = service.take_loot_item(request.player_id, loot_id, request.index)
    return ActionResultResponse(success=ok, message=None if ok else "Could not take item")


@router.post("/{loot_id}/money", response_model=ActionResultResponse, responses=NOT_FOUND)
def take_money(
    loot_id: str,
    request: TakeMoneyRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    _require(service, request.player_id, loot_id)
    amount = service.take_loot_money(request.player_id, loot_id)
    return ActionResultResponse(success=amount > 0, amount=amount)


@router.post("/sweep", response_model=SweepResponse)
def sweep(
    service: InventoryService = Depends(get_inventory_service),
) -> SweepResponse:
    return SweepResponse(expired=service.sweep_expired_loot())
