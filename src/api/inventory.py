"""Inventory API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    ActionResultResponse,
    BagSlotView,
    ConfirmRequest,
    CurrencyRequest,
    DragBeginRequest,
    DragUpdateRequest,
    DropRequest,
    EquipRequest,
    EquipSlotView,
    ErrorResponse,
    ExchangeRequest,
    GrantItemRequest,
    InventoryStateResponse,
    ItemView,
    LevelUpRequest,
    OpenSessionRequest,
    SpendRequest,
    StatsView,
    UnequipRequest,
)
from src.core.item.models import ItemInstance
from src.core.item.transfer import EquipResult
from src.core.logging import get_logger
from src.services.inventory_service import InventoryService, PlayerSession

logger = get_logger(__name__)

router = APIRouter(prefix="/inventory", tags=["inventory"])

NOT_FOUND = {404: {"model": ErrorResponse}}


def get_inventory_service(request: Request) -> InventoryService:
    """InventoryService 인스턴스 반환 (의존성 주입)"""
    service: InventoryService = request.app.state.inventory_service
    return service


def build_item_view(item: Optional[ItemInstance]) -> Optional[ItemView]:
    """ItemInstance를 ItemView로 변환"""
    if item is None:
        return None
    return ItemView(
        template_id=item.template_id,
        name=item.display_name,
        item_level=item.item_level,
        required_level=item.required_level,
        rarity=item.rarity,
        affix=item.affix,
        muscles=item.bonus_muscles,
        iq=item.bonus_iq,
        crit=item.bonus_crit,
        toughness=item.bonus_toughness,
        value=item.value,
    )


def _build_state(session: PlayerSession) -> InventoryStateResponse:
    stats = session.stats
    return InventoryStateResponse(
        player_id=session.player_id,
        capacity=session.bag.capacity,
        bag=[
            BagSlotView(index=i, item=build_item_view(stack.item))
            for i, stack in enumerate(session.bag.slots)
        ],
        equipment=[
            EquipSlotView(slot=slot, item=build_item_view(item))
            for slot, item in session.equipment.items()
        ],
        wallet=session.wallet.amount,
        stats=StatsView(
            level=stats.level,
            muscles=stats.muscles,
            iq=stats.iq,
            toughness=stats.toughness,
            crit_chance=stats.crit_chance,
        ),
        drag_state=session.coordinator.state.value,
        pending_confirmation=session.prompt.message,
    )


def _session_or_404(service: InventoryService, player_id: str) -> PlayerSession:
    try:
        return service.get_session(player_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Player not found: {player_id}")


# === 세션 ===


@router.post("/{player_id}/open", response_model=InventoryStateResponse)
def open_session(
    player_id: str,
    request: OpenSessionRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> InventoryStateResponse:
    """인벤토리 세션 열기 (이미 열려 있으면 현재 상태)"""
    session = service.open_session(player_id, level=request.level)
    return _build_state(session)


@router.get(
    "/{player_id}", response_model=InventoryStateResponse, responses=NOT_FOUND
)
def get_inventory(
    player_id: str,
    service: InventoryService = Depends(get_inventory_service),
) -> InventoryStateResponse:
    return _build_state(_session_or_404(service, player_id))


# === 지급 / 지갑 / 레벨 ===


@router.post(
    "/{player_id}/grant", response_model=ActionResultResponse, responses=NOT_FOUND
)
def grant_item(
    player_id: str,
    request: GrantItemRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    """
    아이템 지급

    원형으로 아이템을 롤링해 가방에 넣습니다. 가방이 가득 차면 success=False.
    """
    _session_or_404(service, player_id)
    try:
        item = service.grant_item(
            player_id, request.template_id, request.item_level, request.amount
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if item is None:
        return ActionResultResponse(success=False, message="Bag is full")
    return ActionResultResponse(success=True, result=item.display_name)


@router.post(
    "/{player_id}/currency", response_model=ActionResultResponse, responses=NOT_FOUND
)
def add_currency(
    player_id: str,
    request: CurrencyRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    _session_or_404(service, player_id)
    amount = service.add_currency(player_id, request.amount)
    return ActionResultResponse(success=True, amount=amount)


@router.post(
    "/{player_id}/spend", response_model=ActionResultResponse, responses=NOT_FOUND
)
def spend_currency(
    player_id: str,
    request: SpendRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    session = _session_or_404(service, player_id)
    ok = service.spend_currency(player_id, request.amount)
    return ActionResultResponse(
        success=ok,
        amount=session.wallet.amount,
        message=None if ok else "Not enough currency",
    )


@router.post(
    "/{player_id}/level-up", response_model=InventoryStateResponse, responses=NOT_FOUND
)
def level_up(
    player_id: str,
    request: LevelUpRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> InventoryStateResponse:
    session = _session_or_404(service, player_id)
    service.level_up(player_id, muscles=request.muscles, iq=request.iq)
    return _build_state(session)


@router.post(
    "/{player_id}/exchange", response_model=ActionResultResponse, responses=NOT_FOUND
)
def exchange(
    player_id: str,
    request: ExchangeRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    _session_or_404(service, player_id)
    try:
        ok = service.exchange(
            player_id, request.required_id, request.result_id, request.amount
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ActionResultResponse(success=ok)


# === 장착 ===


@router.post(
    "/{player_id}/equip", response_model=ActionResultResponse, responses=NOT_FOUND
)
def equip(
    player_id: str,
    request: EquipRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    """
    가방 → 장비

    이전 점유자는 같은 가방 슬롯으로 돌아갑니다.
    """
    _session_or_404(service, player_id)
    result = service.equip(player_id, request.bag_index)
    return ActionResultResponse(
        success=result == EquipResult.EQUIPPED, result=result.value
    )


@router.post(
    "/{player_id}/unequip", response_model=ActionResultResponse, responses=NOT_FOUND
)
def unequip(
    player_id: str,
    request: UnequipRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    _session_or_404(service, player_id)
    return ActionResultResponse(success=service.unequip(player_id, request.slot))


# === 드래그 ===


@router.post(
    "/{player_id}/drag/begin", response_model=ActionResultResponse, responses=NOT_FOUND
)
def begin_drag(
    player_id: str,
    request: DragBeginRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    _session_or_404(service, player_id)
    try:
        origin = service.build_origin(
            request.kind, index=request.index, slot=request.slot, loot_id=request.loot_id
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Loot not found: {request.loot_id}")
    return ActionResultResponse(success=service.begin_drag(player_id, origin))


@router.post(
    "/{player_id}/drag/update", response_model=ActionResultResponse, responses=NOT_FOUND
)
def update_drag(
    player_id: str,
    request: DragUpdateRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    _session_or_404(service, player_id)
    return ActionResultResponse(success=service.update_drag(player_id, request.x, request.y))


@router.post(
    "/{player_id}/drag/drop", response_model=ActionResultResponse, responses=NOT_FOUND
)
def drop(
    player_id: str,
    request: DropRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    _session_or_404(service, player_id)
    if request.target == "bag":
        if request.index is None:
            raise HTTPException(status_code=400, detail="Bag drop requires an index")
        ok = service.drop_on_bag(player_id, request.index)
    else:
        if request.slot is None:
            raise HTTPException(status_code=400, detail="Equipment drop requires a slot")
        ok = service.drop_on_equipment(player_id, request.slot)
    return ActionResultResponse(success=ok)


@router.post(
    "/{player_id}/drag/end", response_model=ActionResultResponse, responses=NOT_FOUND
)
def end_drag(
    player_id: str,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    """
    대상 밖 드롭

    가방에서 시작한 드래그면 파괴 확인 메시지를 돌려줍니다.
    """
    _session_or_404(service, player_id)
    message = service.end_drag(player_id)
    return ActionResultResponse(success=True, message=message)


@router.post(
    "/{player_id}/drag/cancel", response_model=ActionResultResponse, responses=NOT_FOUND
)
def cancel_drag(
    player_id: str,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    _session_or_404(service, player_id)
    service.cancel_drag(player_id)
    return ActionResultResponse(success=True)


@router.post(
    "/{player_id}/confirm", response_model=ActionResultResponse, responses=NOT_FOUND
)
def confirm(
    player_id: str,
    request: ConfirmRequest,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    _session_or_404(service, player_id)
    resolved = service.resolve_confirmation(player_id, request.accept)
    return ActionResultResponse(
        success=resolved, message=None if resolved else "Nothing to confirm"
    )


# === 저장 / 로드 ===


@router.post(
    "/{player_id}/save", response_model=ActionResultResponse, responses=NOT_FOUND
)
def save(
    player_id: str,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    _session_or_404(service, player_id)
    service.save(player_id)
    return ActionResultResponse(success=True)


@router.post(
    "/{player_id}/load", response_model=InventoryStateResponse, responses=NOT_FOUND
)
def load(
    player_id: str,
    service: InventoryService = Depends(get_inventory_service),
) -> InventoryStateResponse:
    """
    저장분 복원

    저장분이 없으면 404, 스냅샷이 깨졌으면 400.
    """
    try:
        restored = service.load(player_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"No save for: {player_id}")
    if not restored:
        raise HTTPException(status_code=400, detail=f"Could not restore save: {player_id}")
    return _build_state(service.get_session(player_id))


@router.post(
    "/{player_id}/export", response_model=ActionResultResponse, responses=NOT_FOUND
)
def export_snapshot(
    player_id: str,
    service: InventoryService = Depends(get_inventory_service),
) -> ActionResultResponse:
    """스냅샷 파일로 내보내기 (message = 파일 경로)"""
    _session_or_404(service, player_id)
    path = service.export_snapshot(player_id)
    return ActionResultResponse(success=True, message=str(path))


@router.post(
    "/{player_id}/import", response_model=InventoryStateResponse, responses=NOT_FOUND
)
def import_snapshot(
    player_id: str,
    service: InventoryService = Depends(get_inventory_service),
) -> InventoryStateResponse:
    """스냅샷 파일 복원. 파일이 없으면 404, 깨졌으면 400."""
    try:
        restored = service.import_snapshot(player_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"No snapshot file for: {player_id}")
    if not restored:
        raise HTTPException(status_code=400, detail=f"Could not restore snapshot: {player_id}")
    return _build_state(service.get_session(player_id))
