"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.health import router as health_router
from src.api.inventory import router as inventory_router
from src.api.loot import router as loot_router
from src.config import settings
from src.core.event_bus import EventBus
from src.core.item.registry import ItemCatalog, load_loot_profiles
from src.core.logging import get_logger, setup_logging
from src.db.database import SessionLocal, init_db
from src.services.inventory_service import InventoryService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    init_db()
    logger.info("Database tables created.")

    # 카탈로그 + 전리품 프로필
    logger.info("Loading item catalog...")
    catalog = ItemCatalog()
    catalog.load_from_json(settings.ITEM_SEED_PATH)
    loot_profiles = load_loot_profiles(settings.LOOT_PROFILE_PATH)

    # InventoryService 초기화
    logger.info("Initializing InventoryService...")
    event_bus = EventBus()
    db_session = SessionLocal()
    inventory_service = InventoryService(
        db=db_session,
        event_bus=event_bus,
        catalog=catalog,
        loot_profiles=loot_profiles,
        bag_capacity=settings.BAG_CAPACITY,
        loot_lifetime=settings.LOOT_LIFETIME_SECONDS,
        loot_max_items=settings.LOOT_MAX_ITEMS,
        save_dir=settings.SAVE_DIR,
    )
    app.state.event_bus = event_bus
    app.state.inventory_service = inventory_service
    logger.info(
        "InventoryService initialized (%d templates, %d loot profiles).",
        catalog.count(),
        len(loot_profiles),
    )

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    db_session.close()


app = FastAPI(title="Item Economy", lifespan=lifespan)

app.include_router(health_router)
app.include_router(inventory_router)
app.include_router(loot_router)
