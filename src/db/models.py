"""SQLAlchemy declarative base for all ORM models."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""


class SaveSlotModel(Base):
    """Per-player snapshot of bag, equipment and wallet.

    Each column holds the codec's versioned JSON payload as-is.
    Loot containers are transient and never stored.
    """

    __tablename__ = "save_slots"

    player_id: Mapped[str] = mapped_column(String, primary_key=True)
    bag: Mapped[dict] = mapped_column(JSON, nullable=False)
    equipment: Mapped[dict] = mapped_column(JSON, nullable=False)
    wallet: Mapped[dict] = mapped_column(JSON, nullable=False)
    character_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow, onupdate=_utcnow
    )
