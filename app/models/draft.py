import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class DraftPhase(str, enum.Enum):
    preban = "preban"
    ban = "ban"
    pick = "pick"
    complete = "complete"


class PlayerSlot(str, enum.Enum):
    player1 = "player1"
    player2 = "player2"

    @property
    def other(self) -> "PlayerSlot":
        return PlayerSlot.player2 if self is PlayerSlot.player1 else PlayerSlot.player1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Draft(Base):
    __tablename__ = "drafts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    invite_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False, index=True)
    phase: Mapped[DraftPhase] = mapped_column(
        Enum(DraftPhase), nullable=False, default=DraftPhase.preban
    )
    turn: Mapped[PlayerSlot] = mapped_column(
        Enum(PlayerSlot), nullable=False, default=PlayerSlot.player1
    )

    player1_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    player1_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    player1_bans: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    player1_picks: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    player1_pool: Mapped[list[str] | None] = mapped_column(JSON, nullable=True, default=None)

    player2_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True, default=None, index=True
    )
    player2_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    player2_bans: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    player2_picks: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    player2_pool: Mapped[list[str] | None] = mapped_column(JSON, nullable=True, default=None)

    prebans: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    current_pick: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_picks: Mapped[int] = mapped_column(Integer, nullable=False, default=6)
    max_bans: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_prebans: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    character_pool: Mapped[list[str] | None] = mapped_column(JSON, nullable=True, default=None)

    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    winner: Mapped[PlayerSlot | None] = mapped_column(
        Enum(PlayerSlot), nullable=True, default=None
    )

    # Bumped on every committed write; used for compare-and-swap updates
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
