import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.draft import DraftPhase, PlayerSlot


class ActionType(str, enum.Enum):
    ban = "ban"
    pick = "pick"


class DraftAction(Base):
    __tablename__ = "draft_actions"
    __table_args__ = (UniqueConstraint("draft_id", "step", name="uq_draft_actions_draft_step"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    draft_id: Mapped[str] = mapped_column(ForeignKey("drafts.id"), nullable=False, index=True)
    step: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    player_slot: Mapped[PlayerSlot] = mapped_column(Enum(PlayerSlot), nullable=False)
    action_type: Mapped[ActionType] = mapped_column(Enum(ActionType), nullable=False)
    phase: Mapped[DraftPhase] = mapped_column(Enum(DraftPhase), nullable=False)
    character_id: Mapped[str] = mapped_column(String(100), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
