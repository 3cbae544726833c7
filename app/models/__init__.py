from app.models.base import Base  # noqa: F401
from app.models.draft import Draft, DraftPhase, PlayerSlot  # noqa: F401
from app.models.draft_action import ActionType, DraftAction  # noqa: F401
from app.models.user import User  # noqa: F401
