from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.data.draft_schedule import ScheduleStep, validate_limits
from app.models.draft import DraftPhase, PlayerSlot
from app.models.draft_action import ActionType
from app.services.draft_engine import DraftState, decks_chosen, next_step


def _check_character_ids(v: Optional[list[str]]) -> Optional[list[str]]:
    if v is None:
        return v
    if any(not c for c in v):
        raise ValueError("character lists cannot contain empty ids")
    if len(set(v)) != len(v):
        raise ValueError("character lists cannot contain duplicate ids")
    return v


class DraftCreate(BaseModel):
    player2_id: Optional[int] = None
    character_pool: Optional[list[str]] = None
    # The creator's own deck
    player1_pool: Optional[list[str]] = None
    max_picks: Optional[int] = Field(default=None, ge=1, le=20)
    max_bans: Optional[int] = Field(default=None, ge=0, le=10)
    max_prebans: Optional[int] = Field(default=None, ge=0, le=10)

    @field_validator("character_pool", "player1_pool")
    @classmethod
    def validate_character_ids(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _check_character_ids(v)

    @model_validator(mode="after")
    def validate_schedule(self) -> "DraftCreate":
        # Only checked when every limit is given; partial overrides are checked
        # against the configured defaults by the service.
        if None not in (self.max_picks, self.max_bans, self.max_prebans):
            validate_limits(self.max_picks, self.max_bans, self.max_prebans)
        return self


class JoinDraft(BaseModel):
    pool: Optional[list[str]] = None

    @field_validator("pool")
    @classmethod
    def validate_pool(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _check_character_ids(v)


class JoinByCode(JoinDraft):
    invite_code: str = Field(min_length=1, max_length=16)


class PoolUpdate(BaseModel):
    pool: list[str] = Field(min_length=1)

    @field_validator("pool")
    @classmethod
    def validate_pool(cls, v: list[str]) -> list[str]:
        return _check_character_ids(v)


class DraftActionRequest(BaseModel):
    character_id: str = Field(min_length=1, max_length=100)
    # Turn the client saw when it submitted; a mismatch means its view is stale
    expected_turn: Optional[PlayerSlot] = None


class DraftPlayerResponse(BaseModel):
    id: Optional[int]
    name: str
    bans: list[str]
    pool: Optional[list[str]] = None

    model_config = {"from_attributes": True}


class PicksResponse(BaseModel):
    player1: list[str]
    player2: list[str]


class ScheduleStepResponse(BaseModel):
    step: int
    slot: int
    phase: DraftPhase
    player: PlayerSlot
    action: ActionType

    @classmethod
    def from_step(cls, step: ScheduleStep) -> "ScheduleStepResponse":
        return cls(
            step=step.index + 1,
            slot=step.slot,
            phase=step.phase,
            player=step.player,
            action=step.action,
        )


class DraftResponse(BaseModel):
    id: str
    invite_code: str
    phase: DraftPhase
    turn: PlayerSlot
    player1: DraftPlayerResponse
    player2: DraftPlayerResponse
    prebans: list[str]
    picks: PicksResponse
    current_pick: int
    max_picks: int
    max_bans: int
    max_prebans: int
    completed: bool
    winner: Optional[PlayerSlot]
    character_pool: Optional[list[str]]
    version: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    decks_chosen: bool = False
    next_action: Optional[ScheduleStepResponse] = None

    @classmethod
    def from_state(cls, state: DraftState) -> "DraftResponse":
        step = next_step(state)
        return cls(
            id=state.id,
            invite_code=state.invite_code,
            phase=state.phase,
            turn=state.turn,
            player1=DraftPlayerResponse.model_validate(state.player1),
            player2=DraftPlayerResponse.model_validate(state.player2),
            prebans=state.prebans,
            picks=PicksResponse(
                player1=state.picks[PlayerSlot.player1],
                player2=state.picks[PlayerSlot.player2],
            ),
            current_pick=state.current_pick,
            max_picks=state.max_picks,
            max_bans=state.max_bans,
            max_prebans=state.max_prebans,
            completed=state.completed,
            winner=state.winner,
            character_pool=state.character_pool,
            version=state.version,
            created_at=state.created_at,
            updated_at=state.updated_at,
            decks_chosen=decks_chosen(state),
            next_action=ScheduleStepResponse.from_step(step) if step else None,
        )


class DraftActionResponse(BaseModel):
    id: int
    draft_id: str
    step: int
    user_id: int
    player_slot: PlayerSlot
    action_type: ActionType
    phase: DraftPhase
    character_id: str
    timestamp: datetime

    model_config = {"from_attributes": True}


class BoardSlotResponse(BaseModel):
    number: int
    player: PlayerSlot
    action: ActionType
    phase: DraftPhase
    character_id: Optional[str]
    is_current: bool

    model_config = {"from_attributes": True}