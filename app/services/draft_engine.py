"""Draft engine: the pick & ban state machine.

Everything here is pure.  ``apply_action`` takes a ``DraftState`` and returns
a new one (or raises a ``DraftError``); it never touches the database or the
input state.  Where the draft is in its schedule is the number of accepted
actions, so the stored ``phase``/``turn`` and the schedule always agree.

Phase order: preban -> pick -> ban -> pick -> complete.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Iterable

from app.data.draft_schedule import ScheduleStep, build_schedule
from app.models.draft import Draft, DraftPhase, PlayerSlot
from app.models.draft_action import ActionType
from app.services.draft_errors import (
    AlreadySelected,
    CharacterNotInPool,
    DraftComplete,
    NotAParticipant,
    NotYourTurn,
    WrongPhase,
)


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

def _copy(ids: list[str] | None) -> list[str] | None:
    return list(ids) if ids is not None else None


@dataclass
class DraftPlayer:
    id: int | None = None   # None until the seat is taken
    name: str = ""
    bans: list[str] = field(default_factory=list)
    pool: list[str] | None = None   # the deck this player drafts from


@dataclass
class DraftState:
    id: str
    invite_code: str
    player1: DraftPlayer
    player2: DraftPlayer
    phase: DraftPhase = DraftPhase.preban
    turn: PlayerSlot = PlayerSlot.player1
    prebans: list[str] = field(default_factory=list)
    picks: dict[PlayerSlot, list[str]] = field(
        default_factory=lambda: {PlayerSlot.player1: [], PlayerSlot.player2: []}
    )
    current_pick: int = 0
    max_picks: int = 6
    max_bans: int = 1
    max_prebans: int = 1
    completed: bool = False
    winner: PlayerSlot | None = None
    character_pool: list[str] | None = None
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def new(
        cls,
        draft_id: str,
        invite_code: str,
        player1_id: int,
        player1_name: str,
        player2_id: int | None = None,
        player2_name: str = "",
        max_picks: int = 6,
        max_bans: int = 1,
        max_prebans: int = 1,
        character_pool: list[str] | None = None,
        player1_pool: list[str] | None = None,
        player2_pool: list[str] | None = None,
        now: datetime | None = None,
    ) -> DraftState:
        schedule = build_schedule(max_picks, max_bans, max_prebans)
        now = now or datetime.now(timezone.utc)
        first = schedule[0]
        return cls(
            id=draft_id,
            invite_code=invite_code,
            player1=DraftPlayer(id=player1_id, name=player1_name, pool=_copy(player1_pool)),
            player2=DraftPlayer(id=player2_id, name=player2_name, pool=_copy(player2_pool)),
            phase=first.phase,
            turn=first.player,
            max_picks=max_picks,
            max_bans=max_bans,
            max_prebans=max_prebans,
            character_pool=_copy(character_pool),
            created_at=now,
            updated_at=now,
        )

    # ---- serialization boundary -------------------------------------------

    @classmethod
    def from_row(cls, row: Draft) -> DraftState:
        return cls(
            id=row.id,
            invite_code=row.invite_code,
            player1=DraftPlayer(
                id=row.player1_id,
                name=row.player1_name,
                bans=list(row.player1_bans or []),
                pool=_copy(row.player1_pool),
            ),
            player2=DraftPlayer(
                id=row.player2_id,
                name=row.player2_name,
                bans=list(row.player2_bans or []),
                pool=_copy(row.player2_pool),
            ),
            phase=DraftPhase(row.phase),
            turn=PlayerSlot(row.turn),
            prebans=list(row.prebans or []),
            picks={
                PlayerSlot.player1: list(row.player1_picks or []),
                PlayerSlot.player2: list(row.player2_picks or []),
            },
            current_pick=row.current_pick,
            max_picks=row.max_picks,
            max_bans=row.max_bans,
            max_prebans=row.max_prebans,
            completed=row.completed,
            winner=PlayerSlot(row.winner) if row.winner is not None else None,
            character_pool=_copy(row.character_pool),
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_row_values(self) -> dict[str, Any]:
        """Column values for the ``drafts`` table (everything but the primary key)."""
        return {
            "invite_code": self.invite_code,
            "phase": self.phase,
            "turn": self.turn,
            "player1_id": self.player1.id,
            "player1_name": self.player1.name,
            "player1_bans": list(self.player1.bans),
            "player1_picks": list(self.picks[PlayerSlot.player1]),
            "player1_pool": _copy(self.player1.pool),
            "player2_id": self.player2.id,
            "player2_name": self.player2.name,
            "player2_bans": list(self.player2.bans),
            "player2_picks": list(self.picks[PlayerSlot.player2]),
            "player2_pool": _copy(self.player2.pool),
            "prebans": list(self.prebans),
            "current_pick": self.current_pick,
            "max_picks": self.max_picks,
            "max_bans": self.max_bans,
            "max_prebans": self.max_prebans,
            "character_pool": _copy(self.character_pool),
            "completed": self.completed,
            "winner": self.winner,
            "version": self.version,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    # ---- derived views ----------------------------------------------------

    @property
    def schedule(self) -> tuple[ScheduleStep, ...]:
        return build_schedule(self.max_picks, self.max_bans, self.max_prebans)

    @property
    def step_index(self) -> int:
        """Number of accepted actions so far."""
        return (
            len(self.prebans)
            + len(self.player1.bans)
            + len(self.player2.bans)
            + len(self.picks[PlayerSlot.player1])
            + len(self.picks[PlayerSlot.player2])
        )

    def player(self, slot: PlayerSlot) -> DraftPlayer:
        return self.player1 if slot is PlayerSlot.player1 else self.player2

    def slot_of(self, user_id: int | None) -> PlayerSlot | None:
        if user_id is None:
            return None
        if self.player1.id == user_id:
            return PlayerSlot.player1
        if self.player2.id == user_id:
            return PlayerSlot.player2
        return None

    def used_characters(self) -> list[str]:
        return [
            *self.prebans,
            *self.player1.bans,
            *self.player2.bans,
            *self.picks[PlayerSlot.player1],
            *self.picks[PlayerSlot.player2],
        ]

    def is_full(self) -> bool:
        return self.player2.id is not None


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def next_step(state: DraftState) -> ScheduleStep | None:
    """The step the draft is waiting for, or None once every step is taken."""
    if state.completed:
        return None
    schedule = state.schedule
    index = state.step_index
    return schedule[index] if index < len(schedule) else None


def available(state: DraftState, candidates: Iterable[str]) -> list[str]:
    used = set(state.used_characters())
    return [c for c in candidates if c not in used]


def _validate(
    state: DraftState,
    action_type: ActionType,
    character_id: str,
    actor_id: int | None,
    enforce_pool: bool,
) -> tuple[PlayerSlot, ScheduleStep]:
    if state.completed or state.phase == DraftPhase.complete:
        raise DraftComplete()

    actor = state.slot_of(actor_id)
    if actor is None:
        raise NotAParticipant()

    if character_id in state.used_characters():
        raise AlreadySelected(f"Character '{character_id}' has already been picked or banned")

    if action_type == ActionType.ban and state.phase not in (DraftPhase.preban, DraftPhase.ban):
        raise WrongPhase(f"Bans are not allowed during the {state.phase.value} phase")
    if action_type == ActionType.pick and state.phase != DraftPhase.pick:
        raise WrongPhase(f"Picks are not allowed during the {state.phase.value} phase")

    if actor != state.turn:
        raise NotYourTurn()

    step = next_step(state)
    if step is None:
        raise DraftComplete()
    if step.action != action_type or step.player != actor or step.phase != state.phase:
        raise WrongPhase(
            f"Draft expects a {step.action.value} from {step.player.value} at step {step.index + 1}"
        )

    if enforce_pool:
        if state.character_pool is not None and character_id not in state.character_pool:
            raise CharacterNotInPool(f"Character '{character_id}' is not in this draft's pool")
        # Picks come from your own deck; bans take from your opponent's
        owner = actor if action_type == ActionType.pick else actor.other
        deck = state.player(owner).pool
        if deck is not None and character_id not in deck:
            raise CharacterNotInPool(f"Character '{character_id}' is not in {owner.value}'s deck")

    return actor, step


def apply_action(
    state: DraftState,
    action_type: ActionType,
    character_id: str,
    actor_id: int | None,
    now: datetime | None = None,
    enforce_pool: bool = True,
) -> DraftState:
    """Return the state after ``actor_id`` performs ``action_type`` on ``character_id``.

    Raises a ``DraftError`` subclass, leaving ``state`` untouched, if the action
    is not legal right now.
    """
    actor, step = _validate(state, action_type, character_id, actor_id, enforce_pool)

    nxt = copy.deepcopy(state)
    if step.phase == DraftPhase.preban:
        nxt.prebans.append(character_id)
    elif step.phase == DraftPhase.ban:
        nxt.player(actor).bans.append(character_id)
    else:
        nxt.picks[actor].append(character_id)

    nxt.turn = actor.other
    if action_type == ActionType.pick and nxt.turn == PlayerSlot.player1:
        nxt.current_pick += 1

    following = next_step(nxt)
    if following is None:
        nxt.phase = DraftPhase.complete
        nxt.completed = True
    else:
        nxt.phase = following.phase

    nxt.updated_at = now or datetime.now(timezone.utc)
    return nxt


def ban(state: DraftState, character_id: str, actor_id: int | None, **kwargs) -> DraftState:
    return apply_action(state, ActionType.ban, character_id, actor_id, **kwargs)


def pick(state: DraftState, character_id: str, actor_id: int | None, **kwargs) -> DraftState:
    return apply_action(state, ActionType.pick, character_id, actor_id, **kwargs)


def join(
    state: DraftState,
    user_id: int,
    name: str,
    pool: list[str] | None = None,
    now: datetime | None = None,
) -> DraftState:
    """Seat ``user_id`` as player2, optionally with the deck they bring.

    Participants re-joining get the state back unchanged (use ``set_pool`` to
    change a deck); anyone else is rejected once both seats are taken.
    """
    if state.slot_of(user_id) is not None:
        return state
    if state.is_full():
        raise NotAParticipant("Draft already has two players")
    if pool is not None and state.step_index > 0:
        raise WrongPhase("Decks can only be chosen before the first ban")
    return replace(
        state,
        player2=DraftPlayer(
            id=user_id,
            name=name,
            bans=list(state.player2.bans),
            pool=_copy(pool) if pool is not None else _copy(state.player2.pool),
        ),
        updated_at=now or datetime.now(timezone.utc),
    )


def set_pool(
    state: DraftState, user_id: int, pool: list[str], now: datetime | None = None
) -> DraftState:
    """Choose (or replace) the caller's deck. Only allowed before the first action."""
    slot = state.slot_of(user_id)
    if slot is None:
        raise NotAParticipant()
    if state.completed:
        raise DraftComplete()
    if state.step_index > 0:
        raise WrongPhase("Decks can only be chosen before the first ban")

    nxt = copy.deepcopy(state)
    nxt.player(slot).pool = list(pool)
    nxt.updated_at = now or datetime.now(timezone.utc)
    return nxt


def decks_chosen(state: DraftState) -> bool:
    return state.player1.pool is not None and state.player2.pool is not None


# ---------------------------------------------------------------------------
# Board layout
# ---------------------------------------------------------------------------

@dataclass
class BoardSlot:
    number: int
    player: PlayerSlot
    action: ActionType
    phase: DraftPhase
    character_id: str | None
    is_current: bool


def slot_layout(state: DraftState) -> list[BoardSlot]:
    """Map the draft onto its numbered board slots (1-based, in slot order)."""
    current = next_step(state)
    slots: list[BoardSlot] = []
    for step in state.schedule:
        if step.phase == DraftPhase.preban:
            source = state.prebans
        elif step.phase == DraftPhase.ban:
            source = state.player(step.player).bans
        else:
            source = state.picks[step.player]
        character = source[step.ordinal] if step.ordinal < len(source) else None
        slots.append(
            BoardSlot(
                number=step.slot,
                player=step.player,
                action=step.action,
                phase=step.phase,
                character_id=character,
                is_current=current is not None and current.index == step.index,
            )
        )
    slots.sort(key=lambda s: s.number)
    return slots
