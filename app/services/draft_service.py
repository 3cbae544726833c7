"""Draft repository: loads, creates and commits drafts, then broadcasts them.

Writes go through ``_compare_and_set``, an UPDATE guarded by the row version
(and the turn, for ban/pick actions) that was read.  If another writer got
there first, zero rows match and the caller gets ``StaleDraftState``.
"""

import logging
import secrets
import string
import uuid
from dataclasses import replace

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.draft import Draft, PlayerSlot
from app.models.draft_action import ActionType, DraftAction
from app.models.user import User
from app.services.draft_broadcaster import broadcaster
from app.services.draft_engine import DraftState, apply_action, join, set_pool
from app.services.draft_errors import DraftError, DraftNotFound, StaleDraftState

logger = logging.getLogger(__name__)

INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_invite_code(length: int | None = None) -> str:
    length = length or settings.invite_code_length
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def normalize_invite_code(code: str) -> str:
    return code.strip().upper()


async def _get_row(db: AsyncSession, draft_id: str) -> Draft:
    result = await db.execute(
        select(Draft).where(Draft.id == draft_id).execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise DraftNotFound()
    return row


async def get_draft(db: AsyncSession, draft_id: str) -> DraftState:
    return DraftState.from_row(await _get_row(db, draft_id))


async def get_draft_by_invite_code(db: AsyncSession, code: str) -> DraftState:
    result = await db.execute(
        select(Draft)
        .where(Draft.invite_code == normalize_invite_code(code))
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise DraftNotFound("No draft found for that invite code")
    return DraftState.from_row(row)


async def list_drafts_for_user(db: AsyncSession, user_id: int) -> list[DraftState]:
    result = await db.execute(
        select(Draft)
        .where(or_(Draft.player1_id == user_id, Draft.player2_id == user_id))
        .order_by(Draft.created_at.desc())
        .execution_options(populate_existing=True)
    )
    return [DraftState.from_row(row) for row in result.scalars().all()]


async def get_draft_actions(db: AsyncSession, draft_id: str) -> list[DraftAction]:
    await _get_row(db, draft_id)
    result = await db.execute(
        select(DraftAction).where(DraftAction.draft_id == draft_id).order_by(DraftAction.step)
    )
    return list(result.scalars().all())


async def create_draft(
    db: AsyncSession,
    creator: User,
    player2: User | None = None,
    character_pool: list[str] | None = None,
    max_picks: int | None = None,
    max_bans: int | None = None,
    max_prebans: int | None = None,
    player1_pool: list[str] | None = None,
) -> DraftState:
    if player2 is not None and player2.id == creator.id:
        raise ValueError("You cannot invite yourself")

    # A rollback expires every loaded instance, so read the users up front
    creator_id, creator_name = creator.id, creator.username
    player2_id = player2.id if player2 else None
    player2_name = player2.username if player2 else ""

    for attempt in range(1, settings.invite_code_attempts + 1):
        state = DraftState.new(
            draft_id=str(uuid.uuid4()),
            invite_code=generate_invite_code(),
            player1_id=creator_id,
            player1_name=creator_name,
            player2_id=player2_id,
            player2_name=player2_name,
            max_picks=max_picks if max_picks is not None else settings.default_max_picks,
            max_bans=max_bans if max_bans is not None else settings.default_max_bans,
            max_prebans=max_prebans if max_prebans is not None else settings.default_max_prebans,
            character_pool=character_pool,
            player1_pool=player1_pool,
        )
        db.add(Draft(id=state.id, **state.to_row_values()))
        try:
            await db.commit()
        except IntegrityError:
            # Invite code collided with an existing draft
            await db.rollback()
            logger.warning("Invite code collision on attempt %d, retrying", attempt)
            continue
        logger.info(
            "Draft %s created by user %s (invite code %s)", state.id, creator_id, state.invite_code
        )
        return state

    raise RuntimeError("Could not allocate a unique invite code")


async def _compare_and_set(
    db: AsyncSession,
    current: DraftState,
    nxt: DraftState,
    expected_turn: PlayerSlot | None = None,
) -> DraftState:
    """Stage the UPDATE of ``current`` to ``nxt``; caller commits."""
    committed = replace(nxt, version=current.version + 1)
    criteria = [Draft.id == current.id, Draft.version == current.version]
    if expected_turn is not None:
        criteria.append(Draft.turn == expected_turn)

    result = await db.execute(
        update(Draft)
        .where(*criteria)
        .values(**committed.to_row_values())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        logger.warning("Stale write rejected for draft %s at version %d", current.id, current.version)
        raise StaleDraftState()
    return committed


async def join_draft(
    db: AsyncSession, draft_id: str, user: User, pool: list[str] | None = None
) -> DraftState:
    state = await get_draft(db, draft_id)
    nxt = join(state, user.id, user.username, pool=pool)
    if nxt is state:
        return state

    committed = await _compare_and_set(db, state, nxt)
    await db.commit()
    logger.info("User %s joined draft %s as player2", user.id, draft_id)
    broadcaster.publish(committed)
    return committed


async def join_draft_by_code(
    db: AsyncSession, code: str, user: User, pool: list[str] | None = None
) -> DraftState:
    state = await get_draft_by_invite_code(db, code)
    return await join_draft(db, state.id, user, pool=pool)


async def set_player_pool(
    db: AsyncSession, draft_id: str, user: User, pool: list[str]
) -> DraftState:
    """Choose the caller's deck before the draft starts."""
    state = await get_draft(db, draft_id)
    nxt = set_pool(state, user.id, pool)
    committed = await _compare_and_set(db, state, nxt)
    await db.commit()
    logger.info(
        "User %s chose a %d-character deck for draft %s", user.id, len(pool), draft_id
    )
    broadcaster.publish(committed)
    return committed


async def submit_action(
    db: AsyncSession,
    draft_id: str,
    user: User,
    action_type: ActionType,
    character_id: str,
    expected_turn: PlayerSlot | None = None,
) -> DraftState:
    """Validate and commit one ban or pick as a single read-modify-write."""
    state = await get_draft(db, draft_id)
    try:
        nxt = apply_action(
            state,
            action_type,
            character_id,
            user.id,
            enforce_pool=settings.enforce_character_pool,
        )
    except DraftError as e:
        logger.warning(
            "Rejected %s of %r by user %s in draft %s: %s",
            action_type.value, character_id, user.id, draft_id, e.code,
        )
        raise

    # The client acted on a turn that has since moved on
    if expected_turn is not None and state.turn != expected_turn:
        raise StaleDraftState()

    actor = state.turn
    step = state.step_index
    committed = await _compare_and_set(db, state, nxt, expected_turn=actor)
    db.add(
        DraftAction(
            draft_id=draft_id,
            step=step,
            user_id=user.id,
            player_slot=actor,
            action_type=action_type,
            phase=state.phase,
            character_id=character_id,
        )
    )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise StaleDraftState()

    logger.info(
        "Draft %s step %d: %s %s %r (phase now %s)",
        draft_id, step + 1, actor.value, action_type.value, character_id, committed.phase.value,
    )
    broadcaster.publish(committed)
    return committed
