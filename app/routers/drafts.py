from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.models.draft_action import ActionType
from app.models.user import User
from app.schemas.draft import (
    BoardSlotResponse,
    DraftActionRequest,
    DraftActionResponse,
    DraftCreate,
    DraftResponse,
    JoinByCode,
    JoinDraft,
    PoolUpdate,
    ScheduleStepResponse,
)
from app.services.auth_service import get_user_by_id
from app.services.draft_engine import slot_layout
from app.services.draft_errors import DraftError
from app.services.draft_service import (
    create_draft,
    get_draft,
    get_draft_actions,
    get_draft_by_invite_code,
    join_draft,
    join_draft_by_code,
    list_drafts_for_user,
    set_player_pool,
    submit_action,
)

router = APIRouter(prefix="/drafts", tags=["drafts"])


def _draft_http_error(e: DraftError) -> HTTPException:
    return HTTPException(
        status_code=e.status_code, detail=e.message, headers={"X-Draft-Error": e.code}
    )


async def _get_draft_or_404(db: AsyncSession, draft_id: str):
    try:
        return await get_draft(db, draft_id)
    except DraftError as e:
        raise _draft_http_error(e)


@router.post("", response_model=DraftResponse, status_code=status.HTTP_201_CREATED)
async def create_new_draft(
    body: DraftCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    player2 = None
    if body.player2_id is not None:
        player2 = await get_user_by_id(db, body.player2_id)
        if player2 is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invited player not found")
    try:
        state = await create_draft(
            db,
            creator=current_user,
            player2=player2,
            character_pool=body.character_pool,
            max_picks=body.max_picks,
            max_bans=body.max_bans,
            max_prebans=body.max_prebans,
            player1_pool=body.player1_pool,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return DraftResponse.from_state(state)


@router.get("", response_model=list[DraftResponse])
async def list_my_drafts(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Draft history of the current user, newest first."""
    drafts = await list_drafts_for_user(db, current_user.id)
    return [DraftResponse.from_state(d) for d in drafts]


@router.post("/join", response_model=DraftResponse)
async def join_with_invite_code(
    body: JoinByCode,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        state = await join_draft_by_code(db, body.invite_code, current_user, pool=body.pool)
    except DraftError as e:
        raise _draft_http_error(e)
    return DraftResponse.from_state(state)


@router.get("/code/{invite_code}", response_model=DraftResponse)
async def get_draft_by_code(
    invite_code: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        state = await get_draft_by_invite_code(db, invite_code)
    except DraftError as e:
        raise _draft_http_error(e)
    return DraftResponse.from_state(state)


@router.get("/{draft_id}", response_model=DraftResponse)
async def get_draft_info(
    draft_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Current state; clients re-fetch this after a rejection or a reconnect."""
    state = await _get_draft_or_404(db, draft_id)
    return DraftResponse.from_state(state)


@router.post("/{draft_id}/join", response_model=DraftResponse)
async def join_draft_endpoint(
    draft_id: str,
    body: Optional[JoinDraft] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        state = await join_draft(db, draft_id, current_user, pool=body.pool if body else None)
    except DraftError as e:
        raise _draft_http_error(e)
    return DraftResponse.from_state(state)


@router.put("/{draft_id}/pool", response_model=DraftResponse)
async def choose_deck(
    draft_id: str,
    body: PoolUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Choose the characters you draft from. Only allowed before the first ban."""
    try:
        state = await set_player_pool(db, draft_id, current_user, body.pool)
    except DraftError as e:
        raise _draft_http_error(e)
    return DraftResponse.from_state(state)


async def _submit(
    db: AsyncSession,
    draft_id: str,
    user: User,
    action_type: ActionType,
    body: DraftActionRequest,
) -> DraftResponse:
    try:
        state = await submit_action(
            db,
            draft_id,
            user,
            action_type,
            body.character_id,
            expected_turn=body.expected_turn,
        )
    except DraftError as e:
        raise _draft_http_error(e)
    return DraftResponse.from_state(state)


@router.post("/{draft_id}/ban", response_model=DraftResponse)
async def ban_character(
    draft_id: str,
    body: DraftActionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await _submit(db, draft_id, current_user, ActionType.ban, body)


@router.post("/{draft_id}/pick", response_model=DraftResponse)
async def pick_character(
    draft_id: str,
    body: DraftActionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await _submit(db, draft_id, current_user, ActionType.pick, body)


@router.get("/{draft_id}/actions", response_model=list[DraftActionResponse])
async def get_action_history(
    draft_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        actions = await get_draft_actions(db, draft_id)
    except DraftError as e:
        raise _draft_http_error(e)
    return actions


@router.get("/{draft_id}/slots", response_model=list[BoardSlotResponse])
async def get_board_slots(
    draft_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Numbered board slots with the character (if any) placed in each."""
    state = await _get_draft_or_404(db, draft_id)
    return [BoardSlotResponse.model_validate(s) for s in slot_layout(state)]


@router.get("/{draft_id}/schedule", response_model=list[ScheduleStepResponse])
async def get_draft_schedule(
    draft_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    state = await _get_draft_or_404(db, draft_id)
    return [ScheduleStepResponse.from_step(step) for step in state.schedule]
