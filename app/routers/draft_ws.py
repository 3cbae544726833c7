"""Realtime channel: pushes every committed state of a draft to its subscribers.

Connect to ``/drafts/{draft_id}/ws?token=<access token>``.  The first message
is always the current state, so a reconnecting client is resynchronised
without a separate fetch.  Players and spectators are treated the same.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.draft import DraftResponse
from app.services.auth_service import get_user_from_token
from app.services.draft_broadcaster import Subscription, broadcaster
from app.services.draft_errors import DraftNotFound
from app.services.draft_service import get_draft

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/drafts", tags=["drafts"])


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    async for state in subscription:
        await websocket.send_json(DraftResponse.from_state(state).model_dump(mode="json"))


async def _drain(websocket: WebSocket) -> None:
    # Client messages are ignored; this returns when the client goes away
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


@router.websocket("/{draft_id}/ws")
async def draft_updates(
    websocket: WebSocket,
    draft_id: str,
    token: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_from_token(db, token)
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Not authenticated")
        return
    user_id = user.id

    # Subscribe before reading so nothing committed in between is missed
    async with broadcaster.subscribe(draft_id) as subscription:
        try:
            state = await get_draft(db, draft_id)
        except DraftNotFound:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Draft not found")
            return
        finally:
            # Later states come from the broadcaster; don't hold a pooled
            # connection for the life of the socket
            await db.close()

        await websocket.accept()
        await websocket.send_json(DraftResponse.from_state(state).model_dump(mode="json"))
        logger.info("User %s subscribed to draft %s", user_id, draft_id)

        tasks = [
            asyncio.create_task(_forward(websocket, subscription)),
            asyncio.create_task(_drain(websocket)),
        ]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                exc = task.exception()
                if exc is not None and not isinstance(exc, WebSocketDisconnect):
                    raise exc
        finally:
            for task in tasks:
                task.cancel()
            logger.info("User %s left draft %s", user_id, draft_id)
