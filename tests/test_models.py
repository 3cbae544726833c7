"""Unit tests for database models: User, Draft, DraftAction."""

import pytest
from sqlalchemy import select

from app.models.draft import Draft, DraftPhase, PlayerSlot
from app.models.draft_action import ActionType, DraftAction
from app.models.user import User


async def _user(db_session, name: str) -> User:
    user = User(email=f"{name}@example.com", username=name, hashed_password="pw")
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


class TestUserModel:
    async def test_create_user(self, db_session):
        user = User(email="alice@example.com", username="alice", hashed_password="hashed_pw")
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)

        assert user.id is not None
        assert user.email == "alice@example.com"
        assert user.username == "alice"
        assert user.created_at is not None

    async def test_user_email_unique(self, db_session):
        db_session.add(User(email="dup@example.com", username="dup1", hashed_password="pw"))
        await db_session.commit()
        db_session.add(User(email="dup@example.com", username="dup2", hashed_password="pw"))
        with pytest.raises(Exception):
            await db_session.commit()

    async def test_user_username_unique(self, db_session):
        db_session.add(User(email="u1@example.com", username="sameuser", hashed_password="pw"))
        await db_session.commit()
        db_session.add(User(email="u2@example.com", username="sameuser", hashed_password="pw"))
        with pytest.raises(Exception):
            await db_session.commit()


class TestDraftModel:
    async def test_create_draft_defaults(self, db_session):
        host = await _user(db_session, "host")
        draft = Draft(id="draft-1", invite_code="ABC123", player1_id=host.id, player1_name="host")
        db_session.add(draft)
        await db_session.commit()
        await db_session.refresh(draft)

        assert draft.phase == DraftPhase.preban
        assert draft.turn == PlayerSlot.player1
        assert draft.player2_id is None
        assert draft.prebans == []
        assert draft.player1_bans == []
        assert draft.player2_picks == []
        assert draft.current_pick == 0
        assert draft.max_picks == 6
        assert draft.max_bans == 1
        assert draft.max_prebans == 1
        assert draft.character_pool is None
        assert draft.player1_pool is None
        assert draft.player2_pool is None
        assert draft.completed is False
        assert draft.winner is None
        assert draft.version == 0
        assert draft.created_at is not None

    async def test_json_lists_round_trip(self, db_session):
        host = await _user(db_session, "host2")
        db_session.add(
            Draft(
                id="draft-2",
                invite_code="XYZ789",
                player1_id=host.id,
                player1_name="host2",
                prebans=["a", "b"],
                player1_picks=["c"],
                character_pool=["a", "b", "c", "d"],
            )
        )
        await db_session.commit()

        result = await db_session.execute(
            select(Draft).where(Draft.id == "draft-2").execution_options(populate_existing=True)
        )
        fetched = result.scalar_one()
        assert fetched.prebans == ["a", "b"]
        assert fetched.player1_picks == ["c"]
        assert fetched.character_pool == ["a", "b", "c", "d"]

    async def test_invite_code_unique(self, db_session):
        host = await _user(db_session, "host3")
        db_session.add(Draft(id="d-a", invite_code="SAME00", player1_id=host.id, player1_name="h"))
        await db_session.commit()
        db_session.add(Draft(id="d-b", invite_code="SAME00", player1_id=host.id, player1_name="h"))
        with pytest.raises(Exception):
            await db_session.commit()

    def test_player_slot_other(self):
        assert PlayerSlot.player1.other == PlayerSlot.player2
        assert PlayerSlot.player2.other == PlayerSlot.player1


class TestDraftActionModel:
    async def test_create_action(self, db_session):
        host = await _user(db_session, "actor")
        db_session.add(Draft(id="d-act", invite_code="ACT000", player1_id=host.id, player1_name="actor"))
        await db_session.commit()

        action = DraftAction(
            draft_id="d-act",
            step=0,
            user_id=host.id,
            player_slot=PlayerSlot.player1,
            action_type=ActionType.ban,
            phase=DraftPhase.preban,
            character_id="x",
        )
        db_session.add(action)
        await db_session.commit()
        await db_session.refresh(action)

        assert action.id is not None
        assert action.timestamp is not None
        assert action.action_type == ActionType.ban

    async def test_step_unique_per_draft(self, db_session):
        host = await _user(db_session, "actor2")
        db_session.add(Draft(id="d-dup", invite_code="DUP000", player1_id=host.id, player1_name="a"))
        await db_session.commit()

        for character in ("x", "y"):
            db_session.add(
                DraftAction(
                    draft_id="d-dup",
                    step=0,
                    user_id=host.id,
                    player_slot=PlayerSlot.player1,
                    action_type=ActionType.ban,
                    phase=DraftPhase.preban,
                    character_id=character,
                )
            )
        with pytest.raises(Exception):
            await db_session.commit()
