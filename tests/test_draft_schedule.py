"""Tests for the declarative turn-order table."""

import pytest

from app.data.draft_schedule import DEFAULT_SCHEDULE, build_schedule, mid_ban_threshold
from app.models.draft import DraftPhase, PlayerSlot
from app.models.draft_action import ActionType


class TestDefaultSchedule:
    def test_has_sixteen_steps(self):
        assert len(DEFAULT_SCHEDULE) == 16
        assert [s.index for s in DEFAULT_SCHEDULE] == list(range(16))

    def test_phase_sequence(self):
        phases = [s.phase for s in DEFAULT_SCHEDULE]
        assert phases == (
            [DraftPhase.preban] * 2
            + [DraftPhase.pick] * 6
            + [DraftPhase.ban] * 2
            + [DraftPhase.pick] * 6
        )

    def test_actions_follow_phase(self):
        for step in DEFAULT_SCHEDULE:
            expected = ActionType.pick if step.phase == DraftPhase.pick else ActionType.ban
            assert step.action == expected

    def test_players_alternate_strictly(self):
        players = [s.player for s in DEFAULT_SCHEDULE]
        for a, b in zip(players, players[1:]):
            assert a != b
        assert players[0] == PlayerSlot.player1

    def test_ban_slots(self):
        ban_slots = sorted(s.slot for s in DEFAULT_SCHEDULE if s.action == ActionType.ban)
        assert ban_slots == [1, 2, 9, 10]

    def test_pick_slots_per_player(self):
        p1 = [s.slot for s in DEFAULT_SCHEDULE if s.action == ActionType.pick and s.player == PlayerSlot.player1]
        p2 = [s.slot for s in DEFAULT_SCHEDULE if s.action == ActionType.pick and s.player == PlayerSlot.player2]
        assert p1 == [3, 5, 7, 12, 14, 16]
        assert p2 == [4, 6, 8, 11, 13, 15]

    def test_slots_are_a_permutation(self):
        assert sorted(s.slot for s in DEFAULT_SCHEDULE) == list(range(1, 17))

    def test_pick_ordinals_count_per_player(self):
        p1 = [s.ordinal for s in DEFAULT_SCHEDULE if s.action == ActionType.pick and s.player == PlayerSlot.player1]
        assert p1 == [0, 1, 2, 3, 4, 5]
        prebans = [s.ordinal for s in DEFAULT_SCHEDULE if s.phase == DraftPhase.preban]
        assert prebans == [0, 1]


class TestConfiguredSchedules:
    def test_mid_ban_threshold(self):
        assert mid_ban_threshold(6) == 3
        assert mid_ban_threshold(5) == 2
        assert mid_ban_threshold(1) == 0

    def test_more_bans(self):
        schedule = build_schedule(6, 3, 2)
        assert len(schedule) == 4 + 12 + 6
        mid = [s for s in schedule if s.phase == DraftPhase.ban]
        assert [s.player for s in mid] == [PlayerSlot.player1, PlayerSlot.player2] * 3
        assert [s.ordinal for s in mid] == [0, 0, 1, 1, 2, 2]

    def test_no_mid_bans_means_single_pick_round(self):
        schedule = build_schedule(4, 0, 1)
        assert [s.phase for s in schedule] == [DraftPhase.preban] * 2 + [DraftPhase.pick] * 8
        assert [s.slot for s in schedule] == list(range(1, 11))

    def test_no_prebans_starts_with_picks(self):
        schedule = build_schedule(6, 1, 0)
        assert schedule[0].phase == DraftPhase.pick
        assert schedule[0].player == PlayerSlot.player1

    def test_odd_max_picks(self):
        schedule = build_schedule(5, 1, 1)
        picks = [s for s in schedule if s.action == ActionType.pick]
        assert sum(1 for s in picks if s.player == PlayerSlot.player1) == 5
        assert sum(1 for s in picks if s.player == PlayerSlot.player2) == 5
        players = [s.player for s in schedule]
        for a, b in zip(players, players[1:]):
            assert a != b

    def test_phases_never_regress(self):
        order = {DraftPhase.preban: 0, DraftPhase.pick: 1, DraftPhase.ban: 2}
        schedule = build_schedule(8, 2, 2)
        seen_ban = False
        previous = 0
        for step in schedule:
            rank = order[step.phase]
            if step.phase == DraftPhase.ban:
                seen_ban = True
            if seen_ban and step.phase == DraftPhase.pick:
                rank = 3
            assert rank >= previous
            previous = rank

    @pytest.mark.parametrize(
        "max_picks,max_bans,max_prebans",
        [(0, 1, 1), (6, -1, 1), (6, 1, -1), (1, 1, 1)],
    )
    def test_invalid_limits(self, max_picks, max_bans, max_prebans):
        with pytest.raises(ValueError):
            build_schedule(max_picks, max_bans, max_prebans)
