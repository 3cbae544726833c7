"""Turn-order table for a two-player pick & ban draft.

The whole draft is a fixed list of steps.  With the default configuration
(1 preban each, 6 picks each, 1 mid-ban each) it reads:

  step  slot  phase    player   action
  ----  ----  -------  -------  ------
     0     1  preban   player1  ban
     1     2  preban   player2  ban
     2     3  pick     player1  pick
     3     4  pick     player2  pick
     4     5  pick     player1  pick
     5     6  pick     player2  pick
     6     7  pick     player1  pick
     7     8  pick     player2  pick
     8     9  ban      player1  ban
     9    10  ban      player2  ban
    10    12  pick     player1  pick
    11    11  pick     player2  pick
    12    14  pick     player1  pick
    13    13  pick     player2  pick
    14    16  pick     player1  pick
    15    15  pick     player2  pick

Turns alternate strictly, so every block has an even number of steps and
starts with player1.  The display slots of the second pick round are swapped
pairwise, which is how the draft board shows player2 leading that round.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from app.models.draft import DraftPhase, PlayerSlot
from app.models.draft_action import ActionType


@dataclass(frozen=True)
class ScheduleStep:
    index: int              # 0-based position in the draft
    phase: DraftPhase
    player: PlayerSlot
    action: ActionType
    ordinal: int            # position inside the list this step appends to
    slot: int               # 1-based board slot


def mid_ban_threshold(max_picks: int) -> int:
    """Picks each player makes before the mid-draft ban round."""
    return max_picks // 2


def validate_limits(max_picks: int, max_bans: int, max_prebans: int) -> None:
    if max_picks < 1:
        raise ValueError("max_picks must be at least 1")
    if max_bans < 0 or max_prebans < 0:
        raise ValueError("max_bans and max_prebans cannot be negative")
    if max_bans > 0 and mid_ban_threshold(max_picks) == 0:
        raise ValueError("A mid-draft ban round needs max_picks of at least 2")


@lru_cache(maxsize=128)
def build_schedule(max_picks: int, max_bans: int, max_prebans: int) -> tuple[ScheduleStep, ...]:
    validate_limits(max_picks, max_bans, max_prebans)

    # (phase, player, action, ordinal, second_pick_round)
    raw: list[tuple[DraftPhase, PlayerSlot, ActionType, int, bool]] = []

    for i in range(max_prebans):
        raw.append((DraftPhase.preban, PlayerSlot.player1, ActionType.ban, 2 * i, False))
        raw.append((DraftPhase.preban, PlayerSlot.player2, ActionType.ban, 2 * i + 1, False))

    threshold = mid_ban_threshold(max_picks) if max_bans > 0 else max_picks
    for i in range(threshold):
        raw.append((DraftPhase.pick, PlayerSlot.player1, ActionType.pick, i, False))
        raw.append((DraftPhase.pick, PlayerSlot.player2, ActionType.pick, i, False))

    for i in range(max_bans):
        raw.append((DraftPhase.ban, PlayerSlot.player1, ActionType.ban, i, False))
        raw.append((DraftPhase.ban, PlayerSlot.player2, ActionType.ban, i, False))

    for i in range(threshold, max_picks):
        raw.append((DraftPhase.pick, PlayerSlot.player1, ActionType.pick, i, True))
        raw.append((DraftPhase.pick, PlayerSlot.player2, ActionType.pick, i, True))

    steps: list[ScheduleStep] = []
    for index, (phase, player, action, ordinal, second_round) in enumerate(raw):
        slot = index + 1
        if second_round:
            # player1 steps sit at even offsets inside the round
            slot = slot + 1 if player is PlayerSlot.player1 else slot - 1
        steps.append(
            ScheduleStep(
                index=index,
                phase=phase,
                player=player,
                action=action,
                ordinal=ordinal,
                slot=slot,
            )
        )
    return tuple(steps)


DEFAULT_SCHEDULE = build_schedule(6, 1, 1)
