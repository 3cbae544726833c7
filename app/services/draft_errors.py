"""Rejections raised by the draft engine and repository.

All of them are recoverable: the draft is left untouched and the client is
expected to re-fetch the current state.  They subclass ``ValueError`` so code
that already treats ``ValueError`` as "bad request" keeps doing so.
"""

from fastapi import status


class DraftError(ValueError):
    code = "DraftError"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Draft action rejected"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NotYourTurn(DraftError):
    code = "NotYourTurn"
    default_message = "It is not your turn"


class WrongPhase(DraftError):
    code = "WrongPhase"
    default_message = "That action is not allowed in the current phase"


class AlreadySelected(DraftError):
    code = "AlreadySelected"
    default_message = "Character has already been picked or banned"


class DraftComplete(DraftError):
    code = "DraftComplete"
    default_message = "Draft is already complete"


class CharacterNotInPool(DraftError):
    code = "CharacterNotInPool"
    default_message = "Character is not available in this draft"


class DraftNotFound(DraftError):
    code = "DraftNotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Draft not found"


class NotAParticipant(DraftError):
    code = "NotAParticipant"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not a participant in this draft"


class StaleDraftState(DraftError):
    """The draft changed between read and commit; another action won the race."""

    code = "StaleDraftState"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Draft was updated by another action, reload and try again"
