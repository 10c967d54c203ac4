"""Exceptions raised by and into the game controller.

Four families:
- ProtocolViolation: a call arrived at the wrong time (out of turn, before
  start, after end). Raised before any state change; str(exc) is the
  reason shown to the client.
- RuleRejection: a rule set refused a move or a ready-up. Rule sets may
  raise any exception for this; these classes are a convenience.
- EndGame / RestartRound: control signals raised by rule set hooks.
- GameFlowError: the round/turn loop cannot make progress.
"""

from typing import Any, Optional


class GameError(Exception):
    """Base exception for all gamenight errors."""

    pass


# ============================================================================
# Protocol violations
# ============================================================================


class ProtocolViolation(GameError):
    """A request that is not allowed in the game's current state."""

    reason = "Request not allowed."

    def __init__(self, reason: Optional[str] = None):
        super().__init__(reason or self.reason)


class GameEnded(ProtocolViolation):
    reason = "Game has ended."


class GameNotStarted(ProtocolViolation):
    reason = "Game has not started."


class NotYourTurn(ProtocolViolation):
    reason = "You are not allowed to send that right now."


class ReadyUpClosed(ProtocolViolation):
    reason = "Game has already started."


class AlreadyReady(ProtocolViolation):
    reason = "You are already ready."


class UnknownPlayer(ProtocolViolation):
    reason = "You are not playing in this game."


# ============================================================================
# Rule rejections
# ============================================================================


class RuleRejection(GameError):
    """A rule set refused a request. str(exc) is shown to the client."""

    pass


class MoveRejected(RuleRejection):
    pass


class ReadyUpRejected(RuleRejection):
    pass


# ============================================================================
# Control signals
# ============================================================================


class EndGame(GameError):
    """Raised by handle_turn_end or handle_round_end to finish the game.

    The payload is passed to handle_end, e.g. EndGame({"winner": "p1"}).
    """

    def __init__(self, payload: Any = None):
        self.payload = payload
        super().__init__(f"Game over: {payload!r}")


class RestartRound(GameError):
    """Raised by handle_round_end to replay the same round number."""

    pass


class GameFlowError(GameError):
    """The round/turn loop cannot continue (e.g. nobody can take a turn)."""

    pass


# ============================================================================
# Room errors
# ============================================================================


class RoomError(GameError):
    """A room request was refused. str(exc) is shown to the client."""

    pass
