"""Engine package - game lifecycle components."""

from .errors import (
    GameError,
    ProtocolViolation,
    GameEnded,
    GameNotStarted,
    NotYourTurn,
    ReadyUpClosed,
    AlreadyReady,
    UnknownPlayer,
    RuleRejection,
    MoveRejected,
    ReadyUpRejected,
    EndGame,
    RestartRound,
    GameFlowError,
    RoomError,
)
from .turn_order import PlayerOrder, TurnOrderPolicy
from .rule_set import RuleSet, RuleSetCapabilities
from .host import GameHost
from .game import GameController

__all__ = [
    "GameError",
    "ProtocolViolation",
    "GameEnded",
    "GameNotStarted",
    "NotYourTurn",
    "ReadyUpClosed",
    "AlreadyReady",
    "UnknownPlayer",
    "RuleRejection",
    "MoveRejected",
    "ReadyUpRejected",
    "EndGame",
    "RestartRound",
    "GameFlowError",
    "RoomError",
    "PlayerOrder",
    "TurnOrderPolicy",
    "RuleSet",
    "RuleSetCapabilities",
    "GameHost",
    "GameController",
]
