"""Automated participants."""

from gamenight.ai.stub_bot import (
    Participant,
    StubBot,
    create_stub_bots,
)

__all__ = [
    "Participant",
    "StubBot",
    "create_stub_bots",
]
