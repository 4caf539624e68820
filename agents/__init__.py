"""Agents: stand-in players for disconnected participants."""

from agents.stand_in import fill_pending, choose_night_target, choose_vote, choose_verdict
from agents.models import NightActionResponse, VoteResponse, VerdictResponse

__all__ = [
    "fill_pending",
    "choose_night_target",
    "choose_vote",
    "choose_verdict",
    "NightActionResponse",
    "VoteResponse",
    "VerdictResponse",
]
