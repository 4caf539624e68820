"""Pydantic models for structured LLM outputs of stand-in players."""

from pydantic import BaseModel, Field

from game.rules import Verdict


class NightActionResponse(BaseModel):
    """Structured response for a mafia kill choice."""

    target_id: str = Field(description="ID of the player to kill, or 'no_target' to kill nobody")
    private_reason: str | None = Field(default=None, description="Optional private reasoning, never shown")


class VoteResponse(BaseModel):
    """Structured response for a vote; several targets may be supported at once."""

    target_ids: list[str] = Field(
        description="IDs of the players to put on trial, or ['nobody'] to lynch nobody"
    )
    reason: str = Field(default="", description="Short reason (1-2 sentences)")


class VerdictResponse(BaseModel):
    """Structured response for a trial verdict."""

    verdict: Verdict = Field(description="guilty, innocent or abstain")
    reason: str = Field(default="", description="Short reason (1-2 sentences)")
