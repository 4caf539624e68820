"""Pydantic AI agents that act for disconnected players."""

from pydantic_ai import Agent

from agents.models import NightActionResponse, VerdictResponse, VoteResponse
from agents.prompts import RULES_SUMMARY


# Model is passed at run_sync() so we use defer_model_check.

_night_action_agent = Agent(
    model=None,
    defer_model_check=True,
    output_type=NightActionResponse,
    system_prompt=[RULES_SUMMARY, "You are the Mafia choosing a night target by player_id."],
)

_vote_agent = Agent(
    model=None,
    defer_model_check=True,
    output_type=VoteResponse,
    system_prompt=[RULES_SUMMARY, "You are voting on who to put on trial. Reply with target_ids and reason only."],
)

_verdict_agent = Agent(
    model=None,
    defer_model_check=True,
    output_type=VerdictResponse,
    system_prompt=[RULES_SUMMARY, "You are a juror. Reply with a verdict and reason only."],
)


def get_night_action_agent() -> Agent[None, NightActionResponse]:
    return _night_action_agent


def get_vote_agent() -> Agent[None, VoteResponse]:
    return _vote_agent


def get_verdict_agent() -> Agent[None, VerdictResponse]:
    return _verdict_agent
