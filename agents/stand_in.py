"""Stand-in players: submit choices for pending players who cannot act themselves.

This is caller-level policy for stalled phases. Without an LLM the stand-in
makes the neutral choice (no kill, vote for nobody, abstain). With one, the
agent picks from the legal menu and any invalid or failed answer falls back
to the neutral choice.
"""

import logging
from typing import Any, Optional

from game.engine import (
    get_night_prompts,
    get_pending_players,
    get_vote_options,
    record_night_action,
    record_verdict,
    record_vote,
)
from game.rules import NO_TARGET_ID, NOBODY_ID, Verdict
from game.state import GameState, NightPhase, Player, TrialPhase, VotingPhase

from agents.llm_config import get_model
from agents.prompts import (
    build_game_context,
    night_instructions,
    verdict_instructions,
    vote_instructions,
)
from agents.stand_in_agent import get_night_action_agent, get_verdict_agent, get_vote_agent

logger = logging.getLogger(__name__)

LLMConfig = dict[str, Any]


def choose_night_target(state: GameState, player: Player, model: Any = None) -> str:
    options = get_night_prompts(state)[player.id].options
    legal = {o.target_id for o in options}
    if model is None:
        return NO_TARGET_ID
    prompt = f"{build_game_context(state, player)}\n\n{night_instructions(options)}"
    try:
        result = get_night_action_agent().run_sync(prompt, model=model)
        if result.output and result.output.target_id in legal:
            return result.output.target_id
        logger.warning("Stand-in night target for %s not in menu; skipping kill", player.id)
    except Exception as e:
        logger.warning("Stand-in night action failed for %s: %s", player.id, e)
    return NO_TARGET_ID


def choose_vote(state: GameState, player: Player, model: Any = None) -> list[int]:
    """Return option indexes for the player's vote."""
    options = get_vote_options(state)
    index_by_id = {o.target_id: i for i, o in enumerate(options)}
    fallback = [index_by_id[NOBODY_ID]]
    if model is None:
        return fallback
    prompt = f"{build_game_context(state, player)}\n\n{vote_instructions(options)}"
    try:
        result = get_vote_agent().run_sync(prompt, model=model)
        chosen = [index_by_id[t] for t in (result.output.target_ids if result.output else []) if t in index_by_id]
        if chosen:
            return chosen
        logger.warning("Stand-in vote for %s had no valid targets; voting nobody", player.id)
    except Exception as e:
        logger.warning("Stand-in vote failed for %s: %s", player.id, e)
    return fallback


def choose_verdict(state: GameState, player: Player, model: Any = None) -> Verdict:
    if model is None:
        return Verdict.ABSTAIN
    defendant = state.get_player(state.phase.defendant_id)
    prompt = f"{build_game_context(state, player)}\n\n{verdict_instructions(defendant.name)}"
    try:
        result = get_verdict_agent().run_sync(prompt, model=model)
        if result.output:
            return result.output.verdict
    except Exception as e:
        logger.warning("Stand-in verdict failed for %s: %s", player.id, e)
    return Verdict.ABSTAIN


def fill_pending(
    state: GameState,
    player_ids: Optional[list[str]] = None,
    llm_config: Optional[LLMConfig] = None,
) -> GameState:
    """
    Submit choices for pending players. By default only disconnected players
    are covered; pass player_ids to act for specific pending players (e.g.
    after a caller-side timeout). Returns the new state; does not end the phase.
    """
    pending = get_pending_players(state)
    if player_ids is None:
        targets = [p for p in pending if not p.connected]
    else:
        wanted = set(player_ids)
        targets = [p for p in pending if p.id in wanted]
    if not targets:
        return state

    model = get_model(llm_config)
    for player in targets:
        if isinstance(state.phase, NightPhase):
            state = record_night_action(state, player.id, choose_night_target(state, player, model))
        elif isinstance(state.phase, VotingPhase):
            state = record_vote(state, player.id, choose_vote(state, player, model))
        elif isinstance(state.phase, TrialPhase):
            state = record_verdict(state, player.id, choose_verdict(state, player, model))
        logger.info("Game %s: stand-in acted for %s", state.game_id, player.id)
    return state
