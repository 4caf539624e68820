"""Game engine for Mafia."""

from game.engine import (
    new_game,
    assign_roles,
    get_winner,
    is_game_over,
    get_phase,
    get_transition_message,
    get_night_prompts,
    get_vote_options,
    get_voters,
    get_jury,
    get_verdict_options,
    get_pending_players,
    is_phase_complete,
    record_night_action,
    record_vote,
    record_verdict,
    set_connected,
    set_message_handles,
    get_message_handles,
    end_phase,
)
from game.errors import (
    GameError,
    InvalidPhase,
    InvalidTarget,
    InvalidActor,
    InsufficientPlayers,
    PhaseIncomplete,
)
from game.rules import Role, Faction, Verdict, PhaseKind
from game.state import (
    GameState,
    Player,
    Option,
    Kill,
    NightPrompt,
    NightPhase,
    VotingPhase,
    TrialPhase,
    EndingPhase,
    dump_state,
    load_state,
)
from game.tally import tally_votes, is_stalemate

__all__ = [
    "new_game",
    "assign_roles",
    "get_winner",
    "is_game_over",
    "get_phase",
    "get_transition_message",
    "get_night_prompts",
    "get_vote_options",
    "get_voters",
    "get_jury",
    "get_verdict_options",
    "get_pending_players",
    "is_phase_complete",
    "record_night_action",
    "record_vote",
    "record_verdict",
    "set_connected",
    "set_message_handles",
    "get_message_handles",
    "end_phase",
    "GameError",
    "InvalidPhase",
    "InvalidTarget",
    "InvalidActor",
    "InsufficientPlayers",
    "PhaseIncomplete",
    "Role",
    "Faction",
    "Verdict",
    "PhaseKind",
    "GameState",
    "Player",
    "Option",
    "Kill",
    "NightPrompt",
    "NightPhase",
    "VotingPhase",
    "TrialPhase",
    "EndingPhase",
    "dump_state",
    "load_state",
    "tally_votes",
    "is_stalemate",
]
