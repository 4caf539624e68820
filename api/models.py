"""Pydantic request/response models for the API."""

from typing import Any

from pydantic import BaseModel, Field

from game.engine import get_pending_players, is_game_over
from game.rules import Verdict
from game.state import (
    EndingPhase,
    GameState,
    NightPhase,
    NightPrompt,
    Option,
    Player,
    TrialPhase,
    VotingPhase,
)

# Validation constants (no magic numbers in validation)
MAX_PLAYER_NAME_LENGTH = 50
MAX_MEMBER_ID_LENGTH = 64


class MemberRequest(BaseModel):
    """Body for creating or joining a lobby."""

    member_id: str = Field(..., min_length=1, max_length=MAX_MEMBER_ID_LENGTH)
    name: str = Field(..., min_length=1, max_length=MAX_PLAYER_NAME_LENGTH)


class MemberIdRequest(BaseModel):
    """Body identifying the acting lobby member (quit, start)."""

    member_id: str = Field(..., min_length=1, max_length=MAX_MEMBER_ID_LENGTH)


class NightActionRequest(BaseModel):
    player_id: str
    target_id: str | None = Field(default=None, description="Kill target id or 'no_target'; omit for civilians")


class VoteRequest(BaseModel):
    player_id: str
    option_indexes: list[int] = Field(..., min_length=1, description="Indexes into GET /vote-options; several allowed")


class VerdictRequest(BaseModel):
    player_id: str
    verdict: Verdict


class ConnectionRequest(BaseModel):
    player_id: str
    connected: bool


class MessageHandlesBody(BaseModel):
    """Opaque transport handles (player id -> message handle), stored unchanged."""

    handles: dict[str, Any] = Field(default_factory=dict)


class StandInRequest(BaseModel):
    player_ids: list[str] | None = Field(
        default=None,
        description="Pending players to act for; defaults to every pending disconnected player",
    )


class MemberPublic(BaseModel):
    id: str
    name: str


class LobbyResponse(BaseModel):
    lobby_id: int
    host_id: str
    members: list[MemberPublic]


class OptionPublic(BaseModel):
    target_id: str
    label: str


class NightPromptResponse(BaseModel):
    player_id: str
    text: str
    options: list[OptionPublic]


class VerdictOptionPublic(BaseModel):
    value: str
    label: str


class PlayerPublic(BaseModel):
    """Player as shown to clients: role only revealed when dead, to themselves, or after the game."""

    id: str
    name: str
    alive: bool
    connected: bool
    role: str | None = Field(default=None)


class GameStateResponse(BaseModel):
    """Public game state for GET /games/{id}."""

    game_id: str
    players: list[PlayerPublic]
    phase: str
    round_index: int
    transition_message: str
    winner: str | None = Field(default=None, description="Mafia or Civilians when game over")
    vote_options: list[OptionPublic] = Field(default_factory=list, description="Set during voting")
    defendant_id: str | None = Field(default=None, description="Set during a trial")
    pending_player_ids: list[str] = Field(default_factory=list, description="Players the phase is waiting for")


def option_to_public(option: Option) -> OptionPublic:
    return OptionPublic(target_id=option.target_id, label=option.label)


def night_prompt_to_public(player_id: str, prompt: NightPrompt) -> NightPromptResponse:
    return NightPromptResponse(
        player_id=player_id,
        text=prompt.text,
        options=[option_to_public(o) for o in prompt.options],
    )


def player_to_public(player: Player, reveal: bool = False) -> PlayerPublic:
    return PlayerPublic(
        id=player.id,
        name=player.name,
        alive=player.alive,
        connected=player.connected,
        role=player.role.value if (reveal or not player.alive) else None,
    )


def verdict_to_public(verdict: Verdict) -> VerdictOptionPublic:
    return VerdictOptionPublic(value=verdict.value, label=verdict.label)


def game_state_to_public(state: GameState, viewer_id: str | None = None) -> GameStateResponse:
    """Build public response from GameState; hide roles of living players except the viewer's own."""
    game_over = is_game_over(state)
    players_public = [
        player_to_public(p, reveal=game_over or p.id == viewer_id) for p in state.players
    ]
    phase = state.phase
    winner = phase.winner.value if isinstance(phase, EndingPhase) and phase.winner else None
    vote_options = [option_to_public(o) for o in phase.options] if isinstance(phase, VotingPhase) else []
    defendant_id = phase.defendant_id if isinstance(phase, TrialPhase) else None
    # At night only mafia can be pending, so the list would expose them
    pending_ids = [] if isinstance(phase, NightPhase) else [p.id for p in get_pending_players(state)]
    return GameStateResponse(
        game_id=state.game_id,
        players=players_public,
        phase=phase.kind,
        round_index=state.round_index,
        transition_message=state.transition_message,
        winner=winner,
        vote_options=vote_options,
        defendant_id=defendant_id,
        pending_player_ids=pending_ids,
    )
