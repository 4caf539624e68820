"""FastAPI app: lobbies, game phases and stand-ins over the Mafia engine."""

import logging
import uuid
from typing import Callable

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agents.stand_in import fill_pending
from api.config import Settings, get_settings
from api.game_store import GameStore, get_game_store
from api.lobby_store import LobbyError, LobbyMember, LobbyStore, get_lobby_store
from api.models import (
    ConnectionRequest,
    GameStateResponse,
    LobbyResponse,
    MemberIdRequest,
    MemberPublic,
    MemberRequest,
    MessageHandlesBody,
    NightActionRequest,
    NightPromptResponse,
    OptionPublic,
    PlayerPublic,
    StandInRequest,
    VerdictOptionPublic,
    VerdictRequest,
    VoteRequest,
    game_state_to_public,
    night_prompt_to_public,
    option_to_public,
    player_to_public,
    verdict_to_public,
)
from game.engine import (
    end_phase,
    get_jury,
    get_message_handles,
    get_night_prompts,
    get_verdict_options,
    get_vote_options,
    get_voters,
    is_game_over,
    is_phase_complete,
    new_game,
    record_night_action,
    record_verdict,
    record_vote,
    set_connected,
    set_message_handles,
)
from game.errors import (
    GameError,
    InsufficientPlayers,
    InvalidActor,
    InvalidPhase,
    InvalidTarget,
    PhaseIncomplete,
)
from game.state import GameState

logger = logging.getLogger(__name__)

_startup_settings = get_settings()
logging.basicConfig(level=_startup_settings.log_level)

app = FastAPI(title="Mafia Game API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_startup_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ERROR_STATUS: dict[type, int] = {
    InvalidPhase: 409,
    PhaseIncomplete: 409,
    InvalidTarget: 400,
    InvalidActor: 400,
    InsufficientPlayers: 400,
}


@app.exception_handler(GameError)
def game_error_handler(request: Request, exc: GameError) -> JSONResponse:
    status = _ERROR_STATUS.get(type(exc), 400)
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc), "error": type(exc).__name__})


@app.exception_handler(LobbyError)
def lobby_error_handler(request: Request, exc: LobbyError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc), "error": type(exc).__name__})


def _lobby_to_public(lobby) -> LobbyResponse:
    return LobbyResponse(
        lobby_id=lobby.lobby_id,
        host_id=lobby.host_id,
        members=[MemberPublic(id=m.id, name=m.name) for m in lobby.members],
    )


def _load_game(store: GameStore, game_id: str) -> GameState:
    state = store.get(game_id)
    if state is None:
        raise HTTPException(404, "Game not found")
    return state


def _apply(
    store: GameStore,
    game_id: str,
    change: Callable[[GameState], GameState],
    advance: bool = True,
) -> GameState:
    """
    Apply one change under the game's lock; when the phase is then complete,
    end it before releasing the lock so no other submission sees the gap.
    """
    _load_game(store, game_id)
    with store.lock(game_id):
        state = change(_load_game(store, game_id))
        if advance and not is_game_over(state) and is_phase_complete(state):
            state = end_phase(state)
        # Deleted while the change ran; don't bring it back
        if store.get(game_id) is None:
            raise HTTPException(404, "Game not found")
        store.put(state)
    return state


# --- Lobbies -----------------------------------------------------------------


@app.post("/lobbies", response_model=LobbyResponse, tags=["Lobbies"], summary="Create lobby")
def create_lobby(body: MemberRequest, lobbies: LobbyStore = Depends(get_lobby_store)):
    """Create a lobby; the creator becomes host."""
    lobby = lobbies.create(LobbyMember(id=body.member_id, name=body.name))
    logger.info("Lobby %s created by %s", lobby.lobby_id, body.member_id)
    return _lobby_to_public(lobby)


@app.get("/lobbies/{lobby_id}", response_model=LobbyResponse, tags=["Lobbies"], summary="Get lobby")
def get_lobby(lobby_id: int, lobbies: LobbyStore = Depends(get_lobby_store)):
    lobby = lobbies.get(lobby_id)
    if lobby is None:
        raise HTTPException(404, "Lobby not found")
    return _lobby_to_public(lobby)


@app.post("/lobbies/{lobby_id}/join", response_model=LobbyResponse, tags=["Lobbies"], summary="Join lobby")
def join_lobby(lobby_id: int, body: MemberRequest, lobbies: LobbyStore = Depends(get_lobby_store)):
    if lobbies.get(lobby_id) is None:
        raise HTTPException(404, "Lobby not found")
    lobby = lobbies.join(lobby_id, LobbyMember(id=body.member_id, name=body.name))
    return _lobby_to_public(lobby)


@app.post("/lobbies/{lobby_id}/quit", response_model=dict, tags=["Lobbies"], summary="Quit lobby")
def quit_lobby(lobby_id: int, body: MemberIdRequest, lobbies: LobbyStore = Depends(get_lobby_store)):
    """Leave the lobby. Returns whether the lobby still exists."""
    current = lobbies.get_for_member(body.member_id)
    if current is None or current.lobby_id != lobby_id:
        raise HTTPException(400, "Member is not in this lobby")
    lobbies.quit(body.member_id)
    return {"lobby_id": lobby_id, "closed": lobbies.get(lobby_id) is None}


@app.post("/lobbies/{lobby_id}/start", response_model=GameStateResponse, tags=["Lobbies"], summary="Start game")
def start_lobby_game(
    lobby_id: int,
    body: MemberIdRequest,
    lobbies: LobbyStore = Depends(get_lobby_store),
    store: GameStore = Depends(get_game_store),
    settings: Settings = Depends(get_settings),
):
    """Host turns the lobby into a game; the lobby is closed."""
    lobby = lobbies.get(lobby_id)
    if lobby is None:
        raise HTTPException(404, "Lobby not found")
    if lobby.host_id != body.member_id:
        raise HTTPException(403, "Only the host can start the game")
    for m in lobby.members:
        running_id = store.game_for_player(m.id)
        running = store.get(running_id) if running_id else None
        if running is not None and not is_game_over(running):
            raise HTTPException(400, f"{m.name} is already in a running game")

    state = new_game(str(uuid.uuid4()), lobby.member_pairs(), seed=settings.game_seed)
    lobbies.close(lobby_id)
    store.put(state)
    logger.info("Lobby %s started game %s", lobby_id, state.game_id)
    return game_state_to_public(state, viewer_id=body.member_id)


# --- Games: queries ----------------------------------------------------------


@app.get("/games", response_model=list[str], tags=["Games"], summary="List game IDs")
def list_games_route(store: GameStore = Depends(get_game_store)):
    return store.list_games()


@app.get("/games/{game_id}", response_model=GameStateResponse, tags=["Games"], summary="Get game state")
def get_game(game_id: str, viewer_id: str | None = None, store: GameStore = Depends(get_game_store)):
    """Public game state; the viewer's own role is included."""
    return game_state_to_public(_load_game(store, game_id), viewer_id=viewer_id)


@app.get("/games/{game_id}/night-prompts", response_model=NightPromptResponse, tags=["Games"], summary="Night prompt")
def get_night_prompt(game_id: str, player_id: str, store: GameStore = Depends(get_game_store)):
    prompts = get_night_prompts(_load_game(store, game_id))
    if player_id not in prompts:
        raise InvalidActor(f"No night prompt for {player_id!r}")
    return night_prompt_to_public(player_id, prompts[player_id])


@app.get("/games/{game_id}/vote-options", response_model=list[OptionPublic], tags=["Games"], summary="Vote options")
def vote_options_route(game_id: str, store: GameStore = Depends(get_game_store)):
    return [option_to_public(o) for o in get_vote_options(_load_game(store, game_id))]


@app.get("/games/{game_id}/voters", response_model=list[PlayerPublic], tags=["Games"], summary="Voters")
def voters_route(game_id: str, store: GameStore = Depends(get_game_store)):
    return [player_to_public(p) for p in get_voters(_load_game(store, game_id))]


@app.get("/games/{game_id}/jury", response_model=list[PlayerPublic], tags=["Games"], summary="Jury")
def jury_route(game_id: str, store: GameStore = Depends(get_game_store)):
    return [player_to_public(p) for p in get_jury(_load_game(store, game_id))]


@app.get(
    "/games/{game_id}/verdict-options",
    response_model=list[VerdictOptionPublic],
    tags=["Games"],
    summary="Verdict options",
)
def verdict_options_route(game_id: str, store: GameStore = Depends(get_game_store)):
    return [verdict_to_public(v) for v in get_verdict_options(_load_game(store, game_id))]


@app.get("/games/{game_id}/pending", response_model=list[str], tags=["Games"], summary="Pending players")
def pending_route(game_id: str, store: GameStore = Depends(get_game_store)):
    """Players the current vote or trial is waiting for (empty at night to keep the mafia hidden)."""
    return game_state_to_public(_load_game(store, game_id)).pending_player_ids


@app.get("/games/{game_id}/message-handles", response_model=dict, tags=["Games"], summary="Get message handles")
def get_handles_route(game_id: str, store: GameStore = Depends(get_game_store)):
    return get_message_handles(_load_game(store, game_id))


# --- Games: submissions ------------------------------------------------------


@app.post("/games/{game_id}/night-action", response_model=GameStateResponse, tags=["Games"], summary="Night action")
def night_action_route(game_id: str, body: NightActionRequest, store: GameStore = Depends(get_game_store)):
    state = _apply(store, game_id, lambda s: record_night_action(s, body.player_id, body.target_id))
    return game_state_to_public(state, viewer_id=body.player_id)


@app.post("/games/{game_id}/vote", response_model=GameStateResponse, tags=["Games"], summary="Vote")
def vote_route(game_id: str, body: VoteRequest, store: GameStore = Depends(get_game_store)):
    state = _apply(store, game_id, lambda s: record_vote(s, body.player_id, body.option_indexes))
    return game_state_to_public(state, viewer_id=body.player_id)


@app.post("/games/{game_id}/verdict", response_model=GameStateResponse, tags=["Games"], summary="Verdict")
def verdict_route(game_id: str, body: VerdictRequest, store: GameStore = Depends(get_game_store)):
    state = _apply(store, game_id, lambda s: record_verdict(s, body.player_id, body.verdict))
    return game_state_to_public(state, viewer_id=body.player_id)


@app.post("/games/{game_id}/connection", response_model=GameStateResponse, tags=["Games"], summary="Set connection")
def connection_route(game_id: str, body: ConnectionRequest, store: GameStore = Depends(get_game_store)):
    state = _apply(
        store,
        game_id,
        lambda s: set_connected(s, body.player_id, body.connected),
        advance=False,
    )
    logger.info("Game %s: %s connected=%s", game_id, body.player_id, body.connected)
    return game_state_to_public(state)


@app.put("/games/{game_id}/message-handles", response_model=dict, tags=["Games"], summary="Store message handles")
def put_handles_route(game_id: str, body: MessageHandlesBody, store: GameStore = Depends(get_game_store)):
    state = _apply(store, game_id, lambda s: set_message_handles(s, body.handles), advance=False)
    return get_message_handles(state)


@app.post("/games/{game_id}/stand-in", response_model=GameStateResponse, tags=["Games"], summary="Stand in")
def stand_in_route(
    game_id: str,
    body: StandInRequest | None = None,
    store: GameStore = Depends(get_game_store),
    settings: Settings = Depends(get_settings),
):
    """Act for pending disconnected (or listed) players, then advance if the phase is complete."""
    player_ids = body.player_ids if body else None

    def change(state: GameState) -> GameState:
        if is_game_over(state):
            raise InvalidPhase("The game is over")
        return fill_pending(state, player_ids=player_ids, llm_config=settings.stand_in_llm_config)

    state = _apply(store, game_id, change)
    return game_state_to_public(state)


@app.delete("/games/{game_id}", response_model=dict, tags=["Games"], summary="Discard game")
def delete_game(game_id: str, store: GameStore = Depends(get_game_store)):
    with store.lock(game_id):
        removed = store.remove(game_id)
    if removed is None:
        raise HTTPException(404, "Game not found")
    logger.info("Game %s discarded", game_id)
    return {"game_id": game_id, "deleted": True}


@app.get("/health", tags=["System"], summary="Health check")
def health():
    return {"status": "ok"}
