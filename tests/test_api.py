"""API route tests."""

import random

import pytest
from fastapi.testclient import TestClient

from api.config import Settings, get_settings
from api.game_store import GameStore, get_game_store
from api.lobby_store import LobbyStore, get_lobby_store
from api.main import app
from game.rules import Role


@pytest.fixture
def store() -> GameStore:
    return GameStore()


@pytest.fixture
def client(store):
    lobbies = LobbyStore(rng=random.Random(0))
    app.dependency_overrides[get_game_store] = lambda: store
    app.dependency_overrides[get_lobby_store] = lambda: lobbies
    app.dependency_overrides[get_settings] = lambda: Settings(game_seed=1)
    yield TestClient(app)
    app.dependency_overrides.clear()


def _start_game(client: TestClient, n: int = 5) -> str:
    r = client.post("/lobbies", json={"member_id": "m1", "name": "P1"})
    assert r.status_code == 200
    lobby_id = r.json()["lobby_id"]
    for i in range(2, n + 1):
        r = client.post(f"/lobbies/{lobby_id}/join", json={"member_id": f"m{i}", "name": f"P{i}"})
        assert r.status_code == 200
    r = client.post(f"/lobbies/{lobby_id}/start", json={"member_id": "m1"})
    assert r.status_code == 200
    return r.json()["game_id"]


def _mafia_id(store: GameStore, game_id: str) -> str:
    return store.get(game_id).get_players_by_role(Role.MAFIA)[0].id


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_lobby_lifecycle(client):
    r = client.post("/lobbies", json={"member_id": "a", "name": "Ann"})
    lobby = r.json()
    assert 1000 <= lobby["lobby_id"] < 10000
    assert lobby["host_id"] == "a"
    lobby_id = lobby["lobby_id"]

    client.post(f"/lobbies/{lobby_id}/join", json={"member_id": "b", "name": "Ben"})
    r = client.post(f"/lobbies/{lobby_id}/join", json={"member_id": "b", "name": "Ben"})
    assert r.status_code == 400  # already in a lobby

    r = client.post(f"/lobbies/{lobby_id}/quit", json={"member_id": "a"})
    assert r.json() == {"lobby_id": lobby_id, "closed": False}
    r = client.get(f"/lobbies/{lobby_id}")
    assert r.json()["host_id"] == "b"
    assert [m["id"] for m in r.json()["members"]] == ["b"]

    r = client.post(f"/lobbies/{lobby_id}/quit", json={"member_id": "b"})
    assert r.json()["closed"] is True
    assert client.get(f"/lobbies/{lobby_id}").status_code == 404


def test_join_unknown_lobby(client):
    r = client.post("/lobbies/1/join", json={"member_id": "x", "name": "X"})
    assert r.status_code == 404


def test_start_requires_three_players_and_host(client):
    lobby_id = client.post("/lobbies", json={"member_id": "a", "name": "Ann"}).json()["lobby_id"]
    client.post(f"/lobbies/{lobby_id}/join", json={"member_id": "b", "name": "Ben"})
    r = client.post(f"/lobbies/{lobby_id}/start", json={"member_id": "b"})
    assert r.status_code == 403
    r = client.post(f"/lobbies/{lobby_id}/start", json={"member_id": "a"})
    assert r.status_code == 400
    assert r.json()["error"] == "InsufficientPlayers"
    assert client.get(f"/lobbies/{lobby_id}").status_code == 200


def test_start_game_closes_lobby(client, store):
    game_id = _start_game(client)
    assert client.get("/games").json() == [game_id]
    state = client.get(f"/games/{game_id}").json()
    assert state["phase"] == "night"
    assert state["transition_message"] == "Welcome to the Mafia Game"
    assert [p["id"] for p in state["players"]] == ["m1", "m2", "m3", "m4", "m5"]
    # Living roles are hidden, and nobody is shown as pending at night
    assert all(p["role"] is None for p in state["players"])
    assert state["pending_player_ids"] == []
    # The lobby is gone, so members can host again
    assert client.post("/lobbies", json={"member_id": "m1", "name": "P1"}).status_code == 200


def test_viewer_sees_own_role(client, store):
    game_id = _start_game(client)
    mafia = _mafia_id(store, game_id)
    state = client.get(f"/games/{game_id}", params={"viewer_id": mafia}).json()
    roles = {p["id"]: p["role"] for p in state["players"]}
    assert roles[mafia] == "mafia"
    assert sum(1 for r in roles.values() if r is not None) == 1


def test_night_prompt(client, store):
    game_id = _start_game(client)
    mafia = _mafia_id(store, game_id)
    r = client.get(f"/games/{game_id}/night-prompts", params={"player_id": mafia})
    assert r.status_code == 200
    options = r.json()["options"]
    assert options[-1] == {"target_id": "no_target", "label": "No target"}
    assert len(options) == 5
    civilian = next(p.id for p in store.get(game_id).players if p.id != mafia)
    r = client.get(f"/games/{game_id}/night-prompts", params={"player_id": civilian})
    assert r.json()["options"] == []


def test_full_game_civilians_win(client, store):
    game_id = _start_game(client)
    mafia = _mafia_id(store, game_id)
    victim = next(p for p in store.get(game_id).players if p.id != mafia)

    r = client.post(f"/games/{game_id}/night-action", json={"player_id": mafia, "target_id": victim.id})
    assert r.status_code == 200
    state = r.json()
    assert state["phase"] == "voting"
    assert state["transition_message"] == f"{victim.name} died last night"
    labels = [o["label"] for o in client.get(f"/games/{game_id}/vote-options").json()]
    assert labels[-1] == "Nobody"
    assert victim.name not in labels

    options = [o["target_id"] for o in state["vote_options"]]
    voters = [p["id"] for p in client.get(f"/games/{game_id}/voters").json()]
    assert len(voters) == 4
    for voter in voters:
        r = client.post(f"/games/{game_id}/vote", json={"player_id": voter, "option_indexes": [options.index(mafia)]})
        assert r.status_code == 200
    state = r.json()
    assert state["phase"] == "trial"
    assert state["defendant_id"] == mafia

    jury = [p["id"] for p in client.get(f"/games/{game_id}/jury").json()]
    assert mafia not in jury
    verdicts = client.get(f"/games/{game_id}/verdict-options").json()
    assert [v["label"] for v in verdicts] == ["Guilty", "Innocent", "Abstain"]
    for juror in jury:
        r = client.post(f"/games/{game_id}/verdict", json={"player_id": juror, "verdict": "guilty"})
    state = r.json()
    assert state["phase"] == "ending"
    assert state["winner"] == "Civilians"
    assert state["transition_message"] == "Civilians won the game!"
    assert all(p["role"] is not None for p in state["players"])

    r = client.post(f"/games/{game_id}/vote", json={"player_id": jury[0], "option_indexes": [0]})
    assert r.status_code == 409


def test_wrong_phase_and_bad_target(client, store):
    game_id = _start_game(client)
    mafia = _mafia_id(store, game_id)
    r = client.post(f"/games/{game_id}/vote", json={"player_id": mafia, "option_indexes": [0]})
    assert r.status_code == 409
    assert r.json()["error"] == "InvalidPhase"
    r = client.post(f"/games/{game_id}/night-action", json={"player_id": mafia, "target_id": mafia})
    assert r.status_code == 400
    assert r.json()["error"] == "InvalidTarget"
    r = client.post(f"/games/{game_id}/night-action", json={"player_id": "ghost", "target_id": "no_target"})
    assert r.status_code == 400
    assert r.json()["error"] == "InvalidActor"
    r = client.post(f"/games/{game_id}/vote", json={"player_id": mafia, "option_indexes": []})
    assert r.status_code == 422
    assert store.get(game_id).phase.actions == {}


def test_unknown_game_404(client):
    assert client.get("/games/nope").status_code == 404
    r = client.post("/games/nope/vote", json={"player_id": "a", "option_indexes": [0]})
    assert r.status_code == 404


def test_disconnected_mafia_gets_stand_in(client, store):
    game_id = _start_game(client)
    mafia = _mafia_id(store, game_id)
    r = client.post(f"/games/{game_id}/connection", json={"player_id": mafia, "connected": False})
    assert r.status_code == 200
    assert next(p for p in r.json()["players"] if p["id"] == mafia)["connected"] is False

    r = client.post(f"/games/{game_id}/stand-in")
    assert r.status_code == 200
    state = r.json()
    assert state["phase"] == "voting"
    assert state["transition_message"] == "Nobody died last night"


def test_stand_in_for_listed_voters(client, store):
    game_id = _start_game(client)
    mafia = _mafia_id(store, game_id)
    client.post(f"/games/{game_id}/night-action", json={"player_id": mafia, "target_id": "no_target"})
    voters = [p.id for p in store.get(game_id).players]
    r = client.post(f"/games/{game_id}/stand-in", json={"player_ids": voters})
    state = r.json()
    assert state["phase"] == "night"
    assert state["transition_message"] == "Most popular vote was not to lynch. Moving to night time..."
    assert state["round_index"] == 1


def test_message_handles(client, store):
    game_id = _start_game(client)
    r = client.put(f"/games/{game_id}/message-handles", json={"handles": {"m1": 1}})
    assert r.status_code == 409
    mafia = _mafia_id(store, game_id)
    client.post(f"/games/{game_id}/night-action", json={"player_id": mafia, "target_id": "no_target"})
    handles = {"m1": {"chat_id": 1, "message_id": 77}, "m2": 78}
    r = client.put(f"/games/{game_id}/message-handles", json={"handles": handles})
    assert r.status_code == 200
    assert r.json() == handles
    assert client.get(f"/games/{game_id}/message-handles").json() == handles


def test_delete_game(client):
    game_id = _start_game(client)
    assert client.delete(f"/games/{game_id}").status_code == 200
    assert client.get(f"/games/{game_id}").status_code == 404
    assert client.delete(f"/games/{game_id}").status_code == 404
