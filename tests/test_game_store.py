"""Tests for the game store and per-game serialization of API mutations."""

import threading

import pytest
from fastapi import HTTPException

from api.game_store import GameStore
from api.main import _apply, delete_game
from game.engine import end_phase, record_night_action, record_vote
from game.rules import NO_TARGET_ID, Role
from game.state import GameState, Player, TrialPhase, VotingPhase


def _voting_game() -> GameState:
    roles = [Role.MAFIA, Role.CIVILIAN, Role.CIVILIAN, Role.CIVILIAN, Role.CIVILIAN]
    players = [Player(id=f"p{i + 1}", name=f"P{i + 1}", role=r) for i, r in enumerate(roles)]
    state = GameState(game_id="g1", players=players)
    return end_phase(record_night_action(state, "p1", NO_TARGET_ID))


def test_put_indexes_players():
    store = GameStore()
    store.put(_voting_game())
    assert store.list_games() == ["g1"]
    assert store.game_for_player("p3") == "g1"
    store.remove("g1")
    assert store.get("g1") is None
    assert store.game_for_player("p3") is None


def test_game_removed_during_change_stays_removed():
    store = GameStore()
    store.put(_voting_game())
    held = []

    def change(state: GameState) -> GameState:
        held.append(store.lock("g1"))
        store.remove("g1")
        return record_vote(state, "p2", [0])

    with pytest.raises(HTTPException) as exc:
        _apply(store, "g1", change)
    assert exc.value.status_code == 404
    assert store.get("g1") is None
    # Later callers must queue on the lock that was held, not a fresh one
    assert store.lock("g1") is held[0]
    assert not held[0].locked()


def test_delete_waits_for_running_change():
    store = GameStore()
    store.put(_voting_game())
    result = {}

    def delete():
        result["body"] = delete_game("g1", store)

    lock = store.lock("g1")
    with lock:
        worker = threading.Thread(target=delete)
        worker.start()
        worker.join(timeout=0.2)
        assert worker.is_alive()
        assert store.get("g1") is not None
    worker.join(timeout=5)
    assert result["body"] == {"game_id": "g1", "deleted": True}
    assert store.get("g1") is None


def test_concurrent_votes_end_phase_once():
    store = GameStore()
    state = _voting_game()
    store.put(state)
    history_before = len(state.history)
    p2 = [o.target_id for o in state.phase.options].index("p2")
    voters = [p.id for p in state.players]
    start = threading.Barrier(len(voters))
    errors = []

    def vote(voter_id: str) -> None:
        start.wait()
        try:
            _apply(store, "g1", lambda s: record_vote(s, voter_id, [p2]))
        except Exception as e:  # surfaced by the assert below
            errors.append(e)

    threads = [threading.Thread(target=vote, args=(v,)) for v in voters]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert errors == []
    final = store.get("g1")
    assert isinstance(final.phase, TrialPhase)
    assert final.phase.defendant_id == "p2"
    assert len(final.history) == history_before + 1
    assert isinstance(final.history[-1].phase, VotingPhase)
    assert set(final.history[-1].phase.votes) == set(voters)
