"""In-memory game store with one lock per game. Replace with DB later if needed."""

import threading
from typing import Optional

from game.state import GameState


class GameStore:
    """
    Holds the current GameState per game id and the player -> game index.
    Callers wrap record/complete/end_phase/put, and removal, in `lock(game_id)`
    so that concurrent calls into one game are applied one at a time.
    """

    def __init__(self) -> None:
        self._games: dict[str, GameState] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._player_games: dict[str, str] = {}
        self._guard = threading.Lock()

    def get(self, game_id: str) -> Optional[GameState]:
        return self._games.get(game_id)

    def put(self, state: GameState) -> None:
        with self._guard:
            self._games[state.game_id] = state
            self._locks.setdefault(state.game_id, threading.Lock())
            for p in state.players:
                self._player_games[p.id] = state.game_id

    def remove(self, game_id: str) -> Optional[GameState]:
        """
        Drop the game and its player index. The lock entry is kept so a caller
        still holding it and any later caller share the same lock.
        """
        with self._guard:
            state = self._games.pop(game_id, None)
            self._player_games = {
                pid: gid for pid, gid in self._player_games.items() if gid != game_id
            }
            return state

    def lock(self, game_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(game_id, threading.Lock())

    def game_for_player(self, player_id: str) -> Optional[str]:
        """Return the id of the game this player is in, if any."""
        return self._player_games.get(player_id)

    def list_games(self) -> list[str]:
        return list(self._games.keys())


_default_store = GameStore()


def get_game_store() -> GameStore:
    """FastAPI dependency; override in tests via app.dependency_overrides."""
    return _default_store
