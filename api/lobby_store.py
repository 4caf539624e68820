"""In-memory pre-game lobbies: create, join, quit, close."""

import random
import threading
from dataclasses import dataclass, field
from typing import Optional

LOBBY_ID_MIN = 1_000
LOBBY_ID_MAX = 10_000  # exclusive


class LobbyError(ValueError):
    """Lobby operation rejected (already in a lobby, unknown lobby, ...)."""


@dataclass(frozen=True)
class LobbyMember:
    id: str
    name: str


@dataclass
class Lobby:
    lobby_id: int
    host_id: str
    members: list[LobbyMember] = field(default_factory=list)

    def member_pairs(self) -> list[tuple[str, str]]:
        """(id, name) pairs in join order, as expected by game.engine.new_game."""
        return [(m.id, m.name) for m in self.members]


class LobbyStore:
    """A member can be in at most one lobby at a time."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._lobbies: dict[int, Lobby] = {}
        self._member_lobbies: dict[str, int] = {}
        self._rng = rng or random.Random()
        self._guard = threading.Lock()

    def get(self, lobby_id: int) -> Optional[Lobby]:
        return self._lobbies.get(lobby_id)

    def get_for_member(self, member_id: str) -> Optional[Lobby]:
        lobby_id = self._member_lobbies.get(member_id)
        return self._lobbies.get(lobby_id) if lobby_id is not None else None

    def create(self, member: LobbyMember) -> Lobby:
        with self._guard:
            if member.id in self._member_lobbies:
                raise LobbyError("Member is already in a lobby")
            lobby_id = self._rng.randrange(LOBBY_ID_MIN, LOBBY_ID_MAX)
            while lobby_id in self._lobbies:
                lobby_id = self._rng.randrange(LOBBY_ID_MIN, LOBBY_ID_MAX)
            lobby = Lobby(lobby_id=lobby_id, host_id=member.id, members=[member])
            self._lobbies[lobby_id] = lobby
            self._member_lobbies[member.id] = lobby_id
            return lobby

    def join(self, lobby_id: int, member: LobbyMember) -> Lobby:
        with self._guard:
            if member.id in self._member_lobbies:
                raise LobbyError("Member is already in a lobby")
            lobby = self._lobbies.get(lobby_id)
            if lobby is None:
                raise LobbyError("Lobby does not exist")
            lobby.members.append(member)
            self._member_lobbies[member.id] = lobby_id
            return lobby

    def quit(self, member_id: str) -> int:
        """
        Remove a member from their lobby and return the lobby id. The last
        member leaving closes the lobby; a leaving host hands over to the
        earliest remaining member.
        """
        with self._guard:
            lobby_id = self._member_lobbies.pop(member_id, None)
            if lobby_id is None:
                raise LobbyError("Member is not in any lobby")
            lobby = self._lobbies[lobby_id]
            lobby.members = [m for m in lobby.members if m.id != member_id]
            if not lobby.members:
                del self._lobbies[lobby_id]
            elif lobby.host_id == member_id:
                lobby.host_id = lobby.members[0].id
            return lobby_id

    def close(self, lobby_id: int) -> Lobby:
        with self._guard:
            lobby = self._lobbies.pop(lobby_id, None)
            if lobby is None:
                raise LobbyError("Lobby does not exist")
            for m in lobby.members:
                self._member_lobbies.pop(m.id, None)
            return lobby


_default_store = LobbyStore()


def get_lobby_store() -> LobbyStore:
    return _default_store
