"""Game state types for the Mafia engine."""

import copy
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from game.rules import HISTORY_LIMIT, WELCOME_MESSAGE, Faction, Role, Verdict


@dataclass(frozen=True)
class Player:
    """A player in the game."""

    id: str
    name: str
    role: Role
    alive: bool = True
    connected: bool = True


@dataclass(frozen=True)
class Option:
    """One entry of a target menu (night prompt or vote poll)."""

    target_id: str
    label: str


@dataclass(frozen=True)
class Kill:
    """A mafia player's night action."""

    source: str
    target: str


@dataclass(frozen=True)
class NightPrompt:
    """What one player is asked at night. Civilians get no options."""

    text: str
    options: list[Option] = field(default_factory=list)


@dataclass
class NightPhase:
    kind: Literal["night"] = "night"
    actions: dict[str, Kill] = field(default_factory=dict)  # actor id -> kill


@dataclass
class VotingPhase:
    kind: Literal["voting"] = "voting"
    options: list[Option] = field(default_factory=list)
    votes: dict[str, list[str]] = field(default_factory=dict)  # voter id -> chosen target ids
    message_handles: dict[str, Any] = field(default_factory=dict)


@dataclass
class TrialPhase:
    defendant_id: str
    kind: Literal["trial"] = "trial"
    verdicts: dict[str, Verdict] = field(default_factory=dict)
    message_handles: dict[str, Any] = field(default_factory=dict)


@dataclass
class EndingPhase:
    winner: Optional[Faction] = None
    kind: Literal["ending"] = "ending"


Phase = Annotated[
    Union[NightPhase, VotingPhase, TrialPhase, EndingPhase],
    Field(discriminator="kind"),
]


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of a past state, taken right before a transition."""

    round_index: int
    players: tuple[Player, ...]
    phase: Phase
    transition_message: str


@dataclass
class GameState:
    """Full game state."""

    game_id: str
    players: list[Player] = field(default_factory=list)
    phase: Phase = field(default_factory=NightPhase)
    round_index: int = 0
    transition_message: str = WELCOME_MESSAGE
    history: list[Snapshot] = field(default_factory=list)

    def get_alive_players(self) -> list[Player]:
        """Return list of alive players."""
        return [p for p in self.players if p.alive]

    def get_player(self, player_id: str) -> Optional[Player]:
        """Return player by id or None."""
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def get_players_by_role(self, role: Role) -> list[Player]:
        """Return alive players with the given role."""
        return [p for p in self.players if p.alive and p.role == role]

    def replace_player(self, player_id: str, **changes: Any) -> None:
        """Swap in an updated copy of one player (mutates state)."""
        self.players = [
            Player(
                id=p.id,
                name=p.name,
                role=p.role,
                alive=changes.get("alive", p.alive),
                connected=changes.get("connected", p.connected),
            )
            if p.id == player_id
            else p
            for p in self.players
        ]

    def push_snapshot(self) -> None:
        """Record the current state in history, keeping at most HISTORY_LIMIT entries."""
        snapshot = Snapshot(
            round_index=self.round_index,
            players=tuple(self.players),
            phase=copy.deepcopy(self.phase),
            transition_message=self.transition_message,
        )
        self.history = (self.history + [snapshot])[-HISTORY_LIMIT:]

    def last_snapshot(self) -> Optional[Snapshot]:
        return self.history[-1] if self.history else None


_state_adapter = TypeAdapter(GameState)


def dump_state(state: GameState) -> dict[str, Any]:
    """Serialize a game (players, phase, history) to JSON-safe data."""
    return _state_adapter.dump_python(state, mode="json")


def load_state(data: dict[str, Any]) -> GameState:
    """Restore a game previously produced by dump_state."""
    return _state_adapter.validate_python(data)
