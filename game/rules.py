"""Game rules and constants for the Mafia engine."""

from enum import Enum


class Role(str, Enum):
    """Player roles in the game."""

    MAFIA = "mafia"
    CIVILIAN = "civilian"


class Faction(str, Enum):
    """Winning side; the value is used verbatim in the win message."""

    MAFIA = "Mafia"
    CIVILIANS = "Civilians"


class Verdict(str, Enum):
    """A juror's verdict during a trial."""

    GUILTY = "guilty"
    INNOCENT = "innocent"
    ABSTAIN = "abstain"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class PhaseKind(str, Enum):
    """Tag of the active phase."""

    NIGHT = "night"
    VOTING = "voting"
    TRIAL = "trial"
    ENDING = "ending"


# Minimum players to start; exactly one of them is mafia
MIN_PLAYERS = 3
NUM_MAFIA = 1

# Sentinel vote option meaning "lynch nobody"
NOBODY_ID = "nobody"
NOBODY_LABEL = "Nobody"

# Sentinel night target meaning "kill nobody"
NO_TARGET_ID = "no_target"
NO_TARGET_LABEL = "No target"

VERDICT_OPTIONS = (Verdict.GUILTY, Verdict.INNOCENT, Verdict.ABSTAIN)

# Snapshots kept for stalemate detection (only the newest is compared)
HISTORY_LIMIT = 3

WELCOME_MESSAGE = "Welcome to the Mafia Game"
MAFIA_PROMPT = "You are a Mafia. Pick a victim to kill:"
CIVILIAN_PROMPT = "You are a Civilian"

STALEMATE_MESSAGE = "No change in votes 2 rounds in a row. Moving to night time..."
NO_LYNCH_MESSAGE = "Most popular vote was not to lynch. Moving to night time..."
REVOTE_MESSAGE = "Multiple options were tied for first place. Moving to re-vote"
