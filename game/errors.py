"""Errors raised by the game engine.

Every error is raised before the state is touched, so a failed call never
leaves a partially applied change behind.
"""


class GameError(ValueError):
    """Base class for engine errors."""


class InvalidPhase(GameError):
    """Operation is not supported by the active phase."""


class InvalidTarget(GameError):
    """Submitted target, option index or verdict is not in the legal menu."""


class InvalidActor(GameError):
    """Acting player is unknown or not eligible in the active phase."""


class InsufficientPlayers(GameError):
    """Too few members to start a game."""


class PhaseIncomplete(GameError):
    """end_phase was called before every required player acted."""
