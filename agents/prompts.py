"""Prompt and context building for stand-in players."""

from game.state import GameState, Option, Player


RULES_SUMMARY = """
You are playing Mafia. There are two sides: Civilians and the Mafia (one player).
- At night: the Mafia picks one player to kill, or nobody.
- By day: everyone votes for who to put on trial (several choices allowed, or 'nobody').
  A single most-voted player goes on trial; ties mean a re-vote.
- On trial: everyone except the defendant votes guilty, innocent or abstain.
  The defendant is lynched unless innocent votes outnumber guilty votes.
- Civilians win when the Mafia is dead. Mafia wins when it equals or outnumbers the rest.
You are standing in for a player who lost connection. Never reveal a secret role.
"""


def build_game_context(state: GameState, player: Player) -> str:
    """Public game context plus the stand-in player's own role."""
    alive = ", ".join(f"{p.name} ({p.id})" for p in state.get_alive_players())
    dead = ", ".join(f"{p.name} ({p.role.value})" for p in state.players if not p.alive) or "none"
    return (
        f"You are {player.name} ({player.id}), a {player.role.value}.\n"
        f"Round {state.round_index + 1}. Latest news: {state.transition_message}\n"
        f"Alive: {alive}\n"
        f"Dead: {dead}"
    )


def _menu(options: list[Option]) -> str:
    return ", ".join(f"{o.target_id} ({o.label})" for o in options)


def night_instructions(options: list[Option]) -> str:
    return (
        "Choose exactly one target to kill tonight from these IDs: "
        f"{_menu(options)}. Reply with the target_id only."
    )


def vote_instructions(options: list[Option]) -> str:
    return (
        "Vote for who should go on trial. Valid IDs: "
        f"{_menu(options)}. You may list several target_ids."
    )


def verdict_instructions(defendant_name: str) -> str:
    return (
        f"{defendant_name} is on trial. Give your verdict: guilty, innocent or abstain, "
        "with a short reason."
    )
