"""Game engine: pure state transitions, no I/O.

Every operation takes a GameState and returns a new one; the input is never
mutated. Validation happens before the copy is touched, so a rejected call
leaves nothing half-applied.
"""

import copy
import logging
import random
from typing import Any, Optional, Sequence

from game.errors import (
    InsufficientPlayers,
    InvalidActor,
    InvalidPhase,
    InvalidTarget,
    PhaseIncomplete,
)
from game.rules import (
    CIVILIAN_PROMPT,
    MAFIA_PROMPT,
    MIN_PLAYERS,
    NO_LYNCH_MESSAGE,
    NO_TARGET_ID,
    NO_TARGET_LABEL,
    NOBODY_ID,
    NOBODY_LABEL,
    NUM_MAFIA,
    REVOTE_MESSAGE,
    STALEMATE_MESSAGE,
    VERDICT_OPTIONS,
    Faction,
    Role,
    Verdict,
)
from game.state import (
    EndingPhase,
    GameState,
    Kill,
    NightPhase,
    NightPrompt,
    Option,
    Phase,
    Player,
    Snapshot,
    TrialPhase,
    VotingPhase,
)
from game.tally import is_stalemate, tally_votes

logger = logging.getLogger(__name__)


def _require_phase(state: GameState, phase_types: tuple[type, ...], operation: str) -> None:
    if not isinstance(state.phase, phase_types):
        raise InvalidPhase(f"{operation} is not allowed during the {state.phase.kind} phase")


def _living_player(state: GameState, player_id: str) -> Player:
    player = state.get_player(player_id)
    if player is None:
        raise InvalidActor(f"Unknown player {player_id!r}")
    if not player.alive:
        raise InvalidActor(f"{player.name} is not alive")
    return player


# --- Game creation -----------------------------------------------------------


def assign_roles(player_count: int, rng: random.Random) -> list[Role]:
    """Shuffle a role vector of one mafia and the rest civilians."""
    if player_count < MIN_PLAYERS:
        raise InsufficientPlayers(f"At least {MIN_PLAYERS} players required, got {player_count}")
    roles = [Role.MAFIA] * NUM_MAFIA + [Role.CIVILIAN] * (player_count - NUM_MAFIA)
    rng.shuffle(roles)
    return roles


def new_game(
    game_id: str,
    members: Sequence[tuple[str, str]],
    seed: Optional[int] = None,
) -> GameState:
    """
    Create a game from finalized room membership, given as (id, display name)
    pairs in join order. Member order is kept; only the roles are shuffled.
    """
    if len(members) < MIN_PLAYERS:
        raise InsufficientPlayers(f"At least {MIN_PLAYERS} players required, got {len(members)}")
    member_ids = [member_id for member_id, _ in members]
    if len(set(member_ids)) != len(member_ids):
        raise InvalidActor("Duplicate member id")

    roles = assign_roles(len(members), random.Random(seed))
    players = [
        Player(id=member_id, name=name, role=role)
        for (member_id, name), role in zip(members, roles)
    ]
    state = GameState(game_id=game_id, players=players)
    logger.info("Game %s created with %d players", game_id, len(players))
    return state


# --- Win condition -----------------------------------------------------------


def get_winner(players: Sequence[Player]) -> Optional[Faction]:
    """Return the winning faction, or None while the game goes on."""
    alive = [p for p in players if p.alive]
    mafia_alive = sum(1 for p in alive if p.role == Role.MAFIA)
    others_alive = len(alive) - mafia_alive
    if mafia_alive == 0:
        return Faction.CIVILIANS
    if mafia_alive >= others_alive:
        return Faction.MAFIA
    return None


def is_game_over(state: GameState) -> bool:
    return isinstance(state.phase, EndingPhase)


# --- Read-only queries -------------------------------------------------------


def get_phase(state: GameState) -> Phase:
    """Return a copy of the active phase."""
    return copy.deepcopy(state.phase)


def get_transition_message(state: GameState) -> str:
    return state.transition_message


def _night_menu(state: GameState) -> list[Option]:
    options = [
        Option(target_id=p.id, label=p.name)
        for p in state.get_alive_players()
        if p.role != Role.MAFIA
    ]
    options.append(Option(target_id=NO_TARGET_ID, label=NO_TARGET_LABEL))
    return options


def _vote_menu(state: GameState) -> list[Option]:
    options = [Option(target_id=p.id, label=p.name) for p in state.get_alive_players()]
    options.append(Option(target_id=NOBODY_ID, label=NOBODY_LABEL))
    return options


def get_night_prompts(state: GameState) -> dict[str, NightPrompt]:
    """Per living player: the prompt text and the kill menu (empty for civilians)."""
    _require_phase(state, (NightPhase,), "get_night_prompts")
    menu = _night_menu(state)
    prompts: dict[str, NightPrompt] = {}
    for p in state.get_alive_players():
        if p.role == Role.MAFIA:
            prompts[p.id] = NightPrompt(text=MAFIA_PROMPT, options=list(menu))
        else:
            prompts[p.id] = NightPrompt(text=CIVILIAN_PROMPT)
    return prompts


def get_vote_options(state: GameState) -> list[Option]:
    _require_phase(state, (VotingPhase,), "get_vote_options")
    return list(state.phase.options)


def get_voters(state: GameState) -> list[Player]:
    _require_phase(state, (VotingPhase,), "get_voters")
    return state.get_alive_players()


def get_jury(state: GameState) -> list[Player]:
    _require_phase(state, (TrialPhase,), "get_jury")
    return [p for p in state.get_alive_players() if p.id != state.phase.defendant_id]


def get_verdict_options(state: GameState) -> list[Verdict]:
    _require_phase(state, (TrialPhase,), "get_verdict_options")
    return list(VERDICT_OPTIONS)


def get_pending_players(state: GameState) -> list[Player]:
    """Players whose submission still blocks the active phase."""
    phase = state.phase
    if isinstance(phase, NightPhase):
        return [p for p in state.get_players_by_role(Role.MAFIA) if p.id not in phase.actions]
    if isinstance(phase, VotingPhase):
        return [p for p in state.get_alive_players() if p.id not in phase.votes]
    if isinstance(phase, TrialPhase):
        return [p for p in get_jury(state) if p.id not in phase.verdicts]
    return []


def is_phase_complete(state: GameState) -> bool:
    """True when end_phase may be called."""
    if is_game_over(state):
        raise InvalidPhase("The game is over")
    return not get_pending_players(state)


# --- Submissions -------------------------------------------------------------


def record_night_action(
    state: GameState,
    actor_id: str,
    target_id: Optional[str] = None,
) -> GameState:
    """
    Record a mafia player's kill target, replacing any earlier choice.
    Civilians have nothing to choose: their submission (target None) is
    accepted and changes nothing.
    """
    _require_phase(state, (NightPhase,), "record_night_action")
    actor = _living_player(state, actor_id)
    if actor.role != Role.MAFIA:
        if target_id is not None:
            raise InvalidTarget(f"{actor.name} has no night action")
        return copy.deepcopy(state)

    legal = {o.target_id for o in _night_menu(state)}
    if target_id not in legal:
        raise InvalidTarget(f"{target_id!r} is not a legal night target for {actor.name}")

    state = copy.deepcopy(state)
    state.phase.actions[actor_id] = Kill(source=actor_id, target=target_id)
    logger.debug("Game %s: night action %s -> %s", state.game_id, actor_id, target_id)
    return state


def record_vote(state: GameState, voter_id: str, option_indexes: Sequence[int]) -> GameState:
    """Store a voter's chosen options (multi-select), replacing any earlier vote."""
    _require_phase(state, (VotingPhase,), "record_vote")
    _living_player(state, voter_id)
    options = state.phase.options
    if not option_indexes:
        raise InvalidTarget("At least one option must be chosen")

    chosen: list[str] = []
    for index in option_indexes:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(options):
            raise InvalidTarget(f"Option index {index!r} is out of range")
        target_id = options[index].target_id
        if target_id not in chosen:
            chosen.append(target_id)

    state = copy.deepcopy(state)
    state.phase.votes[voter_id] = chosen
    logger.debug("Game %s: vote %s -> %s", state.game_id, voter_id, chosen)
    return state


def record_verdict(state: GameState, juror_id: str, verdict: Verdict | str) -> GameState:
    _require_phase(state, (TrialPhase,), "record_verdict")
    juror = _living_player(state, juror_id)
    if juror_id == state.phase.defendant_id:
        raise InvalidActor(f"{juror.name} is the defendant and cannot judge")
    try:
        verdict = Verdict(verdict)
    except ValueError:
        raise InvalidTarget(f"{verdict!r} is not a verdict") from None

    state = copy.deepcopy(state)
    state.phase.verdicts[juror_id] = verdict
    logger.debug("Game %s: verdict %s -> %s", state.game_id, juror_id, verdict.value)
    return state


def set_connected(state: GameState, player_id: str, connected: bool) -> GameState:
    """Flag a player as (dis)connected. Allowed in any phase."""
    if state.get_player(player_id) is None:
        raise InvalidActor(f"Unknown player {player_id!r}")
    state = copy.deepcopy(state)
    state.replace_player(player_id, connected=connected)
    return state


def set_message_handles(state: GameState, handles: dict[str, Any]) -> GameState:
    """Store the transport's per-player message handles for the current poll."""
    _require_phase(state, (VotingPhase, TrialPhase), "set_message_handles")
    state = copy.deepcopy(state)
    state.phase.message_handles = dict(handles)
    return state


def get_message_handles(state: GameState) -> dict[str, Any]:
    _require_phase(state, (VotingPhase, TrialPhase), "get_message_handles")
    return dict(state.phase.message_handles)


# --- Transitions -------------------------------------------------------------


def _enter_night(state: GameState, message: str) -> None:
    state.round_index += 1
    state.phase = NightPhase()
    state.transition_message = message


def _enter_voting(state: GameState, message: str) -> None:
    state.phase = VotingPhase(options=_vote_menu(state))
    state.transition_message = message


def _enter_ending(state: GameState, winner: Faction) -> None:
    state.phase = EndingPhase(winner=winner)
    state.transition_message = f"{winner.value} won the game!"


def _end_night(state: GameState) -> None:
    killed_names: list[str] = []
    for kill in state.phase.actions.values():
        if kill.target == NO_TARGET_ID:
            continue
        target = state.get_player(kill.target)
        if target is None or not target.alive:
            continue
        state.replace_player(target.id, alive=False)
        killed_names.append(target.name)

    winner = get_winner(state.players)
    if winner is not None:
        _enter_ending(state, winner)
        return
    if killed_names:
        message = f"{', '.join(killed_names)} died last night"
    else:
        message = "Nobody died last night"
    _enter_voting(state, message)


def _end_voting(state: GameState, previous: Optional[Snapshot]) -> None:
    phase = state.phase
    result = tally_votes(phase.options, phase.votes)
    previous_votes = None
    if previous is not None and isinstance(previous.phase, VotingPhase):
        previous_votes = previous.phase.votes

    leader = result.unique_leader
    if is_stalemate(phase.votes, previous_votes):
        _enter_night(state, STALEMATE_MESSAGE)
    elif leader == NOBODY_ID:
        _enter_night(state, NO_LYNCH_MESSAGE)
    elif leader is not None:
        defendant = state.get_player(leader)
        state.phase = TrialPhase(defendant_id=leader)
        state.transition_message = f"Now begins the trial for {defendant.name}:"
    else:
        _enter_voting(state, REVOTE_MESSAGE)


def _end_trial(state: GameState) -> None:
    phase = state.phase
    guilty = sum(1 for v in phase.verdicts.values() if v == Verdict.GUILTY)
    innocent = sum(1 for v in phase.verdicts.values() if v == Verdict.INNOCENT)
    defendant = state.get_player(phase.defendant_id)

    # Ties go against the defendant
    if guilty >= innocent:
        state.replace_player(defendant.id, alive=False)
        message = f"By a vote of {guilty} guilty to {innocent} innocent, {defendant.name} was lynched"
    else:
        message = f"By a vote of {innocent} innocent to {guilty} guilty, {defendant.name} was released"

    winner = get_winner(state.players)
    if winner is not None:
        _enter_ending(state, winner)
    else:
        _enter_night(state, message)


def end_phase(state: GameState) -> GameState:
    """
    Resolve the active phase and move to the next one. This is the only way
    the phase changes. Returns the new state; its transition_message narrates
    the outcome.
    """
    if is_game_over(state):
        raise InvalidPhase("The game is over")
    pending = get_pending_players(state)
    if pending:
        names = ", ".join(p.name for p in pending)
        raise PhaseIncomplete(f"Still waiting for: {names}")

    old_kind = state.phase.kind
    state = copy.deepcopy(state)
    previous = state.last_snapshot()
    state.push_snapshot()

    if isinstance(state.phase, NightPhase):
        _end_night(state)
    elif isinstance(state.phase, VotingPhase):
        _end_voting(state, previous)
    else:
        _end_trial(state)

    logger.info(
        "Game %s: %s -> %s (%s)",
        state.game_id,
        old_kind,
        state.phase.kind,
        state.transition_message,
    )
    return state
