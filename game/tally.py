"""Vote tallying and stalemate detection. Pure functions, no state."""

from dataclasses import dataclass

from game.errors import InvalidTarget
from game.state import Option


@dataclass(frozen=True)
class TallyResult:
    """Vote counts per option plus the options tied at the top."""

    counts: dict[str, int]
    top_count: int
    leaders: list[str]  # target ids tied for first, in menu order

    @property
    def unique_leader(self) -> str | None:
        return self.leaders[0] if len(self.leaders) == 1 else None


def tally_votes(options: list[Option], votes: dict[str, list[str]]) -> TallyResult:
    """
    Count votes over the round's menu. A voter supporting k targets adds one
    vote to each of them, not a fraction.
    """
    counts = {o.target_id: 0 for o in options}
    for chosen in votes.values():
        for target_id in set(chosen):
            if target_id not in counts:
                raise InvalidTarget(f"Vote for {target_id!r} is not in the option list")
            counts[target_id] += 1
    top_count = max(counts.values()) if counts else 0
    leaders = [tid for tid, c in counts.items() if c == top_count]
    return TallyResult(counts=counts, top_count=top_count, leaders=leaders)


def is_stalemate(current: dict[str, list[str]], previous: dict[str, list[str]] | None) -> bool:
    """True when both rounds have the same voters and every voter chose the same set."""
    if previous is None or len(current) != len(previous):
        return False
    for voter_id, chosen in current.items():
        if voter_id not in previous:
            return False
        if set(chosen) != set(previous[voter_id]):
            return False
    return True
