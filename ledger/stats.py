"""Raw counts, percentages and orderings over ledger snapshots.

Everything here works on copies handed out by the ledger and never
mutates its input.
"""

from collections import Counter
from collections.abc import Iterable

from ledger.config import DISTRIBUTION_BAR_WIDTH
from ledger.models import Candidate, VoteOption, VoteTopic

SORT_KEYS = ("votes-desc", "votes-asc", "id", "name")


def total_votes(candidates: Iterable[Candidate]) -> int:
    return sum(c.vote_count for c in candidates)


def average_votes(candidates: list[Candidate]) -> float:
    if not candidates:
        return 0.0
    return total_votes(candidates) / len(candidates)


def max_votes(candidates: list[Candidate]) -> int:
    return max((c.vote_count for c in candidates), default=0)


def min_votes(candidates: list[Candidate]) -> int:
    return min((c.vote_count for c in candidates), default=0)


def percentage(count: int, total: int) -> float:
    """Share of ``total`` as a percentage; 0.0 when there are no votes."""
    return 100.0 * count / total if total > 0 else 0.0


def sort_candidates(candidates: list[Candidate], key: str = "votes-desc") -> list[Candidate]:
    """Return the candidates ordered by one of SORT_KEYS.

    Sorting is stable, so candidates with equal keys keep registry order.
    """
    if key == "votes-desc":
        return sorted(candidates, key=lambda c: c.vote_count, reverse=True)
    if key == "votes-asc":
        return sorted(candidates, key=lambda c: c.vote_count)
    if key == "id":
        return sorted(candidates, key=lambda c: c.id)
    if key == "name":
        return sorted(candidates, key=lambda c: c.name)
    raise ValueError(f"Unknown sort key {key!r}; expected one of {', '.join(SORT_KEYS)}")


def rank_options(topic: VoteTopic) -> list[VoteOption]:
    """Options from most to fewest votes, ties in option order."""
    return sorted(topic.options, key=lambda o: o.vote_count, reverse=True)


def topic_winner(topic: VoteTopic) -> VoteOption | None:
    """The option with more than half of the topic's votes, if any."""
    total = topic.total_votes
    if total == 0:
        return None
    for option in topic.options:
        if option.vote_count * 2 > total:
            return option
    return None


def vote_distribution(history: Iterable[int]) -> dict[int, int]:
    """Count how often each id appears in a vote history, ordered by id."""
    counts = Counter(history)
    return dict(sorted(counts.items()))


def distribution_bars(
    items: list[tuple[str, int]], width: int = DISTRIBUTION_BAR_WIDTH
) -> list[str]:
    """Render (label, count) pairs as fixed-width text bars.

    The largest count fills the whole bar; the rest are scaled down.
    """
    peak = max((count for _, count in items), default=0)
    lines = []
    for label, count in items:
        length = width * count // peak if peak > 0 else 0
        bar = "█" * length + " " * (width - length)
        lines.append(f"{label:<20} [{bar}] {count}")
    return lines
