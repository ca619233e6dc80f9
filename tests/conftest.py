"""Shared test helpers and fixtures."""

from datetime import datetime, timezone

import pytest

from ledger.election import ElectionLedger
from ledger.models import TopicVoteRecord, VoteOption, VoteTopic


def make_ledger(roster: dict[int, str]) -> ElectionLedger:
    """Build a ledger with the given candidates (id -> name) and no votes."""
    ledger = ElectionLedger()
    for candidate_id, name in roster.items():
        assert ledger.add_candidate(candidate_id, name)
    return ledger


def make_topic(
    topic_id: int,
    counts: dict[str, int],
    votes_per_voter: int = 1,
    title: str = "Lunch",
) -> VoteTopic:
    """Build a detached topic whose options are numbered in dict order."""
    return VoteTopic(
        id=topic_id,
        title=title,
        description="",
        options=[
            VoteOption(id=i, text=text, vote_count=count)
            for i, (text, count) in enumerate(counts.items(), start=1)
        ],
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        votes_per_voter=votes_per_voter,
    )


def make_record(topic_id: int, voter_id: str, option_id: int, seconds: int = 0) -> TopicVoteRecord:
    return TopicVoteRecord(
        topic_id=topic_id,
        voter_id=voter_id,
        option_id=option_id,
        voted_at=datetime.fromtimestamp(1767225600 + seconds, tz=timezone.utc),
    )


@pytest.fixture
def three_candidates():
    """Roster: 1 Alice, 2 Bob, 3 Carol, no votes."""
    return make_ledger({1: "Alice", 2: "Bob", 3: "Carol"})


@pytest.fixture
def ledger():
    return ElectionLedger()


@pytest.fixture
def lunch_topic(ledger):
    """Topic 'Lunch' with options 1 Pizza, 2 Sushi, 3 Tacos and two votes per voter.

    Returns (ledger, topic_id).
    """
    topic_id = ledger.create_topic("Lunch", "Where do we eat", ["Pizza", "Sushi", "Tacos"], 2)
    assert topic_id is not None
    return ledger, topic_id
