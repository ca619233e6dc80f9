"""Core data models for candidates, poll topics and topic vote records."""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Self


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class Candidate:
    """A candidate on the single-choice roster.

    Attributes:
        id: Positive integer identifier, unique within the roster
        name: Display name (validated by ledger.validation.validate_name)
        department: Optional affiliation, free text
        vote_count: Number of votes currently tallied for this candidate

    Example:
        >>> Candidate(id=1, name="Alice", department="Physics")
        Candidate(id=1, name='Alice', department='Physics', vote_count=0)
    """
    id: int
    name: str
    department: str = ""
    vote_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "department": self.department,
            "vote_count": self.vote_count,
        }


@dataclass
class VoteOption:
    """One selectable option within a topic.

    Attributes:
        id: Positive integer, unique within its topic (1..k in input order)
        text: Option label
        vote_count: Number of votes currently tallied for this option
    """
    id: int
    text: str
    vote_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "vote_count": self.vote_count}


@dataclass
class VoteTopic:
    """An independently configured poll.

    Attributes:
        id: Positive integer, unique across the ledger
        title: Non-empty title
        description: Free text, may be empty
        options: Two or more options in insertion order
        created_at: When the topic was created
        votes_per_voter: How many distinct options one voter may pick,
            between 1 and the number of options
    """
    id: int
    title: str
    description: str
    options: list[VoteOption]
    created_at: datetime = field(default_factory=utcnow)
    votes_per_voter: int = 1

    @property
    def total_votes(self) -> int:
        return sum(option.vote_count for option in self.options)

    @property
    def option_ids(self) -> list[int]:
        return [option.id for option in self.options]

    def get_option(self, option_id: int) -> VoteOption | None:
        """Get the option with the given id, or None if there is none."""
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def copy(self) -> Self:
        """Return a deep copy safe to hand out to callers."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "options": [option.to_dict() for option in self.options],
            "created_at": int(self.created_at.timestamp()),
            "votes_per_voter": self.votes_per_voter,
            "total_votes": self.total_votes,
        }


@dataclass(frozen=True)
class TopicVoteRecord:
    """A single successful topic vote, as kept in the global vote history.

    Attributes:
        topic_id: Topic the vote was cast in
        voter_id: Trimmed voter identifier
        option_id: Option that was voted for
        voted_at: When the vote was cast
    """
    topic_id: int
    voter_id: str
    option_id: int
    voted_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic_id": self.topic_id,
            "voter_id": self.voter_id,
            "option_id": self.option_id,
            "voted_at": int(self.voted_at.timestamp()),
        }
