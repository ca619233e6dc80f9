"""Per-topic, per-voter vote quota tracking."""

import logging

from ledger.models import VoteTopic

logger = logging.getLogger(__name__)


class VoterQuotaTracker:
    """Remembers which options each voter has already used in each topic.

    A voter may pick at most ``topic.votes_per_voter`` distinct options in a
    topic and never the same option twice. Empty voter and topic entries are
    pruned as soon as they become empty, so a voter with no votes left on
    record is indistinguishable from one who never voted.
    """

    def __init__(self):
        self._consumed: dict[int, dict[str, set[int]]] = {}

    def consumed(self, topic_id: int, voter_id: str) -> set[int]:
        """Copy of the option ids a voter has used in a topic."""
        return set(self._consumed.get(topic_id, {}).get(voter_id, ()))

    def voters(self, topic_id: int) -> list[str]:
        """Voters with at least one vote on record in a topic."""
        return list(self._consumed.get(topic_id, {}))

    def remaining(self, topic: VoteTopic, voter_id: str) -> int:
        used = len(self._consumed.get(topic.id, {}).get(voter_id, ()))
        return max(topic.votes_per_voter - used, 0)

    def can_vote(self, topic: VoteTopic, voter_id: str, option_id: int) -> bool:
        """Check the quota and duplicate-option rules for a prospective vote."""
        if topic.votes_per_voter <= 0:
            return False
        used = self._consumed.get(topic.id, {}).get(voter_id, set())
        if len(used) >= topic.votes_per_voter:
            logger.debug("voter %r has no votes left in topic %d", voter_id, topic.id)
            return False
        if option_id in used:
            logger.debug(
                "voter %r already voted for option %d in topic %d", voter_id, option_id, topic.id
            )
            return False
        return True

    def consume(self, topic_id: int, voter_id: str, option_id: int) -> None:
        self._consumed.setdefault(topic_id, {}).setdefault(voter_id, set()).add(option_id)

    def release(self, topic_id: int, voter_id: str, option_id: int) -> bool:
        """Give an option back to a voter, pruning entries that become empty.

        Returns:
            True if the option was on record for that voter.
        """
        voters = self._consumed.get(topic_id)
        if voters is None or voter_id not in voters:
            return False
        used = voters[voter_id]
        if option_id not in used:
            return False

        used.discard(option_id)
        if not used:
            del voters[voter_id]
        if not voters:
            del self._consumed[topic_id]
        return True

    def purge_topic(self, topic_id: int) -> None:
        self._consumed.pop(topic_id, None)

    def clear(self) -> None:
        self._consumed.clear()
