"""The ledger: one owner for the candidate roster and all poll topics."""

import logging
from collections.abc import Iterable

from ledger.candidates import CandidateRegistry
from ledger.history import TopicUndoLedger
from ledger.models import Candidate, TopicVoteRecord, VoteTopic, utcnow
from ledger.quota import VoterQuotaTracker
from ledger.topics import TopicRegistry
from ledger.validation import normalize_voter_id

logger = logging.getLogger(__name__)


class ElectionLedger:
    """In-memory election and poll state for a single session.

    The ledger owns two independent subsystems that share nothing but the
    instance:

    - the candidate roster, with its flat vote history and LIFO undo
      (``self.candidates``)
    - the poll topics, with per-voter quotas and one global history of
      topic votes whose undo always reverses the most recent topic vote
      in the whole ledger

    Every method runs to completion synchronously. Mutations either succeed
    or leave state untouched and report failure through their return value;
    nothing here raises for a rejected operation. The ledger is not safe
    for concurrent mutation: callers serving several actors must serialize
    access to it (see api/election.py).
    """

    def __init__(self):
        self.candidates = CandidateRegistry()
        self.topics = TopicRegistry()
        self.quotas = VoterQuotaTracker()
        self.topic_history = TopicUndoLedger()

    # --- candidate roster ---

    def add_candidate(self, candidate_id: int, name: str, department: str = "") -> bool:
        return self.candidates.add_candidate(candidate_id, name, department)

    def modify_candidate(self, candidate_id: int, new_name: str, new_department: str = "") -> bool:
        return self.candidates.modify_candidate(candidate_id, new_name, new_department)

    def delete_candidate(self, candidate_id: int) -> bool:
        return self.candidates.delete_candidate(candidate_id)

    def query_candidate(self, candidate_id: int) -> Candidate | None:
        return self.candidates.query_candidate(candidate_id)

    def get_all_candidates(self) -> list[Candidate]:
        return self.candidates.candidates

    def vote(self, vote_vector: Iterable[int], cumulative: bool = True) -> int:
        return self.candidates.vote(vote_vector, cumulative)

    def cast_vote(self, candidate_id: int) -> bool:
        return self.candidates.cast_vote(candidate_id)

    def find_winner(self) -> int | None:
        return self.candidates.find_winner()

    def undo_last_vote(self) -> bool:
        return self.candidates.undo_last_vote()

    def undo_last_votes(self, count: int) -> int:
        return self.candidates.undo_last_votes(count)

    def get_vote_history(self) -> list[int]:
        return self.candidates.vote_history

    def reset_votes(self) -> None:
        self.candidates.reset_votes()

    # --- topics ---

    def create_topic(
        self,
        title: str,
        description: str,
        option_texts: Iterable[str],
        votes_per_voter: int,
    ) -> int | None:
        return self.topics.create_topic(title, description, option_texts, votes_per_voter)

    def delete_topic(self, topic_id: int) -> bool:
        """Delete a topic and forget every voter's quota usage in it.

        Records of votes cast in the topic stay in the global history.
        """
        if not self.topics.delete_topic(topic_id):
            return False
        self.quotas.purge_topic(topic_id)
        return True

    def query_topic(self, topic_id: int) -> VoteTopic | None:
        return self.topics.query_topic(topic_id)

    def get_all_topics(self) -> list[VoteTopic]:
        return self.topics.topics

    def get_topic_total_votes(self, topic_id: int) -> int:
        return self.topics.get_topic_total_votes(topic_id)

    def cast_topic_vote(self, topic_id: int, option_id: int, voter_id: str | None = None) -> bool:
        """Vote for an option in a topic.

        With a voter id, the vote counts against that voter's quota for the
        topic, may not repeat an option the voter already picked, and is
        recorded in the global topic history. Without one (``None``), only
        the option's count changes: no quota, no history record.
        """
        topic = self.topics.get(topic_id)
        if topic is None:
            logger.debug("cannot vote in topic %r: not found", topic_id)
            return False

        if voter_id is None:
            return self.topics.increment_option(topic_id, option_id)

        voter = normalize_voter_id(voter_id)
        if not voter:
            logger.debug("cannot vote in topic %d: empty voter id", topic_id)
            return False
        if not self.quotas.can_vote(topic, voter, option_id):
            return False
        if topic.get_option(option_id) is None:
            logger.debug("cannot vote in topic %d: option %r not found", topic_id, option_id)
            return False

        self.topics.increment_option(topic_id, option_id)
        self.quotas.consume(topic_id, voter, option_id)
        self.topic_history.append(TopicVoteRecord(
            topic_id=topic_id,
            voter_id=voter,
            option_id=option_id,
            voted_at=utcnow(),
        ))
        logger.info("voter %r voted for option %d in topic %d", voter, option_id, topic_id)
        return True

    def get_topic_remaining_votes(self, topic_id: int, voter_id: str) -> int:
        """How many more options a voter may pick in a topic (0 if it does not exist)."""
        topic = self.topics.get(topic_id)
        if topic is None:
            return 0
        return self.quotas.remaining(topic, normalize_voter_id(voter_id))

    def get_topic_vote_history(self) -> list[TopicVoteRecord]:
        return self.topic_history.records

    def undo_last_topic_vote(self) -> TopicVoteRecord | None:
        """Reverse the most recent topic vote in the whole ledger.

        If the record's topic still exists, the option loses one vote and
        goes back into the voter's quota. If the topic has been deleted, the
        record is consumed anyway and nothing else changes.

        Returns:
            The record that was undone, or None if the history is empty.
        """
        record = self.topic_history.pop()
        if record is None:
            return None

        if record.topic_id not in self.topics:
            logger.warning(
                "undid vote by %r in deleted topic %d; no tally to reverse",
                record.voter_id, record.topic_id,
            )
            return record

        self.topics.decrement_option(record.topic_id, record.option_id)
        self.quotas.release(record.topic_id, record.voter_id, record.option_id)
        logger.info(
            "undid vote by %r for option %d in topic %d",
            record.voter_id, record.option_id, record.topic_id,
        )
        return record

    def import_topic(
        self,
        topic: VoteTopic,
        records: Iterable[TopicVoteRecord] = (),
        topic_id: int | None = None,
    ) -> int | None:
        """Restore an exported topic, its counts and its voters' quota usage.

        The topic goes through the same checks as ``create_topic``. With
        ``topic_id`` the topic is placed under that id, failing if the id has
        ever been handed out; otherwise it gets a fresh id. Blank options are
        dropped and the rest renumbered, with counts and records following
        their option. The records rebuild which options each voter has used,
        but are not added to the global history, so imported votes cannot be
        undone.

        Returns:
            The id of the restored topic, or None if it was rejected.
        """
        # create_topic drops blank options and renumbers the rest from 1
        kept = [option for option in topic.options if option.text and option.text.strip()]
        texts = [option.text for option in kept]
        if topic_id is None:
            new_id = self.topics.create_topic(
                topic.title, topic.description, texts, topic.votes_per_voter, topic.created_at
            )
            if new_id is None:
                return None
        else:
            if self.topics.was_assigned(topic_id):
                logger.debug("cannot import topic as %d: id already assigned", topic_id)
                return None
            scratch = TopicRegistry()
            scratch_id = scratch.create_topic(
                topic.title, topic.description, texts, topic.votes_per_voter, topic.created_at
            )
            if scratch_id is None:
                return None
            built = scratch.get(scratch_id)
            built.id = topic_id
            if not self.topics.insert_topic(built):
                return None
            new_id = topic_id

        restored = self.topics.get(new_id)
        option_ids = {}
        for option, source in zip(restored.options, kept):
            option.vote_count = max(source.vote_count, 0)
            option_ids[source.id] = option.id

        for record in records:
            voter = normalize_voter_id(record.voter_id)
            option_id = option_ids.get(record.option_id)
            if not voter or option_id is None:
                continue
            if self.quotas.can_vote(restored, voter, option_id):
                self.quotas.consume(new_id, voter, option_id)

        logger.info("imported topic %r as %d", topic.title, new_id)
        return new_id

    # --- whole ledger ---

    def clear_all(self) -> None:
        """Forget every candidate, topic, quota and history entry."""
        self.candidates.clear_all()
        self.topics.clear()
        self.quotas.clear()
        self.topic_history.clear()
        logger.info("cleared ledger")
