"""Registry of independently configured poll topics."""

import logging
from collections.abc import Iterable
from datetime import datetime

from ledger.config import FIRST_TOPIC_ID, MIN_TOPIC_OPTIONS
from ledger.models import VoteOption, VoteTopic, utcnow

logger = logging.getLogger(__name__)


class TopicRegistry:
    """Holds every topic, keyed by id, in creation order.

    Topic ids are handed out from a counter that only ever grows, so an id
    is never reused after its topic is deleted. Option ids run from 1 in the
    order the option texts were given.
    """

    def __init__(self):
        self._topics: dict[int, VoteTopic] = {}
        self._next_id = FIRST_TOPIC_ID

    @property
    def topics(self) -> list[VoteTopic]:
        """Copies of all topics in creation order."""
        return [topic.copy() for topic in self._topics.values()]

    @property
    def topic_ids(self) -> list[int]:
        return list(self._topics)

    def __len__(self) -> int:
        return len(self._topics)

    def __contains__(self, topic_id: int) -> bool:
        return topic_id in self._topics

    def was_assigned(self, topic_id: int) -> bool:
        """Whether the id has ever been given to a topic, live or deleted."""
        return FIRST_TOPIC_ID <= topic_id < self._next_id

    def get(self, topic_id: int) -> VoteTopic | None:
        """Get the live topic object. Only the ledger itself should mutate it."""
        return self._topics.get(topic_id)

    def create_topic(
        self,
        title: str,
        description: str,
        option_texts: Iterable[str],
        votes_per_voter: int,
        created_at: datetime | None = None,
    ) -> int | None:
        """Create a topic from a title and a list of option texts.

        Option texts are trimmed and empty ones dropped. At least two must
        survive, and ``votes_per_voter`` must lie between 1 and the number
        of surviving options.

        Returns:
            The new topic's id, or None if any parameter was rejected.
        """
        title = (title or "").strip()
        if not title:
            logger.debug("rejecting topic: empty title")
            return None

        texts = [text.strip() for text in option_texts if text and text.strip()]
        if len(texts) < MIN_TOPIC_OPTIONS:
            logger.debug("rejecting topic %r: only %d options", title, len(texts))
            return None

        if isinstance(votes_per_voter, bool) or not isinstance(votes_per_voter, int):
            logger.debug("rejecting topic %r: quota %r is not an integer", title, votes_per_voter)
            return None
        if not 1 <= votes_per_voter <= len(texts):
            logger.debug(
                "rejecting topic %r: quota %d outside 1..%d", title, votes_per_voter, len(texts)
            )
            return None

        topic_id = self._next_id
        self._next_id += 1
        self._topics[topic_id] = VoteTopic(
            id=topic_id,
            title=title,
            description=description or "",
            options=[VoteOption(id=i, text=text) for i, text in enumerate(texts, start=1)],
            created_at=created_at or utcnow(),
            votes_per_voter=votes_per_voter,
        )
        logger.info("created topic %d (%s) with %d options", topic_id, title, len(texts))
        return topic_id

    def insert_topic(self, topic: VoteTopic) -> bool:
        """Place an already-built topic under its own id.

        Used when restoring exported topics. Fails if the id is not positive
        or has already been handed out, even to a topic that was deleted
        since. The id counter moves past the inserted id so that later
        topics never collide with it.
        """
        if isinstance(topic.id, bool) or not isinstance(topic.id, int) or topic.id <= 0:
            return False
        if self.was_assigned(topic.id):
            logger.debug("cannot insert topic %d: id already assigned", topic.id)
            return False

        self._topics[topic.id] = topic.copy()
        self._next_id = max(self._next_id, topic.id + 1)
        logger.info("inserted topic %d (%s)", topic.id, topic.title)
        return True

    def delete_topic(self, topic_id: int) -> bool:
        if topic_id not in self._topics:
            logger.debug("cannot delete topic %r: not found", topic_id)
            return False
        del self._topics[topic_id]
        logger.info("deleted topic %d", topic_id)
        return True

    def query_topic(self, topic_id: int) -> VoteTopic | None:
        """Get a copy of the topic, or None if it does not exist."""
        topic = self._topics.get(topic_id)
        return topic.copy() if topic is not None else None

    def get_topic_total_votes(self, topic_id: int) -> int:
        """Sum of the option counts of a topic; 0 if the topic does not exist."""
        topic = self._topics.get(topic_id)
        return topic.total_votes if topic is not None else 0

    def increment_option(self, topic_id: int, option_id: int) -> bool:
        topic = self._topics.get(topic_id)
        option = topic.get_option(option_id) if topic is not None else None
        if option is None:
            return False
        option.vote_count += 1
        return True

    def decrement_option(self, topic_id: int, option_id: int) -> bool:
        """Take one vote off an option, never going below zero."""
        topic = self._topics.get(topic_id)
        option = topic.get_option(option_id) if topic is not None else None
        if option is None:
            return False
        if option.vote_count > 0:
            option.vote_count -= 1
        return True

    def clear(self) -> None:
        """Remove every topic. The id counter keeps counting."""
        self._topics.clear()
