"""Global, time-ordered history of topic votes."""

from ledger.models import TopicVoteRecord


class TopicUndoLedger:
    """Append-only list of topic vote records across all topics.

    Undo pops from the end, so it always reverses the most recent topic
    vote in the whole ledger, whichever topic it belongs to.
    """

    def __init__(self):
        self._records: list[TopicVoteRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[TopicVoteRecord]:
        """All records, oldest first."""
        return list(self._records)

    def records_for_topic(self, topic_id: int) -> list[TopicVoteRecord]:
        return [r for r in self._records if r.topic_id == topic_id]

    def append(self, record: TopicVoteRecord) -> None:
        self._records.append(record)

    def pop(self) -> TopicVoteRecord | None:
        """Remove and return the most recent record, or None if there is none."""
        if not self._records:
            return None
        return self._records.pop()

    def clear(self) -> None:
        self._records.clear()
