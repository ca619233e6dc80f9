"""Tests for the global topic vote records export."""

import pytest
from tests.conftest import make_record

from ledger.formats.base import LedgerFormatError
from ledger.formats.records import TopicRecordsCsvFormat


class TestTopicRecordsCsvFormat:
    def setup_method(self):
        self.format = TopicRecordsCsvFormat()

    def test_dump(self):
        content = self.format.dump([make_record(1, "alice", 2), make_record(3, "bob", 1, seconds=60)])
        assert content == (
            b"topicId,voterId,optionId,votedAt\n"
            b"1,alice,2,1767225600\n"
            b"3,bob,1,1767225660\n"
        )

    def test_parse_keeps_order(self):
        records = [make_record(2, "bob", 1, seconds=9), make_record(1, "alice", 2)]
        assert self.format.parse("records.csv", self.format.dump(records)) == records

    def test_voter_with_comma(self):
        records = [make_record(1, "Doe, Jane", 1)]
        assert self.format.parse("records.csv", self.format.dump(records)) == records

    def test_header_only(self):
        assert self.format.parse("records.csv", b"topicId,voterId,optionId,votedAt\n") == []

    def test_bad_timestamp(self):
        with pytest.raises(LedgerFormatError, match="line 2"):
            self.format.parse("records.csv", b"topicId,voterId,optionId,votedAt\n1,a,1,yesterday\n")

    def test_ledger_history_export(self, lunch_topic):
        ledger, topic_id = lunch_topic
        ledger.cast_topic_vote(topic_id, 1, "alice")
        ledger.cast_topic_vote(topic_id, 3, "bob")
        records = self.format.parse("records.csv", self.format.dump(ledger.get_topic_vote_history()))
        assert [(r.topic_id, r.voter_id, r.option_id) for r in records] == [
            (topic_id, "alice", 1),
            (topic_id, "bob", 3),
        ]
