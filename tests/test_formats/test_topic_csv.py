"""Tests for single-topic CSV exports."""

import pytest
from tests.conftest import make_record, make_topic

from ledger.election import ElectionLedger
from ledger.formats.base import LedgerFormatError, TopicSnapshot
from ledger.formats.topic import TopicCsvFormat, export_topic, import_topic

TOPIC_CSV = b"""#topic
id,title,description,createdAt,votesPerVoter
3,Lunch,"Where, and when",1767225600,2
#options
optionId,text,voteCount
1,Pizza,2
2,Sushi,1
3,Tacos,0
#records
topicId,voterId,optionId,votedAt
3,alice,1,1767225700
3,alice,2,1767225800
3,bob,1,1767225900
"""


class TestTopicCsvFormat:
    def setup_method(self):
        self.format = TopicCsvFormat()

    def test_parse(self):
        snapshot = self.format.parse("topic_3.csv", TOPIC_CSV)
        topic = snapshot.topic
        assert (topic.id, topic.title, topic.description, topic.votes_per_voter) == (
            3, "Lunch", "Where, and when", 2,
        )
        assert int(topic.created_at.timestamp()) == 1767225600
        assert [(o.id, o.text, o.vote_count) for o in topic.options] == [
            (1, "Pizza", 2), (2, "Sushi", 1), (3, "Tacos", 0),
        ]
        assert [(r.voter_id, r.option_id) for r in snapshot.records] == [
            ("alice", 1), ("alice", 2), ("bob", 1),
        ]

    def test_dump_then_parse_keeps_records_of_this_topic_only(self):
        topic = make_topic(5, {"A": 1, "B": 0})
        records = [make_record(5, "alice", 1), make_record(6, "bob", 2)]
        content = self.format.dump(TopicSnapshot(topic=topic, records=records))
        snapshot = self.format.parse("topic_5.csv", content)
        assert snapshot.topic == topic
        assert snapshot.records == [records[0]]

    def test_records_section_optional(self):
        content = TOPIC_CSV.split(b"#records")[0]
        assert self.format.parse("topic_3.csv", content).records == []

    def test_missing_options(self):
        content = b"#topic\nid,title,description,createdAt,votesPerVoter\n1,T,,0,1\n"
        with pytest.raises(LedgerFormatError, match="#options"):
            self.format.parse("topic_1.csv", content)

    def test_content_before_marker(self):
        with pytest.raises(LedgerFormatError, match="before the #topic marker"):
            self.format.parse("topic_1.csv", b"hello\n" + TOPIC_CSV)

    def test_bad_header(self):
        with pytest.raises(LedgerFormatError, match="header"):
            self.format.parse("topic_3.csv", TOPIC_CSV.replace(b"optionId,text", b"id,text"))

    def test_bad_number(self):
        with pytest.raises(LedgerFormatError):
            self.format.parse("topic_3.csv", TOPIC_CSV.replace(b"1,Pizza,2", b"1,Pizza,lots"))

    def test_can_parse(self):
        assert self.format.can_parse("exports/topic_12.csv")
        assert not self.format.can_parse("topics.csv")
        assert self.format.can_parse_content(TOPIC_CSV, "upload")


class TestExportImportTopic:
    def test_export_missing_topic(self, ledger):
        assert export_topic(ledger, 1) is None

    def test_export_then_import_into_another_ledger(self, lunch_topic):
        source, topic_id = lunch_topic
        source.cast_topic_vote(topic_id, 1, "alice")
        source.cast_topic_vote(topic_id, 2, "alice")
        source.cast_topic_vote(topic_id, 1, "bob")
        content = export_topic(source, topic_id)

        target = ElectionLedger()
        new_id = import_topic(target, "topic_1.csv", content, topic_id=7)

        assert new_id == 7
        restored = target.query_topic(7)
        assert [o.vote_count for o in restored.options] == [2, 1, 0]
        assert target.get_topic_remaining_votes(7, "alice") == 0
        assert target.get_topic_remaining_votes(7, "bob") == 1
        assert not target.cast_topic_vote(7, 1, "bob")
        assert target.cast_topic_vote(7, 3, "bob")

    def test_import_rejects_garbage(self, ledger):
        with pytest.raises(LedgerFormatError):
            import_topic(ledger, "topic_1.csv", b"1 2 3\n")
