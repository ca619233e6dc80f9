"""Tests for filename- and content-based format detection."""

from ledger.formats import detect_format, detect_format_by_content, get_all_formats
from ledger.formats.candidates import CandidateCsvFormat
from ledger.formats.records import TopicRecordsCsvFormat
from ledger.formats.topic import TopicCsvFormat
from ledger.formats.votes import VoteVectorFormat


class TestDetectFormatByContent:

    def test_all_formats_registered(self):
        registered = set(get_all_formats())
        assert {VoteVectorFormat, CandidateCsvFormat, TopicCsvFormat, TopicRecordsCsvFormat} <= registered

    def test_detects_vote_vector(self):
        assert isinstance(detect_format_by_content(b"1 2 3\n", "upload"), VoteVectorFormat)

    def test_detects_candidates(self):
        content = b"id,name,department,voteCount\n1,Alice,,0\n"
        assert isinstance(detect_format_by_content(content, "upload"), CandidateCsvFormat)

    def test_detects_topic(self):
        content = b"#topic\nid,title,description,createdAt,votesPerVoter\n"
        assert isinstance(detect_format_by_content(content, "upload"), TopicCsvFormat)

    def test_detects_records(self):
        content = b"topicId,voterId,optionId,votedAt\n"
        assert isinstance(detect_format_by_content(content, "upload"), TopicRecordsCsvFormat)

    def test_returns_none_for_unknown_content(self):
        assert detect_format_by_content(b"<html><body>Hello</body></html>", "page.html") is None

    def test_returns_none_for_empty_content(self):
        assert detect_format_by_content(b"", "empty.csv") is None


class TestDetectFormat:

    def test_by_filename(self):
        assert isinstance(detect_format("votes.dat"), VoteVectorFormat)
        assert isinstance(detect_format("candidates.csv"), CandidateCsvFormat)
        assert isinstance(detect_format("topic_4.csv"), TopicCsvFormat)
        assert isinstance(detect_format("topic_vote_records.csv"), TopicRecordsCsvFormat)

    def test_unknown_filename(self):
        assert detect_format("notes.md") is None
