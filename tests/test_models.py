"""Tests for core data models."""

from datetime import datetime, timezone

from tests.conftest import make_topic

from ledger.models import Candidate, TopicVoteRecord


class TestVoteTopic:
    def test_total_votes_and_option_ids(self):
        topic = make_topic(1, {"A": 2, "B": 3, "C": 0})
        assert topic.total_votes == 5
        assert topic.option_ids == [1, 2, 3]

    def test_get_option(self):
        topic = make_topic(1, {"A": 2, "B": 3})
        assert topic.get_option(2).text == "B"
        assert topic.get_option(3) is None

    def test_copy_is_deep(self):
        topic = make_topic(1, {"A": 2, "B": 3})
        copied = topic.copy()
        copied.options[0].vote_count = 100
        assert topic.options[0].vote_count == 2

    def test_to_dict(self):
        topic = make_topic(4, {"A": 1, "B": 0}, votes_per_voter=2)
        assert topic.to_dict() == {
            "id": 4,
            "title": "Lunch",
            "description": "",
            "options": [
                {"id": 1, "text": "A", "vote_count": 1},
                {"id": 2, "text": "B", "vote_count": 0},
            ],
            "created_at": 1767225600,
            "votes_per_voter": 2,
            "total_votes": 1,
        }


class TestToDict:
    def test_candidate(self):
        assert Candidate(id=1, name="Alice").to_dict() == {
            "id": 1, "name": "Alice", "department": "", "vote_count": 0,
        }

    def test_record(self):
        record = TopicVoteRecord(
            topic_id=2,
            voter_id="alice",
            option_id=1,
            voted_at=datetime(2026, 1, 1, 0, 1, tzinfo=timezone.utc),
        )
        assert record.to_dict() == {
            "topic_id": 2, "voter_id": "alice", "option_id": 1, "voted_at": 1767225660,
        }
