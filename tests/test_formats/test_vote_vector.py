"""Tests for whitespace-separated vote vector files."""

import pytest
from tests.conftest import make_ledger

from ledger.formats.base import LedgerFormatError
from ledger.formats.votes import VoteVectorFormat, parse_vote_vector, tally_vote_text


class TestParseVoteVector:
    def test_any_whitespace(self):
        assert parse_vote_vector("1 2\n3\t4  ") == ([1, 2, 3, 4], 0)

    def test_invalid_tokens_counted(self):
        assert parse_vote_vector("1 x 0 -2 3.5 2") == ([1, 2], 4)

    def test_empty(self):
        assert parse_vote_vector("") == ([], 0)


class TestTallyVoteText:
    def test_batch_result(self):
        ledger = make_ledger({1: "Alice", 2: "Bob"})
        result = tally_vote_text(ledger, "1 1 2 7 abc")
        assert (result.cast, result.invalid_ids, result.invalid_tokens) == (4, 1, 1)
        assert result.total == 5
        assert result.invalid == 2
        assert ledger.query_candidate(1).vote_count == 2

    def test_nothing_usable_tallies_nothing(self):
        ledger = make_ledger({1: "Alice"})
        result = tally_vote_text(ledger, "abc -1")
        assert result.cast == 0
        assert result.invalid_tokens == 2
        assert ledger.get_vote_history() == []


class TestVoteVectorFormat:
    def setup_method(self):
        self.format = VoteVectorFormat()

    def test_name(self):
        assert self.format.name == "Vote vector"

    def test_parse(self):
        assert self.format.parse("votes.dat", b"1 2 1\n3\n") == [1, 2, 1, 3]

    def test_parse_skips_bad_tokens(self):
        assert self.format.parse("votes.dat", b"1 two 3") == [1, 3]

    def test_parse_nothing_valid(self):
        with pytest.raises(LedgerFormatError, match="No valid votes"):
            self.format.parse("votes.dat", b"one two")

    def test_dump(self):
        assert self.format.dump([3, 1, 2]) == b"3 1 2\n"

    def test_can_parse(self):
        assert self.format.can_parse("votes.dat")
        assert self.format.can_parse("batch.TXT")
        assert not self.format.can_parse("votes.csv")

    def test_can_parse_content(self):
        assert self.format.can_parse_content(b"\n1 2 3\n", "x")
        assert not self.format.can_parse_content(b"id,name,department,voteCount\n", "x")
        assert not self.format.can_parse_content(b"", "x")
