"""Tests for candidate roster CSV snapshots."""

import pytest
from tests.conftest import make_ledger

from ledger.election import ElectionLedger
from ledger.formats.base import LedgerFormatError
from ledger.formats.candidates import CandidateCsvFormat, apply_candidates
from ledger.models import Candidate

ROSTER_CSV = (
    "id,name,department,voteCount\n"
    "1,Alice,Physics,4\n"
    '2,"Bob Jr",,0\n'
    "3,张三,数学,2\n"
).encode("utf-8")


class TestCandidateCsvFormat:
    def setup_method(self):
        self.format = CandidateCsvFormat()

    def test_parse(self):
        candidates = self.format.parse("candidates.csv", ROSTER_CSV)
        assert [c.to_dict() for c in candidates] == [
            {"id": 1, "name": "Alice", "department": "Physics", "vote_count": 4},
            {"id": 2, "name": "Bob Jr", "department": "", "vote_count": 0},
            {"id": 3, "name": "张三", "department": "数学", "vote_count": 2},
        ]

    def test_parse_tolerates_bom(self):
        assert len(self.format.parse("candidates.csv", b"\xef\xbb\xbf" + ROSTER_CSV)) == 3

    def test_dump_matches_input(self):
        candidates = self.format.parse("candidates.csv", ROSTER_CSV)
        assert self.format.dump(candidates) == ROSTER_CSV.replace(b'"Bob Jr"', b"Bob Jr")

    def test_department_with_comma_is_quoted(self):
        content = self.format.dump([Candidate(id=1, name="Alice", department="Arts, Crafts")])
        assert b'"Arts, Crafts"' in content

    def test_missing_header(self):
        with pytest.raises(LedgerFormatError, match="header"):
            self.format.parse("candidates.csv", b"1,Alice,,0\n")

    def test_bad_row(self):
        with pytest.raises(LedgerFormatError, match="line 2"):
            self.format.parse("candidates.csv", b"id,name,department,voteCount\nx,Alice,,0\n")
        with pytest.raises(LedgerFormatError, match="expected 4 fields"):
            self.format.parse("candidates.csv", b"id,name,department,voteCount\n1,Alice\n")

    def test_not_utf8(self):
        with pytest.raises(LedgerFormatError, match="UTF-8"):
            self.format.parse("candidates.csv", b"id,name,department,voteCount\n1,\xff,,0\n")


class TestApplyCandidates:
    def test_restores_counts(self):
        ledger = ElectionLedger()
        candidates = CandidateCsvFormat().parse("candidates.csv", ROSTER_CSV)
        assert apply_candidates(ledger, candidates) == 3
        assert ledger.query_candidate(1).vote_count == 4
        assert ledger.find_winner() == 1
        # restored counts are not history entries
        assert ledger.get_vote_history() == []

    def test_skips_rejected_candidates(self):
        ledger = make_ledger({1: "Existing"})
        added = apply_candidates(ledger, [
            Candidate(id=1, name="Alice"),
            Candidate(id=0, name="Zero"),
            Candidate(id=2, name="bad;name"),
            Candidate(id=3, name="Carol", vote_count=1),
        ])
        assert added == 1
        assert ledger.query_candidate(1).name == "Existing"
        assert ledger.query_candidate(3).vote_count == 1
