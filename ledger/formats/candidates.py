"""Candidate roster snapshots in CSV."""

import csv
import io
import logging
import re

from ledger.election import ElectionLedger
from ledger.formats import register_format
from ledger.formats.base import LedgerFormat, LedgerFormatError, decode_text, first_line
from ledger.models import Candidate

logger = logging.getLogger(__name__)

HEADER = ["id", "name", "department", "voteCount"]


def apply_candidates(ledger: ElectionLedger, candidates: list[Candidate]) -> int:
    """Add imported candidates to the ledger and restore their vote counts.

    Candidates the ledger rejects (bad id, bad name, duplicate id) are
    skipped.

    Returns:
        Number of candidates added.
    """
    added = 0
    for candidate in candidates:
        if not ledger.add_candidate(candidate.id, candidate.name, candidate.department):
            logger.warning("skipped imported candidate %r", candidate.id)
            continue
        ledger.candidates.restore_vote_count(candidate.id, candidate.vote_count)
        added += 1
    return added


@register_format
class CandidateCsvFormat(LedgerFormat):
    """Roster snapshot: one ``id,name,department,voteCount`` row per candidate."""

    FILENAME_PATTERN = re.compile(r"candidates.*\.csv$", re.IGNORECASE)

    @property
    def name(self) -> str:
        return "Candidate roster CSV"

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Tell-tale sign: the header row."""
        return first_line(content) == ",".join(HEADER)

    def parse(self, source: str, content: bytes) -> list[Candidate]:
        reader = csv.reader(io.StringIO(decode_text(content)))
        rows = [row for row in reader if any(cell.strip() for cell in row)]
        if not rows or [cell.strip() for cell in rows[0]] != HEADER:
            raise LedgerFormatError(f"{source} does not start with the header {','.join(HEADER)}")

        candidates = []
        for line_number, row in enumerate(rows[1:], start=2):
            if len(row) != len(HEADER):
                raise LedgerFormatError(
                    f"{source} line {line_number}: expected {len(HEADER)} fields, got {len(row)}"
                )
            try:
                candidate_id = int(row[0])
                vote_count = int(row[3])
            except ValueError as e:
                raise LedgerFormatError(f"{source} line {line_number}: {e}") from e
            candidates.append(Candidate(
                id=candidate_id,
                name=row[1],
                department=row[2],
                vote_count=vote_count,
            ))
        return candidates

    def dump(self, snapshot: list[Candidate]) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(HEADER)
        for c in snapshot:
            writer.writerow([c.id, c.name, c.department, c.vote_count])
        return buffer.getvalue().encode("utf-8")
