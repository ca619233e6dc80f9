"""Global topic vote history exported as CSV."""

import csv
import io
import re
from datetime import datetime, timezone

from ledger.formats import register_format
from ledger.formats.base import LedgerFormat, LedgerFormatError, decode_text, first_line
from ledger.models import TopicVoteRecord

HEADER = ["topicId", "voterId", "optionId", "votedAt"]


def to_timestamp(moment: datetime) -> int:
    return int(moment.timestamp())


def from_timestamp(value: str) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def record_to_row(record: TopicVoteRecord) -> list:
    return [record.topic_id, record.voter_id, record.option_id, to_timestamp(record.voted_at)]


def record_from_row(row: list[str], where: str) -> TopicVoteRecord:
    """Build a record from a CSV row; ``where`` prefixes error messages."""
    if len(row) != len(HEADER):
        raise LedgerFormatError(f"{where}: expected {len(HEADER)} fields, got {len(row)}")
    try:
        return TopicVoteRecord(
            topic_id=int(row[0]),
            voter_id=row[1].strip(),
            option_id=int(row[2]),
            voted_at=from_timestamp(row[3]),
        )
    except (ValueError, OverflowError, OSError) as e:
        raise LedgerFormatError(f"{where}: {e}") from e


@register_format
class TopicRecordsCsvFormat(LedgerFormat):
    """Every topic vote in the ledger, oldest first.

    Timestamps are Unix seconds::

        topicId,voterId,optionId,votedAt
        1,alice,2,1767225600
    """

    FILENAME_PATTERN = re.compile(r"records.*\.csv$", re.IGNORECASE)

    @property
    def name(self) -> str:
        return "Topic vote records CSV"

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Tell-tale sign: the header row."""
        return first_line(content) == ",".join(HEADER)

    def parse(self, source: str, content: bytes) -> list[TopicVoteRecord]:
        reader = csv.reader(io.StringIO(decode_text(content)))
        rows = [row for row in reader if any(cell.strip() for cell in row)]
        if not rows or [cell.strip() for cell in rows[0]] != HEADER:
            raise LedgerFormatError(f"{source} does not start with the header {','.join(HEADER)}")
        return [
            record_from_row(row, f"{source} line {line_number}")
            for line_number, row in enumerate(rows[1:], start=2)
        ]

    def dump(self, snapshot: list[TopicVoteRecord]) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(HEADER)
        for record in snapshot:
            writer.writerow(record_to_row(record))
        return buffer.getvalue().encode("utf-8")
