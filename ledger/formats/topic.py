"""Single-topic export: definition, option counts and vote records."""

import csv
import io
import re

from ledger.election import ElectionLedger
from ledger.formats import register_format
from ledger.formats import records as records_format
from ledger.formats.base import (
    LedgerFormat, LedgerFormatError, TopicSnapshot, decode_text, first_line,
)
from ledger.models import VoteOption, VoteTopic

TOPIC_MARKER = "#topic"
OPTIONS_MARKER = "#options"
RECORDS_MARKER = "#records"

TOPIC_HEADER = ["id", "title", "description", "createdAt", "votesPerVoter"]
OPTIONS_HEADER = ["optionId", "text", "voteCount"]


@register_format
class TopicCsvFormat(LedgerFormat):
    """One topic in a sectioned CSV file.

    Each section starts with a marker row and a header row::

        #topic
        id,title,description,createdAt,votesPerVoter
        3,Lunch,Where do we eat,1767225600,2
        #options
        optionId,text,voteCount
        1,Pizza,4
        2,Sushi,1
        #records
        topicId,voterId,optionId,votedAt
        3,alice,1,1767225700

    The records section may be empty.
    """

    FILENAME_PATTERN = re.compile(r"topic_\d+\.csv$", re.IGNORECASE)

    @property
    def name(self) -> str:
        return "Topic CSV"

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Tell-tale sign: the file opens with the #topic marker."""
        return first_line(content) == TOPIC_MARKER

    def parse(self, source: str, content: bytes) -> TopicSnapshot:
        reader = csv.reader(io.StringIO(decode_text(content)))
        rows = [row for row in reader if any(cell.strip() for cell in row)]
        sections = self._split_sections(source, rows)

        topic_rows = sections.get(TOPIC_MARKER)
        if topic_rows is None or len(topic_rows) != 2:
            raise LedgerFormatError(f"{source}: {TOPIC_MARKER} section must hold a header and one row")
        self._check_header(source, TOPIC_MARKER, topic_rows[0], TOPIC_HEADER)
        topic_row = topic_rows[1]
        if len(topic_row) != len(TOPIC_HEADER):
            raise LedgerFormatError(
                f"{source}: topic row has {len(topic_row)} fields, expected {len(TOPIC_HEADER)}"
            )

        option_rows = sections.get(OPTIONS_MARKER)
        if not option_rows:
            raise LedgerFormatError(f"{source}: missing {OPTIONS_MARKER} section")
        self._check_header(source, OPTIONS_MARKER, option_rows[0], OPTIONS_HEADER)

        try:
            options = []
            for row in option_rows[1:]:
                if len(row) != len(OPTIONS_HEADER):
                    raise LedgerFormatError(
                        f"{source}: option row has {len(row)} fields, expected {len(OPTIONS_HEADER)}"
                    )
                options.append(VoteOption(id=int(row[0]), text=row[1], vote_count=int(row[2])))

            topic = VoteTopic(
                id=int(topic_row[0]),
                title=topic_row[1],
                description=topic_row[2],
                options=options,
                created_at=records_format.from_timestamp(topic_row[3]),
                votes_per_voter=int(topic_row[4]),
            )
        except LedgerFormatError:
            raise
        except (ValueError, OverflowError, OSError) as e:
            raise LedgerFormatError(f"{source}: {e}") from e

        records = []
        record_rows = sections.get(RECORDS_MARKER)
        if record_rows:
            self._check_header(source, RECORDS_MARKER, record_rows[0], records_format.HEADER)
            records = [
                records_format.record_from_row(row, f"{source} {RECORDS_MARKER}")
                for row in record_rows[1:]
            ]

        return TopicSnapshot(topic=topic, records=records)

    def dump(self, snapshot: TopicSnapshot) -> bytes:
        topic = snapshot.topic
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow([TOPIC_MARKER])
        writer.writerow(TOPIC_HEADER)
        writer.writerow([
            topic.id,
            topic.title,
            topic.description,
            records_format.to_timestamp(topic.created_at),
            topic.votes_per_voter,
        ])
        writer.writerow([OPTIONS_MARKER])
        writer.writerow(OPTIONS_HEADER)
        for option in topic.options:
            writer.writerow([option.id, option.text, option.vote_count])
        writer.writerow([RECORDS_MARKER])
        writer.writerow(records_format.HEADER)
        for record in snapshot.records:
            if record.topic_id == topic.id:
                writer.writerow(records_format.record_to_row(record))
        return buffer.getvalue().encode("utf-8")

    @staticmethod
    def _split_sections(source: str, rows: list[list[str]]) -> dict[str, list[list[str]]]:
        """Group rows under the marker row that precedes them."""
        sections: dict[str, list[list[str]]] = {}
        current = None
        for row in rows:
            marker = row[0].strip() if len(row) == 1 else ""
            if marker in (TOPIC_MARKER, OPTIONS_MARKER, RECORDS_MARKER):
                current = sections.setdefault(marker, [])
                continue
            if current is None:
                raise LedgerFormatError(f"{source}: content before the {TOPIC_MARKER} marker")
            current.append(row)
        return sections

    @staticmethod
    def _check_header(source: str, marker: str, row: list[str], expected: list[str]) -> None:
        if [cell.strip() for cell in row] != expected:
            raise LedgerFormatError(
                f"{source}: {marker} header should be {','.join(expected)}, got {','.join(row)}"
            )


def export_topic(ledger: ElectionLedger, topic_id: int) -> bytes | None:
    """Dump one topic of a ledger with its records; None if it does not exist."""
    topic = ledger.query_topic(topic_id)
    if topic is None:
        return None
    snapshot = TopicSnapshot(topic=topic, records=ledger.topic_history.records_for_topic(topic_id))
    return TopicCsvFormat().dump(snapshot)


def import_topic(
    ledger: ElectionLedger, source: str, content: bytes, topic_id: int | None = None
) -> int | None:
    """Parse a topic export and restore it into a ledger.

    Raises:
        LedgerFormatError: If the content is not a topic export

    Returns:
        The restored topic's id, or None if the ledger rejected it.
    """
    snapshot = TopicCsvFormat().parse(source, content)
    return ledger.import_topic(snapshot.topic, snapshot.records, topic_id=topic_id)
