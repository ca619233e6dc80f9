"""Anonymize voter ids in an exported topic or vote-records CSV file.

Parses the export, generates a fake replacement for every voter id using
faker with a fixed seed, and writes an anonymized copy. The same voter gets
the same replacement throughout the file, so per-voter quota usage survives
the round trip.

Usage:
    python scripts/anonymize_records.py exports/topic_vote_records.csv
    python scripts/anonymize_records.py exports/topic_3.csv -o topic_3-anon.csv
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from faker import Faker

sys.path.insert(0, str(Path(__file__).parent.parent))

from ledger.formats.base import TopicSnapshot
from ledger.formats.records import TopicRecordsCsvFormat
from ledger.formats.topic import TopicCsvFormat
from ledger.models import TopicVoteRecord

SEED = 20261019


def discover_voters(records: list[TopicVoteRecord]) -> list[str]:
    """Distinct voter ids in order of first appearance."""
    return list(dict.fromkeys(record.voter_id for record in records))


def generate_fake_voters(voters: list[str], seed: int) -> dict[str, str]:
    """Map each voter id to a unique fake user name.

    Fake names never collide with each other or with a real voter id, so
    the anonymized file keeps exactly as many distinct voters.
    """
    fake = Faker()
    Faker.seed(seed)

    mapping: dict[str, str] = {}
    taken = set(voters)
    for voter in voters:
        fake_voter = fake.user_name()
        while fake_voter in taken:
            fake_voter = fake.user_name()
        taken.add(fake_voter)
        mapping[voter] = fake_voter
    return mapping


def anonymize_records(records: list[TopicVoteRecord], mapping: dict[str, str]) -> list[TopicVoteRecord]:
    return [replace(record, voter_id=mapping.get(record.voter_id, record.voter_id)) for record in records]


def main():
    parser = argparse.ArgumentParser(
        description="Anonymize voter ids in a topic or vote-records CSV export")
    parser.add_argument("input", help="Path to the exported CSV file")
    parser.add_argument("-o", "--output",
                        help="Output path (default: <input>-anon.csv)")
    args = parser.parse_args()

    input_path = Path(args.input)
    content = input_path.read_bytes()

    topic_format = TopicCsvFormat()
    records_format = TopicRecordsCsvFormat()
    if topic_format.can_parse_content(content, input_path.name):
        snapshot = topic_format.parse(str(input_path), content)
        records = snapshot.records
    elif records_format.can_parse_content(content, input_path.name):
        snapshot = None
        records = records_format.parse(str(input_path), content)
    else:
        parser.error(f"{input_path} is neither a topic export nor a vote-records export")

    voters = discover_voters(records)
    print(f"Found {len(voters)} unique voter ids")

    mapping = generate_fake_voters(voters, SEED)
    for original, fake in mapping.items():
        print(f"  {original} -> {fake}")

    anonymized = anonymize_records(records, mapping)
    if snapshot is not None:
        result = topic_format.dump(TopicSnapshot(topic=snapshot.topic, records=anonymized))
    else:
        result = records_format.dump(anonymized)

    output_path = Path(args.output) if args.output else input_path.with_name(f"{input_path.stem}-anon.csv")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result)
    print(f"Written to {output_path}")


if __name__ == "__main__":
    main()
