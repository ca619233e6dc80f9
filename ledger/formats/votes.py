"""Vote vector files: whitespace-separated candidate ids."""

import logging
import re
from dataclasses import dataclass

from ledger.election import ElectionLedger
from ledger.formats import register_format
from ledger.formats.base import LedgerFormat, LedgerFormatError, decode_text, first_line

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"^[+-]?\d+$")


@dataclass
class BatchVoteResult:
    """Outcome of tallying a batch of votes.

    Attributes:
        cast: Votes that were well-formed positive integers and got tallied
        invalid_ids: Tallied votes that matched no candidate
        invalid_tokens: Tokens that were not positive integers and were skipped
    """
    cast: int
    invalid_ids: int
    invalid_tokens: int

    @property
    def total(self) -> int:
        return self.cast + self.invalid_tokens

    @property
    def invalid(self) -> int:
        return self.invalid_ids + self.invalid_tokens


def parse_vote_vector(text: str) -> tuple[list[int], int]:
    """Split text into candidate ids.

    Returns:
        (votes, invalid_tokens): the positive integers in input order, and
        how many tokens were skipped because they were not positive integers.
    """
    votes = []
    invalid_tokens = 0
    for token in text.split():
        if _INTEGER.match(token) and int(token) > 0:
            votes.append(int(token))
        else:
            invalid_tokens += 1
    return votes, invalid_tokens


def tally_vote_text(ledger: ElectionLedger, text: str, cumulative: bool = True) -> BatchVoteResult:
    """Parse a vote vector typed or pasted by a user and tally it.

    Returns:
        The batch outcome. Nothing is tallied if no token is usable.
    """
    votes, invalid_tokens = parse_vote_vector(text)
    if not votes:
        return BatchVoteResult(cast=0, invalid_ids=0, invalid_tokens=invalid_tokens)
    invalid_ids = ledger.vote(votes, cumulative)
    return BatchVoteResult(cast=len(votes), invalid_ids=invalid_ids, invalid_tokens=invalid_tokens)


@register_format
class VoteVectorFormat(LedgerFormat):
    """Plain-text vote vector file (``votes.dat``).

    Candidate ids separated by any whitespace, e.g.::

        1 2 1 3 1
    """

    FILENAME_PATTERN = re.compile(r"\.(dat|txt)$", re.IGNORECASE)

    @property
    def name(self) -> str:
        return "Vote vector"

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Tell-tale sign: the first line is nothing but integers."""
        tokens = first_line(content).split()
        return bool(tokens) and all(_INTEGER.match(token) for token in tokens)

    def parse(self, source: str, content: bytes) -> list[int]:
        votes, invalid_tokens = parse_vote_vector(decode_text(content))
        if invalid_tokens:
            if not votes:
                raise LedgerFormatError(f"No valid votes found in {source}")
            logger.warning("skipped %d invalid tokens in %s", invalid_tokens, source)
        return votes

    def dump(self, snapshot: list[int]) -> bytes:
        return (" ".join(str(vote) for vote in snapshot) + "\n").encode("utf-8")
