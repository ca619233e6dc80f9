"""Abstract base class for ledger import/export formats."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ledger.models import TopicVoteRecord, VoteTopic


class LedgerFormatError(ValueError):
    """Raised when file content does not match the format it claims to be."""
    pass


@dataclass
class TopicSnapshot:
    """A single exported topic together with the vote records cast in it."""
    topic: VoteTopic
    records: list[TopicVoteRecord] = field(default_factory=list)


class LedgerFormat(ABC):
    """Abstract base class for reading and writing ledger snapshots.

    Each format handles one kind of delimited text file. Formats are
    registered via the @register_format decorator in ledger/formats/__init__.py
    and can be picked by filename or by sniffing the content.
    """

    FILENAME_PATTERN: re.Pattern | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this format."""
        pass

    def can_parse(self, source: str) -> bool:
        """Check if a filename looks like it belongs to this format."""
        if self.FILENAME_PATTERN is None:
            return False
        return bool(self.FILENAME_PATTERN.search(source))

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Check if this format can likely handle the given file content.

        Subclasses should override this to look for the tell-tale header
        of their format.

        Args:
            content: Raw bytes of the file
            filename: Original filename (may help with basic filtering)

        Returns:
            True if this format can likely handle the content, False otherwise
        """
        return False

    @abstractmethod
    def parse(self, source: str, content: bytes) -> Any:
        """Parse file content into a snapshot.

        Args:
            source: Original filename or URL (for error messages)
            content: Raw bytes of the file

        Returns:
            The format's snapshot type

        Raises:
            LedgerFormatError: If the content cannot be parsed
        """
        pass

    @abstractmethod
    def dump(self, snapshot: Any) -> bytes:
        """Serialize a snapshot into file content."""
        pass


def decode_text(content: bytes) -> str:
    """Decode file content as UTF-8, tolerating a byte order mark."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise LedgerFormatError(f"File is not valid UTF-8: {e}") from e


def first_line(content: bytes) -> str:
    """The first non-blank line of the content, stripped; '' if there is none."""
    text = content.decode("utf-8-sig", errors="replace")
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""
