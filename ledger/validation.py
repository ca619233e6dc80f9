"""Pure validation predicates shared by the registries and their callers.

None of these functions touch ledger state, so presentation and import
layers can use them for pre-flight checks.
"""

from collections.abc import Iterable

from ledger.config import MAX_NAME_LENGTH

# ASCII characters allowed in names besides letters and digits
_NAME_PUNCTUATION = frozenset(" _-")


def validate_candidate_id(candidate_id: int) -> bool:
    """Check that an id is a positive integer."""
    if isinstance(candidate_id, bool) or not isinstance(candidate_id, int):
        return False
    return candidate_id > 0


def is_name_character(char: str) -> bool:
    """Check whether a single character is allowed in a candidate name.

    ASCII letters, digits, space, underscore and hyphen are allowed, as is
    any non-ASCII character (names in other scripts).
    """
    if not char.isascii():
        return True
    return char.isalnum() or char in _NAME_PUNCTUATION


def validate_name(name: str | bytes) -> bool:
    """Check that a candidate name is non-empty, short enough and clean.

    Bytes are decoded as strict UTF-8 first, so malformed multibyte
    sequences are rejected rather than waved through.
    """
    if isinstance(name, bytes):
        try:
            name = name.decode("utf-8")
        except UnicodeDecodeError:
            return False
    if not isinstance(name, str):
        return False
    if not name or len(name) > MAX_NAME_LENGTH:
        return False
    return all(is_name_character(char) for char in name)


def validate_vote_id(vote_id: int, valid_ids: Iterable[int]) -> bool:
    """Check whether a vote targets one of the given candidate ids."""
    return vote_id in set(valid_ids)


def count_invalid_votes(votes: Iterable[int], valid_ids: Iterable[int]) -> int:
    """Count the votes in a vote vector that match no live candidate."""
    valid = set(valid_ids)
    return sum(1 for vote in votes if vote not in valid)


def normalize_voter_id(voter_id: str | None) -> str:
    """Trim a voter identifier; None becomes the empty string."""
    if voter_id is None:
        return ""
    return str(voter_id).strip()
