"""Import/export formats for ledger snapshots."""

from .base import LedgerFormat

# Format registry - import formats here to register them
_formats: list[type[LedgerFormat]] = []


def register_format(format_class: type[LedgerFormat]) -> type[LedgerFormat]:
    """Decorator to register a format class."""
    _formats.append(format_class)
    return format_class


def get_all_formats() -> list[type[LedgerFormat]]:
    """Return all registered format classes."""
    return _formats.copy()


def detect_format(source: str) -> LedgerFormat | None:
    """Return an instance of the first format whose filename pattern matches."""
    for format_class in _formats:
        fmt = format_class()
        if fmt.can_parse(source):
            return fmt
    return None


def detect_format_by_content(content: bytes, filename: str) -> LedgerFormat | None:
    """Return an instance of the first format that recognises the content."""
    if not content:
        return None
    for format_class in _formats:
        fmt = format_class()
        if fmt.can_parse_content(content, filename):
            return fmt
    return None
