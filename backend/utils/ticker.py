"""Utility functions for handling asset symbols and price source labels."""

# Suffix appended to a quote's source when it is replayed from an expired cache entry
STALE_SOURCE_SUFFIX = " (cached)"

MANUAL_SOURCE = "manual"


def normalize_symbol(symbol: str) -> str:
    """Return the canonical (trimmed, upper-case) form of a symbol."""
    return symbol.strip().upper()


def mark_stale(source: str) -> str:
    """Tag a price source as a stale cache replay.

    Idempotent: an already-tagged source is returned unchanged.
    """
    if is_stale_source(source):
        return source
    return f"{source}{STALE_SOURCE_SUFFIX}"


def is_stale_source(source: str) -> bool:
    """Check if a price source carries the stale cache marker."""
    return source.endswith(STALE_SOURCE_SUFFIX)
