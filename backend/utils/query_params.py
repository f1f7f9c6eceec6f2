"""Shared query parameter parsing utilities."""

from fastapi import HTTPException

from utils.ticker import normalize_symbol

_MAX_SYMBOLS = 200


def parse_symbols(symbols: str | None) -> list[str] | None:
    """Parse a comma-separated symbols string into a normalized list.

    Args:
        symbols: Comma-separated string of symbols, or None.

    Returns:
        De-duplicated list of upper-case symbols in input order, or None
        if input is empty.

    Raises:
        HTTPException: If more than ``_MAX_SYMBOLS`` symbols are requested.
    """
    if not symbols:
        return None
    result: list[str] = []
    for raw in symbols.split(","):
        if not raw.strip():
            continue
        symbol = normalize_symbol(raw)
        if symbol not in result:
            result.append(symbol)
    if len(result) > _MAX_SYMBOLS:
        raise HTTPException(
            status_code=422,
            detail=f"At most {_MAX_SYMBOLS} symbols may be requested at once",
        )
    return result or None
