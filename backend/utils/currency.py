"""Supported currencies for lots, dividends, and display."""

SUPPORTED_CURRENCIES: tuple[str, ...] = (
    "USD",
    "EUR",
    "GBP",
    "JPY",
    "CAD",
    "AUD",
    "CHF",
    "CNY",
    "ARS",
    "BRL",
)


def normalize_currency(code: str) -> str:
    """Upper-case and validate a currency code.

    Raises:
        ValueError: If the code is not in :data:`SUPPORTED_CURRENCIES`.
    """
    normalized = code.strip().upper()
    if normalized not in SUPPORTED_CURRENCIES:
        raise ValueError(
            f"Unsupported currency {code!r}; expected one of {', '.join(SUPPORTED_CURRENCIES)}"
        )
    return normalized
