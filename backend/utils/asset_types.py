"""Asset type vocabulary and per-type quantity precision."""

from decimal import Decimal
from enum import Enum


class AssetType(str, Enum):
    """Kinds of assets a lot can hold."""

    CRYPTO = "crypto"
    STOCK = "stock"
    ETF = "etf"
    CUSTOM = "custom"


# Decimal places allowed in a lot quantity when the asset does not override it
DEFAULT_PRECISION: dict[AssetType, int] = {
    AssetType.CRYPTO: 6,
    AssetType.STOCK: 2,
    AssetType.ETF: 2,
    AssetType.CUSTOM: 2,
}

MAX_PRECISION = 8


def default_precision(asset_type: AssetType | str) -> int:
    """Return the default quantity precision for an asset type."""
    return DEFAULT_PRECISION[AssetType(asset_type)]


def decimal_places(value: Decimal) -> int:
    """Count significant decimal places, ignoring trailing zeros."""
    exponent = value.normalize().as_tuple().exponent
    if not isinstance(exponent, int) or exponent >= 0:
        return 0
    return -exponent
