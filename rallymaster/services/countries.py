"""Country name normalization for rally search."""

from __future__ import annotations

from typing import Dict, Optional

_ALIASES: Dict[str, str] = {
    "USA": "US",
    "U.S.A.": "US",
    "U.S.": "US",
    "UNITED STATES": "US",
    "UNITED STATES OF AMERICA": "US",
    "AMERICA": "US",
    "UK": "GB",
    "U.K.": "GB",
    "GREAT BRITAIN": "GB",
    "BRITAIN": "GB",
    "UNITED KINGDOM": "GB",
    "CAN": "CA",
    "CANADA": "CA",
    "AUS": "AU",
    "AUS.": "AU",
    "AUSTRALIA": "AU",
}


def normalize_country(raw: Optional[str]) -> Optional[str]:
    """Map a free-text country to its code; unknown values pass through upper-cased."""

    if raw is None:
        return None
    value = raw.strip().upper()
    if not value:
        return None
    return _ALIASES.get(value, value)


__all__ = ["normalize_country"]
