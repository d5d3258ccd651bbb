"""
Shared value coercion: dates from spreadsheet extracts, numeric quantities.
"""

import logging
import numbers
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

EXCEL_EPOCH = pd.Timestamp("1899-12-30")


def normalise_date(val: Any) -> pd.Timestamp | None:
    """Convert Excel serial number, string, or datetime to pd.Timestamp.

    Excel serial numbers use the 1899-12-30 epoch. Native datetime objects
    are cast directly. Returns None for missing or unparseable values.
    """
    if val is None:
        return None
    if isinstance(val, bool):
        return None
    if isinstance(val, pd.Timestamp):
        return None if pd.isna(val) else val
    if isinstance(val, numbers.Real):
        if pd.isna(val):
            return None
        try:
            return EXCEL_EPOCH + pd.Timedelta(days=int(val))
        except (ValueError, OverflowError):
            logger.warning("Could not convert serial number %s to date", val)
            return None
    if isinstance(val, str) and not val.strip():
        return None
    try:
        ts = pd.Timestamp(val)
    except (ValueError, TypeError, OverflowError):
        logger.warning("Could not parse date value: %s", val)
        return None
    return None if pd.isna(ts) else ts


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric values."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return None
    try:
        result = float(val)
    except (ValueError, TypeError):
        return None
    if pd.isna(result):
        return None
    return result
