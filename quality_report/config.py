"""
Configuration: notification codes, unit aliases, KPI registry, constants.

KPI_REGISTRY maps each headline KPI to its evaluation direction, display
unit, target, and amber-band tolerance (percentage points).
"""

from enum import Enum
from pathlib import Path

# ---------------------------------------------------------------------------
# File paths — used by the smoke-test runner only
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).resolve().parent.parent

EXPORT_FILE = DATA_DIR / "QOS ET Quality Report KPIs.xlsx"

# ---------------------------------------------------------------------------
# PPM
# ---------------------------------------------------------------------------
PPM_SCALE = 1_000_000

# ---------------------------------------------------------------------------
# Notification types (SAP S/4HANA quality notifications)
# ---------------------------------------------------------------------------
NOTIFICATION_TYPES = ("Q1", "Q2", "Q3", "D1", "D2", "D3", "P1", "P2", "P3")
OTHER_TYPE = "Other"

DEVIATION_TYPES = frozenset({"D1", "D2", "D3"})
PPAP_IN_PROGRESS_TYPES = frozenset({"P1"})
PPAP_COMPLETED_TYPES = frozenset({"P2", "P3"})

DELIVERY_KINDS = ("Customer", "Supplier")


class OtherPolicy(str, Enum):
    """What to do with notifications whose type code is not recognised."""

    INTERNAL = "internal"  # count as internal complaint (Q3)
    EXCLUDE = "exclude"    # leave out of every complaint bucket


DEFAULT_OTHER_POLICY = OtherPolicy.INTERNAL

# ---------------------------------------------------------------------------
# Units of measure
# ---------------------------------------------------------------------------
PIECE_UNITS = frozenset({"PC", "PCS", "PIECE", "PIECES", "ST"})

# Raw unit label -> canonical non-piece unit
UNIT_ALIASES: dict[str, str] = {
    "ML": "ML",
    "M": "M",
    "METER": "M",
    "METERS": "M",
    "M2": "M2",
    "M²": "M2",
    "SQ M": "M2",
    "SQ M2": "M2",
}

CONVERSION_DECIMALS = 2

# ---------------------------------------------------------------------------
# KPI Registry
# ---------------------------------------------------------------------------
# direction: "higher_is_better" or "lower_is_better"
# unit: display unit string
# target: PPM ceiling used for RAG classification
# amber_band: percentage-point tolerance for amber classification
KPI_REGISTRY: dict[str, dict] = {
    "customer_ppm": {
        "direction": "lower_is_better",
        "unit": "ppm",
        "target": 50.0,
        "amber_band": 20.0,
    },
    "supplier_ppm": {
        "direction": "lower_is_better",
        "unit": "ppm",
        "target": 500.0,
        "amber_band": 20.0,
    },
}
