"""
Simulated data generator for the QOS ET quality report.

Generates plausible complaint notifications and delivery quantities for a
handful of plants. All values are synthetic — no real operational data is
used.
"""

import numpy as np
import pandas as pd

from .models import Complaint, Delivery
from .units import normalize_complaint

# ---------------------------------------------------------------------------
# Typical plant parameters
# ---------------------------------------------------------------------------
SITES = {
    "145": "Stockdorf",
    "175": "Utting",
    "212": "Neubrandenburg",
    "310": "Schierling",
}

# Monthly delivered pieces: (customer outbound, supplier inbound)
_DELIVERY_VOLUME = {
    "145": (180_000, 420_000),
    "175": (95_000, 210_000),
    "212": (60_000, 150_000),
    "310": (120_000, 260_000),
}

# Relative frequency of each notification type
_TYPE_WEIGHTS = {
    "Q1": 0.30,
    "Q2": 0.25,
    "Q3": 0.20,
    "D1": 0.06,
    "D2": 0.04,
    "D3": 0.03,
    "P1": 0.05,
    "P2": 0.04,
    "P3": 0.03,
}

# Supplier materials delivered in bulk units
_BULK_MATERIALS = [
    ("ML", "WINDSCREEN CLEANER 600 ML"),
    ("M", "HOSE EPDM L6100MM"),
    ("M2", "INSULATION MAT W1000MM H2000MM"),
]


def _months(start_month: str, n_months: int) -> pd.DatetimeIndex:
    return pd.date_range(start_month, periods=n_months, freq="MS")


def generate_complaints(
    sites: dict[str, str] | None = None,
    start_month: str = "2025-01-01",
    n_months: int = 6,
    per_site_month: int = 8,
    seed: int = 42,
) -> list[Complaint]:
    """Generate normalised complaint notifications.

    About one in ten supplier complaints is reported in ML, M or M2 and
    goes through the unit normaliser like a parsed extract would.
    """
    rng = np.random.default_rng(seed)
    sites = sites or SITES
    codes = list(_TYPE_WEIGHTS)
    weights = np.array(list(_TYPE_WEIGHTS.values()))
    weights = weights / weights.sum()

    complaints = []
    counter = 0
    for month in _months(start_month, n_months):
        for site_code, site_name in sites.items():
            n = int(rng.poisson(per_site_month))
            for _ in range(n):
                counter += 1
                notification_type = str(rng.choice(codes, p=weights))
                created_on = month + pd.Timedelta(days=int(rng.integers(0, 28)))
                defective = float(rng.integers(1, 40))
                unit, description = "PC", None

                if notification_type == "Q2" and rng.random() < 0.1:
                    unit, description = _BULK_MATERIALS[int(rng.integers(0, len(_BULK_MATERIALS)))]
                    defective = float(rng.integers(1, 20)) * {"ML": 600, "M": 6.1, "M2": 2.0}[unit]

                number = f"{300_000_000 + counter}"
                complaint = Complaint(
                    id=f"{site_code}-{number}",
                    notification_number=number,
                    notification_type=notification_type,
                    site_code=site_code,
                    site_name=site_name,
                    created_on=created_on,
                    defective_parts=defective,
                    source="SAP_S4",
                    unit_of_measure=unit,
                    material_description=description,
                )
                complaints.append(normalize_complaint(complaint))

    return complaints


def generate_deliveries(
    sites: dict[str, str] | None = None,
    start_month: str = "2025-01-01",
    n_months: int = 6,
    seed: int = 42,
) -> list[Delivery]:
    """Generate one customer and one supplier delivery total per site and month."""
    rng = np.random.default_rng(seed + 1)
    sites = sites or SITES

    deliveries = []
    for month in _months(start_month, n_months):
        for site_code, site_name in sites.items():
            customer_base, supplier_base = _DELIVERY_VOLUME.get(site_code, (100_000, 200_000))
            for kind, base in (("Customer", customer_base), ("Supplier", supplier_base)):
                quantity = max(0.0, round(base * rng.normal(1.0, 0.08)))
                deliveries.append(Delivery(
                    id=f"{site_code}-{site_code}-{month:%Y-%m-%d}-{kind}",
                    site_code=site_code,
                    site_name=site_name,
                    date=month + pd.Timedelta(days=14),
                    quantity=quantity,
                    kind=kind,
                ))

    return deliveries
