"""
Data transforms: merge uploads, flatten KPI records into a fact table,
and filter or roll up KPI output for reporting.
"""

import logging
from collections.abc import Iterable

import pandas as pd

from .kpis import calc_ppm
from .models import MonthlySiteKpi

logger = logging.getLogger(__name__)

KPI_COLUMNS = [
    "month",
    "site_code",
    "site_name",
    "customer_complaints_q1",
    "supplier_complaints_q2",
    "internal_complaints_q3",
    "deviations_d",
    "ppap_in_progress",
    "ppap_completed",
    "customer_defective_parts",
    "supplier_defective_parts",
    "internal_defective_parts",
    "customer_deliveries",
    "supplier_deliveries",
    "customer_ppm",
    "supplier_ppm",
    "customer_converted",
    "customer_converted_original",
    "customer_converted_pieces",
    "supplier_converted",
    "supplier_converted_original",
    "supplier_converted_pieces",
]

_SUM_COLUMNS = [
    "customer_complaints_q1",
    "supplier_complaints_q2",
    "internal_complaints_q3",
    "deviations_d",
    "ppap_in_progress",
    "ppap_completed",
    "customer_defective_parts",
    "supplier_defective_parts",
    "internal_defective_parts",
    "customer_deliveries",
    "supplier_deliveries",
]


def merge_records_by_id(existing: Iterable, incoming: Iterable) -> list:
    """Merge two record lists, keeping the latest record for each id.

    Records from ``incoming`` replace those in ``existing`` with the same
    id. Order follows first appearance of each id.
    """
    merged: dict = {}
    for record in existing:
        merged[record.id] = record
    replaced = 0
    for record in incoming:
        if record.id in merged:
            replaced += 1
        merged[record.id] = record

    logger.info("Merged records: %d total, %d replaced", len(merged), replaced)
    return list(merged.values())


def _kpi_row(kpi: MonthlySiteKpi) -> dict:
    cc = kpi.customer_conversions
    sc = kpi.supplier_conversions
    return {
        "month": kpi.month,
        "site_code": kpi.site_code,
        "site_name": kpi.site_name,
        "customer_complaints_q1": kpi.customer_complaints_q1,
        "supplier_complaints_q2": kpi.supplier_complaints_q2,
        "internal_complaints_q3": kpi.internal_complaints_q3,
        "deviations_d": kpi.deviations_d,
        "ppap_in_progress": kpi.ppap.in_progress,
        "ppap_completed": kpi.ppap.completed,
        "customer_defective_parts": kpi.customer_defective_parts,
        "supplier_defective_parts": kpi.supplier_defective_parts,
        "internal_defective_parts": kpi.internal_defective_parts,
        "customer_deliveries": kpi.customer_deliveries,
        "supplier_deliveries": kpi.supplier_deliveries,
        "customer_ppm": kpi.customer_ppm,
        "supplier_ppm": kpi.supplier_ppm,
        "customer_converted": cc.total_converted if cc else 0,
        "customer_converted_original": cc.total_original if cc else 0.0,
        "customer_converted_pieces": cc.total_pieces if cc else 0.0,
        "supplier_converted": sc.total_converted if sc else 0,
        "supplier_converted_original": sc.total_original if sc else 0.0,
        "supplier_converted_pieces": sc.total_pieces if sc else 0.0,
    }


def kpis_to_frame(kpis: Iterable[MonthlySiteKpi]) -> pd.DataFrame:
    """Flatten KPI records into a fact_monthly_site_kpi DataFrame.

    One row per (month, site) in the input order. PPM columns hold NaN
    where the KPI has no PPM.
    """
    rows = [_kpi_row(kpi) for kpi in kpis]
    if not rows:
        return pd.DataFrame(columns=KPI_COLUMNS)

    df = pd.DataFrame(rows, columns=KPI_COLUMNS)
    df["customer_ppm"] = pd.to_numeric(df["customer_ppm"], errors="coerce")
    df["supplier_ppm"] = pd.to_numeric(df["supplier_ppm"], errors="coerce")
    return df


def filter_kpis(
    kpis: Iterable[MonthlySiteKpi],
    sites: Iterable[str] | None = None,
    start_month: str | None = None,
    end_month: str | None = None,
) -> list[MonthlySiteKpi]:
    """Keep KPIs for the given sites within [start_month, end_month].

    Months are "YYYY-MM" strings and compare lexicographically. An empty or
    missing ``sites`` selection means all sites.
    """
    site_set = set(sites) if sites else None
    result = []
    for kpi in kpis:
        if site_set is not None and kpi.site_code not in site_set:
            continue
        if start_month is not None and kpi.month < start_month:
            continue
        if end_month is not None and kpi.month > end_month:
            continue
        result.append(kpi)
    return result


def summarise_by_month(kpis: Iterable[MonthlySiteKpi]) -> pd.DataFrame:
    """Aggregate site-level KPIs to one row per month across all sites.

    Rules
    -----
    - Counts, defective parts and deliveries: sum
    - PPM: recomputed from the summed numerator and denominator, NaN where
      nothing was delivered (never an average of site PPMs)
    """
    df = kpis_to_frame(kpis)
    if df.empty:
        logger.warning("No KPI rows - returning empty monthly summary")
        return pd.DataFrame(columns=["month", "sites", *_SUM_COLUMNS, "customer_ppm", "supplier_ppm"])

    result = df.groupby("month", sort=True).agg(
        sites=("site_code", "nunique"),
        **{col: (col, "sum") for col in _SUM_COLUMNS},
    ).reset_index()

    result["customer_ppm"] = [
        calc_ppm(d, q) for d, q in zip(result["customer_defective_parts"], result["customer_deliveries"])
    ]
    result["supplier_ppm"] = [
        calc_ppm(d, q) for d, q in zip(result["supplier_defective_parts"], result["supplier_deliveries"])
    ]
    result["customer_ppm"] = pd.to_numeric(result["customer_ppm"], errors="coerce")
    result["supplier_ppm"] = pd.to_numeric(result["supplier_ppm"], errors="coerce")

    logger.info("Summarised site KPIs to %d monthly rows", len(result))
    return result
