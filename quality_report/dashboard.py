"""
Dashboard-ready output functions.

These are the entry points for the presentation layer (cards, charts,
Excel export, AI-summary prompt builder). Each function returns plain dicts
or DataFrames and never mutates the KPI records it is given.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from .config import KPI_REGISTRY
from .kpis import classify_kpi
from .models import Complaint, Delivery, GlobalPpm, KpiReport, MonthlySiteKpi
from .transforms import kpis_to_frame

logger = logging.getLogger(__name__)


def get_quality_overview(report: KpiReport) -> dict:
    """Single entry point a front end would call to populate headline cards.

    Returns
    -------
    Dict with structure:
    {
        "months": ["2025-01", ...],
        "sites": ["145", ...],
        "complaints": {"customer": 3, "supplier": 1, "internal": 0},
        "deviations": 2,
        "ppap": {"in_progress": 1, "completed": 2},
        "customer_ppm": {"actual": 102.9, "target": 50.0, "rag": "red"},
        "supplier_ppm": {"actual": None, "target": 500.0, "rag": "grey"},
        "data_quality_issues": 0,
    }
    """
    monthly = report.monthly
    overview: dict = {
        "months": get_available_months(monthly),
        "sites": get_available_sites(monthly),
        "complaints": {
            "customer": sum(k.customer_complaints_q1 for k in monthly),
            "supplier": sum(k.supplier_complaints_q2 for k in monthly),
            "internal": sum(k.internal_complaints_q3 for k in monthly),
        },
        "deviations": sum(k.deviations_d for k in monthly),
        "ppap": {
            "in_progress": sum(k.ppap.in_progress for k in monthly),
            "completed": sum(k.ppap.completed for k in monthly),
        },
        "data_quality_issues": len(report.issues),
    }

    for kpi_name, value in (
        ("customer_ppm", report.global_ppm.customer_ppm),
        ("supplier_ppm", report.global_ppm.supplier_ppm),
    ):
        overview[kpi_name] = {
            "actual": value,
            "target": KPI_REGISTRY[kpi_name]["target"],
            "rag": classify_kpi(kpi_name, value),
        }

    return overview


def get_upload_summary(
    complaints: Iterable[Complaint],
    deliveries: Iterable[Delivery],
    kpis: Iterable[MonthlySiteKpi],
) -> dict:
    """Record and quantity totals shown after an upload."""
    complaints = list(complaints)
    deliveries = list(deliveries)
    customer_qty = sum(d.quantity for d in deliveries if d.kind == "Customer")
    supplier_qty = sum(d.quantity for d in deliveries if d.kind == "Supplier")
    return {
        "total_complaints": len(complaints),
        "total_deliveries": len(deliveries),
        "total_delivery_quantity": customer_qty + supplier_qty,
        "customer_delivery_quantity": customer_qty,
        "supplier_delivery_quantity": supplier_qty,
        "site_month_combinations": len(list(kpis)),
    }


def get_available_months(kpis: Iterable[MonthlySiteKpi]) -> list[str]:
    """Return sorted list of available months for UI dropdowns."""
    return sorted({k.month for k in kpis})


def get_available_sites(kpis: Iterable[MonthlySiteKpi]) -> list[str]:
    """Return sorted list of site codes for UI dropdowns."""
    return sorted({k.site_code for k in kpis})


def get_site_trend(kpis: Iterable[MonthlySiteKpi], site_code: str) -> pd.DataFrame:
    """Month-by-month KPI rows for one site, with RAG columns for both PPMs."""
    df = kpis_to_frame(k for k in kpis if k.site_code == site_code)
    if df.empty:
        logger.warning("No KPI data for site '%s'", site_code)
        return df.assign(customer_rag=pd.Series(dtype=str), supplier_rag=pd.Series(dtype=str))

    df["customer_rag"] = [
        classify_kpi("customer_ppm", None if pd.isna(v) else v) for v in df["customer_ppm"]
    ]
    df["supplier_rag"] = [
        classify_kpi("supplier_ppm", None if pd.isna(v) else v) for v in df["supplier_ppm"]
    ]
    return df.reset_index(drop=True)


def export_kpis_to_excel(
    kpis: Iterable[MonthlySiteKpi],
    path: str | Path,
    global_ppm: GlobalPpm | None = None,
) -> Path:
    """Write KPI output to an Excel workbook.

    Sheets
    ------
    - "Monthly KPIs": one row per (month, site)
    - "Global PPM": customer/supplier PPM over all data (if given)
    """
    path = Path(path)
    df = kpis_to_frame(kpis)

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Monthly KPIs", index=False)
        if global_ppm is not None:
            pd.DataFrame([
                {"kpi": "customer_ppm", "value": global_ppm.customer_ppm},
                {"kpi": "supplier_ppm", "value": global_ppm.supplier_ppm},
            ]).to_excel(writer, sheet_name="Global PPM", index=False)

    logger.info("Exported %d KPI rows to %s", len(df), path)
    return path
