"""
QOS ET Quality Report — End-to-end KPI pipeline.

Runs the aggregation over simulated complaints and deliveries, prints
dashboard-ready outputs, and exports the monthly KPIs to Excel.

Usage:
    python main.py
"""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from quality_report.config import EXPORT_FILE
from quality_report.dashboard import (
    export_kpis_to_excel,
    get_quality_overview,
    get_site_trend,
    get_upload_summary,
)
from quality_report.kpis import build_kpi_report
from quality_report.simulator import generate_complaints, generate_deliveries
from quality_report.transforms import kpis_to_frame, summarise_by_month

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Run the KPI pipeline on simulated data and print smoke-test outputs."""

    print("=" * 70)
    print("  QOS ET QUALITY REPORT — KPI Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Source records
    # ------------------------------------------------------------------
    print("[ 1 ] SOURCE RECORDS")
    print("-" * 40)

    complaints = generate_complaints()
    deliveries = generate_deliveries()
    converted = [c for c in complaints if c.conversion and c.conversion.was_converted]
    print(f"\nComplaints: {len(complaints)} ({len(converted)} converted to PC)")
    print(f"Deliveries: {len(deliveries)}")

    # ------------------------------------------------------------------
    # 2. Aggregation
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] MONTHLY SITE KPIs")
    print("-" * 40)

    report = build_kpi_report(complaints, deliveries)
    fact_kpi = kpis_to_frame(report.monthly)
    print(f"\nfact_monthly_site_kpi: {len(fact_kpi)} rows")
    cols = ["month", "site_code", "customer_complaints_q1", "supplier_complaints_q2",
            "customer_ppm", "supplier_ppm"]
    print(fact_kpi[cols].head(12).to_string(index=False))

    monthly = summarise_by_month(report.monthly)
    print(f"\nMonthly totals across sites: {len(monthly)} rows")
    print(monthly[["month", "sites", "customer_ppm", "supplier_ppm"]].to_string(index=False))

    # ------------------------------------------------------------------
    # 3. Dashboard outputs
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] DASHBOARD OUTPUTS")
    print("-" * 40)

    overview = get_quality_overview(report)
    for name, value in overview.items():
        print(f"  {name:20s} | {value}")

    summary = get_upload_summary(complaints, deliveries, report.monthly)
    print(f"\nUpload summary: {summary}")

    trend = get_site_trend(report.monthly, "145")
    print("\nSite 145 trend:")
    print(trend[["month", "customer_ppm", "customer_rag"]].to_string(index=False))

    path = export_kpis_to_excel(report.monthly, EXPORT_FILE, report.global_ppm)
    print(f"\nExported to {path}")

    # ------------------------------------------------------------------
    # 4. Consistency checks
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] CONSISTENCY CHECKS")
    print("-" * 40)

    keys = [k.key for k in report.monthly]
    check1 = len(keys) == len(set(keys))
    print(f"\n  [{'PASS' if check1 else 'FAIL'}] {len(keys)} unique site-month keys")

    ordered = sorted(report.monthly, key=lambda k: (k.month, k.site_code))
    check2 = list(report.monthly) == ordered
    print(f"  [{'PASS' if check2 else 'FAIL'}] KPIs sorted by month, then site")

    defective = fact_kpi["customer_defective_parts"].sum()
    delivered = fact_kpi["customer_deliveries"].sum()
    rebuilt = defective / delivered * 1_000_000 if delivered else None
    expected = report.global_ppm.customer_ppm
    check3 = (rebuilt is None and expected is None) or (
        rebuilt is not None and expected is not None and abs(rebuilt - expected) < 1e-6
    )
    print(f"  [{'PASS' if check3 else 'FAIL'}] Global customer PPM matches site rollup ({expected})")

    print(f"  [INFO] {len(report.issues)} data-quality issue(s)")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
