"""
KPI computation functions — pure functions with no side effects.

Provides PPM calculation, per-site monthly aggregation, the global PPM
rollup, and RAG classification of PPM against its target.
"""

import logging
import math
from collections.abc import Iterable

import pandas as pd

from .classifier import NotificationCategory, category_for, is_deviation, ppap_state
from .config import DEFAULT_OTHER_POLICY, KPI_REGISTRY, PPM_SCALE, OtherPolicy
from .grouping import (
    group_complaints_by_site_month,
    group_deliveries_by_site_month,
    site_month_key,
    split_site_month_key,
    valid_complaints,
    valid_deliveries,
)
from .models import (
    Complaint,
    ConversionDetail,
    ConversionRollup,
    DataQualityIssue,
    Delivery,
    GlobalPpm,
    KpiReport,
    MonthlySiteKpi,
    PpapCounts,
)

logger = logging.getLogger(__name__)


def calc_ppm(defective_parts: float, delivered_quantity: float) -> float | None:
    """Return parts per million defective.

    PPM is None if delivered_quantity == 0: no deliveries means no signal,
    not a perfect score.
    """
    if delivered_quantity == 0:
        return None
    return (defective_parts / delivered_quantity) * PPM_SCALE


def classify_ppm(
    ppm: float | None,
    target: float,
    amber_band_pct: float = 20.0,
) -> str:
    """Return 'green', 'amber', 'red', or 'grey' for a PPM value.

    Lower is better:
        green  if ppm <= target
        amber  if ppm <= target * (1 + amber_band_pct/100)
        red    otherwise
    A missing PPM or a missing target is grey.
    """
    if ppm is None or pd.isna(ppm) or target is None:
        return "grey"
    if ppm <= target:
        return "green"
    if ppm <= target * (1 + amber_band_pct / 100):
        return "amber"
    return "red"


def classify_kpi(kpi_name: str, value: float | None) -> str:
    """RAG classification of a registered KPI (see config.KPI_REGISTRY)."""
    if kpi_name not in KPI_REGISTRY:
        raise ValueError(f"Unknown KPI: {kpi_name}")
    registry = KPI_REGISTRY[kpi_name]
    return classify_ppm(value, registry["target"], registry.get("amber_band", 20.0))


def _sum(values: Iterable[float]) -> float:
    return math.fsum(float(v) for v in values)


def _conversion_rollup(complaints: list[Complaint]) -> ConversionRollup | None:
    """Summarise successful unit conversions; None when there were none."""
    converted = [c for c in complaints if c.conversion is not None and c.conversion.was_converted]
    if not converted:
        return None

    details = tuple(
        ConversionDetail(
            notification_number=c.notification_number,
            original_value=c.conversion.original_value,
            original_unit=c.conversion.original_unit,
            converted_pieces=c.conversion.converted_value,
            conversion_factor=c.conversion.conversion_factor,
            material_description=c.conversion.material_description,
        )
        for c in sorted(converted, key=lambda c: str(c.notification_number))
    )
    return ConversionRollup(
        total_converted=len(details),
        total_original=_sum(d.original_value for d in details),
        total_pieces=_sum(d.converted_pieces for d in details),
        conversions=details,
    )


def _site_name(complaints: list[Complaint], deliveries: list[Delivery]) -> str | None:
    for record in [*complaints, *deliveries]:
        if record.site_name:
            return record.site_name
    return None


def _build_site_month_kpi(
    site_code: str,
    month: str,
    complaints: list[Complaint],
    deliveries: list[Delivery],
    other_policy: OtherPolicy | str,
) -> MonthlySiteKpi:
    by_category: dict[NotificationCategory, list[Complaint]] = {c: [] for c in NotificationCategory}
    in_progress = completed = deviations = 0

    for complaint in complaints:
        category = category_for(complaint.notification_type, other_policy)
        if category is not None:
            by_category[category].append(complaint)
        if is_deviation(complaint.notification_type):
            deviations += 1
        match ppap_state(complaint.notification_type):
            case "in_progress":
                in_progress += 1
            case "completed":
                completed += 1

    customer = by_category[NotificationCategory.CUSTOMER_COMPLAINT]
    supplier = by_category[NotificationCategory.SUPPLIER_COMPLAINT]
    internal = by_category[NotificationCategory.INTERNAL_COMPLAINT]

    customer_defective = _sum(c.defective_parts for c in customer)
    supplier_defective = _sum(c.defective_parts for c in supplier)
    customer_delivered = _sum(d.quantity for d in deliveries if d.kind == "Customer")
    supplier_delivered = _sum(d.quantity for d in deliveries if d.kind == "Supplier")

    return MonthlySiteKpi(
        month=month,
        site_code=site_code,
        site_name=_site_name(complaints, deliveries),
        customer_complaints_q1=len(customer),
        supplier_complaints_q2=len(supplier),
        internal_complaints_q3=len(internal),
        deviations_d=deviations,
        ppap=PpapCounts(in_progress=in_progress, completed=completed),
        customer_ppm=calc_ppm(customer_defective, customer_delivered),
        supplier_ppm=calc_ppm(supplier_defective, supplier_delivered),
        customer_deliveries=customer_delivered,
        supplier_deliveries=supplier_delivered,
        customer_defective_parts=customer_defective,
        supplier_defective_parts=supplier_defective,
        internal_defective_parts=_sum(c.defective_parts for c in internal),
        customer_conversions=_conversion_rollup(customer),
        supplier_conversions=_conversion_rollup(supplier),
    )


def calculate_monthly_site_kpis(
    complaints: Iterable[Complaint],
    deliveries: Iterable[Delivery],
    issues: list[DataQualityIssue] | None = None,
    other_policy: OtherPolicy | str = DEFAULT_OTHER_POLICY,
) -> list[MonthlySiteKpi]:
    """Compute one KPI record per (site, month) present in either input.

    Counts are per notification, defective parts are summed as already
    normalised to pieces, and PPM is None wherever nothing was delivered.
    Output is sorted by month, then site code.

    Records that cannot be grouped, and complaints whose unit conversion
    failed, are appended to ``issues`` when a list is given.
    """
    complaints_by_key = group_complaints_by_site_month(complaints, issues)
    deliveries_by_key = group_deliveries_by_site_month(deliveries, issues)

    if issues is not None:
        kept = (c for bucket in complaints_by_key.values() for c in bucket)
        for complaint in kept:
            if complaint.conversion is not None and complaint.conversion.needs_attention:
                issues.append(DataQualityIssue(
                    complaint.id, "complaint", "unit_of_measure",
                    f"{complaint.conversion.original_value} {complaint.conversion.original_unit} "
                    "could not be converted to pieces; original value used",
                ))

    keys = {split_site_month_key(k) for k in (*complaints_by_key, *deliveries_by_key)}

    kpis = []
    for site_code, month in sorted(keys, key=lambda sm: (sm[1], sm[0])):
        key = site_month_key(site_code, month)
        kpis.append(_build_site_month_kpi(
            site_code,
            month,
            complaints_by_key.get(key, []),
            deliveries_by_key.get(key, []),
            other_policy,
        ))

    logger.info("Computed KPIs for %d site-month combinations", len(kpis))
    return kpis


def calculate_global_ppm(
    complaints: Iterable[Complaint],
    deliveries: Iterable[Delivery],
    other_policy: OtherPolicy | str = DEFAULT_OTHER_POLICY,
) -> GlobalPpm:
    """Customer and supplier PPM over all sites and months together.

    Uses the same record validity rules as the monthly aggregation so that
    both views add up to the same totals.
    """
    complaints = valid_complaints(complaints)
    deliveries = valid_deliveries(deliveries)

    customer_defective = _sum(
        c.defective_parts for c in complaints
        if category_for(c.notification_type, other_policy) is NotificationCategory.CUSTOMER_COMPLAINT
    )
    supplier_defective = _sum(
        c.defective_parts for c in complaints
        if category_for(c.notification_type, other_policy) is NotificationCategory.SUPPLIER_COMPLAINT
    )
    customer_delivered = _sum(d.quantity for d in deliveries if d.kind == "Customer")
    supplier_delivered = _sum(d.quantity for d in deliveries if d.kind == "Supplier")

    return GlobalPpm(
        customer_ppm=calc_ppm(customer_defective, customer_delivered),
        supplier_ppm=calc_ppm(supplier_defective, supplier_delivered),
    )


def build_kpi_report(
    complaints: Iterable[Complaint],
    deliveries: Iterable[Delivery],
    other_policy: OtherPolicy | str = DEFAULT_OTHER_POLICY,
) -> KpiReport:
    """Monthly site KPIs, global PPM and data-quality issues in one result."""
    complaints = list(complaints)
    deliveries = list(deliveries)
    issues: list[DataQualityIssue] = []

    monthly = calculate_monthly_site_kpis(complaints, deliveries, issues, other_policy)
    global_ppm = calculate_global_ppm(complaints, deliveries, other_policy)

    if issues:
        logger.warning("KPI report built with %d data-quality issue(s)", len(issues))

    return KpiReport(monthly=tuple(monthly), global_ppm=global_ppm, issues=tuple(issues))
