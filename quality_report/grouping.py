"""
Grouping index: buckets complaints and deliveries by (site code, month).

Keys have the form ``"<siteCode>::<YYYY-MM>"``. Records that cannot be
bucketed (bad date, missing site, negative quantity, unknown delivery kind)
are left out and reported as DataQualityIssue objects instead of raising.
"""

import logging
import math
from collections.abc import Iterable
from typing import Any

from .config import DELIVERY_KINDS
from .models import Complaint, DataQualityIssue, Delivery
from .utils import normalise_date, safe_float

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "::"


def month_key(value: Any) -> str | None:
    """Truncate a date-like value to "YYYY-MM"; None when unparseable."""
    ts = normalise_date(value)
    if ts is None:
        return None
    return f"{ts.year:04d}-{ts.month:02d}"


def site_month_key(site_code: str, month: str) -> str:
    return f"{site_code}{KEY_SEPARATOR}{month}"


def split_site_month_key(key: str) -> tuple[str, str]:
    site_code, _, month = key.rpartition(KEY_SEPARATOR)
    return site_code, month


def _check_quantity(value: Any) -> str | None:
    number = safe_float(value)
    if number is None or not math.isfinite(number):
        return f"not a number: {value!r}"
    if number < 0:
        return f"negative value: {number}"
    return None


def validate_complaint(complaint: Complaint) -> DataQualityIssue | None:
    """Return the first problem that keeps a complaint out of aggregation."""
    record_id = getattr(complaint, "id", None)

    if not str(complaint.site_code or "").strip():
        return DataQualityIssue(record_id, "complaint", "site_code", "missing site code")
    if month_key(complaint.created_on) is None:
        return DataQualityIssue(
            record_id, "complaint", "created_on",
            f"unparseable date: {complaint.created_on!r}",
        )
    problem = _check_quantity(complaint.defective_parts)
    if problem:
        return DataQualityIssue(record_id, "complaint", "defective_parts", problem)
    return None


def validate_delivery(delivery: Delivery) -> DataQualityIssue | None:
    """Return the first problem that keeps a delivery out of aggregation."""
    record_id = getattr(delivery, "id", None)

    if not str(delivery.site_code or "").strip():
        return DataQualityIssue(record_id, "delivery", "site_code", "missing site code")
    if delivery.kind not in DELIVERY_KINDS:
        return DataQualityIssue(
            record_id, "delivery", "kind",
            f"expected one of {', '.join(DELIVERY_KINDS)}, got {delivery.kind!r}",
        )
    if month_key(delivery.date) is None:
        return DataQualityIssue(
            record_id, "delivery", "date", f"unparseable date: {delivery.date!r}",
        )
    problem = _check_quantity(delivery.quantity)
    if problem:
        return DataQualityIssue(record_id, "delivery", "quantity", problem)
    return None


def valid_complaints(
    complaints: Iterable[Complaint],
    issues: list[DataQualityIssue] | None = None,
) -> list[Complaint]:
    """Drop complaints that fail validation, recording why in ``issues``."""
    kept = []
    for complaint in complaints:
        issue = validate_complaint(complaint)
        if issue is None:
            kept.append(complaint)
        elif issues is not None:
            issues.append(issue)
    return kept


def valid_deliveries(
    deliveries: Iterable[Delivery],
    issues: list[DataQualityIssue] | None = None,
) -> list[Delivery]:
    """Drop deliveries that fail validation, recording why in ``issues``."""
    kept = []
    for delivery in deliveries:
        issue = validate_delivery(delivery)
        if issue is None:
            kept.append(delivery)
        elif issues is not None:
            issues.append(issue)
    return kept


def group_complaints_by_site_month(
    complaints: Iterable[Complaint],
    issues: list[DataQualityIssue] | None = None,
) -> dict[str, list[Complaint]]:
    """Group complaints under ``"<siteCode>::<YYYY-MM>"`` of their creation date."""
    sink: list[DataQualityIssue] = []
    grouped: dict[str, list[Complaint]] = {}

    for complaint in valid_complaints(complaints, sink):
        key = site_month_key(str(complaint.site_code).strip(), month_key(complaint.created_on))
        grouped.setdefault(key, []).append(complaint)

    if sink:
        logger.warning("Skipped %d complaint(s) that could not be grouped", len(sink))
        if issues is not None:
            issues.extend(sink)
    return grouped


def group_deliveries_by_site_month(
    deliveries: Iterable[Delivery],
    issues: list[DataQualityIssue] | None = None,
) -> dict[str, list[Delivery]]:
    """Group deliveries under ``"<siteCode>::<YYYY-MM>"`` of their delivery date."""
    sink: list[DataQualityIssue] = []
    grouped: dict[str, list[Delivery]] = {}

    for delivery in valid_deliveries(deliveries, sink):
        key = site_month_key(str(delivery.site_code).strip(), month_key(delivery.date))
        grouped.setdefault(key, []).append(delivery)

    if sink:
        logger.warning("Skipped %d delivery record(s) that could not be grouped", len(sink))
        if issues is not None:
            issues.extend(sink)
    return grouped
