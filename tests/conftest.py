"""Pytest configuration and fixtures."""
import itertools

import pytest

from quality_report.models import Complaint, Delivery

_ids = itertools.count(1)


def complaint(site_code, notification_type, defective_parts, created_on, **kwargs):
    """Build a complaint with a unique id and notification number."""
    n = next(_ids)
    kwargs.setdefault("id", f"C{n}")
    kwargs.setdefault("notification_number", f"N{n:04d}")
    return Complaint(
        site_code=site_code,
        notification_type=notification_type,
        defective_parts=defective_parts,
        created_on=created_on,
        **kwargs,
    )


def delivery(site_code, kind, quantity, date, **kwargs):
    """Build a delivery with a unique id."""
    kwargs.setdefault("id", f"D{next(_ids)}")
    return Delivery(site_code=site_code, kind=kind, quantity=quantity, date=date, **kwargs)


@pytest.fixture
def two_site_complaints():
    """Customer complaints across two sites and two months."""
    return [
        complaint("145", "Q1", 10, "2025-01-15"),
        complaint("175", "Q1", 8, "2025-01-25"),
        complaint("145", "Q1", 12, "2025-02-10"),
    ]


@pytest.fixture
def two_site_deliveries():
    """Customer deliveries matching two_site_complaints."""
    return [
        delivery("145", "Customer", 100_000, "2025-01-10"),
        delivery("175", "Customer", 75_000, "2025-01-20"),
        delivery("145", "Customer", 120_000, "2025-02-05"),
    ]
