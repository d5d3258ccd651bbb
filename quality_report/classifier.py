"""
Notification classifier — pure mapping from SAP notification type codes
to complaint categories and PPAP lifecycle states.
"""

import re
from enum import Enum

from .config import (
    DEFAULT_OTHER_POLICY,
    DEVIATION_TYPES,
    NOTIFICATION_TYPES,
    OTHER_TYPE,
    PPAP_COMPLETED_TYPES,
    PPAP_IN_PROGRESS_TYPES,
    OtherPolicy,
)


class NotificationCategory(str, Enum):
    CUSTOMER_COMPLAINT = "CustomerComplaint"
    SUPPLIER_COMPLAINT = "SupplierComplaint"
    INTERNAL_COMPLAINT = "InternalComplaint"
    DEVIATION = "Deviation"
    PPAP = "PPAP"


_CATEGORY_BY_TYPE = {
    "Q1": NotificationCategory.CUSTOMER_COMPLAINT,
    "Q2": NotificationCategory.SUPPLIER_COMPLAINT,
    "Q3": NotificationCategory.INTERNAL_COMPLAINT,
    "D1": NotificationCategory.DEVIATION,
    "D2": NotificationCategory.DEVIATION,
    "D3": NotificationCategory.DEVIATION,
    "P1": NotificationCategory.PPAP,
    "P2": NotificationCategory.PPAP,
    "P3": NotificationCategory.PPAP,
}

# Leading letter + digit, e.g. "Q 1", "q1 - customer", "P3 approved"
_LOOSE_TYPE = re.compile(r"^([QDP])\s*([123])(?!\d)")


def parse_notification_type(value) -> str:
    """Normalise a raw type code to one of Q1..P3, or "Other"."""
    if value is None:
        return OTHER_TYPE
    normalized = str(value).strip().upper()
    if not normalized:
        return OTHER_TYPE
    if normalized in NOTIFICATION_TYPES:
        return normalized

    match = _LOOSE_TYPE.match(normalized)
    if match:
        return f"{match.group(1)}{match.group(2)}"
    return OTHER_TYPE


def resolve_other_policy(policy: OtherPolicy | str | None) -> OtherPolicy:
    """Accept an OtherPolicy member or its string value."""
    if policy is None:
        return DEFAULT_OTHER_POLICY
    try:
        return OtherPolicy(policy)
    except ValueError:
        raise ValueError(f"Unknown policy for unrecognised notification types: {policy}")


def category_for(
    notification_type,
    other_policy: OtherPolicy | str | None = DEFAULT_OTHER_POLICY,
) -> NotificationCategory | None:
    """Return the category of a notification type.

    Unrecognised types follow ``other_policy``: INTERNAL counts them as
    internal complaints, EXCLUDE returns None.
    """
    code = parse_notification_type(notification_type)
    category = _CATEGORY_BY_TYPE.get(code)
    if category is not None:
        return category
    if resolve_other_policy(other_policy) is OtherPolicy.INTERNAL:
        return NotificationCategory.INTERNAL_COMPLAINT
    return None


def ppap_state(notification_type) -> str | None:
    """Return 'in_progress' for P1, 'completed' for P2/P3, else None."""
    code = parse_notification_type(notification_type)
    if code in PPAP_IN_PROGRESS_TYPES:
        return "in_progress"
    if code in PPAP_COMPLETED_TYPES:
        return "completed"
    return None


def is_deviation(notification_type) -> bool:
    return parse_notification_type(notification_type) in DEVIATION_TYPES


def is_ppap(notification_type) -> bool:
    return ppap_state(notification_type) is not None


def is_customer_complaint(notification_type) -> bool:
    return parse_notification_type(notification_type) == "Q1"


def is_supplier_complaint(notification_type) -> bool:
    return parse_notification_type(notification_type) == "Q2"
