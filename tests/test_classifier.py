"""Unit tests for the notification classifier."""
import pytest

from quality_report.classifier import (
    NotificationCategory,
    category_for,
    is_customer_complaint,
    is_deviation,
    is_ppap,
    is_supplier_complaint,
    parse_notification_type,
    ppap_state,
)
from quality_report.config import OtherPolicy


class TestParseNotificationType:
    """Test normalisation of raw type codes."""

    @pytest.mark.parametrize("raw,expected", [
        ("Q1", "Q1"),
        (" q2 ", "Q2"),
        ("d3", "D3"),
        ("P 3", "P3"),
        ("Q1 - Customer complaint", "Q1"),
    ])
    def test_known_codes(self, raw, expected):
        assert parse_notification_type(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "Q4", "Q12", "X1", "complaint"])
    def test_unknown_codes_are_other(self, raw):
        assert parse_notification_type(raw) == "Other"


class TestCategoryFor:
    """Test mapping of type codes to categories."""

    def test_complaint_types(self):
        assert category_for("Q1") is NotificationCategory.CUSTOMER_COMPLAINT
        assert category_for("Q2") is NotificationCategory.SUPPLIER_COMPLAINT
        assert category_for("Q3") is NotificationCategory.INTERNAL_COMPLAINT

    def test_deviation_and_ppap_types(self):
        for code in ("D1", "D2", "D3"):
            assert category_for(code) is NotificationCategory.DEVIATION
        for code in ("P1", "P2", "P3"):
            assert category_for(code) is NotificationCategory.PPAP

    def test_other_defaults_to_internal(self):
        assert category_for("ZZ") is NotificationCategory.INTERNAL_COMPLAINT

    def test_other_can_be_excluded(self):
        assert category_for("ZZ", OtherPolicy.EXCLUDE) is None
        assert category_for("ZZ", "exclude") is None
        assert category_for("Q1", "exclude") is NotificationCategory.CUSTOMER_COMPLAINT

    def test_unknown_policy_raises(self):
        with pytest.raises(ValueError):
            category_for("ZZ", "ignore")


class TestHelpers:
    """Test lifecycle and predicate helpers."""

    def test_ppap_state(self):
        assert ppap_state("P1") == "in_progress"
        assert ppap_state("P2") == "completed"
        assert ppap_state("p3") == "completed"
        assert ppap_state("Q1") is None

    def test_predicates(self):
        assert is_deviation("D2")
        assert not is_deviation("Q1")
        assert is_ppap("P1")
        assert not is_ppap("D1")
        assert is_customer_complaint(" q1")
        assert is_supplier_complaint("Q2")
        assert not is_supplier_complaint("Q3")
