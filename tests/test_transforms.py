"""Unit tests for KPI transforms."""
import pandas as pd
import pytest

from quality_report.kpis import calculate_monthly_site_kpis
from quality_report.transforms import (
    KPI_COLUMNS,
    filter_kpis,
    kpis_to_frame,
    merge_records_by_id,
    summarise_by_month,
)
from quality_report.units import normalize_complaint

from conftest import complaint, delivery


class TestMergeRecordsById:
    """Test merging of uploaded record batches."""

    def test_incoming_replaces_existing(self):
        old = complaint("145", "Q1", 1, "2025-01-01", id="A")
        kept = complaint("145", "Q1", 2, "2025-01-01", id="B")
        new = complaint("145", "Q1", 9, "2025-01-01", id="A")
        added = complaint("175", "Q2", 3, "2025-01-01", id="C")

        merged = merge_records_by_id([old, kept], [new, added])

        assert [c.id for c in merged] == ["A", "B", "C"]
        assert merged[0] is new

    def test_empty(self):
        assert merge_records_by_id([], []) == []

    def test_inputs_untouched(self):
        existing = [delivery("145", "Customer", 1, "2025-01-01", id="A")]
        merge_records_by_id(existing, [delivery("145", "Customer", 2, "2025-01-01", id="A")])
        assert existing[0].quantity == 1


class TestKpisToFrame:
    """Test flattening KPI records into a DataFrame."""

    def test_columns_and_values(self, two_site_complaints, two_site_deliveries):
        kpis = calculate_monthly_site_kpis(two_site_complaints, two_site_deliveries)
        df = kpis_to_frame(kpis)
        assert list(df.columns) == KPI_COLUMNS
        assert len(df) == 3
        assert df.iloc[0]["site_code"] == "145"
        assert df.iloc[0]["customer_ppm"] == pytest.approx(100.0)
        assert pd.isna(df.iloc[0]["supplier_ppm"])

    def test_conversion_totals(self):
        converted = normalize_complaint(complaint(
            "145", "Q2", 1200, "2025-01-15", unit_of_measure="ML",
            material_description="PRIMER 600ML",
        ))
        df = kpis_to_frame(calculate_monthly_site_kpis([converted], []))
        assert df.iloc[0]["supplier_converted"] == 1
        assert df.iloc[0]["supplier_converted_original"] == 1200
        assert df.iloc[0]["supplier_converted_pieces"] == 2.0
        assert df.iloc[0]["customer_converted"] == 0

    def test_empty(self):
        df = kpis_to_frame([])
        assert df.empty
        assert list(df.columns) == KPI_COLUMNS


class TestFilterKpis:
    """Test site and month-range filtering."""

    @pytest.fixture
    def kpis(self, two_site_complaints, two_site_deliveries):
        return calculate_monthly_site_kpis(two_site_complaints, two_site_deliveries)

    def test_no_filters(self, kpis):
        assert filter_kpis(kpis) == kpis

    def test_by_site(self, kpis):
        assert [k.key for k in filter_kpis(kpis, sites=["145"])] == ["145::2025-01", "145::2025-02"]

    def test_by_month_range(self, kpis):
        assert [k.key for k in filter_kpis(kpis, start_month="2025-02")] == ["145::2025-02"]
        assert [k.key for k in filter_kpis(kpis, end_month="2025-01")] == [
            "145::2025-01", "175::2025-01",
        ]


class TestSummariseByMonth:
    """Test the cross-site monthly rollup."""

    def test_recomputes_ppm(self, two_site_complaints, two_site_deliveries):
        kpis = calculate_monthly_site_kpis(two_site_complaints, two_site_deliveries)
        monthly = summarise_by_month(kpis)

        assert list(monthly["month"]) == ["2025-01", "2025-02"]
        jan = monthly.iloc[0]
        assert jan["sites"] == 2
        assert jan["customer_defective_parts"] == 18
        assert jan["customer_deliveries"] == 175_000
        assert jan["customer_ppm"] == pytest.approx(18 / 175_000 * 1_000_000)
        assert pd.isna(jan["supplier_ppm"])

    def test_empty(self):
        monthly = summarise_by_month([])
        assert monthly.empty
        assert "customer_ppm" in monthly.columns
