"""Unit tests for the unit normaliser."""
import pytest

from quality_report.models import CONVERTED, FAILED, NOT_APPLICABLE
from quality_report.units import (
    canonical_unit,
    is_piece_unit,
    normalize_complaint,
    normalize_quantity,
    resolve_conversion_factor,
)

from conftest import complaint


class TestUnitLabels:
    """Test unit label recognition."""

    def test_piece_units(self):
        for unit in (None, "", "PC", "pcs", " Piece "):
            assert is_piece_unit(unit)
        assert not is_piece_unit("ML")

    def test_canonical_units(self):
        assert canonical_unit("ml") == "ML"
        assert canonical_unit("Meters") == "M"
        assert canonical_unit("m²") == "M2"
        assert canonical_unit("SQ  M") == "M2"
        assert canonical_unit("KG") is None
        assert canonical_unit(None) is None


class TestResolveConversionFactor:
    """Test per-piece size extraction from material descriptions."""

    def test_bottle_size(self):
        assert resolve_conversion_factor("ML", "WINDSCREEN CLEANER 600 ML") == 600
        assert resolve_conversion_factor("ML", "PRIMER 250ml") == 250

    def test_length_in_mm(self):
        assert resolve_conversion_factor("M", "HOSE EPDM L6100MM") == pytest.approx(6.1)
        assert resolve_conversion_factor("M", "PROFILE LENGTH 2500MM") == pytest.approx(2.5)

    def test_length_in_m(self):
        assert resolve_conversion_factor("M", "RAIL L3M") == pytest.approx(3.0)

    def test_area(self):
        assert resolve_conversion_factor("M2", "MAT W1000MM H2000MM") == pytest.approx(2.0)
        assert resolve_conversion_factor("SQ M", "FOIL 500x400MM") == pytest.approx(0.2)

    def test_no_match(self):
        assert resolve_conversion_factor("ML", "GASKET") is None
        assert resolve_conversion_factor("ML", None) is None
        assert resolve_conversion_factor("KG", "BAG 25KG") is None


class TestNormalizeQuantity:
    """Test conversion of quantities to pieces."""

    def test_piece_passes_through(self):
        result = normalize_quantity(10, "PC")
        assert result.converted_value == 10
        assert result.status == NOT_APPLICABLE
        assert not result.was_converted

    def test_missing_unit_passes_through(self):
        result = normalize_quantity(7, None)
        assert result.converted_value == 7
        assert result.status == NOT_APPLICABLE

    def test_declared_factor(self):
        result = normalize_quantity(1200, "ML", conversion_factor=600)
        assert result.status == CONVERTED
        assert result.was_converted
        assert result.converted_value == 2.0
        assert result.original_value == 1200
        assert result.original_unit == "ML"
        assert result.conversion_factor == 600

    def test_factor_from_description(self):
        result = normalize_quantity(12.2, "M", material_description="HOSE L6100MM")
        assert result.status == CONVERTED
        assert result.converted_value == pytest.approx(2.0)

    def test_rounds_to_two_decimals(self):
        result = normalize_quantity(1000, "ML", conversion_factor=600)
        assert result.converted_value == 1.67

    def test_missing_factor_keeps_value(self):
        result = normalize_quantity(500, "ML", material_description="CLEANER")
        assert result.status == FAILED
        assert result.needs_attention
        assert result.converted_value == 500

    def test_unknown_unit_is_flagged(self):
        result = normalize_quantity(5, "KG", conversion_factor=2)
        assert result.status == FAILED
        assert result.original_unit == "KG"
        assert result.converted_value == 5


class TestNormalizeComplaint:
    """Test complaint-level normalisation."""

    def test_converts_defective_parts(self):
        c = complaint("145", "Q2", 1800, "2025-01-15",
                      unit_of_measure="ML", material_description="CLEANER 600 ML")
        result = normalize_complaint(c)
        assert result.defective_parts == 3.0
        assert result.conversion.was_converted
        assert c.conversion is None
        assert c.defective_parts == 1800

    def test_is_idempotent(self):
        c = complaint("145", "Q2", 1800, "2025-01-15", unit_of_measure="ML")
        once = normalize_complaint(c, conversion_factor=600)
        twice = normalize_complaint(once, conversion_factor=600)
        assert twice is once
        assert twice.defective_parts == 3.0

    def test_piece_complaint_gets_metadata(self):
        c = complaint("145", "Q1", 4, "2025-01-15", unit_of_measure="PC")
        result = normalize_complaint(c)
        assert result.defective_parts == 4
        assert result.conversion.status == NOT_APPLICABLE

    @pytest.mark.parametrize("value", [float("nan"), "n/a", None])
    def test_non_numeric_quantity_left_for_validation(self, value):
        c = complaint("145", "Q1", value, "2025-01-15", unit_of_measure="PC")
        result = normalize_complaint(c)
        assert result is c
        assert result.conversion is None
