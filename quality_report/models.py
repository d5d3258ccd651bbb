"""
Record and result types for the quality KPI engine.

Input records (Complaint, Delivery) are plain mutable dataclasses built by
the parsing layer. Everything the aggregators return is frozen so that
charts and exports cannot mutate KPI output in place.
"""

from dataclasses import dataclass
from typing import Any

from .classifier import NotificationCategory, category_for, parse_notification_type

# Conversion status values
NOT_APPLICABLE = "not_applicable"
CONVERTED = "converted"
FAILED = "failed"


@dataclass(frozen=True)
class UnitConversion:
    """Outcome of normalising a defective quantity to pieces."""

    original_value: float
    original_unit: str | None
    converted_value: float
    status: str = NOT_APPLICABLE
    conversion_factor: float | None = None
    material_description: str | None = None

    @property
    def was_converted(self) -> bool:
        return self.status == CONVERTED

    @property
    def needs_attention(self) -> bool:
        return self.status == FAILED


@dataclass
class Complaint:
    id: str
    notification_number: str
    notification_type: str
    site_code: str
    created_on: Any
    defective_parts: float = 0.0
    plant: str | None = None
    site_name: str | None = None
    # Informational only. Aggregation re-derives the category from
    # notification_type under the active OtherPolicy.
    category: NotificationCategory | None = None
    source: str = "SAP_S4"
    unit_of_measure: str | None = None
    material_description: str | None = None
    material_number: str | None = None
    conversion: UnitConversion | None = None

    def __post_init__(self):
        self.notification_type = parse_notification_type(self.notification_type)
        if self.category is None:
            self.category = category_for(self.notification_type)
        if self.plant is None:
            self.plant = self.site_code


@dataclass
class Delivery:
    id: str
    site_code: str
    date: Any
    quantity: float
    kind: str
    plant: str | None = None
    site_name: str | None = None

    def __post_init__(self):
        if self.plant is None:
            self.plant = self.site_code


@dataclass(frozen=True)
class DataQualityIssue:
    """A record the aggregators skipped or could not fully trust."""

    record_id: str | None
    record_kind: str
    field: str
    message: str


@dataclass(frozen=True)
class PpapCounts:
    in_progress: int = 0
    completed: int = 0


@dataclass(frozen=True)
class ConversionDetail:
    notification_number: str
    original_value: float
    original_unit: str | None
    converted_pieces: float
    conversion_factor: float | None
    material_description: str | None = None


@dataclass(frozen=True)
class ConversionRollup:
    total_converted: int
    total_original: float
    total_pieces: float
    conversions: tuple[ConversionDetail, ...] = ()


@dataclass(frozen=True)
class MonthlySiteKpi:
    month: str
    site_code: str
    site_name: str | None
    customer_complaints_q1: int
    supplier_complaints_q2: int
    internal_complaints_q3: int
    deviations_d: int
    ppap: PpapCounts
    customer_ppm: float | None
    supplier_ppm: float | None
    customer_deliveries: float
    supplier_deliveries: float
    customer_defective_parts: float
    supplier_defective_parts: float
    internal_defective_parts: float
    customer_conversions: ConversionRollup | None = None
    supplier_conversions: ConversionRollup | None = None

    @property
    def key(self) -> str:
        return f"{self.site_code}::{self.month}"


@dataclass(frozen=True)
class GlobalPpm:
    customer_ppm: float | None
    supplier_ppm: float | None


@dataclass(frozen=True)
class KpiReport:
    monthly: tuple[MonthlySiteKpi, ...]
    global_ppm: GlobalPpm
    issues: tuple[DataQualityIssue, ...] = ()
