"""
Unit normaliser: converts defective quantities reported in bulk units
(ML, M, M2) into an equivalent piece count.

The per-piece conversion factor is either declared by the caller or read
from the material description:
    - ML: bottle size, e.g. "CLEANER 600 ML"          -> 600 ml per piece
    - M:  length per piece, e.g. "TUBE L6100MM"        -> 6.1 m per piece
    - M2: area per piece, e.g. "MAT W1000MM H2000MM"   -> 2.0 m2 per piece
"""

import dataclasses
import logging
import re

from .config import CONVERSION_DECIMALS, PIECE_UNITS, UNIT_ALIASES
from .models import CONVERTED, FAILED, NOT_APPLICABLE, Complaint, UnitConversion
from .utils import safe_float

logger = logging.getLogger(__name__)

_NUM = r"(\d+(?:\.\d+)?)"

_BOTTLE_PATTERNS = [
    re.compile(_NUM + r"\s*ML", re.IGNORECASE),
]

# (pattern, divisor to metres)
_LENGTH_PATTERNS = [
    (re.compile(r"L\s*" + _NUM + r"\s*MM", re.IGNORECASE), 1000.0),
    (re.compile(r"L\s*" + _NUM + r"\s*M\b", re.IGNORECASE), 1.0),
    (re.compile(r"LENGTH\s*" + _NUM + r"\s*MM", re.IGNORECASE), 1000.0),
    (re.compile(r"LEN\s*" + _NUM + r"\s*MM", re.IGNORECASE), 1000.0),
    (re.compile(r"L\s*(\d{3,})\b", re.IGNORECASE), 1000.0),  # bare digits are mm
]

# width x height, both in mm
_AREA_PATTERNS = [
    re.compile(r"W\s*" + _NUM + r"\s*MM\s*H\s*" + _NUM + r"\s*MM", re.IGNORECASE),
    re.compile(r"WIDTH\s*" + _NUM + r"\s*MM\s*HEIGHT\s*" + _NUM + r"\s*MM", re.IGNORECASE),
    re.compile(_NUM + r"\s*MM\s*X\s*" + _NUM + r"\s*MM", re.IGNORECASE),
    re.compile(_NUM + r"\s*X\s*" + _NUM + r"\s*MM", re.IGNORECASE),
]


def is_piece_unit(unit: str | None) -> bool:
    """True for a missing unit or any of the piece labels (PC, PCS, ...)."""
    if unit is None:
        return True
    label = str(unit).strip().upper()
    return not label or label in PIECE_UNITS


def canonical_unit(unit: str | None) -> str | None:
    """Map a raw unit label to ML, M or M2; None if not convertible."""
    if unit is None:
        return None
    label = re.sub(r"\s+", " ", str(unit).strip().upper())
    return UNIT_ALIASES.get(label)


def _bottle_size(description: str) -> float | None:
    for pattern in _BOTTLE_PATTERNS:
        match = pattern.search(description)
        if match:
            size = float(match.group(1))
            if size > 0:
                return size
    return None


def _length_per_piece(description: str) -> float | None:
    for pattern, divisor in _LENGTH_PATTERNS:
        match = pattern.search(description)
        if match:
            length = float(match.group(1))
            if length > 0:
                return length / divisor
    return None


def _area_per_piece(description: str) -> float | None:
    for pattern in _AREA_PATTERNS:
        match = pattern.search(description)
        if match:
            width = float(match.group(1))
            height = float(match.group(2))
            if width > 0 and height > 0:
                return (width / 1000) * (height / 1000)
    return None


def resolve_conversion_factor(
    unit: str | None,
    material_description: str | None,
) -> float | None:
    """Read the per-piece size for ``unit`` out of a material description.

    Returns ml per piece for ML, metres per piece for M, square metres per
    piece for M2, or None when the description carries no usable size.
    """
    if not material_description:
        return None
    match canonical_unit(unit):
        case "ML":
            return _bottle_size(material_description)
        case "M":
            return _length_per_piece(material_description)
        case "M2":
            return _area_per_piece(material_description)
        case _:
            return None


def normalize_quantity(
    value: float,
    unit: str | None,
    conversion_factor: float | None = None,
    material_description: str | None = None,
) -> UnitConversion:
    """Convert ``value`` expressed in ``unit`` to pieces.

    Piece units pass through as not applicable. A recognised bulk unit with
    a positive factor (declared, or resolved from the material description)
    is divided by that factor. Anything else keeps the original value and
    is marked failed so reporting can flag it.
    """
    unit_label = str(unit).strip().upper() if unit is not None else None

    if is_piece_unit(unit) or value == 0:
        return UnitConversion(
            original_value=value,
            original_unit=unit_label or None,
            converted_value=value,
            status=NOT_APPLICABLE,
            material_description=material_description,
        )

    canonical = canonical_unit(unit)
    factor = safe_float(conversion_factor)
    if canonical is not None and (factor is None or factor <= 0):
        factor = resolve_conversion_factor(canonical, material_description)

    if canonical is None or factor is None or factor <= 0:
        logger.warning(
            "Could not convert %s %s to PC (material: %s); using original value",
            value, unit_label, material_description,
        )
        return UnitConversion(
            original_value=value,
            original_unit=canonical or unit_label,
            converted_value=value,
            status=FAILED,
            material_description=material_description,
        )

    return UnitConversion(
        original_value=value,
        original_unit=canonical,
        converted_value=round(value / factor, CONVERSION_DECIMALS),
        status=CONVERTED,
        conversion_factor=factor,
        material_description=material_description,
    )


def normalize_complaint(
    complaint: Complaint,
    conversion_factor: float | None = None,
) -> Complaint:
    """Return a copy of ``complaint`` with defective parts in pieces.

    Complaints that already carry conversion metadata are returned as-is,
    so normalising twice is a no-op. A non-numeric defective quantity is
    left untouched for validation to reject.
    """
    if complaint.conversion is not None:
        return complaint

    value = safe_float(complaint.defective_parts)
    if value is None:
        logger.warning(
            "Complaint %s has non-numeric defective parts %r; not normalised",
            complaint.id, complaint.defective_parts,
        )
        return complaint

    conversion = normalize_quantity(
        value,
        complaint.unit_of_measure,
        conversion_factor=conversion_factor,
        material_description=complaint.material_description,
    )
    return dataclasses.replace(
        complaint,
        defective_parts=conversion.converted_value,
        conversion=conversion,
    )
