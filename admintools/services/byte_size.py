from decimal import ROUND_HALF_EVEN, Decimal
from typing import Optional, Union

from admintools.models.size import SizeUnit, SizeValue

_TWO_PLACES = Decimal("0.01")

# Checked largest first; the first threshold <= raw_bytes wins
_AUTO_ORDER = (SizeUnit.TB, SizeUnit.GB, SizeUnit.MB, SizeUnit.KB)


def parse_size_unit(unit: Union[str, SizeUnit]) -> SizeUnit:
    """Accept a SizeUnit or a case-insensitive unit name such as 'gb'."""
    if isinstance(unit, SizeUnit):
        return unit
    try:
        return SizeUnit(str(unit).strip().upper())
    except ValueError as exc:
        allowed = ", ".join(u.value for u in SizeUnit)
        raise ValueError(f"Unknown size unit {unit!r}; expected one of {allowed}") from exc


def _select_unit(raw_bytes: int) -> SizeUnit:
    for unit in _AUTO_ORDER:
        if raw_bytes >= unit.divisor:
            return unit
    return SizeUnit.KB


def format_byte_length(
    raw_bytes: int,
    desired_unit: Optional[Union[str, SizeUnit]] = None,
) -> SizeValue:
    """
    Convert a byte count into a magnitude + unit pair.

    Without desired_unit the largest unit whose divisor does not exceed
    raw_bytes is used (KB below 1024 bytes). With desired_unit the count is
    always divided by that unit, which may give values below 1.

    The magnitude is rounded to two places with round-half-to-even on the
    exact decimal quotient: 1152 bytes (1.125 KB) gives 1.12 KB and 1408 bytes
    (1.375 KB) gives 1.38 KB.
    """
    unit = parse_size_unit(desired_unit) if desired_unit is not None else None

    if isinstance(raw_bytes, bool) or int(raw_bytes) != raw_bytes:
        raise ValueError(f"Byte count must be a whole number, got {raw_bytes!r}")
    raw_bytes = int(raw_bytes)
    if raw_bytes < 0:
        raise ValueError(f"Byte count must not be negative, got {raw_bytes}")

    if unit is None:
        unit = _select_unit(raw_bytes)

    quotient = Decimal(raw_bytes) / Decimal(unit.divisor)
    magnitude = quotient.quantize(_TWO_PLACES, rounding=ROUND_HALF_EVEN)

    return SizeValue(raw_bytes=raw_bytes, magnitude=float(magnitude), unit=unit)
