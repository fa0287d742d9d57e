"""Lenient numeric parsing for questionnaire answers.

Counts are typed with pt-BR thousands separators ("12.500" -> 12500), other
numeric units are plain decimals ("17.5", "17,5"). Unparseable input yields
None; callers decide whether that means "N/A" or zero.
"""

import math
from typing import Optional, Union

from media_matrix.schemas.enums import Unit

RawNumber = Union[str, int, float, None]


def _finite(value: float) -> Optional[float]:
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_count(raw: RawNumber) -> Optional[int]:
    """Parse a thousands-separated integer count.

    Examples:
        parse_count("12.500") -> 12500
        parse_count(1500.6) -> 1501
        parse_count("abc") -> None
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            value = _finite(float(raw))
        except OverflowError:
            return None
        return None if value is None else int(round(value))
    text = str(raw).strip().replace(" ", "").replace(".", "")
    if not text:
        return None
    text = text.replace(",", ".")
    try:
        value = _finite(float(text))
    except (ValueError, OverflowError):
        return None
    return None if value is None else int(round(value))


def parse_decimal(raw: RawNumber) -> Optional[float]:
    """Parse a plain decimal; a lone comma is accepted as the decimal mark."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            return _finite(float(raw))
        except OverflowError:
            return None
    text = str(raw).strip().rstrip("%").strip()
    if not text:
        return None
    if "," in text and "." not in text and text.count(",") == 1:
        text = text.replace(",", ".")
    try:
        return _finite(float(text))
    except (ValueError, OverflowError):
        return None


def parse_number(raw: RawNumber, unit: Optional[Unit]) -> Optional[float]:
    """Dispatch on the criterion unit: counts use thousands parsing, the rest decimals."""
    if unit == Unit.COUNT:
        count = parse_count(raw)
        return None if count is None else float(count)
    return parse_decimal(raw)


def number_or_zero(raw: RawNumber, unit: Optional[Unit]) -> float:
    """Like parse_number() but invalid/missing values become 0."""
    value = parse_number(raw, unit)
    return 0.0 if value is None else value
