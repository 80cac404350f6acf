"""Numeric normalization for values coming back from the store.

Aggregates arrive in different encodings depending on the driver: ``Decimal``
from PostgreSQL ``avg``/``sum``, plain ints and floats from SQLite, ``None``
for aggregates over no rows, numeric strings from JSON payloads, and split
``{"low", "high"}`` 64-bit integers from graph drivers. Every service decodes
through ``to_number`` so they all agree on the result.
"""

import math
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

_UINT32 = 2**32


def _from_split_int(low: Any, high: Any) -> int:
    """Rebuild a 64-bit integer from its signed 32-bit halves."""
    low_part = int(to_number(low)) % _UINT32
    high_part = int(to_number(high))
    return high_part * _UINT32 + low_part


def _split_parts(value: Any) -> tuple[Any, Any] | None:
    if isinstance(value, Mapping):
        if "low" in value and "high" in value:
            return value["low"], value["high"]
        return None
    if hasattr(value, "low") and hasattr(value, "high"):
        return value.low, value.high
    return None


def to_number(value: Any) -> int | float:
    """Convert a store value into a finite ``int`` or ``float``.

    Never raises: ``None``, unparseable strings, non-finite floats and
    unknown types all become ``0``.
    """
    if value is None:
        return 0

    if isinstance(value, bool):
        return int(value)

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        return value if math.isfinite(value) else 0

    if isinstance(value, Decimal):
        if not value.is_finite():
            return 0
        if value == value.to_integral_value():
            return int(value)
        result = float(value)
        return result if math.isfinite(result) else 0

    if isinstance(value, (str, bytes)):
        text = value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value
        text = text.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return 0
        return to_number(parsed)

    parts = _split_parts(value)
    if parts is not None:
        try:
            return _from_split_int(*parts)
        except (TypeError, ValueError):
            return 0

    return 0


def percent_complete(page: Any, page_count: Any) -> float:
    """Percentage of ``page_count`` covered by ``page``.

    Clamped to ``[0, 100]`` and rounded to one decimal. Books without a
    page count always report ``0``.
    """
    total = to_number(page_count)
    if total <= 0:
        return 0.0

    percent = 100.0 * to_number(page) / total
    return round(min(max(percent, 0.0), 100.0), 1)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up."""
    return int(math.floor(value + 0.5))
