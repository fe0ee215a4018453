"""Parse human-formatted counts ("12.3K", "7.89万", "1,024") into numbers.

Display strings are kept verbatim on the row; the numeric value derived here
is only used for sorting, charting, and totals.  Parsing is total: anything
that does not start with a number yields 0.
"""

import math
from decimal import Decimal, InvalidOperation

from social_extract.normalizer.patterns import METRIC_MULTIPLIERS, NUMERIC_PREFIX_RE, THOUSANDS_SEPARATOR


def split_unit(text: str) -> tuple[str, int]:
    """Strip a trailing unit suffix and return ``(remaining_text, multiplier)``."""
    if text:
        multiplier = METRIC_MULTIPLIERS.get(text[-1].casefold())
        if multiplier is not None:
            return text[:-1].strip(), multiplier
    return text, 1


def parse_metric(display: object) -> float:
    """Return the non-negative numeric value of a metric display string.

    Commas are treated as thousands separators.  A trailing ``万`` (ten
    thousand), ``k`` or ``m`` (case-insensitive) scales the value.  Empty,
    non-numeric, signed, or otherwise malformed input returns ``0.0``.
    """
    if not isinstance(display, str):
        return 0.0

    text = display.replace(THOUSANDS_SEPARATOR, "").strip()
    text, multiplier = split_unit(text)

    match = NUMERIC_PREFIX_RE.match(text)
    if not match:
        return 0.0

    # Decimal keeps "7.89" * 10000 exact before the final float conversion
    try:
        value = float(Decimal(match.group(0)) * multiplier)
    except (InvalidOperation, OverflowError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value
