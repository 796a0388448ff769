"""
Number parsing and rendering for the calculator and the converter.

Two rendering paths live here and are kept apart on purpose:

* ``number_to_string`` is the plain float-to-string conversion used for the
  calculator display. It follows the layout of JavaScript's
  ``Number.prototype.toString`` (shortest round-trip digits, no trailing
  ``.0``, exponent form only for very large or very small magnitudes).
* ``format_result`` is the converter's precision-limited formatter.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal

ERROR = "Error"

PLAIN_RANGE_MIN = 1e-6
PLAIN_RANGE_MAX = 1e12
SIGNIFICANT_DIGITS = 10
EXPONENT_DIGITS = 6

_FLOAT_PREFIX = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)


def parse_float(text: str) -> float:
    """
    Parse the longest numeric prefix of ``text``.

    Mirrors JavaScript's ``parseFloat``: ``"5."`` is 5, ``"12abc"`` is 12, and
    text without a numeric prefix (``""``, ``"-"``, ``"Error"``) is ``nan``.
    """
    match = _FLOAT_PREFIX.match(text or "")
    if not match:
        return math.nan
    token = match.group(1)
    if token.lstrip("+-") == "Infinity":
        return -math.inf if token.startswith("-") else math.inf
    return float(token)


def number_to_string(value: float) -> str:
    """Render ``value`` the way a JavaScript engine stringifies a number."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "-Infinity" if value < 0 else "Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    # repr() yields the shortest digit string that round-trips.
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = exponent + k

    if k <= n <= 21:
        body = digits + "0" * (n - k)
    elif 0 < n <= 21:
        body = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        body = "0." + "0" * (-n) + digits
    else:
        e = n - 1
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        body = f"{mantissa}e{e:+d}"
    return sign + body


def round_significant(value: float, digits: int) -> Decimal:
    """
    Round the exact binary value of ``value`` to ``digits`` significant digits.

    Ties go away from zero, matching JavaScript's ``toPrecision`` and
    ``toExponential``; Python's own float formatting rounds them to even.
    """
    exact = Decimal(value)
    rounded = exact.quantize(
        Decimal(1).scaleb(exact.adjusted() - digits + 1), rounding=ROUND_HALF_UP
    )
    # A carry (9.99.. -> 10.0..) adds a digit; requantizing drops the extra zero.
    return rounded.quantize(
        Decimal(1).scaleb(rounded.adjusted() - digits + 1), rounding=ROUND_HALF_UP
    )


def to_exponential(value: float, fraction_digits: int = EXPONENT_DIGITS) -> str:
    """Scientific notation with an unpadded, signed exponent (``1.5e+12``)."""
    rounded = round_significant(value, fraction_digits + 1)
    sign, digit_tuple, _ = rounded.as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    mantissa = digits[0] + ("." + digits[1:] if fraction_digits else "")
    return f"{'-' if sign else ''}{mantissa}e{rounded.adjusted():+d}"


def format_result(value: float) -> str:
    """
    Canonical display string for a converter result.

    Non-finite values become "Error" and zero is "0". Magnitudes in
    [1e-6, 1e12) are rounded to 10 significant digits and printed as a
    minimal decimal numeral; everything else uses scientific notation with
    six fractional digits.
    """
    if math.isnan(value) or math.isinf(value):
        return ERROR
    if value == 0:
        return "0"
    magnitude = abs(value)
    if PLAIN_RANGE_MIN <= magnitude < PLAIN_RANGE_MAX:
        rounded = float(round_significant(value, SIGNIFICANT_DIGITS))
        return number_to_string(rounded)
    return to_exponential(value)
