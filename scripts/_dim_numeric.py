"""
Rounding, number formatting and fraction helpers for dimension text.

All functions are pure. Formatting follows the fixed-point ("F<n>") and
exponential ("E<n>") conventions of CAD dimension text: half-away-from-zero
rounding of the exact binary value, a configurable decimal separator, and a
signed exponent with at least three digits.

Zero suppression operates on the formatted string, never on the number.
"""

import math
from decimal import Context, Decimal, ROUND_HALF_UP
from enum import IntEnum
from fractions import Fraction

MAX_FRACTION_PRECISION = 8      # 1/256


class ZeroHandling(IntEnum):
    """DIMZIN codes. 0..3 decide feet/inches segments, 4/8/12 trim decimals."""
    SUPPRESS_ZERO_FEET_AND_INCHES = 0
    SHOW_ZERO_FEET_AND_INCHES = 1
    SHOW_ZERO_FEET_SUPPRESS_ZERO_INCHES = 2
    SUPPRESS_ZERO_FEET_SHOW_ZERO_INCHES = 3
    SUPPRESS_DECIMAL_LEADING_ZEROES = 4
    SUPPRESS_DECIMAL_TRAILING_ZEROES = 8
    SUPPRESS_DECIMAL_LEADING_AND_TRAILING_ZEROES = 12


SHOW_ALL = ZeroHandling.SHOW_ZERO_FEET_AND_INCHES

_LEADING = (ZeroHandling.SUPPRESS_DECIMAL_LEADING_ZEROES,
            ZeroHandling.SUPPRESS_DECIMAL_LEADING_AND_TRAILING_ZEROES)
_TRAILING = (ZeroHandling.SUPPRESS_DECIMAL_TRAILING_ZEROES,
             ZeroHandling.SUPPRESS_DECIMAL_LEADING_AND_TRAILING_ZEROES)


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------

def round_half_away(x):
    """Round to the nearest integer, ties away from zero. Returns float."""
    magnitude = abs(x)
    n = math.floor(magnitude)
    if magnitude - n >= 0.5:
        n += 1
    if n == 0:
        return 0.0
    return float(n) if x > 0 else -float(n)


def round_to_unit(value, unit):
    """Round value to the nearest multiple of unit. unit == 0 means no rounding."""
    if not unit:
        return value
    return round_half_away(value / unit) * unit


# ---------------------------------------------------------------------------
# Decimal / exponential formatting
# ---------------------------------------------------------------------------

def _context_for(d, places):
    # Enough precision to hold every digit of the binary value exactly.
    digits = len(d.as_tuple().digits)
    return Context(prec=max(28, digits + places + 4), rounding=ROUND_HALF_UP)


def _quantum(places):
    return Decimal(1).scaleb(-places)


def format_decimal(value, places, separator="."):
    """Fixed-point text with `places` fractional digits.

    A value that rounds to zero is written without a sign.
    """
    places = max(0, int(places))
    d = Decimal(value)
    ctx = _context_for(d, places)
    q = d.quantize(_quantum(places), context=ctx)
    if q == 0:
        q = abs(q)
    text = f"{q:f}"
    if separator != ".":
        text = text.replace(".", separator)
    return text


def format_exponential(value, places, separator="."):
    """Exponential text: one integer digit, `places` fractional digits, E+nnn."""
    places = max(0, int(places))
    d = Decimal(value)
    ctx = _context_for(d, places)
    quantum = _quantum(places)
    if d == 0:
        exponent = 0
        mantissa = abs(d).quantize(quantum, context=ctx)
    else:
        exponent = d.adjusted()
        mantissa = d.scaleb(-exponent, context=ctx).quantize(quantum, context=ctx)
        if abs(mantissa) >= 10:
            exponent += 1
            mantissa = d.scaleb(-exponent, context=ctx).quantize(quantum, context=ctx)
    sign = "-" if exponent < 0 else "+"
    text = f"{mantissa:f}E{sign}{abs(exponent):03d}"
    if separator != ".":
        text = text.replace(".", separator)
    return text


def compact_number(value, places=4):
    """Short invariant-culture number for markup parameters (e.g. \\H1.875;)."""
    text = format_decimal(value, places)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


# ---------------------------------------------------------------------------
# Fractions
# ---------------------------------------------------------------------------

def _build_fraction_table():
    """Reduced fraction texts per precision 1..8; entry 0 of each row is ''."""
    table = []
    for precision in range(1, MAX_FRACTION_PRECISION + 1):
        denominator = 2 ** precision
        row = [""]
        for numerator in range(1, denominator):
            f = Fraction(numerator, denominator)
            row.append(f"{f.numerator}/{f.denominator}")
        table.append(tuple(row))
    return tuple(table)


FRACTION_TABLE = _build_fraction_table()


def clamp_precision(precision):
    return min(max(int(precision), 0), MAX_FRACTION_PRECISION)


def reduced_fraction_text(precision, numerator_index):
    """Reduced text of numerator_index / 2**precision, '' for index 0."""
    precision = clamp_precision(precision)
    if precision == 0:
        return ""
    row = FRACTION_TABLE[precision - 1]
    index = min(max(int(numerator_index), 0), len(row) - 1)
    return row[index]


def fraction_text(fraction, precision):
    """Reduced text for a fraction in [0, 1), truncated to 1/2**precision steps."""
    precision = clamp_precision(precision)
    return reduced_fraction_text(precision, math.floor(fraction * 2 ** precision))


def split_fraction(value, precision):
    """Split a non-negative value into (integer part, fraction text).

    The value is rounded to the nearest 1/2**precision by adding half a step
    and truncating; the biased remainder selects the table entry.
    """
    precision = clamp_precision(precision)
    denominator = 2 ** precision
    biased = value + 1.0 / denominator / 2
    whole = math.trunc(biased)
    index = math.floor((biased - whole) * denominator)
    return whole, reduced_fraction_text(precision, index)


def format_fractional(value, precision):
    """Integer part and reduced fraction, e.g. '3 1/4', '3/8', '12'."""
    whole, frac = split_fraction(abs(value), precision)
    if frac and whole == 0:
        text = frac
    elif frac:
        text = f"{whole} {frac}"
    else:
        text = str(whole)
    if value < 0 and text != "0":
        text = "-" + text
    return text


# ---------------------------------------------------------------------------
# Zero suppression
# ---------------------------------------------------------------------------

def _split_sign(text):
    if text[:1] in ("+", "-"):
        return text[0], text[1:]
    return "", text


def suppress_leading_zeros(text):
    """'0.50' -> '.50', '-0.5' -> '-.5'. An all-zero number keeps one '0'."""
    sign, number = _split_sign(text)
    stripped = number.lstrip("0")
    return sign + (stripped or "0")


def suppress_trailing_zeros(text, separator="."):
    """'1.500' -> '1.5', '2.000' -> '2'. Text without a separator is unchanged."""
    if separator not in text:
        return text
    return text.rstrip("0").rstrip(separator)


def apply_decimal_zero_handling(text, zero_handling, separator="."):
    """Apply the decimal part of a DIMZIN policy to formatted number text.

    Exponential text is suppressed on the mantissa only: '1.500E+003' -> '1.5E+003'.
    """
    mantissa, marker, exponent = text.partition("E")
    if marker:
        return apply_decimal_zero_handling(mantissa, zero_handling, separator) + marker + exponent
    result = text
    if zero_handling in _LEADING:
        result = suppress_leading_zeros(result)
    if zero_handling in _TRAILING:
        result = suppress_trailing_zeros(result, separator)
    _, number = _split_sign(result)
    if not number:
        return "0"
    return result


def is_zero_text(text):
    """True if every digit in formatted text is zero ('0.00', '0\\'-0\"')."""
    digits = [c for c in text if c.isdigit()]
    return all(c == "0" for c in digits)


def join_feet_inches(feet, inches_text, inches_is_zero, zero_handling):
    """Join feet and inches segments as 3'-4 1/2" under a feet/inches policy.

    If the policy would hide both segments the inches segment is kept.
    """
    show_feet = True
    show_inches = True
    if zero_handling == ZeroHandling.SUPPRESS_ZERO_FEET_AND_INCHES:
        show_feet = feet != 0
        show_inches = not inches_is_zero
    elif zero_handling == ZeroHandling.SHOW_ZERO_FEET_SUPPRESS_ZERO_INCHES:
        show_inches = not inches_is_zero
    elif zero_handling == ZeroHandling.SUPPRESS_ZERO_FEET_SHOW_ZERO_INCHES:
        show_feet = feet != 0

    if not show_feet and not show_inches:
        show_inches = True

    parts = []
    if show_feet:
        parts.append(f"{feet}'")
    if show_inches:
        parts.append(f'{inches_text}"')
    return "-".join(parts)


def format_feet_inches_fractional(value, precision, zero_handling):
    """Inches -> feet, whole inches and fraction (architectural)."""
    magnitude = abs(value)
    feet = math.trunc(magnitude / 12)
    inches, frac = split_fraction(magnitude - feet * 12, precision)
    if inches >= 12:
        feet += 1
        inches -= 12
    inches_text = f"{inches} {frac}" if frac else str(inches)
    text = join_feet_inches(feet, inches_text, inches == 0 and not frac, zero_handling)
    if value < 0 and not is_zero_text(text):
        text = "-" + text
    return text


def format_feet_inches_decimal(value, places, zero_handling, separator="."):
    """Inches -> feet and decimal inches (engineering)."""
    magnitude = abs(value)
    feet = math.trunc(magnitude / 12)
    inches = magnitude - feet * 12
    if Decimal(format_decimal(inches, places)) >= 12:
        feet += 1
        inches = max(inches - 12, 0.0)
    inches_text = apply_decimal_zero_handling(
        format_decimal(inches, places, separator), zero_handling, separator)
    inches_is_zero = Decimal(format_decimal(inches, places)) == 0
    text = join_feet_inches(feet, inches_text, inches_is_zero, zero_handling)
    if value < 0 and not is_zero_text(text):
        text = "-" + text
    return text
