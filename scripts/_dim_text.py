"""
Dimension text composition.

Builds the complete MTEXT string shown on a dimension: the measurement,
its tolerance (symmetric, stacked deviation or stacked limits) and the
bracketed alternate-unit value. Also holds the small text-placement
helpers used by dimension and leader layout.
"""

import math
from enum import IntEnum

from _dim_formatters import (
    ToleranceAlignment, coerce_enum, create_angular_formatter,
    create_linear_formatter,
)
from _mtext import estimate_text_length  # noqa: F401  (re-exported)
from _text_constants import (
    ALIGNMENTS, ALT_BRACKET_HEIGHT, ATTACHMENT_POINTS, DIM_TEXT_SIZE_FACTOR,
    PRIMARY_TOKEN, TEXT_ANCHORS, TEXT_SIZE_FROM_HEIGHT, VERTICAL_ADJUSTMENT,
)

ALT_OPEN = f"{{\\H{ALT_BRACKET_HEIGHT};[}}"
ALT_CLOSE = f"{{\\H{ALT_BRACKET_HEIGHT};]}}"

# Default prefix/postfix template per dimension type
DEFAULT_POSTFIXES = {
    "linear": PRIMARY_TOKEN,
    "aligned": PRIMARY_TOKEN,
    "ordinate": PRIMARY_TOKEN,
    "radius": "R" + PRIMARY_TOKEN,
    "diameter": "∅" + PRIMARY_TOKEN,
}


class ToleranceMode(IntEnum):
    NONE = 0
    SYMMETRIC = 1
    DEVIATION = 2
    LIMITS = 3


def tolerance_mode(style):
    """Tolerances win over limits; symmetric needs plus == minus exactly."""
    if style.generate_tolerances:
        if style.minus_tolerance == style.plus_tolerance:
            return ToleranceMode.SYMMETRIC
        return ToleranceMode.DEVIATION
    if style.limits_generation:
        return ToleranceMode.LIMITS
    return ToleranceMode.NONE


def alignment_prefix(tolerance_alignment):
    """Markup placed ahead of stacked tolerance text."""
    alignment = coerce_enum(ToleranceAlignment, tolerance_alignment, ToleranceAlignment.BOTTOM)
    if alignment == ToleranceAlignment.TOP:
        return "\\A2;"
    if alignment == ToleranceAlignment.MIDDLE:
        return "\\A1;"
    return ""


def default_postfix_for(dimension_type):
    return DEFAULT_POSTFIXES.get(str(dimension_type).lower(), PRIMARY_TOKEN)


def text_size_from_height(text_height):
    return text_height * TEXT_SIZE_FROM_HEIGHT


def dimension_text_size(text_height):
    """Font size used for dimension text of the given style height."""
    return text_size_from_height(text_height) * DIM_TEXT_SIZE_FACTOR


def _apply_override(override_text, composed):
    if not override_text:
        return composed
    if PRIMARY_TOKEN in override_text:
        return override_text.replace(PRIMARY_TOKEN, composed)
    return override_text


def compose_linear_text(measurement, style, default_postfix=PRIMARY_TOKEN,
                        text_size=None, override_text=None):
    """Full MTEXT for a linear dimension value under `style`.

    A non-empty override_text replaces the result; a '<>' inside it
    stands for the composed measurement.
    """
    if override_text and PRIMARY_TOKEN not in override_text:
        return override_text
    if text_size is None:
        text_size = dimension_text_size(style.text_height)

    primary = create_linear_formatter(
        style.linear_unit_format, measurement, style, default_postfix, text_size)
    alternate = None
    if style.alternate_units:
        alternate = create_linear_formatter(
            style.alt_unit_format, measurement, style, default_postfix, text_size)

    mode = tolerance_mode(style)
    if mode == ToleranceMode.SYMMETRIC:
        text = primary.format_measurement() + primary.format_measurement_tolerance_symmetric()
        if alternate:
            alt = alternate.format_alternate() + alternate.format_alternate_tolerance_symmetric()
            text = f"{text} [{alt}]"
    elif mode == ToleranceMode.DEVIATION:
        prefix = alignment_prefix(style.tolerance_alignment)
        text = (prefix + primary.format_measurement()
                + primary.format_measurement_tolerance_plus_minus())
        if alternate:
            alt = (prefix + alternate.format_alternate()
                   + alternate.format_alternate_tolerance_plus_minus())
            text = f"{text} {ALT_OPEN}{alt}{ALT_CLOSE}"
    elif mode == ToleranceMode.LIMITS:
        prefix = alignment_prefix(style.tolerance_alignment)
        text = prefix + primary.format_measurement_limits()
        if alternate:
            alt = prefix + alternate.format_alternate_limits()
            text = f"{text} {ALT_OPEN}{alt}{ALT_CLOSE}"
    else:
        text = primary.format_measurement()
        if alternate:
            text = f"{text} [{alternate.format_alternate()}]"

    return _apply_override(override_text, text)


def compose_angular_text(measurement, style, text_size=None, override_text=None):
    """Full MTEXT for an angular dimension; measurement in radians."""
    if override_text and PRIMARY_TOKEN not in override_text:
        return override_text
    if text_size is None:
        text_size = dimension_text_size(style.text_height)

    formatter = create_angular_formatter(style.angular_unit_format, measurement, style, text_size)
    mode = tolerance_mode(style)
    if mode == ToleranceMode.SYMMETRIC:
        text = formatter.format_measurement() + formatter.format_measurement_tolerance_symmetric()
    elif mode == ToleranceMode.DEVIATION:
        text = (alignment_prefix(style.tolerance_alignment) + formatter.format_measurement()
                + formatter.format_measurement_tolerance_plus_minus())
    elif mode == ToleranceMode.LIMITS:
        text = alignment_prefix(style.tolerance_alignment) + formatter.format_measurement_limits()
    else:
        text = formatter.format_measurement()

    return _apply_override(override_text, text)


# ---------------------------------------------------------------------------
# Placement helpers
# ---------------------------------------------------------------------------

def horizontal_text_anchor(alignment):
    """left/center/right (or 0/1/2) -> text-anchor value ('' for left)."""
    if isinstance(alignment, int) and not isinstance(alignment, bool):
        alignment = ALIGNMENTS[alignment] if 0 <= alignment < len(ALIGNMENTS) else "left"
    return TEXT_ANCHORS.get(str(alignment).lower(), "")


def attachment_anchor(attachment_point):
    """MTEXT attachment point 1..9 -> text-anchor value."""
    row_col = ATTACHMENT_POINTS.get(attachment_point)
    if row_col is None:
        return ""
    return TEXT_ANCHORS[row_col[1]]


def attachment_vertical_adjustment(attachment_point, text_height):
    """Baseline shift for an attachment point; unknown points shift a full height."""
    row_col = ATTACHMENT_POINTS.get(attachment_point)
    if row_col is None:
        return text_height
    return text_height * VERTICAL_ADJUSTMENT[row_col[0]]


def readable_text_angle(angle):
    """Flip text running right-to-left by pi so it reads left-to-right."""
    if math.pi / 2 < angle < math.pi * 3 / 2:
        return angle - math.pi
    if -math.pi * 3 / 2 < angle <= -math.pi / 2:
        return angle + math.pi
    return angle
