"""
Measurement formatters for linear and angular dimension text.

A formatter turns a raw measurement plus a resolved dimension style into
display text: scale -> round -> format per unit -> zero suppression ->
prefix/postfix template. Tolerances come out as MTEXT stacking markup
(\\S+plus^-minus;) to be fed back into the markup interpreter.

Unit formats dispatch through closed tables keyed by the DXF enum codes.
Formats without an implementation are explicit table entries (None) and
raise UnimplementedFormatError as soon as a formatter is requested.
"""

import math
from abc import ABC, abstractmethod
from collections import namedtuple
from enum import IntEnum

from _bootstrap import warn
from _dim_numeric import (
    apply_decimal_zero_handling, compact_number, format_decimal,
    format_exponential, format_feet_inches_decimal,
    format_feet_inches_fractional, format_fractional, is_zero_text,
    round_half_away, round_to_unit,
)
from _text_constants import (
    ALTERNATE_TOKEN, DEGREE, DIM_TEXT_SIZE_FACTOR, PLUS_MINUS, PRIMARY_TOKEN,
)


class UnimplementedFormatError(NotImplementedError):
    """A unit format that has no formatter was requested."""


class LinearUnitFormat(IntEnum):
    """DIMLUNIT / DIMALTU codes."""
    SCIENTIFIC = 1
    DECIMAL = 2
    ENGINEERING = 3
    ARCHITECTURAL = 4
    FRACTIONAL = 5
    WINDOWS_DESKTOP = 6


class AngularUnitFormat(IntEnum):
    """DIMAUNIT codes."""
    DECIMAL_DEGREES = 0
    DEGREES_MINUTES_SECONDS = 1
    GRADIANS = 2
    RADIANS = 3
    SURVEYORS_UNITS = 4


class ToleranceAlignment(IntEnum):
    """DIMTOLJ codes."""
    BOTTOM = 0
    MIDDLE = 1
    TOP = 2


def coerce_enum(enum_cls, value, default):
    """Map value to a member of enum_cls; unknown values fall back to default."""
    if isinstance(value, enum_cls):
        return value
    try:
        if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
            return enum_cls[value.strip().upper()]
        return enum_cls(int(value))
    except (KeyError, ValueError, TypeError):
        warn("DIMSTYLE", f"{value!r} is not a valid {enum_cls.__name__}, using {default.name}")
        return default


def apply_template(text, template, default_template, token=PRIMARY_TOKEN):
    """Substitute text into a prefix/postfix template.

    Empty template -> default_template; a template without the token gets
    the token prepended (i.e. the template is a pure suffix).
    """
    if not template:
        template = default_template
    elif token not in template:
        template = token + template
    return template.replace(token, text)


# ---------------------------------------------------------------------------
# Value formatting per unit format: fn(value, places, zero_handling, sep) -> str
# ---------------------------------------------------------------------------

def _format_decimal_value(value, places, zero_handling, separator):
    return apply_decimal_zero_handling(
        format_decimal(value, places, separator), zero_handling, separator)


def _format_scientific_value(value, places, zero_handling, separator):
    return apply_decimal_zero_handling(
        format_exponential(value, places, separator), zero_handling, separator)


def _format_fractional_value(value, places, zero_handling, separator):
    return format_fractional(value, places)


def _format_architectural_value(value, places, zero_handling, separator):
    return format_feet_inches_fractional(value, places, zero_handling)


def _format_engineering_value(value, places, zero_handling, separator):
    return format_feet_inches_decimal(value, places, zero_handling, separator)


def _format_dms_value(value, places, zero_handling, separator):
    """Degrees, minutes, seconds.

    places 0: degrees only; 1-2: degrees and rounded minutes;
    3-4: whole seconds; >4: seconds with (places - 4) fractional digits.
    """
    places = max(0, int(places))
    sign = "-" if value < 0 else ""
    magnitude = abs(value)

    if places == 0:
        degrees_text = _format_decimal_value(magnitude, 0, zero_handling, separator)
        text = f"{degrees_text}{DEGREE}"
        return sign + text if not is_zero_text(text) else text

    degrees = math.floor(magnitude)
    minutes = (magnitude - degrees) * 60.0
    if places <= 2:
        whole_minutes = int(round_half_away(minutes))
        if whole_minutes >= 60:
            degrees += 1
            whole_minutes -= 60
        minutes_text = apply_decimal_zero_handling(
            str(whole_minutes), zero_handling, separator)
        text = f"{degrees}{DEGREE}{minutes_text}'"
        return sign + text if not is_zero_text(text) else text

    whole_minutes = math.floor(minutes)
    seconds = (minutes - whole_minutes) * 60.0
    second_places = 0 if places <= 4 else places - 4
    if float(format_decimal(seconds, second_places)) >= 60:
        seconds = 0.0
        whole_minutes += 1
        if whole_minutes >= 60:
            degrees += 1
            whole_minutes -= 60
    seconds_text = _format_decimal_value(seconds, second_places, zero_handling, separator)
    text = f"{degrees}{DEGREE}{whole_minutes}'{seconds_text}\""
    return sign + text if not is_zero_text(text) else text


LINEAR_VALUE_FORMATS = {
    LinearUnitFormat.SCIENTIFIC: _format_scientific_value,
    LinearUnitFormat.DECIMAL: _format_decimal_value,
    LinearUnitFormat.ENGINEERING: _format_engineering_value,
    LinearUnitFormat.ARCHITECTURAL: _format_architectural_value,
    LinearUnitFormat.FRACTIONAL: _format_fractional_value,
    LinearUnitFormat.WINDOWS_DESKTOP: None,
}


AngularVariant = namedtuple("AngularVariant", ["to_display", "format_value", "default_postfix"])

ANGULAR_VARIANTS = {
    AngularUnitFormat.DECIMAL_DEGREES: AngularVariant(
        math.degrees, _format_decimal_value, PRIMARY_TOKEN + DEGREE),
    AngularUnitFormat.DEGREES_MINUTES_SECONDS: AngularVariant(
        math.degrees, _format_dms_value, PRIMARY_TOKEN),
    AngularUnitFormat.GRADIANS: AngularVariant(
        lambda rad: rad * 200.0 / math.pi, _format_decimal_value, PRIMARY_TOKEN + "g"),
    AngularUnitFormat.RADIANS: AngularVariant(
        lambda rad: rad, _format_decimal_value, PRIMARY_TOKEN + "r"),
    AngularUnitFormat.SURVEYORS_UNITS: None,
}


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

class MeasurementFormatter(ABC):
    """Common contract of linear and angular measurement formatters.

    Instances are built per dimension from already-resolved style values
    and are not mutated afterwards.
    """

    def __init__(self, measurement, style, default_postfix=PRIMARY_TOKEN, text_size=None):
        self.measurement = measurement
        self.style = style
        self.default_postfix = default_postfix or PRIMARY_TOKEN
        self.text_size = style.text_height if text_size is None else text_size

    @abstractmethod
    def format_value(self, value, places, zero_handling):
        """Format an already scaled value for this unit format."""

    @abstractmethod
    def format_measurement(self):
        """Primary measurement with prefix/postfix."""

    @abstractmethod
    def format_measurement_tolerance_symmetric(self):
        """'±' + tolerance, assuming plus == minus."""

    @abstractmethod
    def format_measurement_tolerance_plus_minus(self):
        """Stacked +plus over -minus."""

    @abstractmethod
    def format_measurement_limits(self):
        """Stacked (measurement + plus) over (measurement - minus)."""

    def with_postfix(self, text):
        return apply_template(text, self.style.postfix, self.default_postfix)

    def stack_tolerance(self, minus, plus):
        """Stack plus above minus, scaled by the tolerance scale factor."""
        factor = self.style.tolerance_scale_factor
        if factor == 1:
            return f"\\S{plus}^{minus};"
        height = compact_number(self.text_size * factor / DIM_TEXT_SIZE_FACTOR)
        return f"{{\\H{height};\\S{plus}^{minus}; }}"

    def _deviations(self, minus_value, plus_value, places, zero_handling, postfix):
        """Signed (minus, plus) texts. Both always carry a sign, '+0' and '-0' included."""
        minus_text = postfix(self.format_value(abs(minus_value), places, zero_handling))
        plus_text = postfix(self.format_value(abs(plus_value), places, zero_handling))
        return (("-" if minus_value >= 0 else "+") + minus_text,
                ("+" if plus_value >= 0 else "-") + plus_text)


class LinearFormatter(MeasurementFormatter):
    """Linear measurements, with optional alternate-unit values."""

    def __init__(self, measurement, style, unit_format=None,
                 default_postfix=PRIMARY_TOKEN, text_size=None):
        super().__init__(measurement, style, default_postfix, text_size)
        if unit_format is None:
            unit_format = style.linear_unit_format
        self.unit_format = coerce_enum(LinearUnitFormat, unit_format, LinearUnitFormat.DECIMAL)
        self._format = LINEAR_VALUE_FORMATS[self.unit_format]
        if self._format is None:
            raise UnimplementedFormatError(
                f"linear unit format {self.unit_format.name} is not implemented")

    def format_value(self, value, places, zero_handling):
        return self._format(value, places, zero_handling, self.style.decimal_separator)

    # -- scaling --------------------------------------------------------------

    def scaled(self, value):
        s = self.style
        return round_to_unit(value * s.linear_scale_factor, s.rounding)

    def alternate_scaled(self, value):
        s = self.style
        return round_to_unit(value * s.linear_scale_factor * s.alt_scale_factor, s.alt_rounding)

    def with_alternate_postfix(self, text):
        default = self.default_postfix.replace(PRIMARY_TOKEN, ALTERNATE_TOKEN)
        return apply_template(text, self.style.alt_postfix, default, ALTERNATE_TOKEN)

    # -- primary --------------------------------------------------------------

    def format_measurement(self):
        s = self.style
        text = self.format_value(self.scaled(self.measurement), s.decimal_places, s.zero_handling)
        return self.with_postfix(text)

    def format_measurement_tolerance_symmetric(self):
        s = self.style
        text = self.format_value(self.scaled(s.plus_tolerance),
                                 s.tolerance_decimal_places, s.tolerance_zero_handling)
        return PLUS_MINUS + self.with_postfix(text)

    def format_measurement_tolerance_plus_minus(self):
        s = self.style
        minus, plus = self._deviations(
            self.scaled(s.minus_tolerance), self.scaled(s.plus_tolerance),
            s.tolerance_decimal_places, s.tolerance_zero_handling, self.with_postfix)
        return self.stack_tolerance(minus, plus)

    def format_measurement_limits(self):
        s = self.style
        low = self.scaled(self.measurement - s.minus_tolerance)
        high = self.scaled(self.measurement + s.plus_tolerance)
        return self.stack_tolerance(
            self.with_postfix(self.format_value(low, s.decimal_places, s.zero_handling)),
            self.with_postfix(self.format_value(high, s.decimal_places, s.zero_handling)))

    # -- alternate units --------------------------------------------------------

    def format_alternate(self):
        s = self.style
        text = self.format_value(self.alternate_scaled(self.measurement),
                                 s.alt_decimal_places, s.alt_zero_handling)
        return self.with_alternate_postfix(text)

    def format_alternate_tolerance_symmetric(self):
        s = self.style
        text = self.format_value(self.alternate_scaled(s.plus_tolerance),
                                 s.alt_tolerance_decimal_places, s.alt_tolerance_zero_handling)
        return PLUS_MINUS + self.with_alternate_postfix(text)

    def format_alternate_tolerance_plus_minus(self):
        s = self.style
        minus, plus = self._deviations(
            self.alternate_scaled(s.minus_tolerance), self.alternate_scaled(s.plus_tolerance),
            s.alt_tolerance_decimal_places, s.alt_tolerance_zero_handling,
            self.with_alternate_postfix)
        return self.stack_tolerance(minus, plus)

    def format_alternate_limits(self):
        s = self.style
        low = self.alternate_scaled(self.measurement - s.minus_tolerance)
        high = self.alternate_scaled(self.measurement + s.plus_tolerance)
        places, zh = s.alt_decimal_places, s.alt_zero_handling
        return self.stack_tolerance(
            self.with_alternate_postfix(self.format_value(low, places, zh)),
            self.with_alternate_postfix(self.format_value(high, places, zh)))


class AngularFormatter(MeasurementFormatter):
    """Angular measurements. Values arrive in radians; no alternate units."""

    def __init__(self, measurement, style, unit_format=None, text_size=None):
        if unit_format is None:
            unit_format = style.angular_unit_format
        unit_format = coerce_enum(AngularUnitFormat, unit_format,
                                  AngularUnitFormat.DECIMAL_DEGREES)
        variant = ANGULAR_VARIANTS[unit_format]
        if variant is None:
            raise UnimplementedFormatError(
                f"angular unit format {unit_format.name} is not implemented")
        super().__init__(measurement, style, variant.default_postfix, text_size)
        self.unit_format = unit_format
        self._variant = variant

    def display_value(self, radians):
        return self._variant.to_display(radians)

    def format_value(self, value, places, zero_handling):
        return self._variant.format_value(value, places, zero_handling, self.style.decimal_separator)

    def format_measurement(self):
        s = self.style
        text = self.format_value(self.display_value(self.measurement),
                                 s.effective_angular_decimal_places, s.angular_zero_handling)
        return self.with_postfix(text)

    def format_measurement_tolerance_symmetric(self):
        s = self.style
        text = self.format_value(self.display_value(s.plus_tolerance),
                                 s.tolerance_decimal_places, s.tolerance_zero_handling)
        return PLUS_MINUS + self.with_postfix(text)

    def format_measurement_tolerance_plus_minus(self):
        s = self.style
        minus, plus = self._deviations(
            self.display_value(s.minus_tolerance), self.display_value(s.plus_tolerance),
            s.tolerance_decimal_places, s.tolerance_zero_handling, self.with_postfix)
        return self.stack_tolerance(minus, plus)

    def format_measurement_limits(self):
        s = self.style
        low = self.display_value(self.measurement - s.minus_tolerance)
        high = self.display_value(self.measurement + s.plus_tolerance)
        places, zh = s.effective_angular_decimal_places, s.angular_zero_handling
        return self.stack_tolerance(
            self.with_postfix(self.format_value(low, places, zh)),
            self.with_postfix(self.format_value(high, places, zh)))


def create_linear_formatter(unit_format, measurement, style,
                            default_postfix=PRIMARY_TOKEN, text_size=None):
    """Linear formatter for a DIMLUNIT code. Unknown codes fall back to decimal."""
    return LinearFormatter(measurement, style, unit_format, default_postfix, text_size)


def create_angular_formatter(unit_format, measurement, style, text_size=None):
    """Angular formatter for a DIMAUNIT code. Unknown codes fall back to decimal degrees."""
    return AngularFormatter(measurement, style, unit_format, text_size)
