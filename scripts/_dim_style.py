"""
Resolved dimension-style values consumed by the formatters.

DimStyle is a frozen bundle of already-resolved numbers and enums. It can
be built from python field names or DXF header/style variable names
(DIMDEC, DIMZIN, ...) and loaded from TOML presets under
configs/dimstyles/.
"""

import dataclasses
import tomllib
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

from _bootstrap import log, warn
from _dim_formatters import (
    AngularUnitFormat, LinearUnitFormat, ToleranceAlignment, coerce_enum,
)
from _dim_numeric import SHOW_ALL, ZeroHandling

SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
PRESETS_DIR = PROJECT_ROOT / "configs" / "dimstyles"


@dataclass(frozen=True)
class DimStyle:
    name: str = "Standard"
    linear_unit_format: LinearUnitFormat = LinearUnitFormat.DECIMAL
    angular_unit_format: AngularUnitFormat = AngularUnitFormat.DECIMAL_DEGREES
    linear_scale_factor: float = 1.0
    rounding: float = 0.0
    decimal_places: int = 4
    zero_handling: ZeroHandling = ZeroHandling.SUPPRESS_ZERO_FEET_AND_INCHES
    angular_decimal_places: int = 0
    angular_zero_handling: ZeroHandling = ZeroHandling.SUPPRESS_ZERO_FEET_AND_INCHES
    tolerance_decimal_places: int = 4
    tolerance_zero_handling: ZeroHandling = ZeroHandling.SUPPRESS_ZERO_FEET_AND_INCHES
    alt_unit_format: LinearUnitFormat = LinearUnitFormat.DECIMAL
    alt_scale_factor: float = 25.4
    alt_rounding: float = 0.0
    alt_decimal_places: int = 2
    alt_zero_handling: ZeroHandling = ZeroHandling.SUPPRESS_ZERO_FEET_AND_INCHES
    alt_tolerance_decimal_places: int = 2
    alt_tolerance_zero_handling: ZeroHandling = ZeroHandling.SUPPRESS_ZERO_FEET_AND_INCHES
    decimal_separator: str = "."
    postfix: str = ""
    alt_postfix: str = ""
    plus_tolerance: float = 0.0
    minus_tolerance: float = 0.0
    tolerance_scale_factor: float = 1.0
    tolerance_alignment: ToleranceAlignment = ToleranceAlignment.MIDDLE
    generate_tolerances: bool = False
    limits_generation: bool = False
    alternate_units: bool = False
    text_height: float = 2.5

    @property
    def effective_angular_decimal_places(self):
        """DIMADEC -1 means 'same as DIMDEC'."""
        if self.angular_decimal_places is None or self.angular_decimal_places < 0:
            return self.decimal_places
        return self.angular_decimal_places

    @classmethod
    def from_dict(cls, mapping):
        """Build from field names and/or DXF variable names. Unknown keys are ignored."""
        return cls(**_convert(mapping or {}))

    def with_overrides(self, mapping=None, **kw):
        """Copy with some values replaced (per-dimension overrides)."""
        values = dict(mapping or {})
        values.update(kw)
        return dataclasses.replace(self, **_convert(values))

    def to_dict(self):
        result = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            result[f.name] = int(value) if isinstance(value, IntEnum) else value
        return result


DXF_ALIASES = {
    "DIMLUNIT": "linear_unit_format",
    "DIMAUNIT": "angular_unit_format",
    "DIMLFAC": "linear_scale_factor",
    "DIMRND": "rounding",
    "DIMDEC": "decimal_places",
    "DIMZIN": "zero_handling",
    "DIMADEC": "angular_decimal_places",
    "DIMAZIN": "angular_zero_handling",
    "DIMTDEC": "tolerance_decimal_places",
    "DIMTZIN": "tolerance_zero_handling",
    "DIMALTU": "alt_unit_format",
    "DIMALTF": "alt_scale_factor",
    "DIMALTRND": "alt_rounding",
    "DIMALTD": "alt_decimal_places",
    "DIMALTZ": "alt_zero_handling",
    "DIMALTTD": "alt_tolerance_decimal_places",
    "DIMALTTZ": "alt_tolerance_zero_handling",
    "DIMDSEP": "decimal_separator",
    "DIMPOST": "postfix",
    "DIMAPOST": "alt_postfix",
    "DIMTP": "plus_tolerance",
    "DIMTM": "minus_tolerance",
    "DIMTFAC": "tolerance_scale_factor",
    "DIMTOLJ": "tolerance_alignment",
    "DIMTOL": "generate_tolerances",
    "DIMLIM": "limits_generation",
    "DIMALT": "alternate_units",
    "DIMTXT": "text_height",
}

_ENUM_DEFAULTS = {
    LinearUnitFormat: LinearUnitFormat.DECIMAL,
    AngularUnitFormat: AngularUnitFormat.DECIMAL_DEGREES,
    ToleranceAlignment: ToleranceAlignment.BOTTOM,
    ZeroHandling: SHOW_ALL,
}

_FIELD_TYPES = {f.name: f.type for f in dataclasses.fields(DimStyle)}


def _to_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _to_separator(value):
    # DXF stores DIMDSEP as a character code (46 = '.')
    if isinstance(value, int) and not isinstance(value, bool):
        return chr(value)
    text = str(value)
    if len(text) != 1:
        raise ValueError(f"decimal_separator must be a single character, got {value!r}")
    return text


def _convert_value(name, value):
    kind = _FIELD_TYPES[name]
    if kind in _ENUM_DEFAULTS:
        return coerce_enum(kind, value, _ENUM_DEFAULTS[kind])
    if name == "decimal_separator":
        return _to_separator(value)
    if kind is bool:
        return _to_bool(value)
    if kind in (int, float):
        try:
            return kind(value)
        except (TypeError, ValueError):
            raise ValueError(f"{name} must be numeric, got {value!r}") from None
    return str(value)


def _convert(mapping):
    values = {}
    for key, value in mapping.items():
        name = key if key in _FIELD_TYPES else DXF_ALIASES.get(str(key).upper())
        if name is None:
            warn("DIMSTYLE", f"unknown dimension style key {key!r} ignored")
            continue
        values[name] = _convert_value(name, value)
    return values


# ---------------------------------------------------------------------------
# Presets (TOML)
# ---------------------------------------------------------------------------

def _preset_path(name_or_path):
    text = str(name_or_path)
    if isinstance(name_or_path, Path) or text.endswith(".toml") or "/" in text or "\\" in text:
        return Path(name_or_path)
    return PRESETS_DIR / f"{text}.toml"


def list_presets(presets_dir=None):
    """Names of the shipped dimension style presets."""
    pdir = Path(presets_dir) if presets_dir else PRESETS_DIR
    return sorted(p.stem for p in pdir.glob("*.toml"))


def load_dim_style(name_or_path, overrides=None):
    """Load a [dimstyle] table from a preset name or TOML path.

    An optional [dimstyle.overrides] table is merged on top, then the
    `overrides` mapping passed by the caller.
    """
    path = _preset_path(name_or_path)
    if not path.exists():
        raise ValueError(f"Dimension style preset not found: {name_or_path} ({path})")

    with open(path, "rb") as f:
        data = tomllib.load(f)

    table = data.get("dimstyle")
    if not isinstance(table, dict):
        raise ValueError(f"{path.name}: missing [dimstyle] table")

    table = dict(table)
    file_overrides = table.pop("overrides", None) or {}
    table.setdefault("name", path.stem)
    style = DimStyle.from_dict({**table, **file_overrides})
    if overrides:
        style = style.with_overrides(overrides)
    log(f"[DIMSTYLE] Loaded '{style.name}' from {path.name}")
    return style
