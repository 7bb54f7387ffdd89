"""
Format a dimension measurement into MTEXT dimension text.
Input via stdin: {
    "kind": "linear" | "angular",
    "measurement": 12.5,                  # drawing units, radians for angular
    "preset": "iso25" | "style": {...},   # preset name/path or inline style values
    "overrides": {...},                   # optional, field or DXF names (DIMTP, ...)
    "dimension_type": "radius",           # optional, selects the default postfix
    "default_postfix": "R<>",             # optional, wins over dimension_type
    "override_text": "<> TYP",            # optional
    "interpret": true                     # optional, also return the text runs
}
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from _bootstrap import log, read_input, require_fields, respond, respond_error

try:
    config = read_input()
    kind = config.get("kind", "linear")
    require_fields(config, "measurement")
    measurement = float(config["measurement"])

    from _dim_style import DimStyle, load_dim_style
    from _dim_text import (
        compose_angular_text, compose_linear_text, default_postfix_for,
        dimension_text_size,
    )

    if config.get("preset"):
        style = load_dim_style(config["preset"])
    else:
        style = DimStyle.from_dict(config.get("style", {}))
    if config.get("overrides"):
        style = style.with_overrides(config["overrides"])

    text_size = dimension_text_size(style.text_height)
    override_text = config.get("override_text")

    if kind == "angular":
        text = compose_angular_text(measurement, style, text_size, override_text)
    elif kind == "linear":
        postfix = config.get("default_postfix") or default_postfix_for(
            config.get("dimension_type", "linear"))
        text = compose_linear_text(measurement, style, postfix, text_size, override_text)
    else:
        respond_error(f"Unknown dimension kind: {kind}")

    log(f"[DIMSTYLE] {kind} {measurement} with '{style.name}' -> {text!r}")
    result = {"success": True, "text": text, "text_size": text_size}

    if config.get("interpret"):
        from _mtext import interpret, runs_to_dicts
        result["runs"] = runs_to_dicts(interpret(text, 0.0, 0.0, text_size))

    respond(result)

except Exception as e:
    import traceback
    respond_error(str(e), traceback.format_exc())
