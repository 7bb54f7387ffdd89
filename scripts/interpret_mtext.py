"""
Interpret MTEXT markup into styled text runs.
Input via stdin: { "text": "Slope {\\fArial|b1|i0|c0|p34;1 %}", "x": 0, "y": 0,
                   "text_size": 2.5, "preview": "output/slope.png" (optional) }
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from _bootstrap import log, read_input, require_fields, respond, respond_error

try:
    config = read_input()
    require_fields(config, "text")
    text = config["text"]
    x = float(config.get("x", 0.0))
    y = float(config.get("y", 0.0))
    text_size = float(config.get("text_size", 2.5))

    from _mtext import convert_mtext, runs_to_dicts
    from _run_layout import resolve_positions, text_extent

    runs = convert_mtext(text, x, y, text_size)
    log(f"[MTEXT] {len(text)} chars -> {len(runs)} runs")

    result = {
        "success": True,
        "runs": runs_to_dicts(runs),
        "positions": resolve_positions(runs, text_size).tolist(),
        "extent": list(text_extent(runs, text_size)),
    }

    if config.get("preview"):
        from _run_preview import render_runs
        result["preview"] = render_runs(runs, text_size, config["preview"])

    respond(result)

except Exception as e:
    import traceback
    respond_error(str(e), traceback.format_exc())
