#!/usr/bin/env python3
"""Entry scripts speak JSON on stdin/stdout and report errors the same way."""

import json
import subprocess
import sys
from pathlib import Path

SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"


def _run(script, payload):
    raw = payload if isinstance(payload, str) else json.dumps(payload)
    proc = subprocess.run(
        [sys.executable, str(SCRIPTS / script)],
        input=raw.encode("utf-8"), capture_output=True, timeout=60,
    )
    out = proc.stdout.decode("utf-8").strip()
    return proc.returncode, json.loads(out) if out else None


def test_interpret_mtext():
    code, result = _run("interpret_mtext.py",
                        {"text": "A\\P{\\fArial|b1|i0|c0|p0;B}", "x": 1, "y": 2, "text_size": 2})
    assert code == 0
    assert result["success"] is True
    # the paragraph run stays as an empty container around the brace group
    assert [r["value"] for r in result["runs"]] == ["A", "", "B"]
    assert result["runs"][0]["y"] == -2.0
    assert result["runs"][2]["bold"] is True
    assert result["runs"][2]["parent_scope"] == 1
    assert len(result["positions"]) == 3
    assert len(result["extent"]) == 4


def test_interpret_mtext_with_preview(tmp_path):
    target = tmp_path / "mtext.png"
    code, result = _run("interpret_mtext.py", {"text": "\\LA\\l", "preview": str(target)})
    assert code == 0
    assert target.exists()


def test_format_linear_inline_style():
    code, result = _run("format_dimension.py",
                        {"kind": "linear", "measurement": 12.5, "style": {"DIMDEC": 2}})
    assert code == 0
    assert result["text"] == "12.50"


def test_format_linear_preset_and_overrides():
    code, result = _run("format_dimension.py",
                        {"measurement": 12.5, "preset": "iso25", "overrides": {"DIMDEC": 3, "DIMZIN": 0}})
    assert code == 0
    assert result["text"] == "12,500"


def test_format_radius_with_runs():
    code, result = _run("format_dimension.py",
                        {"measurement": 5, "style": {"DIMDEC": 1}, "dimension_type": "radius",
                         "interpret": True})
    assert code == 0
    assert result["text"] == "R5.0"
    assert [r["value"] for r in result["runs"]] == ["R5.0"]


def test_format_angular():
    code, result = _run("format_dimension.py",
                        {"kind": "angular", "measurement": 1.5707963267948966, "style": {}})
    assert code == 0
    assert result["text"] == "90°"


def test_unimplemented_format_reports_error():
    code, result = _run("format_dimension.py", {"measurement": 1, "style": {"DIMLUNIT": 6}})
    assert code == 1
    assert result["success"] is False
    assert "not implemented" in result["error"]
    assert "Traceback" in result["details"]


def test_empty_stdin_reports_error():
    code, result = _run("format_dimension.py", "")
    assert code == 1
    assert result["success"] is False


def test_missing_measurement_is_named():
    code, result = _run("format_dimension.py", {"kind": "linear", "style": {}})
    assert code == 1
    assert "measurement" in result["error"]


def test_non_object_request_is_rejected():
    code, result = _run("interpret_mtext.py", "[1, 2]")
    assert code == 1
    assert result["success"] is False
