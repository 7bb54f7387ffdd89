"""
Bootstrap module for the dimension-text scripts.
JSON request on stdin, JSON response on stdout.
Diagnostics go to stderr, tagged per subsystem ([MTEXT], [DIMSTYLE], ...).
"""

import sys
import json


def log(msg):
    """Print debug message to stderr (stdout is reserved for JSON)."""
    print(f"[dimtext] {msg}", file=sys.stderr, flush=True)


def warn(tag, msg):
    """Log a recovered problem, e.g. warn("MTEXT", "unrecognised code")."""
    log(f"[{tag}] Warning: {msg}")


def read_input():
    """Read JSON request from stdin."""
    raw_bytes = sys.stdin.buffer.read()
    if not raw_bytes.strip():
        raise ValueError("No input received on stdin")
    # Decode as UTF-8 regardless of locale; markup carries ±, °, ∅.
    request = json.loads(raw_bytes.decode("utf-8"))
    if not isinstance(request, dict):
        raise ValueError(f"Expected a JSON object on stdin, got {type(request).__name__}")
    return request


def require_fields(request, *names):
    """Raise ValueError naming every missing request field."""
    missing = [n for n in names if n not in request]
    if missing:
        raise ValueError(f"Missing field(s): {', '.join(missing)}")


def respond(data):
    """Write JSON response to stdout and exit."""
    print(json.dumps(data, ensure_ascii=False), flush=True)
    sys.exit(0)


def respond_error(msg, details=None):
    """Write error JSON to stdout and exit with code 1."""
    result = {"success": False, "error": str(msg)}
    if details:
        result["details"] = details
    print(json.dumps(result, ensure_ascii=False), flush=True)
    sys.exit(1)
