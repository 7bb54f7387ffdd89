"""
MTEXT markup interpreter.

Turns an annotation string with inline formatting codes into an ordered
list of TextRun records. Single left-to-right pass over a longest-match
lexer; scopes ({...}, \\L..\\l, \\O..\\o, \\K..\\k) are tracked as an
index stack into the run list.

Position model: the first run carries the absolute anchor. Every other
run is placed relative to the pen position left by the run before it
(start + estimated length), via dx/dy. Runs after a paragraph break
carry an absolute x (the anchor x) and a dy of one line height.

Malformed markup never raises: the unparsed remainder is emitted
verbatim and the pass stops. It joins the current run when that run is
unstyled top-level text, otherwise it becomes its own unstyled run.
"""

import re
from dataclasses import asdict, dataclass, fields
from typing import Optional

from _bootstrap import warn
from _text_constants import (
    ACI_COLORS, ALIGNMENTS, GLYPH_WIDTH_FACTOR, TEXT_SIZE_FROM_HEIGHT,
    font_fallback, line_height,
)


@dataclass
class TextRun:
    """One styled piece of text. font_size None means inherited from the scope."""
    value: str = ""
    x: Optional[float] = None
    y: Optional[float] = None
    dx: Optional[float] = None
    dy: Optional[float] = None
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    overstrike: bool = False
    strikethrough: bool = False
    fill: Optional[str] = None
    slant_angle: Optional[float] = None
    width_factor: Optional[float] = None
    alignment: Optional[str] = None
    parent_scope: Optional[int] = None

    def to_dict(self):
        return {k: v for k, v in asdict(self).items() if v is not None}


# Attributes a new run takes over from the run whose style it extends.
STYLE_FIELDS = tuple(
    f.name for f in fields(TextRun)
    if f.name not in ("value", "x", "y", "dx", "dy", "parent_scope")
)

_NUM = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)"

# (kind, pattern). Order only matters for equal-length matches.
CODE_TABLE = (
    ("paragraph", re.compile(r"\\P|\^J")),
    ("open", re.compile(r"\{")),
    ("close", re.compile(r"\}")),
    ("escape", re.compile(r"\\([\\{}])")),
    ("overstrike_on", re.compile(r"\\O")),
    ("overstrike_off", re.compile(r"\\o")),
    ("underline_on", re.compile(r"\\L")),
    ("underline_off", re.compile(r"\\l")),
    ("strike_on", re.compile(r"\\K")),
    ("strike_off", re.compile(r"\\k")),
    ("align", re.compile(r"\\A(\d);")),
    ("font", re.compile(
        r"\\[fF](?P<font>[^|;{}\\]+)\|b(?P<bold>[01])\|i(?P<italic>[01])"
        r"\|c(?P<codepage>\d+)\|p(?P<pitch>\d+);")),
    ("height", re.compile(rf"\\H({_NUM})(x?);")),
    ("width", re.compile(rf"\\W({_NUM})(x?);")),
    ("color", re.compile(r"\\C([1-7]);")),
    ("color_noop", re.compile(r"\\c([1-7]);")),
    ("oblique", re.compile(rf"\\Q({_NUM});")),
    ("stack", re.compile(r"\\S(?=[^;\\]*[\^/#])(?P<body>[^;\\]*);")),
    ("unicode", re.compile(r"\\U\+([0-9A-Fa-f]{4})")),
)

_LITERAL = re.compile(r"(?:[^\\{}^]|\^(?!J))+")

# '^' wins over '/' and '#', so '\S+1/4^-1/8;' stacks two fractions.
_INLINE_STACK_SEP = re.compile(r"[/#]")

_PLAIN = TextRun()

_TOGGLES = {
    "overstrike_on": "overstrike", "overstrike_off": "overstrike",
    "underline_on": "underline", "underline_off": "underline",
    "strike_on": "strikethrough", "strike_off": "strikethrough",
}


def tokenize(text):
    """Yield (kind, match_or_text, offset). A ("malformed", rest, offset) token ends the stream."""
    pos = 0
    end = len(text)
    while pos < end:
        best_kind, best = None, None
        for kind, pattern in CODE_TABLE:
            m = pattern.match(text, pos)
            if m and (best is None or m.end() > best.end()):
                best_kind, best = kind, m
        if best is not None:
            yield best_kind, best, pos
            pos = best.end()
            continue
        m = _LITERAL.match(text, pos)
        if m:
            yield "text", m.group(0), pos
            pos = m.end()
            continue
        yield "malformed", text[pos:], pos
        return


def estimate_text_length(text, font_size):
    """Heuristic advance width: characters x font size x 0.6."""
    return len(text) * font_size * GLYPH_WIDTH_FACTOR


def effective_font_size(runs, index, base_text_size):
    """Font size of runs[index], following parent scopes; base size if none is set."""
    seen = 0
    while index is not None and seen <= len(runs):
        size = runs[index].font_size
        if size is not None:
            return size
        index = runs[index].parent_scope
        seen += 1
    return base_text_size


def _effective_width(runs, index):
    while index is not None:
        if runs[index].width_factor is not None:
            return runs[index].width_factor
        index = runs[index].parent_scope
    return 1.0


class MTextInterpreter:
    """One interpretation pass. Create, call run(), discard."""

    def __init__(self, anchor_x, anchor_y, base_text_size):
        self.anchor_x = anchor_x
        self.anchor_y = anchor_y
        self.base_text_size = base_text_size
        self._runs = []
        self._stack = []
        self._current = None
        self._resume = None

    # -- run arena -------------------------------------------------------------

    def _style_source(self):
        return self._current if self._current is not None else self._resume

    def _scope(self):
        return self._stack[-1] if self._stack else None

    def _new_run(self, style_from=None, parent=None, **attrs):
        run = TextRun(parent_scope=parent)
        if style_from is not None:
            source = self._runs[style_from]
            for name in STYLE_FIELDS:
                setattr(run, name, getattr(source, name))
        for name, value in attrs.items():
            setattr(run, name, value)
        self._runs.append(run)
        return len(self._runs) - 1

    def _styled_run(self):
        """Current run if it holds no text yet, otherwise a fresh one in the current scope."""
        if self._current is not None and not self._runs[self._current].value:
            return self._current
        self._current = self._new_run(self._style_source(), self._scope())
        return self._current

    def _append_text(self, text):
        if self._current is None:
            self._current = self._new_run(self._style_source(), self._scope())
        self._runs[self._current].value += text

    def _open_scope(self, **attrs):
        source = self._style_source()
        child = self._new_run(source, source, **attrs)
        self._stack.append(child)
        self._current = child

    def _close_scope(self):
        if not self._stack:
            return
        closed = self._stack.pop()
        self._resume = self._runs[closed].parent_scope
        self._current = None

    # -- codes -----------------------------------------------------------------

    def _toggle(self, kind):
        flag = _TOGGLES[kind]
        if kind.endswith("_on"):
            self._open_scope(**{flag: True})
            return
        source = self._style_source()
        if source is not None and getattr(self._runs[source], flag):
            self._close_scope()

    def _paragraph(self):
        source = len(self._runs) - 1 if self._runs else None
        self._current = self._new_run(
            source, self._scope(),
            x=self.anchor_x, dy=line_height(self.base_text_size))

    def _height(self, m):
        value = float(m.group(1))
        if value <= 0:
            warn("MTEXT", f"ignoring non-positive height {m.group(0)!r}")
            return
        if m.group(2):
            inherited = effective_font_size(self._runs, self._style_source(), self.base_text_size)
            size = value * inherited
        else:
            size = value * TEXT_SIZE_FROM_HEIGHT
        self._runs[self._styled_run()].font_size = size

    def _width(self, m):
        value = float(m.group(1))
        if m.group(2):
            value *= _effective_width(self._runs, self._style_source())
        self._runs[self._styled_run()].width_factor = value

    def _font(self, m):
        run = self._runs[self._styled_run()]
        run.font_family = font_fallback(m.group("font"))
        run.bold = m.group("bold") == "1"
        run.italic = m.group("italic") == "1"

    def _align(self, m):
        code = int(m.group(1))
        alignment = ALIGNMENTS[code] if code < len(ALIGNMENTS) else ALIGNMENTS[0]
        self._runs[self._styled_run()].alignment = alignment

    def _stack_fraction(self, m):
        body = m.group("body")
        if "^" not in body:
            top, bottom = _INLINE_STACK_SEP.split(body, 1)
            self._append_text(f"{top}/{bottom}")
            return
        top, bottom = body.split("^", 1)
        numerator = self._styled_run()
        font_size = effective_font_size(self._runs, numerator, self.base_text_size)
        num_run = self._runs[numerator]
        num_run.value = top
        num_run.dy = (num_run.dy or 0.0) - font_size
        denominator = self._new_run(
            numerator, self._scope(), value=bottom,
            dx=estimate_text_length(top, font_size), dy=font_size)
        # text after the stack starts its own run on the baseline
        self._current = None
        self._resume = denominator

    def _unicode(self, m):
        char = chr(int(m.group(1), 16))
        if not self._runs:
            self._current = self._new_run(self._style_source(), self._scope())
        self._runs[-1].value += char

    def _is_plain(self, index):
        run = self._runs[index]
        return run.parent_scope is None and all(
            getattr(run, name) == getattr(_PLAIN, name) for name in STYLE_FIELDS)

    def _malformed(self, rest, offset):
        warn("MTEXT", f"unrecognised code at offset {offset}, "
                      f"emitting {rest[:20]!r} verbatim")
        if self._current is not None and self._is_plain(self._current):
            self._runs[self._current].value += rest
            return
        self._current = self._new_run(None, None, value=rest)

    # -- pass ------------------------------------------------------------------

    def run(self, text):
        for kind, token, offset in tokenize(text):
            if kind == "text":
                self._append_text(token)
            elif kind == "escape":
                self._append_text(token.group(1))
            elif kind == "paragraph":
                self._paragraph()
            elif kind == "open":
                self._open_scope()
            elif kind == "close":
                self._close_scope()
            elif kind in _TOGGLES:
                self._toggle(kind)
            elif kind == "align":
                self._align(token)
            elif kind == "font":
                self._font(token)
            elif kind == "height":
                self._height(token)
            elif kind == "width":
                self._width(token)
            elif kind == "color":
                self._runs[self._styled_run()].fill = ACI_COLORS[int(token.group(1))]
            elif kind == "color_noop":
                pass
            elif kind == "oblique":
                self._runs[self._styled_run()].slant_angle = float(token.group(1))
            elif kind == "stack":
                self._stack_fraction(token)
            elif kind == "unicode":
                self._unicode(token)
            elif kind == "malformed":
                self._malformed(token, offset)
                break

        if not self._runs:
            self._runs.append(TextRun())
        first = self._runs[0]
        first.x = self.anchor_x
        first.y = self.anchor_y
        first.dx = None
        first.dy = None
        return self._runs


def interpret(text, anchor_x, anchor_y, base_text_size):
    """Interpret MTEXT markup into a list of TextRun, first run at (anchor_x, anchor_y)."""
    return MTextInterpreter(anchor_x, anchor_y, base_text_size).run(text or "")


def convert_mtext(text, x, y, text_size):
    """Entity-level entry: bare newlines are paragraph breaks, y is flipped to Y-down."""
    if not text:
        return []
    return interpret(text.replace("\n", "\\P"), x, -y, text_size)


def runs_to_dicts(runs):
    return [run.to_dict() for run in runs]
