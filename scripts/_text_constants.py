"""Shared text constants and small pure helpers for annotation text."""

# -- Text metrics (heuristic, not measured) -------------------------------------
LINE_HEIGHT_FACTOR = 1.2         # paragraph advance = 1.2 x base text size
GLYPH_WIDTH_FACTOR = 0.6         # estimated advance per character x font size
TEXT_SIZE_FROM_HEIGHT = 0.92     # legibility factor, cap height -> font size
DIM_TEXT_SIZE_FACTOR = 1.5       # dimension text is drawn 1.5x the style height
ALT_BRACKET_HEIGHT = "1.8x"      # relative \H for the [ ] around alternate text

# -- Markup tokens ---------------------------------------------------------------
PRIMARY_TOKEN = "<>"
ALTERNATE_TOKEN = "[]"
PLUS_MINUS = "±"
DEGREE = "°"

# -- Fonts -----------------------------------------------------------------------
DEFAULT_FONT_FAMILY = "Arial"

# Legacy / generic style names that have no usable font of their own.
FONT_FALLBACK = {
    "Standard": DEFAULT_FONT_FAMILY,
    "REHAU": DEFAULT_FONT_FAMILY,
}

# -- Colors ----------------------------------------------------------------------
# \C<n>; ACI 1..7. ACI 7 is white-on-black / black-on-white; drawn as black.
ACI_COLORS = {
    1: "red",
    2: "yellow",
    3: "green",
    4: "cyan",
    5: "blue",
    6: "magenta",
    7: "black",
}

# -- Alignment -------------------------------------------------------------------
ALIGNMENTS = ("left", "center", "right")   # \A0; \A1; \A2;

TEXT_ANCHORS = {
    "left": "",
    "center": "middle",
    "right": "end",
}

# MTEXT attachment point (1..9) -> (row, column)
#   1 2 3   top
#   4 5 6   middle
#   7 8 9   bottom
ATTACHMENT_POINTS = {
    1: ("top", "left"),    2: ("top", "center"),    3: ("top", "right"),
    4: ("middle", "left"), 5: ("middle", "center"), 6: ("middle", "right"),
    7: ("bottom", "left"), 8: ("bottom", "center"), 9: ("bottom", "right"),
}

# Fraction of the text height to shift the baseline down for each row
VERTICAL_ADJUSTMENT = {
    "top": 0.8,
    "middle": 0.4,
    "bottom": 0.0,
}


def font_fallback(name):
    """Substitute a usable family for legacy/generic style names."""
    return FONT_FALLBACK.get(name, name)


def line_height(text_size):
    """Paragraph advance for the given base text size."""
    return text_size * LINE_HEIGHT_FACTOR
