"""Raster preview of interpreted text runs, for visual debugging."""

import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from _bootstrap import log
from _run_layout import resolve_positions, run_metrics, text_extent

POINTS_PER_UNIT = 10.0      # 1 drawing unit -> 10 pt
MARGIN = 1.0                # drawing units around the text box
PREVIEW_DPI = 150

# Decoration line offsets as a fraction of font size (Y-down, from baseline)
UNDERLINE_OFFSET = 0.15
STRIKE_OFFSET = -0.35
OVERSTRIKE_OFFSET = -1.0


def _decorations(run):
    offsets = []
    if run.underline:
        offsets.append(UNDERLINE_OFFSET)
    if run.strikethrough:
        offsets.append(STRIKE_OFFSET)
    if run.overstrike:
        offsets.append(OVERSTRIKE_OFFSET)
    return offsets


def render_runs(runs, base_text_size, output_path):
    """Draw runs at their resolved positions and save to output_path (PNG/SVG/PDF by extension).

    Returns output_path.
    """
    x_min, y_min, x_max, y_max = text_extent(runs, base_text_size)
    width = max(x_max - x_min, base_text_size) + 2 * MARGIN
    height = max(y_max - y_min, base_text_size) + 2 * MARGIN

    fig = plt.figure(figsize=(width * POINTS_PER_UNIT / 72, height * POINTS_PER_UNIT / 72))
    fig.patch.set_facecolor('white')
    ax = fig.add_axes([0, 0, 1, 1])
    ax.set_xlim(x_min - MARGIN, x_min - MARGIN + width)
    # Y-down, like the SVG output
    ax.set_ylim(y_min - MARGIN + height, y_min - MARGIN)
    ax.axis('off')

    positions = resolve_positions(runs, base_text_size)
    sizes, lengths = run_metrics(runs, base_text_size)
    for run, (x, y), size, length in zip(runs, positions, sizes, lengths):
        if not run.value:
            continue
        color = run.fill or 'black'
        family = [run.font_family, 'sans-serif'] if run.font_family else 'sans-serif'
        ax.text(x, y, run.value,
                fontsize=size * POINTS_PER_UNIT,
                fontweight='bold' if run.bold else 'normal',
                fontstyle='italic' if run.italic else 'normal',
                family=family, color=color,
                ha='left', va='baseline')
        for offset in _decorations(run):
            ly = y + offset * size
            ax.plot([x, x + length], [ly, ly], color=color, linewidth=0.8)

    out_dir = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(out_dir, exist_ok=True)
    fig.savefig(output_path, dpi=PREVIEW_DPI)
    plt.close(fig)
    log(f"[PREVIEW] {len(runs)} runs -> {output_path}")
    return output_path
