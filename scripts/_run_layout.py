"""Resolve run-list deltas into absolute pen positions."""

import numpy as np

from _mtext import effective_font_size, estimate_text_length


def run_metrics(runs, base_text_size):
    """Per-run (font sizes, estimated lengths) as float arrays."""
    sizes = np.array([effective_font_size(runs, i, base_text_size) for i in range(len(runs))],
                     dtype=float)
    lengths = np.array([estimate_text_length(r.value, s) for r, s in zip(runs, sizes)],
                       dtype=float)
    return sizes, lengths


def resolve_positions(runs, base_text_size):
    """Absolute start position of every run, shape (n, 2).

    A run's dx/dy apply to the pen left by the run before it (its start
    plus its estimated length). Runs with an absolute x (the first run and
    paragraph starts) reset the horizontal accumulation.
    """
    n = len(runs)
    if n == 0:
        return np.zeros((0, 2))

    _, lengths = run_metrics(runs, base_text_size)
    dx = np.array([r.dx or 0.0 for r in runs], dtype=float)
    dy = np.array([r.dy or 0.0 for r in runs], dtype=float)
    dy[0] = 0.0

    advance = np.zeros(n)
    advance[1:] = lengths[:-1] + dx[1:]
    total = np.cumsum(advance)

    has_x = np.array([r.x is not None for r in runs])
    has_x[0] = True
    abs_x = np.array([r.x if r.x is not None else 0.0 for r in runs], dtype=float)
    segment = np.maximum.accumulate(np.where(has_x, np.arange(n), 0))
    xs = total + (abs_x[segment] - total[segment])

    y0 = runs[0].y if runs[0].y is not None else 0.0
    ys = y0 + np.cumsum(dy)
    return np.column_stack((xs, ys))


def text_extent(runs, base_text_size):
    """(x_min, y_min, x_max, y_max) of the estimated text box, Y-down."""
    if not runs:
        return (0.0, 0.0, 0.0, 0.0)
    positions = resolve_positions(runs, base_text_size)
    sizes, lengths = run_metrics(runs, base_text_size)
    xs, ys = positions[:, 0], positions[:, 1]
    return (float(xs.min()), float((ys - sizes).min()),
            float((xs + lengths).max()), float(ys.max()))
