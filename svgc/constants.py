"""
Constants for svgc.

Centralises the chart layout defaults, the category colour palette,
filter operators, histogram bin limits and the markers used to locate
the embedded state inside a saved artifact.
"""

from typing import List

# ── Chart types ──────────────────────────────────────────────────────────
CHART_SCATTER = "scatter"
CHART_HISTOGRAM = "histogram"
CHART_TYPES = (CHART_SCATTER, CHART_HISTOGRAM)

# ── Default configuration values ─────────────────────────────────────────
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600
DEFAULT_CHART_TYPE = CHART_SCATTER

# ── Layout (pixels) ──────────────────────────────────────────────────────
PADDING = 60
CONTROL_PANEL_WIDTH = 240
CONTROL_PANEL_X = 10
CONTROL_PANEL_Y = 50
LEGEND_WIDTH = 160
TITLE_Y = 25
MIN_PLOT_SIZE = 1.0

# ── Axis ticks ───────────────────────────────────────────────────────────
TICK_TARGET_COUNT = 5
TICK_EPSILON_FRACTION = 0.001
NICE_FACTORS = (1.0, 2.0, 2.5, 5.0)

# ── Scatter scaling ──────────────────────────────────────────────────────
SCALE_PADDING_FRACTION = 0.05
DEGENERATE_PADDING_FRACTION = 0.1
POINT_RADIUS_MIN = 2.0
POINT_RADIUS_MAX = 10.0
POINT_RADIUS_BASE = 3.0
DEFAULT_GROUP = "default"
BLANK_GROUP = "(blank)"

# ── Histogram ────────────────────────────────────────────────────────────
DEFAULT_BIN_COUNT = 10
SUGGESTED_BINS_MIN = 5
SUGGESTED_BINS_MAX = 50
BIN_INPUT_MIN = 3
BIN_INPUT_MAX = 100
HISTOGRAM_HEADROOM = 1.1
HISTOGRAM_BAR_COLOR = '#4285f4'

# ── Filters ──────────────────────────────────────────────────────────────
FILTER_OPERATORS = (
    "=", "!=", ">", "<", ">=", "<=",
    "contains", "starts_with", "ends_with",
)
DEFAULT_FILTER_OPERATOR = "="

# ── Embedded state markers (save-current-view round trip) ────────────────
OPTIONS_START_MARKER = "/*svgc:options*/"
OPTIONS_END_MARKER = "/*svgc:end*/"
DATA_START_MARKER = "/*svgc:data*/"

# ── Category colour cycle (10 distinct colours) ──────────────────────────
CATEGORY_PALETTE = [
    '#1f77b4', '#ff7f0e', '#2ca02c', '#d62728', '#9467bd',
    '#8c564b', '#e377c2', '#7f7f7f', '#bcbd22', '#17becf',
]
GOLDEN_ANGLE = 137.508

# ── PNG preview export ───────────────────────────────────────────────────
PREVIEW_DPI = 150


def generate_colors(count: int) -> List[str]:
    """Return *count* distinct colours.

    The first ten come from ``CATEGORY_PALETTE``; beyond that, hues
    step around the wheel by the golden angle.

    Examples
    --------
    >>> generate_colors(2)
    ['#1f77b4', '#ff7f0e']
    """
    if count < 0:
        raise ValueError(f"generate_colors requires a non-negative count, got {count}")
    if count <= len(CATEGORY_PALETTE):
        return CATEGORY_PALETTE[:count]
    colors = list(CATEGORY_PALETTE)
    for i in range(len(CATEGORY_PALETTE), count):
        hue = (i * GOLDEN_ANGLE) % 360
        colors.append(f"hsl({hue!r}, 70%, 50%)")
    return colors
