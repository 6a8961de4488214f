"""
Histogram chart for svgc.

Classifies the selected field as numeric or categorical and bins it:

- Numeric fields get contiguous bins whose edges sit on nice-number
  boundaries (the same step rule the axis ticks use).
- Categorical fields (any text value present) get one bar per distinct
  value, most frequent first.

Null cells are left out of both classification and counts.  The module
also renders the histogram as SVG markup for the artifact's first frame
and onto a matplotlib ``Figure`` for the PNG preview.
"""

import math
from collections import Counter
from typing import List, Optional, Sequence, Tuple

import numpy as np
from matplotlib.figure import Figure

from .constants import (
    BIN_INPUT_MAX, BIN_INPUT_MIN, DEFAULT_BIN_COUNT, HISTOGRAM_BAR_COLOR,
    HISTOGRAM_HEADROOM, SUGGESTED_BINS_MAX, SUGGESTED_BINS_MIN,
)
from .data_model import (
    CategoricalBin, Cell, ChartOptions, Dataset, HistogramChartData,
    HistogramResult, NumericBin, Scale, ValueKind, format_value, value_kind,
)
from .filters import apply_filters
from .nice_numbers import (
    format_number, format_scientific, interval_count, nice_bounds, nice_step,
    to_fixed,
)
from .svg_elements import (
    axis_lines, axis_titles, element, empty_message, plot_bounds,
    static_controls, y_ticks,
)


# ── Classification ───────────────────────────────────────────────────────

def classify_values(values: Sequence[Cell]) -> Tuple[bool, list]:
    """Split off nulls and decide how to bin the rest.

    Returns
    -------
    is_numeric : bool
        ``True`` only if there is at least one value and every non-null
        value is a number.
    kept : list
        Floats for a numeric field, display strings otherwise.
    """
    present = [v for v in values if value_kind(v) is not ValueKind.NULL]
    if present and all(value_kind(v) is ValueKind.NUMBER for v in present):
        return True, [float(v) for v in present]
    return False, [format_value(v) for v in present]


def suggest_bin_count(n: int) -> int:
    """Sturges' rule, clamped to a readable range.

    Examples
    --------
    >>> suggest_bin_count(0)
    10
    >>> suggest_bin_count(10)
    5
    """
    if n <= 0:
        return DEFAULT_BIN_COUNT
    sturges = math.ceil(1 + 3.322 * math.log10(n))
    return max(SUGGESTED_BINS_MIN, min(SUGGESTED_BINS_MAX, sturges))


def clamp_bin_count(bin_count: int) -> int:
    return max(BIN_INPUT_MIN, min(BIN_INPUT_MAX, int(bin_count)))


# ── Bin labels ───────────────────────────────────────────────────────────

def format_bin_value(num: float, bin_width: float) -> str:
    """Format a bin edge with precision chosen from the bin width."""
    if num == 0:
        return "0"
    abs_num = abs(num)
    if abs_num >= 1e6 or abs_num < 1e-3:
        return format_scientific(num)
    if abs_num >= 1:
        if float(num).is_integer():
            return str(int(num))
        if bin_width >= 1:
            return to_fixed(num, 0)
        if bin_width >= 0.1:
            return to_fixed(num, 1)
        return to_fixed(num, 2)
    if bin_width >= 0.01:
        return to_fixed(num, 2)
    if bin_width >= 0.001:
        return to_fixed(num, 3)
    return to_fixed(num, 4)


def format_bin_label(start: float, end: float, bin_width: float) -> str:
    return f"{format_bin_value(start, bin_width)}-{format_bin_value(end, bin_width)}"


# ── Binning ──────────────────────────────────────────────────────────────

def numeric_bins(values: Sequence[float], bin_count: int) -> List[NumericBin]:
    """Bin numbers on nice boundaries.

    Every value lands in exactly one bin; a value equal to the upper
    bound is clamped into the last bin.
    """
    if not values:
        return []
    arr = np.asarray(values, dtype=float)
    lo = float(arr.min())
    hi = float(arr.max())
    if lo == hi:
        return [NumericBin(lo, hi, int(arr.size), format_number(lo))]

    width = nice_step(lo, hi, bin_count)
    nice_min, nice_max = nice_bounds(lo, hi, width)
    n_bins = max(interval_count(nice_min, nice_max, width), 1)

    index = np.floor((arr - nice_min) / width).astype(np.int64)
    index = np.clip(index, 0, n_bins - 1)
    counts = np.bincount(index, minlength=n_bins)

    bins = []
    for i in range(n_bins):
        start = nice_min + i * width
        end = start + width
        bins.append(NumericBin(
            range_start=start,
            range_end=end,
            count=int(counts[i]),
            label=format_bin_label(start, end, width),
        ))
    return bins


def categorical_bins(values: Sequence[str]) -> List[CategoricalBin]:
    """Count each distinct value; most frequent first, ties in first-seen order."""
    return [
        CategoricalBin(label=label, count=count)
        for label, count in Counter(values).most_common()
    ]


def compute_histogram(values: Sequence[Cell], bin_count: Optional[int] = None) -> HistogramResult:
    """Classify and bin one field's values.

    *bin_count* is the target number of numeric bins; ``None`` uses
    ``suggest_bin_count`` for the number of values.
    """
    is_numeric, kept = classify_values(values)
    excluded = len(values) - len(kept)
    if is_numeric:
        target = clamp_bin_count(bin_count) if bin_count else suggest_bin_count(len(kept))
        return HistogramResult(True, numeric_bins(kept, target), excluded)
    return HistogramResult(False, categorical_bins(kept), excluded)


# ── Chart generation ─────────────────────────────────────────────────────

def generate_histogram(dataset: Dataset, options: ChartOptions) -> HistogramChartData:
    """Filter the rows and bin ``options.histogram_field``."""
    rows = apply_filters(dataset.rows, options.filters)
    field = options.histogram_field
    values = [row.get(field) for row in rows] if field else []
    histogram = compute_histogram(values, options.bin_count)

    y_max = histogram.max_count * HISTOGRAM_HEADROOM
    y_scale = Scale(0.0, y_max, y_max) if y_max > 0 else Scale(0.0, 1.0, 1.0)
    return HistogramChartData(
        histogram=histogram,
        y_scale=y_scale,
        bounds=plot_bounds(options.width, options.height),
        field=field,
    )


def _truncate(label: str, n_bins: int) -> str:
    limit = 10 if n_bins > 10 else 15
    if len(label) > limit:
        return label[:limit - 3] + "..."
    return label


def render_histogram(chart_data: HistogramChartData, options: ChartOptions) -> List[str]:
    """Render bars, count axis and labels as SVG markup."""
    bounds = chart_data.bounds
    bins = chart_data.histogram.bins

    out = axis_lines(bounds)
    out.extend(y_ticks(chart_data.y_scale, bounds))
    out.extend(axis_titles(bounds, chart_data.field or "", "Count", x_offset=60))

    if not bins:
        out.append(empty_message(bounds, "No data to display"))
        return out

    bar_width = bounds.width / len(bins)
    bar_padding = min(bar_width * 0.1, 5)
    label_y = bounds.bottom + 20
    for i, b in enumerate(bins):
        x = bounds.left + i * bar_width + bar_padding / 2
        width = bar_width - bar_padding
        height = b.count / chart_data.y_scale.range * bounds.height
        out.append(element('rect', {
            'x': x, 'y': bounds.bottom - height,
            'width': width, 'height': height,
            'fill': HISTOGRAM_BAR_COLOR, 'class': 'histogram-bar',
            'data-count': b.count, 'data-label': b.label,
        }, children=[element('title', text=f"{b.label}: {b.count}")]))

        cx = x + width / 2
        out.append(element('text', {
            'x': cx, 'y': label_y,
            'text-anchor': 'middle', 'class': 'axis-text',
            'transform': (
                f"rotate(-45, {cx:.2f}, {label_y:.2f})" if len(bins) > 20 else None
            ),
        }, _truncate(b.label, len(bins))))
    return out


def render_histogram_controls(dataset: Dataset, options: ChartOptions) -> List[str]:
    entries = [
        ("Chart", "histogram"),
        ("Field", options.histogram_field or "-"),
    ]
    is_numeric, kept = classify_values(dataset.column(options.histogram_field)) \
        if options.histogram_field else (False, [])
    if is_numeric:
        entries.append(("Bins", str(options.bin_count or suggest_bin_count(len(kept)))))
    entries.append(("Filters", f"{len(options.filters)} active"))
    return static_controls(options, entries)


# ── PNG preview ──────────────────────────────────────────────────────────

def draw_histogram(fig: Figure, chart_data: HistogramChartData, *, title: str = "") -> None:
    """Draw the histogram on *fig* (cleared first)."""
    fig.clf()
    ax = fig.add_subplot(111)
    bins = chart_data.histogram.bins
    if not bins:
        ax.text(0.5, 0.5, 'No data to display',
                transform=ax.transAxes, ha='center', va='center')
        return

    if chart_data.histogram.is_numeric and len(bins) > 1:
        lefts = [b.range_start for b in bins]
        widths = [b.range_end - b.range_start for b in bins]
        ax.bar(lefts, [b.count for b in bins], width=widths, align='edge',
               color=HISTOGRAM_BAR_COLOR, edgecolor='white', linewidth=0.5,
               zorder=3)
    else:
        positions = np.arange(len(bins))
        ax.bar(positions, [b.count for b in bins], color=HISTOGRAM_BAR_COLOR,
               edgecolor='white', linewidth=0.5, zorder=3)
        ax.set_xticks(positions)
        ax.set_xticklabels([_truncate(b.label, len(bins)) for b in bins],
                           rotation=45 if len(bins) > 10 else 0, ha='right')

    ax.set_xlabel(chart_data.field or "", fontsize=8)
    ax.set_ylabel("Count", fontsize=8)
    if title:
        ax.set_title(title, fontsize=10, fontweight='bold')
    ax.grid(axis='y', linewidth=0.4, alpha=0.5)
    fig.tight_layout(pad=1.5)
