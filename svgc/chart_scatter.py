"""
Scatter chart for svgc.

X against Y for two numeric fields, optionally coloured by a group field
and sized by a weight field.  Rows whose x or y cell is not a number are
skipped and counted in ``excluded``.  Legend entries toggle the
visibility of their group.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

from matplotlib.figure import Figure

from .constants import (
    BLANK_GROUP, DEFAULT_GROUP, DEGENERATE_PADDING_FRACTION,
    POINT_RADIUS_BASE, POINT_RADIUS_MAX, POINT_RADIUS_MIN,
    SCALE_PADDING_FRACTION, generate_colors,
)
from .data_model import (
    Cell, ChartOptions, Dataset, Point, Row, Scale, ScatterChartData,
    ValueKind, format_value, value_kind,
)
from .filters import apply_filters
from .svg_elements import (
    axis_lines, axis_titles, element, empty_message, plot_bounds, scale_x,
    scale_y, static_controls, x_ticks, y_ticks,
)

logger = logging.getLogger(__name__)


# ── Scaling ──────────────────────────────────────────────────────────────

def compute_scale(values: Sequence[float]) -> Scale:
    """Padded linear scale covering *values*.

    The data range is padded by 5 % on both sides.  A zero-width range
    is padded by 10 % of its magnitude, or by 1 around zero, so the
    returned ``range`` is always positive.  An empty list scales as
    ``[0]``.

    Examples
    --------
    >>> compute_scale([0, 10])
    Scale(min=-0.5, max=10.5, range=11.0)
    >>> compute_scale([5, 5])
    Scale(min=4.5, max=5.5, range=1.0)
    """
    values = list(values) or [0.0]
    lo = float(min(values))
    hi = float(max(values))
    span = hi - lo
    if span > 0:
        padding = span * SCALE_PADDING_FRACTION
    else:
        padding = abs(lo) * DEGENERATE_PADDING_FRACTION or 1.0
    lo -= padding
    hi += padding
    return Scale(lo, hi, hi - lo)


def point_radius(weight: Cell) -> float:
    """Radius for a weight cell; non-numbers count as 1, negatives as 0."""
    w = float(weight) if value_kind(weight) is ValueKind.NUMBER else 1.0
    w = max(w, 0.0)
    radius = POINT_RADIUS_BASE + math.sqrt(w) * 2
    return max(POINT_RADIUS_MIN, min(POINT_RADIUS_MAX, radius))


def group_of(row: Row, group_field: Optional[str]) -> str:
    if not group_field:
        return DEFAULT_GROUP
    cell = row.get(group_field)
    if value_kind(cell) is ValueKind.NULL:
        return BLANK_GROUP
    return format_value(cell)


def collect_groups(rows: Sequence[Row], group_field: Optional[str]) -> List[str]:
    """Distinct group names in first-seen order."""
    seen: Dict[str, None] = {}
    for row in rows:
        seen.setdefault(group_of(row, group_field), None)
    return list(seen)


def is_group_visible(group: str, visible_groups) -> bool:
    return visible_groups is None or group in visible_groups


# ── Chart generation ─────────────────────────────────────────────────────

def generate_scatter(dataset: Dataset, options: ChartOptions) -> ScatterChartData:
    """Filter the rows, scale both axes and lay out the points."""
    rows = apply_filters(dataset.rows, options.filters)
    x_field, y_field = options.x_field, options.y_field

    plotted = []
    excluded = 0
    for index, row in enumerate(rows):
        x = row.get(x_field) if x_field else None
        y = row.get(y_field) if y_field else None
        if value_kind(x) is ValueKind.NUMBER and value_kind(y) is ValueKind.NUMBER:
            plotted.append((index, row, float(x), float(y)))
        else:
            excluded += 1
    if excluded:
        logger.debug("Scatter skipped %d row(s) without numeric x/y", excluded)

    groups = collect_groups(rows, options.group_field)
    colors = generate_colors(len(groups))
    group_colors = dict(zip(groups, colors))

    x_scale = compute_scale([p[2] for p in plotted])
    y_scale = compute_scale([p[3] for p in plotted])
    bounds = plot_bounds(options.width, options.height,
                         reserve_legend=bool(options.group_field))

    points = []
    for index, row, x, y in plotted:
        group = group_of(row, options.group_field)
        weight = row.get(options.weight_field) if options.weight_field else 1.0
        points.append(Point(
            x=scale_x(x, x_scale, bounds),
            y=scale_y(y, y_scale, bounds),
            radius=point_radius(weight),
            color=group_colors[group],
            group=group,
            source_row=row,
            index=index,
        ))

    return ScatterChartData(
        points=points,
        x_scale=x_scale,
        y_scale=y_scale,
        groups=groups,
        group_colors=group_colors,
        bounds=bounds,
        excluded=excluded,
    )


# ── SVG rendering ────────────────────────────────────────────────────────

def _tooltip(point: Point, options: ChartOptions) -> str:
    lines = [
        f"{options.x_field}: {format_value(point.source_row.get(options.x_field))}",
        f"{options.y_field}: {format_value(point.source_row.get(options.y_field))}",
    ]
    if options.group_field:
        lines.append(f"{options.group_field}: {point.group}")
    if options.weight_field:
        lines.append(
            f"{options.weight_field}: "
            f"{format_value(point.source_row.get(options.weight_field))}"
        )
    return "\n".join(lines)


def render_legend(chart_data: ScatterChartData, options: ChartOptions) -> List[str]:
    """Legend with one checkbox row per group."""
    bounds = chart_data.bounds
    x = bounds.right + 20
    y = bounds.top
    out = [element('text', {
        'x': x, 'y': y, 'class': 'ui-label legend-title',
    }, options.group_field or "")]
    for i, group in enumerate(chart_data.groups):
        row_y = y + 20 + i * 20
        visible = is_group_visible(group, options.visible_groups)
        out.append(element('g', {
            'class': 'legend-item' if visible else 'legend-item legend-off',
            'data-group': group,
        }, children=[
            element('rect', {
                'x': x, 'y': row_y - 10, 'width': 12, 'height': 12,
                'fill': chart_data.group_colors[group] if visible else 'white',
                'stroke': chart_data.group_colors[group],
                'class': 'legend-checkbox',
            }),
            element('text', {
                'x': x + 18, 'y': row_y, 'class': 'legend-text',
            }, group if len(group) <= 18 else group[:15] + "..."),
        ]))
    return out


def render_scatter(chart_data: ScatterChartData, options: ChartOptions) -> List[str]:
    """Render axes, points and legend as SVG markup."""
    bounds = chart_data.bounds
    out = axis_lines(bounds)
    out.extend(x_ticks(chart_data.x_scale, bounds))
    out.extend(y_ticks(chart_data.y_scale, bounds))
    out.extend(axis_titles(bounds, options.x_field or "", options.y_field or ""))

    if not chart_data.points:
        out.append(empty_message(bounds, "No data to display"))
    for point in chart_data.points:
        hidden = not is_group_visible(point.group, options.visible_groups)
        out.append(element('circle', {
            'cx': point.x, 'cy': point.y, 'r': point.radius,
            'fill': point.color,
            'class': 'data-point hidden' if hidden else 'data-point',
            'data-group': point.group,
            'data-index': point.index,
        }, children=[element('title', text=_tooltip(point, options))]))

    if options.group_field:
        out.extend(render_legend(chart_data, options))
    return out


def render_scatter_controls(dataset: Dataset, options: ChartOptions) -> List[str]:
    entries = [
        ("Chart", "scatter"),
        ("X", options.x_field or "-"),
        ("Y", options.y_field or "-"),
        ("Group", options.group_field or "none"),
        ("Size", options.weight_field or "none"),
        ("Filters", f"{len(options.filters)} active"),
    ]
    return static_controls(options, entries)


# ── PNG preview ──────────────────────────────────────────────────────────

def draw_scatter(fig: Figure, chart_data: ScatterChartData, options: ChartOptions,
                 *, title: str = "") -> None:
    """Draw visible points on *fig* in data coordinates (cleared first)."""
    fig.clf()
    ax = fig.add_subplot(111)

    by_group: Dict[str, Dict[str, list]] = {
        g: {'x': [], 'y': [], 's': []} for g in chart_data.groups
    }
    for point in chart_data.points:
        if not is_group_visible(point.group, options.visible_groups):
            continue
        bucket = by_group[point.group]
        bucket['x'].append(float(point.source_row[options.x_field]))
        bucket['y'].append(float(point.source_row[options.y_field]))
        # matplotlib sizes are areas in points^2
        bucket['s'].append((point.radius * 1.5) ** 2)

    for group, bucket in by_group.items():
        if not bucket['x']:
            continue
        ax.scatter(bucket['x'], bucket['y'], s=bucket['s'],
                   color=chart_data.group_colors[group], alpha=0.7,
                   edgecolors='white', linewidths=0.5,
                   label=group, zorder=3)

    if not chart_data.points:
        ax.text(0.5, 0.5, 'No data to display',
                transform=ax.transAxes, ha='center', va='center')

    ax.set_xlim(chart_data.x_scale.min, chart_data.x_scale.max)
    ax.set_ylim(chart_data.y_scale.min, chart_data.y_scale.max)
    ax.set_xlabel(options.x_field or "", fontsize=8)
    ax.set_ylabel(options.y_field or "", fontsize=8)
    if title:
        ax.set_title(title, fontsize=10, fontweight='bold')
    ax.grid(linewidth=0.4, alpha=0.5)
    if options.group_field and ax.get_legend_handles_labels()[0]:
        ax.legend(fontsize=7, loc='upper left', bbox_to_anchor=(1.01, 1.0),
                  title=options.group_field, title_fontsize=7)
    fig.tight_layout(pad=1.5)
