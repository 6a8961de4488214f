"""
Chart-type registry for svgc.

Each chart type registers a ``ChartHandler`` with three phases:

- ``generate(dataset, options)`` computes the chart data
- ``render(chart_data, options)`` emits SVG markup for the plot area
- ``render_controls(dataset, options)`` emits the control-panel summary

``render_frame`` runs the three phases for the current options.  New
chart types only need a ``register_chart_type`` call.
"""

import logging
from collections import namedtuple
from dataclasses import replace
from typing import Dict, List, Optional

from .chart_histogram import (
    generate_histogram, render_histogram, render_histogram_controls,
)
from .chart_scatter import (
    generate_scatter, render_scatter, render_scatter_controls,
)
from .constants import CHART_HISTOGRAM, CHART_SCATTER
from .csv_parser import get_numeric_fields
from .data_model import ChartOptions, Dataset
from .errors import FieldSelectionError, UnknownChartType

logger = logging.getLogger(__name__)

ChartHandler = namedtuple('ChartHandler', ['generate', 'render', 'render_controls'])

RenderedFrame = namedtuple('RenderedFrame', ['options', 'chart_data', 'chart', 'controls'])
RenderedFrame.__doc__ = """One rendered view: resolved options, chart data and markup lists."""

CHART_HANDLERS: Dict[str, ChartHandler] = {
    CHART_SCATTER: ChartHandler(generate_scatter, render_scatter, render_scatter_controls),
    CHART_HISTOGRAM: ChartHandler(generate_histogram, render_histogram, render_histogram_controls),
}


def register_chart_type(chart_type: str, handler: ChartHandler) -> None:
    """Add or replace the handler for *chart_type*."""
    CHART_HANDLERS[chart_type] = handler
    logger.debug("Registered chart type %r", chart_type)


def get_handler(chart_type: str) -> ChartHandler:
    try:
        return CHART_HANDLERS[chart_type]
    except KeyError:
        raise UnknownChartType(chart_type) from None


# ── Field selection ──────────────────────────────────────────────────────

def _known_or_none(dataset: Dataset, field: Optional[str], label: str, strict: bool) -> Optional[str]:
    if field is None or field in dataset.headers:
        return field
    if strict:
        raise FieldSelectionError(
            f"{label} field {field!r} is not a column. "
            f"Available: {', '.join(dataset.headers)}"
        )
    logger.warning("Ignoring unknown %s field %r", label.lower(), field)
    return None


def _resolve_scatter(dataset: Dataset, options: ChartOptions, strict: bool) -> ChartOptions:
    x_field = _known_or_none(dataset, options.x_field, "X", strict)
    y_field = _known_or_none(dataset, options.y_field, "Y", strict)
    group_field = _known_or_none(dataset, options.group_field, "Group", strict)
    weight_field = _known_or_none(dataset, options.weight_field, "Size", strict)

    if x_field is None or y_field is None:
        numeric = get_numeric_fields(dataset)
        if x_field is None:
            candidates = [f for f in numeric if f != y_field]
            x_field = candidates[0] if candidates else None
        if y_field is None:
            candidates = [f for f in numeric if f != x_field]
            y_field = candidates[0] if candidates else None
        if strict and (x_field is None or y_field is None):
            raise FieldSelectionError(
                "Scatter plot needs two numeric fields; found "
                f"{len(numeric)} ({', '.join(numeric) or 'none'})."
            )

    return replace(
        options,
        x_field=x_field,
        y_field=y_field,
        group_field=group_field,
        weight_field=weight_field,
    )


def _resolve_histogram(dataset: Dataset, options: ChartOptions, strict: bool) -> ChartOptions:
    field = _known_or_none(dataset, options.histogram_field, "Histogram", strict)
    if field is None:
        if not dataset.headers:
            if strict:
                raise FieldSelectionError("Histogram needs at least one field.")
            return replace(options, histogram_field=None)
        field = dataset.headers[0]
    return replace(options, histogram_field=field)


_RESOLVERS = {
    CHART_SCATTER: _resolve_scatter,
    CHART_HISTOGRAM: _resolve_histogram,
}


def resolve_options(dataset: Dataset, options: ChartOptions, strict: bool = False) -> ChartOptions:
    """Fill in missing field selections for *options.chart_type*.

    Scatter plots take the first two numeric fields, histograms the
    first header.  Unknown field names are dropped (or, with *strict*,
    raise ``FieldSelectionError``).  Options for chart types without a
    resolver are returned unchanged.
    """
    resolver = _RESOLVERS.get(options.chart_type)
    if resolver is None:
        return options
    return resolver(dataset, options, strict)


# ── Rendering ────────────────────────────────────────────────────────────

def render_controls(dataset: Dataset, options: ChartOptions) -> Optional[List[str]]:
    """Control-panel markup only, or ``None`` for an unknown chart type."""
    try:
        handler = get_handler(options.chart_type)
    except UnknownChartType as exc:
        logger.error("%s; controls not rendered", exc)
        return None
    return handler.render_controls(dataset, options)


def render_frame(dataset: Dataset, options: ChartOptions) -> Optional[RenderedFrame]:
    """Generate and render one complete frame.

    Returns ``None`` (after logging) when no handler is registered for
    ``options.chart_type``.
    """
    try:
        handler = get_handler(options.chart_type)
    except UnknownChartType as exc:
        logger.error("%s; frame not rendered", exc)
        return None

    resolved = resolve_options(dataset, options)
    chart_data = handler.generate(dataset, resolved)
    excluded = getattr(chart_data, 'excluded', 0)
    if excluded == 0 and hasattr(chart_data, 'histogram'):
        excluded = chart_data.histogram.excluded
    if excluded:
        logger.debug("%s frame excluded %d value(s)", resolved.chart_type, excluded)
    return RenderedFrame(
        options=resolved,
        chart_data=chart_data,
        chart=handler.render(chart_data, resolved),
        controls=handler.render_controls(dataset, resolved),
    )
