"""
Export utilities for svgc.

Writes the artifact text to disk and renders a static PNG preview of
the current frame with matplotlib.  The preview draws on a standalone
``Figure`` (no pyplot state), so it works headless.
"""

import logging
import os

from matplotlib.figure import Figure

from .chart_histogram import draw_histogram
from .chart_scatter import draw_scatter
from .constants import CHART_HISTOGRAM, PREVIEW_DPI
from .data_model import ChartOptions, Dataset
from .registry import get_handler, render_frame
from .svg import chart_title

logger = logging.getLogger(__name__)


def write_artifact(svg_text: str, filepath: str) -> None:
    """Write *svg_text* to *filepath* as UTF-8, creating parent dirs."""
    parent = os.path.dirname(os.path.abspath(filepath))
    os.makedirs(parent, exist_ok=True)
    with open(filepath, 'w', encoding='utf-8', newline='\n') as fh:
        fh.write(svg_text)
    logger.info("Wrote %s (%d bytes)", filepath, len(svg_text.encode('utf-8')))


def render_preview(dataset: Dataset, options: ChartOptions, *, dpi: int = PREVIEW_DPI) -> Figure:
    """Draw the frame for *options* on a new ``Figure``.

    The figure keeps the pixel aspect of the artifact.  Raises
    ``UnknownChartType`` for chart types without a handler.
    """
    get_handler(options.chart_type)
    frame = render_frame(dataset, options)
    resolved = frame.options

    fig = Figure(figsize=(resolved.width / 100, resolved.height / 100), dpi=dpi)
    fig.set_facecolor('white')
    title = chart_title(resolved)
    if resolved.chart_type == CHART_HISTOGRAM:
        draw_histogram(fig, frame.chart_data, title=title)
    else:
        draw_scatter(fig, frame.chart_data, resolved, title=title)
    return fig


def export_png(
    dataset: Dataset,
    options: ChartOptions,
    filepath: str,
    *,
    dpi: int = PREVIEW_DPI,
) -> None:
    """Save a PNG preview of the current frame.

    Parameters
    ----------
    dataset : Dataset
    options : ChartOptions
        Options of the frame to draw; missing fields are auto-selected
        exactly as in the artifact.
    filepath : str
        Output path (should end with ``.png``).
    dpi : int
        Output resolution.
    """
    fig = render_preview(dataset, options, dpi=dpi)
    parent = os.path.dirname(os.path.abspath(filepath))
    os.makedirs(parent, exist_ok=True)
    fig.savefig(
        filepath,
        dpi=dpi,
        format='png',
        facecolor=fig.get_facecolor(),
        edgecolor='none',
    )
    logger.info("Wrote PNG preview %s", filepath)
