"""
Artifact builder for svgc.

Assembles the single self-contained SVG document:

1. a ``<style>`` block
2. the chart title
3. ``<g id="chart-area">`` with the statically rendered first frame
4. ``<g id="ui-controls">`` with the static control-panel summary
5. a CDATA ``<script>`` holding the dataset, the options literal between
   ``/*svgc:options*/`` and ``/*svgc:end*/``, the bundled runtime and
   the ``initializeChart();`` call

The runtime re-renders items 3 and 4 on load and whenever the user
interacts.  "Save Current View" rewrites only the options literal, so
the embedded state can be read back with ``extract_embedded_options``.
"""

import json
import logging
import re
from importlib import resources
from typing import List

from .constants import (
    CHART_HISTOGRAM, DATA_START_MARKER, OPTIONS_END_MARKER,
    OPTIONS_START_MARKER, TITLE_Y,
)
from .data_model import ChartOptions, Dataset
from .registry import get_handler, render_frame
from .svg_elements import SVG_NS, XLINK_NS, element

logger = logging.getLogger(__name__)

RUNTIME_FILES = ('engine.js', 'charts.js', 'state.js')

_OPTIONS_RE = re.compile(
    re.escape(OPTIONS_START_MARKER) + r'.*?' + re.escape(OPTIONS_END_MARKER),
    re.DOTALL,
)

STYLE = """
.data-point { cursor: pointer; opacity: 0.8; }
.data-point:hover { stroke: #000; stroke-width: 2; opacity: 1; }
.data-point.hidden { display: none; }
.data-point.highlighted { opacity: 1; }
.data-point.dimmed { opacity: 0.2; }
.histogram-bar:hover { opacity: 0.8; }
.axis-line { stroke: #333; stroke-width: 1; }
.axis-tick { stroke: #333; stroke-width: 1; }
.grid-line { stroke: #e0e0e0; stroke-width: 1; }
.axis-text { font-family: Arial, sans-serif; font-size: 12px; fill: #333; }
.axis-title { font-weight: bold; }
.chart-title { font-family: Arial, sans-serif; font-size: 16px; font-weight: bold; fill: #333; }
.empty-message { font-family: Arial, sans-serif; font-size: 14px; fill: #888; }
.legend-item { cursor: pointer; }
.legend-item.legend-off { opacity: 0.4; }
.legend-title { font-weight: bold; }
.legend-text { font-family: Arial, sans-serif; font-size: 11px; fill: #333; }
.legend-checkbox { stroke-width: 1; }
.control-panel { fill: #f8f9fa; stroke: #dee2e6; stroke-width: 1; }
.panel-title { font-weight: bold; font-size: 14px; }
.ui-label { font-family: Arial, sans-serif; font-size: 12px; fill: #333; }
.ui-button { cursor: pointer; }
.ui-button text { font-family: Arial, sans-serif; font-size: 11px; font-weight: bold; fill: white; pointer-events: none; }
"""


# ── JSON embedding ───────────────────────────────────────────────────────

def _embed_json(payload) -> str:
    """JSON text that is safe inside CDATA and between comment markers."""
    text = json.dumps(payload, ensure_ascii=False, separators=(',', ':'))
    # Both sequences can only occur inside JSON strings, where the escape is equivalent
    return text.replace(']]>', ']]\\u003e').replace('*/', '*\\u002f')


def options_literal(options: ChartOptions) -> str:
    return f"{OPTIONS_START_MARKER}{_embed_json(options.to_dict())}{OPTIONS_END_MARKER}"


def bundle_runtime() -> str:
    """Concatenate the runtime sources shipped in ``svgc/runtime``."""
    root = resources.files(__package__).joinpath('runtime')
    parts = []
    for name in RUNTIME_FILES:
        parts.append(f"// ---- {name} ----\n{root.joinpath(name).read_text(encoding='utf-8')}")
    return "\n".join(parts)


# ── Building ─────────────────────────────────────────────────────────────

def chart_title(options: ChartOptions) -> str:
    if options.chart_type == CHART_HISTOGRAM:
        return f"Distribution of {options.histogram_field or ''}".strip()
    return f"{options.x_field or ''} vs {options.y_field or ''}".strip()


def _script(dataset: Dataset, options: ChartOptions) -> str:
    body = "\n".join([
        f"const embeddedData = {DATA_START_MARKER}{_embed_json(dataset.to_dict())};",
        f"const embeddedOptions = {options_literal(options)};",
        bundle_runtime(),
        "initializeChart();",
    ])
    return f'<script type="text/javascript"><![CDATA[\n{body}\n]]></script>'


def build_artifact(dataset: Dataset, options: ChartOptions) -> str:
    """Render the first frame and wrap it into a complete SVG document.

    Raises ``UnknownChartType`` when no handler exists for
    ``options.chart_type``.
    """
    get_handler(options.chart_type)
    frame = render_frame(dataset, options)
    resolved = frame.options
    width, height = resolved.width, resolved.height

    lines: List[str] = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg xmlns="{SVG_NS}" xmlns:xlink="{XLINK_NS}" '
        f'width="{width}" height="{height}" viewBox="0 0 {width} {height}">',
        f'<defs><style type="text/css"><![CDATA[{STYLE}]]></style></defs>',
        element('rect', {'width': '100%', 'height': '100%', 'fill': 'white'}),
        element('text', {
            'id': 'chart-title', 'x': width / 2, 'y': TITLE_Y,
            'text-anchor': 'middle', 'class': 'chart-title',
        }, chart_title(resolved)),
        element('g', {'id': 'chart-area'}, children=frame.chart),
        element('g', {'id': 'ui-controls'}, children=frame.controls),
        _script(dataset, resolved),
        '</svg>',
    ]
    svg_text = "\n".join(lines) + "\n"
    logger.debug("Built %s artifact (%d bytes, %d rows)",
                 resolved.chart_type, len(svg_text), len(dataset.rows))
    return svg_text


# ── Reading back ─────────────────────────────────────────────────────────

def _decode_after(svg_text: str, marker: str):
    start = svg_text.find(marker)
    if start < 0:
        raise ValueError(f"Artifact has no {marker} marker")
    value, _ = json.JSONDecoder().raw_decode(svg_text, start + len(marker))
    return value


def extract_embedded_options(svg_text: str) -> ChartOptions:
    """Parse the options literal of an artifact back into ``ChartOptions``.

    Raises ``ValueError`` when the markers are missing.
    """
    if not _OPTIONS_RE.search(svg_text):
        raise ValueError("Artifact has no embedded options literal")
    return ChartOptions.from_dict(_decode_after(svg_text, OPTIONS_START_MARKER))


def extract_embedded_dataset(svg_text: str) -> Dataset:
    return Dataset.from_dict(_decode_after(svg_text, DATA_START_MARKER))


def replace_embedded_options(svg_text: str, options: ChartOptions) -> str:
    """Return *svg_text* with its options literal replaced by *options*."""
    literal = options_literal(options)
    new_text, count = _OPTIONS_RE.subn(lambda _m: literal, svg_text, count=1)
    if count == 0:
        raise ValueError("Artifact has no embedded options literal")
    return new_text
