"""
SVG markup helpers shared by the chart renderers.

Every renderer emits plain markup strings built with ``element``; the
artifact builder joins them into the static first frame.  Text and
attribute values are XML-escaped here so renderers never escape by
hand.
"""

from html import escape as _xml_esc
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import (
    CONTROL_PANEL_WIDTH, CONTROL_PANEL_X, CONTROL_PANEL_Y,
    LEGEND_WIDTH, MIN_PLOT_SIZE, PADDING,
)
from .data_model import ChartBounds, ChartOptions, Scale
from .nice_numbers import format_number, generate_ticks

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"


def fmt(num: float) -> str:
    """Coordinate text: at most 2 decimals, no trailing zeros."""
    text = f"{num:.2f}".rstrip('0').rstrip('.')
    return "0" if text in ("-0", "") else text


def element(
    tag: str,
    attrs: Optional[Dict[str, object]] = None,
    text: Optional[str] = None,
    children: Iterable[str] = (),
) -> str:
    """Build one SVG element.

    ``None`` attribute values are skipped; floats are formatted with
    ``fmt``.
    """
    parts = [tag]
    for key, value in (attrs or {}).items():
        if value is None:
            continue
        if isinstance(value, float):
            value = fmt(value)
        parts.append(f'{key}="{_xml_esc(str(value), quote=True)}"')
    opening = " ".join(parts)
    body = "".join(children)
    if text is not None:
        body = _xml_esc(text, quote=False) + body
    if not body:
        return f"<{opening}/>"
    return f"<{opening}>{body}</{tag}>"


def plot_bounds(width: float, height: float, reserve_legend: bool = False) -> ChartBounds:
    """Plot-area rectangle right of the control panel.

    Width and height never drop below ``MIN_PLOT_SIZE`` so pixel
    mapping stays finite for tiny canvases.
    """
    left = CONTROL_PANEL_WIDTH + PADDING
    plot_width = width - left - PADDING - (LEGEND_WIDTH if reserve_legend else 0)
    plot_height = height - 2 * PADDING
    return ChartBounds(
        left=float(left),
        top=float(PADDING),
        width=max(float(plot_width), MIN_PLOT_SIZE),
        height=max(float(plot_height), MIN_PLOT_SIZE),
    )


def scale_x(value: float, scale: Scale, bounds: ChartBounds) -> float:
    return bounds.left + (value - scale.min) / scale.range * bounds.width


def scale_y(value: float, scale: Scale, bounds: ChartBounds) -> float:
    # Pixel y grows downwards
    return bounds.bottom - (value - scale.min) / scale.range * bounds.height


# ── Axes ─────────────────────────────────────────────────────────────────

def axis_lines(bounds: ChartBounds) -> List[str]:
    return [
        element('line', {
            'x1': bounds.left, 'y1': bounds.bottom,
            'x2': bounds.right, 'y2': bounds.bottom,
            'class': 'axis-line',
        }),
        element('line', {
            'x1': bounds.left, 'y1': bounds.top,
            'x2': bounds.left, 'y2': bounds.bottom,
            'class': 'axis-line',
        }),
    ]


def visible_ticks(scale: Scale) -> List[float]:
    return [
        t for t in generate_ticks(scale.min, scale.max)
        if scale.min <= t <= scale.max
    ]


def x_ticks(scale: Scale, bounds: ChartBounds) -> List[str]:
    out = []
    for tick in visible_ticks(scale):
        x = scale_x(tick, scale, bounds)
        if abs(x - bounds.left) > 1:
            out.append(element('line', {
                'x1': x, 'y1': bounds.top, 'x2': x, 'y2': bounds.bottom,
                'class': 'grid-line',
            }))
        out.append(element('line', {
            'x1': x, 'y1': bounds.bottom, 'x2': x, 'y2': bounds.bottom + 5,
            'class': 'axis-tick',
        }))
        out.append(element('text', {
            'x': x, 'y': bounds.bottom + 18,
            'text-anchor': 'middle', 'class': 'axis-text',
        }, format_number(tick)))
    return out


def y_ticks(scale: Scale, bounds: ChartBounds) -> List[str]:
    out = []
    for tick in visible_ticks(scale):
        y = scale_y(tick, scale, bounds)
        if abs(y - bounds.bottom) > 1:
            out.append(element('line', {
                'x1': bounds.left, 'y1': y, 'x2': bounds.right, 'y2': y,
                'class': 'grid-line',
            }))
        out.append(element('line', {
            'x1': bounds.left - 5, 'y1': y, 'x2': bounds.left, 'y2': y,
            'class': 'axis-tick',
        }))
        out.append(element('text', {
            'x': bounds.left - 10, 'y': y + 4,
            'text-anchor': 'end', 'class': 'axis-text',
        }, format_number(tick)))
    return out


def axis_titles(bounds: ChartBounds, x_title: str, y_title: str, x_offset: float = 45) -> List[str]:
    y_x = bounds.left - 60
    y_y = bounds.top + bounds.height / 2
    return [
        element('text', {
            'x': bounds.left + bounds.width / 2, 'y': bounds.bottom + x_offset,
            'text-anchor': 'middle', 'class': 'axis-text axis-title',
        }, x_title),
        element('text', {
            'x': y_x, 'y': y_y,
            'text-anchor': 'middle', 'class': 'axis-text axis-title',
            'transform': f"rotate(-90, {fmt(y_x)}, {fmt(y_y)})",
        }, y_title),
    ]


def empty_message(bounds: ChartBounds, message: str) -> str:
    return element('text', {
        'x': bounds.left + bounds.width / 2, 'y': bounds.top + bounds.height / 2,
        'text-anchor': 'middle', 'class': 'empty-message',
    }, message)


# ── Static control panel ─────────────────────────────────────────────────

def static_controls(options: ChartOptions, entries: Sequence[Tuple[str, str]]) -> List[str]:
    """Read-only summary of the current options.

    The embedded runtime replaces it with live controls on load; the
    summary is what viewers without scripting see.
    """
    out = [
        element('rect', {
            'x': CONTROL_PANEL_X, 'y': CONTROL_PANEL_Y,
            'width': CONTROL_PANEL_WIDTH - 20,
            'height': max(options.height - CONTROL_PANEL_Y - 20, 0),
            'class': 'control-panel', 'rx': 6,
        }),
        element('text', {
            'x': CONTROL_PANEL_X + (CONTROL_PANEL_WIDTH - 20) / 2,
            'y': CONTROL_PANEL_Y + 20,
            'text-anchor': 'middle', 'class': 'ui-label panel-title',
        }, "Chart Controls"),
    ]
    y = CONTROL_PANEL_Y + 50
    for label, value in entries:
        out.append(element('text', {
            'x': CONTROL_PANEL_X + 10, 'y': y, 'class': 'ui-label',
        }, f"{label}: {value}"))
        y += 22
    return out
