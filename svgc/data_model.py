"""
Data model for svgc.

Dataclasses representing a loaded CSV table, the live chart options,
and the derived chart structures (scales, bins, points).  The dataset
is constructed once by ``csv_parser`` and never mutated.  Chart options
are frozen too: the state machine replaces them on every transition
instead of patching them in place.

A cell value is one of three kinds, tagged by ``ValueKind``:

- ``NUMBER``: a finite ``float``
- ``TEXT``: a non-empty ``str``
- ``NULL``: ``None`` (blank CSV cell)

Derived structures (``Point``, bins, scales) are recomputed on every
render and never serialised.
"""

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from .constants import DEFAULT_CHART_TYPE, DEFAULT_HEIGHT, DEFAULT_WIDTH

Cell = Union[float, str, None]
Row = Dict[str, Cell]


class ValueKind(enum.Enum):
    NUMBER = "number"
    TEXT = "text"
    NULL = "null"


def value_kind(value: Cell) -> ValueKind:
    """Return the tag of a cell value."""
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.TEXT
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    return ValueKind.TEXT


def number_text(num: float) -> str:
    """Shortest round-trip text of *num* laid out as JavaScript prints it.

    Plain digits for decimal exponents from -6 up to 20, ``1e+21`` style
    outside that window.

    Examples
    --------
    >>> number_text(30.0)
    '30'
    >>> number_text(1e-06)
    '0.000001'
    >>> number_text(1.5e-07)
    '1.5e-7'
    >>> number_text(1e21)
    '1e+21'
    """
    if num == 0:
        return "0"
    sign = "-" if num < 0 else ""
    _, digits, exponent = Decimal(repr(abs(float(num)))).normalize().as_tuple()
    text = "".join(str(d) for d in digits)
    k = len(text)
    point = exponent + k
    if k <= point <= 21:
        body = text + "0" * (point - k)
    elif 0 < point <= 21:
        body = f"{text[:point]}.{text[point:]}"
    elif -6 < point <= 0:
        body = "0." + "0" * -point + text
    else:
        mantissa = text[0] + (f".{text[1:]}" if k > 1 else "")
        body = f"{mantissa}e{point - 1:+d}"
    return sign + body


def format_value(value: Cell) -> str:
    """Display text of a cell value.

    Numbers go through ``number_text``, so ``30.0`` from the CSV reads
    ``"30"`` in legends, labels and text filters.
    """
    kind = value_kind(value)
    if kind is ValueKind.NULL:
        return ""
    if kind is ValueKind.NUMBER:
        return number_text(value)
    return str(value)


@dataclass(frozen=True)
class Dataset:
    """A parsed CSV table.

    Parameters
    ----------
    headers : list of str
        Unique column names in file order.
    rows : list of dict
        One ``{header: cell}`` mapping per data row, in file order.
    source : str
        Path the table was loaded from (empty for in-memory data).
    """
    headers: List[str]
    rows: List[Row]
    source: str = ""

    def column(self, name: str) -> List[Cell]:
        return [row.get(name) for row in self.rows]

    def to_dict(self) -> Dict[str, Any]:
        return {'headers': list(self.headers), 'rows': [dict(r) for r in self.rows]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dataset":
        headers = list(data.get('headers') or [])
        rows = [
            {h: row.get(h) for h in headers}
            for row in data.get('rows') or []
        ]
        return cls(headers=headers, rows=rows)


@dataclass(frozen=True)
class Filter:
    """One field/operator/value predicate.

    ``id`` is assigned from a monotonic counter when the filter is
    created and stays stable across edits, so it identifies the filter
    for update and removal.
    """
    id: int
    field: str
    operator: str = "="
    value: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'field': self.field,
            'operator': self.operator,
            'value': self.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Filter":
        value = data.get('value')
        return cls(
            id=int(data['id']),
            field=str(data.get('field') or ""),
            operator=str(data.get('operator') or "="),
            value="" if value is None else str(value),
        )


@dataclass(frozen=True)
class ChartOptions:
    """Everything that decides what the artifact renders.

    ``visible_groups`` is ``None`` while every group is visible; after
    the first legend toggle it becomes an explicit tuple of group names.
    """
    chart_type: str = DEFAULT_CHART_TYPE
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    x_field: Optional[str] = None
    y_field: Optional[str] = None
    group_field: Optional[str] = None
    weight_field: Optional[str] = None
    histogram_field: Optional[str] = None
    bin_count: Optional[int] = None
    filters: Tuple[Filter, ...] = ()
    visible_groups: Optional[Tuple[str, ...]] = None
    debug: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serialisable snapshot using the runtime's key names."""
        return {
            'chartType': self.chart_type,
            'width': self.width,
            'height': self.height,
            'xField': self.x_field,
            'yField': self.y_field,
            'groupField': self.group_field,
            'weightField': self.weight_field,
            'histogramField': self.histogram_field,
            'binCount': self.bin_count,
            'filters': [f.to_dict() for f in self.filters],
            'visibleGroups': (
                None if self.visible_groups is None
                else list(self.visible_groups)
            ),
            'debug': self.debug,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChartOptions":
        visible = data.get('visibleGroups')
        bin_count = data.get('binCount')
        return cls(
            chart_type=str(data.get('chartType') or DEFAULT_CHART_TYPE),
            width=int(data.get('width') or DEFAULT_WIDTH),
            height=int(data.get('height') or DEFAULT_HEIGHT),
            x_field=data.get('xField') or None,
            y_field=data.get('yField') or None,
            group_field=data.get('groupField') or None,
            weight_field=data.get('weightField') or None,
            histogram_field=data.get('histogramField') or None,
            bin_count=int(bin_count) if bin_count else None,
            filters=tuple(Filter.from_dict(f) for f in data.get('filters') or []),
            visible_groups=None if visible is None else tuple(str(g) for g in visible),
            debug=bool(data.get('debug', False)),
        )


@dataclass(frozen=True)
class Scale:
    """Linear data range for one axis.  ``range`` is always > 0."""
    min: float
    max: float
    range: float


@dataclass(frozen=True)
class ChartBounds:
    """Plot-area rectangle in pixel space."""
    left: float
    top: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def right(self) -> float:
        return self.left + self.width


@dataclass(frozen=True)
class NumericBin:
    range_start: float
    range_end: float
    count: int
    label: str


@dataclass(frozen=True)
class CategoricalBin:
    label: str
    count: int


Bin = Union[NumericBin, CategoricalBin]


@dataclass(frozen=True)
class HistogramResult:
    """Tagged histogram result.

    Parameters
    ----------
    is_numeric : bool
        ``True`` when every non-null value of the field is a number.
    bins : list of NumericBin or CategoricalBin
    excluded : int
        Number of null cells left out of the counts.
    """
    is_numeric: bool
    bins: List[Bin]
    excluded: int = 0

    @property
    def total(self) -> int:
        return sum(b.count for b in self.bins)

    @property
    def max_count(self) -> int:
        return max((b.count for b in self.bins), default=0)


@dataclass(frozen=True)
class Point:
    """One plotted scatter point in pixel space."""
    x: float
    y: float
    radius: float
    color: str
    group: str
    source_row: Row
    index: int


@dataclass(frozen=True)
class ScatterChartData:
    points: List[Point]
    x_scale: Scale
    y_scale: Scale
    groups: List[str]
    group_colors: Dict[str, str]
    bounds: ChartBounds
    excluded: int = 0


@dataclass(frozen=True)
class HistogramChartData:
    histogram: HistogramResult
    y_scale: Scale
    bounds: ChartBounds
    field: Optional[str] = None
