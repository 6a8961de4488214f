"""
Row filtering for svgc.

Filters are AND-combined field/operator/value predicates.  The filter
value is always text (it comes from a text box); when the row's cell
is a number and the text parses as a number, the comparison is numeric
so ``"9" < "10"`` behaves as expected.

Unknown operators match every row.
"""

import operator as _op
from typing import Optional, Sequence

from .constants import FILTER_OPERATORS
from .csv_parser import parse_number
from .data_model import Cell, Filter, Row, ValueKind, format_value, value_kind

OPERATORS = FILTER_OPERATORS

_ORDERING = {
    '>': _op.gt,
    '<': _op.lt,
    '>=': _op.ge,
    '<=': _op.le,
}

_TEXT_MATCH = {
    'contains': lambda cell, needle: needle in cell,
    'starts_with': lambda cell, needle: cell.startswith(needle),
    'ends_with': lambda cell, needle: cell.endswith(needle),
}


def _coerce(cell: Cell, raw: str):
    """Return the filter operand typed to match *cell*."""
    if value_kind(cell) is ValueKind.NUMBER:
        number = parse_number(raw)
        if number is not None:
            return number
    return raw


def _same_kind(cell: Cell, operand) -> bool:
    cell_kind = value_kind(cell)
    return cell_kind is not ValueKind.NULL and cell_kind is value_kind(operand)


def evaluate_filter(row: Row, flt: Filter) -> bool:
    """Return ``True`` if *row* satisfies *flt*."""
    cell = row.get(flt.field)
    raw = "" if flt.value is None else str(flt.value)
    op = flt.operator

    if op in _TEXT_MATCH:
        return _TEXT_MATCH[op](format_value(cell).lower(), raw.lower())

    operand = _coerce(cell, raw)
    if op == '=':
        return _same_kind(cell, operand) and cell == operand
    if op == '!=':
        return not (_same_kind(cell, operand) and cell == operand)
    if op in _ORDERING:
        return _same_kind(cell, operand) and _ORDERING[op](cell, operand)
    return True


def apply_filters(rows: Sequence[Row], filters: Optional[Sequence[Filter]]) -> Sequence[Row]:
    """Return the rows that satisfy every filter.

    With no filters the input sequence itself is returned.
    """
    if not filters:
        return rows
    return [row for row in rows if all(evaluate_filter(row, f) for f in filters)]
