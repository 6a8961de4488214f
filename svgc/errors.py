"""
Exception types for svgc.

``InputError`` and ``FieldSelectionError`` subclass ``ValueError`` so
callers that already catch ``ValueError`` around parsing keep working.
Data-quality conditions (non-numeric cells in a numeric mapping, blank
histogram cells) are not errors and have no exception type: they are
excluded and counted by the chart generators.
"""


class SvgcError(Exception):
    """Base class for all svgc errors."""


class InputError(SvgcError, ValueError):
    """The input CSV is missing, empty, or structurally unusable."""


class FieldSelectionError(SvgcError, ValueError):
    """The requested fields cannot produce the requested chart."""


class UnknownChartType(SvgcError, KeyError):
    """No handler is registered for a chart type."""

    def __init__(self, chart_type):
        super().__init__(chart_type)
        self.chart_type = chart_type

    def __str__(self):
        return f"Unknown chart type: {self.chart_type!r}"
