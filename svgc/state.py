"""
Interactive state machine for svgc.

The chart's live state is a frozen ``ChartState``; user interactions
are action objects and ``reduce`` maps ``(state, action)`` to the next
state without side effects.  The phase of the returned state says how
much has to be redrawn:

- ``EDITING``: pending filters changed, redraw the controls only
- ``APPLYING`` / ``RECOMPUTING``: redraw chart and controls
- ``IDLE``: nothing to do

``InteractiveSession`` drives the reducer against a dataset and does
the redrawing.  ``runtime/state.js`` implements the same transitions
inside the artifact.
"""

import enum
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Tuple

from .chart_histogram import classify_values, clamp_bin_count, suggest_bin_count
from .constants import DEFAULT_FILTER_OPERATOR
from .data_model import ChartOptions, Dataset, Filter
from .registry import render_controls, render_frame, resolve_options
from .svg import replace_embedded_options

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    IDLE = "idle"
    EDITING = "editing"
    APPLYING = "applying"
    RECOMPUTING = "recomputing"


@dataclass(frozen=True)
class ChartState:
    options: ChartOptions
    pending_filters: Tuple[Filter, ...] = ()
    next_filter_id: int = 1
    phase: Phase = Phase.IDLE


def initial_state(options: ChartOptions) -> ChartState:
    """State for freshly loaded *options*.

    Saved filters start out both active and pending, and new filter ids
    continue above the largest saved id.
    """
    next_id = max((f.id for f in options.filters), default=0) + 1
    return ChartState(
        options=options,
        pending_filters=tuple(options.filters),
        next_filter_id=next_id,
    )


# ── Actions ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AddFilter:
    field: str


@dataclass(frozen=True)
class UpdateFilter:
    filter_id: int
    prop: str
    value: str


@dataclass(frozen=True)
class ApplyPendingFilters:
    pass


@dataclass(frozen=True)
class RemoveFilter:
    filter_id: int


@dataclass(frozen=True)
class ClearAllFilters:
    pass


@dataclass(frozen=True)
class ToggleGroup:
    group: str
    known_groups: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ChangeField:
    axis: str
    field: Optional[str]
    bin_count: Optional[int] = None


@dataclass(frozen=True)
class ChangeChartType:
    chart_type: str


@dataclass(frozen=True)
class SetBinCount:
    bin_count: Optional[int]


@dataclass(frozen=True)
class UpdateOptions:
    """Set several options at once, keyed by ``ChartOptions`` attribute."""
    changes: Dict[str, Any]


FILTER_PROPS = ('field', 'operator', 'value')

_OPTION_FIELDS = frozenset(f.name for f in fields(ChartOptions))

_AXIS_FIELDS = {
    'x': 'x_field',
    'y': 'y_field',
    'group': 'group_field',
    'weight': 'weight_field',
    'histogram': 'histogram_field',
}


# ── Reducer ──────────────────────────────────────────────────────────────

def _add_filter(state, action):
    flt = Filter(id=state.next_filter_id, field=action.field,
                 operator=DEFAULT_FILTER_OPERATOR, value="")
    return replace(
        state,
        pending_filters=state.pending_filters + (flt,),
        next_filter_id=state.next_filter_id + 1,
        phase=Phase.EDITING,
    )


def _update_filter(state, action):
    if action.prop not in FILTER_PROPS:
        raise ValueError(
            f"Unknown filter property {action.prop!r}; expected one of {FILTER_PROPS}"
        )
    value = "" if action.value is None else str(action.value)
    pending = tuple(
        replace(f, **{action.prop: value}) if f.id == action.filter_id else f
        for f in state.pending_filters
    )
    return replace(state, pending_filters=pending, phase=Phase.IDLE)


def _apply_pending(state, action):
    options = replace(state.options, filters=tuple(state.pending_filters))
    return replace(state, options=options, phase=Phase.APPLYING)


def _remove_filter(state, action):
    pending = tuple(f for f in state.pending_filters if f.id != action.filter_id)
    active = tuple(f for f in state.options.filters if f.id != action.filter_id)
    if len(active) != len(state.options.filters):
        return replace(
            state,
            options=replace(state.options, filters=active),
            pending_filters=pending,
            phase=Phase.RECOMPUTING,
        )
    return replace(state, pending_filters=pending, phase=Phase.EDITING)


def _clear_filters(state, action):
    return replace(
        state,
        options=replace(state.options, filters=()),
        pending_filters=(),
        phase=Phase.RECOMPUTING,
    )


def _toggle_group(state, action):
    visible = state.options.visible_groups
    if visible is None:
        visible = tuple(g for g in action.known_groups if g != action.group)
    elif action.group in visible:
        visible = tuple(g for g in visible if g != action.group)
    else:
        visible = visible + (action.group,)
    return replace(
        state,
        options=replace(state.options, visible_groups=visible),
        phase=Phase.RECOMPUTING,
    )


def _change_field(state, action):
    attr = _AXIS_FIELDS.get(action.axis)
    if attr is None:
        raise ValueError(
            f"Unknown axis {action.axis!r}; expected one of {tuple(_AXIS_FIELDS)}"
        )
    changes = {attr: action.field or None}
    if action.axis == 'group':
        changes['visible_groups'] = None
    elif action.axis == 'histogram':
        changes['bin_count'] = action.bin_count
    return replace(
        state,
        options=replace(state.options, **changes),
        phase=Phase.RECOMPUTING,
    )


def _change_chart_type(state, action):
    return replace(
        state,
        options=replace(state.options, chart_type=action.chart_type),
        phase=Phase.RECOMPUTING,
    )


def _set_bin_count(state, action):
    bin_count = clamp_bin_count(action.bin_count) if action.bin_count else None
    return replace(
        state,
        options=replace(state.options, bin_count=bin_count),
        phase=Phase.RECOMPUTING,
    )


def _update_options(state, action):
    unknown = sorted(set(action.changes) - _OPTION_FIELDS)
    if unknown:
        raise ValueError(f"Unknown chart option(s): {', '.join(unknown)}")
    changes = dict(action.changes)
    if ('group_field' in changes and 'visible_groups' not in changes
            and changes['group_field'] != state.options.group_field):
        changes['visible_groups'] = None
    if changes.get('visible_groups') is not None:
        changes['visible_groups'] = tuple(changes['visible_groups'])
    if changes.get('bin_count'):
        changes['bin_count'] = clamp_bin_count(changes['bin_count'])
    new = replace(
        state,
        options=replace(state.options, **changes),
        phase=Phase.RECOMPUTING,
    )
    if 'filters' not in changes:
        return new
    filters = tuple(changes['filters'] or ())
    top = max((f.id for f in filters), default=0)
    return replace(
        new,
        options=replace(new.options, filters=filters),
        pending_filters=filters,
        next_filter_id=max(state.next_filter_id, top + 1),
    )


_REDUCERS = {
    AddFilter: _add_filter,
    UpdateFilter: _update_filter,
    ApplyPendingFilters: _apply_pending,
    RemoveFilter: _remove_filter,
    ClearAllFilters: _clear_filters,
    ToggleGroup: _toggle_group,
    ChangeField: _change_field,
    ChangeChartType: _change_chart_type,
    SetBinCount: _set_bin_count,
    UpdateOptions: _update_options,
}


def reduce(state: ChartState, action) -> ChartState:
    """Return the state after *action*.  Never mutates *state*."""
    try:
        handler = _REDUCERS[type(action)]
    except KeyError:
        raise TypeError(f"Unsupported action: {action!r}") from None
    return handler(state, action)


# ── Session ──────────────────────────────────────────────────────────────

class InteractiveSession:
    """A dataset plus live chart state, redrawn after every action.

    ``frame`` holds the last rendered chart and ``controls`` the last
    rendered control panel.  ``chart_renders`` and ``control_renders``
    count redraws.
    """

    def __init__(self, dataset: Dataset, options: Optional[ChartOptions] = None):
        self.dataset = dataset
        self.state = initial_state(resolve_options(dataset, options or ChartOptions()))
        self.frame = None
        self.controls = None
        self.chart_renders = 0
        self.control_renders = 0
        self._render_chart()

    # ── dispatch ─────────────────────────────────────────────────────

    def dispatch(self, action) -> ChartState:
        self.state = reduce(self.state, action)
        phase = self.state.phase
        logger.debug("%s -> %s", type(action).__name__, phase.name)

        if phase in (Phase.APPLYING, Phase.RECOMPUTING):
            self._render_chart()
        elif phase is Phase.EDITING:
            self._render_controls()

        self.state = replace(self.state, phase=Phase.IDLE)
        return self.state

    def _render_chart(self) -> None:
        frame = render_frame(self.dataset, self.state.options)
        if frame is None:
            # Unknown chart type: keep showing the previous frame
            return
        self.frame = frame
        self.controls = frame.controls
        self.chart_renders += 1
        self.control_renders += 1
        if frame.options != self.state.options:
            self.state = replace(self.state, options=frame.options)

    def _render_controls(self) -> None:
        controls = render_controls(self.dataset, self.state.options)
        if controls is not None:
            self.controls = controls
            self.control_renders += 1

    # ── helpers ──────────────────────────────────────────────────────

    def known_groups(self) -> Tuple[str, ...]:
        if self.frame is None:
            return ()
        return tuple(getattr(self.frame.chart_data, 'groups', ()) or ())

    def suggested_bin_count(self, field: Optional[str]) -> Optional[int]:
        if not field:
            return None
        is_numeric, kept = classify_values(self.dataset.column(field))
        return suggest_bin_count(len(kept)) if is_numeric else None

    # ── actions ──────────────────────────────────────────────────────

    def add_filter(self, field: Optional[str] = None) -> int:
        """Add an empty pending filter and return its id."""
        filter_id = self.state.next_filter_id
        field = field or (self.dataset.headers[0] if self.dataset.headers else "")
        self.dispatch(AddFilter(field))
        return filter_id

    def update_filter(self, filter_id: int, prop: str, value: str) -> ChartState:
        return self.dispatch(UpdateFilter(filter_id, prop, value))

    def apply_pending_filters(self) -> ChartState:
        return self.dispatch(ApplyPendingFilters())

    def remove_filter(self, filter_id: int) -> ChartState:
        return self.dispatch(RemoveFilter(filter_id))

    def clear_all_filters(self) -> ChartState:
        return self.dispatch(ClearAllFilters())

    def toggle_group(self, group: str) -> ChartState:
        return self.dispatch(ToggleGroup(group, self.known_groups()))

    def change_field(self, axis: str, field: Optional[str]) -> ChartState:
        bin_count = self.suggested_bin_count(field) if axis == 'histogram' else None
        return self.dispatch(ChangeField(axis, field, bin_count))

    def change_chart_type(self, chart_type: str) -> ChartState:
        return self.dispatch(ChangeChartType(chart_type))

    def set_bin_count(self, bin_count: Optional[int]) -> ChartState:
        return self.dispatch(SetBinCount(bin_count))

    def update_options(self, **changes) -> ChartState:
        return self.dispatch(UpdateOptions(changes))

    # ── persistence ──────────────────────────────────────────────────

    def snapshot(self) -> dict:
        """JSON-serialisable copy of the current options."""
        return self.state.options.to_dict()

    def save_state(self, artifact: str) -> str:
        """Return *artifact* with the current options as its defaults."""
        return replace_embedded_options(artifact, self.state.options)
