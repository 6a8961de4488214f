"""Tests for the chart state reducer and the interactive session."""

import json
import logging

import pytest

from svgc.data_model import ChartOptions, Filter
from svgc.state import (
    AddFilter, ApplyPendingFilters, ChangeChartType, ChangeField, ChartState,
    ClearAllFilters, InteractiveSession, Phase, RemoveFilter, SetBinCount,
    ToggleGroup, UpdateFilter, UpdateOptions, initial_state, reduce,
)
from svgc.svg import build_artifact, extract_embedded_options


@pytest.fixture
def state():
    """Return an idle state with no filters."""

    return initial_state(ChartOptions(x_field="age", y_field="score"))


# ── reducer ──────────────────────────────────────────────────────────────

def test_initial_state_continues_saved_filter_ids() -> None:
    """Saved filters are pending too and new ids go above them."""

    saved = (Filter(3, "age", ">", "1"), Filter(7, "city", "=", "Oslo"))
    st = initial_state(ChartOptions(filters=saved))

    assert st.pending_filters == saved
    assert st.next_filter_id == 8
    assert st.phase is Phase.IDLE


def test_add_filter_appends_pending_only(state) -> None:
    """A new filter is pending, empty and uses the next id."""

    new = reduce(state, AddFilter("age"))

    assert new.pending_filters == (Filter(1, "age", "=", ""),)
    assert new.options.filters == ()
    assert new.next_filter_id == 2
    assert new.phase is Phase.EDITING
    assert state.pending_filters == ()


def test_filter_ids_are_monotonic(state) -> None:
    """Ids keep increasing even after removals."""

    st = reduce(reduce(state, AddFilter("age")), AddFilter("age"))
    st = reduce(st, RemoveFilter(2))
    st = reduce(st, AddFilter("city"))

    assert [f.id for f in st.pending_filters] == [1, 3]


def test_update_filter_changes_one_property(state) -> None:
    """Only the addressed filter and property change; no redraw phase."""

    st = reduce(state, AddFilter("age"))
    st = reduce(st, UpdateFilter(1, "operator", ">"))
    st = reduce(st, UpdateFilter(1, "value", "25"))

    assert st.pending_filters == (Filter(1, "age", ">", "25"),)
    assert st.phase is Phase.IDLE


def test_update_filter_unknown_id_is_noop(state) -> None:
    """Updating a missing filter leaves pending untouched."""

    st = reduce(state, AddFilter("age"))

    assert reduce(st, UpdateFilter(99, "value", "x")).pending_filters == st.pending_filters


def test_update_filter_unknown_property_raises(state) -> None:
    """Only field, operator and value can be edited."""

    st = reduce(state, AddFilter("age"))
    with pytest.raises(ValueError):
        reduce(st, UpdateFilter(1, "id", "5"))


def test_apply_copies_pending_into_options(state) -> None:
    """Applying makes the pending list active."""

    st = reduce(state, AddFilter("age"))
    st = reduce(st, UpdateFilter(1, "value", "30"))
    st = reduce(st, ApplyPendingFilters())

    assert st.options.filters == (Filter(1, "age", "=", "30"),)
    assert st.phase is Phase.APPLYING


def test_remove_pending_only_filter_is_editing(state) -> None:
    """Removing a filter that was never applied only touches the controls."""

    st = reduce(reduce(state, AddFilter("age")), RemoveFilter(1))

    assert st.pending_filters == ()
    assert st.phase is Phase.EDITING


def test_remove_active_filter_recomputes(state) -> None:
    """Removing an applied filter drops it from both lists."""

    st = reduce(reduce(state, AddFilter("age")), ApplyPendingFilters())
    st = reduce(st, RemoveFilter(1))

    assert st.pending_filters == ()
    assert st.options.filters == ()
    assert st.phase is Phase.RECOMPUTING


def test_clear_all_filters(state) -> None:
    """Clear empties pending and active together."""

    st = reduce(reduce(state, AddFilter("age")), ApplyPendingFilters())
    st = reduce(reduce(st, AddFilter("city")), ClearAllFilters())

    assert st.pending_filters == ()
    assert st.options.filters == ()
    assert st.phase is Phase.RECOMPUTING


def test_toggle_group_from_all_visible(state) -> None:
    """The first toggle turns "all" into every other known group."""

    st = reduce(state, ToggleGroup("B", ("A", "B", "C")))
    assert st.options.visible_groups == ("A", "C")
    assert st.phase is Phase.RECOMPUTING

    st = reduce(st, ToggleGroup("B", ("A", "B", "C")))
    assert st.options.visible_groups == ("A", "C", "B")


def test_change_group_field_resets_visibility(state) -> None:
    """A new group field shows every group again."""

    st = reduce(state, ToggleGroup("B", ("A", "B")))
    st = reduce(st, ChangeField("group", "city"))

    assert st.options.group_field == "city"
    assert st.options.visible_groups is None


def test_change_field_variants(state) -> None:
    """Axes change, None clears, histogram takes the given bin count."""

    st = reduce(state, ChangeField("x", "score"))
    assert st.options.x_field == "score"

    st = reduce(st, ChangeField("weight", None))
    assert st.options.weight_field is None

    st = reduce(st, ChangeField("histogram", "age", bin_count=7))
    assert (st.options.histogram_field, st.options.bin_count) == ("age", 7)

    with pytest.raises(ValueError):
        reduce(st, ChangeField("z", "age"))


def test_chart_type_and_bin_count(state) -> None:
    """Bin counts are clamped to the control range."""

    st = reduce(state, ChangeChartType("histogram"))
    assert st.options.chart_type == "histogram"

    assert reduce(st, SetBinCount(500)).options.bin_count == 100
    assert reduce(st, SetBinCount(1)).options.bin_count == 3
    assert reduce(st, SetBinCount(None)).options.bin_count is None


def test_reduce_rejects_unknown_actions(state) -> None:
    """Only the declared action types are accepted."""

    with pytest.raises(TypeError):
        reduce(state, "ADD_FILTER")


def test_reduce_never_mutates_input(state) -> None:
    """States are frozen values."""

    before = ChartState(**vars(state))
    reduce(state, AddFilter("age"))

    assert state == before


# ── session ──────────────────────────────────────────────────────────────

def test_session_auto_selects_fields_and_renders(people) -> None:
    """A new session resolves fields and draws the first frame."""

    session = InteractiveSession(people)

    assert (session.state.options.x_field, session.state.options.y_field) == ("age", "score")
    assert session.chart_renders == 1
    assert len(session.frame.chart_data.points) == 3


def test_pending_filters_do_not_touch_the_chart(people) -> None:
    """Editing filters redraws controls only; applying redraws the chart."""

    session = InteractiveSession(people)
    filter_id = session.add_filter("age")
    assert (session.chart_renders, session.control_renders) == (1, 2)

    session.update_filter(filter_id, "operator", ">")
    session.update_filter(filter_id, "value", "25")
    assert (session.chart_renders, session.control_renders) == (1, 2)
    assert len(session.frame.chart_data.points) == 3

    session.apply_pending_filters()
    assert session.chart_renders == 2
    assert [p.source_row["name"] for p in session.frame.chart_data.points] == ["Bob", "Eve"]
    assert session.state.phase is Phase.IDLE


def test_remove_and_clear_filters_rerender(people) -> None:
    """Dropping applied filters brings the rows back."""

    session = InteractiveSession(people)
    first = session.add_filter("age")
    session.update_filter(first, "value", "30")
    session.apply_pending_filters()
    assert len(session.frame.chart_data.points) == 1

    session.remove_filter(first)
    assert len(session.frame.chart_data.points) == 3

    second = session.add_filter("city")
    session.update_filter(second, "value", "Oslo")
    session.apply_pending_filters()
    session.clear_all_filters()
    assert len(session.frame.chart_data.points) == 3
    assert session.state.pending_filters == ()


def test_toggle_group_uses_rendered_groups(people) -> None:
    """Toggling hides one group of the current frame."""

    session = InteractiveSession(people)
    session.change_field("group", "city")
    session.toggle_group("Berlin")

    assert session.state.options.visible_groups == ("Oslo", "Lisbon")
    markup = "".join(session.frame.chart)
    assert 'class="data-point hidden"' in markup


def test_histogram_field_change_takes_suggested_bins(people) -> None:
    """Numeric histogram fields get a suggested bin count; text fields none."""

    session = InteractiveSession(people)
    session.change_chart_type("histogram")
    session.change_field("histogram", "age")
    assert session.state.options.bin_count == 5

    session.change_field("histogram", "city")
    assert session.state.options.bin_count is None

    session.set_bin_count(12)
    assert session.state.options.bin_count == 12


def test_unknown_chart_type_keeps_previous_frame(people, caplog) -> None:
    """Unknown chart types are logged and nothing is redrawn."""

    session = InteractiveSession(people)
    frame = session.frame

    with caplog.at_level(logging.ERROR, logger="svgc"):
        session.change_chart_type("pie")

    assert session.frame is frame
    assert session.chart_renders == 1
    assert "Unknown chart type: 'pie'" in caplog.text


def test_snapshot_is_json_serialisable(people) -> None:
    """The snapshot uses the runtime's key names."""

    session = InteractiveSession(people)
    session.change_field("group", "city")
    snap = json.loads(json.dumps(session.snapshot()))

    assert snap["chartType"] == "scatter"
    assert snap["groupField"] == "city"
    assert snap["visibleGroups"] is None


def test_save_state_round_trip(people) -> None:
    """Saving then re-parsing the artifact restores the same options."""

    session = InteractiveSession(people)
    artifact = build_artifact(people, session.state.options)

    filter_id = session.add_filter("age")
    session.update_filter(filter_id, "operator", ">=")
    session.update_filter(filter_id, "value", "30")
    session.apply_pending_filters()
    session.change_field("group", "city")
    session.toggle_group("Oslo")

    saved = session.save_state(artifact)

    assert extract_embedded_options(saved) == session.state.options
    assert extract_embedded_options(artifact) != session.state.options


def test_update_options_sets_several_fields(state) -> None:
    """One action changes many options and recomputes."""

    st = reduce(state, UpdateOptions({"x_field": "score", "y_field": "age", "bin_count": 500}))

    assert (st.options.x_field, st.options.y_field) == ("score", "age")
    assert st.options.bin_count == 100
    assert st.phase is Phase.RECOMPUTING


def test_update_options_rejects_unknown_keys(state) -> None:
    with pytest.raises(ValueError, match="colour"):
        reduce(state, UpdateOptions({"colour": "red"}))


def test_update_options_group_change_resets_visibility(state) -> None:
    """A new group field shows every group unless visibility is given too."""

    st = reduce(state, UpdateOptions({"group_field": "city", "visible_groups": ["Oslo"]}))
    assert st.options.visible_groups == ("Oslo",)

    st = reduce(st, UpdateOptions({"group_field": "name"}))
    assert st.options.visible_groups is None


def test_update_options_filters_become_pending(state) -> None:
    """Replaced filters are active and pending, and new ids go above them."""

    st = reduce(state, AddFilter("age"))
    st = reduce(st, UpdateOptions({"filters": [Filter(9, "age", "<", "40")]}))

    assert st.options.filters == (Filter(9, "age", "<", "40"),)
    assert st.pending_filters == st.options.filters
    assert st.next_filter_id == 10


def test_session_update_options_rerenders(people) -> None:
    """Keyword changes redraw the chart."""

    session = InteractiveSession(people)
    session.update_options(chart_type="histogram", histogram_field="city")

    assert session.chart_renders == 2
    assert session.state.options.chart_type == "histogram"
    assert session.frame.chart_data.field == "city"


def test_histogram_session_has_no_groups(people) -> None:
    """Group toggles on a histogram see no groups."""

    session = InteractiveSession(people, ChartOptions(chart_type="histogram", histogram_field="age"))

    assert session.known_groups() == ()
    session.toggle_group("Oslo")
    assert session.state.options.visible_groups == ()
