"""Tests for scatter scaling, point layout and group colouring."""

from matplotlib.figure import Figure

from svgc.chart_scatter import (
    compute_scale, draw_scatter, generate_scatter, point_radius, render_scatter,
    render_scatter_controls,
)
from svgc.constants import CATEGORY_PALETTE, generate_colors
from svgc.csv_parser import parse_csv_text
from svgc.data_model import ChartOptions, Filter, Scale


def test_compute_scale_pads_five_percent() -> None:
    """The data range is padded on both sides."""

    assert compute_scale([0, 10]) == Scale(-0.5, 10.5, 11.0)


def test_compute_scale_degenerate_ranges_stay_positive() -> None:
    """Single values and empty lists still get a positive range."""

    assert compute_scale([5, 5]) == Scale(4.5, 5.5, 1.0)
    assert compute_scale([0, 0]) == Scale(-1.0, 1.0, 2.0)
    assert compute_scale([]) == Scale(-1.0, 1.0, 2.0)
    assert compute_scale([-5]).range > 0


def test_point_radius_from_weight() -> None:
    """Radius grows with sqrt(weight) and is clamped to [2, 10]."""

    assert point_radius(0.0) == 3
    assert point_radius(0.25) == 4
    assert point_radius(1.0) == 5
    assert point_radius(100.0) == 10
    assert point_radius(-4.0) == 3
    assert point_radius("heavy") == 5
    assert point_radius(None) == 5


def test_generate_scatter_skips_non_numeric_rows(people) -> None:
    """Rows without numeric x and y are counted, not plotted."""

    chart = generate_scatter(people, ChartOptions(x_field="age", y_field="score"))

    assert len(chart.points) == 3
    assert chart.excluded == 2
    assert chart.groups == ["default"]
    assert [p.source_row["name"] for p in chart.points] == ["Ann", "Bob", "Eve"]


def test_points_fall_inside_plot_bounds(people) -> None:
    """Pixel positions stay within the plot rectangle."""

    chart = generate_scatter(people, ChartOptions(x_field="age", y_field="score"))
    b = chart.bounds

    for p in chart.points:
        assert b.left <= p.x <= b.right
        assert b.top <= p.y <= b.bottom


def test_groups_in_first_seen_order_with_palette_colours(people) -> None:
    """Group names come from the filtered rows in order of appearance."""

    chart = generate_scatter(
        people, ChartOptions(x_field="age", y_field="score", group_field="city"))

    assert chart.groups == ["Berlin", "Oslo", "Lisbon"]
    assert chart.group_colors == dict(zip(chart.groups, CATEGORY_PALETTE[:3]))


def test_blank_group_cells_form_their_own_group() -> None:
    """Null group cells are grouped under "(blank)"."""

    dataset = parse_csv_text("x,y,g\n1,2,a\n3,4,\n")
    chart = generate_scatter(dataset, ChartOptions(x_field="x", y_field="y", group_field="g"))

    assert chart.groups == ["a", "(blank)"]


def test_filters_apply_before_scaling(people) -> None:
    """Filtered-out rows do not widen the scale."""

    options = ChartOptions(
        x_field="age", y_field="score", filters=(Filter(1, "age", "<", "40"),))
    chart = generate_scatter(people, options)

    assert len(chart.points) == 2
    assert chart.x_scale.max < 40


def test_generate_colors_beyond_palette() -> None:
    """Colours past the palette step around the hue wheel."""

    colors = generate_colors(15)

    assert colors[:10] == CATEGORY_PALETTE
    assert len(set(colors)) == 15
    for i in range(10, 15):
        assert colors[i] == f"hsl({(i * 137.508) % 360!r}, 70%, 50%)"


def test_render_scatter_hides_invisible_groups(people) -> None:
    """Points outside the visible set carry the hidden class."""

    options = ChartOptions(
        x_field="age", y_field="score", group_field="city",
        visible_groups=("Berlin",),
    )
    markup = "".join(render_scatter(generate_scatter(people, options), options))

    assert markup.count('class="data-point"') == 1
    assert markup.count('class="data-point hidden"') == 2
    assert 'class="legend-item legend-off"' in markup


def test_render_scatter_empty_message(people) -> None:
    """A chart without plottable rows says so."""

    options = ChartOptions(x_field="city", y_field="name")
    markup = "".join(render_scatter(generate_scatter(people, options), options))

    assert "No data to display" in markup


def test_render_scatter_controls_summary(people) -> None:
    """The static panel lists the selected fields."""

    markup = "".join(render_scatter_controls(
        people, ChartOptions(x_field="age", y_field="score")))

    assert "X: age" in markup
    assert "Group: none" in markup


def test_draw_scatter_one_collection_per_visible_group(people) -> None:
    """The preview draws each visible group as one scatter collection."""

    options = ChartOptions(
        x_field="age", y_field="score", group_field="city",
        visible_groups=("Berlin", "Oslo"),
    )
    fig = Figure()
    draw_scatter(fig, generate_scatter(people, options), options)

    assert len(fig.get_axes()[0].collections) == 2
