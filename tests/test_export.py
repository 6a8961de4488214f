"""Tests for artifact writing, PNG previews and the example table."""

import pytest

from svgc.csv_parser import get_numeric_fields, load_csv
from svgc.data_model import ChartOptions
from svgc.errors import UnknownChartType
from svgc.example_data import HEADERS, example_rows, generate_example_csv
from svgc.export import export_png, render_preview, write_artifact


def test_write_artifact_creates_parent_dirs(tmp_path) -> None:
    """Nested output directories are created on demand."""

    path = tmp_path / "a" / "b" / "chart.svg"
    write_artifact("<svg>é</svg>\n", str(path))

    assert path.read_text(encoding="utf-8") == "<svg>é</svg>\n"


def test_render_preview_keeps_artifact_aspect(people) -> None:
    """The figure is width/100 by height/100 inches."""

    fig = render_preview(people, ChartOptions(width=640, height=480))

    assert tuple(fig.get_size_inches()) == pytest.approx((6.4, 4.8))
    assert fig.get_axes()[0].get_title() == "age vs score"


def test_render_preview_histogram(people) -> None:
    """Histogram previews draw one bar per bin."""

    fig = render_preview(people, ChartOptions(chart_type="histogram", histogram_field="city"))
    ax = fig.get_axes()[0]

    assert len(ax.patches) == 3
    assert ax.get_title() == "Distribution of city"


def test_render_preview_unknown_type(people) -> None:
    with pytest.raises(UnknownChartType):
        render_preview(people, ChartOptions(chart_type="pie"))


def test_export_png_writes_png(people, tmp_path) -> None:
    """The preview is saved as a PNG file."""

    path = tmp_path / "out" / "preview.png"
    export_png(people, ChartOptions(chart_type="histogram", histogram_field="age"), str(path), dpi=50)

    assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_example_table_shape(example_csv) -> None:
    """The generated table loads with numeric and text columns."""

    dataset = load_csv(example_csv)

    assert dataset.headers == HEADERS
    assert len(dataset.rows) == 60
    assert get_numeric_fields(dataset) == ["age", "height", "weight", "score"]


def test_example_rows_are_reproducible(tmp_path) -> None:
    """The same seed gives the same rows."""

    assert example_rows(20, seed=1) == example_rows(20, seed=1)
    assert example_rows(20, seed=1) != example_rows(20, seed=2)

    path = generate_example_csv(str(tmp_path / "small.csv"), n_rows=5)
    assert len(load_csv(path).rows) == 5
