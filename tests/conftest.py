"""Pytest fixtures shared across the svgc tests."""

import pytest

from svgc.csv_parser import parse_csv_text
from svgc.example_data import generate_example_csv

PEOPLE_CSV = """\
name,age,city,score
Ann,25,Berlin,7.5
Bob,30,Oslo,8
Cid,35,Berlin,
Dee,,Lisbon,6
Eve,45,Oslo,9.5
"""


@pytest.fixture
def people():
    """Return a five-row dataset with numeric, text and blank cells."""

    return parse_csv_text(PEOPLE_CSV, source="people.csv")


@pytest.fixture
def people_csv(tmp_path):
    """Return the path of the five-row people table written to disk."""

    path = tmp_path / "people.csv"
    path.write_text(PEOPLE_CSV, encoding="utf-8")
    return str(path)


@pytest.fixture
def example_csv(tmp_path):
    """Return the path of a generated 60-row example table."""

    return generate_example_csv(str(tmp_path / "example.csv"))
