"""
Example data generator for svgc.

Creates a synthetic people table with numeric and text columns for
testing and demonstration.  Roughly 5 % of the ``weight`` and ``city``
cells are left blank to exercise null handling.
"""

import os
import random

CITIES = ['Berlin', 'Lisbon', 'Oslo', 'Quito', 'Seoul']
HEADERS = ['name', 'age', 'height', 'weight', 'city', 'score']


def example_rows(n_rows: int = 60, seed: int = 42) -> list:
    """Return *n_rows* rows as lists of raw CSV text, in ``HEADERS`` order."""
    rng = random.Random(seed)
    rows = []
    for i in range(n_rows):
        age = rng.randint(18, 80)
        height = round(rng.gauss(172.0, 9.0), 1)
        # Weight loosely tracks height
        weight = round((height - 100) * rng.uniform(0.85, 1.15), 1)
        city = rng.choice(CITIES)
        score = round(rng.uniform(0, 100), 2)
        rows.append([
            f"Person {i + 1:03d}",
            str(age),
            str(height),
            '' if rng.random() < 0.05 else str(weight),
            '' if rng.random() < 0.05 else city,
            str(score),
        ])
    return rows


def generate_example_csv(filepath: str, n_rows: int = 60, seed: int = 42) -> str:
    """Write the example table to *filepath* and return the path."""
    parent = os.path.dirname(os.path.abspath(filepath))
    os.makedirs(parent, exist_ok=True)
    with open(filepath, 'w', encoding='utf-8', newline='') as fh:
        fh.write(','.join(HEADERS) + '\n')
        for row in example_rows(n_rows, seed):
            fh.write(','.join(row) + '\n')
    return filepath


if __name__ == '__main__':
    import tempfile
    path = generate_example_csv(os.path.join(tempfile.gettempdir(), 'svgc_example.csv'))
    print(f"  example: {path} ({os.path.getsize(path):,} bytes)")
