"""
CSV parser for svgc.

Loads a single headed CSV file into a ``Dataset``.  Handles:

- Auto-detected delimiters (tab → semicolon → comma)
- European decimal-comma numbers in tab / semicolon files
- UTF-8 BOM markers
- Quoted fields containing delimiters
- Blank cells (mapped to ``None``)
- Short rows (padded with ``None``) and long rows (extra cells dropped)

Cells that look like finite numbers become ``float``; everything else
stays text.
"""

import csv
import io
import math
import os
import re
import warnings
from typing import Dict, List, Optional

from .data_model import Cell, Dataset, ValueKind, value_kind
from .errors import InputError

_NUMBER_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


# ── Locale-safe float parsing ────────────────────────────────────────────

def _locale_float(text: str, decimal_comma: bool = False) -> float:
    """Parse a numeric string, optionally with comma as decimal separator.

    Handles:
    - Standard period decimals: ``"3.14"``
    - European comma decimals: ``"3,14"`` (only when *decimal_comma*)
    - Thousand separators: ``"1.234,56"`` / ``"1,234.56"``

    Raises ``ValueError`` for anything that is not a finite number.
    """
    s = text.strip()
    if not s:
        raise ValueError("empty string")
    if decimal_comma:
        if ',' in s and '.' in s:
            if s.rfind(',') > s.rfind('.'):
                # European: "1.234,56"  →  "1234.56"
                s = s.replace('.', '').replace(',', '.')
            else:
                # US: "1,234.56"  →  "1234.56"
                s = s.replace(',', '')
        elif ',' in s:
            s = s.replace(',', '.')
    if not _NUMBER_RE.match(s):
        raise ValueError(f"not a number: {text.strip()!r}")
    result = float(s)
    if not math.isfinite(result):
        raise ValueError(f"non-finite value: {text.strip()!r}")
    return result


def parse_number(text: str) -> Optional[float]:
    """Parse *text* as a finite number, or return ``None``."""
    try:
        return _locale_float(text)
    except ValueError:
        return None


def parse_cell(text: Optional[str], decimal_comma: bool = False) -> Cell:
    """Convert one raw CSV cell into a typed value."""
    if text is None:
        return None
    s = text.strip()
    if not s:
        return None
    try:
        return _locale_float(s, decimal_comma)
    except ValueError:
        return s


# ── Delimiter auto-detection ─────────────────────────────────────────────

def _detect_delimiter(sample_line: str) -> str:
    """Detect CSV delimiter from a sample line.

    Priority: tab → semicolon → comma.
    """
    if '\t' in sample_line:
        return '\t'
    if ';' in sample_line:
        return ';'
    return ','


# ── Parsing ──────────────────────────────────────────────────────────────

def parse_csv_text(text: str, source: str = "") -> Dataset:
    """Parse CSV *text* (header row + data rows) into a ``Dataset``.

    Raises
    ------
    InputError
        If the text has no header, blank or duplicate header names, or
        no data rows.
    """
    name = os.path.basename(source) if source else "<input>"
    if text.startswith('\ufeff'):
        text = text[1:]
    first_line = next((line for line in text.splitlines() if line.strip()), None)
    if first_line is None:
        raise InputError(f"CSV file '{name}' is empty.")

    delimiter = _detect_delimiter(first_line)
    decimal_comma = delimiter != ','
    # Quoted cells may span lines, so the reader sees the raw text
    records = [
        record for record in csv.reader(io.StringIO(text, newline=''), delimiter=delimiter)
        if any(cell.strip() for cell in record)
    ]
    if not records:
        raise InputError(f"CSV file '{name}' is empty.")

    headers = [h.strip() for h in records[0]]
    if any(not h for h in headers):
        raise InputError(
            f"CSV header in '{name}' has a blank column name: {headers}"
        )
    seen = set()
    for h in headers:
        if h in seen:
            raise InputError(
                f"CSV header in '{name}' repeats the column name {h!r}."
            )
        seen.add(h)

    rows: List[Dict[str, Cell]] = []
    long_rows: List[int] = []
    for line_idx, tokens in enumerate(records[1:], start=2):
        if len(tokens) > len(headers):
            long_rows.append(line_idx)
        rows.append({
            h: parse_cell(tokens[i] if i < len(tokens) else None, decimal_comma)
            for i, h in enumerate(headers)
        })

    if long_rows:
        detail = ", ".join(str(i) for i in long_rows[:10])
        if len(long_rows) > 10:
            detail += f" ... and {len(long_rows) - 10} more"
        warnings.warn(
            f"Lines with more cells than headers in '{name}': {detail}. "
            f"Extra cells were ignored.",
            stacklevel=2,
        )

    if not rows:
        raise InputError(f"CSV file '{name}' contains no data rows.")

    return Dataset(headers=headers, rows=rows, source=source)


def load_csv(filepath: str) -> Dataset:
    """Load a CSV file from disk.

    Raises
    ------
    InputError
        If the file does not exist or cannot be parsed into rows.
    """
    if not os.path.isfile(filepath):
        raise InputError(f"Input file not found: {filepath}")

    file_size = os.path.getsize(filepath)
    if file_size > 100 * 1024 * 1024:
        warnings.warn(
            f"File is very large ({file_size / (1024 * 1024):.0f} MB). "
            f"The generated SVG embeds every row.",
            stacklevel=2,
        )

    with open(filepath, 'r', encoding='utf-8-sig', newline='') as fh:
        text = fh.read()
    return parse_csv_text(text, source=filepath)


# ── Field type inference ─────────────────────────────────────────────────

def infer_field_types(dataset: Dataset) -> Dict[str, str]:
    """Map each header to ``"number"`` or ``"string"``.

    A field is numeric when it has at least one non-null value and every
    non-null value is a number.
    """
    types = {}
    for header in dataset.headers:
        kinds = {
            value_kind(v) for v in dataset.column(header)
        } - {ValueKind.NULL}
        types[header] = "number" if kinds == {ValueKind.NUMBER} else "string"
    return types


def get_numeric_fields(dataset: Dataset) -> List[str]:
    types = infer_field_types(dataset)
    return [h for h in dataset.headers if types[h] == "number"]


def get_string_fields(dataset: Dataset) -> List[str]:
    types = infer_field_types(dataset)
    return [h for h in dataset.headers if types[h] == "string"]
