"""
svgc v1.0.0

Interactive SVG chart generator for CSV data.
Produces scatter plots and histograms as single self-contained SVG
files that carry their own data, chart engine and controls, so axis
changes, filters and group toggles re-render inside the viewer with
no server and no external scripts.
"""

APP_NAME = "svgc"
APP_VERSION = "1.0.0"
APP_DATE = "2026-10-19"
__version__ = APP_VERSION
