"""
Command-line entry point for svgc.

Usage:
    svgc [options] <input.csv>
    python -m svgc [options] <input.csv>
"""

import argparse
import logging
import sys
import traceback

from . import APP_NAME, __version__
from .constants import CHART_TYPES, DEFAULT_CHART_TYPE, DEFAULT_HEIGHT, DEFAULT_WIDTH

logger = logging.getLogger(APP_NAME)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

EPILOG = """\
examples:
  svgc data.csv > chart.svg
  svgc -t scatter -x time -y value -g category data.csv -o chart.svg
  svgc -t histogram -f age data.csv
  svgc -t histogram -f score -b 20 data.csv --png preview.png
"""


def _check_dependencies():
    """Return the names of required packages that are not installed."""
    missing = []
    try:
        import matplotlib  # noqa: F401
    except ImportError:
        missing.append("matplotlib")
    try:
        import numpy  # noqa: F401
    except ImportError:
        missing.append("numpy")

    if missing:
        print(
            f"Missing required packages: {', '.join(missing)}\n"
            f"Install with: pip install {' '.join(missing)}",
            file=sys.stderr,
        )
    return missing


def _exception_hook(exc_type, exc_value, exc_tb):
    """Log unexpected exceptions instead of dying with a bare traceback."""
    msg = ''.join(traceback.format_exception(exc_type, exc_value, exc_tb))
    logger.critical("Unhandled exception:\n%s", msg)


def configure_logging(debug: bool = False) -> None:
    """Send svgc log records to stderr."""
    root = logging.getLogger(APP_NAME)
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    # Replace the handler from an earlier call; sys.stderr may have changed
    for handler in list(root.handlers):
        if getattr(handler, '_svgc_cli', False):
            root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler._svgc_cli = True
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


class _ArgumentParser(argparse.ArgumentParser):
    """Argument errors exit with status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _positive_int(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=APP_NAME,
        description="Generate interactive SVG charts from CSV data.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument('input', metavar='<input.csv>', help="CSV file with a header row")
    parser.add_argument('-w', '--width', type=_positive_int, default=DEFAULT_WIDTH,
                        help=f"chart width in pixels (default: {DEFAULT_WIDTH})")
    parser.add_argument('-h', '--height', type=_positive_int, default=DEFAULT_HEIGHT,
                        help=f"chart height in pixels (default: {DEFAULT_HEIGHT})")
    parser.add_argument('-o', '--output', metavar='FILE',
                        help="output SVG file (default: stdout)")
    parser.add_argument('-t', '--type', dest='chart_type', choices=CHART_TYPES,
                        default=DEFAULT_CHART_TYPE,
                        help=f"chart type (default: {DEFAULT_CHART_TYPE})")

    scatter = parser.add_argument_group("scatter chart options")
    scatter.add_argument('-x', '--x-field', metavar='FIELD', help="field for the X axis")
    scatter.add_argument('-y', '--y-field', metavar='FIELD', help="field for the Y axis")
    scatter.add_argument('-s', '--size-field', metavar='FIELD', help="field for point sizes")
    scatter.add_argument('-g', '--group-field', metavar='FIELD', help="field for grouping/colours")

    histogram = parser.add_argument_group("histogram options")
    histogram.add_argument('-f', '--field', metavar='FIELD', help="field to bin")
    histogram.add_argument('-b', '--bins', type=_positive_int, metavar='COUNT',
                           help="number of bins for numeric data (default: auto)")

    other = parser.add_argument_group("other options")
    other.add_argument('--png', metavar='PATH', help="also write a static PNG preview")
    other.add_argument('--debug', action='store_true',
                       help="verbose logging here and in the generated SVG")
    other.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    other.add_argument('--help', action='help', help="show this help message and exit")
    return parser


def options_from_args(args):
    from .data_model import ChartOptions
    return ChartOptions(
        chart_type=args.chart_type,
        width=args.width,
        height=args.height,
        x_field=args.x_field,
        y_field=args.y_field,
        group_field=args.group_field,
        weight_field=args.size_field,
        histogram_field=args.field,
        bin_count=args.bins,
        debug=args.debug,
    )


def main(argv=None) -> int:
    """Run the CLI and return the process exit status."""
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)
    if _check_dependencies():
        return 1
    sys.excepthook = _exception_hook

    from .csv_parser import get_numeric_fields, load_csv
    from .errors import SvgcError
    from .export import export_png, write_artifact
    from .registry import resolve_options
    from .svg import build_artifact

    try:
        logger.info("Reading CSV file: %s", args.input)
        dataset = load_csv(args.input)
        logger.info("Loaded %d rows with %d columns", len(dataset.rows), len(dataset.headers))
        logger.debug("Numeric fields: %s", ", ".join(get_numeric_fields(dataset)) or "none")

        requested = options_from_args(args)
        options = resolve_options(dataset, requested, strict=True)
        for attr in ('x_field', 'y_field', 'histogram_field'):
            if getattr(requested, attr) is None and getattr(options, attr) is not None:
                logger.info("Auto-selected %s: %s", attr.replace('_', ' '), getattr(options, attr))

        svg_text = build_artifact(dataset, options)
        if args.output:
            write_artifact(svg_text, args.output)
            logger.info("Chart saved to: %s", args.output)
        else:
            sys.stdout.write(svg_text)
            sys.stdout.flush()

        if args.png:
            export_png(dataset, options, args.png)
    except SvgcError as exc:
        logger.error("%s", exc)
        return 1
    except OSError as exc:
        logger.error("Cannot write output: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
