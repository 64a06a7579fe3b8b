"""logcatcolor: colorize and compact adb logcat output."""

import logging
import sys
from argparse import ArgumentParser, ArgumentTypeError

from logcatcolor.colors import get_palette
from logcatcolor.config import (
    USB_DEVICE,
    ConfigError,
    load_options,
    load_yaml_config,
    parse_duration,
    parse_level,
)
from logcatcolor.stream import stream_file, supervise

logger = logging.getLogger("logcatcolor")


def _duration(value: str):
    try:
        return parse_duration(value)
    except ValueError as e:
        raise ArgumentTypeError(str(e))


def _level(value: str) -> str:
    try:
        return parse_level(value)
    except ValueError as e:
        raise ArgumentTypeError(str(e))


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="logcatcolor",
        description="Colorize adb logcat output and collapse repeated metadata into time deltas.",
    )
    parser.add_argument(
        "-s",
        dest="filters",
        action="append",
        metavar="FILTER",
        help="Filter spec passed to adb logcat as -s FILTER (repeatable)",
    )
    parser.add_argument(
        "-t",
        dest="tag",
        help="Filter by tag (used together with -l)",
    )
    parser.add_argument(
        "-l",
        dest="level",
        type=_level,
        help="Minimum log level (V/D/I/W/E/F)",
    )
    parser.add_argument(
        "-d",
        dest="device",
        nargs="?",
        const=USB_DEVICE,
        metavar="SERIAL",
        help="Device serial number, or bare -d for the USB device",
    )
    parser.add_argument(
        "-e",
        dest="emulator",
        action="store_true",
        help="Use the default emulator",
    )
    parser.add_argument(
        "--delta",
        type=_duration,
        help="Maximum time difference shown as +delta (default: 10s)",
    )
    parser.add_argument(
        "-k",
        "--keep-going",
        action="store_true",
        help="Restart adb logcat when it exits",
    )
    parser.add_argument(
        "--input",
        metavar="PATH",
        help="Render a saved log file instead of running adb ('-' for stdin)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colors",
    )
    parser.add_argument(
        "--config",
        help="Path to YAML config file with option defaults",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug diagnostics to stderr",
    )
    return parser


def run(args, parser: ArgumentParser) -> int:
    """Load options and run either a file render or supervised adb sessions."""
    try:
        options = load_options(args, load_yaml_config(args.config))
    except ConfigError as e:
        parser.error(str(e))

    palette = get_palette(color=options.color)

    if options.input_path:
        count = stream_file(options.input_path, palette, sys.stdout, options)
        logger.debug("Rendered %d lines from %s", count, options.input_path)
        return 0

    return supervise(options, palette, sys.stdout)


def main():
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [LOGCATCOLOR] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    try:
        code = run(args, parser)
    except (KeyboardInterrupt, BrokenPipeError):
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()
