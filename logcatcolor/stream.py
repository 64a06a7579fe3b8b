"""Stream sessions: run adb logcat (or read a file) and render it line by line."""

import logging
import subprocess
import sys
import time
from typing import Callable, Iterable, TextIO

from logcatcolor.colors import Palette
from logcatcolor.config import EMULATOR, USB_DEVICE, Options
from logcatcolor.renderer import Renderer

logger = logging.getLogger(__name__)

STDIN_PATH = "-"


def build_adb_command(options: Options) -> list[str]:
    """Build the ``adb logcat -v threadtime`` command line for the options."""
    args = ["logcat", "-v", "threadtime"]

    if options.device in (USB_DEVICE, EMULATOR):
        args = [options.device] + args
    elif options.device:
        args = ["-s", options.device] + args

    if options.level:
        args.append(f"{options.tag or '*'}:{options.level}")

    for f in options.filters:
        args.extend(["-s", f])

    return [options.adb_path] + args


def render_stream(lines: Iterable[str], renderer: Renderer, out: TextIO) -> int:
    """Render every line from the source into out. Returns the line count."""
    count = 0
    for line in lines:
        out.write(renderer.render(line) + "\n")
        out.flush()
        count += 1
    return count


def run_adb_session(
    options: Options,
    palette: Palette,
    out: TextIO,
    spawn: Callable = subprocess.Popen,
) -> int:
    """Run one adb logcat process to completion with a fresh render state.

    Returns the adb exit status. Raises OSError if adb can't be started.
    """
    cmd = build_adb_command(options)
    logger.debug("Starting: %s", " ".join(cmd))
    proc = spawn(
        cmd,
        stdout=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    renderer = Renderer(palette, options.max_delta)
    try:
        count = render_stream(proc.stdout, renderer, out)
    finally:
        proc.stdout.close()
        returncode = proc.wait()

    logger.debug("adb logcat produced %d lines", count)
    if returncode != 0:
        logger.warning("adb logcat exited with status %d", returncode)
    return returncode


def supervise(
    options: Options,
    palette: Palette,
    out: TextIO,
    spawn: Callable = subprocess.Popen,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Run adb sessions, restarting after each exit when keep_going is set.

    Returns the exit status of the last session, or 1 if adb couldn't start.
    """
    while True:
        try:
            returncode = run_adb_session(options, palette, out, spawn=spawn)
        except OSError as e:
            logger.error("Error starting adb logcat: %s", e)
            return 1

        if not options.keep_going:
            return returncode

        sleep(options.restart_delay)
        logger.info("adb logcat exited, restarting...")


def stream_file(path: str, palette: Palette, out: TextIO, options: Options) -> int:
    """Render a saved log file, or stdin for ``-``. Returns the line count."""
    renderer = Renderer(palette, options.max_delta)
    if path == STDIN_PATH:
        return render_stream(sys.stdin, renderer, out)
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return render_stream(f, renderer, out)
