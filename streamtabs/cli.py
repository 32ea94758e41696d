#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
CLI interface for streamtabs.

Reads a stream of lines from a pipe and shows it in tabs: one with every
line and one per filter string.

Usage:
    tail -f app.log | streamtabs error warn info
    python3 -m streamtabs.cli <filter> [<filter> ...]
"""

import argparse
import os
import signal
import sys
from typing import IO, List, Optional, Sequence

from streamtabs.debug_logger import get_logger
from streamtabs.engine import StreamEngine
from streamtabs.models import MAX_FILTERS, MAX_STORED_LINES_PER_TAB
from streamtabs.source import LineSource

KEYS_HELP = """\
keys:
  Tab        next tab
  0-9        jump to tab
  space      pause / resume
  s          select the middle line on screen
  d          clear the selection
  q, Ctrl+C  quit

mouse:
  click a tab to focus it, click a line to select or unselect it

example:
  tail -f app.log | streamtabs error warn info
"""


class CliError(Exception):
    """Raised when the process environment cannot host the viewer."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streamtabs",
        description="Split a stream of lines from stdin into filtered tabs",
        epilog=KEYS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "filters",
        nargs="*",
        metavar="FILTER",
        help=f"Substring to match (case-sensitive), one tab each, 1 to {MAX_FILTERS}",
    )
    return parser


def parse_filters(parser: argparse.ArgumentParser, argv: Optional[Sequence[str]] = None) -> List[str]:
    """
    Parse and validate the filter arguments.

    Empty strings are dropped. Exits with status 2 (via argparse) when no
    filters or too many remain.
    """
    args = parser.parse_args(argv)
    filters = [f for f in args.filters if f]
    if not filters:
        parser.error("at least one filter is required")
    if len(filters) > MAX_FILTERS:
        parser.error(f"at most {MAX_FILTERS} filters are supported (got {len(filters)})")
    return filters


def check_terminal(stdin: IO, stdout: IO) -> None:
    """
    Make sure output goes to a terminal and input comes from a pipe.

    Raises:
        CliError: If either end is wrong
    """
    if not stdout.isatty():
        raise CliError("stdout must be a TTY (run this in a terminal, not redirected)")
    if stdin.isatty():
        raise CliError("stdin must be a pipe, e.g. tail -f app.log | streamtabs error")


def detach_data_stream() -> IO[str]:
    """
    Move the data pipe off fd 0 and put the controlling terminal there.

    The viewer reads keys from fd 0, so the piped data gets its own
    descriptor first.

    Returns:
        Text stream over the original pipe

    Raises:
        CliError: If there is no controlling terminal
    """
    data_fd = os.dup(sys.stdin.fileno())
    try:
        tty_fd = os.open("/dev/tty", os.O_RDONLY)
    except OSError as e:
        os.close(data_fd)
        raise CliError(f"cannot open /dev/tty: {e}") from e

    os.dup2(tty_fd, 0)
    os.close(tty_fd)
    # Only "\n" ends a line; a trailing "\r" is stripped by LineSource.
    return os.fdopen(data_fd, "r", encoding="utf-8", errors="replace", newline="\n")


def terminate_pipeline_group_if_safe() -> None:
    """
    Stop upstream producers after quitting.

    With job control, a shell puts the whole pipeline in its own process
    group. When ours differs from our parent's, SIGINT to the group stops
    producers such as `tail -f` along with us.
    """
    if not hasattr(os, "killpg"):
        return

    my_pgid = os.getpgrp()
    if my_pgid <= 0:
        return
    try:
        parent_pgid = os.getpgid(os.getppid())
    except OSError:
        return
    if parent_pgid == my_pgid:
        return

    signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        os.killpg(my_pgid, signal.SIGINT)
    except OSError as e:
        get_logger().error("terminate_pipeline", str(e), {"pgid": my_pgid})


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    filters = parse_filters(parser, argv)

    try:
        check_terminal(sys.stdin, sys.stdout)
        stream = detach_data_stream()
    except CliError as e:
        print(f"streamtabs failed: {e}", file=sys.stderr)
        sys.exit(1)

    logger = get_logger()
    logger.session_start(filters, MAX_STORED_LINES_PER_TAB)

    engine = StreamEngine(filters)

    # Import here so `--help` and argument errors work without textual loaded
    from streamtabs.tui import run_app

    run_app(engine, LineSource(stream))
    terminate_pipeline_group_if_safe()


if __name__ == "__main__":
    main()
