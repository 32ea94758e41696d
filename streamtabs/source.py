#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Line source and the background ingestion loop.

Reads one line at a time from a text stream (normally the data pipe on
stdin) and feeds it to the engine on a daemon thread, so a slow terminal
never stops the pipe from being drained.
"""

import threading
from typing import IO, Iterator, Optional

from streamtabs.debug_logger import get_logger
from streamtabs.engine import StreamEngine


class LineSource:
    """
    Blocking line reader over a text stream.

    Attributes:
        stream: Text stream to read from
        closed: True once end of stream (or a read failure) was reached
    """

    def __init__(self, stream: IO[str]) -> None:
        self.stream = stream
        self.closed = False
        self.error: Optional[str] = None

    def next_line(self) -> Optional[str]:
        """
        Read the next line without its line terminator.

        Returns:
            The line text, or None at end of stream. A read failure is
            treated as end of stream and recorded in `error`.
        """
        if self.closed:
            return None
        try:
            raw = self.stream.readline()
        except (OSError, ValueError) as e:
            self.error = f"{type(e).__name__}: {e}"
            self.closed = True
            return None

        if raw == "":
            self.closed = True
            return None

        if raw.endswith("\n"):
            raw = raw[:-1]
            if raw.endswith("\r"):
                raw = raw[:-1]
        return raw

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line


def run_ingestion(source: LineSource, engine: StreamEngine) -> int:
    """
    Feed every line from the source into the engine until it ends.

    Stops early once the engine's quit flag is set. Always marks the
    engine's input as closed on the way out.

    Returns:
        Number of lines ingested by this call
    """
    count = 0
    reason = "eof"
    try:
        for text in source:
            if engine.quit_requested.is_set():
                reason = "quit"
                break
            engine.ingest(text)
            count += 1
    finally:
        if source.error is not None:
            reason = "error"
            get_logger().error("read_input", source.error, {"lines_read": count})
        engine.close_input(reason)
    return count


def start_ingestion(source: LineSource, engine: StreamEngine) -> threading.Thread:
    """
    Run ingestion on a daemon thread.

    The thread may stay blocked in a read after quit; being a daemon, it
    does not hold the process open.
    """
    thread = threading.Thread(
        target=run_ingestion,
        args=(source, engine),
        name="streamtabs-ingest",
        daemon=True,
    )
    thread.start()
    return thread
