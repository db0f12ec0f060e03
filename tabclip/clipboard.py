"""Clipboard sink backed by an external process reading HTML on stdin."""

from __future__ import annotations

import logging
import subprocess
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Sequence

from .errors import ClipboardError
from .rules import CLIPBOARD_COMMAND

logger = logging.getLogger(__name__)


@contextmanager
def clipboard_sink(command: Sequence[str] = CLIPBOARD_COMMAND) -> Iterator[BinaryIO]:
    """
    Spawn `command` and yield its stdin as the sink.

    The pipe is closed and the process waited for on every exit path.
    """
    try:
        proc = subprocess.Popen(list(command), stdin=subprocess.PIPE)
    except OSError as exc:
        raise ClipboardError(f"cannot start {command[0]}: {exc}") from exc

    logger.debug("started clipboard process %s (pid %s)", command[0], proc.pid)
    try:
        yield proc.stdin
    finally:
        try:
            proc.stdin.close()
        except BrokenPipeError:
            logger.debug("clipboard process closed its stdin early")
        returncode = proc.wait()

    if returncode != 0:
        raise ClipboardError(f"{command[0]} exited with status {returncode}")
