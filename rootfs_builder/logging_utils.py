"""Build log setup.

Every record written by the build handlers carries the label of the action
being processed (``-`` outside any action), so a failing command's output can
be traced back to the recipe step that ran it.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

BUILD_LOG_NAME = "rootfs-build.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(action)s] %(name)s: %(message)s"

_current_action = "-"


class ActionFilter(logging.Filter):
    """Stamps records with the label of the current action."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.action = _current_action
        return True


@contextmanager
def action_context(label: str) -> Iterator[None]:
    global _current_action
    previous = _current_action
    _current_action = label
    try:
        yield
    finally:
        _current_action = previous


def build_log_path(artifactdir: str) -> str:
    return os.path.join(artifactdir, BUILD_LOG_NAME)


def configure_logging(
    log_path: str,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Send the build's records to ``log_path`` (and the console).

    Handlers installed by an earlier call are replaced, so a second build in
    the same process does not write into the first build's log.
    """

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        if any(isinstance(f, ActionFilter) for f in h.filters):
            root.removeHandler(h)
            h.close()

    Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
    handlers: list[logging.Handler] = [logging.FileHandler(log_path)]
    if also_console:
        handlers.append(logging.StreamHandler())

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    for h in handlers:
        h.addFilter(ActionFilter())
        h.setFormatter(fmt)
        root.addHandler(h)

    logging.getLogger(__name__).info("Build log: %s", log_path)
    return log_path
