from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Protocol

logger = logging.getLogger(__name__)


class Machine(Protocol):
    """What actions may ask of the build machine before it starts."""

    def add_volume(self, path: str) -> None:
        ...


@dataclass
class LocalMachine:
    """Runs actions in the current process.

    Only records the volumes and arguments actions register during the
    pre-machine phase so callers (and tests) can inspect them.
    """

    volumes: List[str] = field(default_factory=list)
    args: List[str] = field(default_factory=list)

    def add_volume(self, path: str) -> None:
        p = os.path.abspath(path)
        if p in self.volumes:
            return
        logger.debug("Volume %s", p)
        self.volumes.append(p)
