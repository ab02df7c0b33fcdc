"""Overlay action: recursive copy of a directory or file into the target rootfs.

Recipe syntax::

    - action: overlay
      origin: name
      source: directory
      destination: /path/in/rootfs

``source`` is relative to the recipe directory, or to the path registered
under ``origin``. A source ending in ``*`` selects every subdirectory of its
parent and overlays each of them, in name order, onto the same destination.
``destination`` defaults to the root of the target filesystem; existing files
there are overwritten.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from ..context import BuildContext
from ..errors import ConfigError
from ..lib.assets import copy_tree
from ..lib.paths import restricted_path
from .base import ActionMeta

logger = logging.getLogger(__name__)

WILDCARD = "*"


def list_directories(parent: Path) -> List[str]:
    """Names of the immediate subdirectories of ``parent``, sorted.

    Links to directories are not subdirectories and are skipped.
    """

    with os.scandir(parent) as it:
        return sorted(entry.name for entry in it if entry.is_dir(follow_symlinks=False))


@dataclass
class OverlayAction:
    kind = "overlay"

    source: str = ""
    origin: str = ""
    destination: str = "/"
    meta: ActionMeta = field(default_factory=ActionMeta)

    @property
    def label(self) -> str:
        return self.meta.label or self.meta.description or f"overlay {self.source or self.origin}"

    @property
    def is_wildcard(self) -> bool:
        return self.source.endswith(WILDCARD)

    def verify(self, context: BuildContext) -> None:
        if not self.source and not self.origin:
            raise ConfigError("overlay: 'source' or 'origin' is required")
        if WILDCARD in self.source.rstrip(WILDCARD):
            raise ConfigError(f"overlay: '{WILDCARD}' is only supported as the last character of source: {self.source}")
        restricted_path(context.rootdir, self.destination)

    def _base(self, context: BuildContext) -> Path:
        if self.origin:
            return Path(context.origin(self.origin))
        return Path(context.recipedir)

    def run(self, context: BuildContext) -> None:
        base = self._base(context)
        destination = restricted_path(context.rootdir, self.destination)

        if not self.is_wildcard:
            sourcedir = base / self.source
            logger.info("Overlaying %s on %s", sourcedir, destination)
            copy_tree(sourcedir, destination, rootdir=context.rootdir, dry_run=context.dry_run)
            return

        parent = base / self.source[: -len(WILDCARD)]
        if not parent.is_dir():
            raise FileNotFoundError(str(parent))
        names = list_directories(parent)
        logger.info("Overlay list: %s", names)
        for name in names:
            sourcedir = parent / name
            logger.info("Overlaying %s on %s", sourcedir, destination)
            copy_tree(sourcedir, destination, rootdir=context.rootdir, dry_run=context.dry_run)
