from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .errors import ConfigError, OriginNotFound

logger = logging.getLogger(__name__)


@dataclass
class BuildContext:
    """State shared by every action of a build.

    Created once per build by the runner and passed by reference to each
    lifecycle phase. Actions may register new origins but never replace or
    rebind an existing one.
    """

    rootdir: str
    artifactdir: str
    recipedir: str
    image: Optional[str] = None
    image_mnt_dir: Optional[str] = None
    dry_run: bool = False
    _origins: Dict[str, str] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self.rootdir = os.path.abspath(self.rootdir)
        self.artifactdir = os.path.abspath(self.artifactdir)
        self.recipedir = os.path.abspath(self.recipedir)
        for name, path in (
            ("artifacts", self.artifactdir),
            ("filesystem", self.rootdir),
            ("recipe", self.recipedir),
        ):
            self._origins.setdefault(name, path)

    def add_origin(self, name: str, path: str) -> None:
        if name in self._origins:
            raise ConfigError(f"Origin {name!r} already registered ({self._origins[name]})")
        self._origins[name] = os.path.abspath(path)
        logger.info("Registered origin %s -> %s", name, self._origins[name])

    def lookup_origin(self, name: str) -> Tuple[str, bool]:
        path = self._origins.get(name)
        return (path or "", path is not None)

    def origin(self, name: str) -> str:
        path, found = self.lookup_origin(name)
        if not found:
            raise OriginNotFound(name)
        return path

    @property
    def origins(self) -> Dict[str, str]:
        return dict(self._origins)
