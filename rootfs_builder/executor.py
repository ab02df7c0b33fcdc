"""Host and chroot command execution for actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .context import BuildContext
from .lib.chroot import BindMount, bind_mounts, chroot_argv
from .lib.command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

# Variables only meaningful with host paths; never leaked into a chroot.
HOST_ONLY_ENV = ("RECIPEDIR", "ARTIFACTDIR", "ROOTDIR", "IMAGEMNTDIR")


@dataclass
class Command:
    """A single execution, on the host or inside a chroot.

    Built fresh for every run; nothing here is persisted between actions.
    """

    chroot: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    bind_mounts: List[BindMount] = field(default_factory=list)
    cwd: Optional[str] = None

    @classmethod
    def for_chroot(cls, context: BuildContext) -> "Command":
        return cls(chroot=context.rootdir)

    def add_env(self, key: str, value: str) -> None:
        self.env[key] = value

    def add_bind_mount(self, host_path: str, target_path: str) -> None:
        self.bind_mounts.append(BindMount(host_path=host_path, target_path=target_path))

    def run(self, label: str, *cmdline: str, dry_run: bool = False) -> CmdResult:
        if self.chroot is None:
            logger.info("[%s] running on host", label)
            return run_cmd(list(cmdline), env=self.env, cwd=self.cwd, label=label, dry_run=dry_run)

        logger.info("[%s] running in chroot %s", label, self.chroot)
        with bind_mounts(self.chroot, self.bind_mounts, dry_run=dry_run):
            return run_cmd(
                chroot_argv(self.chroot, cmdline),
                env=self.env,
                unset=HOST_ONLY_ENV,
                label=label,
                dry_run=dry_run,
            )
