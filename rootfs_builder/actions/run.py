"""Run action: execute a command or a script on the host or in the target rootfs.

Recipe syntax::

    - action: run
      chroot: bool
      postprocess: bool
      script: script name and arguments
      command: command line
      label: string

``script`` and ``command`` are mutually exclusive, and so are ``chroot`` and
``postprocess``. Scripts are looked up relative to the recipe directory.

On the host a command sees $RECIPEDIR and $ARTIFACTDIR, plus $ROOTDIR and
$IMAGEMNTDIR unless it is a postprocess command, plus $IMAGE when the build
has an image. In a chroot only $IMAGE is set. Postprocess commands run after
every other action, from the artifact directory.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Tuple

from ..context import BuildContext
from ..errors import ConfigError
from ..executor import Command
from ..lib.paths import clean_path_at
from ..machine import Machine
from .base import ActionMeta

logger = logging.getLogger(__name__)

MAX_LABEL_LENGTH = 40
ELLIPSIS = "..."
CHROOT_SCRIPT_DIR = "/tmp/script"


def command_label(command: str) -> str:
    """Short label for an inline command: its first line, cut to length."""

    lines = command.strip().split("\n")
    label = lines[0]
    if len(label) > MAX_LABEL_LENGTH:
        label = label[:MAX_LABEL_LENGTH].strip() + ELLIPSIS
    elif len(lines) > 1:
        label += ELLIPSIS
    return label


@dataclass
class RunAction:
    kind = "run"

    chroot: bool = False
    postprocess: bool = False
    script: str = ""
    command: str = ""
    meta: ActionMeta = field(default_factory=ActionMeta)

    @property
    def label(self) -> str:
        if self.meta.label:
            return self.meta.label
        if self.script:
            return os.path.basename(self.script.split(" ", 1)[0])
        return command_label(self.command)

    def verify(self, context: BuildContext) -> None:
        if self.postprocess and self.chroot:
            raise ConfigError("run: cannot run postprocessing in the chroot")
        if not self.script and not self.command:
            raise ConfigError("run: 'script' and 'command' both cannot be empty")
        if self.script and self.command:
            raise ConfigError("run: 'script' and 'command' are mutually exclusive")

    def _script(self, context: BuildContext) -> Tuple[str, str]:
        """Absolute script path and its (possibly empty) arguments."""

        path, _, args = self.script.partition(" ")
        return clean_path_at(path, context.recipedir), args

    def pre_machine(self, context: BuildContext, machine: Machine, args: List[str]) -> None:
        if not self.script or self.postprocess:
            return
        path, _ = self._script(context)
        machine.add_volume(os.path.dirname(path))

    def _command(self, context: BuildContext) -> Tuple[Command, str]:
        cmd = Command.for_chroot(context) if self.chroot else Command()

        if self.script:
            path, args = self._script(context)
            if self.chroot:
                scriptdir = os.path.dirname(path)
                cmd.add_bind_mount(scriptdir, CHROOT_SCRIPT_DIR)
                path = CHROOT_SCRIPT_DIR + path[len(scriptdir):]
            cmdline = " ".join(p for p in (path, args) if p)
        else:
            cmdline = self.command

        if not self.chroot:
            cmd.add_env("RECIPEDIR", context.recipedir)
            cmd.add_env("ARTIFACTDIR", context.artifactdir)
            if not self.postprocess:
                cmd.add_env("ROOTDIR", context.rootdir)
                if context.image_mnt_dir:
                    cmd.add_env("IMAGEMNTDIR", context.image_mnt_dir)
        if context.image:
            cmd.add_env("IMAGE", context.image)

        if self.postprocess:
            cmd.cwd = context.artifactdir

        return cmd, cmdline

    def _do_run(self, context: BuildContext) -> None:
        cmd, cmdline = self._command(context)
        # The whole line goes to one shell so operators and quoting work.
        cmd.run(self.label, "sh", "-c", cmdline, dry_run=context.dry_run)

    def run(self, context: BuildContext) -> None:
        if self.postprocess:
            return
        self._do_run(context)

    def post_machine(self, context: BuildContext) -> None:
        if not self.postprocess:
            return
        self._do_run(context)
