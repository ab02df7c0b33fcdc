from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Sequence

from .command import privileged, run_cmd
from .paths import restricted_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BindMount:
    host_path: str
    target_path: str


def chroot_argv(target_root: str, argv: Sequence[str]) -> list[str]:
    """Command line running ``argv`` with ``target_root`` as /."""

    return privileged(["chroot", target_root, *argv])


@contextmanager
def bind_mounts(
    target_root: str,
    mounts: Sequence[BindMount],
    *,
    dry_run: bool = False,
) -> Iterator[List[Path]]:
    """Bind-mount host paths into ``target_root`` for the duration of the block.

    Whatever was mounted is unmounted on exit, including when a mount in the
    middle of the list or the body fails.
    """

    mounted: List[Path] = []
    try:
        for m in mounts:
            dst = restricted_path(target_root, m.target_path)
            if not dry_run:
                dst.mkdir(parents=True, exist_ok=True)
            run_cmd(privileged(["mount", "--bind", m.host_path, str(dst)]), dry_run=dry_run)
            mounted.append(dst)
        yield mounted
    finally:
        for dst in reversed(mounted):
            run_cmd(privileged(["umount", "-lf", str(dst)]), check=False, dry_run=dry_run)
