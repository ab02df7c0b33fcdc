from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from .command import is_root
from .paths import restricted_path

logger = logging.getLogger(__name__)


def _copy_owner(src: Path, dst: Path, *, follow_symlinks: bool = False) -> None:
    if not is_root():
        return
    st = os.stat(src, follow_symlinks=follow_symlinks)
    os.lchown(dst, st.st_uid, st.st_gid)


def copy_entry(src: Path, dst: Path) -> None:
    """Copy one non-directory entry, replacing whatever file or link sits at ``dst``.

    A real directory at ``dst`` is only replaced when it is empty.
    """

    if dst.is_symlink() or dst.is_file():
        dst.unlink()
    elif dst.is_dir():
        if any(dst.iterdir()):
            raise IsADirectoryError(f"Refusing to replace non-empty directory {dst} with {src}")
        dst.rmdir()
    if src.is_symlink():
        os.symlink(os.readlink(src), dst)
    else:
        shutil.copy2(src, dst, follow_symlinks=False)
    _copy_owner(src, dst)


def _target_dir(dst: Path, rootdir: Optional[Path]) -> tuple[Path, bool]:
    """Directory to merge into for ``dst`` and whether it was created here.

    A link to a directory (merged-usr ``lib -> usr/lib``) is merged through,
    as long as it resolves inside ``rootdir``.
    """

    if dst.is_symlink():
        if dst.is_dir():
            if rootdir is None:
                return dst.resolve(), False
            return restricted_path(rootdir, os.path.relpath(dst, rootdir)), False
        dst.unlink()
    elif dst.is_dir():
        return dst, False
    elif dst.exists():
        dst.unlink()
    dst.mkdir(parents=True)
    return dst, True


def _merge_dir(src: Path, dst: Path, rootdir: Optional[Path]) -> None:
    target, created = _target_dir(dst, rootdir)
    with os.scandir(src) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        item = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            _merge_dir(item, target / entry.name, rootdir)
        else:
            copy_entry(item, target / entry.name)
    if created:
        # Children are in place; only now can a read-only mode be applied.
        shutil.copystat(src, target)
        _copy_owner(src, target, follow_symlinks=True)


def copy_tree(
    src: str | Path,
    dst: str | Path,
    *,
    rootdir: str | Path | None = None,
    dry_run: bool = False,
) -> None:
    """Copy ``src`` onto ``dst``, merging into existing directories.

    Files present in both are overwritten; entries only present in ``dst``
    are left alone, and existing directories keep their own mode. New
    entries get the permissions, timestamps and symlinks of the source,
    ownership too when running as root. A file ``src`` is copied to ``dst``
    itself; a ``src`` linking to a directory is copied by content.

    With ``rootdir`` set, links to directories met in ``dst`` must resolve
    inside it (PathEscape otherwise).
    """
    s = Path(src)
    d = Path(dst)
    if not s.exists() and not s.is_symlink():
        raise FileNotFoundError(str(src))

    if dry_run:
        logger.info("Would copy tree %s -> %s", str(s), str(d))
        return

    root = Path(rootdir).resolve() if rootdir is not None else None
    if s.is_dir():
        _merge_dir(s, d, root)
        return

    d.parent.mkdir(parents=True, exist_ok=True)
    copy_entry(s, d)
