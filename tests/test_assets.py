from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from rootfs_builder.errors import PathEscape
from rootfs_builder.lib.assets import copy_tree


def _write(p: Path, text: str) -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


def test_copy_tree_merges_into_existing_directory(tmp_path: Path):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    _write(src / "etc" / "hostname", "new\n")
    _write(src / "etc" / "motd", "hello\n")
    _write(dst / "etc" / "hostname", "old\n")
    _write(dst / "etc" / "fstab", "keep\n")

    copy_tree(src, dst)

    assert (dst / "etc" / "hostname").read_text() == "new\n"
    assert (dst / "etc" / "motd").read_text() == "hello\n"
    assert (dst / "etc" / "fstab").read_text() == "keep\n"


def test_copy_tree_preserves_modes(tmp_path: Path):
    src = tmp_path / "src"
    tool = _write(src / "bin" / "tool", "#!/bin/sh\n")
    tool.chmod(0o751)
    (src / "bin").chmod(0o705)

    copy_tree(src, tmp_path / "dst")

    assert stat.S_IMODE((tmp_path / "dst" / "bin" / "tool").stat().st_mode) == 0o751
    assert stat.S_IMODE((tmp_path / "dst" / "bin").stat().st_mode) == 0o705


def test_copy_tree_keeps_symlinks(tmp_path: Path):
    src = tmp_path / "src"
    _write(src / "usr" / "lib" / "libx.so.1", "elf")
    os.symlink("libx.so.1", src / "usr" / "lib" / "libx.so")
    os.symlink("usr/lib", src / "lib")

    dst = tmp_path / "dst"
    copy_tree(src, dst)

    assert os.readlink(dst / "usr" / "lib" / "libx.so") == "libx.so.1"
    assert os.readlink(dst / "lib") == "usr/lib"
    assert (dst / "lib").is_symlink()


def test_copy_tree_replaces_symlink_with_file(tmp_path: Path):
    src = tmp_path / "src"
    _write(src / "resolv.conf", "nameserver 1.1.1.1\n")
    dst = tmp_path / "dst"
    dst.mkdir()
    target = _write(tmp_path / "host-resolv.conf", "untouched\n")
    os.symlink(target, dst / "resolv.conf")

    copy_tree(src, dst)

    assert not (dst / "resolv.conf").is_symlink()
    assert (dst / "resolv.conf").read_text() == "nameserver 1.1.1.1\n"
    assert target.read_text() == "untouched\n"


def test_copy_single_file_to_destination_path(tmp_path: Path):
    src = _write(tmp_path / "issue", "Welcome\n")
    dst = tmp_path / "root" / "etc" / "issue"

    copy_tree(src, dst)

    assert dst.read_text() == "Welcome\n"


def test_copy_tree_missing_source(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        copy_tree(tmp_path / "nope", tmp_path / "dst")


def test_copy_tree_dry_run(tmp_path: Path):
    src = tmp_path / "src"
    _write(src / "a", "a")
    copy_tree(src, tmp_path / "dst", dry_run=True)
    assert not (tmp_path / "dst").exists()


def test_symlinked_source_directory_is_copied_by_content(tmp_path: Path):
    _write(tmp_path / "data-v2" / "conf", "v2")
    os.symlink("data-v2", tmp_path / "data")
    dst = tmp_path / "root"
    _write(dst / "etc" / "passwd", "root:x:0:0\n")

    copy_tree(tmp_path / "data", dst)

    assert not dst.is_symlink()
    assert (dst / "conf").read_text() == "v2"
    assert (dst / "etc" / "passwd").read_text() == "root:x:0:0\n"


def test_merges_through_symlinked_destination_directory(tmp_path: Path):
    root = tmp_path.resolve() / "root"
    _write(root / "usr" / "lib" / "libc.so", "libc")
    os.symlink("usr/lib", root / "lib")
    src = tmp_path / "src"
    _write(src / "lib" / "new.so", "new")

    copy_tree(src, root, rootdir=root)

    assert os.readlink(root / "lib") == "usr/lib"
    assert (root / "usr" / "lib" / "new.so").read_text() == "new"
    assert (root / "lib" / "libc.so").read_text() == "libc"


def test_symlinked_destination_directory_must_stay_in_rootdir(tmp_path: Path):
    base = tmp_path.resolve()
    root = base / "root"
    host_lib = base / "host-lib"
    host_lib.mkdir()
    root.mkdir()
    os.symlink(host_lib, root / "lib")
    src = base / "src"
    _write(src / "lib" / "evil.so", "evil")

    with pytest.raises(PathEscape):
        copy_tree(src, root, rootdir=root)
    assert list(host_lib.iterdir()) == []


def test_source_link_does_not_replace_populated_directory(tmp_path: Path):
    src = tmp_path / "src"
    src.mkdir()
    os.symlink("usr/bin", src / "bin")
    dst = tmp_path / "dst"
    _write(dst / "bin" / "sh", "shell")

    with pytest.raises(IsADirectoryError):
        copy_tree(src, dst)
    assert (dst / "bin" / "sh").read_text() == "shell"


def test_source_link_replaces_empty_directory(tmp_path: Path):
    src = tmp_path / "src"
    src.mkdir()
    os.symlink("usr/bin", src / "bin")
    dst = tmp_path / "dst"
    (dst / "bin").mkdir(parents=True)

    copy_tree(src, dst)

    assert os.readlink(dst / "bin") == "usr/bin"


def test_existing_destination_directory_keeps_its_mode(tmp_path: Path):
    src = tmp_path / "src"
    _write(src / "etc" / "motd", "hi")
    (src / "etc").chmod(0o700)
    dst = tmp_path / "dst"
    (dst / "etc").mkdir(parents=True)
    (dst / "etc").chmod(0o755)

    copy_tree(src, dst)

    assert stat.S_IMODE((dst / "etc").stat().st_mode) == 0o755
    assert (dst / "etc" / "motd").read_text() == "hi"
