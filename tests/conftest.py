from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest

from rootfs_builder.context import BuildContext
from rootfs_builder.lib import command


class FakeRun:
    """Stands in for subprocess.run and records every call."""

    def __init__(self) -> None:
        self.calls: List[tuple[list[str], dict]] = []
        self.fail_when: Optional[Callable[[Sequence[str]], bool]] = None
        self.stdout = ""

    def __call__(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append((argv, kwargs))
        rc = 1 if self.fail_when is not None and self.fail_when(argv) else 0
        return subprocess.CompletedProcess(argv, rc, stdout=self.stdout, stderr="boom\n" if rc else "")

    @property
    def argvs(self) -> List[list[str]]:
        return [argv for argv, _ in self.calls]


@pytest.fixture
def fake_run(monkeypatch: pytest.MonkeyPatch) -> FakeRun:
    fake = FakeRun()
    monkeypatch.setattr(command.subprocess, "run", fake)
    monkeypatch.setattr(command, "is_root", lambda: True)
    return fake


@pytest.fixture
def build_dirs(tmp_path: Path) -> dict:
    base = tmp_path.resolve()
    dirs = {name: base / name for name in ("root", "artifacts", "recipe")}
    for d in dirs.values():
        d.mkdir()
    return dirs


@pytest.fixture
def context(build_dirs: dict) -> BuildContext:
    return BuildContext(
        rootdir=str(build_dirs["root"]),
        artifactdir=str(build_dirs["artifacts"]),
        recipedir=str(build_dirs["recipe"]),
    )
