from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from ..errors import CommandExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        return self.stdout + self.stderr


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def is_root() -> bool:
    return os.geteuid() == 0


def privileged(argv: Sequence[str]) -> list[str]:
    """Prefix ``argv`` with sudo unless we already run as root."""

    if is_root():
        return list(argv)
    return ["sudo", "--preserve-env", *argv]


def _log_output(label: str, text: str) -> None:
    for line in text.splitlines():
        logger.info("%s | %s", label, line)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    unset: Iterable[str] = (),
    cwd: str | None = None,
    input_text: str | None = None,
    label: str | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - ``env`` is layered over the current environment; keys in ``unset`` are
      removed from the result.
    - With a ``label`` the output is logged line by line at INFO, otherwise
      at DEBUG.
    - A non-zero exit raises CommandExecutionError when ``check`` is set.
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    full_env = dict(os.environ, **(env or {}))
    for key in unset:
        full_env.pop(key, None)

    p = subprocess.run(
        argv_list,
        input=input_text,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=cwd,
        env=full_env,
    )

    if label:
        _log_output(label, p.stdout)
        _log_output(label, p.stderr)
    else:
        if p.stdout:
            logger.debug("STDOUT %s", p.stdout.strip())
        if p.stderr:
            logger.debug("STDERR %s", p.stderr.strip())

    if check and p.returncode != 0:
        raise CommandExecutionError(label or _fmt_argv(argv_list), p.returncode, p.stdout + p.stderr)

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)
