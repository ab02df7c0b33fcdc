from __future__ import annotations


class BuildError(RuntimeError):
    """Base class for failures raised while building a rootfs."""


class ConfigError(BuildError, ValueError):
    """A recipe or action violates one of its invariants."""


class PathEscape(ConfigError):
    """A destination resolves outside the target root filesystem."""

    def __init__(self, rootdir: str, dest: str, resolved: str) -> None:
        super().__init__(f"Path escapes rootdir {rootdir}: {dest!r} -> {resolved}")
        self.rootdir = rootdir
        self.dest = dest
        self.resolved = resolved


class OriginNotFound(BuildError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Origin not found: {name!r}")
        self.name = name


class CommandExecutionError(BuildError):
    """A command exited non-zero. Carries the captured output."""

    def __init__(self, label: str, returncode: int, output: str) -> None:
        msg = f"[{label}] command failed ({returncode})"
        if output.strip():
            msg += f"\n{output.rstrip()}"
        super().__init__(msg)
        self.label = label
        self.returncode = returncode
        self.output = output
