from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Protocol, runtime_checkable

from ..context import BuildContext
from ..machine import Machine


@dataclass(frozen=True)
class ActionMeta:
    """Fields every action kind carries, whatever its kind."""

    description: str = ""
    label: str = ""


class Action(Protocol):
    """A single build step.

    ``verify`` and ``run`` are mandatory. The optional phases are the
    :class:`PreMachine` and :class:`PostMachine` capabilities; the runner
    checks for them with ``isinstance`` and skips actions without them.
    """

    kind: str
    meta: ActionMeta

    @property
    def label(self) -> str:
        ...

    def verify(self, context: BuildContext) -> None:
        ...

    def run(self, context: BuildContext) -> None:
        ...


@runtime_checkable
class PreMachine(Protocol):
    def pre_machine(self, context: BuildContext, machine: Machine, args: List[str]) -> None:
        ...


@runtime_checkable
class PostMachine(Protocol):
    def post_machine(self, context: BuildContext) -> None:
        ...


def is_postprocess(action: Any) -> bool:
    return bool(getattr(action, "postprocess", False))
