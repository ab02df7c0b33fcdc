from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .actions import Action, PostMachine, PreMachine, is_postprocess
from .context import BuildContext
from .logging_utils import action_context
from .machine import LocalMachine, Machine

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Labels of the actions that completed each phase, in order."""

    verified: List[str] = field(default_factory=list)
    pre_machine: List[str] = field(default_factory=list)
    ran: List[str] = field(default_factory=list)
    post_machine: List[str] = field(default_factory=list)
    postprocessed: List[str] = field(default_factory=list)


def _phase(phase: str, action: Action, fn: Callable[[], None]) -> None:
    try:
        with action_context(action.label):
            fn()
    except Exception as e:
        logger.error("Action '%s' failed in %s: %s", action.label, phase, e)
        raise


def run_recipe(
    *,
    context: BuildContext,
    actions: Sequence[Action],
    machine: Optional[Machine] = None,
    args: Optional[List[str]] = None,
) -> PipelineResult:
    """Run every action through its lifecycle, one phase at a time.

    All actions are verified before anything touches the filesystem, and the
    first failure in any phase aborts the build.
    """

    machine = machine if machine is not None else LocalMachine()
    args = args if args is not None else []
    result = PipelineResult()

    for a in actions:
        _phase("verify", a, lambda: a.verify(context))
        result.verified.append(a.label)

    for a in actions:
        if isinstance(a, PreMachine):
            _phase("pre_machine", a, lambda: a.pre_machine(context, machine, args))
            result.pre_machine.append(a.label)

    if not context.dry_run:
        Path(context.rootdir).mkdir(parents=True, exist_ok=True)
        Path(context.artifactdir).mkdir(parents=True, exist_ok=True)

    main_actions = [a for a in actions if not is_postprocess(a)]
    post_actions = [a for a in actions if is_postprocess(a)]

    for a in main_actions:
        logger.info("==== %s ====", a.label)
        _phase("run", a, lambda: a.run(context))
        result.ran.append(a.label)

    for a in main_actions:
        if isinstance(a, PostMachine):
            _phase("post_machine", a, lambda: a.post_machine(context))
            result.post_machine.append(a.label)

    for a in post_actions:
        logger.info("==== %s (postprocess) ====", a.label)
        _phase("run", a, lambda: a.run(context))
        if isinstance(a, PostMachine):
            _phase("post_machine", a, lambda: a.post_machine(context))
        result.postprocessed.append(a.label)

    logger.info("Build finished")
    return result
