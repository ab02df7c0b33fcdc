from __future__ import annotations

import dataclasses
from typing import Any, Dict, Mapping, Type

from ..errors import ConfigError
from .base import Action, ActionMeta, PostMachine, PreMachine, is_postprocess
from .overlay import OverlayAction
from .run import RunAction

ACTION_KINDS: Dict[str, Type[Any]] = {
    OverlayAction.kind: OverlayAction,
    RunAction.kind: RunAction,
}

_META_KEYS = ("description", "label")


def action_from_dict(raw: Mapping[str, Any]) -> Action:
    """Build an action from one recipe entry (``{"action": kind, ...}``)."""

    data = dict(raw)
    kind = data.pop("action", None)
    if not kind:
        raise ConfigError(f"Recipe entry has no 'action' key: {dict(raw)}")
    cls = ACTION_KINDS.get(str(kind))
    if cls is None:
        raise ConfigError(f"Unknown action kind {kind!r} (known: {', '.join(sorted(ACTION_KINDS))})")

    meta = ActionMeta(**{k: str(data.pop(k)) for k in _META_KEYS if data.get(k) is not None})

    fields = {f.name: f for f in dataclasses.fields(cls) if f.name != "meta"}
    unknown = sorted(set(data) - set(fields))
    if unknown:
        raise ConfigError(f"{kind}: unknown properties {unknown}")
    for name, value in data.items():
        expected = type(fields[name].default)
        if not isinstance(value, expected):
            raise ConfigError(f"{kind}: '{name}' must be {expected.__name__}, got {value!r}")

    return cls(meta=meta, **data)


__all__ = [
    "ACTION_KINDS",
    "Action",
    "ActionMeta",
    "OverlayAction",
    "PostMachine",
    "PreMachine",
    "RunAction",
    "action_from_dict",
    "is_postprocess",
]
