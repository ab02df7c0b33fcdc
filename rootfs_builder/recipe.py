from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import yaml

from .actions import Action, action_from_dict
from .errors import ConfigError


@dataclass(frozen=True)
class Recipe:
    path: Path
    architecture: Optional[str]
    actions: List[Action]

    @property
    def recipedir(self) -> str:
        return str(self.path.resolve().parent)


def load_recipe(path: str) -> Recipe:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError(f"recipe must be YAML: {path}")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")

    entries = raw.get("actions")
    if not isinstance(entries, list) or not entries:
        raise ConfigError(f"{path}: 'actions' must be a non-empty list")

    actions: List[Action] = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigError(f"{path}: action #{i} must be a mapping/object")
        actions.append(action_from_dict(entry))

    arch = raw.get("architecture")
    return Recipe(path=p, architecture=str(arch) if arch is not None else None, actions=actions)
