from __future__ import annotations

import os
from pathlib import Path

from ..errors import PathEscape


def restricted_path(rootdir: str | Path, dest: str | Path = "") -> Path:
    """Resolve ``dest`` inside ``rootdir``.

    ``dest`` is always taken relative to the root, even when it is absolute
    ("/etc" means "<rootdir>/etc"). The joined path is resolved fully
    (symlinks followed, ".." collapsed) before it is compared, so neither
    traversal segments nor links pointing out of the tree can escape it.
    """
    root = Path(rootdir).resolve()
    rel = str(dest).lstrip("/")
    if not rel:
        return root

    candidate = (root / rel).resolve()
    if candidate != root and root not in candidate.parents:
        raise PathEscape(str(root), str(dest), str(candidate))
    return candidate


def clean_path_at(path: str, base: str | Path) -> str:
    """Make ``path`` absolute relative to ``base`` and normalize it."""
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(str(base), path))
