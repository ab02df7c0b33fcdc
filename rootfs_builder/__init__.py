"""Build target root filesystems from declarative recipes.

A recipe is an ordered list of actions (overlay files, run commands) that
all operate on one shared build context:
- Every action is verified before anything is written
- Writes are confined to the target root filesystem
- Commands run on the host or chrooted into the target
- Postprocess actions run last, against the artifact directory only
"""

__all__ = []
