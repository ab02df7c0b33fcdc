from __future__ import annotations

import argparse
import logging
import os
from typing import Optional

from .context import BuildContext
from .errors import BuildError
from .logging_utils import build_log_path, configure_logging
from .machine import LocalMachine
from .pipeline import PipelineResult, run_recipe
from .recipe import load_recipe

logger = logging.getLogger(__name__)


DEFAULT_ARTIFACTDIR = "."


def run(
    *,
    recipe_path: str,
    artifactdir: str = DEFAULT_ARTIFACTDIR,
    rootdir: Optional[str] = None,
    image: Optional[str] = None,
    image_mnt_dir: Optional[str] = None,
    dry_run: bool = False,
) -> PipelineResult:
    """Load a recipe and build it into ``rootdir``."""

    recipe = load_recipe(recipe_path)
    context = BuildContext(
        rootdir=rootdir or os.path.join(artifactdir, "root"),
        artifactdir=artifactdir,
        recipedir=recipe.recipedir,
        image=image,
        image_mnt_dir=image_mnt_dir,
        dry_run=dry_run,
    )
    logger.info(
        "Building %s (architecture=%s) into %s",
        recipe.path,
        recipe.architecture or "unset",
        context.rootdir,
    )
    return run_recipe(context=context, actions=recipe.actions, machine=LocalMachine())


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="rootfs-build")
    p.add_argument("recipe", help="Path to the YAML recipe")
    p.add_argument("--artifactdir", default=DEFAULT_ARTIFACTDIR, help="Directory for build artifacts")
    p.add_argument("--rootdir", default=None, help="Target filesystem (default: <artifactdir>/root)")
    p.add_argument("--image", default=None, help="Image file exported to commands as $IMAGE")
    p.add_argument("--image-mnt-dir", default=None, help="Image mount point exported as $IMAGEMNTDIR")
    p.add_argument("--log", default=None, help="Path to build log (default: <artifactdir>/rootfs-build.log)")
    p.add_argument("--dry-run", action="store_true", help="Log commands and copies without executing them")
    p.add_argument("--verbose", action="store_true")

    args = p.parse_args(argv)

    configure_logging(
        log_path=args.log or build_log_path(args.artifactdir),
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    try:
        run(
            recipe_path=args.recipe,
            artifactdir=args.artifactdir,
            rootdir=args.rootdir,
            image=args.image,
            image_mnt_dir=args.image_mnt_dir,
            dry_run=bool(args.dry_run),
        )
    except (BuildError, OSError) as e:
        logger.error("Build failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
