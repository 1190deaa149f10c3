"""
Command-line interface.

    python -m physicsbaker records.json --baked-motion capture.h5

Without ``--baked-motion`` only the physics motions (world, wind, rigid body
ramps) that drive the simulator are written. With it, the output selections
are composed and split into distributable motion files as well.
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

from physicsbaker import __version__, config
from physicsbaker.controller.bake import (
    BakeService, create_output_model_path, create_output_motion_path,
)
from physicsbaker.controller.workers import load_model_variants
from physicsbaker.errors import BakeError
from physicsbaker.logging_config import setup_logging
from physicsbaker.model.io import IOManager

logger = logging.getLogger("physicsbaker.cli")


def _suffixed(path: str, suffix: str) -> str:
    stem, ext = os.path.splitext(path)
    return f"{stem}_{suffix}{ext}"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="physicsbaker",
        description="Bake physics-driven animation into distributable motion files.",
    )
    ap.add_argument("records", help="bake set JSON file")
    ap.add_argument("--set", dest="set_index", type=int, default=0, help="bake set to run (default: 0)")
    ap.add_argument("--baked-motion", default=None, help="simulated motion (.h5) recorded from the physics run")
    ap.add_argument("-o", "--output", default=None,
                    help="output motion path (default: <motion>_BB_<model>_BB.h5 next to the original motion)")
    ap.add_argument("--max-frames", type=int, default=config.MAX_BONE_FRAMES,
                    help="bone keyframe ceiling per output file")
    ap.add_argument("--include-children", action="store_true",
                    help="selecting a bone also bakes all of its descendants")
    ap.add_argument("--log-file", default=None, help="also write logs to this file")
    ap.add_argument("--append-log", action="store_true", help="append to --log-file instead of overwriting it")
    ap.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"],
                    help="logging level (default: info)")
    ap.add_argument("-v", "--verbose", action="store_true", help="same as --log-level debug")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("debug" if args.verbose else args.log_level, args.log_file, append=args.append_log)

    try:
        bake_sets = IOManager.load_bake_sets(args.records)
        if not 0 <= args.set_index < len(bake_sets):
            logger.error(f"Bake set {args.set_index} not found ({len(bake_sets)} in file).")
            return 2

        bake_set = bake_sets[args.set_index]
        bake_set.validate()

        # 1. Models and original motion
        original_model, baked_model = load_model_variants(bake_set.original_model_path)
        original_motion = IOManager.load_motion(bake_set.original_motion_path)

        baked_model_path = create_output_model_path(bake_set.original_model_path)
        IOManager.save_model(baked_model, baked_model_path)
        output_path = args.output or create_output_motion_path(bake_set.original_motion_path, baked_model_path)

        # 2. Physics motions for the simulator
        service = BakeService(
            bake_set, original_model, max_frames=args.max_frames, include_children=args.include_children,
        )
        physics = service.build_physics_motions()
        IOManager.save_motion(physics.world, _suffixed(output_path, "world"))
        IOManager.save_motion(physics.wind, _suffixed(output_path, "wind"))
        IOManager.save_motion(physics.model, _suffixed(output_path, "physics"))

        if not args.baked_motion:
            logger.info("No baked motion given, physics motions written.")
            return 0

        # 3. Outputs
        baked_motion = IOManager.load_motion(args.baked_motion)
        result = service.bake_outputs(original_motion, baked_motion, output_path)
        for motion in result.motions:
            IOManager.save_motion(motion)

    except BakeError as e:
        logger.error(str(e))
        return 1

    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
