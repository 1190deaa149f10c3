"""
Bake Service
============
Public entry points of the bake engine and the orchestration of one bake set.

Why is this file needed?
------------------------
1. Entry points: ``build_physics_world_timeline``,
   ``interpolate_rigid_body_ramp`` and ``compose_and_split_output`` are the
   engine's whole public surface; hosts (CLI, workers) import them from here.
2. Error aggregation: A bake set holds several output selections. A failing
   selection must not abort its siblings, so ``BakeService.bake_outputs``
   collects the errors and keeps going.

Note: This module is pure Python/NumPy and does not import PySide6.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional

from physicsbaker import config
from physicsbaker.controller.composer import compose_output_motion
from physicsbaker.controller.rigid_body_ramp import interpolate_rigid_body_ramp
from physicsbaker.controller.splitter import split_motion
from physicsbaker.controller.world_timeline import build_physics_world_timeline, build_wind_timeline
from physicsbaker.errors import BakeError, NoBakeableKeyframesError, NoOutputBonesError
from physicsbaker.model.motion import Motion
from physicsbaker.model.records import BakeSet, OutputSelection
from physicsbaker.model.rig import RigModel
from physicsbaker.model.tree import BoneTree

logger = logging.getLogger(__name__)

__all__ = [
    "build_physics_world_timeline",
    "interpolate_rigid_body_ramp",
    "compose_and_split_output",
    "create_output_motion_path",
    "create_output_model_path",
    "selection_output_path",
    "expand_selection",
    "PhysicsMotions",
    "OutputResult",
    "BakeService",
]

ProgressCallback = Callable[[int, str], None]


# --- OUTPUT PATHS ---

def create_output_model_path(model_path: str) -> str:
    stem, ext = os.path.splitext(model_path)
    return f"{stem}_{config.OUTPUT_PREFIX}{ext}"


def create_output_motion_path(motion_path: str, baked_model_path: str) -> str:
    stem, ext = os.path.splitext(motion_path)
    model_stem = os.path.splitext(os.path.basename(baked_model_path))[0]
    return f"{stem}_{config.OUTPUT_PREFIX}_{model_stem}{ext}"


def selection_output_path(output_path: str, selection_index: int) -> str:
    stem, ext = os.path.splitext(output_path)
    return f"{stem}_{selection_index:02d}{ext}"


# --- SELECTIONS ---

def expand_selection(tree: BoneTree, selection: OutputSelection) -> OutputSelection:
    """Adds every descendant of the selected bones, parents first."""
    names = [
        name
        for bone_name in selection.bone_names
        for name in (tree.subtree_names(bone_name) or [bone_name])
    ]
    return replace(selection, bone_names=tuple(names))


# --- ENTRY POINTS ---

def compose_and_split_output(
    original: Motion,
    baked: Motion,
    model: RigModel,
    selection: OutputSelection,
    max_frames: int = config.MAX_BONE_FRAMES,
    path_template: str = "",
    selection_index: int = 0,
) -> List[Motion]:
    """
    Merges original and baked keyframes for one selection and splits the
    result into files of at most ``max_frames`` bone keyframes (frames are
    never divided between files). Nothing is written to disk.

    Raises:
        NoOutputBonesError: The selection has no bones.
        NoBakeableKeyframesError: The selection produced no keyframes.
    """
    composed = compose_output_motion(original, baked, model, selection, selection_index)
    return split_motion(composed.motion, composed.key_counts, path_template, max_frames)


@dataclass
class PhysicsMotions:
    """Motions that drive the simulator during a bake."""
    world: Motion
    wind: Motion
    model: Motion


@dataclass
class OutputResult:
    motions: List[Motion] = field(default_factory=list)
    skipped: List[NoOutputBonesError] = field(default_factory=list)
    errors: List[BakeError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class BakeService:
    """Runs the engine over every record of one bake set."""

    def __init__(
        self,
        bake_set: BakeSet,
        model: RigModel,
        max_frames: int = config.MAX_BONE_FRAMES,
        include_children: bool = False,
    ):
        self.bake_set = bake_set
        self.model = model
        self.max_frames = max_frames
        # Selecting a bone also selects its whole subtree
        self.tree = BoneTree.from_model(model) if include_children else None

    def build_physics_motions(self) -> PhysicsMotions:
        world = build_physics_world_timeline(self.bake_set.world_records)
        wind = build_wind_timeline(self.bake_set.wind_records)
        model_motion = interpolate_rigid_body_ramp(self.bake_set.ramp_records, self.model, world)
        return PhysicsMotions(world=world, wind=wind, model=model_motion)

    def bake_outputs(
        self,
        original: Motion,
        baked: Motion,
        output_path: str,
        progress: Optional[ProgressCallback] = None,
    ) -> OutputResult:
        """
        Composes and splits every output selection. Selections without bones
        are skipped with a warning; selections without keyframes are reported
        in ``errors``. Other selections are processed regardless.
        """
        result = OutputResult()
        selections = self.bake_set.output_selections
        total = max(len(selections), 1)

        for i, selection in enumerate(selections):
            if self.tree is not None:
                selection = expand_selection(self.tree, selection)

            if progress:
                progress(int(100 * i / total), f"Baking output {i + 1}/{len(selections)}...")

            try:
                motions = compose_and_split_output(
                    original, baked, self.model, selection,
                    self.max_frames, selection_output_path(output_path, i), i,
                )
            except NoOutputBonesError as e:
                logger.warning(f"Skipping output selection: {e}")
                result.skipped.append(e)
                continue
            except NoBakeableKeyframesError as e:
                logger.error(str(e))
                result.errors.append(e)
                continue

            result.motions.extend(motions)

        if progress:
            progress(100, "Bake finished.")

        logger.info(
            f"Bake outputs: {len(result.motions)} motions, "
            f"{len(result.skipped)} skipped, {len(result.errors)} errors."
        )
        return result
