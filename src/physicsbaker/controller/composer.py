"""
Output Motion Composer
======================
Merges original (authored) and baked (simulated) bone keyframes for one
output selection into a single logical motion.

* Selected bones take the baked sample at every frame of the range. On
  physics bones the sample is written with physics disabled, and the baked
  sample of the following frame is written with physics re-enabled so
  playback resumes normal simulation right after the baked interval.
* Other bones keep only their authored keyframes, except bones driven (as
  effector) by a selected bone, whose samples would fight their driver.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Dict, Set

from physicsbaker.controller.ramp import frame_range
from physicsbaker.errors import NoBakeableKeyframesError, NoOutputBonesError
from physicsbaker.model.motion import Motion
from physicsbaker.model.records import OutputSelection
from physicsbaker.model.rig import RigModel

logger = logging.getLogger(__name__)


@dataclass
class ComposedMotion:
    """Merged motion plus the number of bone keyframes at each frame."""
    motion: Motion
    key_counts: Dict[float, int]

    @property
    def total_keyframes(self) -> int:
        return sum(self.key_counts.values())


def suppressed_bone_names(model: RigModel, selection: OutputSelection) -> Set[str]:
    """Bones whose rotation/translation is driven by a selected bone."""
    suppressed = set()
    for bone in model.bones:
        driver = model.effector_parent(bone)
        if driver is not None and selection.is_selected(driver.name):
            suppressed.add(bone.name)
    return suppressed


def count_keyframes_per_frame(motion: Motion) -> Dict[float, int]:
    counts: Dict[float, int] = defaultdict(int)
    for track in motion.bone_tracks.values():
        for f in track.frames():
            counts[f] += 1
    return dict(sorted(counts.items()))


def compose_output_motion(
    original: Motion,
    baked: Motion,
    model: RigModel,
    selection: OutputSelection,
    selection_index: int = 0,
) -> ComposedMotion:
    """
    Args:
        original: Authored motion.
        baked: Simulated motion (physics results recorded as bone keyframes).
        model: Original model, for physics flags and effector links.
        selection: Time range and bones to bake.
        selection_index: Position of the selection, used in error messages.

    Raises:
        NoOutputBonesError: The selection has no bones.
        NoBakeableKeyframesError: Nothing was written for the selection.
    """
    selection.validate(selection_index)
    if not selection.bone_names:
        raise NoOutputBonesError(selection_index)

    merged = Motion(name=f"{model.name}_baked")
    merged.morph_tracks = original.copy_morph_tracks()
    suppressed = suppressed_bone_names(model, selection)

    bone_names = [name for name in baked.bone_tracks if model.has_bone(name)]
    logger.info(
        f"Composing output [No.{selection_index + 1:02d}] frames "
        f"{selection.start_frame}-{selection.end_frame}: {len(selection.bone_names)} selected bones."
    )

    for f in frame_range(selection.start_frame, selection.end_frame):
        for bone_name in bone_names:
            bone = model.bone_by_name(bone_name)

            if selection.is_selected(bone_name):
                baked_track = baked.bone_tracks[bone_name]
                bf = baked_track.get(f)
                if bf is None:
                    continue

                if not model.has_physics(bone):
                    merged.append_bone_frame(bone_name, replace(bf, frame=f))
                    continue

                # The baked pose is authoritative, do not let the simulation move it
                merged.append_bone_frame(bone_name, replace(bf, frame=f, physics_disabled=True))

                next_bf = baked_track.get(f + 1)
                if next_bf is not None:
                    merged.append_bone_frame(bone_name, replace(next_bf, frame=f + 1, physics_disabled=False))
                continue

            if bone_name in suppressed:
                continue

            authored = original.bone_track(bone_name).get(f)
            if authored is not None:
                merged.append_bone_frame(bone_name, authored)

    key_counts = count_keyframes_per_frame(merged)
    composed = ComposedMotion(motion=merged, key_counts=key_counts)
    if composed.total_keyframes == 0:
        raise NoBakeableKeyframesError(selection_index, selection.start_frame, selection.end_frame)

    logger.info(f"Composed {composed.total_keyframes} bone keyframes over {len(key_counts)} frames.")
    return composed
