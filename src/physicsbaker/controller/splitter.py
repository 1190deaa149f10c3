"""
Motion File Splitter
====================
Splits a merged motion into files that respect the format's bone keyframe
ceiling.

Frames are never divided between files: all bone keyframes of one frame land
in the same output, and outputs are produced in temporal order. Each output
path embeds the zero-padded frame at which it starts, so the files sort in
playback order. Morph tracks are not frame-bounded and are copied into every
output so each file plays on its own.
"""
from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional

from physicsbaker import config
from physicsbaker.model.keyframes import MorphKeyframe, Track
from physicsbaker.model.motion import Motion

logger = logging.getLogger(__name__)


def split_output_path(path_template: str, frame: float) -> str:
    """``out/motion.h5`` at frame 120 -> ``out/motion_0120.h5``"""
    stem, ext = os.path.splitext(path_template)
    return f"{stem}_{int(frame):04d}{ext}"


def _new_output(merged: Motion, path_template: str, frame: float,
                morph_tracks: Dict[str, Track[MorphKeyframe]]) -> Motion:
    return Motion(
        name=merged.name,
        path=split_output_path(path_template, frame),
        morph_tracks={name: track.copy() for name, track in morph_tracks.items()},
    )


def split_motion(
    merged: Motion,
    key_counts: Dict[float, int],
    path_template: str,
    max_frames: int = config.MAX_BONE_FRAMES,
    morph_tracks: Optional[Dict[str, Track[MorphKeyframe]]] = None,
) -> List[Motion]:
    """
    Args:
        merged: Motion produced by the composer.
        key_counts: Bone keyframes per frame.
        path_template: Base output path; each output embeds its start frame.
        max_frames: Bone keyframe ceiling of one output file.
        morph_tracks: Morph tracks replicated into every output (defaults to
                      the merged motion's own morph tracks).

    Returns:
        Output motions in temporal order. Their bone tracks, concatenated,
        hold exactly the keyframes of ``merged``.
    """
    if morph_tracks is None:
        morph_tracks = merged.morph_tracks

    frames = sorted(set(key_counts) | {f for t in merged.bone_tracks.values() for f in t.frames()})
    first_frame = frames[0] if frames else 0.0

    motions: List[Motion] = []
    motion = _new_output(merged, path_template, first_frame, morph_tracks)

    frame_count = 0
    log_frame_count = 0

    for i, f in enumerate(frames):
        # Look ahead one frame: switch files before the next frame would overflow
        if i < len(frames) - 1 and frame_count > 0:
            next_count = key_counts.get(frames[i + 1], 0)
            if frame_count + next_count > max_frames:
                logger.info(
                    f"Keyframe count exceeds the limit, switching output [{int(f):04d}F]: "
                    f"{frame_count} -> {max_frames}"
                )
                motions.append(motion)
                motion = _new_output(merged, path_template, f, morph_tracks)
                frame_count = 0
                log_frame_count = 0

        for bone_name, track in merged.bone_tracks.items():
            bf = track.get(f)
            if bf is not None:
                motion.append_bone_frame(bone_name, bf)

        frame_count += key_counts.get(f, 0)

        if frame_count // config.LOG_INTERVAL > log_frame_count // config.LOG_INTERVAL:
            logger.info(f"- Splitting... [{int(f):04d}F] {frame_count} keyframes")
            log_frame_count = frame_count

    motions.append(motion)
    logger.info(f"Split into {len(motions)} motion file(s).")
    return motions
