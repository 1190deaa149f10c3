"""
Physics World Timeline
======================
Converts time-ranged world records into per-frame keyframe streams.

Reset semantics for every record:
* ``CONTINUE_FRAME`` at the record's first frame, so the simulation keeps the
  momentum of the previous record instead of snapping to a rest pose.
* ``NONE`` on every other frame of the range.
* ``NONE`` one frame before the range (only when the range does not start at
  frame 0), because playback looks one keyframe ahead and would otherwise
  trigger the reset a frame early.
* ``NONE`` one frame after the range, which stops the simulation from
  evolving past the authored interval.

Records are not merged. Overlapping records add keyframes at the same frames
and the later record wins.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from physicsbaker.controller.ramp import frame_range
from physicsbaker.model.keyframes import (
    FixedTimeStepKeyframe, GravityKeyframe, MaxSubStepsKeyframe,
    PhysicsResetKeyframe, PhysicsResetType, WindKeyframe,
)
from physicsbaker.model.motion import Motion
from physicsbaker.model.records import TimeRange, WindRecord, WorldPhysicsRecord

logger = logging.getLogger(__name__)


def _append_reset_frames(motion: Motion, record: TimeRange) -> None:
    for f in frame_range(record.start_frame, record.end_frame):
        reset_type = PhysicsResetType.CONTINUE_FRAME if f == record.start_frame else PhysicsResetType.NONE
        motion.physics_reset_track.append(PhysicsResetKeyframe(f, reset_type))


def _append_reset_boundaries(motion: Motion, record: TimeRange) -> None:
    if record.start_frame > 0:
        motion.physics_reset_track.append(
            PhysicsResetKeyframe(record.start_frame - 1, PhysicsResetType.NONE)
        )
    motion.physics_reset_track.append(
        PhysicsResetKeyframe(record.end_frame + 1, PhysicsResetType.NONE)
    )


def build_physics_world_timeline(
    records: Sequence[WorldPhysicsRecord],
    motion: Optional[Motion] = None,
) -> Motion:
    """
    Emits gravity, max-sub-steps, fixed-time-step and reset-state keyframes
    for every frame of every record.

    Args:
        records: World records in the order they should be applied.
        motion: Motion to append to. A new physics world motion is created
                when omitted.

    Returns:
        The physics world motion.
    """
    for i, record in enumerate(records):
        record.validate(i)

    motion = motion if motion is not None else Motion(name="physics_world")
    logger.info(f"Building physics world timeline from {len(records)} records...")

    for record in records:
        for f in frame_range(record.start_frame, record.end_frame):
            motion.gravity_track.append(GravityKeyframe(f, (0.0, float(record.gravity), 0.0)))
            motion.max_sub_steps_track.append(MaxSubStepsKeyframe(f, int(record.max_sub_steps)))
            motion.fixed_time_step_track.append(FixedTimeStepKeyframe(f, float(record.fixed_time_step)))

        _append_reset_frames(motion, record)
        _append_reset_boundaries(motion, record)

        logger.debug(
            f"World record {record.start_frame}-{record.end_frame}: gravity={record.gravity}, "
            f"max_sub_steps={record.max_sub_steps}, fixed_time_step={record.fixed_time_step}"
        )

    return motion


def build_wind_timeline(
    records: Sequence[WindRecord],
    motion: Optional[Motion] = None,
) -> Motion:
    """Same per-frame and reset rules as the world timeline, for wind settings."""
    for i, record in enumerate(records):
        record.validate(i)

    motion = motion if motion is not None else Motion(name="physics_wind")
    logger.info(f"Building wind timeline from {len(records)} records...")

    for record in records:
        for f in frame_range(record.start_frame, record.end_frame):
            motion.wind_track.append(WindKeyframe(
                frame=f,
                enabled=record.enabled,
                direction=record.direction,
                speed=record.speed,
                randomness=record.randomness,
                turbulence_freq_hz=record.turbulence_freq_hz,
                drag_coeff=record.drag_coeff,
                lift_coeff=record.lift_coeff,
            ))

        _append_reset_frames(motion, record)
        _append_reset_boundaries(motion, record)

    return motion
