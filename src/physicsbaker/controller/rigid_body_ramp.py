"""
Rigid Body Ramp Interpolation
=============================
Emits per-frame rigid body and joint parameter keyframes for ramp records.

Every scaled quantity follows the same additive-proportional blend:

    value(f) = original + original * (ratio_target - 1) * ramp_ratio(f)

so a record at ratio 0 leaves the model untouched and at the plateau applies
the full adjustment. Rigid bodies that no record modifies get no keyframes at
all; the absence of keyframes is the "no change" signal for the simulator.
"""
from __future__ import annotations

import logging
from typing import List, Sequence

import numpy as np

from physicsbaker.controller.ramp import frame_range, is_ramping, ramp_ratio
from physicsbaker.model.keyframes import (
    JointKeyframe, PhysicsResetKeyframe, PhysicsResetType, RigidBodyKeyframe, Vec3,
)
from physicsbaker.model.motion import Motion
from physicsbaker.model.records import Adjustment, RampRecord, UnmodifiedAdjustment
from physicsbaker.model.rig import JointLink, RigidBody, RigModel

logger = logging.getLogger(__name__)


def _blend(original, target_ratio, ratio: float) -> np.ndarray:
    original = np.asarray(original, dtype=np.float64)
    return original + original * (np.asarray(target_ratio, dtype=np.float64) - 1.0) * ratio


def _as_vec3(values: np.ndarray) -> Vec3:
    x, y, z = values.tolist()
    return (x, y, z)


def rigid_body_keyframe(rigid_body: RigidBody, adjustment: Adjustment, f: float, ratio: float) -> RigidBodyKeyframe:
    size = _blend(rigid_body.size, adjustment.effective_size_ratio, ratio)
    mass = _blend(rigid_body.mass, adjustment.effective_mass_ratio, ratio)
    return RigidBodyKeyframe(
        frame=f,
        position=rigid_body.position,
        size=_as_vec3(size),
        mass=float(mass),
    )


def joint_keyframe(link: JointLink, record: RampRecord, f: float, ratio: float) -> JointKeyframe:
    # Unmodified or missing endpoints count as neutral
    neutral_a = UnmodifiedAdjustment(link.rigid_body_a.index)
    neutral_b = UnmodifiedAdjustment(link.rigid_body_b.index)
    adjustment_a = record.adjustment(link.rigid_body_a.index) or neutral_a
    adjustment_b = record.adjustment(link.rigid_body_b.index) or neutral_b

    avg_stiffness = float(np.mean([adjustment_a.effective_stiffness_ratio, adjustment_b.effective_stiffness_ratio]))
    avg_tension = float(np.mean([adjustment_a.effective_tension_ratio, adjustment_b.effective_tension_ratio]))

    joint = link.joint
    return JointKeyframe(
        frame=f,
        translation_limit_min=joint.translation_limit_min,
        translation_limit_max=joint.translation_limit_max,
        rotation_limit_min=_as_vec3(_blend(joint.rotation_limit_min, avg_stiffness, ratio)),
        rotation_limit_max=_as_vec3(_blend(joint.rotation_limit_max, avg_stiffness, ratio)),
        spring_constant_translation=_as_vec3(_blend(joint.spring_constant_translation, avg_stiffness, ratio)),
        spring_constant_rotation=_as_vec3(_blend(joint.spring_constant_rotation, avg_tension, ratio)),
    )


def interpolate_rigid_body_ramp(
    records: Sequence[RampRecord],
    model: RigModel,
    world_motion: Motion,
) -> Motion:
    """
    Builds the physics model motion for the ramp records.

    Args:
        records: Ramp records in application order.
        model: The simulated model (read only).
        world_motion: Physics world motion. A CONTINUE_FRAME reset is added at
                      every frame where a ramp is rising or falling, so an
                      active transition is never undone by a reset.

    Returns:
        Motion with rigid body and joint tracks.
    """
    for i, record in enumerate(records):
        record.validate(i)

    model_motion = Motion(name=f"{model.name}_physics")
    links: List[JointLink] = model.joint_links()

    logger.info(f"Interpolating {len(records)} rigid body ramp records...")

    for record in records:
        bounds = (record.start_frame, record.max_start_frame, record.max_end_frame, record.end_frame)

        modified_bodies = [
            (rb, record.adjustment(rb.index)) for rb in model.rigid_bodies if record.is_modified(rb.index)
        ]
        active_links = [
            link for link in links
            if record.is_modified(link.rigid_body_a.index) or record.is_modified(link.rigid_body_b.index)
        ]
        logger.debug(
            f"Ramp record {bounds}: {len(modified_bodies)} rigid bodies, {len(active_links)} joints."
        )

        for f in frame_range(record.start_frame, record.end_frame):
            # 1. Blend ratio
            ratio = ramp_ratio(f, *bounds)

            # 2. Keep the simulation running through the transition
            if is_ramping(f, *bounds):
                world_motion.physics_reset_track.append(
                    PhysicsResetKeyframe(f, PhysicsResetType.CONTINUE_FRAME)
                )

            # 3. Rigid bodies
            for rigid_body, adjustment in modified_bodies:
                model_motion.append_rigid_body_frame(
                    rigid_body.name, rigid_body_keyframe(rigid_body, adjustment, f, ratio)
                )

            # 4. Joints
            for link in active_links:
                model_motion.append_joint_frame(link.joint.name, joint_keyframe(link, record, f, ratio))

    return model_motion
