"""
Motion (Data Model)
===================
A named bundle of tracks representing one playable animation file.

A motion carries pose tracks (bones, morphs), physics model tracks (rigid
bodies, joints) and the world tracks that drive the simulation (gravity,
sub-steps, time-step, reset state, wind). Which of them are populated depends
on the role of the motion:

* original / baked motions: bone and morph tracks,
* physics world motion: world tracks,
* physics model motion: rigid body and joint tracks.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict

from physicsbaker.model.keyframes import (
    BoneKeyframe, FixedTimeStepKeyframe, GravityKeyframe, JointKeyframe,
    MaxSubStepsKeyframe, MorphKeyframe, PhysicsResetKeyframe, RigidBodyKeyframe,
    Track, WindKeyframe,
)

logger = logging.getLogger(__name__)


def _named_track(tracks: Dict[str, Track], name: str) -> Track:
    track = tracks.get(name)
    if track is None:
        track = Track(name)
        tracks[name] = track
    return track


@dataclass
class Motion:
    name: str = ""
    path: str = ""

    bone_tracks: Dict[str, Track[BoneKeyframe]] = field(default_factory=dict)
    morph_tracks: Dict[str, Track[MorphKeyframe]] = field(default_factory=dict)
    rigid_body_tracks: Dict[str, Track[RigidBodyKeyframe]] = field(default_factory=dict)
    joint_tracks: Dict[str, Track[JointKeyframe]] = field(default_factory=dict)

    gravity_track: Track[GravityKeyframe] = field(default_factory=lambda: Track("gravity"))
    max_sub_steps_track: Track[MaxSubStepsKeyframe] = field(default_factory=lambda: Track("max_sub_steps"))
    fixed_time_step_track: Track[FixedTimeStepKeyframe] = field(default_factory=lambda: Track("fixed_time_step"))
    physics_reset_track: Track[PhysicsResetKeyframe] = field(default_factory=lambda: Track("physics_reset"))
    wind_track: Track[WindKeyframe] = field(default_factory=lambda: Track("wind"))

    # --- Appenders ---

    def append_bone_frame(self, bone_name: str, keyframe: BoneKeyframe) -> None:
        _named_track(self.bone_tracks, bone_name).append(keyframe)

    def append_morph_frame(self, morph_name: str, keyframe: MorphKeyframe) -> None:
        _named_track(self.morph_tracks, morph_name).append(keyframe)

    def append_rigid_body_frame(self, rigid_body_name: str, keyframe: RigidBodyKeyframe) -> None:
        _named_track(self.rigid_body_tracks, rigid_body_name).append(keyframe)

    def append_joint_frame(self, joint_name: str, keyframe: JointKeyframe) -> None:
        _named_track(self.joint_tracks, joint_name).append(keyframe)

    # --- Queries ---

    def bone_track(self, bone_name: str) -> Track[BoneKeyframe]:
        """Returns the bone track, or an empty detached track if absent."""
        return self.bone_tracks.get(bone_name) or Track(bone_name)

    def bone_keyframe_count(self) -> int:
        return sum(len(track) for track in self.bone_tracks.values())

    def copy_morph_tracks(self) -> Dict[str, Track[MorphKeyframe]]:
        return {name: track.copy() for name, track in self.morph_tracks.items()}

    def copy(self) -> Motion:
        return Motion(
            name=self.name,
            path=self.path,
            bone_tracks={n: t.copy() for n, t in self.bone_tracks.items()},
            morph_tracks=self.copy_morph_tracks(),
            rigid_body_tracks={n: t.copy() for n, t in self.rigid_body_tracks.items()},
            joint_tracks={n: t.copy() for n, t in self.joint_tracks.items()},
            gravity_track=self.gravity_track.copy(),
            max_sub_steps_track=self.max_sub_steps_track.copy(),
            fixed_time_step_track=self.fixed_time_step_track.copy(),
            physics_reset_track=self.physics_reset_track.copy(),
            wind_track=self.wind_track.copy(),
        )
