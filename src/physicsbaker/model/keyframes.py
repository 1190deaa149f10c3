"""
Keyframes & Tracks
==================
Immutable samples and the per-target collections that hold them.

Why is this file needed?
------------------------
1. Immutability: Keyframes are frozen dataclasses. The composer and splitter
   copy the same keyframe objects between motions, so nothing downstream may
   mutate a sample in place (use ``dataclasses.replace``).
2. Ordering: A ``Track`` keeps its keyframes sorted and unique by frame.
   Appending at a frame that already holds a keyframe replaces it, which is
   the "last writer wins" rule the timeline builders rely on.

Classes:
    PhysicsResetType: Reset state of the physics world at a frame.
    BoneKeyframe, MorphKeyframe: Pose samples.
    GravityKeyframe, MaxSubStepsKeyframe, FixedTimeStepKeyframe,
    PhysicsResetKeyframe, WindKeyframe: World samples.
    RigidBodyKeyframe, JointKeyframe: Physics model parameter samples.
    Track: Ordered, unique-by-frame keyframe collection.
"""
from __future__ import annotations

import bisect
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

Vec3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]

ZERO_VEC3: Vec3 = (0.0, 0.0, 0.0)
IDENTITY_QUATERNION: Quaternion = (0.0, 0.0, 0.0, 1.0)

# Four bezier curves (X, Y, Z, rotation), two control points each: x1, y1, x2, y2
LINEAR_CURVES: Tuple[int, ...] = (20, 20, 107, 107) * 4


class PhysicsResetType(IntEnum):
    NONE = 0
    CONTINUE_FRAME = 1
    START_FRAME = 2


@dataclass(frozen=True)
class BoneKeyframe:
    frame: float
    position: Vec3 = ZERO_VEC3
    rotation: Quaternion = IDENTITY_QUATERNION
    curves: Tuple[int, ...] = LINEAR_CURVES
    physics_disabled: bool = False


@dataclass(frozen=True)
class MorphKeyframe:
    frame: float
    ratio: float = 0.0


@dataclass(frozen=True)
class GravityKeyframe:
    frame: float
    gravity: Vec3 = ZERO_VEC3


@dataclass(frozen=True)
class MaxSubStepsKeyframe:
    frame: float
    max_sub_steps: int = 0


@dataclass(frozen=True)
class FixedTimeStepKeyframe:
    frame: float
    fixed_time_step: float = 0.0


@dataclass(frozen=True)
class PhysicsResetKeyframe:
    frame: float
    reset_type: PhysicsResetType = PhysicsResetType.NONE


@dataclass(frozen=True)
class WindKeyframe:
    frame: float
    enabled: bool = True
    direction: Vec3 = ZERO_VEC3
    speed: float = 0.0
    randomness: float = 0.0
    turbulence_freq_hz: float = 0.0
    drag_coeff: float = 0.0
    lift_coeff: float = 0.0


@dataclass(frozen=True)
class RigidBodyKeyframe:
    frame: float
    position: Vec3 = ZERO_VEC3
    size: Vec3 = ZERO_VEC3
    mass: float = 0.0


@dataclass(frozen=True)
class JointKeyframe:
    frame: float
    translation_limit_min: Vec3 = ZERO_VEC3
    translation_limit_max: Vec3 = ZERO_VEC3
    rotation_limit_min: Vec3 = ZERO_VEC3
    rotation_limit_max: Vec3 = ZERO_VEC3
    spring_constant_translation: Vec3 = ZERO_VEC3
    spring_constant_rotation: Vec3 = ZERO_VEC3


K = TypeVar("K")


class Track(Generic[K]):
    """
    Keyframes of one named target (bone, morph, rigid body, joint or world
    parameter), sorted and unique by frame.
    """

    def __init__(self, name: str = "", keyframes: Optional[List[K]] = None):
        self.name = name
        self._frames: List[float] = []
        self._keyframes: Dict[float, K] = {}
        for kf in keyframes or []:
            self.append(kf)

    def append(self, keyframe: K) -> None:
        """Insert a keyframe, replacing any keyframe already at its frame."""
        frame = float(keyframe.frame)
        if frame not in self._keyframes:
            bisect.insort(self._frames, frame)
        self._keyframes[frame] = keyframe

    def get(self, frame: float) -> Optional[K]:
        return self._keyframes.get(float(frame))

    def frames(self) -> List[float]:
        return list(self._frames)

    def copy(self) -> Track[K]:
        # Keyframes are immutable, sharing them is safe
        return Track(self.name, list(self))

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[K]:
        return (self._keyframes[f] for f in self._frames)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Track):
            return NotImplemented
        return self.name == other.name and list(self) == list(other)

    def __repr__(self) -> str:
        return f"Track(name={self.name!r}, keyframes={len(self)})"
