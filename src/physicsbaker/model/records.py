"""
Bake Records (Data Model)
=========================
User-editable records that configure one bake run.

Why is this file needed?
------------------------
1. Snapshots: The host UI edits these records, then hands the engine an
   immutable snapshot per run. Nothing in the engine keeps UI state.
2. Persistence: Every record round-trips through ``to_dict``/``from_dict`` so
   the record store (JSON) reproduces identical ratios, frame bounds and
   modified flags.
3. Validation: Frame ordering is checked here, in one place, and reported
   with the record index so the UI can highlight the offending row.

Classes:
    TimeRange: Start/end frames.
    WorldPhysicsRecord: Gravity, sub-steps and time-step for a time range.
    WindRecord: Wind settings for a time range.
    UnmodifiedAdjustment / ModifiedAdjustment: Per-rigid-body ratios.
    RampRecord: Trapezoid profile plus adjustments.
    OutputSelection: Time range plus bones to bake.
    BakeSet: All records of one model/motion pairing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union
import logging

from physicsbaker import config
from physicsbaker.errors import InvalidTimeRangeError, RampOrderError
from physicsbaker.model.keyframes import Vec3, ZERO_VEC3

logger = logging.getLogger(__name__)

NEUTRAL_SIZE_RATIO: Vec3 = (1.0, 1.0, 1.0)


def _vec3(value: Any, default: Vec3 = ZERO_VEC3) -> Vec3:
    if value is None:
        return default
    if isinstance(value, dict):
        return (float(value.get("x", 0.0)), float(value.get("y", 0.0)), float(value.get("z", 0.0)))
    x, y, z = value
    return (float(x), float(y), float(z))


@dataclass(frozen=True)
class TimeRange:
    start_frame: float = 0.0
    end_frame: float = 0.0

    def validate(self, index: Optional[int] = None) -> None:
        if self.start_frame < 0 or self.end_frame < self.start_frame:
            raise InvalidTimeRangeError(self.start_frame, self.end_frame, index)

    def to_dict(self) -> Dict[str, Any]:
        return {"start_frame": self.start_frame, "end_frame": self.end_frame}


@dataclass(frozen=True)
class WorldPhysicsRecord(TimeRange):
    gravity: float = config.DEFAULT_GRAVITY
    max_sub_steps: int = config.DEFAULT_MAX_SUB_STEPS
    fixed_time_step: float = config.DEFAULT_FIXED_TIME_STEP

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d.update({
            "gravity": self.gravity,
            "max_sub_steps": self.max_sub_steps,
            "fixed_time_step": self.fixed_time_step,
        })
        return d

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> WorldPhysicsRecord:
        return WorldPhysicsRecord(
            start_frame=float(data.get("start_frame", 0.0)),
            end_frame=float(data.get("end_frame", 0.0)),
            gravity=float(data.get("gravity", config.DEFAULT_GRAVITY)),
            max_sub_steps=int(data.get("max_sub_steps", config.DEFAULT_MAX_SUB_STEPS)),
            fixed_time_step=float(data.get("fixed_time_step", config.DEFAULT_FIXED_TIME_STEP)),
        )


@dataclass(frozen=True)
class WindRecord(TimeRange):
    enabled: bool = True
    direction: Vec3 = ZERO_VEC3
    speed: float = 0.0               # unit/s
    randomness: float = 0.0          # 0..1
    turbulence_freq_hz: float = config.DEFAULT_WIND_TURBULENCE_FREQ_HZ
    drag_coeff: float = config.DEFAULT_WIND_DRAG_COEFF
    lift_coeff: float = config.DEFAULT_WIND_LIFT_COEFF

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["wind_config"] = {
            "enabled": self.enabled,
            "direction": list(self.direction),
            "speed": self.speed,
            "randomness": self.randomness,
            "turbulence_freq_hz": self.turbulence_freq_hz,
            "drag_coeff": self.drag_coeff,
            "lift_coeff": self.lift_coeff,
        }
        return d

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> WindRecord:
        wind = data.get("wind_config", {})
        return WindRecord(
            start_frame=float(data.get("start_frame", 0.0)),
            end_frame=float(data.get("end_frame", 0.0)),
            enabled=bool(wind.get("enabled", True)),
            direction=_vec3(wind.get("direction")),
            speed=float(wind.get("speed", 0.0)),
            randomness=float(wind.get("randomness", 0.0)),
            turbulence_freq_hz=float(wind.get("turbulence_freq_hz", config.DEFAULT_WIND_TURBULENCE_FREQ_HZ)),
            drag_coeff=float(wind.get("drag_coeff", config.DEFAULT_WIND_DRAG_COEFF)),
            lift_coeff=float(wind.get("lift_coeff", config.DEFAULT_WIND_LIFT_COEFF)),
        )


# ==========================================
# RIGID BODY ADJUSTMENTS
# ==========================================

@dataclass(frozen=True)
class _Adjustment:
    rigid_body_index: int
    rigid_body_name: str = ""
    size_ratio: Vec3 = NEUTRAL_SIZE_RATIO
    mass_ratio: float = 1.0
    stiffness_ratio: float = 1.0
    tension_ratio: float = 1.0

    modified: ClassVar[bool] = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rigid_body_index": self.rigid_body_index,
            "rigid_body_name": self.rigid_body_name,
            "size_ratio": list(self.size_ratio),
            "mass_ratio": self.mass_ratio,
            "stiffness_ratio": self.stiffness_ratio,
            "tension_ratio": self.tension_ratio,
            "modified": self.modified,
        }


@dataclass(frozen=True)
class UnmodifiedAdjustment(_Adjustment):
    """
    An entry the user has not changed. Its stored ratios are kept for the
    record store only; for interpolation it always behaves as neutral.
    """
    modified: ClassVar[bool] = False

    @property
    def effective_size_ratio(self) -> Vec3:
        return NEUTRAL_SIZE_RATIO

    @property
    def effective_mass_ratio(self) -> float:
        return 1.0

    @property
    def effective_stiffness_ratio(self) -> float:
        return 1.0

    @property
    def effective_tension_ratio(self) -> float:
        return 1.0


@dataclass(frozen=True)
class ModifiedAdjustment(_Adjustment):
    modified: ClassVar[bool] = True

    @property
    def effective_size_ratio(self) -> Vec3:
        return self.size_ratio

    @property
    def effective_mass_ratio(self) -> float:
        return self.mass_ratio

    @property
    def effective_stiffness_ratio(self) -> float:
        return self.stiffness_ratio

    @property
    def effective_tension_ratio(self) -> float:
        return self.tension_ratio


Adjustment = Union[UnmodifiedAdjustment, ModifiedAdjustment]


def adjustment_from_dict(data: Dict[str, Any]) -> Adjustment:
    """Factory method to deserialize into the correct variant."""
    cls = ModifiedAdjustment if data.get("modified", False) else UnmodifiedAdjustment
    return cls(
        rigid_body_index=int(data["rigid_body_index"]),
        rigid_body_name=str(data.get("rigid_body_name", "")),
        size_ratio=_vec3(data.get("size_ratio"), NEUTRAL_SIZE_RATIO),
        mass_ratio=float(data.get("mass_ratio", 1.0)),
        stiffness_ratio=float(data.get("stiffness_ratio", 1.0)),
        tension_ratio=float(data.get("tension_ratio", 1.0)),
    )


@dataclass(frozen=True)
class RampRecord:
    """
    Trapezoidal time profile: the adjustments rise from ``start_frame`` to
    ``max_start_frame``, hold until ``max_end_frame`` and fall back to neutral
    at ``end_frame``.
    """
    start_frame: float = 0.0
    max_start_frame: float = 0.0
    max_end_frame: float = 0.0
    end_frame: float = 0.0
    adjustments: Dict[int, Adjustment] = field(default_factory=dict)

    def validate(self, index: Optional[int] = None) -> None:
        TimeRange(self.start_frame, self.end_frame).validate(index)
        if not (self.start_frame <= self.max_start_frame <= self.max_end_frame <= self.end_frame):
            raise RampOrderError(
                self.start_frame, self.max_start_frame, self.max_end_frame, self.end_frame, index
            )

    def adjustment(self, rigid_body_index: int) -> Optional[Adjustment]:
        return self.adjustments.get(rigid_body_index)

    def is_modified(self, rigid_body_index: int) -> bool:
        adjustment = self.adjustments.get(rigid_body_index)
        return adjustment is not None and adjustment.modified

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_frame": self.start_frame,
            "max_start_frame": self.max_start_frame,
            "max_end_frame": self.max_end_frame,
            "end_frame": self.end_frame,
            "items": [a.to_dict() for a in self.adjustments.values()],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> RampRecord:
        start = float(data.get("start_frame", 0.0))
        end = float(data.get("end_frame", start))
        adjustments = [adjustment_from_dict(item) for item in data.get("items", [])]
        return RampRecord(
            start_frame=start,
            max_start_frame=float(data.get("max_start_frame", start)),
            max_end_frame=float(data.get("max_end_frame", end)),
            end_frame=end,
            adjustments={a.rigid_body_index: a for a in adjustments},
        )


@dataclass(frozen=True)
class OutputSelection(TimeRange):
    bone_names: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Ordered and unique; accept any iterable of names
        object.__setattr__(self, "bone_names", tuple(dict.fromkeys(self.bone_names)))

    def is_selected(self, bone_name: str) -> bool:
        return bone_name in self.bone_names

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["bone_names"] = list(self.bone_names)
        return d

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> OutputSelection:
        return OutputSelection(
            start_frame=float(data.get("start_frame", 0.0)),
            end_frame=float(data.get("end_frame", 0.0)),
            bone_names=tuple(data.get("bone_names", [])),
        )


@dataclass
class BakeSet:
    """All records for one model/motion pairing."""
    original_model_path: str = ""
    original_motion_path: str = ""
    world_records: List[WorldPhysicsRecord] = field(default_factory=list)
    wind_records: List[WindRecord] = field(default_factory=list)
    ramp_records: List[RampRecord] = field(default_factory=list)
    output_selections: List[OutputSelection] = field(default_factory=list)

    def validate(self) -> None:
        for i, record in enumerate(self.world_records):
            record.validate(i)
        for i, record in enumerate(self.wind_records):
            record.validate(i)
        for i, record in enumerate(self.ramp_records):
            record.validate(i)
        for i, selection in enumerate(self.output_selections):
            selection.validate(i)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_model_path": self.original_model_path,
            "original_motion_path": self.original_motion_path,
            "physics_records": [r.to_dict() for r in self.world_records],
            "wind_records": [r.to_dict() for r in self.wind_records],
            "rigid_body_records": [r.to_dict() for r in self.ramp_records],
            "output_records": [s.to_dict() for s in self.output_selections],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> BakeSet:
        return BakeSet(
            original_model_path=data.get("original_model_path", ""),
            original_motion_path=data.get("original_motion_path", ""),
            world_records=[WorldPhysicsRecord.from_dict(d) for d in data.get("physics_records", [])],
            wind_records=[WindRecord.from_dict(d) for d in data.get("wind_records", [])],
            ramp_records=[RampRecord.from_dict(d) for d in data.get("rigid_body_records", [])],
            output_selections=[OutputSelection.from_dict(d) for d in data.get("output_records", [])],
        )
