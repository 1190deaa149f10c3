"""
Input/Output Manager (JSON + HDF5)
Handles the record store (.json) and motion/model files (.h5).
"""
import json
import logging
import os
from dataclasses import MISSING, fields
from enum import IntEnum
from importlib.metadata import version, PackageNotFoundError
from typing import Any, Dict, Iterable, List, Optional, Type

import h5py
import numpy as np

from physicsbaker import config
from physicsbaker.errors import DependencyFileError, MissingBonesError
from physicsbaker.model.keyframes import (
    BoneKeyframe, FixedTimeStepKeyframe, GravityKeyframe, JointKeyframe,
    MaxSubStepsKeyframe, MorphKeyframe, PhysicsResetKeyframe, RigidBodyKeyframe,
    Track, WindKeyframe,
)
from physicsbaker.model.motion import Motion
from physicsbaker.model.records import BakeSet
from physicsbaker.model.rig import Bone, Joint, RigidBody, RigModel

# Get module logger
logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("physicsbaker")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

# Samples for fields declared without a default
_REQUIRED_FIELD_SAMPLES: Dict[str, Any] = {"frame": 0.0, "index": 0, "name": ""}

# (group name, Motion attribute, keyframe class)
_NAMED_TRACK_GROUPS = (
    ("bones", "bone_tracks", BoneKeyframe),
    ("morphs", "morph_tracks", MorphKeyframe),
    ("rigid_bodies", "rigid_body_tracks", RigidBodyKeyframe),
    ("joints", "joint_tracks", JointKeyframe),
)
_WORLD_TRACKS = (
    ("gravity", "gravity_track", GravityKeyframe),
    ("max_sub_steps", "max_sub_steps_track", MaxSubStepsKeyframe),
    ("fixed_time_step", "fixed_time_step_track", FixedTimeStepKeyframe),
    ("physics_reset", "physics_reset_track", PhysicsResetKeyframe),
    ("wind", "wind_track", WindKeyframe),
)


# --- COLUMN HELPERS ---
# Records of one dataclass type are stored column-wise, one dataset per field.

def _field_samples(cls: Type) -> Dict[str, Any]:
    samples = {}
    for f in fields(cls):
        if f.default is not MISSING:
            samples[f.name] = f.default
        else:
            samples[f.name] = _REQUIRED_FIELD_SAMPLES[f.name]
    return samples


def _column_dtype(sample: Any):
    if isinstance(sample, str):
        return h5py.string_dtype()
    if isinstance(sample, bool):
        return np.bool_
    if isinstance(sample, int):  # includes IntEnum
        return np.int64
    if isinstance(sample, tuple):
        if len(sample) == 0:
            return h5py.vlen_dtype(np.dtype("int64"))
        return np.int64 if isinstance(sample[0], int) else np.float64
    return np.float64


def _write_columns(group: h5py.Group, items: List[Any], cls: Type) -> None:
    for name, sample in _field_samples(cls).items():
        dtype = _column_dtype(sample)
        values = [getattr(item, name) for item in items]

        if isinstance(sample, tuple) and len(sample) == 0:
            dset = group.create_dataset(name, (len(values),), dtype=dtype)
            for i, value in enumerate(values):
                dset[i] = np.asarray(value, dtype=np.int64)
            continue

        if isinstance(sample, tuple):
            data = np.asarray(values, dtype=dtype).reshape(len(values), len(sample))
        elif isinstance(sample, str):
            data = np.asarray(values, dtype=object)
        else:
            data = np.asarray([int(v) if isinstance(v, IntEnum) else v for v in values], dtype=dtype)
        group.create_dataset(name, data=data, dtype=dtype)


def _to_python(value: Any, sample: Any) -> Any:
    if isinstance(sample, bool):
        return bool(value)
    if isinstance(sample, IntEnum):
        return type(sample)(int(value))
    if isinstance(sample, int):
        return int(value)
    if isinstance(sample, float):
        return float(value)
    if isinstance(sample, tuple):
        if len(sample) == 0:
            return tuple(int(v) for v in value)
        cast = int if isinstance(sample[0], int) else float
        return tuple(cast(v) for v in value)
    return value


def _read_columns(group: h5py.Group, cls: Type) -> List[Any]:
    samples = _field_samples(cls)
    columns = {}
    for name, sample in samples.items():
        if name not in group:
            continue
        if isinstance(sample, str):
            columns[name] = group[name].asstr()[()]
        else:
            columns[name] = group[name][()]

    count = len(next(iter(columns.values()))) if columns else 0
    return [
        cls(**{name: _to_python(col[i], samples[name]) for name, col in columns.items()})
        for i in range(count)
    ]


def _check_readable(filepath: str) -> None:
    if not os.path.isfile(filepath):
        reason = "file not found"
    elif not h5py.is_hdf5(filepath):
        reason = "not a valid HDF5 file"
    else:
        return
    logger.error(f"File '{filepath}': {reason}.")
    raise DependencyFileError(filepath, reason)


class IOManager:

    # --- RECORD STORE (JSON) ---

    @staticmethod
    def save_bake_sets(bake_sets: List[BakeSet], filepath: str) -> str:
        """Saves the bake sets and returns the path actually written."""
        if os.path.splitext(filepath)[1].lower() != config.RECORD_FILE_EXTENSION:
            filepath += config.RECORD_FILE_EXTENSION

        logger.info(f"Saving bake sets to: {filepath}")
        try:
            data = {
                "version": APP_VERSION,
                "bake_sets": [bake_set.to_dict() for bake_set in bake_sets],
            }
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except Exception as e:
            logger.exception(f"Failed to save bake sets: {e}")
            raise

        logger.info(f"Bake sets saved to: {filepath}")
        return filepath

    @staticmethod
    def load_bake_sets(filepath: str) -> List[BakeSet]:
        logger.info(f"Loading bake sets from: {filepath}")
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except Exception as e:
            logger.exception(f"Failed to load bake sets: {e}")
            raise

        # Older stores hold a bare list of sets
        raw_sets = data.get("bake_sets", []) if isinstance(data, dict) else data
        bake_sets = [BakeSet.from_dict(d) for d in raw_sets]
        logger.info(f"Loaded {len(bake_sets)} bake sets.")
        return bake_sets

    # --- MOTIONS (HDF5) ---

    @staticmethod
    def save_motion(motion: Motion, filepath: Optional[str] = None) -> str:
        """
        Writes every track of the motion. Tracks are never truncated; keeping
        files under the format limit is the splitter's job.
        """
        filepath = filepath or motion.path
        if not filepath:
            raise ValueError(f"Motion '{motion.name}' has no output path.")
        if not os.path.splitext(filepath)[1]:
            filepath += config.MOTION_FILE_EXTENSION

        logger.info(f"Saving motion to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                f.attrs["name"] = motion.name

                # 1. Named tracks (bones, morphs, rigid bodies, joints)
                for group_name, attr, cls in _NAMED_TRACK_GROUPS:
                    grp = f.create_group(group_name)
                    for i, (name, track) in enumerate(getattr(motion, attr).items()):
                        sub = grp.create_group(f"{i:04d}")
                        sub.attrs["name"] = name
                        _write_columns(sub, list(track), cls)

                # 2. World tracks
                grp_world = f.create_group("world")
                for group_name, attr, cls in _WORLD_TRACKS:
                    _write_columns(grp_world.create_group(group_name), list(getattr(motion, attr)), cls)

            logger.debug(f"Saved {motion.bone_keyframe_count()} bone keyframes.")
        except Exception as e:
            logger.exception(f"Failed to save motion: {e}")
            raise

        return filepath

    @staticmethod
    def load_motion(filepath: str) -> Motion:
        logger.info(f"Loading motion from: {filepath}")
        _check_readable(filepath)

        motion = Motion(path=filepath)
        with h5py.File(filepath, "r") as f:
            motion.name = str(f.attrs.get("name", ""))

            for group_name, attr, cls in _NAMED_TRACK_GROUPS:
                if group_name not in f:
                    continue
                tracks = getattr(motion, attr)
                for key in sorted(f[group_name].keys()):
                    sub = f[group_name][key]
                    name = str(sub.attrs["name"])
                    tracks[name] = Track(name, _read_columns(sub, cls))

            if "world" in f:
                for group_name, attr, cls in _WORLD_TRACKS:
                    if group_name in f["world"]:
                        track = getattr(motion, attr)
                        for kf in _read_columns(f["world"][group_name], cls):
                            track.append(kf)

        logger.debug(f"Loaded {len(motion.bone_tracks)} bone tracks from {filepath}.")
        return motion

    # --- RIG MODELS (HDF5) ---

    @staticmethod
    def save_model(model: RigModel, filepath: Optional[str] = None) -> str:
        filepath = filepath or model.path
        if not os.path.splitext(filepath)[1]:
            filepath += config.MOTION_FILE_EXTENSION
        logger.info(f"Saving model to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                f.attrs["name"] = model.name
                _write_columns(f.create_group("bones"), model.bones, Bone)
                _write_columns(f.create_group("rigid_bodies"), model.rigid_bodies, RigidBody)
                _write_columns(f.create_group("joints"), model.joints, Joint)
        except Exception as e:
            logger.exception(f"Failed to save model: {e}")
            raise
        return filepath

    @staticmethod
    def load_model(
        filepath: str,
        required_bones: Iterable[str] = (),
    ) -> RigModel:
        """
        Loads a rig model with physics as authored. Raises MissingBonesError
        when any of ``required_bones`` is absent.
        """
        logger.info(f"Loading model from: {filepath}")
        _check_readable(filepath)

        with h5py.File(filepath, "r") as f:
            model = RigModel(
                name=str(f.attrs.get("name", "")),
                path=filepath,
                bones=_read_columns(f["bones"], Bone) if "bones" in f else [],
                rigid_bodies=_read_columns(f["rigid_bodies"], RigidBody) if "rigid_bodies" in f else [],
                joints=_read_columns(f["joints"], Joint) if "joints" in f else [],
            )

        missing = [name for name in required_bones if not model.has_bone(name)]
        if missing:
            raise MissingBonesError(model.name, missing)

        logger.debug(
            f"Model '{model.name}': {len(model.bones)} bones, "
            f"{len(model.rigid_bodies)} rigid bodies, {len(model.joints)} joints."
        )
        return model
