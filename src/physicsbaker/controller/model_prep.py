"""
Model Preparation
=================
Renames physics bones so their baked tracks can be told apart from authored
ones and still fit the motion format's bone name field.
"""
from __future__ import annotations

import logging
import math
from dataclasses import replace

from physicsbaker import config
from physicsbaker.model.rig import RigModel

logger = logging.getLogger(__name__)

BONE_NAME_ENCODING = "cp932"


def encode_bone_name(name: str, limit: int = config.BONE_NAME_BYTE_LIMIT) -> str:
    """Truncates ``name`` to ``limit`` Shift-JIS bytes without splitting a character."""
    encoded = name.encode(BONE_NAME_ENCODING, errors="replace")[:limit]
    return encoded.decode(BONE_NAME_ENCODING, errors="ignore").rstrip("\x00")


def physics_bone_name(index: int, name: str, bone_count: int) -> str:
    digits = int(math.log10(max(bone_count, 1))) + 1
    return encode_bone_name(f"{config.OUTPUT_PREFIX}{index:0{digits}d}_{name}")


def prefix_physics_bone_names(model: RigModel) -> RigModel:
    """Returns a copy where every physics-driven bone is named ``BB<index>_<name>``."""
    bone_count = len(model.bones)
    bones = []
    renamed = 0
    for bone in model.bones:
        if model.has_physics(bone) and not bone.name.startswith(config.OUTPUT_PREFIX):
            bones.append(replace(bone, name=physics_bone_name(bone.index, bone.name, bone_count)))
            renamed += 1
        else:
            bones.append(bone)

    logger.debug(f"Renamed {renamed} physics bones in '{model.name}'.")
    return model.copy(bones=bones)
