"""
Rig Model
=========
Read-only view of a character model: bone hierarchy, rigid bodies and joints.

The binary model codec is an external concern. Readers (see
``physicsbaker.model.io``) build a ``RigModel`` and the engine only queries
it: which bones carry simulated physics, which bone drives another
(effectors), and which rigid bodies a joint connects.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Dict, List, Optional

from physicsbaker.model.keyframes import Vec3, ZERO_VEC3

logger = logging.getLogger(__name__)


class PhysicsType(IntEnum):
    STATIC = 0        # follows its bone
    DYNAMIC = 1       # fully simulated
    DYNAMIC_BONE = 2  # simulated rotation, position follows the bone


@dataclass(frozen=True)
class Bone:
    index: int
    name: str
    parent_index: int = -1
    effect_index: int = -1
    is_effector_rotation: bool = False
    is_effector_translation: bool = False
    is_visible: bool = True
    is_ik: bool = False
    ik_link_indexes: tuple = ()

    @property
    def is_effector(self) -> bool:
        return self.is_effector_rotation or self.is_effector_translation


@dataclass(frozen=True)
class RigidBody:
    index: int
    name: str
    bone_index: int = -1
    position: Vec3 = ZERO_VEC3
    size: Vec3 = (1.0, 1.0, 1.0)
    mass: float = 1.0
    physics_type: PhysicsType = PhysicsType.STATIC

    @property
    def is_dynamic(self) -> bool:
        return self.physics_type != PhysicsType.STATIC


@dataclass(frozen=True)
class Joint:
    index: int
    name: str
    rigid_body_index_a: int = -1
    rigid_body_index_b: int = -1
    translation_limit_min: Vec3 = ZERO_VEC3
    translation_limit_max: Vec3 = ZERO_VEC3
    rotation_limit_min: Vec3 = ZERO_VEC3
    rotation_limit_max: Vec3 = ZERO_VEC3
    spring_constant_translation: Vec3 = ZERO_VEC3
    spring_constant_rotation: Vec3 = ZERO_VEC3


@dataclass(frozen=True)
class JointLink:
    """A joint together with the two rigid bodies it connects."""
    joint: Joint
    rigid_body_a: RigidBody
    rigid_body_b: RigidBody


@dataclass
class RigModel:
    name: str = ""
    path: str = ""
    bones: List[Bone] = field(default_factory=list)
    rigid_bodies: List[RigidBody] = field(default_factory=list)
    joints: List[Joint] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.update_indexes()

    def update_indexes(self) -> None:
        """Rebuilds the lookup tables. Call after replacing bones or rigid bodies."""
        self._bones_by_name: Dict[str, Bone] = {b.name: b for b in self.bones}
        self._physics_bone_indexes = {
            rb.bone_index for rb in self.rigid_bodies if rb.is_dynamic and rb.bone_index >= 0
        }

    # --- Bones ---

    def bone(self, index: int) -> Optional[Bone]:
        if 0 <= index < len(self.bones):
            return self.bones[index]
        return None

    def bone_by_name(self, name: str) -> Optional[Bone]:
        return self._bones_by_name.get(name)

    def has_bone(self, name: str) -> bool:
        return name in self._bones_by_name

    def has_physics(self, bone: Bone) -> bool:
        """True when a simulated rigid body is attached to the bone."""
        return bone.index in self._physics_bone_indexes

    def effector_parent(self, bone: Bone) -> Optional[Bone]:
        """The bone whose rotation/translation drives ``bone``, if any."""
        if not bone.is_effector:
            return None
        return self.bone(bone.effect_index)

    def layer_sorted_bones(self) -> List[Bone]:
        """Bones ordered so that every parent comes before its children."""
        ordered: List[Bone] = []
        placed: set = set()
        pending = list(self.bones)
        while pending:
            remaining = []
            for bone in pending:
                if bone.parent_index < 0 or bone.parent_index in placed or self.bone(bone.parent_index) is None:
                    ordered.append(bone)
                    placed.add(bone.index)
                else:
                    remaining.append(bone)
            if len(remaining) == len(pending):
                # Cyclic parents; keep declaration order for the rest
                logger.warning(f"Cyclic bone hierarchy in model '{self.name}'.")
                ordered.extend(remaining)
                break
            pending = remaining
        return ordered

    # --- Rigid bodies & joints ---

    def rigid_body(self, index: int) -> Optional[RigidBody]:
        if 0 <= index < len(self.rigid_bodies):
            return self.rigid_bodies[index]
        return None

    def joint_links(self) -> List[JointLink]:
        """Joints whose two endpoint rigid bodies exist in the model."""
        links = []
        for joint in self.joints:
            rb_a = self.rigid_body(joint.rigid_body_index_a)
            rb_b = self.rigid_body(joint.rigid_body_index_b)
            if rb_a is None or rb_b is None:
                logger.debug(f"Joint '{joint.name}' has an unresolved rigid body, skipping.")
                continue
            links.append(JointLink(joint=joint, rigid_body_a=rb_a, rigid_body_b=rb_b))
        return links

    def copy(self, **changes) -> RigModel:
        data = dict(
            name=self.name,
            path=self.path,
            bones=list(self.bones),
            rigid_bodies=list(self.rigid_bodies),
            joints=list(self.joints),
        )
        data.update(changes)
        return RigModel(**data)

    def with_static_rigid_bodies(self) -> RigModel:
        """The physics-disabled variant: every rigid body follows its bone."""
        return self.copy(
            rigid_bodies=[replace(rb, physics_type=PhysicsType.STATIC) for rb in self.rigid_bodies]
        )
