"""
Shared test fixtures: a small rig and motions built in memory.

Bones:
    0 center
    ├── 1 hair_root   (dynamic rigid body 0)
    │   └── 2 hair_tip (dynamic rigid body 1)
    ├── 3 arm
    │   └── 4 arm_twist (rotation driven by arm)
    └── 5 leg_ik
"""
from physicsbaker.model.keyframes import BoneKeyframe, MorphKeyframe
from physicsbaker.model.motion import Motion
from physicsbaker.model.rig import Bone, Joint, PhysicsType, RigidBody, RigModel


def make_model(name: str = "miku") -> RigModel:
    bones = [
        Bone(0, "center"),
        Bone(1, "hair_root", parent_index=0),
        Bone(2, "hair_tip", parent_index=1),
        Bone(3, "arm", parent_index=0),
        Bone(4, "arm_twist", parent_index=3, effect_index=3, is_effector_rotation=True),
        Bone(5, "leg_ik", parent_index=0, is_ik=True, ik_link_indexes=(3, 4)),
    ]
    rigid_bodies = [
        RigidBody(0, "rb_hair_root", bone_index=1, size=(1.0, 1.0, 1.0), mass=1.0,
                  physics_type=PhysicsType.DYNAMIC),
        RigidBody(1, "rb_hair_tip", bone_index=2, size=(2.0, 2.0, 2.0), mass=2.0,
                  physics_type=PhysicsType.DYNAMIC_BONE),
        RigidBody(2, "rb_body", bone_index=0, physics_type=PhysicsType.STATIC),
    ]
    joints = [
        Joint(0, "j_hair", 0, 1,
              translation_limit_min=(-0.5, -0.5, -0.5),
              translation_limit_max=(0.5, 0.5, 0.5),
              rotation_limit_min=(-1.0, -1.0, -1.0),
              rotation_limit_max=(1.0, 1.0, 1.0),
              spring_constant_translation=(10.0, 10.0, 10.0),
              spring_constant_rotation=(4.0, 4.0, 4.0)),
        Joint(1, "j_body", 2, 0, rotation_limit_max=(1.0, 1.0, 1.0)),
        Joint(2, "j_broken", 0, 99),
    ]
    return RigModel(name=name, bones=bones, rigid_bodies=rigid_bodies, joints=joints)


def make_original_motion() -> Motion:
    motion = Motion(name="dance")
    motion.append_bone_frame("center", BoneKeyframe(0.0, position=(0.0, 1.0, 0.0)))
    motion.append_bone_frame("center", BoneKeyframe(2.0, position=(0.0, 2.0, 0.0)))
    motion.append_bone_frame("arm_twist", BoneKeyframe(1.0, rotation=(0.0, 0.0, 0.5, 0.5)))
    motion.append_morph_frame("smile", MorphKeyframe(0.0, 0.0))
    motion.append_morph_frame("smile", MorphKeyframe(30.0, 1.0))
    return motion


def make_baked_motion(last_frame: int = 5, bone_names=None) -> Motion:
    """Every bone sampled at every frame, x position equal to the frame."""
    bone_names = bone_names or ("center", "hair_root", "arm", "arm_twist", "ghost")
    motion = Motion(name="baked")
    for f in range(last_frame + 1):
        for name in bone_names:
            motion.append_bone_frame(name, BoneKeyframe(float(f), position=(float(f), 0.0, 0.0)))
    return motion
