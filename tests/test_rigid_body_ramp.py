"""
Tests for rigid body and joint ramp interpolation.
"""
import unittest

from physicsbaker.controller.rigid_body_ramp import interpolate_rigid_body_ramp
from physicsbaker.errors import RampOrderError
from physicsbaker.model.keyframes import PhysicsResetType
from physicsbaker.model.motion import Motion
from physicsbaker.model.records import ModifiedAdjustment, RampRecord, UnmodifiedAdjustment

from tests.fixtures import make_model


class TestRigidBodyRamp(unittest.TestCase):

    def setUp(self):
        self.model = make_model()
        self.record = RampRecord(
            start_frame=0.0, max_start_frame=10.0, max_end_frame=20.0, end_frame=30.0,
            adjustments={
                0: ModifiedAdjustment(0, "rb_hair_root", size_ratio=(2.0, 1.0, 1.0), mass_ratio=3.0,
                                      stiffness_ratio=3.0),
                # Stored ratios of an untouched entry must not leak into the output
                1: UnmodifiedAdjustment(1, "rb_hair_tip", size_ratio=(5.0, 5.0, 5.0), tension_ratio=9.0),
            },
        )
        self.world = Motion(name="physics_world")

    def test_size_and_mass_follow_ramp(self):
        motion = interpolate_rigid_body_ramp([self.record], self.model, self.world)
        track = motion.rigid_body_tracks["rb_hair_root"]

        self.assertAlmostEqual(track.get(5.0).size[0], 1.5)
        self.assertAlmostEqual(track.get(15.0).size[0], 2.0)
        self.assertAlmostEqual(track.get(25.0).size[0], 1.5)
        self.assertEqual(track.get(15.0).size[1:], (1.0, 1.0))
        self.assertAlmostEqual(track.get(15.0).mass, 3.0)
        self.assertAlmostEqual(track.get(0.0).mass, 1.0)
        self.assertEqual(track.frames(), [float(f) for f in range(31)])

    def test_unmodified_bodies_get_no_keyframes(self):
        motion = interpolate_rigid_body_ramp([self.record], self.model, self.world)
        self.assertEqual(list(motion.rigid_body_tracks), ["rb_hair_root"])

    def test_joint_uses_average_of_endpoints(self):
        motion = interpolate_rigid_body_ramp([self.record], self.model, self.world)
        kf = motion.joint_tracks["j_hair"].get(15.0)

        # Endpoint A stiffness 3.0, endpoint B neutral: average 2.0
        self.assertEqual(kf.rotation_limit_max, (2.0, 2.0, 2.0))
        self.assertEqual(kf.rotation_limit_min, (-2.0, -2.0, -2.0))
        self.assertEqual(kf.spring_constant_translation, (20.0, 20.0, 20.0))
        # Tension is neutral on both ends
        self.assertEqual(kf.spring_constant_rotation, (4.0, 4.0, 4.0))
        self.assertEqual(kf.translation_limit_max, (0.5, 0.5, 0.5))

        half = motion.joint_tracks["j_hair"].get(5.0)
        self.assertAlmostEqual(half.rotation_limit_max[0], 1.5)

    def test_joints_need_one_modified_resolvable_endpoint(self):
        motion = interpolate_rigid_body_ramp([self.record], self.model, self.world)
        self.assertIn("j_hair", motion.joint_tracks)
        self.assertIn("j_body", motion.joint_tracks)
        self.assertNotIn("j_broken", motion.joint_tracks)

        untouched = RampRecord(0.0, 0.0, 5.0, 5.0, adjustments={1: UnmodifiedAdjustment(1)})
        motion = interpolate_rigid_body_ramp([untouched], self.model, Motion())
        self.assertEqual(motion.joint_tracks, {})
        self.assertEqual(motion.rigid_body_tracks, {})

    def test_continue_resets_while_ramping(self):
        interpolate_rigid_body_ramp([self.record], self.model, self.world)
        resets = {kf.frame: kf.reset_type for kf in self.world.physics_reset_track}

        ramping = [float(f) for f in list(range(1, 10)) + list(range(21, 30))]
        self.assertEqual(sorted(resets), ramping)
        self.assertTrue(all(t == PhysicsResetType.CONTINUE_FRAME for t in resets.values()))

    def test_model_is_not_modified(self):
        interpolate_rigid_body_ramp([self.record], self.model, self.world)
        self.assertEqual(self.model.rigid_bodies[0].size, (1.0, 1.0, 1.0))

    def test_out_of_order_frames_are_rejected(self):
        bad = RampRecord(0.0, 20.0, 10.0, 30.0)
        with self.assertRaises(RampOrderError) as ctx:
            interpolate_rigid_body_ramp([self.record, bad], self.model, self.world)
        self.assertEqual(ctx.exception.index, 1)


if __name__ == "__main__":
    unittest.main()
