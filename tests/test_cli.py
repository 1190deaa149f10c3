"""
End-to-end test of the command-line interface.
"""
import logging
import os
import tempfile
import unittest

from PySide6.QtCore import QCoreApplication

from physicsbaker.__main__ import main
from physicsbaker.model.io import IOManager
from physicsbaker.model.keyframes import PhysicsResetType
from physicsbaker.model.records import BakeSet, OutputSelection, RampRecord, ModifiedAdjustment, WorldPhysicsRecord

from tests.fixtures import make_baked_motion, make_model, make_original_motion


class TestCommandLine(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.app = QCoreApplication.instance() or QCoreApplication([])

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        d = self.tmp.name
        self.model_path = IOManager.save_model(make_model(), os.path.join(d, "miku.h5"))
        self.motion_path = IOManager.save_motion(make_original_motion(), os.path.join(d, "dance.h5"))
        baked = make_baked_motion(bone_names=("center", "BB1_hair_root", "arm"))
        self.baked_path = IOManager.save_motion(baked, os.path.join(d, "capture.h5"))

        bake_set = BakeSet(
            original_model_path=self.model_path,
            original_motion_path=self.motion_path,
            world_records=[WorldPhysicsRecord(0.0, 10.0)],
            ramp_records=[RampRecord(0.0, 2.0, 4.0, 6.0, adjustments={0: ModifiedAdjustment(0, mass_ratio=2.0)})],
            output_selections=[OutputSelection(0.0, 3.0, bone_names=("BB1_hair_root", "arm"))],
        )
        self.records_path = IOManager.save_bake_sets([bake_set], os.path.join(d, "records.json"))

    def tearDown(self):
        self._close_log_handlers()
        self.tmp.cleanup()

    def _close_log_handlers(self):
        logger = logging.getLogger("physicsbaker")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def _path(self, name):
        return os.path.join(self.tmp.name, name)

    def test_physics_motions_only(self):
        self.assertEqual(main([self.records_path]), 0)

        self.assertTrue(os.path.exists(self._path("miku_BB.h5")))
        world = IOManager.load_motion(self._path("dance_BB_miku_BB_world.h5"))
        self.assertEqual(world.physics_reset_track.get(0.0).reset_type, PhysicsResetType.CONTINUE_FRAME)
        physics = IOManager.load_motion(self._path("dance_BB_miku_BB_physics.h5"))
        self.assertIn("rb_hair_root", physics.rigid_body_tracks)
        self.assertFalse(os.path.exists(self._path("dance_BB_miku_BB_00_0000.h5")))

        baked_model = IOManager.load_model(self._path("miku_BB.h5"))
        self.assertTrue(baked_model.has_bone("BB1_hair_root"))

    def test_full_bake(self):
        self.assertEqual(main([self.records_path, "--baked-motion", self.baked_path]), 0)

        output = IOManager.load_motion(self._path("dance_BB_miku_BB_00_0000.h5"))
        track = output.bone_tracks["BB1_hair_root"]
        self.assertTrue(track.get(0.0).physics_disabled)
        self.assertFalse(track.get(4.0).physics_disabled)
        self.assertEqual(output.bone_tracks["center"].frames(), [0.0, 2.0])
        self.assertIn("smile", output.morph_tracks)

    def test_unknown_bake_set(self):
        self.assertEqual(main([self.records_path, "--set", "3"]), 2)

    def test_invalid_records(self):
        bake_set = IOManager.load_bake_sets(self.records_path)[0]
        bake_set.world_records.append(WorldPhysicsRecord(5.0, 1.0))
        path = IOManager.save_bake_sets([bake_set], self._path("bad.json"))
        self.assertEqual(main([path]), 1)

    def test_missing_baked_motion(self):
        self.assertEqual(main([self.records_path, "--baked-motion", self._path("nope.h5")]), 1)
        # Physics motions were still written before the capture was read
        self.assertTrue(os.path.exists(self._path("dance_BB_miku_BB_world.h5")))
        self.assertFalse(os.path.exists(self._path("dance_BB_miku_BB_00_0000.h5")))

    def test_missing_model(self):
        os.remove(self.model_path)
        log_path = self._path("bake.log")
        self.assertEqual(main([self.records_path, "--log-file", log_path]), 1)
        self._close_log_handlers()
        with open(log_path, encoding="utf-8") as f:
            self.assertIn(self.model_path, f.read())

    def test_include_children(self):
        baked = make_baked_motion(bone_names=("BB1_hair_root", "BB2_hair_tip"))
        IOManager.save_motion(baked, self.baked_path)
        argv = [self.records_path, "--baked-motion", self.baked_path, "--include-children"]
        self.assertEqual(main(argv), 0)

        output = IOManager.load_motion(self._path("dance_BB_miku_BB_00_0000.h5"))
        self.assertEqual(output.bone_tracks["BB2_hair_tip"].frames(), [0.0, 1.0, 2.0, 3.0, 4.0])


if __name__ == "__main__":
    unittest.main()
