"""
Tests for splitting merged motions under the bone keyframe ceiling.
"""
import os
import unittest

from physicsbaker.controller.composer import count_keyframes_per_frame
from physicsbaker.controller.splitter import split_motion, split_output_path
from physicsbaker.model.keyframes import BoneKeyframe, MorphKeyframe
from physicsbaker.model.motion import Motion


def _merged(frame_count: int = 5, bones=("a", "b", "c")) -> Motion:
    motion = Motion(name="merged")
    for f in range(frame_count):
        for i, name in enumerate(bones):
            motion.append_bone_frame(name, BoneKeyframe(float(f), position=(float(f), float(i), 0.0)))
    motion.append_morph_frame("blink", MorphKeyframe(0.0, 1.0))
    return motion


def _frames(motion: Motion):
    return sorted({f for track in motion.bone_tracks.values() for f in track.frames()})


def _flatten(motions):
    keyframes = []
    for motion in motions:
        for name in sorted(motion.bone_tracks):
            keyframes.extend((name, kf) for kf in motion.bone_tracks[name])
    return sorted(keyframes, key=lambda item: (item[1].frame, item[0]))


class TestSplitMotion(unittest.TestCase):

    def test_files_break_before_overflowing_frame(self):
        merged = _merged()
        counts = count_keyframes_per_frame(merged)
        self.assertEqual(list(counts.values()), [3, 3, 3, 3, 3])

        outputs = split_motion(merged, counts, os.path.join("out", "motion.h5"), max_frames=7)

        self.assertEqual(len(outputs), 2)
        self.assertEqual(_frames(outputs[0]), [0.0, 1.0])
        self.assertEqual(_frames(outputs[1]), [2.0, 3.0, 4.0])
        self.assertEqual(outputs[0].path, os.path.join("out", "motion_0000.h5"))
        self.assertEqual(outputs[1].path, os.path.join("out", "motion_0002.h5"))

    def test_single_file_when_under_limit(self):
        merged = _merged()
        outputs = split_motion(merged, count_keyframes_per_frame(merged), "motion.h5", max_frames=100)
        self.assertEqual(len(outputs), 1)
        self.assertEqual(outputs[0].bone_keyframe_count(), 15)

    def test_split_is_lossless(self):
        merged = _merged(frame_count=12)
        counts = count_keyframes_per_frame(merged)
        expected = _flatten([merged])

        for max_frames in range(1, 40):
            outputs = split_motion(merged, counts, "motion.h5", max_frames=max_frames)
            self.assertEqual(_flatten(outputs), expected, f"max_frames={max_frames}")

            # Frames stay whole and in order across files
            frames = [_frames(m) for m in outputs]
            self.assertEqual([f for fs in frames for f in fs], _frames(merged))

    def test_no_empty_leading_file(self):
        merged = _merged()
        outputs = split_motion(merged, count_keyframes_per_frame(merged), "motion.h5", max_frames=2)
        self.assertTrue(all(m.bone_keyframe_count() > 0 for m in outputs))
        # The last frame never starts a new file
        self.assertEqual([_frames(m) for m in outputs], [[0.0], [1.0], [2.0], [3.0, 4.0]])

    def test_lookahead_sees_only_the_next_frame(self):
        merged = Motion(name="merged")
        for f, count in enumerate([1, 1, 1, 5, 1, 1, 10]):
            for b in range(count):
                merged.append_bone_frame(f"b{b}", BoneKeyframe(float(f)))
        counts = count_keyframes_per_frame(merged)

        outputs = split_motion(merged, counts, "motion.h5", max_frames=7)

        # Frames 3 and 6 outgrow what the previous frame checked for
        self.assertEqual([m.bone_keyframe_count() for m in outputs], [8, 1, 11])
        self.assertEqual([_frames(m) for m in outputs], [[0.0, 1.0, 2.0, 3.0], [4.0], [5.0, 6.0]])
        self.assertEqual(_flatten(outputs), _flatten([merged]))

    def test_morphs_are_replicated(self):
        merged = _merged()
        outputs = split_motion(merged, count_keyframes_per_frame(merged), "motion.h5", max_frames=7)
        for motion in outputs:
            self.assertEqual(motion.morph_tracks["blink"], merged.morph_tracks["blink"])

    def test_explicit_morph_tracks(self):
        merged = _merged()
        source = Motion()
        source.append_morph_frame("smile", MorphKeyframe(3.0, 0.5))
        outputs = split_motion(
            merged, count_keyframes_per_frame(merged), "motion.h5", 7, morph_tracks=source.morph_tracks,
        )
        self.assertEqual(list(outputs[1].morph_tracks), ["smile"])

    def test_empty_motion_flushes_one_output(self):
        outputs = split_motion(Motion(name="empty"), {}, "motion.h5")
        self.assertEqual(len(outputs), 1)
        self.assertEqual(outputs[0].bone_keyframe_count(), 0)

    def test_output_path(self):
        self.assertEqual(split_output_path("motion.h5", 120.0), "motion_0120.h5")
        self.assertEqual(split_output_path("a.b/motion", 7), "a.b/motion_0007")


if __name__ == "__main__":
    unittest.main()
