"""
Tests for the trapezoidal ramp profile.
"""
import unittest

from physicsbaker.controller.ramp import frame_range, is_ramping, ramp_ratio


class TestRampRatio(unittest.TestCase):

    BOUNDS = (0.0, 10.0, 20.0, 30.0)

    def test_endpoints_are_zero(self):
        self.assertEqual(ramp_ratio(0.0, *self.BOUNDS), 0.0)
        self.assertEqual(ramp_ratio(30.0, *self.BOUNDS), 0.0)

    def test_rise_plateau_fall(self):
        self.assertAlmostEqual(ramp_ratio(5.0, *self.BOUNDS), 0.5)
        self.assertEqual(ramp_ratio(10.0, *self.BOUNDS), 1.0)
        self.assertEqual(ramp_ratio(15.0, *self.BOUNDS), 1.0)
        self.assertEqual(ramp_ratio(20.0, *self.BOUNDS), 1.0)
        self.assertAlmostEqual(ramp_ratio(25.0, *self.BOUNDS), 0.5)

    def test_outside_range_is_zero(self):
        self.assertEqual(ramp_ratio(-1.0, *self.BOUNDS), 0.0)
        self.assertEqual(ramp_ratio(31.0, *self.BOUNDS), 0.0)

    def test_monotonic(self):
        start, max_start, max_end, end = 3.0, 11.0, 17.0, 40.0
        rise = [ramp_ratio(f, start, max_start, max_end, end) for f in frame_range(start, max_start)]
        plateau = [ramp_ratio(f, start, max_start, max_end, end) for f in frame_range(max_start, max_end)]
        fall = [ramp_ratio(f, start, max_start, max_end, end) for f in frame_range(max_end, end)]

        self.assertEqual(rise, sorted(rise))
        self.assertTrue(all(r == 1.0 for r in plateau))
        self.assertEqual(fall, sorted(fall, reverse=True))
        self.assertTrue(all(0.0 <= r <= 1.0 for r in rise + fall))

    def test_zero_length_rise_steps_up(self):
        self.assertEqual(ramp_ratio(0.0, 0.0, 0.0, 10.0, 20.0), 1.0)
        self.assertAlmostEqual(ramp_ratio(15.0, 0.0, 0.0, 10.0, 20.0), 0.5)

    def test_zero_length_fall_steps_down(self):
        self.assertEqual(ramp_ratio(10.0, 0.0, 5.0, 10.0, 10.0), 1.0)
        self.assertEqual(ramp_ratio(11.0, 0.0, 5.0, 10.0, 10.0), 0.0)


class TestIsRamping(unittest.TestCase):

    def test_only_strict_interior_of_segments(self):
        bounds = (0.0, 10.0, 20.0, 30.0)
        self.assertFalse(is_ramping(0.0, *bounds))
        self.assertTrue(is_ramping(1.0, *bounds))
        self.assertFalse(is_ramping(10.0, *bounds))
        self.assertFalse(is_ramping(15.0, *bounds))
        self.assertTrue(is_ramping(29.0, *bounds))
        self.assertFalse(is_ramping(30.0, *bounds))


class TestFrameRange(unittest.TestCase):

    def test_inclusive(self):
        self.assertEqual(list(frame_range(0, 3)), [0.0, 1.0, 2.0, 3.0])

    def test_empty_when_reversed(self):
        self.assertEqual(list(frame_range(2, 1)), [])

    def test_fractional_start(self):
        self.assertEqual(list(frame_range(0.5, 2.5)), [0.5, 1.5, 2.5])


if __name__ == "__main__":
    unittest.main()
