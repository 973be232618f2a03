#!/usr/bin/env python
# coding: utf-8

import unittest
import numpy as np
import os
import sys

# Add parent directory to path to import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from atari_dqn.palette import pixel_to_grayscale
from atari_dqn.preprocessing import (
    crop_bounds,
    overlap_weights,
    preprocess_screen,
    PreprocessingWrapper
)
from tests.fake_env import FakeAleEnv

BRIGHT = 0x0e


class TestPreprocessScreen(unittest.TestCase):
    """Unit tests for screen cropping and area resampling."""

    def test_crop_bounds_for_ale_screen(self):
        # 0.92 * 210 = 193.2 rows kept, (210 - 193) / 2 = 8.5 rows off the top
        self.assertEqual(crop_bounds(160, 210), (8, 8, 152, 193))

    def test_overlap_weights_rows_sum_to_one(self):
        for length in (152, 193, 84, 30):
            weights = overlap_weights(length, 84)
            self.assertEqual(weights.shape, (84, length))
            self.assertTrue(np.all(weights >= 0.0))
            np.testing.assert_allclose(weights.sum(axis=1), np.ones(84), atol=1e-12)

    def test_overlap_weights_partial_pixels(self):
        """Test fractional weights of boundary pixels."""
        # Two cells over three pixels: each cell covers 1.5 pixels
        weights = overlap_weights(3, 2)
        expected = np.array([[2 / 3, 1 / 3, 0.0],
                             [0.0, 1 / 3, 2 / 3]])
        np.testing.assert_allclose(weights, expected, atol=1e-12)

    def test_overlap_weights_identity(self):
        np.testing.assert_allclose(overlap_weights(84, 84), np.eye(84), atol=1e-12)

    def test_output_shape_and_dtype(self):
        for width, height in ((160, 210), (100, 150), (20, 30)):
            screen = np.zeros((height, width), dtype=np.uint8)
            frame = preprocess_screen(screen)
            self.assertEqual(frame.shape, (84, 84))
            self.assertEqual(frame.dtype, np.uint8)

    def test_custom_frame_size(self):
        frame = preprocess_screen(np.zeros((210, 160), dtype=np.uint8), frame_size=42)
        self.assertEqual(frame.shape, (42, 42))

    def test_constant_screen_keeps_its_color(self):
        """Test that a uniform screen maps to its exact grayscale value."""
        for pixel in (0x00, 0x0e, 0x1e, 0x40, 0x86, 0xfe):
            screen = np.full((210, 160), pixel, dtype=np.uint8)
            frame = preprocess_screen(screen)
            self.assertTrue(np.all(frame == pixel_to_grayscale(pixel)),
                            f"pixel {pixel:#x} -> {np.unique(frame)}")

    def test_cropped_border_is_ignored(self):
        """Test that pixels outside the cropped region never contribute."""
        screen = np.zeros((210, 160), dtype=np.uint8)
        screen[:, :8] = BRIGHT
        screen[:8, :] = BRIGHT
        screen[201:, :] = BRIGHT

        frame = preprocess_screen(screen)
        self.assertTrue(np.all(frame == 0))

    def test_partial_pixel_weighting(self):
        """Test a hand-computed downscale of a three-column crop."""
        # Width 11 leaves columns 8, 9, 10; two cells weigh them (2/3, 1/3, 0) and (0, 1/3, 2/3)
        screen = np.zeros((50, 11), dtype=np.uint8)
        screen[:, 8] = BRIGHT

        frame = preprocess_screen(screen, frame_size=2)
        expected = int(np.rint(2 * pixel_to_grayscale(BRIGHT) / 3))
        np.testing.assert_array_equal(frame[:, 0], [expected, expected])
        np.testing.assert_array_equal(frame[:, 1], [0, 0])

    def test_stripes_are_averaged(self):
        """Test that one-pixel stripes are blended instead of aliased."""
        screen = np.zeros((210, 160), dtype=np.uint8)
        screen[:, 8::2] = BRIGHT
        gray = pixel_to_grayscale(BRIGHT)

        frame = preprocess_screen(screen)
        self.assertGreater(frame.min(), 0)
        self.assertLess(frame.max(), gray)
        self.assertAlmostEqual(frame.mean(), gray / 2, delta=1.0)

    def test_deterministic(self):
        rng = np.random.default_rng(3)
        screen = (rng.integers(0, 128, size=(210, 160)) * 2).astype(np.uint8)
        np.testing.assert_array_equal(preprocess_screen(screen), preprocess_screen(screen))

    def test_frame_is_read_only(self):
        frame = preprocess_screen(np.zeros((210, 160), dtype=np.uint8))
        self.assertFalse(frame.flags.writeable)
        with self.assertRaises(ValueError):
            frame[0, 0] = 1

    def test_invalid_screens(self):
        """Test that malformed screens are rejected."""
        invalid = [
            np.zeros((160, 210), dtype=np.uint8),          # wider than tall
            np.zeros((160, 160), dtype=np.uint8),          # square
            np.zeros(210 * 160, dtype=np.uint8),           # not 2-D
            np.zeros((20, 8), dtype=np.uint8),             # nothing left after crop
            np.zeros((210, 160), dtype=np.float32),        # not palette indices
            np.full((210, 160), 1, dtype=np.uint8),        # odd index
            np.full((210, 160), 256, dtype=np.int16),      # out of range
        ]
        for screen in invalid:
            with self.assertRaises(ValueError):
                preprocess_screen(screen)


class TestPreprocessingWrapper(unittest.TestCase):
    """Unit tests for the PreprocessingWrapper class."""

    def test_wrapper_initialization(self):
        env = FakeAleEnv()
        wrapper = PreprocessingWrapper(env, skip=3, frame_size=42)
        self.assertEqual(wrapper._skip, 3)
        self.assertEqual(wrapper._frame_size, 42)
        self.assertIs(wrapper.env, env)

    def test_invalid_skip(self):
        with self.assertRaises(ValueError):
            PreprocessingWrapper(FakeAleEnv(), skip=0)

    def test_reset(self):
        env = FakeAleEnv(screen=np.full((210, 160), BRIGHT, dtype=np.uint8))
        frame, info = PreprocessingWrapper(env).reset(seed=1)

        self.assertEqual(frame.shape, (84, 84))
        self.assertEqual(frame.dtype, np.uint8)
        self.assertTrue(np.all(frame == pixel_to_grayscale(BRIGHT)))
        self.assertEqual(info, {})

    def test_step_repeats_action(self):
        env = FakeAleEnv(reward=0.25)
        wrapper = PreprocessingWrapper(env, skip=4)
        wrapper.reset()

        frame, reward, term, trunc, info = wrapper.step(3)

        self.assertEqual(env.steps, 4)
        self.assertEqual(env.actions, [3, 3, 3, 3])
        self.assertEqual(reward, 1.0)
        self.assertEqual(frame.shape, (84, 84))
        self.assertFalse(term)
        self.assertFalse(trunc)

    def test_step_clips_reward(self):
        for step_reward, expected in ((1.0, 1.0), (-2.0, -1.0), (0.0, 0.0)):
            env = FakeAleEnv(reward=step_reward)
            wrapper = PreprocessingWrapper(env, skip=4)
            wrapper.reset()
            _, reward, _, _, _ = wrapper.step(0)
            self.assertEqual(reward, expected)

    def test_step_stops_on_termination(self):
        env = FakeAleEnv(reward=0.1, terminate_after=2)
        wrapper = PreprocessingWrapper(env, skip=4)
        wrapper.reset()

        _, reward, term, _, _ = wrapper.step(1)

        self.assertEqual(env.steps, 2)
        self.assertTrue(term)
        self.assertAlmostEqual(reward, 0.2)

    def test_flat_screen_is_reshaped(self):
        env = FakeAleEnv(screen=np.full((210, 160), BRIGHT, dtype=np.uint8), flat=True)
        frame, _ = PreprocessingWrapper(env).reset()
        self.assertEqual(frame.shape, (84, 84))
        self.assertTrue(np.all(frame == pixel_to_grayscale(BRIGHT)))


if __name__ == '__main__':
    unittest.main()
