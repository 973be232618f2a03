#!/usr/bin/env python
# coding: utf-8

import functools
import numpy as np
import gymnasium as gym
from gymnasium import Env
from typing import Tuple

from .constants import CROPPED_FRAME_SIZE, CROP_LEFT_COLUMNS, CROP_HEIGHT_FRACTION
from .palette import GRAYSCALE_TABLE


def crop_bounds(width: int, height: int) -> Tuple[int, int, int, int]:
    """
    Compute the region of the raw screen kept for preprocessing.

    Drops the leftmost 8 columns and 4% of the rows, split evenly
    between top and bottom.

    Args:
        width: Raw screen width
        height: Raw screen height

    Returns:
        Tuple of (start_x, start_y, cropped_width, cropped_height)
    """
    cropped_height = int(CROP_HEIGHT_FRACTION * height)
    start_y = int((height - cropped_height) / 2.0)
    start_x = CROP_LEFT_COLUMNS
    cropped_width = width - start_x
    return start_x, start_y, cropped_width, cropped_height


@functools.lru_cache(maxsize=16)
def overlap_weights(length: int, frame_size: int) -> np.ndarray:
    """
    Area weights mapping `length` source pixels onto `frame_size` cells.

    Destination cell j covers the source span [j * ratio, (j + 1) * ratio)
    with ratio = length / frame_size. Every source pixel [u, u + 1) gets the
    length of its intersection with that span, divided by ratio, so the
    first and last pixels of a span carry partial weight and each row
    sums to one.

    Args:
        length: Number of source pixels along the axis
        frame_size: Number of destination cells along the axis

    Returns:
        Read-only array of shape [frame_size, length]
    """
    ratio = length / frame_size
    cells = np.arange(frame_size, dtype=np.float64)
    first = cells * ratio
    last = (cells + 1) * ratio
    pixels = np.arange(length, dtype=np.float64)

    overlap = (np.minimum(pixels[None, :] + 1, last[:, None]) -
               np.maximum(pixels[None, :], first[:, None]))
    weights = np.clip(overlap, 0.0, None) / ratio
    weights.flags.writeable = False
    return weights


def _validate_screen(raw_screen) -> np.ndarray:
    screen = np.asarray(raw_screen)
    if screen.ndim != 2:
        raise ValueError(f"Raw screen must be a 2-D grid, got shape: {screen.shape}")
    if not np.issubdtype(screen.dtype, np.integer):
        raise ValueError(f"Raw screen must hold integer palette indices, got dtype: {screen.dtype}")

    height, width = screen.shape
    if height <= width:
        raise ValueError(f"Raw screen must be taller than wide, got {width}x{height}")
    if width <= CROP_LEFT_COLUMNS:
        raise ValueError(f"Raw screen must be wider than {CROP_LEFT_COLUMNS} columns, got {width}")
    if screen.min() < 0 or screen.max() >= len(GRAYSCALE_TABLE):
        raise ValueError(f"Palette indices out of range [0, 255]: "
                         f"min={screen.min()}, max={screen.max()}")
    if np.any(screen & 1):
        raise ValueError("Palette indices must be even")
    return screen


def preprocess_screen(raw_screen, frame_size: int = CROPPED_FRAME_SIZE) -> np.ndarray:
    """
    Crop and downscale a raw emulator screen to a square grayscale frame.

    Uses area-weighted box resampling: every destination cell averages the
    source pixels it covers, weighted by their fractional overlap, which
    avoids the aliasing of nearest-neighbor subsampling.

    Args:
        raw_screen: Palette indices of shape [height, width], height > width
        frame_size: Side length of the resulting frame

    Returns:
        Read-only uint8 array of shape [frame_size, frame_size]
    """
    screen = _validate_screen(raw_screen)
    height, width = screen.shape
    start_x, start_y, cropped_width, cropped_height = crop_bounds(width, height)

    cropped = screen[start_y:start_y + cropped_height, start_x:start_x + cropped_width]
    gray = GRAYSCALE_TABLE[cropped].astype(np.float64)

    # Separable: cell (i, j) = sum_y sum_x wy[i, y] * wx[j, x] * gray[y, x]
    y_weights = overlap_weights(cropped_height, frame_size)
    x_weights = overlap_weights(cropped_width, frame_size)
    resampled = y_weights @ gray @ x_weights.T

    frame = np.clip(np.rint(resampled), 0, 255).astype(np.uint8)
    frame.flags.writeable = False
    return frame


class PreprocessingWrapper(gym.Wrapper):
    """
    Environment wrapper that turns ALE screens into preprocessed frames.

    Performs the following steps on every step:
    1. Action repeat - the action is held for `skip` emulator frames
    2. Reward clipping - the summed reward is clipped to [-1, 1]
    3. Screen preprocessing - the palette screen is cropped and resampled
       into a single frame of frame_size x frame_size

    Frame stacking is left to `FrameStack`, so frames stay shared.
    """

    def __init__(self,
                 env: Env,
                 skip: int = 4,
                 frame_size: int = CROPPED_FRAME_SIZE):
        """
        Initialize the preprocessing wrapper.

        Args:
            env: ALE-backed Gymnasium environment to wrap
            skip: Number of emulator frames each action is repeated for
            frame_size: Side length of the preprocessed frames
        """
        super().__init__(env)
        if skip < 1:
            raise ValueError(f"skip must be >= 1, got: {skip}")
        self._skip = skip
        self._frame_size = frame_size

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, dict]:
        """
        Execute action in environment and return the preprocessed result.

        Args:
            action: Action to take in the environment

        Returns:
            Tuple of (frame, clipped_reward, terminated, truncated, info)
        """
        total_reward, term, trunc, info = self._repeat_action(action)
        frame = preprocess_screen(self._raw_screen(), self._frame_size)
        return frame, self._clip_reward(total_reward), term, trunc, info

    def _repeat_action(self, action: int):
        total_reward = 0.0
        for _ in range(self._skip):
            _, reward, term, trunc, info = self.env.step(action)
            total_reward += reward
            if term or trunc:
                break
        return total_reward, term, trunc, info

    @staticmethod
    def _clip_reward(reward: float) -> float:
        return float(np.clip(reward, -1.0, 1.0))

    def _raw_screen(self) -> np.ndarray:
        """
        Read the palette-index screen straight from the emulator.

        Returns:
            Array of shape [height, width]
        """
        ale = self.env.unwrapped.ale
        screen = np.asarray(ale.getScreen())
        if screen.ndim == 1:
            height, width = ale.getScreenDims()
            screen = screen.reshape(height, width)
        return screen

    def reset(self, *, seed=None, options=None) -> Tuple[np.ndarray, dict]:
        """
        Reset the environment and return the initial preprocessed frame.

        Args:
            seed: Random seed for environment
            options: Options for environment reset

        Returns:
            Tuple of (initial_frame, info)
        """
        _, info = self.env.reset(seed=seed, options=options)
        return preprocess_screen(self._raw_screen(), self._frame_size), info
