#!/usr/bin/env python
# coding: utf-8

import numpy as np
from collections import deque
from typing import Tuple

from .constants import INPUT_FRAME_COUNT

# Oldest frame first
InputFrames = Tuple[np.ndarray, ...]


class FrameStack:
    """
    Sliding window over the most recent preprocessed frames.

    Frames are kept by reference, the same frame object can be shared by
    several overlapping windows and transitions.
    """

    def __init__(self, frame_count: int = INPUT_FRAME_COUNT):
        if frame_count < 1:
            raise ValueError(f"frame_count must be >= 1, got: {frame_count}")
        self.frame_count = frame_count
        self._frames = deque(maxlen=frame_count)

    def reset(self, frame: np.ndarray) -> InputFrames:
        """
        Start a new episode with the window filled by `frame`.

        Args:
            frame: First preprocessed frame of the episode

        Returns:
            The resulting input frames
        """
        self._frames.clear()
        for _ in range(self.frame_count):
            self._frames.append(frame)
        return self.frames()

    def push(self, frame: np.ndarray) -> None:
        """Append the newest frame, evicting the oldest when full."""
        self._frames.append(frame)

    @property
    def is_full(self) -> bool:
        return len(self._frames) == self.frame_count

    def frames(self) -> InputFrames:
        if not self.is_full:
            raise ValueError(f"Frame stack holds {len(self._frames)} of "
                             f"{self.frame_count} frames")
        return tuple(self._frames)

    def __len__(self):
        return len(self._frames)
