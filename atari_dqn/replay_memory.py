#!/usr/bin/env python
# coding: utf-8

import logging
import numpy as np
from typing import NamedTuple, Optional, Iterator, Tuple

from .constants import REPLAY_MEMORY_CAPACITY
from .frame_stack import InputFrames


class Transition(NamedTuple):
    """
    A single recorded step of experience.

    Frames are shared references to read-only arrays, never copies:
    - state: input frames the action was chosen from
    - action: action id taken
    - reward: reward clipped to [-1, 1]
    - next_frame: frame observed after the action, None if the step
      ended the episode
    """
    state: InputFrames
    action: int
    reward: float
    next_frame: Optional[np.ndarray]

    @property
    def is_terminal(self) -> bool:
        return self.next_frame is None


class ReplayMemory:
    """
    Bounded FIFO memory of transitions for experience replay.

    Uses a circular slot list; once full, adding a transition overwrites
    the oldest one. Logical index 0 is always the oldest transition.
    """

    def __init__(self,
                 capacity: int = REPLAY_MEMORY_CAPACITY,
                 frame_shape: Optional[Tuple[int, ...]] = None):
        """
        Initialize the replay memory.

        Args:
            capacity: Maximum number of transitions to keep
            frame_shape: Shape every stored frame must have, taken from the
                first added transition if None
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got: {capacity}")

        self._capacity = capacity
        self._slots = [None] * capacity
        self._fixed_frame_shape = None if frame_shape is None else tuple(frame_shape)
        self.frame_shape = self._fixed_frame_shape
        self.frame_count = None
        self.pos = 0
        self.count = 0
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def capacity(self) -> int:
        return self._capacity

    def add(self, transition: Transition) -> None:
        """
        Append a transition, evicting the oldest one when at capacity.

        Args:
            transition: Transition to store
        """
        self._validate(transition)

        if self.count == self._capacity:
            self.logger.debug(f"Evicting oldest transition at slot {self.pos}")

        self._slots[self.pos] = transition
        self.pos = (self.pos + 1) % self._capacity
        if self.count < self._capacity:
            self.count += 1

    def _validate(self, transition: Transition) -> None:
        state, _, reward, next_frame = transition
        if not -1.0 <= reward <= 1.0:
            raise ValueError(f"Reward must be clipped to [-1, 1], got: {reward}")
        if len(state) == 0:
            raise ValueError("Transition state holds no frames")
        if self.count > 0 and len(state) != self.frame_count:
            raise ValueError(f"Transition state holds {len(state)} frames, "
                             f"expected {self.frame_count}")

        frame_shape = state[0].shape if self.frame_shape is None else self.frame_shape
        for frame in state:
            if frame.shape != frame_shape:
                raise ValueError(f"State frame shape {frame.shape} != expected {frame_shape}")
        if next_frame is not None and next_frame.shape != frame_shape:
            raise ValueError(f"Next frame shape {next_frame.shape} != expected {frame_shape}")

        # First transition pins the geometry of the memory
        self.frame_shape = frame_shape
        self.frame_count = len(state)

    def _slot(self, index: int) -> int:
        oldest = self.pos if self.count == self._capacity else 0
        return (oldest + index) % self._capacity

    def __getitem__(self, index: int) -> Transition:
        if index < 0:
            index += self.count
        if not 0 <= index < self.count:
            raise IndexError(f"Transition index {index} out of range [0, {self.count})")
        return self._slots[self._slot(index)]

    def __iter__(self) -> Iterator[Transition]:
        for index in range(self.count):
            yield self._slots[self._slot(index)]

    def __len__(self):
        return self.count

    def enough(self, batch_size: int) -> bool:
        """
        Check if memory holds at least `batch_size` transitions.

        Args:
            batch_size: Number of transitions wanted per minibatch
        """
        return len(self) >= batch_size

    @property
    def cnt_rewards(self) -> int:
        """Number of stored transitions with positive reward."""
        return sum(1 for transition in self if transition.reward > 0)

    def clear(self) -> None:
        self._slots = [None] * self._capacity
        self.frame_shape = self._fixed_frame_shape
        self.frame_count = None
        self.pos = 0
        self.count = 0
