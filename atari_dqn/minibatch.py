#!/usr/bin/env python
# coding: utf-8

import numpy as np
import torch
from typing import NamedTuple, Tuple

from .frame_stack import InputFrames
from .replay_memory import ReplayMemory, Transition


class Minibatch(NamedTuple):
    """
    Flattened training tensors for one update step.

    - frames: [batch_size, frame_count * frame_cells], frame-major per row
    - target: [batch_size, frame_cells], zero for terminal transitions
    - labels: [batch_size] zeros, required by the data layer interface
    - indices: memory indices the rows were drawn from
    """
    frames: torch.Tensor
    target: torch.Tensor
    labels: torch.Tensor
    indices: np.ndarray


def _check_geometry(transition: Transition,
                    index: int,
                    frame_count: int,
                    frame_shape: Tuple[int, ...]) -> None:
    if len(transition.state) != frame_count:
        raise ValueError(f"Transition {index} holds {len(transition.state)} frames, "
                         f"expected {frame_count}")
    for frame in transition.state:
        if frame.shape != frame_shape:
            raise ValueError(f"Transition {index} holds a frame of shape {frame.shape}, "
                             f"expected {frame_shape}")
    if not transition.is_terminal and transition.next_frame.shape != frame_shape:
        raise ValueError(f"Transition {index} holds a next frame of shape "
                         f"{transition.next_frame.shape}, expected {frame_shape}")


def sample_minibatch(memory: ReplayMemory,
                     batch_size: int,
                     rng: np.random.Generator) -> Minibatch:
    """
    Draw transitions uniformly with replacement and assemble a minibatch.

    Frame values are copied as they are, scaling is left to the learner.

    Args:
        memory: Replay memory to sample from
        batch_size: Number of transitions to draw
        rng: Random generator used for drawing indices

    Returns:
        Freshly allocated Minibatch owned by the caller
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got: {batch_size}")

    # Snapshot the size before drawing
    memory_size = len(memory)
    if memory_size == 0:
        raise ValueError("Cannot sample a minibatch from an empty replay memory")

    indices = rng.integers(0, memory_size, size=batch_size)

    first_state = memory[int(indices[0])].state
    frame_count = len(first_state)
    frame_shape = first_state[0].shape
    frame_cells = first_state[0].size

    frames = np.empty((batch_size, frame_count * frame_cells), dtype=np.float32)
    target = np.empty((batch_size, frame_cells), dtype=np.float32)

    for i, index in enumerate(indices):
        transition = memory[int(index)]
        _check_geometry(transition, index, frame_count, frame_shape)

        for j, frame in enumerate(transition.state):
            frames[i, j * frame_cells:(j + 1) * frame_cells] = frame.ravel()

        if transition.is_terminal:
            target[i] = 0.0
        else:
            target[i] = transition.next_frame.ravel()

    return Minibatch(frames=torch.from_numpy(frames),
                     target=torch.from_numpy(target),
                     labels=torch.zeros(batch_size, dtype=torch.float32),
                     indices=indices)


def input_frames_tensor(frames: InputFrames) -> torch.Tensor:
    """
    Flatten one decision state into a single-row input tensor.

    Args:
        frames: Input frames, oldest first

    Returns:
        Tensor of shape [1, frame_count * frame_cells]
    """
    flat = np.concatenate([frame.ravel() for frame in frames]).astype(np.float32)
    return torch.from_numpy(flat).unsqueeze(dim=0)
