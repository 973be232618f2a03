#!/usr/bin/env python
# coding: utf-8

import os
import time
import random
import numpy as np
import torch
import functools
import gymnasium as gym
from typing import Callable, Any, Sequence, List

from .frame_stack import InputFrames
from .preprocessing import PreprocessingWrapper

ACTION_NAME_PREFIX = "PLAYER_A_"


# Timing decorator
def timeit(func: Callable) -> Callable:
    """
    Decorator to measure function execution time.

    Args:
        func: Function to measure

    Returns:
        Wrapped function that prints execution time
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        end_time = time.perf_counter()
        elapsed_time = end_time - start_time

        print(f"{func.__name__}() executed in {elapsed_time:.4f} seconds")
        return result

    return wrapper


# Random seed management
def set_config_seed(seed: int) -> np.random.Generator:
    """
    Set seeds for reproduction across random number generators.

    Ensures deterministic behavior across:
    - Python random module
    - NumPy
    - PyTorch (CPU and GPU)
    - CUDA backends

    Args:
        seed: Random seed to set

    Returns:
        Generator to pass explicitly to sampling and action selection
    """
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)
        torch.backends.cudnn.benchmark = False
        torch.backends.cudnn.deterministic = True
    os.environ['PYTHONHASHSEED'] = str(seed)
    return np.random.default_rng(seed)


# Environment creation helper
def make_wrapped_env(env_name: str = "ALE/Pong-v5", skip: int = 4, **params):
    """
    Create an ALE environment wrapped with screen preprocessing.

    Action repeat is done by the wrapper, so the emulator runs with
    frameskip=1 and no sticky actions.

    Args:
        env_name: Name of the Gymnasium environment
        skip: Number of emulator frames each action is repeated for
        **params: Additional parameters for environment creation

    Returns:
        Preprocessed environment
    """
    import ale_py

    gym.register_envs(ale_py)
    params.setdefault("frameskip", 1)
    params.setdefault("repeat_action_probability", 0.0)
    env = gym.make(env_name, **params)
    return PreprocessingWrapper(env, skip=skip)


def action_names(env) -> List[str]:
    """
    Name every action of an ALE environment the way the emulator does.

    Args:
        env: Gymnasium ALE environment, possibly wrapped

    Returns:
        Names such as "PLAYER_A_NOOP", indexed by action id
    """
    return [ACTION_NAME_PREFIX + meaning
            for meaning in env.unwrapped.get_action_meanings()]


# Debug dumps
def draw_frame(frame: np.ndarray) -> str:
    """
    Render a frame as text, one hex digit (intensity // 16) per cell.

    Args:
        frame: Array of shape [frame_size, frame_size]

    Returns:
        One newline-terminated line per row
    """
    frame = np.asarray(frame)
    if frame.ndim != 2 or frame.shape[0] != frame.shape[1]:
        raise ValueError(f"Frame must be a square grid, got shape: {frame.shape}")

    lines = []
    for row in frame:
        lines.append("".join(f"{int(cell) // 16:x}" for cell in row))
    return "".join(line + "\n" for line in lines)


def format_q_values(q_values: Sequence[float],
                    names: Sequence[str],
                    prefix: str = ACTION_NAME_PREFIX) -> str:
    """
    Format action values as a two-line table.

    The first line holds the action names without `prefix`, the second the
    values right below them. Each column is one wider than its longest entry.

    Args:
        q_values: One value per action
        names: Action names, same order as q_values
        prefix: Prefix stripped from every name

    Returns:
        Two newline-terminated lines
    """
    if len(q_values) == 0 or len(names) == 0:
        raise ValueError("q_values and names must not be empty")
    if len(q_values) != len(names):
        raise ValueError(f"Got {len(q_values)} q_values for {len(names)} actions")

    names_line = ""
    values_line = ""
    for q_value, name in zip(q_values, names):
        name_str = name.replace(prefix, "")
        value_str = f"{float(q_value):f}"
        width = max(len(name_str), len(value_str)) + 1
        names_line += name_str.rjust(width)
        values_line += value_str.rjust(width)
    return names_line + "\n" + values_line + "\n"


def debug_frame_stack(frames: InputFrames):
    """
    Debug function to visualize the frames of one decision state.

    Args:
        frames: Input frames, oldest first
    """
    import matplotlib.pyplot as plt

    fig, axes = plt.subplots(1, len(frames), figsize=(3 * len(frames), 3))
    axes = np.atleast_1d(axes)

    for i, (ax, frame) in enumerate(zip(axes.flat, frames)):
        ax.imshow(frame, cmap='gray', vmin=0, vmax=255)
        ax.set_title(f"Frame {i}")
        ax.axis('off')

    plt.tight_layout()
    plt.show()
    return fig
