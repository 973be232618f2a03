#!/usr/bin/env python
# coding: utf-8

"""
Frame preprocessing and experience replay for Atari agents

This package turns raw ALE palette screens into fixed-size grayscale frames,
keeps a bounded replay memory of transitions sharing those frames, and
assembles flattened minibatches for a pluggable learner.

Modules:
    palette: NTSC palette and grayscale conversion
    preprocessing: Screen cropping, area resampling and environment wrapper
    frame_stack: Sliding window of recent frames
    replay_memory: Transitions and the bounded FIFO replay memory
    minibatch: Uniform minibatch sampling into flat tensors
    learner: Learner interface and its torch implementation
    network: Frame prediction network
    policy: Action selection policies
    agent: Agent tying the pieces together
    utils: Debug dumps, seeding and environment helpers
"""

from .agent import AgentDQN
from .frame_stack import FrameStack, InputFrames
from .learner import Learner, TorchLearner, ConfigurationError
from .minibatch import Minibatch, sample_minibatch, input_frames_tensor
from .network import FramePredictionNetwork
from .palette import pixel_to_rgb, rgb_to_grayscale, pixel_to_grayscale, GRAYSCALE_TABLE
from .policy import ActionPolicy, UniformRandomPolicy
from .preprocessing import preprocess_screen, PreprocessingWrapper
from .replay_memory import ReplayMemory, Transition
from .utils import (
    timeit,
    set_config_seed,
    make_wrapped_env,
    action_names,
    draw_frame,
    format_q_values,
    debug_frame_stack
)

__version__ = "1.0.0"

__all__ = [
    "AgentDQN",
    "FrameStack",
    "InputFrames",
    "Learner",
    "TorchLearner",
    "ConfigurationError",
    "Minibatch",
    "sample_minibatch",
    "input_frames_tensor",
    "FramePredictionNetwork",
    "pixel_to_rgb",
    "rgb_to_grayscale",
    "pixel_to_grayscale",
    "GRAYSCALE_TABLE",
    "ActionPolicy",
    "UniformRandomPolicy",
    "preprocess_screen",
    "PreprocessingWrapper",
    "ReplayMemory",
    "Transition",
    "timeit",
    "set_config_seed",
    "make_wrapped_env",
    "action_names",
    "draw_frame",
    "format_q_values",
    "debug_frame_stack"
]
