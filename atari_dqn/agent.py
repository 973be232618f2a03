#!/usr/bin/env python
# coding: utf-8

import logging
import numpy as np
from gymnasium import Env
from tqdm import tqdm
from typing import Sequence

from .constants import (
    CROPPED_FRAME_SIZE,
    INPUT_FRAME_COUNT,
    MINIBATCH_SIZE,
    OUTPUT_COUNT,
    REPLAY_MEMORY_CAPACITY,
)
from .frame_stack import FrameStack, InputFrames
from .learner import Learner, ConfigurationError
from .minibatch import sample_minibatch, input_frames_tensor
from .policy import ActionPolicy, UniformRandomPolicy
from .replay_memory import ReplayMemory, Transition
from .utils import timeit


class AgentDQN:
    """
    Agent learning to predict the next game frame from raw screens.

    Owns the replay memory and the frame window, selects actions through an
    injected policy and hands sampled minibatches to an injected learner.
    """

    def __init__(self,
                 learner: Learner,
                 legal_actions: Sequence[int],
                 replay_capacity: int = REPLAY_MEMORY_CAPACITY,
                 batch_size: int = MINIBATCH_SIZE,
                 frame_count: int = INPUT_FRAME_COUNT,
                 frame_size: int = CROPPED_FRAME_SIZE,
                 output_count: int = OUTPUT_COUNT,
                 policy: ActionPolicy = None,
                 rng: np.random.Generator = None):
        """
        Initialize the agent.

        Args:
            learner: Training capability receiving the minibatches
            legal_actions: Action ids available in the game
            replay_capacity: Maximum number of stored transitions
            batch_size: Transitions per minibatch
            frame_count: Frames per decision state
            frame_size: Side length of the preprocessed frames
            output_count: Number of action ids the agent may record
            policy: Action selection policy, uniform random if None
            rng: Random generator for sampling and action selection

        Raises:
            ConfigurationError: if the learner does not match the frame geometry
        """
        learner.check_shapes(frame_count, frame_size, batch_size)
        if len(legal_actions) == 0:
            raise ConfigurationError("No legal actions given")
        for action in legal_actions:
            if not 0 <= action < output_count:
                raise ConfigurationError(f"Legal action {action} out of range [0, {output_count})")

        self.learner = learner
        self.legal_actions = list(legal_actions)
        self.batch_size = batch_size
        self.frame_size = frame_size
        self.output_count = output_count
        self.policy = UniformRandomPolicy() if policy is None else policy
        self.rng = np.random.default_rng() if rng is None else rng
        self.replay_memory = ReplayMemory(replay_capacity, frame_shape=(frame_size, frame_size))
        self.frame_stack = FrameStack(frame_count)
        self.logger = logging.getLogger(self.__class__.__name__)

    def select_action(self, frames: InputFrames, epsilon: float) -> int:
        """
        Select the next action with the configured policy.

        Args:
            frames: Current input frames
            epsilon: Exploration rate handed to the policy

        Returns:
            Selected action id
        """
        return self.policy.select(frames, self.legal_actions, epsilon, self.rng)

    def add_transition(self, transition: Transition) -> None:
        if not 0 <= transition.action < self.output_count:
            raise ValueError(f"Action {transition.action} out of range [0, {self.output_count})")
        self.replay_memory.add(transition)

    def update(self) -> float:
        """
        Sample a minibatch from replay memory and run one training step.

        Returns:
            Loss reported by the learner
        """
        minibatch = sample_minibatch(self.replay_memory, self.batch_size, self.rng)
        self.logger.debug(f"Training on transitions: {minibatch.indices.tolist()}")
        return self.learner.forward_and_backward(minibatch.frames, minibatch.target)

    def predict_next_frame(self, frames: InputFrames) -> np.ndarray:
        """
        Predict the frame following the given input frames.

        Args:
            frames: Input frames, oldest first

        Returns:
            Read-only uint8 frame of shape [frame_size, frame_size]
        """
        cells = self.learner.predict(input_frames_tensor(frames))[0].numpy()
        frame = (np.clip(np.rint(cells), 0, 255)
                   .astype(np.uint8)
                   .reshape(self.frame_size, self.frame_size))
        frame.flags.writeable = False
        return frame

    @timeit
    def train(self,
              env: Env,
              episodes: int,
              epsilon: float = 1.0,
              replay_start_size: int = MINIBATCH_SIZE,
              update_frequency: int = 1,
              log_interval: int = 10) -> list[float]:
        """
        Main training loop.

        Every step: select an action, step the environment, record the
        transition, push the new frame into the window and, once the replay
        memory holds `replay_start_size` transitions, train every
        `update_frequency` steps.

        Args:
            env: Environment yielding preprocessed frames
            episodes: Number of episodes to play
            epsilon: Exploration rate handed to the policy
            replay_start_size: Transitions stored before training starts
            update_frequency: Steps between training updates
            log_interval: Episodes between progress logs

        Returns:
            Total reward of every episode
        """
        if replay_start_size < 1 or update_frequency < 1:
            raise ValueError("replay_start_size and update_frequency must be >= 1")

        self.logger.info("Training the agent...")

        episodes_total_reward = []
        cnt_steps = 0

        for episode in (pbar := tqdm(range(1, episodes + 1),
                                     unit="episode",
                                     desc="Training",
                                     ncols=100,
                                     mininterval=5.0)):
            frame, _ = env.reset()
            self.frame_stack.reset(frame)
            episode_reward = 0.0
            episode_loss = []

            while True:
                frames = self.frame_stack.frames()
                action = self.select_action(frames, epsilon)
                next_frame, reward, term, trunc, _ = env.step(action)

                # Truncated episodes keep their next frame, only termination zeroes the target
                self.add_transition(Transition(frames, action, reward,
                                               None if term else next_frame))
                self.frame_stack.push(next_frame)

                episode_reward += reward
                cnt_steps += 1

                if (len(self.replay_memory) >= replay_start_size and
                        cnt_steps % update_frequency == 0):
                    episode_loss.append(self.update())

                if term or trunc:
                    break

            episodes_total_reward.append(episode_reward)
            mean_loss = float(np.mean(episode_loss)) if episode_loss else float("nan")
            pbar.set_postfix({
                "reward": f"{episode_reward:.2f}",
                "loss": f"{mean_loss:.4f}",
                "steps": str(cnt_steps)
            })

            if episode % log_interval == 0 or episode == episodes:
                self.logger.info(f"Episode {episode}: reward {episode_reward}, loss {mean_loss:.4f}, "
                                 f"memory {len(self.replay_memory)}, "
                                 f"positive rewards {self.replay_memory.cnt_rewards}")

        self.logger.info("Training finished!")
        return episodes_total_reward

    def play(self, env: Env, episodes: int = 1, epsilon: float = 0.05) -> list[float]:
        """
        Run the agent without recording or training.

        Args:
            env: Environment yielding preprocessed frames
            episodes: Number of episodes to run
            epsilon: Exploration rate handed to the policy

        Returns:
            List of total rewards per episode
        """
        episodes_total_reward = []

        for episode in range(episodes):
            frame, _ = env.reset()
            self.frame_stack.reset(frame)
            total_reward = 0.0

            while True:
                action = self.select_action(self.frame_stack.frames(), epsilon)
                frame, reward, term, trunc, _ = env.step(action)
                self.frame_stack.push(frame)
                total_reward += reward
                if term or trunc:
                    break

            self.logger.info(f"Total reward in episode {episode}: {total_reward}")
            episodes_total_reward.append(total_reward)

        return episodes_total_reward
