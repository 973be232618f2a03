#!/usr/bin/env python
# coding: utf-8

"""
Training script for the frame prediction agent on an Atari game.

Builds the preprocessed ALE environment, the torch learner and the agent,
then trains and saves the learner.
"""

import logging
import traceback
import numpy as np
import torch

from atari_dqn.agent import AgentDQN
from atari_dqn.constants import MINIBATCH_SIZE, REPLAY_MEMORY_CAPACITY
from atari_dqn.learner import TorchLearner
from atari_dqn.utils import set_config_seed, make_wrapped_env, action_names, draw_frame

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def train_dqn_agent(
    env_name="ALE/Pong-v5",
    episodes=100,
    epsilon=1.0,
    learning_rate=0.00025,
    batch_size=MINIBATCH_SIZE,
    replay_capacity=REPLAY_MEMORY_CAPACITY,
    replay_start_size=MINIBATCH_SIZE,
    update_frequency=1,
    skip=4,
    log_interval=10,
    seed=42,
    model_path="learner.pth",
    restore_path=None
):
    """
    Train an agent on the specified environment.

    Args:
        env_name: Environment name
        episodes: Number of training episodes
        epsilon: Exploration rate handed to the policy
        learning_rate: Learning rate for optimizer
        batch_size: Minibatch size
        replay_capacity: Replay memory capacity
        replay_start_size: Transitions stored before training starts
        update_frequency: Steps between training updates
        skip: Emulator frames per agent step
        log_interval: Episodes between logging
        seed: Random seed
        model_path: Where the trained learner is saved
        restore_path: Checkpoint to resume from (None for fresh start)

    Returns:
        Trained agent and the per-episode rewards
    """
    device = torch.device("cuda" if torch.cuda.is_available() else "cpu")
    logger.info(f"Using device: {device}")

    rng = set_config_seed(seed)

    env = make_wrapped_env(env_name, skip=skip)
    try:
        env.reset(seed=seed)
        legal_actions = list(range(env.action_space.n))
        logger.info(f"Legal actions: {action_names(env)}")

        learner = TorchLearner(device=device,
                               batch_size=batch_size,
                               learning_rate=learning_rate)
        if restore_path:
            learner.restore_solver(restore_path)

        agent = AgentDQN(learner=learner,
                         legal_actions=legal_actions,
                         replay_capacity=replay_capacity,
                         batch_size=batch_size,
                         rng=rng)

        rewards = agent.train(env=env,
                              episodes=episodes,
                              epsilon=epsilon,
                              replay_start_size=replay_start_size,
                              update_frequency=update_frequency,
                              log_interval=log_interval)

        learner.save(model_path)
        logger.info(f"Average reward: {np.mean(rewards):.2f}")
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Predicted next frame:\n" +
                         draw_frame(agent.predict_next_frame(agent.frame_stack.frames())))
        return agent, rewards

    except Exception as ex:
        logger.error(f"Training failed: {ex}")
        traceback.print_exc()
        raise
    finally:
        env.close()


def main():
    """Main function to run training."""

    # Configuration
    config = {
        "env_name": "ALE/Pong-v5",
        "episodes": 100,
        "epsilon": 1.0,
        "learning_rate": 0.00025,
        "batch_size": MINIBATCH_SIZE,
        "replay_capacity": 100000,
        "replay_start_size": 1000,
        "update_frequency": 4,
        "skip": 4,
        "log_interval": 10,
        "seed": 42,
    }

    logger.info("=" * 60)
    logger.info("Frame prediction training")
    logger.info("=" * 60)
    for key, value in config.items():
        logger.info(f"  {key}: {value}")

    train_dqn_agent(**config)


if __name__ == "__main__":
    main()
