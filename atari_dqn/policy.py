#!/usr/bin/env python
# coding: utf-8

import abc
import numpy as np
from typing import Sequence

from .frame_stack import InputFrames


class ActionPolicy(abc.ABC):
    """Chooses the next action from the current decision state."""

    @abc.abstractmethod
    def select(self,
               frames: InputFrames,
               legal_actions: Sequence[int],
               epsilon: float,
               rng: np.random.Generator) -> int:
        """
        Select an action.

        Args:
            frames: Current input frames
            legal_actions: Actions available in the game
            epsilon: Exploration rate
            rng: Random generator

        Returns:
            One of `legal_actions`
        """


class UniformRandomPolicy(ActionPolicy):
    """
    Picks uniformly among the legal actions.

    Neither the frames nor epsilon influence the choice.
    """

    def select(self, frames, legal_actions, epsilon, rng):
        if len(legal_actions) == 0:
            raise ValueError("No legal actions to select from")
        return legal_actions[int(rng.integers(0, len(legal_actions)))]
