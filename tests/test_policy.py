#!/usr/bin/env python
# coding: utf-8

import unittest
import numpy as np
import os
import sys

# Add parent directory to path to import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from atari_dqn.policy import UniformRandomPolicy
from tests.fake_env import make_frame


class TestUniformRandomPolicy(unittest.TestCase):

    def setUp(self):
        self.policy = UniformRandomPolicy()
        self.frames = (make_frame(0),) * 4
        self.rng = np.random.default_rng(0)

    def test_selects_only_legal_actions(self):
        legal_actions = [0, 3, 11]
        chosen = {self.policy.select(self.frames, legal_actions, 0.0, self.rng)
                  for _ in range(300)}
        self.assertEqual(chosen, set(legal_actions))

    def test_epsilon_does_not_matter(self):
        """Test that the choice depends on the generator only."""
        greedy = [self.policy.select(self.frames, range(18), 0.0, np.random.default_rng(5))
                  for _ in range(3)]
        random = [self.policy.select(self.frames, range(18), 1.0, np.random.default_rng(5))
                  for _ in range(3)]
        self.assertEqual(greedy, random)

    def test_no_legal_actions(self):
        with self.assertRaises(ValueError):
            self.policy.select(self.frames, [], 0.0, self.rng)


if __name__ == '__main__':
    unittest.main()
