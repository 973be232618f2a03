#!/usr/bin/env python
# coding: utf-8

import unittest
import torch
import torch.nn as nn
import sys
import os

# Add parent directory to path to import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from atari_dqn.network import FramePredictionNetwork


class TestFramePredictionNetwork(unittest.TestCase):
    """Unit tests for the FramePredictionNetwork class."""

    def setUp(self):
        """Set up test fixtures."""
        self.batch_size = 8
        self.input_channels = 4
        self.frame_size = 84
        self.network = FramePredictionNetwork(input_size=self.input_channels,
                                              frame_size=self.frame_size)

    def test_network_initialization(self):
        """Test that network is properly initialized."""
        self.assertIsInstance(self.network, nn.Module)
        self.assertIsInstance(self.network.conv1, nn.Conv2d)
        self.assertIsInstance(self.network.conv2, nn.Conv2d)
        self.assertIsInstance(self.network.ip1, nn.Linear)
        self.assertIsInstance(self.network.ip2, nn.Linear)
        self.assertIsInstance(self.network.deconv1, nn.ConvTranspose2d)
        self.assertIsInstance(self.network.deconv2, nn.ConvTranspose2d)

        self.assertEqual(self.network.conv1.in_channels, self.input_channels)
        self.assertEqual(self.network.conv1.out_channels, 32)
        self.assertEqual(self.network.conv2.out_channels, 64)
        self.assertEqual(self.network.code_shape, (64, 9, 9))
        self.assertEqual(self.network.ip1.in_features, 64 * 9 * 9)
        self.assertEqual(self.network.ip1.out_features, 512)
        self.assertEqual(self.network.ip2.out_features, 64 * 9 * 9)
        self.assertEqual(self.network.deconv2.out_channels, 1)

    def test_forward_pass_reconstructs_frame(self):
        input_tensor = torch.rand(self.batch_size, self.input_channels, self.frame_size, self.frame_size)
        output = self.network(input_tensor)

        self.assertEqual(output.shape, (self.batch_size, 1, self.frame_size, self.frame_size))
        self.assertFalse(torch.isnan(output).any())
        self.assertFalse(torch.isinf(output).any())

    def test_gradient_flow(self):
        """Test that gradients reach the first layer."""
        input_tensor = torch.rand(2, self.input_channels, self.frame_size, self.frame_size)
        loss = self.network(input_tensor).pow(2).mean()
        loss.backward()

        self.assertIsNotNone(self.network.conv1.weight.grad)
        self.assertIsNotNone(self.network.deconv2.weight.grad)


if __name__ == '__main__':
    unittest.main()
