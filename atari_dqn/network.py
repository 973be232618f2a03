#!/usr/bin/env python
# coding: utf-8

import torch
import torch.nn as nn

from .constants import INPUT_FRAME_COUNT, CROPPED_FRAME_SIZE


class FramePredictionNetwork(nn.Module):
    """
    Convolutional encoder-decoder predicting the next frame.

    Two convolutional layers encode the stacked input frames, two fully
    connected layers form the bottleneck and two transposed convolutions
    reconstruct a single frame of the same size.
    """

    def __init__(self,
                 input_size: int = INPUT_FRAME_COUNT,
                 frame_size: int = CROPPED_FRAME_SIZE,
                 hidden: int = 512):
        """
        Initialize the frame prediction network.

        Args:
            input_size: Number of input channels (stacked frames)
            frame_size: Side length of input and output frames
            hidden: Width of the bottleneck layer
        """
        super(FramePredictionNetwork, self).__init__()
        self.input_size = input_size
        self.frame_size = frame_size

        # 84x84 -> 20x20
        self.conv1 = nn.Conv2d(in_channels=input_size, out_channels=32, stride=4, kernel_size=(8, 8))
        self.relu1 = nn.ReLU()

        # 20x20 -> 9x9
        self.conv2 = nn.Conv2d(in_channels=32, out_channels=64, stride=2, kernel_size=(4, 4))
        self.relu2 = nn.ReLU()

        conv_size = self._conv_output_size(frame_size)
        self.code_shape = (64, conv_size, conv_size)
        code_features = 64 * conv_size * conv_size

        self.flatten = nn.Flatten()
        self.ip1 = nn.Linear(in_features=code_features, out_features=hidden)
        self.relu3 = nn.ReLU()
        self.ip2 = nn.Linear(in_features=hidden, out_features=code_features)
        self.relu4 = nn.ReLU()

        # 9x9 -> 20x20 -> 84x84
        self.deconv1 = nn.ConvTranspose2d(in_channels=64, out_channels=32, stride=2, kernel_size=(4, 4))
        self.relu5 = nn.ReLU()
        self.deconv2 = nn.ConvTranspose2d(in_channels=32, out_channels=1, stride=4, kernel_size=(8, 8))

    @staticmethod
    def _conv_output_size(frame_size: int) -> int:
        size = (frame_size - 8) // 4 + 1
        return (size - 4) // 2 + 1

    def forward(self, x):
        """
        Forward pass through the network.

        Args:
            x: Input tensor of shape [batch_size, input_size, frame_size, frame_size]

        Returns:
            Predicted frame of shape [batch_size, 1, H, W]
        """
        x = self.relu1(self.conv1(x))
        x = self.relu2(self.conv2(x))

        x = self.flatten(x)
        x = self.relu3(self.ip1(x))
        x = self.relu4(self.ip2(x))
        x = x.view(-1, *self.code_shape)

        x = self.relu5(self.deconv1(x))
        return self.deconv2(x)
