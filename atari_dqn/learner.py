#!/usr/bin/env python
# coding: utf-8

import os
import abc
import logging
import torch
import torch.nn as nn
import torch.optim as optim

from .constants import INPUT_FRAME_COUNT, CROPPED_FRAME_SIZE, MINIBATCH_SIZE
from .network import FramePredictionNetwork


class ConfigurationError(RuntimeError):
    """Raised at startup when the learner cannot consume the core's tensors."""


class Learner(abc.ABC):
    """
    Training capability the minibatches are handed to.

    Tensors are the flattened buffers built by `sample_minibatch`:
    frames [batch, frame_count * frame_size**2] and
    target [batch, frame_size**2], in raw pixel units.
    """

    frame_count: int
    frame_size: int
    batch_size: int

    @abc.abstractmethod
    def forward_and_backward(self, frames: torch.Tensor, target: torch.Tensor) -> float:
        """Run one blocking training step and return its loss."""

    @abc.abstractmethod
    def predict(self, frames: torch.Tensor) -> torch.Tensor:
        """Return the predicted frame cells, shape [batch, frame_size**2]."""

    def check_shapes(self, frame_count: int, frame_size: int, batch_size: int) -> None:
        """
        Verify the learner accepts minibatches of the given geometry.

        Raises:
            ConfigurationError: if the geometry does not match
        """
        try:
            expected = (self.frame_count, self.frame_size, self.batch_size)
        except AttributeError as ex:
            raise ConfigurationError(f"{self.__class__.__name__} does not declare its "
                                     f"minibatch geometry: {ex}") from ex
        if expected != (frame_count, frame_size, batch_size):
            raise ConfigurationError(
                f"Learner expects minibatches of {self.batch_size} x {self.frame_count} "
                f"frames of {self.frame_size}x{self.frame_size}, got {batch_size} x "
                f"{frame_count} frames of {frame_size}x{frame_size}")


class TorchLearner(Learner):
    """
    Learner backed by `FramePredictionNetwork`, trained with RMSprop on MSE.

    Pixel values are scaled to [0, 1] on the way in and back to [0, 255]
    on the way out.
    """

    def __init__(self,
                 device: torch.device,
                 frame_count: int = INPUT_FRAME_COUNT,
                 frame_size: int = CROPPED_FRAME_SIZE,
                 batch_size: int = MINIBATCH_SIZE,
                 learning_rate: float = 0.00025,
                 network: nn.Module = None):
        """
        Initialize the learner and validate its tensor shapes.

        Args:
            device: PyTorch device (CPU/GPU)
            frame_count: Number of stacked input frames
            frame_size: Side length of each frame
            batch_size: Minibatch size used for training
            learning_rate: Learning rate for optimizer
            network: Network to train, a new FramePredictionNetwork if None
        """
        self.device = device
        self.frame_count = frame_count
        self.frame_size = frame_size
        self.frame_cells = frame_size * frame_size
        self.batch_size = batch_size
        self.logger = logging.getLogger(self.__class__.__name__)

        if network is None:
            network = FramePredictionNetwork(input_size=frame_count, frame_size=frame_size)
        self.network = network.to(device)
        self.network.train()

        self._check_network_output()

        self.optimizer = optim.RMSprop(self.network.parameters(), lr=learning_rate)
        self.loss_func = nn.MSELoss()
        self.logger.info(f"Created learner: {frame_count} frames of "
                         f"{frame_size}x{frame_size}, batch size {batch_size}")

    def _check_network_output(self) -> None:
        dummy = torch.zeros(self.batch_size, self.frame_count * self.frame_cells)
        try:
            with torch.no_grad():
                output = self.network(self._to_network_input(dummy))
        except RuntimeError as ex:
            raise ConfigurationError(f"Network rejects input of shape "
                                     f"[{self.batch_size}, {self.frame_count}, "
                                     f"{self.frame_size}, {self.frame_size}]: {ex}") from ex

        if output.shape[0] != self.batch_size:
            raise ConfigurationError(f"Network output batch {output.shape[0]} "
                                     f"!= minibatch size {self.batch_size}")
        if output[0].numel() < self.frame_cells:
            raise ConfigurationError(f"Network output holds {output[0].numel()} values per "
                                     f"sample, fewer than a frame of {self.frame_cells}")

    def _to_network_input(self, frames: torch.Tensor) -> torch.Tensor:
        # [B, C * H * W] -> [B, C, H, W], scaled to [0, 1]
        return (frames.to(self.device, dtype=torch.float32)
                      .reshape(-1, self.frame_count, self.frame_size, self.frame_size)
                      .div(255.0))

    def _predicted_cells(self, frames: torch.Tensor) -> torch.Tensor:
        output = self.network(self._to_network_input(frames))
        return output.flatten(start_dim=1)[:, :self.frame_cells]

    def forward_and_backward(self, frames: torch.Tensor, target: torch.Tensor) -> float:
        """
        Run one optimization step on a minibatch.

        Args:
            frames: Input tensor [batch, frame_count * frame_cells]
            target: Target tensor [batch, frame_cells]

        Returns:
            Loss value as float
        """
        if frames.shape[1] != self.frame_count * self.frame_cells:
            raise ValueError(f"Frames row size {frames.shape[1]} != "
                             f"{self.frame_count * self.frame_cells}")
        if target.shape != (frames.shape[0], self.frame_cells):
            raise ValueError(f"Target shape {tuple(target.shape)} != "
                             f"({frames.shape[0]}, {self.frame_cells})")

        prediction = self._predicted_cells(frames)
        loss = self.loss_func(prediction, target.to(self.device).div(255.0))

        self.optimizer.zero_grad()
        loss.backward()
        self.optimizer.step()

        self._log_first_parameters()
        return loss.item()

    def _log_first_parameters(self) -> None:
        if not self.logger.isEnabledFor(logging.DEBUG):
            return
        for name, module in self.network.named_children():
            weight = getattr(module, "weight", None)
            if weight is not None:
                self.logger.debug(f"{name}: {weight.detach().reshape(-1)[0].item()}")

    @torch.no_grad()
    def predict(self, frames: torch.Tensor) -> torch.Tensor:
        """
        Predict the next frame for each input row.

        Args:
            frames: Input tensor [batch, frame_count * frame_cells]

        Returns:
            Predicted cells in pixel units, shape [batch, frame_cells]
        """
        return self._predicted_cells(frames).mul(255.0).cpu()

    def save(self, file_path: str) -> None:
        """
        Save network and optimizer state to disk.

        Args:
            file_path: Path to the checkpoint file
        """
        torch.save({
            "frame_count": self.frame_count,
            "frame_size": self.frame_size,
            "learning_rate": self.optimizer.param_groups[0]['lr'],
            "model_state_dict": self.network.state_dict(),
            "optimizer_state_dict": self.optimizer.state_dict(),
        }, file_path)
        self.logger.info(f"Saved learner to: {file_path}")

    def _load(self, file_path: str) -> dict:
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"No checkpoint file \"{file_path}\" found")
        return torch.load(file_path, weights_only=False, map_location=self.device)

    def load_trained_model(self, file_path: str) -> None:
        """Load network weights only, keeping the optimizer state."""
        checkpoint = self._load(file_path)
        self.network.load_state_dict(checkpoint["model_state_dict"])
        self.logger.info(f"Loaded trained model from: {file_path}")

    def restore_solver(self, file_path: str) -> None:
        """Restore network weights and optimizer state to resume training."""
        checkpoint = self._load(file_path)
        self.network.load_state_dict(checkpoint["model_state_dict"])
        self.optimizer.load_state_dict(checkpoint["optimizer_state_dict"])
        self.logger.info(f"Restored solver from: {file_path}")
