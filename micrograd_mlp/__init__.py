"""micrograd-mlp: A scalar-value autograd engine and a tiny MLP built on it."""

from .exceptions import MicrogradError, ConversionError, ShapeMismatchError
from .ops import Op
from .engine import Value, topological_sort, trace
from .nn import Module, Neuron, Layer, MLP, SGD, mse_loss
from .train import TrainingConfig, train

__all__ = [
    "MicrogradError",
    "ConversionError",
    "ShapeMismatchError",
    "Op",
    "Value",
    "topological_sort",
    "trace",
    "Module",
    "Neuron",
    "Layer",
    "MLP",
    "SGD",
    "mse_loss",
    "TrainingConfig",
    "train",
]
