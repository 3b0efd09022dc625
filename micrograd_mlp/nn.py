"""
Neural Network Module
=====================

Neural network building blocks on top of the scalar autograd engine.

This module provides:
- Module: Base class with parameters() and zero_grad()
- Neuron: tanh(w . x + b)
- Layer: A collection of neurons sharing one input vector
- MLP: Multi-layer perceptron (stack of layers)
- SGD: Plain gradient descent, used by MLP.update()
- mse_loss: Summed squared error between targets and predictions

Parameters are created once, when a module is built, and are mutated in
place by backward() (grad) and by the update step (data). Inputs and every
intermediate node are rebuilt on each forward pass.
"""

from __future__ import annotations
import logging
import numbers
import numpy as np
from typing import List, Optional, Sequence, Union

from .engine import Numeric, Value
from .exceptions import ShapeMismatchError

logger = logging.getLogger(__name__)

Input = Sequence[Union[Value, Numeric]]


def _as_values(x: Input, prefix: str = '') -> List[Value]:
    """Lift raw numbers to fresh leaf Values; Values pass through unchanged."""
    return [
        xi if isinstance(xi, Value) else Value(xi, label=f'{prefix}{i}' if prefix else '')
        for i, xi in enumerate(x)
    ]


class Module:
    """
    Base class for all neural network modules.

    Subclasses override parameters(); zero_grad() then works for free.
    """

    def parameters(self) -> List[Value]:
        """
        Return all trainable parameters in this module, in a fixed order.

        Returns:
            List of Value objects representing trainable parameters.
        """
        return []

    def zero_grad(self) -> None:
        """
        Reset gradients of all parameters to zero.

        Call this before each backward pass to prevent gradient accumulation.
        """
        for p in self.parameters():
            p.zero_grad()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class Neuron(Module):
    """
    A single artificial neuron.

    Computes: output = tanh(sum(w_i * x_i) + b)

    Attributes:
        w: List of weight Values, drawn uniformly from [-1, 1)
        b: Bias Value, starts at 0
        label: Prefix used to label the parameters

    Example:
        >>> n = Neuron(3, label='n')
        >>> out = n([1.0, 2.0, 3.0])
        >>> [p.label for p in n.parameters()]
        ['n-w0', 'n-w1', 'n-w2', 'n-b']
    """

    def __init__(
        self,
        nin: int,
        label: str = '',
        rng: Optional[np.random.Generator] = None
    ) -> None:
        """
        Initialize a neuron.

        Args:
            nin: Number of inputs to this neuron.
            label: Name prefix for the weight and bias labels.
            rng: Random generator for weight initialization. A fresh,
                unseeded generator is used when omitted.
        """
        rng = rng if rng is not None else np.random.default_rng()
        self.label: str = label
        self.w: List[Value] = [
            Value(rng.uniform(-1.0, 1.0), label=f'{label}-w{i}')
            for i in range(nin)
        ]
        self.b: Value = Value(0.0, label=f'{label}-b')

    def __call__(self, x: Input) -> Value:
        """
        Forward pass: compute neuron output.

        Args:
            x: Inputs (Values or numbers), one per weight.

        Returns:
            Single Value representing neuron output.

        Raises:
            ShapeMismatchError: If input length doesn't match weight count.
        """
        if len(x) != len(self.w):
            raise ShapeMismatchError(
                f"Expected {len(self.w)} inputs, got {len(x)}"
            )

        act = sum((wi * xi for wi, xi in zip(self.w, x)), self.b)
        return act.tanh()

    def parameters(self) -> List[Value]:
        """Return weights and bias."""
        return self.w + [self.b]

    def __repr__(self) -> str:
        return f"Neuron({len(self.w)})"


class Layer(Module):
    """
    A fully connected layer of neurons.

    Every neuron sees the same input vector, so a layer with `nout`
    neurons maps `nin` inputs to `nout` outputs.

    Attributes:
        neurons: List of Neuron objects

    Example:
        >>> layer = Layer(3, 4)  # 3 inputs, 4 outputs
        >>> out = layer([1.0, 2.0, 3.0])  # List of 4 Values
    """

    def __init__(
        self,
        nin: int,
        nout: int,
        label: str = '',
        rng: Optional[np.random.Generator] = None
    ) -> None:
        """
        Initialize a layer.

        Args:
            nin: Number of inputs per neuron.
            nout: Number of neurons (outputs).
            label: Name prefix; neuron j is labelled '{label}-N{j}'.
            rng: Random generator shared by all neurons.
        """
        rng = rng if rng is not None else np.random.default_rng()
        self.nin: int = nin
        self.label: str = label
        self.neurons: List[Neuron] = [
            Neuron(nin, label=f'{label}-N{j}', rng=rng)
            for j in range(nout)
        ]

    def __call__(self, x: Input) -> List[Value]:
        """Apply every neuron to x. Always returns a list, even for one neuron."""
        return [n(x) for n in self.neurons]

    def parameters(self) -> List[Value]:
        """Return all parameters from all neurons."""
        return [p for n in self.neurons for p in n.parameters()]

    def __repr__(self) -> str:
        return f"Layer({self.nin} -> {len(self.neurons)})"


class MLP(Module):
    """
    Multi-Layer Perceptron: a stack of fully connected tanh layers.

    Layer sizes chain as ``[nin] + nouts``: layer i maps sizes[i] inputs to
    sizes[i + 1] outputs.

    Attributes:
        layers: List of Layer objects, labelled 'L0', 'L1', ...

    Example:
        >>> model = MLP(3, [4, 4, 1], seed=0)
        >>> out = model([2.0, 3.0, -1.0])  # [Value]
    """

    def __init__(
        self,
        nin: int,
        nouts: List[int],
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None
    ) -> None:
        """
        Initialize an MLP.

        Args:
            nin: Number of input features.
            nouts: List of layer sizes. Last element is output size.
            seed: Seed for weight initialization. The same seed always
                produces the same weights.
            rng: Generator to draw weights from. Takes precedence over seed.
        """
        rng = rng if rng is not None else np.random.default_rng(seed)
        sizes = [nin] + list(nouts)
        self.nin: int = nin
        self.layers: List[Layer] = [
            Layer(sizes[i], sizes[i + 1], label=f'L{i}', rng=rng)
            for i in range(len(nouts))
        ]
        logger.debug(
            "MLP built: sizes=%s parameters=%d seed=%s",
            sizes, len(self.parameters()), seed
        )

    def __call__(self, x: Input) -> List[Value]:
        """
        Forward pass through all layers.

        Raw numbers in x are lifted to fresh leaf Values labelled 'i0',
        'i1', ... before the first layer.

        Returns:
            List of output Values (length nouts[-1]).
        """
        out = _as_values(x, prefix='i')
        for layer in self.layers:
            out = layer(out)
        return out

    def predict(
        self, xs: Union[Input, Sequence[Input]]
    ) -> Union[List[Value], List[List[Value]]]:
        """
        Run the forward pass on one sample or on a batch of samples.

        A sequence whose first element is a Value or a number is treated as
        a single sample. Anything else is treated as a batch and each sample
        is run independently.
        """
        if len(xs) == 0 or isinstance(xs[0], (Value, numbers.Real)):
            return self(xs)
        return [self(x) for x in xs]

    def update(self, learning_rate: float) -> None:
        """Gradient descent step: p.data -= learning_rate * p.grad for every parameter."""
        SGD(self.parameters(), lr=learning_rate).step()

    def parameters(self) -> List[Value]:
        """Return all parameters from all layers."""
        return [p for layer in self.layers for p in layer.parameters()]

    def __repr__(self) -> str:
        layer_strs = [str(layer) for layer in self.layers]
        return f"MLP([{', '.join(layer_strs)}])"


# =============================================================================
# Loss Functions
# =============================================================================

def mse_loss(
    target: Sequence[Union[Value, Numeric]],
    prediction: Sequence[Value]
) -> Value:
    """
    Squared error loss, summed over samples.

    loss = sum((prediction_i - target_i)^2)

    The result is a single Value whose graph reaches back through every
    prediction, so loss.backward() fills in every parameter's gradient.

    Args:
        target: Ground truth (Values or numbers).
        prediction: Model outputs.

    Returns:
        Scalar Value representing the loss.

    Raises:
        ShapeMismatchError: If target and prediction lengths differ.
    """
    if len(target) != len(prediction):
        raise ShapeMismatchError(
            f"target has {len(target)} elements, prediction has {len(prediction)}"
        )

    targets = _as_values(target)
    loss = sum(
        ((pred - t) ** 2 for pred, t in zip(prediction, targets)),
        Value(0.0)
    )
    loss.label = 'loss'
    return loss


# =============================================================================
# Optimizer
# =============================================================================

class SGD:
    """
    Plain gradient descent.

    Updates parameters: p = p - lr * p.grad

    No momentum and no adaptive scaling.

    Attributes:
        params: List of parameters to optimize.
        lr: Learning rate.
    """

    def __init__(self, params: List[Value], lr: float = 0.01) -> None:
        self.params = params
        self.lr = lr

    def step(self) -> None:
        """
        Perform one optimization step.

        Call this after backward().
        """
        for p in self.params:
            p.data -= self.lr * p.grad
