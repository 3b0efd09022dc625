"""
Training loop for MLP models.

Every step follows the same order:

    forward -> loss -> zero_grad -> backward -> update

Each step builds a brand new graph from fresh input leaves; only the
model's parameters carry over, with their updated data.
"""

from __future__ import annotations
import logging
import numbers
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .engine import Numeric, Value
from .exceptions import ShapeMismatchError
from .nn import MLP, Input, mse_loss

logger = logging.getLogger(__name__)

Target = Union[Value, Numeric, Sequence[Union[Value, Numeric]]]


@dataclass
class TrainingConfig:
    """
    Knobs for train().

    Attributes:
        learning_rate: Step size for gradient descent.
        steps: Number of forward/backward/update iterations.
        log_every: Emit an INFO line every this many steps.
    """
    learning_rate: float = 0.1
    steps: int = 50
    log_every: int = 10

    def __post_init__(self) -> None:
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        if self.steps <= 0:
            raise ValueError(f"steps must be positive, got {self.steps}")
        if self.log_every <= 0:
            raise ValueError(f"log_every must be positive, got {self.log_every}")


def _as_list(y: Target) -> List[Union[Value, Numeric]]:
    return [y] if isinstance(y, (Value, numbers.Real)) else list(y)


def step(model: MLP, xs: Sequence[Input], ys: Sequence[Target], learning_rate: float) -> Value:
    """
    Run one training iteration and return the loss node.

    The returned loss still holds the graph of this iteration, with
    gradients filled in, computed before the update.

    Raises:
        ShapeMismatchError: If xs and ys differ in length, or a sample's
            target does not match the number of model outputs.
    """
    if len(xs) != len(ys):
        raise ShapeMismatchError(f"{len(xs)} samples but {len(ys)} targets")

    predictions: List[Value] = []
    targets: List[Union[Value, Numeric]] = []
    for i, (x, y) in enumerate(zip(xs, ys)):
        out = model(x)
        y = _as_list(y)
        if len(y) != len(out):
            raise ShapeMismatchError(
                f"sample {i}: model gave {len(out)} outputs, target has {len(y)}"
            )
        predictions.extend(out)
        targets.extend(y)
    loss = mse_loss(targets, predictions)

    model.zero_grad()
    loss.backward()
    model.update(learning_rate)
    return loss


def train(
    model: MLP,
    xs: Sequence[Input],
    ys: Sequence[Target],
    config: Optional[TrainingConfig] = None
) -> List[float]:
    """
    Fit `model` to (xs, ys) with plain gradient descent.

    Args:
        model: The MLP to train. Its parameters are updated in place.
        xs: Input samples, one sequence of features each.
        ys: Targets, one per sample. A scalar target is compared with the
            single output of the model; a sequence target with all outputs.
        config: Training settings. Defaults to TrainingConfig().

    Returns:
        Loss value of each step, measured before that step's update.

    Raises:
        ShapeMismatchError: If xs and ys differ in length, or a target
            does not match the model's output size.
    """
    config = config if config is not None else TrainingConfig()
    history: List[float] = []

    logger.info(
        "train: %d samples, %d parameters, lr=%g, steps=%d",
        len(xs), len(model.parameters()), config.learning_rate, config.steps
    )

    for k in range(config.steps):
        loss = step(model, xs, ys, config.learning_rate)
        history.append(loss.data)
        if (k + 1) % config.log_every == 0:
            logger.info("step %4d | loss %.6f", k + 1, loss.data)

    logger.info("train: loss %.6f -> %.6f", history[0], history[-1])
    return history
