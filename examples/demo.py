#!/usr/bin/env python3
"""
micrograd-mlp Demo: Backpropagation and a Tiny MLP
==================================================

This demo walks through:
1. Gradients of a two-step scalar expression
2. The classic single-neuron example, with its computation graph
3. Training a 3 -> 4 -> 4 -> 1 MLP on four samples
4. Plotting the loss curve

Run: python examples/demo.py
"""

import logging
import matplotlib.pyplot as plt
from typing import List

from micrograd_mlp import MLP, TrainingConfig, Value, topological_sort, train

logger = logging.getLogger("demo")


def demo_gradient_computation() -> None:
    """q = p * 2 + 3, so dq/dp = 2."""
    logger.info("=" * 60)
    logger.info("DEMO 1: Automatic Gradient Computation")
    logger.info("=" * 60)

    p = Value(1.0, label='p')
    q = p * 2.0 + 3.0
    q.backward()

    logger.info("q = p * 2 + 3 at p = 1")
    logger.info("q = %s, dq/dp = %s", q.data, p.grad)


def demo_neuron() -> None:
    """o = tanh(x1*w1 + x2*w2 + b), with every intermediate labelled."""
    logger.info("=" * 60)
    logger.info("DEMO 2: A Single Neuron")
    logger.info("=" * 60)

    x1 = Value(2.0, label='x1')
    x2 = Value(0.0, label='x2')
    w1 = Value(-3.0, label='w1')
    w2 = Value(1.0, label='w2')
    b = Value(6.8813735870195432, label='b')
    x1w1 = x1 * w1
    x1w1.label = 'x1w1'
    x2w2 = x2 * w2
    x2w2.label = 'x2w2'
    x1w1x2w2 = x1w1 + x2w2
    x1w1x2w2.label = 'x1w1+x2w2'
    n = x1w1x2w2 + b
    n.label = 'n'
    o = n.tanh()
    o.label = 'o'
    o.backward()

    # Root first, one line per node
    for node in reversed(topological_sort(o)):
        operands = ', '.join(sorted(c.label for c in node.prev))
        op = f" = {node.op_tag}({operands})" if node.prev else ''
        logger.info(
            "%10s: data=%8.4f grad=%8.4f%s",
            node.label, node.data, node.grad, op
        )


def plot_loss_curve(losses: List[float], path: str = './loss_curve.png') -> None:
    """
    Plot the training loss over steps.

    Args:
        losses: Loss value of each step.
        path: Where to save the PNG.
    """
    plt.figure(figsize=(10, 6))
    plt.plot(losses, 'b-', linewidth=2)
    plt.xlabel('Step')
    plt.ylabel('Loss')
    plt.title('Training Loss Curve')
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(path, dpi=150)
    plt.close()
    logger.info("Saved loss curve to: %s", path)


def demo_training() -> None:
    """Fit four samples with targets [1, -1, -1, 1]."""
    logger.info("=" * 60)
    logger.info("DEMO 3: Training an MLP")
    logger.info("=" * 60)

    xs = [
        [2.0, 3.0, -1.0],
        [3.0, -1.0, 0.5],
        [0.5, 1.0, 1.0],
        [1.0, 1.0, -1.0],
    ]
    ys = [1.0, -1.0, -1.0, 1.0]

    model = MLP(3, [4, 4, 1], seed=42)
    logger.info("Model: %s (%d parameters)", model, len(model.parameters()))

    losses = train(model, xs, ys, TrainingConfig(learning_rate=0.1, steps=100))

    preds = [out[0].data for out in model.predict(xs)]
    logger.info("Targets:     %s", ys)
    logger.info("Predictions: %s", [round(p, 4) for p in preds])

    plot_loss_curve(losses)


def main() -> None:
    """Run all demos."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    demo_gradient_computation()
    demo_neuron()
    demo_training()


if __name__ == "__main__":
    main()
