"""
Operator Library
================

Forward formulas and local-derivative rules for every primitive operation
the engine knows about.

Each node in the graph stores an Op tag, its operands, and (for ``**`` and
``leaky_relu``) one constant argument. ``forward()`` computes the output
value from operand data; ``backward()`` looks up the rule for the node's
tag and pushes the node's gradient into its operands.

Subtraction, negation and division are not primitives. The engine builds
them out of ``+``, ``*`` and ``**``:

    a - b  ==  a + (b * -1)
    a / b  ==  a * (b ** -1)

The rules only touch ``data``, ``grad``, ``op``, ``arg`` and ``_children``
of the nodes they receive, so this module never imports the engine.
"""

from __future__ import annotations
import math
import numpy as np
from enum import Enum
from typing import Callable, Dict, Optional, Sequence


class Op(str, Enum):
    """Tag recording which operation produced a node."""

    LEAF = ''
    ADD = '+'
    MUL = '*'
    POW = '**'
    TANH = 'tanh'
    EXP = 'exp'
    RELU = 'relu'
    LEAKY_RELU = 'lrelu'

    def __str__(self) -> str:
        return self.value


# Number of operands each primitive takes
ARITY: Dict[Op, int] = {
    Op.LEAF: 0,
    Op.ADD: 2,
    Op.MUL: 2,
    Op.POW: 1,
    Op.TANH: 1,
    Op.EXP: 1,
    Op.RELU: 1,
    Op.LEAKY_RELU: 1,
}

DEFAULT_LEAKY_ALPHA = 0.01


# =============================================================================
# Forward Formulas
# =============================================================================

def _leaky_relu(x: float, alpha: float) -> float:
    return x if x > 0 else alpha * x


# Out-of-range results come back as inf or nan instead of raising.
def _power(base: float, n: float) -> float:
    with np.errstate(over='ignore', divide='ignore', invalid='ignore'):
        return float(np.power(base, n))


def _exp(x: float) -> float:
    with np.errstate(over='ignore'):
        return float(np.exp(x))


FORWARD: Dict[Op, Callable[[Sequence[float], Optional[float]], float]] = {
    Op.ADD: lambda xs, arg: xs[0] + xs[1],
    Op.MUL: lambda xs, arg: xs[0] * xs[1],
    Op.POW: lambda xs, arg: _power(xs[0], arg),
    Op.TANH: lambda xs, arg: math.tanh(xs[0]),
    Op.EXP: lambda xs, arg: _exp(xs[0]),
    Op.RELU: lambda xs, arg: xs[0] if xs[0] > 0 else 0.0,
    Op.LEAKY_RELU: lambda xs, arg: _leaky_relu(xs[0], arg),
}


def forward(op: Op, operands: Sequence[float], arg: Optional[float] = None) -> float:
    """
    Compute the output of ``op`` applied to raw operand values.

    Args:
        op: The operation to apply. Must not be Op.LEAF.
        operands: Operand data, in the order the operation expects.
        arg: Constant argument (exponent for POW, slope for LEAKY_RELU).

    Returns:
        The forward value.

    Raises:
        ValueError: If the operand count does not match the operation.
    """
    if op is Op.LEAF:
        raise ValueError("leaf nodes have no forward formula")
    if len(operands) != ARITY[op]:
        raise ValueError(
            f"{op.name} takes {ARITY[op]} operand(s), got {len(operands)}"
        )
    return FORWARD[op](operands, arg)


# =============================================================================
# Local-Derivative Rules
# =============================================================================
#
# Each rule receives the output node. By the time it runs, out.grad holds
# the full gradient of the root with respect to out, so every rule
# accumulates (+=) into its operands.

def _leaf_backward(out) -> None:
    pass


def _add_backward(out) -> None:
    lhs, rhs = out._children
    lhs.grad += out.grad
    rhs.grad += out.grad


def _mul_backward(out) -> None:
    lhs, rhs = out._children
    lhs.grad += rhs.data * out.grad
    rhs.grad += lhs.data * out.grad


def _pow_backward(out) -> None:
    (base,) = out._children
    n = out.arg
    base.grad += n * _power(base.data, n - 1) * out.grad


def _tanh_backward(out) -> None:
    (x,) = out._children
    x.grad += (1 - out.data ** 2) * out.grad


def _exp_backward(out) -> None:
    (x,) = out._children
    x.grad += out.data * out.grad


def _relu_backward(out) -> None:
    (x,) = out._children
    x.grad += (1.0 if out.data > 0 else 0.0) * out.grad


def _leaky_relu_backward(out) -> None:
    (x,) = out._children
    x.grad += (1.0 if out.data > 0 else out.arg) * out.grad


BACKWARD: Dict[Op, Callable[..., None]] = {
    Op.LEAF: _leaf_backward,
    Op.ADD: _add_backward,
    Op.MUL: _mul_backward,
    Op.POW: _pow_backward,
    Op.TANH: _tanh_backward,
    Op.EXP: _exp_backward,
    Op.RELU: _relu_backward,
    Op.LEAKY_RELU: _leaky_relu_backward,
}


def backward(out) -> None:
    """Apply the local-derivative rule registered for ``out.op``."""
    BACKWARD[out.op](out)


def op_tag(op: Op, arg: Optional[float] = None) -> str:
    """Display form of an operation, e.g. ``'+'`` or ``'**2'``."""
    if op is Op.POW:
        return f'**{arg:g}'
    return op.value
