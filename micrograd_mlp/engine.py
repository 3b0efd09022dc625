"""
micrograd-mlp: Scalar Autograd Engine
=====================================

Reverse-mode automatic differentiation over individual float64 values.

Every arithmetic operation on a Value creates a new Value that remembers
which operation produced it and which Values went in. Together they form a
directed acyclic graph. Calling backward() on the final node walks that
graph in reverse topological order and applies each node's local-derivative
rule, so by the end every node holds d(root)/d(node) in its grad field.

The rules themselves live in micrograd_mlp.ops and are looked up by the
node's Op tag.
"""

from __future__ import annotations
import itertools
import numbers
import numpy as np
from typing import FrozenSet, List, Optional, Set, Tuple, Union

from . import ops
from .exceptions import ConversionError
from .ops import Op


# Type alias for numeric inputs
Numeric = Union[int, float, np.integer, np.floating]

_ids = itertools.count(1)


def _to_float(data: object) -> float:
    """Convert ``data`` to a float64, or raise ConversionError."""
    if not isinstance(data, numbers.Real):
        raise ConversionError(
            f"Value data must be a real number, got {type(data).__name__}"
        )
    try:
        return float(data)
    except OverflowError as e:
        raise ConversionError(
            f"Value data {data!r} is not representable as a 64-bit float"
        ) from e


class Value:
    """
    A scalar value that tracks its computational history for automatic differentiation.

    Every Value knows:
    1. Its identity (``id``), unique for the life of the process
    2. Its data (the actual number, always a float)
    3. Its gradient (derivative of the root with respect to this value)
    4. Its operands and the Op that combined them

    Equality and hashing use identity, never ``data``: two Values holding
    the same number are different nodes.

    Attributes:
        id: Unique, increasing integer. Operands always have smaller ids.
        data: The scalar value stored in this node.
        grad: The gradient of the last backward() root with respect to this value.
        op: The Op that produced this node (Op.LEAF for inputs and parameters).
        arg: Constant argument of the op (exponent or leaky slope), else None.
        label: Optional name for debugging and visualization.

    Example:
        >>> a = Value(2.0, label='a')
        >>> b = Value(3.0, label='b')
        >>> c = a * b + a
        >>> c.backward()
        >>> a.grad  # dc/da = b + 1
        4.0
        >>> b.grad  # dc/db = a
        2.0
    """

    __slots__ = ('id', 'data', 'grad', 'op', 'arg', 'label', '_children', '_prev')

    # Make numpy scalars defer to our reflected operators
    __array_ufunc__ = None

    def __init__(
        self,
        data: Numeric,
        _children: Tuple[Value, ...] = (),
        _op: Op = Op.LEAF,
        label: str = '',
        _arg: Optional[float] = None,
    ) -> None:
        """
        Initialize a Value node.

        Args:
            data: The scalar value to store.
            _children: Operands in the computation graph (internal use).
            _op: The operation that produced this node (internal use).
            label: Optional name for debugging.
            _arg: Constant argument of the operation (internal use).

        Raises:
            ConversionError: If data is not representable as a 64-bit float.
        """
        self.data: float = _to_float(data)
        self.id: int = next(_ids)
        self.grad: float = 0.0
        self.op: Op = _op
        self.arg: Optional[float] = _arg
        self.label: str = label
        self._children: Tuple[Value, ...] = tuple(_children)
        self._prev: FrozenSet[Value] = frozenset(self._children)

    @property
    def prev(self) -> FrozenSet[Value]:
        """Direct predecessors of this node (read only)."""
        return self._prev

    @property
    def op_tag(self) -> str:
        """Display form of the producing op, '' for leaves."""
        return ops.op_tag(self.op, self.arg)

    def __repr__(self) -> str:
        """String representation showing data and gradient."""
        if self.label:
            return f"Value({self.label}={self.data:.4f}, grad={self.grad:.4f})"
        return f"Value(data={self.data:.4f}, grad={self.grad:.4f})"

    # =========================================================================
    # Graph Construction
    # =========================================================================

    @staticmethod
    def _make(op: Op, operands: Tuple[Value, ...], arg: Optional[float] = None) -> Value:
        data = ops.forward(op, [v.data for v in operands], arg)
        return Value(data, operands, op, _arg=arg)

    @staticmethod
    def _lift(other: Union[Value, Numeric]) -> Value:
        return other if isinstance(other, Value) else Value(other)

    def __add__(self, other: Union[Value, Numeric]) -> Value:
        """
        Addition: out = self + other

        Local derivatives:
            d(out)/d(self) = 1
            d(out)/d(other) = 1
        """
        return Value._make(Op.ADD, (self, Value._lift(other)))

    def __radd__(self, other: Numeric) -> Value:
        """Handle numeric + Value."""
        return Value._lift(other) + self

    def __mul__(self, other: Union[Value, Numeric]) -> Value:
        """
        Multiplication: out = self * other

        Local derivatives:
            d(out)/d(self) = other.data
            d(out)/d(other) = self.data
        """
        return Value._make(Op.MUL, (self, Value._lift(other)))

    def __rmul__(self, other: Numeric) -> Value:
        """Handle numeric * Value."""
        return Value._lift(other) * self

    def __pow__(self, n: Numeric) -> Value:
        """
        Power: out = self^n, where n is a constant.

        Local derivative:
            d(out)/d(self) = n * self^(n-1)

        Raises:
            TypeError: If n is a Value. Variable exponents are not differentiable here.
            ConversionError: If n is not a real number.
        """
        if isinstance(n, Value):
            raise TypeError("Power with Value exponent not supported")
        return Value._make(Op.POW, (self,), _to_float(n))

    def __neg__(self) -> Value:
        """Negation: -self."""
        return self * -1

    def __sub__(self, other: Union[Value, Numeric]) -> Value:
        """Subtraction: self + (other * -1)."""
        return self + (Value._lift(other) * -1)

    def __rsub__(self, other: Numeric) -> Value:
        """Handle numeric - Value."""
        return Value._lift(other) + (self * -1)

    def __truediv__(self, other: Union[Value, Numeric]) -> Value:
        """Division: self * other^(-1)."""
        return self * (Value._lift(other) ** -1)

    def __rtruediv__(self, other: Numeric) -> Value:
        """Handle numeric / Value."""
        return Value._lift(other) * (self ** -1)

    # =========================================================================
    # Activation Functions
    # =========================================================================

    def tanh(self) -> Value:
        """
        Hyperbolic tangent: out = tanh(self)

        Local derivative, evaluated at the output:
            1 - out^2
        """
        return Value._make(Op.TANH, (self,))

    def exp(self) -> Value:
        """
        Exponential: out = e^self

        Local derivative, evaluated at the output:
            out
        """
        return Value._make(Op.EXP, (self,))

    def relu(self) -> Value:
        """
        Rectified Linear Unit: out = max(0, self)

        Local derivative:
            1 if out > 0 else 0
        """
        return Value._make(Op.RELU, (self,))

    def leaky_relu(self, alpha: float = ops.DEFAULT_LEAKY_ALPHA) -> Value:
        """
        Leaky ReLU: out = self if self > 0 else alpha * self

        Local derivative:
            1 if out > 0 else alpha
        """
        return Value._make(Op.LEAKY_RELU, (self,), _to_float(alpha))

    # =========================================================================
    # Backpropagation
    # =========================================================================

    def _backward(self) -> None:
        """Push this node's gradient into its operands."""
        ops.backward(self)

    def backward(self) -> None:
        """
        Compute gradients for all nodes in the computation graph.

        The algorithm:
        1. Build a topological ordering of the graph (operands before results)
        2. Set this node's gradient to 1.0 (d(self)/d(self) = 1)
        3. Walk the ordering in reverse, calling each node's rule exactly once

        Walking in reverse guarantees every consumer of a node has finished
        adding its contribution before the node's own rule reads its grad.

        Calling backward() again without zero_grad() ACCUMULATES into every
        node except the root, whose grad is reset to 1.0.

        Example:
            >>> x = Value(2.0)
            >>> y = x ** 2 + 3 * x
            >>> y.backward()
            >>> x.grad  # dy/dx = 2x + 3
            7.0
        """
        topo = topological_sort(self)

        self.grad = 1.0

        for node in reversed(topo):
            node._backward()

    def zero_grad(self) -> None:
        """Reset this node's gradient to zero. Operands are left alone."""
        self.grad = 0.0

    def item(self) -> float:
        """Return the scalar value (PyTorch compatibility)."""
        return self.data


def topological_sort(root: Value) -> List[Value]:
    """
    Compute topological ordering of computation graph rooted at `root`.

    Depth-first, post-order: a node is appended only after all of its
    operands. Shared subexpressions are visited once.

    Args:
        root: The root node of the computation graph.

    Returns:
        List of Values in topological order (root is last).

    Example:
        >>> a = Value(1.0)
        >>> b = Value(2.0)
        >>> c = a + b
        >>> d = c * a
        >>> topo = topological_sort(d)
        >>> # topo will be [a, b, c, d] or [b, a, c, d]
    """
    topo: List[Value] = []
    visited: Set[Value] = set()

    def dfs(v: Value) -> None:
        if v not in visited:
            visited.add(v)
            for child in v._children:
                dfs(child)
            topo.append(v)

    dfs(root)
    return topo


def trace(root: Value) -> Tuple[Set[Value], Set[Tuple[Value, Value]]]:
    """
    Collect every node reachable from `root` and the edges between them.

    This is the read-only view a graph renderer needs. Each edge is a
    ``(operand, result)`` pair.

    Returns:
        (nodes, edges)
    """
    nodes: Set[Value] = set()
    edges: Set[Tuple[Value, Value]] = set()

    def build(v: Value) -> None:
        if v not in nodes:
            nodes.add(v)
            for child in v.prev:
                edges.add((child, v))
                build(child)

    build(root)
    return nodes, edges
