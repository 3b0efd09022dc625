"""
Unit Tests: Gradients vs PyTorch
================================

Our gradients must match PyTorch's for the same expressions. Skipped
when torch is not installed (pip install -e .[torch]).

Run with: pytest tests/test_torch_parity.py -v
"""

import pytest

from micrograd_mlp import MLP, Value, mse_loss

torch = pytest.importorskip("torch")


TOLERANCE = 1e-6


def assert_close(actual: float, expected: float, tol: float = TOLERANCE) -> None:
    """Assert two values are approximately equal."""
    diff = abs(actual - expected)
    assert diff < tol, f"Values differ: {actual} vs {expected} (diff={diff})"


def leaf(x: float):
    return torch.tensor(x, dtype=torch.float64, requires_grad=True)


class TestPyTorchComparison:
    """Compare our gradients against PyTorch's gradients."""

    def test_sub_div_grad(self) -> None:
        a = Value(5.0)
        b = Value(3.0)
        c = (a - b) / b
        c.backward()

        a_t, b_t = leaf(5.0), leaf(3.0)
        c_t = (a_t - b_t) / b_t
        c_t.backward()

        assert_close(c.data, c_t.item())
        assert_close(a.grad, a_t.grad.item())
        assert_close(b.grad, b_t.grad.item())

    def test_complex_expression(self) -> None:
        """tanh(a * b + a^2) + exp(b) * relu(a - 0.5)."""
        a = Value(1.0)
        b = Value(0.4)
        c = (a * b + a ** 2).tanh() + b.exp() * (a - 0.5).relu()
        c.backward()

        a_t, b_t = leaf(1.0), leaf(0.4)
        c_t = torch.tanh(a_t * b_t + a_t ** 2) + torch.exp(b_t) * torch.relu(a_t - 0.5)
        c_t.backward()

        assert_close(c.data, c_t.item())
        assert_close(a.grad, a_t.grad.item())
        assert_close(b.grad, b_t.grad.item())

    def test_leaky_relu(self) -> None:
        a = Value(-2.0)
        c = a.leaky_relu(alpha=0.01) * 3
        c.backward()

        a_t = leaf(-2.0)
        c_t = torch.nn.functional.leaky_relu(a_t, negative_slope=0.01) * 3
        c_t.backward()

        assert_close(c.data, c_t.item())
        assert_close(a.grad, a_t.grad.item())

    def test_mlp_gradients(self) -> None:
        """Copy an MLP's weights into torch and compare every parameter gradient."""
        model = MLP(3, [4, 1], seed=0)
        xs = [[2.0, 3.0, -1.0], [0.5, 1.0, 1.0]]
        ys = [1.0, -1.0]
        loss = mse_loss(ys, [model(x)[0] for x in xs])
        loss.backward()

        weights = [
            [[leaf(w.data) for w in n.w] for n in layer.neurons]
            for layer in model.layers
        ]
        biases = [[leaf(n.b.data) for n in layer.neurons] for layer in model.layers]

        loss_t = torch.tensor(0.0, dtype=torch.float64)
        for x, y in zip(xs, ys):
            h = [torch.tensor(v, dtype=torch.float64) for v in x]
            for lw, lb in zip(weights, biases):
                h = [torch.tanh(sum(w * xi for w, xi in zip(ws, h)) + b) for ws, b in zip(lw, lb)]
            loss_t = loss_t + (h[0] - y) ** 2
        loss_t.backward()

        assert_close(loss.data, loss_t.item())
        ours = model.parameters()
        theirs = [
            t
            for lw, lb in zip(weights, biases)
            for ws, b in zip(lw, lb)
            for t in ws + [b]
        ]
        for p, t in zip(ours, theirs):
            assert_close(p.grad, t.grad.item())


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
