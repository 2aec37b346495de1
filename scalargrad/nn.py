"""
Feed-forward network built from scalar Values.

Neuron -> Layer -> MLP, each forward pass composed only of engine operators:

    neuron(x) = tanh(sum_i w_i * x_i + b)

Weights and biases are leaves drawn from Uniform[-1, 1] using an injected
numpy Generator, so a seeded rng gives a reproducible network.

Every forward pass is recorded on the parameters' tape, which therefore grows
with each call. Wrap a training step in `graph_scope()` to drop the step's
graph afterwards while keeping the parameters (and their grads):

    for _ in range(steps):
        with model.graph_scope():
            model.zero_grad()
            loss = mse_loss([model(x) for x in xs], ys)
            backward(loss)
        ... update parameters from p.grad ...
"""

from contextlib import contextmanager
from typing import List, Optional, Sequence, Union

import numpy as np

from .autograd.core.value import Value
from .autograd.errors import StructuralError
from .autograd.ops import mul, sub, total


class Module:
    """Base class: a bag of leaf parameters."""

    def parameters(self) -> List[Value]:
        return []

    def zero_grad(self):
        """Reset the grad of every parameter (the graph itself is not walked)."""
        for p in self.parameters():
            p.node.grad = np.float32(0.0)

    @contextmanager
    def graph_scope(self):
        """
        Release every node recorded on the parameters' tape inside the block.

        Yields the parameters' tape. On exit the tape is truncated back to its
        size at entry; the parameters were recorded before that, so they and
        their grads survive, while handles to the dropped nodes (outputs,
        losses) become stale.

        Raises:
            ValueError: the module has no parameters.
            StructuralError: the parameters are spread over several tapes.
        """
        params = self.parameters()
        if not params:
            raise ValueError(f"{self!r} has no parameters to scope a graph on")
        tape = params[0].tape
        if any(p.tape is not tape for p in params):
            raise StructuralError("parameters are recorded on different tapes")
        mark = tape.mark()
        try:
            yield tape
        finally:
            tape.truncate(mark, keep=params)


class Neuron(Module):
    """
    One tanh unit.

    Attributes:
        w (List[Value]): one weight per input
        b (Value): bias
    """

    def __init__(self, nin: int, rng: Optional[np.random.Generator] = None):
        if nin < 1:
            raise ValueError(f"Neuron needs at least one input, got nin={nin}")
        rng = rng if rng is not None else np.random.default_rng()
        self.w = [Value(rng.uniform(-1.0, 1.0), name="w") for _ in range(nin)]
        self.b = Value(rng.uniform(-1.0, 1.0), name="b")

    def __call__(self, x: Sequence[Union[Value, float]]) -> Value:
        if len(x) != len(self.w):
            raise ValueError(f"Neuron expects {len(self.w)} inputs, got {len(x)}")
        act = total((mul(wi, xi) for wi, xi in zip(self.w, x)), self.b)
        return act.tanh()

    def parameters(self) -> List[Value]:
        return self.w + [self.b]

    def __repr__(self):
        return f"Neuron({len(self.w)})"


class Layer(Module):
    # nout = number of neurons, all fed the same inputs
    def __init__(self, nin: int, nout: int, rng: Optional[np.random.Generator] = None):
        if nout < 1:
            raise ValueError(f"Layer needs at least one neuron, got nout={nout}")
        rng = rng if rng is not None else np.random.default_rng()
        self.neurons = [Neuron(nin, rng) for _ in range(nout)]

    def __call__(self, x):
        out = [n(x) for n in self.neurons]
        return out[0] if len(out) == 1 else out

    def parameters(self) -> List[Value]:
        return [p for n in self.neurons for p in n.parameters()]

    def __repr__(self):
        return f"Layer([{', '.join(str(n) for n in self.neurons)}])"


class MLP(Module):
    # nouts = list of layer sizes
    # e.g. MLP(3, [4, 4, 1]) = two 4-neuron hidden layers + one 1-neuron output
    def __init__(self, nin: int, nouts: Sequence[int], rng: Optional[np.random.Generator] = None):
        if not nouts:
            raise ValueError("MLP needs at least one layer")
        rng = rng if rng is not None else np.random.default_rng()
        sizes = [nin] + list(nouts)
        self.layers = [Layer(sizes[i], sizes[i + 1], rng) for i in range(len(nouts))]

    def __call__(self, x):
        for layer in self.layers:
            x = layer(x)
            if isinstance(x, Value):
                x = [x]
        return x[0] if len(x) == 1 else x

    def parameters(self) -> List[Value]:
        return [p for layer in self.layers for p in layer.parameters()]

    def __repr__(self):
        return f"MLP of [{', '.join(str(layer) for layer in self.layers)}]"


def mse_loss(predictions: Sequence[Value], targets: Sequence[float]) -> Value:
    """Sum of squared errors, sum_i (pred_i - target_i)^2."""
    if len(predictions) != len(targets):
        raise ValueError(
            f"got {len(predictions)} predictions but {len(targets)} targets"
        )
    return total(sub(p, t) ** 2 for p, t in zip(predictions, targets))
