# autograd/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (dy/dy = 1) at the scalar output and let gradients grow
# backwards through the tape.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List

import numpy as np

from .value import Value
from .tape import use_tape
from .engine import backward


def value(x: Any) -> Any:
    """Return the forward value of a Value; pass through plain numbers unchanged."""
    return x.data if isinstance(x, Value) else x


def _ensure_value(v: Any, *, name: str) -> Value:
    """Wrap a plain number as a leaf Value if needed; otherwise return the Value itself."""
    return v if isinstance(v, Value) else Value(v, name=name)


def _as_output(y: Any, fname: str) -> Value:
    if isinstance(y, Value):
        return y
    if isinstance(y, (int, float, np.integer, np.floating)) and not isinstance(y, bool):
        # constant output: every input gets a zero gradient
        return Value(y, name="y")
    raise ValueError(f"{fname} expects a scalar output, got {type(y)}")


# ----------------------------- single-input grad ----------------------------- #
def grad(f: Callable[[Value], Value], x0: float) -> np.float32:
    """
    Derivative of a scalar function y=f(x) at x0 (single input).
    Runs one backward pass within a fresh, isolated tape.
    """
    with use_tape():
        x = _ensure_value(x0, name="x")
        y = _as_output(f(x), "grad(f, x0)")
        backward(y, zero_grad=True)
        return x.grad


# ----------------------------- multi-input grads ----------------------------- #
def grads(f: Callable[[Dict[str, Value]], Value],
          inputs: Dict[str, float]) -> Dict[str, np.float32]:
    """
    Gradient of a scalar function y=f(vars) w.r.t. ALL inputs (dict form).
    Performs ONE backward pass to obtain all dy/dvar simultaneously.

    Parameters
    ----------
    f       : function taking a dict {name: Value} and returning a scalar Value
    inputs  : dict {name: number}

    Returns
    -------
    dict {name: gradient}  # same key order as `inputs`
    """
    with use_tape():
        vars_v: Dict[str, Value] = {k: _ensure_value(v, name=k) for k, v in inputs.items()}
        y = _as_output(f(vars_v), "grads(f, inputs)")
        backward(y, zero_grad=True)
        return {k: vars_v[k].grad for k in inputs.keys()}


def grads_list(f: Callable[[List[Value]], Value],
               x0_list: Iterable[float]) -> List[np.float32]:
    """
    Same as grads(), but the inputs are provided as a list and the result is a list
    of partials in the same order.

    Example
    -------
    f = lambda xs: xs[0]*xs[0] + 3*xs[1]
    grads_list(f, [2.0, 4.0]) -> [4.0, 3.0]
    """
    with use_tape():
        xs: List[Value] = [_ensure_value(v, name=f"x{i}") for i, v in enumerate(x0_list)]
        y = _as_output(f(xs), "grads_list(f, x0_list)")
        backward(y, zero_grad=True)
        return [x.grad for x in xs]
