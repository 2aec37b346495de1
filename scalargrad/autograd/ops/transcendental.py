# autograd/ops/transcendental.py
import numpy as np

from ..core.value import Value
from ..core.node import Op
from .arithmetic import _as_values, mul
from ...config import EngineConfig

_ONE = EngineConfig.DTYPE(1.0)


def _unary(x, f, dfdx, tag):
    (x,) = _as_values(x)
    a = x.data
    y = f(a)
    idx = x.tape.push_node(op_tag=tag, data=y, operands=(x.idx,), partials=(dfdx(a, y),))
    return Value._at(x.tape, idx)


def tanh(x):
    """
    tanh with d/dx = 1 - tanh(x)^2.
    np.tanh saturates to +-1 for large |x| instead of overflowing like the
    (e^2x - 1) / (e^2x + 1) form.
    """
    return _unary(x, np.tanh, lambda a, t: _ONE - t * t, Op.TANH)


def exp(x):
    """exp with d/dx = exp(x). Overflow gives inf (numpy warns), which then propagates."""
    return _unary(x, np.exp, lambda a, e: e, Op.EXP)


def rpow(c, x):
    """
    Constant base raised to a node: c ** x == exp(x * ln c), for c > 0.
    Built from Mul and Exp only.
    """
    if isinstance(c, Value):
        raise TypeError("rpow expects a constant base; use pow() for Value ** constant")
    if not c > 0:
        raise ValueError(f"rpow requires a positive constant base, got {c!r}")
    return exp(mul(x, float(np.log(c))))
