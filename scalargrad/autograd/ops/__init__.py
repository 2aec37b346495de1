# autograd/ops/__init__.py

# Convenience re-exports so users can do: from scalargrad.autograd.ops import mul, tanh, ...
from .arithmetic import add, sub, mul, div, neg, pow, total
from .transcendental import tanh, exp, rpow
from .factory import apply

__all__ = [
    "add", "sub", "mul", "div", "neg", "pow", "total",
    "tanh", "exp", "rpow",
    "apply",
]
