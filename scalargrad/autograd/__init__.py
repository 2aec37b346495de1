# autograd/__init__.py
# Scalar reverse-mode automatic differentiation

from .core.node import Op
from .core.value import Value
from .core.tape import Tape, global_tape, use_tape
from .core.engine import (
    backward,
    zero_grad,
    topological_order,
)
from .errors import StructuralError

# Operators (also reachable through Value's Python operators)
from . import ops
from .ops import apply

# Finite-difference checks
from .gradcheck import check_gradients, numerical_grad

__all__ = [
    # Core
    'Value',
    'Op',
    'Tape',
    'global_tape',
    'use_tape',
    # Engine
    'backward',
    'zero_grad',
    'topological_order',
    'StructuralError',
    # Ops
    'ops',
    'apply',
    # Checks
    'check_gradients',
    'numerical_grad',
]
