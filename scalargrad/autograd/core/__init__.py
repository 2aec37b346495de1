# autograd/core/__init__.py

"""
Core public API for the autograd package.

This module exposes the minimal set of symbols that users of the engine
should import from `scalargrad.autograd.core`. The network layer and the
gradient checker only depend on these names.

Exports:
    Value             : Handle to one scalar node of the graph.
    Op                : Tag of the primitive that produced a node.
    Tape              : Arena the nodes are recorded on.
    global_tape       : The default tape new Values are recorded on.
    use_tape          : Context manager to temporarily switch the active tape.
    backward          : Run one reverse pass from a root node.
    zero_grad         : Reset the grads of every node reachable from a root.
    topological_order : Reachable node indices, operands before consumers.
    grad, grads, grads_list : Derivatives of a Python function on an isolated tape.
    value             : Forward value of a Value (plain numbers pass through).
"""

from .node import Op
from .value import Value
from .tape import Tape, global_tape, use_tape
from .engine import backward, zero_grad, topological_order
from .seeds import grad, grads, grads_list, value

__all__ = [
    "Value", "Op",
    "Tape", "global_tape", "use_tape",
    "backward", "zero_grad", "topological_order",
    "grad", "grads", "grads_list", "value",
]
