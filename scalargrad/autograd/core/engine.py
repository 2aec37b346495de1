# autograd/core/engine.py
from __future__ import annotations
from typing import Dict, List

import numpy as np

from .value import Value
from ..errors import StructuralError

# Traversal markers. A node is VISITING while its operands are being expanded;
# meeting a VISITING node again means the graph has a back edge.
_VISITING = 1
_DONE = 2


def topological_order(root: Value) -> List[int]:
    """
    Tape indices of every node reachable from `root`, operands before the node
    that consumes them (post-order DFS). `root.idx` is always last.

    Shared nodes appear once. The walk is iterative, so deep chains do not hit
    the recursion limit.

    Raises:
        StructuralError: on a reference cycle, an operand index outside the
            tape, a node whose operand and partial counts differ, or a root
            handle whose node was dropped by reset()/truncate().
    """
    root.node  # raises StructuralError for a stale handle
    tape = root.tape
    state: Dict[int, int] = {}
    order: List[int] = []

    _enter(tape, root.idx, state)
    stack = [(root.idx, 0)]
    while stack:
        idx, k = stack[-1]
        operands = tape.nodes[idx].operands
        if k < len(operands):
            stack[-1] = (idx, k + 1)
            child = operands[k]
            seen = state.get(child)
            if seen is None:
                _enter(tape, child, state)
                stack.append((child, 0))
            elif seen == _VISITING:
                raise StructuralError(
                    f"cycle detected: node {child} is an ancestor of itself (via node {idx})"
                )
        else:
            stack.pop()
            state[idx] = _DONE
            order.append(idx)
    return order


def _enter(tape, idx: int, state: Dict[int, int]):
    node = tape.node(idx)  # bounds check
    if len(node.operands) != len(node.partials):
        raise StructuralError(
            f"node {idx} ({node.op_tag.value}) has {len(node.operands)} operands "
            f"but {len(node.partials)} local partials"
        )
    state[idx] = _VISITING


def backward(root: Value, *, zero_grad: bool = False):
    """
    Run a single reverse pass from `root`.

    Seeds root.grad = 1, then visits the reachable nodes in reverse topological
    order (every consumer before its operands), so a node's grad is complete
    before it is pushed on:
        operand.grad += node.grad * (d node / d operand)

    Args:
        root: output node, typically a loss.
        zero_grad: reset every reachable grad to 0 before seeding.

    Notes:
        - Without zero_grad, a second call on the same graph ADDS to the grads
          left by the first one (the root seed itself is set, not added).
        - Every reachable node's rule runs exactly once, even when its grad
          is 0, so NaN/Inf data or partials propagate as ordinary floats.
    """
    order = topological_order(root)
    nodes = root.tape.nodes
    if zero_grad:
        for i in order:
            nodes[i].grad = np.float32(0.0)

    nodes[root.idx].grad = np.float32(1.0)

    for i in reversed(order):
        node = nodes[i]
        g = node.grad
        # no shortcut for g == 0: 0 * inf must still give NaN
        for p, local_partial in zip(node.operands, node.partials):
            nodes[p].grad = nodes[p].grad + g * local_partial


def zero_grad(root: Value):
    """Set the gradient of every node reachable from `root` to zero."""
    nodes = root.tape.nodes
    for i in topological_order(root):
        nodes[i].grad = np.float32(0.0)
