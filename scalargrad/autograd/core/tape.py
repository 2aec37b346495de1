# autograd/core/tape.py
from __future__ import annotations
from typing import Iterable, List, Optional, Sequence
from contextlib import contextmanager

import numpy as np

from .node import Node, Op
from ..errors import StructuralError


class Tape:
    """
    Arena of graph nodes, recorded in construction order.

    Operands are stored as indices into `nodes`, so writing `grad` on a slot
    is visible to every Value handle that addresses it.

    Nodes are never freed one by one: they live until reset() or truncate()
    drops them, or until the tape itself is released. Values built outside
    use_tape() land on the module-global `global_tape` and stay alive for
    the life of the process unless that tape is reset or truncated.
    """
    def __init__(self):
        self.nodes: List[Node] = []

    def __len__(self):
        return len(self.nodes)

    def reset(self):
        """Drop every node. Handles to dropped nodes raise StructuralError when used."""
        self.nodes.clear()

    def push_leaf(self, data: np.float32, name: Optional[str] = None) -> int:
        self.nodes.append(Node(op_tag=Op.LEAF, data=data, name=name))
        return len(self.nodes) - 1

    def push_node(self, *, op_tag: Op, data: np.float32, operands: Sequence[int],
                  partials: Sequence[np.float32], exponent: Optional[float] = None) -> int:
        """
        Append a Node(op_tag, data, operands, partials) to the tape.
        `partials[i]` is d(data)/d(nodes[operands[i]].data).
        """
        self.nodes.append(Node(
            op_tag=op_tag,
            data=data,
            operands=tuple(operands),
            partials=tuple(partials),
            exponent=exponent,
        ))
        return len(self.nodes) - 1

    def node(self, idx: int) -> Node:
        if not 0 <= idx < len(self.nodes):
            raise StructuralError(
                f"node index {idx} is outside the tape (size {len(self.nodes)})"
            )
        return self.nodes[idx]

    def zero_grad(self):
        """Set the gradient of every node on the tape to zero."""
        for node in self.nodes:
            node.grad = np.float32(0.0)

    def mark(self) -> int:
        """Current size of the tape, to be passed to truncate() later."""
        return len(self.nodes)

    def truncate(self, mark: int, keep: Iterable = ()):
        """
        Drop every node recorded at or after `mark`, keeping the older ones.

        Nodes only reference earlier indices, so the nodes below `mark` stay
        a valid graph. This is how a forward graph built on top of long-lived
        leaves (e.g. network parameters) is released without losing them.

        Args:
            mark: a value returned by mark(); 0 <= mark <= len(self)
            keep: Values that must survive; any of them at or above `mark`,
                or on another tape, raises StructuralError before anything
                is dropped.
        """
        if not 0 <= mark <= len(self.nodes):
            raise ValueError(f"mark {mark} is outside the tape (size {len(self.nodes)})")
        for v in keep:
            if v.tape is not self:
                raise StructuralError(f"{v!r} is recorded on a different tape")
            if v.idx >= mark:
                raise StructuralError(
                    f"node {v.idx} must be kept but lies above the truncation mark {mark}"
                )
        del self.nodes[mark:]


# Global singleton tape (the default graph new Values are recorded on).
# Nothing recorded here is freed until it is reset() or truncate()d, so
# build short-lived graphs inside use_tape().
global_tape = Tape()


@contextmanager
def use_tape(tape: Optional[Tape] = None):
    """
    Context manager to temporarily use a fresh tape:
        with use_tape():
            ... build computation ...
            backward(y)

    The scoped tape (and every node on it) is released once nothing refers
    to it after the block. Outside any use_tape() block, new Values go on
    the module-global tape, which is never released.
    Results are recorded on their operands' tape, not the active one, so
    graphs grown from a model's parameters stay on the parameters' tape;
    see Tape.truncate() and nn.Module.graph_scope().
    """
    from . import tape as _tape_mod  # local import so callers see the swapped module attribute
    prev = _tape_mod.global_tape
    try:
        _tape_mod.global_tape = tape if tape is not None else Tape()
        yield _tape_mod.global_tape
    finally:
        _tape_mod.global_tape = prev
