# autograd/core/value.py
from __future__ import annotations
from typing import Optional, Tuple

import numpy as np

from . import tape as tape_mod  # module access so use_tape() swaps are honoured
from .node import Node, Op
from ..errors import StructuralError
from ...config import EngineConfig


class Value:
    """
    Handle to one scalar node of a computational graph.

    A Value is a (tape, index) pair; the node itself lives in the tape arena.
    Several handles may address the same node (e.g. `x` and `(x * x).operands[0]`)
    and they all observe the same `grad`.

    Attributes
    ----------
    tape : Tape
        Arena the node is recorded on.
    idx  : int
        Position of the node on the tape.

    Constructing `Value(x)` records a new leaf on the active tape (or on `tape`
    when given). Operator results are built by the functions in `autograd.ops`.
    """
    __slots__ = ("tape", "idx", "_slot")

    def __init__(self, data, *, name: Optional[str] = None, tape=None):
        self.tape = tape if tape is not None else tape_mod.global_tape
        self.idx = self.tape.push_leaf(EngineConfig.as_scalar(data), name)
        self._slot = self.tape.nodes[self.idx]

    @classmethod
    def _at(cls, tape, idx: int) -> "Value":
        """Handle to an existing node; records nothing."""
        v = cls.__new__(cls)
        v.tape = tape
        v.idx = idx
        v._slot = tape.node(idx)
        return v

    @property
    def node(self) -> Node:
        node = self.tape.node(self.idx)
        if node is not self._slot:
            # the index was reused after reset() or truncate()
            raise StructuralError(f"stale handle: node {self.idx} was dropped from its tape")
        return node

    @property
    def data(self) -> np.float32:
        return self.node.data

    @property
    def grad(self) -> np.float32:
        return self.node.grad

    @property
    def op(self) -> Op:
        return self.node.op_tag

    @property
    def operands(self) -> Tuple["Value", ...]:
        return tuple(Value._at(self.tape, i) for i in self.node.operands)

    @property
    def exponent(self) -> Optional[float]:
        return self.node.exponent

    @property
    def name(self) -> Optional[str]:
        return self.node.name

    def is_leaf(self) -> bool:
        return self.node.op_tag is Op.LEAF

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self.tape is other.tape and self.idx == other.idx

    def __hash__(self):
        return hash((id(self.tape), self.idx))

    def __repr__(self):
        node = self.node
        label = f", name={node.name!r}" if node.name is not None else ""
        return f"Value(data={node.data}, grad={node.grad}, op={node.op_tag.value}{label})"

    # Operator overloading; every form lowers to the primitives in autograd.ops
    def __add__(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return add(other, self)

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return sub(other, self)

    def __mul__(self, other):
        from ..ops.arithmetic import mul
        return mul(self, other)

    def __rmul__(self, other):
        from ..ops.arithmetic import mul
        return mul(other, self)

    def __truediv__(self, other):
        from ..ops.arithmetic import div
        return div(self, other)

    def __rtruediv__(self, other):
        from ..ops.arithmetic import div
        return div(other, self)

    def __neg__(self):
        from ..ops.arithmetic import neg
        return neg(self)

    def __pow__(self, other):
        from ..ops.arithmetic import pow
        return pow(self, other)

    def __rpow__(self, other):
        from ..ops.transcendental import rpow
        return rpow(other, self)

    def tanh(self):
        from ..ops.transcendental import tanh
        return tanh(self)

    def exp(self):
        from ..ops.transcendental import exp
        return exp(self)

    def backward(self, *, zero_grad: bool = False):
        from .engine import backward
        backward(self, zero_grad=zero_grad)

    def zero_grad(self):
        from .engine import zero_grad
        zero_grad(self)
