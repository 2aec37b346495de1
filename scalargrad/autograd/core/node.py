# autograd/core/node.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np


class Op(str, Enum):
    """Tag of the primitive that produced a node. Neg/Sub/Div are composed, never tagged."""
    LEAF = "leaf"
    ADD = "add"
    MUL = "mul"
    POW = "pow"
    TANH = "tanh"
    EXP = "exp"


@dataclass
class Node:
    """
    One slot of the tape arena.

    Attributes
    ----------
    op_tag   : Op
        Primitive that produced this node (Op.LEAF for leaves).
    data     : np.float32
        Forward value, fixed at construction.
    operands : Tuple[int, ...]
        Tape indices of the 0, 1 or 2 nodes consumed by the op.
    partials : Tuple[np.float32, ...]
        Local partial d(data)/d(operand) for each entry of `operands`.
    grad     : np.float32
        Accumulator for d(root)/d(this node); only backward/zero_grad write it.
    exponent : Optional[float]
        Constant k of a Pow node; it is not a node and receives no gradient.
    name     : Optional[str]
        Debug label.
    """
    op_tag: Op
    data: np.float32
    operands: Tuple[int, ...] = ()
    partials: Tuple[np.float32, ...] = ()
    grad: np.float32 = np.float32(0.0)
    exponent: Optional[float] = None
    name: Optional[str] = None
