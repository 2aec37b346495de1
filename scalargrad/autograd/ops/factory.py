# autograd/ops/factory.py
from typing import Optional, Union

from ..core.node import Op
from ..core.value import Value
from ..errors import StructuralError
from .arithmetic import add, mul, pow
from .transcendental import tanh, exp

_BINARY = {Op.ADD: add, Op.MUL: mul}
_UNARY = {Op.TANH: tanh, Op.EXP: exp}


def apply(op: Union[Op, str], *operands, exponent: Optional[float] = None, tape=None) -> Value:
    """
    Build a node from an op tag instead of Python operator syntax.

        apply("add", a, b)           -> a + b
        apply(Op.POW, a, exponent=3) -> a ** 3
        apply(Op.LEAF, 2.5)          -> Value(2.5)

    Args:
        op: an Op member or its string value.
        operands: Values or plain numbers (numbers become leaves).
        exponent: constant exponent; required for Op.POW, rejected otherwise.
        tape: tape to record on. Plain-number operands become leaves on it and
            every Value operand must already live on it. Defaults to the tape
            of the Value operands, or the active tape if there are none.

    Raises:
        ValueError: unknown tag or wrong operand count.
        TypeError: misplaced or non-constant exponent.
        StructuralError: a Value operand is recorded on a tape other than `tape`.
    """
    op = Op(op)
    if op is not Op.POW and exponent is not None:
        raise TypeError(f"exponent is only valid for {Op.POW.value!r}, not {op.value!r}")

    if op is Op.LEAF:
        _check_arity(op, operands, 1)
        return Value(operands[0], tape=tape)
    if tape is not None:
        for x in operands:
            if isinstance(x, Value) and x.tape is not tape:
                raise StructuralError(f"{x!r} is not recorded on the requested tape")
        operands = tuple(x if isinstance(x, Value) else Value(x, tape=tape) for x in operands)
    if op is Op.POW:
        _check_arity(op, operands, 1)
        if exponent is None:
            raise TypeError("pow needs a constant exponent")
        return pow(operands[0], exponent)
    if op in _UNARY:
        _check_arity(op, operands, 1)
        return _UNARY[op](operands[0])
    _check_arity(op, operands, 2)
    return _BINARY[op](*operands)


def _check_arity(op: Op, operands, n: int):
    if len(operands) != n:
        raise ValueError(f"{op.value!r} takes {n} operand(s), got {len(operands)}")
