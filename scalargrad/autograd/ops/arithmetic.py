# autograd/ops/arithmetic.py
from ..core.value import Value
from ..core.node import Op
from ..core import tape as tape_mod  # Use module access for use_tape() compatibility
from ..errors import StructuralError
from ...config import EngineConfig

_ONE = EngineConfig.DTYPE(1.0)


def _as_values(*xs):
    """
    Return `xs` as Values on one tape. Plain numbers are wrapped as fresh leaves
    on the tape of the Value operands (the active tape if there are none).
    """
    tapes = [x.tape for x in xs if isinstance(x, Value)]
    tape = tapes[0] if tapes else tape_mod.global_tape
    if any(t is not tape for t in tapes):
        raise StructuralError("operands are recorded on different tapes")
    return tuple(x if isinstance(x, Value) else Value(x, tape=tape) for x in xs)


def _binary(x, y, f, dfdx, dfdy, tag):
    """
    Generic binary primitive:
      - computes out.data = f(x.data, y.data)
      - pushes a Node with local partials (d out/dx, d out/dy)
    """
    x, y = _as_values(x, y)
    a, b = x.data, y.data
    idx = x.tape.push_node(
        op_tag=tag, data=f(a, b),
        operands=(x.idx, y.idx),
        partials=(dfdx(a, b), dfdy(a, b)),
    )
    return Value._at(x.tape, idx)


def add(x, y): return _binary(x, y, lambda a, b: a + b, lambda a, b: _ONE, lambda a, b: _ONE, Op.ADD)
def mul(x, y): return _binary(x, y, lambda a, b: a * b, lambda a, b: b,    lambda a, b: a,    Op.MUL)


def pow(x, k):
    """
    Power with a constant exponent:
      out.data = x.data ** k

    Local partial:
      d out/dx = k * x^(k-1)

    `k` is a plain int/float, not a node, so no gradient ever flows into it.
    A negative base with a fractional k gives NaN (numpy warns); nothing is
    clamped.
    """
    if isinstance(k, Value):
        raise TypeError("pow only supports constant int/float exponents, not Value")
    kf = EngineConfig.as_scalar(k)
    (x,) = _as_values(x)
    a = x.data
    idx = x.tape.push_node(
        op_tag=Op.POW, data=a ** kf,
        operands=(x.idx,),
        partials=(kf * a ** (kf - _ONE),),
        exponent=k,
    )
    return Value._at(x.tape, idx)


# ----- Derived operators: compositions of the primitives, no tags of their own -----
def neg(x):
    """-x == x * -1"""
    return mul(x, -1.0)


def sub(x, y):
    """x - y == x + (y * -1)"""
    x, y = _as_values(x, y)
    return add(x, neg(y))


def div(x, y):
    """x / y == x * y^-1"""
    x, y = _as_values(x, y)
    return mul(x, pow(y, -1))


def total(values, start=0.0):
    """
    Left-to-right Add chain over `values`, starting from `start`.
    Equivalent to the builtin sum() but records no extra leaf when `start`
    is already a Value.
    """
    out = start
    for v in values:
        out = add(out, v)
    if not isinstance(out, Value):
        (out,) = _as_values(out)
    return out
