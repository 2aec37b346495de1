"""
Backward pass: ordering, accumulation, reset and structural errors.
"""

import math

import numpy as np
import pytest

from scalargrad.autograd import (
    Value,
    Op,
    Tape,
    backward,
    zero_grad,
    topological_order,
    use_tape,
    StructuralError,
)


def test_add_mul_backprop():
    a = Value(-4.0)
    b = Value(2.0)
    c = a + b
    assert c.data == -2.0
    d = c * Value(3.0)
    assert d.data == -6.0

    backward(d)

    c_op, e = d.operands
    assert c_op == c
    assert c.grad == 3.0
    assert e.grad == -2.0
    assert a.grad == 3.0
    assert b.grad == 3.0
    assert d.grad == 1.0


def test_tanh_backprop():
    a = Value(-4.0)
    b = Value(2.0)
    o = (a + b).tanh()
    assert o.data == pytest.approx(math.tanh(-2.0), rel=1e-6)

    backward(o)

    expected = 1 - math.tanh(-2.0) ** 2
    assert a.grad == pytest.approx(expected, rel=1e-5)
    assert b.grad == pytest.approx(expected, rel=1e-5)


def test_diamond_accumulates_before_propagating():
    # c feeds y twice; a and b must see the full 2*c, not a partial sum
    a = Value(2.0)
    b = Value(3.0)
    c = a + b
    y = c * c

    backward(y)

    assert c.grad == 10.0
    assert a.grad == 2 * (a.data + b.data)
    assert b.grad == 2 * (a.data + b.data)


def test_diamond_through_two_paths():
    # x reaches y via u and via v: y = (2x) * (x + 1)
    x = Value(3.0)
    u = x * 2
    v = x + 1
    y = u * v

    backward(y)

    # dy/dx = 2(x + 1) + 2x = 4x + 2
    assert x.grad == 14.0
    assert u.grad == v.data
    assert v.grad == u.data


def test_isolated_leaf():
    x = Value(5.0)
    backward(x)
    assert x.grad == 1.0


def test_grad_is_zero_before_backward():
    a = Value(1.5)
    y = a * a
    assert a.grad == 0.0
    assert y.grad == 0.0


def test_unreachable_nodes_untouched():
    a = Value(1.0)
    b = Value(2.0)
    y = a * 3
    other = b * 4
    backward(y)
    assert b.grad == 0.0
    assert other.grad == 0.0


def test_topological_order_operands_first():
    a = Value(1.0)
    b = Value(2.0)
    c = a * b
    d = c + a
    e = d.tanh() * c

    order = topological_order(e)

    assert order[-1] == e.idx
    assert len(order) == len(set(order))
    pos = {idx: i for i, idx in enumerate(order)}
    for idx in order:
        for operand in e.tape.nodes[idx].operands:
            assert pos[operand] < pos[idx]


def test_repeated_backward_is_additive():
    a = Value(2.0)
    b = Value(3.0)
    y = a * b

    backward(y)
    backward(y)

    assert y.grad == 1.0  # seed is set, not added
    assert a.grad == 6.0
    assert b.grad == 4.0


def test_reset_matches_fresh_graph():
    def build():
        x = Value(0.5)
        w = Value(-1.25)
        h = (x * w + 0.3).tanh()
        y = h * h + (x ** 3) / (w.exp() + 1)
        return x, w, y

    x1, w1, y1 = build()
    backward(y1)
    first = (x1.grad, w1.grad)

    backward(y1)  # now doubled-up
    zero_grad(y1)
    assert x1.grad == 0.0 and w1.grad == 0.0 and y1.grad == 0.0
    backward(y1)

    with use_tape():
        x2, w2, y2 = build()
        backward(y2)
        fresh = (x2.grad, w2.grad)

    assert (x1.grad, w1.grad) == first
    assert first == fresh


def test_backward_zero_grad_flag():
    a = Value(2.0)
    y = a * a * a
    backward(y)
    backward(y, zero_grad=True)
    assert a.grad == 12.0


def test_value_method_forms():
    a = Value(2.0)
    y = a * 4
    y.backward()
    assert a.grad == 4.0
    y.zero_grad()
    assert a.grad == 0.0


def test_long_chain_does_not_recurse():
    x = Value(1.0)
    y = x
    for _ in range(5000):
        y = y + 1.0
    backward(y)
    assert x.grad == 1.0
    assert y.data == 5001.0


def test_grads_are_float32():
    a = Value(0.1)
    y = (a * 3).exp()
    backward(y)
    assert isinstance(y.data, np.float32)
    assert isinstance(a.grad, np.float32)


def test_cycle_is_structural_error(tape):
    a = Value(1.0)
    b = a * 2.0
    # splice a back edge b -> a, something normal construction cannot produce
    tape.nodes[a.idx].operands = (b.idx,)
    tape.nodes[a.idx].partials = (np.float32(1.0),)

    with pytest.raises(StructuralError, match="cycle"):
        backward(b)
    with pytest.raises(StructuralError, match="cycle"):
        zero_grad(b)


def test_self_loop_is_structural_error(tape):
    a = Value(1.0)
    y = a.tanh()
    tape.nodes[y.idx].operands = (y.idx,)
    with pytest.raises(StructuralError):
        backward(y)


def test_dangling_operand_is_structural_error(tape):
    a = Value(1.0)
    y = a + 1.0
    tape.nodes[y.idx].operands = (a.idx, 999)
    with pytest.raises(StructuralError, match="outside the tape"):
        backward(y)


def test_operand_partial_mismatch_is_structural_error(tape):
    a = Value(1.0)
    y = a * 2.0
    tape.nodes[y.idx].partials = (np.float32(2.0),)
    with pytest.raises(StructuralError, match="partials"):
        backward(y)


def test_operands_from_different_tapes():
    with use_tape():
        a = Value(1.0)
    with use_tape():
        b = Value(2.0)
        with pytest.raises(StructuralError, match="different tapes"):
            a + b


def test_tape_reset_and_zero_grad(tape):
    a = Value(1.0)
    y = a * a
    backward(y)
    tape.zero_grad()
    assert all(n.grad == 0.0 for n in tape.nodes)
    tape.reset()
    assert len(tape) == 0


def test_value_handles_share_grad():
    x = Value(3.0)
    y = x * x
    left, right = y.operands
    assert left == x and right == x
    assert len({x, left, right}) == 1
    backward(y)
    assert left.grad == right.grad == x.grad == 6.0


def test_op_tags():
    a = Value(1.0)
    assert a.op is Op.LEAF and a.is_leaf()
    assert (a + 1).op is Op.ADD
    assert (a * 1).op is Op.MUL
    assert (a ** 2).op is Op.POW
    assert a.tanh().op is Op.TANH
    assert a.exp().op is Op.EXP
    # derived operators introduce no tags of their own
    assert (-a).op is Op.MUL
    assert (a - 1).op is Op.ADD
    assert (a / 2).op is Op.MUL


def test_use_tape_with_explicit_empty_tape():
    mine = Tape()
    with use_tape(mine) as active:
        assert active is mine
        x = Value(1.0)
    assert x.tape is mine
    assert len(mine) == 1


def test_truncate_drops_nodes_above_mark(tape):
    w = Value(2.0)
    mark = tape.mark()
    y = (w * 3.0).tanh()
    backward(y)
    grad = w.grad

    tape.truncate(mark, keep=[w])
    assert len(tape) == mark
    assert w.grad == grad
    assert (w * 1.0).data == 2.0


def test_truncate_checks_kept_values(tape):
    w = Value(1.0)
    mark = tape.mark()
    late = Value(2.0)
    with pytest.raises(StructuralError, match="above the truncation mark"):
        tape.truncate(mark, keep=[w, late])
    assert len(tape) == 2  # nothing dropped

    with use_tape():
        other = Value(3.0)
    with pytest.raises(StructuralError, match="different tape"):
        tape.truncate(mark, keep=[other])

    with pytest.raises(ValueError):
        tape.truncate(-1)
    with pytest.raises(ValueError):
        tape.truncate(len(tape) + 1)


def test_stale_handle_after_truncate(tape):
    w = Value(1.0)
    mark = tape.mark()
    y = w * 2.0
    tape.truncate(mark)

    with pytest.raises(StructuralError, match="outside the tape"):
        y.data
    # the freed indices are reused by new nodes; the old handle must not see them
    w + 5.0
    with pytest.raises(StructuralError, match="stale handle"):
        y.data
    with pytest.raises(StructuralError, match="stale handle"):
        backward(y)


def test_stale_handle_after_reset(tape):
    x = Value(1.0)
    tape.reset()
    Value(4.0)
    with pytest.raises(StructuralError, match="stale handle"):
        x.grad


def test_values_outside_scoped_tape_stay_on_default_tape(tape):
    from scalargrad.autograd.core import tape as tape_mod

    kept = Value(1.0)
    assert kept.tape is tape_mod.global_tape
    with use_tape() as scoped:
        Value(2.0) * 3.0
        assert len(scoped) == 3
    assert tape_mod.global_tape is tape
    # only the truncation frees what the default tape recorded
    assert len(tape) == 1
    tape.truncate(0)
    assert len(tape) == 0
