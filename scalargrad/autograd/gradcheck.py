"""
Finite-difference gradient check.

Compares the gradients of one backward pass against central differences of
the forward pass:

    df/dx_i ~= [f(x + eps e_i) - f(x - eps e_i)] / (2 eps)

Forward evaluations: 1 (analytic) + 2 per input (numeric).
"""

import time
from typing import Callable, Dict, Optional

from .core.value import Value
from .core.tape import use_tape
from .core.seeds import grads
from ..config import EngineConfig


def _evaluate(f: Callable[[Dict[str, Value]], Value], point: Dict[str, float]) -> float:
    """Forward pass of f at `point` on a throwaway tape."""
    with use_tape():
        y = f({k: Value(v, name=k) for k, v in point.items()})
        return float(y.data) if isinstance(y, Value) else float(y)


def numerical_grad(f: Callable[[Dict[str, Value]], Value],
                   inputs: Dict[str, float],
                   eps: Optional[float] = None) -> Dict[str, float]:
    """
    Central-difference gradient of f at `inputs`.

    The step actually taken is measured after rounding x +- eps to the engine
    dtype, so the quotient is not biased by float32 representation error.
    """
    eps = EngineConfig.FD_EPS if eps is None else eps
    base = {k: float(v) for k, v in inputs.items()}
    out = {}
    for k, x in base.items():
        x_up = float(EngineConfig.DTYPE(x + eps))
        x_dn = float(EngineConfig.DTYPE(x - eps))
        f_up = _evaluate(f, {**base, k: x_up})
        f_dn = _evaluate(f, {**base, k: x_dn})
        out[k] = (f_up - f_dn) / (x_up - x_dn)
    return out


def check_gradients(f: Callable[[Dict[str, Value]], Value],
                    inputs: Dict[str, float],
                    *,
                    eps: Optional[float] = None,
                    atol: Optional[float] = None,
                    rtol: Optional[float] = None,
                    verbose: bool = False) -> Dict:
    """
    Check backward() against central differences for every input of f.

    Args:
        f: function taking a dict {name: Value} and returning a scalar Value
        inputs: dict {name: number}, the point to check at
        eps: finite-difference step (default EngineConfig.FD_EPS)
        atol, rtol: an input passes when |analytic - numeric| <= atol + rtol*|numeric|
        verbose: print a per-input table

    Returns:
        {
            'analytic': {name: float},    # from one backward pass
            'numeric':  {name: float},    # central differences
            'abs_err':  {name: float},
            'max_abs_err': float,
            'ok': bool,                   # every input within tolerance
            'n_forward': int,             # forward evaluations performed
            'time_ms': float,
        }
    """
    atol = EngineConfig.FD_ATOL if atol is None else atol
    rtol = EngineConfig.FD_RTOL if rtol is None else rtol
    start_time = time.time()

    analytic = {k: float(g) for k, g in grads(f, inputs).items()}
    numeric = numerical_grad(f, inputs, eps)
    abs_err = {k: abs(analytic[k] - numeric[k]) for k in inputs}
    ok = all(abs_err[k] <= atol + rtol * abs(numeric[k]) for k in inputs)

    time_ms = (time.time() - start_time) * 1000

    if verbose:
        print(f"{'input':>10s} {'analytic':>14s} {'numeric':>14s} {'abs err':>12s}")
        for k in inputs:
            print(f"{k:>10s} {analytic[k]:14.6g} {numeric[k]:14.6g} {abs_err[k]:12.3e}")
        print(f"ok={ok}  ({time_ms:.1f} ms)")

    return {
        'analytic': analytic,
        'numeric': numeric,
        'abs_err': abs_err,
        'max_abs_err': max(abs_err.values()) if abs_err else 0.0,
        'ok': ok,
        'n_forward': 1 + 2 * len(inputs),
        'time_ms': time_ms,
    }
