"""
Engine Configuration

Shared numeric configuration for the scalar autograd engine and the
finite-difference gradient checker.
"""

import numpy as np


class EngineConfig:
    """Shared configuration for graph construction and gradient checks"""

    # Forward values, local partials and gradients are all stored in this dtype
    DTYPE = np.float32

    # Central-difference step and tolerances used by gradcheck.check_gradients.
    # float32 round-off dominates below eps ~ 1e-3, so keep the step coarse.
    FD_EPS = 1e-2
    FD_ATOL = 1e-2
    FD_RTOL = 1e-2

    @staticmethod
    def as_scalar(x) -> np.float32:
        """
        Coerce a plain number to the engine dtype.

        Args:
            x: int, float or numpy scalar

        Returns:
            x as an EngineConfig.DTYPE scalar

        Raises:
            TypeError: if x is not a real scalar (bool, str, arrays, ...)
        """
        if isinstance(x, bool) or not isinstance(x, (int, float, np.integer, np.floating)):
            raise TypeError(
                f"Value only accepts real scalars (int, float, numpy scalar), "
                f"but got {type(x)}"
            )
        return EngineConfig.DTYPE(x)
