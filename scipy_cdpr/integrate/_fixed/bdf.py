from collections import deque
import numpy as np
from .base import FixedStepSolver, check_arguments
from .common import IdentityMass


# ALPHA[k, j - 1] is the coefficient of y_{n+1-j} in the k-step formula
#   y_{n+1} + sum_j ALPHA[k, j - 1] y_{n+1-j} = BETA[k] h f(t_{n+1}, y_{n+1})
ALPHA = np.array([
    [0, 0, 0, 0, 0, 0],
    [-1, 0, 0, 0, 0, 0],
    [-4 / 3, 1 / 3, 0, 0, 0, 0],
    [-18 / 11, 9 / 11, -2 / 11, 0, 0, 0],
    [-48 / 25, 36 / 25, -16 / 25, 3 / 25, 0, 0],
    [-300 / 137, 300 / 137, -200 / 137, 75 / 137, -12 / 137, 0],
    [-360 / 147, 450 / 147, -400 / 147, 225 / 147, -72 / 147, 10 / 147],
])
ALPHA.flags.writeable = False

BETA = np.array([0, 1, 2 / 3, 6 / 11, 12 / 25, 60 / 137, 60 / 147])
BETA.flags.writeable = False


def bdf_residual(fun, mass, t_new, y, psi, c):
    """Residual of the BDF corrector equation.

    Parameters
    ----------
    fun : callable
        Right-hand side ``f(t, y)``.
    mass : MassMatrix
        Mass matrix, evaluated at ``(t_new, y, y')`` with the BDF estimate
        ``y' = (y + psi) / c``.
    t_new : float
        Time of the new step.
    y : ndarray, shape (n,)
        Iterate for the new state.
    psi : ndarray, shape (n,)
        Weighted sum of the previous states ``sum_j alpha_j y_{n+1-j}``.
    c : float
        Leading weight times step size ``beta * h``.
    """
    d = y + psi
    return mass(t_new, y, d / c) @ d - c * fun(t_new, y)


class BDF(FixedStepSolver):
    """Fixed step, fixed order backward differentiation formulas.

    Solves ``M(t, y) y' = f(t, y)`` on a uniform grid. The first
    ``max_order - 1`` steps use the formulas of order 1, 2, ... on the
    states available so far, afterwards the order stays at `max_order`.
    Every step is solved for the new state with the nonlinear solver of the
    options, starting from an explicit Euler predictor.

    Parameters
    ----------
    fun : callable
        Right-hand side ``f(t, y)`` returning an array of shape (n,).
    t_grid : ndarray
        Uniform time grid.
    y0 : array_like, shape (n,)
        Initial state.
    options : OdeOptions
        Solver options, `max_order` sets the order.

    References
    ----------
    .. [1] E. Hairer, G. Wanner, "Solving Ordinary Differential Equations
           II: Stiff and Differential-Algebraic Problems", Sec. III.1.
    """
    def __init__(self, fun, t_grid, y0, options):
        fun, y0 = check_arguments(fun, y0)
        super().__init__(fun, t_grid, y0.size, options)
        self.y = y0
        self.max_order = options.max_order

        M = self.mass.validate(self.t, self.y)
        f = self.fun(self.t, self.y)
        if f.shape != (self.n,):
            raise ValueError(f"`fun` return is expected to have shape {(self.n,)}, "
                             f"but actually has {f.shape}.")
        self.yp = np.linalg.lstsq(M, f, rcond=None)[0]

        # newest state last
        self.history = deque([self.y], maxlen=self.max_order)

    def _advance(self, t, h, n_sub):
        if n_sub == 1:
            history = list(self.history)
        else:
            # sub-steps restart the order ramp from the current state
            history = [self.y]

        h_sub = h / n_sub
        yp = self.yp
        for i in range(n_sub):
            t_new = t + (i + 1) * h_sub
            order = min(len(history), self.max_order)
            y_new, yp = self._solve_step(t_new, history[-order:], yp, h_sub)
            history.append(y_new)

        self.y = y_new
        self.yp = yp
        self.history.append(y_new)

    def _solve_step(self, t_new, history, yp, h):
        order = len(history)
        psi = ALPHA[order, :order] @ np.array(history[::-1])
        c = BETA[order] * h

        y = history[-1]
        f = self.fun(t_new - h, y)
        if isinstance(self.mass, IdentityMass):
            y_predict = y + h * f
        else:
            y_predict = y + h * np.linalg.lstsq(self.mass(t_new - h, y, yp), f, rcond=None)[0]

        def residual(y_new):
            return bdf_residual(self.fun, self.mass, t_new, y_new, psi, c)

        y_new = self._solve(residual, y_predict)
        return y_new, (y_new + psi) / c
