import numpy as np
from scipy.linalg import solve, LinAlgError
from .base import SecondOrderSolver
from .nonlinear import ConvergenceError


class Leapfrog(SecondOrderSolver):
    """Leapfrog scheme for unconstrained second order systems.

    Solves ``M(t, q, v) q'' = f(t, q, v)`` with velocities at half steps.
    Velocity dependent forces are evaluated with a full step velocity
    obtained from a central difference of the positions, where the next
    position comes from a predictor step. That velocity is only known one
    step later and reported through `v_old`; the velocity of the current
    grid point is estimated with a half step kick.
    """
    def __init__(self, fun, t_grid, q0, v0, options):
        super().__init__(fun, t_grid, q0, v0, options)
        if getattr(options, "constrained", False):
            raise ValueError("The Leapfrog solver does not support constraints.")

        self.a0 = self._acceleration(self.t, self.q, self.v)
        self.v_half = self.v - 0.5 * self.h * self.a0
        self.a_predict = self._acceleration(self.t, self.q, self.v_half)
        self.q_old = None

    def _acceleration(self, t, q, v):
        try:
            return solve(self.mass(t, q, v), self.fun(t, q, v))
        except LinAlgError:
            raise ConvergenceError(self.step_index + 1, t, np.inf,
                                   "The mass matrix is singular.")

    def _step_impl(self):
        t, q, h = self.t, self.q, self.h
        t_new = self.t_grid[self.step_index + 1]

        q_predict = q + h * (self.v_half + h * self.a_predict)
        if self.q_old is None:
            v = self.v
        else:
            v = (q_predict - self.q_old) / (2 * h)

        a = self._acceleration(t, q, v)
        v_half = self.v_half + h * a
        q_new = q + h * v_half
        a_predict = self._acceleration(t_new, q_new, v_half)

        self.v_old = v
        self.q_old = q
        self.q = q_new
        self.v_half = v_half
        self.a_predict = a_predict
        self.v = v_half + 0.5 * h * a_predict
