import logging
import numpy as np
from scipy.integrate._ivp.common import EPS
from .common import mass_matrix
from .nonlinear import ConvergenceError, nonlinear_solver


logger = logging.getLogger(__name__)


def check_arguments(fun, y0, name="y0"):
    """Helper function for checking arguments common to all solvers."""
    y0 = np.asarray(y0)
    if np.issubdtype(y0.dtype, np.complexfloating):
        raise ValueError(f"`{name}` is complex, but the fixed step "
                         "solvers do not support integration in a "
                         "complex domain.")
    y0 = y0.astype(float, copy=False)

    if y0.ndim != 1:
        raise ValueError(f"`{name}` must be 1-dimensional.")

    if not np.isfinite(y0).all():
        raise ValueError(f"All components of the initial state `{name}` must be finite.")

    def fun_wrapped(*args):
        return np.asarray(fun(*args), dtype=float)

    return fun_wrapped, y0


def check_time_grid(t_span, max_step=None):
    """Return the uniform time grid described by `t_span`.

    A 2-member `t_span` is divided into steps of size `max_step` (10% of
    the interval by default). Integration stops at the first grid point
    within half a step of the final time. Longer sequences are taken as
    the grid itself and have to be uniformly spaced.
    """
    t_span = np.asarray(t_span, dtype=float)
    if t_span.ndim != 1 or t_span.size < 2:
        raise ValueError("`t_span` must be a 1-dimensional sequence with at "
                         "least 2 entries.")
    if not np.isfinite(t_span).all():
        raise ValueError("All entries of `t_span` must be finite.")

    d = np.diff(t_span)
    if np.any(d <= 0):
        raise ValueError("`t_span` must be strictly increasing.")

    if t_span.size == 2:
        t0, t_final = t_span
        span = t_final - t0
        h = 0.1 * span if max_step is None else min(max_step, span)
        n_steps = max(1, int(np.ceil(span / h - 0.5)))
        return t0 + h * np.arange(n_steps + 1), h

    n = t_span.size
    h = (t_span[-1] - t_span[0]) / (n - 1)
    t_uniform = t_span[0] + h * np.arange(n)
    atol = 1e-8 * h + 10 * EPS * np.max(np.abs(t_span))
    if np.any(np.abs(t_span - t_uniform) > atol):
        raise ValueError("The fixed step solvers require a uniformly spaced `t_span`.")
    return t_span.copy(), h


class TrajectoryBuffer:
    """Row storage growing in chunks.

    The first chunk holds ``min(max(100, 50 * refine), refine + 2**11 // n)``
    rows, the capacity is doubled whenever it is exhausted.
    """
    def __init__(self, n, refine=1):
        self.n = n
        chunk = min(max(100, 50 * refine), refine + 2**11 // max(n, 1))
        self._data = np.empty((chunk, n))
        self.size = 0

    def append(self, row):
        if self.size == len(self._data):
            self._data = np.concatenate((self._data, np.empty_like(self._data)))
        self._data[self.size] = row
        self.size += 1

    def __setitem__(self, index, row):
        self.view()[index] = row

    def view(self):
        return self._data[:self.size]

    def finalize(self):
        """Return the filled rows as an array of shape (n, size)."""
        return self.view().T.copy()


class StepFailure(Exception):
    """A single attempt to advance the solution did not converge."""
    def __init__(self, residual_norm, message=None):
        super().__init__(message)
        self.residual_norm = residual_norm
        self.message = message


class FixedStepSolver:
    """Base class for the fixed step solvers.

    In order to implement a new solver you need to follow the guidelines:

        1. A constructor must accept the parameters of the base class along
           with solver specific ones.
        2. A solver must either implement `_advance(self, t, h, n_sub)`,
           which integrates from ``t`` to ``t + h`` with ``n_sub`` equal
           sub-steps, stores the new state and raises `StepFailure` if a
           nonlinear solve did not converge, or override `_step_impl`.
        3. Use `fun(self, ...)` for the system evaluation, this way the
           number of function evaluations (`nfev`) is tracked, and
           `_solve(self, residual, x0)` for the nonlinear solves.

    Parameters
    ----------
    fun : callable
        Right-hand side of the system.
    t_grid : ndarray, shape (n_steps + 1,)
        Uniform time grid, see `check_time_grid`.
    n : int
        Number of equations.
    options : FixedStepOptions
        Solver options.

    Attributes
    ----------
    n : int
        Number of equations.
    status : string
        Current status of the solver: 'running', 'finished' or 'failed'.
    t : float
        Current time.
    h : float
        Nominal step size.
    step_index : int
        Number of completed steps.
    nfev : int
        Number of evaluations of the right-hand side.
    nsolve : int
        Number of nonlinear solves.
    nbisect : int
        Number of step bisections.
    """
    def __init__(self, fun, t_grid, n, options):
        self._fun = fun
        self.t_grid = t_grid
        self.n_steps = len(t_grid) - 1
        self.h = t_grid[1] - t_grid[0]
        self.t = t_grid[0]
        self.n = n
        self.options = options
        self.mass = mass_matrix(options.mass, options.mass_state_dependence)
        self.solver = nonlinear_solver(options.nonlinear_solver, options.tol,
                                       options.max_iter)
        self.max_bisections = options.max_bisections

        self.nfev = 0
        self.nsolve = 0
        self.nbisect = 0
        self.step_index = 0
        self.status = 'running'

    def fun(self, *args):
        self.nfev += 1
        return self._fun(*args)

    def _solve(self, residual, x0):
        self.nsolve += 1
        res = self.solver.solve(residual, x0)
        if not res.success:
            raise StepFailure(res.residual_norm, res.message)
        return res.x

    def step(self):
        """Perform one integration step.

        Raises
        ------
        ConvergenceError
            If the step did not converge, even after bisection. The solver
            status is 'failed' afterwards.
        """
        if self.status != 'running':
            raise RuntimeError("Attempt to step on a failed or finished "
                               "solver.")

        try:
            self._step_impl()
        except ConvergenceError:
            self.status = 'failed'
            raise

        self.step_index += 1
        self.t = self.t_grid[self.step_index]
        if self.step_index == self.n_steps:
            self.status = 'finished'

    def _step_impl(self):
        t = self.t
        h = self.t_grid[self.step_index + 1] - t
        failure = None
        for depth in range(self.max_bisections + 1):
            n_sub = 2**depth
            if depth > 0:
                self.nbisect += 1
                logger.debug("step %d: retrying with %d sub-steps (last residual %.3e)",
                             self.step_index + 1, n_sub, failure.residual_norm)
            try:
                self._advance(t, h, n_sub)
                return
            except StepFailure as exc:
                failure = exc

        raise ConvergenceError(self.step_index + 1, t + h,
                               failure.residual_norm, failure.message)

    def _advance(self, t, h, n_sub):
        raise NotImplementedError


class SecondOrderSolver(FixedStepSolver):
    """Base class for solvers of ``M(t, q, v) q'' = f(t, q, v)``.

    Next to the `FixedStepSolver` attributes, `q` and `v` hold the current
    positions and velocities, `la` and `mu` the multipliers of the
    holonomic and non-holonomic constraints (empty if there are none).
    `v_old` may hold a revised velocity of the previous grid point.
    """
    def __init__(self, fun, t_grid, q0, v0, options):
        fun, self.q = check_arguments(fun, q0, name="q0")
        _, self.v = check_arguments(fun, v0, name="v0")
        if self.q.shape != self.v.shape:
            raise ValueError("`q0` and `v0` must be of same shape.")
        super().__init__(fun, t_grid, self.q.size, options)
        self.la = np.zeros(0)
        self.mu = np.zeros(0)
        self.v_old = None

        self.mass.validate(self.t, self.q, self.v)
        f = self.fun(self.t, self.q, self.v)
        if f.shape != (self.n,):
            raise ValueError(f"`fun` return is expected to have shape {(self.n,)}, "
                             f"but actually has {f.shape}.")
