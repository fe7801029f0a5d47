import logging
import numpy as np
from scipy.linalg import lu_factor, lu_solve
from scipy.optimize import least_squares, OptimizeResult
from scipy.optimize._numdiff import approx_derivative


logger = logging.getLogger(__name__)


class ConvergenceError(RuntimeError):
    """Raised when a step does not converge after all retries.

    Attributes
    ----------
    step : int
        Index of the step that failed (the first step has index 1).
    t : float
        Time the failed step was supposed to reach.
    residual_norm : float
        Max norm of the residual at the last iterate.
    """
    def __init__(self, step, t, residual_norm, message=None):
        self.step = step
        self.t = t
        self.residual_norm = residual_norm
        text = (f"Convergence failed in step {step} (t={t:.6g}), "
                f"residual norm {residual_norm:.3e}.")
        if message:
            text = f"{text} {message}"
        super().__init__(text)


class NonlinearSolver:
    """Base class for the root finders used by the fixed step solvers.

    Subclasses implement `_solve_impl(fun, x0, f_tol)` returning an
    `OptimizeResult` with at least the fields ``x`` and ``nit``, and
    optionally ``step_converged``. The result returned by `solve` is
    completed with ``fun``, ``residual_norm``, ``nfev``, ``success`` and
    ``message``. Non-convergence never raises, the caller decides what to do
    with an unsuccessful result.

    A root is accepted if the max norm of the residual is below
    ``f_tol = tol * (1 + max|fun(x0)|)``, or if the last update ``dx`` of an
    iterative method satisfies ``|dx| <= tol * (1 + |x|)`` componentwise.
    Both criteria are relative, so the outcome does not depend on the units
    of the problem.

    Parameters
    ----------
    tol : float, optional
        Relative tolerance of the residual and of the update. Default is 1e-8.
    max_iter : int, optional
        Maximum number of iterations. Default is 25.
    """
    def __init__(self, tol=1e-8, max_iter=25):
        if tol <= 0:
            raise ValueError("`tol` must be positive.")
        if max_iter < 1:
            raise ValueError("`max_iter` must be at least 1.")
        self.tol = tol
        self.max_iter = int(max_iter)

    def solve(self, fun, x0):
        nfev = 0

        def fun_counted(x):
            nonlocal nfev
            nfev += 1
            return np.asarray(fun(x), dtype=float)

        x0 = np.asarray(x0, dtype=float)
        f0 = fun_counted(x0)
        f_scale = np.max(np.abs(f0)) if f0.size else 0.0
        if not np.isfinite(f_scale):
            f_scale = 0.0
        f_tol = self.tol * (1 + f_scale)

        res = self._solve_impl(fun_counted, x0, f_tol)

        f = fun_counted(res.x)
        if np.all(np.isfinite(f)):
            residual_norm = np.max(np.abs(f)) if f.size else 0.0
        else:
            residual_norm = np.inf
        res.fun = f
        res.residual_norm = residual_norm
        res.f_tol = f_tol
        if residual_norm <= f_tol:
            res.success = True
            res.message = "The residual is below the tolerance."
        elif np.isfinite(residual_norm) and res.get("step_converged", False):
            res.success = True
            res.message = "The update is below the tolerance."
        else:
            res.success = False
            if not res.get("message"):
                res.message = "Maximum number of iterations reached."
        res.nfev = nfev
        return res

    def _solve_impl(self, fun, x0, f_tol):
        raise NotImplementedError


class NewtonSolver(NonlinearSolver):
    """Newton's method with a forward difference Jacobian.

    The Jacobian is recomputed in every iteration and factorized with
    `scipy.linalg.lu_factor`.
    """
    def _solve_impl(self, fun, x0, f_tol):
        x = x0.copy()
        message = None
        step_converged = False
        for k in range(self.max_iter):
            f = fun(x)
            if not np.all(np.isfinite(f)):
                message = "The residual is not finite."
                break
            if f.size == 0 or np.max(np.abs(f)) <= f_tol:
                break

            J = approx_derivative(fun, x, f0=f, method="2-point")
            dx = lu_solve(lu_factor(np.atleast_2d(J), check_finite=False), -f)
            if not np.all(np.isfinite(dx)):
                message = "The Jacobian is singular."
                break

            x += dx
            logger.debug("newton iteration %d: |f| = %.3e, |dx| = %.3e",
                         k + 1, np.max(np.abs(f)), np.max(np.abs(dx)))
            if np.all(np.abs(dx) <= self.tol * (1 + np.abs(x))):
                step_converged = True
                k += 1
                break
        else:
            k = self.max_iter

        return OptimizeResult(x=x, nit=k, message=message,
                              step_converged=step_converged)


class LevenbergMarquardtSolver(NonlinearSolver):
    """Levenberg-Marquardt least squares solve of the residual equations.

    Wraps ``scipy.optimize.least_squares(method="lm")``, hence the number
    of residuals must not be smaller than the number of unknowns.
    """
    def _solve_impl(self, fun, x0, f_tol):
        if x0.size == 0:
            return OptimizeResult(x=x0, nit=0, message=None)
        res = least_squares(fun, x0, method="lm", xtol=1e-15, ftol=1e-15,
                            gtol=1e-15, max_nfev=self.max_iter * (x0.size + 1))
        return OptimizeResult(x=res.x, nit=res.nfev, message=res.message)


NONLINEAR_SOLVERS = {
    "newton": NewtonSolver,
    "lm": LevenbergMarquardtSolver,
}


def nonlinear_solver(solver, tol, max_iter):
    """Return a `NonlinearSolver` instance from a name or an instance."""
    if isinstance(solver, NonlinearSolver):
        return solver
    if solver in NONLINEAR_SOLVERS:
        return NONLINEAR_SOLVERS[solver](tol=tol, max_iter=max_iter)
    raise ValueError(f"`nonlinear_solver` must be one of {list(NONLINEAR_SOLVERS)} "
                     "or a NonlinearSolver instance.")
