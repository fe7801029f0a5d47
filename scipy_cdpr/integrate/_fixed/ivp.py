import inspect
import logging
import numpy as np
from scipy.integrate._ivp.ivp import OdeResult
from .base import FixedStepSolver, SecondOrderSolver, TrajectoryBuffer, check_time_grid
from .bdf import BDF
from .betsch import Betsch
from .leapfrog import Leapfrog
from .options import OdeOptions, DaeOptions, prepare_options


logger = logging.getLogger(__name__)


METHODS = {
    "BDF": BDF,
}


DAE_METHODS = {
    "Betsch": Betsch,
    "Leapfrog": Leapfrog,
}


MESSAGES = {0: "The solver successfully reached the end of the integration interval.",
            1: "Integration stopped by the output function."}


def _wrap_args(fun, args):
    if args is None:
        return fun

    # Wrap the user's fun in a lambda to hide the additional parameters.
    try:
        _ = [*(args)]
    except TypeError as exp:
        suggestion_tuple = (
            "Supplied 'args' cannot be unpacked. Please supply `args`"
            f" as a tuple (e.g. `args=({args},)`)"
        )
        raise TypeError(suggestion_tuple) from exp

    def fun_args(*x, fun=fun):
        return fun(*x, *args)

    return fun_args


def _run(solver, output_fcn, record):
    """Step `solver` until it is finished or stopped by `output_fcn`.

    `record` stores the current solver state and returns the state that is
    passed to `output_fcn`.
    """
    y = record()
    if output_fcn is not None:
        output_fcn(solver.t_grid[[0, -1]], y, "init")

    status = None
    try:
        while status is None:
            solver.step()
            y = record()
            stop = output_fcn is not None and output_fcn(solver.t, y, "step")
            if solver.status == 'finished':
                status = 0
            elif stop:
                status = 1
    finally:
        if output_fcn is not None:
            output_fcn(None, None, "done")

    logger.info("%s: %d steps, %d function evaluations, %d nonlinear solves, "
                "%d bisections", type(solver).__name__, solver.step_index,
                solver.nfev, solver.nsolve, solver.nbisect)
    return status


def integrate(fun, t_span, y0, method="BDF", options=None, args=None, **overrides):
    """Solve an initial value problem ``M(t, y) y' = f(t, y)`` with a fixed
    step size.

    Parameters
    ----------
    fun : callable
        Right-hand side of the system. The calling signature is
        ``fun(t, y)``, where ``t`` is a scalar and ``y`` is an ndarray with
        ``len(y) = len(y0)``. ``fun`` must return an array of the same
        shape as ``y``.
    t_span : array_like
        Either the interval ``(t0, t_final)``, which is divided into steps
        of size `max_step`, or a strictly increasing, uniformly spaced grid
        of output times.
    y0 : array_like, shape (n,)
        Initial state.
    method : string or `FixedStepSolver`, optional
        Integration method to use:

            * 'BDF': Backward differentiation formula of order
              `max_order` [1]_.

        You can also pass an arbitrary class derived from
        `FixedStepSolver`.
    options : OdeOptions, optional
        Solver options.
    args : tuple, optional
        Additional arguments to pass to the user-defined function.
    **overrides
        Fields of `OdeOptions` replacing the ones of `options`.

    Returns
    -------
    Bunch object with the following fields defined:
    t : ndarray, shape (n_points,)
        Time points.
    y : ndarray, shape (n, n_points)
        Values of the solution at `t`.
    h : float
        Step size.
    nfev : int
        Number of evaluations of the right-hand side.
    nsolve : int
        Number of nonlinear solves.
    nbisect : int
        Number of step bisections.
    status : int
        Reason for algorithm termination:

            * 0: The solver successfully reached the end of `t_span`.
            * 1: The integration was stopped by the output function.

    message : string
        Human-readable description of the termination reason.
    success : bool
        True if the solver reached the interval end or was stopped by the
        output function.

    Raises
    ------
    ValueError
        If the arguments or options are invalid.
    ConvergenceError
        If a step could not be solved, even after bisection.

    References
    ----------
    .. [1] E. Hairer, G. Wanner, "Solving Ordinary Differential Equations
           II: Stiff and Differential-Algebraic Problems", Sec. III.1.
    """
    if method not in METHODS and not (
            inspect.isclass(method) and issubclass(method, FixedStepSolver)):
        raise ValueError(f"`method` must be one of {METHODS} or FixedStepSolver class.")

    options = prepare_options(OdeOptions, options, overrides)
    fun = _wrap_args(fun, args)
    t_grid, h = check_time_grid(t_span, options.max_step)

    if method in METHODS:
        method = METHODS[method]

    solver = method(fun, t_grid, y0, options)

    ts = TrajectoryBuffer(1)
    ys = TrajectoryBuffer(solver.n)

    def record():
        ts.append(solver.t)
        ys.append(solver.y)
        return solver.y

    status = _run(solver, options.output_fcn, record)

    return OdeResult(t=ts.finalize()[0], y=ys.finalize(), h=h,
                     nfev=solver.nfev, nsolve=solver.nsolve,
                     nbisect=solver.nbisect, status=status,
                     message=MESSAGES[status], success=status >= 0)


def integrate_dae(fun, t_span, q0, v0, method="Betsch", options=None, args=None,
                  **overrides):
    """Solve the equations of motion of a constrained mechanical system
    with a fixed step size::

        M(t, q, v) q'' = f(t, q, v) + J(t, q)^T la + Psi(t, q)^T mu
        Phi(t, q) = 0
        Psi(t, q) q' = 0

    Parameters
    ----------
    fun : callable
        Generalized forces ``f(t, q, v)``.
    t_span : array_like
        Interval or uniform grid, see `integrate`.
    q0, v0 : array_like, shape (n,)
        Initial positions and velocities. They have to satisfy the
        constraints, the multipliers are computed by
        `consistent_initial_conditions`.
    method : string or `SecondOrderSolver`, optional
        Integration method to use:

            * 'Betsch': Constrained implicit scheme [1]_.
            * 'Leapfrog': Explicit leapfrog scheme, unconstrained systems
              only.

    options : DaeOptions, optional
        Solver options including the constraints.
    args : tuple, optional
        Additional arguments to pass to the user-defined function.
    **overrides
        Fields of `DaeOptions` replacing the ones of `options`.

    Returns
    -------
    Bunch object with the fields of `integrate` and additionally:
    q, v : ndarray, shape (n, n_points)
        Positions and velocities, ``y`` stacks both.
    la : ndarray, shape (g, n_points)
        Multipliers of the holonomic constraints.
    mu : ndarray, shape (m, n_points)
        Multipliers of the non-holonomic constraints.
    a0 : ndarray, shape (n,)
        Initial acceleration.

    References
    ----------
    .. [1] P. Betsch, "The discrete null space method for the energy
           consistent integration of constrained mechanical systems",
           Computer Methods in Applied Mechanics and Engineering, 194,
           pp. 5159-5190, 2005.
    """
    if method not in DAE_METHODS and not (
            inspect.isclass(method) and issubclass(method, SecondOrderSolver)):
        raise ValueError(f"`method` must be one of {DAE_METHODS} or SecondOrderSolver class.")

    options = prepare_options(DaeOptions, options, overrides)
    fun = _wrap_args(fun, args)
    t_grid, h = check_time_grid(t_span, options.max_step)

    if method in DAE_METHODS:
        method = DAE_METHODS[method]

    solver = method(fun, t_grid, q0, v0, options)

    ts = TrajectoryBuffer(1)
    qs = TrajectoryBuffer(solver.n)
    vs = TrajectoryBuffer(solver.n)
    las = TrajectoryBuffer(solver.la.size)
    mus = TrajectoryBuffer(solver.mu.size)

    def record():
        if solver.v_old is not None:
            vs[-1] = solver.v_old
        ts.append(solver.t)
        qs.append(solver.q)
        vs.append(solver.v)
        las.append(solver.la)
        mus.append(solver.mu)
        return solver.q

    status = _run(solver, options.output_fcn, record)

    q = qs.finalize()
    v = vs.finalize()
    return OdeResult(t=ts.finalize()[0], q=q, v=v, y=np.vstack((q, v)),
                     la=las.finalize(), mu=mus.finalize(), a0=getattr(solver, "a0", None), h=h,
                     nfev=solver.nfev, nsolve=solver.nsolve,
                     nbisect=solver.nbisect, status=status,
                     message=MESSAGES[status], success=status >= 0)


def trajectory_table(sol):
    """Return the solution as a table with rows ``[t, y...]``, where ``y``
    are the states, or positions followed by velocities."""
    return np.column_stack((sol.t, sol.y.T))
