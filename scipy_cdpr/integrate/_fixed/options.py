from dataclasses import dataclass, replace
from numbers import Integral
from typing import Any, Callable, Optional, Union
from warnings import warn
import numpy as np
from .common import STATE_DEPENDENCE
from .nonlinear import NONLINEAR_SOLVERS, NonlinearSolver


@dataclass(frozen=True)
class FixedStepOptions:
    """Options shared by all fixed step solvers.

    Attributes
    ----------
    max_step : float or None
        Step size. Default is None, which means 10% of the integration
        interval. Ignored if an explicit time grid is given.
    mass : None, array_like, callable or MassMatrix
        Mass matrix, see `mass_matrix`. Default is the identity.
    mass_state_dependence : {"none", "weak", "strong"}
        Signature of a callable `mass`.
    output_fcn : callable or None
        Called as ``output_fcn(t, y, flag)`` with flag "init" (``t`` is
        ``[t0, t_final]``), "step" and "done" (``t`` and ``y`` are None).
        Returning True on "step" stops the integration.
    tol : float
        Relative tolerance of the nonlinear solver.
    max_iter : int
        Iteration limit of the nonlinear solver.
    max_bisections : int
        How often a failed step is split into halves before giving up.
    nonlinear_solver : str or NonlinearSolver
        "newton", "lm" or a solver instance.
    """
    max_step: Optional[float] = None
    mass: Any = None
    mass_state_dependence: str = "weak"
    output_fcn: Optional[Callable] = None
    tol: float = 1e-8
    max_iter: int = 25
    max_bisections: int = 3
    nonlinear_solver: Union[str, NonlinearSolver] = "newton"

    def __post_init__(self):
        if self.max_step is not None and not (np.isfinite(self.max_step) and self.max_step > 0):
            raise ValueError("`max_step` must be positive.")
        if self.mass_state_dependence not in STATE_DEPENDENCE:
            raise ValueError(f"`mass_state_dependence` must be one of {STATE_DEPENDENCE}.")
        if self.output_fcn is not None and not callable(self.output_fcn):
            raise ValueError("`output_fcn` must be callable.")
        if not self.tol > 0:
            raise ValueError("`tol` must be positive.")
        if not _is_integer(self.max_iter) or self.max_iter < 1:
            raise ValueError(f"`max_iter` must be an integer >= 1, got {self.max_iter!r}.")
        if not _is_integer(self.max_bisections) or self.max_bisections < 0:
            raise ValueError(f"`max_bisections` must be an integer >= 0, "
                             f"got {self.max_bisections!r}.")
        if not (isinstance(self.nonlinear_solver, NonlinearSolver)
                or self.nonlinear_solver in NONLINEAR_SOLVERS):
            raise ValueError(f"`nonlinear_solver` must be one of {list(NONLINEAR_SOLVERS)} "
                             "or a NonlinearSolver instance.")


def _is_integer(value):
    return isinstance(value, Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class OdeOptions(FixedStepOptions):
    """Options of the BDF solver.

    Additional attributes
    ---------------------
    max_order : int
        Order of the BDF scheme, 1 <= max_order <= 6. Default is 3.
    """
    max_order: int = 3

    def __post_init__(self):
        super().__post_init__()
        if not _is_integer(self.max_order) or not 1 <= self.max_order <= 6:
            raise ValueError(f"`max_order` must be an integer with "
                             f"1 <= max_order <= 6, got {self.max_order!r}.")
        if self.max_order == 6:
            warn("Choosing `max_order = 6` is not recomended due to its poor stability properties.",
                 stacklevel=3)


@dataclass(frozen=True)
class DaeOptions(FixedStepOptions):
    """Options of the second order solvers.

    `max_order` does not exist here, Betsch and Leapfrog have a fixed order.

    Additional attributes
    ---------------------
    constraints_q : callable or None
        Holonomic constraints ``Phi(t, q)``.
    jconstraints_q : callable or None
        Jacobian of the holonomic constraints.
    constraints_dq : callable or None
        Non-holonomic constraint matrix ``Psi(t, q)``.
    ic_tol : float
        Tolerance for the consistency check of the initial conditions.
    """
    constraints_q: Optional[Callable] = None
    jconstraints_q: Optional[Callable] = None
    constraints_dq: Optional[Callable] = None
    ic_tol: float = 1e-6

    def __post_init__(self):
        super().__post_init__()
        for name in ("constraints_q", "jconstraints_q", "constraints_dq"):
            value = getattr(self, name)
            if value is not None and not callable(value):
                raise ValueError(f"`{name}` must be callable.")
        if not self.ic_tol > 0:
            raise ValueError("`ic_tol` must be positive.")

    @property
    def constrained(self):
        return self.constraints_q is not None or self.constraints_dq is not None


def prepare_options(cls, options, overrides):
    """Merge keyword overrides into an options instance of type `cls`."""
    if options is None:
        options = cls()
    elif not isinstance(options, cls):
        raise TypeError(f"`options` must be a {cls.__name__} instance.")
    if overrides:
        options = replace(options, **overrides)
    return options
