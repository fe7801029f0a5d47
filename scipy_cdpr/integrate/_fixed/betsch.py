import numpy as np
from scipy.integrate._ivp.common import EPS
from .base import SecondOrderSolver
from .common import Constraints, mass_matrix
from .nonlinear import ConvergenceError, NewtonSolver


def betsch_residual(fun, constraints, t_new, h, q, v, M, q_new, v_new, la, mu):
    """Residual of one step of the constrained scheme.

    The rows are the discrete equations of motion
    ``2/h M (q_new - q) - 2 M v - h (f + J^T la + Psi^T mu)`` with all
    forces evaluated at the new state, the holonomic constraints
    ``Phi(t_new, q_new)``, the non-holonomic constraints
    ``Psi(t_new, q_new) (q_new - q)`` and the velocity update
    ``v_new - 2/h (q_new - q) + v``. The mass matrix `M` is the one of the
    old state.
    """
    dq = q_new - q
    J = constraints.phi_q(t_new, q_new)
    Psi = constraints.psi(t_new, q_new)
    return np.concatenate((
        2 / h * M @ dq - 2 * M @ v
        - h * (fun(t_new, q_new, v_new) + J.T @ la + Psi.T @ mu),
        constraints.phi(t_new, q_new),
        Psi @ dq,
        v_new - 2 / h * dq + v,
    ))


def check_consistency(constraints, t0, q0, v0, tol):
    """Raise a ValueError if ``(q0, v0)`` violate the constraints."""
    phi = constraints.phi(t0, q0)
    if phi.size and np.max(np.abs(phi)) > tol:
        raise ValueError(f"The initial positions violate the holonomic "
                         f"constraints, max |Phi(t0, q0)| = {np.max(np.abs(phi)):.3e}.")

    eps = EPS**(1 / 3) * max(1, np.max(np.abs(q0)))
    phi_dot = (constraints.phi(t0 + eps, q0 + eps * v0)
               - constraints.phi(t0 - eps, q0 - eps * v0)) / (2 * eps)
    if phi_dot.size and np.max(np.abs(phi_dot)) > tol:
        raise ValueError(f"The initial velocities violate the time derivative of "
                         f"the holonomic constraints, max |dPhi/dt| = "
                         f"{np.max(np.abs(phi_dot)):.3e}.")

    psi = constraints.psi(t0, q0) @ v0
    if psi.size and np.max(np.abs(psi)) > tol:
        raise ValueError(f"The initial velocities violate the non-holonomic "
                         f"constraints, max |Psi(t0, q0) v0| = {np.max(np.abs(psi)):.3e}.")


def consistent_initial_conditions(fun, t0, q0, v0, mass=None, constraints=None,
                                  la0=None, mu0=None, solver=None, ic_tol=1e-6):
    """Compute the initial acceleration and Lagrange multipliers.

    The initial positions and velocities have to satisfy the constraints
    already, this is checked first. Afterwards ``(a0, la0, mu0)`` are the
    solution of::

        M a0 - f(t0, q0, v0) - J^T la0 - Psi^T mu0 = 0
        J a0 + gamma_Phi = 0
        Psi a0 + gamma_Psi = 0

    where the second and third rows are the constraints on acceleration
    level. The terms ``gamma`` collect everything independent of ``a0`` and
    are computed with finite differences along ``(1, v0)``.

    Parameters
    ----------
    fun : callable
        Generalized forces ``f(t, q, v)``.
    t0 : float
        Initial time.
    q0, v0 : array_like, shape (n,)
        Consistent initial positions and velocities.
    mass : None, array_like, callable or MassMatrix, optional
        Mass matrix, see `mass_matrix`.
    constraints : Constraints, optional
        Constraints of the system.
    la0, mu0 : array_like, optional
        Initial guesses for the multipliers, zero by default.
    solver : NonlinearSolver, optional
        Default is a `NewtonSolver`.
    ic_tol : float, optional
        Tolerance of the consistency check.

    Returns
    -------
    a0 : ndarray, shape (n,)
    la0 : ndarray, shape (g,)
    mu0 : ndarray, shape (m,)

    Raises
    ------
    ValueError
        If ``(q0, v0)`` violate the constraints.
    ConvergenceError
        If the equations could not be solved.
    """
    q0 = np.asarray(q0, dtype=float)
    v0 = np.asarray(v0, dtype=float)
    n = q0.size
    mass = mass_matrix(mass)
    if constraints is None:
        constraints = Constraints()
    if constraints.n is None:
        constraints.validate(t0, q0)
    n_la, n_mu = constraints.n_la, constraints.n_mu
    if solver is None:
        solver = NewtonSolver()

    check_consistency(constraints, t0, q0, v0, ic_tol)

    M = mass(t0, q0, v0)
    f = np.asarray(fun(t0, q0, v0), dtype=float)
    J = constraints.phi_q(t0, q0)
    Psi = constraints.psi(t0, q0)

    eps = EPS**(1 / 4) * max(1, np.max(np.abs(q0)))
    gamma_phi = (constraints.phi(t0 + eps, q0 + eps * v0) - 2 * constraints.phi(t0, q0)
                 + constraints.phi(t0 - eps, q0 - eps * v0)) / eps**2
    eps = EPS**(1 / 3) * max(1, np.max(np.abs(q0)))
    gamma_psi = (constraints.psi(t0 + eps, q0 + eps * v0)
                 - constraints.psi(t0 - eps, q0 - eps * v0)) @ v0 / (2 * eps)

    def residual(x):
        a, la, mu = np.split(x, [n, n + n_la])
        return np.concatenate((
            M @ a - f - J.T @ la - Psi.T @ mu,
            J @ a + gamma_phi,
            Psi @ a + gamma_psi,
        ))

    x0 = np.concatenate((
        np.zeros(n),
        np.zeros(n_la) if la0 is None else np.asarray(la0, dtype=float),
        np.zeros(n_mu) if mu0 is None else np.asarray(mu0, dtype=float),
    ))
    res = solver.solve(residual, x0)
    if not res.success:
        raise ConvergenceError(0, t0, res.residual_norm,
                               "Consistent initial conditions could not be computed.")

    return tuple(np.split(res.x, [n, n + n_la]))


class Betsch(SecondOrderSolver):
    """Energy consistent integrator for constrained mechanical systems.

    Solves::

        M(t, q, v) q'' = f(t, q, v) + J(t, q)^T la + Psi(t, q)^T mu
        Phi(t, q) = 0
        Psi(t, q) q' = 0

    on a uniform grid. Every step is a single nonlinear solve for the new
    positions, velocities and multipliers, see `betsch_residual`. The
    initial multipliers are obtained from `consistent_initial_conditions`.

    Parameters
    ----------
    fun : callable
        Generalized forces ``f(t, q, v)``.
    t_grid : ndarray
        Uniform time grid.
    q0, v0 : array_like, shape (n,)
        Initial positions and velocities, they have to satisfy the
        constraints.
    options : DaeOptions
        Solver options.

    References
    ----------
    .. [1] P. Betsch, "The discrete null space method for the energy
           consistent integration of constrained mechanical systems",
           Computer Methods in Applied Mechanics and Engineering, 194,
           pp. 5159-5190, 2005.
    """
    def __init__(self, fun, t_grid, q0, v0, options):
        super().__init__(fun, t_grid, q0, v0, options)
        self.constraints = Constraints(
            getattr(options, "constraints_q", None),
            getattr(options, "jconstraints_q", None),
            getattr(options, "constraints_dq", None),
        ).validate(self.t, self.q)

        self.nsolve += 1
        self.a0, self.la, self.mu = consistent_initial_conditions(
            self.fun, self.t, self.q, self.v, self.mass, self.constraints,
            solver=self.solver, ic_tol=getattr(options, "ic_tol", 1e-6))

    def _advance(self, t, h, n_sub):
        h_sub = h / n_sub
        q, v, la, mu = self.q, self.v, self.la, self.mu
        for i in range(n_sub):
            q, v, la, mu = self._solve_step(t + i * h_sub, h_sub, q, v, la, mu)
        self.q, self.v, self.la, self.mu = q, v, la, mu

    def _solve_step(self, t, h, q, v, la, mu):
        n, n_la = self.n, self.constraints.n_la
        split = [n, 2 * n, 2 * n + n_la]
        M = self.mass(t, q, v)
        t_new = t + h

        def residual(z):
            q_new, v_new, la_new, mu_new = np.split(z, split)
            return betsch_residual(self.fun, self.constraints, t_new, h,
                                   q, v, M, q_new, v_new, la_new, mu_new)

        z = self._solve(residual, np.concatenate((q + h * v, v, la, mu)))
        q_new, _, la_new, mu_new = np.split(z, split)
        v_new = 2 / h * (q_new - q) - v
        return q_new, v_new, la_new, mu_new
