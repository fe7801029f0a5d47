import numpy as np
from scipy.optimize._numdiff import approx_derivative


STATE_DEPENDENCE = ("none", "weak", "strong")


class MassMatrix:
    """Base class of the mass matrix variants.

    Every variant is evaluated as ``M(t, y, v=None)`` and returns a dense
    ``(n, n)`` array, whatever arguments the underlying function takes.
    """
    def __call__(self, t, y, v=None):
        raise NotImplementedError

    def validate(self, t0, y0, v0=None):
        """Evaluate the mass matrix once and check its shape."""
        n = len(y0)
        M = np.asarray(self(t0, y0, v0), dtype=float)
        if M.shape != (n, n):
            raise ValueError(f"The mass matrix is expected to have shape "
                             f"{(n, n)}, but actually has {M.shape}.")
        if not np.all(np.isfinite(M)):
            raise ValueError("All entries of the mass matrix must be finite.")
        return M


class IdentityMass(MassMatrix):
    def __call__(self, t, y, v=None):
        return np.eye(len(y))


class ConstantMass(MassMatrix):
    def __init__(self, M):
        M = np.asarray(M, dtype=float)
        if M.ndim != 2 or M.shape[0] != M.shape[1]:
            raise ValueError("A constant mass matrix must be square.")
        self.M = M

    def __call__(self, t, y, v=None):
        return self.M


class TimeVaryingMass(MassMatrix):
    """Mass matrix ``M(t)``."""
    def __init__(self, fun):
        self.fun = fun

    def __call__(self, t, y, v=None):
        return np.asarray(self.fun(t), dtype=float)


class StateWeakMass(MassMatrix):
    """Mass matrix ``M(t, y)`` with a weak state dependence."""
    def __init__(self, fun):
        self.fun = fun

    def __call__(self, t, y, v=None):
        return np.asarray(self.fun(t, y), dtype=float)


class StateStrongMass(MassMatrix):
    """Mass matrix ``M(t, y, v)`` with a strong state dependence.

    For first order systems ``v`` is the current estimate of ``y'``.
    """
    def __init__(self, fun):
        self.fun = fun

    def __call__(self, t, y, v=None):
        if v is None:
            v = np.zeros_like(y)
        return np.asarray(self.fun(t, y, v), dtype=float)


def mass_matrix(mass, state_dependence="weak"):
    """Turn the user's mass argument into a `MassMatrix` variant.

    Parameters
    ----------
    mass : None, array_like, callable or MassMatrix
        ``None`` means the identity. A callable is interpreted according to
        `state_dependence`.
    state_dependence : {"none", "weak", "strong"}, optional
        Signature of a callable mass: ``M(t)``, ``M(t, y)`` or
        ``M(t, y, v)``. Default is "weak".
    """
    if state_dependence not in STATE_DEPENDENCE:
        raise ValueError(f"`mass_state_dependence` must be one of {STATE_DEPENDENCE}.")
    if mass is None:
        return IdentityMass()
    if isinstance(mass, MassMatrix):
        return mass
    if callable(mass):
        if state_dependence == "none":
            return TimeVaryingMass(mass)
        elif state_dependence == "weak":
            return StateWeakMass(mass)
        return StateStrongMass(mass)
    return ConstantMass(mass)


class Constraints:
    """Holonomic and non-holonomic constraints of a mechanical system.

    Parameters
    ----------
    fun_q : callable, optional
        Holonomic constraints ``Phi(t, q)`` of shape (g,).
    jac_q : callable, optional
        Jacobian ``dPhi/dq(t, q)`` of shape (g, n). Approximated by forward
        differences if `fun_q` is given without it.
    fun_dq : callable, optional
        Non-holonomic constraint matrix ``Psi(t, q)`` of shape (m, n), the
        velocities have to satisfy ``Psi(t, q) v = 0``.
    """
    def __init__(self, fun_q=None, jac_q=None, fun_dq=None):
        if jac_q is not None and fun_q is None:
            raise ValueError("A constraint Jacobian `jconstraints_q` requires "
                             "the constraints `constraints_q`.")
        self.fun_q = fun_q
        self.jac_q = jac_q
        self.fun_dq = fun_dq
        self.n = None
        self.n_la = 0
        self.n_mu = 0

    def validate(self, t0, q0):
        """Evaluate all constraints at the initial state and fix their sizes."""
        n = len(q0)
        self.n = n
        if self.fun_q is not None:
            g = np.atleast_1d(np.asarray(self.fun_q(t0, q0), dtype=float))
            if g.ndim != 1:
                raise ValueError("`constraints_q` must return a 1-dimensional array.")
            self.n_la = g.size
            J = self.phi_q(t0, q0)
            if J.shape != (self.n_la, n):
                raise ValueError(f"`jconstraints_q` is expected to have shape "
                                 f"{(self.n_la, n)}, but actually has {J.shape}.")
        if self.fun_dq is not None:
            Psi = np.atleast_2d(np.asarray(self.fun_dq(t0, q0), dtype=float))
            if Psi.ndim != 2 or Psi.shape[1] != n:
                raise ValueError(f"`constraints_dq` is expected to have shape "
                                 f"(m, {n}), but actually has {Psi.shape}.")
            self.n_mu = Psi.shape[0]
        return self

    def phi(self, t, q):
        if self.fun_q is None:
            return np.zeros(0)
        return np.atleast_1d(np.asarray(self.fun_q(t, q), dtype=float))

    def phi_q(self, t, q):
        if self.fun_q is None:
            return np.zeros((0, len(q)))
        if self.jac_q is None:
            return np.atleast_2d(approx_derivative(lambda x: self.phi(t, x), q,
                                                   method="2-point"))
        return np.atleast_2d(np.asarray(self.jac_q(t, q), dtype=float))

    def psi(self, t, q):
        if self.fun_dq is None:
            return np.zeros((0, len(q)))
        return np.atleast_2d(np.asarray(self.fun_dq(t, q), dtype=float))

    def check_jacobian(self, t, q):
        """Return the max deviation of `phi_q` from a central difference
        approximation of the Jacobian of `phi`."""
        if self.fun_q is None:
            return 0.0
        q = np.asarray(q, dtype=float)
        J_fd = np.atleast_2d(approx_derivative(lambda x: self.phi(t, x), q,
                                               method="3-point"))
        J = self.phi_q(t, q)
        return np.max(np.abs(J - J_fd)) if J.size else 0.0


def discrete_gradient(f, df, a, b):
    """Discrete gradient of a scalar function in the sense of Gonzalez.

    Returns ``df(z) + (f(b) - f(a) - df(z) . v) v / |v|^2`` with
    ``z = (a + b) / 2`` and ``v = b - a``. It satisfies
    ``discrete_gradient(f, df, a, b) . (b - a) = f(b) - f(a)`` and reduces
    to ``df(a)`` for ``a == b``.

    References
    ----------
    .. [1] O. Gonzalez, "Time integration and discrete Hamiltonian
           systems", Journal of Nonlinear Science, 6, pp. 449-467, 1996.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    z = 0.5 * (a + b)
    v = b - a
    dfz = np.asarray(df(z), dtype=float)
    vv = v @ v
    if vv == 0:
        return dfz
    return dfz + (f(b) - f(a) - dfz @ v) * v / vv
