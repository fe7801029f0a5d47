import numpy as np
import matplotlib.pyplot as plt
from scipy_cdpr.integrate import integrate, integrate_dae


"""Damped harmonic oscillator, solved as a first order system with BDF of
different orders and as a second order system with the leapfrog scheme."""
omega = 2 * np.pi
zeta = 0.05

def rhs(t, y):
    x, u = y
    return np.array([u, -omega**2 * x - 2 * zeta * omega * u])

def f(t, q, v):
    return -omega**2 * q - 2 * zeta * omega * v

def sol_true(t):
    omega_d = omega * np.sqrt(1 - zeta**2)
    return np.exp(-zeta * omega * t) * (
        np.cos(omega_d * t) + zeta * omega / omega_d * np.sin(omega_d * t))


if __name__ == "__main__":
    t_span = (0, 5)
    h = 1e-2

    fig, ax = plt.subplots(2, 1)

    for max_order in [1, 2, 3, 4]:
        sol = integrate(rhs, t_span, [1, 0], max_order=max_order, max_step=h)
        error = np.max(np.abs(sol.y[0] - sol_true(sol.t)))
        print(f"BDF{max_order}: max error {error:.3e}, nfev {sol.nfev}")
        ax[0].plot(sol.t, sol.y[0], label=f"BDF{max_order}")
        ax[1].semilogy(sol.t, np.abs(sol.y[0] - sol_true(sol.t)) + 1e-16,
                       label=f"BDF{max_order}")

    sol = integrate_dae(f, t_span, [1], [0], method="Leapfrog", max_step=h)
    error = np.max(np.abs(sol.q[0] - sol_true(sol.t)))
    print(f"Leapfrog: max error {error:.3e}, nfev {sol.nfev}")
    ax[0].plot(sol.t, sol.q[0], "--k", label="Leapfrog")
    ax[1].semilogy(sol.t, np.abs(sol.q[0] - sol_true(sol.t)) + 1e-16, "--k",
                   label="Leapfrog")

    ax[0].legend()
    ax[0].grid()
    ax[1].legend()
    ax[1].grid()

    plt.show()
