import numpy as np
import matplotlib.pyplot as plt
from scipy_cdpr.integrate import integrate_dae


"""Particle pushed along a horizontal rail by a constant force. The rail
is modeled as a non-holonomic constraint on the vertical velocity, its
multiplier carries the weight of the particle."""
m = 2
g = 9.81
F = 1

def f(t, q, v):
    return np.array([F, -m * g])

def Psi(t, q):
    return np.array([[0, 1]])


if __name__ == "__main__":
    t_span = (0, 5)
    q0 = np.zeros(2)
    v0 = np.array([1, 0], dtype=float)

    sol = integrate_dae(f, t_span, q0, v0, max_step=0.05, mass=m * np.eye(2),
                        constraints_dq=Psi)
    t = sol.t
    x_true = v0[0] * t + 0.5 * F / m * t**2
    print(f"message: {sol.message}")
    print(f"max(|x - x_true|): {np.max(np.abs(sol.q[0] - x_true))}")
    print(f"mu: {sol.mu[0, -1]} (m * g = {m * g})")

    fig, ax = plt.subplots(2, 1)

    ax[0].plot(t, sol.q[0], "-ok", label="x")
    ax[0].plot(t, x_true, "--r", label="x_true")
    ax[0].legend()
    ax[0].grid()

    ax[1].plot(t, sol.mu[0], "-ok", label="mu")
    ax[1].legend()
    ax[1].grid()

    plt.show()
