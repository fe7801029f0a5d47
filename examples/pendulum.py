import time
import numpy as np
import matplotlib.pyplot as plt
from scipy_cdpr.integrate import integrate_dae, ProgressBar


"""Cartesian pendulum, see Hairer1996 Section VII Example 2, integrated
with the constrained scheme of Betsch2005.

References:
-----------
Betsch2005: https://doi.org/10.1016/j.cma.2004.12.011
"""
m = 1
l = 1
g = 10

def f(t, q, v):
    return np.array([0, -m * g])

def Phi(t, q):
    x, y = q
    return np.array([x * x + y * y - l * l])

def J(t, q):
    x, y = q
    return np.array([[2 * x, 2 * y]])


if __name__ == "__main__":
    # time span
    t0 = 0
    t1 = 10
    t_span = (t0, t1)
    h = 1e-2

    # initial conditions
    q0 = l * np.array([np.sin(np.pi / 4), -np.cos(np.pi / 4)])
    v0 = np.zeros(2)

    start = time.time()
    sol = integrate_dae(f, t_span, q0, v0, method="Betsch", max_step=h,
                        mass=m * np.eye(2), constraints_q=Phi, jconstraints_q=J,
                        output_fcn=ProgressBar(desc="Betsch"))
    end = time.time()
    print(f"elapsed time: {end - start}")
    t = sol.t
    q = sol.q
    v = sol.v
    la = sol.la
    print(f"success: {sol.success}")
    print(f"status: {sol.status}")
    print(f"message: {sol.message}")
    print(f"nfev: {sol.nfev}")
    print(f"nsolve: {sol.nsolve}")
    print(f"nbisect: {sol.nbisect}")

    # constraint drift and energy
    g_pos = q[0]**2 + q[1]**2 - l**2
    E = 0.5 * m * (v[0]**2 + v[1]**2) + m * g * q[1]
    print(f"max(|Phi|): {np.max(np.abs(g_pos))}")
    print(f"max(|E - E0|): {np.max(np.abs(E - E[0]))}")

    # visualization
    fig, ax = plt.subplots(4, 1)

    ax[0].plot(t, q[0], "-k", label="x")
    ax[0].plot(t, q[1], "--k", label="y")
    ax[0].legend()
    ax[0].grid()

    ax[1].plot(t, v[0], "-k", label="u")
    ax[1].plot(t, v[1], "--k", label="v")
    ax[1].legend()
    ax[1].grid()

    ax[2].plot(t, la[0], "-k", label="la")
    ax[2].legend()
    ax[2].grid()

    ax[3].plot(t, E - E[0], "-k", label="E - E0")
    ax[3].legend()
    ax[3].grid()

    plt.show()
