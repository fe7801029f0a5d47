import numpy as np
import matplotlib.pyplot as plt
from scipy_cdpr.cable import CableProperties, solve_cable_shape


"""Static shapes of a cable from its winch at the origin to an end effector
carrying a mass, computed with all available cable models.

References:
-----------
Irvine1981: H. M. Irvine, "Cable Structures", MIT Press, 1981.
"""
properties = CableProperties(
    youngs_modulus=100e9,
    unstrained_section=np.pi * 0.002**2,
    density=0.1,
)
mass = 2.0


if __name__ == "__main__":
    endpoint = np.array([3.0, 1.0])

    fig, ax = plt.subplots()
    for method, kwargs in [("simple", {}),
                           ("pulley", {"pulley_radius": 0.05}),
                           ("catenary", {}),
                           ("finite-segment", {"n_nodes": 20})]:
        res = solve_cable_shape(endpoint, mass, properties, method=method,
                                n_points=500, **kwargs)
        print(f"{method}: length {res.length:.6f} m, force {res.force}")
        ax.plot(*res.shape, label=method)

    ax.plot(*endpoint, "ok")
    ax.set_aspect("equal")
    ax.legend()
    ax.grid()

    plt.show()
