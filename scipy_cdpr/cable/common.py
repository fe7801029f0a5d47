from dataclasses import dataclass
import numpy as np


GRAVITY = 9.81
N_POINTS = 10000


class InfeasibleCableError(ValueError):
    """No static cable shape exists for the requested configuration."""


@dataclass(frozen=True)
class CableProperties:
    """Material properties of a cable.

    Attributes
    ----------
    youngs_modulus : float
        Young's modulus E in N/m^2.
    unstrained_section : float
        Cross section A of the unstrained cable in m^2.
    density : float
        Linear density of the cable in kg/m.
    force_min, force_max : float
        Admissible range of the cable force magnitude in N.
    """
    youngs_modulus: float = 1e9
    unstrained_section: float = 1e-6
    density: float = 0.0
    force_min: float = 0.0
    force_max: float = np.inf

    def __post_init__(self):
        if not self.youngs_modulus > 0:
            raise ValueError("`youngs_modulus` must be positive.")
        if not self.unstrained_section > 0:
            raise ValueError("`unstrained_section` must be positive.")
        if not self.density >= 0:
            raise ValueError("`density` must be non-negative.")
        if not 0 <= self.force_min <= self.force_max:
            raise ValueError("The force limits must satisfy 0 <= force_min <= force_max.")

    @property
    def axial_stiffness(self):
        """EA"""
        return self.youngs_modulus * self.unstrained_section


def cable_properties(properties):
    """Return `properties` as `CableProperties`, accepting a mapping."""
    if properties is None:
        return CableProperties()
    if isinstance(properties, CableProperties):
        return properties
    return CableProperties(**properties)


def check_endpoint(endpoint):
    endpoint = np.asarray(endpoint, dtype=float)
    if endpoint.shape != (2,):
        raise ValueError("`endpoint` must be a 2-dimensional vector.")
    if not np.isfinite(endpoint).all():
        raise ValueError("All components of `endpoint` must be finite.")
    return endpoint


def resample_polyline(points, n_points):
    """Resample a polyline of shape (2, k) at `n_points` equally spaced
    arc length positions."""
    s = np.concatenate(([0], np.cumsum(np.linalg.norm(np.diff(points, axis=1), axis=0))))
    if s[-1] == 0:
        return np.repeat(points[:, :1], n_points, axis=1)
    s_new = np.linspace(0, s[-1], n_points)
    return np.vstack((np.interp(s_new, s, points[0]), np.interp(s_new, s, points[1])))
