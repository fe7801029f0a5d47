import numpy as np
from scipy.optimize import OptimizeResult
from .common import N_POINTS, InfeasibleCableError, check_endpoint


def cable_shape_pulley(endpoint, pulley_radius, n_points=N_POINTS):
    """Cable running over a pulley to `endpoint`.

    The cable leaves the winch horizontally at the origin, which is the
    contact point on a pulley of radius `pulley_radius` with center
    ``(r, 0)``. It wraps the pulley up to the point where it can run
    tangentially to `endpoint`.

    Returns
    -------
    OptimizeResult with fields ``length``, ``shape`` (2, n_points),
    ``wrap_angle`` and ``tangent_length``.
    """
    endpoint = check_endpoint(endpoint)
    r = float(pulley_radius)
    if not r > 0:
        raise ValueError("`pulley_radius` must be positive.")

    center = np.array([r, 0.0])
    center_to_end = endpoint - center
    distance = np.linalg.norm(center_to_end)
    if distance <= r:
        raise InfeasibleCableError(f"The endpoint lies within the pulley "
                                   f"(distance {distance:.6g} <= radius {r:.6g}).")

    tangent_length = np.sqrt(distance**2 - r**2)
    beta = (np.arctan2(center_to_end[1], center_to_end[0])
            + np.arctan2(tangent_length, r))
    # contact point at angle pi seen from the center
    wrap_angle = np.pi - beta
    if wrap_angle < -1e-12:
        wrap_angle += 2 * np.pi
    wrap_angle = max(wrap_angle, 0.0)

    length = tangent_length + r * wrap_angle
    n_arc = int(round(n_points * r * wrap_angle / length))
    n_arc = min(max(n_arc, 2), n_points - 2)
    phi = np.linspace(0, wrap_angle, n_arc)
    arc = np.vstack((r * (1 - np.cos(phi)), r * np.sin(phi)))
    s = np.linspace(0, 1, n_points - n_arc + 1)[1:]
    line = arc[:, -1:] + np.outer(endpoint - arc[:, -1], s)

    return OptimizeResult(
        length=length,
        shape=np.hstack((arc, line)),
        force=None,
        wrap_angle=wrap_angle,
        tangent_length=tangent_length,
        success=True,
        message="Cable wrapped around the pulley.",
    )
