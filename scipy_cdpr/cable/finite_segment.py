import numpy as np
from scipy.optimize import minimize, OptimizeResult
from .common import (GRAVITY, N_POINTS, InfeasibleCableError, cable_properties,
                     check_endpoint, resample_polyline)


def segment_forces(length, angle, force, n_nodes, density, gravity=GRAVITY):
    """Forces in the ``n_nodes + 1`` segments of a lumped mass cable.

    The force ``force * (cos(angle), sin(angle))`` acts at the cable end,
    every node carries the weight of ``length / n_nodes`` of cable. The
    forces are swept from the end towards the anchor.

    Returns
    -------
    forces : ndarray, shape (2, n_nodes + 1)
        Segment forces, the first column belongs to the segment at the
        anchor.
    angles : ndarray, shape (n_nodes + 1,)
        Segment angles. Segments without tension take the end angle.
    """
    node_weight = density * length / n_nodes * gravity if n_nodes > 0 else 0.0
    fx = np.full(n_nodes + 1, force * np.cos(angle))
    fz = force * np.sin(angle) - node_weight * np.arange(n_nodes, -1, -1)
    angles = np.where(np.hypot(fx, fz) > 0, np.arctan2(fz, fx), angle)
    angles[-1] = angle
    return np.array([fx, fz]), angles


def cable_shape_finite_segment(endpoint, mass, n_nodes, properties=None,
                               n_points=N_POINTS, gravity=GRAVITY, tol=1e-6,
                               maxiter=200):
    """Static shape of an inextensible cable made of rigid segments.

    The cable consists of ``n_nodes + 1`` segments of equal length joined
    by `n_nodes` nodes carrying the cable weight. The weight of `mass` acts
    at the cable end. The unstrained length and the angle of the end force
    are found with SLSQP such that the last node is at `endpoint`.

    Returns
    -------
    OptimizeResult with the fields ``length``, ``shape`` (2, n_points),
    ``force`` (force at the cable end), ``nodes`` (2, n_nodes + 2),
    ``segment_angles``, ``segment_forces``, ``nit``, ``success`` and
    ``message``.

    Raises
    ------
    InfeasibleCableError
        If the endpoint cannot be reached.
    """
    endpoint = check_endpoint(endpoint)
    properties = cable_properties(properties)
    if mass < 0:
        raise ValueError("`mass` must be non-negative.")
    if n_nodes < 0:
        raise ValueError("`n_nodes` must be non-negative.")

    force = mass * gravity
    if not properties.force_min <= force <= properties.force_max:
        raise InfeasibleCableError(f"The cable force {force:.6g} N is outside of "
                                   f"[{properties.force_min:.6g}, "
                                   f"{properties.force_max:.6g}] N.")

    chord = np.linalg.norm(endpoint)
    if chord == 0:
        raise InfeasibleCableError("The endpoint coincides with the anchor.")
    length0 = chord
    angle0 = np.arctan2(endpoint[1], endpoint[0])

    def nodes(x):
        length, angle = x
        _, angles = segment_forces(length, angle, force, n_nodes,
                                   properties.density, gravity)
        steps = length / (n_nodes + 1) * np.array([np.cos(angles), np.sin(angles)])
        return np.hstack((np.zeros((2, 1)), np.cumsum(steps, axis=1)))

    def end_residual(x):
        return nodes(x)[:, -1] - endpoint

    res = minimize(lambda x: (x[0] - length0)**2, [length0, angle0],
                   jac=lambda x: np.array([2 * (x[0] - length0), 0.0]),
                   method="SLSQP", bounds=[(0, None), (-np.pi, np.pi)],
                   constraints=[{"type": "eq", "fun": end_residual}],
                   options={"ftol": 1e-12, "maxiter": maxiter})

    residual = np.max(np.abs(end_residual(res.x)))
    if not res.success or residual > tol * max(1, chord):
        raise InfeasibleCableError(f"No segment chain reaches the endpoint: "
                                   f"{res.message} (distance {residual:.3e}).")

    length, angle = res.x
    forces, angles = segment_forces(length, angle, force, n_nodes,
                                    properties.density, gravity)
    points = nodes(res.x)

    return OptimizeResult(
        length=length,
        shape=resample_polyline(points, n_points),
        force=forces[:, -1],
        angle=angle,
        nodes=points,
        segment_angles=angles,
        segment_forces=forces,
        x=res.x,
        nit=res.nit,
        success=True,
        message=res.message,
    )
