import numpy as np
from scipy.optimize import minimize, OptimizeResult
from .common import (GRAVITY, N_POINTS, InfeasibleCableError, cable_properties,
                     check_endpoint)


# keeps the horizontal force component positive
ANGLE_MARGIN = 1e-9


def catenary_position(s, length, angle, force, axial_stiffness, weight):
    """Position of the arc length coordinate `s` of an elastic catenary.

    The cable is anchored at the origin, its unstrained length is `length`
    and the force ``force * (cos(angle), sin(angle))`` acts at its end.
    `weight` is the weight per unit length, for zero weight the cable is a
    straight elastic rod.

    References
    ----------
    .. [1] H. M. Irvine, "Cable Structures", MIT Press, 1981, Sec. 2.3.
    """
    s = np.asarray(s, dtype=float)
    direction = np.array([np.cos(angle), np.sin(angle)])
    if weight == 0:
        return np.multiply.outer(direction, (1 + force / axial_stiffness) * s)

    fx, fz = force * direction
    if not fx > 0:
        raise InfeasibleCableError("The catenary requires a positive horizontal "
                                   "force component.")
    fz_s = fz + weight * (s - length)
    fz_0 = fz - weight * length
    x = (fx * s / axial_stiffness
         + fx / weight * (np.arcsinh(fz_s / fx) - np.arcsinh(fz_0 / fx)))
    z = (fz * s / axial_stiffness + weight / axial_stiffness * (s / 2 - length) * s
         + (np.sqrt(fx**2 + fz_s**2) - np.sqrt(fx**2 + fz_0**2)) / weight)
    return np.array([x, z])


def catenary_shape(length, angle, force, properties=None, n_points=N_POINTS,
                   gravity=GRAVITY):
    """Shape of an elastic catenary, see `catenary_position`.

    Returns
    -------
    shape : ndarray, shape (2, n_points)
    """
    properties = cable_properties(properties)
    s = np.linspace(0, length, n_points)
    return catenary_position(s, length, angle, force, properties.axial_stiffness,
                             properties.density * gravity)


def cable_shape_catenary(endpoint, mass, properties=None, n_points=N_POINTS,
                         gravity=GRAVITY, tol=1e-6, maxiter=200):
    """Static shape of an elastic cable sagging under its own weight.

    The magnitude of the force at the cable end is the weight of the
    attached `mass`. The angle of that force and the unstrained length are
    found with SLSQP, minimizing the distance to the straight cable subject
    to the end of the catenary being at `endpoint`.

    Parameters
    ----------
    endpoint : array_like, shape (2,)
        End of the cable in the cable frame (x horizontal, z up, anchor
        at the origin).
    mass : float
        Mass attached to the cable end.
    properties : CableProperties or mapping, optional
        Cable properties.
    n_points : int, optional
        Number of points of the returned shape.
    gravity : float, optional
        Gravitational acceleration.
    tol : float, optional
        Admissible distance between the catenary end and `endpoint`,
        relative to the distance of `endpoint` from the anchor.
    maxiter : int, optional
        Maximum number of SLSQP iterations.

    Returns
    -------
    OptimizeResult with the fields ``length`` (unstrained length),
    ``shape`` (2, n_points), ``force`` (force at the cable end),
    ``anchor_force``, ``angle``, ``nit``, ``success`` and ``message``.

    Raises
    ------
    InfeasibleCableError
        If no catenary through `endpoint` exists for the given force.
    """
    endpoint = check_endpoint(endpoint)
    properties = cable_properties(properties)
    if mass < 0:
        raise ValueError("`mass` must be non-negative.")

    force = mass * gravity
    weight = properties.density * gravity
    EA = properties.axial_stiffness
    if not properties.force_min <= force <= properties.force_max:
        raise InfeasibleCableError(f"The cable force {force:.6g} N is outside of "
                                   f"[{properties.force_min:.6g}, "
                                   f"{properties.force_max:.6g}] N.")

    # the problem is symmetric in x
    sign = -1.0 if endpoint[0] < 0 else 1.0
    target = endpoint * np.array([sign, 1.0])
    chord = np.linalg.norm(target)
    if chord == 0:
        raise InfeasibleCableError("The endpoint coincides with the anchor.")

    if weight > 0:
        if force == 0:
            raise InfeasibleCableError("A cable with positive density cannot "
                                       "reach the endpoint without tension.")
        if target[0] == 0:
            raise InfeasibleCableError("A vertical catenary is degenerated.")
        angle_bounds = (-np.pi / 2 + ANGLE_MARGIN, np.pi / 2 - ANGLE_MARGIN)
    else:
        angle_bounds = (-np.pi, np.pi)

    angle0 = np.arctan2(target[1], target[0])
    length0 = chord / (1 + force / EA)
    x0 = np.array([np.clip(angle0, *angle_bounds), length0])

    def objective(x):
        return (x[0] - angle0)**2 + (x[1] - length0)**2

    def objective_jac(x):
        return 2 * (x - [angle0, length0])

    def end_residual(x):
        angle, length = x
        with np.errstate(divide="raise", over="raise", invalid="raise"):
            try:
                end = catenary_position(length, length, angle, force, EA, weight)
            except FloatingPointError as exc:
                raise InfeasibleCableError(f"The catenary cannot be evaluated "
                                           f"at angle {angle:.6g} and length "
                                           f"{length:.6g}.") from exc
        return end - target

    res = minimize(objective, x0, jac=objective_jac, method="SLSQP",
                   bounds=[angle_bounds, (0, None)],
                   constraints=[{"type": "eq", "fun": end_residual}],
                   options={"ftol": 1e-12, "maxiter": maxiter})

    residual = np.max(np.abs(end_residual(res.x)))
    if not res.success or residual > tol * max(1, chord):
        raise InfeasibleCableError(f"No catenary reaches the endpoint: {res.message} "
                                   f"(distance {residual:.3e}).")

    angle, length = res.x
    shape = catenary_position(np.linspace(0, length, n_points), length, angle,
                              force, EA, weight)
    end_force = force * np.array([np.cos(angle), np.sin(angle)])
    anchor_force = end_force - [0, weight * length]
    mirror = np.array([sign, 1.0])

    return OptimizeResult(
        length=length,
        shape=shape * mirror[:, None],
        force=end_force * mirror,
        anchor_force=anchor_force * mirror,
        angle=np.arctan2(np.sin(angle), sign * np.cos(angle)),
        x=res.x,
        nit=res.nit,
        success=True,
        message=res.message,
    )
