from .catenary import cable_shape_catenary
from .common import N_POINTS, GRAVITY
from .finite_segment import cable_shape_finite_segment
from .pulley import cable_shape_pulley
from .simple import cable_shape_simple


MODELS = ("catenary", "finite-segment", "pulley", "simple")


def solve_cable_shape(endpoint, mass, cable_properties=None, method="catenary",
                      n_points=N_POINTS, gravity=GRAVITY, n_nodes=50,
                      pulley_radius=None, **kwargs):
    """Compute the static shape of a cable ending at `endpoint`.

    Parameters
    ----------
    endpoint : array_like, shape (2,)
        Cable end in the cable frame, the anchor is at the origin.
    mass : float
        Mass attached to the cable end.
    cable_properties : CableProperties or mapping, optional
        Material properties, not used by "simple" and "pulley".
    method : {"catenary", "finite-segment", "pulley", "simple"}, optional
        Cable model. Default is "catenary".
    n_points : int, optional
        Number of points of the returned shape.
    gravity : float, optional
        Gravitational acceleration.
    n_nodes : int, optional
        Number of nodes of the "finite-segment" model.
    pulley_radius : float, optional
        Radius of the pulley, required by the "pulley" model.
    **kwargs
        Passed on to the model (e.g. `tol`, `maxiter`).

    Returns
    -------
    OptimizeResult with at least the fields ``length``, ``shape``
    (2, n_points) and ``force``. ``force`` is None for the purely
    geometric models.
    """
    if method == "catenary":
        return cable_shape_catenary(endpoint, mass, cable_properties,
                                    n_points=n_points, gravity=gravity, **kwargs)
    elif method == "finite-segment":
        return cable_shape_finite_segment(endpoint, mass, n_nodes, cable_properties,
                                          n_points=n_points, gravity=gravity,
                                          **kwargs)
    elif method == "pulley":
        if pulley_radius is None:
            raise ValueError("The pulley model requires `pulley_radius`.")
        return cable_shape_pulley(endpoint, pulley_radius, n_points=n_points)
    elif method == "simple":
        return cable_shape_simple(endpoint, n_points=n_points)
    raise ValueError(f"`method` must be one of {MODELS}.")
