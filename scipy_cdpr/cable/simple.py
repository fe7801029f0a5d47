import numpy as np
from scipy.optimize import OptimizeResult
from .common import N_POINTS, check_endpoint


def cable_shape_simple(endpoint, n_points=N_POINTS):
    """Straight cable from the anchor at the origin to `endpoint`."""
    endpoint = check_endpoint(endpoint)
    s = np.linspace(0, 1, n_points)
    return OptimizeResult(
        length=np.linalg.norm(endpoint),
        shape=np.outer(endpoint, s),
        force=None,
        success=True,
        message="Straight cable.",
    )
