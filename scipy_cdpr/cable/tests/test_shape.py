import numpy as np
from numpy.testing import assert_, assert_allclose, assert_equal
import pytest
from scipy_cdpr.cable import solve_cable_shape, CableProperties


properties = dict(youngs_modulus=1e11, unstrained_section=1e-6, density=0.5)


parameters_models = [
    ("catenary", {}),
    ("finite-segment", {"n_nodes": 20}),
    ("pulley", {"pulley_radius": 0.1}),
    ("simple", {}),
]
@pytest.mark.parametrize("method, kwargs", parameters_models)
def test_models(method, kwargs):
    endpoint = [1.0, 0.5]
    res = solve_cable_shape(endpoint, 10, properties, method=method, n_points=50,
                            **kwargs)

    assert_(res.success)
    assert_equal(res.shape.shape, (2, 50))
    assert_allclose(res.shape[:, 0], [0, 0], atol=1e-12)
    assert_allclose(res.shape[:, -1], endpoint, atol=1e-5)
    assert_(res.length > 0)
    if method in ("pulley", "simple"):
        assert_equal(res.force, None)
    else:
        assert_allclose(np.linalg.norm(res.force), 10 * 9.81)


def test_gravity():
    res = solve_cable_shape([1, 0], 2, CableProperties(), gravity=1.0, n_points=5)
    assert_allclose(res.force, [2, 0], atol=1e-8)


def test_solver_options():
    res = solve_cable_shape([1, 0.5], 10, properties, n_points=5, tol=1e-8,
                            maxiter=500)
    assert_(res.nit <= 500)


def test_errors():
    with pytest.raises(ValueError, match="pulley_radius"):
        solve_cable_shape([1, 0.5], 10, method="pulley")
    with pytest.raises(ValueError, match="`method` must be one of"):
        solve_cable_shape([1, 0.5], 10, method="spline")


def test_massless_cable_is_straight():
    res = solve_cable_shape([1, 0], 0, {"density": 0}, n_points=10000)

    assert_allclose(res.length, 1.0, rtol=1e-8)
    assert_equal(res.shape.shape, (2, 10000))
    assert_allclose(res.shape[0], np.linspace(0, 1, 10000), atol=1e-8)
    assert_allclose(res.shape[1], 0, atol=1e-8)
