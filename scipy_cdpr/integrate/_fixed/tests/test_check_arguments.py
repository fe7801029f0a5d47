import numpy as np
from numpy.testing import assert_, assert_allclose, assert_equal
import pytest
from scipy_cdpr.integrate import integrate, integrate_dae
from scipy_cdpr.integrate._fixed.base import check_time_grid


def test_check_arguments():
    fun = lambda t, y: -0.5 * y

    # complex initial state
    y0 = np.arange(3) * 1j
    t_span = (0, 1)
    with pytest.raises(ValueError) as excinfo:
        integrate(fun, t_span, y0)
    assert (
        "`y0` is complex, but the fixed step solvers do not support "
        "integration in a complex domain."
        in str(excinfo.value)
    )

    # `y0` must be 1-dimensional.
    y0 = 1
    with pytest.raises(ValueError) as excinfo:
        integrate(fun, t_span, y0)
    assert (
        "`y0` must be 1-dimensional."
        in str(excinfo.value)
    )

    # All components of the initial state `y0` must be finite.
    y0 = np.arange(1, 3) * np.inf
    with pytest.raises(ValueError) as excinfo:
        integrate(fun, t_span, y0)
    assert (
        "All components of the initial state `y0` must be finite."
        in str(excinfo.value)
    )

    # wrong shape of the right-hand side
    y0 = np.arange(2)
    with pytest.raises(ValueError) as excinfo:
        integrate(lambda t, y: np.ones(3), t_span, y0)
    assert (
        "`fun` return is expected to have shape (2,), but actually has (3,)."
        in str(excinfo.value)
    )

    # unknown method
    with pytest.raises(ValueError) as excinfo:
        integrate(fun, t_span, y0, method="RK45")
    assert "`method` must be one of" in str(excinfo.value)


def test_check_arguments_dae():
    fun = lambda t, q, v: -q

    # `q0` and `v0` must be of same shape.
    with pytest.raises(ValueError) as excinfo:
        integrate_dae(fun, (0, 1), np.arange(2), np.arange(3))
    assert (
        "`q0` and `v0` must be of same shape."
        in str(excinfo.value)
    )

    # All components of the initial state `v0` must be finite.
    with pytest.raises(ValueError) as excinfo:
        integrate_dae(fun, (0, 1), np.arange(2), [0, np.nan])
    assert (
        "All components of the initial state `v0` must be finite."
        in str(excinfo.value)
    )

    with pytest.raises(ValueError) as excinfo:
        integrate_dae(fun, (0, 1), np.arange(2), np.arange(2), method="BDF")
    assert "`method` must be one of" in str(excinfo.value)

    with pytest.raises(TypeError) as excinfo:
        integrate_dae(fun, (0, 1), np.arange(2), np.arange(2), maxorder=2)


def test_args():
    fun = lambda t, y, a, b: -a * y + b
    sol = integrate(fun, [0, 1], [1], max_step=0.01, args=(2.0, 0.0))
    assert_allclose(sol.y[0, -1], np.exp(-2), atol=1e-3)

    with pytest.raises(TypeError) as excinfo:
        integrate(fun, [0, 1], [1], args=2.0)
    assert "Supplied 'args' cannot be unpacked." in str(excinfo.value)


parameters_time_grid = [
    ([0, 1], None, np.linspace(0, 1, 11)),
    ([0, 1], 0.3, [0, 0.3, 0.6, 0.9]),
    ([0, 1], 2.0, [0, 1]),
    ([1, 2, 3, 4], 10.0, [1, 2, 3, 4]),
    (np.linspace(1e6, 1e6 + 1, 101), None, np.linspace(1e6, 1e6 + 1, 101)),
]
@pytest.mark.parametrize("t_span, max_step, t_expected", parameters_time_grid)
def test_time_grid(t_span, max_step, t_expected):
    t_grid, h = check_time_grid(t_span, max_step)
    assert_allclose(t_grid, t_expected, atol=1e-14)
    assert_allclose(h, t_grid[1] - t_grid[0])


parameters_time_grid_errors = [
    ([0], "at least 2 entries"),
    ([[0, 1]], "1-dimensional"),
    ([1, 0], "strictly increasing"),
    ([0, 0.5, 0.5], "strictly increasing"),
    ([0, np.inf], "finite"),
    ([0, 1, 3], "uniformly spaced"),
    ([1e6, 1e6 + 0.01, 1e6 + 0.03], "uniformly spaced"),
]
@pytest.mark.parametrize("t_span, message", parameters_time_grid_errors)
def test_time_grid_errors(t_span, message):
    with pytest.raises(ValueError, match=message):
        check_time_grid(t_span)


def test_time_grid_large_offset():
    t_span = np.linspace(1e6, 1e6 + 1, 101)
    sol = integrate(lambda t, y: -y, t_span, [1.0])

    assert_(sol.success)
    assert_equal(sol.t, t_span)
    assert_allclose(sol.y[0, -1], np.exp(-1), rtol=1e-3)
