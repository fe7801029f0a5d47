from itertools import product
import warnings
from dataclasses import FrozenInstanceError, replace
import numpy as np
from numpy.testing import assert_, assert_equal
import pytest
from scipy_cdpr.integrate import integrate_dae, OdeOptions, DaeOptions, NewtonSolver
from scipy_cdpr.integrate._fixed.options import prepare_options


def test_defaults():
    options = OdeOptions()
    assert_equal(options.max_order, 3)
    assert_equal(options.max_step, None)
    assert_equal(options.tol, 1e-8)
    assert_equal(options.max_iter, 25)
    assert_equal(options.max_bisections, 3)
    assert_equal(options.nonlinear_solver, "newton")

    options = DaeOptions()
    assert_equal(options.ic_tol, 1e-6)
    assert_(not options.constrained)
    assert_(DaeOptions(constraints_dq=lambda t, q: np.eye(1)).constrained)


def test_frozen():
    options = OdeOptions()
    with pytest.raises(FrozenInstanceError):
        options.max_order = 2
    assert_equal(replace(options, max_order=2).max_order, 2)
    assert_equal(options.max_order, 3)


@pytest.mark.parametrize("max_order", [0, 7, 2.5, True])
def test_invalid_order(max_order):
    with pytest.raises(ValueError, match="max_order"):
        OdeOptions(max_order=max_order)


parameters_invalid = [
    ("max_step", 0),
    ("max_step", np.inf),
    ("mass_state_dependence", "full"),
    ("output_fcn", "print"),
    ("tol", -1),
    ("max_iter", 0),
    ("max_iter", 2.5),
    ("max_iter", True),
    ("max_bisections", -1),
    ("max_bisections", 1.5),
    ("nonlinear_solver", "broyden"),
]
@pytest.mark.parametrize("cls, name, value",
                         [(cls, name, value) for cls, (name, value)
                          in product([OdeOptions, DaeOptions], parameters_invalid)])
def test_invalid_values(cls, name, value):
    with pytest.raises(ValueError, match=name):
        cls(**{name: value})


def test_invalid_dae_values():
    with pytest.raises(ValueError, match="constraints_q"):
        DaeOptions(constraints_q=1.0)
    with pytest.raises(ValueError, match="ic_tol"):
        DaeOptions(ic_tol=0)


def test_solver_instance():
    solver = NewtonSolver(tol=1e-12)
    assert_(OdeOptions(nonlinear_solver=solver).nonlinear_solver is solver)


def test_prepare_options():
    options = prepare_options(OdeOptions, None, {})
    assert_equal(options, OdeOptions())

    base = OdeOptions(max_step=0.1)
    options = prepare_options(OdeOptions, base, {"max_order": 2})
    assert_equal(options.max_step, 0.1)
    assert_equal(options.max_order, 2)

    with pytest.raises(TypeError):
        prepare_options(OdeOptions, base, {"unknown": 1})
    with pytest.raises(TypeError, match="DaeOptions"):
        prepare_options(DaeOptions, base, {})


def test_dae_options_without_order():
    assert_(not hasattr(DaeOptions(), "max_order"))
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        with pytest.raises(TypeError):
            DaeOptions(max_order=6)

    with pytest.raises(TypeError):
        integrate_dae(lambda t, q, v: -q, [0, 1], [1], [0], max_order=2)
