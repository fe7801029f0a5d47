from itertools import product
import numpy as np
from numpy.testing import assert_, assert_allclose, assert_equal
import pytest
from scipy_cdpr.cable import (CableProperties, InfeasibleCableError, GRAVITY,
                              cable_shape_catenary, cable_shape_finite_segment,
                              catenary_shape, segment_forces)


properties_steel = CableProperties(youngs_modulus=1e11, unstrained_section=1e-6,
                                   density=0.5)


def test_massless_straight_cable():
    res = cable_shape_catenary([0.6, 0.8], 0, n_points=101)

    assert_(res.success)
    assert_allclose(res.length, 1, rtol=1e-8)
    assert_allclose(res.force, [0, 0])
    assert_allclose(res.angle, np.arctan2(0.8, 0.6), rtol=1e-8)
    assert_allclose(res.shape, np.outer([0.6, 0.8], np.linspace(0, 1, 101)),
                    atol=1e-8)


parameters_elastic = product(
    [[1, 0], [0.6, 0.8], [2, -1], [0, 1]], # endpoint
    [1.0, 10.0], # mass
)
@pytest.mark.parametrize("endpoint, mass", parameters_elastic)
def test_weightless_elastic_cable(endpoint, mass):
    properties = CableProperties(youngs_modulus=1e7, unstrained_section=1e-4)
    res = cable_shape_catenary(endpoint, mass, properties, n_points=11)

    chord = np.linalg.norm(endpoint)
    force = mass * GRAVITY
    assert_allclose(res.length, chord / (1 + force / properties.axial_stiffness),
                    rtol=1e-8)
    assert_allclose(np.linalg.norm(res.force), force)
    # the force pulls along the straight cable
    assert_allclose(res.force, force * np.asarray(endpoint) / chord, atol=1e-6)
    assert_allclose(res.shape[:, -1], endpoint, atol=1e-6)


def test_sagging_cable():
    endpoint = np.array([1, 0.5])
    mass = 10
    res = cable_shape_catenary(endpoint, mass, properties_steel, n_points=201)

    assert_(res.success)
    assert_equal(res.shape.shape, (2, 201))
    assert_allclose(res.shape[:, 0], [0, 0], atol=1e-14)
    assert_allclose(res.shape[:, -1], endpoint, atol=1e-5)
    assert_allclose(np.linalg.norm(res.force), mass * GRAVITY)

    # the cable hangs below its chord and is longer than the elastic rod
    x, z = res.shape
    assert_(np.all(z <= 0.5 * x + 1e-5))
    assert_(np.max(0.5 * x - z) > 1e-4)
    chord = np.linalg.norm(endpoint)
    EA = properties_steel.axial_stiffness
    assert_(res.length > chord / (1 + mass * GRAVITY / EA))

    # the anchor carries the cable weight
    weight = properties_steel.density * GRAVITY * res.length
    assert_allclose(res.anchor_force, res.force - [0, weight])

    shape = catenary_shape(res.x[1], res.x[0], mass * GRAVITY, properties_steel,
                           n_points=201)
    assert_allclose(shape, res.shape)


def test_mirror_symmetry():
    res = cable_shape_catenary([1, 0.5], 10, properties_steel, n_points=51)
    res_mirror = cable_shape_catenary([-1, 0.5], 10, properties_steel, n_points=51)

    assert_allclose(res_mirror.length, res.length)
    assert_allclose(res_mirror.shape, res.shape * [[-1], [1]], atol=1e-12)
    assert_allclose(res_mirror.force, res.force * [-1, 1])
    assert_allclose(res_mirror.angle, np.pi - res.angle)


def test_properties_mapping():
    res = cable_shape_catenary([1, 0.5], 10, dict(youngs_modulus=1e11, density=0.5),
                               n_points=51)
    res_expected = cable_shape_catenary([1, 0.5], 10, properties_steel, n_points=51)
    assert_allclose(res.length, res_expected.length)


def test_finite_segments_approach_catenary():
    properties = CableProperties(youngs_modulus=1e13, unstrained_section=1e-6,
                                 density=0.5)
    endpoint = [1, 0.5]
    res = cable_shape_catenary(endpoint, 10, properties, n_points=101)
    res_segments = cable_shape_finite_segment(endpoint, 10, 50, properties,
                                              n_points=101)

    assert_allclose(res_segments.angle, res.angle, atol=5e-3)
    assert_allclose(res_segments.length, res.length, rtol=1e-3)
    assert_allclose(res_segments.shape, res.shape, atol=5e-3)


def test_finite_segment_straight():
    res = cable_shape_finite_segment([3, 4], 2, 10, n_points=21)

    assert_(res.success)
    assert_allclose(res.length, 5, rtol=1e-8)
    assert_equal(res.nodes.shape, (2, 12))
    assert_equal(res.segment_forces.shape, (2, 11))
    assert_allclose(res.segment_angles, np.arctan2(4, 3), rtol=1e-8)
    assert_allclose(res.shape[:, -1], [3, 4], atol=1e-6)
    assert_allclose(res.force, 2 * GRAVITY * np.array([0.6, 0.8]), rtol=1e-6)


def test_segment_forces():
    forces, angles = segment_forces(2.0, np.pi / 4, 10.0, 4, 0.5, gravity=10.0)
    node_weight = 0.5 * 2.0 / 4 * 10.0

    assert_equal(forces.shape, (2, 5))
    assert_allclose(forces[0], 10 / np.sqrt(2))
    assert_allclose(forces[1, -1], 10 / np.sqrt(2))
    assert_allclose(np.diff(forces[1]), node_weight)
    assert_allclose(angles, np.arctan2(forces[1], forces[0]))


parameters_infeasible = [
    ([0, 0], 10, properties_steel, "coincides"),
    ([1, 0.5], 0, properties_steel, "without tension"),
    ([0, 1], 10, properties_steel, "vertical"),
    ([1, 0.5], 10, CableProperties(force_max=50), "outside"),
    ([1, 0.5], 1, CableProperties(force_min=50), "outside"),
]
@pytest.mark.parametrize("endpoint, mass, properties, message", parameters_infeasible)
def test_infeasible(endpoint, mass, properties, message):
    with pytest.raises(InfeasibleCableError, match=message):
        cable_shape_catenary(endpoint, mass, properties)


def test_infeasible_is_value_error():
    with pytest.raises(ValueError):
        cable_shape_finite_segment([0, 0], 1, 10)


def test_invalid_arguments():
    with pytest.raises(ValueError, match="mass"):
        cable_shape_catenary([1, 0], -1)
    with pytest.raises(ValueError, match="n_nodes"):
        cable_shape_finite_segment([1, 0], 1, -1)
    with pytest.raises(ValueError, match="youngs_modulus"):
        CableProperties(youngs_modulus=0)
    with pytest.raises(ValueError, match="force limits"):
        CableProperties(force_min=2, force_max=1)
    with pytest.raises(TypeError):
        cable_shape_catenary([1, 0], 1, dict(stiffness=1))
