import numpy as np
from numpy.testing import assert_, assert_allclose, assert_equal
import pytest
from scipy_cdpr.integrate import integrate, integrate_dae, trajectory_table, ProgressBar
from scipy_cdpr.integrate._fixed.base import TrajectoryBuffer


def test_trajectory_buffer():
    buffer = TrajectoryBuffer(2)
    chunk = len(buffer._data)
    assert_equal(chunk, 100)

    for i in range(chunk + 1):
        buffer.append([i, -i])
    assert_equal(len(buffer._data), 2 * chunk)

    buffer[-1] = [0, 0]
    data = buffer.finalize()
    assert_equal(data.shape, (2, chunk + 1))
    assert_equal(data[:, -2], [chunk - 1, 1 - chunk])
    assert_equal(data[:, -1], [0, 0])


def test_trajectory_buffer_chunk():
    assert_equal(len(TrajectoryBuffer(100)._data), 21)
    assert_equal(len(TrajectoryBuffer(1, refine=4)._data), 200)
    assert_equal(TrajectoryBuffer(0).finalize().shape, (0, 0))


def test_trajectory_table():
    sol = integrate(lambda t, y: -y, [0, 1], [1, 2], max_step=0.1)
    table = trajectory_table(sol)
    assert_equal(table.shape, (11, 3))
    assert_equal(table[:, 0], sol.t)
    assert_equal(table[:, 1:], sol.y.T)

    sol = integrate_dae(lambda t, q, v: -q, [0, 1], [1], [0], max_step=0.1)
    table = trajectory_table(sol)
    assert_equal(table.shape, (11, 3))
    assert_equal(table[:, 1], sol.q[0])
    assert_equal(table[:, 2], sol.v[0])


def test_progress_bar():
    bar = ProgressBar(disable=True)
    sol = integrate(lambda t, y: -y, [0, 1], [1], max_step=0.1, output_fcn=bar)
    assert_equal(sol.status, 0)
    assert_(bar._bar is None)

    with pytest.raises(ValueError, match="flag"):
        bar(0, None, "finish")


def test_progress_bar_stop():
    bar = ProgressBar(disable=True)
    steps = []

    def output_fcn(t, y, flag):
        if flag == "step":
            steps.append(t)
            bar.stop = len(steps) == 2
        return bar(t, y, flag)

    sol = integrate_dae(lambda t, q, v: -q, [0, 1], [1], [0], max_step=0.1,
                        output_fcn=output_fcn)
    assert_equal(sol.status, 1)
    assert_equal(sol.t.size, 3)
    assert_allclose(sol.t, [0, 0.1, 0.2])
