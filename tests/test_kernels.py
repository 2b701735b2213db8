from __future__ import annotations

import numpy as np
import pytest

from liftingpanel.analysis.kernels import semi_infinite_vortex, vortex_ring, vortex_segment

FOUR_PI = 4.0 * np.pi


def test_segment_symmetric_point():
    targets = np.array([[0.0, 1.0, 0.0]])
    out = np.zeros((1, 3))
    vortex_segment(np.array([-1.0, 0.0, 0.0]), np.array([1.0, 0.0, 0.0]), 2.0, targets, out)
    np.testing.assert_allclose(out, [[0.0, 0.0, 2.0 * np.sqrt(2.0) / FOUR_PI]], rtol=1e-14)


def test_segment_ignores_targets_on_its_line():
    targets = np.array([[0.5, 0.0, 0.0], [3.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    out = np.zeros((3, 3))
    vortex_segment([-1.0, 0.0, 0.0], [1.0, 0.0, 0.0], 1.0, targets, out)
    assert np.all(out == 0.0)
    assert np.all(np.isfinite(out))


def test_square_ring_at_center():
    vertices = np.array([[-1.0, -1.0, 0.0], [1.0, -1.0, 0.0], [1.0, 1.0, 0.0], [-1.0, 1.0, 0.0]])
    out = np.zeros((1, 3))
    vortex_ring(vertices, 1.0, np.zeros((1, 3)), out)
    np.testing.assert_allclose(out, [[0.0, 0.0, np.sqrt(2.0) / np.pi]], rtol=1e-14)


def test_ring_far_field_decays():
    vertices = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    near = np.zeros((1, 3))
    far = np.zeros((1, 3))
    vortex_ring(vertices, 1.0, np.array([[0.3, 0.3, 1.0]]), near)
    vortex_ring(vertices, 1.0, np.array([[0.3, 0.3, 100.0]]), far)
    assert np.linalg.norm(far) < 1e-4 * np.linalg.norm(near)


def test_semi_infinite_next_to_start_is_half_an_infinite_line():
    out = np.zeros((1, 3))
    semi_infinite_vortex(np.zeros(3), np.array([1.0, 0.0, 0.0]), 1.0, np.array([[0.0, 1.0, 0.0]]), out)
    np.testing.assert_allclose(out, [[0.0, 0.0, 1.0 / FOUR_PI]], rtol=1e-14)


def test_semi_infinite_far_downstream_is_an_infinite_line():
    out = np.zeros((1, 3))
    semi_infinite_vortex(np.zeros(3), np.array([2.0, 0.0, 0.0]), 1.0, np.array([[1e6, 1.0, 0.0]]), out)
    np.testing.assert_allclose(out, [[0.0, 0.0, 1.0 / (2.0 * np.pi)]], rtol=1e-6)


def test_semi_infinite_matches_a_long_segment():
    p = np.array([0.2, -0.1, 0.3])
    d = np.array([1.0, 0.2, -0.1])
    targets = np.array([[0.5, 0.5, 0.5], [-1.0, 0.3, 0.0], [2.0, -1.0, 1.0]])

    semi = np.zeros((3, 3))
    semi_infinite_vortex(p, d, 1.5, targets, semi)

    segment = np.zeros((3, 3))
    vortex_segment(p, p + 1e7 * d / np.linalg.norm(d), 1.5, targets, segment)

    np.testing.assert_allclose(semi, segment, rtol=1e-6)


def test_semi_infinite_needs_a_direction():
    with pytest.raises(ValueError):
        semi_infinite_vortex(np.zeros(3), np.zeros(3), 1.0, np.ones((1, 3)), np.zeros((1, 3)))


def test_projection_matches_full_velocity():
    rng = np.random.default_rng(0)
    targets = rng.normal(size=(5, 3))
    normals = rng.normal(size=(5, 3))
    vertices = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]])

    velocity = np.zeros((5, 3))
    vortex_ring(vertices, 0.7, targets, velocity)
    projected = np.zeros(5)
    vortex_ring(vertices, 0.7, targets, projected, dot_with=normals)

    np.testing.assert_allclose(projected, np.sum(velocity * normals, axis=1), rtol=1e-12, atol=1e-15)


def test_kernels_add_into_buffer_views():
    targets = np.array([[0.0, 1.0, 0.0], [0.0, 2.0, 0.0]])
    normals = np.array([[0.0, 0.0, 1.0], [0.0, 0.0, 1.0]])
    G = np.ones((2, 3))

    semi_infinite_vortex(np.zeros(3), np.array([1.0, 0.0, 0.0]), 1.0, targets, G[:, 1], dot_with=normals)

    np.testing.assert_allclose(G[:, 1], [1.0 + 1.0 / FOUR_PI, 1.0 + 1.0 / (2.0 * FOUR_PI)], rtol=1e-14)
    assert np.all(G[:, [0, 2]] == 1.0)
