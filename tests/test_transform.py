"""Tests for the Transform class."""

import numpy as np
import pytest

from mjcfview.core.transform import Transform, euler_matrix

QUARTER_Z = np.array([
    [0.0, 1.0, 0.0],
    [-1.0, 0.0, 0.0],
    [0.0, 0.0, 1.0],
])


def test_identity_leaves_vertices_unchanged():
    vertices = np.array([[1.5, -2.0, 3.25], [0.0, 0.0, 0.0], [-7.0, 0.1, 2.0]])
    transform = Transform()
    assert transform.is_identity
    np.testing.assert_array_equal(transform.apply(vertices), vertices)


def test_euler_matrix_entries():
    """A quarter turn about Z uses the document's axis convention."""
    np.testing.assert_allclose(euler_matrix((0.0, 0.0, 90.0)), QUARTER_Z, atol=1e-12)


@pytest.mark.parametrize("angles", [
    (0.0, 0.0, 0.0),
    (30.0, 45.0, 60.0),
    (-90.0, 10.0, 200.0),
    (180.0, -45.0, 15.0),
])
def test_euler_matrix_is_rotation(angles):
    matrix = euler_matrix(angles)
    np.testing.assert_allclose(matrix @ matrix.T, np.eye(3), atol=1e-12)
    np.testing.assert_allclose(np.linalg.det(matrix), 1.0)


def test_translation():
    transform = Transform(translation=np.array([1.0, 2.0, 3.0]))
    np.testing.assert_allclose(transform.apply(np.zeros((1, 3))), [[1.0, 2.0, 3.0]])


def test_scale_then_rotate_then_extra():
    """Scale applies first, then the own rotation, then extra rotations."""
    transform = Transform(
        translation=np.array([0.0, 0.0, 1.0]),
        scale=np.array([2.0, 1.0, 1.0]),
    )
    transform.add_rotation((0.0, 0.0, 90.0))

    result = transform.apply(np.array([[1.0, 0.0, 0.0]]))
    np.testing.assert_allclose(result, [[0.0, -2.0, 1.0]], atol=1e-12)


def test_extra_rotations_compose_in_order():
    transform = Transform()
    transform.add_rotation((0.0, 0.0, 90.0))
    transform.add_rotation((0.0, 0.0, 90.0))
    np.testing.assert_allclose(
        transform.linear_matrix(), np.diag([-1.0, -1.0, 1.0]), atol=1e-12
    )

    other = Transform()
    other.add_rotation((90.0, 0.0, 0.0))
    other.add_rotation((0.0, 0.0, 90.0))
    expected = euler_matrix((0.0, 0.0, 90.0)) @ euler_matrix((90.0, 0.0, 0.0))
    np.testing.assert_allclose(other.linear_matrix(), expected, atol=1e-12)


def test_is_identity():
    assert not Transform(translation=np.array([0.0, 0.0, 0.1])).is_identity
    assert not Transform(scale=np.array([1.0, 2.0, 1.0])).is_identity

    transform = Transform()
    transform.add_rotation((0.0, 0.0, 0.0))
    assert not transform.is_identity


def test_to_matrix():
    transform = Transform(translation=np.array([1.0, 2.0, 3.0]), rotation=np.array([0.0, 0.0, 90.0]))
    matrix = transform.to_matrix()
    np.testing.assert_allclose(matrix[:3, :3], QUARTER_Z, atol=1e-12)
    np.testing.assert_array_equal(matrix[:3, 3], [1.0, 2.0, 3.0])
    np.testing.assert_array_equal(matrix[3], [0.0, 0.0, 0.0, 1.0])


def test_copy_is_independent():
    transform = Transform(translation=np.array([1.0, 0.0, 0.0]))
    transform.add_rotation((0.0, 90.0, 0.0))

    copy = transform.copy()
    copy.translation[0] = 5.0
    copy.add_rotation((90.0, 0.0, 0.0))

    assert transform.translation[0] == 1.0
    assert len(transform.extra_rotations) == 1
