import pytest

from eqmaptools.geometry import OrientedBoundingBox


def identity_box(extents=(1.0, 2.0, 3.0)):
    return OrientedBoundingBox((0, 0, 0), (0, 0, 0), (1, 1, 1), extents)


def test_bounds_follow_extents():
    box = identity_box()
    assert (box.min_x, box.max_x) == (-1.0, 1.0)
    assert (box.min_y, box.max_y) == (-2.0, 2.0)
    assert (box.min_z, box.max_z) == (-3.0, 3.0)


def test_negative_extents_are_swapped():
    box = identity_box((-1.0, -2.0, 3.0))
    assert box.min_x < box.max_x
    assert (box.min_x, box.max_x) == (-1.0, 1.0)
    assert (box.min_y, box.max_y) == (-2.0, 2.0)


def test_boundary_is_inclusive():
    box = identity_box()
    assert box.contains_point((1.0, 2.0, 3.0))
    assert box.contains_point((-1.0, -2.0, -3.0))


def test_outside_point():
    box = identity_box()
    assert not box.contains_point((1.01, 0.0, 0.0))
    assert not box.contains_point((0.0, 0.0, -3.5))


def test_translation():
    box = OrientedBoundingBox((10, 0, 0), (0, 0, 0), (1, 1, 1), (1, 1, 1))
    assert box.contains_point((10.5, 0.0, 0.0))
    assert not box.contains_point((0.0, 0.0, 0.0))


def test_scale_enlarges_box():
    box = OrientedBoundingBox((0, 0, 0), (0, 0, 0), (2, 2, 2), (1, 1, 1))
    assert box.contains_point((1.5, 1.5, 1.5))
    assert not box.contains_point((2.5, 0.0, 0.0))


def test_rotation_about_z_swaps_axes():
    box = OrientedBoundingBox((0, 0, 0), (0, 0, 90), (1, 1, 1), (2, 1, 1))
    assert box.contains_point((0.0, 1.5, 0.0))
    assert not box.contains_point((1.5, 0.0, 0.0))


def test_transform_of_origin_is_position():
    pos = (3.0, -4.0, 5.0)
    box = OrientedBoundingBox(pos, (10, 20, 30), (2, 3, 4), (1, 1, 1))
    assert box.transform((0, 0, 0)) == pytest.approx(pos)


@pytest.mark.parametrize("local", [(0.5, 0.5, 0.5), (-0.9, 0.2, 0.0), (0.0, -0.99, 0.99)])
def test_transformed_inner_points_are_contained(local):
    box = OrientedBoundingBox((7, 8, 9), (33, 45, 120), (2, 0.5, 3), (1, 1, 1))
    assert box.contains_point(box.transform(local))


@pytest.mark.parametrize("local", [(1.2, 0.0, 0.0), (0.0, -1.5, 0.0), (0.0, 0.0, 1.1)])
def test_transformed_outer_points_are_not_contained(local):
    box = OrientedBoundingBox((7, 8, 9), (33, 45, 120), (2, 0.5, 3), (1, 1, 1))
    assert not box.contains_point(box.transform(local))


def test_matrix_matches_transform():
    box = OrientedBoundingBox((1, 2, 3), (15, 25, 35), (1, 2, 3), (1, 1, 1))
    matrix = box.matrix
    point = (0.3, -0.2, 0.7)
    expected = box.transform(point)
    computed = tuple(sum(a * b for a, b in zip(row, (*point, 1.0))) for row in matrix[:3])
    assert computed == pytest.approx(expected)
    assert matrix[3] == (0.0, 0.0, 0.0, 1.0)


def test_zero_scale_rejected():
    with pytest.raises(ValueError):
        OrientedBoundingBox((0, 0, 0), (0, 0, 0), (1, 0, 1), (1, 1, 1))