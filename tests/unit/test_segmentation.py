"""Unit tests for segment id derivation and triangle partitioning."""

import unittest

import numpy as np

from segcollider.errors import InvalidSegmentIdError, MissingAttributeError
from segcollider.mesh_data import MeshData
from segcollider.segmentation import (
    SegmentIdPolicy,
    compute_segment_ids,
    partition_triangles_by_segment,
)
from tests.unit.mesh_fixtures import make_two_segment_fan_mesh


class TestComputeSegmentIds(unittest.TestCase):
    """Test the two id derivation policies."""

    def test_truncate_rounds_toward_zero(self):
        ids = compute_segment_ids(
            np.array([1.9, -0.7, 2.5, -1.5, 3.0]), SegmentIdPolicy.TRUNCATE
        )
        self.assertEqual(ids.tolist(), [1, 0, 2, -1, 3])

    def test_round_nearest_adds_half_then_truncates(self):
        ids = compute_segment_ids(
            np.array([1.9, -0.7, 2.5, -1.5, 0.49]), SegmentIdPolicy.ROUND_NEAREST
        )
        self.assertEqual(ids.tolist(), [2, 0, 3, -1, 0])

    def test_policies_disagree_on_half_values(self):
        values = np.array([0.5, 1.5])
        self.assertEqual(compute_segment_ids(values, "truncate").tolist(), [0, 1])
        self.assertEqual(compute_segment_ids(values, "round_nearest").tolist(), [1, 2])

    def test_non_finite_values_raise(self):
        with self.assertRaises(InvalidSegmentIdError):
            compute_segment_ids(np.array([1.0, np.nan]))
        with self.assertRaises(ValueError):
            compute_segment_ids(np.array([np.inf]))

    def test_values_beyond_int64_raise(self):
        for policy in SegmentIdPolicy:
            with self.assertRaises(InvalidSegmentIdError):
                compute_segment_ids(np.array([3.0, 1e20]), policy)
            with self.assertRaises(InvalidSegmentIdError):
                compute_segment_ids(np.array([-1e20]), policy)
        with self.assertRaises(InvalidSegmentIdError):
            compute_segment_ids(np.array([2.0**63]))

    def test_large_ids_within_int64_are_exact(self):
        ids = compute_segment_ids(np.array([2.0**53, -(2.0**63)]))

        self.assertEqual(ids.tolist(), [2**53, -(2**63)])


class TestPartitionTriangles(unittest.TestCase):
    """Test grouping of triangles by the id of their first vertex."""

    def setUp(self):
        self.mesh = make_two_segment_fan_mesh()

    def test_groups_by_part_id(self):
        groups = partition_triangles_by_segment(self.mesh, use_part_id=True)

        self.assertEqual(sorted(groups), [0, 1])
        np.testing.assert_array_equal(groups[0], self.mesh.triangles[:3])
        np.testing.assert_array_equal(groups[1], self.mesh.triangles[3:])

    def test_material_axis_reads_y_component(self):
        groups = partition_triangles_by_segment(self.mesh, use_part_id=False)

        self.assertEqual(list(groups), [3])
        self.assertEqual(len(groups[3]), 6)

    def test_first_vertex_decides_segment(self):
        mesh = MeshData(
            vertices=np.zeros((4, 3)),
            triangles=np.array([[0, 1, 2], [1, 2, 3]]),
            uv2=np.array([[5.0, 0.0], [7.0, 0.0], [7.0, 0.0], [7.0, 0.0]]),
        )
        groups = partition_triangles_by_segment(mesh)

        np.testing.assert_array_equal(groups[5], [[0, 1, 2]])
        np.testing.assert_array_equal(groups[7], [[1, 2, 3]])

    def test_keys_follow_first_appearance_and_preserve_order(self):
        mesh = MeshData(
            vertices=np.zeros((3, 3)),
            triangles=np.array([[2, 0, 1], [0, 1, 2], [1, 2, 0], [2, 1, 0]]),
            uv2=np.array([[4.0, 0.0], [9.0, 0.0], [1.0, 0.0]]),
        )
        groups = partition_triangles_by_segment(mesh)

        self.assertEqual(list(groups), [1, 4, 9])
        np.testing.assert_array_equal(groups[1], [[2, 0, 1], [2, 1, 0]])

    def test_policy_changes_assignment(self):
        mesh = MeshData(
            vertices=np.zeros((3, 3)),
            triangles=np.array([[0, 1, 2]]),
            uv2=np.full((3, 2), 1.6),
        )
        truncated = partition_triangles_by_segment(
            mesh, policy=SegmentIdPolicy.TRUNCATE
        )
        rounded = partition_triangles_by_segment(
            mesh, policy=SegmentIdPolicy.ROUND_NEAREST
        )
        self.assertEqual(list(truncated), [1])
        self.assertEqual(list(rounded), [2])

    def test_missing_channel_raises(self):
        mesh = MeshData(vertices=np.zeros((3, 3)), triangles=np.array([[0, 1, 2]]))
        with self.assertRaises(MissingAttributeError):
            partition_triangles_by_segment(mesh)

    def test_empty_channel_raises(self):
        mesh = MeshData(
            vertices=np.zeros((3, 3)),
            triangles=np.array([[0, 1, 2]]),
            uv2=np.zeros((0, 2)),
        )
        with self.assertRaises(MissingAttributeError):
            partition_triangles_by_segment(mesh)

    def test_mesh_without_triangles_has_no_groups(self):
        mesh = MeshData(
            vertices=np.zeros((3, 3)),
            triangles=np.zeros((0, 3)),
            uv2=np.zeros((3, 2)),
        )
        self.assertEqual(partition_triangles_by_segment(mesh), {})


if __name__ == "__main__":
    unittest.main()
