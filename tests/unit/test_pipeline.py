"""Unit tests for the exact and voxel collider pipelines."""

import unittest

import numpy as np

from segcollider.errors import (
    ConfigurationWarning,
    MissingAttributeError,
    UnreadableMeshError,
)
from segcollider.mesh_data import MeshData
from segcollider.pipeline import generate_exact_colliders, generate_voxel_colliders
from segcollider.segmentation import SegmentIdPolicy, partition_triangles_by_segment
from tests.unit.mesh_fixtures import make_tagged_cubes, make_two_segment_fan_mesh


class TestGenerateExactColliders(unittest.TestCase):
    """Test chunked sub-mesh extraction per segment."""

    def setUp(self):
        self.mesh = make_two_segment_fan_mesh()

    def test_two_segments_with_large_limit(self):
        colliders = generate_exact_colliders(self.mesh, use_part_id=True)

        self.assertEqual(sorted(colliders), [0, 1])
        expected_groups = ((0, self.mesh.triangles[:3]), (1, self.mesh.triangles[3:]))
        for segment_id, expected in expected_groups:
            self.assertEqual(len(colliders[segment_id]), 1)
            submesh = colliders[segment_id][0]
            self.assertEqual(submesh.mesh.triangle_count, 3)
            self.assertEqual(submesh.vertex_count, 5)
            self.assertEqual(submesh.segment_id, segment_id)
            np.testing.assert_array_equal(submesh.source_triangles, expected)

    def test_chunks_reconstruct_segment_groups(self):
        mesh = make_tagged_cubes(
            [((0, 0, 0), (1, 1, 1), 0.0), ((2, 0, 0), (3, 1, 1), 1.0)]
        )
        with self.assertWarns(ConfigurationWarning):
            colliders = generate_exact_colliders(mesh, vertex_limit=5)
        groups = partition_triangles_by_segment(mesh)

        for segment_id, submeshes in colliders.items():
            self.assertGreater(len(submeshes), 1)
            rebuilt = np.vstack([s.source_triangles for s in submeshes])
            np.testing.assert_array_equal(rebuilt, groups[segment_id])
            self.assertEqual(
                [s.chunk_index for s in submeshes], list(range(len(submeshes)))
            )
            for submesh in submeshes:
                self.assertLessEqual(submesh.vertex_count, 5)

    def test_sub_mesh_names_follow_segment_and_chunk(self):
        colliders = generate_exact_colliders(self.mesh)

        self.assertEqual(colliders[0][0].name, "SegmentMesh_0_Chunk0")
        self.assertEqual(colliders[1][0].name, "SegmentMesh_1_Chunk0")

    def test_repeated_runs_give_identical_chunks(self):
        mesh = make_tagged_cubes([((0, 0, 0), (1, 1, 1), 0.0)])
        first = generate_exact_colliders(mesh, vertex_limit=4)
        second = generate_exact_colliders(mesh, vertex_limit=4)

        self.assertEqual(list(first), list(second))
        for segment_id in first:
            self.assertEqual(len(first[segment_id]), len(second[segment_id]))
            for a, b in zip(first[segment_id], second[segment_id]):
                np.testing.assert_array_equal(a.source_triangles, b.source_triangles)

    def test_material_axis(self):
        colliders = generate_exact_colliders(self.mesh, use_part_id=False)

        self.assertEqual(list(colliders), [3])
        self.assertEqual(colliders[3][0].mesh.triangle_count, 6)

    def test_source_mesh_is_not_modified(self):
        vertices = self.mesh.vertices.copy()
        triangles = self.mesh.triangles.copy()

        generate_exact_colliders(self.mesh, vertex_limit=3)

        np.testing.assert_array_equal(self.mesh.vertices, vertices)
        np.testing.assert_array_equal(self.mesh.triangles, triangles)

    def test_invalid_limit_raises(self):
        with self.assertRaises(ValueError):
            generate_exact_colliders(self.mesh, vertex_limit=0)


class TestGenerateVoxelColliders(unittest.TestCase):
    """Test voxel box generation per segment."""

    def test_cubes_become_one_box_each(self):
        mesh = make_tagged_cubes(
            [((0, 0, 0), (1, 1, 1), 0.0), ((2, 0, 0), (4, 2, 2), 1.0)]
        )
        boxes = generate_voxel_colliders(mesh, resolution=10)

        self.assertEqual(sorted(boxes), [0, 1])
        self.assertEqual(len(boxes[0]), 1)
        np.testing.assert_allclose(boxes[0][0].center, [0.5, 0.5, 0.5])
        np.testing.assert_allclose(boxes[0][0].size, [1.0, 1.0, 1.0])
        self.assertEqual(len(boxes[1]), 1)
        np.testing.assert_allclose(boxes[1][0].center, [3.0, 1.0, 1.0])
        np.testing.assert_allclose(boxes[1][0].size, [2.0, 2.0, 2.0])

    def test_default_policy_rounds_to_nearest(self):
        mesh = make_tagged_cubes([((0, 0, 0), (1, 1, 1), 0.6)])

        self.assertEqual(list(generate_voxel_colliders(mesh, resolution=10)), [1])
        self.assertEqual(
            list(
                generate_voxel_colliders(
                    mesh, resolution=10, id_policy=SegmentIdPolicy.TRUNCATE
                )
            ),
            [0],
        )

    def test_degenerate_segment_has_no_boxes(self):
        mesh = MeshData(
            vertices=np.ones((3, 3)),
            triangles=np.array([[0, 1, 2]]),
            uv2=np.full((3, 2), 4.0),
        )
        with self.assertWarns(ConfigurationWarning):
            boxes = generate_voxel_colliders(mesh, resolution=10)

        self.assertEqual(boxes, {4: []})

    def test_low_resolution_warns_but_runs(self):
        mesh = make_tagged_cubes([((0, 0, 0), (1, 1, 1), 0.0)])
        with self.assertWarns(ConfigurationWarning):
            boxes = generate_voxel_colliders(mesh, resolution=2)

        self.assertEqual(len(boxes[0]), 1)
        np.testing.assert_allclose(boxes[0][0].size, [1.0, 1.0, 1.0])

    def test_invalid_resolution_raises(self):
        mesh = make_tagged_cubes([((0, 0, 0), (1, 1, 1), 0.0)])
        with self.assertRaises(ValueError):
            generate_voxel_colliders(mesh, resolution=0)


class TestPipelineInputErrors(unittest.TestCase):
    """Both pipelines reject bad input before producing anything."""

    def test_empty_segment_channel_fails_both_pipelines(self):
        mesh = make_two_segment_fan_mesh()
        mesh.uv2 = np.zeros((0, 2))

        with self.assertRaises(MissingAttributeError):
            generate_exact_colliders(mesh)
        with self.assertRaises(MissingAttributeError):
            generate_voxel_colliders(mesh)

    def test_missing_segment_channel_fails_both_pipelines(self):
        mesh = make_two_segment_fan_mesh()
        mesh.uv2 = None

        with self.assertRaises(MissingAttributeError):
            generate_exact_colliders(mesh)
        with self.assertRaises(MissingAttributeError):
            generate_voxel_colliders(mesh)

    def test_unreadable_mesh_fails_both_pipelines(self):
        mesh = make_two_segment_fan_mesh()
        mesh.is_readable = False

        with self.assertRaises(UnreadableMeshError):
            generate_exact_colliders(mesh)
        with self.assertRaises(UnreadableMeshError):
            generate_voxel_colliders(mesh)


if __name__ == "__main__":
    unittest.main()
