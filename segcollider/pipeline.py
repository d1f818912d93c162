"""Entry points producing per-segment collision proxies from a tagged mesh.

Two pipelines share the partitioning and sub-mesh stages:
- Exact: partition -> chunk under a vertex budget -> compact sub-meshes.
- Voxel: partition -> compact whole segment -> rasterize -> fill -> merge boxes.

Both validate their input before doing any work so a failure never yields a
partial result.
"""

import logging

from segcollider.box_merge import Box, merge_voxels_into_boxes
from segcollider.chunking import split_triangles_by_vertex_limit
from segcollider.errors import UnreadableMeshError
from segcollider.mesh_data import MeshData
from segcollider.naming import chunk_mesh_name, voxel_segment_container_name
from segcollider.segmentation import (
    SegmentIdPolicy,
    partition_triangles_by_segment,
    require_segment_channel,
)
from segcollider.submesh import CompactSubMesh, build_compact_submesh
from segcollider.voxels import create_voxel_grid_for_mesh, validate_resolution

console_logger = logging.getLogger(__name__)

DEFAULT_VERTEX_LIMIT_PER_COLLIDER = 65000
DEFAULT_VOXEL_RESOLUTION = 100


def _check_source_mesh(mesh: MeshData) -> None:
    if not mesh.is_readable:
        raise UnreadableMeshError(
            f"Mesh '{mesh.name}' is not readable; enable CPU read access on the "
            f"source asset"
        )
    require_segment_channel(mesh)


def generate_exact_colliders(
    mesh: MeshData,
    use_part_id: bool = True,
    vertex_limit: int = DEFAULT_VERTEX_LIMIT_PER_COLLIDER,
    id_policy: SegmentIdPolicy = SegmentIdPolicy.TRUNCATE,
) -> dict[int, list[CompactSubMesh]]:
    """Extract exact per-segment collision meshes chunked under a vertex limit.

    Args:
        mesh: Source mesh with a secondary UV channel. Not modified.
        use_part_id: Read segment ids from UV2.x if True, else UV2.y.
        vertex_limit: Maximum distinct vertices per output mesh.
        id_policy: How UV values become segment ids.

    Returns:
        Dict mapping segment id to its ordered sub-meshes.

    Raises:
        UnreadableMeshError: If the mesh data is not readable.
        MissingAttributeError: If the secondary UV channel is absent or empty.
        ValueError: If vertex_limit is not positive.
    """
    _check_source_mesh(mesh)
    if vertex_limit < 1:
        raise ValueError(f"vertex_limit must be positive, got {vertex_limit}")

    groups = partition_triangles_by_segment(
        mesh=mesh, use_part_id=use_part_id, policy=id_policy
    )

    results: dict[int, list[CompactSubMesh]] = {}
    for segment_id, segment_triangles in groups.items():
        console_logger.info(
            f"Creating colliders for segment {segment_id}: "
            f"{len(segment_triangles)} triangles"
        )
        chunks = split_triangles_by_vertex_limit(
            triangles=segment_triangles, vertex_limit=vertex_limit
        )

        submeshes: list[CompactSubMesh] = []
        for chunk_index, chunk in enumerate(chunks):
            submesh = build_compact_submesh(
                triangles=chunk,
                source_mesh=mesh,
                name=chunk_mesh_name(segment_id, chunk_index),
                segment_id=segment_id,
                chunk_index=chunk_index,
            )
            console_logger.info(
                f" -> {submesh.name} created with {submesh.vertex_count} vertices"
            )
            submeshes.append(submesh)
        results[segment_id] = submeshes

    console_logger.info(
        f"Generated {sum(len(v) for v in results.values())} exact colliders for "
        f"{len(results)} segments"
    )
    return results


def generate_voxel_colliders(
    mesh: MeshData,
    use_part_id: bool = True,
    resolution: int = DEFAULT_VOXEL_RESOLUTION,
    id_policy: SegmentIdPolicy = SegmentIdPolicy.ROUND_NEAREST,
) -> dict[int, list[Box]]:
    """Approximate each segment with axis-aligned boxes from a filled voxel grid.

    Each segment is voxelized within its own bounds, so box coordinates are in
    the source mesh's local frame. Segments are processed one at a time and
    their grids are released before the next segment starts.

    Args:
        mesh: Source mesh with a secondary UV channel. Not modified.
        use_part_id: Read segment ids from UV2.x if True, else UV2.y.
        resolution: Voxel cells along each segment's longest bounding box axis.
        id_policy: How UV values become segment ids.

    Returns:
        Dict mapping segment id to its boxes. Degenerate segments map to an
        empty list.

    Raises:
        UnreadableMeshError: If the mesh data is not readable.
        MissingAttributeError: If the secondary UV channel is absent or empty.
        ValueError: If resolution is below 1.
    """
    _check_source_mesh(mesh)
    validate_resolution(resolution)

    groups = partition_triangles_by_segment(
        mesh=mesh, use_part_id=use_part_id, policy=id_policy
    )

    results: dict[int, list[Box]] = {}
    for segment_id, segment_triangles in groups.items():
        console_logger.info(
            f"--- Generating voxel colliders for segment {segment_id} ---"
        )
        part_mesh = build_compact_submesh(
            triangles=segment_triangles,
            source_mesh=mesh,
            name=f"TempMesh_{voxel_segment_container_name(segment_id)}",
            carry_attributes=False,
            segment_id=segment_id,
        ).mesh

        grid = create_voxel_grid_for_mesh(part_mesh, resolution=resolution)
        if grid is None:
            results[segment_id] = []
            continue

        boxes = merge_voxels_into_boxes(grid)
        console_logger.info(
            f"Segment {segment_id}: {grid.occupied_count} voxels merged into "
            f"{len(boxes)} boxes"
        )
        results[segment_id] = boxes

    console_logger.info(
        f"Generated {sum(len(v) for v in results.values())} voxel boxes for "
        f"{len(results)} segments"
    )
    return results
