"""Compaction of a triangle subset into a standalone mesh."""

import logging

from dataclasses import dataclass

import numpy as np

from segcollider.mesh_data import MeshData

console_logger = logging.getLogger(__name__)

MAX_16BIT_VERTEX_COUNT = 65534
"""Largest vertex count addressable with a 16-bit index buffer."""


@dataclass
class CompactSubMesh:
    """A mesh built from one chunk of a segment's triangles.

    Attributes:
        mesh: Dense mesh whose triangles index only its own vertices.
        source_vertex_indices: Original vertex index of each new vertex, in
            first-seen order. `source_vertex_indices[new] == old`.
        uses_wide_indices: True when the vertex count needs 32-bit indices.
        segment_id: Segment the chunk belongs to.
        chunk_index: Position of the chunk within its segment.
    """

    mesh: MeshData
    source_vertex_indices: np.ndarray
    uses_wide_indices: bool
    segment_id: int | None = None
    chunk_index: int = 0

    @property
    def name(self) -> str:
        return self.mesh.name

    @property
    def vertex_count(self) -> int:
        return self.mesh.vertex_count

    @property
    def source_triangles(self) -> np.ndarray:
        """Triangles expressed in the original mesh's vertex indices."""
        return self.source_vertex_indices[self.mesh.triangles]


def _carry_attribute(
    values: np.ndarray | None, source_indices: np.ndarray
) -> np.ndarray | None:
    # Attributes are only carried when the source array covers every index used.
    if values is None or len(source_indices) == 0:
        return None
    if len(values) <= int(source_indices.max()):
        return None
    return values[source_indices]


def build_compact_submesh(
    triangles: np.ndarray,
    source_mesh: MeshData,
    name: str,
    carry_attributes: bool = True,
    segment_id: int | None = None,
    chunk_index: int = 0,
) -> CompactSubMesh:
    """Build a dense mesh from a subset of the source mesh's triangles.

    Referenced vertices are renumbered 0..k-1 in the order they are first seen
    while walking the triangles. Positions are always copied. Normals and UV0
    are copied when `carry_attributes` is set and the source arrays are long
    enough; otherwise they are omitted. Bounds are recomputed from the new
    vertices.

    Args:
        triangles: (j, 3) triangles in source mesh indices.
        source_mesh: Mesh the indices refer to.
        name: Name for the new mesh.
        carry_attributes: Whether to copy normals and UV0.
        segment_id: Segment id recorded on the result.
        chunk_index: Chunk position recorded on the result.

    Returns:
        CompactSubMesh with the remapped geometry.
    """
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    flat_indices = triangles.reshape(-1)

    if len(flat_indices) == 0:
        source_indices = np.zeros(0, dtype=np.int64)
        new_triangles = np.zeros((0, 3), dtype=np.int64)
    else:
        unique_indices, first_positions, inverse = np.unique(
            flat_indices, return_index=True, return_inverse=True
        )
        first_seen_order = np.argsort(first_positions, kind="stable")
        source_indices = unique_indices[first_seen_order]

        # rank[i] is the new index of unique_indices[i].
        rank = np.empty_like(first_seen_order)
        rank[first_seen_order] = np.arange(len(first_seen_order))
        new_triangles = rank[inverse.reshape(-1)].reshape(-1, 3)

    normals = None
    uv = None
    if carry_attributes:
        normals = _carry_attribute(source_mesh.normals, source_indices)
        uv = _carry_attribute(source_mesh.uv, source_indices)

    mesh = MeshData(
        vertices=source_mesh.vertices[source_indices],
        triangles=new_triangles,
        normals=normals,
        uv=uv,
        name=name,
    )
    uses_wide_indices = mesh.vertex_count > MAX_16BIT_VERTEX_COUNT

    console_logger.debug(
        f"Built sub-mesh '{name}': {mesh.vertex_count} vertices, "
        f"{mesh.triangle_count} triangles, wide_indices={uses_wide_indices}"
    )

    return CompactSubMesh(
        mesh=mesh,
        source_vertex_indices=source_indices,
        uses_wide_indices=uses_wide_indices,
        segment_id=segment_id,
        chunk_index=chunk_index,
    )
