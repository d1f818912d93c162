"""Splitting of triangle groups under a per-collider vertex budget."""

import logging
import warnings

import numpy as np

from segcollider.errors import ConfigurationWarning

console_logger = logging.getLogger(__name__)


def split_triangles_by_vertex_limit(
    triangles: np.ndarray, vertex_limit: int
) -> list[np.ndarray]:
    """Split a triangle group into chunks that each reference a bounded number of
    distinct vertices.

    Triangles are scanned in order and never reordered or split. A triangle is
    added to the current chunk only if the chunk's distinct vertex count stays
    within `vertex_limit` afterwards; otherwise the current chunk is closed and
    the triangle starts a new one. A triangle entering an empty chunk is always
    admitted, so a lone triangle may exceed a limit below 3.

    Args:
        triangles: (k, 3) array of vertex indices.
        vertex_limit: Maximum number of distinct vertices per chunk.

    Returns:
        Ordered list of (j, 3) chunk arrays whose concatenation reproduces
        `triangles`. Empty if `triangles` is empty.

    Raises:
        ValueError: If vertex_limit is not positive.
    """
    if vertex_limit < 1:
        raise ValueError(f"vertex_limit must be positive, got {vertex_limit}")

    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if len(triangles) == 0:
        return []

    # Chunks are tracked as [start, end) row ranges into `triangles`.
    boundaries: list[tuple[int, int]] = []
    chunk_start = 0
    chunk_vertices: set[int] = set()

    for row, triangle in enumerate(triangles.tolist()):
        new_vertices = set(triangle) - chunk_vertices
        if (
            row > chunk_start
            and new_vertices
            and len(chunk_vertices) + len(new_vertices) > vertex_limit
        ):
            boundaries.append((chunk_start, row))
            chunk_start = row
            chunk_vertices = set()
            new_vertices = set(triangle)
        chunk_vertices |= new_vertices

    boundaries.append((chunk_start, len(triangles)))
    chunks = [triangles[start:end] for start, end in boundaries]

    if len(chunks) > 1:
        message = (
            f"Triangle group was split into {len(chunks)} chunks to respect the "
            f"limit of {vertex_limit} vertices per collider"
        )
        console_logger.warning(message)
        warnings.warn(message, ConfigurationWarning, stacklevel=2)

    return chunks


def count_distinct_vertices(triangles: np.ndarray) -> int:
    """Number of distinct vertex indices referenced by a triangle array."""
    return int(np.unique(np.asarray(triangles).reshape(-1)).size)
