"""Triangle partitioning by the segment id stored in the secondary UV channel.

Authoring tools write an integer part id into UV2.x and a material id into
UV2.y. Each triangle takes the id of its first vertex; there is no voting
across the three corners.
"""

import logging

from enum import Enum

import numpy as np

from segcollider.errors import InvalidSegmentIdError, MissingAttributeError
from segcollider.mesh_data import MeshData

console_logger = logging.getLogger(__name__)

# Bounds of the int64 range as exact floats. The upper bound itself is
# not representable as int64.
INT64_MIN_AS_FLOAT = -(2.0**63)
INT64_MAX_AS_FLOAT = 2.0**63


class SegmentIdPolicy(str, Enum):
    """How a floating point UV component is turned into an integer segment id.

    The two policies disagree on negative and half-way values, so the choice
    must match the convention of the tool that authored the ids:
    - TRUNCATE: `int(value)`, toward zero. `1.9 -> 1`, `-0.7 -> 0`.
    - ROUND_NEAREST: `int(value + 0.5)`, where the cast still truncates toward
      zero. `2.5 -> 3`, `0.49 -> 0`, `-0.7 -> 0`, `-1.5 -> -1`.
    """

    TRUNCATE = "truncate"
    ROUND_NEAREST = "round_nearest"


def compute_segment_ids(
    values: np.ndarray, policy: SegmentIdPolicy = SegmentIdPolicy.TRUNCATE
) -> np.ndarray:
    """Convert raw UV components to integer segment ids.

    Args:
        values: Array of UV components.
        policy: Id derivation policy.

    Returns:
        Int64 array of segment ids with the same shape as `values`.

    Raises:
        InvalidSegmentIdError: If any value is NaN or infinite, or its id does
            not fit a 64-bit integer.
    """
    values = np.asarray(values, dtype=np.float64)
    if not np.all(np.isfinite(values)):
        bad = values[~np.isfinite(values)]
        raise InvalidSegmentIdError(
            f"Segment id values must be finite, got {bad[:5].tolist()}"
        )

    policy = SegmentIdPolicy(policy)
    if policy == SegmentIdPolicy.ROUND_NEAREST:
        values = values + 0.5
    truncated = np.trunc(values)

    out_of_range = (truncated < INT64_MIN_AS_FLOAT) | (truncated >= INT64_MAX_AS_FLOAT)
    if np.any(out_of_range):
        raise InvalidSegmentIdError(
            f"Segment id values must fit a 64-bit integer, got "
            f"{truncated[out_of_range][:5].tolist()}"
        )
    return truncated.astype(np.int64)


def require_segment_channel(mesh: MeshData) -> np.ndarray:
    """Return the secondary UV channel or fail if it is missing.

    Raises:
        MissingAttributeError: If the mesh has no secondary UV data.
    """
    if mesh.uv2 is None or len(mesh.uv2) == 0:
        raise MissingAttributeError(
            f"Mesh '{mesh.name}' has no secondary UV channel (TEXCOORD1) data"
        )
    return mesh.uv2


def partition_triangles_by_segment(
    mesh: MeshData,
    use_part_id: bool = True,
    policy: SegmentIdPolicy = SegmentIdPolicy.TRUNCATE,
) -> dict[int, np.ndarray]:
    """Group the mesh triangles by segment id.

    Args:
        mesh: Source mesh with a secondary UV channel.
        use_part_id: If True, read UV2.x (part id). Otherwise read UV2.y
            (material id).
        policy: Id derivation policy.

    Returns:
        Dict mapping segment id to an (k, 3) array of triangles expressed in
        original mesh vertex indices. Triangle order inside each group follows
        the source triangle order. Keys are inserted in order of first
        appearance; callers needing a stable order should sort by key.

    Raises:
        MissingAttributeError: If the secondary UV channel is absent or empty.
        InvalidSegmentIdError: If a first-vertex UV value is not finite.
        ValueError: If a triangle's first vertex has no secondary UV entry.
    """
    uv2 = require_segment_channel(mesh)
    triangles = mesh.triangles

    if len(triangles) == 0:
        return {}

    first_vertices = triangles[:, 0]
    if int(first_vertices.max()) >= len(uv2):
        raise ValueError(
            f"Secondary UV channel has {len(uv2)} entries but triangles reference "
            f"vertex {int(first_vertices.max())}"
        )

    component = 0 if use_part_id else 1
    segment_ids = compute_segment_ids(uv2[first_vertices, component], policy=policy)

    # np.unique sorts, so recover first-appearance order from the first indices.
    unique_ids, first_positions = np.unique(segment_ids, return_index=True)
    ordered_ids = unique_ids[np.argsort(first_positions)]

    groups: dict[int, np.ndarray] = {}
    for segment_id in ordered_ids:
        groups[int(segment_id)] = triangles[segment_ids == segment_id]

    console_logger.info(
        f"Partitioned {len(triangles)} triangles of '{mesh.name}' into "
        f"{len(groups)} segments using UV2.{'x' if use_part_id else 'y'} "
        f"({SegmentIdPolicy(policy).value})"
    )
    return groups
