"""Names for the objects a host creates from collider results."""

UNTAGGED_SEGMENT_ID = -1
"""Tag value of an object that has not been assigned a segment."""


def collider_container_name(use_part_id: bool, voxel: bool = False) -> str:
    """Name of the container that groups all colliders of one run.

    A new run replaces any previous container with the same name.
    """
    prefix = "Part" if use_part_id else "Material"
    suffix = "VoxelColliders" if voxel else "Colliders"
    return f"{prefix}_{suffix}"


def chunk_object_name(segment_id: int, chunk_index: int, chunk_count: int) -> str:
    if chunk_count > 1:
        return f"SegmentCollider_{segment_id}_Chunk{chunk_index}"
    return f"SegmentCollider_{segment_id}"


def chunk_mesh_name(segment_id: int, chunk_index: int) -> str:
    return f"SegmentMesh_{segment_id}_Chunk{chunk_index}"


def voxel_segment_container_name(segment_id: int) -> str:
    return f"Segment_{segment_id}"


def voxel_box_name(segment_id: int, box_index: int) -> str:
    return f"VoxelCollider_{segment_id}_{box_index}"
