"""Segment-based collision proxy generation for triangulated meshes."""

from segcollider.box_merge import Box
from segcollider.errors import (
    ConfigurationWarning,
    InvalidSegmentIdError,
    MissingAttributeError,
    SegColliderError,
    UnreadableMeshError,
)
from segcollider.mesh_data import MeshData
from segcollider.pipeline import generate_exact_colliders, generate_voxel_colliders
from segcollider.segmentation import SegmentIdPolicy
from segcollider.submesh import CompactSubMesh

__all__ = [
    "Box",
    "CompactSubMesh",
    "ConfigurationWarning",
    "InvalidSegmentIdError",
    "MeshData",
    "MissingAttributeError",
    "SegColliderError",
    "SegmentIdPolicy",
    "UnreadableMeshError",
    "generate_exact_colliders",
    "generate_voxel_colliders",
]
