"""Loading of source meshes and their segment channel from disk."""

import logging

from pathlib import Path

import numpy as np
import trimesh

from segcollider.errors import UnreadableMeshError
from segcollider.mesh_data import MeshData

console_logger = logging.getLogger(__name__)

SEGMENT_UV_ATTRIBUTE_KEYS = ("uv2", "TEXCOORD_1", "_TEXCOORD_1")
"""vertex_attributes keys checked, in order, for the secondary UV channel."""


def load_mesh_as_trimesh(mesh_path: Path) -> trimesh.Trimesh:
    """Load a mesh file and ensure it's a single Trimesh object.

    Scene files are concatenated into one mesh.

    Args:
        mesh_path: Path to mesh file (GLTF, GLB, OBJ, PLY, ...). Must exist.

    Returns:
        Single Trimesh object containing the loaded geometry.

    Raises:
        FileNotFoundError: If mesh_path does not exist.
        UnreadableMeshError: If the file cannot be loaded or holds no geometry.
    """
    if not mesh_path.exists():
        raise FileNotFoundError(f"Mesh file not found: {mesh_path}")

    try:
        mesh = trimesh.load(mesh_path, force="mesh", process=False)
    except Exception as e:
        raise UnreadableMeshError(f"Failed to load mesh from {mesh_path}: {e}") from e

    if isinstance(mesh, trimesh.Scene):
        meshes = [
            geom
            for geom in mesh.geometry.values()
            if isinstance(geom, trimesh.Trimesh) and len(geom.vertices) > 0
        ]
        if not meshes:
            raise UnreadableMeshError(f"Scene contains no valid meshes: {mesh_path}")
        mesh = trimesh.util.concatenate(meshes)

    if not isinstance(mesh, trimesh.Trimesh):
        raise UnreadableMeshError(
            f"Could not load valid Trimesh from {mesh_path}. Got type: {type(mesh)}"
        )

    return mesh


def _find_segment_channel(mesh: trimesh.Trimesh) -> np.ndarray | None:
    for key in SEGMENT_UV_ATTRIBUTE_KEYS:
        values = mesh.vertex_attributes.get(key)
        if values is not None and len(values) > 0:
            console_logger.debug(f"Using vertex attribute '{key}' as segment channel")
            return np.asarray(values, dtype=np.float64)
    return None


def load_source_mesh(mesh_path: Path, segment_uv_path: Path | None = None) -> MeshData:
    """Load a source mesh together with its secondary UV channel.

    Args:
        mesh_path: Mesh file to load.
        segment_uv_path: Optional .npy file with an (N, 2) array. Takes
            precedence over vertex attributes stored in the mesh file.

    Returns:
        MeshData. Its `uv2` is None if no segment channel was found, which the
        pipelines report as a missing attribute.

    Raises:
        FileNotFoundError: If a given path does not exist.
        UnreadableMeshError: If the mesh file cannot be loaded.
        ValueError: If the segment channel is not an (N, 2) array.
    """
    mesh = load_mesh_as_trimesh(mesh_path)

    uv2 = None
    if segment_uv_path is not None:
        if not segment_uv_path.exists():
            raise FileNotFoundError(f"Segment UV file not found: {segment_uv_path}")
        uv2 = np.load(segment_uv_path).astype(np.float64)
    else:
        uv2 = _find_segment_channel(mesh)

    if uv2 is None:
        console_logger.warning(f"No secondary UV channel found for {mesh_path}")

    console_logger.info(
        f"Loaded {mesh_path.name}: {len(mesh.vertices)} vertices, "
        f"{len(mesh.faces)} triangles"
    )
    return MeshData.from_trimesh(mesh, uv2=uv2, name=mesh_path.stem)
