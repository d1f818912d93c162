"""In-memory triangle mesh record shared by both collider pipelines.

The record is a plain numpy container so that the pipelines never depend on a
live scene handle. Hosts convert to and from `trimesh.Trimesh` with
`MeshData.from_trimesh` and `MeshData.to_trimesh`.
"""

from dataclasses import dataclass

import numpy as np
import trimesh


def _as_columns(
    values, columns: int, label: str, dtype: type = np.float64
) -> np.ndarray:
    """Return `values` as an (N, columns) array without reinterpreting its rows.

    A single row may be given as a 1-D array of length `columns`. Empty input
    becomes an (0, columns) array.

    Raises:
        ValueError: If the rows do not have exactly `columns` components.
    """
    array = np.asarray(values, dtype=dtype)
    if array.size == 0:
        return np.zeros((0, columns), dtype=dtype)
    if array.ndim == 1 and array.shape[0] == columns:
        return array.reshape(1, columns)
    if array.ndim != 2 or array.shape[1] != columns:
        raise ValueError(f"{label} must be an (N, {columns}) array, got {array.shape}")
    return array


def _as_optional_columns(values, columns: int, label: str) -> np.ndarray | None:
    if values is None:
        return None
    return _as_columns(values, columns, label)


@dataclass
class MeshData:
    """Triangle mesh with optional per-vertex attributes.

    Attributes:
        vertices: (N, 3) vertex positions.
        triangles: (M, 3) vertex indices into `vertices`.
        normals: Optional per-vertex normals. May be shorter than N, in which
            case derived meshes omit them.
        uv: Optional primary texture coordinates (UV0).
        uv2: Optional secondary texture coordinates. Component x carries the
            part id and component y the material id.
        name: Mesh name, used when deriving sub-mesh names.
        is_readable: False when the host cannot expose the mesh data for reading.
    """

    vertices: np.ndarray
    triangles: np.ndarray
    normals: np.ndarray | None = None
    uv: np.ndarray | None = None
    uv2: np.ndarray | None = None
    name: str = "mesh"
    is_readable: bool = True

    def __post_init__(self) -> None:
        """Validate array shapes and triangle indices."""
        self.vertices = _as_columns(self.vertices, 3, "vertices")
        self.triangles = _as_columns(self.triangles, 3, "triangles", dtype=np.int64)
        self.normals = _as_optional_columns(self.normals, 3, "normals")
        self.uv = _as_optional_columns(self.uv, 2, "uv")
        self.uv2 = _as_optional_columns(self.uv2, 2, "uv2")

        if len(self.triangles) > 0:
            max_index = int(self.triangles.max())
            min_index = int(self.triangles.min())
            if min_index < 0 or max_index >= len(self.vertices):
                raise ValueError(
                    f"Mesh '{self.name}' has triangle indices in "
                    f"[{min_index}, {max_index}] but only {len(self.vertices)} "
                    f"vertices"
                )

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)

    @property
    def bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """Axis-aligned bounds of the vertex positions as (min, max).

        An empty mesh has zero-sized bounds at the origin.
        """
        if self.vertex_count == 0:
            return np.zeros(3), np.zeros(3)
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    @property
    def extent(self) -> np.ndarray:
        bounds_min, bounds_max = self.bounds
        return bounds_max - bounds_min

    @classmethod
    def from_trimesh(
        cls,
        mesh: trimesh.Trimesh,
        uv2: np.ndarray | None = None,
        name: str | None = None,
    ) -> "MeshData":
        """Build a mesh record from a trimesh object.

        Normals come from `vertex_normals` and UV0 from `visual.uv` when the
        mesh carries texture visuals. The secondary channel is not part of the
        trimesh model and must be passed in explicitly.

        Args:
            mesh: Source trimesh object.
            uv2: Optional (N, 2) secondary texture coordinates.
            name: Optional name. Defaults to the trimesh metadata name.

        Returns:
            MeshData copy of the trimesh geometry.
        """
        uv = getattr(mesh.visual, "uv", None)
        if name is None:
            name = mesh.metadata.get("name", "mesh")
        return cls(
            vertices=np.array(mesh.vertices, dtype=np.float64),
            triangles=np.array(mesh.faces, dtype=np.int64),
            normals=np.array(mesh.vertex_normals, dtype=np.float64),
            uv=None if uv is None else np.array(uv, dtype=np.float64),
            uv2=uv2,
            name=name,
        )

    def to_trimesh(self) -> trimesh.Trimesh:
        """Convert to a trimesh object without merging or reordering vertices."""
        mesh = trimesh.Trimesh(
            vertices=self.vertices,
            faces=self.triangles,
            vertex_normals=(
                self.normals
                if self.normals is not None and len(self.normals) == self.vertex_count
                else None
            ),
            process=False,
        )
        if self.uv is not None and len(self.uv) == self.vertex_count:
            mesh.visual = trimesh.visual.TextureVisuals(uv=self.uv)
        mesh.metadata["name"] = self.name
        return mesh
