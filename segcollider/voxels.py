"""Voxel occupancy grids: rasterization of triangles and interior fill.

A grid covers the bounding box of the mesh it was built from with
`resolution` cubic cells along every axis. The cell size is set by the longest
bounding box axis, so shorter axes are covered only partially.
"""

import logging
import warnings

from dataclasses import dataclass

import numpy as np

from scipy import ndimage

from segcollider.errors import ConfigurationWarning
from segcollider.mesh_data import MeshData

console_logger = logging.getLogger(__name__)

RECOMMENDED_RESOLUTION_RANGE = (10, 500)


@dataclass
class VoxelGrid:
    """Flat boolean occupancy array of `resolution**3` cells.

    Cell (x, y, z) lives at flat index `(x * resolution + y) * resolution + z`,
    so iterating the flat array visits x-major, then y, then z.

    Attributes:
        cells: Flat boolean occupancy array.
        resolution: Cells per axis.
        bounds_min: Local-space position of the grid corner at cell (0, 0, 0).
        voxel_size: Edge length of one cubic cell.
        bounds_max: Upper corner of the bounding box the grid was built from.
            Only the longest axis reaches the far side of the grid.
    """

    cells: np.ndarray
    resolution: int
    bounds_min: np.ndarray
    voxel_size: float
    bounds_max: np.ndarray

    @classmethod
    def empty(
        cls,
        resolution: int,
        bounds_min: np.ndarray,
        voxel_size: float,
        bounds_max: np.ndarray | None = None,
    ) -> "VoxelGrid":
        """Grid with no occupied cells.

        `bounds_max` defaults to the far corner of the grid.
        """
        bounds_min = np.asarray(bounds_min, dtype=np.float64)
        if bounds_max is None:
            bounds_max = bounds_min + resolution * voxel_size
        return cls(
            cells=np.zeros(resolution**3, dtype=bool),
            resolution=resolution,
            bounds_min=bounds_min,
            voxel_size=float(voxel_size),
            bounds_max=np.asarray(bounds_max, dtype=np.float64),
        )

    @property
    def occupancy(self) -> np.ndarray:
        """(r, r, r) view onto `cells`. Writes through to the flat array."""
        r = self.resolution
        return self.cells.reshape(r, r, r)

    @property
    def occupied_count(self) -> int:
        return int(np.count_nonzero(self.cells))

    def flat_index(self, x: int, y: int, z: int) -> int:
        r = self.resolution
        return (x * r + y) * r + z

    def unravel(self, flat_index: int) -> tuple[int, int, int]:
        r = self.resolution
        x, rest = divmod(int(flat_index), r * r)
        y, z = divmod(rest, r)
        return x, y, z


def compute_voxel_size(extent: np.ndarray, resolution: int) -> float:
    """Cell size so that `resolution` cells span the longest axis."""
    return float(np.max(extent)) / resolution


def validate_resolution(resolution: int) -> None:
    """Reject unusable resolutions and warn about ones outside the usual range.

    Raises:
        ValueError: If resolution is below 1.
    """
    if resolution < 1:
        raise ValueError(f"voxel resolution must be at least 1, got {resolution}")

    low, high = RECOMMENDED_RESOLUTION_RANGE
    if not low <= resolution <= high:
        message = (
            f"Voxel resolution {resolution} is outside the recommended range "
            f"[{low}, {high}]"
        )
        console_logger.warning(message)
        warnings.warn(message, ConfigurationWarning, stacklevel=3)


def rasterize_triangles(
    grid: VoxelGrid, vertices: np.ndarray, triangles: np.ndarray
) -> None:
    """Mark every cell overlapped by each triangle's bounding box.

    This is a conservative approximation: the whole clamped index range
    `[floor(min), ceil(max)]` of the triangle's axis-aligned bounding box is
    marked, which over-covers slanted triangles.

    Args:
        grid: Grid to mark in place.
        vertices: (N, 3) vertex positions in the grid's local space.
        triangles: (M, 3) vertex indices.
    """
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if len(triangles) == 0:
        return

    corners = vertices[triangles]  # (M, 3, 3)
    relative_min = (corners.min(axis=1) - grid.bounds_min) / grid.voxel_size
    relative_max = (corners.max(axis=1) - grid.bounds_min) / grid.voxel_size

    last = grid.resolution - 1
    index_min = np.clip(np.floor(relative_min), 0, last).astype(np.int64)
    index_max = np.clip(np.ceil(relative_max), 0, last).astype(np.int64)

    occupancy = grid.occupancy
    for (x0, y0, z0), (x1, y1, z1) in zip(index_min.tolist(), index_max.tolist()):
        occupancy[x0 : x1 + 1, y0 : y1 + 1, z0 : z1 + 1] = True


def fill_interior(grid: VoxelGrid) -> None:
    """Mark empty cells that cannot be reached from the grid boundary.

    Empty space is flooded from the grid's outer shell through face-adjacent
    empty cells; anything the flood does not reach is enclosed and becomes
    occupied. Occupied cells are never cleared.
    """
    before = grid.occupied_count
    filled = ndimage.binary_fill_holes(grid.occupancy)
    grid.cells[:] = filled.reshape(-1) | grid.cells
    console_logger.debug(
        f"Interior fill: {before} -> {grid.occupied_count} occupied cells"
    )


def create_voxel_grid_for_mesh(mesh: MeshData, resolution: int) -> VoxelGrid | None:
    """Rasterize a mesh into a grid spanning its own bounds and fill the interior.

    Args:
        mesh: Mesh to voxelize, typically one segment's compact sub-mesh.
        resolution: Cells along the longest bounding box axis.

    Returns:
        Filled VoxelGrid, or None when the mesh has no triangles or its
        bounds have zero extent on every axis.

    Raises:
        ValueError: If resolution is below 1.
    """
    if resolution < 1:
        raise ValueError(f"voxel resolution must be at least 1, got {resolution}")

    bounds_min, bounds_max = mesh.bounds
    voxel_size = compute_voxel_size(mesh.extent, resolution)
    if mesh.triangle_count == 0 or voxel_size <= 0.0:
        message = (
            f"Mesh '{mesh.name}' has degenerate bounds (extent={mesh.extent.tolist()}, "
            f"triangles={mesh.triangle_count}); no voxels generated"
        )
        console_logger.warning(message)
        warnings.warn(message, ConfigurationWarning, stacklevel=2)
        return None

    grid = VoxelGrid.empty(
        resolution=resolution,
        bounds_min=bounds_min,
        voxel_size=voxel_size,
        bounds_max=bounds_max,
    )
    rasterize_triangles(grid, mesh.vertices, mesh.triangles)
    console_logger.debug(
        f"Rasterized '{mesh.name}' at resolution {resolution} "
        f"(voxel_size={voxel_size:.6f}): {grid.occupied_count} occupied cells"
    )
    fill_interior(grid)
    return grid
