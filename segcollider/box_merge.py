"""Greedy merging of occupied voxels into axis-aligned boxes."""

import logging

from dataclasses import dataclass

import numpy as np

from segcollider.voxels import VoxelGrid

console_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Box:
    """Axis-aligned box in the local frame of the segment container.

    Attributes:
        center: Box center in local space.
        size: Full edge lengths in local space.
        origin: Lowest (x, y, z) voxel index covered.
        extent: Number of voxels covered along each axis.
    """

    center: tuple[float, float, float]
    size: tuple[float, float, float]
    origin: tuple[int, int, int]
    extent: tuple[int, int, int]

    @property
    def voxel_count(self) -> int:
        return self.extent[0] * self.extent[1] * self.extent[2]

    def voxel_slices(self) -> tuple[slice, slice, slice]:
        """Index slices selecting the covered voxels of an (r, r, r) array."""
        return tuple(
            slice(start, start + length)
            for start, length in zip(self.origin, self.extent)
        )


def _grow_box(available: np.ndarray, x: int, y: int, z: int) -> tuple[int, int, int]:
    """Grow a box from (x, y, z) along x, then y, then z.

    Each step only succeeds if the entire new layer consists of available
    cells. Layers already inside the box stay available during growth, so
    testing the new layer is equivalent to testing the whole candidate box.
    """
    resolution = available.shape[0]
    size_x = size_y = size_z = 1

    while x + size_x < resolution and available[
        x + size_x, y : y + size_y, z : z + size_z
    ].all():
        size_x += 1
    while y + size_y < resolution and available[
        x : x + size_x, y + size_y, z : z + size_z
    ].all():
        size_y += 1
    while z + size_z < resolution and available[
        x : x + size_x, y : y + size_y, z + size_z
    ].all():
        size_z += 1

    return size_x, size_y, size_z


def merge_voxels_into_boxes(grid: VoxelGrid) -> list[Box]:
    """Cover the occupied cells of a grid with non-overlapping boxes.

    Cells are scanned x-major, then y, then z. Each occupied cell not yet
    covered seeds a box which is grown greedily along x, then y, then z. The
    axis order is fixed so output is reproducible. The covering is complete
    and voxel-disjoint but not guaranteed minimal.

    Args:
        grid: Filled occupancy grid. Not modified.

    Returns:
        Boxes in scan order, with centers and sizes in the grid's local space.
    """
    available = grid.occupancy.copy()
    boxes: list[Box] = []

    for flat_index in np.flatnonzero(grid.cells):
        x, y, z = grid.unravel(flat_index)
        if not available[x, y, z]:
            continue

        size_x, size_y, size_z = _grow_box(available, x, y, z)
        available[x : x + size_x, y : y + size_y, z : z + size_z] = False

        extent = np.array([size_x, size_y, size_z], dtype=np.float64)
        offset = (np.array([x, y, z]) + extent * 0.5) * grid.voxel_size
        center = grid.bounds_min + offset
        size = extent * grid.voxel_size
        boxes.append(
            Box(
                center=tuple(float(v) for v in center),
                size=tuple(float(v) for v in size),
                origin=(x, y, z),
                extent=(size_x, size_y, size_z),
            )
        )

    console_logger.debug(
        f"Merged {grid.occupied_count} occupied voxels into {len(boxes)} boxes"
    )
    return boxes
