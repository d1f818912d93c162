"""Configuration for collider generation runs."""

from dataclasses import dataclass
from pathlib import Path

from omegaconf import DictConfig

from segcollider.pipeline import (
    DEFAULT_VERTEX_LIMIT_PER_COLLIDER,
    DEFAULT_VOXEL_RESOLUTION,
)
from segcollider.segmentation import SegmentIdPolicy

VALID_MODES = ("exact", "voxel", "both")


@dataclass
class ColliderConfig:
    """Options recognized by the collider pipelines and the exporter."""

    use_part_id: bool = True
    """Read segment ids from UV2.x (part id) if True, else UV2.y (material id)."""

    vertex_limit_per_collider: int = DEFAULT_VERTEX_LIMIT_PER_COLLIDER
    """Maximum distinct vertices per exact collider mesh."""

    voxel_resolution: int = DEFAULT_VOXEL_RESOLUTION
    """Voxel cells along each segment's longest axis. 10-500 is recommended."""

    segment_id_policy: SegmentIdPolicy = SegmentIdPolicy.TRUNCATE
    """Id derivation used by the exact pipeline."""

    voxel_segment_id_policy: SegmentIdPolicy = SegmentIdPolicy.ROUND_NEAREST
    """Id derivation used by the voxel pipeline."""

    disable_original_renderer: bool = True
    """Passed through to the host; the pipelines do not read it."""

    mode: str = "exact"
    """Which pipelines to run: "exact", "voxel" or "both"."""

    def __post_init__(self) -> None:
        """Validate configuration values."""
        self.segment_id_policy = SegmentIdPolicy(self.segment_id_policy)
        self.voxel_segment_id_policy = SegmentIdPolicy(self.voxel_segment_id_policy)

        if self.vertex_limit_per_collider < 1:
            raise ValueError(
                f"vertex_limit_per_collider must be positive, got "
                f"{self.vertex_limit_per_collider}"
            )
        if self.voxel_resolution < 1:
            raise ValueError(
                f"voxel_resolution must be at least 1, got {self.voxel_resolution}"
            )
        if self.mode not in VALID_MODES:
            raise ValueError(f"mode must be one of {VALID_MODES}, got '{self.mode}'")

    @property
    def run_exact(self) -> bool:
        return self.mode in ("exact", "both")

    @property
    def run_voxel(self) -> bool:
        return self.mode in ("voxel", "both")

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "ColliderConfig":
        """Create config from Hydra/OmegaConf nested structure.

        Args:
            cfg: Collider config subtree (cfg.colliders).

        Returns:
            ColliderConfig instance.
        """
        return cls(
            use_part_id=bool(cfg.use_part_id),
            vertex_limit_per_collider=int(cfg.vertex_limit_per_collider),
            voxel_resolution=int(cfg.voxel_resolution),
            segment_id_policy=cfg.segment_id_policy,
            voxel_segment_id_policy=cfg.voxel_segment_id_policy,
            disable_original_renderer=bool(cfg.disable_original_renderer),
            mode=str(cfg.mode),
        )


@dataclass
class InputConfig:
    """Location of the source mesh and its optional segment channel sidecar."""

    mesh_path: Path
    """Path to any mesh file trimesh can load."""

    segment_uv_path: Path | None = None
    """Optional .npy file holding the (N, 2) secondary UV channel."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        self.mesh_path = Path(self.mesh_path)
        if self.segment_uv_path is not None:
            self.segment_uv_path = Path(self.segment_uv_path)

        if not self.mesh_path.exists():
            raise FileNotFoundError(f"Input mesh does not exist: {self.mesh_path}")
        if self.segment_uv_path is not None and not self.segment_uv_path.exists():
            raise FileNotFoundError(
                f"Segment UV file does not exist: {self.segment_uv_path}"
            )

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "InputConfig":
        """Create config from the input subtree (cfg.input)."""
        segment_uv_path = cfg.get("segment_uv_path")
        return cls(
            mesh_path=Path(cfg.mesh_path),
            segment_uv_path=Path(segment_uv_path) if segment_uv_path else None,
        )
