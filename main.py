"""
Main file for the project. Generates segment colliders for one source mesh.
"""

import logging
import os
import time

from datetime import timedelta
from pathlib import Path

import hydra

from omegaconf import DictConfig, OmegaConf

from segcollider.config import ColliderConfig, InputConfig
from segcollider.export import export_exact_colliders, export_voxel_colliders
from segcollider.mesh_loading import load_source_mesh
from segcollider.pipeline import generate_exact_colliders, generate_voxel_colliders
from segcollider.utils.logging import FileLoggingContext

console_logger = logging.getLogger(__name__)


def run_local(cfg: DictConfig):
    start_time = time.time()

    OmegaConf.resolve(cfg)
    output_dir = Path(cfg.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    with FileLoggingContext(log_file_path=output_dir / "colliders.log"):
        console_logger.info(f"Outputs will be saved to: {output_dir}")

        resolved_config_yaml = OmegaConf.to_yaml(cfg)
        console_logger.info("Resolved configuration:\n" + resolved_config_yaml)
        with open(output_dir / "resolved_config.yaml", "w") as f:
            f.write(resolved_config_yaml)

        input_cfg = InputConfig.from_config(cfg.input)
        collider_cfg = ColliderConfig.from_config(cfg.colliders)

        mesh = load_source_mesh(
            mesh_path=input_cfg.mesh_path, segment_uv_path=input_cfg.segment_uv_path
        )

        # Run every requested pipeline before writing anything, so a failure
        # leaves no partial output behind.
        exact_colliders = None
        voxel_colliders = None
        if collider_cfg.run_exact:
            exact_colliders = generate_exact_colliders(
                mesh=mesh,
                use_part_id=collider_cfg.use_part_id,
                vertex_limit=collider_cfg.vertex_limit_per_collider,
                id_policy=collider_cfg.segment_id_policy,
            )
        if collider_cfg.run_voxel:
            voxel_colliders = generate_voxel_colliders(
                mesh=mesh,
                use_part_id=collider_cfg.use_part_id,
                resolution=collider_cfg.voxel_resolution,
                id_policy=collider_cfg.voxel_segment_id_policy,
            )

        if exact_colliders is not None:
            export_exact_colliders(
                colliders=exact_colliders,
                output_dir=output_dir,
                use_part_id=collider_cfg.use_part_id,
                disable_original_renderer=collider_cfg.disable_original_renderer,
            )
        if voxel_colliders is not None:
            export_voxel_colliders(
                boxes_by_segment=voxel_colliders,
                output_dir=output_dir,
                use_part_id=collider_cfg.use_part_id,
                disable_original_renderer=collider_cfg.disable_original_renderer,
            )

        console_logger.info(
            f"Collider generation completed in "
            f"{timedelta(seconds=time.time() - start_time)}"
        )


@hydra.main(version_base=None, config_path="configurations", config_name="config")
def run(cfg: DictConfig):
    # Configure logging level from LOGLEVEL environment variable.
    log_level = os.environ.get("LOGLEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    run_local(cfg)


if __name__ == "__main__":
    run()
