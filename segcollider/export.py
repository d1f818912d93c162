"""Hand-off of collider results to a host as files on disk.

Exact colliders are written as one OBJ per chunk. Voxel colliders are written
as an SDF model with one link per segment and one box collision per merged
box. Both write a `manifest.json` that tags every object with its segment id,
which is what a contact detector reads back at runtime.
"""

import json
import logging
import shutil
import xml.etree.ElementTree as ET

from pathlib import Path
from typing import Any

from segcollider.box_merge import Box
from segcollider.naming import (
    UNTAGGED_SEGMENT_ID,
    chunk_object_name,
    collider_container_name,
    voxel_box_name,
    voxel_segment_container_name,
)
from segcollider.submesh import CompactSubMesh

console_logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


def _prepare_container_dir(output_dir: Path, container_name: str) -> Path:
    # A new run replaces the previous container.
    container_dir = output_dir / container_name
    if container_dir.exists():
        console_logger.info(f"Replacing existing collider container: {container_dir}")
        shutil.rmtree(container_dir)
    container_dir.mkdir(parents=True)
    return container_dir


def _write_manifest(container_dir: Path, manifest: dict[str, Any]) -> Path:
    manifest_path = container_dir / MANIFEST_FILENAME
    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)
    return manifest_path


def export_exact_colliders(
    colliders: dict[int, list[CompactSubMesh]],
    output_dir: Path,
    use_part_id: bool = True,
    disable_original_renderer: bool = True,
) -> Path:
    """Write exact collider meshes and their manifest.

    Args:
        colliders: Result of `generate_exact_colliders`.
        output_dir: Directory in which the container directory is created.
        use_part_id: Selects the container name (part vs material).
        disable_original_renderer: Recorded in the manifest for the host.

    Returns:
        Path to the container directory.
    """
    container_name = collider_container_name(use_part_id, voxel=False)
    container_dir = _prepare_container_dir(output_dir, container_name)

    objects = []
    for segment_id in sorted(colliders):
        submeshes = colliders[segment_id]
        for submesh in submeshes:
            object_name = chunk_object_name(
                segment_id, submesh.chunk_index, len(submeshes)
            )
            mesh_filename = f"{object_name}.obj"
            submesh.mesh.to_trimesh().export(container_dir / mesh_filename)
            objects.append(
                {
                    "name": object_name,
                    "segment_id": segment_id,
                    "mesh": mesh_filename,
                    "mesh_name": submesh.name,
                    "vertex_count": submesh.vertex_count,
                    "triangle_count": submesh.mesh.triangle_count,
                    "wide_indices": submesh.uses_wide_indices,
                    "convex": False,
                }
            )

    _write_manifest(
        container_dir,
        {
            "container": container_name,
            "type": "exact",
            "disable_original_renderer": disable_original_renderer,
            "untagged_segment_id": UNTAGGED_SEGMENT_ID,
            "objects": objects,
        },
    )
    console_logger.info(f"Exported {len(objects)} exact colliders to {container_dir}")
    return container_dir


def build_voxel_collider_sdf(
    boxes_by_segment: dict[int, list[Box]], model_name: str
) -> ET.Element:
    """Build an SDF model element holding one box collision per merged box.

    Box poses are the local-space box centers; rotations are always zero.
    """
    sdf = ET.Element("sdf", version="1.7")
    model = ET.SubElement(sdf, "model", name=model_name)
    ET.SubElement(model, "static").text = "true"

    for segment_id in sorted(boxes_by_segment):
        link = ET.SubElement(
            model, "link", name=voxel_segment_container_name(segment_id)
        )
        for i, box in enumerate(boxes_by_segment[segment_id]):
            collision = ET.SubElement(
                link, "collision", name=voxel_box_name(segment_id, i)
            )
            pose = ET.SubElement(collision, "pose")
            pose.text = " ".join(f"{v:.6f}" for v in box.center) + " 0 0 0"
            geometry = ET.SubElement(collision, "geometry")
            box_elem = ET.SubElement(geometry, "box")
            ET.SubElement(box_elem, "size").text = " ".join(
                f"{v:.6f}" for v in box.size
            )

    ET.indent(sdf, space="  ", level=0)
    return sdf


def export_voxel_colliders(
    boxes_by_segment: dict[int, list[Box]],
    output_dir: Path,
    use_part_id: bool = True,
    disable_original_renderer: bool = True,
) -> Path:
    """Write voxel box colliders as an SDF model plus a manifest.

    Args:
        boxes_by_segment: Result of `generate_voxel_colliders`.
        output_dir: Directory in which the container directory is created.
        use_part_id: Selects the container name (part vs material).
        disable_original_renderer: Recorded in the manifest for the host.

    Returns:
        Path to the container directory.
    """
    container_name = collider_container_name(use_part_id, voxel=True)
    container_dir = _prepare_container_dir(output_dir, container_name)

    sdf = build_voxel_collider_sdf(boxes_by_segment, model_name=container_name)
    sdf_path = container_dir / f"{container_name}.sdf"
    ET.ElementTree(sdf).write(sdf_path, encoding="utf-8", xml_declaration=True)

    segments = [
        {
            "name": voxel_segment_container_name(segment_id),
            "segment_id": segment_id,
            "box_count": len(boxes_by_segment[segment_id]),
            "boxes": [
                {"center": list(box.center), "size": list(box.size)}
                for box in boxes_by_segment[segment_id]
            ],
        }
        for segment_id in sorted(boxes_by_segment)
    ]
    _write_manifest(
        container_dir,
        {
            "container": container_name,
            "type": "voxel",
            "sdf": sdf_path.name,
            "disable_original_renderer": disable_original_renderer,
            "untagged_segment_id": UNTAGGED_SEGMENT_ID,
            "segments": segments,
        },
    )
    console_logger.info(
        f"Exported {sum(s['box_count'] for s in segments)} voxel boxes for "
        f"{len(segments)} segments to {sdf_path}"
    )
    return container_dir
