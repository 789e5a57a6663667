"""
Build the bounding planes of a mesh

Every distinct convex hull facet of the input mesh becomes a finite quad
covering the mesh's bounding box, written as plane_000.obj, plane_001.obj, ...
"""

import argparse
import logging
import sys
from pathlib import Path

from clipping_planes.hull import bounding_planes
from clipping_planes.types.config import PlaneConfig
from clipping_planes.types.mesh import Mesh
from clipping_planes.types.plane import Plane

logger = logging.getLogger(__name__)


def write_planes(planes: list[Plane], output_dir: Path, prefix: str = "plane") -> list[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for index, plane in enumerate(planes):
        path = output_dir / f"{prefix}_{index:03d}.obj"
        plane.save_to_file(path)
        paths.append(path)
    return paths


def process_mesh(input_path: Path, output_dir: Path, config: PlaneConfig) -> list[Path]:
    mesh = Mesh.from_obj(input_path)
    logger.info(f"Loaded {input_path}: {len(mesh.points)} vertices, {len(mesh.triangles)} faces")
    bbox = mesh.bounding_box
    logger.info(f"Bounding box: x={bbox.x_start}:{bbox.x_end}, y={bbox.y_start}:{bbox.y_end}, z={bbox.z_start}:{bbox.z_end}")

    planes = bounding_planes(mesh, config)
    paths = write_planes(planes, output_dir)
    logger.info(f"Wrote {len(paths)} planes to {output_dir}")
    return paths


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description='Write the convex hull bounding planes of an OBJ mesh')
    parser.add_argument('input', type=str, help='Input OBJ mesh')
    parser.add_argument('output_dir', type=str, help='Output directory for plane OBJ files')
    parser.add_argument('--padding', type=float, default=PlaneConfig.padding_distance,
                        help='Outward padding applied around the bounding box')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    try:
        config = PlaneConfig(padding_distance=args.padding)
        process_mesh(Path(args.input), Path(args.output_dir), config)
    except (ValueError, OSError) as e:
        logger.error(f"Processing failed: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
