#!/usr/bin/env python
"""
Command-line interface for OSM tile grid generation

Usage:
    python cli.py generate --city berlin --provider mock --output berlin.json --png berlin.png
    python cli.py generate --bbox 52.49,13.39,52.51,13.41 --grid-resolution 1000
    python cli.py generate --provider file --input export.osm --output grid.json
    python cli.py stats --input berlin.json
    python cli.py providers
"""

import os
import sys
import json
import argparse
from datetime import datetime

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from loguru import logger

from osm_tiles.config import OSMConfig, FeatureSet, bbox, center_radius, city, load_settings
from osm_tiles.errors import OSMTilesError
from osm_tiles.export import save_png
from osm_tiles.grid import TileGrid
from osm_tiles.pipeline import TileGridPipeline
from osm_tiles.providers import available_providers, create_provider


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def parse_bbox(value: str):
    """Parse 'south,west,north,east'"""
    try:
        south, west, north, east = (float(v) for v in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected south,west,north,east, got '{value}'")
    return bbox(south, west, north, east)


def parse_center(value: str):
    """Parse 'lat,lon'"""
    try:
        lat, lon = (float(v) for v in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected lat,lon, got '{value}'")
    return lat, lon


def positive_int(value: str) -> int:
    """Parse an integer >= 1"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected an integer, got '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be >= 1, got {number}")
    return number


def build_config(args) -> OSMConfig:
    """OSMConfig from generate arguments"""
    if args.bbox:
        region = args.bbox
    elif args.center:
        region = center_radius(args.center[0], args.center[1], args.radius)
    else:
        region = city(args.city or "berlin")

    return OSMConfig(
        region=region,
        grid_resolution=args.grid_resolution,
        tile_size=args.tile_size,
        timeout_seconds=args.timeout,
        features=FeatureSet.preset(args.features),
    )


def build_provider(args):
    if args.input or args.provider == "file":
        if not args.input:
            raise OSMTilesError("--input is required for the file provider")
        return create_provider("file", file_path=args.input)
    if args.provider == "overpass":
        return create_provider("overpass", cache_dir=args.cache_dir)
    return create_provider(args.provider)


def cmd_generate(args):
    """Generate a tile grid for a region"""
    setup_logging(args.verbose)

    output_path = args.output or f"grid_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"

    try:
        load_settings()
        config = build_config(args)
        provider = build_provider(args)
        pipeline = TileGridPipeline(provider)

        result = pipeline.run(config)
        pipeline.save(result, output_path)

        stats = result.statistics
        logger.info(f"✓ Generated: {output_path}")
        logger.info(f"  Grid: {stats.dimensions[0]}x{stats.dimensions[1]} (~{stats.meters_per_tile:.1f}m per tile)")
        logger.info(f"  Coverage: {stats.coverage_ratio:.1%} of {stats.total_tiles} tiles")

        if args.png:
            save_png(result.grid, args.png, scale=args.scale)
            logger.info(f"✓ Image: {args.png}")

        # Print summary to stdout if requested
        if args.summary:
            print(json.dumps(result.summary(), indent=2))

        return 0

    except (OSMTilesError, ValueError, OSError) as e:
        logger.error(f"Failed to generate grid: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def cmd_stats(args):
    """Print statistics of a saved grid"""
    setup_logging(args.verbose)

    if not os.path.exists(args.input):
        logger.error(f"Input file not found: {args.input}")
        return 1

    try:
        grid = TileGrid.load(args.input)
    except (OSMTilesError, ValueError) as e:
        logger.error(f"Failed to load grid: {e}")
        return 1

    summary = grid.statistics().to_dict()
    summary["metadata"] = {
        "generated_at": grid.metadata.generated_at,
        "algorithm": grid.metadata.algorithm,
        "elements_processed": grid.metadata.elements_processed,
        "tiles_populated": grid.metadata.tiles_populated,
    }
    print(json.dumps(summary, indent=2))
    return 0


def cmd_providers(args):
    """List available providers and their capabilities"""
    setup_logging(args.verbose)

    for name in available_providers():
        if name == "file":
            provider = create_provider(name, file_path="")
        else:
            provider = create_provider(name)
        caps = provider.capabilities()
        network = "network" if caps.requires_network else "offline"
        formats = ", ".join(f.value for f in caps.supported_formats)
        print(f"{name:<10} {network:<8} formats: {formats:<10} {caps.notes or ''}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="OSM Tile Grid Generator CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Generate from mock data:
    python cli.py generate --city test --provider mock --output grid.json --png grid.png --scale 4

  Generate around a point via Overpass:
    python cli.py generate --center 52.52,13.405 --radius 1 --features comprehensive

  Inspect a saved grid:
    python cli.py stats --input grid.json
        """
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Generate command
    gen_parser = subparsers.add_parser("generate", parents=[common], help="Generate a tile grid for a region")
    region = gen_parser.add_mutually_exclusive_group()
    region.add_argument("--city", help="City name (geocoded)")
    region.add_argument("--bbox", type=parse_bbox, help="Bounding box: south,west,north,east")
    region.add_argument("--center", type=parse_center, help="Center point: lat,lon (use with --radius)")
    gen_parser.add_argument("--radius", type=float, default=1.0, help="Radius in km around --center")
    gen_parser.add_argument("--provider", "-p", default="overpass", choices=available_providers(),
                            help="Data provider")
    gen_parser.add_argument("--input", "-i", help="Local OSM file (implies --provider file)")
    gen_parser.add_argument("--features", "-f", default="urban",
                            choices=["urban", "transportation", "natural", "comprehensive"],
                            help="Feature preset")
    gen_parser.add_argument("--grid-resolution", type=int, default=100, help="Grid cells per degree")
    gen_parser.add_argument("--tile-size", type=float, default=10.0, help="Nominal tile size in meters")
    gen_parser.add_argument("--timeout", type=int, default=30, help="Overpass query timeout in seconds")
    gen_parser.add_argument("--output", "-o", help="Output JSON file")
    gen_parser.add_argument("--png", help="Also render the grid to this PNG file")
    gen_parser.add_argument("--scale", type=positive_int, default=1, help="Pixels per tile in the PNG")
    gen_parser.add_argument("--cache-dir", help="Cache raw Overpass responses in this directory")
    gen_parser.add_argument("--summary", "-s", action="store_true", help="Print summary to stdout")
    gen_parser.set_defaults(func=cmd_generate)

    # Stats command
    stats_parser = subparsers.add_parser("stats", parents=[common], help="Print statistics of a saved grid")
    stats_parser.add_argument("--input", "-i", required=True, help="Grid JSON file")
    stats_parser.set_defaults(func=cmd_stats)

    # Providers command
    providers_parser = subparsers.add_parser("providers", parents=[common], help="List data providers")
    providers_parser.set_defaults(func=cmd_providers)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
