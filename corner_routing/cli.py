"""
Command-Line Interface

Resolve one corner-aware route through a mesh scene and print the result
as JSON.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional, Tuple

from route_policies import NavigationProfile, RouterPolicy
from .ops.graph_build import GraphManager
from .ops.pathfinding.resolve import resolve_route
from .spatial.mesh_world import MeshWorld
from .spatial.query_cache import CollisionQueries


def parse_point(text: str) -> Tuple[float, float, float]:
    """Parse an ``x,y,z`` argument."""
    parts = text.split(",")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected x,y,z, got {text!r}")
    try:
        return tuple(float(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected numeric x,y,z, got {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="corner-route",
        description="Corner Routing - resolve an audio route around occluders in a mesh scene",
    )
    parser.add_argument(
        "--mesh", "-m",
        type=str,
        required=True,
        help="Path to a scene mesh (any format trimesh loads)",
    )
    parser.add_argument(
        "--origin",
        type=parse_point,
        required=True,
        help="Source position as x,y,z",
    )
    parser.add_argument(
        "--target",
        type=parse_point,
        required=True,
        help="Listener position as x,y,z",
    )
    parser.add_argument(
        "--profile",
        type=str,
        choices=[p.value for p in NavigationProfile],
        default=None,
        help="Navigation profile (default: from policy, else CUSTOM)",
    )
    parser.add_argument(
        "--policy",
        type=str,
        default=None,
        help="Path to a RouterPolicy JSON file",
    )
    parser.add_argument(
        "--probe-radius",
        type=float,
        default=0.25,
        help="Clearance radius for point probes in meters (default: 0.25)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    return parser


def load_policy(path: Optional[str], profile: Optional[str]) -> RouterPolicy:
    policy = RouterPolicy()
    if path is not None:
        with open(path, "r", encoding="utf-8") as fh:
            policy = RouterPolicy.from_dict(json.load(fh))
    if profile is not None:
        policy.profile = NavigationProfile(profile)
    policy.require_valid()
    return policy.effective()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        policy = load_policy(args.policy, args.profile)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    world = MeshWorld.from_file(args.mesh, probe_radius=args.probe_radius)
    queries = CollisionQueries(world)
    manager = GraphManager(policy.graph)

    result = resolve_route(
        args.origin,
        args.target,
        queries,
        policy,
        graph_manager=manager,
    )

    output = result.to_dict()
    if manager.last_report is not None:
        output["graph"] = manager.last_report.to_dict()
    print(json.dumps(output, indent=2, default=str))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
