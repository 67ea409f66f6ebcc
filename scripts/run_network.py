"""Build a people network from raw profiles and lay it out.

Reads a JSON list of raw profiles, builds the network for the configured
dimension and topology, runs the force layout until it settles, and
writes nodes (with positions), edges, legend and meta to a JSON file.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

# Add src/ to import path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from config import DIMENSIONS, MODES, PHYSICS_PRESETS, ViewportConfig, load_config
from layout import ForceSimulation, Viewport
from network import NetworkGenerator
from people import process_profiles
from util import utc_now_iso


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build and lay out a people network from raw profiles."
    )
    parser.add_argument(
        "--profiles", required=True,
        help="Path to a JSON list of raw profiles",
    )
    parser.add_argument(
        "--config", default="config/network.yaml",
        help="Path to network config YAML (default: config/network.yaml)",
    )
    parser.add_argument(
        "--output", default="data/network.json",
        help="Output JSON path (default: data/network.json)",
    )
    parser.add_argument("--dimension", choices=DIMENSIONS, default=None,
                        help="Relationship dimension (overrides config)")
    parser.add_argument("--mode", choices=MODES, default=None,
                        help="Topology mode (overrides config)")
    parser.add_argument("--top-n", type=int, default=None,
                        help="Featured groups (overrides config)")
    parser.add_argument("--max-nodes", type=int, default=None,
                        help="Max people kept (overrides config)")
    parser.add_argument("--threshold", type=float, default=None,
                        help="Pairwise strength threshold (overrides config)")
    parser.add_argument("--include-isolated", action="store_true", default=None,
                        help="Keep people with no connections")
    parser.add_argument("--preset", choices=sorted(PHYSICS_PRESETS), default=None,
                        help="Physics preset (overrides config physics)")
    parser.add_argument("--width", type=float, default=None, help="Viewport width")
    parser.add_argument("--height", type=float, default=None, help="Viewport height")
    parser.add_argument(
        "--ticks", type=int, default=None,
        help="Max layout ticks (default: run until settled)",
    )
    return parser


def apply_overrides(config, args):
    """Merge command-line overrides into a loaded config."""
    overrides = {}
    for name in ("dimension", "mode", "top_n", "max_nodes", "threshold", "include_isolated"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.width is not None or args.height is not None:
        overrides["viewport"] = ViewportConfig(
            width=args.width if args.width is not None else config.viewport.width,
            height=args.height if args.height is not None else config.viewport.height,
        )
    return replace(config, **overrides).clamped()


def main(argv: Optional[list[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    profiles_path = Path(args.profiles)
    if not profiles_path.exists():
        print(f"Profiles file not found: {profiles_path}", file=sys.stderr)
        return 1

    try:
        config = apply_overrides(load_config(Path(args.config), preset=args.preset), args)
    except ValueError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    try:
        with open(profiles_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        processed = process_profiles(raw)
    except ValueError as e:
        print(f"Invalid profiles file {profiles_path}: {e}", file=sys.stderr)
        return 1

    errors = processed.stats.processing_errors
    if errors:
        print(f"[people] Skipped {len(errors)} record(s):", file=sys.stderr)
        for error in errors[:10]:
            print(f"    {error['employee']}: {error['error']}", file=sys.stderr)

    result = NetworkGenerator(processed.people).generate(config)

    simulation = ForceSimulation(
        result.nodes,
        result.edges,
        physics=config.physics,
        viewport=Viewport.from_config(config.viewport),
    )
    ticks = simulation.run(max_ticks=args.ticks)
    positions = simulation.positions()

    data = result.to_dict()
    for node in data["elements"]["nodes"]:
        x, y = positions[node["data"]["id"]]
        node["position"] = {"x": round(x, 2), "y": round(y, 2)}

    data["meta"].update({
        "exportedAt": utc_now_iso(),
        "nodeCount": len(result.nodes),
        "edgeCount": len(result.edges),
        "layout": {
            "ticks": ticks,
            "status": simulation.status.value,
            "alpha": simulation.alpha,
            "width": config.viewport.width,
            "height": config.viewport.height,
            "physics": config.physics.to_dict(),
        },
        "processing": processed.stats.to_dict(),
    })

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    meta = result.metadata
    print(
        f"Built {meta['mode']} {meta['dimension']} network: "
        f"{meta['total_entities']} people, {meta['total_groups']} groups, "
        f"{meta['total_edges']} edges (avg degree {meta['average_degree']:.2f})"
    )
    if "isolated_count" in meta:
        print(f"  Isolated people: {meta['isolated_count']}")
    print(f"  Layout: {ticks} ticks, {simulation.status.value}")
    print("  Legend:")
    for entry in result.legend:
        print(f"    {entry.color} {entry.label} ({entry.count})")
    print(f"Wrote {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
