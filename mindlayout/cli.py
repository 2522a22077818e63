#!/usr/bin/env python3
"""
MindLayout CLI

Command-line interface for the mind-map layout engine.

Usage:
    mindlayout generate <tree.json> [options]
    mindlayout relayout <graph.json> [options]
    mindlayout check <graph.json> [options]
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, Optional

from .api.engine import LayoutEngine, LayoutResult
from .errors import LayoutError
from .graph.abstraction import Graph
from .graph.io import read_json, write_json
from .profiles import get_profile, list_profiles, load_profile
from .styles import StyleTable, get_style_table
from .validation.graph_checks import check_graph

logger = logging.getLogger(__name__)


def build_engine(args) -> LayoutEngine:
    """Profile (named, then YAML overrides) plus style table from CLI options."""
    profile = get_profile(args.profile)
    if args.config:
        profile = load_profile(args.config, base=profile)
    styles = StyleTable(args.styles) if args.styles else get_style_table()
    return LayoutEngine(profile=profile, styles=styles)


def emit_result(result: LayoutResult, output: Optional[str]) -> int:
    """Write a successful envelope to a file or stdout; errors go to stderr."""
    if not result.ok:
        print(json.dumps(result.to_dict(), indent=2), file=sys.stderr)
        return 1
    if output:
        path = write_json(result.envelope, output)
        metadata = result.envelope["metadata"]
        print(f"Wrote {metadata['totalNodes']} nodes, {metadata['totalEdges']} edges to {path}")
    else:
        print(json.dumps(result.envelope, indent=2))
    return 0


def emit_error(error: LayoutError) -> int:
    print(json.dumps(LayoutResult.failure(error).to_dict(), indent=2), file=sys.stderr)
    return 1


def _rule_overrides(args) -> Dict[str, Any]:
    rules = {
        "headlinePlacement": args.headline_placement,
        "sectionArrangement": args.section_arrangement,
        "detailsDisplay": args.details_display,
        "primaryLayout": args.primary_layout,
    }
    return {k: v for k, v in rules.items() if v is not None}


def _relaxation_overrides(args) -> Dict[str, Any]:
    overrides = {
        "iterations": args.iterations,
        "repulsion": args.repulsion,
        "attraction": args.attraction,
        "damping": args.damping,
        "min_separation": args.min_separation,
        "repulsion_cutoff": args.repulsion_cutoff,
    }
    return {k: v for k, v in overrides.items() if v is not None}


def cmd_generate(args) -> int:
    """Lay out a semantic tree."""
    try:
        engine = build_engine(args)
        payload = read_json(args.tree)
    except LayoutError as e:
        return emit_error(e)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = engine.generate(payload, rules=_rule_overrides(args), relax=args.relax)
    return emit_result(result, args.output)


def cmd_relayout(args) -> int:
    """Relax and repack an existing graph."""
    try:
        engine = build_engine(args)
        payload = read_json(args.graph)
    except LayoutError as e:
        return emit_error(e)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = engine.relayout(payload, overrides=_relaxation_overrides(args))
    return emit_result(result, args.output)


def cmd_check(args) -> int:
    """Validate a positioned graph and print a report."""
    try:
        engine = build_engine(args)
        graph = Graph.from_dict(read_json(args.graph), engine.styles)
    except LayoutError as e:
        return emit_error(e)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    margin = args.margin if args.margin is not None else engine.profile.packer.margin
    report = check_graph(graph, margin=margin)
    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(report.summary())
    return 0 if report.passed else 1


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="MindLayout - Mind-Map Layout Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mindlayout generate analysis.json -o canvas.json
  mindlayout generate analysis.json --headline-placement vertical --details-display satellite
  mindlayout relayout canvas.json --iterations 100 --profile spacious
  mindlayout check canvas.json
        """,
    )

    parser.add_argument('--version', action='version', version='mindlayout 0.1.0')

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--profile', default='default', choices=list_profiles(),
                        help='Layout profile (default: default)')
    common.add_argument('--config', help='YAML file overriding profile settings')
    common.add_argument('--styles', help='YAML node style table')
    common.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Generate command
    generate_parser = subparsers.add_parser('generate', parents=[common],
                                            help='Lay out a semantic tree')
    generate_parser.add_argument('tree', help='Path to semantic tree JSON')
    generate_parser.add_argument('-o', '--output', help='Output file path (default: stdout)')
    generate_parser.add_argument('--headline-placement',
                                 help='circular, horizontal, vertical or chronological')
    generate_parser.add_argument('--section-arrangement', help='hierarchical, radial or grouped')
    generate_parser.add_argument('--details-display', help='nested, satellite or expandable')
    generate_parser.add_argument('--primary-layout', help='Strategy name recorded in metadata')
    generate_parser.add_argument('--relax', action='store_true',
                                 help='Run force-directed relaxation after generation')

    # Relayout command
    relayout_parser = subparsers.add_parser('relayout', parents=[common],
                                            help='Relax and repack an existing graph')
    relayout_parser.add_argument('graph', help='Path to graph JSON')
    relayout_parser.add_argument('-o', '--output', help='Output file path (default: stdout)')
    relayout_parser.add_argument('--iterations', type=int, help='Relaxation iterations (default: 50)')
    relayout_parser.add_argument('--repulsion', type=float, help='Repulsion strength (default: 5000)')
    relayout_parser.add_argument('--attraction', type=float, help='Attraction strength (default: 0.1)')
    relayout_parser.add_argument('--damping', type=float, help='Damping factor (default: 0.8)')
    relayout_parser.add_argument('--min-separation', type=float,
                                 help='Minimum centre distance (default: 100)')
    relayout_parser.add_argument('--repulsion-cutoff', type=float,
                                 help='Use grid repulsion ignoring pairs beyond this distance')

    # Check command
    check_parser = subparsers.add_parser('check', parents=[common],
                                         help='Validate a positioned graph')
    check_parser.add_argument('graph', help='Path to graph JSON')
    check_parser.add_argument('--margin', type=float,
                              help='Containment margin (default: profile packer margin)')
    check_parser.add_argument('--json', action='store_true', help='Print report as JSON')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Dispatch command
    commands = {
        'generate': cmd_generate,
        'relayout': cmd_relayout,
        'check': cmd_check,
    }

    return commands[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
