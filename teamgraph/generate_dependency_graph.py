#!/usr/bin/env python3
"""
Team Dependency Graph Generator

Fetches the outbound and inbound epic dependency snapshots for a PI, builds the
weighted team graph, lays it out and writes a self-contained HTML dashboard
(optionally also the JSON render payload).

Usage:
    python -m teamgraph.generate_dependency_graph --pi Q32025
    python -m teamgraph.generate_dependency_graph --pi Q32025 --layout circular --json .tmp/graph.json
    python -m teamgraph.generate_dependency_graph --list-pis

Exit codes:
    0 - success
    1 - configuration or fetch failure
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from teamgraph.collectors.dependency_collector import AsyncDependencyCollector
from teamgraph.core.logging_config import get_logger, setup_logging
from teamgraph.dashboards.renderer import render_dependency_graph_html, to_render_payload
from teamgraph.domain.dependency import LayoutMode, ZeroMagnitudePolicy
from teamgraph.graph.pipeline import DependencyGraphResult, build_team_dependency_graph
from teamgraph.secure_config import ConfigurationError, get_config, validate_config_on_startup
from teamgraph.utils.error_handling import FetchError, log_and_raise

logger = get_logger(__name__)

DEFAULT_OUTPUT_DIR = Path(".tmp")


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Generate the team dependency graph dashboard for a PI")
    parser.add_argument("--pi", type=str, default=None, help="Program increment to graph, e.g. Q32025")
    parser.add_argument(
        "--layout",
        choices=[mode.value for mode in LayoutMode],
        default=None,
        help="Layout strategy (default: GRAPH_LAYOUT_MODE or hierarchical)",
    )
    parser.add_argument(
        "--zero-magnitude",
        choices=[policy.value for policy in ZeroMagnitudePolicy],
        default=None,
        help="Treatment of zero-magnitude rows (default: GRAPH_ZERO_MAGNITUDE_POLICY or floor_at_one)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to output HTML file (default: .tmp/team_dependency_graph_<PI>.html)",
    )
    parser.add_argument("--json", type=Path, default=None, help="Also write the render payload as JSON")
    parser.add_argument(
        "--watch-team", action="append", default=[], help="Log the edges touching this team (repeatable)"
    )
    parser.add_argument("--list-pis", action="store_true", help="Print the PIs known to the backend and exit")
    parser.add_argument("--log-level", type=str, default=None, help="Log level (default: LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def _write_output(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        log_and_raise(logger, e, {"path": str(path)}, "Output write")


def default_output_path(pi: str | None) -> Path:
    return DEFAULT_OUTPUT_DIR / f"team_dependency_graph_{pi or 'current'}.html"


async def generate_dependency_graph(
    collector: AsyncDependencyCollector,
    pi: str | None,
    layout_mode: LayoutMode,
    zero_magnitude_policy: ZeroMagnitudePolicy,
    output_file: Path,
    json_file: Path | None = None,
    watch_teams: tuple[str, ...] = (),
) -> DependencyGraphResult:
    """
    Fetch, build and write the dashboard.

    Raises:
        FetchError: If either dependency collection could not be retrieved
    """
    snapshot = await collector.fetch_dependencies(pi)

    result = build_team_dependency_graph(
        snapshot.outbound,
        snapshot.inbound,
        layout_mode=layout_mode,
        zero_magnitude_policy=zero_magnitude_policy,
        watch_teams=watch_teams,
    )
    if result.is_empty:
        logger.warning(f"No team dependencies found for PI {pi or '(default)'}")

    payload = to_render_payload(result.graph, result.positioned)
    html = render_dependency_graph_html(payload, {"pi": pi, "layout_mode": layout_mode.value})

    _write_output(output_file, html)
    logger.info(f"Dashboard written to {output_file}")

    if json_file is not None:
        _write_output(json_file, json.dumps(payload, indent=2))
        logger.info(f"Render payload written to {json_file}")

    return result


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging(level=args.log_level)

    try:
        validate_config_on_startup(["api", "graph"])
        settings = get_config().get_graph_settings()
        collector = AsyncDependencyCollector()

        if args.list_pis:
            for pi in asyncio.run(collector.fetch_available_pis()):
                print(pi)
            return 0

        layout_mode = LayoutMode(args.layout) if args.layout else settings.layout_mode
        policy = ZeroMagnitudePolicy(args.zero_magnitude) if args.zero_magnitude else settings.zero_magnitude_policy
        output_file = args.output or default_output_path(args.pi)

        result = asyncio.run(
            generate_dependency_graph(
                collector,
                args.pi,
                layout_mode,
                policy,
                output_file,
                json_file=args.json,
                watch_teams=tuple(args.watch_team),
            )
        )
    except ConfigurationError as e:
        print(f"\n[FAIL] Configuration error: {e}", file=sys.stderr)
        return 1
    except FetchError as e:
        print(f"\n[FAIL] Could not fetch team dependencies: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"\n[FAIL] Could not write output: {e}", file=sys.stderr)
        return 1

    print("\n[OK] Team dependency graph generated")
    print(f"  Teams: {len(result.graph.nodes)}  Edges: {len(result.graph.edges)}")
    print(f"  Location: {output_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
