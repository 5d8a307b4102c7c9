"""Command line for inspecting the knowledge graph.

Provides subcommands for checking server health, searching facts and
listing recent episodes.
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict

from .client import GraphClient
from .config import PluginConfig, config_from_env, load_config
from .exceptions import GraphClientError


def _get_config() -> PluginConfig:
    """Load config from disk with environment overrides."""
    return config_from_env(load_config())


def _get_client(config: PluginConfig) -> GraphClient:
    return GraphClient(config.url, config.group_id, token=config.token)


async def cmd_status(args: argparse.Namespace, config: PluginConfig, client: GraphClient) -> int:
    """Check server health."""
    ok = await client.healthy()
    if not ok:
        print("❌ Graphiti unreachable")
        return 1

    print("✅ Graphiti is healthy")
    print(f"  URL: {config.url}")
    print(f"  Group: {config.group_id}")
    return 0


async def cmd_search(args: argparse.Namespace, config: PluginConfig, client: GraphClient) -> int:
    """Search the knowledge graph."""
    try:
        facts = await client.search(args.query, args.limit)
    except GraphClientError as e:
        print(f"Error: {e}")
        return 1

    if not facts:
        print("No facts found.")
        return 0

    for fact in facts:
        print(f"• {fact.name}: {fact.fact}")
    return 0


async def cmd_episodes(args: argparse.Namespace, config: PluginConfig, client: GraphClient) -> int:
    """List recent episodes as JSON."""
    episodes = await client.episodes(args.limit)
    print(json.dumps([asdict(ep) for ep in episodes], indent=2, ensure_ascii=False))
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="graphiti-memory",
        description="Graphiti knowledge graph commands",
    )

    subparsers = parser.add_subparsers(dest="command", help="Sub-command help")

    subparsers.add_parser("status", help="Check Graphiti server health")

    search_parser = subparsers.add_parser("search", help="Search the knowledge graph")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument(
        "-n", "--limit",
        type=int,
        default=10,
        help="Max results (default: 10)",
    )

    episodes_parser = subparsers.add_parser("episodes", help="List recent episodes")
    episodes_parser.add_argument(
        "-n", "--limit",
        type=int,
        default=10,
        help="How many (default: 10)",
    )

    return parser


def run_cli(argv: list[str] | None = None, client: GraphClient | None = None) -> int:
    """Run the CLI with given arguments.

    Args:
        argv: Command-line arguments. Uses sys.argv[1:] if None.
        client: Client to use instead of one built from config.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "status": cmd_status,
        "search": cmd_search,
        "episodes": cmd_episodes,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    config = _get_config()
    return asyncio.run(handler(args, config, client or _get_client(config)))


if __name__ == "__main__":
    sys.exit(run_cli())
