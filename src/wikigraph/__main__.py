"""Command line interface.

Usage:
  python -m wikigraph links "Scala (programming language)"
  python -m wikigraph distance "Scala (programming language)" "Haskell" --max-depth 3
  python -m wikigraph matrix "Scala (programming language)" "Haskell" "Java (programming language)"

Exit codes: 0 on success, 1 when a lookup reports domain errors, 2 on system
failures and configuration errors.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING, Any

from wikigraph.clients.mediawiki import MediaWikiClient
from wikigraph.config import Config
from wikigraph.errors import ConfigurationError
from wikigraph.graph import Wikigraph
from wikigraph.result import SystemFailure
from wikigraph.validated import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from wikigraph.clients.base import Wikipedia
    from wikigraph.graph import Distance
    from wikigraph.result import Outcome, WikiResult

logger = logging.getLogger(__name__)


def _open_client(config: Config) -> Wikipedia:
    return MediaWikiClient(config)


def _print_failure(cause: BaseException) -> None:
    print(f"failure: {cause}", file=sys.stderr)
    hint = getattr(cause, "hint", None)
    if hint:
        print(f"hint: {hint}", file=sys.stderr)


def _report[A](outcome: Outcome[A], render: Callable[[A], None]) -> int:
    match outcome:
        case Ok(value):
            render(value)
            return 0
        case Err(errors):
            for error in errors:
                print(f"error: {error}", file=sys.stderr)
            return 1
        case SystemFailure(cause):
            _print_failure(cause)
            return 2
    raise TypeError(f"unexpected outcome: {outcome!r}")


def _format_distance(distance: int | None) -> str:
    return "unreachable" if distance is None else str(distance)


def _print_links(names: frozenset[str]) -> None:
    for name in sorted(names):
        print(name)


def _print_matrix(rows: tuple[Distance, ...]) -> None:
    for from_title, to_title, distance in rows:
        print(f"{from_title}\t{to_title}\t{_format_distance(distance)}")


async def main_async(args: argparse.Namespace, *, config: Config) -> int:
    client = _open_client(config)
    graph = Wikigraph(client)
    try:
        if args.command == "links":
            result: WikiResult[Any] = client.search_id(args.title).flat_map(
                graph.named_links
            )
            return _report(await result, _print_links)
        if args.command == "distance":
            result = graph.distance(args.source, args.target, config.max_depth)
            return _report(await result, lambda d: print(_format_distance(d)))
        result = graph.distance_matrix(args.titles, config.max_depth)
        return _report(await result, _print_matrix)
    finally:
        aclose = getattr(client, "aclose", None)
        if callable(aclose):
            try:
                await aclose()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                # The command outcome takes precedence over cleanup errors.
                logger.warning("Client cleanup failed: %s", exc)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wikigraph",
        description="Explore distances in the Wikipedia link graph.",
    )
    parser.add_argument(
        "--api-url",
        default=None,
        help="MediaWiki api.php endpoint (default: WIKIGRAPH_API_URL or English Wikipedia)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Give up on a search beyond this many hops",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    # Searching commands also accept --max-depth after the command name.
    depth = argparse.ArgumentParser(add_help=False)
    depth.add_argument(
        "--max-depth", type=int, default=argparse.SUPPRESS, help=argparse.SUPPRESS
    )

    commands = parser.add_subparsers(dest="command", required=True)

    links = commands.add_parser("links", help="List the articles an article links to")
    links.add_argument("title")

    distance = commands.add_parser(
        "distance", parents=[depth], help="Hops from one article to another"
    )
    distance.add_argument("source")
    distance.add_argument("target")

    matrix = commands.add_parser(
        "matrix", parents=[depth], help="Distances between every pair of titles"
    )
    matrix.add_argument("titles", nargs="+")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s: %(message)s",
    )

    overrides: dict[str, Any] = {"api_url": args.api_url}
    if args.max_depth is not None:
        overrides["max_depth"] = args.max_depth
    try:
        config = Config(**overrides)
    except ConfigurationError as exc:
        _print_failure(exc)
        return 2

    return asyncio.run(main_async(args, config=config))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
