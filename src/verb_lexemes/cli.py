"""Command-line interface for the verb lexeme tools."""

import argparse
import json
import logging
import sys
from collections.abc import Callable
from contextlib import ExitStack
from pathlib import Path
from typing import TextIO

from sqlalchemy import Connection, func, select

from verb_lexemes.clients import DEFAULT_CATEGORY, LexemeIndex, WiktionaryClient, build_session
from verb_lexemes.conjugate import PyinflectConjugator
from verb_lexemes.crawl import CrawlOrchestrator
from verb_lexemes.db import get_connection, inflections, store_inflections
from verb_lexemes.db.connection import DEFAULT_DB_PATH
from verb_lexemes.errors import InferenceError, MalformedResponseError
from verb_lexemes.exclusions import ExclusionList
from verb_lexemes.inference import InflectionSet, infer_forms_from_wikitext
from verb_lexemes.review import MAX_TILES, ReviewTaskBuilder, load_pending

logger = logging.getLogger(__name__)

DEFAULT_PENDING_PATH = Path("verbs.txt")
DEFAULT_EXCLUSIONS_PATH = Path("bad-verbs.txt")


def _configure_logging(verbose: bool) -> None:
    """Send diagnostics to stderr so stdout only carries records."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _record_storer(conn: Connection) -> Callable[[InflectionSet], None]:
    """Return a hook that stores and commits each accepted record."""

    def store(forms: InflectionSet) -> None:
        if store_inflections(conn, [forms]) == 0:
            logger.debug("%s is already stored", forms.infinitive)
        conn.commit()

    return store


def cmd_crawl(args: argparse.Namespace) -> int:
    """Crawl the category and print records for verbs missing from Wikidata."""
    session = build_session()
    wiktionary = WiktionaryClient(session)
    orchestrator = CrawlOrchestrator(
        listing=wiktionary,
        index=LexemeIndex(session),
        dictionary=wiktionary,
        exclusions=ExclusionList(args.exclusions),
    )

    with ExitStack() as stack:
        out: TextIO = sys.stdout
        if args.output:
            out = stack.enter_context(Path(args.output).open("a", encoding="utf-8"))
        on_accept: Callable[[InflectionSet], None] | None = None
        if args.database:
            conn = stack.enter_context(get_connection(args.database, create_schema=True))
            on_accept = _record_storer(conn)

        try:
            stats = orchestrator.run(out, args.category, on_accept)
        except MalformedResponseError as e:
            logger.error("Stopping crawl: %s", e)
            return 1

    for name, count in stats.as_dict().items():
        logger.info("%-20s %d", name, count)
    return 0


def cmd_infer(args: argparse.Namespace) -> int:
    """Run the inference engine on one page and print the record."""
    if args.wikitext:
        wikitext_path = Path(args.wikitext)
        if not wikitext_path.exists():
            print(f"Error: Wikitext file not found: {wikitext_path}", file=sys.stderr)
            return 1
        wikitext = wikitext_path.read_text(encoding="utf-8")
    else:
        try:
            wikitext = WiktionaryClient().fetch_wikitext(args.lemma)
        except MalformedResponseError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    try:
        forms = infer_forms_from_wikitext(args.lemma, wikitext)
    except InferenceError as e:
        print(f"{args.lemma}: {e.reason}", file=sys.stderr)
        return 1

    print(forms.to_record())
    return 0


def cmd_review_tiles(args: argparse.Namespace) -> int:
    """Print review tiles as JSON."""
    pending_path = Path(args.pending)
    if not pending_path.exists():
        print(f"Error: Pending verbs file not found: {pending_path}", file=sys.stderr)
        return 1

    try:
        pending = load_pending(pending_path)
    except ValueError as e:
        print(f"Error: {pending_path}: {e}", file=sys.stderr)
        return 1

    builder = ReviewTaskBuilder(
        pending,
        ExclusionList(args.exclusions),
        LexemeIndex(),
        PyinflectConjugator(),
    )
    try:
        tiles = builder.tiles(args.num)
    except MalformedResponseError as e:
        logger.error("Stopping: %s", e)
        return 1

    print(json.dumps({"tiles": tiles}, indent=2))
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    """Print database statistics."""
    db_path = Path(args.database)

    if not db_path.exists():
        print(f"Error: Database not found: {db_path}", file=sys.stderr)
        return 1

    with get_connection(db_path) as conn:
        total = conn.execute(select(func.count()).select_from(inflections)).scalar() or 0
        by_source = conn.execute(
            select(inflections.c.source, func.count())
            .group_by(inflections.c.source)
            .order_by(inflections.c.source)
        ).fetchall()

    print(f"Stored verbs: {total:,}")
    for source, count in by_source:
        print(f"  {source}: {count:,}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="verb-lexemes",
        description="Find English verbs missing from Wikidata and infer their forms",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # crawl subcommand
    crawl_parser = subparsers.add_parser(
        "crawl",
        help="Crawl Wiktionary for verbs without a Wikidata lexeme",
    )
    crawl_parser.add_argument(
        "--category",
        type=str,
        default=DEFAULT_CATEGORY,
        help=f"Category to crawl (default: {DEFAULT_CATEGORY})",
    )
    crawl_parser.add_argument(
        "-e",
        "--exclusions",
        type=str,
        default=str(DEFAULT_EXCLUSIONS_PATH),
        help=f"Path to the rejected verbs list (default: {DEFAULT_EXCLUSIONS_PATH})",
    )
    crawl_parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Append records to this file instead of stdout",
    )
    crawl_parser.add_argument(
        "-d",
        "--database",
        type=str,
        default=None,
        help="Also store accepted records in this SQLite database",
    )
    crawl_parser.set_defaults(func=cmd_crawl)

    # infer subcommand
    infer_parser = subparsers.add_parser(
        "infer",
        help="Infer the forms of one verb from its {{en-verb}} template",
    )
    infer_parser.add_argument("lemma", type=str, help="Verb to infer")
    infer_parser.add_argument(
        "-w",
        "--wikitext",
        type=str,
        default=None,
        help="Read the page wikitext from this file instead of Wiktionary",
    )
    infer_parser.set_defaults(func=cmd_infer)

    # review-tiles subcommand
    review_parser = subparsers.add_parser(
        "review-tiles",
        help="Build review tiles for pending verbs",
    )
    review_parser.add_argument(
        "-n",
        "--num",
        type=int,
        default=10,
        help=f"Number of tiles to build (default: 10, max: {MAX_TILES})",
    )
    review_parser.add_argument(
        "-p",
        "--pending",
        type=str,
        default=str(DEFAULT_PENDING_PATH),
        help=f"Path to the pending verbs list (default: {DEFAULT_PENDING_PATH})",
    )
    review_parser.add_argument(
        "-e",
        "--exclusions",
        type=str,
        default=str(DEFAULT_EXCLUSIONS_PATH),
        help=f"Path to the rejected verbs list (default: {DEFAULT_EXCLUSIONS_PATH})",
    )
    review_parser.set_defaults(func=cmd_review_tiles)

    # stats subcommand
    stats_parser = subparsers.add_parser(
        "stats",
        help="Show database statistics",
    )
    stats_parser.add_argument(
        "-d",
        "--database",
        type=str,
        default=str(DEFAULT_DB_PATH),
        help=f"Path to SQLite database (default: {DEFAULT_DB_PATH})",
    )
    stats_parser.set_defaults(func=cmd_stats)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
