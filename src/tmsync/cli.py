"""tmsync command line.

Usage:
    tmsync import-team 131
    tmsync import-player 28003 --no-update
    tmsync import-competition GB1 --standings
    tmsync update-all --kind player --kind team
    tmsync squad 4
    tmsync search clubs "Barcelona"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from tmsync.utils.runtime import describe_runtime, validate_runtime

logger = logging.getLogger("tmsync")

KINDS = ("player", "team", "competition")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmsync",
        description="Import Transfermarkt data into the local catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Import a club and its current squad
  tmsync import-team 131

  # Import a player only if not already in the catalog
  tmsync import-player 28003 --no-update

  # Refresh everything that was imported before
  tmsync update-all
        """,
    )
    parser.add_argument("--db-path", help="SQLite database path (default: from settings)")
    parser.add_argument("--base-url", help="Transfermarkt API base URL (default: from settings)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--version", action="version", version=describe_runtime())

    sub = parser.add_subparsers(dest="command", required=True)

    team = sub.add_parser("import-team", help="Import a team by Transfermarkt id")
    team.add_argument("id")
    team.add_argument("--no-update", dest="update", action="store_false",
                      help="Leave the team alone if it is already imported")
    team.add_argument("--no-squad", dest="squad", action="store_false",
                      help="Do not import the team's players")

    player = sub.add_parser("import-player", help="Import a player by Transfermarkt id")
    player.add_argument("id")
    player.add_argument("--no-update", dest="update", action="store_false",
                        help="Leave the player alone if it is already imported")

    competition = sub.add_parser("import-competition", help="Import a competition by Transfermarkt id")
    competition.add_argument("id")
    competition.add_argument("--no-update", dest="update", action="store_false",
                             help="Leave the competition alone if it is already imported")
    competition.add_argument("--standings", action="store_true",
                             help="Also store the competition's club list")

    update = sub.add_parser("update-all", help="Re-import every stored entity")
    update.add_argument("--kind", action="append", choices=KINDS,
                        help="Restrict to a kind (repeatable; default: enabled in settings)")

    squad = sub.add_parser("squad", help="Show a team's squad and import status")
    squad.add_argument("team_id", type=int, help="Catalog id of the team")

    top = sub.add_parser("import-top-players", help="Import the most valuable players")
    top.add_argument("--limit", type=int, default=10)

    search = sub.add_parser("search", help="Search the Transfermarkt API")
    search.add_argument("what", choices=("players", "clubs", "competitions"))
    search.add_argument("name")

    snapshot = sub.add_parser("snapshot", help="Export the catalog as JSON")
    snapshot.add_argument("path")

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        validate_runtime()
    except RuntimeError as exc:
        logger.error(str(exc))
        return 1

    from tmsync.config import Settings
    from tmsync.sync import CatalogSync

    overrides = {}
    if args.db_path:
        overrides["database_path"] = args.db_path
    if args.base_url:
        overrides["api_base_url"] = args.base_url
    settings = Settings(**overrides)

    sync = CatalogSync.from_settings(settings)
    try:
        return _dispatch(sync, args)
    finally:
        sync.close()


def _dispatch(sync, args: argparse.Namespace) -> int:
    from tmsync.db.repository import export_snapshot
    from tmsync.errors import ApiError, ApiUnavailable
    from tmsync.models.catalog import EntityKind

    if args.command in ("import-team", "import-player", "import-competition"):
        label = args.command.removeprefix("import-")
        if args.command == "import-team":
            entity_id = sync.import_team(args.id, args.update, args.squad)
        elif args.command == "import-player":
            entity_id = sync.import_player(args.id, args.update)
        else:
            entity_id = sync.import_competition(args.id, args.update, args.standings)
        if entity_id:
            print(f"Successfully imported {label} with ID {args.id} (catalog id: {entity_id})")
            return 0
        print(f"Failed to import {label} with ID {args.id}.", file=sys.stderr)
        return 1

    if args.command == "update-all":
        if args.kind:
            counts = {k: sync.update_all(EntityKind(k)) for k in args.kind}
        else:
            counts = sync.update_all_data()
        for kind, count in counts.items():
            print(f"Updated {count} {kind}s")
        return 0

    if args.command == "squad":
        try:
            status = sync.squad_status(args.team_id)
        except LookupError as exc:
            print(str(exc), file=sys.stderr)
            return 1
        except ApiUnavailable:
            print(
                "The Transfermarkt API is currently unavailable. This can happen when too many "
                "requests are made. Please try again in a few moments.",
                file=sys.stderr,
            )
            return 1
        except ApiError as exc:
            print(f"Error fetching squad data: {exc}", file=sys.stderr)
            return 1
        print(f"Squad Players for {status.team_name}")
        for entry in status.players:
            pid = str(entry.get("id", ""))
            marker = f"imported as {status.imported[pid]}" if pid in status.imported else "not imported"
            print(f"  {pid:>8}  {entry.get('name', 'Unknown'):<30} {marker}")
        return 0

    if args.command == "import-top-players":
        imported = sync.import_top_valuable_players(args.limit)
        print(f"Imported {len(imported)} top valuable players")
        return 0 if imported else 1

    if args.command == "search":
        search = {
            "players": sync.client.search_players,
            "clubs": sync.client.search_clubs,
            "competitions": sync.client.search_competitions,
        }[args.what]
        try:
            results = search(args.name)
        except ApiError as exc:
            print(str(exc), file=sys.stderr)
            return 1
        print(json.dumps(results, indent=2, ensure_ascii=False))
        return 0

    if args.command == "snapshot":
        export_snapshot(sync.session, args.path)
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
