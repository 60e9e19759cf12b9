"""Main CLI entry point."""

import argparse
import json
import logging
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = argparse.ArgumentParser(prog="rfp-quest", description="UK government tender sync")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Debug logging (each fetched URL)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings YAML (default: RFP_QUEST_* environment variables)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Path to SQLite database (overrides settings)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # sync
    sync_parser = subparsers.add_parser("sync", help="Sync tenders from a source into the store")
    sync_parser.add_argument(
        "--source",
        default=None,
        help="Source to sync from (find-a-tender, contracts-finder)",
    )
    sync_parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Only fetch releases updated in the last N days (default: 7)",
    )
    sync_parser.add_argument(
        "--full",
        action="store_true",
        help="Full sync: no lower time bound",
    )
    sync_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Stop after N records",
    )
    sync_parser.add_argument(
        "--max-retries",
        type=int,
        default=None,
        help="Give up after N rate-limited retries (default: retry forever)",
    )

    # tenders
    tenders_parser = subparsers.add_parser("tenders", help="Query the tender store")
    tenders_parser.add_argument(
        "action",
        choices=["list", "count", "show"],
        help="List tenders, show count, or show one tender",
    )
    tenders_parser.add_argument(
        "--stage",
        type=str,
        default=None,
        help="Filter by stage (planning, tender, award)",
    )
    tenders_parser.add_argument("--id", type=str, default=None, help="OCID (for show)")

    # runs
    runs_parser = subparsers.add_parser("runs", help="Query the sync run ledger")
    runs_parser.add_argument("action", choices=["list", "show"], help="List recent runs or show one")
    runs_parser.add_argument("--id", type=str, default=None, help="Run id (for show)")
    runs_parser.add_argument("--limit", type=int, default=20, help="Max runs to list (default: 20)")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "sync":
        _run_sync(args)
    elif args.command == "tenders":
        _run_tenders(args)
    elif args.command == "runs":
        _run_runs(args)
    else:
        parser.print_help()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_settings(args: argparse.Namespace):
    """Settings from --config or environment, with CLI overrides applied."""
    from rfp_quest.config import SyncSettings

    settings = SyncSettings.from_yaml(args.config) if args.config else SyncSettings.from_env()
    overrides: dict = {}
    if args.db is not None:
        overrides["db_path"] = args.db
    if getattr(args, "source", None):
        overrides["source"] = args.source
    if getattr(args, "max_retries", None) is not None:
        overrides["max_retries"] = args.max_retries
    if overrides:
        settings = settings.model_validate({**settings.model_dump(), **overrides})
    return settings


def _run_sync(args: argparse.Namespace) -> None:
    """Run sync command. Exits non-zero when the run fails."""
    from pydantic import ValidationError

    from rfp_quest.models.sync import SyncOptions
    from rfp_quest.sync import build_orchestrator

    try:
        settings = _load_settings(args)
        options = SyncOptions(
            window_days=args.days if args.days is not None else settings.window_days,
            full_sync=args.full,
            limit=args.limit,
        )
        orchestrator = build_orchestrator(settings)
    except (ValidationError, ValueError) as e:
        raise SystemExit(f"Invalid sync options: {e}")

    try:
        summary = orchestrator.run(options)
    except Exception as e:
        print(f"Sync failed: {e}", file=sys.stderr)
        raise SystemExit(1)

    print(
        f"Sync complete: {summary.fetched} fetched, {summary.inserted} inserted, "
        f"{summary.updated} updated, {summary.skipped} skipped "
        f"in {summary.duration_seconds:.1f}s (run {summary.run_id})"
    )


def _run_tenders(args: argparse.Namespace) -> None:
    """Run tenders command."""
    from rfp_quest.store import TenderStore

    store = TenderStore(_load_settings(args).db_path)
    if args.action == "list":
        tenders = store.get_by_stage(args.stage) if args.stage else store.get_all()
        output = json.dumps(
            [t.model_dump(mode="json", exclude={"raw"}) for t in tenders],
            indent=2,
            default=str,
        )
        print(output)
    elif args.action == "count":
        print(store.count(args.stage))
    elif args.action == "show":
        if not args.id:
            raise SystemExit("tenders show requires --id")
        tender = store.get(args.id)
        if tender is None:
            raise SystemExit(f"Tender not found: {args.id}")
        print(json.dumps(tender.model_dump(mode="json"), indent=2, default=str))


def _run_runs(args: argparse.Namespace) -> None:
    """Run runs command."""
    from rfp_quest.store import SyncLedger

    ledger = SyncLedger(_load_settings(args).db_path)
    if args.action == "list":
        for run in ledger.recent(args.limit):
            print(
                f"  {run.id}  {run.started_at.isoformat()}  {run.status.value:<9}  "
                f"fetched={run.records_fetched} inserted={run.records_inserted} "
                f"updated={run.records_updated} skipped={run.records_skipped}"
            )
    elif args.action == "show":
        if not args.id:
            raise SystemExit("runs show requires --id")
        run = ledger.get(args.id)
        if run is None:
            raise SystemExit(f"Sync run not found: {args.id}")
        print(json.dumps(run.model_dump(mode="json"), indent=2, default=str))


if __name__ == "__main__":
    main()
