#!/usr/bin/env python3
"""run_scheduled_update.py — periodic refresh for cron.

Runs the sweeps enabled in settings (TMSYNC_UPDATE_PLAYERS, ...) when
TMSYNC_UPDATE_INTERVAL seconds have passed since the last run recorded in
the state file.

Usage:
    python scripts/run_scheduled_update.py
    python scripts/run_scheduled_update.py --force --state data/last_update.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add src to path for direct script execution
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tmsync.utils.runtime import validate_runtime

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("run_scheduled_update")


def _read_last_run(state_path: Path) -> datetime | None:
    if not state_path.exists():
        return None
    try:
        with open(state_path) as f:
            last_run = datetime.fromisoformat(json.load(f)["last_run"])
    except (OSError, ValueError, KeyError) as exc:
        logger.warning(f"Ignoring unreadable state file {state_path}: {exc}")
        return None
    # Hand-written timestamps without an offset are taken as UTC.
    if last_run.tzinfo is None:
        last_run = last_run.replace(tzinfo=timezone.utc)
    return last_run


def _write_last_run(state_path: Path, when: datetime, counts: dict[str, int]) -> None:
    state_path.parent.mkdir(parents=True, exist_ok=True)
    with open(state_path, "w") as f:
        json.dump({"last_run": when.isoformat(), "counts": counts}, f, indent=2)


def main() -> int:
    parser = argparse.ArgumentParser(description="tmsync — scheduled catalog refresh")
    parser.add_argument("--state", default="data/last_update.json", help="Last-run state file")
    parser.add_argument("--force", action="store_true", help="Run even if not due yet")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        validate_runtime()
    except RuntimeError as exc:
        logger.error(str(exc))
        return 1

    from tmsync.config import Settings
    from tmsync.sync import CatalogSync

    settings = Settings()
    state_path = Path(args.state)
    sync = CatalogSync.from_settings(settings)
    try:
        now = datetime.now(timezone.utc)
        if not args.force and not sync.is_update_due(_read_last_run(state_path), now):
            logger.info("Update not due yet, nothing to do")
            return 0

        counts = sync.update_all_data()
        _write_last_run(state_path, now, counts)
        logger.info(f"Scheduled update complete: {counts}")
        return 0
    finally:
        sync.close()


if __name__ == "__main__":
    raise SystemExit(main())
