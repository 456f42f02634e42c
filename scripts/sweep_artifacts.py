"""Cron entry point for sweeping expired artifacts from object storage."""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from datetime import datetime, timezone

from src.clipworks.config import load_config
from src.clipworks.dependencies import build_storage, build_sweeper
from src.clipworks.logging import configure_logging
from src.clipworks.media.retention_sweeper import RetentionSweeper
from src.clipworks.storage.storage_base import StorageError


@dataclass(slots=True)
class SweepSummary:
    names: list[str]
    dry_run: bool


async def perform_sweep(
    sweeper: RetentionSweeper, *, dry_run: bool, reference_time: datetime | None = None
) -> SweepSummary:
    """Execute one sweep (or only list what would be removed)."""
    now = reference_time or datetime.now(timezone.utc)
    if dry_run:
        return SweepSummary(names=await sweeper.find_expired(now), dry_run=True)
    return SweepSummary(names=await sweeper.sweep_once(now=now), dry_run=False)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Delete artifacts older than the retention window.")
    parser.add_argument("--dry-run", action="store_true", help="Only report expired artifacts without deleting them.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    config = load_config()
    configure_logging(config.log_level)
    sweeper = build_sweeper(config, build_storage(config))
    try:
        summary = asyncio.run(perform_sweep(sweeper, dry_run=args.dry_run))
    except StorageError as exc:
        print(f"sweep failed: {exc}", file=sys.stderr)
        return 2

    if summary.dry_run:
        print(f"sweep dry-run, artifacts_expired={len(summary.names)}", file=sys.stdout)
        for name in summary.names:
            print(name, file=sys.stdout)
    else:
        print(f"sweep done, artifacts_removed={len(summary.names)}", file=sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
