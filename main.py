"""Chancery maintenance CLI. Inspect a data directory and sync it with the remote."""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

from chancery import runtime
from chancery.config import ChanceryConfig
from chancery.defaults import starter_character
from chancery.models import SECTION_KINDS
from chancery.sync_engine import SyncEngine


def _print_status(engine: SyncEngine) -> None:
    print(f"Characters:        {len(engine.characters)}")
    print(f"Presets:           {len(engine.presets)}")
    print(f"Global defaults:   {len(engine.global_defaults)}")
    print(f"Default generator: {engine.default_generator}")
    print(f"Sync status:       {engine.sync_status}")
    last = engine.last_sync.isoformat() if engine.last_sync else "never"
    print(f"Last sync:         {last}")


async def run(config: ChanceryConfig, args: argparse.Namespace) -> int:
    engine = runtime.init_engine(config)
    try:
        await engine.start()
        await engine.wait_idle()

        if args.command == "seed":
            engine.add_character(starter_character())
            await engine.wait_idle()
        elif args.command == "push":
            await engine.force_sync()
        elif args.command == "presets":
            for p in engine.presets:
                if args.kind and p.kind != args.kind:
                    continue
                print(f"[{p.kind}] {p.name}: {p.text}")
            return 0

        _print_status(engine)
        return 1 if engine.sync_status.state == "failure" else 0
    finally:
        await runtime.shutdown_engine()


def main():
    parser = argparse.ArgumentParser(description="Chancery data store maintenance")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: $CHANCERY_DATA_DIR or ./data)")
    parser.add_argument("--remote-url", default=None,
                        help="Remote store base URL (default: $CHANCERY_REMOTE_URL)")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Show local state without syncing")
    sub.add_parser("sync", help="Fetch from the remote and merge into local storage")
    sub.add_parser("push", help="Upload all local data to the remote")
    sub.add_parser("seed", help="Add the starter character")
    presets = sub.add_parser("presets", help="List presets")
    presets.add_argument("--kind", choices=SECTION_KINDS, default=None)
    args = parser.parse_args()

    config = ChanceryConfig.from_env()
    overrides = {}
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    if args.remote_url is not None:
        overrides["remote_url"] = args.remote_url
    if args.command in ("status", "presets"):
        overrides["remote_url"] = ""
    config = dataclasses.replace(config, **overrides)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(run(config, args)))


if __name__ == "__main__":
    main()
