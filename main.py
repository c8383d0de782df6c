from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
import sys

from loguru import logger

from core.effects import rotate
from core.models import PhotoWork
from infrastructure.image_service import fetch_photo_record
from infrastructure.logging import init_logging
from infrastructure.photo_work_store import PhotoWorkStore
from infrastructure.settings import JsonSettings, StoreSettings

BASE_DIR = Path(__file__).parent


def _load_settings(path: Path) -> JsonSettings | None:
    try:
        return JsonSettings(path)
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as ex:
        logger.warning("Ignoring unreadable settings {}: {}", path, ex)
        return None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show and edit non-destructive photo edits")
    parser.add_argument("--settings", default=str(BASE_DIR / "settings.json"))
    parser.add_argument("--log-dir", default=None, help="Directory for log files")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Print the edits of photos as JSON").add_argument(
        "photos", nargs="+"
    )
    sub.add_parser("flag", help="Flag photos").add_argument("photos", nargs="+")
    sub.add_parser("unflag", help="Remove the flag of photos").add_argument("photos", nargs="+")
    sub.add_parser("reset", help="Remove all edits of photos").add_argument("photos", nargs="+")
    rotate_parser = sub.add_parser("rotate", help="Rotate photos by quarter turns")
    rotate_parser.add_argument("--turns", type=int, default=1)
    rotate_parser.add_argument("photos", nargs="+")
    return parser


def _apply_command(args: argparse.Namespace, photo_work: PhotoWork) -> PhotoWork:
    if args.command == "flag":
        photo_work.flagged = True
    elif args.command == "unflag":
        photo_work.flagged = None
    elif args.command == "rotate":
        rotate(photo_work, args.turns)
    elif args.command == "reset":
        photo_work = PhotoWork()
    return photo_work


async def run(args: argparse.Namespace, store: PhotoWorkStore) -> int:
    exit_code = 0
    shown: dict[str, dict] = {}
    for path in args.photos:
        try:
            photo = await fetch_photo_record(path)
            photo_work = await store.fetch_photo_work_of_photo(photo)
        except (OSError, ValueError) as ex:
            logger.error("Reading edits of {} failed: {}", path, ex)
            print(f"{path}: {ex}", file=sys.stderr)
            exit_code = 1
            continue

        if args.command == "show":
            shown[path] = photo_work.to_dict()
        else:
            photo_work = _apply_command(args, photo_work)
            await store.store_photo_work(photo.master_dir, photo.master_filename, photo_work)

    await store.flush()
    if args.command == "show":
        print(json.dumps(shown, indent=2))
    return exit_code


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = _load_settings(Path(args.settings))
    level = settings.get("logging.level", "INFO") if settings else "INFO"
    init_logging(args.log_dir, level=level, console=True)

    store = PhotoWorkStore(StoreSettings.from_settings(settings))
    return asyncio.run(run(args, store))


if __name__ == "__main__":
    raise SystemExit(main())
