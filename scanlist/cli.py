"""
==============================================================================
Command Line Scanner
==============================================================================

Desktop client for the shared barcode list.

Usage:
------
    scanlist camera                    # live scan from the default camera
    scanlist image label.png           # scan codes from image files
    scanlist list [--group G] [--search TERM] [--json]
    scanlist delete CODE [CODE ...]
    scanlist clear [--remote]

The list is loaded and saved through the backend chosen by `SYNC_BACKEND`
(http, blob or file). The last group/search used by `list` is remembered in
the view cache file.

==============================================================================
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from scanlist.barcodes import ListView
from scanlist.config import Settings, get_settings
from scanlist.scanner import BarcodeScanner, CameraError
from scanlist.services.repositories import create_repository
from scanlist.services.scan_session import ALREADY_EMPTY_MESSAGE, ScanOutcome, ScanSession, ScanStatus


# Module logger
logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="scanlist",
        description="Scan barcodes into a carrier-grouped list shared across devices",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command")

    camera_parser = sub.add_parser("camera", help="Live scan from a camera")
    camera_parser.add_argument("--index", type=int, default=0, help="Camera index")
    camera_parser.add_argument(
        "--duration", type=int, default=0,
        help="Seconds to scan (0 = until 'q')",
    )
    camera_parser.add_argument(
        "--no-display", action="store_true", help="Do not open a preview window"
    )

    image_parser = sub.add_parser("image", help="Scan codes from image files")
    image_parser.add_argument("paths", nargs="+", help="Image files")

    list_parser = sub.add_parser("list", help="Show the grouped list")
    list_parser.add_argument("--group", type=str, default=None, help="Drill into a group")
    list_parser.add_argument("--search", type=str, default=None, help="Filter codes")
    list_parser.add_argument("--all", action="store_true", help="Reset to the grouped view")
    list_parser.add_argument("--json", action="store_true", help="JSON output")

    delete_parser = sub.add_parser("delete", help="Delete codes from the list")
    delete_parser.add_argument("codes", nargs="+", help="Codes to delete")

    clear_parser = sub.add_parser("clear", help="Empty the list")
    clear_parser.add_argument(
        "--remote", action="store_true",
        help="Delete the stored list instead of storing an empty one",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    settings = get_settings()

    if args.command == "camera":
        asyncio.run(_cmd_camera(settings, args))
    elif args.command == "image":
        asyncio.run(_cmd_image(settings, args))
    elif args.command == "list":
        asyncio.run(_cmd_list(settings, args))
    elif args.command == "delete":
        asyncio.run(_cmd_delete(settings, args))
    elif args.command == "clear":
        asyncio.run(_cmd_clear(settings, args))


def _open_session(settings: Settings) -> ScanSession:
    if settings.sync_backend == "blob":
        from scanlist.db import init_db

        init_db()
    return ScanSession.from_settings(settings, create_repository(settings))


def _print_outcome(outcome: ScanOutcome) -> None:
    if outcome.status == ScanStatus.INVALID:
        print(f"⏭️  {outcome.code!r}: {outcome.message}")
    else:
        print(f"{outcome.code}  {outcome.message}")


def _print_view(view: ListView) -> None:
    print(view.title)
    if view.is_empty:
        print(f"  {view.empty_message}")
        return

    if view.mode == "groups":
        for group in view.groups:
            print(f"  {group.name:<12} {group.count}")
        return

    for item in view.items:
        print(f"  [{item.original_index}] {item.code}  {item.timestamp}")


async def _cmd_camera(settings: Settings, args) -> None:
    session = _open_session(settings)
    await session.start()

    loop = asyncio.get_running_loop()
    scanner = BarcodeScanner(camera_index=args.index)

    def on_code(code: str) -> None:
        # Called from the camera thread
        future = asyncio.run_coroutine_threadsafe(session.handle_scan(code), loop)
        _print_outcome(future.result())

    session.begin_capture()
    try:
        count = await asyncio.to_thread(
            scanner.scan_camera_live,
            on_code,
            args.duration,
            not args.no_display,
        )
        print(f"📊 {count} codes read")
    except CameraError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        session.end_capture()
        await session.close()


async def _cmd_image(settings: Settings, args) -> None:
    session = _open_session(settings)
    await session.start()

    scanner = BarcodeScanner()
    try:
        for path in args.paths:
            codes = scanner.scan_image(Path(path))
            if not codes:
                print(f"{path}: no barcodes found")
                continue
            for code in codes:
                _print_outcome(await session.handle_scan(code))
    finally:
        scanner.close()
        await session.close()


async def _cmd_list(settings: Settings, args) -> None:
    session = _open_session(settings)
    await session.start()

    try:
        if args.all:
            session.back_to_groups()
        if args.group:
            session.open_group(args.group)
        if args.search is not None:
            session.set_search(args.search)
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        await session.close()
        sys.exit(1)

    view = session.current_view()
    if args.json:
        print(json.dumps(view.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_view(view)
    await session.close()


async def _cmd_delete(settings: Settings, args) -> None:
    session = _open_session(settings)
    await session.start()

    removed = await session.delete_codes(args.codes, wait=True)
    missing = set(args.codes) - {record.code for record in removed}
    await session.close()

    print(f"🗑️ Deleted {len(removed)} barcode(s)")
    for code in sorted(missing):
        print(f"  not in list: {code}")


async def _cmd_clear(settings: Settings, args) -> None:
    session = _open_session(settings)
    await session.start()

    if args.remote:
        deleted = await session.clear_remote()
        await session.close()
        if not deleted:
            print("❌ Could not delete the stored list", file=sys.stderr)
            sys.exit(1)
        print("🗑️ Stored list deleted")
        return

    cleared = await session.clear(wait=True)
    await session.close()

    print("🗑️ All barcodes cleared" if cleared else ALREADY_EMPTY_MESSAGE)


if __name__ == "__main__":
    main()
