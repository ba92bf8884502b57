#!/usr/bin/env python3
"""Add, list and remove the photos shown between board cards.

Examples::

    python scripts/manage_photos.py add ./my-photo.jpg
    python scripts/manage_photos.py list
    python scripts/manage_photos.py remove my-photo.jpg
    python scripts/manage_photos.py remove 0

The store location follows ``PHOTOS_PATH`` unless ``--store`` is given.
"""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import List, Optional

from colorama import Fore, Style, init as colorama_init

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import config  # noqa: E402
from photo_store import PhotoStore, PhotoStoreError  # noqa: E402


def _ok(message: str) -> None:
    print(f"{Fore.GREEN}✓{Style.RESET_ALL} {message}")


def _error(message: str) -> None:
    print(f"{Fore.RED}Error:{Style.RESET_ALL} {message}", file=sys.stderr)


def _print_listing(store: PhotoStore) -> None:
    photos = store.list()
    if not photos:
        print("  (none)")
        return
    for index, photo in enumerate(photos):
        print(f"  [{index}] {photo.name}")


def cmd_add(store: PhotoStore, args: argparse.Namespace) -> int:
    try:
        photo = store.add(args.image)
    except PhotoStoreError as exc:
        _error(str(exc))
        return 1
    _ok(f"Added: {photo.name}")
    print(f"  Total photos: {len(store.list())}")
    return 0


def cmd_list(store: PhotoStore, args: argparse.Namespace) -> int:
    photos = store.list()
    if not photos:
        print("No photos stored")
        return 0

    print(f"Stored Photos ({len(photos)} total):\n")
    for index, photo in enumerate(photos):
        size_kb = round(len(photo.image_data) / 1024)
        added = photo.added_at.astimezone().strftime("%Y-%m-%d %H:%M:%S") if photo.added_at else "unknown"
        print(f"  [{index}] {Style.BRIGHT}{photo.name}{Style.RESET_ALL}")
        print(f"      Size: {size_kb} KB")
        print(f"      Added: {added}\n")
    return 0


def cmd_remove(store: PhotoStore, args: argparse.Namespace) -> int:
    try:
        removed = store.remove(args.target)
    except PhotoStoreError as exc:
        _error(str(exc))
        print("\nAvailable photos:")
        _print_listing(store)
        return 1
    _ok(f"Removed: {removed.name}")
    print(f"  Remaining photos: {len(store.list())}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--store",
        default=config.PHOTOS_PATH,
        help="Photo store file (default: %(default)s)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Store an image file")
    add.add_argument("image", help="Path to a .jpg/.jpeg/.png/.gif/.webp/.bmp file")
    add.set_defaults(func=cmd_add)

    listing = sub.add_parser("list", help="List stored photos")
    listing.set_defaults(func=cmd_list)

    remove = sub.add_parser("remove", help="Remove a photo by name or index")
    remove.add_argument("target", help="Photo file name or numeric index")
    remove.set_defaults(func=cmd_remove)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    colorama_init(autoreset=True)
    args = build_parser().parse_args(argv)
    return args.func(PhotoStore(args.store), args)


if __name__ == "__main__":
    sys.exit(main())
