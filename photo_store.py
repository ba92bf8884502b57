"""Line-delimited JSON storage for the photos shown between board cards.

Each line of the store is one record::

    {"name": "beach.jpg", "data_url": "data:image/jpeg;base64,...", "timestamp": 1700000000000}

The display only reads (:meth:`PhotoStore.list`); ``scripts/manage_photos.py``
adds and removes entries.
"""
from __future__ import annotations

import base64
import datetime
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from PIL import Image, UnidentifiedImageError

from models import Photo, photo_from_record, photo_to_record

_LOGGER = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp")

_MIME_BY_EXTENSION = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
}


class PhotoStoreError(Exception):
    """Raised by the editing helpers when a request cannot be applied."""


class PhotoStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def list(self) -> List[Photo]:
        """Return stored photos in insertion order; unreadable store → []."""

        try:
            with self.path.open("r", encoding="utf-8") as fh:
                lines = fh.readlines()
        except FileNotFoundError:
            return []
        except OSError as exc:
            _LOGGER.warning("⚠️ Could not read photo store %s: %s", self.path, exc)
            return []

        photos: List[Photo] = []
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except ValueError:
                _LOGGER.warning("⚠️ Skipping unreadable photo record on line %d", lineno)
                continue
            photo = photo_from_record(record)
            if photo is not None:
                photos.append(photo)
        return photos

    def add(self, image_path: Union[str, Path], now: Optional[datetime.datetime] = None) -> Photo:
        """Encode *image_path* inline and append it to the store."""

        source = Path(image_path)
        if not source.is_file():
            raise PhotoStoreError(f"File not found: {source}")

        ext = source.suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            raise PhotoStoreError(
                f"Invalid image format. Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
            )

        mime_type = _detect_mime_type(source, ext)
        encoded = base64.b64encode(source.read_bytes()).decode("ascii")
        photo = Photo(
            name=source.name,
            image_data=f"data:{mime_type};base64,{encoded}",
            added_at=now or datetime.datetime.now(datetime.timezone.utc),
        )

        photos = self.list()
        photos.append(photo)
        self._write(photos)
        return photo

    def remove(self, target: str) -> Photo:
        """Remove a photo by numeric position or by file name."""

        photos = self.list()
        if not photos:
            raise PhotoStoreError("No photos found.")

        index = -1
        if target.strip().lstrip("-").isdigit():
            index = int(target)
        else:
            for position, photo in enumerate(photos):
                if photo.name == target:
                    index = position
                    break

        if index < 0 or index >= len(photos):
            raise PhotoStoreError(f"Photo not found: {target}")

        removed = photos.pop(index)
        self._write(photos)
        return removed

    def _write(self, photos: List[Photo]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                for photo in photos:
                    fh.write(json.dumps(photo_to_record(photo)) + "\n")
            os.replace(tmp_name, self.path)
        except Exception:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise


def _detect_mime_type(path: Path, ext: str) -> str:
    try:
        with Image.open(path) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError) as exc:
        raise PhotoStoreError(f"Not a readable image: {path} ({exc})") from exc
    return Image.MIME.get(fmt or "", _MIME_BY_EXTENSION.get(ext, "image/jpeg"))
