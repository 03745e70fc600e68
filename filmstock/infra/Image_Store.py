"""File-backed image store for film reminder photos.

User photos live under ``<user_dir>/<Manufacturer>/<film>_<id>.jpg``; bundled
catalog pictures under ``<catalog_dir>/<Manufacturer>/<name>.png``. Ledger
rows only keep an ImageReference, never the bytes.
"""
import logging
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Protocol
from uuid import uuid4

from filmstock.domain.FilmUnit import ImageReference, ImageSource
from filmstock.infra.paths import CATALOG_IMAGES_DIR, USER_IMAGES_DIR

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_UNSAFE_FOLDER = re.compile(r"[^A-Za-z0-9 _-]")
_CATALOG_SUFFIXES = (".png", ".jpg", ".jpeg")


def _slug(text: str) -> str:
    return _NON_ALNUM.sub("", text or "").lower()


def _folder(manufacturer: str) -> str:
    '''Manufacturer name as a single directory name; separators and dots are dropped.'''
    return _UNSAFE_FOLDER.sub("", manufacturer or "").strip() or "Unknown"


class ImageStore(Protocol):
    def store(self, data: bytes, manufacturer: str, name: str) -> str: ...
    def load(self, source: ImageSource, value: Optional[str], manufacturer: str, name: str) -> Optional[bytes]: ...


class FileImageStore:
    def __init__(self, user_dir: Path = USER_IMAGES_DIR, catalog_dir: Path = CATALOG_IMAGES_DIR):
        self.user_dir = Path(user_dir)
        self.catalog_dir = Path(catalog_dir)

    def store(self, data: bytes, manufacturer: str, name: str) -> str:
        """Save a captured photo and return its path relative to the user directory."""
        subdir = _folder(manufacturer)
        folder = self.user_dir / subdir
        os.makedirs(folder, exist_ok=True)
        relative = f"{subdir}/{_slug(name) or 'film'}_{uuid4().hex[:8]}.jpg"
        fd, tmp_path = tempfile.mkstemp(dir=folder, prefix=".img_", suffix=".jpg")
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
            shutil.move(tmp_path, self.user_dir / relative)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        logger.info(f"Stored image {relative} ({len(data)} bytes)")
        return relative

    def _read(self, path: Path) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Could not read image {path}: {e}")
            return None

    def _catalog_file(self, manufacturer: str, stem: str) -> Optional[Path]:
        folder = self.catalog_dir / _folder(manufacturer)
        if not folder.is_dir():
            return None
        wanted = _slug(stem)
        for candidate in sorted(folder.iterdir()):
            if candidate.suffix.lower() in _CATALOG_SUFFIXES and _slug(candidate.stem) == wanted:
                return candidate
        return None

    def load(self, source: ImageSource, value: Optional[str], manufacturer: str, name: str) -> Optional[bytes]:
        if source == ImageSource.CUSTOM and value:
            root = self.user_dir.resolve()
            path = (root / value).resolve()
            if root not in path.parents:
                logger.warning(f"Ignoring image path outside the image directory: {value}")
                return None
            return self._read(path)
        if source == ImageSource.CATALOG and value:
            found = self._catalog_file(manufacturer, value)
            return self._read(found) if found else None
        if source == ImageSource.AUTO_DETECTED:
            # Catalog pictures are named after the film, e.g. Kodak/Portra400.png
            found = self._catalog_file(manufacturer, name)
            return self._read(found) if found else None
        return None


def resolve_image(store: ImageStore, reference: ImageReference, manufacturer: str, name: str) -> Optional[bytes]:
    '''Bytes of the first source in the reference's resolve order that exists.'''
    for source, value in reference.resolve_order():
        data = store.load(source, value, manufacturer, name)
        if data is not None:
            return data
    return None


__all__ = ["ImageStore", "FileImageStore", "resolve_image"]
