"""On-disk storage for uploaded post images.

Files are written under a configurable root and addressed publicly as
``/uploads/<name>``; the app mounts the same root at that prefix.
"""
from __future__ import annotations

import os
import random
import time
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Tuple

from posthub.errors import StorageError
from posthub.utils import get_logger

logger = get_logger(__name__)

PUBLIC_PREFIX = "/uploads"
DEFAULT_FIELD_NAME = "images"
_MAX_NAME_ATTEMPTS = 5


def generate_filename(original_filename: str | None, field_name: str = DEFAULT_FIELD_NAME) -> str:
    """``<field>-<epoch ms>-<random>.<ext>``, keeping the original extension."""
    ext = PurePosixPath((original_filename or "").replace("\\", "/")).suffix
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{field_name}-{unique_suffix}{ext}"


class ImageStore:
    """Persist upload bytes under ``root`` and hand back public paths."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def ensure_root(self) -> Path:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Uploads root could not be created", root=str(self.root), error=str(e))
            raise StorageError(f"Cannot create uploads root {self.root}: {e}") from e
        return self.root

    def store(self, file_bytes: bytes, original_filename: str | None) -> str:
        """Write one upload and return its ``/uploads/<name>`` path.

        Raises:
            StorageError: the file could not be written.
        """
        root = self.ensure_root()
        for _ in range(_MAX_NAME_ATTEMPTS):
            name = generate_filename(original_filename)
            target = root / name
            try:
                with open(target, "xb") as fh:
                    fh.write(file_bytes)
            except FileExistsError:
                continue
            except OSError as e:
                logger.error(
                    "Upload write failed",
                    filename=original_filename,
                    target=str(target),
                    error=str(e),
                )
                _remove_quietly(target)
                raise StorageError(f"Failed to write upload {name}: {e}") from e

            logger.debug("Upload stored", filename=original_filename, stored_as=name, size=len(file_bytes))
            return f"{PUBLIC_PREFIX}/{name}"

        raise StorageError("Could not allocate a unique upload filename")

    def store_many(self, files: Iterable[Tuple[bytes, Optional[str]]]) -> List[str]:
        """Store a batch; on failure, files from this batch are removed first."""
        stored: List[str] = []
        try:
            for file_bytes, original_filename in files:
                stored.append(self.store(file_bytes, original_filename))
        except StorageError:
            self.discard(stored)
            raise
        return stored

    def resolve(self, public_path: str) -> Path:
        """Map ``/uploads/<name>`` to the file under root."""
        prefix = PUBLIC_PREFIX + "/"
        if not public_path.startswith(prefix):
            raise ValueError(f"Not an upload path: {public_path!r}")
        name = public_path[len(prefix):]
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise ValueError(f"Not an upload path: {public_path!r}")
        return self.root / name

    def discard(self, public_paths: Iterable[str]) -> int:
        """Delete stored uploads; missing files are skipped. Returns count removed."""
        removed = 0
        for public_path in public_paths:
            try:
                target = self.resolve(public_path)
            except ValueError:
                logger.warning("Refusing to discard non-upload path", path=public_path)
                continue
            if _remove_quietly(target):
                removed += 1
        if removed:
            logger.info("Discarded uploads", count=removed)
        return removed


def _remove_quietly(target: Path) -> bool:
    try:
        os.remove(target)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("Could not remove upload", target=str(target), error=str(e))
        return False


__all__ = ["ImageStore", "generate_filename", "PUBLIC_PREFIX"]
