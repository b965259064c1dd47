"""
storage.py — File access for database and export files.

OS errors are re-raised as StorageError so callers can tell an unreadable
file from a corrupt or undecryptable one.
"""

import logging
import os
import shutil

from otpgen.errors import StorageError

logger = logging.getLogger(__name__)


def read_file(path: str) -> bytes:
    """
    Read a whole file into memory.

    Raises:
        StorageError: file missing or unreadable
    """
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise StorageError(f"Cannot read {path}: {e.strerror or e}") from e


def write_file(path: str, data: bytes, backup: bool = True) -> None:
    """
    Write ``data`` to ``path``.

    - If the file exists and ``backup`` is set, keep a copy at path + ".bak".
    - The data is written to path + ".tmp" first and moved into place, so a
      failed write never truncates the previous file.

    Raises:
        StorageError: any OS level failure
    """
    tmp_path = path + ".tmp"
    try:
        if backup and os.path.exists(path):
            shutil.copy2(path, path + ".bak")
            logger.debug("%s exists, kept a backup at %s.bak", path, path)
        with open(tmp_path, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except OSError as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise StorageError(f"Cannot write {path}: {e.strerror or e}") from e
    logger.info("Wrote %d bytes to %s", len(data), path)
