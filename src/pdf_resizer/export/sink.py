"""
Module: export.sink

Purpose:
    File-system output storage. Writes are atomic: bytes go to a
    temporary file in the destination directory which then replaces the
    target, so an interrupted export never leaves a half-written file.

Key Classes:
    - FileSystemSink: Sink implementation over pathlib

Dependencies:
    - tempfile (std): Temporary files beside the target
    - pathlib (std)

Used By:
    - export.session: Conflict detection, writes
    - export.controller: Default sink for run_export()
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import List

from .interfaces import Sink

logger = logging.getLogger(__name__)


class FileSystemSink(Sink):
    """
    Sink writing to the local file system.

    Example:
        >>> sink = FileSystemSink()
        >>> sink.write(Path("out/flyer_A4v.pdf"), pdf_bytes)
    """

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def write(self, path: Path, data: bytes) -> None:
        """
        Atomically write bytes to path.

        Args:
            path: Target file path (parent is created if missing)
            data: File contents

        Raises:
            OSError: If the file cannot be written
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.NamedTemporaryFile(
            mode="wb",
            suffix=path.suffix,
            dir=path.parent,
            delete=False,
        ) as f:
            temp_path = Path(f.name)
            try:
                f.write(data)
            except OSError:
                f.close()
                temp_path.unlink(missing_ok=True)
                raise

        try:
            temp_path.replace(path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote {len(data)} bytes to {path}")

    def list_directory(self, path: Path) -> List[str]:
        path = Path(path)
        if not path.is_dir():
            return []
        return sorted(entry.name for entry in path.iterdir() if entry.is_file())

    def create_directory(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)
