# Overview: Writes exported payloads (CSV/PDF) to the download directory.

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path


def save_download(directory: str | os.PathLike, filename: str, payload: bytes) -> Path:
    """
    Write payload under directory/filename and return the final path.

    The bytes go to a temporary file first and are renamed into place, so a
    half-written export never shows up under its final name.
    """
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=target_dir, prefix=".download-", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(payload)
        target = target_dir / filename
        os.replace(tmp_path, target)
    except OSError:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_path)
        raise
    return target
