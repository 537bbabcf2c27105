"""Atomic file helpers.

State files are never edited in place: content goes to a temporary file
in the same directory and is then renamed over the target with
os.replace(), which is atomic on POSIX.
"""

import json
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any


def write_text_atomic(path: Path, text: str) -> Path:
    """Write text to ``path`` via a temporary file and atomic rename.

    Args:
        path: Target file. Parent directories are created.
        text: Content to write.

    Returns:
        The target path.

    Raises:
        OSError: If the file cannot be written. The temporary file is
            removed on failure.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(text)
        os.replace(str(tmp_path), str(path))
    except OSError:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise

    return path


def write_json_atomic(path: Path, data: Any) -> Path:
    """Serialize ``data`` as indented JSON and write it atomically."""
    return write_text_atomic(path, json.dumps(data, indent=2) + "\n")
