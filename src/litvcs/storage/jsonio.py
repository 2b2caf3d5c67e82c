"""JSON persistence helpers.

HEAD, branch refs, the staging index and object envelopes are all small JSON
documents. Writes go through a temp file in the target directory followed by
an atomic rename so a crash never leaves a half-written record behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from litvcs.exceptions import ObjectCorruptedError, StorageIOError


def write_json(path: Path, data: Any, indent: int = 2) -> None:
    """Atomically write ``data`` as JSON to ``path``.

    Args:
        path: Destination file; parent directories are created as needed
        data: JSON-serializable value
        indent: Indentation for human readability

    Raises:
        StorageIOError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=".tmp_",
            suffix=".json",
        )
    except OSError as e:
        raise StorageIOError(f"Failed to write {path}: {e}") from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())

        # Atomic rename
        os.replace(tmp_path, path)

    except OSError as e:
        # Clean up temp file on error
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise StorageIOError(f"Failed to write {path}: {e}") from e


def read_json(path: Path) -> Any:
    """Read a JSON document written by ``write_json``.

    Raises:
        FileNotFoundError: If ``path`` does not exist (callers map this to
            their own not-found error)
        StorageIOError: If the file exists but cannot be read
        ObjectCorruptedError: If the file is not valid JSON
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise
    except json.JSONDecodeError as e:
        raise ObjectCorruptedError(f"Corrupted file {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise StorageIOError(f"Failed to read {path}: {e}") from e
