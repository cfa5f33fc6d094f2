"""
Whole-file JSON persistence helpers.

Reads decode a complete file; writes replace a complete file by writing a
temporary sibling and renaming it over the target, so a crash mid-write
never leaves a truncated snapshot or history behind.
"""

import json
import logging
import os
import tempfile
from typing import Any

from src.errors import PersistenceReadError, PersistenceWriteError

logger = logging.getLogger(__name__)


def read_json(path: str, default: Any = None) -> Any:
    """
    Load JSON from path.

    Returns `default` when the file does not exist. Raises
    PersistenceReadError when it exists but cannot be read or decoded.
    """
    if not os.path.exists(path):
        return default
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise PersistenceReadError(path, f"invalid JSON ({e})") from e
    except (OSError, UnicodeDecodeError) as e:
        raise PersistenceReadError(path, str(e)) from e


def write_json_atomic(path: str, data: Any) -> None:
    """Serialize data with indentation and atomically replace path."""
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{os.path.basename(path)}.", suffix=".tmp", dir=directory
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        tmp_path = None
    except (OSError, TypeError, ValueError) as e:
        raise PersistenceWriteError(path, str(e)) from e
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError as cleanup_err:
                logger.warning(f"Could not remove temp file {tmp_path}: {cleanup_err}")
    logger.debug(f"Wrote {path}")
