"""Small JSON file helpers with atomic writes and file locking."""
import json
import logging
import os
import sys
import tempfile
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

if sys.platform == "win32":
    import msvcrt
else:
    import fcntl

logger = logging.getLogger(__name__)


def read_json(file_path: str, default: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Read a JSON object from disk.

    Args:
        file_path: Path to JSON file
        default: Returned (copied) when the file does not exist

    Returns:
        dict: Parsed JSON content

    Raises:
        json.JSONDecodeError: If JSON is malformed
        ValueError: If the top-level value is not an object
    """
    if not os.path.exists(file_path):
        return dict(default or {})

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise json.JSONDecodeError(f"Malformed JSON in {file_path}: {e.msg}", e.doc, e.pos)

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {file_path}")
    return data


def write_json(file_path: str, data: Dict[str, Any]) -> None:
    """
    Write `data` to `file_path` atomically (temp file + fsync + replace).

    Raises:
        IOError: If the write fails
    """
    dir_path = os.path.dirname(file_path)
    if dir_path:
        os.makedirs(dir_path, exist_ok=True)

    temp_fd, temp_path = tempfile.mkstemp(
        dir=dir_path or ".",
        prefix=".tmp_",
        suffix=".json"
    )

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, file_path)
    except OSError as e:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise IOError(f"Failed to write file {file_path}: {e}") from e


@contextmanager
def lock_file(file_path: str, timeout: float = 5.0):
    """
    Hold an exclusive lock on `<file_path>.lock` for the duration of the block.

    Usage:
        with lock_file("data/tokens.json"):
            data = read_json("data/tokens.json")
            data["access_token"] = token
            write_json("data/tokens.json", data)

    Raises:
        TimeoutError: If unable to acquire lock within timeout
    """
    lock_path = f"{file_path}.lock"
    dir_path = os.path.dirname(lock_path)
    if dir_path:
        os.makedirs(dir_path, exist_ok=True)

    handle = open(lock_path, "a+")
    start_time = time.time()
    try:
        while True:
            try:
                if sys.platform == "win32":
                    handle.seek(0)
                    msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)
                else:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except OSError:
                if time.time() - start_time > timeout:
                    raise TimeoutError(f"Could not acquire lock on {file_path} within {timeout}s")
                time.sleep(0.05)

        yield

    finally:
        try:
            if sys.platform == "win32":
                handle.seek(0)
                msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)
            else:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            logger.warning("Failed to release lock on %s: %s", file_path, e)
        handle.close()
