"""
JSON file reading and atomic writing for translation files.
"""

import json
import tempfile
from pathlib import Path
from typing import Any, Dict

from yflow.logger import get_logger

logger = get_logger(__name__)


class FileWriteError(Exception):
    """Translation file could not be written."""
    pass


def load_json_file(file_path: Path) -> Any:
    """
    Read and parse a UTF-8 JSON file.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the file is not valid JSON
    """
    with open(file_path, 'r', encoding='utf-8-sig') as f:
        return json.load(f)


def atomic_write_json(file_path: Path, data: Dict[str, Any]) -> None:
    """
    Write JSON to file atomically.

    The document is written pretty-printed (2-space indent, non-ASCII kept,
    trailing newline) to a temporary file in the target directory, which is
    then renamed over the target, so the file is never left partially written.

    Args:
        file_path: Target file path
        data: Data to write as JSON

    Raises:
        FileWriteError: If write fails
    """
    try:
        # Ensure parent directory exists
        file_path.parent.mkdir(parents=True, exist_ok=True)

        # Create temp file in the same directory (for atomic rename)
        temp_fd, temp_path = tempfile.mkstemp(
            dir=file_path.parent,
            prefix=f".{file_path.stem}_",
            suffix=".json.tmp"
        )
    except OSError as e:
        raise FileWriteError(f"Cannot write {file_path}: {e}")

    temp_path = Path(temp_path)

    try:
        with open(temp_fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write('\n')

        temp_path.replace(file_path)
        logger.debug(f"Atomic write successful: {file_path}")

    except Exception as e:
        # Clean up temp file on error
        if temp_path.exists():
            temp_path.unlink()
        raise FileWriteError(f"Atomic write failed for {file_path}: {e}")
