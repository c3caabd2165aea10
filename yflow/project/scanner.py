"""
Messages directory scanner.

A messages directory holds one subdirectory per language code; each language
directory holds any number of (possibly nested) JSON files:

    messages/
      en/common.json
      en/pages/home.json
      zh_CN/common.json

Scanning flattens every file and merges the keys of a language into one map.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from yflow.core.flatten import flatten_json
from yflow.core.types import FlatKeyMap, TranslationSet, count_keys
from yflow.logger import get_logger
from yflow.project.writer import load_json_file

logger = get_logger(__name__)

JSON_EXTENSIONS = (".json",)


class ScanError(Exception):
    """Messages directory cannot be scanned."""
    pass


class DirectoryNotFound(ScanError, FileNotFoundError):
    """The messages directory does not exist."""
    pass


class NotADirectory(ScanError, NotADirectoryError):
    """The messages path exists but is not a directory."""
    pass


@dataclass(frozen=True)
class ScanResult:
    """Result of scanning a messages directory."""
    translations: TranslationSet = field(default_factory=dict)
    files: List[str] = field(default_factory=list)  # relative to root, e.g. "en/common.json"
    key_count: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def languages(self) -> List[str]:
        return list(self.translations.keys())

    def files_for_language(self, language_code: str) -> List[str]:
        """Relative paths of the files scanned for one language."""
        prefix = f"{language_code}/"
        return [f for f in self.files if f.startswith(prefix)]


def empty_scan_result() -> ScanResult:
    return ScanResult()


def is_json_file(path: Path) -> bool:
    return path.suffix.lower() in JSON_EXTENSIONS


def collect_json_files(directory: Path) -> Tuple[List[Path], List[str]]:
    """
    Recursively collect all JSON files below a directory.

    Uses an explicit work-list instead of recursion. The result is sorted by
    path relative to `directory` so later files win deterministically.

    Returns:
        (JSON file paths, messages for subdirectories that could not be listed)

    Raises:
        OSError: If `directory` itself cannot be listed
    """
    files = []
    errors = []
    pending = [directory]

    while pending:
        current = pending.pop()
        try:
            entries = list(current.iterdir())
        except OSError as e:
            if current == directory:
                raise
            message = f"Failed to read directory {current}: {e}"
            logger.warning(message)
            errors.append(message)
            continue

        for entry in entries:
            if entry.is_dir():
                pending.append(entry)
            elif entry.is_file() and is_json_file(entry):
                files.append(entry)

    files.sort(key=lambda p: p.relative_to(directory).as_posix())
    return files, errors


def scan_messages_dir(messages_dir: Path) -> ScanResult:
    """
    Scan a messages directory and collect all translations.

    Args:
        messages_dir: Root directory containing one subdirectory per language

    Returns:
        ScanResult with translations per language, scanned files and key count

    Raises:
        DirectoryNotFound: If the directory does not exist
        NotADirectory: If the path is not a directory
    """
    root = Path(messages_dir)
    logger.info(f"Scanning messages directory: {root}")

    if not root.exists():
        raise DirectoryNotFound(f"Messages directory not found: {root}")

    if not root.is_dir():
        raise NotADirectory(f"Path is not a directory: {root}")

    translations: TranslationSet = {}
    files: List[str] = []
    errors: List[str] = []

    language_dirs = sorted((entry for entry in root.iterdir() if entry.is_dir()), key=lambda p: p.name)

    for language_dir in language_dirs:
        language_code = language_dir.name
        try:
            lang_translations, lang_files, lang_errors = _scan_language_dir(root, language_dir)
        except OSError as e:
            # Unreadable language directory, keep going with the others
            message = f"Failed to scan {language_dir}: {e}"
            logger.warning(message)
            errors.append(message)
            continue

        translations[language_code] = lang_translations
        files.extend(lang_files)
        errors.extend(lang_errors)
        logger.debug(f"  {language_code}: {len(lang_files)} files, {len(lang_translations)} keys")

    result = ScanResult(
        translations=translations,
        files=files,
        key_count=count_keys(translations),
        errors=errors,
    )
    logger.info(
        f"Scan complete: {len(translations)} languages, {len(files)} files, {result.key_count} keys"
        + (f", {len(errors)} problems" if errors else "")
    )
    return result


def _scan_language_dir(root: Path, language_dir: Path) -> Tuple[FlatKeyMap, List[str], List[str]]:
    """
    Scan a single language directory.

    Returns:
        (flat translations, relative file paths, error messages)
    """
    lang_translations: FlatKeyMap = {}
    files: List[str] = []

    json_files, errors = collect_json_files(language_dir)
    for file_path in json_files:
        relative_path = file_path.relative_to(root).as_posix()

        try:
            data = load_json_file(file_path)
        except json.JSONDecodeError as e:
            message = f"Failed to parse JSON {relative_path}: {e}"
            logger.warning(message)
            errors.append(message)
            continue
        except (OSError, UnicodeDecodeError) as e:
            message = f"Failed to read file {relative_path}: {e}"
            logger.warning(message)
            errors.append(message)
            continue

        if not isinstance(data, dict):
            message = f"Skipping {relative_path}: expected a JSON object, got {type(data).__name__}"
            logger.warning(message)
            errors.append(message)
            continue

        lang_translations.update(flatten_json(data))
        files.append(relative_path)

    return lang_translations, files, errors
