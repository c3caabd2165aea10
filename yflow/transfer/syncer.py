"""
Sync pipeline: pull translations from the store into local files.

Fetch -> map store codes to local codes -> scan local files -> merge the
incoming keys into every file of their language (or create
`<lang>/sync.json` for languages with no local file) -> aggregate.

With force=False, keys that already exist locally are left untouched and
counted as skipped. With force=True they are overwritten and counted as
downloaded.
"""

from pathlib import Path
from typing import Dict, Iterator, List

from yflow.config import SYNC_FILE_NAME
from yflow.core.flatten import unflatten_json
from yflow.core.merge import merge_structured
from yflow.core.types import FlatKeyMap, TranslationSet, count_keys
from yflow.logger import get_logger
from yflow.project.scanner import DirectoryNotFound, ScanResult, empty_scan_result, scan_messages_dir
from yflow.project.writer import FileWriteError, atomic_write_json, load_json_file
from yflow.transfer.batching import TransferCancelled
from yflow.transfer.pipeline import Pipeline
from yflow.transfer.progress import SyncProgress
from yflow.transfer.results import SyncResult

logger = get_logger(__name__)

NEW_KEYS_PREVIEW = 5
EXISTING_KEYS_PREVIEW = 3


def split_keys(incoming: FlatKeyMap, local: FlatKeyMap):
    """Split incoming keys into (absent locally, present locally), keeping order."""
    new_keys = [key for key in incoming if key not in local]
    existing_keys = [key for key in incoming if key in local]
    return new_keys, existing_keys


def select_updates(incoming: FlatKeyMap, local: FlatKeyMap, force: bool) -> FlatKeyMap:
    """Keys to write for one language: everything when forced, otherwise only new keys."""
    if force:
        return dict(incoming)
    return {key: value for key, value in incoming.items() if key not in local}


class SyncPipeline(Pipeline[SyncResult]):
    """
    Pulls translations from the store into the messages directory.

    Features:
    - Structure-preserving writes into existing files
    - New languages get a single sync.json file
    - Dry run: diff preview only
    - Per-file failures are reported and skipped
    """

    name = "sync"

    def __init__(self, *args, force: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.force = force

    def _run(self) -> Iterator[SyncProgress]:
        result = SyncResult(dry_run=self.dry_run)
        self.result = result

        yield from self._check_auth()

        yield SyncProgress(phase="fetching", message="Fetching translations from the store")
        remote = self.client.fetch_translations()
        incoming = self.mapper.apply_reverse(remote)
        total_keys = count_keys(incoming)
        logger.info(f"Fetched {total_keys} keys in {len(incoming)} languages")

        if total_keys == 0:
            logger.warning("The store has no translations, nothing to sync")
            yield SyncProgress(phase="completed", message="No remote translations")
            return

        yield SyncProgress(phase="scanning", message=f"Scanning {self.messages_dir}")
        try:
            local_scan = scan_messages_dir(self.messages_dir)
        except DirectoryNotFound:
            logger.info(f"Messages directory {self.messages_dir} does not exist yet, treating it as empty")
            local_scan = empty_scan_result()
        result.errors.extend(local_scan.errors)

        self._count(result, incoming, local_scan)

        if self.dry_run:
            logger.info(f"Dry run: would download {result.downloaded}, would skip {result.skipped}")
            yield SyncProgress(phase="completed", total_keys=total_keys, message="Dry run, nothing written")
            return

        try:
            yield from self._write(result, incoming, local_scan)
        except TransferCancelled as e:
            logger.warning(str(e))
            result.cancelled = True
            yield SyncProgress(phase="cancelled", message=str(e))
            return

        logger.info(f"Sync complete: {result}")
        yield SyncProgress(
            phase="completed",
            total_languages=len(incoming),
            completed_languages=len(incoming),
            total_keys=total_keys,
        )

    def _count(self, result: SyncResult, incoming: TranslationSet, local_scan: ScanResult) -> None:
        """Download/skip accounting from key sets alone."""
        for lang, translations in incoming.items():
            local_lang = local_scan.translations.get(lang, {})
            new_keys, existing_keys = split_keys(translations, local_lang)

            if new_keys:
                result.new_keys[lang] = new_keys
            if existing_keys:
                result.existing_keys[lang] = existing_keys

            if self.force and not self.dry_run:
                result.downloaded += len(translations)
            else:
                result.downloaded += len(new_keys)
                result.skipped += len(existing_keys)

    def _write(self, result: SyncResult, incoming: TranslationSet, local_scan: ScanResult) -> Iterator[SyncProgress]:
        root = Path(self.messages_dir)
        languages = [lang for lang, translations in incoming.items() if translations]
        written = set()

        for index, lang in enumerate(languages):
            local_lang = local_scan.translations.get(lang, {})
            updates = select_updates(incoming[lang], local_lang, self.force)
            files = local_scan.files_for_language(lang)

            yield SyncProgress(
                phase="language_start",
                language=lang,
                total_languages=len(languages),
                completed_languages=index,
                total_keys=len(updates),
            )

            if files:
                targets = [(root / relative_path, relative_path) for relative_path in files]
            else:
                relative_path = f"{lang}/{SYNC_FILE_NAME}"
                targets = [(root / lang / SYNC_FILE_NAME, relative_path)]

            if not updates:
                logger.debug(f"  {lang}: every incoming key exists locally, nothing to write")
                targets = []

            for file_path, relative_path in targets:
                if self.is_cancelled():
                    raise TransferCancelled(f"Sync cancelled before writing {relative_path}")

                try:
                    changed = self._write_file(file_path, updates)
                except (OSError, ValueError, FileWriteError) as e:
                    # ValueError covers JSON and UTF-8 decoding errors
                    message = f"Failed to write {relative_path}: {e}"
                    logger.error(message)
                    result.errors.append(message)
                    yield SyncProgress(phase="file_failed", language=lang, file_path=relative_path, message=str(e))
                    continue

                if changed and relative_path not in written:
                    written.add(relative_path)
                    result.written_files.append(relative_path)
                    result.written += 1
                    logger.info(f"  Wrote {relative_path}")
                    yield SyncProgress(
                        phase="file_written",
                        language=lang,
                        total_languages=len(languages),
                        completed_languages=index,
                        file_path=relative_path,
                    )

            yield SyncProgress(
                phase="language_done",
                language=lang,
                total_languages=len(languages),
                completed_languages=index + 1,
                processed_keys=len(updates),
                total_keys=len(updates),
            )

    def _write_file(self, file_path: Path, updates: Dict[str, str]) -> bool:
        """
        Merge updates into one file, or create it.

        A file that already exists is always loaded and merged, even when the
        scan left it out, so an unparseable file raises instead of being replaced.

        Returns:
            True if the file was created or its content changed
        """
        if not file_path.exists():
            atomic_write_json(file_path, unflatten_json(updates))
            return True

        original = load_json_file(file_path)
        if not isinstance(original, dict):
            raise ValueError(f"expected a JSON object, got {type(original).__name__}")

        merged = merge_structured(original, updates)
        if merged == original:
            logger.debug(f"  {file_path} unchanged")
            return False

        atomic_write_json(file_path, merged)
        return True


def preview_lines(result: SyncResult) -> List[str]:
    """Human-readable dry-run diff lines."""
    lines = []
    for lang in sorted(set(result.new_keys) | set(result.existing_keys)):
        lines.append(f"{lang}:")
        new_keys = result.new_keys.get(lang, [])
        existing_keys = result.existing_keys.get(lang, [])
        if new_keys:
            more = "..." if len(new_keys) > NEW_KEYS_PREVIEW else ""
            lines.append(f"  new ({len(new_keys)}): {', '.join(new_keys[:NEW_KEYS_PREVIEW])}{more}")
        if existing_keys:
            more = "..." if len(existing_keys) > EXISTING_KEYS_PREVIEW else ""
            lines.append(f"  existing ({len(existing_keys)}): {', '.join(existing_keys[:EXISTING_KEYS_PREVIEW])}{more}")
    return lines
