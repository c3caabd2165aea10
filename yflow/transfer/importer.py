"""
Import pipeline: push local translations to the store.

Scan -> map local codes to store codes -> split each language into batches ->
push every batch (retrying while rate limited) -> aggregate.

A failing batch never stops the run: its keys are counted as failed and the
next batch is pushed.
"""

from typing import Dict, Iterator, List

from yflow.api.exceptions import APIError
from yflow.config import MAX_REPORTED_FAILED_KEYS
from yflow.core.types import FlatKeyMap, TranslationSet, count_keys
from yflow.logger import get_logger
from yflow.project.scanner import scan_messages_dir
from yflow.transfer.batching import TransferCancelled, chunk_translations, push_with_retry
from yflow.transfer.pipeline import Pipeline
from yflow.transfer.progress import SyncProgress
from yflow.transfer.results import ImportResult

logger = get_logger(__name__)

PREVIEW_ALL_LIMIT = 5  # languages with this many keys or fewer are previewed in full


def build_import_preview(translations: TranslationSet) -> Dict[str, List[str]]:
    """Short dry-run preview lines per language."""
    preview = {}
    for lang, keys in translations.items():
        if len(keys) <= PREVIEW_ALL_LIMIT:
            preview[lang] = [f'{key}: "{value}"' for key, value in keys.items()]
        else:
            first_keys = list(keys)[:PREVIEW_ALL_LIMIT]
            preview[lang] = [f"first {PREVIEW_ALL_LIMIT} keys: {', '.join(first_keys)}..."]
    return preview


def format_failed_keys(language: str, batch_num: int, failed: List[str]) -> List[str]:
    """Error lines for keys the store reported as failed."""
    lines = [
        f"{language}[{batch_num}]: failed keys - {', '.join(failed[:MAX_REPORTED_FAILED_KEYS])}"
    ]
    if len(failed) > MAX_REPORTED_FAILED_KEYS:
        lines.append(f"  ... and {len(failed) - MAX_REPORTED_FAILED_KEYS} more")
    return lines


class ImportPipeline(Pipeline[ImportResult]):
    """
    Pushes the messages directory to the store.

    Features:
    - Fixed-size batches per language, pushed in order
    - Exponential backoff while rate limited (up to max_retries attempts)
    - Fixed delay between batches of the same language
    - Dry run: scan and preview only
    """

    name = "import"

    def _run(self) -> Iterator[SyncProgress]:
        result = ImportResult(dry_run=self.dry_run)
        self.result = result

        yield from self._check_auth()

        yield SyncProgress(phase="scanning", message=f"Scanning {self.messages_dir}")
        scan_result = scan_messages_dir(self.messages_dir)
        result.errors.extend(scan_result.errors)

        translations = self.mapper.apply_forward(scan_result.translations)
        if self.mapper.needs_mapping():
            logger.info(self.mapper.describe())

        total_keys = count_keys(translations)
        result.languages = {lang: len(keys) for lang, keys in translations.items() if keys}

        if total_keys == 0:
            logger.warning("No translations found, nothing to import")
            yield SyncProgress(phase="completed", message="No translations found")
            return

        if self.dry_run:
            result.added = total_keys
            result.preview = build_import_preview({k: v for k, v in translations.items() if v})
            logger.info(f"Dry run: {total_keys} keys in {len(result.languages)} languages would be imported")
            yield SyncProgress(phase="completed", total_keys=total_keys, message="Dry run, nothing pushed")
            return

        languages = [(lang, keys) for lang, keys in translations.items() if keys]
        try:
            for index, (lang, keys) in enumerate(languages):
                yield from self._import_language(result, lang, keys, index, len(languages))
        except TransferCancelled as e:
            logger.warning(str(e))
            result.cancelled = True
            yield SyncProgress(phase="cancelled", message=str(e))
            return

        logger.info(f"Import complete: {result}")
        yield SyncProgress(
            phase="completed",
            total_languages=len(languages),
            completed_languages=len(languages),
            total_keys=total_keys,
            processed_keys=result.added + result.updated + result.failed,
        )

    def _import_language(
        self,
        result: ImportResult,
        lang: str,
        translations: FlatKeyMap,
        lang_index: int,
        total_languages: int,
    ) -> Iterator[SyncProgress]:
        """Push one language batch by batch."""
        total_keys = len(translations)
        chunks = chunk_translations(translations, self.policy.batch_size)
        total_batches = len(chunks)
        processed = 0
        lang_added = lang_updated = lang_failed = 0

        logger.info(f"Importing {lang} ({total_keys} keys, {total_batches} batches)...")
        yield SyncProgress(
            phase="language_start",
            language=lang,
            total_languages=total_languages,
            completed_languages=lang_index,
            total_batches=total_batches,
            total_keys=total_keys,
        )

        for batch_idx, chunk in enumerate(chunks):
            batch_num = batch_idx + 1

            if self.is_cancelled():
                raise TransferCancelled(f"Import cancelled before {lang}[{batch_num}]")

            try:
                response = yield from push_with_retry(
                    self.client,
                    lang,
                    chunk,
                    self.policy,
                    self.sleep,
                    is_cancelled=self.is_cancelled,
                    batch_num=batch_num,
                    total_batches=total_batches,
                )
            except APIError as e:
                # Retries exhausted or a non rate-limit failure: give up on this batch only
                lang_failed += len(chunk)
                result.failed += len(chunk)
                processed += len(chunk)
                result.errors.append(f"{lang}[{batch_num}]: {e}")
                logger.error(f"  Batch {batch_num}/{total_batches}: FAILED - {e}")
                yield SyncProgress(
                    phase="batch_failed",
                    language=lang,
                    total_languages=total_languages,
                    completed_languages=lang_index,
                    current_batch=batch_num,
                    total_batches=total_batches,
                    batch_keys_count=len(chunk),
                    processed_keys=processed,
                    total_keys=total_keys,
                    message=str(e),
                )
            else:
                lang_added += len(response.added)
                lang_updated += len(response.existed)
                lang_failed += len(response.failed)
                result.added += len(response.added)
                result.updated += len(response.existed)
                result.failed += len(response.failed)
                processed += len(chunk)

                if response.failed:
                    result.errors.extend(format_failed_keys(lang, batch_num, response.failed))

                logger.debug(
                    f"  Batch {batch_num}/{total_batches}: +{len(response.added)}, "
                    f"~{len(response.existed)}, x{len(response.failed)}"
                )
                yield SyncProgress(
                    phase="batch_done",
                    language=lang,
                    total_languages=total_languages,
                    completed_languages=lang_index,
                    current_batch=batch_num,
                    total_batches=total_batches,
                    batch_keys_count=len(chunk),
                    processed_keys=processed,
                    total_keys=total_keys,
                )

            # Delay between batches (not after the last one)
            if batch_num < total_batches:
                self.sleep(self.policy.batch_delay)

        logger.info(f"  {lang} done: +{lang_added}, ~{lang_updated}, x{lang_failed}")
        yield SyncProgress(
            phase="language_done",
            language=lang,
            total_languages=total_languages,
            completed_languages=lang_index + 1,
            total_batches=total_batches,
            current_batch=total_batches,
            processed_keys=processed,
            total_keys=total_keys,
        )
