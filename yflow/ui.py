"""
Textual progress reporting for the command line.

Consumers take SyncProgress events from a pipeline and render them; the
pipelines themselves never print.
"""

import sys
from typing import List, Optional, TextIO

from yflow.transfer.progress import SyncProgress
from yflow.transfer.results import ImportResult, SyncResult
from yflow.transfer.syncer import preview_lines


class ProgressPrinter:
    """Prints one line per interesting progress event."""

    def __init__(self, stream: Optional[TextIO] = None, verbose: bool = False):
        self.stream = stream or sys.stdout
        self.verbose = verbose

    def _print(self, text: str) -> None:
        print(text, file=self.stream)

    def __call__(self, event: SyncProgress) -> None:
        phase = event.phase

        if phase in ("auth", "scanning", "fetching"):
            self._print(event.message)
        elif phase == "language_start":
            if event.total_batches:
                self._print(f"  {event.language}: {event.total_keys} keys in {event.total_batches} batches")
            else:
                self._print(f"  {event.language}: {event.total_keys} keys to write")
        elif phase == "batch_done":
            if self.verbose or event.total_batches > 1:
                self._print(
                    f"    batch {event.current_batch}/{event.total_batches}: "
                    f"{event.processed_keys}/{event.total_keys} keys"
                )
        elif phase == "retrying":
            self._print(
                f"    rate limited, waiting {event.wait_seconds * 1000:.0f}ms before retry {event.retry_count}"
            )
        elif phase == "batch_failed":
            self._print(f"    batch {event.current_batch}/{event.total_batches} failed: {event.message}")
        elif phase == "file_written":
            self._print(f"    wrote {event.file_path}")
        elif phase == "file_failed":
            self._print(f"    failed {event.file_path}: {event.message}")
        elif phase == "cancelled":
            self._print(f"Cancelled: {event.message}")
        elif phase == "language_done" and self.verbose:
            self._print(f"  {event.language} done")


def format_import_summary(result: ImportResult) -> List[str]:
    lines = []
    if result.dry_run:
        lines.append("Dry run, nothing was imported. Would import:")
        for lang, count in result.languages.items():
            lines.append(f"  - {lang}: {count} keys")
            for preview in result.preview.get(lang, []):
                lines.append(f"      {preview}")
        lines.append(f"  total: {result.added}")
    else:
        lines.append("Import finished:" if not result.cancelled else "Import cancelled:")
        lines.append(f"  - added: {result.added}")
        lines.append(f"  - updated: {result.updated}")
        lines.append(f"  - failed: {result.failed}")
    lines.extend(_format_errors(result.errors))
    return lines


def format_sync_summary(result: SyncResult) -> List[str]:
    lines = []
    if result.dry_run:
        lines.append("Dry run, nothing was written. Sync diff:")
        lines.extend(f"  {line}" for line in preview_lines(result))
        lines.append(f"  - would download: {result.downloaded}")
        lines.append(f"  - would skip: {result.skipped}")
    else:
        lines.append("Sync finished:" if not result.cancelled else "Sync cancelled:")
        lines.append(f"  - downloaded: {result.downloaded}")
        lines.append(f"  - skipped: {result.skipped}")
        lines.append(f"  - files written: {result.written}")
    lines.extend(_format_errors(result.errors))
    return lines


def _format_errors(errors: List[str]) -> List[str]:
    if not errors:
        return []
    return ["Errors:"] + [f"  - {error}" for error in errors]
