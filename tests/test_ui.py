import io

from yflow.transfer.progress import SyncProgress
from yflow.transfer.results import ImportResult, SyncResult
from yflow.ui import ProgressPrinter, format_import_summary, format_sync_summary


def test_progress_printer_reports_retries_and_files():
    stream = io.StringIO()
    printer = ProgressPrinter(stream=stream)

    printer(SyncProgress(phase="retrying", language="en", retry_count=1, wait_seconds=0.4))
    printer(SyncProgress(phase="file_written", language="en", file_path="en/common.json"))
    printer(SyncProgress(phase="language_done", language="en"))

    assert stream.getvalue().splitlines() == [
        "    rate limited, waiting 400ms before retry 1",
        "    wrote en/common.json",
    ]


def test_import_summary_lists_errors():
    result = ImportResult(added=3, updated=1, failed=2, errors=["en[2]: API error (500)"])

    lines = format_import_summary(result)

    assert lines[:4] == ["Import finished:", "  - added: 3", "  - updated: 1", "  - failed: 2"]
    assert lines[-2:] == ["Errors:", "  - en[2]: API error (500)"]


def test_sync_summary():
    result = SyncResult(downloaded=4, skipped=2, written=3)

    assert format_sync_summary(result) == [
        "Sync finished:",
        "  - downloaded: 4",
        "  - skipped: 2",
        "  - files written: 3",
    ]
