"""
Project module - local messages directory

This module provides:
- scanner: Directory scanning and translation collection
- writer: JSON file loading and atomic writing
"""

from yflow.project.scanner import (
    ScanError,
    DirectoryNotFound,
    NotADirectory,
    ScanResult,
    empty_scan_result,
    collect_json_files,
    scan_messages_dir,
)

from yflow.project.writer import (
    FileWriteError,
    atomic_write_json,
    load_json_file,
)
