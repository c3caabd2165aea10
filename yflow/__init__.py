"""
yflow - keep local JSON translation files in step with a remote translation store.

This package provides:
- core: flatten/unflatten and structure-preserving merge of translation trees
- project: messages directory scanning and JSON file writing
- api: HTTP client for the translation store
- transfer: batched import (push) and sync (pull) pipelines
"""

__version__ = "1.0.0"
