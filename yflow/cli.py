"""
yflow command line.

    yflow [--config PATH] [--verbose] [--log-file PATH] <command>

Commands: import, sync, init, version, help.
"""

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from yflow import __version__
from yflow.api.client import APIClient
from yflow.api.exceptions import APIError
from yflow.config import CONFIG_FILENAME, ConfigError, I18nConfig, create_sample_config, load_config
from yflow.language_mapping import LanguageMapper
from yflow.logger import get_logger, set_log_mode
from yflow.project.scanner import ScanError
from yflow.project.writer import FileWriteError
from yflow.transfer.batching import RetryPolicy
from yflow.transfer.importer import ImportPipeline
from yflow.transfer.syncer import SyncPipeline
from yflow.ui import ProgressPrinter, format_import_summary, format_sync_summary

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> Tuple[argparse.ArgumentParser, Dict[str, argparse.ArgumentParser]]:
    parser = argparse.ArgumentParser(
        prog="yflow",
        description="Synchronize JSON translation files with a translation store.",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help=f"Config file path (default: ./{CONFIG_FILENAME}, then ~/{CONFIG_FILENAME})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write log records to this file")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    import_parser = subparsers.add_parser("import", help="Push local translations to the store")
    import_parser.add_argument("--dry-run", action="store_true", help="Scan and preview without pushing")

    sync_parser = subparsers.add_parser("sync", help="Pull translations from the store into local files")
    sync_parser.add_argument("--dry-run", action="store_true", help="Show the diff without writing")
    sync_parser.add_argument("--force", action="store_true", help="Overwrite keys that already exist locally")

    init_parser = subparsers.add_parser("init", help=f"Create a sample {CONFIG_FILENAME}")
    init_parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help=f"Where to write the config (default: ./{CONFIG_FILENAME})",
    )
    init_parser.add_argument("--overwrite", action="store_true", help="Replace an existing config file")

    subparsers.add_parser("version", help="Show the version")

    help_parser = subparsers.add_parser("help", help="Show help for a command")
    help_parser.add_argument("topic", nargs="?", default=None, help="Command to describe")

    return parser, subparsers.choices


def _retry_policy(config: I18nConfig) -> RetryPolicy:
    return RetryPolicy(
        batch_size=config.batch_size,
        batch_delay=config.batch_delay,
        max_retries=config.max_retries,
    )


def _print_lines(lines: List[str]) -> None:
    for line in lines:
        print(line)


def cmd_import(config: I18nConfig, dry_run: bool, verbose: bool) -> int:
    mapper = LanguageMapper(config.language_mapping)
    with APIClient.from_config(config) as client:
        pipeline = ImportPipeline(
            client,
            config.messages_dir,
            mapper,
            dry_run=dry_run,
            policy=_retry_policy(config),
        )
        result = pipeline.run(on_progress=ProgressPrinter(verbose=verbose))

    _print_lines(format_import_summary(result))
    return EXIT_FAILURE if result.has_failures or result.cancelled else EXIT_OK


def cmd_sync(config: I18nConfig, dry_run: bool, force: bool, verbose: bool) -> int:
    mapper = LanguageMapper(config.language_mapping)
    with APIClient.from_config(config) as client:
        pipeline = SyncPipeline(
            client,
            config.messages_dir,
            mapper,
            dry_run=dry_run,
            policy=_retry_policy(config),
            force=force,
        )
        result = pipeline.run(on_progress=ProgressPrinter(verbose=verbose))

    _print_lines(format_sync_summary(result))
    return EXIT_FAILURE if result.has_failures or result.cancelled else EXIT_OK


def cmd_init(output: Optional[Path], overwrite: bool) -> int:
    path = output or Path.cwd() / CONFIG_FILENAME
    if path.exists() and not overwrite:
        print(f"Config file already exists: {path}", file=sys.stderr)
        print("Use --overwrite to replace it", file=sys.stderr)
        return EXIT_FAILURE

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(create_sample_config(), encoding="utf-8")
    print(f"Created {path}")
    print("Edit messagesDir, projectId, apiUrl and apiKey before running 'yflow import' or 'yflow sync'")
    return EXIT_OK


def cmd_help(
    parser: argparse.ArgumentParser,
    commands: Dict[str, argparse.ArgumentParser],
    topic: Optional[str],
) -> int:
    if topic is None:
        parser.print_help()
        return EXIT_OK

    subparser = commands.get(topic)
    if subparser is not None:
        subparser.print_help()
        return EXIT_OK

    print(f"Unknown command: {topic}", file=sys.stderr)
    parser.print_help(sys.stderr)
    return EXIT_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    parser, commands = build_parser()
    args = parser.parse_args(argv)

    set_log_mode("debug" if args.verbose else "info", log_file=args.log_file)

    if args.command is None:
        parser.print_help()
        return EXIT_OK
    if args.command == "version":
        print(f"yflow {__version__}")
        return EXIT_OK
    if args.command == "help":
        return cmd_help(parser, commands, args.topic)
    if args.command == "init":
        return cmd_init(args.output, args.overwrite)

    try:
        config = load_config(args.config)
        if args.command == "import":
            return cmd_import(config, args.dry_run, args.verbose)
        return cmd_sync(config, args.dry_run, args.force, args.verbose)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.hint:
            print(f"Hint: {e.hint}", file=sys.stderr)
        return EXIT_FAILURE
    except (APIError, ScanError, FileWriteError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
