"""Project root entry point for launching the yflow command line."""

import sys

from yflow.cli import main


if __name__ == "__main__":
    sys.exit(main())
