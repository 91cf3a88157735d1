"""Main entry point for the toolscout CLI."""

import sys

from toolscout.cli import main

__all__ = ["main"]

if __name__ == "__main__":
    sys.exit(main())
