"""Entry point for the vscreen CLI."""

import sys

from vscreen.cli.commands import cli_main


if __name__ == "__main__":
    sys.exit(cli_main())
