"""CLI entry point for aidercontrol."""

import sys


def main() -> int:
    """Main entry point for the aidercontrol CLI."""
    from aidercontrol.cli import run_cli

    return run_cli(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
