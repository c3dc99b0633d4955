"""Unified entry point for typehere.

Starts the command line interface; with no subcommand the interactive
palette opens.
"""

from typehere.interfaces.cli.app import run_cli


def main():
    """Main entry point."""
    run_cli()


if __name__ == "__main__":
    main()
