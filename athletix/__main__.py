"""
Entry point for running the admin CLI as a module.

Usage:
    python -m athletix <command>
"""

from athletix.cli import cli

if __name__ == "__main__":
    cli()
