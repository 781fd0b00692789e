# File: mysqltranslate/__main__.py
"""
MySQL Translate — Module entry point.

Allows running the tool directly via::

    python -m mysqltranslate sync

This module simply delegates to the CLI entry point defined in
``mysqltranslate.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from mysqltranslate.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
