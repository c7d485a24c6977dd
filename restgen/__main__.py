# File: restgen/__main__.py
"""
restgen — Module entry point.

Allows running the generator directly via::

    python -m restgen rest_app MyApp sqlite:///app.db

This module simply delegates to the CLI entry point defined in ``restgen.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from restgen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
