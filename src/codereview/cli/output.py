"""Output utilities for CLI commands with clear intent.

user_output() is for progress, status and error messages meant for the
person at the terminal; it writes to stderr so stdout stays clean.
machine_output() is for results that may be consumed by scripts.
"""

import click


def user_output(message: str = "", *, nl: bool = True) -> None:
    """Output informational message for the user (stderr)."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", *, nl: bool = True) -> None:
    """Output structured result data (stdout)."""
    click.echo(message, nl=nl)
