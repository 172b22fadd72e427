import logging
import os

import click

from codereview.cli.commands.config import config_group
from codereview.cli.commands.submit import submit_cmd
from codereview.cli.ensure import Ensure
from codereview.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

DEBUG_ENV = "CODEREVIEW_DEBUG"
DEBUG_FORMAT = "[DEBUG %(name)s:%(lineno)d] %(message)s"


def _configure_logging(verbose: bool) -> None:
    """Enable debug logging with --verbose or the CODEREVIEW_DEBUG environment variable."""
    if verbose or os.getenv(DEBUG_ENV):
        logging.basicConfig(level=logging.DEBUG, format=DEBUG_FORMAT)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="codereview-submit")
@click.option(
    "-n",
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print git pushes and the submit request instead of running them.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output, including commands run.")
@click.pass_context
def cli(ctx: click.Context, dry_run: bool, verbose: bool) -> None:
    """Submit reviewed Gerrit changes from a local git branch."""
    _configure_logging(verbose)
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        try:
            ctx.obj = create_context(dry_run=dry_run)
        except ValueError as e:
            Ensure.fail(str(e))


cli.add_command(config_group)
cli.add_command(submit_cmd)


def main() -> None:
    """CLI entry point used by the `codereview` console script."""
    cli()
