"""CLI entry point for prgate.

Commands:
  check  — evaluate a pull request title and reconcile the gate's reviews
  init   — write .prgate.yml and a GitHub Actions workflow
"""

from __future__ import annotations

import importlib.metadata
import logging
import os

import click
from rich.logging import RichHandler

from prgate_cli.commands.check import check_cmd
from prgate_cli.commands.init import init_cmd


def _configure_logging(verbose: bool) -> None:
    # RUNNER_DEBUG is set when a workflow is re-run with debug logging enabled.
    debug = verbose or os.environ.get("RUNNER_DEBUG") == "1"
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("prgate"),
    prog_name="prgate",
)
@click.option(
    "--config",
    "config_path",
    default=".prgate.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRGATE_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Pull request title gate for GitHub."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(check_cmd)
main.add_command(init_cmd)
