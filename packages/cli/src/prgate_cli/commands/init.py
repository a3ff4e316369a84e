"""init command — write .prgate.yml and a GitHub Actions workflow for a repository."""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

from prgate_core.errors import ConfigurationError
from prgate_core.policy import compile_patterns

console = Console()

_WORKFLOW_TEMPLATE = """\
name: PR Title Gate

on:
  pull_request:
    types: [opened, edited, synchronize, reopened]

jobs:
  title:
    runs-on: ubuntu-latest
    permissions:
      contents: read
      pull-requests: write

    steps:
      - uses: actions/checkout@v4

      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install prgate
        run: pip install "prgate=={version}"

      - name: Check pull request title
        env:
          GITHUB_TOKEN: ${{{{ secrets.GITHUB_TOKEN }}}}
        run: prgate check
"""


@click.command("init")
@click.option("--title-regex", "title_regex", default=None, help="Title pattern. Prompted when omitted.")
@click.option("--yes", "-y", is_flag=True, help="Accept defaults for every other question.")
def init_cmd(title_regex: str | None, yes: bool):
    """Set up prgate for this repository.

    Creates (or updates) .prgate.yml and optionally generates
    .github/workflows/prgate.yml.
    """
    console.print("\n[bold cyan]prgate init[/bold cyan]\n")

    if title_regex is None:
        title_regex = click.prompt("Title pattern", default=r"^(feat|fix|chore|docs|refactor|test)(\(.+\))?: .+")
    try:
        compile_patterns([title_regex])
    except ConfigurationError as e:
        raise click.BadParameter(str(e), param_hint="--title-regex")

    config: dict = {"title_regex": title_regex}
    if yes:
        config["on_failed_regex_request_changes"] = False
        config["on_failed_regex_fail_action"] = True
    else:
        config["on_failed_regex_request_changes"] = click.confirm(
            "Request changes (instead of commenting) when the title does not match?", default=False
        )
        config["on_failed_regex_fail_action"] = click.confirm("Fail the job when the title does not match?", default=True)
        config["verify_head_commit_message_as_title"] = click.confirm(
            "Also require the head commit message to match?", default=False
        )

    _write_config(config)
    console.print("[green]Created .prgate.yml[/green]")

    if yes or click.confirm("\nGenerate .github/workflows/prgate.yml for GitHub Actions?", default=True):
        _write_workflow()
        console.print("[green]Created .github/workflows/prgate.yml[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")


def _write_config(config: dict) -> None:
    """Write or update .prgate.yml, preserving any existing keys."""
    path = Path(".prgate.yml")
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _get_version() -> str:
    try:
        from importlib.metadata import version

        return version("prgate")
    except Exception:
        return "0.1.0"


def _write_workflow() -> None:
    workflow_dir = Path(".github/workflows")
    workflow_dir.mkdir(parents=True, exist_ok=True)
    (workflow_dir / "prgate.yml").write_text(_WORKFLOW_TEMPLATE.format(version=_get_version()))
