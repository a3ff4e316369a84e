"""check command — gate a pull request on its title (and optionally its head commit)."""

from __future__ import annotations

import os

import click
from rich.console import Console
from rich.markup import escape

from prgate_core.config import build_policy, load_config, load_event_context, parse_repo
from prgate_core.errors import ConfigurationError, HostRequestError
from prgate_core.gate import GateResult, run_gate
from prgate_core.gh.pull_request import GithubHost
from prgate_core.gh.shadow import ShadowHost
from prgate_core.models import PullRequestRef

console = Console()


def _resolve_target(repo: str | None, pr_number: int | None) -> tuple[PullRequestRef, str | None]:
    """Use --repo/--pr when given, otherwise the GitHub Actions event that triggered the run."""
    if repo is None and pr_number is None:
        return load_event_context()
    if repo is None or pr_number is None:
        raise ConfigurationError("--repo and --pr must be given together.")
    owner, name = parse_repo(repo)
    return PullRequestRef(owner=owner, repo=name, number=pr_number), None


def _fail(message: str) -> None:
    """Report a failed run and exit non-zero, annotating the job when inside GitHub Actions."""
    if os.environ.get("GITHUB_ACTIONS") == "true":
        # Workflow command; the runner turns it into an error annotation.
        click.echo(f"::error::{message}")
    console.print(f"[bold red]Failed:[/bold red] {escape(message)}")
    raise SystemExit(1)


def _report(result: GateResult, shadow: bool) -> None:
    taken = "would be taken" if shadow else "taken"
    if result.actions:
        console.print(f"[bold]{len(result.actions)} action(s) {taken}.[/bold]")
    else:
        console.print("[dim]Nothing to reconcile.[/dim]")
    if result.failed:
        _fail(result.failure_message)
    if result.verdict.passed:
        console.print(f"[green]Gate passed ({result.verdict.value}).[/green]")
    else:
        console.print("[yellow]Title does not match; failing the run is disabled.[/yellow]")


@click.command("check")
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Defaults to the Actions context.")
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number. Defaults to the Actions context.")
@click.option("--title", default=None, help="Check this title instead of the pull request's current one.")
@click.option("--title-regex", "title_regex", multiple=True, help="Title pattern; repeat for several. Overrides config.")
@click.option("--any", "match_any", is_flag=True, help="Pass when any title pattern matches.")
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print reviews, comments and closes instead of posting them.",
)
@click.pass_context
def check_cmd(
    ctx,
    repo: str | None,
    pr_number: int | None,
    title: str | None,
    title_regex: tuple[str, ...],
    match_any: bool | None,
    shadow: bool,
):
    """Check a pull request title against the configured patterns.

    On failure a review is left on the pull request; once the title is fixed
    the gate's earlier reviews are dismissed. Exits 1 when the run fails.

    \b
    Required environment variables:
      GITHUB_TOKEN   GitHub token with pull-requests: write (or use gh CLI)
    """
    from prgate_cli.auth import resolve_github_token

    config_path = (ctx.obj or {}).get("config_path", ".prgate.yml")
    overrides = {
        "title_regex": list(title_regex) or None,
        "title_regex_mode": "any" if match_any else None,
    }

    try:
        config = load_config(config_path, cli_overrides=overrides)
        policy = build_policy(config)
        ref, event_title = _resolve_target(repo, pr_number)
    except ConfigurationError as e:
        raise click.UsageError(str(e))

    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    host = GithubHost.from_token(token)
    if shadow:
        host = ShadowHost(host)

    console.print(f"Checking [bold]{ref}[/bold]")
    try:
        result = run_gate(policy, ref, host, title=title if title is not None else event_title)
    except HostRequestError as e:
        _fail(str(e))
    else:
        _report(result, shadow)
