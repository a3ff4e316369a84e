"""Pull request title gate: evaluate the policy, then reconcile reviews on the PR.

The gate keeps no state between runs. Whether a previous run already left a
blocking review is re-derived every time from the review list on the host,
so re-running on every push converges instead of piling up annotations.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from prgate_core.models import CHANGES_REQUESTED, COMMENTED
from prgate_core.policy import MatchMode, Outcome, evaluate_commit, evaluate_title, render_comment

if TYPE_CHECKING:
    from prgate_core.gh.base import HostClient
    from prgate_core.models import PolicyConfig, PullRequestRef, ReviewRecord

console = Console()
logger = logging.getLogger(__name__)

# The only states this gate ever leaves behind.
_BLOCKING_STATES = frozenset({COMMENTED, CHANGES_REQUESTED})


class Verdict(enum.Enum):
    TITLE_PASS = "title_pass"
    TITLE_FAIL = "title_fail"
    COMMIT_PASS = "commit_pass"
    COMMIT_FAIL = "commit_fail"

    @property
    def passed(self) -> bool:
        return self in (Verdict.TITLE_PASS, Verdict.COMMIT_PASS)


@dataclass
class GateResult:
    """Outcome of one run_gate() call.

    ``failure_message`` is set when the run must be reported as failed;
    the CLI turns it into a non-zero exit status.
    """

    verdict: Verdict
    title: str
    failure_message: str | None = None
    actions: list[tuple] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.failure_message is not None


def is_bot_user(login: str | None, bot_login: str) -> bool:
    is_bot = login is not None and login == bot_login
    logger.debug("is_bot_user: %s (login is: %s)", is_bot, login)
    return is_bot


def is_blocking_state(state: str) -> bool:
    blocking = state in _BLOCKING_STATES
    logger.debug("is_blocking_state: %s (state is: %s)", blocking, state)
    return blocking


def find_blocking_reviews(reviews: list[ReviewRecord], bot_login: str) -> list[ReviewRecord]:
    """Return the bot's own reviews that still block the pull request, in host order."""
    return [r for r in reviews if is_bot_user(r.author_login, bot_login) and is_blocking_state(r.state)]


def dismiss_reconcile(host: HostClient, ref: PullRequestRef, policy: PolicyConfig) -> list[tuple]:
    """Clear every blocking review the bot left on a previous run.

    CHANGES_REQUESTED reviews are dismissed. COMMENTED reviews cannot be
    dismissed on GitHub, so a plain comment is posted instead; such a review
    stays eligible and gets another comment on every later passing run.
    """
    actions: list[tuple] = []
    reviews = host.list_reviews(ref.owner, ref.repo, ref.number)
    for review in find_blocking_reviews(reviews, policy.bot_login):
        if review.state == COMMENTED:
            logger.debug("Review %s is a comment; answering it", review.id)
            host.create_issue_comment(ref.owner, ref.repo, ref.number, policy.succeeded_comment)
            actions.append(("comment", ref.number))
        else:
            logger.debug("Dismissing review %s", review.id)
            host.dismiss_review(ref.owner, ref.repo, ref.number, review.id, policy.succeeded_comment)
            actions.append(("dismiss_review", review.id))
    return actions


def _title_failed(host: HostClient, ref: PullRequestRef, policy: PolicyConfig, title: str) -> GateResult:
    comment = render_comment(policy.failed_comment, policy.title_patterns)
    result = GateResult(verdict=Verdict.TITLE_FAIL, title=title)
    console.print(f"[red]Title does not match:[/red] {escape(repr(title))}")

    if policy.create_review:
        host.create_review(ref.owner, ref.repo, ref.number, comment, policy.review_event)
        result.actions.append(("create_review", policy.review_event))
    if policy.fail_action:
        result.failure_message = comment
    return result


def _verify_head_commit(
    host: HostClient,
    ref: PullRequestRef,
    policy: PolicyConfig,
    title: str,
    head_sha: str | None,
) -> GateResult:
    if head_sha is None:
        head_sha = host.get_pull_request(ref.owner, ref.repo, ref.number).head_sha
    logger.debug("head sha %s", head_sha)

    message = host.get_commit(ref.owner, ref.repo, head_sha).message
    logger.debug("commit-message %s", message)

    if any(evaluate_commit(message, p).passed for p in policy.commit_patterns):
        console.print(f"[green]Head commit {head_sha[:7]} matches.[/green]")
        result = GateResult(verdict=Verdict.COMMIT_PASS, title=title)
        if policy.create_review:
            result.actions.extend(dismiss_reconcile(host, ref, policy))
        return result

    comment = render_comment(policy.commit_failed_comment, policy.commit_patterns)
    console.print(f"[red]Head commit {head_sha[:7]} message does not match.[/red]")
    result = GateResult(verdict=Verdict.COMMIT_FAIL, title=title, failure_message=comment)
    if policy.close_on_commit_fail:
        host.update_pull_request(ref.owner, ref.repo, ref.number, "closed", comment)
        result.actions.append(("close", ref.number))
    return result


def run_gate(
    policy: PolicyConfig,
    ref: PullRequestRef,
    host: HostClient,
    title: str | None = None,
) -> GateResult:
    """Evaluate the pull request against ``policy`` and reconcile its reviews.

    When ``title`` is None it is fetched from the host. Host failures
    propagate as HostRequestError and abort the remaining steps.
    """
    head_sha = None
    if title is None:
        info = host.get_pull_request(ref.owner, ref.repo, ref.number)
        title, head_sha = info.title, info.head_sha
    title = title or ""

    logger.debug("Title patterns: %s", [p.pattern for p in policy.title_patterns])
    logger.debug("Title: %s", title)

    mode = MatchMode.ANY if policy.match_any else MatchMode.SINGLE
    if evaluate_title(title, policy.title_patterns, mode) is Outcome.FAIL:
        return _title_failed(host, ref, policy, title)

    console.print(f"[green]Title matches:[/green] {escape(repr(title))}")
    if policy.verify_commit:
        return _verify_head_commit(host, ref, policy, title, head_sha)

    result = GateResult(verdict=Verdict.TITLE_PASS, title=title)
    if policy.create_review:
        result.actions.extend(dismiss_reconcile(host, ref, policy))
    return result
