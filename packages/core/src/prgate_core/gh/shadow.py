"""Dry-run host: reads go to the wrapped host, writes are only printed."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from prgate_core.gh.base import HostClient

if TYPE_CHECKING:
    from prgate_core.models import CommitInfo, PullRequestInfo, ReviewRecord

console = Console()


class ShadowHost(HostClient):
    def __init__(self, inner: HostClient):
        self._inner = inner
        self.suppressed: list[tuple] = []

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequestInfo:
        return self._inner.get_pull_request(owner, repo, number)

    def get_commit(self, owner: str, repo: str, sha: str) -> CommitInfo:
        return self._inner.get_commit(owner, repo, sha)

    def list_reviews(self, owner: str, repo: str, number: int) -> list[ReviewRecord]:
        return self._inner.list_reviews(owner, repo, number)

    def _record(self, action: tuple, description: str, body: str) -> None:
        self.suppressed.append(action)
        console.print(f"[bold]Shadow:[/bold] would {escape(description)}")
        console.print(f"  [dim]{escape(body)}[/dim]")

    def create_review(self, owner: str, repo: str, number: int, body: str, event: str) -> None:
        self._record(("create_review", number, event), f"create a {event} review on {owner}/{repo}#{number}", body)

    def dismiss_review(self, owner: str, repo: str, number: int, review_id: int, message: str) -> None:
        self._record(("dismiss_review", number, review_id), f"dismiss review {review_id}", message)

    def create_issue_comment(self, owner: str, repo: str, number: int, body: str) -> None:
        self._record(("comment", number), f"comment on {owner}/{repo}#{number}", body)

    def update_pull_request(self, owner: str, repo: str, number: int, state: str, body: str) -> None:
        self._record(("update", number, state), f"set {owner}/{repo}#{number} to {state}", body)
