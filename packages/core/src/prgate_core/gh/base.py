"""Abstract pull-request host interface.

The reconciler depends on HostClient, not on PyGithub, so it can be driven
by GithubHost in production, ShadowHost for dry runs, and a recording fake
in tests. Implementations raise HostRequestError on any failed call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prgate_core.models import CommitInfo, PullRequestInfo, ReviewRecord


class HostClient(ABC):
    @abstractmethod
    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequestInfo:
        """Return the pull request's title and head commit SHA."""

    @abstractmethod
    def get_commit(self, owner: str, repo: str, sha: str) -> CommitInfo:
        """Return the git commit for sha."""

    @abstractmethod
    def list_reviews(self, owner: str, repo: str, number: int) -> list[ReviewRecord]:
        """Return every review on the pull request in the order the host lists them."""

    @abstractmethod
    def create_review(self, owner: str, repo: str, number: int, body: str, event: str) -> None:
        """Create a review. event is "COMMENT" or "REQUEST_CHANGES"."""

    @abstractmethod
    def dismiss_review(self, owner: str, repo: str, number: int, review_id: int, message: str) -> None:
        """Dismiss a review."""

    @abstractmethod
    def create_issue_comment(self, owner: str, repo: str, number: int, body: str) -> None:
        """Post a plain conversation comment."""

    @abstractmethod
    def update_pull_request(self, owner: str, repo: str, number: int, state: str, body: str) -> None:
        """Update the pull request state and body."""
