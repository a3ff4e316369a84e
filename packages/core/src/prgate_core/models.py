"""Data models shared by the evaluator, the reconciler and the host adapters."""

from __future__ import annotations

import re
from dataclasses import dataclass

# Login GitHub attributes to actions taken with the workflow's GITHUB_TOKEN.
BOT_LOGIN = "github-actions[bot]"

COMMENTED = "COMMENTED"
CHANGES_REQUESTED = "CHANGES_REQUESTED"
APPROVED = "APPROVED"
DISMISSED = "DISMISSED"
PENDING = "PENDING"

EVENT_COMMENT = "COMMENT"
EVENT_REQUEST_CHANGES = "REQUEST_CHANGES"


@dataclass(frozen=True)
class PullRequestRef:
    owner: str
    repo: str
    number: int

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{self.full_name}#{self.number}"


@dataclass(frozen=True)
class PullRequestInfo:
    title: str
    head_sha: str


@dataclass(frozen=True)
class CommitInfo:
    message: str


@dataclass(frozen=True)
class ReviewRecord:
    """A review as read back from the host. author_login is None for deleted users."""

    id: int
    author_login: str | None
    state: str


@dataclass(frozen=True)
class PolicyConfig:
    """Validated, compiled policy. Built by prgate_core.config.build_policy().

    ``title_patterns`` holds compiled regexes in evaluation order.
    ``commit_pattern`` is only consulted by the second stage; when None the
    title patterns are reused.
    """

    title_patterns: tuple[re.Pattern, ...]
    match_any: bool = False
    create_review: bool = True
    fail_action: bool = False
    request_changes: bool = False
    failed_comment: str = ""
    succeeded_comment: str = ""
    verify_commit: bool = False
    commit_pattern: re.Pattern | None = None
    close_on_commit_fail: bool = False
    commit_failed_comment: str = ""
    bot_login: str = BOT_LOGIN

    @property
    def review_event(self) -> str:
        return EVENT_REQUEST_CHANGES if self.request_changes else EVENT_COMMENT

    @property
    def commit_patterns(self) -> tuple[re.Pattern, ...]:
        if self.commit_pattern is not None:
            return (self.commit_pattern,)
        return self.title_patterns
