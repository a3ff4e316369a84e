from __future__ import annotations

import logging
from contextlib import contextmanager

import requests
from github import Auth, Github, GithubException

from prgate_core.errors import HostRequestError
from prgate_core.gh.base import HostClient
from prgate_core.models import CommitInfo, PullRequestInfo, ReviewRecord

logger = logging.getLogger(__name__)


def get_client(token: str) -> Github:
    return Github(auth=Auth.Token(token))


@contextmanager
def _host_call(operation: str):
    """Turn PyGithub API errors and transport failures into HostRequestError."""
    try:
        yield
    except GithubException as e:
        data = e.data if isinstance(e.data, dict) else {}
        raise HostRequestError(operation, data.get("message") or str(e), status=e.status) from e
    except requests.exceptions.RequestException as e:
        # PyGithub lets connection errors and timeouts through from requests.
        raise HostRequestError(operation, str(e)) from e


class GithubHost(HostClient):
    """HostClient backed by PyGithub.

    Repositories and pull requests are looked up once and cached for the
    lifetime of the object, which is a single run.
    """

    def __init__(self, client: Github):
        self._client = client
        self._repos: dict[str, object] = {}
        self._pulls: dict[tuple[str, int], object] = {}

    @classmethod
    def from_token(cls, token: str) -> GithubHost:
        return cls(get_client(token))

    def _repo(self, owner: str, repo: str):
        full_name = f"{owner}/{repo}"
        if full_name not in self._repos:
            with _host_call("get repository"):
                self._repos[full_name] = self._client.get_repo(full_name)
        return self._repos[full_name]

    def _pull(self, owner: str, repo: str, number: int):
        key = (f"{owner}/{repo}", number)
        if key not in self._pulls:
            this_repo = self._repo(owner, repo)
            with _host_call("get pull request"):
                self._pulls[key] = this_repo.get_pull(number)
        return self._pulls[key]

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequestInfo:
        pr = self._pull(owner, repo, number)
        return PullRequestInfo(title=pr.title or "", head_sha=pr.head.sha)

    def get_commit(self, owner: str, repo: str, sha: str) -> CommitInfo:
        this_repo = self._repo(owner, repo)
        with _host_call("get commit"):
            commit = this_repo.get_git_commit(sha)
        return CommitInfo(message=commit.message or "")

    def list_reviews(self, owner: str, repo: str, number: int) -> list[ReviewRecord]:
        pr = self._pull(owner, repo, number)
        # get_reviews() is paginated lazily, so iteration happens inside the wrapper.
        with _host_call("list reviews"):
            return [
                ReviewRecord(id=r.id, author_login=r.user.login if r.user else None, state=r.state)
                for r in pr.get_reviews()
            ]

    def create_review(self, owner: str, repo: str, number: int, body: str, event: str) -> None:
        pr = self._pull(owner, repo, number)
        with _host_call("create review"):
            pr.create_review(body=body, event=event)

    def dismiss_review(self, owner: str, repo: str, number: int, review_id: int, message: str) -> None:
        pr = self._pull(owner, repo, number)
        with _host_call("dismiss review"):
            pr.get_review(review_id).dismiss(message)

    def create_issue_comment(self, owner: str, repo: str, number: int, body: str) -> None:
        pr = self._pull(owner, repo, number)
        with _host_call("create comment"):
            pr.create_issue_comment(body)

    def update_pull_request(self, owner: str, repo: str, number: int, state: str, body: str) -> None:
        pr = self._pull(owner, repo, number)
        with _host_call("update pull request"):
            pr.edit(state=state, body=body)
