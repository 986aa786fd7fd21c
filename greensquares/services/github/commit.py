"""Single-file commits through the GitHub Git data API.

Builds a commit on a repository's default branch without a local clone by
running seven dependent calls in order:

    resolve_branch -> read_head -> read_base_tree -> create_blob
        -> create_tree -> create_commit -> update_ref

Each stage consumes the previous stage's result. The first failing stage
aborts the run with a ``CommitError`` naming that stage. Objects created
before the failure stay unreferenced in GitHub's object store.

There is no compare-and-swap on the branch: if it moves between read_head
and update_ref, GitHub rejects the non-fast-forward update and the run
fails at update_ref.
"""

import base64
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

from greensquares.constants import GITHUB_WEB_URL, QUICK_COMMIT_TITLE
from greensquares.services.github.client import GitHubAPIError, GitHubClient, GitHubError
from greensquares.utils.logging import LogContext
from greensquares.utils.metrics import metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CommitStage(str, Enum):
    """Pipeline stages, in execution order."""

    RESOLVE_BRANCH = "resolve_branch"
    READ_HEAD = "read_head"
    READ_BASE_TREE = "read_base_tree"
    CREATE_BLOB = "create_blob"
    CREATE_TREE = "create_tree"
    CREATE_COMMIT = "create_commit"
    UPDATE_REF = "update_ref"


class CommitFailureReason(str, Enum):
    """User-facing reasons an upstream failure is mapped to."""

    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_PAYLOAD = "invalid_payload"
    OTHER = "other"


REASON_BY_STATUS = {
    403: CommitFailureReason.PERMISSION_DENIED,
    404: CommitFailureReason.NOT_FOUND,
    409: CommitFailureReason.CONFLICT,
    422: CommitFailureReason.INVALID_PAYLOAD,
}

REASON_MESSAGES = {
    CommitFailureReason.PERMISSION_DENIED: (
        "Permission denied. Please ensure the OAuth app has write access to this repository."
    ),
    CommitFailureReason.NOT_FOUND: "Repository not found or not accessible.",
    CommitFailureReason.CONFLICT: (
        "Conflict occurred while creating commit. Repository may be in an inconsistent state."
    ),
    CommitFailureReason.INVALID_PAYLOAD: "Invalid data provided for commit creation.",
}

DEFAULT_FAILURE_MESSAGE = "Failed to create commit"


@dataclass
class CommitRequest:
    """A request to write one file on the default branch."""

    owner: str
    repo: str
    message: str
    path: str
    content: str | None = None

    def resolve_content(self, now: datetime | None = None) -> str:
        """File content to commit, falling back to a generated placeholder."""
        if self.content:
            return self.content
        now = now or datetime.now(UTC)
        timestamp = now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return f"{QUICK_COMMIT_TITLE}\n\n{self.message}\n\nCommitted at: {timestamp}"


@dataclass(frozen=True)
class BranchHead:
    branch: str
    commit_sha: str


@dataclass(frozen=True)
class BaseTree:
    head: BranchHead
    tree_sha: str


@dataclass
class CommitResult:
    """The commit that the branch now points at."""

    sha: str
    message: str
    html_url: str
    author: dict[str, Any] | None
    branch: str
    parent_sha: str
    tree_sha: str
    blob_sha: str


class CommitError(Exception):
    """A pipeline stage failed; later stages were not run."""

    def __init__(
        self,
        stage: CommitStage,
        reason: CommitFailureReason,
        status_code: int,
        details: str,
        documentation_url: str | None = None,
    ):
        super().__init__(f"{stage.value} failed: {details}")
        self.stage = stage
        self.reason = reason
        self.status_code = status_code
        self.details = details
        self.documentation_url = documentation_url

    @classmethod
    def from_upstream(cls, stage: CommitStage, error: GitHubError) -> "CommitError":
        if isinstance(error, GitHubAPIError):
            reason = REASON_BY_STATUS.get(error.status_code, CommitFailureReason.OTHER)
            return cls(stage, reason, error.status_code, error.message, error.documentation_url)
        return cls(stage, CommitFailureReason.OTHER, 500, str(error))

    @property
    def message(self) -> str:
        if self.reason is CommitFailureReason.OTHER:
            return self.details or DEFAULT_FAILURE_MESSAGE
        return REASON_MESSAGES[self.reason]


class CommitBuilder:
    """Runs the commit pipeline against one repository.

    Usage:
        builder = CommitBuilder(GitHubClient(http, token))
        result = await builder.build(
            CommitRequest(owner="octocat", repo="notes", message="Add notes", path="notes.md")
        )
    """

    def __init__(self, client: GitHubClient):
        self.client = client

    async def build(self, request: CommitRequest) -> CommitResult:
        """Create the commit and fast-forward the default branch to it.

        Raises:
            CommitError: On the first failing stage
        """
        log = LogContext(logger, owner=request.owner, repo=request.repo)
        owner, repo = request.owner, request.repo

        repository = await self._stage(
            log, CommitStage.RESOLVE_BRANCH, self.client.get_repository(owner, repo)
        )
        branch = repository["default_branch"]

        ref = await self._stage(
            log, CommitStage.READ_HEAD, self.client.get_branch_ref(owner, repo, branch)
        )
        head = BranchHead(branch=branch, commit_sha=ref["object"]["sha"])

        head_commit = await self._stage(
            log,
            CommitStage.READ_BASE_TREE,
            self.client.get_git_commit(owner, repo, head.commit_sha),
        )
        base = BaseTree(head=head, tree_sha=head_commit["tree"]["sha"])

        content = base64.b64encode(request.resolve_content().encode("utf-8")).decode("ascii")
        blob = await self._stage(
            log, CommitStage.CREATE_BLOB, self.client.create_blob(owner, repo, content)
        )

        tree = await self._stage(
            log,
            CommitStage.CREATE_TREE,
            self.client.create_tree(owner, repo, base.tree_sha, request.path, blob["sha"]),
        )

        commit = await self._stage(
            log,
            CommitStage.CREATE_COMMIT,
            self.client.create_git_commit(
                owner, repo, request.message, tree["sha"], [head.commit_sha]
            ),
        )

        await self._stage(
            log,
            CommitStage.UPDATE_REF,
            self.client.update_branch_ref(owner, repo, branch, commit["sha"]),
        )

        log.info(f"Committed {request.path} to {branch} as {commit['sha']}")
        return CommitResult(
            sha=commit["sha"],
            message=request.message,
            html_url=f"{GITHUB_WEB_URL}/{owner}/{repo}/commit/{commit['sha']}",
            author=commit.get("author"),
            branch=branch,
            parent_sha=head.commit_sha,
            tree_sha=tree["sha"],
            blob_sha=blob["sha"],
        )

    async def _stage(self, log: LogContext, stage: CommitStage, call: Awaitable[T]) -> T:
        log.debug(f"Running {stage.value}")
        try:
            return await call
        except GitHubError as e:
            error = CommitError.from_upstream(stage, e)
            metrics.commit_failures_total.inc(stage=stage.value, reason=error.reason.value)
            log.error(f"Stage {stage.value} failed ({error.status_code}): {error.details}")
            raise error from e
