"""Pydantic models for the GitHub integration plugin REST API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BRANCH_NAMING = "feature/{issueKey}-{summary}"

BatchOutcome = Literal["complete", "partial", "empty", "none"]


class _WireModel(BaseModel):
    """Accepts both Python field names and camelCase wire names."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RepositoryMapping(_WireModel):
    """A Jira project mapped to a GitHub repository."""

    project_key: str = Field(alias="jiraProject", description="Jira project key, e.g. 'PROJ'")
    repo_owner: str = Field(alias="githubOwner", description="GitHub organization or user")
    repo_name: str = Field(alias="githubRepo", description="GitHub repository name")
    default_branch: str = Field(
        default="main", alias="defaultBranch", description="Branch new work is based on"
    )

    @property
    def full_repo_name(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"


class TransitionMap(BaseModel):
    """Pull-request lifecycle event → Jira transition identifier."""

    model_config = ConfigDict(extra="ignore")

    pr_opened: str = ""
    pr_merged: str = ""
    pr_closed: str = ""
    pr_reopened: str = ""


class Configuration(_WireModel):
    """Admin configuration as submitted to ``PUT /config``.

    ``token`` and ``webhook_secret`` are write-only: the server masks them on
    read, and a blank value is left out of the request body so the stored
    value is kept.
    """

    enterprise_url: str = Field(default="", alias="githubEnterpriseUrl")
    api_url: str = Field(default="", alias="githubApiUrl")
    token: str = Field(default="", alias="githubToken")
    trust_custom_certificates: bool = Field(default=False, alias="trustCustomCertificates")
    webhook_url: str = Field(default="", alias="webhookUrl")
    webhook_secret: str = Field(default="", alias="webhookSecret")
    branch_naming_template: str = Field(default=DEFAULT_BRANCH_NAMING, alias="branchNaming")
    mappings: list[RepositoryMapping] = Field(default_factory=list, alias="repositories")
    transition_mappings: TransitionMap = Field(
        default_factory=TransitionMap, alias="transitionMappings"
    )

    def to_request_body(self) -> dict[str, object]:
        """Serialize with wire names, dropping blank write-only fields."""
        exclude: set[str] = set()
        if not self.token:
            exclude.add("token")
        if not self.webhook_secret:
            exclude.add("webhook_secret")
        return self.model_dump(by_alias=True, exclude=exclude)


class ConnectionTestRequest(_WireModel):
    enterprise_url: str = Field(alias="githubEnterpriseUrl")
    token: str | None = Field(default=None, alias="githubToken")
    trust_custom_certificates: bool = Field(default=False, alias="trustCustomCertificates")


class ConnectionTestResult(_WireModel):
    success: bool = False
    message: str | None = None


class GeneratedSecret(_WireModel):
    secret: str | None = None


class TargetResult(_WireModel):
    """Outcome of registering the webhook on one repository."""

    target: str = Field(default="", alias="repository")
    ok: bool = Field(default=False, alias="success")
    detail: str = Field(default="", alias="message")


class BatchResult(_WireModel):
    """Aggregate response of ``POST /config/register-webhooks``."""

    success_count: int = Field(default=0, alias="successCount")
    total_count: int = Field(default=0, alias="totalCount")
    per_target_results: list[TargetResult] = Field(default_factory=list, alias="results")

    @property
    def outcome(self) -> BatchOutcome:
        if self.total_count == 0:
            return "empty"
        if self.success_count == self.total_count:
            return "complete"
        if 0 < self.success_count < self.total_count:
            return "partial"
        return "none"

    @property
    def is_complete(self) -> bool:
        return self.outcome == "complete"


class BranchInfo(_WireModel):
    name: str
    url: str = ""


class PullRequestInfo(_WireModel):
    number: int
    title: str = ""
    url: str = ""
    state: str = ""


class IssueGithubInfo(_WireModel):
    """Branches and pull requests linked to one issue. Replaced wholesale on reload."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    issue_key: str | None = Field(default=None, alias="issueKey")
    branches: list[BranchInfo] = Field(default_factory=list)
    pull_requests: list[PullRequestInfo] = Field(default_factory=list, alias="pullRequests")

    @property
    def has_activity(self) -> bool:
        return bool(self.branches or self.pull_requests)


class CreateBranchRequest(_WireModel):
    issue_key: str = Field(alias="issueKey")
    base_branch: str = Field(alias="baseBranch")
    branch_name: str = Field(alias="branchName")


class CreatedBranch(_WireModel):
    ref: str | None = None
    sha: str | None = None
    url: str | None = None


class CreatePullRequestRequest(_WireModel):
    issue_key: str = Field(alias="issueKey")
    source_branch: str = Field(alias="sourceBranch")
    target_branch: str = Field(alias="targetBranch")
    title: str
    description: str = ""


class CreatedPullRequest(_WireModel):
    number: int
    url: str = ""
    title: str | None = None
    state: str | None = None
