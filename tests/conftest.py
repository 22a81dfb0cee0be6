"""Shared test constants, fixtures, and factory functions."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from jira_github_controller.config import AdminContext, PanelContext, Settings
from jira_github_controller.models import (
    BatchResult,
    ConnectionTestResult,
    CreatedBranch,
    CreatedPullRequest,
    GeneratedSecret,
    IssueGithubInfo,
    RepositoryMapping,
)

# -- Constants --

REST_URL = "https://jira.example.com/rest/github-integration/1.0"
ENTERPRISE_URL = "https://github.example.com"
GITHUB_TOKEN = "ghp_test_token_1234567890"
ISSUE_KEY = "PROJ-123"
ISSUE_SUMMARY = "Fix Login Bug!!"

GITHUB_INFO_PAYLOAD: dict[str, Any] = {
    "issueKey": ISSUE_KEY,
    "branches": [
        {"name": "feature/PROJ-123-fix-login-bug", "url": "https://github.example.com/b/1"}
    ],
    "pullRequests": [
        {
            "number": 7,
            "title": "Fix login bug",
            "url": "https://github.example.com/org/repo/pull/7",
            "state": "open",
        }
    ],
}

EMPTY_GITHUB_INFO_PAYLOAD: dict[str, Any] = {
    "issueKey": ISSUE_KEY,
    "branches": [],
    "pullRequests": [],
}

BATCH_PAYLOAD: dict[str, Any] = {
    "successCount": 2,
    "totalCount": 3,
    "results": [
        {"repository": "org/api", "success": True, "message": "Webhook registered: 11"},
        {"repository": "org/web", "success": True, "message": "Webhook registered: 12"},
        {"repository": "org/ops", "success": False, "message": "Failed: 404 Not Found"},
    ],
}


# -- Factories --


def make_settings(**overrides: Any) -> Settings:
    """Create a Settings instance with test defaults. Override any field."""
    defaults: dict[str, Any] = {"integration_rest_url": REST_URL}
    return Settings(**(defaults | overrides))  # type: ignore[call-arg]


def make_admin_context(**overrides: Any) -> AdminContext:
    defaults: dict[str, Any] = {"rest_url": REST_URL, "reload_delay": 0.0}
    return AdminContext(**(defaults | overrides))


def make_panel_context(**overrides: Any) -> PanelContext:
    defaults: dict[str, Any] = {
        "rest_url": REST_URL,
        "issue_key": ISSUE_KEY,
        "issue_summary": ISSUE_SUMMARY,
    }
    return PanelContext(**(defaults | overrides))


def make_mapping(project_key: str = "PROJ", repo_name: str = "api") -> RepositoryMapping:
    return RepositoryMapping(project_key=project_key, repo_owner="org", repo_name=repo_name)


def make_batch(success_count: int, total_count: int) -> BatchResult:
    return BatchResult(success_count=success_count, total_count=total_count)


def notifications(notifier: MagicMock) -> list[Any]:
    """All Notification objects passed to a mock notifier, in order."""
    return [c.args[0] for c in notifier.notify.call_args_list]


# -- Fixtures --


@pytest.fixture
def notifier() -> MagicMock:
    """Mock host notifier."""
    return MagicMock()


@pytest.fixture
def reloader() -> MagicMock:
    """Mock host page reloader."""
    return MagicMock()


@pytest.fixture
def mock_client() -> AsyncMock:
    """Mock IntegrationClient with successful default responses."""
    client = AsyncMock()
    client.save_config = AsyncMock(side_effect=lambda config: config)
    client.test_connection = AsyncMock(
        return_value=ConnectionTestResult(success=True, message="Connection successful")
    )
    client.generate_secret = AsyncMock(return_value=GeneratedSecret(secret="s3cr3t-value"))
    client.register_webhooks = AsyncMock(return_value=make_batch(3, 3))
    client.get_github_info = AsyncMock(
        return_value=IssueGithubInfo.model_validate(GITHUB_INFO_PAYLOAD)
    )
    client.create_branch = AsyncMock(return_value=CreatedBranch(url="https://x/refs/1"))
    client.create_pull_request = AsyncMock(
        return_value=CreatedPullRequest(number=8, url="https://github.example.com/org/api/pull/8")
    )
    return client
