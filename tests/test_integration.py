"""Integration tests: admin page and issue panel against the mock plugin REST API."""

from collections.abc import AsyncIterator, Iterator
from unittest.mock import MagicMock

import httpx
import pytest

from jira_github_controller.admin import TOKEN_SET_PLACEHOLDER, AdminController, ConfigForm
from jira_github_controller.client import IntegrationClient
from jira_github_controller.config import PanelContext
from jira_github_controller.main import IssuePanel
from jira_github_controller.models import Configuration
from jira_github_controller.panel import Loaded, NoActivity
from jira_github_controller.results import Failure, Success
from tests.conftest import (
    ENTERPRISE_URL,
    GITHUB_TOKEN,
    ISSUE_KEY,
    ISSUE_SUMMARY,
    make_admin_context,
    notifications,
)
from tests.e2e import mock_integration

REST_URL = f"http://testserver{mock_integration.PREFIX}"


@pytest.fixture(autouse=True)
def _reset_backend() -> Iterator[None]:
    mock_integration.reset()
    yield
    mock_integration.reset()


@pytest.fixture
async def client() -> AsyncIterator[IntegrationClient]:
    transport = httpx.ASGITransport(app=mock_integration.app)
    integration = IntegrationClient(REST_URL, transport=transport)
    yield integration
    await integration.close()


@pytest.fixture
async def admin(
    client: IntegrationClient, notifier: MagicMock, reloader: MagicMock
) -> AsyncIterator[AdminController]:
    form = ConfigForm(enterprise_url=ENTERPRISE_URL)
    form.token.value = GITHUB_TOKEN
    first = form.mappings.rows[0].row_id
    form.mappings.update_row(first, project_key="PROJ", repo_owner="org", repo_name="api")
    form.mappings.add_row(project_key="PROJ", repo_owner="org", repo_name="web")
    controller = AdminController(make_admin_context(), client, notifier, reloader, form)
    yield controller
    await controller.aclose()


@pytest.fixture
def panel(client: IntegrationClient, notifier: MagicMock) -> IssuePanel:
    context = PanelContext(rest_url=REST_URL, issue_key=ISSUE_KEY, issue_summary=ISSUE_SUMMARY)
    return IssuePanel(context, client, notifier)


async def test_save_then_register_webhooks(admin: AdminController) -> None:
    assert isinstance(await admin.save(), Success)
    assert mock_integration.config["githubToken"] == GITHUB_TOKEN
    assert admin.form.token.placeholder == TOKEN_SET_PLACEHOLDER

    result = await admin.register_webhooks()

    assert isinstance(result, Success)
    assert result.payload.outcome == "complete"
    assert admin.webhooks.status.text == "2 webhook(s) registered successfully"


async def test_resave_without_token_keeps_stored_token(admin: AdminController) -> None:
    await admin.save()
    assert admin.form.token.value == ""
    result = await admin.save()

    assert isinstance(result, Success)
    saved: Configuration = result.payload
    assert saved.token == mock_integration.MASK
    assert mock_integration.config["githubToken"] == GITHUB_TOKEN


async def test_partial_webhook_registration(admin: AdminController, notifier: MagicMock) -> None:
    await admin.save()
    mock_integration.failing_repos.add("org/web")

    await admin.register_webhooks()

    assert admin.webhooks.status.kind == "warning"
    assert notifications(notifier)[-1].body == "Registered 1 of 2 webhooks"


async def test_register_without_token_reports_server_error(admin: AdminController) -> None:
    admin.form.token.value = ""
    await admin.save()
    result = await admin.register_webhooks()
    assert result == Failure(message="GitHub token is not configured")


async def test_connection_test_messages(admin: AdminController) -> None:
    assert isinstance(await admin.test_connection(), Success)
    assert admin.test_status.text == "Connection successful"

    admin.form.token.value = "bad"
    assert await admin.test_connection() == Failure(message="Bad credentials")

    admin.form.token.value = ""
    assert await admin.test_connection() == Failure(message="GitHub token is required")


async def test_generate_secret_round_trip(admin: AdminController) -> None:
    await admin.generate_secret()
    secret = admin.form.webhook_secret.value
    assert len(secret) == 64

    await admin.save()
    assert mock_integration.config["webhookSecret"] == secret


async def test_panel_branch_and_pull_request(panel: IssuePanel) -> None:
    assert isinstance(await panel.mount(), NoActivity)

    panel.branch.open()
    branch_name = panel.branch.autofill()
    assert isinstance(await panel.branch.submit(), Success)

    state = panel.info.state
    assert isinstance(state, Loaded)
    assert [b.name for b in state.info.branches] == [branch_name]

    panel.pull_request.open()
    panel.pull_request.form.source_branch = branch_name
    panel.pull_request.form.title = "Fix login bug"
    assert isinstance(await panel.pull_request.submit(), Success)

    state = panel.info.state
    assert isinstance(state, Loaded)
    assert state.info.pull_requests[0].number == 1


async def test_duplicate_branch_keeps_dialog_open(panel: IssuePanel) -> None:
    await panel.mount()
    for _ in range(2):
        panel.branch.open()
        panel.branch.form.branch_name = "feature/dup"
        result = await panel.branch.submit()

    assert result == Failure(message="Reference already exists")
    assert panel.branch.state == "open"
    assert panel.branch.form.branch_name == "feature/dup"
