"""Entry points that assemble the admin page and issue panel controllers."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

import structlog

from jira_github_controller.admin import AdminController, ConfigForm
from jira_github_controller.client import IntegrationClient
from jira_github_controller.config import PanelContext, Settings
from jira_github_controller.flows import BranchCreationFlow, PullRequestCreationFlow
from jira_github_controller.models import Configuration
from jira_github_controller.panel import PanelInfoLoader, PanelState
from jira_github_controller.telemetry import (
    configure_logging,
    init_telemetry,
    shutdown_telemetry,
)
from jira_github_controller.view import LogNotifier, Notifier, PageReloader

log = structlog.get_logger()


@contextmanager
def bootstrap(settings: Settings) -> Iterator[None]:
    """Configure logging and telemetry export for the lifetime of the block.

    Export is only enabled when an OTLP endpoint is set; providers are flushed on exit.
    """
    configure_logging(settings.log_level)
    init_telemetry()
    try:
        yield
    finally:
        shutdown_telemetry()


class IssuePanel:
    """GitHub panel for one issue: info list plus the two creation dialogs."""

    def __init__(
        self, context: PanelContext, client: IntegrationClient, notifier: Notifier
    ) -> None:
        self.context = context
        self._client = client
        self.info = PanelInfoLoader(context, client)
        self.branch = BranchCreationFlow(context, client, notifier, self.info)
        self.pull_request = PullRequestCreationFlow(context, client, notifier, self.info)

    async def mount(self) -> PanelState:
        await log.ainfo("panel_initializing", issue_key=self.context.issue_key)
        return await self.info.load()

    async def aclose(self) -> None:
        await self._client.close()


@asynccontextmanager
async def issue_panel(
    settings: Settings,
    issue_key: str,
    issue_summary: str = "",
    notifier: Notifier | None = None,
) -> AsyncIterator[IssuePanel]:
    context = settings.panel_context(issue_key, issue_summary)
    panel = IssuePanel(context, IntegrationClient(context.rest_url), notifier or LogNotifier())
    try:
        await panel.mount()
        yield panel
    finally:
        await panel.aclose()


@asynccontextmanager
async def admin_page(
    settings: Settings,
    reloader: PageReloader,
    stored: Configuration | None = None,
    notifier: Notifier | None = None,
) -> AsyncIterator[AdminController]:
    context = settings.admin_context()
    client = IntegrationClient(context.rest_url)
    form = ConfigForm.from_configuration(stored) if stored else ConfigForm()
    controller = AdminController(context, client, notifier or LogNotifier(), reloader, form)
    await log.ainfo("admin_page_initializing", rest_url=context.rest_url)
    try:
        yield controller
    finally:
        await controller.aclose()
        await client.close()
