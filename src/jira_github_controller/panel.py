"""GitHub panel on the issue view: linked branches and pull requests."""

from __future__ import annotations

from typing import Literal

import httpx
import structlog
from pydantic import BaseModel, ConfigDict

from jira_github_controller.client import IntegrationClientProtocol
from jira_github_controller.config import PanelContext
from jira_github_controller.metrics import panel_loads_total
from jira_github_controller.models import IssueGithubInfo
from jira_github_controller.results import OperationFailed

log = structlog.get_logger()

LOAD_ERROR_MESSAGE = "Failed to load GitHub information"


class Loading(BaseModel):
    model_config = ConfigDict(frozen=True)
    state: Literal["loading"] = "loading"


class Loaded(BaseModel):
    model_config = ConfigDict(frozen=True)
    state: Literal["loaded"] = "loaded"
    info: IssueGithubInfo


class NoActivity(BaseModel):
    """Nothing linked yet; rendered as a prompt to create a branch, not as empty lists."""

    model_config = ConfigDict(frozen=True)
    state: Literal["no_activity"] = "no_activity"


class LoadError(BaseModel):
    model_config = ConfigDict(frozen=True)
    state: Literal["error"] = "error"
    message: str


PanelState = Loading | Loaded | NoActivity | LoadError


class PanelInfoLoader:
    """Fetches the issue's GitHub info and replaces the panel state wholesale.

    Only the most recent load may publish its result.
    """

    def __init__(self, context: PanelContext, client: IntegrationClientProtocol) -> None:
        self._context = context
        self._client = client
        self._generation = 0
        self.state: PanelState = Loading()

    async def load(self) -> PanelState:
        if not self._context.is_configured:
            await log.ainfo("panel_not_configured")
            return self.state

        issue_key = self._context.issue_key
        self._generation += 1
        generation = self._generation
        self.state = Loading()
        try:
            info = await self._client.get_github_info(issue_key)
        except (OperationFailed, httpx.HTTPError) as exc:
            await log.awarning("github_info_load_failed", issue_key=issue_key, error=str(exc))
            new_state: PanelState = LoadError(message=LOAD_ERROR_MESSAGE)
        else:
            new_state = Loaded(info=info) if info.has_activity else NoActivity()

        if generation != self._generation:
            panel_loads_total.add(1, {"outcome": "stale"})
            await log.adebug("stale_panel_load_discarded", issue_key=issue_key)
            return self.state
        panel_loads_total.add(1, {"outcome": new_state.state})
        self.state = new_state
        return new_state
