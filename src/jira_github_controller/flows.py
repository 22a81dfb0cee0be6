"""Create-branch and create-pull-request dialogs on the GitHub panel."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Literal, TypeVar

import structlog
from pydantic import BaseModel

from jira_github_controller.client import IntegrationClientProtocol
from jira_github_controller.config import DEFAULT_BRANCH, PanelContext
from jira_github_controller.metrics import validation_rejections_total
from jira_github_controller.models import (
    CreateBranchRequest,
    CreatedBranch,
    CreatedPullRequest,
    CreatePullRequestRequest,
)
from jira_github_controller.orchestrator import Action, Presentation, RequestOrchestrator
from jira_github_controller.panel import PanelInfoLoader
from jira_github_controller.results import Failure, OperationResult, Success
from jira_github_controller.validation import (
    Invalid,
    ValidationResult,
    suggest_branch_name,
    validate_branch_form,
    validate_pull_request_form,
)
from jira_github_controller.view import Control, Dialog, ModalDialog, Notifier, StatusRegion

log = structlog.get_logger()

T = TypeVar("T")

DialogState = Literal["closed", "open", "submitting"]


class BranchForm(BaseModel):
    base_branch: str = DEFAULT_BRANCH
    branch_name: str = ""


class PullRequestForm(BaseModel):
    source_branch: str = ""
    target_branch: str = DEFAULT_BRANCH
    title: str = ""
    description: str = ""


class _CreationFlow(ABC):
    """Closed → Open → Submitting → Closed on success, Open with an error otherwise."""

    name: str

    def __init__(
        self,
        context: PanelContext,
        client: IntegrationClientProtocol,
        notifier: Notifier,
        panel: PanelInfoLoader,
        dialog: Dialog,
    ) -> None:
        self._context = context
        self._client = client
        self._orchestrator = RequestOrchestrator(notifier)
        self._panel = panel
        self.dialog = dialog
        self.control = Control(f"{self.name}-submit")
        self.status = StatusRegion(f"{self.name}-status")

    @property
    def state(self) -> DialogState:
        if not self.dialog.is_open:
            return "closed"
        if self.control.disabled:
            return "submitting"
        return "open"

    def open(self) -> None:
        self.dialog.show()

    def cancel(self) -> None:
        self.dialog.hide()
        self.clear_form()

    @abstractmethod
    def clear_form(self) -> None:
        """Reset the form fields and the dialog status."""

    async def _submit(
        self,
        verdict: ValidationResult,
        action: Action[T],
        call: Callable[[], Awaitable[T]],
    ) -> OperationResult:
        if self.state == "closed":
            await log.ainfo("submit_ignored_dialog_closed", flow=self.name)
            return Failure(message="Dialog is not open")
        if isinstance(verdict, Invalid):
            self.status.error(verdict.reason)
            validation_rejections_total.add(1, {"action": action.name})
            return Failure(message=verdict.reason)

        result = await self._orchestrator.execute(action, call)
        if isinstance(result, Success):
            self.dialog.hide()
            self.clear_form()
            await self._panel.load()
        return result


class BranchCreationFlow(_CreationFlow):
    name = "create-branch"

    def __init__(
        self,
        context: PanelContext,
        client: IntegrationClientProtocol,
        notifier: Notifier,
        panel: PanelInfoLoader,
        dialog: Dialog | None = None,
    ) -> None:
        super().__init__(
            context, client, notifier, panel, dialog or ModalDialog("github-create-branch-dialog")
        )
        self.form = BranchForm()

    def autofill(self) -> str:
        """Suggest a branch name from the issue key and summary."""
        self.form.branch_name = suggest_branch_name(
            self._context.issue_key, self._context.issue_summary
        )
        return self.form.branch_name

    def clear_form(self) -> None:
        self.form = BranchForm()
        self.status.clear()

    async def submit(self) -> OperationResult:
        branch_name = self.form.branch_name
        request = CreateBranchRequest(
            issue_key=self._context.issue_key,
            base_branch=self.form.base_branch,
            branch_name=branch_name,
        )

        def _present(_: CreatedBranch) -> Presentation:
            return Presentation(
                kind="success",
                title="Branch Created",
                body=f"Branch {branch_name} created successfully!",
            )

        action: Action[CreatedBranch] = Action(
            name="create_branch",
            control=self.control,
            status=self.status,
            working_text="Creating branch...",
            failure_title="Error",
            failure_message="Failed to create branch",
            present=_present,
        )
        return await self._submit(
            validate_branch_form(branch_name),
            action,
            lambda: self._client.create_branch(request),
        )


class PullRequestCreationFlow(_CreationFlow):
    name = "create-pr"

    def __init__(
        self,
        context: PanelContext,
        client: IntegrationClientProtocol,
        notifier: Notifier,
        panel: PanelInfoLoader,
        dialog: Dialog | None = None,
    ) -> None:
        super().__init__(
            context, client, notifier, panel, dialog or ModalDialog("github-create-pr-dialog")
        )
        self.form = PullRequestForm()

    def clear_form(self) -> None:
        # Title is kept so a follow-up PR can reuse it
        self.form = PullRequestForm(title=self.form.title)
        self.status.clear()

    async def submit(self) -> OperationResult:
        form = self.form
        verdict = validate_pull_request_form(form.source_branch, form.title)

        def _call() -> Awaitable[CreatedPullRequest]:
            return self._client.create_pull_request(
                CreatePullRequestRequest(
                    issue_key=self._context.issue_key,
                    source_branch=form.source_branch,
                    target_branch=form.target_branch,
                    title=form.title,
                    description=form.description,
                )
            )

        action: Action[CreatedPullRequest] = Action(
            name="create_pull_request",
            control=self.control,
            status=self.status,
            working_text="Creating pull request...",
            failure_title="Error",
            failure_message="Failed to create pull request",
            present=lambda pr: Presentation(
                kind="success",
                title="Pull Request Created",
                body=f"PR #{pr.number} created successfully! {pr.url}".rstrip(),
            ),
        )
        return await self._submit(verdict, action, _call)
