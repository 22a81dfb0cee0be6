"""Bulk webhook registration across all configured repositories."""

from __future__ import annotations

import structlog

from jira_github_controller.client import IntegrationClientProtocol
from jira_github_controller.metrics import webhook_registrations_total
from jira_github_controller.models import BatchResult
from jira_github_controller.orchestrator import Action, Presentation, RequestOrchestrator
from jira_github_controller.results import OperationResult, Success
from jira_github_controller.view import Control, ReloadScheduler, StatusRegion

log = structlog.get_logger()


def present_batch(batch: BatchResult) -> Presentation:
    """Full success only when every target succeeded and there was at least one.

    Everything else, including 0 of 0, is a warning rather than a failure.
    """
    if batch.is_complete:
        return Presentation(
            kind="success",
            title="Webhooks Registered",
            body=f"Successfully registered {batch.success_count} webhook(s)",
            status=f"{batch.success_count} webhook(s) registered successfully",
        )
    message = f"Registered {batch.success_count} of {batch.total_count} webhooks"
    return Presentation(kind="warning", title="Partial Success", body=message, status=message)


class BatchRegistrationCoordinator:
    """Issues ``register-webhooks`` once; the server fans out per repository."""

    def __init__(
        self,
        client: IntegrationClientProtocol,
        orchestrator: RequestOrchestrator,
        reloads: ReloadScheduler,
        control: Control | None = None,
        status: StatusRegion | None = None,
    ) -> None:
        self._client = client
        self._orchestrator = orchestrator
        self._reloads = reloads
        self.control = control or Control("register-webhooks")
        self.status = status or StatusRegion("register-webhooks-status")

    def _action(self) -> Action[BatchResult]:
        return Action(
            name="register_webhooks",
            control=self.control,
            status=self.status,
            working_text="Registering webhooks...",
            failure_title="Registration Failed",
            failure_message="Failed to register webhooks",
            present=present_batch,
        )

    async def register_all(self) -> OperationResult:
        result = await self._orchestrator.execute(self._action(), self._client.register_webhooks)
        if not isinstance(result, Success):
            return result

        batch: BatchResult = result.payload
        webhook_registrations_total.add(1, {"outcome": batch.outcome})
        await log.ainfo(
            "webhooks_registered",
            outcome=batch.outcome,
            success_count=batch.success_count,
            total_count=batch.total_count,
        )
        if batch.per_target_results:
            await log.ainfo(
                "webhook_registration_results",
                results=[r.model_dump() for r in batch.per_target_results],
            )
        if batch.is_complete:
            self._reloads.schedule()
        return result
