"""Admin configuration page: save, test connection, generate secret, register webhooks."""

from __future__ import annotations

import structlog
from pydantic import BaseModel, ConfigDict, Field

from jira_github_controller.client import IntegrationClientProtocol
from jira_github_controller.config import AdminContext
from jira_github_controller.mappings import MappingCollection
from jira_github_controller.metrics import validation_rejections_total
from jira_github_controller.models import (
    DEFAULT_BRANCH_NAMING,
    Configuration,
    ConnectionTestRequest,
    ConnectionTestResult,
    GeneratedSecret,
    TransitionMap,
)
from jira_github_controller.orchestrator import Action, Presentation, RequestOrchestrator
from jira_github_controller.results import Failure, OperationFailed, OperationResult, Success
from jira_github_controller.validation import Invalid, validate_config, validate_connection_test
from jira_github_controller.view import (
    Control,
    Notifier,
    PageReloader,
    ReloadScheduler,
    StatusRegion,
)
from jira_github_controller.webhooks import BatchRegistrationCoordinator

log = structlog.get_logger()

MASKED_VALUE = "********"
TOKEN_SET_PLACEHOLDER = "Token is set - enter new token to update"
SECRET_SET_PLACEHOLDER = "Secret is set - enter new secret to update"


class SecretInput(BaseModel):
    """Write-only form input. The stored value is never shown, only hinted at."""

    value: str = ""
    placeholder: str = ""
    revealed: bool = False

    def mark_stored(self, placeholder: str) -> None:
        self.value = ""
        self.placeholder = placeholder
        self.revealed = False


class ConfigForm(BaseModel):
    """Page-local form state; authoritative only after a successful save."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    enterprise_url: str = ""
    api_url: str = ""
    token: SecretInput = Field(default_factory=SecretInput)
    trust_custom_certificates: bool = False
    webhook_url: str = ""
    webhook_secret: SecretInput = Field(default_factory=SecretInput)
    branch_naming: str = DEFAULT_BRANCH_NAMING
    mappings: MappingCollection = Field(default_factory=MappingCollection)
    transitions: TransitionMap = Field(default_factory=TransitionMap)

    @classmethod
    def from_configuration(cls, config: Configuration) -> ConfigForm:
        """Seed the form from a stored (masked) configuration."""
        form = cls(
            enterprise_url=config.enterprise_url,
            api_url=config.api_url,
            trust_custom_certificates=config.trust_custom_certificates,
            webhook_url=config.webhook_url,
            branch_naming=config.branch_naming_template,
            mappings=MappingCollection(config.mappings),
            transitions=config.transition_mappings.model_copy(),
        )
        if config.token:
            form.token.placeholder = TOKEN_SET_PLACEHOLDER
        if config.webhook_secret:
            form.webhook_secret.placeholder = SECRET_SET_PLACEHOLDER
        return form

    def to_configuration(self) -> Configuration:
        """Trimmed snapshot of the form with incomplete mapping rows dropped."""
        token = self.token.value.strip()
        secret = self.webhook_secret.value.strip()
        return Configuration(
            enterprise_url=self.enterprise_url.strip(),
            api_url=self.api_url.strip(),
            token="" if token == MASKED_VALUE else token,
            trust_custom_certificates=self.trust_custom_certificates,
            webhook_url=self.webhook_url.strip(),
            webhook_secret="" if secret == MASKED_VALUE else secret,
            branch_naming_template=self.branch_naming.strip(),
            mappings=self.mappings.collect(),
            transition_mappings=TransitionMap(
                **{k: v.strip() for k, v in self.transitions.model_dump().items()}
            ),
        )


def _present_saved(_: Configuration) -> Presentation:
    return Presentation(
        kind="success",
        title="Configuration Saved",
        body="GitHub integration configuration saved successfully!",
        status="Configuration saved successfully",
    )


def _present_connection(result: ConnectionTestResult) -> Presentation:
    return Presentation(
        kind="success",
        title="Connection Successful",
        body=result.message or "Successfully connected to GitHub Enterprise",
        status="Connection successful",
    )


def _present_secret(_: GeneratedSecret) -> Presentation:
    return Presentation(
        kind="info",
        title="Secret Generated",
        body="A new webhook secret has been generated. Click Save to apply.",
    )


class AdminController:
    """Wires the admin form to the plugin REST API.

    Each button has its own control and status region, so different actions
    may be in flight at the same time.
    """

    def __init__(
        self,
        context: AdminContext,
        client: IntegrationClientProtocol,
        notifier: Notifier,
        reloader: PageReloader,
        form: ConfigForm | None = None,
    ) -> None:
        self._context = context
        self._client = client
        self._orchestrator = RequestOrchestrator(notifier)
        self._reloads = ReloadScheduler(reloader, context.reload_delay)
        self.form = form or ConfigForm()

        self.save_control = Control("save-config")
        self.save_status = StatusRegion("save-status")
        self.test_control = Control("test-connection")
        self.test_status = StatusRegion("test-connection-status")
        self.generate_control = Control("generate-secret")
        self.webhooks = BatchRegistrationCoordinator(
            client,
            self._orchestrator,
            self._reloads,
            Control("register-webhooks"),
            StatusRegion("register-webhooks-status"),
        )

    @property
    def reload_pending(self) -> bool:
        return self._reloads.pending

    async def save(self) -> OperationResult:
        config = self.form.to_configuration()
        verdict = validate_config(config)
        if isinstance(verdict, Invalid):
            return self._reject("save_config", self.save_status, verdict.reason)

        action: Action[Configuration] = Action(
            name="save_config",
            control=self.save_control,
            status=self.save_status,
            working_text="Saving configuration...",
            failure_title="Configuration Error",
            failure_message="Failed to save configuration",
            present=_present_saved,
        )
        result = await self._orchestrator.execute(action, lambda: self._client.save_config(config))
        if isinstance(result, Success):
            if self.form.token.value:
                self.form.token.mark_stored(TOKEN_SET_PLACEHOLDER)
            if self.form.webhook_secret.value:
                self.form.webhook_secret.mark_stored(SECRET_SET_PLACEHOLDER)
            self._reloads.schedule()
        return result

    async def test_connection(self) -> OperationResult:
        enterprise_url = self.form.enterprise_url.strip()
        verdict = validate_connection_test(enterprise_url)
        if isinstance(verdict, Invalid):
            return self._reject("test_connection", self.test_status, verdict.reason)

        request = ConnectionTestRequest(
            enterprise_url=enterprise_url,
            token=self.form.token.value.strip() or None,
            trust_custom_certificates=self.form.trust_custom_certificates,
        )

        async def _call() -> ConnectionTestResult:
            result = await self._client.test_connection(request)
            if not result.success:
                raise OperationFailed(result.message or "Failed to connect to GitHub Enterprise")
            return result

        action: Action[ConnectionTestResult] = Action(
            name="test_connection",
            control=self.test_control,
            status=self.test_status,
            working_text="Testing connection...",
            failure_title="Connection Failed",
            failure_message="Connection test failed",
            present=_present_connection,
        )
        return await self._orchestrator.execute(action, _call)

    async def generate_secret(self) -> OperationResult:
        async def _call() -> GeneratedSecret:
            generated = await self._client.generate_secret()
            if not generated.secret:
                raise OperationFailed("Failed to generate secret")
            return generated

        action: Action[GeneratedSecret] = Action(
            name="generate_secret",
            control=self.generate_control,
            working_text="Generating secret...",
            failure_title="Generation Failed",
            failure_message="Failed to generate secret",
            present=_present_secret,
        )
        result = await self._orchestrator.execute(action, _call)
        if isinstance(result, Success):
            self.form.webhook_secret.value = result.payload.secret
            self.form.webhook_secret.revealed = True
        return result

    async def register_webhooks(self) -> OperationResult:
        return await self.webhooks.register_all()

    def cancel(self) -> None:
        """Discard unsaved edits by reloading the page."""
        self._reloads.reload_now()

    async def aclose(self) -> None:
        await self._reloads.aclose()

    def _reject(self, action: str, status: StatusRegion, reason: str) -> Failure:
        status.error(reason)
        validation_rejections_total.add(1, {"action": action})
        log.info("validation_rejected", action=action, reason=reason)
        return Failure(message=reason)
