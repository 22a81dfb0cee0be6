"""Controller configuration via environment variables and per-page contexts."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_BRANCH = "main"


class Settings(BaseSettings):
    """Controller configuration loaded from environment variables."""

    model_config = {"env_prefix": ""}

    integration_rest_url: str = Field(
        description="Base URL of the plugin REST API, e.g. https://jira/rest/github-integration/1.0"
    )
    jira_base_url: str | None = Field(default=None, description="Jira instance base URL")
    reload_delay: float = Field(
        default=2.0, description="Seconds to wait before reloading the page after a save"
    )
    log_level: str = Field(default="info", description="Log level")

    @field_validator("integration_rest_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("INTEGRATION_REST_URL must not be empty")
        return v.strip().rstrip("/")

    @field_validator("reload_delay")
    @classmethod
    def _non_negative_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("RELOAD_DELAY must be >= 0")
        return v

    def admin_context(self) -> "AdminContext":
        return AdminContext(rest_url=self.integration_rest_url, reload_delay=self.reload_delay)

    def panel_context(self, issue_key: str, issue_summary: str = "") -> "PanelContext":
        return PanelContext(
            rest_url=self.integration_rest_url, issue_key=issue_key, issue_summary=issue_summary
        )


class AdminContext(BaseModel):
    """Everything the admin configuration page needs; passed explicitly to its controller."""

    model_config = ConfigDict(frozen=True)

    rest_url: str = Field(description="Plugin REST base URL")
    reload_delay: float = Field(default=2.0, description="Delay before a post-success reload")


class PanelContext(BaseModel):
    """Issue view context for the GitHub panel."""

    model_config = ConfigDict(frozen=True)

    rest_url: str = Field(description="Plugin REST base URL")
    issue_key: str = Field(description="Issue key, e.g. 'PROJ-123'")
    issue_summary: str = Field(default="", description="Issue summary used for branch auto-fill")

    @property
    def is_configured(self) -> bool:
        """A panel rendered without issue key or REST URL stays inert."""
        return bool(self.issue_key and self.rest_url)
