"""Async client for the GitHub integration plugin REST API."""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

import httpx
import structlog
from pydantic import BaseModel

from jira_github_controller.models import (
    BatchResult,
    Configuration,
    ConnectionTestRequest,
    ConnectionTestResult,
    CreateBranchRequest,
    CreatedBranch,
    CreatedPullRequest,
    CreatePullRequestRequest,
    GeneratedSecret,
    IssueGithubInfo,
)
from jira_github_controller.results import OperationFailed

log = structlog.get_logger()

INVALID_RESPONSE_MESSAGE = "Invalid response from server"

M = TypeVar("M", bound=BaseModel)


class IntegrationAPIError(OperationFailed):
    """Non-2xx or unparseable response from the plugin REST API."""

    def __init__(self, message: str, status_code: int, body: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_response(cls, response: httpx.Response, error_field: str) -> IntegrationAPIError:
        message = extract_error_message(response, error_field)
        return cls(message, response.status_code, response.text)


def extract_error_message(response: httpx.Response, error_field: str = "error") -> str:
    """Structured error field if present, else the raw body. Empty if neither."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        value = data.get(error_field)
        if isinstance(value, str) and value:
            return value
    return response.text.strip()


class IntegrationClientProtocol(Protocol):
    """Interface for plugin REST operations."""

    async def save_config(self, config: Configuration) -> Configuration: ...
    async def test_connection(self, request: ConnectionTestRequest) -> ConnectionTestResult: ...
    async def generate_secret(self) -> GeneratedSecret: ...
    async def register_webhooks(self) -> BatchResult: ...
    async def get_github_info(self, issue_key: str) -> IssueGithubInfo: ...
    async def create_branch(self, request: CreateBranchRequest) -> CreatedBranch: ...
    async def create_pull_request(
        self, request: CreatePullRequestRequest
    ) -> CreatedPullRequest: ...


class IntegrationClient:
    """Plugin REST client. Authentication rides on whatever headers the host provides."""

    def __init__(
        self,
        rest_url: str,
        *,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=rest_url.rstrip("/"),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                **(headers or {}),
            },
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        model: type[M],
        *,
        json: dict[str, Any] | None = None,
        error_field: str = "error",
    ) -> M:
        resp = await self._client.request(method, path, json=json)
        if resp.is_error:
            await log.awarning(
                "integration_request_failed", method=method, path=path, status=resp.status_code
            )
            raise IntegrationAPIError.from_response(resp, error_field)
        try:
            data = resp.json() if resp.content else {}
            return model.model_validate(data)
        except ValueError as exc:
            # Covers non-JSON bodies (e.g. a login page) and wrong-shaped JSON
            await log.awarning(
                "integration_response_invalid", method=method, path=path, error=str(exc)
            )
            raise IntegrationAPIError(
                INVALID_RESPONSE_MESSAGE, resp.status_code, resp.text
            ) from exc

    async def save_config(self, config: Configuration) -> Configuration:
        saved = await self._request(
            "PUT", "/config", Configuration, json=config.to_request_body()
        )
        await log.ainfo("config_saved", repositories=len(config.mappings))
        return saved

    async def test_connection(self, request: ConnectionTestRequest) -> ConnectionTestResult:
        return await self._request(
            "POST",
            "/config/test-connection",
            ConnectionTestResult,
            json=request.model_dump(by_alias=True),
            error_field="message",
        )

    async def generate_secret(self) -> GeneratedSecret:
        return await self._request("POST", "/config/generate-secret", GeneratedSecret)

    async def register_webhooks(self) -> BatchResult:
        return await self._request("POST", "/config/register-webhooks", BatchResult)

    async def get_github_info(self, issue_key: str) -> IssueGithubInfo:
        return await self._request("GET", f"/issue/{issue_key}/github-info", IssueGithubInfo)

    async def create_branch(self, request: CreateBranchRequest) -> CreatedBranch:
        created = await self._request(
            "POST", "/branch/create", CreatedBranch, json=request.model_dump(by_alias=True)
        )
        await log.ainfo("branch_created", issue=request.issue_key, branch=request.branch_name)
        return created

    async def create_pull_request(self, request: CreatePullRequestRequest) -> CreatedPullRequest:
        created = await self._request(
            "POST", "/pr/create", CreatedPullRequest, json=request.model_dump(by_alias=True)
        )
        await log.ainfo("pull_request_created", issue=request.issue_key, number=created.number)
        return created
