"""Tests for single-request orchestration."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from jira_github_controller.orchestrator import Action, Presentation, RequestOrchestrator
from jira_github_controller.results import Failure, InFlight, OperationFailed, Success
from jira_github_controller.view import Control, StatusRegion
from tests.conftest import notifications


def _action(control: Control, status: StatusRegion | None = None) -> Action[str]:
    return Action(
        name="do_thing",
        control=control,
        status=status,
        working_text="Working...",
        failure_title="Thing Failed",
        failure_message="Failed to do thing",
        present=lambda payload: Presentation(
            kind="success", title="Done", body=f"Got {payload}", status="Thing done"
        ),
    )


@pytest.fixture
def control() -> Control:
    return Control("thing")


@pytest.fixture
def status() -> StatusRegion:
    return StatusRegion("thing-status")


@pytest.fixture
def orchestrator(notifier: MagicMock) -> RequestOrchestrator:
    return RequestOrchestrator(notifier)


class TestExecute:
    async def test_success(
        self,
        orchestrator: RequestOrchestrator,
        control: Control,
        status: StatusRegion,
        notifier: MagicMock,
    ) -> None:
        result = await orchestrator.execute(_action(control, status), AsyncMock(return_value="x"))

        assert result == Success(payload="x")
        assert control.result == result
        assert not control.disabled
        assert (status.kind, status.text) == ("success", "Thing done")
        (note,) = notifications(notifier)
        assert (note.type, note.title, note.body) == ("success", "Done", "Got x")

    async def test_control_disabled_while_in_flight(
        self, orchestrator: RequestOrchestrator, control: Control, status: StatusRegion
    ) -> None:
        seen: list[tuple[bool, bool, str, str]] = []

        async def _call() -> str:
            seen.append((control.disabled, control.aria_disabled, status.kind, status.text))
            return "x"

        await orchestrator.execute(_action(control, status), _call)
        assert seen == [(True, True, "working", "Working...")]
        assert not control.disabled

    async def test_structured_failure_message(
        self,
        orchestrator: RequestOrchestrator,
        control: Control,
        status: StatusRegion,
        notifier: MagicMock,
    ) -> None:
        call = AsyncMock(side_effect=OperationFailed("Branch already exists"))
        result = await orchestrator.execute(_action(control, status), call)

        assert result == Failure(message="Branch already exists")
        assert not control.disabled
        assert (status.kind, status.text) == ("error", "Branch already exists")
        (note,) = notifications(notifier)
        assert (note.type, note.title) == ("error", "Thing Failed")
        assert note.body == "Branch already exists"

    async def test_empty_failure_message_uses_generic(
        self, orchestrator: RequestOrchestrator, control: Control
    ) -> None:
        call = AsyncMock(side_effect=OperationFailed(""))
        result = await orchestrator.execute(_action(control), call)
        assert result == Failure(message="Failed to do thing")

    async def test_transport_error_uses_generic_message(
        self, orchestrator: RequestOrchestrator, control: Control, notifier: MagicMock
    ) -> None:
        call = AsyncMock(side_effect=httpx.ConnectError("refused"))
        result = await orchestrator.execute(_action(control), call)

        assert result == Failure(message="Failed to do thing")
        assert not control.disabled
        assert notifications(notifier)[0].body == "Failed to do thing"

    async def test_unexpected_error_propagates_and_releases_control(
        self, orchestrator: RequestOrchestrator, control: Control
    ) -> None:
        call = AsyncMock(side_effect=RuntimeError("bug"))
        with pytest.raises(RuntimeError):
            await orchestrator.execute(_action(control), call)
        assert not control.disabled
        assert control.result is None

    async def test_busy_control_issues_no_request(
        self, orchestrator: RequestOrchestrator, control: Control, notifier: MagicMock
    ) -> None:
        control.result = InFlight()
        call = AsyncMock()
        result = await orchestrator.execute(_action(control), call)

        assert result == InFlight()
        call.assert_not_awaited()
        notifier.notify.assert_not_called()

    async def test_no_status_region(
        self, orchestrator: RequestOrchestrator, control: Control, notifier: MagicMock
    ) -> None:
        result = await orchestrator.execute(_action(control), AsyncMock(return_value="x"))
        assert isinstance(result, Success)
        assert notifier.notify.call_count == 1

    async def test_warning_presentation(
        self,
        orchestrator: RequestOrchestrator,
        control: Control,
        status: StatusRegion,
        notifier: MagicMock,
    ) -> None:
        action = Action(
            name="partial",
            control=control,
            status=status,
            working_text="Working...",
            failure_title="Failed",
            failure_message="Failed",
            present=lambda _: Presentation(
                kind="warning", title="Partial", body="1 of 2", status="1 of 2"
            ),
        )
        result = await orchestrator.execute(action, AsyncMock(return_value=None))

        assert isinstance(result, Success)
        assert status.kind == "warning"
        assert notifications(notifier)[0].type == "warning"

    async def test_control_usable_again_after_failure(
        self, orchestrator: RequestOrchestrator, control: Control
    ) -> None:
        await orchestrator.execute(_action(control), AsyncMock(side_effect=OperationFailed("no")))
        result = await orchestrator.execute(_action(control), AsyncMock(return_value="y"))
        assert result == Success(payload="y")
