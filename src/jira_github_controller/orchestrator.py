"""Single-request orchestration: busy state, call, outcome presentation, release."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

import httpx
import structlog

from jira_github_controller.metrics import operation_duration, operations_total
from jira_github_controller.results import (
    Failure,
    InFlight,
    OperationFailed,
    OperationResult,
    Success,
)
from jira_github_controller.telemetry import get_tracer
from jira_github_controller.view import Control, Notification, Notifier, StatusRegion

log = structlog.get_logger()
_tracer = get_tracer(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Presentation:
    """How a successful call is shown. ``status=None`` leaves the status region alone."""

    kind: Literal["success", "warning", "info"]
    title: str
    body: str
    status: str | None = None


@dataclass(frozen=True)
class Action(Generic[T]):
    """Static description of one user-triggered request and how to present it."""

    name: str
    control: Control
    working_text: str
    failure_title: str
    failure_message: str
    present: Callable[[T], Presentation]
    status: StatusRegion | None = None


class RequestOrchestrator:
    """Runs one request per user action and reports the outcome.

    The control is disabled before the request goes out and is re-enabled
    on every exit path. Failed requests are not retried.
    """

    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier

    async def execute(self, action: Action[T], call: Callable[[], Awaitable[T]]) -> OperationResult:
        if action.control.disabled:
            await log.ainfo("action_ignored_while_busy", action=action.name)
            return InFlight()

        bound_log = log.bind(action=action.name)
        start = time.monotonic()
        outcome = "error"
        with _tracer.start_as_current_span(
            f"controller.{action.name}", attributes={"action": action.name}
        ):
            async with action.control.busy():
                if action.status is not None:
                    action.status.working(action.working_text)
                try:
                    payload = await call()
                    presentation = action.present(payload)
                except OperationFailed as exc:
                    outcome = "failure"
                    message = exc.message or action.failure_message
                    await bound_log.awarning("action_failed", error=message)
                    result: OperationResult = self._present_failure(action, message)
                except httpx.HTTPError as exc:
                    outcome = "failure"
                    await bound_log.awarning("action_transport_error", error=str(exc))
                    result = self._present_failure(action, action.failure_message)
                except Exception:
                    await bound_log.aexception("action_crashed")
                    raise
                else:
                    outcome = presentation.kind
                    self._present_success(action, presentation)
                    result = Success(payload=payload)
                    await bound_log.ainfo("action_completed", outcome=outcome)
                finally:
                    operations_total.add(1, {"action": action.name, "outcome": outcome})
                    operation_duration.record(
                        time.monotonic() - start, {"action": action.name, "outcome": outcome}
                    )
                action.control.result = result
                return result

    def _present_success(self, action: Action[T], presentation: Presentation) -> None:
        if action.status is not None and presentation.status is not None:
            if presentation.kind == "warning":
                action.status.warning(presentation.status)
            else:
                action.status.success(presentation.status)
        self._notifier.notify(
            Notification(type=presentation.kind, title=presentation.title, body=presentation.body)
        )

    def _present_failure(self, action: Action[T], message: str) -> Failure:
        if action.status is not None:
            action.status.error(message)
        self._notifier.notify(Notification(type="error", title=action.failure_title, body=message))
        return Failure(message=message)
