"""UI state observed by the host page, and host-platform service interfaces."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from typing import Literal, Protocol, runtime_checkable

import structlog
from pydantic import BaseModel, ConfigDict, Field

from jira_github_controller.results import InFlight, OperationResult

log = structlog.get_logger()

NotificationType = Literal["success", "error", "warning", "info"]
StatusKind = Literal["idle", "working", "success", "error", "warning"]


class Notification(BaseModel):
    """A transient host notification ("flag")."""

    model_config = ConfigDict(frozen=True)

    type: NotificationType
    title: str
    body: str
    close: Literal["auto", "manual"] = Field(default="auto", description="Dismiss behaviour")


@runtime_checkable
class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


@runtime_checkable
class Dialog(Protocol):
    @property
    def is_open(self) -> bool: ...
    def show(self) -> None: ...
    def hide(self) -> None: ...


@runtime_checkable
class PageReloader(Protocol):
    def reload(self) -> None: ...


class LogNotifier:
    """Notifier for headless use: writes every notification to the log."""

    def notify(self, notification: Notification) -> None:
        log.info(
            "notification",
            type=notification.type,
            title=notification.title,
            body=notification.body,
        )


class ModalDialog:
    """In-memory modal visibility flag."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def show(self) -> None:
        self._open = True

    def hide(self) -> None:
        self._open = False


class Control:
    """A button whose enabled state follows the result of its last action."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.result: OperationResult | None = None

    @property
    def disabled(self) -> bool:
        return isinstance(self.result, InFlight)

    @property
    def aria_disabled(self) -> bool:
        return self.disabled

    @asynccontextmanager
    async def busy(self) -> AsyncIterator[None]:
        """Hold the control disabled for the duration of the block.

        If the block exits without recording a final result the control goes
        back to idle, so it is re-enabled on every exit path.
        """
        self.result = InFlight()
        try:
            yield
        finally:
            if isinstance(self.result, InFlight):
                self.result = None


class StatusRegion:
    """Persistent inline status text next to a control or inside a dialog."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.kind: StatusKind = "idle"
        self.text = ""

    def _set(self, kind: StatusKind, text: str) -> None:
        self.kind = kind
        self.text = text

    def working(self, text: str) -> None:
        self._set("working", text)

    def success(self, text: str) -> None:
        self._set("success", text)

    def error(self, text: str) -> None:
        self._set("error", text)

    def warning(self, text: str) -> None:
        self._set("warning", text)

    def clear(self) -> None:
        self._set("idle", "")


class ReloadScheduler:
    """Reloads the page, either now or after a delay, via the host reloader."""

    def __init__(self, reloader: PageReloader, delay: float = 2.0) -> None:
        self._reloader = reloader
        self._delay = delay
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self) -> asyncio.Task[None]:
        """Reload after the configured delay. A pending reload is reused."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._delayed_reload())
        return self._task

    def reload_now(self) -> None:
        log.info("page_reload", delay=0)
        self._reloader.reload()

    async def aclose(self) -> None:
        """Cancel a pending reload."""
        if self._task:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _delayed_reload(self) -> None:
        await asyncio.sleep(self._delay)
        await log.ainfo("page_reload", delay=self._delay)
        self._reloader.reload()
