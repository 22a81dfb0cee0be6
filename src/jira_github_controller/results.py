"""Outcome types for orchestrated actions."""

from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class OperationFailed(Exception):
    """A request completed but the action did not succeed.

    ``message`` is the human-readable text shown to the user.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Success(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
    status: Literal["success"] = "success"
    payload: T = Field(description="Parsed response of the completed call")


class Failure(BaseModel):
    model_config = ConfigDict(frozen=True)
    status: Literal["failure"] = "failure"
    message: str = Field(description="Most specific error message available")


class InFlight(BaseModel):
    model_config = ConfigDict(frozen=True)
    status: Literal["in_flight"] = "in_flight"


OperationResult = Success[Any] | Failure | InFlight
