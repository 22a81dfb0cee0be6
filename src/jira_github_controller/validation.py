"""Form checks run before any request is issued, plus branch-name suggestion."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict

from jira_github_controller.models import Configuration, RepositoryMapping

BRANCH_SLUG_MAX_LENGTH = 50
BRANCH_PREFIX = "feature/"

_NON_SLUG_RUN = re.compile(r"[^a-z0-9-]+")
_DASH_RUN = re.compile(r"-{2,}")


class Valid(BaseModel):
    model_config = ConfigDict(frozen=True)
    status: Literal["valid"] = "valid"


class Invalid(BaseModel):
    model_config = ConfigDict(frozen=True)
    status: Literal["invalid"] = "invalid"
    reason: str


ValidationResult = Valid | Invalid

VALID = Valid()


def complete_mappings(config: Configuration) -> list[RepositoryMapping]:
    return [
        m
        for m in config.mappings
        if m.project_key.strip() and m.repo_owner.strip() and m.repo_name.strip()
    ]


def validate_config(config: Configuration) -> ValidationResult:
    """Check a configuration before save. First failing rule wins."""
    if not config.enterprise_url.strip():
        return Invalid(reason="GitHub Enterprise URL is required")
    if not complete_mappings(config):
        return Invalid(reason="At least one repository mapping is required")
    return VALID


def validate_connection_test(enterprise_url: str) -> ValidationResult:
    if not enterprise_url.strip():
        return Invalid(reason="Enter GitHub Enterprise URL first")
    return VALID


def validate_branch_form(branch_name: str) -> ValidationResult:
    if not branch_name:
        return Invalid(reason="Branch name is required")
    return VALID


def validate_pull_request_form(source_branch: str, title: str) -> ValidationResult:
    if not source_branch:
        return Invalid(reason="Source branch is required")
    if not title:
        return Invalid(reason="Title is required")
    return VALID


def sanitize_branch_name(text: str) -> str:
    """Turn free text into a branch-safe slug, e.g. 'Fix Login Bug!!' → 'fix-login-bug'."""
    slug = _NON_SLUG_RUN.sub("-", text.lower())
    slug = _DASH_RUN.sub("-", slug).strip("-")
    # Truncation can expose a trailing dash
    return slug[:BRANCH_SLUG_MAX_LENGTH].rstrip("-")


def suggest_branch_name(issue_key: str, summary: str) -> str:
    return f"{BRANCH_PREFIX}{issue_key}-{sanitize_branch_name(summary)}"
