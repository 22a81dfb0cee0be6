"""Editable list of project → repository mapping rows on the admin page."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Iterator

import structlog
from pydantic import BaseModel, ConfigDict, Field

from jira_github_controller.config import DEFAULT_BRANCH
from jira_github_controller.models import RepositoryMapping

log = structlog.get_logger()

_EDITABLE_FIELDS = frozenset({"project_key", "repo_owner", "repo_name", "default_branch"})


class MappingRow(BaseModel):
    """One row of the mapping form. Values are raw user input."""

    model_config = ConfigDict(validate_assignment=True)

    row_id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Stable row id")
    project_key: str = ""
    repo_owner: str = ""
    repo_name: str = ""
    default_branch: str = DEFAULT_BRANCH

    def to_mapping(self) -> RepositoryMapping | None:
        """Trimmed mapping, or None while any required field is blank."""
        project_key = self.project_key.strip()
        repo_owner = self.repo_owner.strip()
        repo_name = self.repo_name.strip()
        if not (project_key and repo_owner and repo_name):
            return None
        return RepositoryMapping(
            project_key=project_key,
            repo_owner=repo_owner,
            repo_name=repo_name,
            default_branch=self.default_branch.strip(),
        )


class MappingCollection:
    """Ordered mapping rows keyed by a generated id.

    The form never shows zero rows: removing the last row inserts a blank one.
    """

    def __init__(self, mappings: Iterable[RepositoryMapping] = ()) -> None:
        self._rows: list[MappingRow] = []
        self.load(mappings)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[MappingRow]:
        return iter(list(self._rows))

    @property
    def rows(self) -> tuple[MappingRow, ...]:
        return tuple(self._rows)

    def load(self, mappings: Iterable[RepositoryMapping]) -> None:
        """Replace all rows with the given stored mappings."""
        self._rows = [
            MappingRow(
                project_key=m.project_key,
                repo_owner=m.repo_owner,
                repo_name=m.repo_name,
                default_branch=m.default_branch,
            )
            for m in mappings
        ]
        self._ensure_one_row()

    def add_row(self, **values: str) -> MappingRow:
        row = MappingRow(**values)
        self._rows.append(row)
        return row

    def remove_row(self, row_id: str) -> None:
        self._rows.pop(self._position(row_id))
        self._ensure_one_row()

    def update_row(self, row_id: str, **values: str) -> MappingRow:
        unknown = set(values) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown mapping fields: {sorted(unknown)}")
        row = self.get(row_id)
        for name, value in values.items():
            setattr(row, name, value)
        return row

    def get(self, row_id: str) -> MappingRow:
        return self._rows[self._position(row_id)]

    def display_index(self, row_id: str) -> int:
        """1-based position for labels; recomputed on every call."""
        return self._position(row_id) + 1

    def collect(self) -> list[RepositoryMapping]:
        """Complete mappings in row order. Partial rows are skipped, not rejected."""
        collected: list[RepositoryMapping] = []
        for row in self._rows:
            mapping = row.to_mapping()
            if mapping is not None:
                collected.append(mapping)
        skipped = len(self._rows) - len(collected)
        if skipped:
            log.debug("incomplete_mapping_rows_skipped", skipped=skipped)
        return collected

    def _position(self, row_id: str) -> int:
        for i, row in enumerate(self._rows):
            if row.row_id == row_id:
                return i
        raise KeyError(row_id)

    def _ensure_one_row(self) -> None:
        if not self._rows:
            self.add_row()
