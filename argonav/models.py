"""Core data models shared by discovery, search, classification and caching."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class SourceLocation:
    """A zero-based line in a file. Columns are not tracked."""
    file: str
    line: int

    @property
    def column(self) -> int:
        return 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass
class SearchResult:
    """Locations in file-scan order, then line order. Never deduplicated."""
    query_name: str
    locations: List[SourceLocation] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.locations)

    def __bool__(self) -> bool:
        return bool(self.locations)


@dataclass(frozen=True)
class TemplateRefContext:
    """Template *template_name* defined inside WorkflowTemplate *workflow_template_name*."""
    workflow_template_name: str
    template_name: str


@dataclass
class CacheEntry:
    content: str
    timestamp: float


class NavigationKind(str, Enum):
    """Which relationship a cursor position was classified as."""

    TEMPLATE_REFERENCES = "template_references"
    WORKFLOW_TEMPLATE_REFERENCES = "workflow_template_references"
    TEMPLATE_DEFINITION = "template_definition"
    WORKFLOW_TEMPLATE_DEFINITION = "workflow_template_definition"
    NAME_DEFINITION = "name_definition"

    @property
    def is_reference_search(self) -> bool:
        return self in (
            NavigationKind.TEMPLATE_REFERENCES,
            NavigationKind.WORKFLOW_TEMPLATE_REFERENCES,
        )


@dataclass(frozen=True)
class NavigationQuery:
    """Typed query extracted from a document position."""
    kind: NavigationKind
    name: str
    line: int
    context: Optional[TemplateRefContext] = None

    def describe(self) -> str:
        if self.context is not None:
            return (
                f"template '{self.context.template_name}' of WorkflowTemplate "
                f"'{self.context.workflow_template_name}'"
            )
        return f"'{self.name}'"


@dataclass
class NavigationResult:
    query: NavigationQuery
    result: SearchResult

    @property
    def locations(self) -> List[SourceLocation]:
        return self.result.locations


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and a search."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()
