"""argonav: go to definition and find references for Argo WorkflowTemplates."""

__version__ = "0.1.0"

from .classifier import ContextClassifier
from .content_cache import ContentCache
from .discovery import FileDiscovery
from .models import (
    CancellationToken,
    NavigationKind,
    NavigationQuery,
    NavigationResult,
    SearchResult,
    SourceLocation,
    TemplateRefContext,
)
from .navigator import Navigator
from .search import SearchCancelled, SymbolIndexSearch
from .workspace_cache import WorkspaceResultCache

__all__ = [
    "CancellationToken",
    "ContentCache",
    "ContextClassifier",
    "FileDiscovery",
    "NavigationKind",
    "NavigationQuery",
    "NavigationResult",
    "Navigator",
    "SearchCancelled",
    "SearchResult",
    "SourceLocation",
    "SymbolIndexSearch",
    "TemplateRefContext",
    "WorkspaceResultCache",
    "__version__",
]
