"""Navigator coordinating classification and workspace search."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from .classifier import ContextClassifier
from .config_manager import SearchSettings
from .content_cache import ContentCache
from .discovery import FileDiscovery
from .models import (
    CancellationToken,
    NavigationKind,
    NavigationQuery,
    NavigationResult,
    SearchResult,
    SourceLocation,
)
from .search import SearchCancelled, SymbolIndexSearch
from .workspace_cache import WorkspaceResultCache

logger = logging.getLogger(__name__)


class Navigator:
    """Answers "go to definition" and "find references" for one workspace root."""

    def __init__(
        self,
        root: Union[str, Path],
        search: Optional[SymbolIndexSearch] = None,
        classifier: Optional[ContextClassifier] = None,
    ) -> None:
        self.root = str(root)
        self.search = search or SymbolIndexSearch()
        self.classifier = classifier or ContextClassifier()

    @classmethod
    def from_settings(cls, root: Union[str, Path], settings: SearchSettings) -> "Navigator":
        """Wire discovery, caches and search from user settings."""
        search = SymbolIndexSearch(
            discovery=FileDiscovery(
                max_depth=settings.max_depth,
                max_concurrency=settings.directory_concurrency,
            ),
            content_cache=ContentCache(timeout=settings.content_cache_timeout),
            workspace_cache=WorkspaceResultCache(timeout=settings.workspace_cache_timeout),
            max_concurrency=settings.file_concurrency,
        )
        return cls(root, search=search)

    def classify(self, document_text: str, line: int, character: int = 0) -> Optional[NavigationQuery]:
        return self.classifier.classify(document_text, line, character)

    def navigate(
        self,
        document_text: str,
        line: int,
        character: int = 0,
        cancel_token: Optional[CancellationToken] = None,
        document_path: Optional[str] = None,
        include_declaration: bool = False,
    ) -> Optional[NavigationResult]:
        """Classify the position and run the matching search.

        Returns None when nothing could be classified or the request was
        cancelled. With *include_declaration* and a *document_path*, reference
        searches list the position itself first.
        """
        if _cancelled(cancel_token):
            return None

        query = self.classify(document_text, line, character)
        if query is None:
            return None

        try:
            result = self.execute(query, cancel_token)
        except SearchCancelled:
            logger.info("Navigation for %s cancelled", query.describe())
            return None

        if _cancelled(cancel_token):
            return None

        if include_declaration and document_path and query.kind.is_reference_search:
            result.locations.insert(0, SourceLocation(file=document_path, line=query.line))

        return NavigationResult(query=query, result=result)

    def execute(self, query: NavigationQuery, cancel_token: Optional[CancellationToken] = None) -> SearchResult:
        """Dispatch *query* to its search operation.

        Raises:
            SearchCancelled: If *cancel_token* fires at a checkpoint
        """
        kind = query.kind
        context = query.context
        if kind is NavigationKind.TEMPLATE_REFERENCES and context is not None:
            return self.search.find_template_references(
                self.root, context.workflow_template_name, context.template_name, cancel_token
            )
        if kind is NavigationKind.WORKFLOW_TEMPLATE_REFERENCES:
            return self.search.find_workflow_template_references(self.root, query.name, cancel_token)
        if kind is NavigationKind.TEMPLATE_DEFINITION and context is not None:
            return self.search.find_template_in_workflow_template(
                self.root, context.workflow_template_name, context.template_name, cancel_token
            )
        return self.search.find_definition(self.root, query.name, cancel_token)

    def invalidate(self, path: Optional[str] = None) -> None:
        """Drop cached results after a file change."""
        if self.search.workspace_cache is not None:
            self.search.workspace_cache.invalidate()
        if path is not None:
            self.search.content_cache.evict(path)


def _cancelled(cancel_token: Optional[CancellationToken]) -> bool:
    return cancel_token is not None and cancel_token.is_cancelled
