"""Workspace-wide search for WorkflowTemplate definitions and references.

Every query follows the same execution pattern: discover the YAML files
under the root, sort them, cut the list into batches of ``max_concurrency``
files, scan one batch in parallel, wait for it, append its locations in
batch order and move on. A file that cannot be read contributes nothing.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from . import config
from .content_cache import ContentCache
from .discovery import FileDiscovery
from .models import CancellationToken, SearchResult, SourceLocation
from .patterns import LineHeuristicMatcher, SymbolMatcher, split_lines
from .workspace_cache import WorkspaceResultCache

logger = logging.getLogger(__name__)

LineScan = Callable[[Sequence[str]], List[int]]


class SearchCancelled(RuntimeError):
    """Raised when a search is abandoned at a cancellation checkpoint."""


class SymbolIndexSearch:
    """Resolve WorkflowTemplate names and templateRefs across a file tree."""

    def __init__(
        self,
        discovery: Optional[FileDiscovery] = None,
        content_cache: Optional[ContentCache] = None,
        workspace_cache: Optional[WorkspaceResultCache] = None,
        matcher: Optional[SymbolMatcher] = None,
        max_concurrency: int = config.FILE_CONCURRENCY,
    ) -> None:
        self.discovery = discovery or FileDiscovery()
        self.content_cache = content_cache or ContentCache()
        self.workspace_cache = workspace_cache
        self.matcher = matcher or LineHeuristicMatcher()
        self.max_concurrency = max_concurrency

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_definition(
        self,
        root: Union[str, Path],
        name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SearchResult:
        """Metadata ``name:`` lines of every WorkflowTemplate called *name*."""
        root_key = str(root)
        generation = None
        if self.workspace_cache is not None:
            generation = self.workspace_cache.generation
            cached = self.workspace_cache.lookup(root_key, name)
            if cached is not None:
                logger.debug("Workspace cache hit for '%s'", name)
                return SearchResult(query_name=name, locations=cached)

        locations = self._search(
            root,
            lambda lines: self.matcher.definition_lines(lines, name),
            cancel_token,
        )
        if self.workspace_cache is not None:
            self.workspace_cache.remember(root_key, name, locations, generation)
        return SearchResult(query_name=name, locations=locations)

    def find_template_in_workflow_template(
        self,
        root: Union[str, Path],
        workflow_template_name: str,
        template_name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SearchResult:
        """The ``- name:`` entry of *template_name* inside *workflow_template_name*.

        Returns at most one location: the first one in scan order.
        """

        def scan(lines: Sequence[str]) -> List[int]:
            index = self.matcher.template_definition_line(lines, workflow_template_name, template_name)
            return [] if index is None else [index]

        locations = self._search(root, scan, cancel_token)
        return SearchResult(query_name=template_name, locations=locations[:1])

    def find_template_references(
        self,
        root: Union[str, Path],
        workflow_template_name: str,
        template_name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SearchResult:
        """``template:`` lines of templateRef blocks pointing at the template."""
        locations = self._search(
            root,
            lambda lines: self.matcher.template_reference_lines(
                lines, workflow_template_name, template_name
            ),
            cancel_token,
        )
        return SearchResult(query_name=template_name, locations=locations)

    def find_workflow_template_references(
        self,
        root: Union[str, Path],
        workflow_template_name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SearchResult:
        """templateRef and workflowTemplateRef lines naming the WorkflowTemplate.

        Both mechanisms run independently and their results are not
        deduplicated.
        """
        locations = self._search(
            root,
            lambda lines: self.matcher.workflow_template_reference_lines(lines, workflow_template_name),
            cancel_token,
        )
        return SearchResult(query_name=workflow_template_name, locations=locations)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def list_files(self, root: Union[str, Path]) -> List[str]:
        """Discovered YAML files in a stable order."""
        return sorted(self.discovery.find_source_files(root))

    def _search(
        self,
        root: Union[str, Path],
        scan: LineScan,
        cancel_token: Optional[CancellationToken],
    ) -> List[SourceLocation]:
        _checkpoint(cancel_token)
        files = self.list_files(root)
        logger.debug("Scanning %d YAML files under %s", len(files), root)

        locations: List[SourceLocation] = []
        with ThreadPoolExecutor(max_workers=self.max_concurrency) as pool:
            for start in range(0, len(files), self.max_concurrency):
                _checkpoint(cancel_token)
                batch = files[start:start + self.max_concurrency]
                for file_locations in pool.map(lambda path: self._scan_file(path, scan), batch):
                    locations.extend(file_locations)
        _checkpoint(cancel_token)
        return locations

    def _scan_file(self, path: str, scan: LineScan) -> List[SourceLocation]:
        try:
            content = self.content_cache.get_content(path)
        except OSError as exc:
            logger.debug("Skipping unreadable file %s: %s", path, exc)
            return []
        lines = split_lines(content)
        return [SourceLocation(file=path, line=index) for index in scan(lines)]


def _checkpoint(cancel_token: Optional[CancellationToken]) -> None:
    if cancel_token is not None and cancel_token.is_cancelled:
        raise SearchCancelled("search cancelled")
