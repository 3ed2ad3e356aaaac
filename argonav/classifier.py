"""Classify a cursor position into a typed navigation query.

Rules are tried in a fixed order and the first match wins:

1. ``- name:`` entry of a ``templates:`` list inside a WorkflowTemplate
   -> references to that template.
2. ``name:`` under the ``metadata:`` of a WorkflowTemplate
   -> references to that WorkflowTemplate.
3. ``template:`` line of a ``templateRef:`` block
   -> definition of the referenced template.
4. ``name:`` line of a ``templateRef:`` block
   -> definition of the referenced WorkflowTemplate.
5. Any identifier-like token under the cursor
   -> WorkflowTemplate definitions with that name.

Classification is a pure function of the document text and position.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence

from . import config
from .models import NavigationKind, NavigationQuery, TemplateRefContext
from .patterns import (
    LIST_NAME_PATTERN,
    METADATA_MARKER,
    NAME_KEY_MARKER,
    TEMPLATE_KEY_MARKER,
    TEMPLATE_REF_MARKER,
    TEMPLATES_MARKER,
    WORKFLOW_TEMPLATE_MARKER,
    extract_name,
    extract_template,
    split_lines,
)

TOKEN_PATTERN = re.compile(r""""[^"]+"|'[^']+'|[\w-]+""")
LIST_NAME_ITEM_PATTERN = re.compile(r"^\s*-\s+name:")

Rule = Callable[[Sequence[str], int, int], Optional[NavigationQuery]]


class ContextClassifier:
    """Stateless, ordered rule set over raw document lines."""

    def __init__(self) -> None:
        self.rules: List[Rule] = [
            self._template_list_entry,
            self._workflow_template_metadata_name,
            self._template_ref_template,
            self._template_ref_name,
            self._token_at_cursor,
        ]

    def classify(self, document_text: str, line: int, character: int = 0) -> Optional[NavigationQuery]:
        lines = split_lines(document_text)
        if line < 0 or line >= len(lines):
            return None
        for rule in self.rules:
            query = rule(lines, line, character)
            if query is not None:
                return query
        return None

    # ------------------------------------------------------------------
    # Rule 1: template definition inside a templates list
    # ------------------------------------------------------------------

    def _template_list_entry(self, lines: Sequence[str], line: int, character: int) -> Optional[NavigationQuery]:
        current = lines[line]
        if not LIST_NAME_PATTERN.match(current):
            return None
        template_name = extract_name(current)
        if template_name is None:
            template_name = token_at(current, character)
            if template_name is None or len(template_name) < config.MIN_TOKEN_LENGTH:
                return None
        if not is_within_templates_section(lines, line):
            return None
        workflow_template_name = find_containing_workflow_template(lines, line)
        if workflow_template_name is None:
            return None
        return NavigationQuery(
            kind=NavigationKind.TEMPLATE_REFERENCES,
            name=template_name,
            line=line,
            context=TemplateRefContext(workflow_template_name, template_name),
        )

    # ------------------------------------------------------------------
    # Rule 2: WorkflowTemplate metadata name
    # ------------------------------------------------------------------

    def _workflow_template_metadata_name(
        self, lines: Sequence[str], line: int, character: int
    ) -> Optional[NavigationQuery]:
        current = lines[line]
        if NAME_KEY_MARKER not in current:
            return None
        if not is_workflow_template_metadata(lines, line):
            return None
        name = extract_name(current)
        if name is None:
            return None
        return NavigationQuery(kind=NavigationKind.WORKFLOW_TEMPLATE_REFERENCES, name=name, line=line)

    # ------------------------------------------------------------------
    # Rule 3: template inside a templateRef block
    # ------------------------------------------------------------------

    def _template_ref_template(self, lines: Sequence[str], line: int, character: int) -> Optional[NavigationQuery]:
        current = lines[line]
        if TEMPLATE_KEY_MARKER not in current:
            return None
        template_name = extract_template(current)
        if template_name is None:
            return None

        lowest = max(0, line - config.TEMPLATE_REF_LOOKBACK)
        ref_line = None
        for index in range(line - 1, lowest - 1, -1):
            if TEMPLATE_REF_MARKER in lines[index]:
                ref_line = index
                break
        if ref_line is None:
            return None

        workflow_template_name = None
        end = min(len(lines), line + config.TEMPLATE_REF_LOOKAHEAD_PAST_CURSOR + 1)
        for index in range(ref_line + 1, end):
            candidate = lines[index]
            if NAME_KEY_MARKER in candidate and TEMPLATE_KEY_MARKER not in candidate:
                workflow_template_name = extract_name(candidate)
                if workflow_template_name is not None:
                    break
        if workflow_template_name is None:
            return None

        return NavigationQuery(
            kind=NavigationKind.TEMPLATE_DEFINITION,
            name=template_name,
            line=line,
            context=TemplateRefContext(workflow_template_name, template_name),
        )

    # ------------------------------------------------------------------
    # Rule 4: WorkflowTemplate name inside a templateRef block
    # ------------------------------------------------------------------

    def _template_ref_name(self, lines: Sequence[str], line: int, character: int) -> Optional[NavigationQuery]:
        current = lines[line]
        if NAME_KEY_MARKER not in current or TEMPLATE_KEY_MARKER in current:
            return None

        lowest = max(0, line - config.TEMPLATE_REF_NAME_LOOKBACK)
        for index in range(line - 1, lowest - 1, -1):
            previous = lines[index]
            if TEMPLATE_REF_MARKER in previous:
                name = extract_name(current)
                if name is None:
                    return None
                return NavigationQuery(
                    kind=NavigationKind.WORKFLOW_TEMPLATE_DEFINITION, name=name, line=line
                )
            if LIST_NAME_ITEM_PATTERN.match(previous):
                return None
        return None

    # ------------------------------------------------------------------
    # Rule 5: fallback token
    # ------------------------------------------------------------------

    def _token_at_cursor(self, lines: Sequence[str], line: int, character: int) -> Optional[NavigationQuery]:
        token = token_at(lines[line], character)
        if token is None or len(token) < config.MIN_TOKEN_LENGTH:
            return None
        return NavigationQuery(kind=NavigationKind.NAME_DEFINITION, name=token, line=line)


# ---------------------------------------------------------------------------
# Window scans
# ---------------------------------------------------------------------------

def is_within_templates_section(lines: Sequence[str], line: int) -> bool:
    """Look back for ``templates:`` without crossing a ``kind:``/``apiVersion:`` line."""
    lowest = max(0, line - config.TEMPLATES_SECTION_LOOKBACK)
    for index in range(line, lowest - 1, -1):
        text = lines[index]
        if TEMPLATES_MARKER in text:
            return True
        if "kind:" in text or "apiVersion:" in text:
            return False
    return False


def find_containing_workflow_template(lines: Sequence[str], line: int) -> Optional[str]:
    """Name of the nearest preceding WorkflowTemplate that declares one."""
    for index in range(line, -1, -1):
        if WORKFLOW_TEMPLATE_MARKER not in lines[index]:
            continue
        end = min(len(lines), index + config.WORKFLOW_TEMPLATE_NAME_LOOKAHEAD)
        for candidate in range(index + 1, end):
            if NAME_KEY_MARKER in lines[candidate]:
                name = extract_name(lines[candidate])
                if name is not None:
                    return name
    return None


def is_workflow_template_metadata(lines: Sequence[str], line: int) -> bool:
    """True when ``metadata:`` sits between *line* and a preceding WorkflowTemplate kind."""
    seen_metadata = False
    lowest = max(0, line - config.METADATA_LOOKBACK)
    for index in range(line - 1, lowest - 1, -1):
        text = lines[index]
        if "spec:" in text or "status:" in text:
            return False
        if METADATA_MARKER in text:
            seen_metadata = True
        if WORKFLOW_TEMPLATE_MARKER in text:
            return seen_metadata
    return False


def token_at(text: str, character: int) -> Optional[str]:
    """Identifier-like token touching *character*, quotes removed."""
    for match in TOKEN_PATTERN.finditer(text):
        if match.start() <= character <= match.end():
            return match.group(0).replace('"', "").replace("'", "")
    return None
