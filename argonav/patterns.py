"""Line-pattern rules for recognising Argo WorkflowTemplate constructs.

There is no YAML parsing here. Constructs are recognised by matching single
lines against fixed markers and regular expressions, and by scanning bounded
windows of neighbouring lines. The rules sit behind :class:`SymbolMatcher` so
that a structured parser can replace :class:`LineHeuristicMatcher` without
callers noticing.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from . import config

# ---------------------------------------------------------------------------
# Markers and patterns
# ---------------------------------------------------------------------------
WORKFLOW_TEMPLATE_MARKER = "kind: WorkflowTemplate"
METADATA_MARKER = "metadata:"
TEMPLATE_REF_MARKER = "templateRef:"
WORKFLOW_TEMPLATE_REF_MARKER = "workflowTemplateRef:"
TEMPLATES_MARKER = "templates:"
TEMPLATE_KEY_MARKER = "template:"
NAME_KEY_MARKER = "name:"
DOCUMENT_SEPARATOR = "---"

NAME_PATTERN = re.compile(r"""name:\s*['"]?([^'"#\s]+)['"]?\s*(?:#.*)?$""")
TEMPLATE_PATTERN = re.compile(r"""template:\s*['"]?([^'"#\s]+)['"]?\s*(?:#.*)?$""")
LIST_ITEM_PATTERN = re.compile(r"^\s*-\s+(?:name:|-)")
LIST_NAME_PATTERN = re.compile(r"^\s*-\s+name:\s*(.+)$")
TEMPLATES_SECTION_PATTERN = re.compile(r"^\s*templates:")


def extract_name(line: str) -> Optional[str]:
    """Return the value of a ``name:`` key on *line*, comment stripped."""
    match = NAME_PATTERN.search(line)
    return match.group(1) if match else None


def extract_template(line: str) -> Optional[str]:
    """Return the value of a ``template:`` key on *line*, comment stripped."""
    match = TEMPLATE_PATTERN.search(line)
    return match.group(1) if match else None


def is_workflow_template_line(line: str) -> bool:
    return WORKFLOW_TEMPLATE_MARKER in line


def is_list_item(line: str) -> bool:
    """True for a new list entry: ``- name:`` or a nested ``- -``."""
    return LIST_ITEM_PATTERN.match(line) is not None


def list_item_name_pattern(template_name: str) -> "re.Pattern[str]":
    return re.compile(rf"^\s*-\s+name:\s*{re.escape(template_name)}\s*(?:#.*)?$")


def split_lines(content: str) -> List[str]:
    return content.split("\n")


# ---------------------------------------------------------------------------
# templateRef blocks
# ---------------------------------------------------------------------------

class TemplateRefBlock:
    """Names extracted from the lines following a ``templateRef:`` marker."""

    __slots__ = ("start", "workflow_template_name", "name_line", "template_name", "template_line")

    def __init__(self, start: int) -> None:
        self.start = start
        self.workflow_template_name: Optional[str] = None
        self.name_line: Optional[int] = None
        self.template_name: Optional[str] = None
        self.template_line: Optional[int] = None

    def __repr__(self) -> str:
        return (
            f"TemplateRefBlock(start={self.start}, "
            f"workflow_template_name={self.workflow_template_name!r}, "
            f"template_name={self.template_name!r})"
        )


def parse_template_ref_block(lines: Sequence[str], start: int) -> TemplateRefBlock:
    """Read up to ``TEMPLATE_REF_BLOCK_LINES`` lines after a ``templateRef:`` line.

    Stops early when a new list item begins. The first ``name:`` line that is
    not a ``template:`` line gives the WorkflowTemplate name; the first
    ``template:`` line gives the template name.
    """
    block = TemplateRefBlock(start)
    end = min(len(lines), start + 1 + config.TEMPLATE_REF_BLOCK_LINES)
    for index in range(start + 1, end):
        line = lines[index]
        if is_list_item(line):
            break
        if TEMPLATE_KEY_MARKER in line:
            if block.template_name is None:
                block.template_name = extract_template(line)
                if block.template_name is not None:
                    block.template_line = index
        elif NAME_KEY_MARKER in line and block.workflow_template_name is None:
            block.workflow_template_name = extract_name(line)
            if block.workflow_template_name is not None:
                block.name_line = index
    return block


# ===================================================================
# Matcher interface
# ===================================================================

class SymbolMatcher(ABC):
    """Per-file extraction of definition and reference lines."""

    @abstractmethod
    def definition_lines(self, lines: Sequence[str], name: str) -> List[int]:
        """Lines naming a WorkflowTemplate called *name*."""
        ...

    @abstractmethod
    def template_definition_line(
        self,
        lines: Sequence[str],
        workflow_template_name: str,
        template_name: str,
    ) -> Optional[int]:
        """The ``- name:`` line of *template_name* inside *workflow_template_name*."""
        ...

    @abstractmethod
    def template_reference_lines(
        self,
        lines: Sequence[str],
        workflow_template_name: str,
        template_name: str,
    ) -> List[int]:
        """``template:`` lines of templateRef blocks pointing at the template."""
        ...

    @abstractmethod
    def workflow_template_reference_lines(
        self,
        lines: Sequence[str],
        workflow_template_name: str,
    ) -> List[int]:
        """``name:`` lines of references to the WorkflowTemplate."""
        ...


# ===================================================================
# Heuristic implementation
# ===================================================================

class LineHeuristicMatcher(SymbolMatcher):
    """Line-pattern implementation of :class:`SymbolMatcher`."""

    def definition_lines(self, lines: Sequence[str], name: str) -> List[int]:
        found: List[int] = []
        for start in self._workflow_template_lines(lines):
            index = self._metadata_name_line(lines, start, len(lines), name)
            if index is not None:
                found.append(index)
        return found

    def template_definition_line(
        self,
        lines: Sequence[str],
        workflow_template_name: str,
        template_name: str,
    ) -> Optional[int]:
        item_pattern = list_item_name_pattern(template_name)
        for start in self._workflow_template_lines(lines):
            end = self.block_end(lines, start)
            name_line = self._metadata_name_line(lines, start, end, workflow_template_name)
            if name_line is None:
                continue
            section = self._templates_section_start(lines, start, end)
            if section is None:
                continue
            for index in range(section + 1, end):
                if item_pattern.match(lines[index]):
                    return index
        return None

    def template_reference_lines(
        self,
        lines: Sequence[str],
        workflow_template_name: str,
        template_name: str,
    ) -> List[int]:
        found: List[int] = []
        for block in self._template_ref_blocks(lines):
            if (
                block.workflow_template_name == workflow_template_name
                and block.template_name == template_name
                and block.template_line is not None
            ):
                found.append(block.template_line)
        return found

    def workflow_template_reference_lines(
        self,
        lines: Sequence[str],
        workflow_template_name: str,
    ) -> List[int]:
        found: List[int] = []
        for block in self._template_ref_blocks(lines):
            if block.workflow_template_name == workflow_template_name and block.name_line is not None:
                found.append(block.name_line)

        for index, line in enumerate(lines):
            if WORKFLOW_TEMPLATE_REF_MARKER not in line:
                continue
            end = min(len(lines), index + 1 + config.WORKFLOW_TEMPLATE_REF_LINES)
            for candidate in range(index + 1, end):
                if extract_name(lines[candidate]) == workflow_template_name:
                    found.append(candidate)
                    break
        return sorted(found)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def block_end(lines: Sequence[str], start: int) -> int:
        """End (exclusive) of the document block opened at line *start*.

        The block ends at the next line starting with ``kind:``, at an
        ``apiVersion:`` line directly after a ``---`` separator, or at end of
        file.
        """
        for index in range(start + 1, len(lines)):
            line = lines[index]
            if line.startswith("kind:"):
                return index
            if line.startswith("apiVersion:") and lines[index - 1].rstrip("\r") == DOCUMENT_SEPARATOR:
                return index
        return len(lines)

    @staticmethod
    def _workflow_template_lines(lines: Sequence[str]) -> List[int]:
        return [index for index, line in enumerate(lines) if is_workflow_template_line(line)]

    @staticmethod
    def _metadata_name_line(lines: Sequence[str], start: int, end: int, name: str) -> Optional[int]:
        for index in range(max(start, 1), end):
            if METADATA_MARKER in lines[index - 1] and extract_name(lines[index]) == name:
                return index
        return None

    @staticmethod
    def _templates_section_start(lines: Sequence[str], start: int, end: int) -> Optional[int]:
        for index in range(start, end):
            if TEMPLATES_SECTION_PATTERN.match(lines[index]):
                return index
        return None

    @staticmethod
    def _template_ref_blocks(lines: Sequence[str]) -> List[TemplateRefBlock]:
        return [
            parse_template_ref_block(lines, index)
            for index, line in enumerate(lines)
            if TEMPLATE_REF_MARKER in line
        ]
