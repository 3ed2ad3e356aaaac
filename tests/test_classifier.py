"""Tests for cursor context classification."""

from pathlib import Path

import pytest

from argonav.classifier import (
    ContextClassifier,
    find_containing_workflow_template,
    is_within_templates_section,
    token_at,
)
from argonav.models import NavigationKind, TemplateRefContext
from argonav.patterns import split_lines


@pytest.fixture
def classifier() -> ContextClassifier:
    return ContextClassifier()


@pytest.fixture
def build_yaml(sample_project_path: Path) -> str:
    return (sample_project_path / "workflow-templates" / "build.yaml").read_text(encoding="utf-8")


@pytest.fixture
def pipeline_yaml(sample_project_path: Path) -> str:
    return (sample_project_path / "workflows" / "pipeline.yaml").read_text(encoding="utf-8")


class TestRules:
    """One test per classification rule."""

    def test_template_list_entry_routes_to_references(self, classifier, build_yaml):
        query = classifier.classify(build_yaml, 8, 12)

        assert query.kind is NavigationKind.TEMPLATE_REFERENCES
        assert query.kind.is_reference_search
        assert query.name == "compile"
        assert query.context == TemplateRefContext("build-tools", "compile")

    def test_step1_in_wf1(self, classifier):
        doc = (
            "apiVersion: argoproj.io/v1alpha1\n"
            "kind: WorkflowTemplate\n"
            "metadata:\n"
            "  name: wf1\n"
            "spec:\n"
            "  templates:\n"
            "    - name: step1\n"
        )
        query = classifier.classify(doc, 6)

        assert query.kind is NavigationKind.TEMPLATE_REFERENCES
        assert query.context == TemplateRefContext(workflow_template_name="wf1", template_name="step1")

    def test_metadata_name_routes_to_workflow_template_references(self, classifier, build_yaml):
        query = classifier.classify(build_yaml, 3, 10)

        assert query.kind is NavigationKind.WORKFLOW_TEMPLATE_REFERENCES
        assert query.name == "build-tools"
        assert query.context is None

    def test_template_ref_template_routes_to_template_definition(self, classifier, pipeline_yaml):
        query = classifier.classify(pipeline_yaml, 12, 25)

        assert query.kind is NavigationKind.TEMPLATE_DEFINITION
        assert not query.kind.is_reference_search
        assert query.context == TemplateRefContext("build-tools", "compile")

    def test_template_before_name_in_block(self, classifier):
        doc = "steps:\n  - - name: s\n      templateRef:\n        template: t\n        name: wt\n"
        query = classifier.classify(doc, 3)

        assert query.kind is NavigationKind.TEMPLATE_DEFINITION
        assert query.context == TemplateRefContext("wt", "t")

    def test_template_ref_name_routes_to_definition(self, classifier, pipeline_yaml):
        query = classifier.classify(pipeline_yaml, 11, 22)

        assert query.kind is NavigationKind.WORKFLOW_TEMPLATE_DEFINITION
        assert query.name == "build-tools"

    def test_fallback_token(self, classifier, pipeline_yaml):
        query = classifier.classify(pipeline_yaml, 5, 15)

        assert query.kind is NavigationKind.NAME_DEFINITION
        assert query.name == "main"
        assert query.line == 5


class TestPrecedenceAndRejection:
    """Rule ordering and the cases that classify to nothing."""

    def test_template_list_entry_outside_workflow_template_falls_through(self, classifier, pipeline_yaml):
        query = classifier.classify(pipeline_yaml, 7, 12)

        assert query.kind is NavigationKind.NAME_DEFINITION
        assert query.name == "main"

    def test_metadata_lookback_stops_at_spec(self, classifier):
        doc = "kind: WorkflowTemplate\nmetadata:\n  name: wt\nspec:\n  arguments:\n    name: param\n"
        query = classifier.classify(doc, 5, 10)

        assert query.kind is NavigationKind.NAME_DEFINITION
        assert query.name == "param"

    def test_template_ref_name_stops_at_other_list_item(self, classifier):
        doc = (
            "templateRef:\n"
            "  name: a\n"
            "  template: b\n"
            "- name: other\n"
            "  arguments:\n"
            "    name: c\n"
        )
        assert classifier.classify(doc, 5, 10) is None

    def test_short_token_rejected(self, classifier):
        assert classifier.classify("a: b\n", 0, 3) is None

    def test_cursor_on_whitespace(self, classifier):
        assert classifier.classify("    \n", 0, 1) is None

    def test_line_out_of_range(self, classifier, build_yaml):
        assert classifier.classify(build_yaml, 500) is None
        assert classifier.classify(build_yaml, -1) is None

    def test_stateless(self, classifier, build_yaml, pipeline_yaml):
        first = classifier.classify(build_yaml, 8, 12)
        classifier.classify(pipeline_yaml, 12, 25)
        assert classifier.classify(build_yaml, 8, 12) == first


class TestWindowScans:
    """Tests for the bounded helper scans."""

    def test_templates_section_lookback_is_fifty_lines(self):
        lines = ["templates:"] + ["  x: 1"] * 49 + ["- name: t"]
        assert is_within_templates_section(lines, 50)

        lines = ["templates:"] + ["  x: 1"] * 50 + ["- name: t"]
        assert not is_within_templates_section(lines, 51)

    def test_templates_section_blocked_by_kind(self):
        lines = split_lines("templates:\nkind: Workflow\n- name: t\n")
        assert not is_within_templates_section(lines, 2)

    def test_containing_workflow_template_skips_nameless_kind(self):
        lines = split_lines(
            "kind: WorkflowTemplate\n"
            "metadata:\n"
            "  name: outer\n"
            "kind: WorkflowTemplate\n"
            + "  x: 1\n" * 25
            + "- name: t\n"
        )
        assert find_containing_workflow_template(lines, len(lines) - 2) == "outer"

    @pytest.mark.parametrize(
        "text, character, expected",
        [
            ("  name: build-tools", 12, "build-tools"),
            ("  name: build-tools", 19, "build-tools"),
            ('  name: "quoted value"', 12, "quoted value"),
            ("  name: 'x'", 9, "x"),
            ("  name: x", 0, None),
        ],
    )
    def test_token_at(self, text, character, expected):
        assert token_at(text, character) == expected


def _doc(*lines: str) -> str:
    return "\n".join(lines) + "\n"


FILLER = "    x: 1"


class TestRuleWindows:
    """Each rule's line window includes its last line and nothing beyond."""

    def test_template_ref_lookback_is_fifteen_lines(self, classifier):
        doc = _doc("templateRef:", "  name: wt", *[FILLER] * 13, "  template: tpl")
        query = classifier.classify(doc, 15, 13)
        assert query.kind is NavigationKind.TEMPLATE_DEFINITION
        assert query.context == TemplateRefContext("wt", "tpl")

        doc = _doc("templateRef:", "  name: wt", *[FILLER] * 14, "  template: tpl")
        query = classifier.classify(doc, 16, 13)
        assert query.kind is NavigationKind.NAME_DEFINITION
        assert query.name == "tpl"

    def test_sibling_name_at_most_three_lines_past_template(self, classifier):
        doc = _doc("templateRef:", "  template: tpl", FILLER, FILLER, "  name: wt")
        query = classifier.classify(doc, 1, 13)
        assert query.kind is NavigationKind.TEMPLATE_DEFINITION
        assert query.context == TemplateRefContext("wt", "tpl")

        doc = _doc("templateRef:", "  template: tpl", FILLER, FILLER, FILLER, "  name: wt")
        query = classifier.classify(doc, 1, 13)
        assert query.kind is NavigationKind.NAME_DEFINITION
        assert query.name == "tpl"

    def test_template_ref_name_lookback_is_five_lines(self, classifier):
        doc = _doc("templateRef:", *[FILLER] * 4, "  name: wt")
        query = classifier.classify(doc, 5, 9)
        assert query.kind is NavigationKind.WORKFLOW_TEMPLATE_DEFINITION
        assert query.name == "wt"

        doc = _doc("templateRef:", *[FILLER] * 5, "  name: wt")
        query = classifier.classify(doc, 6, 9)
        assert query.kind is NavigationKind.NAME_DEFINITION
        assert query.name == "wt"

    def test_metadata_lookback_is_twenty_lines(self, classifier):
        doc = _doc("kind: WorkflowTemplate", "metadata:", *[FILLER] * 18, "  name: wt")
        query = classifier.classify(doc, 20, 9)
        assert query.kind is NavigationKind.WORKFLOW_TEMPLATE_REFERENCES
        assert query.name == "wt"

        doc = _doc("kind: WorkflowTemplate", "metadata:", *[FILLER] * 19, "  name: wt")
        query = classifier.classify(doc, 21, 9)
        assert query.kind is NavigationKind.NAME_DEFINITION
        assert query.name == "wt"

    def test_metadata_lookback_stops_at_status(self, classifier):
        doc = _doc("kind: WorkflowTemplate", "metadata:", "  name: wt", "status:", "  name: other")
        query = classifier.classify(doc, 4, 9)

        assert query.kind is NavigationKind.NAME_DEFINITION
        assert query.name == "other"


class TestTemplateListEntryFallback:
    """A ``- name:`` value the name pattern cannot extract."""

    DOC = _doc(
        "kind: WorkflowTemplate",
        "metadata:",
        "  name: wf1",
        "spec:",
        "  templates:",
        "    - name: step one",
    )

    def test_word_under_cursor_is_used(self, classifier):
        query = classifier.classify(self.DOC, 5, 13)

        assert query.kind is NavigationKind.TEMPLATE_REFERENCES
        assert query.name == "step"
        assert query.context == TemplateRefContext("wf1", "step")

    def test_single_character_word_is_rejected(self, classifier):
        doc = self.DOC.replace("step one", "a b")
        assert classifier.classify(doc, 5, 12) is None
