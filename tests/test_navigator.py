"""Tests for the navigator that ties classification to search."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from argonav.config_manager import SearchSettings
from argonav.models import CancellationToken, NavigationKind, SourceLocation
from argonav.navigator import Navigator
from argonav.search import SearchCancelled


def _read(root: Path, relative: str) -> str:
    return (root / relative).read_text(encoding="utf-8")


@pytest.fixture
def navigator(argo_project: Path) -> Navigator:
    return Navigator.from_settings(argo_project, SearchSettings())


class TestNavigate:
    """End-to-end navigation over the sample project."""

    def test_template_entry_finds_references(self, navigator, argo_project):
        outcome = navigator.navigate(_read(argo_project, "workflow-templates/build.yaml"), 8, 12)

        assert outcome.query.kind is NavigationKind.TEMPLATE_REFERENCES
        assert outcome.locations == [
            SourceLocation(str(argo_project / "workflows" / "pipeline.yaml"), 12)
        ]

    def test_include_declaration_prepends_cursor(self, navigator, argo_project):
        path = str(argo_project / "workflow-templates" / "build.yaml")
        outcome = navigator.navigate(
            _read(argo_project, "workflow-templates/build.yaml"),
            8,
            12,
            document_path=path,
            include_declaration=True,
        )

        assert outcome.locations[0] == SourceLocation(path, 8)
        assert len(outcome.locations) == 2

    def test_include_declaration_ignored_for_definitions(self, navigator, argo_project):
        outcome = navigator.navigate(
            _read(argo_project, "workflows/pipeline.yaml"),
            11,
            20,
            document_path="pipeline.yaml",
            include_declaration=True,
        )

        assert outcome.query.kind is NavigationKind.WORKFLOW_TEMPLATE_DEFINITION
        assert outcome.locations == [
            SourceLocation(str(argo_project / "workflow-templates" / "build.yaml"), 3)
        ]

    def test_template_ref_jumps_to_template(self, navigator, argo_project):
        outcome = navigator.navigate(_read(argo_project, "workflows/pipeline.yaml"), 16, 25)

        assert outcome.query.kind is NavigationKind.TEMPLATE_DEFINITION
        assert outcome.locations == [
            SourceLocation(str(argo_project / "workflow-templates" / "build.yaml"), 12)
        ]

    def test_metadata_name_finds_all_references(self, navigator, argo_project):
        outcome = navigator.navigate(_read(argo_project, "workflow-templates/build.yaml"), 3, 10)

        assert outcome.query.kind is NavigationKind.WORKFLOW_TEMPLATE_REFERENCES
        assert len(outcome.locations) == 3

    def test_not_found_is_empty_not_error(self, navigator):
        outcome = navigator.navigate("entrypoint: nowhere\n", 0, 15)

        assert outcome.query.kind is NavigationKind.NAME_DEFINITION
        assert outcome.locations == []

    def test_unclassifiable_position(self, navigator):
        assert navigator.navigate("\n", 0, 0) is None


class TestCancellation:
    """Cancellation checkpoints surface as no result."""

    def test_cancelled_before_start(self, navigator, argo_project):
        token = CancellationToken()
        token.cancel()

        assert navigator.navigate(_read(argo_project, "workflow-templates/build.yaml"), 3, 10, token) is None

    def test_cancelled_during_search(self, argo_project):
        search = MagicMock()
        search.find_workflow_template_references.side_effect = SearchCancelled("search cancelled")
        navigator = Navigator(argo_project, search=search)

        assert navigator.navigate(_read(argo_project, "workflow-templates/build.yaml"), 3, 10) is None

    def test_cancelled_after_search(self, argo_project):
        token = CancellationToken()
        search = MagicMock()

        def cancel_then_return(*args, **kwargs):
            token.cancel()
            return MagicMock(locations=[])

        search.find_definition.side_effect = cancel_then_return
        navigator = Navigator(argo_project, search=search)

        assert navigator.navigate("entrypoint: main\n", 0, 14, token) is None
        search.find_definition.assert_called_once()


class TestInvalidate:
    """File changes reach the caches through invalidate()."""

    def test_modified_file_reflected_after_invalidate(self, navigator, argo_project):
        text = "entrypoint: build-tools\n"
        build = argo_project / "workflow-templates" / "build.yaml"
        before = navigator.navigate(text, 0, 15)
        assert [loc.line for loc in before.locations] == [3]

        build.write_text(
            "kind: WorkflowTemplate\n\n\nmetadata:\n  name: build-tools\n", encoding="utf-8"
        )
        stale = navigator.navigate(text, 0, 15)
        assert [loc.line for loc in stale.locations] == [3]

        navigator.invalidate(str(build))
        fresh = navigator.navigate(text, 0, 15)
        assert fresh.locations == [SourceLocation(str(build), 4)]

    def test_deleted_file_disappears_after_invalidate(self, navigator, argo_project):
        text = "entrypoint: build-tools\n"
        build = argo_project / "workflow-templates" / "build.yaml"
        navigator.navigate(text, 0, 15)

        build.unlink()
        navigator.invalidate(str(build))

        assert navigator.navigate(text, 0, 15).locations == []
