"""Unit tests for TreeValidator and TreeReport.

Tests cover:
- Report construction and summaries
- Cycle, self dependency and missing reference reporting
- Nodes broken only through inheritance
- Tree visualization
"""

import pytest

from src.graph.dependency_tree import DependencyTree
from src.graph.validator import TreeReport, TreeValidator


def built(mapping) -> DependencyTree:
    """Build a tree from a mapping."""
    tree = DependencyTree()
    tree.init(mapping)
    return tree


@pytest.fixture
def validator() -> TreeValidator:
    """Fixture providing a validator."""
    return TreeValidator()


class TestTreeReport:
    """Test TreeReport functionality."""

    def test_initialization(self):
        """Test that TreeReport initializes correctly."""
        report = TreeReport()

        assert report.is_valid is True
        assert report.errors == []
        assert report.warnings == []
        assert report.cycles == []
        assert report.missing_refs == set()
        assert report.self_dependencies == set()
        assert report.unavailable == set()

    def test_add_error(self):
        """Test adding errors marks validation as failed."""
        report = TreeReport()
        report.add_error("Test error")

        assert not report.is_valid
        assert report.errors == ["Test error"]

    def test_add_warning(self):
        """Test adding warnings doesn't fail validation."""
        report = TreeReport()
        report.add_warning("Test warning")

        assert report.is_valid
        assert report.warnings == ["Test warning"]

    def test_summary_empty_report(self):
        """Test summary generation for empty report."""
        summary = TreeReport().summary()

        assert "Validation Status: PASS" in summary
        assert "Errors: 0" in summary
        assert "Unavailable Nodes: 0" in summary

    def test_summary_lists_self_dependencies(self):
        """Test that the summary names every self-dependent key."""
        report = TreeReport()
        report.self_dependencies = {"b", "a"}
        summary = report.summary()

        assert "Self Dependencies: 2" in summary
        assert "\nSelf Dependencies: a, b" in summary

    def test_summary_with_cycles(self):
        """Test summary generation with cycle information."""
        report = TreeReport()
        report.cycles = [["a", "b"]]
        summary = report.summary()

        assert "Cycles: 1" in summary
        assert "1. a, b" in summary


class TestValidate:
    """Test validation of built trees."""

    def test_valid_tree(self, validator):
        """Test that a clean tree passes."""
        report = validator.validate(built({"a": ["b"], "b": []}))

        assert report.is_valid
        assert report.errors == []
        assert report.warnings == []

    def test_empty_tree(self, validator):
        """Test that an empty tree passes."""
        assert validator.validate(DependencyTree()).is_valid

    def test_cycle_reported(self, validator):
        """Test that each cycle becomes one error."""
        report = validator.validate(built({"b": ["a"], "a": ["b"], "c": []}))

        assert not report.is_valid
        assert report.cycles == [["a", "b"]]
        assert report.errors == ["Cycle detected: a, b"]

    def test_multiple_cycles(self, validator):
        """Test that separate cycles are reported separately."""
        report = validator.validate(built({"a": ["b"], "b": ["a"], "c": ["d"], "d": ["c"]}))

        assert sorted(report.cycles) == [["a", "b"], ["c", "d"]]
        assert len(report.errors) == 2

    def test_self_dependency_reported(self, validator):
        """Test that a self dependency is an error."""
        report = validator.validate(built({"a": ["a"]}))

        assert report.self_dependencies == {"a"}
        assert report.errors == ["Self dependency: a"]

    def test_missing_references(self, validator):
        """Test that undefined keys are warned about and fail validation."""
        report = validator.validate(built({"a": ["x", "y"], "b": ["x"]}))

        assert report.missing_refs == {"x", "y"}
        assert report.errors == []
        assert "Keys referenced as dependencies but not defined: x, y" in report.warnings
        assert not report.is_valid

    def test_inherited_only_nodes_warned(self, validator):
        """Test the warning for nodes broken only by a dependency."""
        report = validator.validate(built({"a": ["b"], "b": ["x"], "c": []}))

        assert report.unavailable == {"a", "b"}
        assert "Nodes unavailable through their dependencies: a" in report.warnings

    def test_validate_does_not_mutate(self, validator):
        """Test that validation leaves node errors untouched."""
        tree = built({"a": ["b"], "b": ["a"]})
        before = {key: tree.errors(key) for key in tree.keys()}

        validator.validate(tree)

        assert {key: tree.errors(key) for key in tree.keys()} == before

    def test_summary_completeness(self, validator):
        """Test that a summary of a broken tree names every problem."""
        report = validator.validate(built({"a": ["b", "x"], "b": ["a"], "c": ["c"]}))
        summary = report.summary()

        assert "Validation Status: FAIL" in summary
        assert "Cycle detected: a, b" in summary
        assert "Self dependency: c" in summary
        assert "Missing References: x" in summary
        assert "Self Dependencies: c" in summary
        assert "Unavailable Nodes: a, b, c" in summary


class TestVisualization:
    """Test tree visualization."""

    def test_mermaid_empty_tree(self, validator):
        """Test Mermaid output for an empty tree."""
        output = validator.generate_visualization(DependencyTree())

        assert output == "graph TD\n    Empty[Empty Tree]"

    def test_mermaid_simple_tree(self, validator):
        """Test Mermaid output with an edge from dependency to dependent."""
        output = validator.generate_visualization(built({"task-1": ["task.2"], "task.2": []}))

        assert output.splitlines() == [
            "graph TD",
            "    task_1[task-1]",
            "    task_2[task.2]",
            "    task_2 --> task_1",
        ]

    def test_mermaid_marks_unavailable(self, validator):
        """Test that unavailable nodes get the highlight class."""
        output = validator.generate_visualization(built({"a": ["x"], "b": []}))

        assert "    a[a]:::unavailable" in output
        assert "    b[b]" in output.splitlines()
        assert "classDef unavailable" in output

    def test_graphviz_simple_tree(self, validator):
        """Test DOT output."""
        output = validator.generate_visualization(built({"a": ["b"], "b": ["x"]}), "DOT")

        assert output.startswith("digraph DependencyTree {")
        assert '"a" [color=red, fontcolor=red];' in output
        assert '"b" -> "a";' in output
        assert output.endswith("}")

    def test_graphviz_escapes_quotes(self, validator):
        """Test that quotes in keys are escaped."""
        output = validator.generate_visualization(built({'say "hi"': []}), "dot")

        assert '"say \\"hi\\"";' in output

    def test_unsupported_format(self, validator):
        """Test that unknown formats are rejected."""
        with pytest.raises(ValueError, match="Unsupported format"):
            validator.generate_visualization(DependencyTree(), "svg")
