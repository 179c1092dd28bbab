"""Tree validation reporting, an ad hoc cycle diagnostic and graph export.

The build pipeline of DependencyTree already records every problem on the
nodes themselves. This module summarises those results for people: a
TreeReport listing cycles, self dependencies, undefined keys and unavailable
nodes, plus Mermaid and Graphviz renderings of the tree.

It also hosts ``check_cyclicity``, a single-node diagnostic that is not part of
the build. Its verdict is recorded on the queried node only and is never used
to decide availability elsewhere.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from src.graph.node import CIRCULAR_DEPENDENCY_CIRCUIT, DependencyNode

if TYPE_CHECKING:
    from src.graph.dependency_tree import DependencyTree

logger = structlog.get_logger(__name__)


def check_cyclicity(node: DependencyNode, nodes: list[DependencyNode]) -> bool:
    """Walk the ancestors of one node looking for a key that repeats during the walk.

    The walk is depth-first through parent edges, with the node's own key
    counted as seen from the start. On any repeat the circuit error is appended
    to ``node`` alone; dependents do not inherit it.

    A dependency reached through two paths (a diamond) also counts as a repeat,
    so this diagnostic reports false positives. The cycle detection run by
    DependencyTree.init() does not.

    Args:
        node: Node whose ancestor chain is checked
        nodes: The node arena, indexed by handle

    Returns:
        True if any key was seen twice during the walk
    """
    logger.debug("checking_dependency_circularity", key=node.key)

    to_check = list(node.parents)
    visited = {node.key}
    found = False

    while to_check:
        check = nodes[to_check.pop()]

        if check.key in visited:
            found = True
            continue

        to_check.extend(check.parents)
        visited.add(check.key)

    if found:
        logger.warning("circular_dependency_circuit_found", key=node.key)
        node.add_error(CIRCULAR_DEPENDENCY_CIRCUIT)

    return found


@dataclass
class TreeReport:
    """Report summarising the problems of a built dependency tree.

    Attributes:
        is_valid: Whether every node of the tree is available
        errors: List of error messages (critical issues)
        warnings: List of warning messages (potential issues)
        cycles: Keys of each circular component, sorted within a component
        missing_refs: Keys referenced as dependencies but not defined
        self_dependencies: Keys that list themselves as a dependency
        unavailable: Keys of every node carrying an error
    """

    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)
    missing_refs: set[str] = field(default_factory=set)
    self_dependencies: set[str] = field(default_factory=set)
    unavailable: set[str] = field(default_factory=set)

    def add_error(self, message: str) -> None:
        """Add an error message and mark validation as failed."""
        self.errors.append(message)
        self.is_valid = False
        logger.error("validation_error", message=message)

    def add_warning(self, message: str) -> None:
        """Add a warning message without failing validation."""
        self.warnings.append(message)
        logger.warning("validation_warning", message=message)

    def summary(self) -> str:
        """Generate a human-readable summary of the report."""
        lines = []
        lines.append(f"Validation Status: {'PASS' if self.is_valid else 'FAIL'}")
        lines.append(f"Errors: {len(self.errors)}")
        lines.append(f"Warnings: {len(self.warnings)}")
        lines.append(f"Cycles: {len(self.cycles)}")
        lines.append(f"Missing References: {len(self.missing_refs)}")
        lines.append(f"Self Dependencies: {len(self.self_dependencies)}")
        lines.append(f"Unavailable Nodes: {len(self.unavailable)}")

        if self.errors:
            lines.append("\nErrors:")
            lines.extend(f"  - {error}" for error in self.errors)

        if self.warnings:
            lines.append("\nWarnings:")
            lines.extend(f"  - {warning}" for warning in self.warnings)

        if self.cycles:
            lines.append("\nCycles Detected:")
            for i, cycle in enumerate(self.cycles, 1):
                lines.append(f"  {i}. {', '.join(cycle)}")

        if self.missing_refs:
            lines.append(f"\nMissing References: {', '.join(sorted(self.missing_refs))}")

        if self.self_dependencies:
            lines.append(f"\nSelf Dependencies: {', '.join(sorted(self.self_dependencies))}")

        if self.unavailable:
            lines.append(f"\nUnavailable Nodes: {', '.join(sorted(self.unavailable))}")

        return "\n".join(lines)


class TreeValidator:
    """Reporting and visualization over a built DependencyTree.

    The validator only reads the tree. It never rebuilds it or adds errors.
    """

    def validate(self, tree: "DependencyTree") -> TreeReport:
        """Summarise the problems recorded while the tree was built.

        Args:
            tree: A built DependencyTree

        Returns:
            TreeReport with one error per cycle and per self dependency, and
            warnings for undefined keys and for nodes broken only by inheritance
        """
        logger.info("starting_tree_validation", node_count=len(tree))

        report = TreeReport()

        for cycle in tree.cycles:
            members = sorted(cycle)
            report.cycles.append(members)
            report.add_error(f"Cycle detected: {', '.join(members)}")

        for key in sorted(tree.self_dependencies):
            report.self_dependencies.add(key)
            report.add_error(f"Self dependency: {key}")

        for dependencies in tree.missing_dependencies.values():
            report.missing_refs.update(dependencies)
        if report.missing_refs:
            refs_str = ", ".join(sorted(report.missing_refs))
            report.add_warning(f"Keys referenced as dependencies but not defined: {refs_str}")

        report.unavailable = set(tree.unavailable_keys())
        directly_broken = set(tree.missing_dependencies) | report.self_dependencies
        for cycle in report.cycles:
            directly_broken.update(cycle)
        inherited_only = report.unavailable - directly_broken
        if inherited_only:
            report.add_warning(
                "Nodes unavailable through their dependencies: "
                f"{', '.join(sorted(inherited_only))}",
            )

        # Missing references alone are warnings, but they still leave nodes unavailable
        if report.unavailable:
            report.is_valid = False

        logger.info(
            "tree_validation_complete",
            is_valid=report.is_valid,
            error_count=len(report.errors),
            warning_count=len(report.warnings),
            unavailable_count=len(report.unavailable),
        )

        return report

    def generate_visualization(
        self,
        tree: "DependencyTree",
        output_format: str = "mermaid",
    ) -> str:
        """Generate a visual representation of the dependency tree.

        Args:
            tree: The DependencyTree to visualize
            output_format: Output format ('mermaid' or 'dot')

        Returns:
            String representation of the tree in the requested format

        Raises:
            ValueError: If an unsupported format is requested
        """
        output_format = output_format.lower().strip()

        if output_format == "mermaid":
            return self._generate_mermaid(tree)
        if output_format == "dot":
            return self._generate_graphviz(tree)
        error_msg = f"Unsupported format: {output_format}. Use 'mermaid' or 'dot'."
        raise ValueError(error_msg)

    def _generate_mermaid(self, tree: "DependencyTree") -> str:
        lines = ["graph TD"]

        if not tree:
            lines.append("    Empty[Empty Tree]")
            return "\n".join(lines)

        def sanitize(key: str) -> str:
            return key.replace("-", "_").replace(".", "_").replace(" ", "_")

        unavailable = set(tree.unavailable_keys())
        for key in tree.keys():
            suffix = ":::unavailable" if key in unavailable else ""
            lines.append(f"    {sanitize(key)}[{key}]{suffix}")

        # Arrow points from dependency to dependent
        lines.extend(
            f"    {sanitize(dependency)} --> {sanitize(dependent)}"
            for dependency, dependent in tree.edges()
        )

        if unavailable:
            lines.append("    classDef unavailable fill:#f8d7da,stroke:#c0392b")

        return "\n".join(lines)

    def _generate_graphviz(self, tree: "DependencyTree") -> str:
        def escape_dot_string(s: str) -> str:
            """Escape double quotes for DOT format."""
            return s.replace('"', '\\"')

        lines = ["digraph DependencyTree {"]
        lines.append("    rankdir=LR;")
        lines.append("    node [shape=box, style=rounded];")

        if not tree:
            lines.append('    Empty [label="Empty Tree"];')
        else:
            unavailable = set(tree.unavailable_keys())
            for key in tree.keys():
                attributes = ' [color=red, fontcolor=red]' if key in unavailable else ""
                lines.append(f'    "{escape_dot_string(key)}"{attributes};')

            lines.extend(
                f'    "{escape_dot_string(dependency)}" -> "{escape_dot_string(dependent)}";'
                for dependency, dependent in tree.edges()
            )

        lines.append("}")
        return "\n".join(lines)
