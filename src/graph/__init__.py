"""Graph module for dependency validation and traversal.

This module builds dependency trees from key -> dependency-list mappings,
detects missing and circular dependencies, propagates errors from dependencies
to their dependents and enumerates ancestors and descendants.
"""

from src.graph.dependency_tree import DependencyTree
from src.graph.node import DependencyNode
from src.graph.validator import TreeReport, TreeValidator

__all__ = ["DependencyNode", "DependencyTree", "TreeReport", "TreeValidator"]
