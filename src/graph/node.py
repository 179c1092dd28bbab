"""Dependency node model and the error messages recorded on nodes.

Nodes live in an arena (a plain list) owned by a DependencyTree. Edges are
stored as integer handles into that arena, never as object references, so a
node never keeps another node alive.
"""

from dataclasses import dataclass, field

MISSING_DEPENDENCY = "Missing Dependency: <{key}>"
SELF_DEPENDENCY = "Self Dependency: <{key}>"
CIRCULAR_DEPENDENCY_CYCLE = "ERROR: In Circular Dependency Cycle"
CIRCULAR_DEPENDENCY_CIRCUIT = "Error: Circular Dependency Circuit Found!"


def missing_dependency_error(key: str) -> str:
    """Build the error recorded on a node that lists an undefined key."""
    return MISSING_DEPENDENCY.format(key=key)


def self_dependency_error(key: str) -> str:
    """Build the error recorded on a node that lists its own key."""
    return SELF_DEPENDENCY.format(key=key)


@dataclass(eq=False)
class DependencyNode:
    """One vertex of a dependency tree.

    Attributes:
        key: Unique identity of the node within its tree
        handle: Position of the node in the owning tree's arena
        parents: Handles of the nodes this node depends on, in listed order
        children: Handles of the nodes that depend on this node
        errors: Own and inherited error messages, without duplicates
    """

    key: str
    handle: int
    parents: list[int] = field(default_factory=list)
    children: list[int] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def is_available(self) -> bool:
        """A node is available exactly when it carries no errors."""
        return not self.errors

    def add_error(self, message: str) -> bool:
        """Record an error unless the exact message is already present.

        Returns:
            True if the message was added, False if it was a duplicate
        """
        if message in self.errors:
            return False
        self.errors.append(message)
        return True

    def merge_errors(self, messages: list[str]) -> int:
        """Record every message not already present, keeping their order.

        Returns:
            Number of messages that were new to this node
        """
        return sum(1 for message in messages if self.add_error(message))

    def error_summary(self) -> str:
        return ", ".join(self.errors)

    def __repr__(self) -> str:
        return (
            f"DependencyNode({self.key!r}, parents={len(self.parents)}, "
            f"children={len(self.children)}, errors={len(self.errors)})"
        )
