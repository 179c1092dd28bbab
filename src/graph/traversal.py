"""Ancestor and descendant enumeration over a built dependency tree.

Both walks are depth-first with an explicit stack. Direct neighbours are pushed
in listed order, so the last listed neighbour is explored first. The starting
node is never part of its own result, even inside a cycle.
"""

from src.graph.node import DependencyNode


def _discover(
    start: DependencyNode,
    nodes: list[DependencyNode],
    parents: bool,
) -> list[DependencyNode]:
    def neighbours(node: DependencyNode) -> list[int]:
        return node.parents if parents else node.children

    to_check = list(neighbours(start))
    found = {start.key}
    discovered = []

    while to_check:
        check = nodes[to_check.pop()]
        if check.key in found:
            continue

        discovered.append(check)
        to_check.extend(neighbours(check))
        found.add(check.key)

    return discovered


def collect_dependencies(node: DependencyNode, nodes: list[DependencyNode]) -> list[DependencyNode]:
    """Everything ``node`` depends on, directly or transitively.

    Returned most recently discovered first, so for a chain A -> B -> C the
    dependencies of A are [C, B].
    """
    discovered = _discover(node, nodes, parents=True)
    discovered.reverse()
    return discovered


def collect_dependents(node: DependencyNode, nodes: list[DependencyNode]) -> list[DependencyNode]:
    """Everything that depends on ``node``, in discovery order."""
    return _discover(node, nodes, parents=False)
