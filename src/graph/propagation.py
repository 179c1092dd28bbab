"""Copy errors from dependencies onto everything that depends on them."""

from src.graph.node import DependencyNode
from src.log_config import get_logger

logger = get_logger(__name__)


def inherit_errors(node: DependencyNode, nodes: list[DependencyNode]) -> int:
    """Merge the errors of every transitive dependency into ``node``.

    The walk is depth-first through parent edges. The node's own key counts as
    visited from the start, so a cycle leading back to it is not walked twice.

    Args:
        node: Node receiving the inherited errors
        nodes: The node arena, indexed by handle

    Returns:
        Number of errors that were new to the node
    """
    to_check = list(node.parents)
    visited = {node.key}
    inherited = 0

    while to_check:
        check = nodes[to_check.pop()]
        inherited += node.merge_errors(check.errors)

        if check.key in visited:
            continue

        to_check.extend(check.parents)
        visited.add(check.key)

    return inherited


def propagate_errors(nodes: list[DependencyNode]) -> int:
    """Run error inheritance for every node, in arena order.

    Must run after cycle marking so cycle errors are already on their members.

    Returns:
        Total number of inherited errors recorded
    """
    total = 0

    for node in nodes:
        inherited = inherit_errors(node, nodes)
        if inherited:
            logger.debug(
                "errors_inherited",
                key=node.key,
                inherited_count=inherited,
                errors=list(node.errors),
            )
        total += inherited

    return total
