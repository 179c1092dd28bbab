"""Turn a key -> dependency-list mapping into dependency nodes and edges.

Building happens in two passes. ``build_nodes`` creates the arena of nodes and
the key lookup, ``connect_nodes`` wires the edges and records the errors that
belong to a node itself (missing and self dependencies). Cycle detection and
error inheritance are separate passes run afterwards by the tree.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from src.graph.node import DependencyNode, missing_dependency_error, self_dependency_error
from src.log_config import get_logger

logger = get_logger(__name__)


@dataclass
class ConnectionResult:
    """Problems found while wiring edges.

    Attributes:
        missing: Undefined dependency keys, per referencing key, in listed order
        self_dependent: Keys that list themselves as a dependency
        edge_count: Number of edges created (duplicates included)
    """

    missing: dict[str, list[str]] = field(default_factory=dict)
    self_dependent: set[str] = field(default_factory=set)
    edge_count: int = 0


def _dependency_list(key: str, dependencies: Sequence[str]) -> Sequence[str]:
    # A bare string is iterable, so catch it before it is split into characters
    if isinstance(dependencies, str):
        msg = f"Dependencies of {key!r} must be a sequence of keys, not a string"
        raise TypeError(msg)
    return dependencies


def build_nodes(
    mapping: Mapping[str, Sequence[str]],
    create_dependency_keys: bool = False,
) -> tuple[list[DependencyNode], dict[str, int]]:
    """Create one node per key of the mapping.

    Args:
        mapping: Key to the ordered list of keys it depends on
        create_dependency_keys: Also create nodes for keys that only appear in
            dependency lists (after all mapping keys, in first-seen order)

    Returns:
        The node arena and a lookup from key to handle

    Raises:
        TypeError: If a dependency list is given as a single string
    """
    nodes: list[DependencyNode] = []
    lookup: dict[str, int] = {}

    def add(key: str) -> None:
        if key not in lookup:
            lookup[key] = len(nodes)
            nodes.append(DependencyNode(key=key, handle=len(nodes)))

    for key, dependencies in mapping.items():
        _dependency_list(key, dependencies)
        add(key)

    if create_dependency_keys:
        for dependencies in mapping.values():
            for dependency in dependencies:
                if dependency not in lookup:
                    logger.debug("dependency_key_created", key=dependency)
                    add(dependency)

    logger.debug("nodes_created", node_count=len(nodes))
    return nodes, lookup


def connect_nodes(
    nodes: list[DependencyNode],
    lookup: dict[str, int],
    mapping: Mapping[str, Sequence[str]],
    reject_self_dependency: bool = True,
) -> ConnectionResult:
    """Create an edge for every listed dependency that names a known key.

    Unknown dependencies become a missing dependency error on the listing node.
    A key listing itself gets a self dependency error instead of an edge when
    ``reject_self_dependency`` is set. Listing the same dependency twice creates
    two edges.

    Args:
        nodes: Node arena from build_nodes
        lookup: Key to handle lookup from build_nodes
        mapping: The mapping the nodes were built from
        reject_self_dependency: Refuse self edges and flag the key instead

    Returns:
        The missing and self-dependent keys found, and the edge count
    """
    result = ConnectionResult()

    for key, dependencies in mapping.items():
        node = nodes[lookup[key]]

        for dependency in _dependency_list(key, dependencies):
            if dependency == key and reject_self_dependency:
                node.add_error(self_dependency_error(key))
                result.self_dependent.add(key)
                logger.warning("self_dependency", key=key)
                continue

            handle = lookup.get(dependency)
            if handle is None:
                node.add_error(missing_dependency_error(dependency))
                result.missing.setdefault(key, []).append(dependency)
                logger.warning("missing_dependency", key=key, dependency=dependency)
                continue

            node.parents.append(handle)
            nodes[handle].children.append(node.handle)
            result.edge_count += 1
            logger.debug("edge_created", dependent=key, dependency=dependency)

    return result
