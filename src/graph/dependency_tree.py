"""Dependency tree: the node store and the query surface over it.

A DependencyTree is built from a mapping of key -> list of keys it depends on.
Building runs every validation pass eagerly (edges, cycle detection, error
inheritance); afterwards the tree answers availability, error and
ancestor/descendant queries without changing.
"""

from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path

from src.config import BuildConfig, TreeConfig, get_config
from src.graph.builder import build_nodes, connect_nodes
from src.graph.node import DependencyNode
from src.graph.propagation import propagate_errors
from src.graph.scc import find_strongly_connected_components, mark_cycles
from src.graph.traversal import collect_dependencies, collect_dependents
from src.graph.validator import check_cyclicity
from src.log_config import configure_logging, get_logger

logger = get_logger(__name__)


class DependencyTree:
    """Validated dependency tree over string keys.

    Graph problems are never raised. A dependency on an undefined key, a key
    depending on itself, membership of a circular dependency, and any of these
    found on a transitive dependency all end up as error messages on the node.
    A node is available exactly when its error list is empty.

    Thread-safety:
        Building mutates every node and must not overlap any other call. Once
        init() has returned, any number of read-only queries may run
        concurrently. check_cyclicity() records errors and counts as a write.

    Example:
        >>> tree = DependencyTree()
        >>> tree.init({"app": ["lib"], "lib": ["core"], "core": []})
        >>> tree.get_dependencies("app")
        ['core', 'lib']
        >>> tree.is_available("app")
        True
        >>> tree.init({"app": ["ghost"]})
        >>> tree.errors("app")
        ['Missing Dependency: <ghost>']
    """

    def __init__(self, config: BuildConfig | None = None):
        """Initialize an empty tree.

        Args:
            config: Build settings; defaults to BuildConfig()
        """
        self.config = config or BuildConfig()
        self._nodes: list[DependencyNode] = []
        self._lookup: dict[str, int] = {}
        self._components: list[list[int]] = []
        self._missing: dict[str, list[str]] = {}
        self._self_dependent: set[str] = set()
        self._is_built = False

    @classmethod
    def from_config(
        cls,
        config: TreeConfig | None = None,
        config_path: str | Path | None = None,
    ) -> "DependencyTree":
        """Create an empty tree from the engine configuration.

        Logging is configured from the same configuration before the tree is
        created, so build events use the configured level and renderer.

        Args:
            config: Configuration to use; loaded with get_config() when None
            config_path: Configuration file passed to get_config()

        Returns:
            A DependencyTree using ``config.build``

        Raises:
            FileNotFoundError: If no configuration is given and none is found
        """
        if config is None:
            config = get_config(config_path)

        configure_logging(level=config.logging_level, json_logs=config.json_logs)

        for warning in config.validate_config():
            logger.warning("configuration_warning", message=warning)

        return cls(config.build)

    def init(self, mapping: Mapping[str, Sequence[str]]) -> None:
        """Build the tree from a key -> dependencies mapping.

        Any previously built tree is discarded first, so building the same
        mapping twice gives the same result.

        Args:
            mapping: Each key with the ordered keys it depends on

        Raises:
            TypeError: If a dependency list is given as a single string
        """
        self.clear()

        logger.info(
            "initializing_tree",
            key_count=len(mapping),
            create_dependency_keys=self.config.create_dependency_keys,
        )

        nodes, lookup = build_nodes(mapping, self.config.create_dependency_keys)
        connections = connect_nodes(
            nodes,
            lookup,
            mapping,
            reject_self_dependency=self.config.reject_self_dependency,
        )

        components = find_strongly_connected_components(nodes)
        cycles = mark_cycles(components)
        inherited = propagate_errors(nodes)

        self._nodes = nodes
        self._lookup = lookup
        self._components = [[node.handle for node in component] for component in components]
        self._missing = connections.missing
        self._self_dependent = connections.self_dependent
        self._is_built = True

        logger.info(
            "tree_initialized",
            node_count=len(nodes),
            edge_count=connections.edge_count,
            cycle_count=len(cycles),
            missing_count=sum(len(keys) for keys in connections.missing.values()),
            inherited_error_count=inherited,
            unavailable_count=sum(1 for node in nodes if not node.is_available),
        )

    def clear(self) -> None:
        """Drop every node and all results of the last build."""
        if self._nodes:
            logger.debug("tree_cleared", node_count=len(self._nodes))
        self._nodes = []
        self._lookup = {}
        self._components = []
        self._missing = {}
        self._self_dependent = set()
        self._is_built = False

    def get_node(self, key: str) -> DependencyNode | None:
        """Return the node for ``key``, or None if the tree has no such key."""
        handle = self._lookup.get(key)
        if handle is None:
            return None
        return self._nodes[handle]

    def is_available(self, key: str) -> bool:
        """Check whether ``key`` exists and carries no errors."""
        node = self.get_node(key)
        return node is not None and node.is_available

    def errors(self, key: str) -> list[str]:
        """Own and inherited errors of ``key``; empty for unknown keys."""
        node = self.get_node(key)
        if node is None:
            return []
        return list(node.errors)

    def error_summary(self, key: str) -> str:
        """Errors of ``key`` joined with ', '."""
        node = self.get_node(key)
        if node is None:
            return ""
        return node.error_summary()

    def get_dependency_nodes(self, key: str) -> list[DependencyNode]:
        """All transitive dependencies of ``key``, most recently discovered first.

        Returns an empty list for unknown keys.
        """
        node = self.get_node(key)
        if node is None:
            return []
        return collect_dependencies(node, self._nodes)

    def get_dependencies(self, key: str) -> list[str]:
        """Keys of get_dependency_nodes(key)."""
        return [node.key for node in self.get_dependency_nodes(key)]

    def get_dependent_nodes(self, key: str) -> list[DependencyNode]:
        """All transitive dependents of ``key``, in discovery order.

        Returns an empty list for unknown keys.
        """
        node = self.get_node(key)
        if node is None:
            return []
        return collect_dependents(node, self._nodes)

    def get_dependents(self, key: str) -> list[str]:
        """Keys of get_dependent_nodes(key)."""
        return [node.key for node in self.get_dependent_nodes(key)]

    def check_cyclicity(self, key: str) -> bool:
        """Run the single-node cycle diagnostic on ``key``.

        This is independent of the cycle detection done by init(). A positive
        result adds the circuit error to ``key`` only. Any dependency reached
        twice during the walk counts, diamonds included.

        Returns:
            True if a key repeated while walking the dependencies of ``key``;
            False for unknown keys
        """
        node = self.get_node(key)
        if node is None:
            return False
        return check_cyclicity(node, self._nodes)

    @property
    def components(self) -> list[list[str]]:
        """Keys of every strongly connected component of the last build."""
        return [[self._nodes[handle].key for handle in component] for component in self._components]

    @property
    def cycles(self) -> list[list[str]]:
        """Components of the last build with more than one member."""
        return [component for component in self.components if len(component) > 1]

    @property
    def missing_dependencies(self) -> dict[str, list[str]]:
        """Undefined dependency keys, per key that listed them."""
        return {key: list(dependencies) for key, dependencies in self._missing.items()}

    @property
    def self_dependencies(self) -> set[str]:
        return set(self._self_dependent)

    @property
    def is_built(self) -> bool:
        """Check whether init() has built the current tree."""
        return self._is_built

    def keys(self) -> list[str]:
        """Every key in the tree, in build order."""
        return [node.key for node in self._nodes]

    def available_keys(self) -> list[str]:
        return [node.key for node in self._nodes if node.is_available]

    def unavailable_keys(self) -> list[str]:
        return [node.key for node in self._nodes if not node.is_available]

    def edges(self) -> Iterator[tuple[str, str]]:
        """Yield (dependency, dependent) key pairs, one per edge."""
        for node in self._nodes:
            for handle in node.parents:
                yield self._nodes[handle].key, node.key

    def get_stats(self) -> dict[str, int]:
        """Get statistics about the current tree.

        Returns:
            Dictionary with tree statistics including:
                - total_nodes: Number of nodes
                - total_edges: Number of edges, duplicates included
                - unavailable_nodes: Nodes carrying at least one error
                - cycles: Circular components found by the last build
                - is_built: Whether init() has been called
        """
        stats = {
            "total_nodes": len(self._nodes),
            "total_edges": sum(len(node.parents) for node in self._nodes),
            "unavailable_nodes": len(self.unavailable_keys()),
            "cycles": len(self.cycles),
            "is_built": self._is_built,
        }

        logger.debug("tree_stats_retrieved", **stats)

        return stats

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, key: object) -> bool:
        return key in self._lookup
