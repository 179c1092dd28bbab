"""Strongly connected component analysis over the "depends on" edges.

Tarjan's algorithm, driven by an explicit work stack so that long dependency
chains do not run into the interpreter's recursion limit. All bookkeeping for a
run lives in a TarjanState, which makes the detector reentrant.
"""

from dataclasses import dataclass, field

from src.graph.node import CIRCULAR_DEPENDENCY_CYCLE, DependencyNode
from src.log_config import get_logger

logger = get_logger(__name__)


@dataclass
class TarjanState:
    """Per-run state of the SCC search, one slot per node handle.

    Attributes:
        index: Discovery index per handle, -1 while unvisited
        lowlink: Smallest index reachable per handle
        on_stack: Whether a handle is on the component stack
        next_index: Next discovery index to hand out
        stack: Component stack of handles
        components: Components found so far, each a list of handles
    """

    index: list[int]
    lowlink: list[int]
    on_stack: list[bool]
    next_index: int = 0
    stack: list[int] = field(default_factory=list)
    components: list[list[int]] = field(default_factory=list)

    @classmethod
    def for_size(cls, size: int) -> "TarjanState":
        return cls(index=[-1] * size, lowlink=[-1] * size, on_stack=[False] * size)

    def is_visited(self, handle: int) -> bool:
        return self.index[handle] >= 0

    def visit(self, handle: int) -> None:
        self.index[handle] = self.next_index
        self.lowlink[handle] = self.next_index
        self.next_index += 1
        self.stack.append(handle)
        self.on_stack[handle] = True

    def pop_component(self, root: int) -> list[int]:
        """Pop handles off the stack down to and including ``root``."""
        component = []
        while True:
            handle = self.stack.pop()
            self.on_stack[handle] = False
            component.append(handle)
            if handle == root:
                return component


def _strong_connect(root: int, nodes: list[DependencyNode], state: TarjanState) -> None:
    state.visit(root)
    # Each frame is (handle, position of the next parent edge to follow)
    work = [(root, 0)]

    while work:
        handle, position = work[-1]
        parents = nodes[handle].parents

        if position < len(parents):
            work[-1] = (handle, position + 1)
            parent = parents[position]
            if not state.is_visited(parent):
                state.visit(parent)
                work.append((parent, 0))
            elif state.on_stack[parent]:
                state.lowlink[handle] = min(state.lowlink[handle], state.index[parent])
            continue

        work.pop()
        if state.lowlink[handle] == state.index[handle]:
            state.components.append(state.pop_component(handle))

        if work:
            caller = work[-1][0]
            state.lowlink[caller] = min(state.lowlink[caller], state.lowlink[handle])


def find_strongly_connected_components(
    nodes: list[DependencyNode],
) -> list[list[DependencyNode]]:
    """Find every strongly connected component of the node arena.

    Nodes are started in arena order. Components come out in the order Tarjan's
    algorithm completes them, which puts dependencies before their dependents.

    Args:
        nodes: The node arena, indexed by handle

    Returns:
        All components, singletons included
    """
    state = TarjanState.for_size(len(nodes))

    for node in nodes:
        if not state.is_visited(node.handle):
            logger.debug("strong_connect_started", key=node.key)
            _strong_connect(node.handle, nodes, state)

    logger.debug(
        "strongly_connected_components_found",
        component_count=len(state.components),
        node_count=len(nodes),
    )
    return [[nodes[handle] for handle in component] for component in state.components]


def mark_cycles(components: list[list[DependencyNode]]) -> list[list[DependencyNode]]:
    """Flag every member of a component with more than one node as circular.

    Single-node components are never flagged, even when the node has an edge to
    itself.

    Args:
        components: Output of find_strongly_connected_components

    Returns:
        The components that form cycles
    """
    cycles = [component for component in components if len(component) > 1]

    for component in cycles:
        logger.warning(
            "circular_dependency_component",
            member_count=len(component),
            members=[node.key for node in component],
        )
        for node in component:
            node.add_error(CIRCULAR_DEPENDENCY_CYCLE)

    return cycles
