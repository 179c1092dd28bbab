"""Demonstration of building and querying a dependency tree.

This example loads examples/deptree.yaml, builds a small tree with one missing
dependency and one circular pair, prints what is available, and renders the
tree as Mermaid.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.graph import DependencyTree, TreeValidator
from src.log_config import get_logger

CONFIG_PATH = Path(__file__).parent / "deptree.yaml"

MANIFEST = {
    "app": ["web", "worker"],
    "web": ["http", "templates"],
    "worker": ["queue"],
    "http": [],
    "templates": ["i18n"],
    "queue": ["broker"],
    "broker": ["queue"],
}


def main() -> None:
    """Build the example manifest and report on it."""
    tree = DependencyTree.from_config(config_path=CONFIG_PATH)
    logger = get_logger(__name__)

    tree.init(MANIFEST)

    for key in tree.keys():
        logger.info(
            "node_status",
            key=key,
            available=tree.is_available(key),
            dependencies=tree.get_dependencies(key),
            errors=tree.errors(key),
        )

    validator = TreeValidator()
    print(validator.validate(tree).summary())
    print()
    print(validator.generate_visualization(tree, output_format="mermaid"))


if __name__ == "__main__":
    main()
