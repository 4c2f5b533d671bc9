from __future__ import annotations

"""
Version Tree Data Models.

Provides the node record and the arena that owns every node of a content
hash tree. Parent/child relations are expressed as id lists rather than
live object references, so the tree has a single owner and no cycles.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass
class TreeNode:
    """
    A node of the version tree.

    Attributes:
        id: Full path-like key (e.g. 'src/a/b').
        name: Last path segment; leaves drop their extension.
        depth: Distance from the root (root is 0).
        children: Ordered child ids.
        parent: Parent id, None for the root.
        is_leaf: True when created as the terminal segment of a file path.
        is_root: True only for the namespace root.
        hash: Content fingerprint of the subtree.
        alt_hash: Shared fingerprint of a same-named file/directory pair.
    """
    id: str
    name: str
    depth: int
    children: List[str] = field(default_factory=list)
    parent: Optional[str] = None
    is_leaf: bool = False
    is_root: bool = False
    hash: str = ""
    alt_hash: Optional[str] = None


class VersionTree:
    """
    Arena of TreeNodes addressed by their id.

    The tree is built fresh for one pass and discarded once version
    prefixes have been collected from it.
    """

    def __init__(self, root_id: str) -> None:
        self.root_id = root_id
        self._nodes: Dict[str, TreeNode] = {
            root_id: TreeNode(id=root_id, name=root_id, depth=0, is_root=True)
        }

    @property
    def root(self) -> TreeNode:
        return self._nodes[self.root_id]

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: str) -> Optional[TreeNode]:
        return self._nodes.get(node_id)

    def node(self, node_id: str) -> TreeNode:
        return self._nodes[node_id]

    def children_of(self, node: TreeNode) -> List[TreeNode]:
        return [self._nodes[c] for c in node.children]

    def add_child(self, parent: TreeNode, node_id: str, name: str) -> TreeNode:
        """
        Return the child with the given id, creating and linking it if needed.

        Raises:
            AssertionError: If the parent is a leaf (leaves never gain children).
        """
        existing = self._nodes.get(node_id)
        if existing is not None:
            return existing

        assert not parent.is_leaf, f"Leaf node '{parent.id}' cannot gain children"
        child = TreeNode(id=node_id, name=name, depth=parent.depth + 1, parent=parent.id)
        self._nodes[node_id] = child
        parent.children.append(node_id)
        return child

    def iter_nodes(self) -> Iterator[TreeNode]:
        return iter(self._nodes.values())

    def leaves(self) -> List[TreeNode]:
        return [n for n in self._nodes.values() if n.is_leaf]
