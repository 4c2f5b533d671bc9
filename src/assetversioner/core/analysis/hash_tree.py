from __future__ import annotations

"""
Content Hash Tree Builder.

Mirrors a slash-delimited file namespace as a rooted tree and assigns a
fingerprint to every node: leaves carry their file hash, directories the
hash of their ordered children. Same-named file/directory siblings share
an alternate hash so that a token read at their depth reflects both.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from assetversioner.core.hashing.hasher import md5sum
from assetversioner.domain.constants import DEFAULT_SOURCE_ROOT, TREE_HASH_LENGTH
from assetversioner.domain.errors import SiblingCollisionOverflow
from assetversioner.domain.file_models import BuildFile
from assetversioner.domain.tree_models import TreeNode, VersionTree
from assetversioner.domain.version_models import VersioningIssue

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def build_version_tree(
        files: Iterable[BuildFile],
        include_filter: Callable[[BuildFile], bool],
        root_id: str = DEFAULT_SOURCE_ROOT,
        issues: Optional[List[VersioningIssue]] = None,
) -> VersionTree:
    """
    Build the content hash tree for the files accepted by the filter.

    Args:
        files: Candidate build files.
        include_filter: Predicate selecting the files to fingerprint.
        root_id: Namespace root; a first path segment equal to it maps onto
                 the root node.
        issues: Optional list collecting recoverable problems.

    Returns:
        VersionTree: The tree, with every node hash computed.
    """
    # 1. Fingerprint survivors at full width for the combining step
    file_hashes: Dict[str, str] = {}
    for file in files:
        if include_filter(file):
            file_hashes[file.path] = md5sum(file, TREE_HASH_LENGTH)

    tree = VersionTree(root_id)

    # 2. Materialize one node per path segment
    for path, file_hash in file_hashes.items():
        leaf = _insert_path(tree, path)
        leaf.is_leaf = True
        leaf.hash = file_hash

    # 3. Deterministic ordering, then 4. post-order hashing
    _sort_children(tree)
    _compute_hashes(tree, issues if issues is not None else [])

    logger.debug(f"Version tree built: {len(file_hashes)} files, {len(tree)} nodes")
    return tree


def node_sort_key(node: TreeNode) -> Tuple[str, bool, str]:
    """
    Order siblings by name; a file sorts after the directory of the same name.

    The full id breaks ties between same-stem files ('a.js', 'a.tpl').
    """
    return node.name, node.is_leaf, node.id

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _insert_path(tree: VersionTree, path: str) -> TreeNode:
    """Walk or create the nodes of one file path and return its terminal node."""
    segments = path.split("/")
    parent = tree.root

    # Paths under the namespace root hang directly from it
    if len(segments) > 1 and segments[0] == tree.root_id:
        segments = segments[1:]
        node_id = tree.root_id
    else:
        node_id = ""

    last_idx = len(segments) - 1
    for idx, segment in enumerate(segments):
        node_id = f"{node_id}/{segment}" if node_id else segment
        name = segment
        if idx == last_idx and "." in segment:
            # 'a/b.js' is named 'b' so a sibling directory 'a/b' is detected
            name = segment[:segment.rindex(".")]
        parent = tree.add_child(parent, node_id, name)

    return parent


def _sort_children(tree: VersionTree) -> None:
    for node in tree.iter_nodes():
        if node.children:
            node.children.sort(key=lambda cid: node_sort_key(tree.node(cid)))


def _compute_hashes(tree: VersionTree, issues: List[VersioningIssue]) -> None:
    """
    Compute every directory hash after its children (iterative post-order).

    Each node is hashed exactly once; twins get their alternate hash while
    their parent is being combined.
    """
    stack: List[Tuple[str, bool]] = [(tree.root_id, False)]
    while stack:
        node_id, expanded = stack.pop()
        node = tree.node(node_id)

        if node.is_leaf:
            continue

        if not expanded:
            stack.append((node_id, True))
            for child_id in reversed(node.children):
                stack.append((child_id, False))
            continue

        children = tree.children_of(node)
        node.hash = md5sum("".join(c.hash for c in children), TREE_HASH_LENGTH)
        _assign_twin_hashes(node, children, issues)


def _assign_twin_hashes(
        parent: TreeNode,
        children: List[TreeNode],
        issues: List[VersioningIssue],
) -> None:
    """Give each same-named file/directory pair a shared alternate hash."""
    groups: Dict[str, List[TreeNode]] = {}
    for child in children:
        groups.setdefault(child.name, []).append(child)

    for name, twins in groups.items():
        if len(twins) == 2:
            alt = md5sum(twins[0].hash + twins[1].hash, TREE_HASH_LENGTH)
            twins[0].alt_hash = alt
            twins[1].alt_hash = alt
        elif len(twins) > 2:
            error = SiblingCollisionOverflow(parent_id=parent.id, name=name, count=len(twins))
            logger.warning(str(error))
            issues.append(VersioningIssue.from_error(error, subject=f"{parent.id}/{name}"))
