from __future__ import annotations

"""
Path-Prefix Version Collector.

Turns a content hash tree into a sparse 'path prefix -> version token' map.
A shallow depth aggregates many files under one token (fewer distinct
request URLs, coarser invalidation); a deep depth approaches one token per
file.
"""

import logging
from collections import deque
from typing import Deque, Dict, Iterable, Union

from assetversioner.domain.constants import (
    FILE_LEVEL_DEPTH,
    FILE_LEVEL_DEPTH_LITERAL,
    PREFIX_STRIP_EXTENSIONS,
    PREFIX_TOKEN_LENGTH,
)
from assetversioner.domain.tree_models import TreeNode, VersionTree

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def collect_path_versions(
        tree: VersionTree,
        max_depth: Union[int, str],
        token_length: int = PREFIX_TOKEN_LENGTH,
        strip_extensions: Iterable[str] = PREFIX_STRIP_EXTENSIONS,
) -> Dict[str, str]:
    """
    Collect the version tokens of every prefix at the given depth.

    Breadth-first from the root. Nodes at exactly max_depth emit their
    (alternate, if twinned) hash; leaves above it emit their own hash;
    nothing below max_depth is ever enqueued.

    Args:
        tree: A fully hashed version tree.
        max_depth: Aggregation depth (> 0) or 'file' for one token per file.
        token_length: Hex characters kept in each token.
        strip_extensions: Leaf extensions removed from emitted prefixes.

    Returns:
        Dict[str, str]: Prefix to 'v=<token>' mapping, in traversal order.
    """
    depth = resolve_depth(max_depth)
    strip = tuple(e.lower() for e in strip_extensions)

    path_versions: Dict[str, str] = {}
    queue: Deque[TreeNode] = deque([tree.root])

    while queue:
        node = queue.popleft()

        if node.depth < depth:
            queue.extend(tree.children_of(node))

        if node.is_root:
            continue

        digest = None
        if node.depth == depth:
            digest = node.alt_hash or node.hash
        elif node.is_leaf:
            digest = node.hash

        if digest:
            prefix = node_prefix(node, tree.root_id, strip)
            path_versions[prefix] = "v=" + digest[:token_length]

    logger.debug(f"Collected {len(path_versions)} path-prefix versions at depth {max_depth}")
    return path_versions


def resolve_depth(max_depth: Union[int, str]) -> int:
    """Translate the configured depth into an integer bound."""
    if isinstance(max_depth, str):
        if max_depth.strip().lower() == FILE_LEVEL_DEPTH_LITERAL:
            return FILE_LEVEL_DEPTH
        return int(max_depth)
    return int(max_depth)


def node_prefix(node: TreeNode, root_id: str, strip_extensions: Iterable[str]) -> str:
    """Node id without the namespace root and, for leaves, without its extension."""
    prefix = node.id
    root_prefix = root_id + "/"
    if prefix.startswith(root_prefix):
        prefix = prefix[len(root_prefix):]

    if node.is_leaf and "." in prefix.rsplit("/", 1)[-1]:
        stem, ext = prefix.rsplit(".", 1)
        if ext.lower() in strip_extensions:
            prefix = stem

    return prefix
