"""
Tree helpers shared by the builders and renderers.

IR trees are nested dicts (``{"id": ..., "children": [...]}``). Traversal here is
iterative with an identity guard, so a malformed input that reuses the same
dict object under two parents cannot send a walk into a loop.
"""

from typing import Iterator, Optional


def walk(root: Optional[dict], with_depth: bool = False) -> Iterator:
    """Pre-order depth-first walk.

    Yields nodes, or ``(node, depth)`` pairs when ``with_depth`` is set.
    """
    if not root:
        return
    seen: set[int] = set()
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield (node, depth) if with_depth else node
        children = node.get("children") or []
        for child in reversed(children):
            if isinstance(child, dict):
                stack.append((child, depth + 1))


def index_nodes(root: Optional[dict]) -> dict[str, dict]:
    """id → node arena. The first node seen wins when ids repeat."""
    arena: dict[str, dict] = {}
    for node in walk(root):
        node_id = node.get("id")
        if node_id is not None and node_id not in arena:
            arena[node_id] = node
    return arena


def max_depth(root: Optional[dict]) -> int:
    """Depth of the deepest node, the root being 0."""
    deepest = 0
    for _, depth in walk(root, with_depth=True):
        deepest = max(deepest, depth)
    return deepest


def count_nodes(root: Optional[dict]) -> int:
    return sum(1 for _ in walk(root))
