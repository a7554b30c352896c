"""Recursive directory walk and tree rendering.

walk() is strict: any stat or list failure below the starting path
propagates to the caller, because a partially built tree would print a
misleading shape.
"""

import logging
from dataclasses import dataclass, field

from backend import Backend, Entry, join, normalize

log = logging.getLogger(__name__)

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


def walk(backend: Backend, path: str):
    """Yield (path, parent_entry, child_entry) for every entry below path.

    Depth-first pre-order: each child is yielded before its own children,
    and siblings come in name order.
    """
    yield from _walk(backend, path, backend.stat(path))


def _walk(backend: Backend, path: str, entry: Entry):
    if not entry.is_dir:
        return
    names = sorted(backend.list(path))
    log.debug("walk %s: %d children", path, len(names))
    for name in names:
        child_path = join(path, name)
        child = backend.stat(child_path)
        yield child_path, entry, child
        yield from _walk(backend, child_path, child)


@dataclass
class TreeNode:
    label: str
    children: list["TreeNode"] = field(default_factory=list)


def _parent(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else "."


def build_tree(backend: Backend, path: str) -> TreeNode:
    """Build the node tree below path; the root keeps the literal path as label."""
    root = TreeNode(path)
    nodes = {normalize(path): root}
    for child_path, _, child in walk(backend, path):
        node = TreeNode(child.name)
        nodes[normalize(_parent(child_path))].children.append(node)
        if child.is_dir:
            nodes[normalize(child_path)] = node
    return root


def render_tree(root: TreeNode) -> str:
    """Render a node tree with box-drawing connectors, without a trailing newline."""
    lines = [root.label]
    _render(root, "", lines)
    return "\n".join(lines).strip()


def _render(node: TreeNode, prefix: str, lines: list[str]):
    last = len(node.children) - 1
    for i, child in enumerate(node.children):
        if i == last:
            lines.append(prefix + LAST_BRANCH + child.label)
            _render(child, prefix + SPACE, lines)
        else:
            lines.append(prefix + BRANCH + child.label)
            _render(child, prefix + PIPE, lines)
