"""
Human-readable, level-by-level dump of a binary tree.

Line 0 holds the root key. Each following line lists, for every node on the
line above (left to right), its left child as ``l:<key>`` and its right child
as ``r:<key>``, or ``-`` where a child is missing. Entries are tab-separated.

For inspection only: the format is not stable and cannot be parsed back.
"""

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from bstree.tree import AbstractBinaryTree

EMPTY_CHILD = "-"


def render_levels(tree: "AbstractBinaryTree") -> str:
    """Return the multi-line dump of tree ("" for an empty tree)."""
    root = tree.root()
    if root is None:
        return ""

    lines: List[str] = [str(root.get_key())]
    for level in tree.levels():
        entries: List[str] = []
        for p in level:
            left, right = tree.left(p), tree.right(p)
            entries.append(f"l:{left.get_key()}" if left is not None else EMPTY_CHILD)
            entries.append(f"r:{right.get_key()}" if right is not None else EMPTY_CHILD)
        lines.append("\t".join(entries))
    return "\n".join(lines)
