"""
Read-only queries over a BinarySearchTree.

Results are plain dicts and lists so callers (the CLI, the HTTP layer) can
print or serialize them directly.
"""

from typing import Any, Dict, List, Optional

from bstree.rendering import render_levels
from bstree.tree import BinarySearchTree


# ------------------ Query Engine ------------------
class QueryEngine:
    def __init__(self, tree: BinarySearchTree):
        self.tree = tree

    def summary(self) -> Dict[str, Any]:
        size = self.tree.size()
        root = self.tree.root()
        return {
            "size": size,
            "height": self.tree.height(),
            # ceil(log2(size + 1))
            "min_height": size.bit_length(),
            "is_empty": self.tree.is_empty(),
            "root": root.get_key() if root is not None else None,
        }

    def traversals(self) -> Dict[str, List[Any]]:
        return {
            "pre_order": self.tree.as_list_pre_order(),
            "in_order": self.tree.as_list_in_order(),
            "post_order": self.tree.as_list_post_order(),
        }

    def node_info(self, key: Any) -> Optional[Dict[str, Any]]:
        """Describe the node holding key, or None if the key is absent."""
        p = self.tree.find(key)
        if p is None:
            return None

        parent = self.tree.parent(p)
        left = self.tree.left(p)
        right = self.tree.right(p)
        return {
            "key": p.get_key(),
            "depth": self.tree.depth(key),
            "parent": parent.get_key() if parent is not None else None,
            "left": left.get_key() if left is not None else None,
            "right": right.get_key() if right is not None else None,
            "is_leaf": self.tree.is_leaf(p),
        }

    def render(self) -> str:
        return render_levels(self.tree)
