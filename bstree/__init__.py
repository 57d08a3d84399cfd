from bstree.tree import BinarySearchTree, Position, RebalanceResult
from bstree.rendering import render_levels

__all__ = ["BinarySearchTree", "Position", "RebalanceResult", "render_levels"]
