from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Iterator, List, NamedTuple, Optional

from bstree.rendering import render_levels


class Position(ABC):
    @abstractmethod
    def get_key(self):
        """Return the key stored at this position."""
        pass


class Tree(ABC):
    """Abstract base class representing a tree of ordered keys."""

    @abstractmethod
    def __len__(self) -> int:
        """Return the total number of keys in the tree."""
        pass

    def is_empty(self) -> bool:
        """Return True if the tree is empty."""
        return len(self) == 0

    @abstractmethod
    def root(self) -> Optional[Position]:
        """Return the root Position of the tree (or None if tree is empty)."""
        pass

    @abstractmethod
    def children(self, p: Position) -> Iterable[Position]:
        """Return an iterable collection containing the children of Position p."""
        pass

    def num_children(self, p: Position) -> int:
        """Return the number of children that Position p has."""
        return sum(1 for _ in self.children(p))

    def is_leaf(self, p: Position) -> bool:
        return self.num_children(p) == 0

    def is_root(self, p: Position) -> bool:
        return p is self.root()

    def levels(self) -> Iterator[List[Position]]:
        """Generate the positions of the tree one level at a time, left to right."""
        root = self.root()
        level = [root] if root is not None else []
        while level:
            yield level
            level = [c for p in level for c in self.children(p)]

    def height(self) -> int:
        """Return the number of nodes on the longest root-to-leaf path (0 if empty)."""
        return sum(1 for _ in self.levels())


class AbstractBinaryTree(Tree):
    """Abstract base class providing traversals for binary trees."""

    @abstractmethod
    def left(self, p: Position) -> Optional[Position]:
        """Return the Position of p's left child (or None if no child exists)."""
        pass

    @abstractmethod
    def right(self, p: Position) -> Optional[Position]:
        """Return the Position of p's right child (or None if no child exists)."""
        pass

    def children(self, p: Position) -> Iterable[Position]:
        """Generate an iteration of Positions representing p's children."""
        if self.left(p) is not None:
            yield self.left(p)
        if self.right(p) is not None:
            yield self.right(p)

    def num_children(self, p: Position) -> int:
        count = 0
        if self.left(p) is not None:
            count += 1
        if self.right(p) is not None:
            count += 1
        return count

    def preorder(self) -> Iterator[Position]:
        """Generate a preorder iteration of positions (node, left, right)."""
        if not self.is_empty():
            yield from self._subtree_preorder(self.root())

    def inorder(self) -> Iterator[Position]:
        """Generate an inorder iteration of positions (left, node, right)."""
        if not self.is_empty():
            yield from self._subtree_inorder(self.root())

    def postorder(self) -> Iterator[Position]:
        """Generate a postorder iteration of positions (left, right, node)."""
        if not self.is_empty():
            yield from self._subtree_postorder(self.root())

    def _subtree_preorder(self, p: Position) -> Iterator[Position]:
        stack = [p]
        while stack:
            walk = stack.pop()
            yield walk
            if self.right(walk) is not None:
                stack.append(self.right(walk))
            if self.left(walk) is not None:
                stack.append(self.left(walk))

    def _subtree_inorder(self, p: Position) -> Iterator[Position]:
        stack: List[Position] = []
        walk = p
        while stack or walk is not None:
            while walk is not None:
                stack.append(walk)
                walk = self.left(walk)
            walk = stack.pop()
            yield walk
            walk = self.right(walk)

    def _subtree_postorder(self, p: Position) -> Iterator[Position]:
        # node-right-left preorder, reversed
        stack = [p]
        visited: List[Position] = []
        while stack:
            walk = stack.pop()
            visited.append(walk)
            if self.left(walk) is not None:
                stack.append(self.left(walk))
            if self.right(walk) is not None:
                stack.append(self.right(walk))
        yield from reversed(visited)

    def __iter__(self) -> Iterator[Any]:
        """Generate an iteration of the tree's keys in ascending order."""
        for p in self.inorder():
            yield p.get_key()


class RebalanceResult(NamedTuple):
    keys: List[Any]
    height_before: int
    height_after: int


class BinarySearchTree(AbstractBinaryTree):
    """
    Unbalanced binary search tree over hashable, totally ordered keys.

    Keys are unique. Besides the linked structure the tree keeps a set of all
    keys it holds (the membership index) for constant-time ``contains`` and
    ``size``. Every mutation updates both. The tree only becomes balanced when
    ``rebalance`` is called. Not thread-safe.

    Expected failures are reported through return values (False, None, -1);
    advisory text describing them goes to the optional ``observer`` callable.
    """

    class _Node(Position):
        __slots__ = '_key', '_left', '_right', '_owner'

        def __init__(self, key, owner, left=None, right=None):
            self._key = key
            self._owner = owner
            self._left = left
            self._right = right

        def get_key(self):
            return self._key

        def __repr__(self):
            return f"Node({self._key!r})"

    def __init__(self, keys: Optional[Iterable[Any]] = None,
                 observer: Optional[Callable[[str], Any]] = None):
        self._root: Optional[BinarySearchTree._Node] = None
        self._keys = set()
        self._observer = observer
        if keys is not None:
            self.insert_many(keys)

    @classmethod
    def with_root(cls, key, observer: Optional[Callable[[str], Any]] = None) -> "BinarySearchTree":
        """Create a tree whose root holds key."""
        tree = cls(observer=observer)
        tree.insert(key)
        return tree

    # ------------------ Node helpers ------------------
    def _make_node(self, key, left=None, right=None):
        return self._Node(key, self, left, right)

    def _validate(self, p):
        """Validates the position and returns it as a node."""
        if not isinstance(p, self._Node):
            raise RuntimeError("Not valid position type")
        if p._owner is not self:
            raise RuntimeError("p is no longer in the tree")
        return p

    def _owns(self, p) -> bool:
        """True if p is a live node of this tree; foreign or defunct nodes are reported, not raised."""
        if p is None:
            return False
        if not isinstance(p, self._Node):
            raise RuntimeError("Not valid position type")
        if p._owner is not self:
            self._notify(f"Node with value {p.get_key()} is not in this tree.")
            return False
        return True

    def _notify(self, message: str) -> None:
        if self._observer is not None:
            self._observer(message)

    # ------------------ Accessors ------------------
    def __len__(self) -> int: return len(self._keys)
    def __contains__(self, key) -> bool: return self.contains(key)
    def __str__(self) -> str: return render_levels(self)

    def root(self) -> Optional[Position]: return self._root
    def left(self, p: Position) -> Optional[Position]: return self._validate(p)._left
    def right(self, p: Position) -> Optional[Position]: return self._validate(p)._right

    def size(self) -> int:
        """Return the number of keys currently indexed."""
        return len(self._keys)

    def is_empty(self) -> bool:
        return self._root is None

    def contains(self, key) -> bool:
        """Membership test against the key index."""
        if key is None:
            return False
        return key in self._keys

    def sorted_keys(self) -> List[Any]:
        """Return the deduplicated keys in ascending order."""
        return sorted(self._keys)

    def as_list_pre_order(self) -> List[Any]:
        return [p.get_key() for p in self.preorder()]

    def as_list_in_order(self) -> List[Any]:
        return [p.get_key() for p in self.inorder()]

    def as_list_post_order(self) -> List[Any]:
        return [p.get_key() for p in self.postorder()]

    # ------------------ Lookup ------------------
    @staticmethod
    def _locate(top, key) -> tuple[Optional["BinarySearchTree._Node"], int]:
        """Walk down from top; return (node holding key or None, comparisons made)."""
        walk = top
        comparisons = 0
        while walk is not None:
            comparisons += 1
            if key == walk._key:
                return walk, comparisons
            walk = walk._left if key < walk._key else walk._right
        return None, comparisons

    @staticmethod
    def _parent_of(key, top) -> Optional["BinarySearchTree._Node"]:
        """Return the node under top whose child holds key (None for top itself or if absent)."""
        if top is None or key is None or top._key == key:
            return None
        walk = top
        while walk is not None:
            left, right = walk._left, walk._right
            if (left is not None and left._key == key) or (right is not None and right._key == key):
                return walk
            walk = right if key > walk._key else left
        return None

    def find(self, key) -> Optional[Position]:
        """Return the Position holding key, or None if key is not in the tree."""
        if not self.contains(key):
            self._notify(f"Node for the value {key} not found.")
            return None
        node, _ = self._locate(self._root, key)
        return node

    def depth(self, key) -> int:
        """Return the 1-based level at which key resides, or -1 if absent."""
        if not self.contains(key):
            self._notify(f"Node for the value {key} not found.")
            return -1
        node, comparisons = self._locate(self._root, key)
        return comparisons if node is not None else -1

    def node_depth(self, p: Optional[Position]) -> int:
        """Return the depth of the key held by Position p, or -1."""
        if not self._owns(p):
            return -1
        return self.depth(p.get_key())

    def parent(self, p: Optional[Position]) -> Optional[Position]:
        """Return the Position of p's parent (None if p is the root or not in this tree)."""
        if not self._owns(p):
            return None
        key = p.get_key()
        if not self.contains(key):
            self._notify(f"Node with value {key} is empty or has no parent in this tree.")
            return None
        parent = self._parent_of(key, self._root)
        if parent is None:
            self._notify(f"Node with value {key} is the root and has no parent.")
        return parent

    # ------------------ Insertion ------------------
    def insert(self, key) -> bool:
        """Insert key as a new leaf. Returns False if key is None or already present."""
        if key is None:
            self._notify("Cannot insert an empty key.")
            return False
        if key in self._keys:
            self._notify(f"Node with value {key} already exists.")
            return False

        node = self._make_node(key)
        if self._root is None:
            self._root = node
        else:
            walk = self._root
            while True:
                if key > walk._key:
                    if walk._right is None:
                        walk._right = node
                        break
                    walk = walk._right
                else:
                    if walk._left is None:
                        walk._left = node
                        break
                    walk = walk._left
        self._keys.add(key)
        return True

    def insert_many(self, keys: Iterable[Any]) -> int:
        """Insert every key in order; returns how many were actually added."""
        added = 0
        for key in keys:
            if self.insert(key):
                added += 1
        return added

    def attach_subtree(self, p: Optional[Position]) -> Optional[Any]:
        """
        Graft a copy of the subtree rooted at p (usually a node of another tree).

        The copy is placed where p's key would be inserted. Keys of the copy
        that this tree already holds are excised from it, so existing keys
        take precedence. Keys that would break ordering at the graft point are
        excised too and inserted normally instead. The origin tree is left
        untouched.

        Returns the attached root key, or None if nothing was attached.
        """
        if p is not None and not isinstance(p, self._Node):
            raise RuntimeError("Not valid position type")
        if p is not None and p._owner is None:
            raise RuntimeError("p is no longer in the tree")
        key = p.get_key() if p is not None else None
        if key is None:
            self._notify("Cannot attach an empty subtree.")
            return None
        if key in self._keys:
            self._notify(f"Node with value {key} already exists. Attach its child nodes instead.")
            return None

        top = self._copy_subtree(p)
        low = high = None
        if self._root is None:
            self._root = top
        else:
            walk = self._root
            while True:
                if key > walk._key:
                    low = walk._key
                    if walk._right is None:
                        walk._right = top
                        break
                    walk = walk._right
                else:
                    high = walk._key
                    if walk._left is None:
                        walk._left = top
                        break
                    walk = walk._left

        for displaced in self._reconcile(top, low, high):
            self.insert(displaced)
        return key

    def _copy_subtree(self, source):
        """Return a copy of the subtree at source, owned by this tree."""
        top = self._make_node(source._key)
        stack = [(source, top)]
        while stack:
            src, dst = stack.pop()
            if src._left is not None:
                dst._left = self._make_node(src._left._key)
                stack.append((src._left, dst._left))
            if src._right is not None:
                dst._right = self._make_node(src._right._key)
                stack.append((src._right, dst._right))
        return top

    def _reconcile(self, top, low, high) -> List[Any]:
        """Index the keys of a freshly grafted subtree; return keys displaced for reinsertion."""
        displaced = []
        for key in [n._key for n in self._subtree_preorder(top)]:
            in_range = (low is None or key > low) and (high is None or key < high)
            if key in self._keys or not in_range:
                node, _ = self._locate(top, key)
                self._unlink(node, self._parent_of(key, top))
                if key in self._keys:
                    self._notify(f"Dropped duplicate value {key} from the attached subtree.")
                else:
                    displaced.append(key)
                continue
            self._keys.add(key)
        return displaced

    # ------------------ Deletion ------------------
    def remove(self, key) -> bool:
        """Remove key from the tree. Returns False if it was not present."""
        node = self.find(key)
        if node is None:
            return False
        self._delete(node)
        return True

    def remove_node(self, p: Position) -> Optional[Any]:
        """Remove the node at Position p and return its key (None if not present)."""
        node = self._validate(p)
        if not self.contains(node._key):
            self._notify(f"Node with value {node._key} not present in this tree.")
            return None
        return self._delete(node)

    def _delete(self, node):
        parent = self._parent_of(node._key, self._root)
        key = self._unlink(node, parent)
        self._keys.discard(key)
        return key

    def _unlink(self, node, parent):
        """Remove node (child of parent, or the root) from the linked structure; returns its old key."""
        key = node._key
        if node._left is not None and node._right is not None:
            successor_parent, successor = node, node._right
            while successor._left is not None:
                successor_parent, successor = successor, successor._left
            node._key = successor._key
            self._splice(successor, successor_parent, successor._right)
            return key
        child = node._left if node._left is not None else node._right
        self._splice(node, parent, child)
        return key

    def _splice(self, node, parent, child) -> None:
        """Replace node with child under parent and mark node defunct."""
        if parent is None:
            self._root = child
        elif parent._left is node:
            parent._left = child
        else:
            parent._right = child
        node._left = node._right = None
        node._owner = None

    # ------------------ Mutation ------------------
    def replace(self, p: Position, key) -> Optional[Any]:
        """
        Replace the key at Position p and return the old key.

        The key index follows the change. Keeping the ordering valid is up to
        the caller. Returns None without changing anything if key is None or
        already held by another node.
        """
        node = self._validate(p)
        old = node._key
        if key is None or (key in self._keys and key != old):
            self._notify(f"Cannot set key {key} on node {old}.")
            return None
        self._keys.discard(old)
        node._key = key
        self._keys.add(key)
        return old

    def clear(self) -> None:
        """Remove every key, invalidating all outstanding positions."""
        for p in list(self.preorder()):
            p._owner = None
        self._root = None
        self._keys.clear()

    def rebalance(self) -> RebalanceResult:
        """Rebuild the tree with minimal height from its sorted keys."""
        keys = self.as_list_in_order()
        height_before = self.height()
        self.clear()
        self._insert_balanced(keys, 0, len(keys) - 1)
        return RebalanceResult(keys, height_before, self.height())

    def _insert_balanced(self, keys: List[Any], lo: int, hi: int) -> None:
        if lo > hi:
            return
        mid = (lo + hi) // 2
        self.insert(keys[mid])
        self._insert_balanced(keys, lo, mid - 1)
        self._insert_balanced(keys, mid + 1, hi)
