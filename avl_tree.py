from collections.abc import Iterable
from typing import Optional


class DuplicateKeyError(KeyError):
    """Raised by a strict insert when the key is already in the tree."""


class AvlTreeNode:
    __slots__ = 'key', 'height', 'left', 'right'

    def __init__(self, key: int):
        self.key: int = key
        # height is max child edge count for any path; 0 if no children, an absent child counts as -1
        self.height: int = 0
        # each node owns its subtrees; there are no parent links
        self.left: 'None | AvlTreeNode' = None
        self.right: 'None | AvlTreeNode' = None

    def __str__(self):
        return f'{self.__class__.__name__}({self.key})'

    def __repr__(self):
        return str(self)

    def get_children(self) -> tuple['AvlTreeNode', ...]:
        """Get a tuple of this node's children. May have 0, 1, or 2 elements. If it has 2 children, the returned order
        will always be (left, right).
        """
        return tuple(i for i in [self.left, self.right] if i is not None)

    def _calculate_height(self) -> int:
        """Returns max depth of descendents of this node as the number of child edges. This calculates it manually and
        does not use the height field and should only be used for testing since it requires walking the tree.
        """
        depth = 0
        next_level = list(self.get_children())
        while next_level:
            depth += 1
            next_level = [n for node in next_level for n in node.get_children()]
        return depth

    def _calculate_balance(self) -> int:
        """Calculate the balance of this node manually, not checking the height field. The convention matches
        AvlTree.get_balance (right height - left height). This should only be used for testing.
        """
        right = self.right._calculate_height() if self.right is not None else -1
        left = self.left._calculate_height() if self.left is not None else -1
        return right - left


class AvlTree:
    """Avl tree over unique integer keys.

    Every insert and delete rebalances each node on the path it walked, so after any public call the tree is ordered,
    no node's subtrees differ in height by more than one, and every stored height is exact.

    The tree has no internal locking; it is meant for a single writer and callers sharing it between threads must
    serialize access themselves.
    """
    __slots__ = ('_root', '_size')

    def __init__(self, init: Optional[Iterable[int]] = None):
        """Initialize the tree, optionally with an iterable of keys to initially insert (duplicates are skipped)."""
        self._root: None | AvlTreeNode = None
        self._size = 0
        if init:
            self.extend(init)

    def __len__(self):
        return self._size

    def __contains__(self, key: int):
        # bypass any find override so membership checks are not counted as lookups
        return AvlTree.find(self, key) is not None

    def __str__(self):
        root = self._root.key if self._root is not None else None
        return f'{self.__class__.__name__}(size={self._size}, root={root})'

    def __repr__(self):
        return str(self)

    @property
    def root(self) -> 'None | AvlTreeNode':
        return self._root

    @staticmethod
    def height(node: 'None | AvlTreeNode') -> int:
        """Stored height of node, or -1 for an absent node. Never walks the tree."""
        return -1 if node is None else node.height

    @classmethod
    def get_balance(cls, node: 'None | AvlTreeNode') -> int:
        """Balance of node as right height - left height. A positive balance is right heavy, a negative balance is left
        heavy, and a balanced node has -1, 0, or 1.
        """
        if node is None:
            return 0
        return cls.height(node.right) - cls.height(node.left)

    @classmethod
    def _update_height(cls, node: AvlTreeNode):
        # assumes child heights are valid
        node.height = 1 + max(cls.height(node.left), cls.height(node.right))

    def _visit(self, node: AvlTreeNode):
        """Called once for every node an insert, delete or find steps through. Override to observe the work done by
        each operation; the tree itself does nothing here.
        """
        pass

    def _rotate_l(self, node: AvlTreeNode) -> AvlTreeNode:
        """Perform a left rotation rooted at node and return the new subtree root (the former right child)."""
        #    *A                  C
        #   B   C      =>     *A   G
        #      F G            B F
        # changed height: A (node) first, then C (r) which sits on top of it
        r = node.right
        assert r is not None, 'left rotation needs a right child'
        node.right = r.left
        r.left = node
        self._update_height(node)
        self._update_height(r)
        return r

    def _rotate_r(self, node: AvlTreeNode) -> AvlTreeNode:
        """Perform a right rotation rooted at node and return the new subtree root (the former left child)."""
        #      *A              B
        #     B   C    =>    D  *A
        #    D E               E  C
        # changed height: A (node) first, then B (l)
        l = node.left
        assert l is not None, 'right rotation needs a left child'
        node.left = l.right
        l.right = node
        self._update_height(node)
        self._update_height(l)
        return l

    def _rebalance(self, node: AvlTreeNode) -> AvlTreeNode:
        """Fix the height and balance at this node only and return whatever now roots this subtree. The children must
        already be balanced with accurate heights.
        """
        self._update_height(node)
        balance = self.get_balance(node)
        if balance > 1:
            # right heavy, so the right child exists
            r = node.right
            assert r is not None
            if self.height(r.right) >= self.height(r.left):
                return self._rotate_l(node)
            # right left heavy
            node.right = self._rotate_r(r)
            return self._rotate_l(node)
        elif balance < -1:
            l = node.left
            assert l is not None
            if self.height(l.left) >= self.height(l.right):
                return self._rotate_r(node)
            # left right heavy
            node.left = self._rotate_l(l)
            return self._rotate_r(node)
        return node

    @staticmethod
    def _find_min(node: AvlTreeNode) -> AvlTreeNode:
        """Get the leftmost node of the subtree rooted at node."""
        while node.left is not None:
            node = node.left
        return node

    def _insert(self, node: 'None | AvlTreeNode', key: int, strict: bool) -> tuple[AvlTreeNode, bool]:
        """Insert key below node. Returns (new_subtree_root, inserted)."""
        if node is None:
            return AvlTreeNode(key), True
        self._visit(node)
        if key < node.key:
            node.left, inserted = self._insert(node.left, key, strict)
        elif key > node.key:
            node.right, inserted = self._insert(node.right, key, strict)
        elif strict:
            raise DuplicateKeyError(key)
        else:
            # already present; nothing below this node changed
            return node, False
        return self._rebalance(node), inserted

    def _delete(self, node: 'None | AvlTreeNode', key: int) -> tuple['None | AvlTreeNode', bool]:
        """Delete key below node. Returns (new_subtree_root, deleted)."""
        if node is None:
            return None, False
        self._visit(node)
        if key < node.key:
            node.left, deleted = self._delete(node.left, key)
        elif key > node.key:
            node.right, deleted = self._delete(node.right, key)
        elif node.left is None or node.right is None:
            # zero or one child: that child (or nothing) takes this node's place and is already balanced
            return (node.left if node.right is None else node.right), True
        else:
            # two children: take the successor's key and remove the successor, which has no left child
            node.key = self._find_min(node.right).key
            node.right, deleted = self._delete(node.right, node.key)
        return self._rebalance(node), deleted

    def insert(self, key: int, strict: bool = False) -> bool:
        """Insert a key into the tree. Return True if the key was inserted, False if it was already present.

        With strict set, an already present key raises DuplicateKeyError instead; the tree is left unchanged either way.
        """
        self._root, inserted = self._insert(self._root, key, strict)
        if inserted:
            self._size += 1
        return inserted

    def delete(self, key: int) -> bool:
        """Delete a key from the tree. Return True if the key was deleted, False if it was not present."""
        self._root, deleted = self._delete(self._root, key)
        if deleted:
            self._size -= 1
        return deleted

    def find(self, key: int) -> 'None | AvlTreeNode':
        """Return the node holding key, or None if the key is not in the tree."""
        node = self._root
        while node is not None:
            self._visit(node)
            if node.key == key:
                break
            # lesser keys are always in the left subtree, greater keys in the right subtree
            node = node.right if node.key < key else node.left
        return node

    def extend(self, keys: Iterable[int]) -> int:
        """Add an iterable of keys to the tree. Returns the number of keys inserted."""
        inserted = 0
        for key in keys:
            inserted += int(self.insert(key))
        return inserted

    def clear(self):
        """Removes all keys from the tree."""
        self._root = None
        self._size = 0
