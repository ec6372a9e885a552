"""Intrusive doubly linked lists whose nodes know their owning list."""

from __future__ import annotations

from typing import Callable, Iterator, Optional, Sequence


class ListNode:
    """Mixin giving an object ``prev``/``next`` links and an owning ``parent`` list."""

    prev: Optional["ListNode"] = None
    next: Optional["ListNode"] = None
    parent: Optional["IntrusiveList"] = None

    def _require_parent(self) -> "IntrusiveList":
        if self.parent is None:
            raise ValueError("node does not belong to a list")
        return self.parent

    def erase_from_parent(self) -> None:
        """Unlink this node from its list."""
        owner = self._require_parent()
        if self.prev is not None:
            self.prev.next = self.next
        else:
            owner.front = self.next
        if self.next is not None:
            self.next.prev = self.prev
        else:
            owner.back = self.prev
        owner._size -= 1
        self.parent = self.prev = self.next = None

    def replace_with(self, other: "ListNode") -> None:
        """Put ``other`` in this node's place and detach this node."""
        owner = self._require_parent()
        if self.prev is None:
            owner.front = other
        else:
            self.prev.next = other
        if self.next is None:
            owner.back = other
        else:
            self.next.prev = other
        other.prev = self.prev
        other.next = self.next
        other.parent = owner
        self.prev = self.next = None
        self.parent = None

    def insert_before(self, other: "ListNode") -> "ListNode":
        """Link ``other`` directly before this node and return it."""
        owner = self._require_parent()
        if self is owner.front:
            owner.push_front(other)
        else:
            other.parent = owner
            other.prev = self.prev
            other.next = self
            self.prev.next = other
            self.prev = other
            owner._size += 1
        return other

    def insert_after(self, other: "ListNode") -> "ListNode":
        """Link ``other`` directly after this node and return it."""
        owner = self._require_parent()
        if self is owner.back:
            owner.push_back(other)
        else:
            other.parent = owner
            other.next = self.next
            other.prev = self
            self.next.prev = other
            self.next = other
            owner._size += 1
        return other


class IntrusiveList:
    """Mixin owning a chain of :class:`ListNode` objects."""

    front: Optional[ListNode] = None
    back: Optional[ListNode] = None
    _size: int = 0

    def __iter__(self) -> Iterator[ListNode]:
        node = self.front
        while node is not None:
            yield node
            node = node.next

    def __reversed__(self) -> Iterator[ListNode]:
        node = self.back
        while node is not None:
            yield node
            node = node.prev

    def __len__(self) -> int:
        return self._size

    def push_back(self, node: ListNode) -> None:
        """Append ``node``."""
        node.parent = self
        node.next = None
        if self.front is None:
            node.prev = None
            self.front = self.back = node
        else:
            self.back.next = node
            node.prev = self.back
            self.back = node
        self._size += 1

    def push_front(self, node: ListNode) -> None:
        """Prepend ``node``."""
        node.parent = self
        node.prev = None
        if self.front is None:
            node.next = None
            self.front = self.back = node
        else:
            self.front.prev = node
            node.next = self.front
            self.front = node
        self._size += 1

    def push_after(self, prev_node: Optional[ListNode], node: Optional[ListNode]) -> None:
        """Insert ``node`` right after ``prev_node``; does nothing if either is missing."""
        if prev_node is None or node is None:
            return
        node.parent = self
        node.next = prev_node.next
        node.prev = prev_node
        if prev_node.next is not None:
            prev_node.next.prev = node
        else:
            self.back = node
        prev_node.next = node
        self._size += 1

    def pop_front(self) -> Optional[ListNode]:
        """Detach and return the first node, or ``None`` if empty."""
        node = self.front
        if node is None:
            return None
        self.front = node.next
        if self.front is not None:
            self.front.prev = None
        else:
            self.back = None
        node.prev = node.next = None
        node.parent = None
        self._size -= 1
        return node

    def pop_back(self) -> Optional[ListNode]:
        """Detach and return the last node, or ``None`` if empty."""
        node = self.back
        if node is None:
            return None
        self.back = node.prev
        if self.back is not None:
            self.back.next = None
        else:
            self.front = None
        node.prev = node.next = None
        node.parent = None
        self._size -= 1
        return node

    def erase(self, node: Optional[ListNode]) -> None:
        """Remove ``node`` if it belongs to this list; otherwise ignore it."""
        if node is None or node.parent is not self:
            return
        node.erase_from_parent()

    def clear(self) -> None:
        """Detach every node."""
        node = self.front
        while node is not None:
            following = node.next
            node.prev = node.next = None
            node.parent = None
            node = following
        self.front = self.back = None
        self._size = 0

    def find(self, cond: Callable[[ListNode], bool]) -> Optional[ListNode]:
        """Return the first node satisfying ``cond``, or ``None``."""
        return next((node for node in self if cond(node)), None)

    def collect(self, begin: ListNode, end: ListNode) -> None:
        """Adopt the detached chain running from ``begin`` to ``end``."""
        if self.front is not None or self.back is not None:
            raise ValueError("list must be empty to collect a chain")
        self.front = begin
        self.back = end
        self._size = 0
        for node in self:
            node.parent = self
            self._size += 1

    def split(self, begin: ListNode, end: ListNode) -> tuple[ListNode, ListNode]:
        """Cut the range ``begin``..``end`` out of the list and return its ends."""
        if begin is None or end is None:
            raise ValueError("invalid split range")
        if begin.parent is not self or end.parent is not self:
            raise ValueError("nodes are not in this list")
        if begin is self.front:
            self.front = end.next
        if end is self.back:
            self.back = begin.prev
        if begin.prev is not None:
            begin.prev.next = end.next
        if end.next is not None:
            end.next.prev = begin.prev
        begin.prev = None
        end.next = None
        self._size = sum(1 for _ in self)
        return begin, end

    def replace_range(self, begin: ListNode, end: ListNode, sequence: Sequence[ListNode]) -> None:
        """Replace the range ``begin``..``end`` with the nodes of ``sequence``."""
        if not sequence:
            raise ValueError("sequence can't be empty")
        prev = begin.prev
        following = end.next
        if prev is None:
            self.front = sequence[0]
        for node in sequence:
            if node.parent is not self:
                raise ValueError("nodes in sequence must belong to this list")
            node.prev = prev
            if prev is not None:
                prev.next = node
            prev = node
        last = sequence[-1]
        last.next = following
        if following is not None:
            following.prev = last
        else:
            self.back = last
        self._size = sum(1 for _ in self)