"""Dominator tree (Lengauer–Tarjan) and iterated dominance frontiers."""

from __future__ import annotations

import heapq
from typing import Iterable, Optional

from .instructions import CondInst, UnCondInst


def _terminator_targets(block) -> list:
    term = block.terminator()
    if isinstance(term, CondInst):
        targets = term.operand_values[1:]
    elif isinstance(term, UnCondInst):
        targets = term.operand_values
    else:
        targets = []
    unique = []
    for target in targets:
        if target not in unique:
            unique.append(target)
    return unique


class DominatorTree:
    """Immediate dominators of the blocks of a function, computed from its branches."""

    def __init__(self, function) -> None:
        self.function = function
        self._built = False

    def build(self) -> "DominatorTree":
        """Compute the CFG edges and the dominator tree; return ``self``."""
        blocks = list(self.function)
        self._succ = {block: [] for block in blocks}
        self._pred = {block: [] for block in blocks}
        for block in blocks:
            for target in _terminator_targets(block):
                if target in self._succ:
                    self._succ[block].append(target)
                    self._pred[target].append(block)

        number: dict = {}
        vertex: list = [None]
        parent: list[int] = [0]
        entry = self.function.front
        if entry is not None:
            number[entry] = 1
            vertex.append(entry)
            parent.append(0)
            path = [entry]
            stack = [iter(self._succ[entry])]
            while stack:
                for succ in stack[-1]:
                    if succ not in number:
                        number[succ] = len(vertex)
                        vertex.append(succ)
                        parent.append(number[path[-1]])
                        path.append(succ)
                        stack.append(iter(self._succ[succ]))
                        break
                else:
                    stack.pop()
                    path.pop()

        count = len(vertex) - 1
        semi = list(range(count + 1))
        label = list(range(count + 1))
        ancestor = [0] * (count + 1)
        idom = [0] * (count + 1)
        bucket: list[list[int]] = [[] for _ in range(count + 1)]

        def evaluate(v: int) -> int:
            if ancestor[v] == 0:
                return v
            chain = []
            node = v
            while ancestor[ancestor[node]] != 0:
                chain.append(node)
                node = ancestor[node]
            for x in reversed(chain):
                a = ancestor[x]
                if semi[label[a]] < semi[label[x]]:
                    label[x] = label[a]
                ancestor[x] = ancestor[a]
            return label[v]

        for w in range(count, 1, -1):
            for pred in self._pred[vertex[w]]:
                if pred not in number:
                    continue
                u = evaluate(number[pred])
                if semi[u] < semi[w]:
                    semi[w] = semi[u]
            bucket[semi[w]].append(w)
            p = parent[w]
            ancestor[w] = p
            for v in bucket[p]:
                u = evaluate(v)
                idom[v] = u if semi[u] < semi[v] else p
            bucket[p].clear()
        for w in range(2, count + 1):
            if idom[w] != semi[w]:
                idom[w] = idom[idom[w]]

        self._number = number
        self._idom = {block: None for block in blocks}
        self._children = {block: [] for block in blocks}
        for w in range(2, count + 1):
            block, dom = vertex[w], vertex[idom[w]]
            self._idom[block] = dom
            self._children[dom].append(block)

        self._levels: dict = {}
        if entry is not None:
            frontier = [(entry, 0)]
            while frontier:
                block, level = frontier.pop()
                self._levels[block] = level
                frontier.extend((child, level + 1) for child in self._children[block])
        self._built = True
        return self

    def _ensure(self) -> None:
        if not self._built:
            self.build()

    def reachable(self, block) -> bool:
        self._ensure()
        return block in self._number

    def dominates(self, a, b) -> bool:
        """Whether every path from the entry to ``b`` passes through ``a``."""
        self._ensure()
        if a is b:
            return True
        if b not in self._number or a not in self._number:
            return False
        node: Optional[object] = self._idom[b]
        while node is not None:
            if node is a:
                return True
            node = self._idom[node]
        return False

    def idom(self, block):
        """Immediate dominator of ``block``; ``None`` for the entry and unreachable blocks."""
        self._ensure()
        return self._idom[block]

    def children(self, block) -> list:
        self._ensure()
        return list(self._children[block])

    def predecessors(self, block) -> list:
        self._ensure()
        return list(self._pred[block])

    def successors(self, block) -> list:
        self._ensure()
        return list(self._succ[block])

    def levels(self) -> dict:
        """Depth of every reachable block in the dominator tree; the entry is 0."""
        self._ensure()
        return dict(self._levels)


class IDFCalculator:
    """Iterated dominance frontier of a set of defining blocks."""

    def __init__(self, tree: DominatorTree) -> None:
        self.tree = tree
        self._live_in: Optional[set] = None
        self._defs: set = set()

    def set_live_in_blocks(self, blocks: Iterable) -> None:
        """Restrict results to blocks where the value is live on entry."""
        self._live_in = set(blocks)

    def reset_live_in_blocks(self) -> None:
        self._live_in = None

    def set_defining_blocks(self, blocks: Iterable) -> None:
        self._defs = set(blocks)

    def calculate(self) -> list:
        """Return the blocks that need a phi node, in discovery order."""
        tree = self.tree
        tree._ensure()
        levels = tree._levels
        order = tree._number
        queue = [(-levels[b], order[b], b) for b in self._defs if b in levels]
        heapq.heapify(queue)
        visited_queue: set = set()
        visited_walk: set = set()
        result: list = []
        while queue:
            neg_level, _, root = heapq.heappop(queue)
            root_level = -neg_level
            worklist = [root]
            visited_walk.add(root)
            while worklist:
                node = worklist.pop()
                for succ in tree._succ[node]:
                    if tree._idom[succ] is node:
                        continue
                    if levels[succ] > root_level:
                        continue
                    if succ in visited_queue:
                        continue
                    visited_queue.add(succ)
                    if self._live_in is not None and succ not in self._live_in:
                        continue
                    result.append(succ)
                    if succ not in self._defs:
                        heapq.heappush(queue, (-levels[succ], order[succ], succ))
                for child in tree._children[node]:
                    if child not in visited_walk:
                        visited_walk.add(child)
                        worklist.append(child)
        return result