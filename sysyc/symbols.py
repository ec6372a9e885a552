"""Scoped name-to-value bindings."""

from __future__ import annotations

from collections import Counter
from typing import Any


class SymbolTable:
    """Names map to stacks of values; each open scope remembers what it pushed."""

    def __init__(self) -> None:
        self._bindings: dict[str, list[Any]] = {}
        self._scopes: list[list[list[Any]]] = []
        self._counters: Counter[str] = Counter()

    def push_scope(self) -> None:
        """Open a new scope."""
        self._scopes.append([])

    def pop_scope(self) -> None:
        """Close the innermost scope, dropping every binding it made."""
        if not self._scopes:
            raise IndexError("no scope to close")
        for stack in self._scopes.pop():
            if stack:
                stack.pop()

    def lookup(self, name: str) -> Any:
        """Return the innermost value bound to ``name``."""
        stack = self._bindings.get(name)
        if not stack:
            raise KeyError(name)
        return stack[-1]

    def register(self, name: str, value: Any) -> None:
        """Bind ``name`` to ``value`` in the innermost scope."""
        stack = self._bindings.setdefault(name, [])
        if self._scopes:
            self._scopes[-1].append(stack)
        stack.append(value)

    def next_number(self, name: str) -> int:
        """Return how many times ``name`` has been numbered before, then count it."""
        number = self._counters[name]
        self._counters[name] += 1
        return number