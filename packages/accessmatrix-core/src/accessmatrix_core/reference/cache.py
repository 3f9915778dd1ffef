"""Process-wide LRU cache of remote stack handles."""

from __future__ import annotations

import hashlib
import logging
import re
from collections import OrderedDict

from accessmatrix_core.interfaces.stack import StackBackend, StackHandle

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


def stack_handle_name(stack: str) -> str:
    """Collision-resistant handle name: readable slug plus 8 hex chars of sha256.

    ``acme/base/dev`` -> ``stackRef-acme-base-dev-<hash>``.
    """
    digest = hashlib.sha256(stack.encode()).hexdigest()[:8]
    slug = re.sub(r"[^A-Za-z0-9_-]", "-", "-".join(stack.split("/")))
    return f"stackRef-{slug}-{digest}"


class StackHandleCache:
    """Bounded map of stack name -> handle with strict least-recently-used eviction.

    Every hit moves the key to the most-recently-used end; inserting into a
    full cache first evicts from the least-recently-used end.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: OrderedDict[str, StackHandle] = OrderedDict()

    def get_or_open(self, stack: str, backend: StackBackend) -> StackHandle:
        """Return the cached handle for *stack*, opening one through *backend* on a miss."""
        handle = self._entries.get(stack)
        if handle is not None:
            self._entries.move_to_end(stack)
            return handle

        while len(self._entries) >= self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted stack handle %s", evicted)

        handle = backend.open(stack_handle_name(stack), stack)
        self._entries[stack] = handle
        return handle

    def resize(self, capacity: int) -> None:
        """Change the bound, evicting least-recently-used handles above it."""
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        while len(self._entries) > capacity:
            self._entries.popitem(last=False)

    def keys(self) -> list[str]:
        """Cached stack names, least recently used first."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, stack: object) -> bool:
        return stack in self._entries


default_stack_cache = StackHandleCache()
