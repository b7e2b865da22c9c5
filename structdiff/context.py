"""
structdiff.context — Per-comparison traversal state.

A ``TraversalContext`` lives for exactly one top-level ``compare()``
call.  It is mutable and must never be shared between concurrent
comparisons; ``compare()`` creates a fresh one every time.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class TraversalContext:
    """
    Cycle guard and depth counter.

    The guard keeps an explicit stack of ``(id(left), id(right))`` pairs
    for the containers currently being compared.  Re-entering a pair that
    is already on the stack means the two graphs loop back onto
    themselves in the same way, so the pair is treated as equal instead
    of being expanded again.

    Pairs are popped as soon as their comparison finishes, so the same
    pair may be visited again through a different, acyclic path.
    """

    __slots__ = ("depth", "_stack", "_on_stack")

    def __init__(self) -> None:
        self.depth = 0
        self._stack: list[tuple[int, int]] = []
        self._on_stack: set[tuple[int, int]] = set()

    @contextmanager
    def visiting(self, left: Any, right: Any, path: str = "") -> Iterator[bool]:
        """
        Enter the pair ``(left, right)``.

        Yields False when the pair is already being compared further up
        the stack, True otherwise.  The pair is popped on every exit
        path, including exceptions.
        """
        key = (id(left), id(right))
        if key in self._on_stack:
            logger.debug("cycle re-entered at %s", path or "(root)")
            yield False
            return

        self._stack.append(key)
        self._on_stack.add(key)
        try:
            yield True
        finally:
            popped = self._stack.pop()
            self._on_stack.discard(popped)

    @contextmanager
    def descend(self) -> Iterator[int]:
        """Count one level of recursion for the duration of the block."""
        self.depth += 1
        try:
            yield self.depth
        finally:
            self.depth -= 1

    @property
    def active_pairs(self) -> int:
        return len(self._stack)
