"""
Post-processing hook for entities.

A middleware is any callable taking an entity and returning an entity
(the same one or a replacement). The stack applies them in order.
"""

import logging
from typing import Callable, Iterable, Tuple

logger = logging.getLogger(__name__)

Middleware = Callable[[object], object]


class MiddlewareStack:
    """Immutable, ordered composition of middleware functions."""

    def __init__(self, middlewares: Iterable[Middleware] = ()):
        self._middlewares: Tuple[Middleware, ...] = tuple(middlewares)

    def __len__(self) -> int:
        return len(self._middlewares)

    def add(self, middleware: Middleware) -> 'MiddlewareStack':
        """Return a new stack with middleware appended."""
        if not callable(middleware):
            raise ValueError(f"Middleware must be callable, got {type(middleware).__name__}")
        return MiddlewareStack(self._middlewares + (middleware,))

    def parse(self, entity):
        """Run entity through every middleware, first added first."""
        for middleware in self._middlewares:
            entity = middleware(entity)
        return entity
