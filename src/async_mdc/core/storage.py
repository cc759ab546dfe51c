# src/async_mdc/core/storage.py
from __future__ import annotations

import contextlib
import contextvars
import inspect
from typing import Any, Awaitable, Callable, Generic, Iterator, Optional, TypeVar

S = TypeVar("S")
R = TypeVar("R")


class ContextStorage(Generic[S]):
    """
    Thin adapter over a single ``contextvars.ContextVar``.

    asyncio copies the current context into every Task and scheduled callback,
    so whatever store is active when a coroutine suspends is active again when
    it resumes. This class only decides *when* a store becomes active:

    - ``get_store()``  -> store for the calling execution path, or None
    - ``run(store, fn, *args)`` -> call ``fn`` with ``store`` active
    - ``scope(store)`` -> same thing as a ``with`` block
    """

    def __init__(self, name: str = "async_mdc") -> None:
        self._var: contextvars.ContextVar[Optional[S]] = contextvars.ContextVar(name, default=None)

    @property
    def name(self) -> str:
        return self._var.name

    def get_store(self) -> Optional[S]:
        return self._var.get()

    def run(self, store: S, callback: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        token = self._var.set(store)
        try:
            result = callback(*args, **kwargs)
        finally:
            self._var.reset(token)

        # Coroutine bodies execute only once awaited, after the reset above.
        # Tasks and futures already captured the context when they were created.
        if inspect.iscoroutine(result):
            return self._run_awaitable(store, result)  # type: ignore[return-value]
        return result

    async def _run_awaitable(self, store: S, awaitable: Awaitable[R]) -> R:
        token = self._var.set(store)
        try:
            return await awaitable
        finally:
            self._var.reset(token)

    @contextlib.contextmanager
    def scope(self, store: S) -> Iterator[S]:
        token = self._var.set(store)
        try:
            yield store
        finally:
            self._var.reset(token)
