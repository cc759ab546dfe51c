# src/async_mdc/core/mdc.py
from __future__ import annotations

import contextlib
from typing import Any, Callable, Dict, Generic, Iterator, Mapping, MutableMapping, Optional, TypeVar

from async_mdc.core.errors import NoActiveContext
from async_mdc.core.storage import ContextStorage

StoreT = TypeVar("StoreT", bound=MutableMapping[str, Any])
R = TypeVar("R")


class MDC(Generic[StoreT]):
    """
    Mapped diagnostic context: a per-scope key/value store that follows the
    current logical operation across ``await`` points and spawned tasks.

    The manager holds no store of its own, only the ``ContextStorage`` used to
    find whichever store is active for the caller. One instance is meant to be
    shared process-wide (see ``get_mdc``) or passed explicitly to consumers.

    Each ``MDC()`` built without a storage gets its own ``ContextVar``, so two
    such managers never see each other's scopes. The logging, structlog and
    middleware integrations fall back to ``get_mdc()`` when no manager is
    passed: an application that builds its own ``MDC()`` must hand that same
    instance to them, or use ``get_mdc()`` everywhere.

    ``get``/``set``/``update`` raise ``NoActiveContext`` outside a scope;
    ``safe_get``/``safe_set``/``clear``/``get_copy_of_store`` never raise.

    Parameterize with a TypedDict to get key/value checking::

        class RequestCtx(TypedDict, total=False):
            request_id: str
            user: str

        mdc: MDC[RequestCtx] = MDC()
    """

    def __init__(self, storage: Optional[ContextStorage[StoreT]] = None) -> None:
        self._storage: ContextStorage[StoreT] = storage if storage is not None else ContextStorage()

    @property
    def storage(self) -> ContextStorage[StoreT]:
        return self._storage

    def _require(self) -> StoreT:
        store = self._storage.get_store()
        if store is None:
            raise NoActiveContext()
        return store

    def has_context(self) -> bool:
        return self._storage.get_store() is not None

    def get(self, key: str) -> Any:
        return self._require().get(key)

    def safe_get(self, key: str, default: Any = None) -> Any:
        store = self._storage.get_store()
        if store is None:
            return default
        return store.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._require()[key] = value

    def safe_set(self, key: str, value: Any) -> None:
        store = self._storage.get_store()
        if store is not None:
            store[key] = value

    def update(self, values: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        store = self._require()
        if values:
            store.update(values)
        if kwargs:
            store.update(kwargs)

    def get_copy_of_store(self) -> Dict[str, Any]:
        store = self._storage.get_store()
        if store is None:
            return {}
        return dict(store)

    def clear(self) -> None:
        # Empties the store; the scope itself stays active.
        store = self._storage.get_store()
        if store is not None:
            store.clear()

    def run(self, store: StoreT, callback: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        """
        Run ``callback(*args, **kwargs)`` with ``store`` as the active store.

        Coroutine functions are supported: the awaitable returned here keeps
        ``store`` active until it completes, and tasks created inside inherit
        it. Exceptions from the callback propagate untouched.
        """
        return self._storage.run(store, callback, *args, **kwargs)

    @contextlib.contextmanager
    def scope(self, store: Optional[StoreT] = None) -> Iterator[StoreT]:
        with self._storage.scope(store if store is not None else {}) as active:  # type: ignore[arg-type]
            yield active


_default: Optional[MDC[Any]] = None


def get_mdc() -> MDC[Any]:
    """Process-wide default manager, created on first use."""
    global _default
    if _default is None:
        _default = MDC()
    return _default
