import asyncio

from async_mdc import ContextStorage


def test_no_store_by_default():
    storage = ContextStorage(name="t")
    assert storage.name == "t"
    assert storage.get_store() is None


def test_run_sync_restores_previous_store():
    storage = ContextStorage()
    outer, inner = {"o": 1}, {"i": 1}

    def body():
        assert storage.get_store() is outer
        storage.run(inner, lambda: None)
        return storage.get_store()

    assert storage.run(outer, body) is outer
    assert storage.get_store() is None


def test_run_wraps_awaitables():
    storage = ContextStorage()
    store = {}

    async def body():
        await asyncio.sleep(0)
        return storage.get_store()

    async def main():
        pending = storage.run(store, body)
        # Nothing active until the returned awaitable is awaited.
        assert storage.get_store() is None
        return await pending

    assert asyncio.run(main()) is store


def test_scope_restores_on_error():
    storage = ContextStorage()
    try:
        with storage.scope({"a": 1}):
            raise RuntimeError("x")
    except RuntimeError:
        pass
    assert storage.get_store() is None
