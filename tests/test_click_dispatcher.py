import asyncio

from shortlink_app.models.link import Link
from shortlink_app.queue.dispatcher import ClickDispatcher
from shortlink_app.queue.models import ClickEvent
from shortlink_app.storage.strategies import InMemoryLinkStore


class FailingStore(InMemoryLinkStore):
    """Store whose click increments always fail"""

    async def increment_clicks(self, code: str) -> None:
        raise RuntimeError("store unavailable")


async def seeded_store(store=None):
    store = store or InMemoryLinkStore()
    await store.save(Link(short_code="Ab3dE9", original_url="https://example.com/page"))
    return store


class TestClickDispatcher:
    """Test the bounded queue and worker pool"""

    def test_dispatched_clicks_are_applied(self):
        async def scenario():
            store = await seeded_store()
            dispatcher = ClickDispatcher(store, workers=3)
            await dispatcher.start()

            for _ in range(10):
                assert dispatcher.dispatch(ClickEvent(short_code="Ab3dE9")) is True
            await dispatcher.join()

            assert (await store.find_by_code("Ab3dE9")).clicks == 10
            assert dispatcher.processed_count == 10
            await dispatcher.stop()

        asyncio.run(scenario())

    def test_failures_are_swallowed(self):
        async def scenario():
            store = await seeded_store(FailingStore())
            dispatcher = ClickDispatcher(store, workers=1)
            await dispatcher.start()

            assert dispatcher.dispatch(ClickEvent(short_code="Ab3dE9")) is True
            await dispatcher.join()

            assert dispatcher.failed_count == 1
            assert dispatcher.running
            await dispatcher.stop()

        asyncio.run(scenario())

    def test_full_queue_drops_instead_of_blocking(self):
        async def scenario():
            store = await seeded_store()
            # No workers: nothing drains the queue
            dispatcher = ClickDispatcher(store, workers=0, queue_size=2, shutdown_timeout=0.01)
            await dispatcher.start()

            results = [dispatcher.dispatch(ClickEvent(short_code="Ab3dE9")) for _ in range(3)]

            assert results == [True, True, False]
            assert dispatcher.dropped_count == 1

        asyncio.run(scenario())

    def test_dispatch_before_start_is_dropped(self):
        dispatcher = ClickDispatcher(InMemoryLinkStore())
        assert dispatcher.dispatch(ClickEvent(short_code="Ab3dE9")) is False
        assert dispatcher.dropped_count == 1

    def test_stop_drains_pending_clicks(self):
        async def scenario():
            store = await seeded_store()
            dispatcher = ClickDispatcher(store, workers=2)
            await dispatcher.start()

            for _ in range(5):
                dispatcher.dispatch(ClickEvent(short_code="Ab3dE9"))
            await dispatcher.stop()

            assert not dispatcher.running
            assert (await store.find_by_code("Ab3dE9")).clicks == 5

        asyncio.run(scenario())

    def test_click_for_deleted_link_is_noop(self):
        async def scenario():
            store = await seeded_store()
            dispatcher = ClickDispatcher(store, workers=1)
            await dispatcher.start()

            await store.delete("Ab3dE9")
            dispatcher.dispatch(ClickEvent(short_code="Ab3dE9"))
            await dispatcher.join()

            assert await store.exists("Ab3dE9") is False
            await dispatcher.stop()

        asyncio.run(scenario())
