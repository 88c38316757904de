import unittest

from services.review_feed import ReviewFeedStore


class TestReviewFeedStore(unittest.IsolatedAsyncioTestCase):
    async def test_loads_once_until_invalidated(self):
        store = ReviewFeedStore()
        loads = []

        async def loader():
            loads.append(1)
            return [{"id": f"rev-{len(loads)}"}]

        first = await store.get(loader)
        second = await store.get(loader)
        self.assertEqual(first, second)
        self.assertEqual(len(loads), 1)

        store.invalidate()
        self.assertFalse(store.is_loaded)
        third = await store.get(loader)
        self.assertEqual(third, [{"id": "rev-2"}])

    async def test_listeners_notified_and_unsubscribed(self):
        store = ReviewFeedStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        async def loader():
            return [{"id": "rev-1"}]

        await store.refresh(loader)
        store.invalidate()
        unsubscribe()
        await store.refresh(loader)

        self.assertEqual(seen, [[{"id": "rev-1"}], None])

    async def test_failing_listener_does_not_break_others(self):
        store = ReviewFeedStore()
        seen = []

        def broken(_):
            raise RuntimeError("listener bug")

        store.subscribe(broken)
        store.subscribe(seen.append)

        async def loader():
            return []

        await store.refresh(loader)
        self.assertEqual(seen, [[]])

    def test_invalidate_when_empty_is_silent(self):
        store = ReviewFeedStore()
        seen = []
        store.subscribe(seen.append)
        store.invalidate()
        self.assertEqual(seen, [])


if __name__ == "__main__":
    unittest.main()
