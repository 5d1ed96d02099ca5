"""Tests for the counter store."""

from __future__ import annotations

import threading

import pytest

from vortex.tracking.categories import Category
from vortex.tracking.store import CounterStore, Snapshot


@pytest.fixture
def store():
    """Create an empty counter store."""
    return CounterStore()


class TestCounterStore:
    """Tests for CounterStore basics."""

    def test_starts_empty_with_every_category(self, store):
        """Test that a new store has an empty mapping per category."""
        snapshot = store.snapshot_all()

        assert list(snapshot) == list(Category)
        for category in Category:
            assert dict(snapshot[category]) == {}
        assert store.is_empty()
        assert store.total() == 0

    def test_increment_creates_entry(self, store):
        """Test that the first increment creates a count of 1."""
        store.increment(Category.BLOCK_RIGHT_CLICK, "create")

        assert store.counts(Category.BLOCK_RIGHT_CLICK) == {"create": 1}

    def test_increment_accumulates(self, store):
        """Test repeated increments for the same owner."""
        for _ in range(3):
            store.increment(Category.ITEM_RIGHT_CLICK, "botania")

        assert store.counts(Category.ITEM_RIGHT_CLICK) == {"botania": 3}

    def test_categories_are_independent(self, store):
        """Test that counts in one category don't leak into another."""
        store.increment(Category.CRAFTING_OUTPUT, "mekanism")

        assert store.counts(Category.CRAFTING_OUTPUT) == {"mekanism": 1}
        assert store.counts(Category.ENTITY_DAMAGE) == {}

    @pytest.mark.parametrize("owner", ["", None, "   ", "\t"])
    def test_blank_owner_is_ignored(self, store, owner):
        """Test that blank owners are a silent no-op."""
        store.increment(Category.COMMAND_USAGE, owner)

        assert store.is_empty()

    def test_reset_clears_every_category(self, store):
        """Test that reset empties all mappings."""
        for category in Category:
            store.increment(category, "create")

        store.reset()
        snapshot = store.snapshot_all()

        assert snapshot.is_empty()
        for category in Category:
            assert dict(snapshot[category]) == {}

    def test_increment_after_reset_starts_from_zero(self, store):
        """Test that counts don't survive a reset."""
        store.increment(Category.BLOCK_RIGHT_CLICK, "create")
        store.increment(Category.BLOCK_RIGHT_CLICK, "create")
        store.reset()
        store.increment(Category.BLOCK_RIGHT_CLICK, "create")

        assert store.counts(Category.BLOCK_RIGHT_CLICK) == {"create": 1}

    def test_union_of_tracked_owners(self, store):
        """Test that owners from every category are collected."""
        store.increment(Category.BLOCK_RIGHT_CLICK, "create")
        store.increment(Category.CHUNK_GENERATION, "terralith")
        store.increment(Category.COMMAND_USAGE, "create")

        assert store.union_of_tracked_owners() == {"create", "terralith"}

    def test_total(self, store):
        """Test total sums across categories."""
        store.increment(Category.BLOCK_RIGHT_CLICK, "create")
        store.increment(Category.ENTITY_DAMAGE, "alexsmobs")
        store.increment(Category.ENTITY_DAMAGE, "alexsmobs")

        assert store.total() == 3

    def test_restricted_categories(self):
        """Test a store built for a subset of categories."""
        store = CounterStore(categories=(Category.COMMAND_USAGE,))

        assert store.categories == (Category.COMMAND_USAGE,)
        with pytest.raises(KeyError):
            store.increment(Category.BLOCK_RIGHT_CLICK, "create")


class TestSnapshot:
    """Tests for Snapshot isolation."""

    def test_snapshot_is_independent_of_later_increments(self, store):
        """Test that a snapshot doesn't change after it is taken."""
        store.increment(Category.BLOCK_RIGHT_CLICK, "create")
        snapshot = store.snapshot_all()

        store.increment(Category.BLOCK_RIGHT_CLICK, "create")
        store.increment(Category.BLOCK_RIGHT_CLICK, "ae2")

        assert dict(snapshot[Category.BLOCK_RIGHT_CLICK]) == {"create": 1}

    def test_snapshot_survives_reset(self, store):
        """Test that a snapshot keeps its data after the store is reset."""
        store.increment(Category.ITEM_RIGHT_CLICK, "botania")
        snapshot = store.snapshot_all()
        store.reset()

        assert dict(snapshot[Category.ITEM_RIGHT_CLICK]) == {"botania": 1}

    def test_snapshot_is_read_only(self, store):
        """Test that snapshot mappings can't be modified."""
        store.increment(Category.ITEM_RIGHT_CLICK, "botania")
        snapshot = store.snapshot_all()

        with pytest.raises(TypeError):
            snapshot[Category.ITEM_RIGHT_CLICK]["botania"] = 99  # type: ignore[index]

    def test_tracked_owners_skips_zero_counts(self):
        """Test that zero entries don't count as tracked."""
        snapshot = Snapshot(
            counts={Category.BLOCK_RIGHT_CLICK: {"create": 0, "ae2": 2}}
        )

        assert snapshot.tracked_owners() == {"ae2"}

    def test_missing_category_reads_as_empty(self):
        """Test indexing a category the snapshot doesn't hold."""
        snapshot = Snapshot(counts={})

        assert dict(snapshot[Category.COMMAND_USAGE]) == {}
        assert snapshot.is_empty()


class TestConcurrency:
    """Tests for concurrent access to the store."""

    def test_concurrent_increments_are_not_lost(self, store):
        """Test that N concurrent increments produce a count of N."""
        threads = 8
        per_thread = 2000
        barrier = threading.Barrier(threads)

        def worker():
            barrier.wait()
            for _ in range(per_thread):
                store.increment(Category.BLOCK_RIGHT_CLICK, "create")

        pool = [threading.Thread(target=worker) for _ in range(threads)]
        for thread in pool:
            thread.start()
        for thread in pool:
            thread.join()

        snapshot = store.snapshot_all()
        assert snapshot[Category.BLOCK_RIGHT_CLICK]["create"] == threads * per_thread

    def test_reset_during_increments_loses_nothing(self, store):
        """Test that every increment lands either before or after a reset."""
        per_thread = 5000
        threads = 4
        barrier = threading.Barrier(threads + 1)
        observed_before_reset: list[int] = []

        def worker():
            barrier.wait()
            for _ in range(per_thread):
                store.increment(Category.ITEM_RIGHT_CLICK, "botania")

        def resetter():
            barrier.wait()
            before = store.snapshot_all()[Category.ITEM_RIGHT_CLICK].get("botania", 0)
            # Counts taken just before the reset plus counts after it can
            # never exceed the number of increments issued.
            store.reset()
            observed_before_reset.append(before)

        pool = [threading.Thread(target=worker) for _ in range(threads)]
        pool.append(threading.Thread(target=resetter))
        for thread in pool:
            thread.start()
        for thread in pool:
            thread.join()

        after = store.counts(Category.ITEM_RIGHT_CLICK).get("botania", 0)
        assert 0 <= after <= threads * per_thread
        assert observed_before_reset[0] + after <= threads * per_thread

    def test_snapshots_during_increments_are_monotonic(self, store):
        """Test that concurrent snapshots never see counts go backwards."""
        stop = threading.Event()

        def worker():
            while not stop.is_set():
                store.increment(Category.ENTITY_DAMAGE, "alexsmobs")

        thread = threading.Thread(target=worker)
        thread.start()
        try:
            previous = 0
            for _ in range(200):
                current = store.snapshot_all()[Category.ENTITY_DAMAGE].get("alexsmobs", 0)
                assert current >= previous
                previous = current
        finally:
            stop.set()
            thread.join()
