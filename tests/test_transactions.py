"""Tests for the per-id transaction state machine."""

import threading
from collections import defaultdict

import pytest

from apps.datagen.src.domain.state import TransactionStateStore
from apps.datagen.src.generators.transactions import TransactionGenerator
from libs.models.events import TransactionState

STARTED = TransactionState.STARTED
PROCESSING = TransactionState.PROCESSING
COMPLETED = TransactionState.COMPLETED


@pytest.fixture
def single_id(make_settings, rng, fake, now):
    settings = make_settings(transactions={"ids": 2})
    return TransactionGenerator(settings, rng, fake, clock=lambda: now)


class TestTransactionStates:
    def test_ids_exclude_upper_bound(self, settings, rng, fake):
        generator = TransactionGenerator(settings, rng, fake)
        assert generator.transaction_ids == [f"T{n}" for n in range(1, settings.transactions.ids)]

    def test_completes_after_two_processing(self, single_id, monkeypatch):
        monkeypatch.setattr(single_id.rng, "uniform", lambda: 0.1)
        states = [single_id.next_state("T1") for _ in range(5)]
        assert states == [STARTED, PROCESSING, PROCESSING, COMPLETED, STARTED]

    def test_restarts_when_not_completed(self, single_id, monkeypatch):
        monkeypatch.setattr(single_id.rng, "uniform", lambda: 0.9)
        states = [single_id.next_state("T1") for _ in range(5)]
        assert states == [STARTED, PROCESSING, PROCESSING, STARTED, PROCESSING]

    def test_sequences_are_legal(self, settings, rng, fake, now):
        generator = TransactionGenerator(settings, rng, fake, clock=lambda: now)
        per_id = defaultdict(list)
        for _ in range(2_000):
            transaction = generator.generate()
            per_id[transaction.id].append(transaction.state)

        allowed_after = {
            None: {STARTED},
            STARTED: {PROCESSING},
            PROCESSING: {PROCESSING, COMPLETED, STARTED},
            COMPLETED: {STARTED},
        }
        for states in per_id.values():
            previous = None
            for state in states:
                assert state in allowed_after[previous]
                previous = state

    def test_amount_in_range(self, settings, rng, fake, now):
        generator = TransactionGenerator(settings, rng, fake, clock=lambda: now)
        for _ in range(100):
            amount = generator.generate().amount
            assert settings.transactions.min_amount <= amount <= settings.transactions.max_amount

    def test_store_is_per_instance(self, settings, rng, fake):
        first = TransactionGenerator(settings, rng, fake)
        second = TransactionGenerator(settings, rng, fake)
        first.next_state("T1")
        assert second.next_state("T1") == STARTED

    def test_injected_store_is_used(self, settings, rng, fake):
        store = TransactionStateStore()
        generator = TransactionGenerator(settings, rng, fake, store=store)
        generator.next_state("T3")
        assert store.history("T3") == [STARTED]


class TestTransactionStateStore:
    def test_empty_history_forgets_id(self):
        store = TransactionStateStore()
        store.advance("T1", lambda states: (STARTED, [STARTED]))
        assert store.advance("T1", lambda states: (COMPLETED, [])) == COMPLETED
        assert store.history("T1") == []

    def test_concurrent_advances_are_not_lost(self):
        store = TransactionStateStore()
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            for _ in range(200):
                store.advance("T1", lambda states: (PROCESSING, states + [PROCESSING]))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store.history("T1")) == 8 * 200

    def test_generator_steps_from_a_shared_store(self, settings, rng, fake):
        store = TransactionStateStore()
        first = TransactionGenerator(settings, rng, fake, store=store)
        second = TransactionGenerator(settings, rng, fake, store=store)

        assert first.next_state("T5") == STARTED
        assert second.next_state("T5") == PROCESSING
        assert store.history("T5") == [STARTED, PROCESSING]
