"""
Payment transactions following a small state machine per transaction id.

For a given id the emitted states read STARTED, PROCESSING, PROCESSING and
then either COMPLETED (which frees the id) or a restart at STARTED. Downstream
pattern-detection demos get both complete and abandoned sequences.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from faker import Faker

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import utc_now
from apps.datagen.src.domain.state import TransactionStateStore
from apps.datagen.src.generators.base import Clock, PeriodicGenerator
from libs.models.events import Transaction, TransactionState

COMPLETION_RATIO = 0.2
MAX_PROCESSING = 2


class TransactionGenerator(PeriodicGenerator[Transaction]):
    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
        store: Optional[TransactionStateStore] = None,
    ) -> None:
        super().__init__(
            interval_ms=settings.timings.transactions,
            max_delay_secs=settings.delays.transactions,
            duplicates_ratio=settings.duplicates.transactions,
            timestamp_format=settings.formats.timestamps,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._cfg = settings.transactions
        self.transaction_ids = [f"T{number}" for number in range(1, self._cfg.ids)]
        self.store = store if store is not None else TransactionStateStore()

    def next_state(self, transaction_id: str) -> TransactionState:
        """Advance the id's state machine and return the state to emit."""
        return self.store.advance(transaction_id, self._transition)

    def _transition(self, states: List[TransactionState]) -> Tuple[TransactionState, List[TransactionState]]:
        if not states:
            return TransactionState.STARTED, [TransactionState.STARTED]

        last = states[-1]
        if last == TransactionState.STARTED:
            return TransactionState.PROCESSING, states + [TransactionState.PROCESSING]

        if last == TransactionState.PROCESSING:
            if states.count(TransactionState.PROCESSING) < MAX_PROCESSING:
                return TransactionState.PROCESSING, states + [TransactionState.PROCESSING]
            if self.rng.uniform() <= COMPLETION_RATIO:
                return TransactionState.COMPLETED, []
            return TransactionState.STARTED, [TransactionState.STARTED]

        # COMPLETED ids are removed from the store, so this is a restart
        return TransactionState.STARTED, [TransactionState.STARTED]

    def generate_event(self, timestamp: datetime) -> Transaction:
        transaction_id = self.rng.random_item(self.transaction_ids)
        return Transaction(
            id=transaction_id,
            state=self.next_state(transaction_id),
            amount=self.rng.random_double(self._cfg.min_amount, self._cfg.max_amount),
            timestamp=self.format_timestamp(timestamp),
            event_time=timestamp,
        )
