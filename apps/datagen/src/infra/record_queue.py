"""
Hand-off between generation (scheduler thread) and delivery (main loop).
"""

import threading
from collections import deque
from typing import Deque, List, Optional

from opentelemetry.metrics import Counter

from apps.datagen.src.domain.records import EventRecord


class RecordQueue:
    """
    Thread-safe FIFO of generated records.

    Args:
        generated: Optional counter of enqueued records, tagged by topic.
    """

    def __init__(self, generated: Optional[Counter] = None) -> None:
        self._lock = threading.Lock()
        self._records: Deque[EventRecord] = deque()
        self._generated = generated

    def enqueue(self, record: EventRecord) -> None:
        with self._lock:
            self._records.append(record)
        if self._generated is not None:
            self._generated.add(1, {"topic": record.topic.value})

    def drain(self, max_records: Optional[int] = None) -> List[EventRecord]:
        """Remove and return queued records, oldest first."""
        with self._lock:
            count = len(self._records) if max_records is None else min(max_records, len(self._records))
            return [self._records.popleft() for _ in range(count)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
