"""
Mutable state shared between generator invocations.

Every store is owned by whoever constructs it and is injected into the
generators that need it. Access is guarded by a lock so the stores remain
correct even if callbacks are fired from more than one thread.
"""

import threading
from collections import OrderedDict, deque
from typing import Callable, Deque, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from libs.models.events import OnlineCustomer, TransactionState

S = TypeVar("S")

Transition = Callable[[List[TransactionState]], Tuple[TransactionState, List[TransactionState]]]


class SessionIdExhaustedError(RuntimeError):
    """Raised when no unused session id could be generated."""


class TransactionStateStore:
    """States emitted so far for each transaction id, oldest first."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._states: Dict[str, List[TransactionState]] = {}

    def history(self, transaction_id: str) -> List[TransactionState]:
        with self._lock:
            return list(self._states.get(transaction_id, []))

    def advance(self, transaction_id: str, transition: Transition) -> TransactionState:
        """
        Move an id to its next state in one locked step.

        `transition` receives the id's history and returns the state to emit
        together with the new history; an empty history forgets the id.
        """
        with self._lock:
            state, states = transition(list(self._states.get(transaction_id, [])))
            if states:
                self._states[transaction_id] = states
            else:
                self._states.pop(transaction_id, None)
            return state

    def clear(self) -> None:
        with self._lock:
            self._states.clear()


class RecentCustomers:
    """
    Bounded FIFO of recently registered online customers.

    New customers are only accepted while there is room; logging in to an
    online session consumes the oldest one.
    """

    def __init__(self, capacity: int = 3) -> None:
        self._lock = threading.Lock()
        self._capacity = capacity
        self._customers: Deque[OnlineCustomer] = deque()

    def offer(self, customer: OnlineCustomer) -> bool:
        """
        Try to buffer a customer.

        Returns:
            True if the customer was accepted, False when the buffer is full.
        """
        with self._lock:
            if len(self._customers) >= self._capacity:
                return False
            self._customers.append(customer)
            return True

    def poll(self) -> Optional[OnlineCustomer]:
        with self._lock:
            return self._customers.popleft() if self._customers else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._customers)


class SessionRegistry(Generic[S]):
    """
    Live online sessions keyed by session id.

    New ids come from `id_factory`; colliding ids are regenerated at most
    `max_attempts` times.
    """

    def __init__(self, max_sessions: int, max_attempts: int = 10) -> None:
        self._lock = threading.Lock()
        self._max_sessions = max_sessions
        self._max_attempts = max_attempts
        self._sessions: "OrderedDict[str, S]" = OrderedDict()

    def register(self, id_factory: Callable[[], str], state_factory: Callable[[str], S]) -> Optional[str]:
        """
        Create a session under a fresh id.

        Args:
            id_factory: Produces candidate session ids.
            state_factory: Builds the session state for the chosen id.

        Returns:
            The new session id, or None when the registry is full.

        Raises:
            SessionIdExhaustedError: if every candidate id was already taken.
        """
        with self._lock:
            if len(self._sessions) >= self._max_sessions:
                return None
            for _ in range(self._max_attempts):
                session_id = id_factory()
                if session_id not in self._sessions:
                    self._sessions[session_id] = state_factory(session_id)
                    return session_id
        raise SessionIdExhaustedError(
            f"no free session id after {self._max_attempts} attempts"
        )

    def get(self, session_id: str) -> Optional[S]:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Optional[S]:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._sessions))
