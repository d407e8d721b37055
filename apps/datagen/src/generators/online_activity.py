"""
Online shopping sessions, modelled as a state machine over click events.

A session starts with a page view and then wanders between pages using a
weighted transition table. Transitions that make no sense for the current
session (checking out an empty cart, logging in twice, ...) are filtered out
before the weighted draw. A session ends with an online order once checkout
completes, or is abandoned (randomly, or after too many clicks). Only
abandoned carts of logged-in users are recorded.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from urllib.parse import urlsplit

from faker import Faker

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import HISTORY_WINDOW, utc_now
from apps.datagen.src.domain.state import RecentCustomers, SessionRegistry
from apps.datagen.src.generators.base import Clock, EventGenerator
from apps.datagen.src.generators.fakers import new_online_customer, new_user_context
from apps.datagen.src.generators.online_orders import AbandonedOrderGenerator, OnlineOrderGenerator
from apps.datagen.src.generators.products import ProductGenerator
from libs.models.events import (
    ClickEvent,
    ClickEventType,
    NewCustomer,
    OnlineActivity,
    OnlineCustomer,
    Product,
    UserContext,
)

logger = logging.getLogger(__name__)

SESSION_ID_CHARS = "abcdefghijklmnopqrstuvwxyz0123456789"
CATEGORY_CHARS = "abcdef"
PRODUCT_PAGE_CHARS = "abcde0123456789"
HOMEPAGE_RATIO = 0.4


def _ordered(weights: Dict[ClickEventType, float]) -> Dict[ClickEventType, float]:
    # candidates are always considered in enum declaration order
    return {t: weights[t] for t in ClickEventType if t in weights}


_T = ClickEventType

TRANSITIONS: Dict[ClickEventType, Dict[ClickEventType, float]] = {
    _T.PAGE_VIEW: _ordered(
        {_T.PAGE_VIEW: 0.30, _T.SEARCH: 0.25, _T.PRODUCT_VIEW: 0.30, _T.CART_VIEW: 0.10, _T.LOGIN: 0.05}
    ),
    _T.SEARCH: _ordered(
        {_T.PAGE_VIEW: 0.15, _T.SEARCH: 0.25, _T.PRODUCT_VIEW: 0.50, _T.CART_VIEW: 0.05, _T.LOGIN: 0.05}
    ),
    _T.PRODUCT_VIEW: _ordered(
        {_T.PAGE_VIEW: 0.25, _T.SEARCH: 0.10, _T.ADD_TO_CART: 0.50, _T.CART_VIEW: 0.10, _T.LOGIN: 0.05}
    ),
    _T.ADD_TO_CART: _ordered(
        {_T.PAGE_VIEW: 0.25, _T.SEARCH: 0.20, _T.CART_VIEW: 0.50, _T.LOGIN: 0.05}
    ),
    _T.REMOVE_FROM_CART: _ordered({_T.PAGE_VIEW: 0.25, _T.CART_VIEW: 0.75}),
    _T.CART_VIEW: _ordered(
        {
            _T.PAGE_VIEW: 0.20,
            _T.SEARCH: 0.20,
            _T.REMOVE_FROM_CART: 0.10,
            _T.CHECKOUT_START: 0.45,
            _T.LOGIN: 0.05,
        }
    ),
    _T.LOGIN: _ordered({_T.PAGE_VIEW: 0.55, _T.CART_VIEW: 0.45}),
    _T.CHECKOUT_START: _ordered({_T.PAGE_VIEW: 0.30, _T.CHECKOUT_COMPLETE: 0.70}),
}


@dataclass
class SessionState:
    session_id: str
    context: UserContext
    query_string: str
    current_page: str
    logged_in: bool = False
    customer: Optional[OnlineCustomer] = None
    # insertion-ordered set of products, keyed by description
    cart: Dict[str, Product] = field(default_factory=dict)
    event_index: int = 0
    event_type: Optional[ClickEventType] = None


class OnlineActivityGenerator(EventGenerator):
    """
    Drives online sessions one step at a time.

    Args:
        registry: Live sessions; defaults to a private registry sized by
            `online.max_sessions`.
        recent_customers: Recently registered customers available for logins.
        online_orders: Builds the order that ends a completed checkout.
        abandoned_orders: Builds the record of an abandoned cart.
    """

    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
        registry: Optional[SessionRegistry[SessionState]] = None,
        recent_customers: Optional[RecentCustomers] = None,
        online_orders: Optional[OnlineOrderGenerator] = None,
        abandoned_orders: Optional[AbandonedOrderGenerator] = None,
    ) -> None:
        super().__init__(
            max_delay_secs=0,
            duplicates_ratio=settings.duplicates.click_tracking,
            timestamp_format=settings.formats.timestamps_ltz,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._cfg = settings.online
        self._products = ProductGenerator(settings.products, rng)
        self.sessions: SessionRegistry[SessionState] = (
            registry
            if registry is not None
            else SessionRegistry(self._cfg.max_sessions, self._cfg.session_id_attempts)
        )
        self.recent_customers = (
            recent_customers
            if recent_customers is not None
            else RecentCustomers(self._cfg.recent_customers_capacity)
        )
        self.online_orders = online_orders or OnlineOrderGenerator(settings, rng, fake, clock)
        self.abandoned_orders = abandoned_orders or AbandonedOrderGenerator(settings, rng, fake, clock)

    # ------------------------------------------------------------------
    # customers
    # ------------------------------------------------------------------

    def _new_customer(self) -> OnlineCustomer:
        return new_online_customer(
            self.fake, self.rng, self._cfg.customer_min_emails, self._cfg.customer_max_emails
        )

    def register_new_online_customer(self, timestamp: Optional[datetime] = None) -> Optional[NewCustomer]:
        """
        Register a customer who is likely to log in to an upcoming session.

        Returns:
            The registration event, or None when the recent-customer buffer
            is already full.
        """
        customer = self._new_customer()
        if not self.recent_customers.offer(customer):
            return None
        timestamp = timestamp or self.clock()
        return NewCustomer(
            customerid=customer.id,
            customername=customer.name,
            registered=self.format_timestamp(timestamp),
            event_time=timestamp,
        )

    def _login(self) -> OnlineCustomer:
        return self.recent_customers.poll() or self._new_customer()

    # ------------------------------------------------------------------
    # sessions
    # ------------------------------------------------------------------

    def _session_id(self) -> str:
        return "sess_" + self.rng.random_string(SESSION_ID_CHARS, 16)

    def _new_session(self, session_id: str) -> SessionState:
        query_string = ""
        if self.rng.should_do(self._cfg.marketing_ratio):
            query_string = "?" + self.fake.marketing_query_string(
                with_click_id=self.rng.random_boolean()
            )
        session = SessionState(
            session_id=session_id,
            context=new_user_context(self.fake),
            query_string=query_string,
            current_page=self._cfg.base_url,
        )
        if self.rng.should_do(self._cfg.logged_in_ratio):
            session.logged_in = True
            session.customer = self._new_customer()
        return session

    def start_new_session(self) -> Optional[str]:
        """
        Returns:
            The new session id, or None when the maximum number of
            concurrent sessions is reached.

        Raises:
            SessionIdExhaustedError: if no unused session id was found.
        """
        return self.sessions.register(self._session_id, self._new_session)

    def has_more(self, session_id: Optional[str]) -> bool:
        return session_id is not None and session_id in self.sessions

    def _end_session(self, session: SessionState) -> None:
        self.sessions.remove(session.session_id)

    # ------------------------------------------------------------------
    # state machine
    # ------------------------------------------------------------------

    def next_event_type(self, session: SessionState) -> Optional[ClickEventType]:
        """
        Weighted pick of the next click type, or None if nothing is valid.
        """
        transitions = TRANSITIONS.get(session.event_type)
        if not transitions:
            return None

        valid = dict(transitions)
        if session.logged_in:
            valid.pop(ClickEventType.LOGIN, None)
        else:
            valid.pop(ClickEventType.CHECKOUT_START, None)
        if not session.cart:
            valid.pop(ClickEventType.CHECKOUT_START, None)
            valid.pop(ClickEventType.REMOVE_FROM_CART, None)
        if len(session.cart) >= self._cfg.max_products:
            valid.pop(ClickEventType.ADD_TO_CART, None)
        if not valid:
            return None

        draw = self.rng.uniform() * sum(valid.values())
        cumulative = 0.0
        for event_type, weight in valid.items():
            cumulative += weight
            if draw <= cumulative:
                return event_type
        return next(iter(valid))

    def page_url(self, session: SessionState) -> str:
        base = self._cfg.base_url
        event_type = session.event_type
        if event_type == ClickEventType.PAGE_VIEW:
            if self.rng.should_do(HOMEPAGE_RATIO):
                path = "/homepage"
            else:
                path = "/category/" + self.rng.random_string(CATEGORY_CHARS, 5)
        elif event_type == ClickEventType.SEARCH:
            path = "/search"
        elif event_type == ClickEventType.PRODUCT_VIEW:
            path = "/product/" + self.rng.random_string(PRODUCT_PAGE_CHARS, 12)
        elif event_type in (ClickEventType.CART_VIEW, ClickEventType.CHECKOUT_START):
            path = "/cart"
        elif event_type == ClickEventType.LOGIN:
            path = "/login"
        else:
            # the click did not change the page
            return session.current_page
        return base + path + session.query_string

    def _click(
        self,
        timestamp: datetime,
        session: SessionState,
        referrer: Optional[str] = None,
        product: Optional[str] = None,
    ) -> ClickEvent:
        return ClickEvent(
            sessionid=session.session_id,
            eventid=self.rng.random_string(SESSION_ID_CHARS, 12),
            type=session.event_type,
            context=session.context,
            referrer=referrer,
            customer=session.customer,
            url=session.current_page,
            product=product,
            timestamp=self.format_timestamp(timestamp),
            event_time=timestamp,
        )

    def _click_with_referrer(self, timestamp: datetime, session: SessionState) -> ClickEvent:
        referrer = self.fake.referrer_url()
        parts = urlsplit(referrer)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            logger.error(
                "Generated invalid referrer url",
                extra={"referrer": referrer, "session_id": session.session_id},
            )
            return self._click(timestamp, session)
        return self._click(timestamp, session, referrer=referrer)

    def _abandon(self, timestamp: datetime, session: SessionState) -> Optional[OnlineActivity]:
        self._end_session(session)
        if not session.logged_in or session.customer is None:
            # anonymous carts are not recorded
            return None
        return self.abandoned_orders.generate_for(timestamp, session.customer, list(session.cart))

    def next_activity(self, timestamp: datetime, session_id: str) -> Optional[OnlineActivity]:
        """
        Advance a session by one step.

        Returns:
            A click event, the online order ending a completed checkout, an
            abandoned order, or None when the session ended without a record
            (or does not exist).
        """
        session = self.sessions.get(session_id)
        if session is None:
            logger.error("Activity requested for an unknown or ended session", extra={"session_id": session_id})
            return None

        index = session.event_index
        session.event_index += 1

        if index == 0:
            session.event_type = ClickEventType.PAGE_VIEW
            session.current_page = self.page_url(session)
            if self.rng.random_boolean():
                return self._click(timestamp, session)
            return self._click_with_referrer(timestamp, session)

        if session.event_type == ClickEventType.CHECKOUT_COMPLETE:
            self._end_session(session)
            return self.online_orders.generate_for(
                timestamp, session.customer, list(session.cart.values())
            )

        if session.event_index > self._cfg.max_events:
            return self._abandon(timestamp, session)

        if session.cart and self.rng.should_do(self._cfg.abandonment_ratio):
            return self._abandon(timestamp, session)

        event_type = self.next_event_type(session)
        if event_type is None:
            logger.error(
                "No valid next event type, ending session",
                extra={"session_id": session_id, "last_type": str(session.event_type)},
            )
            self._end_session(session)
            return None

        session.event_type = event_type
        session.current_page = self.page_url(session)

        if event_type == ClickEventType.ADD_TO_CART:
            product = self._products.generate()
            session.cart[product.description] = product
            return self._click(timestamp, session, product=product.description)

        if event_type == ClickEventType.REMOVE_FROM_CART:
            description = next(iter(session.cart))
            del session.cart[description]
            return self._click(timestamp, session, product=description)

        if event_type == ClickEventType.LOGIN:
            session.logged_in = True
            session.customer = self._login()

        return self._click(timestamp, session)

    # ------------------------------------------------------------------
    # history
    # ------------------------------------------------------------------

    def generate_history(
        self,
        session_interval_secs: int,
        event_interval_secs: int,
        now: Optional[datetime] = None,
    ) -> List[OnlineActivity]:
        """
        Replay back-to-back sessions over the history window.

        Each session is driven to completion with `event_interval_secs`
        between clicks; the next session starts `session_interval_secs`
        later. All sessions are discarded at the end.
        """
        now = now or self.clock()
        timestamp = now - HISTORY_WINDOW
        event_step = timedelta(seconds=event_interval_secs)
        session_step = timedelta(seconds=session_interval_secs)

        history: List[OnlineActivity] = []
        session_id = self.start_new_session()
        while timestamp < now:
            while self.has_more(session_id) and timestamp < now:
                timestamp += event_step
                activity = self.next_activity(timestamp, session_id)
                if activity is not None:
                    history.append(activity)
            timestamp += session_step
            if session_id is not None:
                self.sessions.remove(session_id)
            session_id = self.start_new_session()

        self.sessions.clear()
        return history
