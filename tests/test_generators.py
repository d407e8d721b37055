"""Tests for the per-entity generators and their history replay."""

from datetime import timedelta

import pytest

from apps.datagen.src.core.timeutil import HISTORY_WINDOW
from apps.datagen.src.generators.customers import NewCustomerGenerator, generate_new_customer_history
from apps.datagen.src.generators.facilities import (
    HUMIDITY_MAX,
    HUMIDITY_MIN,
    TEMP_MAX,
    TEMP_MIN,
    BadgeInGenerator,
    HighSensorReadingGenerator,
    SensorReadingGenerator,
)
from apps.datagen.src.generators.online_orders import AbandonedOrderGenerator, OnlineOrderGenerator
from apps.datagen.src.generators.orders import (
    CancellationGenerator,
    OrderGenerator,
    generate_order_history,
)
from apps.datagen.src.generators.products import ProductGenerator
from apps.datagen.src.generators.returns import (
    BILLING_ADDRESS,
    SHIPPING_ADDRESS,
    ReturnRequestGenerator,
)
from apps.datagen.src.generators.stock import OutOfStockGenerator, StockMovementGenerator

HOUR_MS = 3_600_000


class TestPeriodicHistory:
    """History replay shared by every periodic generator."""

    def test_one_event_per_interval(self, make_settings, rng, fake, now):
        settings = make_settings(timings={"orders": HOUR_MS})
        history = OrderGenerator(settings, rng, fake).generate_history(now)

        assert len(history) == 7 * 24
        assert history[0].event_time == now - HISTORY_WINDOW
        assert all(event.event_time < now for event in history)
        times = [event.event_time for event in history]
        assert times == sorted(times)

    def test_duplicates_follow_their_original(self, make_settings, rng, fake, now):
        settings = make_settings(
            timings={"stock_movements": HOUR_MS},
            duplicates={"stock_movements": 1.0},
        )
        history = StockMovementGenerator(settings, rng, fake).generate_history(now)

        assert len(history) == 2 * 7 * 24
        for original, duplicate in zip(history[::2], history[1::2]):
            assert original == duplicate

    def test_disabled_generator_has_no_history(self, make_settings, rng, fake, now):
        settings = make_settings(timings={"orders": 0})
        assert OrderGenerator(settings, rng, fake).generate_history(now) == []

    def test_live_event_uses_clock(self, settings, rng, fake, now):
        order = OrderGenerator(settings, rng, fake, clock=lambda: now).generate()
        assert order.event_time == now

    def test_publish_delay_shifts_back(self, settings, rng, fake, now):
        generator = BadgeInGenerator(settings, rng, fake, clock=lambda: now)
        for _ in range(50):
            badge = generator.generate()
            assert now - timedelta(seconds=settings.delays.badge_ins) <= badge.event_time <= now


class TestOrders:
    def test_quantity_covers_small_and_large(self, settings, rng, fake, now):
        generator = OrderGenerator(settings, rng, fake, clock=lambda: now)
        quantities = {generator.generate().quantity for _ in range(300)}
        assert min(quantities) >= settings.orders.small_min
        assert max(quantities) <= settings.orders.large_max

    def test_region_and_price_from_settings(self, settings, rng, fake, now):
        order = OrderGenerator(settings, rng, fake, clock=lambda: now).generate()
        assert order.region in settings.locations.regions
        assert settings.products.min_price <= order.price <= settings.products.max_price
        assert order.description.endswith(settings.products.name)

    def test_first_order_is_single_item_for_customer(self, settings, rng, fake, now):
        registration = NewCustomerGenerator(settings, rng, fake, clock=lambda: now).generate()
        order = OrderGenerator(settings, rng, fake, clock=lambda: now).generate_first_order(
            registration.customer_ref
        )
        assert order.quantity == 1
        assert order.customerid == registration.customerid
        assert order.customer == registration.customername

    def test_cancellation_refers_to_order(self, settings, rng, fake, now):
        order = OrderGenerator(settings, rng, fake, clock=lambda: now).generate()
        cancellation = CancellationGenerator(settings, rng, fake, clock=lambda: now).generate(order)

        assert cancellation.orderid == order.id
        assert cancellation.order == order
        assert cancellation.reason in settings.cancellations.reasons
        assert "order" not in cancellation.model_dump()

    def test_history_cancellations_follow_orders(self, make_settings, rng, fake, now):
        settings = make_settings(timings={"orders": HOUR_MS}, cancellations={"ratio": 1.0})
        orders, cancellations = generate_order_history(
            OrderGenerator(settings, rng, fake), CancellationGenerator(settings, rng, fake), now
        )

        assert len(cancellations) == len(orders)
        by_id = {order.id: order for order in orders}
        for cancellation in cancellations:
            delay = cancellation.event_time - by_id[cancellation.orderid].event_time
            assert timedelta(milliseconds=settings.cancellations.min_delay_ms) <= delay
            assert delay <= timedelta(milliseconds=settings.cancellations.max_delay_ms)


class TestNewCustomers:
    def test_first_orders_follow_registration(self, make_settings, rng, fake, now):
        settings = make_settings(timings={"new_customers": HOUR_MS}, new_customers={"order_ratio": 1.0})
        registrations, first_orders = generate_new_customer_history(
            NewCustomerGenerator(settings, rng, fake), OrderGenerator(settings, rng, fake), now
        )

        assert len(first_orders) == len(registrations)
        registered = {r.customerid: r.event_time for r in registrations}
        for order in first_orders:
            assert order.event_time > registered[order.customerid]


class TestProducts:
    def test_reduced_price_is_lower(self, settings, rng):
        products = ProductGenerator(settings.products, rng)
        for _ in range(100):
            price = products.random_price()
            reduced = products.reduced_price(price)
            assert price - settings.products.max_price_variation <= reduced < price

    def test_generate_set_keys_by_short_description(self, settings, rng):
        products = ProductGenerator(settings.products, rng).generate_set(10)
        assert 1 <= len(products) <= 10
        for key, product in products.items():
            assert key == product.short_description


class TestStock:
    def test_movement_quantity_in_tens(self, settings, rng, fake, now):
        generator = StockMovementGenerator(settings, rng, fake, clock=lambda: now)
        for _ in range(100):
            movement = generator.generate()
            assert movement.quantity % 10 == 0
            assert 20 <= movement.quantity <= 500
            assert movement.warehouse in settings.locations.warehouses

    def test_out_of_stock_restocks_later(self, settings, rng, fake, now):
        product = ProductGenerator(settings.products, rng).generate()
        notice = OutOfStockGenerator(settings, rng, fake, clock=lambda: now).generate(product)

        assert notice.product == product
        assert notice.outofstocktime == int(now.timestamp() * 1000)
        today = int(now.timestamp() // 86_400)
        assert today + settings.out_of_stocks.restocking_min_days <= notice.restockingdate
        assert notice.restockingdate <= today + settings.out_of_stocks.restocking_max_days


class TestFacilities:
    def test_badge_in_history_is_daily(self, settings, rng, fake, now):
        history = BadgeInGenerator(settings, rng, fake).generate_history(now)
        assert [badge.event_time for badge in history] == [
            now - timedelta(days=days) for days in range(7, 0, -1)
        ]

    def test_sensor_readings_in_normal_range(self, settings, rng, fake, now):
        generator = SensorReadingGenerator(settings, rng, fake, clock=lambda: now)
        for _ in range(100):
            reading = generator.generate()
            assert TEMP_MIN <= reading.temperature <= TEMP_MAX
            assert HUMIDITY_MIN <= reading.humidity <= HUMIDITY_MAX
            assert reading.sensorid.split("-")[0] in settings.locations.buildings

    def test_high_sensor_is_fixed_and_climbs(self, settings, rng, fake, now):
        generator = HighSensorReadingGenerator(settings, rng, fake, clock=lambda: now)
        readings = [generator.generate() for _ in range(2_000)]

        assert {reading.sensorid for reading in readings} == {generator.fixed_sensor_id}
        assert max(reading.temperature for reading in readings) > TEMP_MAX
        assert max(reading.humidity for reading in readings) > HUMIDITY_MAX


class TestOnlineOrders:
    def test_order_for_given_items(self, make_settings, rng, fake, now):
        settings = make_settings(online={"reuse_address_ratio": 1.0, "cities": ["Springfield"]})
        generator = OnlineOrderGenerator(settings, rng, fake, clock=lambda: now)
        items = [ProductGenerator(settings.products, rng).generate() for _ in range(3)]
        customer = generator.new_customer()

        order = generator.generate_for(now, customer, items)

        assert order.customer == customer
        assert order.products == [item.description for item in items]
        assert order.address.shippingaddress.city == "Springfield"
        assert order.address.billingaddress == order.address.shippingaddress
        assert generator.out_of_stock_product(order) in items
        assert "items" not in order.model_dump()

    def test_abandoned_order_products(self, settings, rng, fake, now):
        order = AbandonedOrderGenerator(settings, rng, fake, clock=lambda: now).generate()
        assert settings.abandoned_orders.min_products <= len(order.products)
        assert len(order.products) <= settings.abandoned_orders.max_products
        assert order.record_key == order.cartid


class TestReturnRequests:
    @pytest.fixture
    def size_issue_products(self, settings, rng):
        return ProductGenerator(settings.products, rng).generate_set(5)

    def test_size_issue_products_returned(self, make_settings, rng, fake, now, size_issue_products):
        settings = make_settings(returns={"product_with_size_issue_ratio": 1.0})
        request = ReturnRequestGenerator(
            settings, rng, fake, size_issue_products, clock=lambda: now
        ).generate()

        for returned in request.returns:
            assert returned.item.short_description in size_issue_products
            assert returned.product.id == returned.item.short_description
            assert returned.product.size == returned.item.size

    @pytest.mark.parametrize(
        "reuse_ratio, names",
        [(1.0, [BILLING_ADDRESS]), (0.0, [BILLING_ADDRESS, SHIPPING_ADDRESS])],
    )
    def test_addresses(self, make_settings, rng, fake, now, size_issue_products, reuse_ratio, names):
        settings = make_settings(returns={"reuse_address_ratio": reuse_ratio})
        request = ReturnRequestGenerator(
            settings, rng, fake, size_issue_products, clock=lambda: now
        ).generate()
        assert [address.name for address in request.addresses] == names

    def test_reviewed_product_was_returned(self, settings, rng, fake, now, size_issue_products):
        generator = ReturnRequestGenerator(settings, rng, fake, size_issue_products, clock=lambda: now)
        request = generator.generate()
        assert generator.reviewed_product(request) in [r.item for r in request.returns]
