"""
Logical destinations for generated records.

Each member's value is the name of the matching field in
`TopicSettings`, which maps the hint to a concrete Kafka topic.
"""

from enum import Enum


class EventTopic(str, Enum):
    ORDERS = "orders"
    CANCELLATIONS = "cancellations"
    STOCK_MOVEMENTS = "stock_movements"
    BADGE_INS = "badge_ins"
    NEW_CUSTOMERS = "new_customers"
    SENSOR_READINGS = "sensor_readings"
    ONLINE_ORDERS = "online_orders"
    OUT_OF_STOCKS = "out_of_stocks"
    RETURN_REQUESTS = "return_requests"
    PRODUCT_REVIEWS = "product_reviews"
    TRANSACTIONS = "transactions"
    CLICK_TRACKING = "click_tracking"
    ABANDONED_ORDERS = "abandoned_orders"
