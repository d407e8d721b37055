"""
Office facilities: door badge-ins and environmental sensor readings.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from faker import Faker

from apps.datagen.src.core.config import DatagenSettings
from apps.datagen.src.core.randomness import RandomVariates
from apps.datagen.src.core.timeutil import utc_now
from apps.datagen.src.generators.base import Clock, PeriodicGenerator
from libs.models.events import BadgeIn, SensorReading

TEMP_MIN = 19.5
TEMP_MAX = 23.5
HUMIDITY_MIN = 41
HUMIDITY_MAX = 59

HIGH_TEMP_MIN = 23.0
HIGH_TEMP_MAX = 40.0
MAX_TEMP_INCREASE = 1.0
HIGH_HUMIDITY_MIN = 56
HIGH_HUMIDITY_MAX = 75
MAX_HUMIDITY_INCREASE = 3
HIGH_SERIES_END_RATIO = 0.08


def _location_id(rng: RandomVariates, buildings: List[str], low: int, high: int) -> str:
    return f"{rng.random_item(buildings)}-{rng.random_int(0, 3)}-{rng.random_int(low, high)}"


class BadgeInGenerator(PeriodicGenerator[BadgeIn]):
    """
    Employees badging in through office doors.

    Live badge-ins are frequent, so the history is one badge-in per day for
    the previous week rather than a replay at the live interval.
    """

    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(
            interval_ms=settings.timings.badge_ins,
            max_delay_secs=settings.delays.badge_ins,
            duplicates_ratio=settings.duplicates.badge_ins,
            timestamp_format=settings.formats.timestamps,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._buildings = settings.locations.buildings

    def door_id(self) -> str:
        return _location_id(self.rng, self._buildings, 10, 60)

    def generate_event(self, timestamp: datetime) -> BadgeIn:
        return BadgeIn(
            recordid=self.rng.uuid(),
            door=self.door_id(),
            employee=self.fake.user_name(),
            badgetime=self.format_timestamp(timestamp),
            event_time=timestamp,
        )

    def generate_history(self, now: Optional[datetime] = None) -> List[BadgeIn]:
        if self.interval_ms <= 0:
            return []
        now = now or self.clock()
        history: List[BadgeIn] = []
        for days in range(7, 0, -1):
            self.append_with_duplicate(history, self.generate_event(now - timedelta(days=days)))
        return history


class SensorReadingGenerator(PeriodicGenerator[SensorReading]):
    """Temperature and humidity readings from sensors across the buildings."""

    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
        interval_ms: Optional[int] = None,
    ) -> None:
        super().__init__(
            interval_ms=settings.timings.sensor_readings if interval_ms is None else interval_ms,
            max_delay_secs=settings.delays.sensor_readings,
            duplicates_ratio=settings.duplicates.sensor_readings,
            timestamp_format=settings.formats.sensor_timestamps,
            rng=rng,
            fake=fake,
            clock=clock,
        )
        self._buildings = settings.locations.buildings

    def sensor_id(self) -> str:
        return _location_id(self.rng, self._buildings, 10, 30)

    def reading(self, timestamp: datetime, sensor_id: str, temperature: float, humidity: int) -> SensorReading:
        return SensorReading(
            sensortime=self.format_timestamp(timestamp),
            sensorid=sensor_id,
            temperature=temperature,
            humidity=humidity,
            event_time=timestamp,
        )

    def generate_event(self, timestamp: datetime) -> SensorReading:
        return self.reading(
            timestamp,
            self.sensor_id(),
            self.rng.random_double(TEMP_MIN, TEMP_MAX),
            self.rng.random_int(HUMIDITY_MIN, HUMIDITY_MAX),
        )


class HighSensorReadingGenerator(SensorReadingGenerator):
    """
    One faulty sensor that occasionally reports climbing values.

    Temperature and humidity each count down independently. Once a countdown
    runs out, every reading is a little higher than the previous one until
    the series randomly ends, after which the countdown starts again.
    """

    def __init__(
        self,
        settings: DatagenSettings,
        rng: RandomVariates,
        fake: Faker,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(
            settings, rng, fake, clock, interval_ms=settings.timings.high_sensor_readings
        )
        self.fixed_sensor_id = self.sensor_id()
        self._reset_temperature()
        self._reset_humidity()

    def _reset_temperature(self) -> None:
        self._temperature_countdown = self.rng.random_int(50, 200)
        self._high_temperature = HIGH_TEMP_MIN

    def _reset_humidity(self) -> None:
        self._humidity_countdown = self.rng.random_int(50, 200)
        self._high_humidity = HIGH_HUMIDITY_MIN

    def generate_event(self, timestamp: datetime) -> SensorReading:
        self._temperature_countdown -= 1
        self._humidity_countdown -= 1

        temperature = self.rng.random_double(TEMP_MIN, TEMP_MAX)
        humidity = self.rng.random_int(HUMIDITY_MIN, HUMIDITY_MAX)

        if self._temperature_countdown <= 0:
            temperature = self.rng.random_double(
                max(self._high_temperature, HIGH_TEMP_MIN),
                min(self._high_temperature + MAX_TEMP_INCREASE, HIGH_TEMP_MAX),
                skewed=False,
            )
            self._high_temperature = temperature
            if self.rng.should_do(HIGH_SERIES_END_RATIO):
                self._reset_temperature()

        if self._humidity_countdown <= 0:
            humidity = self.rng.random_int(
                max(self._high_humidity, HIGH_HUMIDITY_MIN),
                min(self._high_humidity + MAX_HUMIDITY_INCREASE, HIGH_HUMIDITY_MAX),
            )
            self._high_humidity = humidity
            if self.rng.should_do(HIGH_SERIES_END_RATIO):
                self._reset_humidity()

        return self.reading(timestamp, self.fixed_sensor_id, temperature, humidity)
