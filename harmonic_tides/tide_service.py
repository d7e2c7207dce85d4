"""
Tide Service - JSON-ready tide predictions for a location.

Wraps a tide model (LocationData or TideCalculator) and turns its results into
lists of dictionaries with ISO 8601 local times, heights in meters and feet,
and the datum used. The local timezone is detected from the coordinates of
the location unless one is given explicitly.
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from timezonefinder import TimezoneFinder

from . import config
from .location import Datum, TideModel, TidalDatum

logger = logging.getLogger(__name__)

__all__ = ['TideService', 'TidalDatum']


class TideService:
    """
    Service for presenting tide predictions of a single location.
    """

    def __init__(self, model: TideModel):
        """
        Initialize the tide service.

        Args:
            model: Tide model of the location (LocationData or TideCalculator)
        """
        self.model = model

        # Cache TimezoneFinder instance (loads data on first use)
        self._tz_finder = TimezoneFinder()

    def _get_timezone(self, timezone_str: Optional[str] = None) -> ZoneInfo:
        """
        Get timezone for the location, with auto-detection if not specified.

        Args:
            timezone_str: Optional timezone string (e.g., 'Europe/Amsterdam')

        Returns:
            ZoneInfo object for the timezone
        """
        if timezone_str is None:
            coordinate = self.model.coordinate
            timezone_str = self._tz_finder.timezone_at(lat=coordinate.latitude, lng=coordinate.longitude)
            if timezone_str is None:
                timezone_str = config.DEFAULT_TIMEZONE
        try:
            return ZoneInfo(timezone_str)
        except (ValueError, KeyError):
            logger.warning("Unknown timezone %r, using %s", timezone_str, config.DEFAULT_TIMEZONE)
            return ZoneInfo(config.DEFAULT_TIMEZONE)

    @staticmethod
    def _start_of_day(start_date: Optional[datetime], tz: ZoneInfo) -> datetime:
        """Local midnight of start_date (or of today)."""
        if start_date is not None:
            # Use the date portion in local timezone (ignore time/tz from input)
            return datetime(
                start_date.year, start_date.month, start_date.day,
                hour=0, minute=0, second=0, microsecond=0, tzinfo=tz
            )
        now = datetime.now(tz)
        return now.replace(hour=0, minute=0, second=0, microsecond=0)

    @staticmethod
    def _datum_label(datum: Datum) -> str:
        return getattr(datum, 'value', datum) or TidalDatum.MSL.value

    def predict_tides(
        self,
        start_date: Optional[datetime] = None,
        days: int = 7,
        datum: Datum = None,
        timezone_str: Optional[str] = None,
    ) -> List[Dict]:
        """
        Predict tide events (high and low tides).

        Args:
            start_date: Start date; the prediction starts at local midnight. Defaults to today.
            days: Number of days to predict
            datum: Datum name to report heights against. Default is MSL.
            timezone_str: Timezone string or None for auto-detect

        Returns:
            List of tide event dictionaries with keys:
            - type: 'high' or 'low'
            - datetime: ISO 8601 datetime string
            - height_m: Height in meters (relative to specified datum)
            - height_ft: Height in feet (relative to specified datum)
            - datum: The datum reference used for this prediction

        Raises:
            RangeError: if the period is outside the valid epoch of the location
                or the datum is unknown
        """
        tz = self._get_timezone(timezone_str)
        start_time = self._start_of_day(start_date, tz)
        end_time = start_time + timedelta(days=days)

        extremes = self.model.calculate_extremes(
            int(start_time.timestamp()), int(end_time.timestamp()), datum
        )

        datum_used = self._datum_label(datum)
        events = []
        for extreme in extremes:
            event_time = datetime.fromtimestamp(extreme.time, tz).replace(microsecond=0)
            events.append({
                'type': extreme.type,
                'datetime': event_time.isoformat(),
                'height_m': round(extreme.height, 3),
                'height_ft': round(extreme.height * config.METERS_TO_FEET, 3),
                'datum': datum_used
            })

        return events

    def get_tide_heights(
        self,
        start_date: Optional[datetime] = None,
        days: int = 7,
        interval_minutes: int = 30,
        datum: Datum = None,
        timezone_str: Optional[str] = None,
    ) -> List[Dict]:
        """
        Get tide heights at regular intervals (tide curve data).

        Args:
            start_date: Start date; the curve starts at local midnight. Defaults to today.
            days: Number of days to predict
            interval_minutes: Time between readings (15, 30, or 60 minutes)
            datum: Datum name to report heights against. Default is MSL.
            timezone_str: Timezone string or None for auto-detect

        Returns:
            List of dictionaries with keys:
            - datetime: ISO 8601 datetime string
            - height_m: Height in meters (relative to specified datum)
            - height_ft: Height in feet (relative to specified datum)
            - datum: The datum reference used for this prediction
        """
        # Validate interval
        if interval_minutes not in (15, 30, 60):
            raise ValueError("interval_minutes must be 15, 30, or 60")

        tz = self._get_timezone(timezone_str)
        start_time = self._start_of_day(start_date, tz)
        end_time = start_time + timedelta(days=days)

        heights = self.model.calculate(
            int(start_time.timestamp()), int(end_time.timestamp()), interval_minutes * 60, datum
        )

        datum_used = self._datum_label(datum)
        results = []
        for time, height_m in heights.items():
            results.append({
                'datetime': datetime.fromtimestamp(time, tz).isoformat(),
                'height_m': round(height_m, 3),
                'height_ft': round(height_m * config.METERS_TO_FEET, 3),
                'datum': datum_used
            })

        return results
