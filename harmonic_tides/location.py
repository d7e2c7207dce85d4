"""
Tide models for a location.

Two kinds of constituent data are supported:
- LocationData: constituents with the nodal corrections already applied,
  valid only between epoch_start and epoch_end (typically served per station
  by a tide data provider)
- TideCalculator: raw complex constituent amplitudes aligned with the
  constituent catalogue; nodal corrections are computed for the requested
  time, so any time is valid

Both report heights relative to mean sea level, or relative to one of the
named vertical datums of the location.

All times are integer seconds since the Unix epoch (UTC).
"""
import logging
from enum import Enum
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence, Union

import numpy as np

from . import config
from .constituents import CONSTITUENTS, ComplexAmplitude, CorrectedConstituent, TidalConstituent
from .extremes import Extreme, find_all_extremes
from .harmonics import (
    ConstituentSource,
    CorrectedConstituentSource,
    NodalConstituentSource,
    evaluate,
    evaluate_height,
)

logger = logging.getLogger(__name__)


class RangeError(ValueError):
    """Requested time outside the valid epoch of a location, or unknown datum."""


class TidalDatum(str, Enum):
    """
    Common vertical datum names.

    - MSL (Mean Sea Level): Average of all hourly water levels. Heights are
      relative to MSL when no datum is requested.
    - MLLW (Mean Lower Low Water): Average of the lower of the two daily low tides.
      Used in nautical charts in the US.
    - MHHW (Mean Higher High Water): Average of the higher of the two daily high tides.
    - MLW / MHW (Mean Low / High Water)
    - LAT (Lowest Astronomical Tide): The lowest tide level predicted under average
      meteorological conditions and any astronomical conditions. Used in charts in
      UK, Europe, and many other regions.
    - HAT (Highest Astronomical Tide)
    """
    MSL = "MSL"
    MLLW = "MLLW"
    MLW = "MLW"
    MHW = "MHW"
    MHHW = "MHHW"
    LAT = "LAT"
    HAT = "HAT"


Datum = Union[str, TidalDatum, None]


class Coordinate(NamedTuple):
    """Latitude (-90..90, north positive) and longitude (-180..180, east positive) in degrees."""
    latitude: float
    longitude: float


class TideModel:
    """
    Common calculations for a location: heights, sampled heights and extremes.

    Subclasses provide the constituent source, the tile length of the extreme
    search and, optionally, the false extreme filter window.
    """

    tile_length: int
    false_extreme_window: Optional[int] = None

    def __init__(
        self,
        coordinate: Coordinate,
        source: ConstituentSource,
        datums: Optional[Mapping[str, float]] = None,
        name: Optional[str] = None,
        copyright: Optional[str] = None,
    ):
        self.coordinate = Coordinate(*coordinate)
        self.source = source
        self.datums: Dict[str, float] = dict(datums or {})
        self.name = name
        self.copyright = copyright

    def _check_range(self, start: int, end: int) -> None:
        """Raise RangeError if [start, end] can't be calculated."""

    def datum_offset(self, datum: Datum = None) -> float:
        """
        Offset to subtract from MSL heights to get heights relative to `datum`.

        Args:
            datum: Datum name, or None/'' for mean sea level

        Raises:
            RangeError: if the datum is not known for this location
        """
        datum = getattr(datum, 'value', datum)
        if not datum:
            return 0.0
        if datum not in self.datums:
            raise RangeError(f"Datum {datum} does not exist for {self}")
        return self.datums[datum] - self.datums.get(TidalDatum.MSL.value, 0.0)

    def height_at(self, instant: int, datum: Datum = None) -> float:
        """Tide height in meters at `instant`, relative to `datum`."""
        self._check_range(instant, instant)
        offset = self.datum_offset(datum)
        terms = self.source.terms_at(instant).values()
        return float(evaluate_height(instant, terms, self.source.epoch)) - offset

    def calculate(self, start: int, end: int, step: int, datum: Datum = None) -> Dict[int, float]:
        """
        Calculate tide heights at fixed intervals, using one set of nodal corrections.

        Args:
            start: Start time in seconds
            end: End time in seconds (included if it falls on a step)
            step: Step size in seconds
            datum: Datum to report heights against, None for MSL

        Returns:
            Dictionary of time -> height (m), in time order
        """
        self._check_range(start, end)
        offset = self.datum_offset(datum)
        if step <= 0:
            raise ValueError("step must be positive")

        times = np.arange(start, end + 1, step, dtype=np.int64)
        terms = self.source.terms_at(start).values()
        heights = evaluate_height(times, terms, self.source.epoch) - offset
        return dict(zip(times.tolist(), np.broadcast_to(heights, times.shape).tolist()))

    def calculate_extremes(self, start: int, end: int, datum: Datum = None) -> List[Extreme]:
        """
        Calculate all extremes (high and low tides) between start and end.

        The constituent terms (and so the nodal corrections) are computed once,
        at `start`, for the whole interval.

        Args:
            start: Start time in seconds
            end: End time in seconds
            datum: Datum to report heights against, None for MSL

        Returns:
            Extremes sorted by time
        """
        self._check_range(start, end)
        offset = self.datum_offset(datum)
        logger.debug("Calculating extremes for %s from %d to %d (datum %s)", self, start, end, datum or 'MSL')

        terms = tuple(self.source.terms_at(start).values())
        epoch = self.source.epoch

        def derivatives(instant):
            return evaluate(instant, terms, epoch)

        return find_all_extremes(
            derivatives,
            start,
            end,
            self.tile_length,
            offset=offset,
            false_extreme_window=self.false_extreme_window,
        )

    def __str__(self) -> str:
        if not self.name:
            return f"{self.coordinate.latitude:6.3f}, {self.coordinate.longitude:6.3f}"
        return f"{self.coordinate.latitude:6.3f}, {self.coordinate.longitude:6.3f} ({self.name})"


class LocationData(TideModel):
    """
    Constituent and datum information for a location with nodally corrected
    constituents.

    Constituent phases refer to epoch_start, and all calculations must stay
    inside [epoch_start, epoch_end].
    """

    tile_length = config.LUNAR_HOUR_SECONDS
    false_extreme_window = config.FALSE_EXTREME_WINDOW_SECONDS

    def __init__(
        self,
        coordinate: Coordinate,
        epoch_start: int,
        epoch_end: int,
        constituents: Mapping[str, CorrectedConstituent],
        datums: Optional[Mapping[str, float]] = None,
        name: Optional[str] = None,
        copyright: Optional[str] = None,
    ):
        if epoch_start > epoch_end:
            raise ValueError(f"epoch_start ({epoch_start}) is after epoch_end ({epoch_end})")

        self.epoch_start = epoch_start
        self.epoch_end = epoch_end
        self.constituents: Dict[str, CorrectedConstituent] = {
            name_: CorrectedConstituent(*c) for name_, c in constituents.items()
        }
        super().__init__(
            coordinate,
            CorrectedConstituentSource(self.constituents, epoch_start),
            datums=datums,
            name=name,
            copyright=copyright,
        )

    def _check_range(self, start: int, end: int) -> None:
        if start < self.epoch_start or end > self.epoch_end:
            raise RangeError(
                f"Interval {start}..{end} is outside the valid range "
                f"{self.epoch_start}..{self.epoch_end} of {self}"
            )


class TideCalculator(TideModel):
    """
    Tide calculations from raw complex constituent amplitudes.

    The amplitudes must be in the same order as `constituents`. Nodal
    corrections are computed for the requested time, so there is no epoch limit.
    """

    tile_length = config.NODAL_TILE_SECONDS

    def __init__(
        self,
        coordinate: Coordinate,
        amplitudes: Sequence[ComplexAmplitude],
        datums: Optional[Mapping[str, float]] = None,
        constituents: Sequence[TidalConstituent] = CONSTITUENTS,
        name: Optional[str] = None,
        copyright: Optional[str] = None,
    ):
        super().__init__(
            coordinate,
            NodalConstituentSource(amplitudes, constituents),
            datums=datums,
            name=name,
            copyright=copyright,
        )

    @property
    def amplitudes(self):
        return self.source.amplitudes

    def is_zero(self) -> bool:
        """True when the amplitudes are missing or start with a zero value."""
        return not self.amplitudes or self.amplitudes[0].is_zero()

    def height_at(self, instant: int, datum: Datum = None, nodal_instant: Optional[int] = None) -> float:
        """
        Tide height in meters at `instant`, relative to `datum`.

        Args:
            instant: Time in seconds
            datum: Datum to report the height against, None for MSL
            nodal_instant: Time at which to evaluate the nodal corrections;
                defaults to `instant`
        """
        if nodal_instant is None:
            nodal_instant = instant
        offset = self.datum_offset(datum)
        terms = self.source.terms_at(nodal_instant).values()
        return float(evaluate_height(instant, terms, self.source.epoch)) - offset
