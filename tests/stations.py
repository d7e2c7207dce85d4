"""
Test stations for tide model tests.

This file contains station definitions used across the tide model tests.
Each station includes coordinates, datums and constituents in published
units (speed in degrees/hour, phase in degrees, amplitude in meters).
"""
from datetime import datetime, timezone

from harmonic_tides.constituents import CorrectedConstituent
from harmonic_tides.location import Coordinate, LocationData

# Valid epoch of the corrected constituents: calendar year 2024
EPOCH_START = int(datetime(2024, 1, 1, tzinfo=timezone.utc).timestamp())
EPOCH_END = int(datetime(2025, 1, 1, tzinfo=timezone.utc).timestamp())

TEST_STATIONS = {
    # Semidiurnal, North Sea
    'rotterdam': {
        'name': 'Rotterdam',
        'lat': 51.92,
        'lon': 4.48,
        'datums': {'MSL': 0.0, 'LAT': -1.05, 'MLLW': -0.85, 'MHHW': 1.10},
        'constituents': {
            'M2': (28.9841042, 62.0, 0.80),
            'S2': (30.0, 121.0, 0.20),
            'N2': (28.4397295, 40.0, 0.12),
            'K1': (15.0410686, 205.0, 0.08),
            'O1': (13.9430356, 300.0, 0.07),
        },
    },
    # Mixed, mainly semidiurnal, Pacific coast (MSL above the datum origin)
    'santa_monica': {
        'name': 'Santa Monica, California',
        'lat': 34.008,
        'lon': -118.5,
        'datums': {'MSL': 0.83, 'MLLW': 0.0, 'MHHW': 1.64},
        'constituents': {
            'M2': (28.9841042, 154.0, 0.49),
            'S2': (30.0, 150.0, 0.20),
            'K1': (15.0410686, 218.0, 0.35),
            'O1': (13.9430356, 202.0, 0.22),
        },
    },
}


def make_location(key: str) -> LocationData:
    """Build a LocationData for one of the test stations."""
    station = TEST_STATIONS[key]
    constituents = {
        name: CorrectedConstituent.from_degrees(speed, phase, amplitude)
        for name, (speed, phase, amplitude) in station['constituents'].items()
    }
    return LocationData(
        Coordinate(station['lat'], station['lon']),
        EPOCH_START,
        EPOCH_END,
        constituents,
        datums=station['datums'],
        name=station['name'],
    )
