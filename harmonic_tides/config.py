"""
Configuration for tide calculations.

These values can be overridden by environment variables (or a .env file in the
working directory).
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _get_int_env(key: str, default: int) -> int:
    """Get an int value from environment variable or use default."""
    value = os.environ.get(key)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            pass
    return default


# =============================================================================
# Extreme Search
# =============================================================================

# Maximum number of Newton-Raphson/bisection steps per search tile
# Environment variable: TIDE_SEARCH_MAX_STEPS
SEARCH_MAX_STEPS = _get_int_env('TIDE_SEARCH_MAX_STEPS', 10)

# Stop searching when two approximations differ by at most this many seconds
# Environment variable: TIDE_SEARCH_MAX_ERROR_SECONDS
SEARCH_MAX_ERROR_SECONDS = _get_int_env('TIDE_SEARCH_MAX_ERROR_SECONDS', 0)

# Tile length for raw constituents (nodal corrections computed at request time)
# Environment variable: TIDE_NODAL_TILE_SECONDS
NODAL_TILE_SECONDS = _get_int_env('TIDE_NODAL_TILE_SECONDS', 3 * 3600)

# 1 lunar hour in seconds; tile length for nodally corrected constituents
LUNAR_HOUR_SECONDS = 3726

# Candidates within this many seconds of a higher high / lower low are dropped
FALSE_EXTREME_WINDOW_SECONDS = 3 * LUNAR_HOUR_SECONDS * 2


# =============================================================================
# Output
# =============================================================================

# Timezone used when none can be detected from the coordinates
# Environment variable: TIDE_DEFAULT_TIMEZONE
DEFAULT_TIMEZONE = os.environ.get('TIDE_DEFAULT_TIMEZONE', 'UTC')

# Conversion factor for height_ft output fields
METERS_TO_FEET = 3.28084
