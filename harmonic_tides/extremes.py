"""
Tidal extremes (high and low tides).

Extremes are the roots of the first derivative of the tide. The search splits
the requested window into short tiles and runs a Newton-Raphson iteration in
each tile, falling back to bisection whenever a Newton step would leave the
current bracket. A tile yields at most one extreme.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from . import config

logger = logging.getLogger(__name__)

# instant (s) -> (height, dheight, d2height)
Derivatives = Callable[[int], Tuple[float, float, float]]


@dataclass(frozen=True, order=True)
class Extreme:
    """
    A high or low tide.

    Extremes are ordered and compared by time only: two extremes at the same
    instant are equal whatever their height.
    """
    time: int                                       # seconds since the Unix epoch
    height: float = field(compare=False)            # meters, relative to the requested datum
    maximum: bool = field(compare=False)            # True for high tide
    error: int = field(compare=False, default=0)    # last Newton/bisection step in seconds
    steps: int = field(compare=False, default=0)    # iterations used

    @property
    def type(self) -> str:
        return 'high' if self.maximum else 'low'

    def __str__(self) -> str:
        when = datetime.fromtimestamp(self.time, tz=timezone.utc).isoformat()
        kind = 'High' if self.maximum else 'Low '
        return f"{kind}: {when} {self.height:+.2f} ({self.error} {self.steps})"


def find_extreme(
    derivatives: Derivatives,
    start: int,
    length: int,
    max_error: int = 0,
    max_steps: int = 10,
    offset: float = 0.0,
) -> Optional[Extreme]:
    """
    Find an extreme in the interval [start, start + length].

    Returns None when the derivative has the same sign at both ends of the
    interval. If the interval holds several extremes an arbitrary one is
    returned.

    Args:
        derivatives: Function returning (height, dheight, d2height) at an instant
        start: Start of the interval in seconds
        length: Length of the interval in seconds
        max_error: Stop when two successive approximations differ by at most this (may be 0)
        max_steps: Maximum number of approximations
        offset: Vertical offset subtracted from the height of the extreme

    Returns:
        Extreme or None
    """
    if max_error < 0:
        raise ValueError("max_error must not be negative")
    if max_steps < 1:
        raise ValueError("max_steps must be at least 1")

    a = start
    b = start + length

    fa = derivatives(a)
    if fa[1] == 0:
        return Extreme(a, float(fa[0] - offset), bool(fa[2] < 0))

    fb = derivatives(b)
    if fb[1] == 0:
        return Extreme(b, float(fb[0] - offset), bool(fb[2] < 0))

    # Same slope at both ends: no sign change, assume no extreme in between
    if fa[1] * fb[1] > 0:
        return None

    xn = (a + b) // 2
    steps = 0
    while True:
        x = xn
        fx = derivatives(x)

        # Keep the root bracketed by [a, b]
        if fa[1] * fx[1] < 0:
            b = x
        else:
            a = x
            fa = fx

        step = fx[1] / fx[2] if fx[2] != 0 else math.inf
        if math.isfinite(step):
            xn = x - int(step)
        else:
            xn = (a + b) // 2

        # Newton step left the bracket: bisect instead
        if xn < a or xn > b:
            xn = (a + b) // 2

        steps += 1
        if abs(xn - x) <= max_error or steps >= max_steps:
            break

    if abs(xn - x) > max_error:
        logger.debug("Extreme search near %d stopped after %d steps (error %ds)", xn, steps, xn - x)

    fx = derivatives(xn)
    return Extreme(xn, float(fx[0] - offset), bool(fx[2] < 0), xn - x, steps)


def remove_false_extremes(extremes: Sequence[Extreme], window: int) -> List[Extreme]:
    """
    Drop extremes that are not the highest (high tide) or lowest (low tide)
    candidate within `window` seconds on either side.

    Args:
        extremes: Candidates sorted by time
        window: Half width of the neighbourhood in seconds

    Returns:
        Remaining extremes in time order
    """
    result = []
    for i, extreme in enumerate(extremes):
        include = True

        j = i + 1
        while j < len(extremes) and extreme.time + window > extremes[j].time:
            if _beaten_by(extreme, extremes[j]):
                include = False
            j += 1

        j = i - 1
        while j >= 0 and extreme.time - window < extremes[j].time:
            if _beaten_by(extreme, extremes[j]):
                include = False
            j -= 1

        if include:
            result.append(extreme)

    return result


def _beaten_by(extreme: Extreme, other: Extreme) -> bool:
    if extreme.maximum:
        return extreme.height < other.height
    return extreme.height > other.height


def find_all_extremes(
    derivatives: Derivatives,
    start: int,
    end: int,
    tile_length: int,
    offset: float = 0.0,
    false_extreme_window: Optional[int] = None,
    max_error: int = config.SEARCH_MAX_ERROR_SECONDS,
    max_steps: int = config.SEARCH_MAX_STEPS,
) -> List[Extreme]:
    """
    Find all extremes in [start, end].

    The window is cut into tiles of `tile_length` seconds (the last one may be
    shorter) and each tile is searched once. Candidates at the same instant are
    merged.

    Args:
        derivatives: Function returning (height, dheight, d2height) at an instant
        start: Start of the window in seconds
        end: End of the window in seconds
        tile_length: Tile length in seconds, short enough for one extreme per tile
        offset: Vertical offset subtracted from all heights
        false_extreme_window: If given, run remove_false_extremes() with this window
        max_error: Convergence threshold per tile in seconds
        max_steps: Maximum iterations per tile

    Returns:
        Extremes sorted by time, without duplicate times
    """
    if tile_length <= 0:
        raise ValueError("tile_length must be positive")

    candidates = set()
    tiles = 0
    for time in range(start, end, tile_length):
        tiles += 1
        extreme = find_extreme(
            derivatives, time, min(tile_length, end - time), max_error, max_steps, offset
        )
        if extreme is not None:
            candidates.add(extreme)

    extremes = sorted(candidates)
    logger.debug("Found %d extreme candidates in %d tiles", len(extremes), tiles)

    if false_extreme_window is None:
        return extremes

    filtered = remove_false_extremes(extremes, false_extreme_window)
    if len(filtered) < len(extremes):
        logger.debug("Removed %d false extremes", len(extremes) - len(filtered))
    return filtered
