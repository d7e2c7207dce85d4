"""
Nodal Corrections

Long term (18.6 year lunar nodal cycle) amplitude factors f and phase
corrections u for the tidal constituents of the catalogue.

Each constituent gets its correction from one rule in NODAL_RULES:
- a direct formula: f = sqrt(t1^2 + t2^2), u = atan(t1 / t2) where t1 and t2
  are linear combinations of sines/cosines of the node and perigee angles
- unity: f = 1, u = 0 (purely solar constituents)
- an alias of a correction computed earlier in the same table
- a power (overtides) or product (compound tides) of earlier corrections

The rules are evaluated in table order, so a rule may only refer to
constituents listed before it.

References:
- Schureman, P. (1958) "Manual of Harmonic Analysis and Prediction of Tides"
- Foreman, M.G.G. (1977) "Manual for Tidal Heights Analysis and Prediction"
"""
from typing import Dict, NamedTuple, Tuple, Union

import numpy as np

# Epoch for the nodal arguments (2000-01-01T00:00:00Z) in seconds since the Unix epoch
NODAL_EPOCH = 946684800

SECONDS_PER_JULIAN_CENTURY = 100 * 365.25 * 24 * 3600


class NodalCorrection(NamedTuple):
    """Nodal amplitude factor f (dimensionless) and phase correction u (radians)."""
    f: float
    u: float

    @classmethod
    def from_terms(cls, t1: float, t2: float) -> 'NodalCorrection':
        return cls(float(np.sqrt(t1 * t1 + t2 * t2)), float(np.arctan(t1 / t2)))

    def power(self, exponent: int) -> 'NodalCorrection':
        """Correction of an overtide whose speed is `exponent` times this one."""
        return NodalCorrection(self.f ** exponent, exponent * self.u)

    def combine(self, other: 'NodalCorrection') -> 'NodalCorrection':
        """Correction of a compound tide of this constituent and `other`."""
        return NodalCorrection(self.f * other.f, self.u + other.u)


UNITY = NodalCorrection(1.0, 0.0)


# Rule types for the correction table. Coefficient terms are (argument, factor)
# pairs summed in order; t2 additionally starts at 1.
class Direct(NamedTuple):
    sine: Tuple[Tuple[str, float], ...]
    cosine: Tuple[Tuple[str, float], ...]


class Unity(NamedTuple):
    pass


class Alias(NamedTuple):
    source: str


class Power(NamedTuple):
    base: str
    exponent: int


class Product(NamedTuple):
    first: str
    second: str


NodalRule = Union[Direct, Unity, Alias, Power, Product]

NODAL_RULES: Tuple[Tuple[str, NodalRule], ...] = (
    ('m2', Direct(sine=(('n', -0.03731), ('2n', 0.00052)),
                  cosine=(('n', -0.03731), ('2n', 0.00052)))),
    ('s2', Unity()),
    ('k1', Direct(sine=(('n', -0.1554), ('2n', 0.0031)),
                  cosine=(('n', 0.1158), ('2n', -0.0028)))),
    # The sine series repeats 2N where the cosine series has 2P; kept as published
    ('o1', Direct(sine=(('n', 0.1886), ('2n', -0.0058), ('2n', -0.0065)),
                  cosine=(('n', 0.1886), ('2n', -0.0058), ('2p', -0.0065)))),
    ('n2', Alias('m2')),
    ('p1', Direct(sine=(('n', -0.0112),),
                  cosine=(('n', -0.0112),))),
    ('k2', Direct(sine=(('n', -0.3108), ('2n', -0.0324)),
                  cosine=(('n', 0.2853), ('2n', 0.0324)))),
    ('q1', Direct(sine=(('n', 0.1886),),
                  cosine=(('n', 0.1886),))),
    ('2n2', Alias('m2')),
    ('mu2', Alias('m2')),
    ('nu2', Alias('m2')),
    ('l2', Direct(sine=(('2p', -0.250), ('2p-n', -0.110)),
                  cosine=(('2p', -0.250), ('2p-n', -0.110), ('n', -0.037)))),
    ('t2', Unity()),
    ('j1', Direct(sine=(('n', -0.227),),
                  cosine=(('n', 0.169),))),
    # Assumes the m1 argument includes p
    ('m1', Direct(sine=(('n', -0.2294), ('2p', -0.3594), ('2p-n', -0.0664)),
                  cosine=(('n', 0.1722), ('2p', 0.3594), ('2p-n', 0.0664)))),
    ('oo1', Direct(sine=(('n', -0.640), ('2n', -0.134), ('2p', -0.150)),
                   cosine=(('n', 0.640), ('2n', 0.134), ('2p', 0.150)))),
    ('rho1', Alias('q1')),
    ('mf', Direct(sine=(('2p', -0.04324), ('n', -0.41465), ('2n', -0.03873)),
                  cosine=(('2p', 0.04324), ('n', 0.41465), ('2n', 0.03873)))),
    ('mm', Direct(sine=(('2p', -0.0534), ('2p-n', -0.0219)),
                  cosine=(('n', -0.1308), ('2p', -0.0534), ('2p-n', -0.0219)))),
    ('ssa', Unity()),
    ('m4', Power('m2', 2)),
    ('ms4', Direct(sine=(('n', -0.03731), ('2n', 0.00052)),
                   cosine=(('n', -0.03731), ('2n', 0.00052)))),
    ('mn4', Alias('m4')),
    ('m6', Power('m2', 3)),
    ('m8', Power('m2', 4)),
    ('mk3', Product('m2', 'k1')),
    ('s6', Unity()),
    ('2sm2', Alias('m2')),
    ('2mk3', Unity()),
)


def julian_centuries(instant: float) -> float:
    """
    Time in Julian centuries since the nodal epoch.

    Args:
        instant: Seconds since the Unix epoch (UTC)
    """
    return (instant - NODAL_EPOCH) / SECONDS_PER_JULIAN_CENTURY


def orbital_arguments(instant: float) -> Tuple[float, float]:
    """
    Mean longitudes of the lunar ascending node (N) and of the lunar perigee (P).

    Args:
        instant: Seconds since the Unix epoch (UTC)

    Returns:
        (N, P) in radians
    """
    tc = julian_centuries(instant)

    N = ((2.22222 - 6 * tc + 2.0708 - 3) * tc - 1934.136261) * tc + 125.04452
    P = ((-1.249172 - 5 * tc - 1.032 - 2) * tc + 4069.0137287) * tc + 83.3532465

    # Normalize to 0-360 degrees
    N = N % 360.0
    P = P % 360.0

    return float(np.radians(N)), float(np.radians(P))


def _harmonic_terms(N: float, P: float) -> Tuple[Dict[str, float], Dict[str, float]]:
    """Sines and cosines of the node/perigee combinations used by the direct formulas."""
    angles = {
        'n': N,
        '2n': 2 * N,
        '3n': 3 * N,
        'p': P,
        '2p': 2 * P,
        'p-n': P - N,
        '2p-n': 2 * P - N,
    }
    sines = {key: float(np.sin(angle)) for key, angle in angles.items()}
    cosines = {key: float(np.cos(angle)) for key, angle in angles.items()}
    return sines, cosines


def _direct(rule: Direct, sines: Dict[str, float], cosines: Dict[str, float]) -> NodalCorrection:
    t1 = 0.0
    for key, factor in rule.sine:
        t1 += factor * sines[key]
    t2 = 1.0
    for key, factor in rule.cosine:
        t2 += factor * cosines[key]
    return NodalCorrection.from_terms(t1, t2)


def nodal_corrections(instant: float) -> Dict[str, NodalCorrection]:
    """
    Calculate the nodal corrections for all catalogue constituents at an instant.

    Aliased constituents refer to the very same NodalCorrection object as their
    source constituent.

    Args:
        instant: Seconds since the Unix epoch (UTC)

    Returns:
        Dictionary mapping constituent names to NodalCorrection, in catalogue rule order
    """
    sines, cosines = _harmonic_terms(*orbital_arguments(instant))

    corrections: Dict[str, NodalCorrection] = {}
    for name, rule in NODAL_RULES:
        if isinstance(rule, Direct):
            corrections[name] = _direct(rule, sines, cosines)
        elif isinstance(rule, Unity):
            corrections[name] = UNITY
        elif isinstance(rule, Alias):
            corrections[name] = corrections[rule.source]
        elif isinstance(rule, Power):
            corrections[name] = corrections[rule.base].power(rule.exponent)
        elif isinstance(rule, Product):
            corrections[name] = corrections[rule.first].combine(corrections[rule.second])
        else:
            raise TypeError(f"Unsupported nodal rule for {name}: {rule!r}")

    return corrections
