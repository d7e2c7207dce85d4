"""
Unit tests for nodal corrections
"""
import math
from datetime import datetime, timezone

import pytest

from harmonic_tides.constituents import CONSTITUENTS
from harmonic_tides.nodal import (
    NODAL_EPOCH,
    NODAL_RULES,
    UNITY,
    Alias,
    NodalCorrection,
    Power,
    Product,
    Unity,
    julian_centuries,
    nodal_corrections,
    orbital_arguments,
)


def _ts(*args) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())


INSTANTS = [
    _ts(1992, 1, 1),
    _ts(2000, 1, 1),
    _ts(2006, 7, 15, 12),
    _ts(2015, 3, 20),
    _ts(2024, 6, 1),
    _ts(2041, 11, 30, 18),
]


@pytest.fixture(params=INSTANTS)
def corrections(request):
    """Nodal corrections at a range of instants over several nodal cycles."""
    return nodal_corrections(request.param)


class TestOrbitalArguments:
    """Tests for the lunar node and perigee longitudes."""

    def test_julian_centuries_at_epoch(self):
        """Julian centuries should be zero at the nodal epoch."""
        assert julian_centuries(NODAL_EPOCH) == 0.0

    def test_julian_century_length(self):
        """One Julian century is 36525 days."""
        assert julian_centuries(NODAL_EPOCH + 36525 * 86400) == pytest.approx(1.0)

    def test_values_at_epoch(self):
        """At J2000 the arguments equal the constant polynomial terms."""
        N, P = orbital_arguments(NODAL_EPOCH)
        assert N == pytest.approx(math.radians(125.04452))
        assert P == pytest.approx(math.radians(83.3532465))

    @pytest.mark.parametrize("instant", INSTANTS)
    def test_arguments_normalized(self, instant):
        """Both angles should be in the range [0, 2*pi)."""
        N, P = orbital_arguments(instant)
        assert 0 <= N < 2 * math.pi
        assert 0 <= P < 2 * math.pi

    def test_node_regresses(self):
        """The lunar node moves backwards (about 19.3 degrees per year)."""
        N1, _ = orbital_arguments(NODAL_EPOCH)
        N2, _ = orbital_arguments(NODAL_EPOCH + 30 * 86400)
        assert N2 < N1
        assert math.degrees(N1 - N2) == pytest.approx(19.34 * 30 / 365.25, rel=0.01)


class TestCorrectionTable:
    """Tests for the structure of the correction table."""

    def test_all_catalogue_constituents_corrected(self, corrections):
        """Every catalogue constituent should get a correction."""
        assert set(corrections) == {c.name for c in CONSTITUENTS}

    def test_rules_refer_to_earlier_constituents(self):
        """Aliases and compositions may only use corrections computed before them."""
        seen = set()
        for name, rule in NODAL_RULES:
            if isinstance(rule, Alias):
                assert rule.source in seen, name
            elif isinstance(rule, Power):
                assert rule.base in seen, name
            elif isinstance(rule, Product):
                assert rule.first in seen and rule.second in seen, name
            seen.add(name)

    def test_deterministic(self):
        """Same instant should give identical corrections."""
        assert nodal_corrections(INSTANTS[3]) == nodal_corrections(INSTANTS[3])


class TestCorrectionRules:
    """Tests for the individual derivation rules."""

    UNITY_CONSTITUENTS = ['s2', 't2', 'ssa', 's6', '2mk3']

    ALIASES = [
        ('n2', 'm2'),
        ('2n2', 'm2'),
        ('mu2', 'm2'),
        ('nu2', 'm2'),
        ('2sm2', 'm2'),
        ('rho1', 'q1'),
        ('mn4', 'm4'),
    ]

    @pytest.mark.parametrize("name", UNITY_CONSTITUENTS)
    def test_unity_corrections(self, corrections, name):
        """Solar constituents have no nodal correction."""
        assert corrections[name].f == 1.0
        assert corrections[name].u == 0.0

    @pytest.mark.parametrize("alias,source", ALIASES)
    def test_aliases_share_correction(self, corrections, alias, source):
        """Aliased constituents should reuse the source correction exactly."""
        assert corrections[alias] is corrections[source]

    def test_unity_rules_in_table(self):
        """The table should mark the solar constituents as unity."""
        rules = dict(NODAL_RULES)
        for name in self.UNITY_CONSTITUENTS:
            assert isinstance(rules[name], Unity)

    @pytest.mark.parametrize("name,exponent", [('m4', 2), ('m6', 3), ('m8', 4)])
    def test_overtides_are_powers_of_m2(self, corrections, name, exponent):
        """Overtides: f = f_M2^k and u = k * u_M2."""
        m2 = corrections['m2']
        assert corrections[name].f == m2.f ** exponent
        assert corrections[name].u == exponent * m2.u

    def test_overtide_phase_is_not_zero(self):
        """The overtide phase follows the M2 phase (nonzero away from N = 0)."""
        corrections = nodal_corrections(INSTANTS[2])
        assert corrections['m2'].u != 0.0
        assert corrections['m4'].u == pytest.approx(2 * corrections['m2'].u)

    def test_compound_mk3(self, corrections):
        """MK3 combines the M2 and K1 corrections."""
        m2, k1 = corrections['m2'], corrections['k1']
        assert corrections['mk3'].f == m2.f * k1.f
        assert corrections['mk3'].u == m2.u + k1.u

    def test_ms4_matches_m2_formula(self, corrections):
        """MS4 uses the M2 coefficients but is computed separately."""
        assert corrections['ms4'] == corrections['m2']
        assert corrections['ms4'] is not corrections['m2']

    def test_direct_formula(self):
        """f and u follow from the t1/t2 terms."""
        correction = NodalCorrection.from_terms(0.3, 0.4)
        assert correction.f == pytest.approx(0.5)
        assert correction.u == pytest.approx(math.atan(0.75))

    def test_unity_from_terms(self):
        """Zero sine terms give the unity correction."""
        assert NodalCorrection.from_terms(0, 1) == UNITY


class TestCorrectionMagnitudes:
    """Tests for realistic correction values."""

    RANGES = {
        'm2': (0.95, 1.05),
        'k1': (0.85, 1.15),
        'o1': (0.75, 1.25),
        'k2': (0.7, 1.35),
        'mf': (0.55, 1.5),
    }

    @pytest.mark.parametrize("name", sorted(RANGES))
    def test_amplitude_factor_range(self, corrections, name):
        """Amplitude factors should stay within their published ranges."""
        low, high = self.RANGES[name]
        assert low < corrections[name].f < high

    def test_phase_corrections_bounded(self, corrections):
        """atan() keeps the direct phase corrections within (-pi/2, pi/2)."""
        for name, rule in NODAL_RULES:
            if not isinstance(rule, (Alias, Power, Product)):
                assert -math.pi / 2 < corrections[name].u < math.pi / 2
