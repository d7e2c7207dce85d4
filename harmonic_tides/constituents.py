"""
Tidal Constituent Catalogue

Frequencies (radians/second) and reference phases (radians) of the harmonic
constituents used for raw (not yet nodally corrected) tide predictions. The
phases refer to the constituent epoch, January 1st 1992 00:00 UTC.

The order of the catalogue is fixed: raw constituent amplitudes are stored as
arrays aligned by index with it.

References:
- Flater, D. XTide constituent tables (NAVO.xls, Constituents-2006)
- Ray, R. "ARGUMENTS" and "ASTROL" for Jan 1, 1992 00:00 Greenwich time
"""
import math
from typing import Dict, NamedTuple, Tuple

# Epoch of the constituent phases (1992-01-01T00:00:00Z) in seconds since the Unix epoch
CONSTITUENT_EPOCH = 694224000


class TidalConstituent(NamedTuple):
    """A harmonic constituent: name, angular speed (rad/s) and phase (rad) at the epoch."""
    name: str
    omega: float
    phase: float


CONSTITUENTS: Tuple[TidalConstituent, ...] = (
    # Semidiurnal and diurnal (largest amplitudes first)
    TidalConstituent('m2', 1.405189025757300E-4, 1.73155754567656E0),
    TidalConstituent('s2', 1.454441043328608E-4, 0.00000000000000E0),
    TidalConstituent('k1', 7.292115854682399E-5, 0.173003673872453E0),
    TidalConstituent('o1', 6.759774402890599E-5, 1.55855387180411E0),
    TidalConstituent('n2', 1.378796995659399E-4, 6.05072124295143E0),
    TidalConstituent('p1', 7.252294578603680E-5, 6.11018163330713E0),
    TidalConstituent('k2', 1.458423170936480E-4, 3.48760000133470E0),
    TidalConstituent('q1', 6.495854101911592E-5, 5.87771756907898E0),
    TidalConstituent('2n2', 1.352404965561499E-4, 4.08669963304672E0),
    TidalConstituent('mu2', 1.355937008185992E-4, 3.46311509135312E0),
    TidalConstituent('nu2', 1.382329038283892E-4, 5.42713670125784E0),
    TidalConstituent('l2', 1.431581055855200E-4, 0.553986501991483E0),
    TidalConstituent('t2', 1.452450074605617E-4, 5.284193133561309E-2),
    TidalConstituent('j1', 7.556036155661405E-5, 2.13702528377717E0),
    TidalConstituent('m1', 7.028195553703394E-5, 2.43657509963318E0),
    TidalConstituent('oo1', 7.824457306474201E-5, 1.92904612953059E0),
    TidalConstituent('rho1', 6.531174528156522E-5, 5.25413302738539E0),
    # Long period
    TidalConstituent('mf', 5.323414517918014E-6, 1.75604245565814E0),
    TidalConstituent('mm', 2.639203009790057E-6, 1.96402160990471E0),
    TidalConstituent('ssa', 3.982127607872015E-7, 3.48760000133470E0),
    # Shallow water overtides and compounds
    TidalConstituent('m4', 2.810378051514600E-4, 3.46311509135312E0),
    TidalConstituent('ms4', 2.859630069085908E-4, 1.73155754567656E0),
    TidalConstituent('mn4', 2.783986021416699E-4, 1.49909348144841E0),
    TidalConstituent('m6', 4.215567077271900E-4, 5.19467263702969E0),
    TidalConstituent('m8', 5.620756103029200E-4, 0.643044875526663E0),
    TidalConstituent('mk3', 2.134400611225540E-4, 1.90456121954902E0),
    TidalConstituent('s6', 4.363323129985823E-4, 0.00000000000000E0),
    TidalConstituent('2sm2', 1.503693060899916E-4, 4.55162776150302E0),
    TidalConstituent('2mk3', 2.081166466046360E-4, 3.29011141748067E0),
)

_BY_NAME: Dict[str, TidalConstituent] = {c.name: c for c in CONSTITUENTS}


def constituent_by_name(name: str) -> TidalConstituent:
    """
    Look up a catalogue constituent by name (case-insensitive).

    Raises:
        KeyError: if the name is not in the catalogue
    """
    try:
        return _BY_NAME[name.lower()]
    except KeyError:
        raise KeyError(f"Unknown tidal constituent: {name}") from None


class ComplexAmplitude(NamedTuple):
    """
    Raw constituent value as a complex number.

    The contribution to the tide is re * cos(angle) - im * sin(angle).
    """
    re: float
    im: float

    @property
    def amplitude(self) -> float:
        return math.sqrt(self.re * self.re + self.im * self.im)

    @property
    def phase(self) -> float:
        """Phase lag in radians, in the range [0, 2*pi)."""
        phase = math.atan2(-self.im, self.re)
        if phase < 0:
            phase += 2 * math.pi
        return phase

    def is_zero(self) -> bool:
        return self.re == 0.0 and self.im == 0.0

    def __str__(self) -> str:
        return f"{self.re:.3f}{self.im:+.3f}i"


class CorrectedConstituent(NamedTuple):
    """
    Constituent with the nodal corrections already folded into amplitude and phase.

    Only valid inside the epoch window of the location it belongs to.
    """
    speed: float      # radians/second
    phase: float      # radians
    amplitude: float  # meters

    @classmethod
    def from_degrees(cls, speed: float, phase: float, amplitude: float) -> 'CorrectedConstituent':
        """
        Build a constituent from published units.

        Args:
            speed: Speed in degrees per hour
            phase: Phase in degrees
            amplitude: Amplitude in meters
        """
        return cls(speed / 180 * math.pi / 3600, phase / 180 * math.pi, amplitude)
