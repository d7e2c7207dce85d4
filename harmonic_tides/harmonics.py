"""
Harmonic tide evaluation.

The tide is the sum of cosine terms

    h(t) = sum(A_i * cos((t - epoch) * speed_i + phase_i))

where amplitude and phase already include the nodal correction of the term.
Constituent sources turn stored constituent data into these terms: raw complex
amplitudes get their nodal corrections at the requested instant, pre-corrected
constituents are returned unchanged.
"""
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Mapping, NamedTuple, Sequence

import numpy as np

from .constituents import (
    CONSTITUENT_EPOCH,
    CONSTITUENTS,
    ComplexAmplitude,
    CorrectedConstituent,
    TidalConstituent,
)
from .nodal import nodal_corrections


class HarmonicTerm(NamedTuple):
    """Effective harmonic term: amplitude (m), phase (rad), speed (rad/s)."""
    name: str
    amplitude: float
    phase: float
    speed: float


def evaluate(instant, terms: Iterable[HarmonicTerm], epoch: int):
    """
    Calculate the tide height and its first and second time derivative.

    Terms are summed in iteration order, so results are reproducible for a
    given constituent order.

    Args:
        instant: Seconds since the Unix epoch, a scalar or a numpy array of instants
        terms: Harmonic terms to sum
        epoch: Reference instant of the term phases (seconds since the Unix epoch)

    Returns:
        Tuple (height in m, dheight in m/s, d2height in m/s^2); arrays if
        `instant` is an array
    """
    elapsed = instant - epoch

    height = 0.0
    dheight = 0.0
    d2height = 0.0
    for term in terms:
        angle = elapsed * term.speed + term.phase
        cos = np.cos(angle)
        sin = np.sin(angle)

        amp = term.amplitude
        height = height + amp * cos
        amp *= -term.speed
        dheight = dheight + amp * sin
        amp *= term.speed
        d2height = d2height + amp * cos

    return height, dheight, d2height


def evaluate_height(instant, terms: Iterable[HarmonicTerm], epoch: int):
    """Tide height only; see evaluate()."""
    elapsed = instant - epoch
    height = 0.0
    for term in terms:
        height = height + term.amplitude * np.cos(elapsed * term.speed + term.phase)
    return height


class ConstituentSource(ABC):
    """Provides the harmonic terms of a location at a given instant."""

    #: Reference instant of the term phases in seconds since the Unix epoch
    epoch: int

    @abstractmethod
    def terms_at(self, instant: int) -> Dict[str, HarmonicTerm]:
        """
        Harmonic terms valid at `instant`, keyed by constituent name.

        The returned mapping keeps constituent order.
        """


class NodalConstituentSource(ConstituentSource):
    """
    Raw complex constituent amplitudes, aligned by index with a constituent catalogue.

    Nodal corrections are computed for every call to terms_at(), so the source
    is valid at any instant.
    """

    epoch = CONSTITUENT_EPOCH

    def __init__(
        self,
        amplitudes: Sequence[ComplexAmplitude],
        constituents: Sequence[TidalConstituent] = CONSTITUENTS,
    ):
        if len(amplitudes) > len(constituents):
            raise ValueError(
                f"Got {len(amplitudes)} constituent amplitudes for a catalogue of {len(constituents)}"
            )
        self.amplitudes = tuple(ComplexAmplitude(*amp) for amp in amplitudes)
        self.constituents = tuple(constituents[:len(self.amplitudes)])

    def terms_at(self, instant: int) -> Dict[str, HarmonicTerm]:
        corrections = nodal_corrections(instant)
        terms = {}
        for amp, const in zip(self.amplitudes, self.constituents):
            f, u = corrections[const.name]
            # re*cos(a) - im*sin(a) == |c| * cos(a - phase_lag)
            terms[const.name] = HarmonicTerm(
                const.name,
                f * amp.amplitude,
                const.phase + u - amp.phase,
                const.omega,
            )
        return terms


class CorrectedConstituentSource(ConstituentSource):
    """Constituents with nodal corrections already applied, phases relative to `epoch`."""

    def __init__(self, constituents: Mapping[str, CorrectedConstituent], epoch: int):
        self.epoch = epoch
        self._terms = {
            name: HarmonicTerm(name, c.amplitude, c.phase, c.speed)
            for name, c in constituents.items()
        }

    def terms_at(self, instant: int) -> Dict[str, HarmonicTerm]:
        return self._terms
