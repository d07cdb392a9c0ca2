"""
Spectral points and unit conversion.

A ``SpectrumUnit`` is one point of the spectrum of interest, stored in the
unit it was given in and convertible to any other ``SpectrumUnitType``.
All conversions go through the angular frequency omega (rad/s):

    WAVELENGTH        lambda (nm)     omega = 2 pi c0 / (lambda * 1e-9)
    WAVENUMBER        k (rad/m)       omega = k c0
    FREQUENCY         nu (Hz)         omega = 2 pi nu
    CYCLIC_FREQUENCY  omega (rad/s)   omega
    ENERGY            E (eV)          omega = 2 pi E e0 / h
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

from .constants import c0, e0, h_planck, twopi

NANOMETER = 1.0e-9


class SpectrumUnitType(Enum):
    WAVELENGTH = "nm"
    WAVENUMBER = "rad/m"
    FREQUENCY = "Hz"
    CYCLIC_FREQUENCY = "rad/s"
    ENERGY = "eV"


def _to_omega(value, unit_type):
    if unit_type is SpectrumUnitType.WAVELENGTH:
        return twopi * c0 / (value * NANOMETER)
    if unit_type is SpectrumUnitType.WAVENUMBER:
        return value * c0
    if unit_type is SpectrumUnitType.FREQUENCY:
        return twopi * value
    if unit_type is SpectrumUnitType.CYCLIC_FREQUENCY:
        return value
    if unit_type is SpectrumUnitType.ENERGY:
        return twopi * value * e0 / h_planck
    raise ValueError(f"unknown spectrum unit type: {unit_type!r}")


def _from_omega(omega, unit_type):
    if unit_type is SpectrumUnitType.WAVELENGTH:
        return twopi * c0 / omega / NANOMETER
    if unit_type is SpectrumUnitType.WAVENUMBER:
        return omega / c0
    if unit_type is SpectrumUnitType.FREQUENCY:
        return omega / twopi
    if unit_type is SpectrumUnitType.CYCLIC_FREQUENCY:
        return omega
    if unit_type is SpectrumUnitType.ENERGY:
        return omega * h_planck / (twopi * e0)
    raise ValueError(f"unknown spectrum unit type: {unit_type!r}")


@dataclass(frozen=True)
class SpectrumUnit:
    """
    One spectral point.

    Attributes
    ----------
    value : float
        Magnitude in ``unit_type`` units.  Must be positive (a zero
        frequency is allowed for the frequency-like types).
    unit_type : SpectrumUnitType
        Unit the value is expressed in.
    """
    value: float
    unit_type: SpectrumUnitType = SpectrumUnitType.WAVELENGTH

    def __post_init__(self):
        object.__setattr__(self, "value", float(self.value))
        if self.value < 0.0:
            raise ValueError(f"spectral value must be non-negative, got {self.value}")
        if self.value == 0.0 and self.unit_type is SpectrumUnitType.WAVELENGTH:
            raise ValueError("wavelength must be positive")

    def to_type(self, unit_type):
        """Return the value converted to *unit_type*."""
        if unit_type is self.unit_type:
            return self.value
        return _from_omega(_to_omega(self.value, self.unit_type), unit_type)

    @property
    def omega(self):
        """Angular frequency (rad/s)."""
        return self.to_type(SpectrumUnitType.CYCLIC_FREQUENCY)

    def __str__(self):
        return f"{self.value:g} {self.unit_type.value}"


class Spectrum:
    """Ordered set of spectral points of interest.

    Duplicates are dropped; the first occurrence keeps its position.
    """

    def __init__(self, units=()):
        seen = []
        for unit in units:
            if unit not in seen:
                seen.append(unit)
        self._units: Tuple[SpectrumUnit, ...] = tuple(seen)

    @classmethod
    def from_range(cls, start, stop, count, unit_type=SpectrumUnitType.WAVELENGTH):
        """Evenly spaced spectrum of *count* points from *start* to *stop* inclusive."""
        values = np.linspace(start, stop, int(count))
        return cls(SpectrumUnit(v, unit_type) for v in values)

    def __iter__(self):
        return iter(self._units)

    def __len__(self):
        return len(self._units)

    def __getitem__(self, n):
        return self._units[n]

    def __bool__(self):
        return bool(self._units)

    def __repr__(self):
        return f"Spectrum({list(self._units)!r})"

    def index(self, unit):
        return self._units.index(unit)

    def omegas(self):
        """Angular frequencies (rad/s) of every point, in order."""
        return np.array([u.omega for u in self._units], dtype=float)

    def to_simulation_result(self, calculate):
        """Map every spectral point through ``calculate(unit)`` into an ordered dict."""
        return {unit: calculate(unit) for unit in self._units}
