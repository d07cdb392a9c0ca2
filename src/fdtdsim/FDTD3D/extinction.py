"""
Spectral post-processing: absorption of the embedded body.

For every requested frequency f the engine combines the accumulated
Fourier transform of E in every body cell with the complex permittivity
of that cell through the Clausius-Mossotti factor:

    CM(f)      = (eps(f) - 1) / (eps(f) + 2)
    S(f)       = sum over body cells of  Im( CM(f) * (E_f . E_f) )
    C_raw(f)   = S(f) * cell_size * k(f)              k = 2 pi / lambda (1/m)
    Q(f)       = C_raw(f) / A                         A = body cells on the centre j plane
    C_abs(f)   = C_raw(f) * cell_size^2               (m^2)

``Q`` is undefined when the centre plane holds no body cell; the result
then carries ``efficiency=None``.

A Poynting-type alternative, ``|E_inc . H_inc|^-1 * Re(E_f x H_f)_z``, was
considered for the per-cell term; it is not used.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.coordinates import ScalarProduct
from ..core.indexbounds import J_AXIS
from ..core.spectrum import SpectrumUnitType


@dataclass(frozen=True)
class SimulationResult:
    """
    Absorption at one spectral point.

    Attributes
    ----------
    cross_section : float
        Absorption cross-section (m^2).
    efficiency : float or None
        Cross-section normalised by the projected body area; ``None`` when
        the projected area is zero.
    incident_intensity : float
        ``|E_inc(f) * conj(H_inc(f))|`` of the incident pulse at the centre
        of the propagation axis.
    """
    cross_section: float
    efficiency: Optional[float]
    incident_intensity: float = 0.0


def ClausiusMossotti(eps):
    """Clausius-Mossotti factor ``(eps - 1) / (eps + 2)``."""
    eps = complex(eps)
    return (eps - 1.0) / (eps + 2.0)


def ExtinctionSum(fields, medium, n, frequency, indices, traversal):
    """Sum of ``Im(CM * (E_f . E_f))`` over the body cells of *indices*.

    ``E_f . E_f`` is the bilinear self product ``sum_c E_c**2`` of the
    complex field (no conjugate).

    Parameters
    ----------
    fields : FDTDField
        Field store holding the accumulated transforms.
    medium : MediumGrid
        Per-cell media.
    n : int
        Index of *frequency* in the spectrum (row of the accumulators).
    frequency : SpectrumUnit
        Spectral point, passed to ``Medium.permittivity``.
    indices : IndexBounds
        Cells to sum over.
    traversal : Traversal
        Strategy performing the reduction.
    """
    def kernel(si, sj, sk):
        index = (si, sj, sk)
        total = 0.0
        fourier_e = None
        for cell_medium, mask in medium.media_in(index):
            if not cell_medium.is_body:
                continue
            if fourier_e is None:
                fourier_e = fields.FourierE.transform(n, index)
            cm = ClausiusMossotti(cell_medium.permittivity(frequency))
            cells = fourier_e[mask]
            total += float(np.sum((cm * ScalarProduct(cells, cells)).imag))
        return total

    return traversal.sum(indices, kernel)


def CrossSectionArea(medium, indices, traversal):
    """Number of body cells on the plane ``j = centre`` (projected body area in cells)."""
    jc = indices.center()[J_AXIS]
    plane = indices.with_axis(J_AXIS, jc, jc + 1)

    def kernel(si, sj, sk):
        return np.count_nonzero(medium.body_mask((si, sj, sk)))

    return int(round(traversal.sum(plane, kernel)))


def IncidentIntensity(pulse, n, j):
    """``|E_inc(f) * conj(H_inc(f))|`` of the incident line at position *j*."""
    e_f = pulse.FourierE.transform(n)[j]
    h_f = pulse.FourierH.transform(n)[j]
    return float(abs(e_f * np.conj(h_f)))


def ExtinctionResult(extinction_sum, frequency, cell_size, area, incident_intensity=0.0):
    """Package the reduced sum at *frequency* into a ``SimulationResult``."""
    wave_number = frequency.to_type(SpectrumUnitType.WAVENUMBER)
    extinction = extinction_sum * cell_size * wave_number
    efficiency = extinction / area if area > 0 else None
    return SimulationResult(
        cross_section=extinction * cell_size ** 2,
        efficiency=efficiency,
        incident_intensity=incident_intensity,
    )
