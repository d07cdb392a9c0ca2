"""Step observers for monitoring a running simulation."""

import numpy as np


def FieldEnergy(fields, index=()):
    """Discrete electromagnetic energy ``sum(E.E + H.H)`` (normalised units).

    Parameters
    ----------
    fields : FDTDField
        Field store.
    index : tuple, optional
        Block of cells to sum over; the whole grid by default.
    """
    E = fields.E[tuple(index)]
    H = fields.H[tuple(index)]
    return float(np.sum(E * E) + np.sum(H * H))


class EnergyRecorder:
    """Observer that records the field energy after every step.

    Parameters
    ----------
    index : tuple, optional
        Block of cells to monitor; the whole grid by default.
    """

    def __init__(self, index=()):
        self.index = tuple(index)
        self.times = []
        self.energies = []

    def __call__(self, event):
        self.times.append(event.time)
        self.energies.append(FieldEnergy(event.fields, self.index))

    def peak(self):
        return max(self.energies) if self.energies else 0.0


class FieldProbe:
    """Observer that records one field component at one cell after every step.

    Parameters
    ----------
    cell : tuple of int
        Cell ``(i, j, k)``.
    component : int
        Cartesian component (0, 1, 2).
    field : str
        ``"E"``, ``"D"`` or ``"H"``.
    """

    def __init__(self, cell, component=2, field="E"):
        if field not in ("E", "D", "H"):
            raise ValueError(f"unknown field {field!r}")
        self.cell = tuple(cell)
        self.component = int(component)
        self.field = field
        self.values = []

    def __call__(self, event):
        array = getattr(event.fields, self.field)
        self.values.append(float(array[self.cell + (self.component,)]))
