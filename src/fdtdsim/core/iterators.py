"""
Grid traversal strategies.

The simulation engine never loops over cells itself.  It hands a kernel
to a traversal object, which decides how the block of cells is split and
in which order (or on which worker) the pieces run.  Kernels receive
*slices*, never single ints, so the per-cell work is vectorised with
numpy along the two inner axes:

    kernel(si, sj, sk)      3-D block visit / reduction
    kernel(sa, sb)          face visit over the two free axes

Splitting is always along the first (outermost) axis of the block, one
slab per index, matching the "outer loop, vectorised inner" layout of the
field updates.  Each stage of a time step only writes arrays it does not
read, so slabs are independent and can run concurrently.  Reductions
return per-slab partial sums that are combined after every slab has
finished with ``math.fsum``, which makes the total independent of the
order in which the slabs completed.
"""

import math
import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor

from .indexbounds import IndexBounds


def _slabs(start, stop, count):
    """Split ``[start, stop)`` into at most *count* contiguous slices."""
    n = stop - start
    if n <= 0:
        return []
    count = max(1, min(count, n))
    edges = [start + (n * p) // count for p in range(count + 1)]
    return [slice(a, b) for a, b in zip(edges[:-1], edges[1:]) if b > a]


def _free_axes(axis):
    return tuple(a for a in range(3) if a != axis)


class Traversal(ABC):
    """Abstract iteration capability over blocks of grid cells."""

    @abstractmethod
    def for_each(self, bounds: IndexBounds, kernel) -> None:
        """Run ``kernel(si, sj, sk)`` so that every cell of *bounds* is visited once."""

    @abstractmethod
    def for_except(self, bounds: IndexBounds, axis: int, kernel) -> None:
        """Run ``kernel(sa, sb)`` over the two axes of *bounds* other than *axis*."""

    @abstractmethod
    def sum(self, bounds: IndexBounds, kernel) -> float:
        """Return the sum of ``kernel(si, sj, sk)`` partials over *bounds*."""

    # Convenience wrappers named after the excluded axis
    def for_except_i(self, bounds, kernel):
        self.for_except(bounds, 0, kernel)

    def for_except_j(self, bounds, kernel):
        self.for_except(bounds, 1, kernel)

    def for_except_k(self, bounds, kernel):
        self.for_except(bounds, 2, kernel)

    def close(self):
        """Release worker resources (no-op for in-thread traversals)."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class SequentialTraversal(Traversal):
    """Visit one i-slab at a time, in increasing i order, on the calling thread."""

    def for_each(self, bounds, kernel):
        if bounds.is_empty():
            return
        _, sj, sk = bounds.slices()
        for i in bounds.axis_range(0):
            kernel(slice(i, i + 1), sj, sk)

    def for_except(self, bounds, axis, kernel):
        a, b = _free_axes(axis)
        if bounds.lengths[a] == 0 or bounds.lengths[b] == 0:
            return
        sb = slice(bounds.lower[b], bounds.upper[b])
        for n in bounds.axis_range(a):
            kernel(slice(n, n + 1), sb)

    def sum(self, bounds, kernel):
        if bounds.is_empty():
            return 0.0
        _, sj, sk = bounds.slices()
        return math.fsum(
            float(kernel(slice(i, i + 1), sj, sk)) for i in bounds.axis_range(0)
        )


class ParallelTraversal(Traversal):
    """Split the outer axis into contiguous slabs and run them on a thread pool.

    numpy releases the GIL inside array arithmetic, so the slabs overlap
    in practice.  Every call returns only after all of its slabs finished,
    which is the barrier between dependent stages of a time step.

    Parameters
    ----------
    workers : int, optional
        Number of worker threads (default: ``os.cpu_count()``).
    """

    def __init__(self, workers=None):
        self.workers = max(1, workers or os.cpu_count() or 1)
        self._pool = ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="fdtdsim"
        )

    def _run(self, jobs):
        # list() waits for every job and re-raises the first worker exception
        return list(self._pool.map(lambda job: job(), jobs))

    def for_each(self, bounds, kernel):
        if bounds.is_empty():
            return
        _, sj, sk = bounds.slices()
        slabs = _slabs(bounds.lower[0], bounds.upper[0], self.workers)
        self._run([lambda si=si: kernel(si, sj, sk) for si in slabs])

    def for_except(self, bounds, axis, kernel):
        a, b = _free_axes(axis)
        if bounds.lengths[a] == 0 or bounds.lengths[b] == 0:
            return
        sb = slice(bounds.lower[b], bounds.upper[b])
        slabs = _slabs(bounds.lower[a], bounds.upper[a], self.workers)
        self._run([lambda sa=sa: kernel(sa, sb) for sa in slabs])

    def sum(self, bounds, kernel):
        if bounds.is_empty():
            return 0.0
        _, sj, sk = bounds.slices()
        slabs = _slabs(bounds.lower[0], bounds.upper[0], self.workers)
        partials = self._run([lambda si=si: kernel(si, sj, sk) for si in slabs])
        return math.fsum(float(p) for p in partials)

    def close(self):
        self._pool.shutdown(wait=True)
