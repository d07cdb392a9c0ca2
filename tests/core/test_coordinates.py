"""
Test suite for coordinates.py (Cartesian vector primitives and Yee curls).
"""

import numpy as np

from fdtdsim.core import coordinates as co


def _linear_field(N=5):
    """F = (0, i, j): curl F = (1, 0, 1) everywhere with unit spacing."""
    F = np.zeros((N, N, N, 3))
    ii, jj, _ = np.indices((N, N, N))
    F[..., 1] = ii
    F[..., 2] = jj
    return F


class TestProducts:

    def test_scalar_product(self):
        assert co.ScalarProduct([1.0, 2.0, 3.0], [4.0, 5.0, 6.0]) == 32.0

    def test_scalar_product_is_bilinear_for_complex(self):
        a = np.array([1j, 0.0, 0.0])
        assert co.ScalarProduct(a, a) == -1.0

    def test_block_products_keep_leading_shape(self):
        a = np.ones((2, 3, 4, 3))
        assert co.ScalarProduct(a, a).shape == (2, 3, 4)


class TestShiftIndex:

    def test_int(self):
        assert co.shift_index(4, -1) == 3

    def test_slice(self):
        assert co.shift_index(slice(2, 5), 1) == slice(3, 6)


class TestCurl:

    def test_forward_linear_field(self):
        F = _linear_field()
        s = slice(1, 3)
        curl = co.CurlForward(F, s, s, s)
        assert curl.shape == (2, 2, 2, 3)
        np.testing.assert_allclose(curl[..., 0], 1.0)
        np.testing.assert_allclose(curl[..., 1], 0.0)
        np.testing.assert_allclose(curl[..., 2], 1.0)

    def test_backward_linear_field(self):
        F = _linear_field()
        s = slice(1, 4)
        curl = co.CurlBackward(F, s, s, s)
        np.testing.assert_allclose(curl[..., 0], 1.0)
        np.testing.assert_allclose(curl[..., 2], 1.0)

    def test_single_cell(self):
        F = _linear_field()
        curl = co.CurlBackward(F, 2, 2, 2)
        np.testing.assert_allclose(curl, [1.0, 0.0, 1.0])

    def test_uniform_field_has_no_curl(self):
        F = np.ones((4, 4, 4, 3))
        s = slice(1, 3)
        assert np.all(co.CurlForward(F, s, s, s) == 0.0)
        assert np.all(co.CurlBackward(F, s, s, s) == 0.0)
