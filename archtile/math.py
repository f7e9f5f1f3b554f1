# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Basic planar vector math.

For basic computations, specialized non-vectorized functions offer better
performance than some NumPy functions. All vectors are planar, i.e., of
shape (2, ).
"""

import math
import numpy as np


def xy(payload):
    """ Planar coordinates of a vertex payload.

    Parameters
    ----------
    payload : object
        A mapping with keys 'x' and 'y', an object with attributes `x` and
        `y`, or a sequence whose first two entries are coordinates.

    Returns
    -------
    ~numpy.ndarray, shape (2, )
        Coordinate vector (a new array).

    Raises
    ------
    TypeError
        If `payload` does not provide coordinates.
    """
    if isinstance(payload, dict):
        return np.array([payload['x'], payload['y']], dtype=float)

    if hasattr(payload, 'x') and hasattr(payload, 'y'):
        return np.array([payload.x, payload.y], dtype=float)

    try:
        return np.array(payload[:2], dtype=float)
    except (TypeError, IndexError):
        raise TypeError(f'no planar coordinates in {payload!r}')


def cross(u, v):
    """ Planar cross product.

    Parameters
    ----------
    u : array_like, shape (2, )
        Vector in :math:`\\mathbb{R}^2`.
    v : array_like, shape (2, )
        Vector in :math:`\\mathbb{R}^2`.

    Returns
    -------
    float
        The z-component of the cross product of `u` and `v`, positive if
        `v` points to the left of `u`.
    """
    return u[0]*v[1] - u[1]*v[0]


def dot(u, v):
    r""" Dot product.

    Parameters
    ----------
    u : array_like, shape (2, )
        Vector in :math:`\mathbb{R}^2`.
    v : array_like, shape (2, )
        Vector in :math:`\mathbb{R}^2`.

    Returns
    -------
    float
        Inner product :math:`\mathbf{u}^T \mathbf{v}`.
    """
    return u[0]*v[0] + u[1]*v[1]


def norm(u):
    """ Length of vector.

    Note
    ----
    Only the first two entries of `u` are taken into account.
    """
    return math.hypot(u[0], u[1])


def unit(u):
    """ In-place vector normalization.

    Convenience function to normalize a vector. Modifies the input
    argument!

    Parameters
    ----------
    u : ~numpy.ndarray, shape (2, )
        Vector in :math:`\\mathbb{R}^2`.

    Returns
    -------
    ~numpy.ndarray, shape (2, )
        The normalized input vector (not a normalized copy).

    Note
    ----
    No error checking (division by zero, input vector shape) is
    performed.
    """
    u /= norm(u)
    return u


def rotate(x, phi, sin_phi=None):
    r""" Rotate planar vector.

    Counter-clockwise rotation for :math:`\varphi > 0`.

    Parameters
    ----------
    x : ~numpy.ndarray, shape (2, )
        Vector to be rotated.
    phi : float
        Rotation angle in radians or :math:`\cos(\varphi)`.
    sin_phi : float, optional
        :math:`\sin(\varphi)`.

    Returns
    -------
    ~numpy.ndarray
        The rotated vector.

    Note
    ----
    Evaluation of trigonometric functions can be avoid by providing
    the optional argument `sin_phi`. In this case `phi` is interpreted
    as :math:`\cos(\varphi)`.
    """
    if sin_phi is not None:
        cphi = phi
        sphi = sin_phi
    else:
        cphi = math.cos(phi)
        sphi = math.sin(phi)

    return np.array([x[0]*cphi - x[1]*sphi, x[0]*sphi + x[1]*cphi])
