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

""" Growing tilings from regular polygons.

A tiling is grown from a single regular polygon, see :func:`seed`, by
attaching regular polygons along its border. Vertex payloads are planar
coordinate vectors of type :class:`~numpy.ndarray`.

Attaching polygons around a vertex may leave *cuts*, consecutive border
edges whose far endpoints coincide. These are zipped by
:func:`close_cuts`.
"""

import math

import numpy as np

import archtile.iterators as it
from archtile.hds import Mesh, PreconditionError
from archtile.math import cross, dot, norm, rotate, unit, xy


# Tolerance for angle comparisons (radians).
ANGLE_TOL = 0.005

# Polygons are accepted by fits_cavity up to this angle deficit.
FIT_TOL = 0.05


def internal_angle(n):
    """ Interior angle of a regular n-gon (radians).
    """
    return math.pi - 2.0 * math.pi / n


def face_angle(h):
    """ Turning angle.

    Parameters
    ----------
    h : Halfedge
        Some halfedge.

    Returns
    -------
    float
        The angle enclosed by `h` and its successor inside the face of
        `h`. The value is negative if the successor turns to the right,
        i.e., for reflex corners.
    """
    u = unit(xy(h.vertex) - xy(h.prev.vertex))
    v = unit(xy(h.next.vertex) - xy(h.vertex))

    ang = math.pi - math.acos(min(1.0, max(-1.0, dot(u, v))))

    return -ang if cross(u, v) < 0 else ang


def poly_from_side(p, n, s, v=None):
    """ Regular polygon from first vertex.

    Parameters
    ----------
    p : array_like
        First vertex.
    n : int
        Number of sides.
    s : float
        Side length.
    v : array_like, optional
        Direction of the first side, the x-axis by default.

    Returns
    -------
    list[~numpy.ndarray]
        Vertex positions in counter-clockwise order.
    """
    v = unit(xy((1.0, 0.0) if v is None else v)) * s
    p = xy(p)

    ang = 2.0 * math.pi / n
    cos, sin = math.cos(ang), math.sin(ang)

    poly = [p]

    for _ in range(n - 1):
        p = p + v
        poly.append(p)
        v = rotate(v, cos, sin)

    return poly


def poly_from_center(p, n, s, v=None):
    """ Regular polygon from center.

    Same as :func:`poly_from_side` but `p` is the center of the polygon.
    """
    ang = 2.0 * math.pi / n
    radius = s / 2.0 / math.sin(ang / 2.0)

    u = unit(xy((1.0, 0.0) if v is None else v)) * radius
    u = rotate(u, math.pi / 2.0 - ang / 2.0)

    return poly_from_side(xy(p) - u, n, s, v)


def seed(n, center=(0.0, 0.0), side=1.0):
    """ Single polygon tiling.

    Parameters
    ----------
    n : int
        Number of sides of the regular polygon.
    center : array_like, optional
        Center of the polygon.
    side : float, optional
        Side length.

    Returns
    -------
    Mesh
        Tiling with one face and one border face.
    """
    return Mesh(poly_from_center(center, n, side), [list(range(n))])


def cavity(h, ang=None):
    """ Border cavity.

    Parameters
    ----------
    h : Halfedge
        A border halfedge.
    ang : float, optional
        Required turning angle.

    Returns
    -------
    list[Halfedge]
        The maximal run of consecutive halfedges around `h` connected by
        positive turning angles. If `ang` is given, angles have to be
        equal to `ang`, otherwise straight angles break the run.
    """
    if ang is not None:
        def accept(g):
            a = face_angle(g)
            return a > 0 and abs(a - ang) < ANGLE_TOL
    else:
        def accept(g):
            a = face_angle(g)
            return a > 0 and abs(math.pi - a) > ANGLE_TOL

    vtx = h.vtx

    while accept(h.prev) and h.prev.vtx != vtx:
        h = h.prev

    result = [h]
    vtx = h.vtx

    while accept(h) and h.next.vtx != vtx:
        h = h.next
        result.append(h)

    return result


def fits_cavity(h, n):
    """ Test if a regular n-gon fits a border cavity.

    Parameters
    ----------
    h : Halfedge
        A border halfedge.
    n : int
        Number of sides.

    Returns
    -------
    bool
        :obj:`False` if one of the first `n` turning angles of the cavity
        around `h` is too small for the interior angle of the polygon.
    """
    theta = internal_angle(n)
    vtx = h.vtx

    while face_angle(h.prev) > 0 and h.prev.vtx != vtx:
        h = h.prev

    vtx = h.vtx

    for _ in range(n):
        ang = face_angle(h)

        if ang <= 0 or h.next.vtx == vtx:
            break

        if ang + FIT_TOL < theta:
            return False

        h = h.next

    return True


def attach_poly(h, n):
    """ Attach regular polygon.

    The new polygon shares the edge of `h` and, if the border forms a
    cavity matching the interior angle of the polygon, all edges of the
    cavity.

    Parameters
    ----------
    h : Halfedge
        A border halfedge.
    n : int
        Number of sides of the polygon.

    Returns
    -------
    Halfedge
        A halfedge of the new face.
    """
    mesh = h._mesh

    c = cavity(h, internal_angle(n))
    h = c[0]

    p, q = xy(h.vertex), xy(h.opposite.vertex)
    pts = poly_from_side(q, n, norm(p - q), p - q)

    i = mesh.split_face(h.prev, c[-1])

    # The cavity is closed by a single new edge. That edge and the one
    # added by split_face coincide.
    if n == len(c):
        i = i.prev
        mesh.join_vertex(i.next)
    else:
        h = c[-1]

        for k in range(len(c) + 1, n):
            h = mesh.split_vertex(h.next.opposite, h, pts[k])

    return i


def close_cuts(mesh, tol=1e-2):
    """ Zip a cut.

    Looks for a pair of consecutive border halfedges whose far endpoints
    coincide. The first pair found is identified.

    Parameters
    ----------
    mesh : Mesh
        The tiling.
    tol : float, optional
        Maximum distance of coincident vertices.

    Returns
    -------
    bool
        :obj:`True` if a cut was closed.
    """
    for h in mesh.all_border_faces():
        for g in it.halfs(h):
            if norm(xy(g.prev.vertex) - xy(g.next.vertex)) < tol:
                f = mesh.split_face(g.prev, g.next)
                f = mesh.join_vertex(f)
                mesh.join_face(f)
                return True

    return False


def make_node(mesh, vertex, completion, tol=1e-2):
    """ Complete a border vertex.

    Parameters
    ----------
    mesh : Mesh
        The tiling.
    vertex : int
        Id of a border vertex.
    completion : sequence of int
        Number of sides of the polygons to be attached around `vertex`,
        see :func:`archtile.nodes.completion_alternatives`.
    tol : float, optional
        Passed on to :func:`close_cuts`.

    Raises
    ------
    PreconditionError
        If `vertex` is not on the border of the tiling.
    """
    for n in completion:
        hv = mesh.vertex_halfedge(vertex)
        h = None if hv is None else next(
            (g for g in it.edges(hv) if g.border), None)

        if h is None:
            raise PreconditionError(f'vertex #{vertex} is not a border vertex')

        attach_poly(h, n)

    while close_cuts(mesh, tol):
        pass


def create_dual(mesh):
    """ Dual tiling.

    Vertices of the dual are the centroids of the faces of `mesh`. Every
    vertex of `mesh` that is surrounded by faces that are not border faces
    gives rise to a dual face.

    Parameters
    ----------
    mesh : Mesh
        The tiling.

    Returns
    -------
    Mesh
        The dual tiling. Faces are counter-clockwise oriented.
    """
    centroid = dict()

    for h in mesh.all_faces():
        centroid[h.fac] = np.mean([xy(p) for p in mesh.face_vertices(h)],
                                  axis=0)

    dualface = []

    for h in mesh.all_vertices():
        f = list(it.faces(h))

        # Vertex circulation is clockwise.
        if all(fac in centroid for fac in f):
            dualface.append(f[::-1])

    # Only centroids of faces used by some dual face become vertices.
    ids = sorted({fac for f in dualface for fac in f})
    remap = {fac: k for k, fac in enumerate(ids)}

    return Mesh([centroid[fac] for fac in ids],
                [[remap[fac] for fac in f] for f in dualface])
