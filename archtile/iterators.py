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

""" Combinatorial mesh item neighborhood iterators.

Adjacent/incident mesh items are visited in the order determined by the
mesh orientation. Face loops are traversed counter-clockwise, vertex
neighborhoods clockwise (the direction of ``next.opposite``).

Note
----
When applied to a :class:`~archtile.hds.Mesh` instance, the iterators
will **skip** removed mesh items. This is an alternative to iteration over
the tables :attr:`~archtile.hds.Mesh.halfedges` and
:attr:`~archtile.hds.Mesh.vertices` which contain :obj:`None` entries.
"""

from archtile.hds import Mesh


def verts(obj):
    """ Vertex id iterator.

    The returned iterator traverses vertex ids depending on the type of
    `obj`:

    .. table::
       :width: 100%
       :widths: 20, 80

       ================= ==============================================
       :class:`Halfedge` targets of the face loop starting at `obj`
       ----------------- ----------------------------------------------
       :class:`Mesh`     ascending ids of live, non-isolated vertices
       ================= ==============================================

    Parameters
    ----------
    obj : Halfedge or Mesh
        The base object.

    Yields
    ------
    int
    """
    if isinstance(obj, Mesh):
        return (h._vtx for h in obj.all_vertices())

    return (h._vtx for h in obj._mesh.face_circulator(obj))


def halfs(obj):
    """ Halfedge iterator.

    .. table::
       :width: 100%
       :widths: 20, 80

       ================= ==============================================
       :class:`Halfedge` face loop starting at `obj`
       ----------------- ----------------------------------------------
       :class:`Mesh`     in-order traversal of live halfedges
       ================= ==============================================

    Parameters
    ----------
    obj : Halfedge or Mesh
        The base object.

    Yields
    ------
    Halfedge
    """
    if isinstance(obj, Mesh):
        return (h for h in obj.halfedges if h is not None)

    return obj._mesh.face_circulator(obj)


def edges(obj):
    """ Edge iterator.

    Edges are represented by halfedges.

    .. table::
       :width: 100%
       :widths: 20, 80

       ================= ==============================================
       :class:`Halfedge` halfedges pointing to the target of `obj`
       ----------------- ----------------------------------------------
       :class:`Mesh`     one halfedge per edge, see
                         :meth:`~archtile.hds.Mesh.all_edges`
       ================= ==============================================

    Parameters
    ----------
    obj : Halfedge or Mesh
        The base object.

    Yields
    ------
    Halfedge
    """
    if isinstance(obj, Mesh):
        return obj.all_edges()

    return obj._mesh.vertex_circulator(obj)


def faces(obj):
    """ Face id iterator.

    Border faces are reported when iterating around a vertex but skipped
    when iterating over a mesh.

    .. table::
       :width: 100%
       :widths: 20, 80

       ================= ==============================================
       :class:`Halfedge` faces around the target of `obj`
       ----------------- ----------------------------------------------
       :class:`Mesh`     ascending ids of faces that are not border faces
       ================= ==============================================

    Parameters
    ----------
    obj : Halfedge or Mesh
        The base object.

    Yields
    ------
    int
    """
    if isinstance(obj, Mesh):
        return (h._fac for h in obj.all_faces())

    return (h._fac for h in obj._mesh.vertex_circulator(obj))
