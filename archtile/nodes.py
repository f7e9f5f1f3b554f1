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

""" Archimedean node classification.

The vertices of a uniform (Archimedean) tiling are surrounded by regular
polygons. Listing the number of sides of these polygons in circulation
order gives the *node type* of a vertex. Up to rotation there are twenty
such sequences (mirror images are listed separately) collected in
:data:`ARCH_NODES`. Their letter codes are given in :data:`ARCH_CODES`.

A vertex on the border of a partial tiling has an incomplete node type.
Border faces are reported as zero entries (*gaps*).
"""

import archtile.iterators as it
from archtile.seqset import SequenceSet


ARCH_NODES = ((3, 12, 12), (12, 3, 12),         # G
              (4, 6, 12), (4, 12, 6),           # H
              (4, 8, 8), (8, 4, 8),             # J
              (6, 6, 6),                        # K
              (3, 3, 4, 12), (3, 3, 12, 4),     # L
              (3, 4, 3, 12),                    # M
              (3, 4, 4, 6), (6, 4, 4, 3),       # N
              (3, 4, 6, 4),                     # P
              (3, 3, 6, 6),                     # Q
              (3, 6, 3, 6),                     # R
              (4, 4, 4, 4),                     # S
              (3, 3, 3, 4, 4),                  # T
              (3, 3, 4, 3, 4),                  # U
              (3, 3, 3, 3, 6),                  # V
              (3, 3, 3, 3, 3, 3))               # W

ARCH_CODES = 'GGHHJJKLLMNNPQRSTUVW'


def sub_circulation(a, b):
    """ Rotation offset of a sequence inside a cyclic sequence.

    Parameters
    ----------
    a : sequence of int
        Cyclic sequence.
    b : sequence of int
        Sequence to be searched in `a`.

    Returns
    -------
    int
        The smallest index `i` such that ``b[j] == a[(i + j) % len(a)]``
        holds for all `j`, -1 if there is no such index or if `b` is longer
        than `a`.


    >>> sub_circulation([3, 4, 3, 12], [4, 3, 12])
    1
    """
    n = len(a)

    if n < len(b):
        return -1

    for i in range(n):
        if all(x == a[(i + j) % n] for j, x in enumerate(b)):
            return i

    return -1


def vertex_node_type(h):
    """ Node type of a vertex.

    Parameters
    ----------
    h : Halfedge
        Halfedge pointing towards the vertex in question.

    Returns
    -------
    list[int]
        Number of sides of the faces around the vertex in circulation
        order. Border faces are represented by zero. If there is a border
        face, the list is rotated such that a zero comes first.
    """
    ret = [0 if g.border else sum(1 for _ in it.halfs(g))
           for g in it.edges(h)]

    if 0 in ret:
        k = ret.index(0)
        ret = ret[k:] + ret[:k]

    return ret


def node_code(h):
    """ Catalog index of a vertex.

    Parameters
    ----------
    h : Halfedge
        Halfedge pointing towards the vertex in question.

    Returns
    -------
    int
        Index into :data:`ARCH_NODES` of the first entry matching the node
        type of the vertex. The value -1 is returned for border vertices
        and for vertices that do not match any entry.
    """
    vtype = vertex_node_type(h)

    if vtype[0] == 0:
        return -1

    for i, node in enumerate(ARCH_NODES):
        if sub_circulation(node, vtype) != -1:
            return i

    return -1


def arch_match(vtype):
    """ Catalog entries compatible with a node type.

    Gaps are stripped before matching, i.e., the remaining entries have to
    appear as a contiguous run of some catalog entry.

    Parameters
    ----------
    vtype : sequence of int
        Vertex node type.

    Returns
    -------
    list[int]
        Ascending indices into :data:`ARCH_NODES`.
    """
    prefix = [n for n in vtype if n != 0]

    return [i for i, node in enumerate(ARCH_NODES)
            if sub_circulation(node, prefix) >= 0]


def completion(vtype, match):
    """ Polygons completing a node.

    Parameters
    ----------
    vtype : sequence of int
        Vertex node type.
    match : int
        Index into :data:`ARCH_NODES`.

    Returns
    -------
    list[int]
        Number of sides of the polygons that fill the gap of `vtype`
        according to catalog entry `match`, in circulation order.
        :obj:`None` if `vtype` is not compatible with the entry.
    """
    b = [n for n in vtype if n != 0]
    a = list(ARCH_NODES[match])

    k = sub_circulation(a, b)

    if k < 0:
        return None

    k += len(b)

    return (a + a)[k:k + len(a) - len(b)]


def completion_alternatives(vtype):
    """ Distinct ways to complete a node.

    Parameters
    ----------
    vtype : sequence of int
        Vertex node type as returned by :func:`vertex_node_type`.

    Returns
    -------
    matches : list[int]
        Indices into :data:`ARCH_NODES`.
    completions : list[list[int]]
        The completion for the corresponding entry of `matches`.

    Note
    ----
    Catalog entries leading to a completion that was already found are
    dropped from `matches`. Both lists are empty for vertices without
    gap.
    """
    if not vtype or vtype[0] != 0:
        return [], []

    matches = []
    completions = []
    compset = SequenceSet()

    for i in arch_match(vtype):
        comp = completion(vtype, i)

        if comp not in compset:
            matches.append(i)
            completions.append(comp)
            compset.add(comp)

    return matches, completions


def is_border_vertex(h):
    """ Border vertex test.

    Parameters
    ----------
    h : Halfedge
        Halfedge pointing towards the vertex in question.

    Returns
    -------
    bool
        :obj:`True` if a border face is incident with the vertex.
    """
    return any(g.border for g in it.edges(h))


def similar_vertices(mesh, vtype):
    """ Border vertices of a given node type.

    Parameters
    ----------
    mesh : Mesh
        The tiling.
    vtype : sequence of int
        Vertex node type.

    Returns
    -------
    list[int]
        Ids of border vertices whose node type equals `vtype`.
    """
    vtype = list(vtype)

    return [h.vtx for h in mesh.all_vertices()
            if is_border_vertex(h) and vertex_node_type(h) == vtype]


def single_choice_vertices(mesh):
    """ Border vertices with a unique catalog match.

    Returns
    -------
    list[int]
        Ids of border vertices whose node type matches exactly one entry
        of :data:`ARCH_NODES`.
    """
    return [h.vtx for h in mesh.all_vertices()
            if is_border_vertex(h) and
            len(arch_match(vertex_node_type(h))) == 1]
