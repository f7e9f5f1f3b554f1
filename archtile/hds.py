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

""" Indexed halfedge data structure.

A planar tiling (with or without boundary) is described by four tables
owned by a :class:`Mesh` instance:

    - a :class:`SlotList` of :class:`Halfedge` objects,
    - a :class:`SlotList` of vertex payloads,
    - a :class:`SlotList` that maps face ids to a representative halfedge,
    - and a :class:`SlotList` that maps vertex ids to a representative
      halfedge.

All relations are stored as integer ids into these tables. Deleting an
item clears its slot, later insertions reuse cleared slots before the
tables grow. Open boundaries are closed by synthetic *border faces* whose
ids are collected in :attr:`Mesh.border_faces`.

Note
----
To ease debugging, this module relies on assertions which can slow down
script execution. You can disable assertions by running in optimized mode
via the "-O" command line argument.
"""

from collections import Counter
from copy import deepcopy
from pathlib import Path
from time import time

import archtile.fileio as fileio
import archtile.math as vmath


class SlotList(list):
    """ Sparse index addressed container.

    A :obj:`None` entry marks an unused (tombstoned) slot. Assigning to an
    index past the end of the list grows the list, padding with unused
    slots.


    >>> slots = SlotList([7, None, 9])
    >>> slots.empty_slots(2)
    [1, 3]
    >>> slots[5] = 4
    >>> slots
    [7, None, 9, None, None, 4]
    """

    def __setitem__(self, index, value):
        if isinstance(index, int) and index >= len(self):
            self.extend([None] * (index - len(self) + 1))

        super().__setitem__(index, value)

    def get(self, index):
        """ Slot access without exceptions.

        Parameters
        ----------
        index : int or None
            Slot index.

        Returns
        -------
        object
            The slot value or :obj:`None` for unused slots, a :obj:`None`
            index and indices out of range.
        """
        if index is None or not 0 <= index < len(self):
            return None

        return super().__getitem__(index)

    def empty_slot(self):
        """ Lowest unused index.

        Returns
        -------
        int
            Index of the first unused slot, ``len(self)`` if there is no
            unused slot.
        """
        return self.empty_slots(1)[0]

    def empty_slots(self, n):
        """ Lowest unused indices.

        Unused slots are preferred over indices that require the list to
        grow.

        Parameters
        ----------
        n : int
            Number of requested indices.

        Returns
        -------
        list[int]
            Ascending list of `n` available indices.
        """
        slots = [i for i, item in enumerate(self) if item is None][:n]
        slots.extend(range(len(self), len(self) + n - len(slots)))

        return slots


class Mesh:
    """ Tiling kernel.

    The combinatorics of a tiling are built from a sequence of vertex
    payloads and a sequence of consistently oriented face definitions.

    Parameters
    ----------
    points : sequence, optional
        Vertex payloads. Each payload has to expose planar coordinates,
        see :func:`archtile.math.xy`.
    faces : sequence of sequence of int, optional
        Face definitions, 0-based vertex indexing.

    Raises
    ------
    NonManifoldError
        When trying to initialize a mesh from non-manifold data.
    CorruptStructureError
        If a boundary loop cannot be traced.
    ValueError
        If a face has duplicate vertices or less than three vertices.
    IndexError
        If a face refers to a vertex index out of bounds.


    A single square and its synthetic border face:

    >>> mesh = Mesh([(0, 0), (1, 0), (1, 1), (0, 1)], [[0, 1, 2, 3]])
    >>> mesh.size
    (4, 4, 1)
    >>> len(mesh.border_faces)
    1
    """

    def __init__(self, points=None, faces=None):
        """ Initialize from vertex and face lists.
        """
        CWHITERED = '\33[41m'               # white on red background
        CEND = '\33[0m'

        if points is None and faces is not None:
            msg = "face definitions require 'points' argument != None"
            raise ValueError(msg)

        self._halfs = SlotList()
        self._faceh = SlotList()
        self._border = set()

        # The vertex tables are kept at equal length. An isolated vertex
        # has a payload but no representative halfedge.
        if points is not None:
            self._verts = SlotList(points)
            self._vertexh = SlotList([None] * len(self._verts))
        else:
            self._verts = SlotList()
            self._vertexh = SlotList()

        if faces is not None:
            # Maps directed edges (u, v) to halfedge ids.
            edges = dict()

            for face in faces:
                self._add_face(face, edges)

            self._close_borders()

            # Vertex circulators will not work properly in the presence of
            # non-manifold vertices.
            degree = Counter(h._vtx for h in self._halfs)

            for v, ihe in enumerate(self._vertexh):
                if ihe is None:
                    continue

                star = self.vertex_circulator(self._halfs[ihe])

                if sum(1 for _ in star) != degree[v]:
                    raise NonManifoldError(f'vertex #{v} is non-manifold')

        # Typically one does not expect isolated vertices in a tiling.
        if any(ihe is None for ihe in self._vertexh):
            print(f'{CWHITERED}there are isolated vertices{CEND}')

    def __iter__(self):
        """ Face iterator.

        Visits a representative halfedge of every face that is **not** a
        border face, in order of ascending face ids. Equivalent to
        :meth:`all_faces`.

        Yields
        ------
        Halfedge
        """
        return self.all_faces()

    def __copy__(self):
        """ Shallow mesh copy.

        Equivalent to :meth:`copy`.
        """
        return self.copy()

    def __deepcopy__(self, *args):
        """ Reserved for future use.

        Use :meth:`copy` to copy a halfedge mesh.
        """
        raise NotImplementedError('use .copy() instead')

    def __bool__(self):
        return True

    @property
    def halfedges(self):
        """ Halfedge table.

        Read access to the halfedge table. This list should not be
        modified directly. Removed halfedges leave :obj:`None` entries.

        :type: SlotList[Halfedge]
        """
        return self._halfs

    @property
    def vertices(self):
        """ Vertex payload table.

        Read access to the vertex payloads. Removed vertices leave
        :obj:`None` entries.

        :type: SlotList
        """
        return self._verts

    @property
    def border_faces(self):
        """ Border face ids.

        :type: frozenset[int]
        """
        return frozenset(self._border)

    @property
    def size(self):
        """ Mesh size.

        The value :math:`(v, e, f)` holds the number of live vertices,
        the number of edges, and the number of faces that are **not**
        border faces.

        :type: (int, int, int)
        """
        halfs = sum(1 for h in self._halfs if h is not None)
        assert halfs % 2 == 0

        return (sum(1 for ihe in self._vertexh if ihe is not None),
                halfs // 2,
                sum(1 for _ in self.all_faces()))

    @classmethod
    def read(cls, filename, quiet=True):
        """ Read mesh from file.

        The file type is derived from the file name suffix. JSON files
        hold a snapshot as produced by :meth:`to_snapshot`, OBJ files
        hold vertex coordinates and face definitions.

        Parameters
        ----------
        filename : str
            Name of a '.json' or '.obj' file.
        quiet : bool, optional
            Suppress console output.

        Raises
        ------
        ValueError
            If the suffix of `filename` is not supported.

        Returns
        -------
        Mesh
            Mesh object.
        """
        CBOLD = '\33[1m'                    # bold text, white on black
        CEND = '\33[0m'

        suffix = Path(filename).suffix.lower()

        if suffix not in ('.json', '.obj'):
            raise ValueError(f"unsupported file type '{suffix}'")

        if not quiet:
            start = time()
            print(f'reading {CBOLD}{Path(filename).name}{CEND}', end=' ...')

        if suffix == '.json':
            mesh = cls.from_snapshot(fileio.read_json(filename))
        else:
            points, faces = fileio.read_obj(filename)
            mesh = cls(points, faces)

        if not quiet:
            verts, edges, faces = mesh.size

            print(f' done ({time()-start:.3f} sec)')
            print(f'\t├─ {verts} vertices')
            print(f'\t├─ {edges} edges')
            print(f'\t└─ {faces} faces')

        return mesh

    def write(self, filename, quiet=True):
        """ Write mesh to file.

        Parameters
        ----------
        filename : str
            Name of a '.json' or '.obj' file.
        quiet : bool, optional
            Suppress console output.

        Raises
        ------
        ValueError
            If the suffix of `filename` is not supported.

        Note
        ----
        Writing to an OBJ file drops border faces, tombstones and all
        payload data except planar coordinates. Vertices are renumbered
        densely.
        """
        CBOLD = '\33[1m'                    # bold text, white on black
        CEND = '\33[0m'

        suffix = Path(filename).suffix.lower()

        if suffix not in ('.json', '.obj'):
            raise ValueError(f"unsupported file type '{suffix}'")

        if not quiet:
            start = time()
            print(f'writing {CBOLD}{Path(filename).name}{CEND}', end=' ...')

        if suffix == '.json':
            fileio.write_json(filename, self.to_snapshot())
        else:
            ids = [v for v, ihe in enumerate(self._vertexh) if ihe is not None]
            remap = {v: k for k, v in enumerate(ids)}

            points = [vmath.xy(self._verts[v]) for v in ids]
            faces = [[remap[g._vtx] for g in self.face_circulator(h)]
                     for h in self.all_faces()]

            fileio.write_obj(filename, points, faces)

        if not quiet:
            print(f' done ({time()-start:.3f} sec)')

    def to_snapshot(self):
        """ Flat serializable representation.

        Returns
        -------
        dict
            Dictionary with the keys 'faceh' (face representatives),
            'vertexh' (vertex representatives), 'halfedge' (a dictionary
            of five ids per halfedge or :obj:`None`), 'vertex' (vertex
            payloads) and 'borderFaces' (sorted border face ids).

        Note
        ----
        Tables are copied and payloads are deep copied. Editing the mesh
        afterwards does not change the snapshot.
        """
        return {
            'faceh': list(self._faceh),
            'vertexh': list(self._vertexh),
            'halfedge': [None if h is None else h.to_dict()
                         for h in self._halfs],
            'vertex': deepcopy(list(self._verts)),
            'borderFaces': sorted(self._border),
        }

    @classmethod
    def from_snapshot(cls, snapshot):
        """ Rebuild mesh from snapshot.

        Ids and unused slots are reproduced exactly.

        Parameters
        ----------
        snapshot : dict
            A dictionary as returned by :meth:`to_snapshot`.

        Returns
        -------
        Mesh
            Newly created mesh. Its halfedges refer to this mesh.
        """
        mesh = cls()

        mesh._faceh.extend(snapshot['faceh'])
        mesh._vertexh.extend(snapshot['vertexh'])
        mesh._verts.extend(deepcopy(snapshot['vertex']))
        mesh._halfs.extend(None if data is None
                           else Halfedge.from_dict(data, mesh)
                           for data in snapshot['halfedge'])
        mesh._border.update(snapshot['borderFaces'])

        # Vertex tables of snapshots written elsewhere may differ in length.
        n = max(len(mesh._verts), len(mesh._vertexh))
        mesh._verts.extend([None] * (n - len(mesh._verts)))
        mesh._vertexh.extend([None] * (n - len(mesh._vertexh)))

        return mesh

    def clone(self, mesh):
        """ In-place mesh copy.

        Implements assignment operator like behavior. The combinatorics
        and payloads of `mesh` replace those of this mesh.

        Parameters
        ----------
        mesh : Mesh
            The source mesh.
        """
        other = Mesh.from_snapshot(mesh.to_snapshot())

        self._halfs = other._halfs
        self._verts = other._verts
        self._faceh = other._faceh
        self._vertexh = other._vertexh
        self._border = other._border

        for h in self._halfs:
            if h is not None:
                h._mesh = self

    def copy(self):
        """ Mesh copy.

        Returns
        -------
        Mesh
            Independent copy with identical ids.
        """
        return type(self).from_snapshot(self.to_snapshot())

    def all_vertices(self):
        """ Vertex iterator.

        Yields
        ------
        Halfedge
            Representative halfedge (pointing towards the vertex) of every
            live, non-isolated vertex in order of ascending vertex ids.
        """
        return (self._halfs[ihe] for ihe in self._vertexh if ihe is not None)

    def all_faces(self):
        """ Face iterator.

        Yields
        ------
        Halfedge
            Representative halfedge of every live face that is not a
            border face.
        """
        return (self._halfs[ihe] for f, ihe in enumerate(self._faceh)
                if ihe is not None and f not in self._border)

    def all_border_faces(self):
        """ Border face iterator.

        Yields
        ------
        Halfedge
            Representative halfedge of every border face.
        """
        return (self._halfs[ihe] for f, ihe in enumerate(self._faceh)
                if ihe is not None and f in self._border)

    def all_edges(self):
        """ Edge iterator.

        An undirected edge is a pair of opposite halfedges. This iterator
        yields exactly one of the two, the one with the smaller index.

        Yields
        ------
        Halfedge
        """
        return (h for i, h in enumerate(self._halfs)
                if h is not None and h._opp >= i)

    def face_circulator(self, halfedge):
        """ Face circulator.

        Visits the halfedges bounding the face of `halfedge`, starting and
        ending at `halfedge`.

        Parameters
        ----------
        halfedge : Halfedge
            Start of the circulation.

        Raises
        ------
        CorruptStructureError
            If the halfedge loop does not close.

        Yields
        ------
        Halfedge
            Next halfedge of the face loop.

        Note
        ----
        The traversed face may not be edited while the circulation is in
        progress.
        """
        fac = halfedge._fac
        h = halfedge

        for _ in range(len(self._halfs)):
            if h is None or h._fac != fac:
                raise CorruptStructureError(f'face #{fac} is corrupt')

            yield h
            h = self._halfs.get(h._nxt)

            if h is halfedge:
                return

        raise CorruptStructureError(f'face #{fac} loop does not close')

    def vertex_circulator(self, halfedge):
        """ Vertex circulator.

        Visits the halfedges pointing towards the vertex of `halfedge`,
        starting and ending at `halfedge`.

        Parameters
        ----------
        halfedge : Halfedge
            Start of the circulation.

        Raises
        ------
        CorruptStructureError
            If the vertex circulation does not close.

        Yields
        ------
        Halfedge
            Next incoming halfedge.
        """
        vtx = halfedge._vtx
        h = halfedge

        for _ in range(len(self._halfs)):
            if h is None or h._vtx != vtx:
                raise CorruptStructureError(f'vertex #{vtx} is corrupt')

            yield h
            h = self._halfs.get(h._nxt)

            if h is not None:
                h = self._halfs.get(h._opp)

            if h is halfedge:
                return

        raise CorruptStructureError(f'vertex #{vtx} loop does not close')

    def face_vertices(self, halfedge):
        """ Vertex payloads of a face.

        Parameters
        ----------
        halfedge : Halfedge
            Halfedge of the face in question.

        Returns
        -------
        list
            Payloads in face circulation order starting with the target
            of `halfedge`.
        """
        return [self._verts[h._vtx] for h in self.face_circulator(halfedge)]

    def face_halfedge(self, face):
        """ Representative halfedge of a face or :obj:`None`.
        """
        return self._halfs.get(self._faceh.get(face))

    def vertex_halfedge(self, vertex):
        """ Representative halfedge of a vertex or :obj:`None`.

        The returned halfedge points towards `vertex`.
        """
        return self._halfs.get(self._vertexh.get(vertex))

    def find_halfedge(self, src, dst):
        """ Find halfedge connecting two vertices.

        Parameters
        ----------
        src : int
            Id of the origin vertex.
        dst : int
            Id of the target vertex.

        Returns
        -------
        Halfedge
            The halfedge from `src` to `dst` or :obj:`None` if the
            vertices are not adjacent.
        """
        h = self.vertex_halfedge(dst)

        if h is None:
            return None

        for g in self.vertex_circulator(h):
            if self._halfs[g._opp]._vtx == src:
                return g

        return None

    def join_face(self, halfedge):
        """ Merge adjacent faces.

        Deletes the edge of `halfedge` and merges the faces on both sides.
        The merged face keeps the id of the face of `halfedge`.

        Parameters
        ----------
        halfedge : Halfedge
            Halfedge of the edge to be deleted.

        Raises
        ------
        PreconditionError
            If both sides of the edge belong to the same face.
        CorruptStructureError
            If face or vertex representatives cannot be repaired.

        Returns
        -------
        Halfedge
            The successor of `halfedge`, incident with the merged face.
        """
        halfs = self._halfs
        h = halfedge
        g = h.opposite

        if h._fac == g._fac:
            msg = f'edge separates face #{h._fac} from itself'
            raise PreconditionError(msg)

        ih, ig = h.index, g.index
        face, face_g = h._fac, g._fac

        # Replacement candidates have to be collected while the local
        # neighborhood is still intact.
        fcand = (h._prv, h._nxt, g._prv, g._nxt)
        hcand = (g._prv, halfs[h._nxt]._opp)
        gcand = (h._prv, halfs[g._nxt]._opp)

        # All halfedges of the face to the right get assigned to the face
        # on the left hand side.
        for hi in list(self.face_circulator(g)):
            hi._fac = face

        self._faceh[face_g] = None
        self._border.discard(face_g)

        # Remove the pair of halfedges from the face loop.
        halfs[g._prv]._nxt = h._nxt
        halfs[h._prv]._nxt = g._nxt
        halfs[g._nxt]._prv = h._prv
        halfs[h._nxt]._prv = g._prv

        halfs[ih] = None
        halfs[ig] = None

        self._repair_face(face, fcand)
        self._repair_vertex(h._vtx, hcand)
        self._repair_vertex(g._vtx, gcand)

        result = halfs[h._nxt]

        h._invalidate()
        g._invalidate()

        return result

    def split_face(self, h, g):
        """ Insert face diagonal.

        Splits the common face of `h` and `g` in two by connecting their
        target vertices. The halfedges from ``h.next`` up to and including
        `g` are assigned to a new face.

        Parameters
        ----------
        h : Halfedge
            First halfedge of some face.
        g : Halfedge
            Second halfedge of the same face.

        Raises
        ------
        PreconditionError
            If `h` and `g` do not belong to the same face or are equal.

        Returns
        -------
        Halfedge
            The new halfedge on the side of the new face. It points towards
            the target of `h`.
        """
        if h._fac != g._fac:
            msg = f'halfedges belong to faces #{h._fac} and #{g._fac}'
            raise PreconditionError(msg)

        if h is g:
            raise PreconditionError('halfedges have to be different')

        halfs = self._halfs

        run = []

        for k in self.face_circulator(halfs[h._nxt]):
            run.append(k)

            if k is g:
                break

        new_face = self._faceh.empty_slot()
        ih, ig = h.index, g.index
        i, j = halfs.empty_slots(2)

        hi = Halfedge(g._vtx, j, g._nxt, ih, h._fac, self)
        hj = Halfedge(h._vtx, i, h._nxt, ig, new_face, self)

        halfs[i] = hi
        halfs[j] = hj

        for k in run:
            k._fac = new_face

        halfs[g._nxt]._prv = i
        g._nxt = j
        halfs[h._nxt]._prv = j
        h._nxt = i

        self._faceh[new_face] = j
        self._faceh[hi._fac] = i
        self._vertexh[hi._vtx] = i
        self._vertexh[hj._vtx] = j

        return hj

    def join_vertex(self, halfedge):
        """ Edge collapse.

        Merges the target vertex of `halfedge` into its origin vertex.
        The edge of `halfedge` and the target vertex are deleted.

        Parameters
        ----------
        halfedge : Halfedge
            Halfedge of the edge to be collapsed.

        Raises
        ------
        PreconditionError
            If the opposite halfedge is the predecessor of `halfedge`.
        CorruptStructureError
            If face or vertex representatives cannot be repaired.

        Returns
        -------
        Halfedge
            The predecessor of `halfedge`, pointing towards the surviving
            vertex.
        """
        halfs = self._halfs
        h = halfedge
        g = h.opposite

        if halfs[h._prv] is g:
            raise PreconditionError('cannot collapse a dangling edge loop')

        ih, ig = h.index, g.index
        old_vtx, new_vtx = h._vtx, g._vtx

        for k in list(self.vertex_circulator(h)):
            k._vtx = new_vtx

        hcand = (h._prv, h._nxt)
        gcand = (g._prv, g._nxt)
        vcand = (h._prv, g._prv, halfs[h._nxt]._opp, halfs[g._nxt]._opp)

        # Field values are read at the time of assignment. This keeps the
        # loops intact even if g is the successor of h.
        halfs[h._prv]._nxt = h._nxt
        halfs[h._nxt]._prv = h._prv
        halfs[g._prv]._nxt = g._nxt
        halfs[g._nxt]._prv = g._prv

        self._vertexh[old_vtx] = None
        self._verts[old_vtx] = None

        halfs[ih] = None
        halfs[ig] = None

        self._repair_face(h._fac, hcand)
        self._repair_face(g._fac, gcand)
        self._repair_vertex(new_vtx, vcand)

        result = halfs[h._prv]

        h._invalidate()
        g._invalidate()

        return result

    def split_vertex(self, h, g, payload):
        """ Vertex split.

        Splits the common target vertex `w` of `h` and `g` in two vertices
        connected by a new edge. The incoming halfedges from `h` (inclusive)
        to `g` (exclusive) are moved to the new vertex.

        Parameters
        ----------
        h : Halfedge
            First halfedge pointing towards some vertex `w`.
        g : Halfedge
            Second halfedge pointing towards `w`.
        payload : object
            Payload of the new vertex.

        Raises
        ------
        PreconditionError
            If `h` and `g` do not point to the same vertex or are equal.
        CorruptStructureError
            If `g` cannot be reached from `h`.

        Returns
        -------
        Halfedge
            The new halfedge from `w` to the new vertex.
        """
        if h._vtx != g._vtx:
            msg = f'halfedges point to vertices #{h._vtx} and #{g._vtx}'
            raise PreconditionError(msg)

        if h is g:
            raise PreconditionError('halfedges have to be different')

        halfs = self._halfs

        # Rotate clockwise from h until g is reached.
        segment = []
        k = h

        while k is not g:
            segment.append(k)
            k = halfs[halfs[k._opp]._prv]

            if k is h or len(segment) > len(halfs):
                msg = f'vertex #{h._vtx} circulation is corrupt'
                raise CorruptStructureError(msg)

        ih, ig = h.index, g.index

        # Isolated vertices have a payload but no representative, only
        # unused payload slots are free.
        new_vtx = self._verts.empty_slot()

        self._verts[new_vtx] = payload
        self._vertexh[h._vtx] = ig
        self._vertexh[new_vtx] = ih

        for k in segment:
            k._vtx = new_vtx

        i, j = halfs.empty_slots(2)

        hi = Halfedge(g._vtx, j, h._nxt, ih, h._fac, self)
        hj = Halfedge(new_vtx, i, g._nxt, ig, g._fac, self)

        halfs[i] = hi
        halfs[j] = hj

        halfs[h._nxt]._prv = i
        halfs[g._nxt]._prv = j
        h._nxt = i
        g._nxt = j

        return hj

    def _add_face(self, face, edges):
        """ Append the halfedge loop of a face.

        Halfedges are paired with already existing opposite halfedges.
        Border halfedges are not created here, see :meth:`_close_borders`.
        """
        face = [int(v) for v in face]
        n = len(face)

        # Check for degeneracies: All vertices have to be topologically
        # different. If this test is passed there still need to be at
        # least three vertices. Duplicate coordinates are not a problem.
        if len(set(face)) != n:
            raise ValueError('face contains duplicate vertices')

        if n < 3:
            raise ValueError('face has less than three vertices')

        for v in face:
            if not 0 <= v < len(self._verts):
                raise IndexError(f'vertex index {v} out of range')

        base = len(self._halfs)
        fidx = len(self._faceh)
        vprev = face[-1]

        for k, v in enumerate(face):
            if (vprev, v) in edges:
                msg = f'edge ({vprev}, {v}) is non-manifold'
                raise NonManifoldError(msg)

            ihe = base + k
            opp = edges.get((v, vprev))

            if opp is not None:
                self._halfs[opp]._opp = ihe

            edges[vprev, v] = ihe
            self._halfs.append(Halfedge(v, opp, base + (k + 1) % n,
                                        base + (k - 1) % n, fidx, self))
            self._vertexh[v] = ihe

            vprev = v

        self._faceh.append(len(self._halfs) - 1)

    def _close_borders(self):
        """ Synthesize border faces.

        Every loop of unpaired halfedges is closed by a new border face
        so that vertex circulations do not break.
        """
        halfs = self._halfs
        limit = len(halfs)

        # Border halfedges are created paired, the list of candidates does
        # not grow.
        unpaired = [h for h in halfs if h._opp is None]

        for he in unpaired:
            # Already closed as part of an earlier loop.
            if he._opp is not None:
                continue

            # Collect the loop of unpaired halfedges. Walk around the
            # target vertex of he until the next unpaired halfedge.
            loop = [he]
            members = {he}

            while True:
                nxt = halfs[he._nxt]
                hops = 0

                while nxt._opp is not None:
                    nxt = halfs[halfs[nxt._opp]._nxt]
                    hops += 1

                    if hops > limit:
                        msg = f'vertex #{he._vtx} circulation is corrupt'
                        raise CorruptStructureError(msg)

                if nxt is loop[0]:
                    break

                if nxt in members or len(loop) > limit:
                    raise CorruptStructureError('border loop does not close')

                loop.append(nxt)
                members.add(nxt)
                he = nxt

            # Create border halfedges as opposites of those in loop. They
            # are linked in reverse order.
            n = len(halfs)
            m = len(loop)
            face = len(self._faceh)

            for i, he in enumerate(loop):
                ihe = halfs[he._nxt]._prv
                he._opp = n + i
                halfs.append(Halfedge(loop[(i - 1) % m]._vtx, ihe,
                                      n + (i - 1) % m, n + (i + 1) % m,
                                      face, self))

            self._border.add(face)
            self._faceh.append(n)

    def _repair_face(self, face, candidates):
        """ Replace a removed face representative.
        """
        if self._halfs.get(self._faceh[face]) is not None:
            return

        for ihe in candidates:
            h = self._halfs.get(ihe)

            if h is not None and h._fac == face:
                self._faceh[face] = ihe
                return

        msg = f"can't find replacement halfedge for face #{face}"
        raise CorruptStructureError(msg)

    def _repair_vertex(self, vertex, candidates):
        """ Replace a removed vertex representative.
        """
        if self._halfs.get(self._vertexh[vertex]) is not None:
            return

        for ihe in candidates:
            h = self._halfs.get(ihe)

            if h is not None and h._vtx == vertex:
                self._vertexh[vertex] = ihe
                return

        msg = f"can't find replacement halfedge for vertex #{vertex}"
        raise CorruptStructureError(msg)

    def _check(self):
        """ Perform sanity checks.
        """
        assert len(self._verts) == len(self._vertexh)

        for i, h in enumerate(self._halfs):
            if h is not None:
                assert h._mesh is self
                assert h.index == i

                h._check()

        for f, ihe in enumerate(self._faceh):
            if ihe is not None:
                assert self._halfs[ihe]._fac == f
            else:
                assert f not in self._border

        for v, ihe in enumerate(self._vertexh):
            if ihe is not None:
                assert self._verts[v] is not None
                assert self._halfs[ihe]._vtx == v

        for f in self._border:
            assert self._faceh.get(f) is not None

        # Every live halfedge has to be visited by exactly one face
        # circulation and one vertex circulation.
        faces = Counter()
        verts = Counter()

        for ihe in self._faceh:
            if ihe is not None:
                faces.update(h.index for h in
                             self.face_circulator(self._halfs[ihe]))

        for ihe in self._vertexh:
            if ihe is not None:
                verts.update(h.index for h in
                             self.vertex_circulator(self._halfs[ihe]))

        live = {i for i, h in enumerate(self._halfs) if h is not None}

        assert set(faces) == live and set(faces.values()) <= {1}
        assert set(verts) == live and set(verts.values()) <= {1}


class Halfedge:
    """ Halfedge record.

    A halfedge stores five ids: its target vertex, its opposite, successor
    and predecessor halfedges as well as its incident face -- the face to
    its left. A closed loop of halfedges defines a face and its
    orientation. Related items are looked up in the tables of the owning
    mesh.

    Parameters
    ----------
    vtx : int
        Id of the vertex the halfedge points to.
    opp : int
        Id of the opposite halfedge.
    nxt : int
        Id of the successor halfedge.
    prv : int
        Id of the predecessor halfedge.
    fac : int
        Id of the incident face.
    mesh : Mesh, optional
        The owning mesh.

    Note
    ----
    A halfedge does not store its own id. The id is recovered from its
    opposite, see :attr:`index`.
    """

    def __init__(self, vtx, opp, nxt, prv, fac, mesh=None):
        self._vtx = vtx
        self._opp = opp
        self._nxt = nxt
        self._prv = prv
        self._fac = fac

        self._mesh = mesh

    def __repr__(self):
        return (f'Halfedge({self._vtx}, {self._opp}, {self._nxt}, ' +
                f'{self._prv}, {self._fac})')

    def __str__(self):
        return f'h -> {self._vtx} [face {self._fac}]'

    def __bool__(self):
        return True

    @property
    def vtx(self):
        """ Target vertex id.

        :type: int
        """
        return self._vtx

    @property
    def opp(self):
        """ Opposite halfedge id.

        :type: int
        """
        return self._opp

    @property
    def nxt(self):
        """ Successor halfedge id.

        :type: int
        """
        return self._nxt

    @property
    def prv(self):
        """ Predecessor halfedge id.

        :type: int
        """
        return self._prv

    @property
    def fac(self):
        """ Incident face id.

        :type: int
        """
        return self._fac

    @property
    def vertex(self):
        """ Payload of the target vertex.

        :type: object
        """
        assert not self.deleted
        return self._mesh._verts[self._vtx]

    @property
    def opposite(self):
        """ Opposite halfedge.

        Halfedge pointing in the opposite direction.

        :type: Halfedge
        """
        assert not self.deleted
        return self._mesh._halfs[self._opp]

    @property
    def next(self):
        """ Successor halfedge.

        Next halfedge in a face defining halfedge loop.

        :type: Halfedge
        """
        assert not self.deleted
        return self._mesh._halfs[self._nxt]

    @property
    def prev(self):
        """ Predecessor halfedge.

        Previous halfedge in a face defining halfedge loop.

        :type: Halfedge
        """
        assert not self.deleted
        return self._mesh._halfs[self._prv]

    @property
    def index(self):
        """ Halfedge id.

        Position of the halfedge in the halfedge table of its mesh.

        :type: int
        """
        opposite = self.opposite
        assert opposite.opposite is self

        return opposite._opp

    @property
    def border(self):
        """ Border flag.

        :obj:`True` if the incident face is a border face.

        :type: bool
        """
        assert not self.deleted
        return self._fac in self._mesh._border

    @property
    def deleted(self):
        """ Deletion flag.

        :type: bool
        """
        return self._vtx is None

    def to_dict(self):
        """ Serializable representation.

        The owning mesh is not included.

        Returns
        -------
        dict
            The keys 'vtx', 'opp', 'nxt', 'prv', and 'fac' mapped to the
            corresponding ids.
        """
        return {'vtx': self._vtx, 'opp': self._opp, 'nxt': self._nxt,
                'prv': self._prv, 'fac': self._fac}

    @classmethod
    def from_dict(cls, data, mesh=None):
        """ Halfedge from serialized representation.

        Parameters
        ----------
        data : dict
            A dictionary as returned by :meth:`to_dict`.
        mesh : Mesh, optional
            The owning mesh.

        Returns
        -------
        Halfedge
        """
        return cls(data['vtx'], data['opp'], data['nxt'], data['prv'],
                   data['fac'], mesh)

    def _check(self):
        """ Perform sanity checks.
        """
        assert not self.deleted

        assert self.opposite.opposite is self
        assert self.opposite._vtx == self.prev._vtx
        assert self.next.prev is self
        assert self.prev.next is self
        assert self.next._fac == self._fac

    def _invalidate(self):
        """ Reset all attributes.

        Any later use of the halfedge fails.
        """
        self._vtx = None
        self._opp = None
        self._nxt = None
        self._prv = None
        self._fac = None

        self._mesh = None


class NonManifoldError(Exception):
    """ Manifold exception base class.

    Raised if mesh construction encounters a topological configuration
    that violates the manifold condition.
    """

    pass


class CorruptStructureError(RuntimeError):
    """ Corrupt halfedge structure.

    Raised if a circulation does not close or if a deleted representative
    halfedge cannot be replaced. Signals a broken invariant.
    """

    pass


class PreconditionError(ValueError):
    """ Invalid editing request.

    Raised if a topology editor is called with halfedges that violate its
    contract.
    """

    pass
