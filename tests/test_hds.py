import copy

import pytest

from conftest import assert_valid, fan_points

from archtile.hds import (CorruptStructureError, Halfedge, Mesh,
                          NonManifoldError, PreconditionError, SlotList)


class TestSlotList:

    def test_get(self):
        slots = SlotList([7, None, 9])

        assert slots.get(0) == 7
        assert slots.get(1) is None
        assert slots.get(3) is None
        assert slots.get(-1) is None
        assert slots.get(None) is None

    def test_empty_slots_prefer_holes(self):
        slots = SlotList([7, None, 9, None])

        assert slots.empty_slot() == 1
        assert slots.empty_slots(3) == [1, 3, 4]
        assert SlotList().empty_slots(2) == [0, 1]

    def test_assignment_grows(self):
        slots = SlotList([1])
        slots[3] = 4

        assert slots == [1, None, None, 4]


class TestConstruction:

    def test_single_polygon(self, square):
        assert square.size == (4, 4, 1)
        assert len(square.border_faces) == 1

        border = next(square.all_border_faces())
        assert len(list(square.face_circulator(border))) == 4
        assert all(h.border for h in square.face_circulator(border))

        assert_valid(square)

    def test_two_triangles(self, two_triangles):
        assert two_triangles.size == (4, 5, 2)
        assert two_triangles.border_faces == {2}
        assert len(list(two_triangles)) == 2

        assert_valid(two_triangles)

    def test_closed_neighborhood(self, grid):
        assert grid.size == (9, 12, 4)
        assert len(list(grid.all_border_faces())) == 1

        h = grid.vertex_halfedge(0)
        assert not any(g.border for g in grid.vertex_circulator(h))

        assert_valid(grid)

    def test_two_border_loops(self, annulus):
        assert annulus.size == (16, 24, 8)
        assert len(annulus.border_faces) == 2

        loops = [list(annulus.face_circulator(h))
                 for h in annulus.all_border_faces()]

        assert sorted(len(loop) for loop in loops) == [4, 12]
        assert all(h.border for loop in loops for h in loop)

        # The hole is bounded by the middle square.
        inner = min(loops, key=len)
        assert {h.vtx for h in inner} == {5, 6, 9, 10}

        assert_valid(annulus)

    def test_empty(self):
        mesh = Mesh()

        assert mesh.size == (0, 0, 0)
        assert mesh.to_snapshot()['halfedge'] == []

    def test_repeated_directed_edge(self):
        with pytest.raises(NonManifoldError):
            Mesh([(0, 0), (1, 0), (1, 1), (0, 1)], [[0, 1, 2], [0, 1, 3]])

    def test_pinched_vertex(self):
        points = [(0, 0), (1, 0), (1, 1), (-1, 0), (-1, -1)]

        with pytest.raises(NonManifoldError):
            Mesh(points, [[0, 1, 2], [0, 3, 4]])

    def test_degenerate_faces(self):
        points = [(0, 0), (1, 0), (1, 1)]

        with pytest.raises(ValueError):
            Mesh(points, [[0, 1, 1]])

        with pytest.raises(ValueError):
            Mesh(points, [[0, 1]])

        with pytest.raises(IndexError):
            Mesh(points, [[0, 1, 5]])

    def test_faces_without_points(self):
        with pytest.raises(ValueError):
            Mesh(faces=[[0, 1, 2]])

    def test_isolated_vertex_warning(self, capsys):
        mesh = Mesh([(0, 0), (1, 0), (0, 1), (5, 5)], [[0, 1, 2]])

        assert 'isolated' in capsys.readouterr().out
        assert mesh.size == (3, 3, 1)

    def test_open_border_loop(self):
        mesh = Mesh([(0, 0), (1, 0), (0, 1)])
        mesh._add_face([0, 1, 2], {})
        mesh.halfedges[1]._nxt = 1

        with pytest.raises(CorruptStructureError):
            mesh._close_borders()


class TestAccess:

    def test_halfedge_index(self, two_triangles):
        for i, h in enumerate(two_triangles.halfedges):
            assert h.index == i

    def test_halfedge_relations(self, two_triangles):
        h = two_triangles.find_halfedge(0, 2)

        assert h.vtx == 2
        assert h.opposite.vtx == 0
        assert h.next.prev is h
        assert h.prev.next is h
        assert h.vertex == (1, 1)
        assert not h.border

    def test_find_halfedge(self, two_triangles):
        assert two_triangles.find_halfedge(0, 2).index == 4
        assert two_triangles.find_halfedge(2, 0).index == 0
        assert two_triangles.find_halfedge(1, 3) is None

    def test_representatives(self, two_triangles):
        assert two_triangles.face_halfedge(0).fac == 0
        assert two_triangles.vertex_halfedge(3).vtx == 3
        assert two_triangles.face_halfedge(7) is None
        assert two_triangles.vertex_halfedge(None) is None

    def test_face_vertices(self, two_triangles):
        h = two_triangles.find_halfedge(0, 2)

        assert two_triangles.face_vertices(h) == [(1, 1), (0, 1), (0, 0)]

    def test_iterators(self, two_triangles):
        assert [h.vtx for h in two_triangles.all_vertices()] == [0, 1, 2, 3]
        assert len(list(two_triangles.all_edges())) == 5
        assert len(list(two_triangles.all_faces())) == 2
        assert len(list(two_triangles.all_border_faces())) == 1

    def test_vertex_degree(self, two_triangles):
        degree = [len(list(two_triangles.vertex_circulator(h)))
                  for h in two_triangles.all_vertices()]

        assert degree == [3, 2, 3, 2]

    def test_copy(self, two_triangles):
        other = copy.copy(two_triangles)
        other.join_face(other.find_halfedge(0, 2))

        assert two_triangles.size == (4, 5, 2)
        assert other.size == (4, 4, 1)

        with pytest.raises(NotImplementedError):
            copy.deepcopy(two_triangles)

    def test_clone(self, two_triangles, square):
        square.clone(two_triangles)

        assert square.to_snapshot() == two_triangles.to_snapshot()
        assert all(h._mesh is square for h in square.halfedges)

        assert_valid(square)


class TestCirculators:

    def test_face_loop(self, square):
        h = square.face_halfedge(0)
        loop = list(square.face_circulator(h))

        assert loop[0] is h
        assert [g.vtx for g in loop] == [3, 0, 1, 2]

    def test_early_abandonment(self, grid):
        h = grid.vertex_halfedge(0)

        for g in grid.vertex_circulator(h):
            break

        assert g is h

    def test_face_mismatch(self, two_triangles):
        two_triangles.halfedges[1]._fac = 1

        with pytest.raises(CorruptStructureError):
            list(two_triangles.face_circulator(two_triangles.halfedges[0]))

    def test_open_loop(self, two_triangles):
        two_triangles.halfedges[2]._nxt = 1

        with pytest.raises(CorruptStructureError):
            list(two_triangles.face_circulator(two_triangles.halfedges[0]))


class TestRepair:

    def test_repair_face(self, two_triangles):
        two_triangles._faceh[0] = None

        with pytest.raises(CorruptStructureError):
            two_triangles._repair_face(0, (3, 4, 5))

        two_triangles._repair_face(0, (3, 1))
        assert two_triangles.face_halfedge(0).index == 1

    def test_repair_vertex(self, two_triangles):
        two_triangles._vertexh[0] = None

        with pytest.raises(CorruptStructureError):
            two_triangles._repair_vertex(0, (1, 2, None))

        two_triangles._repair_vertex(0, (1, 0))
        assert two_triangles.vertex_halfedge(0).index == 0


class TestEditors:

    def test_join_face(self, two_triangles):
        h = two_triangles.join_face(two_triangles.find_halfedge(0, 2))

        assert h.index == 5
        assert h.fac == 1
        assert len(list(two_triangles.face_circulator(h))) == 4
        assert two_triangles.size == (4, 4, 1)
        assert two_triangles.face_halfedge(0) is None

        assert_valid(two_triangles)

    def test_join_face_invalidates(self, two_triangles):
        h = two_triangles.find_halfedge(0, 2)
        two_triangles.join_face(h)

        assert h.deleted
        assert two_triangles.halfedges[0] is None
        assert two_triangles.halfedges[4] is None

    def test_split_face(self, square):
        h = square.find_halfedge(3, 0)
        g = square.find_halfedge(1, 2)

        d = square.split_face(h, g)

        assert d.vtx == 0
        assert d.opposite.vtx == 2
        assert square.size == (4, 5, 2)
        assert len(list(square.face_circulator(d))) == 3
        assert len(list(square.face_circulator(d.opposite))) == 3
        assert not d.border

        assert_valid(square)

    def test_join_then_split(self, two_triangles):
        two_triangles.join_face(two_triangles.find_halfedge(0, 2))

        h = two_triangles.find_halfedge(3, 0)
        g = two_triangles.find_halfedge(1, 2)

        d = two_triangles.split_face(h, g)

        # Slots freed by join_face are reused.
        assert {d.index, d.opposite.index} == {0, 4}
        assert d.fac == 0
        assert two_triangles.size == (4, 5, 2)

        assert_valid(two_triangles)

    def test_split_face_preconditions(self, two_triangles):
        h = two_triangles.halfedges[0]
        g = two_triangles.halfedges[3]

        with pytest.raises(PreconditionError):
            two_triangles.split_face(h, g)

        with pytest.raises(PreconditionError):
            two_triangles.split_face(h, h)

    def test_split_vertex(self, two_triangles):
        h = two_triangles.find_halfedge(2, 0)
        g = two_triangles.find_halfedge(3, 0)

        d = two_triangles.split_vertex(h, g, (0.5, -0.5))

        assert d.vtx == 4
        assert d.opposite.vtx == 0
        assert two_triangles.vertices[4] == (0.5, -0.5)
        assert two_triangles.size == (5, 6, 2)
        assert h.vtx == 4
        assert g.vtx == 0

        assert_valid(two_triangles)

    def test_split_then_join_vertex(self, two_triangles):
        h = two_triangles.find_halfedge(2, 0)
        g = two_triangles.find_halfedge(3, 0)

        d = two_triangles.split_vertex(h, g, (0.5, -0.5))
        k = two_triangles.join_vertex(d)

        assert k is g
        assert k.vtx == 0
        assert two_triangles.size == (4, 5, 2)
        assert two_triangles.vertices[4] is None
        assert two_triangles.vertex_halfedge(4) is None

        assert_valid(two_triangles)

    def test_split_vertex_preconditions(self, two_triangles):
        h = two_triangles.find_halfedge(2, 0)
        g = two_triangles.find_halfedge(0, 1)

        with pytest.raises(PreconditionError):
            two_triangles.split_vertex(h, g, (0, 0))

        with pytest.raises(PreconditionError):
            two_triangles.split_vertex(h, h, (0, 0))

    def test_join_vertex(self, grid):
        d = grid.join_vertex(grid.find_halfedge(0, 1))

        assert d.vtx == 0
        assert grid.size == (8, 11, 4)
        assert grid.vertex_halfedge(1) is None

        faces = sorted(len(list(grid.face_circulator(h))) for h in grid)
        assert faces == [3, 3, 4, 4]

        assert_valid(grid)

    def test_join_face_on_border(self, annulus):
        # Merging the top middle square into the outer border face cuts
        # the annulus open.
        annulus.join_face(annulus.find_halfedge(13, 14))

        h = annulus.find_halfedge(9, 10)

        assert annulus.size == (16, 23, 7)
        assert len(annulus.border_faces) == 2
        assert h.border and h.opposite.border

        assert_valid(annulus)

    def test_join_face_same_face(self, grid):
        for v in (1, 3, 5):
            grid.join_face(grid.find_halfedge(v, 0))

        h = grid.find_halfedge(0, 7)

        with pytest.raises(PreconditionError):
            grid.join_face(h)

        with pytest.raises(PreconditionError):
            grid.join_vertex(h)

        assert grid.size == (9, 9, 1)

        assert_valid(grid)

    def test_split_vertex_keeps_isolated(self):
        mesh = Mesh([(0, 0), (1, 0), (0, 1), (5, 5)], [[0, 1, 2]])

        h = mesh.find_halfedge(1, 0)
        g = mesh.find_halfedge(2, 0)

        d = mesh.split_vertex(h, g, (0.5, 0.5))

        assert d.vtx == 4
        assert mesh.vertices[3] == (5, 5)
        assert mesh.vertices[4] == (0.5, 0.5)
        assert mesh.vertex_halfedge(3) is None
        assert mesh.size == (4, 4, 1)

        assert_valid(mesh)

    def test_split_join_face_all_pairs(self):
        n = 6

        for i in range(n):
            for j in range(n):
                if i == j:
                    continue

                mesh = Mesh(fan_points(n)[1:], [list(range(n))])
                loop = list(mesh.face_circulator(mesh.face_halfedge(0)))

                d = mesh.split_face(loop[i], loop[j])
                assert mesh.size == (n, n + 1, 2)

                f = mesh.join_face(d)
                assert mesh.size == (n, n, 1)
                assert {h.vtx for h in mesh.face_circulator(f)} == \
                    set(range(n))

                assert_valid(mesh)

    def test_split_join_vertex_all_pairs(self, grid):
        star = len(list(grid.vertex_circulator(grid.vertex_halfedge(0))))
        faces = [{h.vtx for h in grid.face_circulator(f)} for f in grid]

        for i in range(star):
            for j in range(star):
                if i == j:
                    continue

                mesh = grid.copy()
                h = mesh.vertex_halfedge(0)
                loop = list(mesh.vertex_circulator(h))

                d = mesh.split_vertex(loop[i], loop[j], (0.1, 0.1))
                assert mesh.size == (10, 13, 4)

                mesh.join_vertex(d)
                assert mesh.size == (9, 12, 4)
                assert [{h.vtx for h in mesh.face_circulator(f)}
                        for f in mesh] == faces

                assert_valid(mesh)


class TestHalfedge:

    def test_dict(self, two_triangles):
        h = two_triangles.halfedges[4]
        data = h.to_dict()

        assert data == {'vtx': 2, 'opp': 0, 'nxt': 5, 'prv': 3, 'fac': 1}

        g = Halfedge.from_dict(data)
        assert repr(g) == repr(h)
        assert g._mesh is None
