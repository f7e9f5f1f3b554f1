import math

import pytest

from archtile.hds import Mesh


def assert_valid(mesh):
    """ Check all structural invariants of a mesh.
    """
    mesh._check()

    for h in mesh.halfedges:
        if h is None:
            continue

        assert h.opposite.opposite is h

        loop = list(mesh.face_circulator(h))
        assert len({g.fac for g in loop}) == 1

        star = list(mesh.vertex_circulator(h))
        assert len({g.vtx for g in star}) == 1

    for f, ihe in enumerate(mesh._faceh):
        if ihe is not None:
            assert mesh.face_halfedge(f).fac == f

    for v, ihe in enumerate(mesh._vertexh):
        if ihe is not None:
            assert mesh.vertex_halfedge(v).vtx == v


def fan_points(n=6):
    """ Center vertex followed by `n` points on the unit circle.
    """
    return [(0.0, 0.0)] + [(math.cos(2*math.pi*k/n), math.sin(2*math.pi*k/n))
                           for k in range(n)]


@pytest.fixture
def square():
    return Mesh([(0, 0), (1, 0), (1, 1), (0, 1)], [[0, 1, 2, 3]])


@pytest.fixture
def two_triangles():
    return Mesh([(0, 0), (1, 0), (1, 1), (0, 1)], [[0, 1, 2], [0, 2, 3]])


@pytest.fixture
def fan():
    # Five of the six triangles around the origin, a 60 degree gap remains
    # between the x-axis and the last triangle.
    return Mesh(fan_points(), [[0, k, k + 1] for k in range(1, 6)])


@pytest.fixture
def slit():
    # Four unit squares around the origin, cut open along the positive
    # x-axis. Vertices 1 and 9 coincide.
    points = [(0, 0), (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1),
              (0, -1), (1, -1), (1, 0)]
    faces = [[0, 1, 2, 3], [0, 3, 4, 5], [0, 5, 6, 7], [0, 7, 8, 9]]

    return Mesh(points, faces)


@pytest.fixture
def grid():
    # Four unit squares around the origin.
    points = [(0, 0), (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1),
              (0, -1), (1, -1)]
    faces = [[0, 1, 2, 3], [0, 3, 4, 5], [0, 5, 6, 7], [0, 7, 8, 1]]

    return Mesh(points, faces)


@pytest.fixture
def annulus():
    # Three by three unit squares without the middle one. The point (i, j)
    # has vertex id 4*j + i.
    points = [(i, j) for j in range(4) for i in range(4)]
    faces = [[4*j + i, 4*j + i + 1, 4*j + i + 5, 4*j + i + 4]
             for j in range(3) for i in range(3) if (i, j) != (1, 1)]

    return Mesh(points, faces)
