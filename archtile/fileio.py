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

""" Snapshot and OBJ file I/O.

Low-level functions to read and write mesh data. Snapshots are stored as
JSON documents, planar tilings can be exchanged via a subset of the OBJ
format. Complete OBJ specifications can be found in the `Advanced
Visualizer Manual`.
"""

import json

import numpy as np


def _encode(obj):
    """ JSON encoder fallback.

    Converts NumPy arrays and scalars to built-in types.

    Raises
    ------
    TypeError
        If `obj` is not a NumPy object.
    """
    if isinstance(obj, np.ndarray):
        return obj.tolist()

    if isinstance(obj, np.generic):
        return obj.item()

    raise TypeError(f"object of type '{type(obj).__name__}' " +
                    "is not JSON serializable")


def read_json(filename):
    """ Read snapshot from file.

    Parameters
    ----------
    filename : str
        Name of a JSON file.

    Returns
    -------
    dict
        The snapshot dictionary.
    """
    with open(filename, 'r') as file:
        return json.load(file)


def write_json(filename, snapshot, indent=None):
    """ Write snapshot to file.

    NumPy vertex payloads are stored as lists of numbers.

    Parameters
    ----------
    filename : str
        Name of output file.
    snapshot : dict
        Snapshot dictionary.
    indent : int, optional
        Indentation level, compact output by default.
    """
    with open(filename, 'w') as file:
        json.dump(snapshot, file, default=_encode, indent=indent)


def _parse(block):
    """ Parse vertex definition.

    Returned values can be negative (relative offsets). If positive,
    indices are 1-based.

    Parameters
    ----------
    block : str
        A v/vt/vn string representing a vertex definition as encountered
        when reading 'f' statements.

    Raises
    ------
    ValueError
        If the string could not be parsed.

    Returns
    -------
    int
        Vertex index.
    """
    # Texture and normal indices are of no interest. Only the number of
    # parts has to be valid.
    if '//' in block:
        bits = block.split('//')

        if len(bits) != 2:
            raise ValueError('invalid v//vn definition: ' + block)
    else:
        bits = block.split('/')

        if len(bits) > 3:
            raise ValueError('invalid v/vt/vn or v/vt definition: ' + block)

    return int(bits[0])


def read_obj(filename):
    """ Read tiling from OBJ file.

    Only 'v' and 'f' statements are evaluated. All other lines are
    ignored.

    Parameters
    ----------
    filename : str
        Name of an OBJ file.

    Raises
    ------
    ValueError
        If a face definition could not be parsed.

    Returns
    -------
    points : ~numpy.ndarray, shape (n, 2)
        Planar vertex coordinates.
    faces : list[list[int]]
        Face definitions, 0-based vertex indexing.
    """
    points = []
    faces = []

    with open(filename, 'r') as file:
        for line in file:
            blocks = line.split()

            if not blocks:
                continue

            if blocks[0] == 'v':
                points.append([float(block) for block in blocks[1:3]])
            elif blocks[0] == 'f':
                face = [_parse(block) for block in blocks[1:]]

                # Negative indices are relative to the number of vertices
                # read up to this point.
                faces.append([len(points) + v if v < 0 else v - 1
                              for v in face])

    return np.array(points, dtype=float).reshape(-1, 2), faces


def write_obj(filename, points, faces):
    """ Write tiling to OBJ file.

    Vertices are written with a zero z-coordinate.

    Parameters
    ----------
    filename : str
        Name of output file.
    points : array_like, shape (n, 2)
        Planar vertex coordinates.
    faces : list[list[int]]
        Face definitions, 0-based vertex indexing.
    """
    with open(filename, 'w') as file:
        for x, y in points:
            file.write(f'v {x} {y} 0\n')

        for face in faces:
            file.write('f')

            for v in face:
                file.write(f' {int(v) + 1}')

            file.write('\n')
