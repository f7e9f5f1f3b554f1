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

""" Set of integer sequences.

Sequences are compared element by element, i.e., ``[3, 4]`` and ``[4, 3]``
are different members. Lists are not hashable, so sequences are kept in
buckets keyed on an order insensitive hash value.
"""


class SequenceSet:
    """ Order sensitive set of integer sequences.

    Parameters
    ----------
    items : iterable of sequence of int, optional
        Initial members. Duplicates are stored once.

    >>> s = SequenceSet([[3, 4], [4, 3], [3, 4]])
    >>> len(s)
    2
    """

    def __init__(self, items=()):
        """ Initialize set members.
        """
        self._buckets = dict()
        self._count = 0

        for seq in items:
            self.add(seq)

    def __bool__(self):
        """ Implicit empty set check.
        """
        return self._count > 0

    def __contains__(self, seq):
        """ Membership test.
        """
        return self._find(seq) is not None

    def __len__(self):
        """ Return number of members.
        """
        return self._count

    def __iter__(self):
        """ Member iterator.

        Every stored sequence is visited once, the order is unspecified.
        """
        return (seq for bucket in self._buckets.values() for seq in bucket)

    @staticmethod
    def hash(seq):
        """ Order insensitive hash value.

        Parameters
        ----------
        seq : sequence of int
            Integer sequence.

        Returns
        -------
        int
            The value ``0xfff`` combined with all elements via bitwise
            exclusive or.
        """
        value = 0xfff

        for x in seq:
            value ^= x

        return value

    @staticmethod
    def same(a, b):
        """ Elementwise sequence comparison.
        """
        return len(a) == len(b) and all(x == y for x, y in zip(a, b))

    def add(self, seq):
        """ Add sequence.

        Adding a sequence that is already a member has no effect.

        Parameters
        ----------
        seq : sequence of int
            The sequence to be added. A copy is stored.

        Returns
        -------
        SequenceSet
            The set itself. Calls can be chained.
        """
        if self._find(seq) is None:
            self._buckets.setdefault(self.hash(seq), []).append(list(seq))
            self._count += 1

        return self

    def delete(self, seq):
        """ Remove sequence.

        Parameters
        ----------
        seq : sequence of int
            The sequence to be removed.

        Returns
        -------
        list[int]
            The removed copy or :obj:`None` if `seq` is not a member.
        """
        key = self.hash(seq)
        bucket = self._buckets.get(key, [])

        for k, item in enumerate(bucket):
            if self.same(item, seq):
                del bucket[k]
                self._count -= 1

                # Remove empty buckets.
                if not bucket:
                    del self._buckets[key]

                return item

        return None

    def _find(self, seq):
        for item in self._buckets.get(self.hash(seq), []):
            if self.same(item, seq):
                return item

        return None
