"""
Tests for the threshold searches over monotonic sequences.

Both the sequential scan (short ranges) and the bisection (long ranges)
are exercised, including runs of repeated values.
"""

import numpy as np
import pytest

from pyexact.hypothesis._searches import search_ascending, search_descending


def _lookup(values):
    b = len(values) - 1

    def value(i):
        assert 0 <= i <= b, f"index {i} outside [0, {b}]"
        return values[i]

    return value


def _values(rng, length, unique, descending):
    offset = rng.uniform(7, 13)
    values = offset + np.concatenate((
        np.arange(unique), rng.integers(0, unique, length - unique)
    ))
    values.sort()
    return values[::-1] if descending else values


class TestSearchAscending:

    def test_sequential(self):
        values = [0, 1, 2, 4, 4]
        f = _lookup(values)
        assert search_ascending(0, 4, -5, f) == -1
        assert search_ascending(0, 4, 0, f) == 0
        assert search_ascending(0, 4, 1, f) == 1
        assert search_ascending(0, 4, 2, f) == 2
        assert search_ascending(0, 4, 3, f) == 2
        assert search_ascending(0, 4, 4, f) == 4
        assert search_ascending(0, 4, 10, f) == 4

    def test_binary(self):
        values = [0, 1, 2, 4, 4, 5, 6, 8, 8, 9, 11, 11]
        f = _lookup(values)
        expected = {-5: -1, 0: 0, 1: 1, 2: 2, 3: 2, 4: 4, 5: 5, 6: 6,
                    7: 6, 8: 8, 9: 9, 10: 9, 11: 11, 20: 11}
        for x, i in expected.items():
            assert search_ascending(0, 11, x, f) == i, f"x={x}"

    def test_empty_range(self):
        assert search_ascending(3, 2, 0.0, _lookup([])) == 2

    @pytest.mark.parametrize("length, unique", [
        (4, 4), (4, 2), (4, 1), (20, 20), (20, 10), (20, 1),
        (1000, 1000), (1000, 123), (1000, 1),
    ])
    def test_random(self, rng, length, unique):
        values = _values(rng, length, unique, descending=False)
        f = _lookup(values)
        b = length - 1
        assert search_ascending(0, b, values[0] - 1, f) == -1
        assert search_ascending(0, b, values[b], f) == b
        assert search_ascending(0, b, values[b] + 10, f) == b
        for i in range(b):
            if values[i] != values[i + 1]:
                assert search_ascending(0, b, values[i], f) == i
                assert search_ascending(0, b, values[i + 1], f) > i


class TestSearchDescending:

    def test_sequential(self):
        values = [4, 3, 2, 2, 1]
        f = _lookup(values)
        assert search_descending(0, 4, 10, f) == 0
        assert search_descending(0, 4, 4, f) == 0
        assert search_descending(0, 4, 3, f) == 1
        assert search_descending(0, 4, 2, f) == 2
        assert search_descending(0, 4, 1, f) == 4
        assert search_descending(0, 4, -5, f) == 5

    def test_binary(self):
        values = [11, 10, 9, 8, 8, 6, 5, 4, 2, 2, 1]
        f = _lookup(values)
        expected = {20: 0, 11: 0, 10: 1, 9: 2, 8: 3, 7: 5, 6: 5, 5: 6,
                    4: 7, 3: 8, 2: 8, 1: 10, -5: 11}
        for x, i in expected.items():
            assert search_descending(0, 10, x, f) == i, f"x={x}"

    def test_offset_range(self):
        # Indices need not start at zero
        values = {5: 3.0, 6: 2.0, 7: 1.0}
        assert search_descending(5, 7, 2.0, values.__getitem__) == 6
        assert search_descending(5, 7, 0.5, values.__getitem__) == 8

    @pytest.mark.parametrize("length, unique", [
        (4, 4), (4, 2), (4, 1), (20, 20), (20, 10), (20, 1),
        (1000, 1000), (1000, 123), (1000, 1),
    ])
    def test_random(self, rng, length, unique):
        values = _values(rng, length, unique, descending=True)
        f = _lookup(values)
        b = length - 1
        assert search_descending(0, b, values[0] + 10, f) == 0
        assert search_descending(0, b, values[0], f) == 0
        assert search_descending(0, b, values[b] - 1, f) == b + 1
        for i in range(1, b + 1):
            if values[i - 1] != values[i]:
                assert search_descending(0, b, values[i - 1], f) < i
                assert search_descending(0, b, values[i], f) == i
