"""
Tests for merging the entries of two quantile summaries.
"""

from gk_quantiles.core.sketch.entry import Entry
from gk_quantiles.core.sketch.merge import merge_entries


def test_overlapping_ranges_widen_delta():
    a = [Entry(0, 1, 0), Entry(20, 99, 0)]
    b = [Entry(10, 1, 0), Entry(30, 49, 0)]

    # ⌊2 * 0.04 * 50⌋ = 4 for entries of a, ⌊2 * 0.05 * 100⌋ = 10 for entries of b
    merged = merge_entries(a, 0.05, 100, b, 0.04, 50)

    assert merged == [
        Entry(0, 1, 0),
        Entry(10, 1, 10),
        Entry(20, 99, 4),
        Entry(30, 49, 0),
    ]


def test_inputs_are_not_modified():
    a = [Entry(0, 1, 0), Entry(20, 99, 0)]
    b = [Entry(10, 1, 0), Entry(30, 49, 0)]

    merge_entries(a, 0.05, 100, b, 0.04, 50)

    assert a == [Entry(0, 1, 0), Entry(20, 99, 0)]
    assert b == [Entry(10, 1, 0), Entry(30, 49, 0)]


def test_accepts_tuples_of_entries():
    a = (Entry(1, 1, 0),)
    b = (Entry(2, 1, 0),)

    assert merge_entries(a, 0.01, 1, b, 0.01, 1) == [Entry(1, 1, 0), Entry(2, 1, 0)]


def test_equal_values_emit_first_operand_first():
    a = [Entry(5, 2, 0)]
    b = [Entry(5, 3, 0)]

    merged = merge_entries(a, 0.1, 10, b, 0.1, 20)

    # The tied entry from b comes after a has started: ⌊2 * 0.1 * 10⌋ = 2
    assert merged == [Entry(5, 2, 0), Entry(5, 3, 2)]


def test_disjoint_ranges_are_concatenated():
    a = [Entry(10, 1, 0), Entry(11, 1, 0)]
    b = [Entry(1, 1, 0), Entry(2, 1, 0)]

    merged = merge_entries(a, 0.1, 20, b, 0.1, 20)

    assert merged == [Entry(1, 1, 0), Entry(2, 1, 0), Entry(10, 1, 0), Entry(11, 1, 0)]


def test_remainder_is_copied_unmodified():
    a = [Entry(0, 1, 0), Entry(5, 1, 0)]
    b = [Entry(3, 1, 0), Entry(8, 1, 1), Entry(9, 1, 0)]

    merged = merge_entries(a, 0.1, 20, b, 0.1, 20)

    assert merged == [
        Entry(0, 1, 0),
        Entry(3, 1, 4),
        Entry(5, 1, 4),
        Entry(8, 1, 1),
        Entry(9, 1, 0),
    ]


def test_empty_operands():
    a = [Entry(1, 1, 0)]

    assert merge_entries([], 0.01, 0, a, 0.01, 1) == a
    assert merge_entries(a, 0.01, 1, [], 0.01, 0) == a
    assert merge_entries([], 0.01, 0, [], 0.01, 0) == []
