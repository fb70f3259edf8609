"""Tests for result merging."""

from ledger.filtering import merge

from tests.conftest import make_record


def test_secondary_appended_without_duplicates():
    a, b, c = make_record(3), make_record(2), make_record(1)
    merged = merge([a, b], [b, c])
    assert [r.id for r in merged] == [a.id, b.id, c.id]


def test_duplicate_keeps_primary_position():
    a, b, c = make_record(3), make_record(2), make_record(1)
    merged = merge([c, a], [a, b])
    assert [r.id for r in merged] == [c.id, a.id, b.id]


def test_identity_is_by_id_only():
    """A record seen twice under the same id appears once, primary copy wins."""
    original = make_record(7, description="primary")
    other_copy = make_record(7, description="secondary")
    merged = merge([original], [other_copy])
    assert merged == [original]


def test_no_secondary():
    a = make_record(1)
    primary = [a]
    merged = merge(primary)
    assert merged == [a]
    assert merged is not primary


def test_empty_primary():
    a, b = make_record(2), make_record(1)
    assert merge([], [a, b]) == [a, b]
