"""Tests for the range predicate builder."""

from datetime import datetime
from decimal import Decimal

from ledger.filtering import Exact, Range, build_range


class TestBuildRange:
    """build_range over numbers, dates and identifiers."""
    
    def test_equal_bounds_give_exact_match(self):
        """Same start and end collapse to an exact match."""
        assert build_range("amount", 5, 5) == Exact("amount", 5)
    
    def test_equal_by_string_form(self):
        """Equality is decided on the string form."""
        assert build_range("amount", Decimal("5"), "5") == Exact("amount", Decimal("5"))
    
    def test_both_bounds_give_inclusive_range(self):
        assert build_range("amount", 5, 10) == Range("amount", gte=5, lte=10)
    
    def test_only_start(self):
        result = build_range("amount", 5, None)
        assert result == Range("amount", gte=5)
        assert result.lte is None
    
    def test_only_end(self):
        result = build_range("amount", None, 5)
        assert result == Range("amount", lte=5)
        assert result.gte is None
    
    def test_no_bounds(self):
        """Neither bound means the field contributes nothing."""
        assert build_range("amount", None, None) is None
    
    def test_zero_is_a_bound(self):
        """A zero bound is present, not absent."""
        assert build_range("amount", 0, None) == Range("amount", gte=0)
    
    def test_dates_and_ids(self):
        start, end = datetime(2021, 1, 1), datetime(2021, 2, 1)
        assert build_range("date", start, end) == Range("date", gte=start, lte=end)
        assert build_range("id", "abc", "abc") == Exact("id", "abc")
    
    def test_no_ordering_check(self):
        """Inverted bounds are passed through; validation reports them."""
        assert build_range("id", "234", "123") == Range("id", gte="234", lte="123")
