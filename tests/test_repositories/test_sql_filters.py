"""Tests for translating repository conditions into SQL (no database needed)."""

import pytest
from sqlalchemy.dialects import postgresql

from globalstay.models import Listing
from globalstay.repositories import any_of, eq, icontains, not_in
from globalstay.repositories.sql import SqlAlchemyRepository


def _sql(condition) -> str:
    repo = SqlAlchemyRepository(None, Listing)
    return str(repo._condition(condition).compile(dialect=postgresql.dialect()))


def test_eq():
    sql = _sql(eq("status", "available"))
    assert sql.startswith("listings.status = ")
    assert "%(status_1)s" in sql


def test_not_in():
    assert "NOT IN" in _sql(not_in("id", ["a"]))


def test_icontains_is_case_insensitive():
    sql = _sql(icontains("city", "lis"))
    assert "listings.city" in sql
    assert "LIKE" in sql.upper()


def test_any_of_is_or():
    sql = _sql(any_of(eq("city", "Lisbon"), eq("country", "Japan")))
    assert " OR " in sql


def test_unknown_field():
    with pytest.raises(ValueError):
        _sql(eq("nope", 1))
