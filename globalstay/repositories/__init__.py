"""Persistence adapters."""

from globalstay.repositories.base import (
    AnyOf,
    Condition,
    Filter,
    Repositories,
    Repository,
    Storage,
    any_of,
    eq,
    ge,
    gt,
    icontains,
    in_,
    le,
    lt,
    ne,
    not_in,
)

__all__ = [
    "AnyOf",
    "Condition",
    "Filter",
    "Repositories",
    "Repository",
    "Storage",
    "any_of",
    "eq",
    "ge",
    "gt",
    "icontains",
    "in_",
    "le",
    "lt",
    "ne",
    "not_in",
]
