"""Helpers that build where query mods for generated model code."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from boilquery.query import Query


class Operator(str, enum.Enum):
    """Comparison operators supported by :func:`where`."""

    EQ = "="
    NEQ = "!="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="


@dataclass
class WhereQueryMod:
    """A query mod that adds a where clause."""

    clause: str
    args: list[Any] = field(default_factory=list)

    def apply(self, query: Query) -> None:
        """Add the clause and its arguments to the query."""
        query.append_where(self.clause, *self.args)


def _is_null(value: Any) -> bool:
    is_zero = getattr(value, "is_zero", None)
    if callable(is_zero):
        return bool(is_zero())
    return value is None


def where_null_eq(name: str, negated: bool, value: Any) -> WhereQueryMod:
    """Compare a nullable column, using IS NULL when the value is null."""
    if _is_null(value):
        not_ = "not " if negated else ""
        return WhereQueryMod(clause=f"{name} is {not_}null")

    op = "!=" if negated else "="
    return WhereQueryMod(clause=f"{name} {op} ?", args=[value])


def where_is_null(name: str) -> WhereQueryMod:
    """Match rows where the column is null."""
    return WhereQueryMod(clause=f"{name} is null")


def where_is_not_null(name: str) -> WhereQueryMod:
    """Match rows where the column is not null."""
    return WhereQueryMod(clause=f"{name} is not null")


def where(name: str, operator: Operator | str, value: Any) -> WhereQueryMod:
    """Compare a column with a value using one of the supported operators."""
    op = Operator(operator)
    return WhereQueryMod(clause=f"{name} {op.value} ?", args=[value])