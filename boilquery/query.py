"""The query object and the operations that build it up piece by piece."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


class JoinKind(enum.Enum):
    """The kind of a join clause."""

    INNER = 0
    OUTER_LEFT = 1
    OUTER_RIGHT = 2
    NATURAL = 3
    OUTER_FULL = 4


class WhereKind(enum.Enum):
    """The kind of an entry in the where expression."""

    NORMAL = 0
    LEFT_PAREN = 1
    RIGHT_PAREN = 2
    IN = 3
    NOT_IN = 4


@dataclass
class Dialect:
    """How a database quotes identifiers and writes placeholders."""

    lq: str = '"'
    rq: str = '"'
    use_index_placeholders: bool = False
    use_top_clause: bool = False


@runtime_checkable
class Applicator(Protocol):
    """Anything that can modify a query, such as a query mod."""

    def apply(self, query: Query) -> None:
        ...


@dataclass
class _Where:
    kind: WhereKind = WhereKind.NORMAL
    clause: str = ""
    or_separator: bool = False
    args: list[Any] = field(default_factory=list)


@dataclass
class _ArgClause:
    clause: str
    args: list[Any] = field(default_factory=list)


@dataclass
class _Join:
    kind: JoinKind
    clause: str
    args: list[Any] = field(default_factory=list)


_DELETED_AT = re.compile(r"deleted_at[\"'`]? is null")


@dataclass
class Query:
    """The state of a query as it is built up."""

    dialect: Dialect = field(default_factory=Dialect)
    raw_sql: str = ""
    raw_args: list[Any] = field(default_factory=list)

    load: list[str] = field(default_factory=list)
    load_mods: dict[str, Applicator] = field(default_factory=dict)

    delete: bool = False
    update: dict[str, Any] = field(default_factory=dict)
    withs: list[_ArgClause] = field(default_factory=list)
    select_cols: list[str] = field(default_factory=list)
    count: bool = False
    from_: list[str] = field(default_factory=list)
    joins: list[_Join] = field(default_factory=list)
    where: list[_Where] = field(default_factory=list)
    group_by: list[str] = field(default_factory=list)
    order_by: list[_ArgClause] = field(default_factory=list)
    having: list[_ArgClause] = field(default_factory=list)
    limit: int = 0
    offset: int = 0
    for_lock: str = ""
    distinct: str = ""
    comment: str = ""

    # Drops the automatic "deleted_at is null" clause when the query is built.
    remove_soft_delete: bool = False

    def set_sql(self, sql: str, *args: Any) -> None:
        """Replace the query with a raw statement and its arguments."""
        self.raw_sql = sql
        self.raw_args = list(args)

    def set_args(self, *args: Any) -> None:
        """Replace the arguments of the raw statement, keeping its text."""
        self.raw_args = list(args)

    def set_load(self, *args: str) -> None:
        """Replace the relationships to eager load."""
        self.load = list(args)

    def append_load(self, relationship: str) -> None:
        """Add a relationship to eager load."""
        self.load.append(relationship)

    def set_load_mods(self, rel: str, applicator: Applicator) -> None:
        """Attach modifiers to the query that loads a relationship."""
        self.load_mods[rel] = applicator

    def append_select(self, *args: str) -> None:
        """Add columns to select."""
        self.select_cols.extend(args)

    def append_from(self, *args: str) -> None:
        """Add tables to select from."""
        self.from_.extend(args)

    def set_from(self, *args: str) -> None:
        """Replace the tables to select from."""
        self.from_ = list(args)

    def append_join(self, kind: JoinKind, clause: str, *args: Any) -> None:
        """Add a join of the given kind."""
        self.joins.append(_Join(kind=JoinKind(kind), clause=clause, args=list(args)))

    def append_inner_join(self, clause: str, *args: Any) -> None:
        """Add an inner join."""
        self.append_join(JoinKind.INNER, clause, *args)

    def append_left_outer_join(self, clause: str, *args: Any) -> None:
        """Add a left outer join."""
        self.append_join(JoinKind.OUTER_LEFT, clause, *args)

    def append_right_outer_join(self, clause: str, *args: Any) -> None:
        """Add a right outer join."""
        self.append_join(JoinKind.OUTER_RIGHT, clause, *args)

    def append_full_outer_join(self, clause: str, *args: Any) -> None:
        """Add a full outer join."""
        self.append_join(JoinKind.OUTER_FULL, clause, *args)

    def append_having(self, clause: str, *args: Any) -> None:
        """Add a having clause."""
        self.having.append(_ArgClause(clause, list(args)))

    def append_where(self, clause: str, *args: Any) -> None:
        """Add a where clause."""
        self.where.append(_Where(clause=clause, args=list(args)))

    def append_in(self, clause: str, *args: Any) -> None:
        """Add an IN clause to the where expression."""
        self.where.append(_Where(kind=WhereKind.IN, clause=clause, args=list(args)))

    def append_not_in(self, clause: str, *args: Any) -> None:
        """Add a NOT IN clause to the where expression."""
        self.where.append(_Where(kind=WhereKind.NOT_IN, clause=clause, args=list(args)))

    def set_last_where_as_or(self) -> None:
        """Join the last where entry (or parenthesised group) with OR.

        Raises ValueError when a closing paren has no opening one.
        """
        if not self.where:
            return

        if self.where[-1].kind is not WhereKind.RIGHT_PAREN:
            self.where[-1].or_separator = True
            return

        depth = 0
        for entry in reversed(self.where[:-1]):
            if entry.kind is WhereKind.LEFT_PAREN:
                if depth == 0:
                    entry.or_separator = True
                    return
                depth -= 1
            elif entry.kind is WhereKind.RIGHT_PAREN:
                depth += 1

        raise ValueError("could not find matching ( in where query expr")

    def append_where_left_paren(self) -> None:
        """Open a parenthesised group in the where expression."""
        self.where.append(_Where(kind=WhereKind.LEFT_PAREN))

    def append_where_right_paren(self) -> None:
        """Close a parenthesised group in the where expression."""
        self.where.append(_Where(kind=WhereKind.RIGHT_PAREN))

    def append_group_by(self, clause: str) -> None:
        """Add a group by clause."""
        self.group_by.append(clause)

    def append_order_by(self, clause: str, *args: Any) -> None:
        """Add an order by clause."""
        self.order_by.append(_ArgClause(clause, list(args)))

    def append_with(self, clause: str, *args: Any) -> None:
        """Add a common table expression."""
        self.withs.append(_ArgClause(clause, list(args)))

    def strip_soft_delete_where(self) -> None:
        """Remove the first soft-delete where clause if that was asked for."""
        if not self.remove_soft_delete:
            return

        for position, entry in enumerate(self.where):
            if entry.kind is WhereKind.NORMAL and _DELETED_AT.search(entry.clause):
                del self.where[position]
                break


def raw(query: str, *args: Any) -> Query:
    """Make a query from a raw statement and its arguments."""
    return Query(raw_sql=query, raw_args=list(args))