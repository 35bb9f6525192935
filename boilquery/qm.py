"""Query mods: small objects that each change one part of a query."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

from boilquery.qmhelper import WhereQueryMod
from boilquery.query import Query


@runtime_checkable
class QueryMod(Protocol):
    """Anything that modifies a query in place."""

    def apply(self, query: Query) -> None:
        ...


@dataclass(frozen=True)
class QueryModFunc:
    """Wrap a plain function of a query so that it can be used as a query mod."""

    func: Callable[[Query], None]

    def apply(self, query: Query) -> None:
        """Call the wrapped function on the query."""
        self.func(query)


@dataclass(frozen=True)
class _QueryMods:
    """A group of query mods stored on a query for an eager-loaded relationship."""

    mods: tuple[QueryMod, ...] = field(default_factory=tuple)

    def apply(self, query: Query) -> None:
        apply(query, *self.mods)


def apply(query: Query, *args: QueryMod) -> None:
    """Apply each query mod to the query, in order."""
    for mod in args:
        mod.apply(query)


def sql(statement: str, *args: Any) -> QueryMod:
    """Run a plain SQL statement instead of a built query."""
    return QueryModFunc(lambda query: query.set_sql(statement, *args))


def load(relationship: str, *args: QueryMod) -> QueryMod:
    """Eager load a relationship such as ``"Videos.Tags"``.

    Any query mods given apply only to the query that loads the last
    relationship in the path.
    """

    def _apply(query: Query) -> None:
        query.append_load(relationship)
        if args:
            query.set_load_mods(relationship, _QueryMods(tuple(args)))

    return QueryModFunc(_apply)


def inner_join(clause: str, *args: Any) -> QueryMod:
    """Inner join another table."""
    return QueryModFunc(lambda query: query.append_inner_join(clause, *args))


def left_outer_join(clause: str, *args: Any) -> QueryMod:
    """Left outer join another table."""
    return QueryModFunc(lambda query: query.append_left_outer_join(clause, *args))


def right_outer_join(clause: str, *args: Any) -> QueryMod:
    """Right outer join another table."""
    return QueryModFunc(lambda query: query.append_right_outer_join(clause, *args))


def full_outer_join(clause: str, *args: Any) -> QueryMod:
    """Full outer join another table."""
    return QueryModFunc(lambda query: query.append_full_outer_join(clause, *args))


def distinct(clause: str) -> QueryMod:
    """Select only distinct rows of the given columns."""

    def _apply(query: Query) -> None:
        query.distinct = clause

    return QueryModFunc(_apply)


def with_(clause: str, *args: Any) -> QueryMod:
    """Add a common table expression."""
    return QueryModFunc(lambda query: query.append_with(clause, *args))


def select(*args: str) -> QueryMod:
    """Select specific columns instead of all of them."""
    return QueryModFunc(lambda query: query.append_select(*args))


def where(clause: str, *args: Any) -> QueryMod:
    """Add a where clause; several are joined with AND."""
    return WhereQueryMod(clause=clause, args=list(args))


def and_(clause: str, *args: Any) -> QueryMod:
    """Add a where clause joined with AND; the same as :func:`where`."""
    return QueryModFunc(lambda query: query.append_where(clause, *args))


def or_(clause: str, *args: Any) -> QueryMod:
    """Add a where clause joined with OR."""

    def _apply(query: Query) -> None:
        query.append_where(clause, *args)
        query.set_last_where_as_or()

    return QueryModFunc(_apply)


def or2(mod: QueryMod) -> QueryMod:
    """Apply a where mod and join what it added with OR.

    Whatever the mod is, the last where entry is the one turned into an OR.
    """

    def _apply(query: Query) -> None:
        mod.apply(query)
        query.set_last_where_as_or()

    return QueryModFunc(_apply)


def where_in(clause: str, *args: Any) -> QueryMod:
    """Add an ``x IN ?`` clause, such as ``"(column1,column2) in ?"``."""
    return QueryModFunc(lambda query: query.append_in(clause, *args))


def and_in(clause: str, *args: Any) -> QueryMod:
    """Add an IN clause joined with AND; the same as :func:`where_in`."""
    return QueryModFunc(lambda query: query.append_in(clause, *args))


def or_in(clause: str, *args: Any) -> QueryMod:
    """Add an IN clause joined with OR."""

    def _apply(query: Query) -> None:
        query.append_in(clause, *args)
        query.set_last_where_as_or()

    return QueryModFunc(_apply)


def where_not_in(clause: str, *args: Any) -> QueryMod:
    """Add an ``x NOT IN ?`` clause."""
    return QueryModFunc(lambda query: query.append_not_in(clause, *args))


def and_not_in(clause: str, *args: Any) -> QueryMod:
    """Add a NOT IN clause joined with AND; the same as :func:`where_not_in`."""
    return QueryModFunc(lambda query: query.append_not_in(clause, *args))


def or_not_in(clause: str, *args: Any) -> QueryMod:
    """Add a NOT IN clause joined with OR."""

    def _apply(query: Query) -> None:
        query.append_not_in(clause, *args)
        query.set_last_where_as_or()

    return QueryModFunc(_apply)


def expr(*args: QueryMod) -> QueryMod:
    """Group where mods in parentheses.

    Once used, the where expression gets no automatic parentheses at all.
    Use only with where mods.
    """

    def _apply(query: Query) -> None:
        query.append_where_left_paren()
        for mod in args:
            mod.apply(query)
        query.append_where_right_paren()

    return QueryModFunc(_apply)


def group_by(clause: str) -> QueryMod:
    """Add a group by clause."""
    return QueryModFunc(lambda query: query.append_group_by(clause))


def order_by(clause: str) -> QueryMod:
    """Add an order by clause."""
    return QueryModFunc(lambda query: query.append_order_by(clause))


def having(clause: str, *args: Any) -> QueryMod:
    """Add a having clause."""
    return QueryModFunc(lambda query: query.append_having(clause, *args))


def from_(table: str) -> QueryMod:
    """Add a table to select from."""
    return QueryModFunc(lambda query: query.append_from(table))


def limit(count: int) -> QueryMod:
    """Limit the number of rows returned."""

    def _apply(query: Query) -> None:
        query.limit = count

    return QueryModFunc(_apply)


def offset(count: int) -> QueryMod:
    """Skip this many rows of the result."""

    def _apply(query: Query) -> None:
        query.offset = count

    return QueryModFunc(_apply)


def for_(clause: str) -> QueryMod:
    """Add a locking clause such as ``update`` at the end of the statement."""

    def _apply(query: Query) -> None:
        query.for_lock = clause

    return QueryModFunc(_apply)


def comment(text: str) -> QueryMod:
    """Put a comment at the start of the statement."""

    def _apply(query: Query) -> None:
        query.comment = text

    return QueryModFunc(_apply)


def rels(*args: str) -> str:
    """Join relationship names into a dotted path for :func:`load`."""
    return ".".join(args)


def with_deleted() -> QueryMod:
    """Drop the soft-delete where clause that generated code adds."""

    def _apply(query: Query) -> None:
        query.remove_soft_delete = True

    return QueryModFunc(_apply)