"""Turning a :class:`~boilquery.query.Query` into SQL text and its arguments."""

from __future__ import annotations

import re
from typing import Any

from boilquery.query import Dialect, JoinKind, Query, WhereKind, _ArgClause, _Where

_IDENTIFIER = re.compile(
    r'"?[a-z_][_a-z0-9]*"?(?:\."?[_a-z][_a-z0-9]*"?)*', re.IGNORECASE | re.ASCII
)
_SMART_QUOTE = re.compile(
    r'"?[a-z_][_a-z0-9\-]*"?(\."?[_a-z][_a-z0-9]*"?)*(\.\*)?', re.IGNORECASE | re.ASCII
)
_IN_CLAUSE = re.compile(
    r"(.*[\t\n\f\r |)?])IN([\t\n\f\r |(?].*)", re.IGNORECASE | re.ASCII
)
_NOT_IN_CLAUSE = re.compile(
    r"(.*[\t\n\f\r |)?])NOT[\t\n\f\r ]+IN([\t\n\f\r |(?].*)", re.IGNORECASE | re.ASCII
)
_QUESTION_MARK = re.compile(r"\\\?|\?")

_JOIN_KEYWORDS = {
    JoinKind.INNER: "INNER JOIN",
    JoinKind.OUTER_LEFT: "LEFT JOIN",
    JoinKind.OUTER_RIGHT: "RIGHT JOIN",
    JoinKind.OUTER_FULL: "FULL JOIN",
}


def ident_quote(lq: str, rq: str, name: str) -> str:
    """Quote a simple, possibly dotted identifier; leave anything else alone."""
    if not name or name.lower() == "null" or name == "?":
        return name
    if not _SMART_QUOTE.fullmatch(name):
        return name

    quoted = []
    for part in name.split("."):
        if part.startswith(lq) or part.endswith(rq) or part == "*":
            quoted.append(part)
        else:
            quoted.append(f"{lq}{part}{rq}")
    return ".".join(quoted)


def _quote_all(dialect: Dialect, names: list[str]) -> list[str]:
    return [ident_quote(dialect.lq, dialect.rq, name) for name in names]


def placeholders(use_index_placeholders: bool, count: int, start: int, group: int) -> str:
    """Write ``count`` placeholders starting at ``start``, in groups of ``group``."""
    if start == 0 or group == 0:
        raise ValueError("Invalid start or group numbers supplied.")

    parts = []
    for i in range(count):
        if i:
            parts.append("),(" if group > 1 and i % group == 0 else ",")
        parts.append(f"${start + i}" if use_index_placeholders else "?")

    body = "".join(parts)
    return f"({body})" if group > 1 else body


def build_query(query: Query) -> tuple[str, list[Any]]:
    """Build the SQL text and arguments of a query, caching them on it."""
    query.strip_soft_delete_where()

    if query.raw_sql:
        return query.raw_sql, query.raw_args
    if query.delete:
        text, args = _build_delete_query(query)
    elif query.update:
        text, args = _build_update_query(query)
    else:
        text, args = _build_select_query(query)

    query.raw_sql = text
    query.raw_args = args
    return text, args


def _select_columns(query: Query) -> str:
    dialect = query.dialect
    if query.distinct:
        if query.count:
            return f"DISTINCT ({query.distinct})"
        return f"DISTINCT {query.distinct}"
    if query.joins and query.select_cols and not query.count:
        return ", ".join(write_as_statements(query))
    if query.select_cols:
        return ", ".join(_quote_all(dialect, query.select_cols))
    if query.joins and not query.count:
        return ", ".join(write_stars(query))
    return "*"


def _write_joins(query: Query, offset: int) -> tuple[str, list[Any]]:
    parts = []
    args: list[Any] = []
    for join in query.joins:
        keyword = _JOIN_KEYWORDS.get(join.kind)
        if keyword is None:
            raise ValueError(f"Unsupported join of kind {join.kind}")
        parts.append(f" {keyword} {join.clause}")
        args.extend(join.args)

    text = "".join(parts)
    if query.dialect.use_index_placeholders:
        text, _ = convert_question_marks(text, offset + 1)
    return text, args


def _build_select_query(query: Query) -> tuple[str, list[Any]]:
    dialect = query.dialect
    args: list[Any] = []
    parts = [write_comment(query)]

    cte_text, cte_args = _write_ctes(query, len(args))
    parts.append(cte_text)
    args.extend(cte_args)

    parts.append("SELECT ")
    if dialect.use_top_clause and query.limit != 0 and query.offset == 0:
        parts.append(f" TOP ({query.limit}) ")

    columns = _select_columns(query)
    parts.append(f"COUNT({columns})" if query.count else columns)

    parts.append(" FROM " + ", ".join(_quote_all(dialect, query.from_)))

    if query.joins:
        join_text, join_args = _write_joins(query, len(args))
        parts.append(join_text)
        args.extend(join_args)

    where_text, where_args = where_clause(query, len(args) + 1)
    parts.append(where_text)
    args.extend(where_args)

    modifier_text, modifier_args = _write_modifiers(query, len(args))
    parts.append(modifier_text)
    args.extend(modifier_args)

    parts.append(";")
    return "".join(parts), args


def _build_delete_query(query: Query) -> tuple[str, list[Any]]:
    args: list[Any] = []
    parts = [write_comment(query)]

    cte_text, cte_args = _write_ctes(query, len(args))
    parts.append(cte_text)
    args.extend(cte_args)

    parts.append("DELETE FROM ")
    parts.append(", ".join(_quote_all(query.dialect, query.from_)))

    where_text, where_args = where_clause(query, 1)
    args.extend(where_args)
    parts.append(where_text)

    modifier_text, modifier_args = _write_modifiers(query, len(args))
    parts.append(modifier_text)
    args.extend(modifier_args)

    parts.append(";")
    return "".join(parts), args


def _build_update_query(query: Query) -> tuple[str, list[Any]]:
    dialect = query.dialect
    args: list[Any] = []
    parts = [write_comment(query)]

    cte_text, cte_args = _write_ctes(query, len(args))
    parts.append(cte_text)
    args.extend(cte_args)

    parts.append("UPDATE ")
    parts.append(", ".join(_quote_all(dialect, query.from_)))

    columns = sorted(query.update)
    args.extend(query.update[name] for name in columns)
    assignments = [
        f"{ident_quote(dialect.lq, dialect.rq, name)} = "
        f"{placeholders(dialect.use_index_placeholders, 1, index, 1)}"
        for index, name in enumerate(columns, start=1)
    ]
    parts.append(" SET " + ", ".join(assignments))

    where_text, where_args = where_clause(query, len(args) + 1)
    args.extend(where_args)
    parts.append(where_text)

    modifier_text, modifier_args = _write_modifiers(query, len(args))
    parts.append(modifier_text)
    args.extend(modifier_args)

    parts.append(";")
    return "".join(parts), args


def _write_parameterized(
    query: Query, keyword: str, delim: str, clauses: list[_ArgClause], offset: int
) -> tuple[str, list[Any]]:
    text = keyword + delim.join(entry.clause for entry in clauses)
    args = [arg for entry in clauses for arg in entry.args]
    if query.dialect.use_index_placeholders:
        text, _ = convert_question_marks(text, offset + 1)
    return text, args


def _write_modifiers(query: Query, offset: int) -> tuple[str, list[Any]]:
    parts = []
    args: list[Any] = []

    if query.group_by:
        parts.append(" GROUP BY " + ", ".join(query.group_by))

    if query.having:
        text, having_args = _write_parameterized(
            query, " HAVING ", " AND ", query.having, offset + len(args)
        )
        parts.append(text)
        args.extend(having_args)

    if query.order_by:
        text, order_args = _write_parameterized(
            query, " ORDER BY ", ", ", query.order_by, offset + len(args)
        )
        parts.append(text)
        args.extend(order_args)

    if not query.dialect.use_top_clause:
        if query.limit != 0:
            parts.append(f" LIMIT {query.limit}")
        if query.offset != 0:
            parts.append(f" OFFSET {query.offset}")
    elif query.offset != 0:
        # OFFSET ... FETCH needs an ORDER BY; an arbitrary one will do.
        if not query.order_by:
            parts.append(" ORDER BY (SELECT NULL)")
        parts.append(f" OFFSET {query.offset} ROWS")
        if query.limit != 0:
            parts.append(f" FETCH NEXT {query.limit} ROWS ONLY")

    if query.for_lock:
        parts.append(f" FOR {query.for_lock}")

    return "".join(parts), args


def write_stars(query: Query) -> list[str]:
    """Select every column of every table in FROM, by alias where one is given."""
    dialect = query.dialect
    columns = []
    for source in query.from_:
        tokens = source.split(" ")
        if len(tokens) == 1:
            columns.append(f"{ident_quote(dialect.lq, dialect.rq, tokens[0])}.*")
            continue

        alias, name, ok = parse_from_clause(tokens)
        if not ok:
            return []
        columns.append(f"{ident_quote(dialect.lq, dialect.rq, alias or name)}.*")
    return columns


def write_as_statements(query: Query) -> list[str]:
    """Quote selected columns, naming dotted ones with an AS of their full name."""
    dialect = query.dialect
    columns = []
    for column in query.select_cols:
        if not _IDENTIFIER.fullmatch(column):
            columns.append(column)
            continue

        tokens = column.split(".")
        quoted = ident_quote(dialect.lq, dialect.rq, column)
        if len(tokens) == 1:
            columns.append(quoted)
            continue

        alias = ".".join(token.strip('"') for token in tokens)
        columns.append(f'{quoted} as "{alias}"')
    return columns


def _in_expression(
    dialect: Dialect, entry: _Where, start_at: int, manual_parens: bool
) -> tuple[str, int]:
    """Write one IN / NOT IN entry; return the text and the placeholders used."""
    total = len(entry.args)
    is_in = entry.kind is WhereKind.IN

    if total == 0:
        # An empty IN is invalid SQL; write something that still chains.
        return ("(1=0)" if is_in else "(1=1)"), 0

    open_, close = ("", "") if manual_parens else ("(", ")")
    pattern = _IN_CLAUSE if is_in else _NOT_IN_CLAUSE
    match = pattern.fullmatch(entry.clause)

    if match is None:
        clause, used = convert_in_question_marks(
            dialect.use_index_placeholders, entry.clause, start_at, 1, total
        )
        return f"{open_}{clause}{close}", used

    left_side = match.group(1).strip()
    right_side = match.group(2).strip()

    columns = _quote_all(dialect, left_side.split(","))
    group_at = len(columns)
    joined = ",".join(columns)

    if dialect.use_index_placeholders:
        left_clause, left_count = convert_question_marks(joined, start_at)
    else:
        left_clause = joined
        left_count = sum(1 for column in columns if column == "?")

    right_clause, right_count = convert_in_question_marks(
        dialect.use_index_placeholders,
        right_side,
        start_at + left_count,
        group_at,
        total - left_count,
    )
    keyword = " IN " if is_in else " NOT IN "
    return f"{open_}{left_clause}{keyword}{right_clause}{close}", left_count + right_count


def where_clause(query: Query, start_at: int) -> tuple[str, list[Any]]:
    """Write the WHERE clause, numbering placeholders from ``start_at``."""
    if not query.where:
        return "", []

    manual_parens = any(
        entry.kind in (WhereKind.LEFT_PAREN, WhereKind.RIGHT_PAREN) for entry in query.where
    )
    dialect = query.dialect
    parts = [" WHERE "]
    args: list[Any] = []

    not_first = False
    for entry in query.where:
        if not_first and entry.kind is not WhereKind.RIGHT_PAREN:
            parts.append(" OR " if entry.or_separator else " AND ")
        else:
            not_first = True

        if entry.kind is WhereKind.NORMAL:
            clause = entry.clause
            if dialect.use_index_placeholders:
                clause, used = convert_question_marks(clause, start_at)
                start_at += used
            parts.append(clause if manual_parens else f"({clause})")
            args.extend(entry.args)
        elif entry.kind is WhereKind.LEFT_PAREN:
            parts.append("(")
            not_first = False
        elif entry.kind is WhereKind.RIGHT_PAREN:
            parts.append(")")
        elif entry.kind in (WhereKind.IN, WhereKind.NOT_IN):
            text, used = _in_expression(dialect, entry, start_at, manual_parens)
            parts.append(text)
            start_at += used
            args.extend(entry.args)
        else:
            raise ValueError("unknown where type")

    return "".join(parts), args


def convert_in_question_marks(
    use_index_placeholders: bool, clause: str, start_at: int, group_at: int, total: int
) -> tuple[str, int]:
    """Replace the first unescaped ``?`` with a group of placeholders.

    Returns the new clause and how many placeholders were written.
    """
    if start_at == 0 or not clause:
        raise ValueError("Not a valid start number.")

    found_at = next(
        (
            i
            for i, char in enumerate(clause)
            if char == "?" and (i == 0 or clause[i - 1] != "\\")
        ),
        -1,
    )
    if found_at == -1:
        return clause.replace("\\?", "?"), 0

    group = placeholders(use_index_placeholders, total, start_at, group_at)
    result = f"{clause[:found_at]}({group}){clause[found_at + 1:]}"
    return result.replace("\\?", "?"), total


def convert_question_marks(clause: str, start_at: int) -> tuple[str, int]:
    """Replace each unescaped ``?`` with ``$n``, counting up from ``start_at``.

    An escaped ``\\?`` becomes a plain ``?``. Returns the clause and the count.
    """
    if start_at == 0:
        raise ValueError("Not a valid start number.")

    counter = 0

    def _replace(match: re.Match[str]) -> str:
        nonlocal counter
        if match.group() == "\\?":
            return "?"
        number = start_at + counter
        counter += 1
        return f"${number}"

    return _QUESTION_MARK.sub(_replace, clause), counter


def parse_from_clause(tokens: list[str]) -> tuple[str, str, bool]:
    """Read ``a``, ``a b`` or ``a as b``; return ``(alias, name, ok)``."""
    alias = ""
    name = ""
    ok = False
    saw_ident = False
    saw_as = False

    for token in tokens[:3]:
        lowered = token.lower()
        if saw_ident and lowered == "as":
            saw_as = True
            continue
        if saw_ident and lowered == "on":
            break
        if not _IDENTIFIER.fullmatch(token):
            break
        if saw_ident or saw_as:
            alias = token.strip('"')
            break
        name = token.strip('"')
        saw_ident = True
        ok = True

    return alias, name, ok


def write_comment(query: Query) -> str:
    """Write the query's comment as SQL line comments."""
    if not query.comment:
        return ""
    return "".join(f"-- {line}\n" for line in query.comment.split("\n"))


def _write_ctes(query: Query, offset: int) -> tuple[str, list[Any]]:
    if not query.withs:
        return "", []

    body = ",".join(f" {entry.clause}" for entry in query.withs) + " "
    args = [arg for entry in query.withs for arg in entry.args]
    if query.dialect.use_index_placeholders:
        body, _ = convert_question_marks(body, offset + 1)
    return "WITH" + body, args