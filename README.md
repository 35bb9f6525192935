# boilquery

A small, dependency-free SQL query builder. A query is put together from
composable *query mods* and rendered to SQL text plus a flat list of
arguments, ready to hand to any database driver.

## Install

    pip install boilquery

## Building queries

Create a `Query`, give it a `Dialect`, and apply query mods from
`boilquery.qm`. Then render it with `boilquery.query_builders.build_query`:

```python
from boilquery.query import Query, Dialect
from boilquery import qm
from boilquery.query_builders import build_query

q = Query()
q.dialect = Dialect(lq='"', rq='"', use_index_placeholders=True)
qm.apply(
    q,
    qm.from_("videos"),
    qm.select("id", "title"),
    qm.where("deleted = ?", False),
    qm.or_in("user_id in ?", 1, 2, 3),
    qm.order_by("id DESC"),
    qm.limit(10),
)

sql, args = build_query(q)
# SELECT "id", "title" FROM "videos" WHERE (deleted = $1) OR ("user_id" IN ($2,$3,$4)) ORDER BY id DESC LIMIT 10;
# args == [False, 1, 2, 3]
```

`build_query` stores the rendered text and arguments on the query, so a
second call returns them again. A query with `delete` set renders a
`DELETE`, one with an `update` mapping renders an `UPDATE ... SET` with the
columns in sorted order, and anything else renders a `SELECT`.

### Dialects

`Dialect` holds the identifier quote characters (`lq`, `rq`) and two
switches:

- `use_index_placeholders`: write `$1`, `$2`, ... instead of `?`. A `\?` in
  a clause is left as a literal `?`.
- `use_top_clause`: write `TOP (n)` for a limit without an offset, and
  `OFFSET n ROWS FETCH NEXT m ROWS ONLY` otherwise (adding
  `ORDER BY (SELECT NULL)` when there is no order by).

### Query mods

`boilquery.qm` has mods for every part of a statement:

- tables and columns: `from_`, `select`, `distinct`
- joins: `inner_join`, `left_outer_join`, `right_outer_join`,
  `full_outer_join`
- conditions: `where`, `and_`, `or_`, `where_in`, `and_in`, `or_in`,
  `where_not_in`, `and_not_in`, `or_not_in`, and grouping with `expr` and
  `or2`
- `group_by`, `having`, `order_by`, `limit`, `offset`
- `with_` for common table expressions, `for_` for row locking, `comment`
  for leading `--` comments
- `sql` to replace the whole statement with raw SQL
- `with_deleted` to drop an automatic `deleted_at is null` condition
- `load` and `rels` to record relationship paths (and their own mods) on
  the query

An empty `where_in` renders as `(1=0)` and an empty `where_not_in` as
`(1=1)`, so they can be chained safely. IN clauses over several columns,
such as `"(a,b) in ?"`, group their placeholders: `(($1,$2),($3,$4))`.

Any object with an `apply(query)` method is a query mod; `QueryModFunc`
wraps a plain function of a query.

### Typed conditions

`boilquery.qmhelper` builds `WhereQueryMod`s for generated model code:
`where(name, Operator.GTE, value)`, `where_is_null`, `where_is_not_null`,
and `where_null_eq`, which turns a null value (None, or an object whose
`is_zero()` is true) into `IS NULL` / `IS NOT NULL`.

### Raw SQL

`boilquery.query.raw("select * from users where id = ?", 5)` gives a query
whose text and arguments `build_query` passes through unchanged.

## Values

`boilquery.values` helps compare and copy key-like values, where a
*valuer* has a `value()` method returning a primitive and a *scanner* has a
`scan(src)` method:

- `equal(a, b)` compares through valuers, parses a string against a number,
  and raises `TypeError` when the primitive types differ.
- `assign(dst, src)` loads a scanner in place, or returns the valuer's value
  converted to the destination's type (its zero value for a null).
- `must_time`, `is_valuer_nil`, `is_nil` and `set_scanner`.

## What it does not do

boilquery builds SQL; it does not talk to a database. It has no connection
handling, does not execute queries, does not bind result rows onto objects
and does not eager load relationships. `qm.load` only records relationship
paths and their mods on the query for other code to use.

## Tests

    pip install -e .[test]
    pytest