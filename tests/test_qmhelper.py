import pytest

from boilquery.qmhelper import (
    Operator,
    WhereQueryMod,
    where,
    where_is_not_null,
    where_is_null,
    where_null_eq,
)
from boilquery.query import Query


class Nullable:
    def __init__(self, zero):
        self.zero = zero

    def is_zero(self):
        return self.zero


def test_apply_appends_where():
    q = Query()
    WhereQueryMod("a = ?", [1]).apply(q)
    assert q.where[0].clause == "a = ?"
    assert q.where[0].args == [1]


def test_where_is_null():
    mod = where_is_null("col")
    assert mod.clause == "col is null"
    assert mod.args == []


def test_where_is_not_null():
    assert where_is_not_null("col").clause == "col is not null"


def test_where_null_eq_with_none_matches_is_null():
    assert where_null_eq("col", False, None) == where_is_null("col")
    assert where_null_eq("col", True, None) == where_is_not_null("col")


def test_where_null_eq_with_nullable():
    assert where_null_eq("col", False, Nullable(True)) == where_is_null("col")
    value = Nullable(False)
    mod = where_null_eq("col", False, value)
    assert mod.args == [value]
    assert mod == where("col", Operator.EQ, value)


def test_where_null_eq_negated_value():
    mod = where_null_eq("col", True, 5)
    assert mod == where("col", Operator.NEQ, 5)


@pytest.mark.parametrize("op", list(Operator))
def test_where_operators(op):
    mod = where("col", op, 7)
    assert mod.clause == f"col {op.value} ?"
    assert mod.args == [7]


def test_where_accepts_operator_string():
    assert where("col", ">=", 1) == where("col", Operator.GTE, 1)


def test_where_rejects_unknown_operator():
    with pytest.raises(ValueError):
        where("col", "LIKE", 1)


def test_where_applied_to_query():
    q = Query()
    where("col", Operator.LT, 3).apply(q)
    assert q.where[0].clause == "col < ?"
    assert q.where[0].args == [3]