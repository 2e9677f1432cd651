"""QueryGenerator tests."""

import pytest

from pyfilter2sql import (
    Condition,
    DeleteOptions,
    InsertOptions,
    InvalidArgumentsError,
    JoinClause,
    JoinKind,
    Operator,
    OrderBy,
    Pagination,
    QueryGenerator,
    SelectOptions,
    SortDirection,
    UpdateOptions,
    build_select,
)
from tests.conftest import ALL_DIALECTS, assert_params_match


@pytest.fixture
def gen():
    return QueryGenerator("postgresql")


@pytest.fixture
def mysql_gen():
    return QueryGenerator("mysql")


class TestSelect:
    def test_simple(self, gen):
        result = gen.generate_select(SelectOptions(table="users"))
        assert result.sql == "SELECT * FROM users"
        assert result.params == {}

    def test_columns(self, gen):
        result = gen.generate_select(SelectOptions(table="users", columns=["id", "name", "email"]))
        assert result.sql == "SELECT id, name, email FROM users"

    def test_alias(self, gen):
        result = gen.generate_select(
            SelectOptions(table="users", alias="u", columns=["u.id", "u.name"])
        )
        assert result.sql == "SELECT u.id, u.name FROM users u"

    def test_where_equals(self, gen):
        result = gen.generate_select(
            SelectOptions(
                table="users",
                where=[Condition("status", Operator.EQUALS, "active")],
            )
        )
        assert result.sql == "SELECT * FROM users WHERE status = $param1"
        assert result.params == {"param1": "active"}

    def test_multiple_conditions_joined_with_and(self, gen):
        result = gen.generate_select(
            SelectOptions(
                table="users",
                where=[
                    Condition("status", Operator.EQUALS, "active"),
                    Condition("age", Operator.GREATER_THAN, 18),
                ],
            )
        )
        assert result.sql == "SELECT * FROM users WHERE status = $param1 AND age > $param2"
        assert result.params == {"param1": "active", "param2": 18}

    def test_full_clause_order(self, gen):
        result = gen.generate_select(
            SelectOptions(
                table="orders",
                alias="o",
                columns=["o.customer_id", "COUNT(*) AS n"],
                joins=[JoinClause(JoinKind.INNER, "customers", "o.customer_id", "c.id", alias="c")],
                where=[Condition("o.total", Operator.GREATER_THAN_OR_EQUAL, 10)],
                group_by=["o.customer_id"],
                having=[Condition("COUNT(*)", Operator.GREATER_THAN, 5)],
                order_by=[OrderBy("n", SortDirection.DESC)],
                pagination=Pagination(page=2, limit=25),
            )
        )
        assert result.sql == (
            "SELECT o.customer_id, COUNT(*) AS n FROM orders o"
            " INNER JOIN customers c ON o.customer_id = c.id"
            " WHERE o.total >= $param1"
            " GROUP BY o.customer_id"
            " HAVING COUNT(*) > $param2"
            " ORDER BY n DESC"
            " LIMIT 25 OFFSET 25"
        )
        assert result.params == {"param1": 10, "param2": 5}

    def test_join_extra_predicates(self, gen):
        result = gen.generate_select(
            SelectOptions(
                table="posts",
                joins=[
                    JoinClause(
                        JoinKind.LEFT,
                        "users",
                        "posts.author_id",
                        "u.id",
                        alias="u",
                        extra=("u.deleted_at IS NULL",),
                    )
                ],
            )
        )
        assert result.sql == (
            "SELECT * FROM posts LEFT JOIN users u"
            " ON posts.author_id = u.id AND u.deleted_at IS NULL"
        )

    def test_pagination_with_exact_start(self, gen):
        result = gen.generate_select(
            SelectOptions(table="users", pagination=Pagination(page=2, limit=10, start=15))
        )
        assert result.sql == "SELECT * FROM users LIMIT 10 OFFSET 15"

    def test_multiple_order_keys(self, gen):
        result = gen.generate_select(
            SelectOptions(
                table="users",
                order_by=[OrderBy("last_name"), OrderBy("created_at", SortDirection.DESC)],
            )
        )
        assert result.sql.endswith("ORDER BY last_name ASC, created_at DESC")


class TestConditionRendering:
    @pytest.mark.parametrize(
        ("operator", "symbol"),
        [
            (Operator.EQUALS, "="),
            (Operator.NOT_EQUALS, "!="),
            (Operator.GREATER_THAN, ">"),
            (Operator.GREATER_THAN_OR_EQUAL, ">="),
            (Operator.LESS_THAN, "<"),
            (Operator.LESS_THAN_OR_EQUAL, "<="),
        ],
    )
    def test_comparisons(self, gen, operator, symbol):
        result = gen.generate_select(
            SelectOptions(table="t", where=[Condition("x", operator, 1)])
        )
        assert result.sql == f"SELECT * FROM t WHERE x {symbol} $param1"

    def test_like_wraps_value(self, gen):
        result = gen.generate_select(
            SelectOptions(table="users", where=[Condition("name", Operator.LIKE, "John")])
        )
        assert result.sql == "SELECT * FROM users WHERE name LIKE $param1"
        assert result.params == {"param1": "%John%"}

    def test_in(self, gen):
        result = gen.generate_select(
            SelectOptions(
                table="users",
                where=[Condition("status", Operator.IN, ["active", "pending", "new"])],
            )
        )
        assert result.sql == (
            "SELECT * FROM users WHERE status IN ($param1_0, $param1_1, $param1_2)"
        )
        assert result.params == {
            "param1_0": "active",
            "param1_1": "pending",
            "param1_2": "new",
        }

    def test_in_tuple(self, gen):
        result = gen.generate_select(
            SelectOptions(table="t", where=[Condition("id", Operator.IN, (1, 2))])
        )
        assert result.params == {"param1_0": 1, "param1_1": 2}

    def test_between(self, gen):
        result = gen.generate_select(
            SelectOptions(table="users", where=[Condition("age", Operator.BETWEEN, [18, 65])])
        )
        assert result.sql == (
            "SELECT * FROM users WHERE age BETWEEN $param1_start AND $param1_end"
        )
        assert result.params == {"param1_start": 18, "param1_end": 65}

    @pytest.mark.parametrize("value", [[1], [1, 2, 3], [], 5, "1,2"])
    def test_malformed_between_renders_nothing(self, gen, value):
        result = gen.generate_select(
            SelectOptions(table="users", where=[Condition("age", Operator.BETWEEN, value)])
        )
        assert result.sql == "SELECT * FROM users"
        assert result.params == {}

    @pytest.mark.parametrize("value", [[], "abc", 3])
    def test_malformed_in_renders_nothing(self, gen, value):
        result = gen.generate_select(
            SelectOptions(table="users", where=[Condition("id", Operator.IN, value)])
        )
        assert result.sql == "SELECT * FROM users"
        assert result.params == {}

    def test_malformed_condition_keeps_the_rest(self, gen):
        result = gen.generate_select(
            SelectOptions(
                table="users",
                where=[
                    Condition("age", Operator.BETWEEN, [1]),
                    Condition("status", Operator.EQUALS, "active"),
                ],
            )
        )
        assert result.sql == "SELECT * FROM users WHERE status = $param2"
        assert_params_match(result)

    def test_is_null(self, gen):
        result = gen.generate_select(
            SelectOptions(table="users", where=[Condition("deleted_at", Operator.IS_NULL, True)])
        )
        assert result.sql == "SELECT * FROM users WHERE deleted_at IS NULL"
        assert result.params == {}

    def test_is_not_null(self, gen):
        result = gen.generate_select(
            SelectOptions(table="users", where=[Condition("deleted_at", Operator.IS_NULL, False)])
        )
        assert result.sql == "SELECT * FROM users WHERE deleted_at IS NOT NULL"

    def test_custom_param_name(self, gen):
        result = gen.generate_select(
            SelectOptions(
                table="users",
                where=[Condition("email", Operator.EQUALS, "a@b.c", param_name="email")],
            )
        )
        assert result.sql == "SELECT * FROM users WHERE email = $email"
        assert result.params == {"email": "a@b.c"}

    def test_duplicate_custom_param_name_raises(self, gen):
        options = SelectOptions(
            table="users",
            where=[
                Condition("email", Operator.EQUALS, "a@b.c", param_name="v"),
                Condition("name", Operator.EQUALS, "Ann", param_name="v"),
            ],
        )
        with pytest.raises(InvalidArgumentsError, match="invalid query arguments"):
            gen.generate_select(options)

    def test_custom_name_colliding_with_generated_raises(self, gen):
        options = SelectOptions(
            table="users",
            where=[
                Condition("name", Operator.EQUALS, "Ann"),
                Condition("email", Operator.EQUALS, "a@b.c", param_name="param1"),
            ],
        )
        with pytest.raises(InvalidArgumentsError):
            gen.generate_select(options)

    def test_mixed_shapes_are_bijective(self, gen):
        result = gen.generate_select(
            SelectOptions(
                table="users",
                where=[
                    Condition("status", Operator.IN, ["a", "b"]),
                    Condition("age", Operator.BETWEEN, [1, 9]),
                    Condition("deleted_at", Operator.IS_NULL, True),
                    Condition("name", Operator.LIKE, "jo"),
                ],
                having=[Condition("COUNT(*)", Operator.GREATER_THAN, 1)],
            )
        )
        assert_params_match(result)
        assert len(result.params) == 6


class TestMySQL:
    def test_named_colon_placeholders(self, mysql_gen):
        result = mysql_gen.generate_select(
            SelectOptions(table="users", where=[Condition("status", Operator.EQUALS, "active")])
        )
        assert result.sql.endswith("WHERE status = :param1")
        assert result.params == {"param1": "active"}

    def test_insert_never_returns(self, mysql_gen):
        result = mysql_gen.generate_insert(
            InsertOptions(table="users", columns=["name"], values=["a"], returning=["id"])
        )
        assert result.sql == "INSERT INTO users (name) VALUES (:param1)"
        assert "RETURNING" not in result.sql

    def test_update_and_delete_never_return(self, mysql_gen):
        update = mysql_gen.generate_update(
            UpdateOptions(table="users", columns=["name"], values=["a"], returning=["id"])
        )
        delete = mysql_gen.generate_delete(DeleteOptions(table="users", returning=["id"]))
        assert "RETURNING" not in update.sql
        assert "RETURNING" not in delete.sql


class TestInsert:
    def test_insert(self, gen):
        result = gen.generate_insert(
            InsertOptions(table="users", columns=["name", "email"], values=["Ann", "a@x.io"])
        )
        assert result.sql == "INSERT INTO users (name, email) VALUES ($param1, $param2)"
        assert result.params == {"param1": "Ann", "param2": "a@x.io"}

    def test_insert_returning(self, gen):
        result = gen.generate_insert(
            InsertOptions(table="users", columns=["name"], values=["Ann"], returning=["id", "created_at"])
        )
        assert result.sql == "INSERT INTO users (name) VALUES ($param1) RETURNING id, created_at"

    def test_mismatched_lengths_raise(self, gen):
        with pytest.raises(InvalidArgumentsError):
            gen.generate_insert(InsertOptions(table="users", columns=["a", "b"], values=[1]))


class TestUpdate:
    def test_update_with_where(self, gen):
        result = gen.generate_update(
            UpdateOptions(
                table="users",
                columns=["name", "age"],
                values=["Bob", 30],
                where=[Condition("id", Operator.EQUALS, 7)],
                returning=["id"],
            )
        )
        assert result.sql == (
            "UPDATE users SET name = $param1, age = $param2 WHERE id = $param3 RETURNING id"
        )
        assert result.params == {"param1": "Bob", "param2": 30, "param3": 7}

    def test_update_without_where(self, gen):
        result = gen.generate_update(UpdateOptions(table="users", columns=["active"], values=[False]))
        assert result.sql == "UPDATE users SET active = $param1"


class TestDelete:
    def test_delete_all(self, gen):
        assert gen.generate_delete(DeleteOptions(table="users")).sql == "DELETE FROM users"

    def test_delete_with_where_and_returning(self, gen):
        result = gen.generate_delete(
            DeleteOptions(
                table="users",
                where=[Condition("id", Operator.IN, [1, 2])],
                returning=["id"],
            )
        )
        assert result.sql == "DELETE FROM users WHERE id IN ($param1_0, $param1_1) RETURNING id"


class TestCount:
    def test_count(self, gen):
        result = gen.generate_count(
            SelectOptions(
                table="users",
                alias="u",
                columns=["u.id"],
                where=[Condition("u.status", Operator.EQUALS, "active")],
                order_by=[OrderBy("u.id")],
                pagination=Pagination(1, 10),
            )
        )
        assert result.sql == "SELECT COUNT(*) as total FROM users u WHERE u.status = $param1"
        assert result.params == {"param1": "active"}


class TestCounterReset:
    def test_each_call_starts_at_param1(self, gen):
        opts = SelectOptions(table="users", where=[Condition("a", Operator.EQUALS, 1)])
        first = gen.generate_select(opts)
        second = gen.generate_select(opts)
        assert first == second
        assert second.params == {"param1": 1}


class TestCrossDialect:
    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    def test_like_wrapped_once(self, dialect):
        result = build_select(
            SelectOptions(table="t", where=[Condition("name", Operator.LIKE, "%x")]),
            dialect=dialect,
        )
        assert result.params == {"param1": "%%x%"}

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    def test_in_produces_n_params(self, dialect):
        values = list(range(5))
        result = build_select(
            SelectOptions(table="t", where=[Condition("id", Operator.IN, values)]),
            dialect=dialect,
        )
        assert sorted(result.params) == [f"param1_{i}" for i in range(5)]
        in_list = result.sql.split("IN (")[1].rstrip(")")
        assert len(in_list.split(", ")) == 5
        assert_params_match(result)
