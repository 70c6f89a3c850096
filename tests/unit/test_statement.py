"""Tests for fluent statement assembly."""

from collections.abc import Hashable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest
from sample_records import Account, Coupon, Guarded, Invoice, Measurement, PlainPoint, User

from pgfluent import (
    Statement,
    TableOption,
    UnsupportedInputKindError,
    create_table,
    delete,
    insert_into,
    raw_sql,
    select,
    select_columns,
    update,
)


@pytest.fixture
def account() -> Account:
    return Account(id=1, name="main")


@pytest.fixture
def user() -> User:
    return User(id=7, email="ada@example.com", display_name="Ada", nickname="countess", age=36)


class TestInsert:
    """Tests for INSERT statements."""

    def test_columns_and_values(self, user):
        """VALUES placeholders follow the column list."""
        sql, args = insert_into("users").columns(user).values(user).result()
        assert sql == (
            "INSERT INTO users (id, email, displayName, nick, age, tags) "
            "VALUES (@id, @email, @displayName, @nick, @age, @tags)"
        )
        assert args == {
            "id": 7,
            "email": "ada@example.com",
            "displayName": "Ada",
            "nick": "countess",
            "age": 36,
            "tags": [],
        }

    def test_columns_are_remembered(self, account):
        stmt = insert_into("accounts").columns(Account)
        assert stmt.column_names == ("id", "name")
        assert stmt.values(account).sql == "INSERT INTO accounts (id, name) VALUES (@id, @name)"

    def test_on_conflict_do_nothing(self, account):
        sql = insert_into("accounts").columns(account).values(account).on_conflict("(id)").do_nothing().sql
        assert sql.endswith("VALUES (@id, @name) ON CONFLICT (id) DO NOTHING")

    def test_bare_on_conflict(self, account):
        sql = insert_into("accounts").columns(account).values(account).on_conflict().do_nothing().sql
        assert sql.endswith("ON CONFLICT DO NOTHING")

    def test_on_conflict_do_update(self, account):
        sql = (
            insert_into("accounts")
            .columns(account)
            .values(account)
            .on_conflict("(id)")
            .do_update()
            .set(account)
            .sql
        )
        assert sql.endswith("ON CONFLICT (id) DO UPDATE SET id = @id, name = @name")

    def test_values_with_uncopyable_field(self):
        record = Guarded(id=1)
        stmt = insert_into("t").columns(Guarded).values(record)
        assert stmt.ok
        assert stmt.sql == "INSERT INTO t (id, lock) VALUES (@id, @lock)"
        assert stmt.named_args["lock"] is record.lock

    def test_values_with_unresolvable_annotation(self):
        invoice = Invoice(id=1)
        stmt = insert_into("invoices").columns(invoice).values(invoice)
        assert stmt.ok
        assert stmt.named_args == {"id": 1, "amount": None}


class TestSelect:
    """Tests for SELECT statements."""

    def test_select_record_type(self):
        stmt = select(Account)
        assert stmt.sql == "SELECT id, name"
        assert stmt.named_args == {}
        assert stmt.column_names == ("id", "name")

    def test_select_record_binds_values(self, account):
        assert select(account).named_args == {"id": 1, "name": "main"}

    def test_select_name_list(self):
        assert select(["id", "name"]).sql == "SELECT id, name"

    def test_select_raw_text(self):
        assert select("count(*)").sql == "SELECT count(*)"

    @pytest.mark.parametrize("target", [None, 42, {"id": 1}])
    def test_select_star_fallback(self, target):
        assert select(target).sql == "SELECT *"

    def test_select_columns(self):
        stmt = select_columns("id", "email")
        assert stmt.sql == "SELECT id, email"
        assert stmt.column_names == ("id", "email")

    def test_full_query(self):
        sql, args = (
            select(Account)
            .from_("accounts")
            .where("id = @id", {"id": 1})
            .order_by("name")
            .limit(10)
            .offset(20)
            .result()
        )
        assert sql == "SELECT id, name FROM accounts WHERE id = @id ORDER BY name LIMIT 10 OFFSET 20"
        assert args == {"id": 1}

    def test_distinct(self):
        assert select("name").distinct().from_("t").sql == "SELECT DISTINCT name FROM t"

    def test_distinct_ignores_non_select(self):
        stmt = raw_sql("WITH x AS (SELECT 1) SELECT * FROM x")
        assert stmt.distinct().sql == stmt.sql

    def test_joins(self):
        base = select("u.id, o.total").from_("users u")
        assert base.join("INNER", "orders o", "o.user_id = u.id").sql == (
            "SELECT u.id, o.total FROM users u INNER JOIN orders o ON o.user_id = u.id"
        )
        assert base.left_join("orders o", "o.user_id = u.id").sql.endswith(
            "LEFT JOIN orders o ON o.user_id = u.id"
        )
        assert base.right_join("orders o", "o.user_id = u.id").sql.endswith(
            "RIGHT JOIN orders o ON o.user_id = u.id"
        )
        assert base.full_outer_join("orders o", "o.user_id = u.id").sql.endswith(
            "FULL OUTER JOIN orders o ON o.user_id = u.id"
        )

    def test_group_by_having(self):
        sql, args = (
            select("dept, count(*)")
            .from_("emp")
            .group_by("dept")
            .having("count(*) > @min", {"min": 5})
            .result()
        )
        assert sql == "SELECT dept, count(*) FROM emp GROUP BY dept HAVING count(*) > @min"
        assert args == {"min": 5}


class TestConditions:
    """Tests for WHERE, AND, IN, BETWEEN and LIKE."""

    def test_and_where_without_where_acts_as_where(self):
        assert select().from_("t").and_where("a = @a", {"a": 1}).sql == (
            "SELECT * FROM t WHERE a = @a"
        )

    def test_and_where_after_where(self):
        sql, args = (
            select()
            .from_("t")
            .where("a = @a", {"a": 1})
            .and_where("b = @b", {"b": 2})
            .result()
        )
        assert sql == "SELECT * FROM t WHERE a = @a AND b = @b"
        assert args == {"a": 1, "b": 2}

    def test_second_where_appends_another_where(self):
        sql = select().from_("t").where("a = 1").where("b = 2").sql
        assert sql == "SELECT * FROM t WHERE a = 1 WHERE b = 2"

    def test_where_with_record(self, account):
        assert select().from_("accounts").where("id = @id", account).named_args == {
            "id": 1,
            "name": "main",
        }

    def test_later_bindings_win(self):
        args = (
            select()
            .from_("t")
            .where("id = @id", {"id": 1})
            .and_where("id <> @id", {"id": 2})
            .named_args
        )
        assert args == {"id": 2}

    def test_in_without_where(self):
        sql, args = select().from_("users").in_("id", [1, 2, 3]).result()
        assert sql == "SELECT * FROM users WHERE id IN (@id_in_0, @id_in_1, @id_in_2)"
        assert args == {"id_in_0": 1, "id_in_1": 2, "id_in_2": 3}

    def test_in_after_where(self):
        sql = (
            select()
            .from_("users")
            .where("active = @active", {"active": True})
            .in_("role", ["admin", "ops"])
            .sql
        )
        assert sql == (
            "SELECT * FROM users WHERE active = @active AND role IN (@role_in_0, @role_in_1)"
        )

    def test_between(self):
        start, end = datetime(2024, 1, 1), datetime(2024, 2, 1)
        sql, args = select().from_("events").between("created", start, end).result()
        assert sql == "SELECT * FROM events WHERE created BETWEEN @created_start AND @created_end"
        assert args == {"created_start": start, "created_end": end}

    def test_like(self):
        sql, args = select().from_("users").like("name", "A%").result()
        assert sql == "SELECT * FROM users WHERE name LIKE @name_pattern"
        assert args == {"name_pattern": "A%"}

    def test_like_after_where_adds_another_where(self):
        sql = select().from_("users").where("active = @active").like("name", "A%").sql
        assert sql == "SELECT * FROM users WHERE active = @active WHERE name LIKE @name_pattern"

    def test_between_after_where_adds_another_where(self):
        sql = select().from_("events").where("kind = @kind").between("created", 1, 2).sql
        assert sql == (
            "SELECT * FROM events WHERE kind = @kind "
            "WHERE created BETWEEN @created_start AND @created_end"
        )


class TestUpdateDelete:
    """Tests for UPDATE and DELETE statements."""

    def test_update_set_sorted(self, user):
        sql = update("users").set(user).where("id = @id").sql
        assert sql == (
            "UPDATE users SET age = @age, displayName = @displayName, email = @email, "
            "id = @id, nick = @nick, tags = @tags WHERE id = @id"
        )

    def test_delete_returning(self):
        sql, args = delete().from_("accounts").where("id = @id", {"id": 3}).returning().result()
        assert sql == "DELETE FROM accounts WHERE id = @id RETURNING *"
        assert args == {"id": 3}

    def test_returning_targets(self, account):
        base = update("accounts").set(account)
        assert base.returning(Account).sql.endswith("RETURNING id, name")
        assert base.returning(["id"]).sql.endswith("RETURNING id")
        assert base.returning("id AS account_id").sql.endswith("RETURNING id AS account_id")


class TestImmutability:
    """Statements are values; chaining never mutates."""

    def test_branches_are_independent(self):
        base = select(Account).from_("accounts")
        by_id = base.where("id = @id", {"id": 1})
        by_name = base.where("name = @name", {"name": "main"})

        assert base.sql == "SELECT id, name FROM accounts"
        assert base.named_args == {}
        assert by_id.named_args == {"id": 1}
        assert by_name.named_args == {"name": "main"}

    def test_named_args_returns_copy(self):
        stmt = select().from_("t").where("id = @id", {"id": 1})
        stmt.named_args["id"] = 99
        assert stmt.named_args == {"id": 1}

    def test_concurrent_derivation(self):
        base = select().from_("t")
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda i: base.where("id = @id", {"id": i}), range(20)))
        assert [r.named_args["id"] for r in results] == list(range(20))
        assert base.named_args == {}

    def test_statements_are_not_hashable(self):
        stmt = select().from_("t").where("id = @id", {"id": 1})
        assert not isinstance(stmt, Hashable)
        with pytest.raises(TypeError):
            hash(stmt)


class TestErrorState:
    """Unsupported input is carried as a sticky error."""

    def test_columns_with_non_record(self):
        stmt = insert_into("t").columns(42)
        assert not stmt.ok
        assert isinstance(stmt.error, UnsupportedInputKindError)
        assert stmt.error.operation == "columns"
        with pytest.raises(UnsupportedInputKindError):
            stmt.sql

    def test_error_survives_chain(self, account):
        broken = insert_into("t").columns(PlainPoint(1, 2))
        chained = broken.values(account).on_conflict().do_nothing()
        assert chained is broken
        with pytest.raises(UnsupportedInputKindError):
            chained.result()

    @pytest.mark.parametrize(
        ("build", "operation"),
        [
            (lambda: update("t").set({"a": 1}), "set"),
            (lambda: insert_into("t").columns(Account).values(Account), "values"),
            (lambda: select().from_("t").where("a = @a", [1]), "where"),
            (lambda: select().from_("t").where("a = 1").and_where("b = @b", 5), "and_where"),
            (lambda: select().from_("t").having("a = @a", "x"), "having"),
            (lambda: create_table("t", 5), "create_table"),
            (lambda: create_table("t", PlainPoint), "create_table"),
        ],
    )
    def test_unsupported_inputs(self, build, operation):
        stmt = build()
        assert isinstance(stmt.error, UnsupportedInputKindError)
        assert stmt.error.operation == operation

    def test_str_and_repr(self):
        stmt = update("t").set("nope")
        assert "error" in repr(stmt)
        with pytest.raises(UnsupportedInputKindError):
            str(stmt)

    def test_ok_statement_str(self):
        assert str(select().from_("t")) == "SELECT * FROM t"
        assert isinstance(select(), Statement)


class TestCreateTable:
    """Tests for CREATE TABLE generation."""

    def test_unresolvable_annotation_is_text(self):
        assert create_table("invoices", Invoice).sql == (
            "CREATE TABLE invoices (\n"
            "    id INTEGER,\n"
            "    amount TEXT,\n"
            "    PRIMARY KEY (id)\n"
            ")"
        )

    def test_primary_key_is_trailing(self):
        assert create_table("accounts", Account).sql == (
            "CREATE TABLE accounts (\n"
            "    id INTEGER,\n"
            "    name TEXT NOT NULL UNIQUE,\n"
            "    PRIMARY KEY (id)\n"
            ")"
        )

    def test_composite_primary_key_and_types(self):
        assert create_table("measurements", Measurement).sql == (
            "CREATE TABLE measurements (\n"
            "    sensor_id INTEGER,\n"
            "    taken_at TIMESTAMP,\n"
            "    value REAL,\n"
            "    precise DOUBLE PRECISION,\n"
            "    total BIGINT,\n"
            "    active BOOLEAN,\n"
            "    recorded_at TIMESTAMP,\n"
            "    readings BIGINT[],\n"
            "    matrix TEXT[],\n"
            "    payload TEXT,\n"
            "    PRIMARY KEY (sensor_id, taken_at)\n"
            ")"
        )

    def test_naming_and_exclusions(self):
        sql = create_table("users", User).sql
        assert "    displayName TEXT,\n" in sql
        assert "    nick TEXT NOT NULL,\n" in sql
        assert "    tags TEXT[],\n" in sql
        assert "password_hash" not in sql
        assert "internal_note" not in sql
        assert "_cache" not in sql

    def test_no_primary_key(self):
        assert create_table("coupons", Coupon).sql == (
            "CREATE TABLE coupons (\n"
            "    unique_code TEXT UNIQUE,\n"
            "    discount INTEGER NOT NULL\n"
            ")"
        )

    def test_strict_matching(self):
        sql = create_table("coupons", Coupon, matching="strict").sql
        assert "    unique_code TEXT,\n" in sql

    def test_instance_input(self, account):
        assert create_table("accounts", account).sql == create_table("accounts", Account).sql

    @pytest.mark.parametrize(
        ("option", "prefix"),
        [
            (TableOption.IF_NOT_EXISTS, "CREATE TABLE IF NOT EXISTS accounts (\n"),
            ("IF_NOT_EXISTS", "CREATE TABLE IF NOT EXISTS accounts (\n"),
            ("DROP", "DROP TABLE IF EXISTS accounts;\nCREATE TABLE accounts (\n"),
            ("DROP_CASCADE", "DROP TABLE IF EXISTS accounts CASCADE;\nCREATE TABLE accounts (\n"),
            ("if_not_exists", "CREATE TABLE accounts (\n"),
            ("bogus", "CREATE TABLE accounts (\n"),
            (None, "CREATE TABLE accounts (\n"),
        ],
    )
    def test_options(self, option, prefix):
        assert create_table("accounts", Account, option).sql.startswith(prefix)

    def test_no_named_args(self):
        assert create_table("accounts", Account).named_args == {}
