"""Tests for fastrest.data.query — the immutable SELECT builder."""

import pytest

from fastrest.data import (
    Database,
    EmptyArgument,
    IdentifierGuard,
    InvalidIdentifier,
    InvalidJoinType,
    InvalidLimit,
    InvalidOperator,
    InvalidSortDirection,
    QueryBuilder,
    ValidationError,
)

# =============================================================================
# Rendering
# =============================================================================


class TestBasicRendering:
    def test_select_star(self) -> None:
        assert QueryBuilder("products").sql == 'SELECT * FROM "products"'

    def test_columns(self) -> None:
        qb = QueryBuilder("products", ["id", "products.name"])
        assert qb.sql == 'SELECT "id", "products"."name" FROM "products"'

    def test_columns_replace(self) -> None:
        qb = QueryBuilder("products", ["id"]).columns(["name"])
        assert qb.sql == 'SELECT "name" FROM "products"'

    def test_empty_columns_mean_star(self) -> None:
        assert QueryBuilder("products", ["id"]).columns([]).sql == 'SELECT * FROM "products"'

    def test_mysql_dialect(self) -> None:
        qb = QueryBuilder("products", ["name"], guard=IdentifierGuard("mysql"))
        assert qb.sql == "SELECT `name` FROM `products`"

    def test_bad_table(self) -> None:
        with pytest.raises(InvalidIdentifier):
            QueryBuilder("products; DROP TABLE users")

    def test_bad_column(self) -> None:
        with pytest.raises(InvalidIdentifier):
            QueryBuilder("products", ["name, password"])

    def test_to_statement(self) -> None:
        stmt = QueryBuilder("products").where("id", "=", 3).to_statement()
        assert stmt.text == 'SELECT * FROM "products" WHERE "id" = :id_1'
        assert stmt.params == {"id_1": 3}


class TestWhere:
    def test_and_or(self) -> None:
        qb = (
            QueryBuilder("products")
            .where("status", "=", "active")
            .or_where("featured", "=", 1)
            .where("price", "<", 30)
        )
        assert qb.sql == (
            'SELECT * FROM "products" WHERE "status" = :status_1 '
            'OR "featured" = :featured_2 AND "price" < :price_3'
        )
        assert qb.params == {"status_1": "active", "featured_2": 1, "price_3": 30}

    def test_first_connector_dropped(self) -> None:
        qb = QueryBuilder("products").or_where("id", "=", 1)
        assert qb.sql == 'SELECT * FROM "products" WHERE "id" = :id_1'

    def test_same_column_twice_gets_distinct_placeholders(self) -> None:
        qb = QueryBuilder("products").where("price", ">", 10).where("price", "<", 100)
        assert qb.sql.endswith('WHERE "price" > :price_1 AND "price" < :price_2')
        assert qb.params == {"price_1": 10, "price_2": 100}

    def test_qualified_column_placeholder(self) -> None:
        qb = QueryBuilder("products").where("products.id", "=", 1)
        assert qb.sql.endswith('WHERE "products"."id" = :products_id_1')

    def test_operator_case_and_spacing_normalized(self) -> None:
        qb = QueryBuilder("products").where("name", "not   like", "%x%")
        assert qb.sql.endswith('WHERE "name" NOT LIKE :name_1')

    @pytest.mark.parametrize("op", ["==", "; DROP", "REGEXP", "", None])
    def test_invalid_operator(self, op: object) -> None:
        with pytest.raises(InvalidOperator):
            QueryBuilder("products").where("name", op, "x")  # type: ignore[arg-type]

    def test_bad_column(self) -> None:
        with pytest.raises(InvalidIdentifier):
            QueryBuilder("products").where("1=1 OR name", "=", "x")

    def test_value_never_in_text(self) -> None:
        qb = QueryBuilder("products").where("name", "=", "' OR '1'='1")
        assert "OR '1'" not in qb.sql


class TestWhereIn:
    def test_one_placeholder_per_element(self) -> None:
        qb = QueryBuilder("products").where("id", "IN", [4, 5, 6])
        assert qb.sql.endswith('WHERE "id" IN (:id_1, :id_2, :id_3)')
        assert qb.params == {"id_1": 4, "id_2": 5, "id_3": 6}

    def test_not_in_then_more(self) -> None:
        qb = QueryBuilder("products").where("id", "not in", (1, 2)).where("price", ">", 5)
        assert qb.sql.endswith('WHERE "id" NOT IN (:id_1, :id_2) AND "price" > :price_3')

    def test_empty_list(self) -> None:
        with pytest.raises(EmptyArgument):
            QueryBuilder("products").where("id", "IN", [])

    @pytest.mark.parametrize("value", ["1,2,3", 5, None])
    def test_non_sequence(self, value: object) -> None:
        with pytest.raises(ValidationError):
            QueryBuilder("products").where("id", "IN", value)


class TestWhereNull:
    def test_is_null_binds_nothing(self) -> None:
        qb = QueryBuilder("products").where("deleted_at", "IS NULL")
        assert qb.sql.endswith('WHERE "deleted_at" IS NULL')
        assert qb.params == {}

    def test_is_not_null(self) -> None:
        qb = QueryBuilder("products").where("deleted_at", "is not null").where("id", "=", 1)
        assert qb.sql.endswith('WHERE "deleted_at" IS NOT NULL AND "id" = :id_1')


class TestWhereIf:
    def test_truthy_adds(self) -> None:
        qb = QueryBuilder("products").where_if("active", "status", "=", "active")
        assert qb.params == {"status_1": "active"}

    @pytest.mark.parametrize("condition", [None, "", 0, False])
    def test_falsy_skips(self, condition: object) -> None:
        qb = QueryBuilder("products")
        assert qb.where_if(condition, "status", "=", condition) is qb


class TestWhereRaw:
    def test_raw_with_param(self) -> None:
        qb = (
            QueryBuilder("products")
            .where("status", "=", "active")
            .where_raw("price BETWEEN :lo AND :hi")
            .with_param("lo", 10)
            .with_param("hi", 50)
        )
        assert qb.sql.endswith('WHERE "status" = :status_1 AND price BETWEEN :lo AND :hi')
        assert qb.params == {"status_1": "active", "lo": 10, "hi": 50}


class TestJoins:
    def test_inner_and_left_in_order(self) -> None:
        qb = (
            QueryBuilder("products", ["products.name", "categories.title"])
            .inner_join("categories", "categories.id = products.category_id")
            .left_join("stock", "stock.product_id = products.id")
            .where("products.status", "=", "active")
        )
        assert qb.sql == (
            'SELECT "products"."name", "categories"."title" FROM "products" '
            'INNER JOIN "categories" ON categories.id = products.category_id '
            'LEFT JOIN "stock" ON stock.product_id = products.id '
            'WHERE "products"."status" = :products_status_1'
        )

    def test_join_type_normalized(self) -> None:
        qb = QueryBuilder("a").join("full  outer", "b", "a.id = b.id")
        assert qb.sql == 'SELECT * FROM "a" FULL OUTER JOIN "b" ON a.id = b.id'

    def test_right_join(self) -> None:
        assert "RIGHT JOIN" in QueryBuilder("a").join("right", "b", "a.id = b.a_id").sql

    def test_cross_join_has_no_on(self) -> None:
        assert QueryBuilder("a").join("CROSS", "b").sql == 'SELECT * FROM "a" CROSS JOIN "b"'

    def test_missing_on(self) -> None:
        with pytest.raises(EmptyArgument):
            QueryBuilder("a").join("INNER", "b")

    def test_invalid_type(self) -> None:
        with pytest.raises(InvalidJoinType):
            QueryBuilder("a").join("OUTER; DROP", "b", "1=1")

    def test_bad_table(self) -> None:
        with pytest.raises(InvalidIdentifier):
            QueryBuilder("a").inner_join("b c", "1=1")


class TestGroupHavingOrder:
    def test_full_render_order(self) -> None:
        qb = (
            QueryBuilder("products", ["status"])
            .order_by("status", "desc")
            .limit(5)
            .offset(10)
            .having("COUNT(*) > :min")
            .with_param("min", 1)
            .group_by("status")
            .where("price", ">", 0)
            .inner_join("categories", "categories.id = products.category_id")
        )
        assert qb.sql == (
            'SELECT "status" FROM "products" '
            'INNER JOIN "categories" ON categories.id = products.category_id '
            'WHERE "price" > :price_1 '
            'GROUP BY "status" HAVING COUNT(*) > :min '
            'ORDER BY "status" DESC LIMIT 5 OFFSET 10'
        )

    def test_group_by_replaces(self) -> None:
        qb = QueryBuilder("products").group_by("status").group_by("name")
        assert qb.sql == 'SELECT * FROM "products" GROUP BY "name"'

    def test_having_without_group_by(self) -> None:
        qb = QueryBuilder("products").having("COUNT(*) > 1")
        with pytest.raises(ValidationError):
            _ = qb.sql

    def test_order_by_accumulates(self) -> None:
        qb = QueryBuilder("products").order_by("status").order_by("price", "Desc")
        assert qb.sql.endswith('ORDER BY "status" ASC, "price" DESC')

    def test_invalid_direction(self) -> None:
        with pytest.raises(InvalidSortDirection):
            QueryBuilder("products").order_by("name", "ASC, (SELECT 1)")

    @pytest.mark.parametrize("n", [0, -5, "10", True])
    def test_invalid_limit(self, n: object) -> None:
        with pytest.raises(InvalidLimit):
            QueryBuilder("products").limit(n)  # type: ignore[arg-type]

    @pytest.mark.parametrize("n", [-1, "2", 1.5, False])
    def test_invalid_offset(self, n: object) -> None:
        with pytest.raises(InvalidLimit):
            QueryBuilder("products").offset(n)  # type: ignore[arg-type]

    def test_zero_offset(self) -> None:
        assert QueryBuilder("products").limit(1).offset(0).sql.endswith("LIMIT 1 OFFSET 0")


class TestImmutability:
    def test_methods_return_new_builders(self) -> None:
        base = QueryBuilder("products").where("status", "=", "active")
        cheap = base.where("price", "<", 30)
        dear = base.where("price", ">", 100)

        assert base.params == {"status_1": "active"}
        assert cheap.params == {"status_1": "active", "price_2": 30}
        assert dear.params == {"status_1": "active", "price_2": 100}
        assert base.sql == 'SELECT * FROM "products" WHERE "status" = :status_1'

    def test_frozen(self) -> None:
        qb = QueryBuilder("products")
        with pytest.raises(AttributeError):
            qb.table = "users"  # type: ignore[misc]


# =============================================================================
# Execution against SQLite
# =============================================================================


@pytest.fixture
async def db(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'qb.db'}")
    await db.query(
        "CREATE TABLE categories (id INTEGER PRIMARY KEY, title TEXT NOT NULL)"
    )
    await db.query(
        "CREATE TABLE products ("
        "  id INTEGER PRIMARY KEY AUTOINCREMENT,"
        "  name TEXT NOT NULL,"
        "  price REAL NOT NULL,"
        "  status TEXT NOT NULL DEFAULT 'active',"
        "  category_id INTEGER REFERENCES categories(id)"
        ")"
    )
    await db.insert("categories", {"id": 1, "title": "Lighting"})
    await db.insert("categories", {"id": 2, "title": "Furniture"})
    for name, price, status, category in [
        ("Lamp", 25, "active", 1),
        ("Desk", 120, "active", 2),
        ("Chair", 45, "archived", 2),
        ("Bulb", 3, "active", 1),
    ]:
        await db.insert(
            "products",
            {"name": name, "price": price, "status": status, "category_id": category},
        )
    yield db
    await db.disconnect()


class TestExecution:
    async def test_execute(self, db: Database) -> None:
        rows = await (
            QueryBuilder("products", ["name"])
            .where("status", "=", "active")
            .where("price", "<", 50)
            .order_by("price")
            .execute(db)
        )
        assert rows == [{"name": "Bulb"}, {"name": "Lamp"}]

    async def test_in(self, db: Database) -> None:
        rows = await QueryBuilder("products", ["id"]).where("name", "IN", ["Desk", "Lamp"]).order_by("id").execute(db)
        assert rows == [{"id": 1}, {"id": 2}]

    async def test_join_and_group(self, db: Database) -> None:
        rows = await (
            QueryBuilder.for_database(db, "products", ["categories.title"])
            .inner_join("categories", "categories.id = products.category_id")
            .group_by("categories.title")
            .having("COUNT(*) >= :min")
            .with_param("min", 2)
            .order_by("categories.title")
            .execute(db)
        )
        assert rows == [{"title": "Furniture"}, {"title": "Lighting"}]

    async def test_pagination(self, db: Database) -> None:
        rows = await QueryBuilder("products", ["name"]).order_by("id").limit(2).offset(2).execute(db)
        assert rows == [{"name": "Chair"}, {"name": "Bulb"}]

    async def test_failure_is_empty_list(self, db: Database) -> None:
        assert await QueryBuilder("missing").execute(db) == []

    async def test_first(self, db: Database) -> None:
        row = await QueryBuilder("products", ["name"]).order_by("price", "desc").first(db)
        assert row == {"name": "Desk"}

    async def test_first_none(self, db: Database) -> None:
        assert await QueryBuilder("products").where("name", "=", "Sofa").first(db) is None

    async def test_count_ignores_paging(self, db: Database) -> None:
        qb = QueryBuilder("products", ["name"]).where("status", "=", "active").order_by("name").limit(1)
        assert await qb.count(db) == 3

    async def test_count_with_join(self, db: Database) -> None:
        qb = (
            QueryBuilder("products")
            .inner_join("categories", "categories.id = products.category_id")
            .where("categories.title", "=", "Lighting")
        )
        assert await qb.count(db) == 2
