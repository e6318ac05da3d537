"""Products: a JSON CRUD API backed by SQLite.

Demonstrates routes registered by handler key and wired to a controller
through the handler registry, the default middleware stack (request
logging, CORS, JSON body parsing), ``HTTPError`` subclasses turned into
JSON error envelopes, and the query builder for filtered listings.

Run:
    cd examples/products && DATABASE_URL=sqlite:///products.db fastrest run app:app

Try:
    curl -X POST localhost:8000/products -H 'Content-Type: application/json' \\
         -d '{"name": "Lamp", "price": 25}'
    curl 'localhost:8000/products?status=active'
"""

import logging
from typing import Any

from fastrest import App, AppConfig, Request, Response, json_response, no_content
from fastrest.data import Database, QueryBuilder
from fastrest.errors import InternalServerError, NotFound, UnprocessableEntity

logger = logging.getLogger("fastrest.examples.products")

CREATE_PRODUCTS = """
CREATE TABLE IF NOT EXISTS products (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    price REAL NOT NULL,
    status TEXT NOT NULL DEFAULT 'active'
)
"""

config = AppConfig.from_env()
app = App(config, db=config.db_url or "sqlite:///products.db")


def validate(body: dict[str, Any], required: list[str]) -> None:
    """Raise 422 unless every required field is present and non-empty."""
    missing = [field for field in required if body.get(field) in (None, "")]
    if missing:
        raise UnprocessableEntity(f"Missing required fields: {', '.join(missing)}")


def product_id(request: Request) -> int:
    raw = request.param("id", "")
    if not raw.isdigit():
        raise NotFound(f"Product with id {raw} not found.")
    return int(raw)


class ProductController:
    """Handlers for the ``products`` resource."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def index(self, request: Request) -> Response:
        """GET /products, optionally filtered by ``?status=``."""
        status = request.query.get("status")
        rows = await (
            QueryBuilder.for_database(self.db, "products", ["id", "name", "price", "status"])
            .where_if(status, "status", "=", status)
            .order_by("name", "ASC")
            .limit(50)
            .execute(self.db)
        )
        logger.info("Products listed", extra={"context": {"count": len(rows)}})
        return json_response({"status": "success", "data": rows, "count": len(rows)})

    async def show(self, request: Request) -> Response:
        """GET /products/{id}"""
        pid = product_id(request)
        rows = await self.db.select("products", where={"id": pid})
        if not rows:
            raise NotFound(f"Product with id {pid} not found.")
        return json_response({"status": "success", "data": rows[0]})

    async def store(self, request: Request) -> Response:
        """POST /products"""
        body = request.body_data()
        validate(body, ["name", "price"])
        data = {
            "name": body["name"],
            "price": body["price"],
            "status": body.get("status") or "active",
        }
        if not await self.db.insert("products", data):
            raise InternalServerError("Failed to create product.")
        logger.info("Product created", extra={"context": {"name": data["name"]}})
        return json_response({"status": "success", "message": "Product created."}, status=201)

    async def update(self, request: Request) -> Response:
        """PUT /products/{id}"""
        pid = product_id(request)
        body = request.body_data()
        validate(body, ["name", "price"])
        # An UPDATE matching no row still succeeds, so check existence first
        if not await self.db.select("products", ["id"], where={"id": pid}):
            raise NotFound(f"Product with id {pid} not found.")
        data = {"name": body["name"], "price": body["price"]}
        if not await self.db.update("products", data, {"id": pid}):
            raise InternalServerError("Failed to update product.")
        return json_response({"status": "success", "message": "Product updated."})

    async def destroy(self, request: Request) -> Response:
        """DELETE /products/{id}"""
        pid = product_id(request)
        if not await self.db.select("products", ["id"], where={"id": pid}):
            raise NotFound(f"Product with id {pid} not found.")
        if not await self.db.delete("products", {"id": pid}):
            raise InternalServerError("Failed to delete product.")
        logger.info("Product deleted", extra={"context": {"id": pid}})
        return no_content()


# ---------------------------------------------------------------------------
# Routes: keys resolved through the app's handler registry
# ---------------------------------------------------------------------------

app.get("/products", "products.index")
app.get("/products/{id}", "products.show")
app.post("/products", "products.store")
app.put("/products/{id}", "products.update")
app.delete("/products/{id}", "products.destroy")

controller = ProductController(app.db)
for action in ("index", "show", "store", "update", "destroy"):
    app.provide(f"products.{action}", getattr(controller, action))


@app.on_startup
async def create_schema() -> None:
    await app.db.query(CREATE_PRODUCTS)


if __name__ == "__main__":
    from fastrest.logs import configure_logging

    configure_logging(config)
    app.run()
