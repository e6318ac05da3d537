"""Testing utilities for fastrest applications.

Provides an async test client that drives the ASGI app in-process::

    from fastrest.testing import TestClient

    async def test_index():
        async with TestClient(app) as client:
            response = await client.get("/products")
            assert response.status == 200
"""

from fastrest.testing.client import TestClient

__all__ = ["TestClient"]
