"""Shared harness for API tests: the app on an in-memory SQLite database."""

from __future__ import annotations

import unittest
from typing import Dict, Iterable, Optional

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import garment_erp.db.models  # noqa: F401
from garment_erp.api.main import app
from garment_erp.core.cache import get_query_cache
from garment_erp.db.base import Base
from garment_erp.db.session import get_async_session

API = "/api/v1"
PASSWORD = "secret123"
ADMIN_EMAIL = "owner@example.com"


class ApiTestCase(unittest.TestCase):
    """
    Each test gets a fresh database. The first registered account becomes the
    admin; `self.admin` holds its bearer header.
    """

    def setUp(self) -> None:
        self.engine = create_async_engine(
            "sqlite+aiosqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        self.session_maker = async_sessionmaker(bind=self.engine, expire_on_commit=False, autoflush=False)

        async def override_session():
            async with self.session_maker() as session:
                try:
                    yield session
                except Exception:
                    await session.rollback()
                    raise

        app.dependency_overrides[get_async_session] = override_session
        get_query_cache().clear()

        self.client = TestClient(app)
        self.client.__enter__()
        self.client.portal.call(self._create_schema)
        self.admin = self.bootstrap_admin()

    def tearDown(self) -> None:
        self.client.portal.call(self.engine.dispose)
        self.client.__exit__(None, None, None)
        app.dependency_overrides.clear()

    async def _create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    # Accounts

    def register(self, email: str, full_name: Optional[str] = None, password: str = PASSWORD):
        return self.client.post(
            f"{API}/auth/register",
            json={"email": email, "password": password, "full_name": full_name},
        )

    def login(self, email: str, password: str = PASSWORD):
        return self.client.post(f"{API}/auth/login", data={"username": email, "password": password})

    def headers_for(self, email: str, password: str = PASSWORD) -> Dict[str, str]:
        res = self.login(email, password)
        self.assertEqual(res.status_code, 200, res.text)
        return {"Authorization": f"Bearer {res.json()['access_token']}"}

    def bootstrap_admin(self) -> Dict[str, str]:
        res = self.register(ADMIN_EMAIL, full_name="Owner")
        self.assertEqual(res.status_code, 201, res.text)
        return self.headers_for(ADMIN_EMAIL)

    def ensure_role(self, name: str) -> None:
        res = self.client.post(f"{API}/admin/roles", json={"name": name}, headers=self.admin)
        self.assertIn(res.status_code, (201, 409), res.text)

    def create_user(self, email: str, roles: Iterable[str], full_name: Optional[str] = None) -> Dict[str, str]:
        """Admin-created user holding `roles`; returns the user's bearer header."""
        roles = list(roles)
        for role in roles:
            self.ensure_role(role)
        res = self.client.post(
            f"{API}/admin/users",
            json={"email": email, "password": PASSWORD, "full_name": full_name, "roles": roles},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 201, res.text)
        return self.headers_for(email)

    # Sales fixtures

    def create_customer(self, company_name: str = "Acme Apparel", **extra) -> dict:
        res = self.client.post(
            f"{API}/customers", json={"company_name": company_name, **extra}, headers=self.admin
        )
        self.assertEqual(res.status_code, 201, res.text)
        return res.json()

    def create_order(self, customer_id: str, items: list, **extra) -> dict:
        res = self.client.post(
            f"{API}/orders", json={"customer_id": customer_id, "items": items, **extra}, headers=self.admin
        )
        self.assertEqual(res.status_code, 201, res.text)
        return res.json()

    def create_batch(self, code: str, name: Optional[str] = None, **extra) -> dict:
        res = self.client.post(
            f"{API}/production/batches",
            json={"batch_name": name or f"Batch {code}", "batch_code": code, "max_capacity": 500, **extra},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 201, res.text)
        return res.json()

    # Production fixtures

    def approve_pieces(self, order: dict, batch: dict, approved: Dict[str, int]) -> str:
        """
        Put the whole order on one batch, then pick and QC-approve `approved`
        pieces per size. Returns the batch assignment id.
        """
        sizes: Dict[str, int] = {}
        for item in order["items"]:
            for size, qty in item["sizes_quantities"].items():
                sizes[size] = sizes.get(size, 0) + qty
        res = self.client.put(
            f"{API}/production/orders/{order['id']}/batch-distribution",
            json={"batches": [{"batch_id": batch["id"], "size_quantities": sizes}]},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 200, res.text)
        assignment_id = res.json()[0]["id"]

        res = self.client.post(
            f"{API}/production/batch-assignments/{assignment_id}/pick",
            json={"size_picks": approved},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 200, res.text)
        res = self.client.post(
            f"{API}/quality/batch-assignments/{assignment_id}/review",
            json={"sizes": [{"size_name": s, "approved": q} for s, q in approved.items()]},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 200, res.text)
        return assignment_id
