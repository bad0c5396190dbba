from __future__ import annotations

from api_support import API, ApiTestCase


class RegistrationTests(ApiTestCase):
    def test_first_account_is_an_approved_admin(self) -> None:
        res = self.client.get(f"{API}/auth/me", headers=self.admin)
        self.assertEqual(res.status_code, 200, res.text)
        me = res.json()
        self.assertEqual(me["status"], "approved")
        self.assertEqual(me["roles"], ["admin"])

    def test_later_accounts_wait_for_approval(self) -> None:
        res = self.register("tailor@example.com", full_name="Ravi")
        self.assertEqual(res.status_code, 201, res.text)
        self.assertEqual(res.json()["status"], "pending_approval")
        self.assertEqual(res.json()["roles"], [])

        res = self.login("tailor@example.com")
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.json()["error"]["message"], "Account pending approval")

        pending = self.client.get(f"{API}/admin/users", params={"status": "pending_approval"}, headers=self.admin)
        self.assertEqual([u["email"] for u in pending.json()], ["tailor@example.com"])

    def test_approval_grants_the_role(self) -> None:
        user_id = self.register("cutter@example.com").json()["id"]
        self.ensure_role("cutting master")
        res = self.client.post(
            f"{API}/admin/users/{user_id}/approve", json={"role": "cutting master"}, headers=self.admin
        )
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["status"], "approved")

        headers = self.headers_for("cutter@example.com")
        me = self.client.get(f"{API}/auth/me", headers=headers).json()
        self.assertEqual(me["roles"], ["cutting master"])

    def test_rejected_account_cannot_log_in(self) -> None:
        user_id = self.register("nope@example.com").json()["id"]
        res = self.client.post(f"{API}/admin/users/{user_id}/reject", headers=self.admin)
        self.assertEqual(res.json()["status"], "rejected")
        res = self.login("nope@example.com")
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.json()["error"]["message"], "Account request was rejected")

    def test_duplicate_email(self) -> None:
        res = self.register("owner@example.com")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.json()["error"]["type"], "business_rule_error")

    def test_bad_credentials(self) -> None:
        self.assertEqual(self.login("owner@example.com", "wrong-password").status_code, 401)
        self.assertEqual(self.login("ghost@example.com").status_code, 401)


class TokenTests(ApiTestCase):
    def test_refresh_issues_new_pair(self) -> None:
        tokens = self.login("owner@example.com").json()
        res = self.client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["token_type"], "bearer")

    def test_access_token_is_not_a_refresh_token(self) -> None:
        tokens = self.login("owner@example.com").json()
        res = self.client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["access_token"]})
        self.assertEqual(res.status_code, 401)

    def test_refresh_token_is_not_an_access_token(self) -> None:
        tokens = self.login("owner@example.com").json()
        res = self.client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
        self.assertEqual(res.status_code, 401)


class RoleAccessTests(ApiTestCase):
    def test_roles_gate_routes(self) -> None:
        sales = self.create_user("sales@example.com", ["sales manager"])
        self.assertEqual(
            self.client.post(f"{API}/customers", json={"company_name": "Blue Mills"}, headers=sales).status_code, 201
        )
        self.assertEqual(self.client.get(f"{API}/production/batches", headers=sales).status_code, 403)
        self.assertEqual(self.client.get(f"{API}/admin/users", headers=sales).status_code, 403)

    def test_admin_user_creation_requires_existing_roles(self) -> None:
        res = self.client.post(
            f"{API}/admin/users",
            json={"email": "x@example.com", "password": "secret123", "roles": ["no such role"]},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 400)

    def test_role_names_are_unique(self) -> None:
        self.ensure_role("qc manager")
        res = self.client.post(f"{API}/admin/roles", json={"name": "qc manager"}, headers=self.admin)
        self.assertEqual(res.status_code, 409)

    def test_admin_role_cannot_be_deleted_or_renamed(self) -> None:
        roles = self.client.get(f"{API}/admin/roles", headers=self.admin).json()
        admin_role = next(r for r in roles if r["name"] == "admin")

        res = self.client.delete(f"{API}/admin/roles/{admin_role['id']}", headers=self.admin)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["message"], "The admin role cannot be deleted")

        res = self.client.patch(f"{API}/admin/roles/{admin_role['id']}", json={"name": "owner"}, headers=self.admin)
        self.assertEqual(res.status_code, 400)

        res = self.client.patch(
            f"{API}/admin/roles/{admin_role['id']}", json={"description": "Full access"}, headers=self.admin
        )
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["name"], "admin")
        self.assertEqual(res.json()["description"], "Full access")
