from __future__ import annotations

from api_support import API, ApiTestCase


class NavigationApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.sales_menu = self.add_item("Sales", sort_order=1)
        self.orders = self.add_item("Orders", url="/orders", parent_id=self.sales_menu["id"], sort_order=1)
        self.customers = self.add_item("Customers", url="/customers", parent_id=self.sales_menu["id"], sort_order=2)
        self.inventory = self.add_item("Inventory", url="/inventory", sort_order=2)

        self.user = self.create_user("sales@example.com", ["sales manager"])
        self.user_id = self.client.get(f"{API}/auth/me", headers=self.user).json()["id"]
        roles = self.client.get(f"{API}/admin/roles", headers=self.admin).json()
        self.role_id = next(r["id"] for r in roles if r["name"] == "sales manager")

    def add_item(self, title, **extra) -> dict:
        res = self.client.post(f"{API}/navigation/items", json={"title": title, **extra}, headers=self.admin)
        self.assertEqual(res.status_code, 201, res.text)
        return res.json()

    def grant_role(self, *entries):
        return self.client.put(
            f"{API}/navigation/roles/{self.role_id}/permissions",
            json={"permissions": list(entries)},
            headers=self.admin,
        )

    def override_user(self, *entries):
        return self.client.put(
            f"{API}/navigation/users/{self.user_id}/permissions",
            json={"permissions": list(entries)},
            headers=self.admin,
        )

    def sidebar(self, headers=None) -> list:
        res = self.client.get(f"{API}/auth/me/sidebar", headers=headers or self.user)
        self.assertEqual(res.status_code, 200, res.text)
        return res.json()

    def outline(self, nodes) -> list:
        return [(n["title"], n["can_edit"], self.outline(n["children"])) for n in nodes]

    def test_role_permissions_shape_the_sidebar(self) -> None:
        self.assertEqual(self.sidebar(), [])

        res = self.grant_role({"sidebar_item_id": self.orders["id"], "can_view": True, "can_edit": True})
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(len(res.json()), 1)
        self.assertEqual(self.outline(self.sidebar()), [("Sales", False, [("Orders", True, [])])])

    def test_role_permissions_are_replaced_not_merged(self) -> None:
        self.grant_role({"sidebar_item_id": self.orders["id"]})
        self.sidebar()
        self.grant_role({"sidebar_item_id": self.inventory["id"]})

        listed = self.client.get(f"{API}/navigation/roles/{self.role_id}/permissions", headers=self.admin).json()
        self.assertEqual([p["sidebar_item_id"] for p in listed], [self.inventory["id"]])
        self.assertEqual(self.outline(self.sidebar()), [("Inventory", False, [])])

    def test_user_overrides_win_until_cleared(self) -> None:
        self.grant_role({"sidebar_item_id": self.inventory["id"]})
        res = self.override_user({"sidebar_item_id": self.customers["id"], "can_view": True, "is_override": True})
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(self.outline(self.sidebar()), [("Sales", False, [("Customers", False, [])])])

        self.assertEqual(self.override_user().json(), [])
        self.assertEqual(self.outline(self.sidebar()), [("Inventory", False, [])])

    def test_unknown_items_are_rejected(self) -> None:
        res = self.grant_role({"sidebar_item_id": self.user_id})
        self.assertEqual(res.status_code, 400)

    def test_admin_sees_everything(self) -> None:
        tree = self.outline(self.sidebar(self.admin))
        self.assertEqual(
            tree,
            [("Sales", True, [("Orders", True, []), ("Customers", True, [])]), ("Inventory", True, [])],
        )

    def test_permissions_are_admin_only(self) -> None:
        res = self.client.get(f"{API}/navigation/roles/{self.role_id}/permissions", headers=self.user)
        self.assertEqual(res.status_code, 403)
