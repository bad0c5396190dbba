from __future__ import annotations

from api_support import API, ApiTestCase


class InventoryApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.item = self.create_item("TEE-M-BLK", "Black Tee M", current_stock=10)

    def create_item(self, sku, name, **extra):
        res = self.client.post(
            f"{API}/inventory/items", json={"sku": sku, "item_name": name, **extra}, headers=self.admin
        )
        self.assertEqual(res.status_code, 201, res.text)
        return res.json()

    def adjust(self, adjustment_type, quantity, **extra):
        body = {
            "adjustment_type": adjustment_type,
            "custom_reason": "Stock count",
            "items": [{"item_id": self.item["id"], "quantity": quantity}],
        }
        body.update(extra)
        return self.client.post(f"{API}/inventory/adjustments", json=body, headers=self.admin)

    def stock(self) -> float:
        return self.client.get(f"{API}/inventory/items/{self.item['id']}", headers=self.admin).json()["current_stock"]

    def test_duplicate_sku(self) -> None:
        res = self.client.post(
            f"{API}/inventory/items", json={"sku": "TEE-M-BLK", "item_name": "Again"}, headers=self.admin
        )
        self.assertEqual(res.status_code, 409)

    def test_add_remove_replace(self) -> None:
        res = self.adjust("ADD", 5)
        self.assertEqual(res.status_code, 201, res.text)
        line = res.json()["items"][0]
        self.assertEqual(
            (line["quantity_before"], line["adjustment_quantity"], line["quantity_after"]), (10.0, 5.0, 15.0)
        )
        self.assertEqual(self.stock(), 15.0)

        self.assertEqual(self.adjust("REMOVE", 3).status_code, 201)
        self.assertEqual(self.stock(), 12.0)

        res = self.adjust("REPLACE", 7)
        line = res.json()["items"][0]
        self.assertEqual(line["adjustment_quantity"], -5.0)
        self.assertEqual(line["replace_quantity"], 7.0)
        self.assertEqual(self.stock(), 7.0)

    def test_cannot_remove_more_than_stock(self) -> None:
        res = self.adjust("REMOVE", 11)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["details"]["current_stock"], 10.0)
        self.assertEqual(self.stock(), 10.0)

    def test_reason_is_required(self) -> None:
        res = self.adjust("ADD", 1, custom_reason="  ")
        self.assertEqual(res.status_code, 400)

    def test_saved_reason(self) -> None:
        reason = self.client.post(
            f"{API}/inventory/adjustment-reasons", json={"reason_name": "Damaged"}, headers=self.admin
        ).json()
        res = self.adjust("REMOVE", 2, custom_reason=None, reason_id=reason["id"])
        self.assertEqual(res.status_code, 201, res.text)
        self.assertEqual(res.json()["reason_id"], reason["id"])

    def test_movements_are_logged(self) -> None:
        self.adjust("ADD", 5)
        logs = self.client.get(
            f"{API}/inventory/logs", params={"item_id": self.item["id"]}, headers=self.admin
        ).json()
        self.assertEqual(sorted(entry["action"] for entry in logs), ["adjustment_add", "opening_stock"])

    def test_dispatch_role_can_view_but_not_adjust(self) -> None:
        dispatch = self.create_user("dispatch@example.com", ["packaging & dispatch manager"])
        self.assertEqual(self.client.get(f"{API}/inventory/items", headers=dispatch).status_code, 200)
        res = self.client.post(
            f"{API}/inventory/adjustments",
            json={"adjustment_type": "ADD", "custom_reason": "x", "items": [{"item_id": self.item["id"], "quantity": 1}]},
            headers=dispatch,
        )
        self.assertEqual(res.status_code, 403)
