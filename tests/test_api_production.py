from __future__ import annotations

from api_support import API, ApiTestCase

POLO = {"product_description": "Polo T-shirt", "sizes_quantities": {"S": 5, "M": 10, "XL": 5}, "unit_price": 200}


class ProductionApiTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        customer = self.create_customer("Acme Apparel")
        self.order = self.create_order(customer["id"], [POLO])
        self.b1 = self.create_batch("B-01", "Line One")
        self.b2 = self.create_batch("B-02", "Line Two")

    def distribute(self, shares):
        return self.client.put(
            f"{API}/production/orders/{self.order['id']}/batch-distribution",
            json={"batches": [{"batch_id": b["id"], "size_quantities": q} for b, q in shares]},
            headers=self.admin,
        )

    def distribute_evenly(self):
        res = self.distribute([(self.b1, {"S": 5, "M": 6}), (self.b2, {"M": 4, "XL": 5})])
        self.assertEqual(res.status_code, 200, res.text)
        return {a["batch_id"]: a for a in res.json()}


class BatchDistributionApiTests(ProductionApiTestCase):
    def test_distribution_creates_one_assignment_per_batch(self) -> None:
        by_batch = self.distribute_evenly()
        first = by_batch[self.b1["id"]]
        self.assertEqual(first["total_quantity"], 11)
        self.assertEqual({s["size_name"]: s["quantity"] for s in first["sizes"]}, {"S": 5, "M": 6})
        self.assertEqual(first["assigned_by_name"], "Owner")

    def test_unbalanced_distribution_is_rejected(self) -> None:
        res = self.distribute([(self.b1, {"S": 5, "M": 6})])
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["details"], {"remaining": {"M": 4, "XL": 5}})

    def test_redistribution_replaces_previous_split(self) -> None:
        self.distribute_evenly()
        res = self.distribute([(self.b2, {"S": 5, "M": 10, "XL": 5})])
        self.assertEqual(res.status_code, 200, res.text)
        listed = self.client.get(
            f"{API}/production/batch-assignments", params={"order_id": self.order["id"]}, headers=self.admin
        ).json()
        self.assertEqual([a["batch_id"] for a in listed], [self.b2["id"]])

    def test_inactive_batch_cannot_take_work(self) -> None:
        idle = self.create_batch("B-03", status="inactive")
        res = self.distribute([(idle, {"S": 5, "M": 10, "XL": 5})])
        self.assertEqual(res.status_code, 400)

    def test_reassign_unpicked_pieces(self) -> None:
        by_batch = self.distribute_evenly()
        source = by_batch[self.b1["id"]]
        res = self.client.post(
            f"{API}/production/batch-assignments/{source['id']}/reassign",
            json={"target_batch_id": self.b2["id"], "mode": "partial", "size_quantities": {"M": 2}},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 200, res.text)
        body = res.json()
        self.assertEqual(body["total_moved"], 2)
        self.assertEqual(body["source"]["total_quantity"], 9)
        self.assertEqual({s["size_name"]: s["quantity"] for s in body["target"]["sizes"]}, {"M": 6, "XL": 5})


class PickAndQcApiTests(ProductionApiTestCase):
    def pick(self, assignment_id, picks):
        return self.client.post(
            f"{API}/production/batch-assignments/{assignment_id}/pick",
            json={"size_picks": picks},
            headers=self.admin,
        )

    def review(self, assignment_id, sizes):
        return self.client.post(
            f"{API}/quality/batch-assignments/{assignment_id}/review", json={"sizes": sizes}, headers=self.admin
        )

    def test_pick_review_and_repick(self) -> None:
        assignment = self.distribute_evenly()[self.b1["id"]]
        aid = assignment["id"]

        res = self.pick(aid, {"S": 4, "M": 6})
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual({s["size_name"]: s["picked_quantity"] for s in res.json()["sizes"]}, {"S": 4, "M": 6})

        over = self.pick(aid, {"S": 2})
        self.assertEqual(over.status_code, 400)
        self.assertEqual(over.json()["error"]["details"]["remaining"], 1)

        no_remarks = self.review(aid, [{"size_name": "M", "approved": 5, "rejected": 1}])
        self.assertEqual(no_remarks.status_code, 400)

        res = self.review(aid, [{"size_name": "M", "approved": 5, "rejected": 1, "remarks": "Loose stitching"}])
        self.assertEqual(res.status_code, 200, res.text)
        rows = {r["size_name"]: r for r in res.json()["sizes"]}
        self.assertEqual((rows["M"]["approved"], rows["M"]["rejected"]), (5, 1))
        self.assertEqual(rows["M"]["remarks"], "Loose stitching")
        self.assertEqual(rows["S"]["needs_qc"], 4)

        summary = self.client.get(f"{API}/quality/summary", headers=self.admin).json()
        self.assertEqual(summary, {"total_picked": 10, "total_approved": 5, "total_rejected": 1, "pass_rate": 50})

        picker = self.client.get(f"{API}/production/picker", headers=self.admin).json()
        row = next(r for r in picker if r["assignment_id"] == aid)
        medium = next(s for s in row["sizes"] if s["size_name"] == "M")
        self.assertEqual(medium["remaining"], 1)

        res = self.pick(aid, {"M": 1})
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual({s["size_name"]: s["picked_quantity"] for s in res.json()["sizes"]}["M"], 6)

    def test_qc_queue_and_order_status(self) -> None:
        assignment = self.distribute_evenly()[self.b1["id"]]
        self.pick(assignment["id"], {"M": 6})
        self.review(assignment["id"], [{"size_name": "M", "approved": 6}])

        queue = self.client.get(f"{API}/quality/orders", headers=self.admin).json()
        self.assertEqual(len(queue), 1)
        self.assertEqual((queue[0]["picked"], queue[0]["approved"]), (6, 6))

        status = self.client.get(f"{API}/orders/{self.order['id']}/production-status", headers=self.admin).json()
        medium = next(s for s in status["sizes"] if s["size_name"] == "M")
        self.assertEqual(
            (medium["ordered"], medium["assigned_to_batches"], medium["picked"], medium["approved"]),
            (10, 10, 6, 6),
        )

    def test_review_listing_a_size_twice_is_rejected(self) -> None:
        aid = self.distribute_evenly()[self.b1["id"]]["id"]
        self.pick(aid, {"M": 6})
        res = self.review(
            aid,
            [
                {"size_name": "M", "approved": 6},
                {"size_name": "M", "rejected": 6, "remarks": "Torn seams"},
            ],
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["details"], {"size": "M"})

        rows = {r["size_name"]: r for r in self.client.get(
            f"{API}/quality/batch-assignments/{aid}/review", headers=self.admin
        ).json()["sizes"]}
        self.assertEqual((rows["M"]["approved"], rows["M"]["rejected"], rows["M"]["needs_qc"]), (0, 0, 6))

    def test_redistribution_drops_reviews_of_replaced_assignments(self) -> None:
        aid = self.distribute_evenly()[self.b1["id"]]["id"]
        self.pick(aid, {"M": 6})
        self.review(aid, [{"size_name": "M", "approved": 6}])

        res = self.distribute([(self.b2, {"S": 5, "M": 10, "XL": 5})])
        self.assertEqual(res.status_code, 200, res.text)

        summary = self.client.get(f"{API}/quality/summary", headers=self.admin).json()
        self.assertEqual(summary, {"total_picked": 0, "total_approved": 0, "total_rejected": 0, "pass_rate": 0})
        kpis = self.client.get(f"{API}/production/kpis", headers=self.admin).json()
        self.assertEqual((kpis["qc_total_picked"], kpis["qc_total_approved"]), (0, 0))


class CuttingApiTests(ProductionApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.master = self.create_employee("EMP-1", "Kumar", "Cutting Master")
        self.fabric = self.client.post(
            f"{API}/masters/fabrics",
            json={"fabric_code": "FAB-1", "fabric_name": "Cotton Jersey", "inventory": 50},
            headers=self.admin,
        ).json()

    def create_employee(self, code, name, designation):
        res = self.client.post(
            f"{API}/people/employees",
            json={"employee_code": code, "full_name": name, "designation": designation},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 201, res.text)
        return res.json()

    def assign(self, employee, quantity=None):
        return self.client.post(
            f"{API}/production/orders/{self.order['id']}/cutting-assignments",
            json={"cutting_master_id": employee["id"], "assigned_quantity": quantity},
            headers=self.admin,
        )

    def test_only_cutting_masters_can_be_assigned(self) -> None:
        helper = self.create_employee("EMP-2", "Anu", "Helper")
        self.assertEqual(self.assign(helper).status_code, 400)
        res = self.assign(self.master)
        self.assertEqual(res.status_code, 201, res.text)
        self.assertEqual(res.json()["assigned_quantity"], 20)
        self.assertEqual(self.assign(self.master).status_code, 409)

    def test_cutting_consumes_fabric(self) -> None:
        assignment = self.assign(self.master, 10).json()
        res = self.client.post(
            f"{API}/production/orders/{self.order['id']}/cutting",
            json={
                "additional_cuts": {"S": 8, "M": 4},
                "cutting_assignment_id": assignment["id"],
                "fabric_usage": {"fabric_id": self.fabric["id"], "used_quantity": 12.5},
            },
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["applied"], {"S": 5, "M": 4})
        self.assertEqual(res.json()["cut_quantity"], 9)

        fabric = self.client.get(f"{API}/masters/fabrics/{self.fabric['id']}", headers=self.admin).json()
        self.assertEqual(fabric["inventory"], 37.5)

    def test_cutting_without_fabric_usage_is_rejected(self) -> None:
        res = self.client.post(
            f"{API}/production/orders/{self.order['id']}/cutting",
            json={"additional_cuts": {"S": 1}},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 400)

    def test_partial_reassignment(self) -> None:
        other = self.create_employee("EMP-3", "Selvi", "Senior Cutting Master")
        assignment = self.assign(self.master).json()
        res = self.client.post(
            f"{API}/production/cutting-assignments/{assignment['id']}/reassign",
            json={"new_master_id": other["id"], "mode": "partial", "quantity": 8},
            headers=self.admin,
        )
        self.assertEqual(res.status_code, 200, res.text)
        body = res.json()
        self.assertEqual(body["quantity"], 8)
        self.assertEqual(body["source"]["assigned_quantity"], 12)
        self.assertEqual(body["target"]["assigned_quantity"], 8)
        self.assertEqual(body["target"]["cutting_master_name"], "Selvi")
