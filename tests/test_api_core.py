from __future__ import annotations

from unittest.mock import patch

from fastapi import WebSocketDisconnect

from api_support import API, ApiTestCase


class ApiEnvelopeTests(ApiTestCase):
    def test_health(self) -> None:
        res = self.client.get(f"{API}/health", headers={"X-Correlation-ID": "abc-123"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["message"], "Healthy")
        self.assertEqual(res.headers["X-Correlation-ID"], "abc-123")

    def test_unknown_route_uses_error_envelope(self) -> None:
        res = self.client.get(f"{API}/nope")
        self.assertEqual(res.status_code, 404)
        body = res.json()
        self.assertEqual(body["status"], 404)
        self.assertEqual(body["error"]["type"], "http_error")
        self.assertEqual(body["path"], f"{API}/nope")
        self.assertEqual(body["method"], "GET")
        self.assertTrue(body["correlation_id"])

    def test_missing_token(self) -> None:
        res = self.client.get(f"{API}/customers")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["error"]["type"], "http_error")
        self.assertEqual(res.headers.get("WWW-Authenticate"), "Bearer")

    def test_validation_error(self) -> None:
        res = self.client.post(f"{API}/customers", json={"credit_limit": -1}, headers=self.admin)
        self.assertEqual(res.status_code, 422)
        body = res.json()
        self.assertEqual(body["error"]["type"], "validation_error")
        fields = {tuple(d["loc"])[-1] for d in body["error"]["details"]}
        self.assertIn("company_name", fields)
        self.assertIn("credit_limit", fields)

    def test_business_rule_not_found(self) -> None:
        res = self.client.get(f"{API}/customers/00000000-0000-0000-0000-000000000000", headers=self.admin)
        self.assertEqual(res.status_code, 404)
        body = res.json()
        self.assertEqual(body["error"]["type"], "business_rule_error")
        self.assertEqual(body["error"]["message"], "Customer not found")


class WebSocketTests(ApiTestCase):
    def test_websocket_info(self) -> None:
        res = self.client.get(f"{API}/websocket-info")
        self.assertEqual(res.status_code, 200)
        paths = [e["path"] for e in res.json()["endpoints"]]
        self.assertEqual(paths, ["/ws/dashboard", "/ws/changes"])
        self.assertIn("4401", res.json()["security"]["close_codes"])

    def test_dashboard_requires_token(self) -> None:
        with self.assertRaises(WebSocketDisconnect) as ctx:
            with self.client.websocket_connect("/ws/dashboard?token=garbage") as ws:
                ws.receive_json()
        self.assertEqual(ctx.exception.code, 4401)

    def test_dashboard_sends_snapshot_on_connect(self) -> None:
        token = self.admin["Authorization"].split(" ", 1)[1]
        with patch("garment_erp.api.main.get_session_maker", return_value=self.session_maker):
            with self.client.websocket_connect(f"/ws/dashboard?token={token}") as ws:
                message = ws.receive_json()
                ws.send_text("ping")
                self.assertEqual(ws.receive_text(), "pong")
        self.assertEqual(message["type"], "kpi.snapshot")
        self.assertEqual(message["payload"]["qc_pass_rate"], 0)

    def test_changes_is_admin_only(self) -> None:
        sales = self.create_user("sales@example.com", ["sales manager"])
        token = sales["Authorization"].split(" ", 1)[1]
        with patch("garment_erp.api.main.get_session_maker", return_value=self.session_maker):
            with self.assertRaises(WebSocketDisconnect) as ctx:
                with self.client.websocket_connect(f"/ws/changes?token={token}&tables=orders") as ws:
                    ws.receive_json()
        self.assertEqual(ctx.exception.code, 4403)

    def test_changes_needs_known_tables(self) -> None:
        token = self.admin["Authorization"].split(" ", 1)[1]
        with patch("garment_erp.api.main.get_session_maker", return_value=self.session_maker):
            with self.assertRaises(WebSocketDisconnect) as ctx:
                with self.client.websocket_connect(f"/ws/changes?token={token}&tables=secrets") as ws:
                    ws.receive_json()
        self.assertEqual(ctx.exception.code, 4400)
