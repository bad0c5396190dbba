from __future__ import annotations

from unittest.mock import patch

from garment_erp.core.settings import AppSettings

from api_support import API, ApiTestCase


class TutorialApiTests(ApiTestCase):
    def create(self, section, title, headers=None):
        return self.client.post(
            f"{API}/tutorials", json={"section": section, "title": title}, headers=headers or self.admin
        )

    def upload(self, tutorial_id, data, content_type="video/mp4"):
        return self.client.put(
            f"{API}/tutorials/{tutorial_id}/video",
            files={"file": ("cutting.mp4", data, content_type)},
            headers=self.admin,
        )

    def test_new_tutorials_go_to_the_end_of_their_section(self) -> None:
        first = self.create("Orders", "Create an order").json()
        second = self.create("Orders", "Edit sizes").json()
        other = self.create("Dispatch", "Print a challan").json()
        self.assertEqual((first["order_index"], second["order_index"], other["order_index"]), (1, 2, 1))

        res = self.client.patch(f"{API}/tutorials/{other['id']}", json={"section": "Orders"}, headers=self.admin)
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["order_index"], 3)

        listed = self.client.get(f"{API}/tutorials", params={"section": "Orders"}, headers=self.admin).json()
        self.assertEqual([t["title"] for t in listed], ["Create an order", "Edit sizes", "Print a challan"])

    def test_only_admins_manage_tutorials(self) -> None:
        sales = self.create_user("sales@example.com", ["sales manager"])
        self.create("Orders", "Create an order")
        self.assertEqual(self.create("Orders", "Edit sizes", headers=sales).status_code, 403)
        res = self.client.get(f"{API}/tutorials/sections", headers=sales)
        self.assertEqual(res.json(), ["Orders"])

    def test_video_upload(self) -> None:
        tutorial = self.create("Orders", "Create an order").json()
        res = self.upload(tutorial["id"], b"\x00\x00\x00\x18ftypmp42")
        self.assertEqual(res.status_code, 200, res.text)
        self.assertTrue(res.json()["video_path"].startswith("tutorial-videos/"))
        self.assertTrue(res.json()["video_url"].endswith(res.json()["video_path"]))

    def test_video_type_and_size_are_checked(self) -> None:
        tutorial = self.create("Orders", "Create an order").json()
        res = self.upload(tutorial["id"], b"%PDF-1.4", content_type="application/pdf")
        self.assertEqual(res.status_code, 400)

        with patch("garment_erp.services.media.get_app_settings", return_value=AppSettings(MAX_UPLOAD_MB=1)):
            res = self.upload(tutorial["id"], b"\x00" * (1024 * 1024 + 1))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["details"], {"limit_mb": 1})

        fetched = self.client.get(f"{API}/tutorials/{tutorial['id']}", headers=self.admin).json()
        self.assertIsNone(fetched["video_path"])
