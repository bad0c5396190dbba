from __future__ import annotations

import asyncio
import io
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi import UploadFile
from starlette.datastructures import Headers

from garment_erp.core.errors import BusinessRuleError
from garment_erp.core.settings import AppSettings
from garment_erp.services.documents import LabelData, render_barcode_labels, validate_barcode_value
from garment_erp.services.media import VIDEO, store_upload
from garment_erp.services.storage import FileStorage


class FileStorageTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.storage = FileStorage(self._tmp.name, public_path="files/")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_save_and_delete(self) -> None:
        stored = self.storage.save("avatars", "../me photo.png", b"png-bytes")
        self.assertTrue(stored.path.startswith("avatars/"))
        self.assertTrue(stored.path.endswith("_me_photo.png"))
        self.assertEqual(stored.url, f"/files/{stored.path}")
        self.assertEqual(stored.size, 9)
        target = self.storage.path_for(stored.url)
        self.assertEqual(target.read_bytes(), b"png-bytes")

        self.assertTrue(self.storage.delete(stored.url))
        self.assertFalse(target.exists())
        self.assertFalse(self.storage.delete(stored.path))
        self.assertFalse(self.storage.delete(None))

    def test_paths_cannot_escape_root(self) -> None:
        with self.assertRaises(BusinessRuleError):
            self.storage.path_for("../outside.txt")
        with self.assertRaises(BusinessRuleError):
            self.storage.path_for("/files/../../etc/passwd")
        self.assertEqual(self.storage.path_for("/files/a/b.txt"), Path(self._tmp.name).resolve() / "a" / "b.txt")


class StoreUploadTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        storage = FileStorage(self._tmp.name)
        settings = AppSettings(MAX_UPLOAD_MB=1)
        for target, value in (("get_file_storage", storage), ("get_app_settings", settings)):
            patcher = patch(f"garment_erp.services.media.{target}", return_value=value)
            patcher.start()
            self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def upload(self, data: bytes, content_type: str = "video/mp4") -> UploadFile:
        headers = Headers({"content-type": content_type})
        return UploadFile(io.BytesIO(data), filename="cutting demo.mp4", headers=headers)

    def test_video_is_stored(self) -> None:
        stored = asyncio.run(store_upload(self.upload(b"\x00" * 2048), "tutorial-videos", VIDEO))
        self.assertTrue(stored.path.startswith("tutorial-videos/"))
        self.assertEqual(stored.size, 2048)

    def test_oversized_upload_stops_reading_at_the_limit(self) -> None:
        file = self.upload(b"\x00" * (3 * 1024 * 1024))
        with self.assertRaises(BusinessRuleError) as ctx:
            asyncio.run(store_upload(file, "tutorial-videos", VIDEO))
        self.assertEqual(ctx.exception.details, {"limit_mb": 1})
        self.assertLess(file.file.tell(), 3 * 1024 * 1024)
        self.assertEqual(list(Path(self._tmp.name).rglob("*.mp4")), [])

    def test_wrong_type_and_empty_files_are_rejected(self) -> None:
        with self.assertRaises(BusinessRuleError):
            asyncio.run(store_upload(self.upload(b"data", "image/png"), "tutorial-videos", VIDEO))
        with self.assertRaises(BusinessRuleError):
            asyncio.run(store_upload(self.upload(b""), "tutorial-videos", VIDEO))


class BarcodeTests(unittest.TestCase):
    def test_validate_barcode_value(self) -> None:
        self.assertEqual(validate_barcode_value("  SKU-001 "), "SKU-001")
        for bad in ("", "   ", None, "x" * 101, "SKU₹"):
            with self.assertRaises(BusinessRuleError):
                validate_barcode_value(bad)

    def test_labels_render_to_pdf(self) -> None:
        labels = [LabelData(sku=f"SKU-{i:03d}", item_name="Polo", unit_price=249.0, size="M") for i in range(30)]
        pdf = render_barcode_labels(labels)
        self.assertTrue(pdf.startswith(b"%PDF"))

    def test_labels_require_items(self) -> None:
        with self.assertRaises(BusinessRuleError):
            render_barcode_labels([])
