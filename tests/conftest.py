from __future__ import annotations

import os
import tempfile

# The app reads its settings once, at import time.
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("AUTO_SEED", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="garment-erp-files-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")
