"""Write the OpenAPI document, with the WebSocket endpoints attached, to interfaces/openapi.json."""

import json
import os

from garment_erp.api.main import app, websocket_info

# Get the OpenAPI schema (note: all REST routes are under /api/v1)
openapi_schema = app.openapi()

# Inject non-standard extension with WebSocket endpoint docs
openapi_schema["x-websocket-endpoints"] = websocket_info()["endpoints"]

output_dir = "interfaces"
os.makedirs(output_dir, exist_ok=True)
output_path = os.path.join(output_dir, "openapi.json")

with open(output_path, "w") as f:
    json.dump(openapi_schema, f, indent=2)
