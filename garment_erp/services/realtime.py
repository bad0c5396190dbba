from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, Optional, Set

from fastapi.encoders import jsonable_encoder
from sqlalchemy import inspect as sa_inspect
from starlette.websockets import WebSocket, WebSocketState

from garment_erp.schemas.realtime import ChangeEvent, KpiSnapshot, WsEnvelope

logger = logging.getLogger(__name__)

CHANGE_EVENTS = ("INSERT", "UPDATE", "DELETE")
_PRIVATE_COLUMNS = {"hashed_password"}


# PUBLIC_INTERFACE
def record_to_dict(entity: Any) -> Dict[str, Any]:
    """JSON-safe dict of an ORM row's column attributes."""
    mapper = sa_inspect(entity).mapper
    return jsonable_encoder(
        {attr.key: getattr(entity, attr.key) for attr in mapper.column_attrs if attr.key not in _PRIVATE_COLUMNS}
    )


class BroadcastManager:
    """
    Simple in-process pub-sub manager for WebSocket topics.

    Topics:
      - dashboard
      - changes:{table}
    """

    def __init__(self) -> None:
        self._topics: Dict[str, Set[WebSocket]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._global_lock = asyncio.Lock()

    def _topic_lock(self, topic: str) -> asyncio.Lock:
        if topic not in self._locks:
            self._locks[topic] = asyncio.Lock()
        return self._locks[topic]

    # PUBLIC_INTERFACE
    def dashboard_topic(self) -> str:
        return "dashboard"

    # PUBLIC_INTERFACE
    def changes_topic(self, table: str) -> str:
        """Return the change-feed topic for a table."""
        return f"changes:{table}"

    async def _ensure_topic(self, topic: str) -> None:
        async with self._global_lock:
            if topic not in self._topics:
                self._topics[topic] = set()

    # PUBLIC_INTERFACE
    def subscriber_count(self, topic: str) -> int:
        return len(self._topics.get(topic, ()))

    # PUBLIC_INTERFACE
    async def connect(self, topic: str, websocket: WebSocket) -> None:
        """Add an accepted websocket to topic subscribers."""
        await self._ensure_topic(topic)
        async with self._topic_lock(topic):
            self._topics[topic].add(websocket)
            logger.info("WebSocket connected to topic=%s; subscribers=%d", topic, len(self._topics[topic]))

    # PUBLIC_INTERFACE
    async def disconnect(self, topic: str, websocket: WebSocket) -> None:
        """Remove websocket from topic subscribers."""
        if topic not in self._topics:
            return
        async with self._topic_lock(topic):
            self._topics[topic].discard(websocket)
            logger.info("WebSocket disconnected from topic=%s; subscribers=%d", topic, len(self._topics[topic]))

    # PUBLIC_INTERFACE
    async def broadcast(self, topic: str, message: dict, exclude: Optional[WebSocket] = None) -> None:
        """
        Send a dict message to every subscriber of the topic, dropping sockets
        that are closed or fail to receive.
        """
        await self._ensure_topic(topic)
        async with self._topic_lock(topic):
            to_drop: list[WebSocket] = []
            for ws in list(self._topics[topic]):
                if exclude is not None and ws is exclude:
                    continue
                try:
                    if ws.application_state == WebSocketState.DISCONNECTED or ws.client_state == WebSocketState.DISCONNECTED:
                        to_drop.append(ws)
                        continue
                    await ws.send_json(message)
                except Exception:
                    logger.exception("Failed to send message to websocket; scheduling drop")
                    to_drop.append(ws)
            for ws in to_drop:
                self._topics[topic].discard(ws)

    # PUBLIC_INTERFACE
    async def publish_kpi_snapshot(self, snapshot: KpiSnapshot) -> None:
        """Publish a KPI snapshot to the dashboard topic."""
        env = WsEnvelope(type="kpi.snapshot", payload=snapshot.model_dump(mode="json"))
        await self.broadcast(self.dashboard_topic(), env.model_dump(mode="json"))

    # PUBLIC_INTERFACE
    async def publish_change(self, table: str, event: str, record: Dict[str, Any]) -> None:
        """Publish a db.change envelope for one row to the table's topic."""
        if event not in CHANGE_EVENTS:
            raise ValueError(f"Unknown change event {event}")
        change = ChangeEvent(table=table, event=event, record=record)
        env = WsEnvelope(type="db.change", payload=change.model_dump(mode="json"), channel=table)
        await self.broadcast(self.changes_topic(table), env.model_dump(mode="json"))

    # PUBLIC_INTERFACE
    async def publish_entity_change(self, table: str, event: str, entity: Any) -> None:
        """publish_change for an ORM row; DELETE only carries the id."""
        if event == "DELETE":
            record = {"id": str(entity.id)}
        else:
            record = record_to_dict(entity)
        await self.publish_change(table, event, record)

    # PUBLIC_INTERFACE
    def parse_tables(self, raw: Optional[str], allowed: Iterable[str]) -> list[str]:
        """Split a comma-separated table list, keeping only subscribable tables."""
        allowed_set = set(allowed)
        tables = [t.strip() for t in (raw or "").split(",") if t.strip()]
        return [t for t in dict.fromkeys(tables) if t in allowed_set]


# Singleton instance
broadcast_manager = BroadcastManager()
