# game_data.py

import logging
from typing import Dict

from game_engine import TableSession
from table_manager import TableManager
from tables import TableConfig

logger = logging.getLogger(__name__)


class ConnectionManager:
    """conn_id -> WebSocket. Доставка без гарантий: упавший сокет просто выкидывается."""

    def __init__(self):
        self.active: Dict[str, object] = {}

    def add(self, conn_id: str, websocket) -> None:
        self.active[conn_id] = websocket

    def remove(self, conn_id: str) -> None:
        self.active.pop(conn_id, None)

    async def send(self, conn_id: str, message: dict) -> None:
        ws = self.active.get(conn_id)
        if ws is None:
            return
        try:
            await ws.send_json(message)
        except Exception as e:
            logger.warning("dropping connection %s: %s", conn_id, e)
            self.remove(conn_id)

    async def broadcast(self, message: dict) -> None:
        for conn_id in list(self.active):
            await self.send(conn_id, message)


# Единственный стол процесса
connections = ConnectionManager()
session = TableSession(TableConfig.from_env())
manager = TableManager(session, connections)
