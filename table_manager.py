# Единая точка входа для всех событий стола: проверка, изменение и рассылка

import asyncio
import logging
from typing import Any, Dict, Optional

from errors import TableError
from game_engine import Outbound, TableSession

logger = logging.getLogger(__name__)


class TableManager:
    """
    Serializes every inbound event against one TableSession.

    The lock spans validate -> mutate -> deliver, so each event sees the
    state left by the previous one and broadcasts go out in mutation order.
    """

    def __init__(self, session: TableSession, connections):
        self.session = session
        self.connections = connections
        self._lock = asyncio.Lock()
        self._actions = {
            "startHand": lambda pid, msg: session.start_hand(),
            "dealFlop": lambda pid, msg: session.deal_flop(),
            "dealTurn": lambda pid, msg: session.deal_turn(),
            "dealRiver": lambda pid, msg: session.deal_river(),
            "rotateDealer": lambda pid, msg: session.rotate_dealer(),
            "adjustStack": lambda pid, msg: session.adjust_stack(pid, msg.get("delta")),
            "chat": lambda pid, msg: session.chat(pid, msg.get("text")),
        }

    async def _deliver(self, messages):
        for m in messages:
            frame = {"event": m.event, "data": m.payload}
            if m.recipient is None:
                await self.connections.broadcast(frame)
            else:
                await self.connections.send(m.recipient, frame)

    async def connect(self, conn_id: str, websocket) -> None:
        """Новый зритель сразу получает текущее состояние."""
        async with self._lock:
            self.connections.add(conn_id, websocket)
            await self.connections.send(
                conn_id, {"event": "state", "data": self.session.public_state()}
            )

    async def disconnect(self, conn_id: str) -> None:
        async with self._lock:
            self.connections.remove(conn_id)
            await self._deliver(self.session.leave(conn_id))

    async def join(self, conn_id: str, name: Any) -> Dict[str, Any]:
        async with self._lock:
            try:
                out = self.session.join(conn_id, name)
            except TableError as e:
                logger.debug("join rejected for %s: %s", conn_id, e)
                return {"error": e.kind, "detail": str(e)}
            await self._deliver(out)
            player = self.session.get(conn_id)
            return {"ok": True, "seat": player.seat, "stack": player.stack}

    async def handle(self, conn_id: str, msg: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Применяет одно входящее событие. Возвращает прямой ответ
        отправителю (только для join), иначе None.
        """
        action = msg.get("action")
        if not isinstance(action, str):
            logger.debug("frame without action name from %s", conn_id)
            return None
        if action == "join":
            ack = await self.join(conn_id, msg.get("name"))
            return {"event": "ack", "action": "join", "data": ack}

        handler = self._actions.get(action)
        if handler is None:
            logger.debug("unknown action %r from %s", action, conn_id)
            return None

        async with self._lock:
            try:
                out = handler(conn_id, msg)
            except TableError as e:
                logger.debug("%s rejected for %s: %s", action, conn_id, e)
                return None
            await self._deliver(out)
        return None
