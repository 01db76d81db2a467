import json
import logging
import uuid

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

import game_data

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def ws_table(websocket: WebSocket):
    await websocket.accept()
    manager = game_data.manager
    conn_id = uuid.uuid4().hex
    await manager.connect(conn_id, websocket)
    logger.info("connection %s opened", conn_id)

    try:
        while True:
            try:
                data = await websocket.receive_text()
            except WebSocketDisconnect:
                break
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                logger.debug("bad frame from %s", conn_id)
                continue
            if not isinstance(msg, dict):
                continue

            try:
                reply = await manager.handle(conn_id, msg)
            except Exception:
                # кривой кадр не должен стоить игроку места
                logger.exception("failed to handle frame from %s", conn_id)
                continue
            if reply is not None:
                await websocket.send_json(reply)
    finally:
        await manager.disconnect(conn_id)
        logger.info("connection %s closed", conn_id)
