from __future__ import annotations
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import structlog

from hackboard.services.leaderboard import leaderboard_snapshot
from hackboard.services.realtime import LEADERBOARD_UPDATE

log = structlog.get_logger()

router = APIRouter()


async def send_initial_board(websocket: WebSocket) -> None:
    async with websocket.app.state.session_factory() as session:
        board = await leaderboard_snapshot(session)
    await websocket.send_json({"event": LEADERBOARD_UPDATE, "data": board.model_dump(mode="json")})


@router.websocket("/ws/leaderboard")
async def leaderboard_socket(websocket: WebSocket):
    hub = websocket.app.state.runtime.hub
    await websocket.accept()
    try:
        # Join only after the first frame so hub pushes never race it on this socket
        await send_initial_board(websocket)
        await hub.connect(websocket)
        while True:
            # Inbound frames are ignored; the socket only receives pushes
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await hub.disconnect(websocket)
