"""Debate session control and WebSocket endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect

from duochat.web.schemas import SessionStartRequest, TurnDelayRequest
from duochat.web.session_manager import SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")
ws_router = APIRouter()


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


@router.get("/session")
async def get_session(manager: SessionManager = Depends(get_session_manager)):
    """Full session snapshot."""
    return manager.snapshot()


@router.post("/session/start")
async def start_session(
    request: SessionStartRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """Start a debate in the background."""
    try:
        return await manager.start_session(
            request.topic,
            language=request.language,
            turn_delay_ms=request.turn_delay_ms,
            agent_a=request.agent_a,
            agent_b=request.agent_b,
        )
    except (ValueError, RuntimeError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/session/stop")
async def stop_session(manager: SessionManager = Depends(get_session_manager)):
    """Request a cooperative stop."""
    return manager.stop_session()


@router.put("/session/delay")
async def set_turn_delay(
    request: TurnDelayRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """Change the inter-turn delay of the running session."""
    try:
        manager.set_turn_delay(request.turn_delay_ms)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"turn_delay_ms": request.turn_delay_ms}


@ws_router.websocket("/ws/session")
async def session_websocket(websocket: WebSocket):
    """Stream engine events and volume ticks to a client."""
    manager: SessionManager = websocket.app.state.session_manager
    await websocket.accept()
    manager.add_connection(websocket)

    try:
        await websocket.send_json({"type": "snapshot", "data": manager.snapshot()})
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("WebSocket client disconnected")
    finally:
        manager.remove_connection(websocket)
