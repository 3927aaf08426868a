from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends, status
from sqlalchemy.orm import Session
import logging
from treasury_chat.database import get_db
from treasury_chat.dependencies import REVIEWER_ROLES, get_current_user_from_token, get_token_from_websocket
from treasury_chat.services.websocket_service import notification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws")

@router.websocket("/notifications")
async def notifications_websocket(websocket: WebSocket, db: Session = Depends(get_db)):
    try:
        token = await get_token_from_websocket(websocket)
        current_user = get_current_user_from_token(token, db)
    except Exception as e:
        await websocket.accept()
        await websocket.send_json({
            "error": "Authentication failed",
            "details": str(getattr(e, "detail", e))
        })
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    manager = notification_service.connection_manager
    await manager.connect(websocket, current_user.id, is_reviewer=current_user.role in REVIEWER_ROLES)
    await websocket.send_json({"type": "connected", "userId": current_user.id})
    try:
        while True:
            data = await websocket.receive_text()
            # Clients only send keep-alives on this channel
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error: {str(e)}")
    finally:
        manager.disconnect(websocket, current_user.id)
