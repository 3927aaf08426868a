from fastapi import WebSocket
from typing import Dict, List, Set
import json
import logging
from treasury_chat.models.chat import Message
from treasury_chat.models.trade import Trade

logger = logging.getLogger(__name__)

class ConnectionManager:
    def __init__(self):
        # {user_id: [WebSocket, ...]} - a user may have several tabs open
        self.active_connections: Dict[int, List[WebSocket]] = {}
        # Connected users who see every trade update
        self.reviewers: Set[int] = set()

    async def connect(self, websocket: WebSocket, user_id: int, is_reviewer: bool = False):
        await websocket.accept()
        self.active_connections.setdefault(user_id, []).append(websocket)
        if is_reviewer:
            self.reviewers.add(user_id)

    def disconnect(self, websocket: WebSocket, user_id: int):
        sockets = self.active_connections.get(user_id, [])
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets and user_id in self.active_connections:
            del self.active_connections[user_id]
            self.reviewers.discard(user_id)

    async def send_personal_message(self, message: str, user_id: int):
        for websocket in list(self.active_connections.get(user_id, [])):
            await self._send(websocket, message, user_id)

    async def _send(self, websocket: WebSocket, message: str, user_id: int):
        try:
            await websocket.send_text(message)
        except Exception as e:
            logger.warning(f"Dropping websocket for user {user_id}: {str(e)}")
            self.disconnect(websocket, user_id)

    def is_connected(self, user_id: int) -> bool:
        return user_id in self.active_connections

def trade_payload(trade: Trade) -> dict:
    return {
        "id": trade.id,
        "userId": trade.user_id,
        "sessionId": trade.session_id,
        "status": trade.status.value,
        "tradeType": trade.trade_type,
        "amount": trade.amount,
        "rate": trade.rate,
        "timestamp": trade.updated_at.isoformat(),
    }

def message_payload(message: Message) -> dict:
    return {
        "id": message.id,
        "sessionId": message.session_id,
        "content": message.content,
        "isUser": message.is_user,
        "timestamp": message.timestamp.isoformat(),
    }

class NotificationService:
    """
    Pushes trade and chat events to the users entitled to see them.

    Chat messages go to the session owner only. Trade updates go to the
    trade owner and to every connected reviewer.
    """

    def __init__(self):
        self.connection_manager = ConnectionManager()

    async def publish(self, event: dict, user_ids):
        message = json.dumps({"type": "notification", "data": event})
        for user_id in sorted(set(user_ids)):
            await self.connection_manager.send_personal_message(message, user_id)

    async def notify_trade_update(self, trade: Trade):
        recipients = {trade.user_id} | self.connection_manager.reviewers
        await self.publish({"type": "trade_update", "trade": trade_payload(trade)}, recipients)

    async def notify_new_message(self, message: Message, user_id: int):
        await self.publish({"type": "new_message", "message": message_payload(message)}, [user_id])

notification_service = NotificationService()
