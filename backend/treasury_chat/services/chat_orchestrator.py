"""
Handles one chat turn: persist the message, detect trades, detect feature
intents and produce the assistant reply.
"""
import json
import logging
from typing import Optional

from sqlalchemy.orm import Session

from treasury_chat.models.chat import ChatSession
from treasury_chat.models.trade import Trade
from treasury_chat.models.user import User
from treasury_chat.schemas.analysis import CommandIntent, TradeDetails
from treasury_chat.schemas.chat import ChatResponse, FeatureRequest
from treasury_chat.schemas.trade import TradeCreate
from treasury_chat.services.chat_store import ChatStore, SessionNotFound
from treasury_chat.services.gemini import generate_chat_response, generate_session_title
from treasury_chat.services.intent_classifier import classify
from treasury_chat.services.trade_analyzer import analyze_message_for_trade
from treasury_chat.services.trade_store import TradeStore, initial_status_for
from treasury_chat.services.websocket_service import NotificationService, notification_service

logger = logging.getLogger(__name__)

# Intents at or below this confidence are answered by the LLM instead
FEATURE_REQUEST_THRESHOLD = 0.4

FEATURE_MESSAGES = {
    ("calendar", "view"): "Here is your calendar with upcoming meetings and maturity dates.",
    ("calendar", "create"): "Let's schedule that. Fill in the event details below.",
    ("calendar", "update"): "Select the event you'd like to change.",
    ("calendar", "delete"): "Select the event you'd like to cancel.",
    ("documents", "view"): "Here are your documents.",
    ("documents", "create"): "Upload a document or start a new one below.",
    ("documents", "analyze"): "Choose a document and I'll summarise it for you.",
    ("forecasting", "view"): "Here is your latest cash flow and rate forecast.",
    ("forecasting", "create"): "Set the parameters below to generate a new forecast.",
    ("forecasting", "analyze"): "Here is the interest rate outlook with confidence intervals.",
    ("trades", "view"): "Here are your recent trades and their approval status.",
    ("trades", "create"): "Enter the trade details below to log a new trade.",
    ("trades", "analyze"): "Here is an analysis of your trading activity.",
    ("trades", "execute"): "Review the trade below. Execution requires super user approval.",
    ("quotes", "view"): "Here are the latest money market quotes.",
    ("quotes", "create"): "Tell me the amount and tenor and I'll request a quote.",
    ("quotes", "analyze"): "Here is a comparison of the quotes received.",
}


def feature_message(feature: str, action: str) -> str:
    return FEATURE_MESSAGES.get((feature, action), f"Here are the {feature} options you requested.")


def build_feature_reply(intent: CommandIntent) -> str:
    payload = FeatureRequest(
        feature=intent.feature,
        action=intent.action,
        params=intent.extracted_params.as_dict(),
        message=feature_message(intent.feature.value, intent.action.value),
    )
    return json.dumps(payload.model_dump(mode="json", by_alias=True))


def build_trade_record(details: TradeDetails, user_id: int, session_id: str, message_id: int) -> TradeCreate:
    """Turn extracted details into the decorated record that gets stored."""
    description = details.details
    if details.is_confirmation:
        description = f"CONFIRMATION: {description}"
    elif details.is_negotiation:
        description = f"NEGOTIATION: {description}"

    trade_type = details.trade_type
    if details.period:
        trade_type = f"{trade_type} ({details.period})"
    if details.counterparty:
        trade_type = f"{trade_type} with {details.counterparty}"

    amount = details.amount
    if details.rate:
        amount = f"{amount} at {details.rate}"

    return TradeCreate(
        user_id=user_id,
        session_id=session_id,
        message_id=message_id,
        trade_type=trade_type,
        amount=amount,
        details=description,
        rate=details.rate,
        status=initial_status_for(details),
    )


class ChatOrchestrator:
    def __init__(self, db: Session, notifier: NotificationService = notification_service):
        self.chat_store = ChatStore(db)
        self.trade_store = TradeStore(db)
        self.notifier = notifier

    async def _resolve_session(self, user: User, message: str, session_id: Optional[str]) -> ChatSession:
        if session_id:
            session = self.chat_store.get_session(session_id)
            if session:
                if session.user_id != user.id:
                    raise SessionNotFound(session_id)
                return session
            logger.info(f"Session {session_id} not found, creating it")
        title = await generate_session_title(message)
        return self.chat_store.create_session(title=title, session_id=session_id, user_id=user.id)

    async def _record_trade(self, user: User, session_id: str, message_id: int, message: str) -> Optional[Trade]:
        details = await analyze_message_for_trade(message)
        if not details.is_trade_request:
            return None
        trade = self.trade_store.create_trade(build_trade_record(details, user.id, session_id, message_id))
        await self.notifier.notify_trade_update(trade)
        return trade

    async def _reply(self, message: str) -> str:
        intent = classify(message)
        if intent and intent.confidence > FEATURE_REQUEST_THRESHOLD:
            logger.info(f"Feature request {intent.feature.value}/{intent.action.value} ({intent.confidence:.2f})")
            return build_feature_reply(intent)
        return await generate_chat_response(message)

    async def handle_message(self, user: User, message: str, session_id: Optional[str] = None) -> ChatResponse:
        session = await self._resolve_session(user, message, session_id)
        user_message = self.chat_store.create_message(session.session_id, message, is_user=True)

        await self._record_trade(user, session.session_id, user_message.id, message)

        reply = await self._reply(message)
        ai_message = self.chat_store.create_message(session.session_id, reply, is_user=False)
        await self.notifier.notify_new_message(ai_message, user.id)

        return ChatResponse(message=reply, session_id=session.session_id)
