from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from treasury_chat.config import settings
from treasury_chat.database import get_db
from treasury_chat.dependencies import REVIEWER_ROLES, get_current_user, get_super_user, get_trade_reviewer
from treasury_chat.models.activity_log import ActivityLog
from treasury_chat.models.trade import TradeStatus
from treasury_chat.models.user import User
from treasury_chat.schemas.trade import TradeCreate, TradeOut, TradeStatusChange, TradeStatusUpdate
from treasury_chat.services.chat_store import ChatStore
from treasury_chat.services.trade_store import InvalidTradeTransition, TradeStore
from treasury_chat.services.websocket_service import notification_service

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/", response_model=TradeOut)
async def create_trade(
    trade: TradeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    is_reviewer = current_user.role in REVIEWER_ROLES
    if trade.user_id != current_user.id and not is_reviewer:
        raise HTTPException(status_code=403, detail="Not authorized to create trades for another user")
    if not db.query(User).filter(User.id == trade.user_id).first():
        raise HTTPException(status_code=404, detail="User not found")
    chat_store = ChatStore(db)
    session = chat_store.get_session(trade.session_id)
    if not session or (session.user_id != current_user.id and not is_reviewer):
        raise HTTPException(status_code=404, detail="Session not found")
    message = chat_store.get_message(trade.message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    if message.session_id != trade.session_id:
        raise HTTPException(status_code=400, detail="Message does not belong to this session")

    db_trade = TradeStore(db).create_trade(trade)
    await notification_service.notify_trade_update(db_trade)
    return db_trade

@router.get("/", response_model=List[TradeOut])
async def get_trades(
    status: Optional[TradeStatus] = None,
    current_user: User = Depends(get_trade_reviewer),
    db: Session = Depends(get_db)
):
    return TradeStore(db).list_trades(status)

@router.get("/mine", response_model=List[TradeOut])
async def get_my_trades(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return TradeStore(db).list_user_trades(current_user.id)

@router.get("/{trade_id}", response_model=TradeOut)
async def get_trade(
    trade_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    trade = TradeStore(db).get_trade(trade_id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")
    if trade.user_id != current_user.id and current_user.role not in REVIEWER_ROLES:
        raise HTTPException(status_code=403, detail="Not authorized to view this trade")
    return trade

@router.patch("/{trade_id}/status", response_model=TradeOut)
async def update_trade_status(
    trade_id: int,
    update: TradeStatusChange,
    current_user: User = Depends(get_super_user),
    db: Session = Depends(get_db)
):
    patch = update.model_dump(exclude_unset=True)
    if update.status in (TradeStatus.approved, TradeStatus.rejected):
        patch["approved_by"] = current_user.id

    store = TradeStore(db, enforce_transitions=settings.enforce_trade_transitions)
    try:
        trade = store.update_status(trade_id, TradeStatusUpdate(**patch))
    except InvalidTradeTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")

    log = ActivityLog(
        user_id=current_user.id,
        trade_id=trade.id,
        action=f"Set trade {trade.id} status to {trade.status.value}"
    )
    db.add(log)
    db.commit()

    await notification_service.notify_trade_update(trade)
    return trade

@router.get("/{trade_id}/activity", response_model=List[dict])
async def get_trade_activity(
    trade_id: int,
    current_user: User = Depends(get_trade_reviewer),
    db: Session = Depends(get_db)
):
    logs = db.query(ActivityLog).filter(ActivityLog.trade_id == trade_id).order_by(ActivityLog.id).all()
    return [{"id": log.id, "user_id": log.user_id, "action": log.action, "timestamp": log.timestamp} for log in logs]
