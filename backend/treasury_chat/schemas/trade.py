from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from treasury_chat.models.trade import TradeStatus

class TradeBase(BaseModel):
    trade_type: str
    amount: str
    details: str
    rate: Optional[str] = None

class TradeCreate(TradeBase):
    user_id: int
    session_id: str
    message_id: int
    status: TradeStatus = TradeStatus.pending

class TradeStatusChange(BaseModel):
    """Body of a status change request; the approver is always the caller."""
    status: TradeStatus
    approval_comment: Optional[str] = None
    rate: Optional[str] = None

class TradeStatusUpdate(TradeStatusChange):
    approved_by: Optional[int] = None

class TradeOut(TradeBase):
    id: int
    user_id: int
    session_id: str
    message_id: int
    status: TradeStatus
    approved_by: Optional[int] = None
    approval_comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
