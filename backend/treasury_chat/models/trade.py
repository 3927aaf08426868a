from sqlalchemy import Column, Integer, String, Text, Enum, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from treasury_chat.database import Base
import enum

class TradeStatus(str, enum.Enum):
    negotiation = "negotiation"
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    executed = "executed"

class Trade(Base):
    __tablename__ = "trades"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    session_id = Column(String, ForeignKey("chat_sessions.session_id"), nullable=False)
    message_id = Column(Integer, ForeignKey("messages.id"), nullable=False)
    trade_type = Column(String, nullable=False)  # e.g. "Loan/Borrowing (4 months) with Barclays Bank"
    amount = Column(String, nullable=False)  # free text, currency prefixed
    details = Column(Text, nullable=False)
    rate = Column(String, nullable=True)
    status = Column(Enum(TradeStatus), nullable=False, default=TradeStatus.pending, index=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approval_comment = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User", foreign_keys=[user_id], back_populates="trades")
    approver = relationship("User", foreign_keys=[approved_by])
