"""
Persistence and lifecycle of money market trades.

    negotiation -> pending -> approved -> executed
               pending -> rejected

Trades created from chat start at ``negotiation`` (``pending`` when the
message was a confirmation); trades created directly default to
``pending``. Status updates are permissive unless the store is built with
``enforce_transitions=True``.
"""
import logging
import threading
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from treasury_chat.models.trade import Trade, TradeStatus
from treasury_chat.schemas.analysis import TradeDetails
from treasury_chat.schemas.trade import TradeCreate, TradeStatusUpdate

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    TradeStatus.negotiation: {TradeStatus.pending},
    TradeStatus.pending: {TradeStatus.approved, TradeStatus.rejected},
    TradeStatus.approved: {TradeStatus.executed},
    TradeStatus.rejected: set(),
    TradeStatus.executed: set(),
}

TERMINAL_STATUSES = {TradeStatus.rejected, TradeStatus.executed}

# Updates to the same trade id always take the same lock
LOCK_STRIPES = 64
_trade_locks = [threading.Lock() for _ in range(LOCK_STRIPES)]


def _lock_for(trade_id: int) -> threading.Lock:
    return _trade_locks[trade_id % LOCK_STRIPES]


class InvalidTradeTransition(ValueError):
    def __init__(self, current: TradeStatus, requested: TradeStatus):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move trade from {current.value} to {requested.value}")


def is_allowed_transition(current: TradeStatus, requested: TradeStatus) -> bool:
    return TradeStatus(requested) in ALLOWED_TRANSITIONS[TradeStatus(current)]


def initial_status_for(details: TradeDetails) -> TradeStatus:
    return TradeStatus.pending if details.is_confirmation else TradeStatus.negotiation


class TradeStore:
    def __init__(self, db: Session, enforce_transitions: bool = False):
        self.db = db
        self.enforce_transitions = enforce_transitions

    def create_trade(self, trade: TradeCreate) -> Trade:
        now = datetime.utcnow()
        db_trade = Trade(
            user_id=trade.user_id,
            session_id=trade.session_id,
            message_id=trade.message_id,
            trade_type=trade.trade_type,
            amount=trade.amount,
            details=trade.details,
            rate=trade.rate,
            status=trade.status or TradeStatus.pending,
            approved_by=None,
            approval_comment=None,
            created_at=now,
            updated_at=now,
        )
        self.db.add(db_trade)
        self.db.commit()
        self.db.refresh(db_trade)
        logger.info(f"Created trade {db_trade.id} ({db_trade.status.value}) for user {db_trade.user_id}")
        return db_trade

    def get_trade(self, trade_id: int) -> Optional[Trade]:
        return self.db.query(Trade).filter(Trade.id == trade_id).first()

    def list_trades(self, status: Optional[TradeStatus] = None) -> List[Trade]:
        query = self.db.query(Trade)
        if status:
            query = query.filter(Trade.status == TradeStatus(status))
        return query.order_by(Trade.created_at.desc(), Trade.id.desc()).all()

    def list_user_trades(self, user_id: int) -> List[Trade]:
        return (
            self.db.query(Trade)
            .filter(Trade.user_id == user_id)
            .order_by(Trade.created_at.desc(), Trade.id.desc())
            .all()
        )

    def update_status(self, trade_id: int, update: TradeStatusUpdate) -> Optional[Trade]:
        """Merge the supplied fields onto a trade and stamp updated_at."""
        with _lock_for(trade_id):
            trade = self.db.query(Trade).filter(Trade.id == trade_id).with_for_update().first()
            if not trade:
                return None
            if self.enforce_transitions and not is_allowed_transition(trade.status, update.status):
                self.db.rollback()
                raise InvalidTradeTransition(trade.status, update.status)

            previous = trade.status
            for field, value in update.model_dump(exclude_unset=True).items():
                setattr(trade, field, value)
            trade.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(trade)
            logger.info(f"Trade {trade_id} moved from {previous.value} to {trade.status.value}")
            return trade
