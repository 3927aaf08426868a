from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

class Feature(str, Enum):
    calendar = "calendar"
    documents = "documents"
    forecasting = "forecasting"
    trades = "trades"
    quotes = "quotes"

class Action(str, Enum):
    view = "view"
    create = "create"
    update = "update"
    delete = "delete"
    analyze = "analyze"
    execute = "execute"

class IntentParams(BaseModel):
    """Parameters pulled out of a message alongside its intent."""
    date: Optional[str] = None
    amount: Optional[str] = None
    rate: Optional[str] = None
    duration: Optional[str] = None

    def as_dict(self) -> dict:
        return self.model_dump(exclude_none=True)

class CommandIntent(BaseModel):
    feature: Feature
    action: Action
    confidence: float = Field(ge=0.0, le=1.0)
    extracted_params: IntentParams = Field(default_factory=IntentParams)

class TradeDetails(BaseModel):
    is_trade_request: bool = False
    trade_type: str = ""
    amount: str = ""
    details: str = ""
    rate: Optional[str] = None
    period: Optional[str] = None
    counterparty: Optional[str] = None
    is_confirmation: bool = False
    is_negotiation: bool = False
