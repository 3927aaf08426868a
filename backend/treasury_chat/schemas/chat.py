from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, Dict
from treasury_chat.schemas.analysis import Feature, Action

class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    class Config:
        populate_by_name = True

class ChatResponse(BaseModel):
    message: str
    session_id: str = Field(alias="sessionId")

    class Config:
        populate_by_name = True

class FeatureRequest(BaseModel):
    """Structured reply sent instead of prose when a feature intent is detected."""
    is_feature_request: bool = Field(default=True, alias="isFeatureRequest")
    feature: Feature
    action: Action
    params: Dict[str, str] = {}
    message: str

    class Config:
        populate_by_name = True

class SessionCreated(BaseModel):
    session_id: str = Field(alias="sessionId")

    class Config:
        populate_by_name = True

class SessionOut(BaseModel):
    id: int
    session_id: str
    title: str
    timestamp: datetime

    class Config:
        from_attributes = True

class MessageOut(BaseModel):
    id: int
    session_id: str
    content: str
    is_user: bool
    timestamp: datetime

    class Config:
        from_attributes = True
