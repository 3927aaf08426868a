from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging
from treasury_chat.database import get_db
from treasury_chat.dependencies import get_current_user
from treasury_chat.models.user import User
from treasury_chat.schemas.chat import ChatRequest, ChatResponse, SessionCreated, SessionOut, MessageOut
from treasury_chat.services.chat_orchestrator import ChatOrchestrator
from treasury_chat.services.chat_store import ChatStore, SessionNotFound
from treasury_chat.services.gemini import DEFAULT_TITLE

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        orchestrator = ChatOrchestrator(db)
        return await orchestrator.handle_message(current_user, request.message, request.session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    except Exception as e:
        db.rollback()
        logger.exception(f"Error in chat endpoint: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to process chat request")

@router.get("/sessions", response_model=List[SessionOut])
async def get_sessions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ChatStore(db).list_sessions(user_id=current_user.id)

@router.post("/sessions", response_model=SessionCreated)
async def create_session(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    session = ChatStore(db).create_session(title=DEFAULT_TITLE, user_id=current_user.id)
    return SessionCreated(session_id=session.session_id)

@router.get("/messages/{session_id}", response_model=List[MessageOut])
async def get_session_messages(
    session_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    store = ChatStore(db)
    if not store.get_user_session(session_id, current_user.id):
        raise HTTPException(status_code=404, detail="Session not found")
    return store.list_session_messages(session_id)
