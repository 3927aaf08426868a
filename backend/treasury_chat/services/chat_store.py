import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from treasury_chat.models.chat import ChatSession, Message


class SessionNotFound(LookupError):
    """The session does not exist or belongs to another user."""


class ChatStore:
    def __init__(self, db: Session):
        self.db = db

    def create_session(self, title: str, session_id: Optional[str] = None, user_id: Optional[int] = None) -> ChatSession:
        db_session = ChatSession(
            session_id=session_id or str(uuid.uuid4()),
            title=title,
            user_id=user_id,
        )
        self.db.add(db_session)
        self.db.commit()
        self.db.refresh(db_session)
        return db_session

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        return self.db.query(ChatSession).filter(ChatSession.session_id == session_id).first()

    def get_user_session(self, session_id: str, user_id: int) -> Optional[ChatSession]:
        session = self.get_session(session_id)
        if session is None or session.user_id != user_id:
            return None
        return session

    def list_sessions(self, user_id: Optional[int] = None) -> List[ChatSession]:
        query = self.db.query(ChatSession)
        if user_id is not None:
            query = query.filter(ChatSession.user_id == user_id)
        return query.order_by(ChatSession.timestamp.desc(), ChatSession.id.desc()).all()

    def create_message(self, session_id: str, content: str, is_user: bool) -> Message:
        db_message = Message(session_id=session_id, content=content, is_user=is_user)
        self.db.add(db_message)
        self.db.commit()
        self.db.refresh(db_message)
        return db_message

    def get_message(self, message_id: int) -> Optional[Message]:
        return self.db.query(Message).filter(Message.id == message_id).first()

    def list_session_messages(self, session_id: str) -> List[Message]:
        return (
            self.db.query(Message)
            .filter(Message.session_id == session_id)
            .order_by(Message.timestamp, Message.id)
            .all()
        )
