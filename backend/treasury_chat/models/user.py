from sqlalchemy import Column, Integer, String, Enum
from sqlalchemy.orm import relationship
from treasury_chat.database import Base
import enum

class UserRole(str, enum.Enum):
    user = "user"
    admin = "admin"
    super_user = "super_user"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    username = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.user)

    activity_logs = relationship("ActivityLog", back_populates="user")
    chat_sessions = relationship("ChatSession", back_populates="user")
    trades = relationship("Trade", foreign_keys="Trade.user_id", back_populates="user")
