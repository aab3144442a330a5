from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from ..database import Base
from codepad.utils.themes import DEFAULT_THEME_ID


class User(Base):
    """
    로그인하여 프로젝트를 소유하는 사용자입니다.
    인증 정보(비밀번호, 세션)는 외부 세션 계층이 관리하며, 여기서는 표시 설정만 가집니다.
    """
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    email = Column(String, nullable=True)
    preferred_theme_id = Column(Integer, nullable=False, default=DEFAULT_THEME_ID)

    projects = relationship("Project", back_populates="owner", cascade="all, delete-orphan")
