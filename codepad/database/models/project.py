from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base
from .mixins import TimestampMixin


class Project(TimestampMixin, Base):
    """
    사용자 한 명이 소유하는 작업 공간입니다. 여러 언어의 파일을 담을 수 있습니다.
    이름은 중복될 수 있으며(unique 아님), 삭제 시 소속 파일도 함께 삭제됩니다.
    """
    __tablename__ = "projects"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    language = Column(String, nullable=False, default="javascript")

    owner = relationship("User", back_populates="projects")
    files = relationship("File", back_populates="project", cascade="all, delete-orphan", passive_deletes=True)
