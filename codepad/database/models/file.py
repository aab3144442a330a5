from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base
from .mixins import TimestampMixin


class File(TimestampMixin, Base):
    """
    프로젝트에 속한 소스 파일입니다.
    language_id는 프로젝트의 language와 독립적입니다.
    """
    __tablename__ = "files"
    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    language_id = Column(Integer, nullable=False, default=1)
    content = Column(Text, nullable=False, default="")

    project = relationship("Project", back_populates="files")
