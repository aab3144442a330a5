from typing import Optional
from sqlalchemy.orm import Session
from codepad.database import models
from codepad.repositories.interfaces import IUserRepository
from .errors import translate_storage_errors

class SqlalchemyUserRepository(IUserRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    @translate_storage_errors
    def find_by_id(self, user_id: int) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.id == user_id).first()

    @translate_storage_errors
    def update_theme(self, user: models.User, theme_id: int) -> models.User:
        user.preferred_theme_id = theme_id
        self.db.commit()
        self.db.refresh(user)
        return user
