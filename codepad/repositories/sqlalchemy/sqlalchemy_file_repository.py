from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from codepad.database import models
from codepad.repositories.interfaces import IFileRepository
from .errors import translate_storage_errors

class SqlalchemyFileRepository(IFileRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    @translate_storage_errors
    def create(self, file_model: models.File) -> models.File:
        self.db.add(file_model)
        self.db.commit()
        self.db.refresh(file_model)
        return file_model

    @translate_storage_errors
    def find_by_id(self, file_id: int) -> Optional[models.File]:
        return (
            self.db.query(models.File)
            .options(joinedload(models.File.project))
            .filter(models.File.id == file_id)
            .first()
        )

    @translate_storage_errors
    def list_by_project_id(self, project_id: int) -> List[models.File]:
        return (
            self.db.query(models.File)
            .filter(models.File.project_id == project_id)
            .order_by(models.File.updated_at.desc(), models.File.id.desc())
            .all()
        )

    @translate_storage_errors
    def update(self, file: models.File, fields: dict) -> models.File:
        for column, value in fields.items():
            setattr(file, column, value)
        file.touch()
        self.db.commit()
        self.db.refresh(file)
        return file
