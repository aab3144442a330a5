from typing import List, Optional
from sqlalchemy.orm import Session
from codepad.database import models
from codepad.repositories.interfaces import IProjectRepository
from .errors import translate_storage_errors

class SqlalchemyProjectRepository(IProjectRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    @translate_storage_errors
    def create(self, project_model: models.Project) -> models.Project:
        self.db.add(project_model)
        self.db.commit()
        self.db.refresh(project_model)
        return project_model

    @translate_storage_errors
    def find_by_id(self, project_id: int) -> Optional[models.Project]:
        return self.db.query(models.Project).filter(models.Project.id == project_id).first()

    @translate_storage_errors
    def list_by_user_id(self, user_id: int) -> List[models.Project]:
        return (
            self.db.query(models.Project)
            .filter(models.Project.user_id == user_id)
            .order_by(models.Project.updated_at.desc(), models.Project.id.desc())
            .all()
        )

    @translate_storage_errors
    def update(self, project: models.Project, fields: dict) -> models.Project:
        for column, value in fields.items():
            setattr(project, column, value)
        project.touch()
        self.db.commit()
        self.db.refresh(project)
        return project

    @translate_storage_errors
    def delete(self, project: models.Project) -> bool:
        if project:
            self.db.delete(project)
            self.db.commit()
            return True
        return False
