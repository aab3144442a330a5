from abc import ABC, abstractmethod
from typing import List, Optional
from codepad.database import models

class IFileRepository(ABC):
    @abstractmethod
    def create(self, file_model: models.File) -> models.File:
        """새로운 파일을 데이터베이스에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, file_id: int) -> Optional[models.File]:
        """고유 ID로 파일을 조회합니다. (소속 프로젝트 포함)"""
        pass

    @abstractmethod
    def list_by_project_id(self, project_id: int) -> List[models.File]:
        """프로젝트에 속한 파일을 최근 수정 순으로 조회합니다."""
        pass

    @abstractmethod
    def update(self, file: models.File, fields: dict) -> models.File:
        """주어진 필드만 변경하고 updated_at을 갱신합니다."""
        pass
