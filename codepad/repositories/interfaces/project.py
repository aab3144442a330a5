from abc import ABC, abstractmethod
from typing import List, Optional
from codepad.database import models

class IProjectRepository(ABC):
    @abstractmethod
    def create(self, project_model: models.Project) -> models.Project:
        """새로운 프로젝트를 데이터베이스에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, project_id: int) -> Optional[models.Project]:
        """
        고유 ID로 특정 프로젝트를 조회합니다.
        소유자 검사는 하지 않으므로, 반드시 OwnershipGuard를 통해서만 호출해야 합니다.
        """
        pass

    @abstractmethod
    def list_by_user_id(self, user_id: int) -> List[models.Project]:
        """사용자의 모든 프로젝트를 최근 수정 순(updated_at 내림차순)으로 조회합니다."""
        pass

    @abstractmethod
    def update(self, project: models.Project, fields: dict) -> models.Project:
        """
        주어진 필드만 변경하고 updated_at을 갱신합니다.

        Args:
            project: 수정할 프로젝트 (소유권 확인이 끝난 객체).
            fields: 변경할 컬럼과 값. 여기에 없는 컬럼은 기존 값을 유지합니다.
        """
        pass

    @abstractmethod
    def delete(self, project: models.Project) -> bool:
        """특정 프로젝트를 삭제합니다. 소속 파일도 함께 삭제됩니다."""
        pass
