import logging
from dataclasses import dataclass
from typing import Optional, List, Dict, Any

from codepad.database import models
from codepad.repositories.interfaces import IProjectRepository, IFileRepository
from codepad.services.ownership_guard import OwnershipGuard
from codepad.services.exceptions import ValidationError
from codepad.utils.languages import LanguageRegistry, get_registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectPatch:
    """프로젝트 부분 수정 요청. None인 필드는 기존 값을 유지합니다. (null로 값을 지우는 경로는 없음)"""
    name: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class FilePatch:
    """파일 부분 수정 요청. None인 필드는 기존 값을 유지합니다."""
    name: Optional[str] = None
    language_id: Optional[int] = None
    content: Optional[str] = None


def _require_name(value, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()


class WorkspaceService:
    """
    사용자 소유 범위 안에서 프로젝트와 파일의 생성·조회·수정을 제공합니다.
    ID를 받는 모든 작업은 OwnershipGuard를 먼저 통과합니다.
    """

    def __init__(self, project_repo: IProjectRepository, file_repo: IFileRepository,
                 guard: OwnershipGuard = None, registry: LanguageRegistry = None):
        """
        WorkspaceService를 초기화합니다.

        Args:
            project_repo: 프로젝트 데이터에 접근하기 위한 리포지토리.
            file_repo: 파일 데이터에 접근하기 위한 리포지토리.
            guard: 소유권 검사기. 없으면 같은 리포지토리로 새로 만듭니다.
            registry: 언어 레지스트리. 없으면 공용 레지스트리를 사용합니다.
        """
        self.project_repo = project_repo
        self.file_repo = file_repo
        self.guard = guard or OwnershipGuard(project_repo, file_repo)
        self.registry = registry or get_registry()

    # --- Projects ---

    def list_projects(self, user_id: int) -> List[models.Project]:
        """사용자의 프로젝트 목록을 최근 수정 순으로 반환합니다."""
        return self.project_repo.list_by_user_id(user_id)

    def create_project(self, user_id: int, name: str, description: Optional[str] = None,
                       language: Optional[str] = None) -> models.Project:
        """
        새 프로젝트를 생성합니다. 같은 이름의 프로젝트가 있어도 생성합니다.

        Raises:
            ValidationError: 이름이 비어 있거나 공백뿐일 때. (이 경우 아무것도 저장하지 않음)
        """
        clean_name = _require_name(name, "project_name")
        project = models.Project(
            user_id=user_id,
            name=clean_name,
            description=description,
            language=self.registry.normalize_tag(language),
        )
        created = self.project_repo.create(project)
        logger.info("Project %s created for user %s.", created.id, user_id)
        return created

    def get_project(self, user_id: int, project_id) -> models.Project:
        """
        Raises:
            ResourceNotFoundError: 프로젝트가 없거나 소유자가 아닐 때.
        """
        return self.guard.authorize_project(user_id, project_id)

    def update_project(self, user_id: int, project_id, patch: ProjectPatch) -> models.Project:
        """
        프로젝트를 부분 수정합니다. patch에서 생략된 필드는 그대로 유지되고, updated_at은 항상 증가합니다.

        Raises:
            ResourceNotFoundError: 프로젝트가 없거나 소유자가 아닐 때.
            ValidationError: 이름이 주어졌지만 비어 있을 때.
        """
        project = self.guard.authorize_project(user_id, project_id)
        fields: Dict[str, Any] = {}
        if patch.name is not None:
            fields["name"] = _require_name(patch.name, "project_name")
        if patch.description is not None:
            fields["description"] = patch.description
        if patch.language is not None:
            fields["language"] = self.registry.normalize_tag(patch.language)
        return self.project_repo.update(project, fields)

    def delete_project(self, user_id: int, project_id) -> bool:
        """프로젝트와 소속 파일을 모두 삭제합니다."""
        project = self.guard.authorize_project(user_id, project_id)
        self.project_repo.delete(project)
        logger.info("Project %s deleted by user %s.", project.id, user_id)
        return True

    # --- Files ---

    def create_file(self, project_id: int, file_name: str, language_id, content: Optional[str]) -> models.File:
        """
        프로젝트 아래에 파일을 생성합니다.
        project_id의 소유권은 호출자가 이미 확인했어야 합니다.

        Raises:
            ValidationError: 파일 이름이 비어 있을 때.
        """
        new_file = models.File(
            project_id=project_id,
            name=_require_name(file_name, "file_name"),
            language_id=self.registry.normalize_store_id(language_id),
            content=content or "",
        )
        created = self.file_repo.create(new_file)
        logger.info("File %s created in project %s.", created.id, project_id)
        return created

    def create_file_in_project(self, user_id: int, project_id, file_name: str, language_id,
                               content: Optional[str]) -> models.File:
        project = self.guard.authorize_project(user_id, project_id)
        return self.create_file(project.id, file_name, language_id, content)

    def list_files(self, user_id: int, project_id) -> List[models.File]:
        project = self.guard.authorize_project(user_id, project_id)
        return self.file_repo.list_by_project_id(project.id)

    def get_file(self, user_id: int, file_id) -> models.File:
        """
        Raises:
            ResourceNotFoundError: 파일이 없거나, 파일의 프로젝트가 사용자 소유가 아닐 때.
        """
        return self.guard.authorize_file(user_id, file_id)

    def update_file(self, user_id: int, file_id, patch: FilePatch) -> models.File:
        """
        파일을 부분 수정합니다. 동시에 같은 파일을 저장하면 나중에 커밋된 쪽이 남습니다.

        Raises:
            ResourceNotFoundError: 파일이 없거나 소유자가 아닐 때.
            ValidationError: 이름이 주어졌지만 비어 있을 때.
        """
        file = self.guard.authorize_file(user_id, file_id)
        fields: Dict[str, Any] = {}
        if patch.name is not None:
            fields["name"] = _require_name(patch.name, "file_name")
        if patch.language_id is not None:
            fields["language_id"] = self.registry.normalize_store_id(patch.language_id)
        if patch.content is not None:
            fields["content"] = patch.content
        return self.file_repo.update(file, fields)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def project_to_dict(project: models.Project) -> Dict[str, Any]:
    return {
        "project_id": project.id,
        "project_name": project.name,
        "description": project.description,
        "language": project.language,
        "created_at": _iso(project.created_at),
        "updated_at": _iso(project.updated_at),
    }


def file_to_dict(file: models.File, registry: LanguageRegistry = None) -> Dict[str, Any]:
    registry = registry or get_registry()
    return {
        "file_id": file.id,
        "project_id": file.project_id,
        "file_name": file.name,
        "language_id": file.language_id,
        "language": registry.from_store_id(file.language_id),
        "content": file.content,
        "created_at": _iso(file.created_at),
        "updated_at": _iso(file.updated_at),
    }
