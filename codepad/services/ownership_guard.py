import logging
from typing import Optional

from codepad.database import models
from codepad.repositories.interfaces import IProjectRepository, IFileRepository
from codepad.services.exceptions import ResourceNotFoundError

logger = logging.getLogger(__name__)

PROJECT = "project"
FILE = "file"


def coerce_id(value) -> Optional[int]:
    """URL/JSON에서 온 ID를 정수로 바꿉니다. 변환할 수 없으면 None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


class OwnershipGuard:
    """
    프로젝트/파일에 대한 모든 읽기·쓰기 전에 소유권을 확인합니다.

    리소스가 없는 경우와 다른 사용자의 리소스인 경우 모두 동일한 ResourceNotFoundError를
    던집니다. 따라서 소유자가 아닌 사용자는 리소스의 존재 여부를 알 수 없습니다.
    파일은 File -> Project -> User 순서로 소유자를 따라갑니다.
    """

    def __init__(self, project_repo: IProjectRepository, file_repo: IFileRepository):
        self.project_repo = project_repo
        self.file_repo = file_repo

    def authorize(self, user_id: int, resource_kind: str, resource_id):
        if resource_kind == PROJECT:
            return self.authorize_project(user_id, resource_id)
        if resource_kind == FILE:
            return self.authorize_file(user_id, resource_id)
        raise ValueError(f"Unknown resource kind '{resource_kind}'.")

    def authorize_project(self, user_id: int, project_id) -> models.Project:
        """
        Raises:
            ResourceNotFoundError: 프로젝트가 없거나 user_id의 소유가 아닐 때.
        """
        pid = coerce_id(project_id)
        project = self.project_repo.find_by_id(pid) if pid is not None else None
        if project is None or project.user_id != user_id:
            logger.debug("Project access denied (user=%s, project=%r).", user_id, project_id)
            raise ResourceNotFoundError("Project not found.")
        return project

    def authorize_file(self, user_id: int, file_id) -> models.File:
        """
        Raises:
            ResourceNotFoundError: 파일이 없거나, 파일이 속한 프로젝트가 user_id의 소유가 아닐 때.
        """
        fid = coerce_id(file_id)
        file = self.file_repo.find_by_id(fid) if fid is not None else None
        if file is None or file.project is None or file.project.user_id != user_id:
            logger.debug("File access denied (user=%s, file=%r).", user_id, file_id)
            raise ResourceNotFoundError("File not found.")
        return file
