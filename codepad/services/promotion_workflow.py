import enum
import logging
from dataclasses import dataclass
from typing import Optional

from codepad.services.editor_buffer import Buffer
from codepad.services.workspace_service import WorkspaceService
from codepad.services.exceptions import ValidationError, PartialPromotionFailure
from codepad.services.ownership_guard import coerce_id

logger = logging.getLogger(__name__)


class PromotionState(enum.Enum):
    UNATTACHED = "unattached"
    RESOLVING_TARGET = "resolving_target"
    PERSISTING = "persisting"
    ATTACHED = "attached"
    ABORTED = "aborted"


@dataclass(frozen=True)
class PromotionTarget:
    """스크래치패드 저장 위치. 기존 project_id 또는 새 프로젝트 이름 중 하나가 필요합니다."""
    file_name: str
    project_id: Optional[int] = None
    new_project_name: Optional[str] = None


@dataclass(frozen=True)
class PromotionOutcome:
    project_id: int
    file_id: int
    project_created: bool
    state: PromotionState = PromotionState.ATTACHED


class PromotionWorkflow:
    """
    스크래치패드 버퍼를 프로젝트 안의 파일로 저장합니다.

    UNATTACHED -> RESOLVING_TARGET -> PERSISTING -> ATTACHED, 실패 시 ABORTED.
    프로젝트 생성과 파일 생성은 하나의 트랜잭션으로 묶이지 않습니다. 프로젝트만 생성되고
    파일 생성이 실패하면 PartialPromotionFailure(project_id)를 던져, 호출자가 같은 프로젝트로
    다시 시도할 수 있게 합니다.
    같은 이름으로 동시에 저장하면 서로 다른 프로젝트 두 개가 만들어지며, 이는 정상 동작입니다.
    """

    def __init__(self, workspace: WorkspaceService):
        self.workspace = workspace

    def _transition(self, user_id: int, state: PromotionState):
        logger.debug("Promotion for user %s -> %s", user_id, state.value)

    def promote(self, user_id: int, buffer: Buffer, target: PromotionTarget) -> PromotionOutcome:
        """
        버퍼를 새 파일로 저장하고 (project_id, file_id)를 반환합니다.
        실패해도 전달받은 버퍼는 변경되지 않습니다.

        Raises:
            ValidationError: 이미 파일에 연결된 버퍼이거나, 파일 이름/저장 위치가 없을 때.
            ResourceNotFoundError: 선택한 프로젝트가 없거나 소유자가 아닐 때.
            PartialPromotionFailure: 새 프로젝트는 생성되었으나 파일 생성에 실패했을 때.
        """
        if buffer.is_attached:
            raise ValidationError("Buffer is already attached to a file; save it in place.")
        if target is None or not isinstance(target.file_name, str) or not target.file_name.strip():
            raise ValidationError("file_name is required")

        has_project = target.project_id not in (None, "")
        # 숫자가 아닌 ID는 입력 오류입니다. 숫자 ID라도 남의 프로젝트면 가드가 NotFound를 냅니다.
        if has_project and coerce_id(target.project_id) is None:
            raise ValidationError("project_id must be a numeric id")
        new_name = (target.new_project_name or "").strip()
        if not has_project and not new_name:
            raise ValidationError("Please select or create a project.")

        self._transition(user_id, PromotionState.RESOLVING_TARGET)
        project_created = False
        try:
            if has_project:
                project = self.workspace.get_project(user_id, target.project_id)
            else:
                project = self.workspace.create_project(user_id, new_name, language=buffer.language)
                project_created = True
        except Exception:
            self._transition(user_id, PromotionState.ABORTED)
            raise

        self._transition(user_id, PromotionState.PERSISTING)
        try:
            file = self.workspace.create_file(
                project.id,
                target.file_name,
                self.workspace.registry.to_store_id(buffer.language),
                buffer.content,
            )
        except Exception as e:
            self._transition(user_id, PromotionState.ABORTED)
            if project_created:
                logger.warning("Project %s created but file creation failed: %s", project.id, e)
                raise PartialPromotionFailure(project.id) from e
            raise

        self._transition(user_id, PromotionState.ATTACHED)
        return PromotionOutcome(project_id=project.id, file_id=file.id, project_created=project_created)
