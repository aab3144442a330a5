import logging
from typing import Optional

from codepad.services.editor_buffer import Buffer
from codepad.services.execution_gateway import ExecutionGateway, ExecutionResult
from codepad.services.promotion_workflow import PromotionWorkflow, PromotionTarget
from codepad.services.workspace_service import WorkspaceService, FilePatch
from codepad.services.exceptions import ValidationError

logger = logging.getLogger(__name__)


class EditorService:
    """에디터 버퍼 단위의 실행(Run)과 저장(Save)을 처리합니다."""

    def __init__(self, workspace: WorkspaceService, gateway: ExecutionGateway, promotion: PromotionWorkflow = None):
        self.workspace = workspace
        self.gateway = gateway
        self.promotion = promotion or PromotionWorkflow(workspace)

    def run(self, buffer: Buffer, stdin: str = "") -> ExecutionResult:
        return self.gateway.run(buffer.language, buffer.content, stdin)

    def open_file(self, user_id: int, file_id) -> Buffer:
        """저장된 파일을 연결된(attached) 버퍼로 엽니다. 알 수 없는 언어 ID는 기본 언어로 엽니다."""
        file = self.workspace.get_file(user_id, file_id)
        return Buffer(
            content=file.content or "",
            language=self.workspace.registry.from_store_id(file.language_id),
            file_id=file.id,
            project_id=file.project_id,
            file_name=file.name,
        )

    def save(self, user_id: int, buffer: Buffer, target: Optional[PromotionTarget] = None) -> Buffer:
        """
        버퍼를 저장하고, 이후 저장에 사용할 버퍼를 반환합니다.

        연결된 버퍼는 파일을 그 자리에서 수정합니다. 스크래치패드 버퍼는 target 위치로
        프로모션한 뒤 새 파일에 연결된 버퍼를 반환하므로, 다음 저장은 수정 경로를 탑니다.

        Raises:
            ValidationError: 스크래치패드 저장에 target이 없을 때.
            ResourceNotFoundError: 파일/프로젝트가 없거나 소유자가 아닐 때.
            PartialPromotionFailure: 프로모션 중 프로젝트만 생성되었을 때.
        """
        if buffer.is_attached:
            # None인 필드는 저장된 값을 그대로 둡니다.
            language_id = None
            if buffer.language is not None:
                language_id = self.workspace.registry.to_store_id(buffer.language)
            patch = FilePatch(content=buffer.content, language_id=language_id)
            file = self.workspace.update_file(user_id, buffer.file_id, patch)
            return buffer.attach(file.project_id, file.id, file.name)

        if target is None:
            raise ValidationError("Choose a project and file name to save this scratchpad.")

        outcome = self.promotion.promote(user_id, buffer, target)
        logger.info("Scratchpad promoted to file %s in project %s.", outcome.file_id, outcome.project_id)
        return buffer.attach(outcome.project_id, outcome.file_id, target.file_name.strip())
