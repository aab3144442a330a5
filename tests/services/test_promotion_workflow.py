# tests/services/test_promotion_workflow.py
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from unittest.mock import MagicMock

from codepad.database import models
from codepad.repositories.sqlalchemy.sqlalchemy_project_repository import SqlalchemyProjectRepository
from codepad.repositories.sqlalchemy.sqlalchemy_file_repository import SqlalchemyFileRepository
from codepad.services.editor_buffer import Buffer
from codepad.services.promotion_workflow import (
    PromotionWorkflow, PromotionTarget, PromotionState
)
from codepad.services.workspace_service import WorkspaceService
from codepad.services.exceptions import (
    ValidationError, ResourceNotFoundError, PartialPromotionFailure, StorageError
)
from codepad.utils.languages import LanguageRegistry

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def mock_workspace() -> MagicMock:
    """WorkspaceService 모의 객체. registry는 실제 레지스트리를 사용합니다."""
    workspace = MagicMock(spec=WorkspaceService)
    workspace.registry = LanguageRegistry()
    return workspace

@pytest.fixture
def workflow(mock_workspace: MagicMock) -> PromotionWorkflow:
    return PromotionWorkflow(mock_workspace)

SCRATCH = Buffer(content="print(1)", language="python")

# ===================================================================
#  입력 검증 (쓰기 전에 실패)
# ===================================================================
class TestValidation:
    def test_requires_project_or_new_name(self, workflow, mock_workspace):
        with pytest.raises(ValidationError):
            workflow.promote(1, SCRATCH, PromotionTarget(file_name="a.py"))
        mock_workspace.create_project.assert_not_called()
        mock_workspace.create_file.assert_not_called()

    @pytest.mark.parametrize("file_name", ["", "  ", None])
    def test_requires_file_name(self, workflow, mock_workspace, file_name):
        with pytest.raises(ValidationError):
            workflow.promote(1, SCRATCH, PromotionTarget(file_name=file_name, new_project_name="demo"))
        mock_workspace.create_project.assert_not_called()

    @pytest.mark.parametrize("project_id", ["abc", "1.5", True, 3.0])
    def test_non_numeric_project_id_is_rejected(self, workflow, mock_workspace, project_id):
        """숫자가 아닌 project_id는 NotFound가 아니라 입력 오류입니다."""
        with pytest.raises(ValidationError):
            workflow.promote(1, SCRATCH, PromotionTarget(file_name="a.py", project_id=project_id))
        mock_workspace.get_project.assert_not_called()
        mock_workspace.create_project.assert_not_called()

    def test_zero_project_id_goes_through_ownership_check(self, workflow, mock_workspace):
        mock_workspace.get_project.side_effect = ResourceNotFoundError("Project not found.")
        with pytest.raises(ResourceNotFoundError):
            workflow.promote(1, SCRATCH, PromotionTarget(file_name="a.py", project_id=0))
        mock_workspace.get_project.assert_called_once_with(1, 0)

    def test_attached_buffer_never_reenters_promotion(self, workflow, mock_workspace):
        attached = SCRATCH.attach(project_id=1, file_id=2)
        with pytest.raises(ValidationError):
            workflow.promote(1, attached, PromotionTarget(file_name="a.py", new_project_name="demo"))
        mock_workspace.create_project.assert_not_called()

# ===================================================================
#  상태 전이 (모의 객체)
# ===================================================================
class TestTransitions:
    def test_new_project_then_file(self, workflow, mock_workspace):
        """새 프로젝트 이름이 주어지면 프로젝트를 만든 뒤 그 아래에 파일을 만듭니다."""
        # === Arrange ===
        mock_workspace.create_project.return_value = models.Project(id=5, user_id=1, name="demo")
        mock_workspace.create_file.return_value = models.File(id=9, project_id=5, name="a.py")

        # === Act ===
        outcome = workflow.promote(1, SCRATCH, PromotionTarget(file_name="a.py", new_project_name=" demo "))

        # === Assert ===
        assert (outcome.project_id, outcome.file_id) == (5, 9)
        assert outcome.project_created is True
        assert outcome.state is PromotionState.ATTACHED
        mock_workspace.create_project.assert_called_once_with(1, "demo", language="python")
        mock_workspace.create_file.assert_called_once_with(5, "a.py", 2, "print(1)")

    def test_existing_project_is_authorized_not_created(self, workflow, mock_workspace):
        mock_workspace.get_project.return_value = models.Project(id=3, user_id=1, name="old")
        mock_workspace.create_file.return_value = models.File(id=4, project_id=3, name="a.py")

        outcome = workflow.promote(1, SCRATCH, PromotionTarget(file_name="a.py", project_id=3, new_project_name="ignored"))

        assert outcome.project_created is False
        mock_workspace.get_project.assert_called_once_with(1, 3)
        mock_workspace.create_project.assert_not_called()

    def test_foreign_project_aborts_with_not_found(self, workflow, mock_workspace):
        mock_workspace.get_project.side_effect = ResourceNotFoundError("Project not found.")
        with pytest.raises(ResourceNotFoundError):
            workflow.promote(2, SCRATCH, PromotionTarget(file_name="a.py", project_id=3))
        mock_workspace.create_file.assert_not_called()

    def test_file_failure_after_project_creation_is_partial(self, workflow, mock_workspace):
        """프로젝트만 생성된 경우 PartialPromotionFailure에 생성된 project_id가 담깁니다."""
        # === Arrange ===
        mock_workspace.create_project.return_value = models.Project(id=5, user_id=1, name="demo")
        mock_workspace.create_file.side_effect = StorageError("disk full")

        # === Act ===
        with pytest.raises(PartialPromotionFailure) as exc_info:
            workflow.promote(1, SCRATCH, PromotionTarget(file_name="a.py", new_project_name="demo"))

        # === Assert ===
        assert exc_info.value.project_id == 5
        assert isinstance(exc_info.value.__cause__, StorageError)

    def test_file_failure_in_existing_project_propagates_original_error(self, workflow, mock_workspace):
        mock_workspace.get_project.return_value = models.Project(id=3, user_id=1, name="old")
        mock_workspace.create_file.side_effect = StorageError("disk full")
        with pytest.raises(StorageError):
            workflow.promote(1, SCRATCH, PromotionTarget(file_name="a.py", project_id=3))

    def test_retry_against_partially_created_project_does_not_duplicate(self, workflow, mock_workspace):
        """PartialPromotionFailure 이후 project_id로 재시도하면 프로젝트를 다시 만들지 않습니다."""
        project = models.Project(id=5, user_id=1, name="demo")
        mock_workspace.create_project.return_value = project
        mock_workspace.create_file.side_effect = [StorageError("flaky"), models.File(id=9, project_id=5, name="a.py")]
        mock_workspace.get_project.return_value = project

        with pytest.raises(PartialPromotionFailure) as exc_info:
            workflow.promote(1, SCRATCH, PromotionTarget(file_name="a.py", new_project_name="demo"))
        outcome = workflow.promote(1, SCRATCH, PromotionTarget(file_name="a.py", project_id=exc_info.value.project_id))

        assert outcome.file_id == 9
        assert mock_workspace.create_project.call_count == 1

# ===================================================================
#  동시 저장 (실제 DB)
# ===================================================================
def test_concurrent_promotions_with_same_name_create_distinct_projects(session_factory, users):
    """
    같은 사용자가 같은 새 프로젝트 이름으로 동시에 두 번 저장하면,
    오류 없이 서로 다른 프로젝트 두 개가 만들어지고 각각 파일이 하나씩 생깁니다.
    """
    # === Arrange ===
    alice, _ = users
    barrier = threading.Barrier(2)

    def save_once():
        session = session_factory()
        try:
            project_repo = SqlalchemyProjectRepository(session)
            workflow = PromotionWorkflow(WorkspaceService(project_repo, SqlalchemyFileRepository(session)))
            barrier.wait(timeout=10)
            return workflow.promote(alice.id, SCRATCH, PromotionTarget(file_name="a.py", new_project_name="demo"))
        finally:
            session.close()

    # === Act ===
    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = [f.result(timeout=60) for f in [pool.submit(save_once), pool.submit(save_once)]]

    # === Assert ===
    assert outcomes[0].project_id != outcomes[1].project_id
    assert outcomes[0].file_id != outcomes[1].file_id

    check = session_factory()
    try:
        projects = check.query(models.Project).filter(models.Project.user_id == alice.id).all()
        assert sorted(p.name for p in projects) == ["demo", "demo"]
        for project in projects:
            files = check.query(models.File).filter(models.File.project_id == project.id).all()
            assert [f.name for f in files] == ["a.py"]
            assert files[0].content == "print(1)"
    finally:
        check.close()
