# tests/conftest.py
import pytest

from codepad.database.database import Base, build_engine, build_session_factory
from codepad.database import models
from codepad.repositories.sqlalchemy.sqlalchemy_project_repository import SqlalchemyProjectRepository
from codepad.repositories.sqlalchemy.sqlalchemy_file_repository import SqlalchemyFileRepository
from codepad.services.ownership_guard import OwnershipGuard
from codepad.services.workspace_service import WorkspaceService

# ===================================================================
#  임시 SQLite DB Fixture (테스트마다 새 파일)
# ===================================================================

@pytest.fixture
def engine(tmp_path):
    """테스트 전용 SQLite 파일 DB 엔진을 만들고 테이블을 생성합니다."""
    engine = build_engine(f"sqlite:///{tmp_path / 'codepad-test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)

@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def users(db_session):
    """소유권 테스트용 사용자 두 명 (alice, bob)을 생성합니다."""
    alice = models.User(username="alice", email="alice@example.com")
    bob = models.User(username="bob", email="bob@example.com")
    db_session.add_all([alice, bob])
    db_session.commit()
    return alice, bob

@pytest.fixture
def workspace(db_session) -> WorkspaceService:
    """실제 SQLAlchemy 리포지토리를 사용하는 WorkspaceService."""
    project_repo = SqlalchemyProjectRepository(db_session)
    file_repo = SqlalchemyFileRepository(db_session)
    return WorkspaceService(project_repo, file_repo, OwnershipGuard(project_repo, file_repo))
