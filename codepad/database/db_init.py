import logging

from .database import engine, SessionLocal, Base
from .models import User, Project, File
from codepad.config import configure_logging
from codepad.utils.languages import get_registry

logger = logging.getLogger(__name__)


def initialize_db(bind=None, session_factory=None):
    """
    테이블을 생성하고, 데모 사용자와 예제 프로젝트를 삽입합니다.
    이미 사용자가 있으면 기본 데이터 삽입은 건너뜁니다.
    """
    bind = bind or engine
    session_factory = session_factory or SessionLocal

    Base.metadata.create_all(bind=bind)
    logger.info("Tables created.")

    db = session_factory()
    try:
        if db.query(User).first():
            logger.info("Seed data already present; skipping.")
            return

        demo_user = User(username="demo", email="demo@example.com")
        db.add(demo_user)
        db.flush()

        registry = get_registry()
        project = Project(user_id=demo_user.id, name="examples", description="Sample snippets", language="python")
        db.add(project)
        db.flush()

        db.add(File(
            project_id=project.id,
            name="hello.py",
            language_id=registry.to_store_id("python"),
            content="print('hello, world')\n",
        ))
        db.commit()
        logger.info("Seed data inserted (user id=%s).", demo_user.id)

    except Exception:
        logger.exception("Database initialization failed; rolling back.")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == '__main__':
    configure_logging()
    initialize_db()
