from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from codepad.config import get_settings


def build_engine(database_url: str):
    """
    SQLAlchemy 엔진을 생성합니다.
    SQLite인 경우 스레드 간 연결 공유를 허용하고, 외래 키 제약(ON DELETE CASCADE)을 켭니다.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}
    engine = create_engine(database_url, connect_args=connect_args)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(engine):
    # autocommit=False, autoflush=False: 리포지토리에서 명시적으로 commit 해야 DB에 반영됩니다.
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


# 연결 문자열은 CODEPAD_DATABASE_URL 환경 변수로 지정합니다.
engine = build_engine(get_settings().database_url)

SessionLocal = build_session_factory(engine)

# 모든 모델 클래스가 상속받을 Base 클래스
Base = declarative_base()
