from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.models import Base


def build_engine(database_url: str) -> Engine:
    """URL에 맞는 `SQLAlchemy` 엔진을 생성한다.

    SQLite는 세션이 `asyncio.to_thread` 워커 스레드에서도 쓰이므로 스레드 검사를 끄고,
    인메모리 DB는 모든 연결이 같은 DB를 보도록 `StaticPool`을 사용한다.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url:
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


@lru_cache
def get_engine() -> Engine:
    """`SQLAlchemy` 엔진을 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다."""
    return build_engine(get_settings().DATABASE_URL)


def get_session_local() -> sessionmaker[Session]:
    """`SessionLocal` 팩토리를 반환한다."""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def init_db(engine: Engine | None = None) -> None:
    """등록된 모델의 테이블을 생성한다. 이미 있는 테이블은 건드리지 않는다."""
    Base.metadata.create_all(bind=engine or get_engine())


def get_db():
    """`FastAPI` 의존성 주입을 위한 데이터베이스 세션 생성기.

    요청마다 새로운 `SQLAlchemy` 세션을 만들고, 처리가 끝나면 `finally` 블록에서 닫습니다.

    Yields:
        `Session`: 생성된 `SQLAlchemy` 데이터베이스 세션 객체.
    """
    session_local = get_session_local()
    db = session_local()
    try:
        yield db
    finally:
        db.close()
