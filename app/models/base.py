# app/models/base.py
from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# 방언과 무관하게 같은 제약조건 이름을 쓰도록 고정한다.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """장소/게시물 모델이 공유하는 선언적 기본 클래스.

    `places`, `posts` 테이블이 같은 메타데이터에 등록되어
    `init_db()`의 `create_all` 한 번으로 생성됩니다.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
