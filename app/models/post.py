from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class Post(Base):
    """장소에 남긴 체크인 게시물.

    게시물의 생성/수정은 게시물 서비스가 담당하며, 이 엔진은 장소별 게시 수와
    사용자 게시 여부를 조회하는 데에만 사용합니다.

    Attributes:
        id (int): 고유 식별자 (Auto Increment).
        place_id (int): 게시한 장소 ID.
        user_id (str): 작성자 식별자 (토큰의 userId).
        earned_points (int): 게시 시점에 획득한 포인트.
    """

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    place_id: Mapped[int] = mapped_column(ForeignKey("places.id"), index=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    earned_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
