# app/models/place.py
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


# Place 테이블 정의
class Place(Base):
    __tablename__ = "places"

    # 기본키 (ID)
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # 장소 기본 정보
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    address: Mapped[str] = mapped_column(String(512), default="", nullable=False)
    # 예: ["museum", "tourist_attraction", "point_of_interest"]
    categories: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # 좌표 (반경 조회 1차 필터용 인덱스)
    latitude: Mapped[float] = mapped_column(Float, index=True, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, index=True, nullable=False)

    # 점수 관련 값
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    user_ratings_total: Mapped[int | None] = mapped_column(Integer, nullable=True)
    base_points: Mapped[int] = mapped_column(Integer, default=15, nullable=False)

    # "google_place"(수집) 또는 "user"(직접 등록)
    place_type: Mapped[str] = mapped_column(String(32), default="user", nullable=False)
    place_image: Mapped[str] = mapped_column(String(1024), default="", nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # 외부 제공자 메타데이터. google_place_id는 upsert 기준 키
    google_place_id: Mapped[str | None] = mapped_column(String(255), unique=True, index=True, nullable=True)
    business_status: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    icon: Mapped[str] = mapped_column(String(1024), default="", nullable=False)
    photo_references: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    plus_code: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    opening_hours: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # 관리용 타임스탬프
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), server_default=func.now()
    )

    def __repr__(self):
        return f"<Place(id={self.id}, name={self.name}, google_place_id={self.google_place_id})>"
