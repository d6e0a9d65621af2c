"""장소 저장소 인터페이스와 SQLAlchemy 구현."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.geo import GeoRectangle, haversine_km
from app.core.logger import get_logger
from app.models.place import Place
from app.models.post import Post
from app.schemas.place import PlaceUpsert

logger = get_logger(__name__)

# 충돌 시 갱신하는 컬럼. base_points는 최초 수집 시점 값을 유지한다.
UPSERT_UPDATE_COLUMNS = (
    "name",
    "latitude",
    "longitude",
    "address",
    "categories",
    "rating",
    "user_ratings_total",
    "business_status",
    "icon",
    "photo_references",
    "plus_code",
)


@dataclass(frozen=True, slots=True)
class PlaceWithDistance:
    """반경 조회 결과 한 건."""

    place: Place
    distance_km: float


@dataclass(frozen=True, slots=True)
class PostActivity:
    """장소별 게시 현황."""

    total_posts: int
    user_has_posted: bool


class PlaceStore(ABC):
    """장소 저장소가 제공해야 하는 연산을 정의합니다."""

    @abstractmethod
    def find_within_radius(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        category: str | None = None,
        limit: int | None = None,
    ) -> list[PlaceWithDistance]:
        """중심점에서 반경 안의 장소를 가까운 순으로 반환합니다.

        Args:
            latitude: 중심 위도
            longitude: 중심 경도
            radius_km: 검색 반경 (km, 경계 포함)
            category: 지정하면 해당 카테고리를 가진 장소만 반환
            limit: 최대 반환 개수

        Returns:
            거리 오름차순으로 정렬된 장소 목록
        """
        raise NotImplementedError

    @abstractmethod
    def upsert_by_external_id(self, record: PlaceUpsert) -> Place:
        """외부 ID 기준으로 장소를 추가하거나 갱신합니다."""
        raise NotImplementedError

    @abstractmethod
    def get_place(self, place_id: int) -> Place | None:
        """ID로 장소를 조회합니다."""
        raise NotImplementedError

    @abstractmethod
    def count_posts_at(self, place_id: int) -> int:
        """장소의 전체 게시 수를 반환합니다."""
        raise NotImplementedError

    @abstractmethod
    def has_user_posted_at(self, place_id: int, user_id: str) -> bool:
        """사용자가 장소에 게시한 적이 있는지 반환합니다."""
        raise NotImplementedError

    def get_post_activity(self, place_ids: list[int], user_id: str) -> dict[int, PostActivity]:
        """여러 장소의 게시 현황을 한 번에 조회합니다."""
        return {
            place_id: PostActivity(
                total_posts=self.count_posts_at(place_id),
                user_has_posted=self.has_user_posted_at(place_id, user_id),
            )
            for place_id in place_ids
        }


class SqlAlchemyPlaceStore(PlaceStore):
    """`SQLAlchemy` 세션 기반 장소 저장소.

    반경 조회는 위경도 사각형으로 DB에서 1차로 거른 뒤 Haversine 거리로 정확히
    판정하고 정렬합니다. upsert는 방언별 ``INSERT ... ON CONFLICT`` 구문으로
    한 행 단위 원자성을 보장합니다.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_within_radius(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        category: str | None = None,
        limit: int | None = None,
    ) -> list[PlaceWithDistance]:
        bounds = GeoRectangle.around(latitude, longitude, radius_km)
        stmt = select(Place).where(
            Place.latitude.between(bounds.min_lat, bounds.max_lat),
            Place.longitude.between(bounds.min_lng, bounds.max_lng),
        )
        try:
            places = self._db.scalars(stmt).all()
        except SQLAlchemyError:
            self._db.rollback()
            raise

        category_key = category.strip().lower() if category and category.strip() else None
        results: list[PlaceWithDistance] = []
        for place in places:
            if category_key and category_key not in {c.lower() for c in place.categories or []}:
                continue
            distance = haversine_km(latitude, longitude, place.latitude, place.longitude)
            if distance <= radius_km:
                results.append(PlaceWithDistance(place=place, distance_km=distance))

        results.sort(key=lambda item: (item.distance_km, item.place.id))
        if limit is not None:
            results = results[: max(0, limit)]
        return results

    def upsert_by_external_id(self, record: PlaceUpsert) -> Place:
        values = record.model_dump()
        try:
            self._db.execute(self._build_upsert(values))
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise

        return self._db.scalars(select(Place).where(Place.google_place_id == record.google_place_id)).one()

    def _build_upsert(self, values: dict):
        dialect = self._db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(Place).values(**values)
            updates = {column: stmt.excluded[column] for column in UPSERT_UPDATE_COLUMNS}
            updates["updated_at"] = func.now()
            return stmt.on_conflict_do_update(index_elements=[Place.google_place_id], set_=updates)
        if dialect == "sqlite":
            stmt = sqlite.insert(Place).values(**values)
            updates = {column: stmt.excluded[column] for column in UPSERT_UPDATE_COLUMNS}
            updates["updated_at"] = func.now()
            return stmt.on_conflict_do_update(index_elements=[Place.google_place_id], set_=updates)
        if dialect in {"mysql", "mariadb"}:
            stmt = mysql.insert(Place).values(**values)
            updates = {column: stmt.inserted[column] for column in UPSERT_UPDATE_COLUMNS}
            updates["updated_at"] = func.now()
            return stmt.on_duplicate_key_update(**updates)
        raise NotImplementedError(f"Upsert is not supported for dialect: {dialect}")

    def get_place(self, place_id: int) -> Place | None:
        return self._db.get(Place, place_id)

    def count_posts_at(self, place_id: int) -> int:
        stmt = select(func.count(Post.id)).where(Post.place_id == place_id)
        return int(self._db.scalar(stmt) or 0)

    def has_user_posted_at(self, place_id: int, user_id: str) -> bool:
        stmt = select(Post.id).where(Post.place_id == place_id, Post.user_id == user_id).limit(1)
        return self._db.scalar(stmt) is not None

    def get_post_activity(self, place_ids: list[int], user_id: str) -> dict[int, PostActivity]:
        if not place_ids:
            return {}

        totals = dict(
            self._db.execute(
                select(Post.place_id, func.count(Post.id)).where(Post.place_id.in_(place_ids)).group_by(Post.place_id)
            ).all()
        )
        visited = set(
            self._db.scalars(
                select(Post.place_id).where(Post.place_id.in_(place_ids), Post.user_id == user_id).distinct()
            ).all()
        )
        return {
            place_id: PostActivity(
                total_posts=int(totals.get(place_id, 0)),
                user_has_posted=place_id in visited,
            )
            for place_id in place_ids
        }
