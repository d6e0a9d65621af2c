"""줌 레벨 기반 주변 장소 조회와 게시 위치 검증 서비스."""

from __future__ import annotations

import asyncio

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import Settings, get_settings
from app.core.geofence import check_post_location, resolve_post_radius
from app.core.logger import get_logger
from app.core.place_rules import PlaceRules, build_default_place_rules
from app.core.points import calculate_dynamic_point_value
from app.core.timeout_policy import get_timeout_policy
from app.schemas.nearby import (
    LocationValidationResponse,
    NearbyFilters,
    NearbyPlacesQuery,
    NearbyPlacesResponse,
    PlaceMarker,
)
from app.services.google_places_service import GooglePlacesError
from app.services.ingestion_service import PlaceIngestionService
from app.services.place_store import PlaceStore, PlaceWithDistance

logger = get_logger(__name__)

MIN_SEARCH_RADIUS_KM = 0.1
MAX_SEARCH_RADIUS_KM = 50.0
MAX_ZOOM_LEVEL = 20
TOO_FAR_MESSAGE = "장소에서 너무 멀리 떨어져 있어 게시할 수 없습니다."


class PlaceNotFoundError(LookupError):
    """요청한 장소가 존재하지 않을 때 발생하는 예외."""

    def __init__(self, place_id: int) -> None:
        super().__init__(f"place not found: {place_id}")
        self.place_id = place_id


def resolve_search_radius_km(
    zoom_level: int,
    radius_meters: float | None = None,
    default_radius_km: float = 20.0,
) -> float:
    """줌 레벨에 맞춰 검색 반경(km)을 계산합니다.

    최대 줌(20)에서는 반경을 그대로 쓰고, 줌이 낮을수록 최대 약 2배까지 넓힌 뒤
    [0.1, 50] km 범위로 자릅니다.
    """
    base_km = radius_meters / 1000 if radius_meters and radius_meters > 0 else default_radius_km
    zoom_factor = min(zoom_level / MAX_ZOOM_LEVEL, 1.0)
    radius_km = base_km * (2 - zoom_factor)
    return min(MAX_SEARCH_RADIUS_KM, max(MIN_SEARCH_RADIUS_KM, radius_km))


def resolve_result_limit(max_places: int | None, default_limit: int = 50) -> int:
    """최대 반환 개수를 결정합니다. 기본값보다 작은 양수만 기본값을 대체합니다."""
    if max_places is not None and 0 < max_places < default_limit:
        return max_places
    return default_limit


class NearbyPlacesService:
    """지도 화면용 주변 장소 마커를 만들고, 데이터가 부족하면 수집을 시도합니다."""

    def __init__(
        self,
        store: PlaceStore,
        ingestion: PlaceIngestionService | None = None,
        rules: PlaceRules | None = None,
        *,
        default_radius_km: float = 20.0,
        default_max_places: int = 50,
        freshness_threshold: int = 20,
        ingestion_deadline_seconds: float | None = None,
    ) -> None:
        self._store = store
        self._ingestion = ingestion
        self._rules = rules or build_default_place_rules()
        self._default_radius_km = default_radius_km
        self._default_max_places = default_max_places
        self._freshness_threshold = freshness_threshold
        self._ingestion_deadline_seconds = ingestion_deadline_seconds

    @classmethod
    def from_settings(
        cls,
        store: PlaceStore,
        ingestion: PlaceIngestionService | None,
        settings: Settings | None = None,
    ) -> NearbyPlacesService:
        """애플리케이션 설정으로 서비스를 구성합니다."""
        settings = settings or get_settings()
        rules = build_default_place_rules(
            user_visited_points=settings.USER_VISITED_POINTS,
            no_posts_bonus_points=settings.NO_POSTS_BONUS_POINTS,
        )
        return cls(
            store,
            ingestion if settings.NEARBY_INGESTION_ENABLED else None,
            rules,
            default_radius_km=settings.NEARBY_DEFAULT_RADIUS_KM,
            default_max_places=settings.NEARBY_DEFAULT_MAX_PLACES,
            freshness_threshold=settings.NEARBY_FRESHNESS_THRESHOLD,
            ingestion_deadline_seconds=float(get_timeout_policy(settings).ingestion_timeout_seconds),
        )

    async def find_nearby(self, query: NearbyPlacesQuery, user_id: str) -> NearbyPlacesResponse:
        """주변 장소 마커 목록과 적용된 필터를 반환합니다.

        Args:
            query: 지도 중심, 줌 레벨과 선택 필터
            user_id: 요청 사용자 식별자 (동적 포인트와 방문 숨김에 사용)

        Returns:
            거리순 마커 목록과 적용된 필터
        """
        radius_km = resolve_search_radius_km(query.zoom_level, query.radius, self._default_radius_km)
        limit = resolve_result_limit(query.max_places, self._default_max_places)
        category = (query.category or "").strip()

        results = await self._query(query, radius_km, category, limit)
        if len(results) < self._freshness_threshold:
            logger.info(
                "Only %d places near (%.6f, %.6f) within %.2fkm; trying ingestion",
                len(results),
                query.latitude,
                query.longitude,
                radius_km,
            )
            if await self._try_ingest(query.latitude, query.longitude, radius_km):
                results = await self._query(query, radius_km, category, limit)

        place_ids = [item.place.id for item in results]
        activity = await asyncio.to_thread(self._store.get_post_activity, place_ids, user_id)

        markers: list[PlaceMarker] = []
        for item in results:
            place_activity = activity.get(item.place.id)
            user_has_posted = bool(place_activity and place_activity.user_has_posted)
            if query.hide_visited and user_has_posted:
                continue
            markers.append(
                self._to_marker(
                    item,
                    user_has_posted=user_has_posted,
                    total_posts=place_activity.total_posts if place_activity else 0,
                )
            )
            if len(markers) >= limit:
                break

        return NearbyPlacesResponse(
            markers=markers,
            filters=NearbyFilters(
                radius=radius_km,
                zoom_level=query.zoom_level,
                hide_visited=query.hide_visited,
                category=category,
            ),
        )

    async def validate_post_location(
        self,
        place_id: int,
        latitude: float,
        longitude: float,
    ) -> LocationValidationResponse:
        """사용자 좌표에서 장소에 게시할 수 있는지 검증합니다.

        Raises:
            PlaceNotFoundError: 장소가 없는 경우
        """
        place = await asyncio.to_thread(self._store.get_place, place_id)
        if place is None:
            raise PlaceNotFoundError(place_id)

        categories = list(place.categories or [])
        check = check_post_location(
            place.latitude,
            place.longitude,
            categories,
            latitude,
            longitude,
            self._rules.radius,
        )
        logger.info(
            "Post location check: place=%s distance=%.2fm required=%dm within=%s",
            place.name,
            check.distance_m,
            check.post_radius.radius_m,
            check.is_within_radius,
        )

        response = LocationValidationResponse(
            place_id=place.id,
            place_name=place.name,
            user_latitude=latitude,
            user_longitude=longitude,
            place_latitude=place.latitude,
            place_longitude=place.longitude,
            distance_meters=int(check.distance_m),
            post_radius=check.post_radius.radius_m,
            coverage_area=check.post_radius.coverage_area,
            radius_type=check.post_radius.radius_type,
            radius_description=check.post_radius.description,
            is_within_radius=check.is_within_radius,
            can_post=check.is_within_radius,
            categories=categories,
        )
        if not check.is_within_radius:
            response.error = TOO_FAR_MESSAGE
            response.required_distance = check.post_radius.radius_m
            response.your_distance = int(check.distance_m)
            response.distance_difference = check.shortfall_m
        return response

    async def _query(
        self,
        query: NearbyPlacesQuery,
        radius_km: float,
        category: str,
        limit: int,
    ) -> list[PlaceWithDistance]:
        # 방문 장소를 숨기면 걸러낸 뒤 개수를 맞춰야 하므로 전체를 가져온다.
        return await asyncio.to_thread(
            self._store.find_within_radius,
            query.latitude,
            query.longitude,
            radius_km,
            category or None,
            None if query.hide_visited else limit,
        )

    async def _try_ingest(self, latitude: float, longitude: float, radius_km: float) -> bool:
        """수집을 시도합니다. 수집을 실행했으면 실패했더라도 True를 반환합니다."""
        if self._ingestion is None:
            logger.warning("Place ingestion is unavailable; serving stored places only")
            return False

        # 수집 서비스가 데드라인을 스스로 지키며, 여기서는 제공자 호출이 멈춘 경우의 상한만 건다.
        try:
            if self._ingestion_deadline_seconds is None:
                await self._ingestion.ingest(latitude, longitude, radius_km)
            else:
                await asyncio.wait_for(
                    self._ingestion.ingest(latitude, longitude, radius_km),
                    timeout=self._ingestion_deadline_seconds,
                )
        except GooglePlacesError as exc:
            logger.warning("Place ingestion failed (%s): %s", exc.kind, exc)
        except SQLAlchemyError as exc:
            logger.warning("Place ingestion aborted by a storage error: %s", exc)
        except TimeoutError:
            logger.warning("Place ingestion timed out after %.1fs", self._ingestion_deadline_seconds)
        # 실패 전에 저장된 장소도 응답에 반영되도록 다시 조회한다.
        return True

    def _to_marker(self, item: PlaceWithDistance, *, user_has_posted: bool, total_posts: int) -> PlaceMarker:
        place = item.place
        post_radius = resolve_post_radius(place.categories or [], self._rules.radius)
        return PlaceMarker(
            id=place.id,
            latitude=place.latitude,
            longitude=place.longitude,
            point_value=calculate_dynamic_point_value(
                place.base_points,
                user_has_posted=user_has_posted,
                total_posts=total_posts,
                rules=self._rules.dynamic_points,
            ),
            is_verified=place.is_verified,
            distance=item.distance_km,
            post_radius=post_radius.radius_m,
            coverage_area=post_radius.coverage_area,
            radius_type=post_radius.radius_type,
            radius_description=post_radius.description,
        )
