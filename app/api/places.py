"""장소 조회/게시 위치 검증 API."""

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from app.api.dependencies import get_current_user_id, get_nearby_service
from app.core.logger import get_logger
from app.schemas.nearby import LocationValidationResponse, NearbyPlacesQuery, NearbyPlacesResponse
from app.services.nearby_service import NearbyPlacesService, PlaceNotFoundError

router = APIRouter(prefix="/api/v1/places", tags=["places"])
logger = get_logger(__name__)

PLACES_ERROR_EXAMPLES = {
    401: {
        "missing_token": {
            "summary": "인증 정보 누락",
            "description": "Authorization 헤더가 없는 경우",
            "value": {"detail": "인증 정보가 필요합니다."},
        },
        "invalid_token": {
            "summary": "토큰 검증 실패",
            "description": "서명이 다르거나 만료된 토큰인 경우",
            "value": {"detail": "유효하지 않은 토큰입니다."},
        },
    },
    404: {
        "place_not_found": {
            "summary": "장소 없음",
            "description": "요청한 장소 ID가 존재하지 않는 경우",
            "value": {"detail": "장소를 찾을 수 없습니다."},
        }
    },
}


@router.get(
    "/nearby",
    response_model=NearbyPlacesResponse,
    response_model_by_alias=True,
    responses={
        401: {
            "description": "인증 실패",
            "content": {"application/json": {"examples": PLACES_ERROR_EXAMPLES[401]}},
        },
    },
)
async def get_nearby_places(
    latitude: float = Query(..., ge=-90, le=90, description="지도 중심 위도"),
    longitude: float = Query(..., ge=-180, le=180, description="지도 중심 경도"),
    zoom_level: int = Query(..., alias="zoomLevel", ge=1, le=20, description="지도 줌 레벨 (1-20)"),
    radius: float | None = Query(default=None, gt=0, description="검색 반경 (m)"),
    category: str | None = Query(default=None, description="카테고리 필터"),
    max_places: int | None = Query(default=None, alias="maxPlaces", ge=1, description="최대 반환 개수"),
    hide_visited: bool = Query(default=False, alias="hideVisited", description="이미 게시한 장소 숨김"),
    user_id: str = Depends(get_current_user_id),
    service: NearbyPlacesService = Depends(get_nearby_service),
) -> NearbyPlacesResponse:
    """지도 중심과 줌 레벨로 주변 장소 마커를 조회합니다.

    저장된 장소가 부족하면 외부 제공자에서 수집한 뒤 다시 조회하며,
    수집이 실패해도 저장된 데이터로 응답합니다.
    """
    query = NearbyPlacesQuery(
        latitude=latitude,
        longitude=longitude,
        zoom_level=zoom_level,
        radius=radius,
        category=category,
        max_places=max_places,
        hide_visited=hide_visited,
    )
    logger.info(
        "Nearby places request: lat=%.6f lng=%.6f zoom=%d radius=%s category=%s",
        latitude,
        longitude,
        zoom_level,
        radius,
        category,
    )
    response = await service.find_nearby(query, user_id)
    logger.info("Nearby places response: %d markers within %.2fkm", len(response.markers), response.filters.radius)
    return response


@router.get(
    "/{place_id}/validate-location",
    response_model=LocationValidationResponse,
    responses={
        401: {
            "description": "인증 실패",
            "content": {"application/json": {"examples": PLACES_ERROR_EXAMPLES[401]}},
        },
        404: {
            "description": "장소 없음",
            "content": {"application/json": {"examples": PLACES_ERROR_EXAMPLES[404]}},
        },
    },
    dependencies=[Depends(get_current_user_id)],
)
async def validate_post_location(
    place_id: int = Path(..., ge=1, description="장소 ID"),
    latitude: float = Query(..., ge=-90, le=90, description="사용자 현재 위도"),
    longitude: float = Query(..., ge=-180, le=180, description="사용자 현재 경도"),
    service: NearbyPlacesService = Depends(get_nearby_service),
) -> LocationValidationResponse:
    """사용자 현재 위치가 장소의 게시 가능 반경 안인지 검증합니다."""
    try:
        return await service.validate_post_location(place_id, latitude, longitude)
    except PlaceNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="장소를 찾을 수 없습니다.") from exc
