"""주변 장소 조회 API 요청/응답 스키마."""

from pydantic import BaseModel, ConfigDict, Field


class NearbyPlacesQuery(BaseModel):
    """주변 장소 조회 쿼리 파라미터."""

    model_config = ConfigDict(populate_by_name=True)

    latitude: float = Field(..., ge=-90, le=90, description="지도 중심 위도")
    longitude: float = Field(..., ge=-180, le=180, description="지도 중심 경도")
    zoom_level: int = Field(..., alias="zoomLevel", ge=1, le=20, description="지도 줌 레벨 (1-20)")
    radius: float | None = Field(default=None, gt=0, description="검색 반경 (m)")
    category: str | None = Field(default=None, description="카테고리 필터")
    max_places: int | None = Field(default=None, alias="maxPlaces", ge=1, description="최대 반환 개수")
    hide_visited: bool = Field(default=False, alias="hideVisited", description="이미 방문한 장소 숨김 여부")


class PlaceMarker(BaseModel):
    """지도 마커 한 개."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., description="장소 ID")
    latitude: float = Field(..., description="위도")
    longitude: float = Field(..., description="경도")
    point_value: int = Field(..., alias="pointValue", description="요청 사용자 기준 포인트")
    is_verified: bool = Field(..., alias="isVerified", description="검증된 장소 여부")
    distance: float = Field(..., description="중심점까지 거리 (km)")
    post_radius: int = Field(..., alias="postRadius", description="게시 가능 반경 (m)")
    coverage_area: float = Field(..., alias="coverageArea", description="게시 가능 면적 (m²)")
    radius_type: str = Field(..., alias="radiusType", description="반경 분류 키")
    radius_description: str = Field(..., alias="radiusDescription", description="반경 분류 설명")


class NearbyFilters(BaseModel):
    """실제로 적용된 필터 값."""

    model_config = ConfigDict(populate_by_name=True)

    radius: float = Field(..., description="적용된 검색 반경 (km)")
    zoom_level: int = Field(..., alias="zoomLevel", description="요청 줌 레벨")
    hide_visited: bool = Field(..., alias="hideVisited", description="방문 장소 숨김 여부")
    category: str = Field(default="", description="카테고리 필터")


class NearbyPlacesResponse(BaseModel):
    """주변 장소 조회 응답."""

    markers: list[PlaceMarker] = Field(default_factory=list)
    filters: NearbyFilters


class LocationValidationResponse(BaseModel):
    """게시 위치 검증 응답."""

    place_id: int
    place_name: str
    user_latitude: float
    user_longitude: float
    place_latitude: float
    place_longitude: float
    distance_meters: int
    post_radius: int
    coverage_area: float
    radius_type: str
    radius_description: str
    is_within_radius: bool
    can_post: bool
    categories: list[str] = Field(default_factory=list)
    error: str | None = None
    required_distance: int | None = None
    your_distance: int | None = None
    distance_difference: int | None = None
