"""Google Places Nearby Search 응답을 표준화한 수집 후보 모델."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError


class PlaceCandidate(BaseModel):
    """저장 전 단계의 장소 후보. 하나의 수집 호출 안에서만 사용됩니다."""

    place_id: str = Field(..., description="Google Places 고유 ID")
    name: str = Field(..., description="장소 이름")
    latitude: float = Field(..., description="위도")
    longitude: float = Field(..., description="경도")
    types: list[str] = Field(default_factory=list, description="장소 유형 목록 (제공 순서 유지)")
    rating: float | None = Field(default=None, description="평균 평점 (0-5)")
    user_ratings_total: int | None = Field(default=None, description="리뷰 수")
    vicinity: str | None = Field(default=None, description="약식 주소")
    business_status: str | None = Field(default=None, description="영업 상태")
    icon: str | None = Field(default=None, description="아이콘 URL")
    photo_references: list[str] = Field(default_factory=list, description="사진 참조 키 목록")
    plus_code: str | None = Field(default=None, description="Plus Code (global)")
    has_opening_hours: bool = Field(default=False, description="영업시간 정보 제공 여부")

    @classmethod
    def from_nearby_result(cls, raw: dict[str, Any]) -> PlaceCandidate | None:
        """Nearby Search `results[]` 항목을 후보로 변환합니다.

        필수값이 없거나 필드 타입이 맞지 않으면 None을 반환해 해당 항목만 버립니다.
        """
        if not isinstance(raw, dict):
            return None
        geometry = raw.get("geometry") if isinstance(raw.get("geometry"), dict) else {}
        location = geometry.get("location") if isinstance(geometry.get("location"), dict) else {}
        latitude = location.get("lat")
        longitude = location.get("lng")
        place_id = raw.get("place_id")
        name = raw.get("name")

        if not (place_id and name and latitude is not None and longitude is not None):
            return None

        photos = raw.get("photos") if isinstance(raw.get("photos"), list) else []
        plus_code = raw.get("plus_code") if isinstance(raw.get("plus_code"), dict) else {}
        try:
            return cls(
                place_id=place_id,
                name=name,
                latitude=latitude,
                longitude=longitude,
                types=[str(item) for item in raw.get("types") or []] if isinstance(raw.get("types"), list) else [],
                rating=raw.get("rating"),
                user_ratings_total=raw.get("user_ratings_total"),
                vicinity=raw.get("vicinity"),
                business_status=raw.get("business_status"),
                icon=raw.get("icon"),
                photo_references=[
                    p["photo_reference"] for p in photos if isinstance(p, dict) and p.get("photo_reference")
                ],
                plus_code=plus_code.get("global_code"),
                has_opening_hours=raw.get("opening_hours") is not None,
            )
        except ValidationError:
            return None


class NearbySearchPage(BaseModel):
    """Nearby Search 한 페이지 결과."""

    candidates: list[PlaceCandidate] = Field(default_factory=list)
    total_results: int = Field(default=0, description="파싱 전 원본 결과 수")
    next_page_token: str | None = Field(default=None, description="다음 페이지 토큰")


class PlaceUpsert(BaseModel):
    """외부 ID 기준 upsert에 사용하는 저장 레코드."""

    google_place_id: str
    name: str
    latitude: float
    longitude: float
    address: str = ""
    categories: list[str] = Field(default_factory=list)
    base_points: int
    rating: float | None = None
    user_ratings_total: int | None = None
    business_status: str = ""
    icon: str = ""
    photo_references: list[str] = Field(default_factory=list)
    plus_code: str = ""
    opening_hours: dict[str, list] | None = None
    place_type: str = "google_place"

    @classmethod
    def from_candidate(cls, candidate: PlaceCandidate, base_points: int) -> PlaceUpsert:
        """후보와 계산된 기본 포인트로 저장 레코드를 만듭니다."""
        return cls(
            google_place_id=candidate.place_id,
            name=candidate.name,
            latitude=candidate.latitude,
            longitude=candidate.longitude,
            address=candidate.vicinity or "",
            categories=list(candidate.types),
            base_points=base_points,
            rating=candidate.rating,
            user_ratings_total=candidate.user_ratings_total,
            business_status=candidate.business_status or "",
            icon=candidate.icon or "",
            photo_references=list(candidate.photo_references),
            plus_code=candidate.plus_code or "",
            # Nearby Search는 open_now만 제공하므로 상세 스케줄 자리만 만들어 둔다.
            opening_hours={"periods": [], "weekday_text": []} if candidate.has_opening_hours else None,
        )
