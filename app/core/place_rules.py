"""장소 점수/반경/필터링 규칙 테이블.

모든 테이블은 불변 구조(`MappingProxyType`, `frozenset`, tuple)로 만들어
각 컴포넌트에 인자로 전달합니다. 기본값은 `get_default_place_rules()`로 공유합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping


def _freeze(table: dict) -> Mapping:
    return MappingProxyType(dict(table))


@dataclass(frozen=True, slots=True)
class Band:
    """하한값 이상일 때 적용되는 점수 구간."""

    minimum: float
    value: int


@dataclass(frozen=True, slots=True)
class ComboBonus:
    """카테고리 조합이 모두 존재할 때 더해지는 보너스."""

    categories: frozenset[str]
    bonus: int


@dataclass(frozen=True, slots=True)
class QualityThreshold:
    """카테고리별 최소 품질 기준."""

    min_rating: float = 0.0
    min_user_ratings_total: int = 0
    required_keywords: tuple[str, ...] = ()
    excluded_keywords: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RadiusClass:
    """반경 구간 분류."""

    minimum: int
    radius_type: str
    description: str


@dataclass(frozen=True, slots=True)
class PointsRules:
    """기본 포인트 계산 규칙."""

    category_points: Mapping[str, int]
    default_category_points: int
    rating_bands: tuple[Band, ...]
    rating_floor_bonus: int
    popularity_bands: tuple[Band, ...]
    popularity_floor_bonus: int
    combo_bonuses: tuple[ComboBonus, ...]
    min_points: int = 10
    max_points: int = 60
    step: int = 5


@dataclass(frozen=True, slots=True)
class RadiusRules:
    """게시 가능 반경(geofence) 규칙."""

    category_radius: Mapping[str, int]
    default_radius: int
    classes: tuple[RadiusClass, ...]
    fallback_class: RadiusClass


@dataclass(frozen=True, slots=True)
class FilterRules:
    """수집 후보 제외 규칙."""

    excluded_categories: frozenset[str]
    suspicious_name_keywords: tuple[str, ...]
    quality_thresholds: Mapping[str, QualityThreshold]


@dataclass(frozen=True, slots=True)
class ImportanceRules:
    """수집 후보 정렬용 중요도 규칙."""

    rating_pivot: float
    rating_weight: float
    review_bands: tuple[Band, ...]
    review_floor_score: int
    category_groups: tuple[tuple[frozenset[str], int], ...]
    default_category_score: int


@dataclass(frozen=True, slots=True)
class SelectionRules:
    """공간 분산 선택 규칙."""

    high_importance_threshold: float = 80.0
    grid_size_deg: float = 0.01
    min_spacing_km: float = 0.2


@dataclass(frozen=True, slots=True)
class DynamicPointsRules:
    """사용자별 동적 포인트 규칙."""

    user_visited_points: int = 1
    no_posts_bonus_points: int = 3


@dataclass(frozen=True, slots=True)
class PlaceRules:
    """엔진 전체 규칙 묶음."""

    points: PointsRules
    radius: RadiusRules
    filtering: FilterRules
    importance: ImportanceRules
    selection: SelectionRules = field(default_factory=SelectionRules)
    dynamic_points: DynamicPointsRules = field(default_factory=DynamicPointsRules)


_CATEGORY_POINTS = {
    # 매우 희귀한 장소
    "castle": 60,
    "palace": 60,
    "historical_site": 60,
    "museum": 55,
    "ruins": 55,
    "art_gallery": 50,
    "monument": 50,
    "archaeological_site": 50,
    "tourist_attraction": 45,
    "natural_feature": 45,
    "waterfall": 45,
    "island": 45,
    "church": 40,
    "mosque": 40,
    "synagogue": 40,
    "place_of_worship": 40,
    "national_park": 40,
    "mountain": 40,
    "cave": 40,
    "theater": 35,
    "beach": 35,
    "botanical_garden": 35,
    "park": 30,
    "zoo": 30,
    "aquarium": 30,
    "cemetery": 30,
    "amusement_park": 30,
    "resort": 30,
    "lake": 25,
    "forest": 25,
    "stadium": 25,
    "shopping_mall": 25,
    "university": 25,
    "restaurant": 20,
    "movie_theater": 20,
    "spa": 20,
    "library": 20,
    "cafe": 15,
    "night_club": 15,
    "casino": 15,
    "bar": 15,
    "hotel": 15,
    "lodging": 15,
    "book_store": 15,
    "jewelry_store": 15,
    "hostel": 15,
    "school": 15,
    "hospital": 15,
    "train_station": 15,
    "airport": 15,
    "point_of_interest": 15,
    # 흔한 장소
    "gym": 10,
    "bowling_alley": 10,
    "bakery": 10,
    "food": 10,
    "meal_takeaway": 10,
    "meal_delivery": 10,
    "store": 10,
    "clothing_store": 10,
    "electronics_store": 10,
    "supermarket": 10,
    "pharmacy": 10,
    "bank": 10,
    "post_office": 10,
    "subway_station": 10,
    "bus_station": 10,
    "gas_station": 10,
    "police": 10,
    "fire_station": 10,
    "parking": 10,
    "taxi_stand": 10,
    "atm": 10,
    "establishment": 10,
}

_CATEGORY_RADIUS = {
    # 대형 자연 지역
    "national_park": 1000,
    "state_park": 800,
    "regional_park": 500,
    "country_park": 400,
    "forest": 600,
    "natural_feature": 300,
    "mountain": 800,
    "lake": 400,
    "beach": 300,
    "island": 500,
    "valley": 400,
    "desert": 600,
    # 대형 시설/단지
    "university": 400,
    "hospital": 200,
    "airport": 800,
    "train_station": 150,
    "stadium": 200,
    "convention_center": 200,
    "exhibition_center": 200,
    "fairground": 300,
    "race_track": 400,
    # 역사/문화 유적
    "castle": 300,
    "palace": 250,
    "historical_site": 200,
    "archaeological_site": 250,
    "ruins": 150,
    "monument": 50,
    "memorial": 30,
    # 공원/정원
    "park": 200,
    "botanical_garden": 250,
    "zoo": 300,
    "safari_park": 500,
    "theme_park": 400,
    "amusement_park": 300,
    "water_park": 200,
    # 쇼핑
    "shopping_mall": 150,
    "shopping_center": 100,
    "market": 80,
    "bazaar": 100,
    # 종교 시설
    "mosque": 100,
    "church": 80,
    "cathedral": 150,
    "temple": 100,
    "synagogue": 60,
    "shrine": 50,
    # 박물관/갤러리
    "museum": 120,
    "art_gallery": 80,
    "science_museum": 150,
    "history_museum": 120,
    "aquarium": 150,
    "planetarium": 80,
    # 공연/여가
    "movie_theater": 50,
    "theater": 60,
    "concert_hall": 80,
    "opera_house": 100,
    "night_club": 40,
    "bar": 30,
    "pub": 40,
    "casino": 100,
    # 스포츠
    "gym": 50,
    "sports_complex": 200,
    "swimming_pool": 80,
    "golf_course": 300,
    "tennis_court": 30,
    "basketball_court": 25,
    "football_field": 100,
    "baseball_field": 80,
    # 숙박
    "hotel": 80,
    "resort": 200,
    "hostel": 40,
    "motel": 50,
    "bed_and_breakfast": 30,
    "campground": 150,
    # 음식점/카페
    "restaurant": 25,
    "cafe": 20,
    "fast_food": 15,
    "bakery": 15,
    "food_court": 50,
    "brewery": 40,
    "winery": 100,
    # 소매점
    "store": 20,
    "clothing_store": 15,
    "book_store": 20,
    "jewelry_store": 10,
    "electronics_store": 25,
    "furniture_store": 30,
    "hardware_store": 25,
    "pharmacy": 15,
    "supermarket": 40,
    # 공공/서비스
    "bank": 20,
    "post_office": 25,
    "library": 60,
    "school": 150,
    "kindergarten": 50,
    # 교통
    "bus_station": 80,
    "subway_station": 40,
    "taxi_stand": 10,
    "parking": 30,
    "gas_station": 30,
    # 일반
    "tourist_attraction": 100,
    "point_of_interest": 50,
    "establishment": 30,
}

_EXCLUDED_CATEGORIES = (
    # 서비스 업체
    "locksmith",
    "plumber",
    "electrician",
    "roofing_contractor",
    "general_contractor",
    "painter",
    "moving_company",
    "car_repair",
    "car_wash",
    "car_dealer",
    "gas_station",
    # 개인 관리/의료
    "hair_care",
    "beauty_salon",
    "spa",
    "nail_salon",
    "massage",
    "dentist",
    "doctor",
    "veterinary_care",
    "pharmacy",
    "physiotherapist",
    # 금융
    "atm",
    "bank",
    "insurance_agency",
    "accounting",
    "real_estate_agency",
    # 일상 서비스
    "laundry",
    "dry_cleaning",
    "post_office",
    "courier_service",
    "storage",
    # 특수 업종/관공서
    "funeral_home",
    "cemetery",
    "lawyer",
    "government_office",
    "courthouse",
    "police",
    "fire_station",
    # 생활 소매
    "convenience_store",
    "supermarket",
    "grocery_or_supermarket",
    "hardware_store",
    "auto_parts_store",
    # 교통 인프라
    "parking",
    "taxi_stand",
    "bus_station",
    "subway_station",
    "truck_stop",
)

# 영어/터키어/한국어 이름 토큰. 부분 문자열 일치로 검사한다.
_SUSPICIOUS_NAME_KEYWORDS = (
    "berber", "kuaför", "barber", "hair", "nail", "massage", "salon",
    "eczane", "pharmacy", "doktor", "doctor", "diş", "dental",
    "atm", "bank", "banka", "sigorta", "insurance",
    "benzin", "petrol", "gas station", "oto", "car wash",
    "tamirci", "repair", "servis", "service", "teknisyen",
    "kurye", "courier", "kargo", "cargo", "nakliye",
    "emlak", "real estate", "noter", "avukat", "lawyer",
    "muhasebe", "accounting", "mali müşavir",
    "temizlik", "cleaning", "dry clean", "laundry",
    "funeral", "cenaze", "mezar", "cemetery",
    "미용실", "네일", "약국", "치과", "은행", "보험", "주유소", "세차",
    "수리", "정비", "택배", "부동산", "세탁", "장례",
)

_QUALITY_THRESHOLDS = {
    "restaurant": QualityThreshold(
        min_rating=3.5,
        min_user_ratings_total=10,
        excluded_keywords=("take", "takeaway", "delivery", "fast food", "drive"),
    ),
    "cafe": QualityThreshold(
        min_rating=3.5,
        min_user_ratings_total=5,
        excluded_keywords=("takeaway", "delivery"),
    ),
    "store": QualityThreshold(
        min_rating=3.0,
        min_user_ratings_total=5,
        required_keywords=("boutique", "gallery", "art", "antique", "specialty"),
    ),
    "lodging": QualityThreshold(min_rating=3.0, min_user_ratings_total=10),
    "bar": QualityThreshold(
        min_rating=3.5,
        min_user_ratings_total=15,
        required_keywords=("restaurant", "rooftop", "cocktail", "wine", "pub"),
    ),
}


def build_points_rules() -> PointsRules:
    """기본 포인트 규칙을 생성합니다."""
    return PointsRules(
        category_points=_freeze(_CATEGORY_POINTS),
        default_category_points=15,
        rating_bands=(Band(4.5, 15), Band(4.0, 10), Band(3.5, 5), Band(3.0, 0)),
        rating_floor_bonus=-10,
        popularity_bands=(Band(1000, 20), Band(500, 15), Band(200, 10), Band(50, 5), Band(10, 0)),
        popularity_floor_bonus=-5,
        combo_bonuses=(
            ComboBonus(frozenset({"historical_site", "tourist_attraction"}), 15),
            ComboBonus(frozenset({"natural_feature", "tourist_attraction"}), 10),
            ComboBonus(frozenset({"museum", "art_gallery"}), 5),
        ),
    )


def build_radius_rules() -> RadiusRules:
    """기본 게시 반경 규칙을 생성합니다."""
    return RadiusRules(
        category_radius=_freeze(_CATEGORY_RADIUS),
        default_radius=25,
        classes=(
            RadiusClass(500, "very_large", "매우 넓은 구역"),
            RadiusClass(200, "large", "넓은 구역"),
            RadiusClass(100, "medium", "중간 구역"),
            RadiusClass(50, "small_medium", "조금 좁은 구역"),
        ),
        fallback_class=RadiusClass(0, "small", "좁은 구역"),
    )


def build_filter_rules() -> FilterRules:
    """기본 후보 제외 규칙을 생성합니다."""
    return FilterRules(
        excluded_categories=frozenset(_EXCLUDED_CATEGORIES),
        suspicious_name_keywords=_SUSPICIOUS_NAME_KEYWORDS,
        quality_thresholds=_freeze(_QUALITY_THRESHOLDS),
    )


def build_importance_rules() -> ImportanceRules:
    """기본 중요도 규칙을 생성합니다."""
    return ImportanceRules(
        rating_pivot=3.0,
        rating_weight=10.0,
        review_bands=(
            Band(1000, 50),
            Band(500, 40),
            Band(200, 30),
            Band(100, 25),
            Band(50, 20),
            Band(20, 15),
            Band(10, 10),
        ),
        review_floor_score=5,
        category_groups=(
            (frozenset({"tourist_attraction", "museum", "historical_site", "natural_feature"}), 30),
            (frozenset({"park", "restaurant", "shopping_mall", "theater"}), 20),
            (frozenset({"cafe", "store", "gym"}), 10),
        ),
        default_category_score=5,
    )


def build_default_place_rules(
    *,
    user_visited_points: int = 1,
    no_posts_bonus_points: int = 3,
) -> PlaceRules:
    """기본 규칙 묶음을 생성합니다."""
    return PlaceRules(
        points=build_points_rules(),
        radius=build_radius_rules(),
        filtering=build_filter_rules(),
        importance=build_importance_rules(),
        selection=SelectionRules(),
        dynamic_points=DynamicPointsRules(
            user_visited_points=user_visited_points,
            no_posts_bonus_points=no_posts_bonus_points,
        ),
    )


@lru_cache(maxsize=1)
def get_default_place_rules() -> PlaceRules:
    """프로세스 전역에서 공유하는 기본 규칙을 반환합니다."""
    return build_default_place_rules()


def match_band(value: float, bands: tuple[Band, ...], floor: int) -> int:
    """내림차순 구간 중 처음 만족하는 값을, 없으면 floor를 반환합니다."""
    for band in bands:
        if value >= band.minimum:
            return band.value
    return floor
