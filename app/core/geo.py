"""거리 계산과 반경 조회용 지리 유틸리티."""

from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0

_KM_PER_LAT_DEGREE = 110.574
_KM_PER_LNG_DEGREE_EQUATOR = 111.320
_POLE_LAT = 89.999999
_EPSILON = 1e-6


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """두 위경도 사이의 대원 거리(km)를 반환합니다."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def grid_cell_key(latitude: float, longitude: float, grid_size: float) -> str:
    """좌표가 속한 격자 셀 키를 반환합니다 (예: ``"41.00,28.97"``)."""
    cell_lat = math.floor(latitude / grid_size) * grid_size
    cell_lng = math.floor(longitude / grid_size) * grid_size
    return f"{cell_lat:.2f},{cell_lng:.2f}"


@dataclass(frozen=True, slots=True)
class GeoRectangle:
    """반경 조회의 1차 필터로 쓰는 위경도 사각형. `around()`로 생성합니다."""

    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    def contains(self, latitude: float, longitude: float) -> bool:
        """점이 사각형 안(경계 포함)에 있는지 반환합니다."""
        return self.min_lat <= latitude <= self.max_lat and self.min_lng <= longitude <= self.max_lng

    @classmethod
    def around(cls, latitude: float, longitude: float, radius_km: float) -> GeoRectangle:
        """중심점에서 반경 km 원을 감싸는 사각형을 만듭니다.

        경도 폭은 원에서 극에 가장 가까운 위도 기준으로 잡아 원이 잘리지 않게 합니다.
        날짜변경선에 걸치면 경도 범위 전체를 사용합니다.
        """
        radius = max(0.0, radius_km)
        lat_span = radius / _KM_PER_LAT_DEGREE
        pole_side_lat = min(_POLE_LAT, abs(latitude) + lat_span)
        lng_span = radius / (_KM_PER_LNG_DEGREE_EQUATOR * max(math.cos(math.radians(pole_side_lat)), _EPSILON))

        west, east = longitude - lng_span, longitude + lng_span
        if west < -180.0 or east > 180.0:
            west, east = -180.0, 180.0
        return cls(
            min_lat=max(-90.0, latitude - lat_span),
            min_lng=west,
            max_lat=min(90.0, latitude + lat_span),
            max_lng=east,
        )
