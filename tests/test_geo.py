"""지리 유틸리티 테스트."""

from __future__ import annotations

import math

from app.core.geo import GeoRectangle, grid_cell_key, haversine_km


def test_haversine_known_distance() -> None:
    # 서울시청 - 부산시청 직선거리 약 325km
    distance = haversine_km(37.5665, 126.9780, 35.1796, 129.0756)

    assert 320 < distance < 330


def test_haversine_is_symmetric_and_zero_for_same_point() -> None:
    assert haversine_km(41.0, 29.0, 41.0, 29.0) == 0
    assert math.isclose(haversine_km(41.0, 29.0, 40.0, 28.0), haversine_km(40.0, 28.0, 41.0, 29.0))


def test_grid_cell_key_floors_coordinates() -> None:
    assert grid_cell_key(41.0082, 28.9784, 0.01) == "41.00,28.97"
    assert grid_cell_key(-33.8688, 151.2093, 0.01) == "-33.87,151.20"


def test_rectangle_around_covers_circle() -> None:
    bounds = GeoRectangle.around(60.0, 10.0, 5.0)

    # 중심에서 동서남북으로 4.9km 떨어진 점은 모두 포함되어야 한다.
    lat_offset = 4.9 / 111.2
    lng_offset = 4.9 / (111.32 * math.cos(math.radians(60.0)))
    assert bounds.contains(60.0 + lat_offset, 10.0)
    assert bounds.contains(60.0 - lat_offset, 10.0)
    assert bounds.contains(60.0, 10.0 + lng_offset)
    assert bounds.contains(60.0, 10.0 - lng_offset)
    assert not bounds.contains(60.2, 10.0)


def test_rectangle_across_antimeridian_uses_full_longitude_range() -> None:
    bounds = GeoRectangle.around(-17.0, 179.99, 10.0)

    assert bounds.min_lng == -180.0
    assert bounds.max_lng == 180.0
    assert bounds.contains(-17.0, -179.99)
