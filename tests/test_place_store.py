"""SQLAlchemy 장소 저장소 테스트 (인메모리 SQLite)."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.database import build_engine, init_db
from app.models import Place, Post
from app.schemas.place import PlaceUpsert
from app.services.place_store import SqlAlchemyPlaceStore


@pytest.fixture
def db():
    engine = build_engine("sqlite:///:memory:")
    init_db(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


def _record(google_place_id: str, latitude: float, longitude: float, **overrides) -> PlaceUpsert:
    values = {
        "google_place_id": google_place_id,
        "name": f"Place {google_place_id}",
        "latitude": latitude,
        "longitude": longitude,
        "categories": ["park"],
        "base_points": 30,
        "rating": 4.2,
        "user_ratings_total": 120,
    }
    values.update(overrides)
    return PlaceUpsert(**values)


def test_upsert_is_idempotent_and_updates_metadata(db) -> None:
    store = SqlAlchemyPlaceStore(db)

    first = store.upsert_by_external_id(_record("g-1", 37.5, 127.0))
    second = store.upsert_by_external_id(
        _record("g-1", 37.5, 127.0, name="Renamed Park", rating=4.7, user_ratings_total=900, base_points=55)
    )

    assert first.id == second.id
    assert db.scalar(select(func.count(Place.id))) == 1
    db.expire_all()
    stored = store.get_place(first.id)
    assert stored.name == "Renamed Park"
    assert stored.rating == 4.7
    assert stored.user_ratings_total == 900
    # 기본 포인트는 최초 수집 값을 유지한다.
    assert stored.base_points == 30
    assert stored.place_type == "google_place"


def test_find_within_radius_orders_by_distance_and_applies_filters(db) -> None:
    store = SqlAlchemyPlaceStore(db)
    far = store.upsert_by_external_id(_record("far", 37.53, 127.0))
    near = store.upsert_by_external_id(_record("near", 37.501, 127.0, categories=["Museum", "tourist_attraction"]))
    store.upsert_by_external_id(_record("outside", 38.5, 127.0))

    results = store.find_within_radius(37.5, 127.0, 5.0)

    assert [item.place.id for item in results] == [near.id, far.id]
    assert results[0].distance_km < results[1].distance_km <= 5.0

    museums = store.find_within_radius(37.5, 127.0, 5.0, category="museum")
    assert [item.place.id for item in museums] == [near.id]

    limited = store.find_within_radius(37.5, 127.0, 5.0, limit=1)
    assert [item.place.id for item in limited] == [near.id]


def test_post_activity_counts_posts_and_user_visits(db) -> None:
    store = SqlAlchemyPlaceStore(db)
    visited = store.upsert_by_external_id(_record("visited", 37.5, 127.0))
    popular = store.upsert_by_external_id(_record("popular", 37.51, 127.0))
    fresh = store.upsert_by_external_id(_record("fresh", 37.52, 127.0))
    db.add_all(
        [
            Post(place_id=visited.id, user_id="user-1", earned_points=30),
            Post(place_id=popular.id, user_id="user-2", earned_points=30),
            Post(place_id=popular.id, user_id="user-3", earned_points=30),
        ]
    )
    db.commit()

    activity = store.get_post_activity([visited.id, popular.id, fresh.id], "user-1")

    assert activity[visited.id].user_has_posted is True
    assert activity[visited.id].total_posts == 1
    assert activity[popular.id].user_has_posted is False
    assert activity[popular.id].total_posts == 2
    assert activity[fresh.id].total_posts == 0
    assert store.count_posts_at(popular.id) == 2
    assert store.has_user_posted_at(visited.id, "user-1") is True
    assert store.has_user_posted_at(fresh.id, "user-1") is False
    assert store.get_post_activity([], "user-1") == {}
