"""외부 장소 제공자로부터 주변 장소를 수집해 저장하는 오케스트레이터."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from app.core.candidate_filter import filter_candidates
from app.core.config import Settings, get_settings
from app.core.importance import rank_candidates
from app.core.logger import get_logger
from app.core.place_rules import PlaceRules, get_default_place_rules
from app.core.points import calculate_place_points
from app.core.spatial_selector import KnownLocation, select_distributed_candidates
from app.core.timeout_policy import get_timeout_policy
from app.schemas.place import NearbySearchPage, PlaceCandidate, PlaceUpsert
from app.services.place_store import PlaceStore
from app.services.places_service import PlacesServiceProtocol

logger = get_logger(__name__)


class Clock(Protocol):
    """수집 루프가 사용하는 시계."""

    def monotonic(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class SystemClock:
    """실제 시간을 사용하는 기본 시계."""

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


@dataclass(frozen=True, slots=True)
class IngestionPolicy:
    """한 번의 수집 호출에 적용하는 한도."""

    max_pages: int = 3
    page_delay_seconds: float = 2.0
    max_places_per_page: int = 20
    context_radius_km: float = 10.0
    deadline_seconds: float = 20.0

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> IngestionPolicy:
        settings = settings or get_settings()
        return cls(
            max_pages=settings.GOOGLE_PLACES_MAX_PAGES,
            page_delay_seconds=settings.GOOGLE_PLACES_PAGE_DELAY_SECONDS,
            max_places_per_page=settings.INGESTION_MAX_PLACES_PER_PAGE,
            context_radius_km=settings.INGESTION_CONTEXT_RADIUS_KM,
            deadline_seconds=float(get_timeout_policy(settings).ingestion_timeout_seconds),
        )


@dataclass(slots=True)
class IngestionReport:
    """수집 결과 집계.

    `filtered`는 필터에서 제외된 수, `clustered`는 필터는 통과했지만 공간 분산
    선택에서 빠진 수, `skipped`는 데드라인 때문에 저장하지 못한 선택 수입니다.
    """

    pages_fetched: int = 0
    fetched: int = 0
    filtered: int = 0
    clustered: int = 0
    saved: int = 0
    failed: int = 0
    skipped: int = 0
    deadline_reached: bool = False
    rejected: dict[str, int] = field(default_factory=dict)


class PlaceIngestionService:
    """제공자 페이지를 순회하며 후보를 거르고, 고르고, 점수를 매겨 저장합니다.

    페이지마다 필터링, 중요도 정렬, 공간 분산 선택을 독립적으로 수행하며,
    주변 기존 장소(기본 10km)를 분산 선택의 맥락으로 사용합니다. 각 저장은
    개별적으로 처리되어 한 건의 실패가 나머지 저장을 막지 않습니다.

    데드라인은 페이지 사이와 저장소 호출 직전마다 확인합니다. 호출자가 작업을
    취소해도 진행 중인 저장소 호출은 끝까지 기다린 뒤 취소를 전파하므로,
    요청 세션이 두 스레드에서 동시에 쓰이지 않습니다.
    """

    def __init__(
        self,
        store: PlaceStore,
        provider: PlacesServiceProtocol,
        rules: PlaceRules | None = None,
        policy: IngestionPolicy | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._provider = provider
        self._rules = rules or get_default_place_rules()
        self._policy = policy or IngestionPolicy()
        self._clock = clock or SystemClock()

    async def ingest(self, latitude: float, longitude: float, radius_km: float) -> IngestionReport:
        """중심점 주변 장소를 수집합니다.

        Args:
            latitude: 중심 위도
            longitude: 중심 경도
            radius_km: 검색 반경 (km). 제공자 한도(50km)로 잘립니다.

        Returns:
            페이지/후보/저장 건수를 담은 집계

        Raises:
            GooglePlacesError: 제공자가 오류 상태를 반환한 경우. 이미 저장된 장소는 유지됩니다.
            SQLAlchemyError: 주변 장소 맥락 조회가 실패한 경우.
        """
        report = IngestionReport()
        radius_meters = min(self._provider.MAX_RADIUS_METERS, int(round(radius_km * 1000)))
        deadline_at = self._clock.monotonic() + self._policy.deadline_seconds

        logger.info(
            "Place ingestion started: lat=%.6f lng=%.6f radius_m=%d max_pages=%d",
            latitude,
            longitude,
            radius_meters,
            self._policy.max_pages,
        )

        page = await self._provider.nearby_search(latitude, longitude, radius_meters)
        while True:
            report.pages_fetched += 1
            await self._process_page(page, latitude, longitude, report, deadline_at)

            if report.deadline_reached or not page.next_page_token:
                break
            if report.pages_fetched >= self._policy.max_pages:
                break

            remaining = deadline_at - self._clock.monotonic()
            if remaining <= self._policy.page_delay_seconds:
                report.deadline_reached = True
                logger.warning(
                    "Place ingestion deadline reached after %d pages (remaining=%.2fs)",
                    report.pages_fetched,
                    remaining,
                )
                break

            # 발급 직후의 page token은 바로 쓰면 INVALID_REQUEST가 난다.
            await self._clock.sleep(self._policy.page_delay_seconds)
            page = await self._provider.next_page(page.next_page_token)

        logger.info(
            "Place ingestion finished: pages=%d fetched=%d filtered=%d clustered=%d saved=%d failed=%d skipped=%d",
            report.pages_fetched,
            report.fetched,
            report.filtered,
            report.clustered,
            report.saved,
            report.failed,
            report.skipped,
        )
        return report

    def _deadline_passed(self, deadline_at: float) -> bool:
        return self._clock.monotonic() >= deadline_at

    async def _process_page(
        self,
        page: NearbySearchPage,
        latitude: float,
        longitude: float,
        report: IngestionReport,
        deadline_at: float,
    ) -> None:
        report.fetched += len(page.candidates)
        kept, rejected = filter_candidates(page.candidates, self._rules.filtering)
        report.filtered += len(page.candidates) - len(kept)
        for reason, count in rejected.items():
            report.rejected[reason] = report.rejected.get(reason, 0) + count

        if self._deadline_passed(deadline_at):
            report.deadline_reached = True
            logger.warning("Place ingestion deadline reached before page %d was stored", report.pages_fetched)
            return

        known_locations = await self._load_known_locations(latitude, longitude)
        ranked = rank_candidates(kept, self._rules.importance)
        selection = select_distributed_candidates(
            ranked,
            known_locations,
            self._policy.max_places_per_page,
            self._rules.selection,
        )
        report.clustered += len(kept) - len(selection.selected)

        saved = 0
        failed = 0
        for index, candidate in enumerate(selection.selected):
            if self._deadline_passed(deadline_at):
                report.deadline_reached = True
                report.skipped += len(selection.selected) - index
                logger.warning(
                    "Place ingestion deadline reached on page %d; %d selected places not stored",
                    report.pages_fetched,
                    len(selection.selected) - index,
                )
                break
            if await self._save_candidate(candidate):
                saved += 1
            else:
                failed += 1

        report.saved += saved
        report.failed += failed

        logger.info(
            "Ingestion page %d: received=%d kept=%d selected=%d (override=%d distributed=%d fallback=%d) "
            "saved=%d failed=%d",
            report.pages_fetched,
            len(page.candidates),
            len(kept),
            len(selection.selected),
            selection.override_count,
            selection.distributed_count,
            selection.fallback_count,
            saved,
            failed,
        )

    async def _call_store(self, func, /, *args):
        """저장소 호출을 워커 스레드에서 실행합니다.

        취소되더라도 스레드 작업이 끝난 뒤에 취소를 전파합니다.
        """
        task = asyncio.ensure_future(asyncio.to_thread(func, *args))
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            await asyncio.wait({task})
            if not task.cancelled() and task.exception() is not None:
                logger.warning("Store call finished with error after cancellation: %s", task.exception())
            raise

    async def _load_known_locations(self, latitude: float, longitude: float) -> list[KnownLocation]:
        nearby = await self._call_store(
            self._store.find_within_radius,
            latitude,
            longitude,
            self._policy.context_radius_km,
        )
        return [KnownLocation(latitude=item.place.latitude, longitude=item.place.longitude) for item in nearby]

    async def _save_candidate(self, candidate: PlaceCandidate) -> bool:
        base_points = calculate_place_points(
            candidate.types,
            candidate.rating,
            candidate.user_ratings_total,
            self._rules.points,
        )
        record = PlaceUpsert.from_candidate(candidate, base_points)
        try:
            await self._call_store(self._store.upsert_by_external_id, record)
        except SQLAlchemyError as exc:
            logger.error("Failed to save place %s (%s): %s", candidate.place_id, candidate.name, exc)
            return False
        return True
