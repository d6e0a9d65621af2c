"""Places 서비스 추상 프로토콜 정의."""

from abc import ABC, abstractmethod

from app.schemas.place import NearbySearchPage


class PlacesServiceProtocol(ABC):
    """주변 장소 검색 제공자를 위한 인터페이스를 정의합니다."""

    MAX_RADIUS_METERS: int = 50_000

    @abstractmethod
    async def nearby_search(self, latitude: float, longitude: float, radius_meters: int) -> NearbySearchPage:
        """좌표와 반경으로 첫 페이지를 검색합니다.

        Args:
            latitude: 중심 위도
            longitude: 중심 경도
            radius_meters: 검색 반경 (m, 최대 50km)

        Returns:
            후보 목록과 다음 페이지 토큰

        Raises:
            GooglePlacesError: 제공자가 오류 상태를 반환하거나 호출에 실패한 경우
        """
        raise NotImplementedError

    @abstractmethod
    async def next_page(self, page_token: str) -> NearbySearchPage:
        """이전 응답의 페이지 토큰으로 다음 페이지를 조회합니다.

        Args:
            page_token: 이전 페이지의 `next_page_token`

        Returns:
            후보 목록과 다음 페이지 토큰
        """
        raise NotImplementedError
