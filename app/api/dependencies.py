"""라우터가 공유하는 인증/서비스 조립 의존성."""

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.database import get_db
from app.schemas.jwt import UserTokenPayload
from app.services.google_places_service import get_google_places_service
from app.services.ingestion_service import IngestionPolicy, PlaceIngestionService
from app.services.jwt_service import JwtService
from app.services.nearby_service import NearbyPlacesService
from app.services.place_store import PlaceStore, SqlAlchemyPlaceStore
from app.services.places_service import PlacesServiceProtocol

bearer_scheme = HTTPBearer(auto_error=False)

MISSING_TOKEN_DETAIL = "인증 정보가 필요합니다."
INVALID_TOKEN_DETAIL = "유효하지 않은 토큰입니다."


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_jwt_service() -> JwtService:
    return JwtService()


def require_user_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    jwt_service: JwtService = Depends(get_jwt_service),
) -> UserTokenPayload:
    """Authorization 헤더의 사용자 토큰을 검증해 클레임을 돌려줍니다."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized(MISSING_TOKEN_DETAIL)
    try:
        payload = jwt_service.verify_user_token(credentials.credentials)
    except ValueError as exc:
        raise _unauthorized(INVALID_TOKEN_DETAIL) from exc
    return payload


def get_current_user_id(token: UserTokenPayload = Depends(require_user_token)) -> str:
    """인증된 사용자의 식별자를 반환합니다."""
    return token.user_id


def require_service_secret(
    x_service_secret: str | None = Header(default=None, alias="x-service-secret"),
) -> None:
    """보호된 문서 경로용 `x-service-secret` 헤더를 확인합니다."""
    expected = get_settings().SERVICE_SECRET
    if not expected:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="서비스 시크릿이 설정되지 않았습니다.")
    if x_service_secret != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="서비스 시크릿이 일치하지 않습니다.")


def get_place_store(db: Session = Depends(get_db)) -> PlaceStore:
    """요청 단위 세션에 묶인 장소 저장소를 제공합니다."""
    return SqlAlchemyPlaceStore(db)


def get_places_service() -> PlacesServiceProtocol | None:
    """외부 장소 제공자를 반환합니다. API 키가 없으면 None."""
    return get_google_places_service()


def get_nearby_service(
    store: PlaceStore = Depends(get_place_store),
    provider: PlacesServiceProtocol | None = Depends(get_places_service),
) -> NearbyPlacesService:
    """주변 장소 조회 서비스를 구성합니다."""
    settings = get_settings()
    ingestion = None
    if provider is not None:
        ingestion = PlaceIngestionService(store, provider, policy=IngestionPolicy.from_settings(settings))
    return NearbyPlacesService.from_settings(store, ingestion, settings)
