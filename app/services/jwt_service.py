"""사용자 액세스 토큰(HS256) 서명/검증 서비스."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import ValidationError

from app.core.config import get_settings
from app.schemas.jwt import UserTokenPayload

ALGORITHM = "HS256"
REQUIRED_USER_CLAIMS = ("sub", "userId")


class JwtService:
    """인증 서버와 같은 시크릿으로 사용자 토큰을 다룹니다.

    토큰 발급은 인증 서버의 몫이며, 여기서의 `sign_user_token`은 같은 형식의
    토큰이 필요한 내부 호출과 테스트용입니다.
    """

    def __init__(self, secret: Optional[str] = None, expiry_minutes: Optional[int] = None):
        settings = get_settings()
        self.secret = secret or settings.JWT_ACCESS_SECRET
        if not self.secret:
            raise ValueError("JWT access secret is not set.")
        self.lifetime = timedelta(minutes=expiry_minutes or settings.JWT_ACCESS_EXPIRY_MINUTES)

    def sign_user_token(self, user_id: str, email: str = "", sub: Optional[str] = None) -> str:
        """`sub`/`userId`/`email` 클레임에 iat/exp를 더해 서명합니다."""
        issued_at = datetime.now(timezone.utc)
        claims = {
            "sub": sub or user_id,
            "userId": user_id,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=ALGORITHM)

    def verify_user_token(self, token: str) -> UserTokenPayload:
        """서명과 만료를 확인하고 사용자 클레임을 반환합니다.

        Raises:
            ValueError: 서명 불일치, 만료, 필수 클레임 누락 시.
        """
        try:
            claims = jwt.decode(token, self.secret, algorithms=[ALGORITHM])
        except jwt.PyJWTError:
            raise ValueError("Invalid token") from None

        if any(not claims.get(name) for name in REQUIRED_USER_CLAIMS):
            raise ValueError("Invalid user token payload.")
        try:
            return UserTokenPayload.model_validate(claims)
        except ValidationError:
            raise ValueError("Invalid user token payload.") from None
