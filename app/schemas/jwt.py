"""인증 토큰 페이로드 스키마."""

from pydantic import BaseModel, ConfigDict, Field


class UserTokenPayload(BaseModel):
    """사용자 액세스 토큰 클레임. 엔진은 `userId`만 사용자 식별에 사용합니다."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sub: str = Field(..., description="토큰 subject")
    user_id: str = Field(..., alias="userId", description="게시/방문 판정에 쓰는 사용자 식별자")
    email: str = Field(default="", description="사용자 이메일 (선택)")
    exp: int | None = Field(default=None, description="만료 시각 (Unix seconds)")
