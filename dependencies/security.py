from typing import Optional, Annotated
from fastapi import Header, HTTPException, Request
import hmac

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def parse_bearer(authorization: Optional[str]) -> str:
    """'Bearer <token>' → token. 형식이 다르면 401"""
    if not authorization:
        raise _unauthorized("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if not token.strip():
        raise _unauthorized("Invalid Authorization header format")
    if scheme.lower() != "bearer":
        raise _unauthorized("Invalid auth scheme")
    return token.strip()


def require_admin_token(request: Request, authorization: AuthHeader = None):
    """관리자 전용 API (등급표 변경, 성적 승인/반려, 학교 대시보드) 보호"""
    expected = request.app.state.settings.ADMIN_API_TOKEN
    # 서버에 토큰이 설정되지 않았으면 관리자 API 전체를 막는다
    if not expected:
        raise HTTPException(status_code=500, detail="Server token not configured")

    token = parse_bearer(authorization)
    # 타이밍 안전 비교
    if not hmac.compare_digest(token.encode(), expected.encode()):
        raise _unauthorized("Invalid token")
    return {"client": "admin"}
