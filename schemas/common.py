"""
schemas/common.py

- 프로젝트 전반에서 재사용할 공용 스키마 모음
- Pydantic v2 기준
- 포함 내용:
  1) 에러 응답 표준: ErrorDetail, ErrorResponse
  2) 프론트 계약용 camelCase 베이스: CamelModel
  3) 목록 페이징 메타: PageMeta, make_page_meta()
"""

from __future__ import annotations

from datetime import datetime, timezone
from math import ceil
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


# =========================================================
# 1) 에러 응답 표준
# =========================================================

class ErrorDetail(BaseModel):
    """에러 코드/메시지를 담는 최소 단위"""
    code: str = Field(..., description="에러 식별 코드 (예: VALIDATION_ERROR, NOT_FOUND)")
    message: str = Field(..., description="사람이 읽을 수 있는 에러 메시지")

class ErrorResponse(BaseModel):
    """
    전역 에러 핸들러에서 내려주는 표준 에러 응답
    - middlewares/error_handler.py에서 이 스키마로 직렬화
    """
    success: bool = False
    error: ErrorDetail
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="응답 생성 시각 (UTC)"
    )

    model_config = ConfigDict(extra="ignore")


# =========================================================
# 2) camelCase 베이스
# =========================================================

class CamelModel(BaseModel):
    """
    파이썬에서는 snake_case, JSON에서는 camelCase
    - 요청: minValue / min_value 둘 다 허용 (populate_by_name)
    - 응답: model_dump(by_alias=True)로 camelCase 출력
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =========================================================
# 3) 목록 페이징 메타
# =========================================================

class PageMeta(CamelModel):
    """
    목록 응답의 pagination 블록
    - total: 전체 개수, page/limit: 현재 페이지와 크기
    - totalPages: 결과가 없으면 0
    """
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)


def make_page_meta(total: int, page: int, limit: int) -> PageMeta:
    return PageMeta(total=total, page=page, limit=limit, total_pages=ceil(total / limit))
