from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.common import CamelModel, PageMeta


# ✅ 목록 조회 필터 (None 이면 조건 생략)
class MarksheetFilters(BaseModel):
    status: Optional[str] = None
    academic_year_id: Optional[int] = None
    subject_id: Optional[int] = None
    school_id: Optional[int] = None
    enrollment_id: Optional[int] = None

    model_config = ConfigDict(frozen=True)


# ✅ 입력용: 과목별 점수 1건
class MarkEntry(CamelModel):
    subject_id: int                                   # 과목 ID
    marks_obtained: float = Field(..., ge=0)          # 취득 점수 (음수 불가)
    max_marks: int = Field(..., ge=1)                 # 만점 (1 이상)
    remarks: Optional[str] = None


# ✅ 입력용: 성적 입력 (marksheetId가 있으면 기존 성적표 수정)
class MarksEntryRequest(CamelModel):
    marksheet_id: Optional[int] = None
    academic_year_enrollment_id: Optional[int] = None
    subject_id: Optional[int] = None
    remarks: Optional[str] = None
    marks: List[MarkEntry] = []


class RejectRequest(CamelModel):
    reason: str = ""


# ✅ 출력용
class MarkOut(CamelModel):
    id: int
    subject_id: int
    marks_obtained: float
    max_marks: int
    percentage: Optional[float] = None
    grade: Optional[str] = None
    remarks: Optional[str] = None


class MarksheetOut(CamelModel):
    id: int
    academic_year_enrollment_id: int
    academic_year_id: int
    school_id: int
    subject_id: Optional[int] = None
    status: str
    remarks: Optional[str] = None
    created_by: Optional[str] = None
    modified_by: Optional[str] = None
    marks: List[MarkOut] = []


class MarksheetPage(CamelModel):
    marksheets: List[MarksheetOut]
    pagination: PageMeta
