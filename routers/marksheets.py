from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config.settings import Settings
from database.db import get_db
from dependencies.security import require_admin_token
from dependencies.settings import get_app_settings
from schemas.marksheets import MarksEntryRequest, MarksheetFilters, MarksheetOut, RejectRequest
from services import marks_service

router = APIRouter(prefix="/marksheets", tags=["성적 입력/승인"])

TEACHER_USER = "teacher"
REVIEWER_USER = "admin"


def _out(marksheet) -> dict:
    return MarksheetOut.model_validate(marksheet).model_dump(by_alias=True)


# ✅ [CREATE/UPDATE] 성적 입력 (점수별 백분율/등급 자동 계산)
@router.post("/", status_code=201)
def enter_marks(
    payload: MarksEntryRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    marksheet = marks_service.enter_marks(
        db, payload, user=TEACHER_USER, default_threshold=settings.DEFAULT_PASSING_THRESHOLD
    )
    return {"success": True, "data": _out(marksheet), "message": "성적 입력 완료"}


# ==========================================================
# [공통] 목록 조회 쿼리 파라미터 → MarksheetFilters
# ==========================================================
def get_marksheet_filters(
    status: Optional[str] = Query(None, description="Draft / submitted / approved / rejected"),
    academic_year_id: Optional[int] = Query(None, alias="academicYearId"),
    subject_id: Optional[int] = Query(None, alias="subjectId"),
    school_id: Optional[int] = Query(None, alias="schoolId"),
    enrollment_id: Optional[int] = Query(None, alias="enrollmentId"),
) -> MarksheetFilters:
    return MarksheetFilters(
        status=status,
        academic_year_id=academic_year_id,
        subject_id=subject_id,
        school_id=school_id,
        enrollment_id=enrollment_id,
    )


# ✅ [LIST] 성적표 목록 (승인 대기: status=submitted)
@router.get("/")
def list_marksheets(
    filters: MarksheetFilters = Depends(get_marksheet_filters),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    result = marks_service.list_marksheets(db, filters, page=page, limit=limit)
    return {"success": True, "data": result.model_dump(by_alias=True), "message": "성적표 목록 조회 완료"}


# ✅ [READ] 성적표 상세
@router.get("/{marksheet_id}")
def read_marksheet(marksheet_id: int, db: Session = Depends(get_db)):
    marksheet = marks_service.get_marksheet(db, marksheet_id)
    return {"success": True, "data": _out(marksheet)}


# ✅ [SUBMIT] 승인 요청
@router.post("/{marksheet_id}/submit")
def submit_marksheet(marksheet_id: int, db: Session = Depends(get_db)):
    marksheet = marks_service.submit_marksheet(db, marksheet_id, user=TEACHER_USER)
    return {"success": True, "data": _out(marksheet), "message": "성적표 제출 완료"}


# ✅ [APPROVE] 승인 (관리자)
@router.post("/{marksheet_id}/approve", dependencies=[Depends(require_admin_token)])
def approve_marksheet(marksheet_id: int, db: Session = Depends(get_db)):
    marksheet = marks_service.approve_marksheet(db, marksheet_id, reviewer=REVIEWER_USER)
    return {"success": True, "data": _out(marksheet), "message": "성적표 승인 완료"}


# ✅ [REJECT] 반려 (관리자, 사유 필수)
@router.post("/{marksheet_id}/reject", dependencies=[Depends(require_admin_token)])
def reject_marksheet(marksheet_id: int, body: RejectRequest, db: Session = Depends(get_db)):
    marksheet = marks_service.reject_marksheet(db, marksheet_id, body.reason, reviewer=REVIEWER_USER)
    return {"success": True, "data": _out(marksheet), "message": "성적표 반려 완료"}


# ✅ [DELETE] 초안/반려 상태만 삭제 가능
@router.delete("/{marksheet_id}")
def delete_marksheet(marksheet_id: int, db: Session = Depends(get_db)):
    marks_service.delete_marksheet(db, marksheet_id)
    return {"success": True, "message": "성적표 삭제 완료"}
