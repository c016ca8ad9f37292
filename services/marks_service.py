"""
services/marks_service.py

성적 입력 → 제출 → 승인/반려 워크플로.
점수 입력 시 백분율과 등급(등급표 기준)을 함께 계산해 저장한다.
승인(approved)된 성적표만 분석 집계에 포함된다.
"""

import logging

from sqlalchemy.orm import Session

from models.enrollments import AcademicYearEnrollment as EnrollmentModel
from models.marksheets import EDITABLE_STATUSES, MARKSHEET_STATUSES, Mark as MarkModel, Marksheet as MarksheetModel
from schemas.common import make_page_meta
from schemas.marksheets import MarkEntry, MarksEntryRequest, MarksheetFilters, MarksheetOut, MarksheetPage
from services import grading
from services.grading_scheme_service import classify_or_none, load_schemes
from utils.exceptions import ConflictError, NotFoundError, ValidationError
from utils.math_utils import safe_percentage

logger = logging.getLogger(__name__)


def get_marksheet(db: Session, marksheet_id: int) -> MarksheetModel:
    marksheet = db.get(MarksheetModel, marksheet_id)
    if marksheet is None:
        raise NotFoundError("Marksheet not found")
    return marksheet


def list_marksheets(db: Session, filters: MarksheetFilters, page: int = 1, limit: int = 50) -> MarksheetPage:
    """
    성적표 목록 (최신 생성 순, 페이지 단위).
    승인 대기 목록은 status="submitted" 로 조회한다.
    """
    if filters.status is not None and filters.status not in MARKSHEET_STATUSES:
        raise ValidationError(f"Invalid status: {filters.status}. Allowed: {', '.join(MARKSHEET_STATUSES)}")

    query = db.query(MarksheetModel)
    if filters.status is not None:
        query = query.filter(MarksheetModel.status == filters.status)
    if filters.academic_year_id is not None:
        query = query.filter(MarksheetModel.academic_year_id == filters.academic_year_id)
    if filters.subject_id is not None:
        query = query.filter(MarksheetModel.subject_id == filters.subject_id)
    if filters.school_id is not None:
        query = query.filter(MarksheetModel.school_id == filters.school_id)
    if filters.enrollment_id is not None:
        query = query.filter(MarksheetModel.academic_year_enrollment_id == filters.enrollment_id)

    total = query.count()
    rows = (
        query.order_by(MarksheetModel.created_at.desc(), MarksheetModel.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    logger.info(f"성적표 목록 조회: {filters.model_dump(exclude_none=True)}, total={total}, page={page}")
    return MarksheetPage(
        marksheets=[MarksheetOut.model_validate(m) for m in rows],
        pagination=make_page_meta(total, page, limit),
    )


def _validate_entries(entries) -> None:
    for entry in entries:
        if entry.marks_obtained > entry.max_marks:
            raise ValidationError(
                f"Marks obtained ({entry.marks_obtained}) cannot exceed max marks ({entry.max_marks})"
            )


def _apply_mark(mark: MarkModel, entry: MarkEntry, schemes, default_threshold: int) -> None:
    mark.marks_obtained = entry.marks_obtained
    mark.max_marks = entry.max_marks
    mark.percentage = safe_percentage(entry.marks_obtained, entry.max_marks)
    result = classify_or_none(mark.percentage, schemes, default_threshold=default_threshold)
    mark.grade = result.grade if result else None
    if entry.remarks is not None:
        mark.remarks = entry.remarks


def enter_marks(
    db: Session,
    payload: MarksEntryRequest,
    user: str = "system",
    default_threshold: int = grading.DEFAULT_PASSING_THRESHOLD,
) -> MarksheetModel:
    _validate_entries(payload.marks)

    if payload.marksheet_id is not None:
        marksheet = get_marksheet(db, payload.marksheet_id)
        if marksheet.status == "approved":
            raise ConflictError("Cannot edit approved marksheet")
        if payload.remarks is not None:
            marksheet.remarks = payload.remarks
        marksheet.modified_by = user
    else:
        if payload.academic_year_enrollment_id is None:
            raise ValidationError("academicYearEnrollmentId is required to create a marksheet")
        enrollment = db.get(EnrollmentModel, payload.academic_year_enrollment_id)
        if enrollment is None:
            raise NotFoundError("Enrollment not found")
        marksheet = MarksheetModel(
            academic_year_enrollment_id=enrollment.id,
            academic_year_id=enrollment.academic_year_id,
            school_id=enrollment.school_id,
            subject_id=payload.subject_id,
            remarks=payload.remarks,
            status="Draft",
            created_by=user,
            modified_by=user,
        )
        db.add(marksheet)

    # 과목 기준 upsert
    schemes = load_schemes(db)
    existing = {m.subject_id: m for m in marksheet.marks}
    for entry in payload.marks:
        mark = existing.get(entry.subject_id)
        if mark is None:
            mark = MarkModel(subject_id=entry.subject_id)
            marksheet.marks.append(mark)
            existing[entry.subject_id] = mark
        _apply_mark(mark, entry, schemes, default_threshold)

    db.commit()
    db.refresh(marksheet)
    logger.info(f"성적 입력: marksheet={marksheet.id}, marks={len(payload.marks)}, by {user}")
    return marksheet


def submit_marksheet(db: Session, marksheet_id: int, user: str = "system") -> MarksheetModel:
    marksheet = get_marksheet(db, marksheet_id)
    if marksheet.status not in EDITABLE_STATUSES:
        raise ConflictError(f"Cannot submit marksheet with status: {marksheet.status}")
    if not marksheet.marks:
        raise ValidationError("Cannot submit marksheet without any marks")

    marksheet.status = "submitted"
    marksheet.modified_by = user
    db.commit()
    db.refresh(marksheet)
    logger.info(f"성적표 제출: marksheet={marksheet_id}, by {user}")
    return marksheet


def approve_marksheet(db: Session, marksheet_id: int, reviewer: str = "system") -> MarksheetModel:
    marksheet = get_marksheet(db, marksheet_id)
    if marksheet.status != "submitted":
        raise ConflictError(
            f"Cannot approve marksheet with status: {marksheet.status}. Only submitted marksheets can be approved."
        )

    marksheet.status = "approved"
    marksheet.modified_by = reviewer
    db.commit()
    db.refresh(marksheet)
    logger.info(f"성적표 승인: marksheet={marksheet_id}, by {reviewer}")
    return marksheet


def reject_marksheet(db: Session, marksheet_id: int, reason: str, reviewer: str = "system") -> MarksheetModel:
    marksheet = get_marksheet(db, marksheet_id)
    if marksheet.status != "submitted":
        raise ConflictError(
            f"Cannot reject marksheet with status: {marksheet.status}. Only submitted marksheets can be rejected."
        )
    if not reason or not reason.strip():
        raise ValidationError("Rejection reason is required")

    marksheet.status = "rejected"
    marksheet.remarks = reason.strip()
    marksheet.modified_by = reviewer
    db.commit()
    db.refresh(marksheet)
    logger.info(f"성적표 반려: marksheet={marksheet_id}, by {reviewer}")
    return marksheet


def delete_marksheet(db: Session, marksheet_id: int) -> None:
    marksheet = get_marksheet(db, marksheet_id)
    if marksheet.status not in EDITABLE_STATUSES:
        raise ConflictError(f"Cannot delete marksheet with status: {marksheet.status}")
    # marks 는 cascade 로 함께 삭제
    db.delete(marksheet)
    db.commit()
    logger.info(f"성적표 삭제: marksheet={marksheet_id}")
