from datetime import date, datetime, time
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from config.settings import Settings
from database.db import get_db
from dependencies.security import require_admin_token
from dependencies.settings import get_app_settings
from schemas.analytics import AnalyticsFilters
from services import analytics_service
from utils.exceptions import ValidationError

router = APIRouter(prefix="/analytics", tags=["분석 대시보드"])


# ==========================================================
# [공통] 쿼리 파라미터 → AnalyticsFilters
# 파라미터가 없으면 None 그대로 두고, 서비스에서 조건을 생략한다
# ==========================================================
def get_filters(
    student_id: Optional[int] = Query(None, alias="studentId"),
    school_id: Optional[int] = Query(None, alias="schoolId"),
    academic_year_id: Optional[int] = Query(None, alias="academicYearId"),
    start_date: Optional[date] = Query(None, alias="startDate", description="예: 2025-03-01"),
    end_date: Optional[date] = Query(None, alias="endDate", description="예: 2025-07-31"),
) -> AnalyticsFilters:
    try:
        return AnalyticsFilters(
            student_id=student_id,
            school_id=school_id,
            academic_year_id=academic_year_id,
            start_date=start_date,
            end_date=end_date,
        )
    except PydanticValidationError:
        raise ValidationError("startDate must be on or before endDate")


def reference_time(filters: AnalyticsFilters) -> Optional[datetime]:
    """endDate가 있으면 그 날의 마지막 시각을 '현재'로 사용 (재현 가능한 대시보드)"""
    if filters.end_date is None:
        return None
    return datetime.combine(filters.end_date, time.max)


# ✅ [STUDENT] 학생 성과 분석
@router.get("/student-performance")
def get_student_performance(
    filters: AnalyticsFilters = Depends(get_filters),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    result = analytics_service.get_student_performance_analytics(
        db, filters, limits=analytics_service.AnalyticsLimits.from_settings(settings)
    )
    return {
        "success": True,
        "message": "Student performance analytics retrieved successfully",
        "data": result.model_dump(by_alias=True, mode="json"),
    }


# ✅ [SCHOOL] 학교 대시보드 (관리자 전용)
@router.get("/school-dashboard", dependencies=[Depends(require_admin_token)])
def get_school_dashboard(
    filters: AnalyticsFilters = Depends(get_filters),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    result = analytics_service.get_school_dashboard_analytics(
        db,
        filters,
        now=reference_time(filters),
        limits=analytics_service.AnalyticsLimits.from_settings(settings),
    )
    return {
        "success": True,
        "message": "School dashboard analytics retrieved successfully",
        "data": result.model_dump(by_alias=True, mode="json"),
    }
