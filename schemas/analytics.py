"""
schemas/analytics.py

분석 API 입출력 스키마.
- AnalyticsFilters: 모든 필드가 Optional. None이면 해당 조건을 쿼리에 넣지 않는다.
- 응답 모델은 CamelModel을 상속 → JSON 필드명은 camelCase (대시보드 프론트 계약)
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from schemas.common import CamelModel


# =========================================================
# 필터
# =========================================================

class AnalyticsFilters(BaseModel):
    student_id: Optional[int] = None
    school_id: Optional[int] = None
    academic_year_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_range(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("startDate must be on or before endDate")
        return self


# =========================================================
# 학생 성과 분석
# =========================================================

class PerformanceOverview(CamelModel):
    total_students: int
    total_subjects: int
    average_percentage: float
    total_marks_obtained: float
    total_max_marks: float


class AttendanceSummary(CamelModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    attendance_rate: float = 0


class GradeCount(CamelModel):
    grade: str
    count: int


class TopPerformer(CamelModel):
    student_id: Optional[int] = None
    student_name: str
    student_number: Optional[str] = None
    percentage: float
    grade: Optional[str] = None
    total_marks: float
    max_marks: float


class SubjectPerformance(CamelModel):
    subject_name: str
    average_marks: float
    average_max_marks: float
    average_percentage: float
    total_students: int


class StudentPerformanceAnalytics(CamelModel):
    overview: PerformanceOverview
    attendance: AttendanceSummary
    grade_distribution: List[GradeCount]
    top_performers: List[TopPerformer]
    subject_performance: List[SubjectPerformance]


# =========================================================
# 학교 대시보드
# =========================================================

class DashboardOverview(CamelModel):
    total_students: int
    active_students: int
    total_sponsors: int
    average_performance: float
    total_report_cards: int


class AttendanceToday(CamelModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0


class GradeShare(CamelModel):
    grade: str
    count: int
    percentage: float


class PerformanceTrendPoint(CamelModel):
    month: str                  # "YYYY-MM"
    average_percentage: float
    report_count: int


class AttendanceTrendPoint(CamelModel):
    date: date
    total: int
    present: int
    attendance_rate: float


class TopSubject(CamelModel):
    subject_name: str
    enrollment_count: int


class SchoolDashboardAnalytics(CamelModel):
    overview: DashboardOverview
    attendance_today: AttendanceToday
    grade_distribution: List[GradeShare]
    performance_trend: List[PerformanceTrendPoint]
    attendance_trend: List[AttendanceTrendPoint]
    top_subjects: List[TopSubject]
