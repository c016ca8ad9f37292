"""
services/analytics_service.py

학생 성과 분석 / 학교 대시보드 집계.

- 모든 집계는 읽기 전용 SQL 집계 쿼리(GROUP BY/AVG/COUNT)로 계산한다.
- 최근 N일/N개월 같은 기준 구간은 호출자가 넘긴 now 기준으로 계산한다. (테스트에서 고정 가능)
- 요약 하나를 만들 때 여러 쿼리를 순서대로 실행하며 스냅샷 격리는 하지 않는다.
  쿼리 사이에 쓰기가 끼어들면 overview.totalReportCards 와 gradeDistribution 합계가 어긋날 수 있다.
- 비율 값은 소수 둘째 자리 반올림, 분모가 0이면 0.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import case, func, literal_column
from sqlalchemy.orm import Query, Session

from models.attendance import ATTENDANCE_STATUSES, Attendance as AttendanceModel
from models.enrollments import AcademicYearEnrollment as EnrollmentModel
from models.marksheets import Mark as MarkModel, Marksheet as MarksheetModel
from models.report_cards import FINAL_GRADES, FINALIZED_STATUSES, ReportCard as ReportCardModel
from models.sponsors import Sponsor as SponsorModel
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel
from schemas.analytics import (
    AnalyticsFilters,
    AttendanceSummary,
    AttendanceToday,
    AttendanceTrendPoint,
    DashboardOverview,
    GradeCount,
    GradeShare,
    PerformanceOverview,
    PerformanceTrendPoint,
    SchoolDashboardAnalytics,
    StudentPerformanceAnalytics,
    SubjectPerformance,
    TopPerformer,
    TopSubject,
)
from utils.math_utils import round2, safe_percentage

logger = logging.getLogger(__name__)

APPROVED_MARKSHEET_STATUS = "approved"
UNKNOWN_GRADE = "N/A"


@dataclass(frozen=True)
class AnalyticsLimits:
    top_performers: int = 10
    top_subjects: int = 10
    active_window_days: int = 30
    attendance_trend_days: int = 30
    performance_trend_months: int = 6

    @classmethod
    def from_settings(cls, settings) -> "AnalyticsLimits":
        return cls(
            top_performers=settings.TOP_PERFORMERS_LIMIT,
            top_subjects=settings.TOP_SUBJECTS_LIMIT,
            active_window_days=settings.ACTIVE_WINDOW_DAYS,
            attendance_trend_days=settings.ATTENDANCE_TREND_DAYS,
            performance_trend_months=settings.PERFORMANCE_TREND_MONTHS,
        )


# ==========================================================
# [공통] 날짜 계산
# ==========================================================

def months_ago(moment: datetime, months: int) -> datetime:
    """같은 날짜 기준 N개월 전. 말일이 없는 달이면 그 달의 마지막 날로 맞춘다."""
    total = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    next_month_first = date(year + (month // 12), month % 12 + 1, 1)
    last_day = (next_month_first - timedelta(days=1)).day
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))


def _day_start(d: date) -> datetime:
    return datetime.combine(d, time.min)


def _window_start(candidate: date, filters: AnalyticsFilters) -> date:
    # startDate가 있으면 최근 N일 구간의 하한으로도 작동
    if filters.start_date and filters.start_date > candidate:
        return filters.start_date
    return candidate


def month_bucket(db: Session, column):
    """DB 종류별 'YYYY-MM' 월 단위 버킷 표현식"""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return func.to_char(func.date_trunc(literal_column("'month'"), column), literal_column("'YYYY-MM'"))
    if dialect in ("mysql", "mariadb"):
        return func.date_format(column, literal_column("'%Y-%m'"))
    return func.strftime(literal_column("'%Y-%m'"), column)


# ==========================================================
# [공통] 필터가 적용된 기본 쿼리
# ==========================================================

def _student_query(db: Session, filters: AnalyticsFilters, *columns) -> Query:
    query = db.query(*columns).select_from(StudentModel)
    if filters.student_id is not None:
        query = query.filter(StudentModel.id == filters.student_id)
    if filters.school_id is not None:
        query = query.filter(StudentModel.school_id == filters.school_id)
    return query


def _attendance_query(
    db: Session,
    filters: AnalyticsFilters,
    *columns,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> Query:
    query = db.query(*columns).select_from(AttendanceModel)
    if filters.school_id is not None:
        query = (
            query.join(StudentModel, StudentModel.id == AttendanceModel.student_id)
            .filter(StudentModel.school_id == filters.school_id)
        )
    if filters.student_id is not None:
        query = query.filter(AttendanceModel.student_id == filters.student_id)
    if date_from is not None:
        query = query.filter(AttendanceModel.date >= date_from)
    if date_to is not None:
        query = query.filter(AttendanceModel.date <= date_to)
    return query


def _marks_query(db: Session, filters: AnalyticsFilters, *columns, approved_only: bool = True) -> Query:
    query = (
        db.query(*columns)
        .select_from(MarkModel)
        .join(MarksheetModel, MarksheetModel.id == MarkModel.marksheet_id)
    )
    if approved_only:
        query = query.filter(MarksheetModel.status == APPROVED_MARKSHEET_STATUS)
    if filters.academic_year_id is not None:
        query = query.filter(MarksheetModel.academic_year_id == filters.academic_year_id)
    if filters.school_id is not None:
        query = query.filter(MarksheetModel.school_id == filters.school_id)
    if filters.student_id is not None:
        query = (
            query.join(EnrollmentModel, EnrollmentModel.id == MarksheetModel.academic_year_enrollment_id)
            .filter(EnrollmentModel.student_id == filters.student_id)
        )
    return query


def _report_card_query(
    db: Session,
    filters: AnalyticsFilters,
    *columns,
    apply_dates: bool = True,
) -> Query:
    query = (
        db.query(*columns)
        .select_from(ReportCardModel)
        .filter(ReportCardModel.status.in_(FINALIZED_STATUSES))
    )
    if filters.student_id is not None:
        query = query.filter(ReportCardModel.student_id == filters.student_id)
    if filters.academic_year_id is not None:
        query = query.filter(ReportCardModel.academic_year_id == filters.academic_year_id)
    if filters.school_id is not None:
        query = query.filter(ReportCardModel.school_id == filters.school_id)
    if apply_dates and filters.start_date is not None:
        query = query.filter(ReportCardModel.created_at >= _day_start(filters.start_date))
    if apply_dates and filters.end_date is not None:
        query = query.filter(ReportCardModel.created_at < _day_start(filters.end_date + timedelta(days=1)))
    return query


# ==========================================================
# [공통] 결과 가공
# ==========================================================

def _status_counts(rows: List[Tuple[str, int]]) -> Dict[str, int]:
    counts = {status: 0 for status in ATTENDANCE_STATUSES}
    for status, count in rows:
        if status in counts:
            counts[status] += int(count)
    counts["total"] = sum(int(count) for _, count in rows)
    return counts


def _grade_order(grade: Optional[str]) -> Tuple[int, str]:
    # A+, A, B+, B, C, D, F 순서. 그 외 등급은 뒤로, 등급 없음(None)은 맨 뒤
    if grade in FINAL_GRADES:
        return FINAL_GRADES.index(grade), grade
    if grade is None:
        return len(FINAL_GRADES) + 1, ""
    return len(FINAL_GRADES), grade


def _grade_rows(db: Session, filters: AnalyticsFilters, apply_dates: bool) -> List[Tuple[Optional[str], int]]:
    rows = (
        _report_card_query(
            db, filters,
            ReportCardModel.final_grade, func.count(ReportCardModel.id),
            apply_dates=apply_dates,
        )
        .group_by(ReportCardModel.final_grade)
        .all()
    )
    return sorted(((grade, int(count)) for grade, count in rows), key=lambda r: _grade_order(r[0]))


# ==========================================================
# [1] 학생 성과 분석
# ==========================================================

def get_student_performance_analytics(
    db: Session,
    filters: AnalyticsFilters,
    limits: Optional[AnalyticsLimits] = None,
) -> StudentPerformanceAnalytics:
    limits = limits or AnalyticsLimits()
    logger.info(f"학생 성과 분석 시작: {filters.model_dump(exclude_none=True)}")

    try:
        # 1) 개요: 학생 수 + 승인된 성적 합계
        total_students = _student_query(db, filters, func.count(StudentModel.id)).scalar() or 0

        marks_obtained, max_marks, subject_count = _marks_query(
            db, filters,
            func.coalesce(func.sum(MarkModel.marks_obtained), 0),
            func.coalesce(func.sum(MarkModel.max_marks), 0),
            func.count(func.distinct(MarkModel.subject_id)),
        ).one()

        overview = PerformanceOverview(
            total_students=total_students,
            total_subjects=subject_count or 0,
            average_percentage=safe_percentage(marks_obtained, max_marks),
            total_marks_obtained=round2(marks_obtained),
            total_max_marks=round2(max_marks),
        )

        # 2) 출결 현황
        attendance_rows = (
            _attendance_query(
                db, filters,
                AttendanceModel.status, func.count(AttendanceModel.id),
                date_from=filters.start_date, date_to=filters.end_date,
            )
            .group_by(AttendanceModel.status)
            .all()
        )
        counts = _status_counts(attendance_rows)
        attendance = AttendanceSummary(
            **counts,
            attendance_rate=safe_percentage(counts["present"], counts["total"]),
        )

        # 3) 등급 분포
        grade_distribution = [
            GradeCount(grade=grade or UNKNOWN_GRADE, count=count)
            for grade, count in _grade_rows(db, filters, apply_dates=True)
        ]

        # 4) 상위 학생 (백분율 내림차순)
        top_rows = (
            _report_card_query(db, filters, ReportCardModel, StudentModel)
            .outerjoin(StudentModel, StudentModel.id == ReportCardModel.student_id)
            .order_by(ReportCardModel.percentage.desc(), ReportCardModel.id.asc())
            .limit(limits.top_performers)
            .all()
        )
        top_performers = [
            TopPerformer(
                student_id=student.id if student else report.student_id,
                student_name=student.student_name if student and student.student_name else "Unknown",
                student_number=student.enrollment_number if student else None,
                percentage=round2(report.percentage),
                grade=report.final_grade,
                total_marks=round2(report.total_marks_obtained),
                max_marks=round2(report.total_max_marks),
            )
            for report, student in top_rows
        ]

        # 5) 과목별 평균
        subject_rows = (
            _marks_query(
                db, filters,
                SubjectModel.name,
                func.avg(MarkModel.marks_obtained),
                func.avg(MarkModel.max_marks),
                func.count(MarkModel.id),
            )
            .join(SubjectModel, SubjectModel.id == MarkModel.subject_id)
            .group_by(SubjectModel.name)
            .order_by(SubjectModel.name)
            .all()
        )
        subject_performance = [
            SubjectPerformance(
                subject_name=name,
                average_marks=round2(avg_marks),
                average_max_marks=round2(avg_max),
                average_percentage=safe_percentage(avg_marks, avg_max),
                total_students=int(count),
            )
            for name, avg_marks, avg_max, count in subject_rows
        ]
    except Exception:
        logger.exception("학생 성과 분석 실패")
        raise

    logger.info(
        f"학생 성과 분석 완료: students={overview.total_students}, "
        f"attendance={attendance.total}, reportCards={sum(g.count for g in grade_distribution)}"
    )
    return StudentPerformanceAnalytics(
        overview=overview,
        attendance=attendance,
        grade_distribution=grade_distribution,
        top_performers=top_performers,
        subject_performance=subject_performance,
    )


# ==========================================================
# [2] 학교 대시보드
# ==========================================================

def get_school_dashboard_analytics(
    db: Session,
    filters: AnalyticsFilters,
    now: Optional[datetime] = None,
    limits: Optional[AnalyticsLimits] = None,
) -> SchoolDashboardAnalytics:
    """
    학교 단위 대시보드.
    student_id 는 사용하지 않는다. now 가 없으면 호출 시점의 시스템 시각.
    """
    now = now or datetime.now()
    limits = limits or AnalyticsLimits()
    today = now.date()
    scope = AnalyticsFilters(school_id=filters.school_id, academic_year_id=filters.academic_year_id)
    logger.info(f"학교 대시보드 집계 시작: {filters.model_dump(exclude_none=True)}, now={now.isoformat()}")

    try:
        # 1) 개요
        total_students = _student_query(db, scope, func.count(StudentModel.id)).scalar() or 0

        active_from = _window_start(today - timedelta(days=limits.active_window_days), filters)
        active_students = (
            _attendance_query(
                db, scope,
                func.count(func.distinct(AttendanceModel.student_id)),
                date_from=active_from, date_to=today,
            ).scalar()
            or 0
        )

        sponsor_query = db.query(func.count(SponsorModel.id))
        if scope.school_id is not None:
            sponsor_query = sponsor_query.filter(SponsorModel.school_id == scope.school_id)
        total_sponsors = sponsor_query.scalar() or 0

        avg_percentage, total_reports = _report_card_query(
            db, scope,
            func.avg(ReportCardModel.percentage), func.count(ReportCardModel.id),
            apply_dates=False,
        ).one()
        total_reports = int(total_reports or 0)

        overview = DashboardOverview(
            total_students=total_students,
            active_students=int(active_students),
            total_sponsors=total_sponsors,
            average_performance=round2(avg_percentage),
            total_report_cards=total_reports,
        )

        # 2) 오늘 출결
        today_rows = (
            _attendance_query(
                db, scope,
                AttendanceModel.status, func.count(AttendanceModel.id),
                date_from=today, date_to=today,
            )
            .group_by(AttendanceModel.status)
            .all()
        )
        attendance_today = AttendanceToday(**_status_counts(today_rows))

        # 3) 등급 분포 (A+ → F 고정 순서, 전체 대비 비율)
        grade_distribution = [
            GradeShare(
                grade=grade or UNKNOWN_GRADE,
                count=count,
                percentage=safe_percentage(count, total_reports),
            )
            for grade, count in _grade_rows(db, scope, apply_dates=False)
        ]

        # 4) 최근 N개월 월별 성적 추이
        trend_from = months_ago(now, limits.performance_trend_months)
        if filters.start_date and _day_start(filters.start_date) > trend_from:
            trend_from = _day_start(filters.start_date)
        bucket = month_bucket(db, ReportCardModel.created_at).label("month")
        trend_rows = (
            _report_card_query(
                db, scope,
                bucket, func.avg(ReportCardModel.percentage), func.count(ReportCardModel.id),
                apply_dates=False,
            )
            .filter(ReportCardModel.created_at >= trend_from)
            .filter(ReportCardModel.created_at <= now)
            .group_by(bucket)
            .order_by(bucket)
            .all()
        )
        performance_trend = [
            PerformanceTrendPoint(
                month=str(month),
                average_percentage=round2(avg),
                report_count=int(count),
            )
            for month, avg, count in trend_rows
        ]

        # 5) 최근 N일 일별 출석률 추이
        present_sum = func.sum(case((AttendanceModel.status == "present", 1), else_=0))
        trend_start = _window_start(today - timedelta(days=limits.attendance_trend_days), filters)
        daily_rows = (
            _attendance_query(
                db, scope,
                AttendanceModel.date, func.count(AttendanceModel.id), present_sum,
                date_from=trend_start, date_to=today,
            )
            .group_by(AttendanceModel.date)
            .order_by(AttendanceModel.date)
            .all()
        )
        attendance_trend = [
            AttendanceTrendPoint(
                date=day,
                total=int(total),
                present=int(present or 0),
                attendance_rate=safe_percentage(present, total),
            )
            for day, total, present in daily_rows
        ]

        # 6) 인기 과목 (점수 기록 수 기준, 성적표 상태와 무관)
        enrollment_count = func.count(func.distinct(MarkModel.id))
        subject_rows = (
            _marks_query(db, scope, SubjectModel.name, enrollment_count, approved_only=False)
            .join(SubjectModel, SubjectModel.id == MarkModel.subject_id)
            .group_by(SubjectModel.name)
            .order_by(enrollment_count.desc(), SubjectModel.name)
            .limit(limits.top_subjects)
            .all()
        )
        top_subjects = [
            TopSubject(subject_name=name, enrollment_count=int(count))
            for name, count in subject_rows
        ]
    except Exception:
        logger.exception("학교 대시보드 집계 실패")
        raise

    logger.info(
        f"학교 대시보드 집계 완료: students={overview.total_students}, "
        f"reportCards={overview.total_report_cards}, todayAttendance={attendance_today.total}"
    )
    return SchoolDashboardAnalytics(
        overview=overview,
        attendance_today=attendance_today,
        grade_distribution=grade_distribution,
        performance_trend=performance_trend,
        attendance_trend=attendance_trend,
        top_subjects=top_subjects,
    )
