from datetime import date

import pytest

from models.attendance import Attendance as AttendanceModel
from models.marksheets import Mark as MarkModel
from models.report_cards import FINAL_GRADES, FINALIZED_STATUSES, ReportCard as ReportCardModel, final_grade_for
from schemas.analytics import AnalyticsFilters
from scripts.seed_test_data import seed_test_data
from services import analytics_service

TODAY = date(2025, 6, 13)  # 금요일


def test_seed_creates_consistent_school(db):
    counts = seed_test_data(db, student_count=8, attendance_days=7, today=TODAY)

    assert counts["students"] == 8
    assert counts["marks"] == 8 * counts["subjects"]
    assert db.query(MarkModel).filter(MarkModel.grade.is_(None)).count() == 0
    assert db.query(AttendanceModel).count() == counts["attendance"]
    # 7일 중 평일 5일
    assert {row.date.weekday() for row in db.query(AttendanceModel).all()} <= {0, 1, 2, 3, 4}

    cards = db.query(ReportCardModel).all()
    assert len(cards) == counts["report_cards"]
    assert all(card.final_grade in FINAL_GRADES for card in cards)
    assert all(card.final_grade == final_grade_for(card.percentage) for card in cards)


def test_seed_grades_stay_on_report_card_scale(db):
    seed_test_data(db, student_count=40, attendance_days=1, today=TODAY, seed=3)
    grades = {grade for (grade,) in db.query(ReportCardModel.final_grade).all()}
    assert None not in grades
    assert grades <= set(FINAL_GRADES)


@pytest.mark.parametrize(
    "percentage, grade",
    [(100, "A+"), (90, "A+"), (89.8, "A"), (79.8, "B+"), (69.99, "B"), (60, "B"), (50, "C"), (49.8, "D"), (40, "D"), (39.9, "F"), (0, "F")],
)
def test_final_grade_for(percentage, grade):
    assert final_grade_for(percentage) == grade


def test_seed_is_deterministic(db):
    seed_test_data(db, school_id=1, today=TODAY, seed=7)
    first = [(r.percentage, r.status) for r in db.query(ReportCardModel).order_by(ReportCardModel.id)]

    seed_test_data(db, school_id=2, academic_year_id=1, today=TODAY, seed=7)
    second = [
        (r.percentage, r.status)
        for r in db.query(ReportCardModel).filter(ReportCardModel.school_id == 2).order_by(ReportCardModel.id)
    ]
    assert first == second


def test_seeded_data_feeds_dashboard(db):
    seed_test_data(db, today=TODAY)
    finalized = db.query(ReportCardModel).filter(ReportCardModel.status.in_(FINALIZED_STATUSES)).count()

    result = analytics_service.get_school_dashboard_analytics(db, AnalyticsFilters(school_id=1))
    assert result.overview.total_report_cards == finalized
    assert sum(g.count for g in result.grade_distribution) == finalized
    assert result.overview.total_sponsors == 3
