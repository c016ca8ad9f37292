"""
테스트 공통 fixture

- 인메모리 SQLite(StaticPool) 엔진을 테스트마다 새로 만든다.
- create_app(settings, engine)으로 앱을 만들어 TestClient로 호출한다.
"""

from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from config.settings import Settings
from database.db import init_db, make_session_factory
from main import create_app
from models.attendance import Attendance as AttendanceModel
from models.enrollments import AcademicYearEnrollment as EnrollmentModel
from models.grading_schemes import GradingScheme as GradingSchemeModel
from models.marksheets import Mark as MarkModel, Marksheet as MarksheetModel
from models.report_cards import ReportCard as ReportCardModel
from models.sponsors import Sponsor as SponsorModel
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
def settings():
    return Settings(ENV="dev", ADMIN_API_TOKEN=ADMIN_TOKEN, DB_URL_OVERRIDE="sqlite://", LOG_LEVEL="WARNING")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = make_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(settings, engine):
    app = create_app(settings=settings, engine=engine)
    return TestClient(app)


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


# ==========================================================
# 테스트 데이터 생성 헬퍼
# ==========================================================

class Factory:
    def __init__(self, db):
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def scheme(self, grade_name, min_value, max_value, passing_marks=40):
        return self._save(
            GradingSchemeModel(
                grade_name=grade_name, min_value=min_value, max_value=max_value, passing_marks=passing_marks
            )
        )

    def student(self, name=None, school_id=1, is_active=True):
        n = self._next()
        return self._save(
            StudentModel(
                student_name=name or f"Student {n}",
                enrollment_number=f"EN-{n:04d}",
                school_id=school_id,
                is_active=is_active,
            )
        )

    def subject(self, name, school_id=1):
        return self._save(SubjectModel(name=name, school_id=school_id))

    def sponsor(self, school_id=1):
        n = self._next()
        return self._save(SponsorModel(name=f"Sponsor {n}", email=f"sponsor{n}@example.org", school_id=school_id))

    def enrollment(self, student, academic_year_id=1):
        return self._save(
            EnrollmentModel(
                student_id=student.id,
                academic_year_id=academic_year_id,
                school_id=student.school_id,
                grade="Grade 5",
                section="A",
            )
        )

    def marksheet(self, enrollment, marks, status="approved"):
        """marks: [(subject, obtained, max), ...]"""
        sheet = MarksheetModel(
            academic_year_enrollment_id=enrollment.id,
            academic_year_id=enrollment.academic_year_id,
            school_id=enrollment.school_id,
            status=status,
        )
        for subject, obtained, max_marks in marks:
            sheet.marks.append(
                MarkModel(
                    subject_id=subject.id,
                    marks_obtained=obtained,
                    max_marks=max_marks,
                    percentage=round(obtained / max_marks * 100, 2),
                )
            )
        return self._save(sheet)

    def report_card(self, student, percentage, final_grade, status="Signed",
                    created_at=None, academic_year_id=1):
        return self._save(
            ReportCardModel(
                student_id=student.id,
                academic_year_id=academic_year_id,
                school_id=student.school_id,
                total_marks_obtained=percentage * 5,
                total_max_marks=500,
                percentage=percentage,
                final_grade=final_grade,
                status=status,
                created_at=created_at or datetime(2025, 6, 1, 9, 0),
            )
        )

    def attendance(self, student, day: date, status="present"):
        return self._save(AttendanceModel(student_id=student.id, date=day, status=status))


@pytest.fixture
def factory(db):
    return Factory(db)
