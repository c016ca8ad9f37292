"""
scripts/seed_test_data.py

분석 대시보드 확인용 가상 학교 데이터 생성.
실행: python -m scripts.seed_test_data  (DB 설정은 .env 기준)

- 같은 seed 값이면 항상 같은 데이터가 생성된다.
- 등급표가 비어 있으면 기본 등급표부터 만든다.
"""

import logging
import random
from datetime import date, datetime, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import Session

from config.settings import get_settings
from database.db import create_db_engine, init_db, make_session_factory
from models.attendance import Attendance as AttendanceModel
from models.enrollments import AcademicYearEnrollment as EnrollmentModel
from models.grading_schemes import GradingScheme as GradingSchemeModel
from models.marksheets import Mark as MarkModel, Marksheet as MarksheetModel
from models.report_cards import ReportCard as ReportCardModel, final_grade_for
from models.sponsors import Sponsor as SponsorModel
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel
from services import grading_scheme_service
from utils.math_utils import safe_percentage

logger = logging.getLogger(__name__)

SUBJECT_NAMES = ["English", "Mathematics", "Science", "Social Studies", "Art"]
STUDENT_NAMES = [
    "Amina", "Brian", "Chloe", "Daniel", "Esther", "Felix", "Grace", "Hassan",
    "Irene", "James", "Kezia", "Liam", "Mercy", "Noah", "Olivia", "Peter",
]
MAX_MARKS = 100

# 출결 상태 비율 (present 가 대부분)
ATTENDANCE_WEIGHTS = {"present": 80, "absent": 10, "late": 7, "excused": 3}
# 성적통지표 상태 비율 (Signed/Distributed 만 분석에 포함)
REPORT_CARD_WEIGHTS = {"Distributed": 5, "Signed": 3, "Generated": 1, "Draft": 1}


def _weighted(rng: random.Random, weights: Dict[str, int]) -> str:
    return rng.choices(list(weights), weights=list(weights.values()), k=1)[0]


def seed_test_data(
    db: Session,
    school_id: int = 1,
    academic_year_id: int = 1,
    student_count: int = 16,
    attendance_days: int = 30,
    today: Optional[date] = None,
    seed: int = 42,
) -> Dict[str, int]:
    """
    가상 학교 1곳 분량의 데이터를 만들고 테이블별 생성 건수를 돌려준다.
    과목 점수 등급은 실제 성적 입력과 같은 등급표를, 성적통지표 최종 등급은 A+ ~ F 척도를 사용한다.
    """
    rng = random.Random(seed)
    today = today or date.today()

    # 1) 등급표
    if db.query(GradingSchemeModel).count() == 0:
        grading_scheme_service.seed_default_schemes(db, user="seed")
    schemes = grading_scheme_service.load_schemes(db)

    # 2) 과목 / 학생 / 재적
    subjects = [SubjectModel(name=name, school_id=school_id) for name in SUBJECT_NAMES]
    db.add_all(subjects)

    students = []
    for i in range(student_count):
        name = STUDENT_NAMES[i % len(STUDENT_NAMES)]
        students.append(
            StudentModel(
                student_name=f"{name} {i + 1:02d}",
                enrollment_number=f"S{school_id:02d}-{academic_year_id:02d}-{i + 1:04d}",
                school_id=school_id,
                is_active=i % 10 != 9,
            )
        )
    db.add_all(students)
    db.flush()

    enrollments = [
        EnrollmentModel(
            student_id=student.id,
            academic_year_id=academic_year_id,
            school_id=school_id,
            grade=f"Grade {5 + i % 3}",
            section="A" if i % 2 == 0 else "B",
        )
        for i, student in enumerate(students)
    ]
    db.add_all(enrollments)
    db.flush()

    # 3) 성적표(승인) + 성적통지표
    marks_created = 0
    report_cards = []
    for i, (student, enrollment) in enumerate(zip(students, enrollments)):
        ability = rng.randint(35, 95)
        marksheet = MarksheetModel(
            academic_year_enrollment_id=enrollment.id,
            academic_year_id=academic_year_id,
            school_id=school_id,
            status="approved",
            created_by="seed",
            modified_by="seed",
        )
        total_obtained = 0
        for subject in subjects:
            obtained = max(0, min(MAX_MARKS, ability + rng.randint(-10, 10)))
            percentage = safe_percentage(obtained, MAX_MARKS)
            result = grading_scheme_service.classify_or_none(percentage, schemes)
            marksheet.marks.append(
                MarkModel(
                    subject_id=subject.id,
                    marks_obtained=obtained,
                    max_marks=MAX_MARKS,
                    percentage=percentage,
                    grade=result.grade if result else None,
                )
            )
            total_obtained += obtained
            marks_created += 1
        db.add(marksheet)

        total_max = MAX_MARKS * len(subjects)
        overall = safe_percentage(total_obtained, total_max)
        report_cards.append(
            ReportCardModel(
                student_id=student.id,
                academic_year_id=academic_year_id,
                school_id=school_id,
                total_marks_obtained=total_obtained,
                total_max_marks=total_max,
                percentage=overall,
                final_grade=final_grade_for(overall),
                status=_weighted(rng, REPORT_CARD_WEIGHTS),
                # 최근 6개월에 고르게 분포
                created_at=datetime.combine(today, datetime.min.time()) - timedelta(days=(i * 11) % 180),
            )
        )
    db.add_all(report_cards)

    # 4) 출결 (주말 제외)
    attendance_rows = []
    for offset in range(attendance_days):
        day = today - timedelta(days=offset)
        if day.weekday() >= 5:
            continue
        for student in students:
            if not student.is_active:
                continue
            attendance_rows.append(
                AttendanceModel(student_id=student.id, date=day, status=_weighted(rng, ATTENDANCE_WEIGHTS))
            )
    db.add_all(attendance_rows)

    # 5) 후원자
    sponsors = [
        SponsorModel(name=f"Sponsor {n}", email=f"sponsor{school_id}-{n}@example.org", school_id=school_id)
        for n in range(1, 4)
    ]
    db.add_all(sponsors)

    db.commit()

    counts = {
        "subjects": len(subjects),
        "students": len(students),
        "enrollments": len(enrollments),
        "marks": marks_created,
        "report_cards": len(report_cards),
        "attendance": len(attendance_rows),
        "sponsors": len(sponsors),
    }
    logger.info(f"테스트 데이터 생성 완료: {counts}")
    return counts


def main():
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    engine = create_db_engine(settings)
    init_db(engine)
    db = make_session_factory(engine)()
    try:
        counts = seed_test_data(db)
    finally:
        db.close()
        engine.dispose()
    print(f"✅ 테스트 데이터 생성 완료: {counts}")


if __name__ == "__main__":
    main()
