from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String, UniqueConstraint
from database.db import Base

# 등급 표시 순서 (대시보드 분포 정렬 기준)
FINAL_GRADES = ("A+", "A", "B+", "B", "C", "D", "F")
REPORT_CARD_STATUSES = ("Draft", "Generated", "Signed", "Distributed")
# 분석 대상이 되는 확정 상태
FINALIZED_STATUSES = ("Signed", "Distributed")
# 최종 등급 하한 (백분율 이상이면 해당 등급)
FINAL_GRADE_CUTOFFS = ((90, "A+"), (80, "A"), (70, "B+"), (60, "B"), (50, "C"), (40, "D"))


def final_grade_for(percentage: float) -> str:
    """성적통지표 백분율 → 최종 등급 (A+ ~ F)"""
    for cutoff, grade in FINAL_GRADE_CUTOFFS:
        if percentage >= cutoff:
            return grade
    return "F"


class ReportCard(Base):
    __tablename__ = "report_cards"  # 학년도 성적통지표
    __table_args__ = (UniqueConstraint("student_id", "academic_year_id"),)

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, nullable=False, index=True)          # 학생 ID
    academic_year_id = Column(Integer, nullable=False, index=True)    # 학년도 ID
    school_id = Column(Integer, nullable=False, index=True)           # 학교 ID
    total_marks_obtained = Column(Float, default=0.0)                 # 취득 점수 합계
    total_max_marks = Column(Float, default=0.0)                      # 만점 합계
    percentage = Column(Float, default=0.0)                           # 백분율 (0~100)
    final_grade = Column(String(10))                                  # 최종 등급 (A+ ~ F)
    status = Column(String(50), nullable=False, default="Draft")      # Draft / Generated / Signed / Distributed
    created_at = Column(DateTime, nullable=False, default=datetime.now)
