from sqlalchemy import Boolean, Column, Integer, String, UniqueConstraint
from database.db import Base

class AcademicYearEnrollment(Base):
    __tablename__ = "academic_year_enrollments"  # 학년도별 재적 정보
    __table_args__ = (UniqueConstraint("student_id", "academic_year_id"),)

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, nullable=False, index=True)        # 학생 ID
    academic_year_id = Column(Integer, nullable=False, index=True)  # 학년도 ID
    school_id = Column(Integer, nullable=False, index=True)         # 학교 ID
    grade = Column(String(20))                                      # 학년 (예: Grade 5)
    section = Column(String(20))                                    # 반
    is_active = Column(Boolean, nullable=False, default=True)
