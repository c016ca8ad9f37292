from sqlalchemy import Column, Integer, String, Date, Text, UniqueConstraint
from database.db import Base

ATTENDANCE_STATUSES = ("present", "absent", "late", "excused")

class Attendance(Base):
    __tablename__ = "attendance"  # 출결 기록 테이블 (학생/날짜당 1건)
    __table_args__ = (UniqueConstraint("student_id", "date", name="attendance_student_date_unique"),)

    id = Column(Integer, primary_key=True, index=True)         # 출결 고유 ID (Primary Key)
    student_id = Column(Integer, nullable=False, index=True)   # 학생 ID (students 테이블과 연동)
    date = Column(Date, nullable=False, index=True)            # 날짜
    status = Column(String(20), nullable=False, default="present")  # present / absent / late / excused
    remarks = Column(Text)                                     # 비고
