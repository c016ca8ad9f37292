from sqlalchemy import Boolean, Column, Integer, String
from database.db import Base

class Student(Base):
    __tablename__ = "students"  # 학생 기본 정보 테이블

    id = Column(Integer, primary_key=True, index=True)               # 고유 학생 ID (Primary Key)
    student_name = Column(String(100), nullable=False)              # 학생 이름 (화면 표시용)
    enrollment_number = Column(String(50), unique=True)             # 학번
    school_id = Column(Integer, nullable=False, index=True)         # 소속 학교 ID
    is_active = Column(Boolean, nullable=False, default=True)       # 재학 여부
