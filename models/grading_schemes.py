from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from database.db import Base

class GradingScheme(Base):
    __tablename__ = "grading_schemes"  # 등급 구간 (구간당 1건, 구간끼리 겹치면 안 됨)

    id = Column(Integer, primary_key=True, index=True)
    grade_name = Column(String(50), nullable=False, index=True)   # 등급 이름 (예: Grade A+)
    min_value = Column(Integer, nullable=False)                   # 최소값 (포함)
    max_value = Column(Integer, nullable=False)                   # 최대값 (포함)
    passing_marks = Column(Integer)                               # 합격 기준점 (없으면 기본값 40)
    created_by = Column(String(100), default="system")
    modified_by = Column(String(100), default="system")
    created_at = Column(DateTime, default=datetime.now)
    modified_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
