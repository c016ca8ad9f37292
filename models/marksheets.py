from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from database.db import Base

MARKSHEET_STATUSES = ("Draft", "submitted", "approved", "rejected")
# 교사가 수정/제출/삭제할 수 있는 상태
EDITABLE_STATUSES = ("Draft", "rejected")

class Marksheet(Base):
    __tablename__ = "marksheets"  # 성적 입력표 (재적 1건 기준)

    id = Column(Integer, primary_key=True, index=True)
    academic_year_enrollment_id = Column(Integer, nullable=False, index=True)   # 재적 ID
    academic_year_id = Column(Integer, nullable=False, index=True)              # 학년도 ID
    school_id = Column(Integer, nullable=False, index=True)                     # 학교 ID
    subject_id = Column(Integer)                                                # 단일 과목 성적표일 때의 과목 ID
    status = Column(String(20), nullable=False, default="Draft")                # Draft / submitted / approved / rejected
    remarks = Column(Text)                                                      # 비고 또는 반려 사유
    created_by = Column(String(100), default="system")
    modified_by = Column(String(100), default="system")
    created_at = Column(DateTime, default=datetime.now)
    modified_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    marks = relationship("Mark", back_populates="marksheet", cascade="all, delete-orphan", order_by="Mark.id")


class Mark(Base):
    __tablename__ = "marks"  # 과목별 점수
    __table_args__ = (UniqueConstraint("marksheet_id", "subject_id", name="marks_unique_marksheet_subject"),)

    id = Column(Integer, primary_key=True, index=True)
    marksheet_id = Column(Integer, ForeignKey("marksheets.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_id = Column(Integer, nullable=False, index=True)    # 과목 ID
    marks_obtained = Column(Float, nullable=False)              # 취득 점수
    max_marks = Column(Integer, nullable=False)                 # 만점
    percentage = Column(Float)                                  # 백분율 (입력 시 계산)
    grade = Column(String(5))                                   # 등급 (입력 시 등급표로 판정)
    remarks = Column(Text)

    marksheet = relationship("Marksheet", back_populates="marks")
